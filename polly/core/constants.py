"""
Application Constants

Centralized location for all application constants, organized by domain.
This makes it easy to maintain and update values across the entire application.
"""

# =============================================================================
# API Configuration
# =============================================================================

class APIConfig:
    """API-level configuration constants"""

    # API Versioning
    API_V1_PREFIX = "/api/v1"
    API_VERSION = "1.0.0"
    API_TITLE = "Polly API"
    API_DESCRIPTION = """
    A polling API: create polls with options, vote once per poll, comment, and view tallied results.

    ## Features
    - User registration, sign-in and sign-out
    - Poll creation, editing (full option replacement) and deletion by the owner
    - One vote per user per poll, enforced by the database
    - Live vote tallies computed from the stored votes
    - Comments on polls
    """

    # CORS Configuration
    ALLOWED_ORIGINS = [
        "http://localhost:3000",  # Next.js / React dev server
        "http://localhost:5173",  # Vite dev server
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]


# =============================================================================
# Authentication & Security
# =============================================================================

class AuthConfig:
    """Authentication and security constants"""

    # JWT Configuration
    ACCESS_TOKEN_EXPIRE_MINUTES = 60
    ALGORITHM = "HS256"
    TOKEN_TYPE = "bearer"
    TOKEN_URL = "/api/v1/auth/token"

    # Password requirements
    MIN_PASSWORD_LENGTH = 6
    MAX_PASSWORD_LENGTH = 128
    BCRYPT_ROUNDS = 12

    # Roles
    ROLE_USER = "user"
    ROLE_ADMIN = "admin"
    ROLES = (ROLE_USER, ROLE_ADMIN)

    DEFAULT_SECRET_KEY = "polly-dev-secret-change-me"


# =============================================================================
# Business Logic Limits
# =============================================================================

class BusinessLimits:
    """Business rules and validation constants"""

    # Poll limits
    MAX_POLL_TITLE_LENGTH = 200
    MAX_POLL_DESCRIPTION_LENGTH = 1000
    MIN_POLL_OPTIONS = 2
    MAX_POLL_OPTIONS = 10
    MAX_POLL_OPTION_LENGTH = 100

    # Comment limits
    MIN_COMMENT_LENGTH = 1
    MAX_COMMENT_LENGTH = 1000

    # User profile limits
    MAX_NAME_LENGTH = 100


# =============================================================================
# Error Messages
# =============================================================================

class ErrorMessages:
    """Standardized error messages"""

    # Authentication errors
    AUTH_REQUIRED = "Authentication required"
    INVALID_CREDENTIALS = "Invalid email or password"
    ACCOUNT_INACTIVE = "This account is inactive"
    INVALID_TOKEN = "Could not validate credentials"

    # Authorization errors
    NOT_AUTHORIZED_UPDATE = "Not authorized to update this poll"
    NOT_AUTHORIZED_DELETE = "Not authorized to delete this poll"
    NOT_AUTHORIZED_COMMENT = "Not authorized to modify this comment"
    ADMIN_REQUIRED = "Only administrators can perform this action"

    # Resource errors
    POLL_NOT_FOUND = "Poll not found"
    USER_NOT_FOUND = "User not found"
    COMMENT_NOT_FOUND = "Comment not found"
    OPTION_GONE = "The selected option no longer exists"

    # Validation errors
    DUPLICATE_EMAIL = "Email already registered"
    OPTION_NOT_IN_POLL = "Option does not belong to this poll"
    DUPLICATE_OPTION = "Poll options must be unique"

    # Business rule violations
    ALREADY_VOTED = "You have already voted on this poll"

    # System errors
    DATABASE_ERROR = "Database operation failed"
    INTERNAL_ERROR = "An unexpected error occurred"
    VALIDATION_ERROR = "Validation failed"


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """Standardized error codes for API responses"""

    # Authentication & Authorization
    AUTH_ERROR = "AUTH_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Business Logic
    DUPLICATE_VOTE = "DUPLICATE_VOTE"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # System
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    HTTP_ERROR = "HTTP_ERROR"


# =============================================================================
# Database Configuration
# =============================================================================

class DatabaseConfig:
    """Database-related constants"""

    DEFAULT_DATABASE_URL = "sqlite:///./polly.db"

    # Connection settings
    POOL_SIZE = 5
    MAX_OVERFLOW = 10
    POOL_TIMEOUT = 30
    POOL_RECYCLE = 3600  # 1 hour

    # Query limits
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100


# =============================================================================
# Logging Configuration
# =============================================================================

class LoggingConfig:
    """Logging configuration constants"""

    # Log levels
    DEFAULT_LOG_LEVEL = "INFO"
    DATABASE_LOG_LEVEL = "WARNING"

    # Log formats
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    # File settings
    MAX_LOG_FILE_SIZE = 10 * 1024 * 1024  # 10MB
    BACKUP_COUNT = 5


# =============================================================================
# Environment-Specific Constants
# =============================================================================

class EnvironmentConfig:
    """Environment-specific configuration"""

    DEVELOPMENT = "development"
    PRODUCTION = "production"


# =============================================================================
# Cached view paths
# =============================================================================

class ViewPaths:
    """Paths of the rendered views that must be revalidated after mutations"""

    HOME = "/"
    POLL_LIST = "/polls"

    @staticmethod
    def poll(poll_id: int) -> str:
        return f"/polls/{poll_id}"

    @staticmethod
    def poll_edit(poll_id: int) -> str:
        return f"/polls/{poll_id}/edit"

