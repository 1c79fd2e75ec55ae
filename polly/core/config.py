"""Application settings read from the environment (and an optional .env file)."""

import os
import logging
from typing import Dict, List, Optional

from dotenv import load_dotenv

from polly.core.constants import (
    APIConfig,
    AuthConfig,
    DatabaseConfig,
    EnvironmentConfig,
    LoggingConfig,
)

# Load environment variables from a .env file
load_dotenv()

logger = logging.getLogger(__name__)


def _parse_list(value: Optional[str], default: List[str]) -> List[str]:
    """Parse a comma-separated environment value into a list."""
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """Runtime configuration.

    Every attribute can be overridden by an environment variable of the same name.
    """

    def __init__(self):
        self.ENVIRONMENT = os.getenv("ENVIRONMENT", EnvironmentConfig.DEVELOPMENT)
        self.DATABASE_URL = os.getenv("DATABASE_URL") or DatabaseConfig.DEFAULT_DATABASE_URL
        self.SECRET_KEY = os.getenv("SECRET_KEY") or AuthConfig.DEFAULT_SECRET_KEY
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(
            os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", AuthConfig.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        self.BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", AuthConfig.BCRYPT_ROUNDS))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", LoggingConfig.DEFAULT_LOG_LEVEL).upper()
        self.LOG_FILE = os.getenv("LOG_FILE")
        self.CORS_ORIGINS = _parse_list(os.getenv("CORS_ORIGINS"), APIConfig.ALLOWED_ORIGINS)

    def validate_production_config(self) -> None:
        """Refuse to start a production deployment with development defaults."""
        if self.ENVIRONMENT != EnvironmentConfig.PRODUCTION:
            return

        issues = []
        if self.SECRET_KEY == AuthConfig.DEFAULT_SECRET_KEY:
            issues.append("SECRET_KEY must be changed from the default value")
        if self.DATABASE_URL.startswith("sqlite"):
            logger.warning("Production is configured with SQLite; a server database is recommended")

        if issues:
            raise ValueError("Invalid production configuration: " + "; ".join(issues))


def check_environment() -> Dict[str, object]:
    """Report which of the required settings come from the environment."""
    required = ("DATABASE_URL", "SECRET_KEY")
    report: Dict[str, object] = {
        name: "Set" if os.getenv(name) else "Missing" for name in required
    }
    report["all_set"] = all(value == "Set" for value in report.values())
    return report


settings = Settings()
