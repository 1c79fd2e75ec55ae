from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from polly.api.v1.endpoints import auth, comments, polls, users, votes
from polly.core.config import check_environment, settings
from polly.core.constants import APIConfig
from polly.core.exception import register_exception_handlers
from polly.core.logging_config import configure_logging
from polly.db.database import Base, engine, get_db

# Import models to register them with SQLAlchemy
from polly.models import comment, polls as poll_models, user  # noqa: F401

configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.validate_production_config()
    # Create all tables in the database
    Base.metadata.create_all(bind=engine)
    logger.info(f"Polly API started ({settings.ENVIRONMENT})")
    yield


# Create FastAPI app with centralized configuration
app = FastAPI(
    title=APIConfig.API_TITLE,
    description=APIConfig.API_DESCRIPTION,
    version=APIConfig.API_VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Register exception handlers
register_exception_handlers(app)

# Include routers with centralized prefix
app.include_router(auth.router, prefix=APIConfig.API_V1_PREFIX)
app.include_router(users.router, prefix=APIConfig.API_V1_PREFIX)
app.include_router(polls.router, prefix=APIConfig.API_V1_PREFIX)
app.include_router(votes.router, prefix=APIConfig.API_V1_PREFIX)
app.include_router(comments.router, prefix=APIConfig.API_V1_PREFIX)


@app.get("/")
def read_root():
    return {"message": "Welcome to the Polly API!"}


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Database connectivity and environment report."""
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.error(f"Health check could not reach the database: {e}")
        database = "unreachable"

    return {
        "status": "ok" if database == "connected" else "degraded",
        "database": database,
        "environment": check_environment(),
    }
