import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

from polly.core.constants import LoggingConfig


def configure_logging(level: str = LoggingConfig.DEFAULT_LOG_LEVEL, log_file: Optional[str] = None) -> None:
    """Configure root logging for the application process."""
    formatter = logging.Formatter(LoggingConfig.LOG_FORMAT, datefmt=LoggingConfig.DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)

    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

    if log_file and not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=LoggingConfig.MAX_LOG_FILE_SIZE,
            backupCount=LoggingConfig.BACKUP_COUNT,
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # SQL echo is too noisy for INFO
    logging.getLogger("sqlalchemy.engine").setLevel(LoggingConfig.DATABASE_LOG_LEVEL)
