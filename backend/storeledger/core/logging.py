import logging
from logging.config import dictConfig

from storeledger.core.config import settings


def configure_logging() -> None:
    """
    Configure console logging for the API and the Celery worker.

    The same format is used under uvicorn, celery and tests.
    """
    level = settings.LOG_LEVEL.upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                }
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                # SQL echo is noisy at INFO; keep it opt-in
                "sqlalchemy.engine": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
            },
        }
    )
    logging.getLogger(__name__).info("Logging configured", extra={"level": level})
