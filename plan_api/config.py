import logging
import logging.config
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    MONGO_URI: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "plans"
    PAGINATE_MAX_LIMIT: int = 100
    LOG_LEVEL: str = "INFO"
    IDENTITY_HEADER: str = "x-user-id"
    # When set, every /plans route requires the caller to hold this role.
    PLANS_REQUIRED_ROLE: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()


# Logging Setup
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s [rid=%(request_id)s] - %(message)s"

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {
            "()": "plan_api.utils.request_context.RequestIdFilter",
        }
    },
    "formatters": {
        "standard": {
            "format": LOG_FORMAT,
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.LOG_LEVEL.upper(),
            "formatter": "standard",
            "filters": ["request_id"],
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "plan_api": {
            "handlers": ["console"],
            "level": settings.LOG_LEVEL.upper(),
            "propagate": False,
        },
        "uvicorn.error": {"level": "INFO"},
        "uvicorn.access": {"level": "INFO"},
    },
}

logging.config.dictConfig(LOGGING_CONFIG)
logger = logging.getLogger("plan_api")
