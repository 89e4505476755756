import logging.config
from typing import Any


# Third-party loggers that drown out request-level progress logs at INFO
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "slowapi")


def setup_logging(level: str = "INFO", sql_echo: bool = False) -> dict[str, Any]:
    """Configure console logging for the service.

    `sql_echo` lets SQLAlchemy statement logs through for debugging the
    document table.
    """
    loggers: dict[str, Any] = {name: {"level": "WARNING"} for name in QUIET_LOGGERS}
    if sql_echo:
        loggers["sqlalchemy.engine"] = {"level": "INFO"}
    loggers["learnpath"] = {"level": level}

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": loggers,
        "root": {"level": "WARNING", "handlers": ["console"]},
    }

    logging.config.dictConfig(config)
    return config
