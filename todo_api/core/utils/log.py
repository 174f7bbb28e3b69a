import logging
import logging.config
import queue
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from typing import Any

import uvicorn

from todo_api.core.utils.config import Settings

LOGS_DIRECTORY = Path("logs")

# ANSI escape codes used to highlight the level of console records
LEVEL_COLORS = {
    logging.DEBUG: "\033[38;5;12m",
    logging.INFO: "\033[38;5;10m",
    logging.WARNING: "\033[38;5;11m",
    logging.ERROR: "\033[38;5;9m",
    logging.CRITICAL: "\033[38;5;1m",
}
BOLD = "\033[1m"
RESET = "\033[0m"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%d-%b-%y %H:%M:%S"


class ColoredConsoleFormatter(uvicorn.logging.DefaultFormatter):
    """
    Console formatter printing the level name in bold and the message in the color of its level.
    """

    def __init__(self, *args, **kwargs):
        # `asctime` is only computed when the format uses it
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    def formatMessage(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelno, LEVEL_COLORS[logging.ERROR])
        return (
            f"{record.asctime} - {record.name} - {BOLD}{record.levelname}{RESET}"
            f" - {color}{record.message}{RESET}"
        )


def rotating_file_handler(filename: str, megabytes: int, backups: int) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "default",
        "filename": str(LOGS_DIRECTORY / filename),
        "maxBytes": megabytes * 1024 * 1024,
        "backupCount": backups,
        "level": "INFO",
    }


class LogConfig:
    """
    Logging configuration of the server.

    Three loggers are used by the application, each one writing in its own file and in the console:
     - `todo_api.access`: one line per request, with the request identifier
     - `todo_api.security`: account creation, logins, logouts and rejected session tokens
     - `todo_api.error`: startup, database and unexpected errors

    Call `LogConfig().initialize_loggers(settings)` once, before creating the application.
    """

    def get_config_dict(self, settings: Settings) -> dict[str, Any]:
        """
        Return a [dictConfig](https://docs.python.org/3/library/logging.config.html#logging-config-dictschema) dictionary
        """
        level = "DEBUG" if settings.LOG_DEBUG_MESSAGES else "INFO"

        def application_logger(file_handler: str) -> dict:
            return {"handlers": [file_handler, "console"], "level": level}

        return {
            "version": 1,
            # In debug mode, database and third party loggers are kept
            "disable_existing_loggers": not settings.LOG_DEBUG_MESSAGES,
            "formatters": {
                "default": {
                    "format": LOG_FORMAT,
                    "datefmt": DATE_FORMAT,
                },
                "colored": {
                    "()": "todo_api.core.utils.log.ColoredConsoleFormatter",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "colored",
                    "level": level,
                },
                "file_access": rotating_file_handler("access.log", 40, 50),
                "file_security": rotating_file_handler("security.log", 40, 50),
                "file_errors": rotating_file_handler("errors.log", 10, 20),
            },
            "loggers": {
                "root": {"level": "DEBUG", "handlers": ["console"]},
                "todo_api": {"propagate": False},
                "todo_api.access": application_logger("file_access"),
                "todo_api.security": application_logger("file_security"),
                "todo_api.error": application_logger("file_errors"),
                # Requests are already logged by `todo_api.access`, with their identifier
                "uvicorn.access": {"handlers": []},
                "uvicorn.error": application_logger("file_errors") | {"propagate": False},
            },
        }

    def initialize_loggers(self, settings: Settings) -> None:
        """
        Configure the loggers, then move their handlers behind a queue.

        Endpoints run in the event loop: writing records to files or to the console is left to a
        `QueueListener` thread per logger, the logger itself only enqueues records.
        """
        LOGS_DIRECTORY.mkdir(parents=True, exist_ok=True)

        config_dict = self.get_config_dict(settings=settings)
        logging.config.dictConfig(config_dict)

        for name in config_dict["loggers"]:
            logger = logging.getLogger(name)
            if not logger.handlers:
                continue

            log_queue: queue.Queue[Any] = queue.Queue(-1)
            QueueListener(
                log_queue,
                *logger.handlers,
                respect_handler_level=True,
            ).start()
            logger.handlers = [QueueHandler(log_queue)]
