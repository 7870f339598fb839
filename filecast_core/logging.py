"""
Logging setup for filecast.

Everything goes through loguru. Records from the standard library (uvicorn,
fastapi, urllib3 under the MinIO SDK) are forwarded by InterceptHandler.
"""

import inspect
import logging
import sys

from loguru import logger

from filecast_core.config import settings

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[service]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Loggers that install their own handlers and would otherwise bypass the root
_INTERCEPTED = ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi", "urllib3")


class InterceptHandler(logging.Handler):
    """
    Forward stdlib logging records to loguru, keeping the original call site.
    See: https://loguru.readthedocs.io/en/stable/overview.html#entirely-compatible-with-standard-logging
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configure the loguru sink and route stdlib logging into it.

    Args:
        level: Minimum level to emit. Defaults to settings.LOG_LEVEL.
        json_logs: Emit one JSON object per line. Defaults to settings.LOG_JSON.
    """
    if json_logs is None:
        json_logs = settings.LOG_JSON

    logger.remove()
    logger.configure(extra={"service": settings.SERVICE_NAME})

    if json_logs:
        logger.add(sys.stdout, level=level or settings.LOG_LEVEL, serialize=True)
    else:
        logger.add(
            sys.stdout,
            format=_CONSOLE_FORMAT,
            level=level or settings.LOG_LEVEL,
            colorize=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in _INTERCEPTED:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.info(f"Logging initialized with Loguru (json={json_logs}).")
