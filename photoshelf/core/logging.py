"""
Logging setup (loguru).

Application modules log through ``logging.getLogger(__name__)``;
``InterceptHandler`` forwards those records, and the ones from uvicorn,
FastAPI and SQLAlchemy, into loguru. Production writes one JSON object
per line, everything else a coloured human-readable line.
"""

import logging
import sys

from loguru import logger

from photoshelf.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "sqlalchemy")


class InterceptHandler(logging.Handler):
    """Hand stdlib log records to loguru, keeping the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real call site
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging() -> None:
    """(Re)configure loguru sinks and route stdlib logging into them."""
    logger.remove()

    if settings.APP_ENV == "production":
        logger.add(sys.stderr, serialize=True, level="INFO", backtrace=False, diagnose=False)
    else:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level="DEBUG" if settings.DEBUG else "INFO",
            colorize=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    # SQL echo only in debug mode
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DEBUG else logging.WARNING
    )
