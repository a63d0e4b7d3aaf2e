"""Loguru configuration for the robot server.

Library modules log through the standard library; this routes those records
(and uvicorn's) into loguru.
"""

import logging
import sys
from contextvars import ContextVar

from loguru import logger

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def _format_record(record: dict) -> str:
    request_id = request_id_ctx.get()
    context_str = f"[req={request_id[:8]}] " if request_id else ""
    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        f"{context_str}"
        "<level>{message}</level>\n"
        "{exception}"
    )


def configure_logging(*, is_production: bool = False, log_level: str = "INFO") -> None:
    """Configure loguru for the application.

    Args:
        is_production: If True, write JSON lines to stdout; otherwise
            human-readable colored output to stderr.
        log_level: Minimum log level to output.
    """
    logger.remove()

    if is_production:
        logger.add(sys.stdout, format="{message}", level=log_level, serialize=True)
    else:
        logger.add(sys.stderr, format=_format_record, level=log_level, colorize=True)

    _intercept_standard_logging(log_level)


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where the logged message originated
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _intercept_standard_logging(log_level: str) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=log_level, force=True)

    for name in ["uvicorn", "uvicorn.error", "uvicorn.access", "httpx"]:
        logging.getLogger(name).setLevel(log_level)
        logging.getLogger(name).handlers = [InterceptHandler()]


__all__ = ["configure_logging", "logger", "request_id_ctx"]
