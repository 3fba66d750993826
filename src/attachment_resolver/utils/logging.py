from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, cast

import structlog
from loguru import logger as loguru_logger
from structlog.exceptions import DropEvent
from structlog.stdlib import BoundLogger
from structlog.typing import EventDict, WrappedLogger

from attachment_resolver.config.settings import log_dir


LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {name} | {message} | {extra}"
DEFAULT_LOG_FILENAME = "attachment-resolver.log"

# Frames between the structlog call site and the loguru call below.
_CALLER_DEPTH = 6


@dataclass(slots=True)
class LoggingOptions:
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    rotation: str = "10 MB"
    retention: str = "14 days"
    log_path: Optional[Path] = None
    file_sink: bool = True

    @property
    def console_level(self) -> str:
        return "DEBUG" if self.debug else self.level


_configured_log_path: Optional[Path] = None


def configure_logging(options: LoggingOptions | None = None) -> Path:
    """Send structlog events to loguru: stderr always, a rotating file unless disabled."""

    global _configured_log_path

    opts = options or LoggingOptions()
    log_path = opts.log_path or (log_dir() / DEFAULT_LOG_FILENAME)

    loguru_logger.remove()
    loguru_logger.add(
        sys.stderr,
        level=opts.console_level,
        format=LOG_FORMAT,
        backtrace=opts.debug,
        diagnose=opts.debug,
    )
    if opts.file_sink:
        loguru_logger.add(
            log_path,
            level="DEBUG",
            format=LOG_FORMAT,
            rotation=opts.rotation,
            retention=opts.retention,
            encoding="utf-8",
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _forward_to_loguru,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(opts.console_level),
        ),
        cache_logger_on_first_use=True,
    )

    _configured_log_path = log_path
    return log_path


def _forward_to_loguru(
    _: WrappedLogger,
    __: str,
    event_dict: EventDict,
) -> EventDict:
    level = str(event_dict.pop("level", "info")).upper()
    message = str(event_dict.pop("event", ""))
    # ``logger.exception`` sets exc_info; loguru renders the active traceback itself.
    exc_info = event_dict.pop("exc_info", None)
    event_dict.pop("stack_info", None)
    loguru_logger.bind(**event_dict).opt(depth=_CALLER_DEPTH, exception=exc_info).log(
        level, message
    )
    raise DropEvent


def get_logger(*initial_values: object, **initial_kw: object) -> BoundLogger:
    if _configured_log_path is None:
        configure_logging()
    return cast(BoundLogger, structlog.get_logger(*initial_values, **initial_kw))


def log_file_path() -> Path:
    if _configured_log_path is None:
        return configure_logging()
    return _configured_log_path


__all__ = ["LoggingOptions", "configure_logging", "get_logger", "log_file_path"]
