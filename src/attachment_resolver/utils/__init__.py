"""Shared utility helpers for the attachment resolver."""

from .logging import LoggingOptions, configure_logging, get_logger, log_file_path
from .sanitize import obfuscate_secret, sanitize_filename, sanitize_log_message

__all__ = [
    "LoggingOptions",
    "configure_logging",
    "get_logger",
    "log_file_path",
    "obfuscate_secret",
    "sanitize_filename",
    "sanitize_log_message",
]
