"""Shared utility helpers for the BIOS manager."""

from .errors import ErrorDescriptor, ErrorSeverity, describe_exception
from .logging import (
    LoggingOptions,
    configure_logging,
    get_logger,
)
from .sanitize import normalise_field, sanitize_log_message

__all__ = [
    "LoggingOptions",
    "configure_logging",
    "get_logger",
    "sanitize_log_message",
    "normalise_field",
    "ErrorDescriptor",
    "ErrorSeverity",
    "describe_exception",
]
