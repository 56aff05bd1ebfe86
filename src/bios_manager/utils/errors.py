from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from bios_manager.errors import (
    BiosManagerError,
    ErrorCategory,
    OrphanedCatalogPackageError,
)


class ErrorSeverity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(slots=True)
class ErrorDescriptor:
    headline: str
    detail: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    transient: bool = False
    suggestion: str | None = None


def describe_exception(error: Exception) -> ErrorDescriptor:
    descriptor = ErrorDescriptor(
        headline="Operation failed.",
        detail=f"{type(error).__name__}: {error}",
        severity=ErrorSeverity.ERROR,
        transient=False,
    )

    known = _locate_manager_error(error)
    if known is not None:
        descriptor.headline = _headline(known)
        descriptor.detail = str(known)
        descriptor.suggestion = known.recovery_suggestion
        descriptor.transient = known.is_retriable
        if known.category is ErrorCategory.INVALID_ARGUMENTS:
            descriptor.severity = ErrorSeverity.WARNING
        root = _unwrap_error(known)
        if root is not known:
            descriptor.detail = f"{known} ({type(root).__name__}: {root})"
        return descriptor

    return descriptor


def _locate_manager_error(error: Exception) -> BiosManagerError | None:
    current: BaseException | None = error
    visited: set[int] = set()
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        if isinstance(current, BiosManagerError):
            return current
        current = current.__cause__ or current.__context__
    return None


def _unwrap_error(error: BiosManagerError) -> BaseException:
    current: BaseException = error
    visited: set[int] = set()
    while True:
        visited.add(id(current))
        inner: BaseException | None = None
        if isinstance(current, BiosManagerError) and current.inner_error is not None:
            inner = current.inner_error
        elif current.__cause__ is not None:
            inner = current.__cause__
        if inner is None or id(inner) in visited:
            return current
        current = inner


def _headline(error: BiosManagerError) -> str:
    if isinstance(error, OrphanedCatalogPackageError):
        return "Database update failed after the catalog package was created."
    match error.category:
        case ErrorCategory.CONFIGURATION:
            return "BIOS manager is not configured."
        case ErrorCategory.CONNECTION:
            return "Could not connect to the MDT database."
        case ErrorCategory.STATEMENT:
            return "The MDT database rejected the request."
        case ErrorCategory.CATALOG:
            return "Configuration Manager package request failed."
        case ErrorCategory.INVALID_ARGUMENTS:
            return "Invalid arguments."
        case ErrorCategory.NOT_FOUND:
            return "No matching BIOS package record."
        case _:
            return "Operation failed."


__all__ = [
    "ErrorDescriptor",
    "ErrorSeverity",
    "describe_exception",
]
