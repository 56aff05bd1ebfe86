from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ErrorCategory(str, Enum):
    CONFIGURATION = "configuration"
    CONNECTION = "connection"
    STATEMENT = "statement"
    CATALOG = "catalog"
    INVALID_ARGUMENTS = "invalid_arguments"
    NOT_FOUND = "not_found"


@dataclass(slots=True)
class BiosManagerError(Exception):
    message: str
    category: ErrorCategory = ErrorCategory.STATEMENT
    inner_error: Exception | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message

    @property
    def recovery_suggestion(self) -> str | None:
        if self.category is ErrorCategory.CONFIGURATION:
            return "Run `bios-manager configure` to store the database and site server details."
        if self.category is ErrorCategory.CONNECTION:
            return "Verify the database server name, network library and that SQL Server is reachable."
        if self.category is ErrorCategory.STATEMENT:
            return "The database rejected the statement. Check permissions on the MDT database."
        if self.category is ErrorCategory.CATALOG:
            return "Check the site server name, AdminService availability and your credentials."
        if self.category is ErrorCategory.INVALID_ARGUMENTS:
            return "Review the supplied options and try again."
        if self.category is ErrorCategory.NOT_FOUND:
            return "Use `bios-manager list` to see the packages that are registered."
        return None

    @property
    def is_retriable(self) -> bool:
        return self.category is ErrorCategory.CONNECTION


@dataclass(slots=True)
class ConfigurationMissingError(BiosManagerError):
    category: ErrorCategory = ErrorCategory.CONFIGURATION
    missing: tuple[str, ...] = ()


@dataclass(slots=True)
class ConnectionFailureError(BiosManagerError):
    category: ErrorCategory = ErrorCategory.CONNECTION


@dataclass(slots=True)
class StatementFailureError(BiosManagerError):
    category: ErrorCategory = ErrorCategory.STATEMENT


@dataclass(slots=True)
class CatalogError(BiosManagerError):
    category: ErrorCategory = ErrorCategory.CATALOG
    status_code: int | None = None
    code: str | None = None

    @property
    def is_retriable(self) -> bool:
        if self.status_code is None:
            return True
        return 500 <= self.status_code <= 599


@dataclass(slots=True)
class InvalidArgumentsError(BiosManagerError):
    category: ErrorCategory = ErrorCategory.INVALID_ARGUMENTS


@dataclass(slots=True)
class NotFoundError(BiosManagerError):
    category: ErrorCategory = ErrorCategory.NOT_FOUND


@dataclass(slots=True)
class OrphanedCatalogPackageError(StatementFailureError):
    """Database write failed after the catalog package had been created."""

    package_id: str = ""
    cleaned_up: bool = False
    cleanup_error: Exception | None = field(default=None)

    @property
    def recovery_suggestion(self) -> str | None:
        if self.cleaned_up:
            return f"Catalog package {self.package_id} was removed again; fix the database issue and retry."
        return f"Delete catalog package {self.package_id} in the Configuration Manager console before retrying."


__all__ = [
    "BiosManagerError",
    "CatalogError",
    "ConfigurationMissingError",
    "ConnectionFailureError",
    "ErrorCategory",
    "InvalidArgumentsError",
    "NotFoundError",
    "OrphanedCatalogPackageError",
    "StatementFailureError",
]
