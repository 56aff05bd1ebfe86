"""Data access layer: domain models, SQL schema and repositories."""

from .models import BiosPackage, BiosPackageChanges, MAKE_MODEL_SETTING_TYPE
from .repositories import BiosPackageRepository
from .sql import (
    BiosSettingRecord,
    DatabaseConfig,
    DatabaseManager,
    MakeModelIdentityRecord,
)

__all__ = [
    "BiosPackage",
    "BiosPackageChanges",
    "BiosPackageRepository",
    "BiosSettingRecord",
    "DatabaseConfig",
    "DatabaseManager",
    "MAKE_MODEL_SETTING_TYPE",
    "MakeModelIdentityRecord",
]
