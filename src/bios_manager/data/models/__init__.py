"""Domain models for MDT make/model BIOS records."""

from .bios import BiosPackage, BiosPackageChanges, MAKE_MODEL_SETTING_TYPE
from .common import RecordModel

__all__ = [
    "BiosPackage",
    "BiosPackageChanges",
    "MAKE_MODEL_SETTING_TYPE",
    "RecordModel",
]
