"""SQLModel schema and database management."""

from .engine import DatabaseConfig, DatabaseManager, NETWORK_PROTOCOLS
from .models import BiosSettingRecord, MakeModelIdentityRecord

__all__ = [
    "DatabaseConfig",
    "DatabaseManager",
    "NETWORK_PROTOCOLS",
    "BiosSettingRecord",
    "MakeModelIdentityRecord",
]
