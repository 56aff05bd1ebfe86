"""Repository layer for MDT BIOS records."""

from .bios import BiosPackageRepository

__all__ = ["BiosPackageRepository"]
