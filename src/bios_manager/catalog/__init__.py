"""Configuration Manager package catalog access."""

from .client import (
    AdminServiceCatalog,
    CatalogConfig,
    PACKAGE_NAME_PREFIX,
    PackageCatalog,
    package_name,
)

__all__ = [
    "AdminServiceCatalog",
    "CatalogConfig",
    "PACKAGE_NAME_PREFIX",
    "PackageCatalog",
    "package_name",
]
