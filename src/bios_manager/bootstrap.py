from __future__ import annotations

from dataclasses import dataclass

from bios_manager.auth import InsecureKeyringError, SecretStore
from bios_manager.catalog import AdminServiceCatalog, CatalogConfig, PackageCatalog
from bios_manager.config import Settings
from bios_manager.data import BiosPackageRepository, DatabaseConfig, DatabaseManager
from bios_manager.services import BiosPackageService, ConfirmCallback
from bios_manager.utils import get_logger


logger = get_logger(__name__)


@dataclass(slots=True)
class ServiceRegistry:
    """Holds the service together with the resources it owns."""

    bios: BiosPackageService
    database: DatabaseManager
    catalog: PackageCatalog

    async def close(self) -> None:
        await self.catalog.close()
        self.database.dispose()


def _catalog_password(settings: Settings, secrets: SecretStore | None) -> str | None:
    if not settings.catalog_username:
        return None
    try:
        store = secrets or SecretStore()
    except InsecureKeyringError:
        logger.warning("Keyring unavailable; connecting to the site server without a password")
        return None
    return store.catalog_password()


def build_services(
    settings: Settings,
    *,
    confirm: ConfirmCallback,
    secrets: SecretStore | None = None,
    catalog: PackageCatalog | None = None,
    cleanup_orphans: bool = False,
) -> ServiceRegistry:
    """Wire the database, catalog and service for one operator session."""

    settings.require()
    database = DatabaseManager(DatabaseConfig.from_settings(settings))
    if database.config.is_sqlite:
        database.ensure_schema()
    if catalog is None:
        password = _catalog_password(settings, secrets)
        catalog = AdminServiceCatalog(CatalogConfig.from_settings(settings, password=password))
    repository = BiosPackageRepository(database)
    service = BiosPackageService(
        catalog,
        repository,
        confirm=confirm,
        cleanup_orphans=cleanup_orphans,
    )
    logger.debug(
        "Service registry initialised",
        database=database.config.render(),
        site_code=settings.sccm_site_code,
    )
    return ServiceRegistry(bios=service, database=database, catalog=catalog)


__all__ = ["ServiceRegistry", "build_services"]
