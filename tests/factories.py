from __future__ import annotations

from pathlib import Path

from bios_manager.config import Settings
from bios_manager.data import BiosPackage


def make_settings(db_path: Path | None = None, **overrides: object) -> Settings:
    """Build Settings pointing at a SQLite database and a test site server."""

    settings = Settings(
        database_url=f"sqlite:///{db_path}" if db_path is not None else None,
        database_server="sql01.contoso.com",
        database="MDT",
        sccm_server="cm01.contoso.com",
        sccm_site_code="CM1",
    )
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


def make_bios_package(
    *,
    identity_id: int = 1,
    make: str = "Dell",
    model: str = "7520",
    target_bios_date: str | None = "20240305",
    flash_bios_cmd: str | None = "FlashBios.cmd",
    bios_package: str | None = "CM00123",
) -> BiosPackage:
    """Create a BiosPackage using the MDT column aliases."""

    return BiosPackage.model_validate(
        {
            "ID": identity_id,
            "Make": make,
            "Model": model,
            "TARGETBIOSDATE": target_bios_date,
            "FLASHBIOSCMD": flash_bios_cmd,
            "BIOSPACKAGE": bios_package,
        }
    )
