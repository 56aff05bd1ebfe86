from __future__ import annotations

from bios_manager.data.models import BiosPackage, BiosPackageChanges

from .models import BiosSettingRecord, MakeModelIdentityRecord


def records_to_package(
    identity: MakeModelIdentityRecord,
    setting: BiosSettingRecord,
) -> BiosPackage:
    return BiosPackage(
        id=identity.id,
        make=identity.make,
        model=identity.model,
        target_bios_date=setting.target_bios_date,
        flash_bios_cmd=setting.flash_bios_cmd,
        bios_package=setting.bios_package,
    )


def changes_to_values(changes: BiosPackageChanges) -> dict[object, str]:
    """Map supplied changes onto settings columns for a single UPDATE."""
    columns = {
        "bios_package": BiosSettingRecord.bios_package,
        "flash_bios_cmd": BiosSettingRecord.flash_bios_cmd,
        "target_bios_date": BiosSettingRecord.target_bios_date,
    }
    return {columns[name]: value for name, value in changes.assignments().items()}


__all__ = ["changes_to_values", "records_to_package"]
