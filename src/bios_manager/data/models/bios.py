from __future__ import annotations

from pydantic import Field

from .common import RecordModel


MAKE_MODEL_SETTING_TYPE = "M"


class BiosPackage(RecordModel):
    """A make/model identity joined with its dynamic BIOS settings."""

    id: int = Field(alias="ID")
    make: str = Field(alias="Make")
    model: str = Field(alias="Model")
    target_bios_date: str | None = Field(default=None, alias="TARGETBIOSDATE")
    flash_bios_cmd: str | None = Field(default=None, alias="FLASHBIOSCMD")
    bios_package: str | None = Field(default=None, alias="BIOSPACKAGE")


class BiosPackageChanges(RecordModel):
    """Optional column changes applied to a single settings row."""

    bios_package: str | None = Field(default=None, alias="BIOSPACKAGE")
    flash_bios_cmd: str | None = Field(default=None, alias="FLASHBIOSCMD")
    target_bios_date: str | None = Field(default=None, alias="TARGETBIOSDATE")

    @property
    def is_empty(self) -> bool:
        return not self.assignments()

    def assignments(self) -> dict[str, str]:
        """Return attribute name to value for every supplied column."""
        return {
            name: value
            for name, value in (
                ("bios_package", self.bios_package),
                ("flash_bios_cmd", self.flash_bios_cmd),
                ("target_bios_date", self.target_bios_date),
            )
            if value is not None
        }


__all__ = ["BiosPackage", "BiosPackageChanges", "MAKE_MODEL_SETTING_TYPE"]
