from __future__ import annotations

from sqlalchemy import Column, Integer, String
from sqlmodel import Field, SQLModel

from bios_manager.data.models import MAKE_MODEL_SETTING_TYPE


class MakeModelIdentityRecord(SQLModel, table=True):
    """One hardware make/model pairing in the MDT identity table."""

    __tablename__ = "MakeModelIdentity"

    id: int | None = Field(
        default=None,
        sa_column=Column("ID", Integer, primary_key=True, autoincrement=True),
    )
    make: str = Field(sa_column=Column("Make", String(255), nullable=False, index=True))
    model: str = Field(sa_column=Column("Model", String(255), nullable=False, index=True))


class BiosSettingRecord(SQLModel, table=True):
    """Dynamic BIOS columns of the shared MDT settings table.

    ``Type`` discriminates which identity table ``ID`` points at, so the
    relationship to :class:`MakeModelIdentityRecord` is not a declared
    foreign key.
    """

    __tablename__ = "Settings"

    type: str = Field(
        default=MAKE_MODEL_SETTING_TYPE,
        sa_column=Column("Type", String(1), primary_key=True),
    )
    id: int = Field(
        sa_column=Column("ID", Integer, primary_key=True, autoincrement=False),
    )
    target_bios_date: str | None = Field(
        default=None,
        sa_column=Column("TARGETBIOSDATE", String(8), nullable=True),
    )
    flash_bios_cmd: str | None = Field(
        default=None,
        sa_column=Column("FLASHBIOSCMD", String(255), nullable=True),
    )
    bios_package: str | None = Field(
        default=None,
        sa_column=Column("BIOSPACKAGE", String(255), nullable=True, index=True),
    )


__all__ = ["BiosSettingRecord", "MakeModelIdentityRecord"]
