from __future__ import annotations

from sqlalchemy import delete, update
from sqlmodel import Session, select

from bios_manager.data.models import (
    BiosPackage,
    BiosPackageChanges,
    MAKE_MODEL_SETTING_TYPE,
)
from bios_manager.data.sql import (
    BiosSettingRecord,
    DatabaseManager,
    MakeModelIdentityRecord,
)
from bios_manager.data.sql.mapper import changes_to_values, records_to_package
from bios_manager.utils import get_logger


logger = get_logger(__name__)


class BiosPackageRepository:
    """Reads and writes make/model identities with their BIOS settings rows."""

    def __init__(
        self,
        db: DatabaseManager,
        *,
        setting_type: str = MAKE_MODEL_SETTING_TYPE,
    ) -> None:
        self._db = db
        self._type = setting_type

    # ----------------------------------------------------------------- Queries

    def get_by_package(self, package_id: str) -> BiosPackage | None:
        with self._db.session() as session:
            stmt = self._select_joined().where(
                BiosSettingRecord.bios_package == package_id
            )
            return self._first(session, stmt)

    def list_all(self) -> list[BiosPackage]:
        with self._db.session() as session:
            stmt = self._select_joined().order_by(
                MakeModelIdentityRecord.make,
                MakeModelIdentityRecord.model,
            )
            rows = session.exec(stmt).all()
            return [records_to_package(identity, setting) for identity, setting in rows]

    def identity_for_package(self, package_id: str) -> int | None:
        with self._db.session() as session:
            stmt = select(BiosSettingRecord.id).where(
                BiosSettingRecord.type == self._type,
                BiosSettingRecord.bios_package == package_id,
            )
            return session.exec(stmt).first()

    def identity_for_make_model(self, make: str, model: str) -> int | None:
        with self._db.session() as session:
            stmt = select(MakeModelIdentityRecord.id).where(
                MakeModelIdentityRecord.make == make,
                MakeModelIdentityRecord.model == model,
            )
            return session.exec(stmt).first()

    # --------------------------------------------------------------- Mutations

    def add(
        self,
        *,
        make: str,
        model: str,
        target_bios_date: str,
        flash_command: str,
        package_id: str,
    ) -> BiosPackage:
        """Insert the identity row and its settings row in one transaction."""
        with self._db.session() as session:
            identity = MakeModelIdentityRecord(make=make, model=model)
            session.add(identity)
            session.flush()
            setting = BiosSettingRecord(
                type=self._type,
                id=identity.id,
                target_bios_date=target_bios_date,
                flash_bios_cmd=flash_command,
                bios_package=package_id,
            )
            session.add(setting)
            session.flush()
            created = records_to_package(identity, setting)
            session.commit()
        logger.info(
            "Inserted BIOS package record",
            identity_id=created.id,
            make=make,
            model=model,
            package_id=package_id,
        )
        return created

    def update(self, package_id: str, changes: BiosPackageChanges) -> int:
        """Apply every supplied change with one UPDATE; return rows affected."""
        values = changes_to_values(changes)
        if not values:
            return 0
        with self._db.session() as session:
            stmt = (
                update(BiosSettingRecord)
                .where(
                    BiosSettingRecord.type == self._type,
                    BiosSettingRecord.bios_package == package_id,
                )
                .values(values)
                .execution_options(synchronize_session=False)
            )
            result = session.exec(stmt)
            session.commit()
            rows = result.rowcount
        logger.info(
            "Updated BIOS package record",
            package_id=package_id,
            columns=sorted(changes.assignments()),
            rows=rows,
        )
        return rows

    def delete(self, identity_id: int) -> int:
        """Remove the settings row, then the identity row, in one transaction."""
        with self._db.session() as session:
            setting_result = session.exec(
                delete(BiosSettingRecord)
                .where(
                    BiosSettingRecord.type == self._type,
                    BiosSettingRecord.id == identity_id,
                )
                .execution_options(synchronize_session=False)
            )
            session.exec(
                delete(MakeModelIdentityRecord)
                .where(MakeModelIdentityRecord.id == identity_id)
                .execution_options(synchronize_session=False)
            )
            session.commit()
            rows = setting_result.rowcount
        logger.info("Deleted BIOS package record", identity_id=identity_id, rows=rows)
        return rows

    # --------------------------------------------------------------- Internals

    def _select_joined(self):
        return (
            select(MakeModelIdentityRecord, BiosSettingRecord)
            .join(
                BiosSettingRecord,
                BiosSettingRecord.id == MakeModelIdentityRecord.id,
            )
            .where(BiosSettingRecord.type == self._type)
        )

    @staticmethod
    def _first(session: Session, stmt) -> BiosPackage | None:
        row = session.exec(stmt).first()
        if row is None:
            return None
        identity, setting = row
        return records_to_package(identity, setting)


__all__ = ["BiosPackageRepository"]
