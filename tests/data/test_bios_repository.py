from __future__ import annotations

import pytest
from sqlmodel import select

from bios_manager.data import (
    BiosPackageChanges,
    BiosPackageRepository,
    BiosSettingRecord,
    DatabaseManager,
    MakeModelIdentityRecord,
)
from bios_manager.errors import StatementFailureError


def _add(repository: BiosPackageRepository, make: str, model: str, package_id: str):
    return repository.add(
        make=make,
        model=model,
        target_bios_date="20240305",
        flash_command="FlashBios.cmd",
        package_id=package_id,
    )


def _row_counts(database: DatabaseManager) -> tuple[int, int]:
    with database.session() as session:
        identities = session.exec(select(MakeModelIdentityRecord)).all()
        settings = session.exec(select(BiosSettingRecord)).all()
        return len(identities), len(settings)


def test_add_creates_linked_identity_and_setting(
    repository: BiosPackageRepository, database: DatabaseManager
) -> None:
    created = _add(repository, "Dell", "7520", "CM00123")

    assert created.id is not None
    assert created.bios_package == "CM00123"
    assert _row_counts(database) == (1, 1)
    with database.session() as session:
        setting = session.exec(select(BiosSettingRecord)).one()
        assert setting.id == created.id
        assert setting.type == "M"


def test_lookup_by_package_and_make_model(repository: BiosPackageRepository) -> None:
    created = _add(repository, "Dell", "7520", "CM00123")
    _add(repository, "HP", "EliteBook 840 G5", "CM00124")

    by_package = repository.get_by_package("CM00123")

    assert by_package == created
    assert repository.identity_for_make_model("Dell", "7520") == created.id
    assert repository.identity_for_package("CM00124") is not None
    assert repository.identity_for_make_model("Lenovo", "T480") is None
    assert repository.get_by_package("CM99999") is None


def test_values_are_bound_not_interpolated(repository: BiosPackageRepository) -> None:
    model = "7520'); DELETE FROM Settings;--"
    _add(repository, "Dell", model, "CM00123")
    _add(repository, "HP", "840", "CM00124")

    record = repository.get_by_package("CM00123")

    assert record is not None
    assert record.model == model
    assert repository.identity_for_make_model("Dell", model) == record.id
    assert len(repository.list_all()) == 2


def test_list_all_orders_by_make_then_model(repository: BiosPackageRepository) -> None:
    _add(repository, "Lenovo", "T480", "CM00125")
    _add(repository, "Dell", "7520", "CM00123")
    _add(repository, "Dell", "5490", "CM00124")

    names = [(item.make, item.model) for item in repository.list_all()]

    assert names == [("Dell", "5490"), ("Dell", "7520"), ("Lenovo", "T480")]


def test_update_applies_every_supplied_column(repository: BiosPackageRepository) -> None:
    _add(repository, "Dell", "7520", "CM00123")

    rows = repository.update(
        "CM00123",
        BiosPackageChanges(
            bios_package="CM00200",
            flash_bios_cmd="Flash64W.exe /s",
            target_bios_date="20241001",
        ),
    )

    assert rows == 1
    assert repository.get_by_package("CM00123") is None
    updated = repository.get_by_package("CM00200")
    assert updated is not None
    assert updated.flash_bios_cmd == "Flash64W.exe /s"
    assert updated.target_bios_date == "20241001"


def test_update_single_column_leaves_others(repository: BiosPackageRepository) -> None:
    _add(repository, "Dell", "7520", "CM00123")

    rows = repository.update("CM00123", BiosPackageChanges(target_bios_date="20241001"))

    updated = repository.get_by_package("CM00123")
    assert rows == 1
    assert updated is not None
    assert updated.target_bios_date == "20241001"
    assert updated.flash_bios_cmd == "FlashBios.cmd"


def test_update_unknown_package_affects_nothing(repository: BiosPackageRepository) -> None:
    assert repository.update("CM00999", BiosPackageChanges(flash_bios_cmd="x")) == 0
    assert repository.update("CM00999", BiosPackageChanges()) == 0


def test_delete_removes_both_rows(
    repository: BiosPackageRepository, database: DatabaseManager
) -> None:
    created = _add(repository, "Dell", "7520", "CM00123")
    _add(repository, "HP", "840", "CM00124")

    rows = repository.delete(created.id)

    assert rows == 1
    assert _row_counts(database) == (1, 1)
    assert repository.get_by_package("CM00123") is None


def test_delete_leaves_other_setting_types(
    repository: BiosPackageRepository, database: DatabaseManager
) -> None:
    created = _add(repository, "Dell", "7520", "CM00123")
    with database.session() as session:
        session.add(BiosSettingRecord(type="C", id=created.id, flash_bios_cmd="other"))
        session.commit()

    repository.delete(created.id)

    with database.session() as session:
        remaining = session.exec(select(BiosSettingRecord)).all()
    assert [(item.type, item.id) for item in remaining] == [("C", created.id)]


def test_add_rolls_back_identity_when_setting_insert_fails(
    repository: BiosPackageRepository, database: DatabaseManager
) -> None:
    created = _add(repository, "Dell", "7520", "CM00123")
    with database.session() as session:
        # Occupy the settings key the next identity will receive.
        session.add(BiosSettingRecord(type="M", id=created.id + 1, bios_package="stale"))
        session.commit()

    with pytest.raises(StatementFailureError):
        _add(repository, "HP", "840", "CM00124")

    assert repository.identity_for_make_model("HP", "840") is None
