from __future__ import annotations

from bios_manager.data import BiosPackageChanges

from tests.factories import make_bios_package


def test_bios_package_serialises_with_column_names() -> None:
    record = make_bios_package(identity_id=7)

    assert record.to_columns() == {
        "ID": 7,
        "Make": "Dell",
        "Model": "7520",
        "TARGETBIOSDATE": "20240305",
        "FLASHBIOSCMD": "FlashBios.cmd",
        "BIOSPACKAGE": "CM00123",
    }


def test_changes_only_report_supplied_columns() -> None:
    changes = BiosPackageChanges(target_bios_date="20240101")

    assert changes.is_empty is False
    assert changes.assignments() == {"target_bios_date": "20240101"}
    assert BiosPackageChanges().is_empty is True
