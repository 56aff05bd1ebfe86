from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class RecordModel(BaseModel):
    """Base class for MDT record helpers keyed by database column names."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore",
        frozen=True,
    )

    def to_columns(self) -> dict[str, Any]:
        """Serialise using the database column names."""
        return self.model_dump(mode="json", by_alias=True)
