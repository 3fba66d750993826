from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class CatalogBaseModel(BaseModel):
    """Base class for immutable catalog payloads."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore",
        frozen=True,
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
