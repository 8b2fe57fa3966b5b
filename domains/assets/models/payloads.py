"""
domains/assets/models/payloads.py

Payloads the UI hands to the asset store: the filter set for list queries and
the validated create/update bodies.

Validation notes:
- create and update are separate types; update only serializes the fields the
  caller actually supplied
- unknown fields and invalid enum values are rejected at the boundary
- name is trimmed and must not be empty
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domains.assets.models.asset import AssetStatus, ConditionStatus, Location


DATE_FIELDS = ("purchase_date", "warranty_start_date", "warranty_end_date")


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class AssetFilters(BaseModel):
    """Optional predicates narrowing an asset list query. Blank values impose no constraint."""

    model_config = ConfigDict(extra="forbid")

    search: Optional[str] = None
    category: Optional[str] = None
    status: Optional[AssetStatus] = None
    condition: Optional[ConditionStatus] = None
    location: Optional[Location] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        return _blank_to_none(v)

    @field_validator("search")
    @classmethod
    def trim_search(cls, v):
        return v.strip() if v else v

    @property
    def has_active_filters(self) -> bool:
        return any(value is not None for value in self.model_dump().values())

    @property
    def has_advanced_filters(self) -> bool:
        return any(v is not None for v in (self.condition, self.date_from, self.date_to))


class _AssetFields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: Optional[str] = Field(None, max_length=2000)
    category_id: Optional[str] = None
    serial_number: Optional[str] = Field(None, max_length=200)
    model: Optional[str] = Field(None, max_length=200)
    brand: Optional[str] = Field(None, max_length=200)
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = Field(None, ge=0)
    supplier_vendor: Optional[str] = Field(None, max_length=200)
    warranty_start_date: Optional[date] = None
    warranty_end_date: Optional[date] = None
    warranty_details: Optional[str] = Field(None, max_length=2000)
    notes: Optional[str] = Field(None, max_length=4000)

    @field_validator("category_id", mode="before")
    @classmethod
    def blank_category_is_none(cls, v):
        return _blank_to_none(v)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready body containing only the fields the caller supplied."""
        return self.model_dump(mode="json", exclude_unset=True)


class AssetCreate(_AssetFields):
    """Create payload. name, location, condition_status and asset_status are required."""

    name: str = Field(..., min_length=1, max_length=200)
    location: Location
    condition_status: ConditionStatus
    asset_status: AssetStatus

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class AssetUpdate(_AssetFields):
    """Partial update payload. Omitted fields keep their stored values."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    location: Optional[Location] = None
    condition_status: Optional[ConditionStatus] = None
    asset_status: Optional[AssetStatus] = None

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("name", "location", "condition_status", "asset_status")
    @classmethod
    def required_columns_not_cleared(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be cleared")
        return v
