"""
domains/assets/models/asset.py

Records read from the hosted store: assets, categories, and the read-only
child records shown on the asset detail view.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Enums
class Location(str, Enum):
    eastern_cape = "Eastern Cape"
    free_state = "Free State"
    gauteng = "Gauteng"
    kwazulu_natal = "KwaZulu-Natal"
    limpopo = "Limpopo"
    mpumalanga = "Mpumalanga"
    northern_cape = "Northern Cape"
    north_west = "North West"
    western_cape = "Western Cape"

    @property
    def label(self) -> str:
        return self.value


class ConditionStatus(str, Enum):
    excellent = "excellent"
    good = "good"
    fair = "fair"
    poor = "poor"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class AssetStatus(str, Enum):
    active = "active"
    in_repair = "in_repair"
    retired = "retired"
    disposed = "disposed"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class MaintenanceType(str, Enum):
    scheduled = "scheduled"
    repair = "repair"
    inspection = "inspection"
    cleaning = "cleaning"


class MaintenanceStatus(str, Enum):
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class DocumentType(str, Enum):
    photo = "photo"
    manual = "manual"
    receipt = "receipt"
    warranty = "warranty"
    other = "other"


UNCATEGORIZED = "Uncategorized"


# Models
class AssetCategory(BaseModel):
    """A named grouping assets may optionally belong to."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Asset(BaseModel):
    """
    A tracked inventory item as stored in the `assets` table.

    `category` is the embedded `asset_categories` row when the query asked for
    it. The reference is weak: a deleted category leaves `category_id` dangling
    and `category` empty, which displays as "Uncategorized".
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: Optional[str] = None
    category_id: Optional[str] = None
    serial_number: Optional[str] = None
    model: Optional[str] = None
    brand: Optional[str] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = Field(None, ge=0)
    supplier_vendor: Optional[str] = None
    warranty_start_date: Optional[date] = None
    warranty_end_date: Optional[date] = None
    warranty_details: Optional[str] = None
    location: Location
    condition_status: ConditionStatus
    asset_status: AssetStatus
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: str
    updated_at: str
    category: Optional[AssetCategory] = None

    @property
    def category_name(self) -> str:
        if self.category and self.category.name:
            return self.category.name
        return UNCATEGORIZED


class AssetAssignment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    asset_id: str
    assigned_to_name: str
    assigned_to_email: Optional[str] = None
    department: Optional[str] = None
    assignment_date: date
    return_date: Optional[date] = None
    notes: Optional[str] = None
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None


class AssetMaintenance(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    asset_id: str
    maintenance_type: MaintenanceType
    description: str
    scheduled_date: Optional[date] = None
    completed_date: Optional[date] = None
    cost: Optional[float] = None
    performed_by: Optional[str] = None
    notes: Optional[str] = None
    status: MaintenanceStatus = MaintenanceStatus.scheduled
    created_by: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None


class AssetDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    asset_id: str
    document_name: str
    document_type: DocumentType = DocumentType.other
    file_url: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: str


class AssetDetail(Asset):
    """An asset plus its related records, newest first."""

    assignments: List[AssetAssignment] = Field(default_factory=list)
    maintenance: List[AssetMaintenance] = Field(default_factory=list)
    documents: List[AssetDocument] = Field(default_factory=list)
