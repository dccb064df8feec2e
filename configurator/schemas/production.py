from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BatchCreate(BaseModel):
    variant_id: int
    planned_quantity: int = Field(gt=0)
    scheduled_date: Optional[date] = None
    notes: Optional[str] = None


class BatchComplete(BaseModel):
    actual_quantity: Optional[int] = Field(default=None, ge=0)


class BatchMaterialRead(BaseModel):
    raw_material_id: int
    required_quantity: Decimal
    consumed_quantity: Decimal
    unit_of_measure: str

    model_config = ConfigDict(from_attributes=True)


class BatchRead(BaseModel):
    id: int
    batch_number: str
    product_id: int
    variant_id: int
    planned_quantity: int
    actual_quantity: int
    status: str
    scheduled_date: Optional[date] = None
    notes: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    materials: List[BatchMaterialRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
