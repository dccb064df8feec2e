from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class RawMaterialCreate(BaseModel):
    name: str
    sku: str
    unit_of_measure: str = "unit"
    cost_per_unit: Decimal = Decimal("0")
    stock_quantity: Decimal = Decimal("0")
    low_stock_threshold: Decimal = Decimal("0")
    description: Optional[str] = None
    supplier_name: Optional[str] = None
    lead_time_days: Optional[int] = None


class RawMaterialRead(BaseModel):
    id: int
    name: str
    sku: str
    unit_of_measure: str
    cost_per_unit: Decimal
    stock_quantity: Decimal
    low_stock_threshold: Decimal
    description: Optional[str] = None
    supplier_name: Optional[str] = None
    lead_time_days: Optional[int] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class StockAdjustment(BaseModel):
    change: Decimal
    movement_type: str = "adjustment"
    notes: Optional[str] = None


class StockMovementRead(BaseModel):
    id: int
    entity_type: str
    entity_id: int
    movement_type: str
    quantity_change: Decimal
    quantity_before: Decimal
    quantity_after: Decimal
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
