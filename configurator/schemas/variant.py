from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class VariantOptionRead(BaseModel):
    attribute_id: int
    option_id: int

    model_config = ConfigDict(from_attributes=True)


class VariantGlobalOptionRead(BaseModel):
    link_id: int
    global_option_id: int

    model_config = ConfigDict(from_attributes=True)


class VariantRead(BaseModel):
    id: int
    product_id: int
    sku: str
    price: Optional[Decimal] = None
    compare_at_price: Optional[Decimal] = None
    weight_grams: Optional[int] = None
    stock_quantity: int
    low_stock_threshold: int
    barcode: Optional[str] = None
    is_active: bool
    position: int
    created_at: datetime
    options: List[VariantOptionRead] = Field(default_factory=list)
    global_options: List[VariantGlobalOptionRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class VariantDetail(VariantRead):
    effective_price: Decimal
    effective_weight_grams: int


class VariantUpdate(BaseModel):
    price: Optional[Decimal] = None
    compare_at_price: Optional[Decimal] = None
    weight_grams: Optional[int] = None
    low_stock_threshold: Optional[int] = None
    barcode: Optional[str] = None
    is_active: Optional[bool] = None


class GenerateVariantsResult(BaseModel):
    product_id: int
    created: int
    variants: List[VariantRead] = Field(default_factory=list)
