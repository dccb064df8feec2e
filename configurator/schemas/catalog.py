from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductCreate(BaseModel):
    name: str
    sku_prefix: Optional[str] = None
    base_price: Decimal = Decimal("0")
    base_weight_grams: int = 0


class ProductRead(BaseModel):
    id: int
    name: str
    sku_prefix: Optional[str] = None
    base_price: Decimal
    base_weight_grams: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AttributeCreate(BaseModel):
    name: str
    display_name: Optional[str] = None
    attribute_type: str = "select"
    position: Optional[int] = None
    affects_pricing: bool = False
    affects_shipping: bool = False


class OptionCreate(BaseModel):
    value: str
    display_value: Optional[str] = None
    price_modifier: Optional[Decimal] = None
    weight_modifier_grams: Optional[int] = None
    position: Optional[int] = None
    is_active: bool = True
    color_hex: Optional[str] = None
    image_url: Optional[str] = None


class OptionRead(BaseModel):
    id: int
    attribute_id: int
    value: str
    display_value: str
    price_modifier: Optional[Decimal] = None
    weight_modifier_grams: Optional[int] = None
    position: int
    is_active: bool
    color_hex: Optional[str] = None
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class OptionActiveUpdate(BaseModel):
    is_active: bool


class AttributeRead(BaseModel):
    id: int
    product_id: int
    name: str
    display_name: str
    attribute_type: str
    position: int
    affects_pricing: bool
    affects_shipping: bool
    options: List[OptionRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class AxisOptionRead(BaseModel):
    id: int
    value: str
    display_value: str
    position: int
    price_modifier: Optional[Decimal] = None
    weight_modifier: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class AxisRead(BaseModel):
    source: str
    axis_id: int
    key: str
    display_name: str
    position: int
    options: List[AxisOptionRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
