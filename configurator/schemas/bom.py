from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BaselineEntryCreate(BaseModel):
    raw_material_id: int
    quantity: Decimal
    unit_of_measure: Optional[str] = None
    is_required: bool = True
    notes: Optional[str] = None


class BaselineEntryUpdate(BaseModel):
    quantity: Decimal
    unit_of_measure: Optional[str] = None
    is_required: Optional[bool] = None
    notes: Optional[str] = None


class BaselineEntryRead(BaseModel):
    id: int
    product_id: int
    raw_material_id: int
    quantity: Decimal
    unit_of_measure: str
    is_required: bool
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class OptionEntryCreate(BaseModel):
    raw_material_id: int
    quantity: Decimal
    unit_of_measure: Optional[str] = None
    notes: Optional[str] = None


class OptionEntryRead(BaseModel):
    id: int
    option_id: int
    raw_material_id: int
    quantity: Decimal
    unit_of_measure: str
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class OptionModifierCreate(BaseModel):
    product_bom_entry_id: int
    modifier_type: str
    modifier_value: Decimal
    notes: Optional[str] = None


class OptionModifierRead(BaseModel):
    id: int
    option_id: int
    product_bom_entry_id: int
    modifier_type: str
    modifier_value: Decimal
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class VariantOverrideCreate(BaseModel):
    override_type: str
    raw_material_id: int
    replaces_material_id: Optional[int] = None
    quantity: Optional[Decimal] = None
    unit_of_measure: Optional[str] = None
    notes: Optional[str] = None


class VariantOverrideRead(BaseModel):
    id: int
    variant_id: int
    override_type: str
    raw_material_id: int
    replaces_material_id: Optional[int] = None
    quantity: Optional[Decimal] = None
    unit_of_measure: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ResolvedLine(BaseModel):
    raw_material_id: int
    quantity: Decimal
    unit_of_measure: str


class ResolvedBOMRead(BaseModel):
    variant_id: int
    lines: List[ResolvedLine] = Field(default_factory=list)


class ProducibilityRead(BaseModel):
    variant_id: int
    status: str
    units: Optional[int] = None
    limiting_material_id: Optional[int] = None
    missing_material_ids: List[int] = Field(default_factory=list)


class ProductProducibilityRead(BaseModel):
    product_id: int
    variants: List[ProducibilityRead] = Field(default_factory=list)
