from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GlobalAttributeCreate(BaseModel):
    name: str
    display_name: Optional[str] = None
    attribute_type: str = "select"
    category: Optional[str] = None
    description: Optional[str] = None
    position: int = 0
    is_active: bool = True


class MetadataFieldCreate(BaseModel):
    field_name: str
    display_name: Optional[str] = None
    field_type: str = "text"
    is_required: bool = False
    default_value: Optional[str] = None
    select_options: List[str] = Field(default_factory=list)
    help_text: Optional[str] = None
    position: int = 0


class MetadataFieldRead(BaseModel):
    id: int
    field_name: str
    display_name: str
    field_type: str
    is_required: bool
    default_value: Optional[str] = None
    select_options: List[str] = Field(default_factory=list)
    help_text: Optional[str] = None
    position: int

    model_config = ConfigDict(from_attributes=True)


class GlobalOptionCreate(BaseModel):
    value: str
    display_value: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    position: Optional[int] = None
    is_active: bool = True
    color_hex: Optional[str] = None
    image_url: Optional[str] = None


class GlobalOptionRead(BaseModel):
    id: int
    global_attribute_id: int
    value: str
    display_value: str
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="option_metadata")
    position: int
    is_active: bool
    color_hex: Optional[str] = None
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class GlobalOptionMetadataUpdate(BaseModel):
    metadata: Dict[str, Any] = Field(default_factory=dict)


class GlobalAttributeRead(BaseModel):
    id: int
    name: str
    display_name: str
    attribute_type: str
    category: Optional[str] = None
    description: Optional[str] = None
    position: int
    is_active: bool
    fields: List[MetadataFieldRead] = Field(default_factory=list)
    options: List[GlobalOptionRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class LinkCreate(BaseModel):
    global_attribute_id: int
    role_name: str
    role_display_name: Optional[str] = None
    position: int = 0
    affects_pricing: bool = False
    affects_shipping: bool = False
    price_modifier_field: Optional[str] = None
    weight_modifier_field: Optional[str] = None


class LinkRead(BaseModel):
    id: int
    product_id: int
    global_attribute_id: int
    role_name: str
    role_display_name: str
    position: int
    affects_pricing: bool
    affects_shipping: bool
    price_modifier_field: Optional[str] = None
    weight_modifier_field: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SelectionItem(BaseModel):
    global_option_id: int
    price_modifier: Optional[Decimal] = None
    weight_modifier_grams: Optional[int] = None
    position_override: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class SelectionReplace(BaseModel):
    selections: List[SelectionItem] = Field(default_factory=list)
