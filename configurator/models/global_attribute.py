from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from configurator.database.base import Base


class GlobalAttribute(Base):
    __tablename__ = "global_attributes"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    display_name = Column(String, nullable=False)
    description = Column(String)
    attribute_type = Column(String(20), nullable=False, default="select")
    category = Column(String)
    position = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    fields = relationship(
        "GlobalAttributeMetadataField",
        cascade="all, delete-orphan",
        order_by="GlobalAttributeMetadataField.position",
    )
    options = relationship(
        "GlobalAttributeOption",
        cascade="all, delete-orphan",
        order_by="GlobalAttributeOption.position",
    )

    __table_args__ = (
        Index("idx_global_attributes_category", "category"),
    )


class GlobalAttributeMetadataField(Base):
    __tablename__ = "global_attribute_metadata_fields"

    id = Column(Integer, primary_key=True)
    global_attribute_id = Column(
        Integer, ForeignKey("global_attributes.id", ondelete="CASCADE"), nullable=False
    )
    field_name = Column(String, nullable=False)
    display_name = Column(String, nullable=False)
    field_type = Column(String(10), nullable=False, default="text")
    is_required = Column(Boolean, nullable=False, default=False)
    default_value = Column(String)
    select_options = Column(JSON, nullable=False, default=list)
    help_text = Column(String)
    position = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "global_attribute_id", "field_name", name="uq_global_attribute_fields_name"
        ),
    )


class GlobalAttributeOption(Base):
    __tablename__ = "global_attribute_options"

    id = Column(Integer, primary_key=True)
    global_attribute_id = Column(
        Integer, ForeignKey("global_attributes.id", ondelete="CASCADE"), nullable=False
    )
    value = Column(String, nullable=False)
    display_value = Column(String, nullable=False)
    color_hex = Column(String(9))
    image_url = Column(String)
    # "metadata" is reserved on declarative classes
    option_metadata = Column("metadata", JSON, nullable=False, default=dict)
    position = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("global_attribute_id", "value", name="uq_global_attribute_options_value"),
        Index("idx_global_attribute_options_attr", "global_attribute_id"),
    )


class ProductGlobalAttributeLink(Base):
    __tablename__ = "product_global_attribute_links"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    global_attribute_id = Column(
        Integer, ForeignKey("global_attributes.id", ondelete="CASCADE"), nullable=False
    )
    role_name = Column(String, nullable=False)
    role_display_name = Column(String, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    affects_pricing = Column(Boolean, nullable=False, default=False)
    affects_shipping = Column(Boolean, nullable=False, default=False)
    price_modifier_field = Column(String)
    weight_modifier_field = Column(String)

    global_attribute = relationship("GlobalAttribute")
    selections = relationship(
        "ProductGlobalOptionSelection",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint(
            "product_id", "global_attribute_id", "role_name", name="uq_product_global_links_role"
        ),
        Index("idx_product_global_attribute_links_product", "product_id"),
    )


class ProductGlobalOptionSelection(Base):
    __tablename__ = "product_global_option_selections"

    id = Column(Integer, primary_key=True)
    link_id = Column(
        Integer,
        ForeignKey("product_global_attribute_links.id", ondelete="CASCADE"),
        nullable=False,
    )
    global_option_id = Column(
        Integer, ForeignKey("global_attribute_options.id", ondelete="CASCADE"), nullable=False
    )
    price_modifier = Column(Numeric(12, 2))
    weight_modifier_grams = Column(Integer)
    position_override = Column(Integer)

    __table_args__ = (
        UniqueConstraint("link_id", "global_option_id", name="uq_product_global_selections"),
        Index("idx_product_global_option_selections_link", "link_id"),
    )


__all__ = [
    "GlobalAttribute",
    "GlobalAttributeMetadataField",
    "GlobalAttributeOption",
    "ProductGlobalAttributeLink",
    "ProductGlobalOptionSelection",
]
