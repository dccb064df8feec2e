from datetime import datetime, timezone

from sqlalchemy import (
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


class ProductAttribute(Base):
    __tablename__ = "product_attributes"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    name = Column(String, nullable=False)
    display_name = Column(String, nullable=False)
    attribute_type = Column(String(20), nullable=False, default="select")
    position = Column(Integer, nullable=False, default=0)
    affects_pricing = Column(Boolean, nullable=False, default=False)
    affects_shipping = Column(Boolean, nullable=False, default=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    options = relationship(
        "ProductAttributeOption",
        back_populates="attribute",
        cascade="all, delete-orphan",
        order_by="ProductAttributeOption.position",
    )

    __table_args__ = (
        UniqueConstraint("product_id", "name", name="uq_product_attributes_product_name"),
        Index("idx_product_attributes_product_id", "product_id"),
    )


class ProductAttributeOption(Base):
    __tablename__ = "product_attribute_options"

    id = Column(Integer, primary_key=True)
    attribute_id = Column(
        Integer, ForeignKey("product_attributes.id", ondelete="CASCADE"), nullable=False
    )

    value = Column(String, nullable=False)
    display_value = Column(String, nullable=False)
    color_hex = Column(String(9))
    image_url = Column(String)
    price_modifier = Column(Numeric(12, 2))
    weight_modifier_grams = Column(Integer)
    position = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    attribute = relationship("ProductAttribute", back_populates="options")

    __table_args__ = (
        UniqueConstraint("attribute_id", "value", name="uq_product_attribute_options_value"),
        Index("idx_product_attribute_options_attribute_id", "attribute_id"),
    )


__all__ = ["ProductAttribute", "ProductAttributeOption"]
