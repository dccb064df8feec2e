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


class ProductVariant(Base):
    __tablename__ = "product_variants"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    sku = Column(String, nullable=False, unique=True)
    # sha256 of the sorted option-ref tokens; one variant per option set
    identity_hash = Column(String(64), nullable=False)

    # NULL means computed from the product base values plus option modifiers
    price = Column(Numeric(12, 2))
    compare_at_price = Column(Numeric(12, 2))
    weight_grams = Column(Integer)

    stock_quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=0)
    barcode = Column(String)
    is_active = Column(Boolean, nullable=False, default=True)
    position = Column(Integer, nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    options = relationship(
        "ProductVariantOption",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    global_options = relationship(
        "ProductVariantGlobalOption",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("product_id", "identity_hash", name="uq_product_variants_identity"),
        Index("idx_product_variants_product_id", "product_id"),
        Index("idx_product_variants_is_active", "is_active"),
    )


class ProductVariantOption(Base):
    __tablename__ = "product_variant_options"

    id = Column(Integer, primary_key=True)
    variant_id = Column(
        Integer, ForeignKey("product_variants.id", ondelete="CASCADE"), nullable=False
    )
    attribute_id = Column(
        Integer, ForeignKey("product_attributes.id", ondelete="CASCADE"), nullable=False
    )
    option_id = Column(
        Integer, ForeignKey("product_attribute_options.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("variant_id", "attribute_id", name="uq_product_variant_options_axis"),
        Index("idx_product_variant_options_option_id", "option_id"),
    )


class ProductVariantGlobalOption(Base):
    __tablename__ = "product_variant_global_options"

    id = Column(Integer, primary_key=True)
    variant_id = Column(
        Integer, ForeignKey("product_variants.id", ondelete="CASCADE"), nullable=False
    )
    link_id = Column(
        Integer,
        ForeignKey("product_global_attribute_links.id", ondelete="CASCADE"),
        nullable=False,
    )
    global_option_id = Column(
        Integer, ForeignKey("global_attribute_options.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("variant_id", "link_id", name="uq_product_variant_global_options_link"),
        Index("idx_product_variant_global_options_option", "global_option_id"),
    )


__all__ = ["ProductVariant", "ProductVariantGlobalOption", "ProductVariantOption"]
