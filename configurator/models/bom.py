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

from configurator.database.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class ProductBOMEntry(Base):
    """Layer 1: materials every variant of the product needs."""

    __tablename__ = "product_bom_entries"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    raw_material_id = Column(
        Integer, ForeignKey("raw_materials.id", ondelete="RESTRICT"), nullable=False
    )
    quantity = Column(Numeric(12, 4), nullable=False)
    unit_of_measure = Column(String(4), nullable=False, default="unit")
    is_required = Column(Boolean, nullable=False, default=True)
    notes = Column(String)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("product_id", "raw_material_id", name="uq_product_bom_entries_material"),
        Index("idx_product_bom_entries_product_id", "product_id"),
    )


class OptionBOMEntry(Base):
    """Layer 2a: extra materials an attribute option brings in."""

    __tablename__ = "attribute_option_bom_entries"

    id = Column(Integer, primary_key=True)
    option_id = Column(
        Integer, ForeignKey("product_attribute_options.id", ondelete="CASCADE"), nullable=False
    )
    raw_material_id = Column(
        Integer, ForeignKey("raw_materials.id", ondelete="RESTRICT"), nullable=False
    )
    quantity = Column(Numeric(12, 4), nullable=False)
    unit_of_measure = Column(String(4), nullable=False, default="unit")
    notes = Column(String)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("option_id", "raw_material_id", name="uq_option_bom_entries_material"),
        Index("idx_attribute_option_bom_entries_option_id", "option_id"),
    )


class OptionBOMModifier(Base):
    """Layer 2b: multiply/add/set on a Layer 1 entry when the option is selected."""

    __tablename__ = "attribute_option_bom_modifiers"

    id = Column(Integer, primary_key=True)
    option_id = Column(
        Integer, ForeignKey("product_attribute_options.id", ondelete="CASCADE"), nullable=False
    )
    product_bom_entry_id = Column(
        Integer, ForeignKey("product_bom_entries.id", ondelete="CASCADE"), nullable=False
    )
    modifier_type = Column(String(10), nullable=False)
    modifier_value = Column(Numeric(12, 4), nullable=False)
    notes = Column(String)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("option_id", "product_bom_entry_id", name="uq_option_bom_modifiers_entry"),
        Index("idx_attribute_option_bom_modifiers_option_id", "option_id"),
    )


class VariantBOMOverride(Base):
    """Layer 3: per-variant replace/add/remove/set_quantity, applied in id order."""

    __tablename__ = "variant_bom_overrides"

    id = Column(Integer, primary_key=True)
    variant_id = Column(
        Integer, ForeignKey("product_variants.id", ondelete="CASCADE"), nullable=False
    )
    raw_material_id = Column(
        Integer, ForeignKey("raw_materials.id", ondelete="RESTRICT"), nullable=False
    )
    override_type = Column(String(12), nullable=False)
    replaces_material_id = Column(Integer, ForeignKey("raw_materials.id", ondelete="RESTRICT"))
    quantity = Column(Numeric(12, 4))
    unit_of_measure = Column(String(4))
    notes = Column(String)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_variant_bom_overrides_variant_id", "variant_id"),
        Index("idx_variant_bom_overrides_variant_material", "variant_id", "raw_material_id"),
    )


__all__ = ["OptionBOMEntry", "OptionBOMModifier", "ProductBOMEntry", "VariantBOMOverride"]
