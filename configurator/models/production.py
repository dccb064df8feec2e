from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Date,
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


class ProductionBatch(Base):
    __tablename__ = "production_batches"

    id = Column(Integer, primary_key=True)
    batch_number = Column(String, nullable=False, unique=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    variant_id = Column(Integer, ForeignKey("product_variants.id"), nullable=False)

    planned_quantity = Column(Integer, nullable=False)
    actual_quantity = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="draft")
    scheduled_date = Column(Date)
    notes = Column(String)

    started_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    materials = relationship(
        "ProductionBatchMaterial",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ProductionBatchMaterial.raw_material_id",
    )

    __table_args__ = (
        Index("idx_production_batches_status", "status"),
        Index("idx_production_batches_product", "product_id"),
    )


class ProductionBatchMaterial(Base):
    """Snapshot of the resolved BOM for a batch; later rule edits do not touch it."""

    __tablename__ = "production_batch_materials"

    id = Column(Integer, primary_key=True)
    batch_id = Column(
        Integer, ForeignKey("production_batches.id", ondelete="CASCADE"), nullable=False
    )
    raw_material_id = Column(Integer, ForeignKey("raw_materials.id"), nullable=False)
    required_quantity = Column(Numeric(12, 4), nullable=False)
    consumed_quantity = Column(Numeric(12, 4), nullable=False, default=0)
    unit_of_measure = Column(String(4), nullable=False, default="unit")

    __table_args__ = (
        UniqueConstraint("batch_id", "raw_material_id", name="uq_production_batch_materials"),
    )


__all__ = ["ProductionBatch", "ProductionBatchMaterial"]
