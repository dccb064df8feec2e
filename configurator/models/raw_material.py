from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, Numeric, String

from configurator.database.base import Base


class RawMaterial(Base):
    __tablename__ = "raw_materials"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    sku = Column(String, nullable=False, unique=True)
    description = Column(String)

    unit_of_measure = Column(String(4), nullable=False, default="unit")
    cost_per_unit = Column(Numeric(12, 4), nullable=False, default=0)
    stock_quantity = Column(Numeric(12, 4), nullable=False, default=0)
    low_stock_threshold = Column(Numeric(12, 4), nullable=False, default=0)

    supplier_name = Column(String)
    lead_time_days = Column(Integer)
    is_active = Column(Boolean, nullable=False, default=True)

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

    __table_args__ = (
        Index("idx_raw_materials_is_active", "is_active"),
    )


class StockMovement(Base):
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True)
    entity_type = Column(String(20), nullable=False)
    entity_id = Column(Integer, nullable=False)
    movement_type = Column(String(30), nullable=False)

    quantity_change = Column(Numeric(12, 4), nullable=False)
    quantity_before = Column(Numeric(12, 4), nullable=False)
    quantity_after = Column(Numeric(12, 4), nullable=False)

    reference_type = Column(String(30))
    reference_id = Column(Integer)
    notes = Column(String)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_stock_movements_entity", "entity_type", "entity_id"),
        Index("idx_stock_movements_created_at", "created_at"),
    )


__all__ = ["RawMaterial", "StockMovement"]
