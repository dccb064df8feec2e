from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, Numeric, String

from configurator.database.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    sku_prefix = Column(String)

    base_price = Column(Numeric(12, 2), nullable=False, default=0)
    base_weight_grams = Column(Integer, nullable=False, default=0)

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


__all__ = ["Product"]
