from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from configurator.core.constants import (
    EVENT_STOCK_LOW,
    MOVEMENT_TYPES,
    STOCK_ENTITY_RAW_MATERIAL,
    UNITS_OF_MEASURE,
)
from configurator.core.errors import ConfiguratorError, InsufficientStock
from configurator.core.quantities import require_non_negative, to_decimal
from configurator.models.raw_material import RawMaterial, StockMovement
from configurator.services.base import Service


class RawMaterialService(Service):
    def create_material(
        self,
        name: str,
        sku: str,
        *,
        unit_of_measure: str = "unit",
        cost_per_unit=Decimal("0"),
        stock_quantity=Decimal("0"),
        low_stock_threshold=Decimal("0"),
        description: Optional[str] = None,
        supplier_name: Optional[str] = None,
        lead_time_days: Optional[int] = None,
    ) -> RawMaterial:
        name = (name or "").strip()
        sku = (sku or "").strip()
        if not name or not sku:
            raise ConfiguratorError("Raw material name and SKU are required.")
        if unit_of_measure not in UNITS_OF_MEASURE:
            raise ConfiguratorError("Unknown unit of measure {}.".format(unit_of_measure))

        material = RawMaterial(
            name=name,
            sku=sku,
            description=description,
            unit_of_measure=unit_of_measure,
            cost_per_unit=require_non_negative("cost_per_unit", cost_per_unit),
            stock_quantity=require_non_negative("stock_quantity", stock_quantity),
            low_stock_threshold=require_non_negative("low_stock_threshold", low_stock_threshold),
            supplier_name=supplier_name,
            lead_time_days=lead_time_days,
        )
        self.db.add(material)
        self._commit("A raw material with SKU '{}' already exists.".format(sku))
        self.db.refresh(material)
        self.logger.info("Raw material %s (%s) created.", material.id, sku)
        return material

    def get_material(self, raw_material_id: int) -> RawMaterial:
        return self._get(RawMaterial, raw_material_id, "Raw material")

    def list_materials(self, *, active_only: bool = False) -> list[RawMaterial]:
        stmt = select(RawMaterial)
        if active_only:
            stmt = stmt.where(RawMaterial.is_active.is_(True))
        return list(self.db.execute(stmt.order_by(RawMaterial.name, RawMaterial.id)).scalars().all())

    def list_low_stock(self) -> list[RawMaterial]:
        return list(
            self.db.execute(
                select(RawMaterial)
                .where(
                    RawMaterial.is_active.is_(True),
                    RawMaterial.low_stock_threshold > 0,
                    RawMaterial.stock_quantity <= RawMaterial.low_stock_threshold,
                )
                .order_by(RawMaterial.stock_quantity, RawMaterial.id)
            )
            .scalars()
            .all()
        )

    def list_movements(self, raw_material_id: int) -> list[StockMovement]:
        self.get_material(raw_material_id)
        return list(
            self.db.execute(
                select(StockMovement)
                .where(
                    StockMovement.entity_type == STOCK_ENTITY_RAW_MATERIAL,
                    StockMovement.entity_id == raw_material_id,
                )
                .order_by(StockMovement.id)
            )
            .scalars()
            .all()
        )

    def apply_change(
        self,
        raw_material_id: int,
        change,
        movement_type: str,
        *,
        reference_type: Optional[str] = None,
        reference_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> StockMovement:
        """Change stock in the current transaction and record the movement.

        The update is a single conditional statement, so two writers cannot
        both take the last units. Raises ``InsufficientStock`` when the
        result would be negative; the caller owns commit and rollback.
        """
        if movement_type not in MOVEMENT_TYPES:
            raise ConfiguratorError("Unknown movement type {}.".format(movement_type))
        change = to_decimal(change)
        result = self.db.execute(
            update(RawMaterial)
            .where(
                RawMaterial.id == raw_material_id,
                RawMaterial.stock_quantity + change >= 0,
            )
            .values(stock_quantity=RawMaterial.stock_quantity + change)
            .execution_options(synchronize_session=False)
        )
        material = self.get_material(raw_material_id)
        self.db.refresh(material, ["stock_quantity"])
        if result.rowcount != 1:
            raise InsufficientStock(raw_material_id, -change, to_decimal(material.stock_quantity))

        after = to_decimal(material.stock_quantity)
        movement = StockMovement(
            entity_type=STOCK_ENTITY_RAW_MATERIAL,
            entity_id=raw_material_id,
            movement_type=movement_type,
            quantity_change=change,
            quantity_before=after - change,
            quantity_after=after,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes,
        )
        self.db.add(movement)
        return movement

    def adjust_stock(
        self,
        raw_material_id: int,
        change,
        *,
        movement_type: str = "adjustment",
        notes: Optional[str] = None,
    ) -> RawMaterial:
        try:
            self.apply_change(raw_material_id, change, movement_type, notes=notes)
            self.db.commit()
        except (ConfiguratorError, SQLAlchemyError):
            self.db.rollback()
            raise
        material = self.get_material(raw_material_id)
        self.logger.info(
            "Raw material %s stock %s by %s (%s).",
            raw_material_id,
            "raised" if to_decimal(change) >= 0 else "lowered",
            change,
            movement_type,
        )
        self.notify_if_low([material])
        return material

    def notify_if_low(self, materials) -> None:
        for material in materials:
            threshold = to_decimal(material.low_stock_threshold)
            stock = to_decimal(material.stock_quantity)
            if material.is_active and threshold > 0 and stock <= threshold:
                self.logger.warning(
                    "Raw material %s is low on stock (%s <= %s).", material.id, stock, threshold
                )
                self.events.publish(
                    EVENT_STOCK_LOW,
                    {
                        "raw_material_id": material.id,
                        "stock_quantity": str(stock),
                        "low_stock_threshold": str(threshold),
                    },
                )


__all__ = ["RawMaterialService"]
