import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from configurator.core.constants import (
    BATCH_CANCELLED,
    BATCH_COMPLETED,
    BATCH_DRAFT,
    BATCH_IN_PROGRESS,
    BATCH_STATUSES,
    EVENT_PRODUCTION_COMPLETED,
    STOCK_ENTITY_VARIANT,
)
from configurator.core.errors import ConfiguratorError, InvalidStatusTransition
from configurator.core.quantities import to_decimal
from configurator.models.production import ProductionBatch, ProductionBatchMaterial
from configurator.models.raw_material import RawMaterial, StockMovement
from configurator.models.variant import ProductVariant
from configurator.services.base import Service
from configurator.services.bom_service import BOMService
from configurator.services.raw_material_service import RawMaterialService

_BATCH_NUMBER_RE = re.compile(r"^PB-(\d+)$")

# status -> statuses it may move to
_TRANSITIONS = {
    BATCH_DRAFT: (BATCH_IN_PROGRESS, BATCH_CANCELLED),
    BATCH_IN_PROGRESS: (BATCH_COMPLETED, BATCH_CANCELLED),
    BATCH_COMPLETED: (),
    BATCH_CANCELLED: (),
}


class ProductionService(Service):
    def __init__(
        self,
        db,
        *,
        bom: Optional[BOMService] = None,
        materials: Optional[RawMaterialService] = None,
        **kwargs,
    ):
        super().__init__(db, **kwargs)
        self.bom = bom or BOMService(db, settings=self.settings, events=self.events)
        self.materials = materials or RawMaterialService(db, settings=self.settings, events=self.events)

    def create_batch(
        self,
        variant_id: int,
        planned_quantity: int,
        *,
        scheduled_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> ProductionBatch:
        """Open a draft batch with the variant's resolved BOM frozen into it."""
        variant = self._get(ProductVariant, variant_id, "Variant")
        if int(planned_quantity) <= 0:
            raise ConfiguratorError("Planned quantity must be positive.")
        resolved = self.bom.resolve_variant_bom(variant_id).scaled(int(planned_quantity))

        batch = ProductionBatch(
            batch_number=self._next_batch_number(),
            product_id=variant.product_id,
            variant_id=variant_id,
            planned_quantity=int(planned_quantity),
            actual_quantity=0,
            status=BATCH_DRAFT,
            scheduled_date=scheduled_date,
            notes=notes,
        )
        for material_id in sorted(resolved.quantities):
            batch.materials.append(
                ProductionBatchMaterial(
                    raw_material_id=material_id,
                    required_quantity=resolved.quantities[material_id],
                    consumed_quantity=Decimal("0"),
                    unit_of_measure=resolved.units[material_id],
                )
            )
        self.db.add(batch)
        self._commit("Batch number {} is already taken.".format(batch.batch_number))
        self.db.refresh(batch)
        self.logger.info(
            "Production batch %s created for variant %s (%s unit(s), %s material(s)).",
            batch.batch_number,
            variant_id,
            planned_quantity,
            len(batch.materials),
        )
        return batch

    def get_batch(self, batch_id: int) -> ProductionBatch:
        return self._get(ProductionBatch, batch_id, "Production batch")

    def list_batches(self, *, status: Optional[str] = None) -> list[ProductionBatch]:
        stmt = select(ProductionBatch)
        if status is not None:
            if status not in BATCH_STATUSES:
                raise ConfiguratorError("Unknown batch status {}.".format(status))
            stmt = stmt.where(ProductionBatch.status == status)
        return list(
            self.db.execute(stmt.order_by(ProductionBatch.created_at.desc(), ProductionBatch.id.desc()))
            .scalars()
            .all()
        )

    def start_batch(self, batch_id: int) -> ProductionBatch:
        batch = self.get_batch(batch_id)
        self._check_transition(batch, BATCH_IN_PROGRESS)
        batch.status = BATCH_IN_PROGRESS
        batch.started_at = datetime.now(timezone.utc)
        self.db.commit()
        self.logger.info("Production batch %s started.", batch.batch_number)
        return batch

    def cancel_batch(self, batch_id: int) -> ProductionBatch:
        batch = self.get_batch(batch_id)
        self._check_transition(batch, BATCH_CANCELLED)
        batch.status = BATCH_CANCELLED
        self.db.commit()
        self.logger.info("Production batch %s cancelled.", batch.batch_number)
        return batch

    def complete_batch(self, batch_id: int, actual_quantity: Optional[int] = None) -> ProductionBatch:
        """Consume the batch's materials and credit the produced units to the variant.

        Materials are consumed in proportion to ``actual_quantity`` over the
        planned quantity. Either every material is decremented or none is:
        a single short material raises ``InsufficientStock`` and rolls back.
        """
        batch = self.get_batch(batch_id)
        self._check_transition(batch, BATCH_COMPLETED)
        actual = batch.planned_quantity if actual_quantity is None else int(actual_quantity)
        if actual < 0:
            raise ConfiguratorError("Actual quantity must be non-negative.")
        ratio = Decimal(actual) / Decimal(batch.planned_quantity)

        try:
            for line in batch.materials:
                consumed = to_decimal(line.required_quantity) * ratio
                if consumed > 0:
                    self.materials.apply_change(
                        line.raw_material_id,
                        -consumed,
                        "production_consume",
                        reference_type="production_batch",
                        reference_id=batch.id,
                    )
                line.consumed_quantity = consumed
            self._credit_variant(batch, actual)
            batch.status = BATCH_COMPLETED
            batch.actual_quantity = actual
            batch.completed_at = datetime.now(timezone.utc)
            self.db.commit()
        except (ConfiguratorError, SQLAlchemyError):
            self.db.rollback()
            raise

        self.logger.info(
            "Production batch %s completed: %s of %s unit(s).",
            batch.batch_number,
            actual,
            batch.planned_quantity,
        )
        self.events.publish(
            EVENT_PRODUCTION_COMPLETED,
            {"batch_id": batch.id, "variant_id": batch.variant_id, "quantity": actual},
        )
        consumed_ids = [line.raw_material_id for line in batch.materials]
        if consumed_ids:
            self.materials.notify_if_low(
                self.db.execute(select(RawMaterial).where(RawMaterial.id.in_(consumed_ids))).scalars()
            )
        return batch

    def _credit_variant(self, batch: ProductionBatch, quantity: int) -> None:
        variant = self._get(ProductVariant, batch.variant_id, "Variant")
        before = variant.stock_quantity or 0
        variant.stock_quantity = before + quantity
        self.db.add(
            StockMovement(
                entity_type=STOCK_ENTITY_VARIANT,
                entity_id=variant.id,
                movement_type="production_output",
                quantity_change=quantity,
                quantity_before=before,
                quantity_after=before + quantity,
                reference_type="production_batch",
                reference_id=batch.id,
            )
        )

    def _check_transition(self, batch: ProductionBatch, target: str) -> None:
        if target not in _TRANSITIONS.get(batch.status, ()):
            raise InvalidStatusTransition(
                "Production batch {} cannot move from {} to {}.".format(
                    batch.batch_number, batch.status, target
                )
            )

    def _next_batch_number(self) -> str:
        highest = 0
        for number in self.db.execute(select(ProductionBatch.batch_number)).scalars():
            match = _BATCH_NUMBER_RE.match(number or "")
            if match:
                highest = max(highest, int(match.group(1)))
        return "PB-{:04d}".format(highest + 1)


__all__ = ["ProductionService"]
