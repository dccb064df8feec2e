from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from configurator.config import get_settings
from configurator.core.quantities import round_quantity
from configurator.dependencies import get_db, require_auth
from configurator.schemas.bom import (
    BaselineEntryCreate,
    BaselineEntryRead,
    BaselineEntryUpdate,
    OptionEntryCreate,
    OptionEntryRead,
    OptionModifierCreate,
    OptionModifierRead,
    ProducibilityRead,
    ProductProducibilityRead,
    ResolvedBOMRead,
    ResolvedLine,
    VariantOverrideCreate,
    VariantOverrideRead,
)
from configurator.services.bom_service import BOMService

router = APIRouter(tags=["Bill of materials"])


def _producibility(variant_id: int, result) -> ProducibilityRead:
    return ProducibilityRead(
        variant_id=variant_id,
        status=result.status,
        units=result.units,
        limiting_material_id=result.limiting_material_id,
        missing_material_ids=list(result.missing_material_ids),
    )


# ------------------------------------------------------------------
# Layer 1
# ------------------------------------------------------------------


@router.get("/products/{product_id}/bom", response_model=List[BaselineEntryRead])
def list_baseline(product_id: int, db: Session = Depends(get_db)):
    return BOMService(db).list_baseline(product_id)


@router.post("/products/{product_id}/bom", response_model=BaselineEntryRead, status_code=201)
def add_baseline_entry(
    product_id: int,
    payload: BaselineEntryCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return BOMService(db).add_baseline_entry(
        product_id,
        payload.raw_material_id,
        payload.quantity,
        unit=payload.unit_of_measure,
        is_required=payload.is_required,
        notes=payload.notes,
    )


@router.put("/bom/{entry_id}", response_model=BaselineEntryRead)
def update_baseline_entry(
    entry_id: int,
    payload: BaselineEntryUpdate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return BOMService(db).update_baseline_entry(
        entry_id,
        payload.quantity,
        unit=payload.unit_of_measure,
        is_required=payload.is_required,
        notes=payload.notes,
    )


@router.delete("/bom/{entry_id}", status_code=204)
def delete_baseline_entry(entry_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    BOMService(db).delete_baseline_entry(entry_id)
    return Response(status_code=204)


# ------------------------------------------------------------------
# Layer 2a / 2b
# ------------------------------------------------------------------


@router.get("/options/{option_id}/bom", response_model=List[OptionEntryRead])
def list_option_entries(option_id: int, db: Session = Depends(get_db)):
    return BOMService(db).list_option_entries(option_id)


@router.post("/options/{option_id}/bom", response_model=OptionEntryRead, status_code=201)
def add_option_entry(
    option_id: int,
    payload: OptionEntryCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return BOMService(db).add_option_entry(
        option_id,
        payload.raw_material_id,
        payload.quantity,
        unit=payload.unit_of_measure,
        notes=payload.notes,
    )


@router.delete("/option-bom/{entry_id}", status_code=204)
def delete_option_entry(entry_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    BOMService(db).delete_option_entry(entry_id)
    return Response(status_code=204)


@router.get("/options/{option_id}/bom-modifiers", response_model=List[OptionModifierRead])
def list_option_modifiers(option_id: int, db: Session = Depends(get_db)):
    return BOMService(db).list_option_modifiers(option_id)


@router.post("/options/{option_id}/bom-modifiers", response_model=OptionModifierRead, status_code=201)
def add_option_modifier(
    option_id: int,
    payload: OptionModifierCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return BOMService(db).add_option_modifier(
        option_id,
        payload.product_bom_entry_id,
        payload.modifier_type,
        payload.modifier_value,
        notes=payload.notes,
    )


@router.delete("/bom-modifiers/{modifier_id}", status_code=204)
def delete_option_modifier(modifier_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    BOMService(db).delete_option_modifier(modifier_id)
    return Response(status_code=204)


# ------------------------------------------------------------------
# Layer 3 and resolution
# ------------------------------------------------------------------


@router.get("/variants/{variant_id}/bom-overrides", response_model=List[VariantOverrideRead])
def list_variant_overrides(variant_id: int, db: Session = Depends(get_db)):
    return BOMService(db).list_variant_overrides(variant_id)


@router.post("/variants/{variant_id}/bom-overrides", response_model=VariantOverrideRead, status_code=201)
def add_variant_override(
    variant_id: int,
    payload: VariantOverrideCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return BOMService(db).add_variant_override(
        variant_id,
        payload.override_type,
        payload.raw_material_id,
        replaces_material_id=payload.replaces_material_id,
        quantity=payload.quantity,
        unit=payload.unit_of_measure,
        notes=payload.notes,
    )


@router.delete("/bom-overrides/{override_id}", status_code=204)
def delete_variant_override(override_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    BOMService(db).delete_variant_override(override_id)
    return Response(status_code=204)


@router.get("/variants/{variant_id}/bom", response_model=ResolvedBOMRead)
def resolve_variant_bom(variant_id: int, db: Session = Depends(get_db)):
    places = get_settings().QUANTITY_DISPLAY_PLACES
    resolved = BOMService(db).resolve_variant_bom(variant_id)
    lines = [
        ResolvedLine(
            raw_material_id=material_id,
            quantity=round_quantity(resolved.quantities[material_id], places),
            unit_of_measure=resolved.units[material_id],
        )
        for material_id in sorted(resolved.quantities)
    ]
    return ResolvedBOMRead(variant_id=variant_id, lines=lines)


@router.get("/variants/{variant_id}/producibility", response_model=ProducibilityRead)
def variant_producibility(variant_id: int, db: Session = Depends(get_db)):
    return _producibility(variant_id, BOMService(db).compute_producibility(variant_id))


@router.get("/products/{product_id}/producibility", response_model=ProductProducibilityRead)
def product_producibility(product_id: int, db: Session = Depends(get_db)):
    report = BOMService(db).product_producibility(product_id)
    return ProductProducibilityRead(
        product_id=product_id,
        variants=[_producibility(variant.id, result) for variant, result in report],
    )


__all__ = ["router"]
