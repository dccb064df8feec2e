from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from configurator.dependencies import get_db, get_events, require_auth
from configurator.schemas.raw_material import (
    RawMaterialCreate,
    RawMaterialRead,
    StockAdjustment,
    StockMovementRead,
)
from configurator.services.raw_material_service import RawMaterialService

router = APIRouter(prefix="/raw-materials", tags=["Raw materials"])


@router.get("", response_model=List[RawMaterialRead])
def list_materials(active_only: bool = False, db: Session = Depends(get_db)):
    return RawMaterialService(db).list_materials(active_only=active_only)


@router.get("/low-stock", response_model=List[RawMaterialRead])
def list_low_stock(db: Session = Depends(get_db)):
    return RawMaterialService(db).list_low_stock()


@router.post("", response_model=RawMaterialRead, status_code=201)
def create_material(payload: RawMaterialCreate, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    data = payload.model_dump()
    return RawMaterialService(db).create_material(data.pop("name"), data.pop("sku"), **data)


@router.get("/{raw_material_id}", response_model=RawMaterialRead)
def get_material(raw_material_id: int, db: Session = Depends(get_db)):
    return RawMaterialService(db).get_material(raw_material_id)


@router.post("/{raw_material_id}/stock", response_model=RawMaterialRead)
def adjust_stock(
    raw_material_id: int,
    payload: StockAdjustment,
    db: Session = Depends(get_db),
    events=Depends(get_events),
    _auth=Depends(require_auth),
):
    return RawMaterialService(db, events=events).adjust_stock(
        raw_material_id,
        payload.change,
        movement_type=payload.movement_type,
        notes=payload.notes,
    )


@router.get("/{raw_material_id}/movements", response_model=List[StockMovementRead])
def list_movements(raw_material_id: int, db: Session = Depends(get_db)):
    return RawMaterialService(db).list_movements(raw_material_id)


__all__ = ["router"]
