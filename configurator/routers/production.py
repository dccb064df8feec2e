from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from configurator.dependencies import get_db, get_events, require_auth
from configurator.schemas.production import BatchComplete, BatchCreate, BatchRead
from configurator.services.production_service import ProductionService

router = APIRouter(prefix="/production-batches", tags=["Production"])


@router.get("", response_model=List[BatchRead])
def list_batches(status: Optional[str] = None, db: Session = Depends(get_db)):
    return ProductionService(db).list_batches(status=status)


@router.post("", response_model=BatchRead, status_code=201)
def create_batch(payload: BatchCreate, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    return ProductionService(db).create_batch(
        payload.variant_id,
        payload.planned_quantity,
        scheduled_date=payload.scheduled_date,
        notes=payload.notes,
    )


@router.get("/{batch_id}", response_model=BatchRead)
def get_batch(batch_id: int, db: Session = Depends(get_db)):
    return ProductionService(db).get_batch(batch_id)


@router.post("/{batch_id}/start", response_model=BatchRead)
def start_batch(batch_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    return ProductionService(db).start_batch(batch_id)


@router.post("/{batch_id}/complete", response_model=BatchRead)
def complete_batch(
    batch_id: int,
    payload: BatchComplete,
    db: Session = Depends(get_db),
    events=Depends(get_events),
    _auth=Depends(require_auth),
):
    return ProductionService(db, events=events).complete_batch(batch_id, payload.actual_quantity)


@router.post("/{batch_id}/cancel", response_model=BatchRead)
def cancel_batch(batch_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    return ProductionService(db).cancel_batch(batch_id)


__all__ = ["router"]
