from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from configurator.core.axes import OptionSelection
from configurator.dependencies import get_db, require_auth
from configurator.schemas.global_attribute import (
    GlobalAttributeCreate,
    GlobalAttributeRead,
    GlobalOptionCreate,
    GlobalOptionMetadataUpdate,
    GlobalOptionRead,
    LinkCreate,
    LinkRead,
    MetadataFieldCreate,
    MetadataFieldRead,
    SelectionItem,
    SelectionReplace,
)
from configurator.services.global_attribute_service import GlobalAttributeService

router = APIRouter(tags=["Global attributes"])


@router.post("/global-attributes", response_model=GlobalAttributeRead, status_code=201)
def create_global_attribute(
    payload: GlobalAttributeCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return GlobalAttributeService(db).create_attribute(**payload.model_dump())


@router.get("/global-attributes/{global_attribute_id}", response_model=GlobalAttributeRead)
def get_global_attribute(global_attribute_id: int, db: Session = Depends(get_db)):
    return GlobalAttributeService(db).get_attribute(global_attribute_id)


@router.post(
    "/global-attributes/{global_attribute_id}/fields",
    response_model=MetadataFieldRead,
    status_code=201,
)
def add_metadata_field(
    global_attribute_id: int,
    payload: MetadataFieldCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return GlobalAttributeService(db).add_metadata_field(global_attribute_id, **payload.model_dump())


@router.post(
    "/global-attributes/{global_attribute_id}/options",
    response_model=GlobalOptionRead,
    status_code=201,
)
def add_global_option(
    global_attribute_id: int,
    payload: GlobalOptionCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return GlobalAttributeService(db).add_option(global_attribute_id, **payload.model_dump())


@router.put("/global-options/{option_id}/metadata", response_model=GlobalOptionRead)
def update_global_option_metadata(
    option_id: int,
    payload: GlobalOptionMetadataUpdate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return GlobalAttributeService(db).update_option_metadata(option_id, payload.metadata)


@router.post("/products/{product_id}/global-links", response_model=LinkRead, status_code=201)
def link_global_attribute(
    product_id: int,
    payload: LinkCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    data = payload.model_dump()
    return GlobalAttributeService(db).link_to_product(
        product_id, data.pop("global_attribute_id"), data.pop("role_name"), **data
    )


@router.delete("/global-links/{link_id}", status_code=204)
def delete_global_link(link_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    GlobalAttributeService(db).delete_link(link_id)
    return Response(status_code=204)


@router.get("/global-links/{link_id}/selections", response_model=List[SelectionItem])
def list_selections(link_id: int, db: Session = Depends(get_db)):
    service = GlobalAttributeService(db)
    service.get_link(link_id)
    return service.list_selections(link_id)


@router.put("/global-links/{link_id}/selections", response_model=List[SelectionItem])
def replace_selections(
    link_id: int,
    payload: SelectionReplace,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    selections = [
        OptionSelection(
            option_id=item.global_option_id,
            price_modifier=item.price_modifier,
            weight_modifier=item.weight_modifier_grams,
            position_override=item.position_override,
        )
        for item in payload.selections
    ]
    return GlobalAttributeService(db).set_selections(link_id, selections)


__all__ = ["router"]
