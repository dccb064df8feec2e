from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from configurator.dependencies import get_db, get_events, require_auth
from configurator.schemas.catalog import (
    AttributeCreate,
    AttributeRead,
    AxisRead,
    OptionActiveUpdate,
    OptionCreate,
    OptionRead,
    ProductCreate,
    ProductRead,
)
from configurator.schemas.variant import (
    GenerateVariantsResult,
    VariantDetail,
    VariantRead,
    VariantUpdate,
)
from configurator.services.axis_service import AxisService
from configurator.services.catalog_service import CatalogService
from configurator.services.variant_service import VariantService

router = APIRouter(tags=["Products"])


def _variant_detail(service: VariantService, variant) -> VariantDetail:
    base = VariantRead.model_validate(variant).model_dump()
    base["effective_price"] = service.effective_price(variant)
    base["effective_weight_grams"] = service.effective_weight(variant)
    return VariantDetail(**base)


@router.post("/products", response_model=ProductRead, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    return CatalogService(db).create_product(
        payload.name,
        sku_prefix=payload.sku_prefix,
        base_price=payload.base_price,
        base_weight_grams=payload.base_weight_grams,
    )


@router.get("/products/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return CatalogService(db).get_product(product_id)


@router.get("/products/{product_id}/attributes", response_model=List[AttributeRead])
def list_attributes(product_id: int, db: Session = Depends(get_db)):
    return CatalogService(db).list_attributes(product_id)


@router.post("/products/{product_id}/attributes", response_model=AttributeRead, status_code=201)
def create_attribute(
    product_id: int,
    payload: AttributeCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return CatalogService(db).create_attribute(product_id, **payload.model_dump())


@router.post("/attributes/{attribute_id}/options", response_model=OptionRead, status_code=201)
def add_option(
    attribute_id: int,
    payload: OptionCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return CatalogService(db).add_option(attribute_id, **payload.model_dump())


@router.patch("/options/{option_id}", response_model=OptionRead)
def set_option_active(
    option_id: int,
    payload: OptionActiveUpdate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return CatalogService(db).set_option_active(option_id, payload.is_active)


@router.get("/products/{product_id}/axes", response_model=List[AxisRead])
def list_axes(product_id: int, db: Session = Depends(get_db)):
    CatalogService(db).get_product(product_id)
    return AxisService(db).resolve(product_id)


@router.post("/products/{product_id}/variants/generate", response_model=GenerateVariantsResult)
def generate_variants(
    product_id: int,
    db: Session = Depends(get_db),
    events=Depends(get_events),
    _auth=Depends(require_auth),
):
    created = VariantService(db, events=events).generate_variants(product_id)
    return GenerateVariantsResult(
        product_id=product_id,
        created=len(created),
        variants=[VariantRead.model_validate(variant) for variant in created],
    )


@router.get("/products/{product_id}/variants", response_model=List[VariantRead])
def list_variants(product_id: int, active_only: bool = False, db: Session = Depends(get_db)):
    return VariantService(db).list_variants(product_id, active_only=active_only)


@router.get("/variants/{variant_id}", response_model=VariantDetail)
def get_variant(variant_id: int, db: Session = Depends(get_db)):
    service = VariantService(db)
    return _variant_detail(service, service.get_variant(variant_id))


@router.patch("/variants/{variant_id}", response_model=VariantDetail)
def update_variant(
    variant_id: int,
    payload: VariantUpdate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    service = VariantService(db)
    variant = service.update_variant(variant_id, **payload.model_dump(exclude_unset=True))
    return _variant_detail(service, variant)


__all__ = ["router"]
