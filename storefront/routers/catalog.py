from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.core import exceptions as service_exceptions
from storefront.core.dependencies import get_db
from storefront.schemas import (
    BrandCreate,
    BrandRead,
    CategoryCreate,
    CategoryRead,
    FilterOptions,
    ProductFilters,
)
from storefront.services import CatalogService

from .errors import http_error
from .products import get_product_filters

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/categories", response_model=list[CategoryRead])
def list_categories(db: Session = Depends(get_db)):
    service = CatalogService(db)
    return [CategoryRead.model_validate(category) for category in service.list_categories()]


@router.post("/categories", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    service = CatalogService(db)
    try:
        category = service.create_category(name=payload.name)
    except service_exceptions.ConflictError as exc:
        raise http_error(exc) from exc
    return CategoryRead.model_validate(category)


@router.get("/brands", response_model=list[BrandRead])
def list_brands(db: Session = Depends(get_db)):
    service = CatalogService(db)
    return [BrandRead.model_validate(brand) for brand in service.list_brands()]


@router.post("/brands", response_model=BrandRead, status_code=status.HTTP_201_CREATED)
def create_brand(payload: BrandCreate, db: Session = Depends(get_db)):
    service = CatalogService(db)
    try:
        brand = service.create_brand(name=payload.name)
    except service_exceptions.ConflictError as exc:
        raise http_error(exc) from exc
    return BrandRead.model_validate(brand)


@router.get("/filter-options", response_model=FilterOptions)
def get_filter_options(
    filters: ProductFilters = Depends(get_product_filters),
    db: Session = Depends(get_db),
):
    service = CatalogService(db)
    return FilterOptions(**service.filter_options(filters))
