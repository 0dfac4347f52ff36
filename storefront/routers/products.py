from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from storefront.core import exceptions as service_exceptions
from storefront.core.dependencies import get_db
from storefront.schemas import (
    ActionResult,
    ProductCreate,
    ProductDetail,
    ProductFilters,
    ProductListResponse,
    ProductRead,
    ProductUpdate,
)
from storefront.schemas.catalog import MAX_ID
from storefront.services import ProductQueryService, ProductService
from storefront.services.product_service import serialize_product

from .errors import action_response, http_error

router = APIRouter(prefix="/products", tags=["products"])

ProductId = Annotated[int, Path(ge=1, le=MAX_ID)]


def get_product_filters(
    brand_id: Optional[str] = Query(default=None, alias="brandId"),
    price_range_to: Optional[str] = Query(default=None, alias="priceRangeTo"),
    gender: Optional[str] = Query(default=None),
    occasions: Optional[str] = Query(default=None),
    discount: Optional[str] = Query(default=None),
    category_id: Optional[str] = Query(default=None, alias="categoryId"),
) -> ProductFilters:
    try:
        return ProductFilters.from_query_params(
            {
                "brandId": brand_id,
                "priceRangeTo": price_range_to,
                "gender": gender,
                "occasions": occasions,
                "discount": discount,
                "categoryId": category_id,
            }
        )
    except service_exceptions.ValidationError as exc:
        raise http_error(exc) from exc


@router.get("", response_model=ProductListResponse)
def list_products(
    page: int = Query(default=1, ge=1),
    page_size: Optional[int] = Query(default=None, ge=1, alias="pageSize"),
    sort_by: str = Query(default="", alias="sortBy"),
    filters: ProductFilters = Depends(get_product_filters),
    db: Session = Depends(get_db),
):
    service = ProductQueryService(db)
    try:
        result = service.list_products(page_no=page, page_size=page_size, filters=filters, sort_by=sort_by)
    except service_exceptions.ValidationError as exc:
        raise http_error(exc) from exc
    return ProductListResponse(
        products=[
            ProductRead(**serialize_product(product, result.categories.get(product.id)))
            for product in result.products
        ],
        count=result.count,
        last_page=result.last_page,
        num_of_results_on_cur_page=result.num_of_results_on_cur_page,
        page=result.page,
        page_size=result.page_size,
    )


@router.get("/{product_id}", response_model=ProductDetail)
def get_product(product_id: ProductId, db: Session = Depends(get_db)):
    service = ProductService(db)
    try:
        item = service.get_product_detail(product_id)
    except service_exceptions.NotFoundError as exc:
        raise http_error(exc) from exc
    return ProductDetail(**item)


@router.post(
    "",
    response_model=ActionResult,
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    service = ProductService(db)
    result = service.add_product(payload, payload.category_ids)
    return action_response(result, success_status=status.HTTP_201_CREATED)


@router.put("/{product_id}", response_model=ActionResult, response_model_exclude_none=True)
def update_product(product_id: ProductId, payload: ProductUpdate, db: Session = Depends(get_db)):
    service = ProductService(db)
    return action_response(service.update_product(product_id, payload))


@router.delete("/{product_id}", response_model=ActionResult, response_model_exclude_none=True)
def delete_product(product_id: ProductId, db: Session = Depends(get_db)):
    service = ProductService(db)
    return action_response(service.delete_product(product_id))
