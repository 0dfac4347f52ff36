"""Listing query for products: filter predicates, sorting and pagination.

The same predicate set is applied to the row query and the count query so the
pagination metadata always describes the rows that are actually returned.
"""

import logging
import math
from dataclasses import dataclass, field

from sqlalchemy import and_, exists, func, literal, or_
from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import ColumnElement

from storefront.core.config import get_settings
from storefront.core.exceptions import InvalidSortError, ValidationError
from storefront.models import Category, Product, ProductCategory
from storefront.models.product import LIST_SEPARATOR
from storefront.schemas.catalog import ProductFilters

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "price": Product.price,
    "old_price": Product.old_price,
    "discount": Product.discount,
    "rating": Product.rating,
    "name": Product.name,
    "id": Product.id,
    "created_at": Product.created_at,
}
SORT_DIRECTIONS = ("asc", "desc")
# Largest OFFSET a 64-bit database integer can carry.
MAX_OFFSET = 2**63 - 1


def find_in_set(token: str, column) -> ColumnElement[bool]:
    """True when ``token`` is one of the comma-delimited values stored in ``column``."""

    wrapped = literal(LIST_SEPARATOR) + func.coalesce(column, "") + literal(LIST_SEPARATOR)
    return wrapped.contains(f"{LIST_SEPARATOR}{token}{LIST_SEPARATOR}", autoescape=True)


def build_filter_predicates(filters: ProductFilters) -> list[ColumnElement[bool]]:
    predicates: list[ColumnElement[bool]] = []

    if filters.brand_ids:
        predicates.append(or_(*(find_in_set(str(brand_id), Product.brands) for brand_id in filters.brand_ids)))
    if filters.price_range_to is not None:
        predicates.append(Product.price <= filters.price_range_to)
    if filters.gender:
        predicates.append(find_in_set(filters.gender.value, Product.gender))
    if filters.occasions:
        predicates.append(or_(*(find_in_set(occasion.value, Product.occasion) for occasion in filters.occasions)))
    if filters.discount:
        predicates.append(
            and_(Product.discount >= filters.discount.min, Product.discount <= filters.discount.max)
        )
    if filters.category_ids:
        predicates.append(
            exists()
            .where(ProductCategory.product_id == Product.id)
            .where(ProductCategory.category_id.in_(filters.category_ids))
        )

    return predicates


def apply_product_filters(query: Query, filters: ProductFilters | None) -> Query:
    if filters is None:
        return query
    predicates = build_filter_predicates(filters)
    if predicates:
        query = query.filter(*predicates)
    return query


def resolve_sort(sort_by: str | None) -> list[ColumnElement]:
    """Turn ``"field-direction"`` into ORDER BY clauses, with ``id`` as the tie-breaker."""

    if not sort_by or not sort_by.strip():
        return [Product.id.asc()]

    field_name, _, direction = sort_by.strip().partition("-")
    direction = (direction or "asc").lower()
    column = SORTABLE_COLUMNS.get(field_name)
    if column is None:
        raise InvalidSortError(f"Cannot sort by {field_name!r}", field="sortBy")
    if direction not in SORT_DIRECTIONS:
        raise InvalidSortError(f"Unknown sort direction {direction!r}", field="sortBy")

    order = column.asc() if direction == "asc" else column.desc()
    if column is Product.id:
        return [order]
    return [order, Product.id.asc()]


@dataclass
class ProductPage:
    products: list[Product]
    count: int
    last_page: int
    num_of_results_on_cur_page: int
    page: int
    page_size: int
    categories: dict[int, list[str]] = field(default_factory=dict)


class ProductQueryService:
    def __init__(self, db: Session):
        self.db = db

    def list_products(
        self,
        page_no: int = 1,
        page_size: int | None = None,
        filters: ProductFilters | None = None,
        sort_by: str = "",
    ) -> ProductPage:
        settings = get_settings()
        if page_size is None:
            page_size = settings.DEFAULT_PAGE_SIZE
        if page_no < 1:
            raise ValidationError("page must be 1 or greater", field="page")
        if page_size < 1:
            raise ValidationError("pageSize must be 1 or greater", field="pageSize")
        if page_size > settings.MAX_PAGE_SIZE:
            raise ValidationError(f"pageSize must not exceed {settings.MAX_PAGE_SIZE}", field="pageSize")
        offset = (page_no - 1) * page_size
        if offset > MAX_OFFSET:
            raise ValidationError("page is out of range", field="page")

        order_by = resolve_sort(sort_by)

        count = apply_product_filters(self.db.query(func.count(Product.id)), filters).scalar()
        last_page = math.ceil(count / page_size)

        products = (
            apply_product_filters(self.db.query(Product), filters)
            .order_by(*order_by)
            .offset(offset)
            .limit(page_size)
            .all()
        )
        logger.debug(
            "Listed products page=%s size=%s count=%s returned=%s", page_no, page_size, count, len(products)
        )

        return ProductPage(
            products=products,
            count=count,
            last_page=last_page,
            num_of_results_on_cur_page=len(products),
            page=page_no,
            page_size=page_size,
            categories=self.get_categories_for_products([product.id for product in products]),
        )

    def get_categories_for_products(self, product_ids: list[int]) -> dict[int, list[str]]:
        """Category names for many products in one query, keyed by product id."""

        result: dict[int, list[str]] = {product_id: [] for product_id in product_ids}
        if not product_ids:
            return result
        rows = (
            self.db.query(ProductCategory.product_id, Category.name)
            .join(Category, Category.id == ProductCategory.category_id)
            .filter(ProductCategory.product_id.in_(product_ids))
            .order_by(ProductCategory.product_id, Category.name)
            .all()
        )
        for product_id, name in rows:
            result[product_id].append(name)
        return result
