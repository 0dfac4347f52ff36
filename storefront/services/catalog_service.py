import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.core.config import get_settings
from storefront.core import exceptions
from storefront.models import Brand, Category, Gender, Occasion
from storefront.schemas.catalog import DiscountRange, ProductFilters

logger = logging.getLogger(__name__)

DISCOUNT_BANDS = ("0-5", "6-10", "11-15")
NO_DISCOUNT_OPTION = {"value": "", "label": "None"}


def discount_label(value: str) -> str:
    return DiscountRange.parse(value).label


def discount_options() -> list[dict]:
    return [NO_DISCOUNT_OPTION] + [{"value": band, "label": discount_label(band)} for band in DISCOUNT_BANDS]


class CatalogService:
    def __init__(self, db: Session):
        self.db = db

    def list_categories(self) -> list[Category]:
        return self.db.query(Category).order_by(Category.name).all()

    def list_brands(self) -> list[Brand]:
        return self.db.query(Brand).order_by(Brand.name).all()

    def create_category(self, *, name: str) -> Category:
        return self._create(Category(name=name.strip()), "Category")

    def create_brand(self, *, name: str) -> Brand:
        return self._create(Brand(name=name.strip()), "Brand")

    def filter_options(self, filters: ProductFilters | None = None) -> dict:
        """Everything the filter panel needs, with the current selection resolved to labels."""

        settings = get_settings()
        filters = filters or ProductFilters()
        brands = self.list_brands()
        categories = self.list_categories()
        brand_names = {brand.id: brand.name for brand in brands}
        category_names = {category.id: category.name for category in categories}

        if filters.discount:
            selected_discount = {"value": filters.discount.to_query_value(), "label": filters.discount.label}
        else:
            selected_discount = NO_DISCOUNT_OPTION
        price_value = (
            filters.price_range_to if filters.price_range_to is not None else settings.PRICE_SLIDER_MAX
        )

        return {
            "brands": [{"value": brand.id, "label": brand.name} for brand in brands],
            "categories": [{"value": category.id, "label": category.name} for category in categories],
            "occasions": [{"value": occasion.value, "label": occasion.value} for occasion in Occasion],
            "genders": [{"value": "", "label": "None"}]
            + [{"value": gender.value, "label": gender.value.capitalize()} for gender in Gender],
            "discounts": discount_options(),
            "price_slider": {
                "min": settings.PRICE_SLIDER_MIN,
                "max": settings.PRICE_SLIDER_MAX,
                "step": settings.PRICE_SLIDER_STEP,
                "value": price_value,
            },
            "selected": {
                "brands": [
                    {"value": brand_id, "label": brand_names.get(brand_id)} for brand_id in filters.brand_ids
                ],
                "categories": [
                    {"value": category_id, "label": category_names.get(category_id)}
                    for category_id in filters.category_ids
                ],
                "occasions": [{"value": occasion.value, "label": occasion.value} for occasion in filters.occasions],
                "gender": filters.gender.value if filters.gender else "",
                "discount": selected_discount,
                "price_range_to": price_value,
            },
            "query_string": filters.to_query_string(),
        }

    def _create(self, instance, kind: str):
        name = instance.name
        self.db.add(instance)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise exceptions.ConflictError(f"{kind} {name!r} already exists") from exc
        self.db.refresh(instance)
        logger.info("%s %s created", kind, instance.id)
        return instance
