import logging
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core import exceptions
from storefront.models import Brand, Category, Comment, Product, ProductCategory, Review
from storefront.schemas.catalog import ActionResult, ProductForm

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def calculate_price(old_price: Decimal, discount: int) -> Decimal:
    """Price after applying a percentage discount, rounded to cents."""

    price = Decimal(old_price) - Decimal(old_price) * Decimal(discount) / Decimal(100)
    return price.quantize(CENT, rounding=ROUND_HALF_UP)


class ProductService:
    """Product write path plus the lookups the edit form needs.

    Mutations always answer with an ``ActionResult`` envelope. Lookups raise.
    """

    def __init__(self, db: Session):
        self.db = db

    def add_product(self, product_data: ProductForm, category_ids: list[int] | None = None) -> ActionResult:
        if category_ids is None:
            category_ids = product_data.category_ids
        try:
            product = Product()
            self._apply_form(product, product_data)
            self.db.add(product)
            self.db.flush()
            self._insert_category_links(product.id, category_ids)
            self.db.commit()
        except Exception as exc:
            return self._failure("add", exc)

        logger.info("Product %s added with categories %s", product.id, list(category_ids))
        return ActionResult.success("Product added successfully", product_id=product.id)

    def update_product(self, product_id: int, product_data: ProductForm) -> ActionResult:
        try:
            product = self.get_product(product_id)
            self._apply_form(product, product_data)
            self.db.query(ProductCategory).filter(ProductCategory.product_id == product_id).delete()
            self._insert_category_links(product_id, product_data.category_ids)
            self.db.commit()
        except Exception as exc:
            return self._failure("update", exc)

        logger.info("Product %s updated with categories %s", product_id, product_data.category_ids)
        return ActionResult.success("Product updated successfully", product_id=product_id)

    def delete_product(self, product_id: int) -> ActionResult:
        """Remove the product and everything that references it in a single transaction."""

        try:
            self.get_product(product_id)
            for model in (Comment, Review, ProductCategory):
                self.db.query(model).filter(model.product_id == product_id).delete()
            self.db.query(Product).filter(Product.id == product_id).delete()
            self.db.commit()
        except Exception as exc:
            return self._failure("delete", exc)

        logger.info("Product %s deleted", product_id)
        return ActionResult.success("Product deleted successfully", product_id=product_id)

    def get_product(self, product_id: int) -> Product:
        product = self.db.get(Product, product_id)
        if product is None:
            raise exceptions.NotFoundError("Product not found")
        return product

    def get_product_categories(self, product_id: int) -> list[Category]:
        return (
            self.db.query(Category)
            .join(ProductCategory, ProductCategory.category_id == Category.id)
            .filter(ProductCategory.product_id == product_id)
            .order_by(Category.name)
            .all()
        )

    def map_brand_ids_to_names(self, brand_ids: list[int]) -> dict[int, str | None]:
        """Resolve brand names in one query; unknown ids map to None."""

        if not brand_ids:
            return {}
        rows = self.db.query(Brand.id, Brand.name).filter(Brand.id.in_(set(brand_ids))).all()
        names = {brand_id: name for brand_id, name in rows}
        return {brand_id: names.get(brand_id) for brand_id in brand_ids}

    def get_product_detail(self, product_id: int) -> dict:
        product = self.get_product(product_id)
        categories = self.get_product_categories(product_id)
        brand_names = self.map_brand_ids_to_names(product.brand_ids)
        item = serialize_product(product, [category.name for category in categories])
        item["brand_options"] = [{"value": brand_id, "label": name} for brand_id, name in brand_names.items()]
        item["category_options"] = [{"value": category.id, "label": category.name} for category in categories]
        return item

    def _apply_form(self, product: Product, data: ProductForm) -> None:
        product.name = data.name
        product.description = data.description
        product.old_price = data.old_price
        product.discount = data.discount
        product.price = calculate_price(data.old_price, data.discount)
        product.rating = data.rating
        product.colors = data.colors
        product.brand_ids = data.brands
        product.gender = data.gender.value
        product.occasions = [occasion.value for occasion in data.occasions]
        product.image_url = data.image_url

    def _insert_category_links(self, product_id: int, category_ids: list[int]) -> None:
        if not category_ids:
            return
        rows = self.db.query(Category.id).filter(Category.id.in_(category_ids)).all()
        known = {category_id for (category_id,) in rows}
        missing = [category_id for category_id in category_ids if category_id not in known]
        if missing:
            raise exceptions.ConstraintViolationError(f"Unknown category ids: {missing}")
        self.db.add_all(
            ProductCategory(product_id=product_id, category_id=category_id) for category_id in category_ids
        )
        self.db.flush()

    def _failure(self, verb: str, exc: Exception) -> ActionResult:
        self.db.rollback()
        error = exc
        if isinstance(exc, SQLAlchemyError):
            error = exceptions.classify_db_error(exc) or exc

        if isinstance(error, exceptions.ServiceError):
            logger.warning("Cannot %s product: %s", verb, error)
            return ActionResult.failure(
                f"Something went wrong, cannot {verb} the product: {error}", error.error_type
            )

        logger.exception("Unexpected failure while trying to %s product", verb)
        return ActionResult.failure(
            f"Something went wrong, cannot {verb} the product", exceptions.ServiceError.error_type
        )


def serialize_product(product: Product, categories: list[str] | None = None) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description or "",
        "old_price": product.old_price,
        "discount": product.discount,
        "price": product.price,
        "rating": product.rating,
        "colors": product.colors or "",
        "brands": product.brand_ids,
        "gender": product.gender,
        "occasions": product.occasions,
        "image_url": product.image_url,
        "categories": categories or [],
    }
