from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from storefront.core.exceptions import NotFoundError
from storefront.models import Brand, Category, Comment, Product, ProductCategory, Review
from storefront.schemas import ProductCreate, ProductUpdate
from storefront.services import ProductService
from storefront.services.product_service import calculate_price


def _form(**overrides) -> dict:
    data = {
        "name": "Linen shirt",
        "description": "Breathable summer shirt",
        "old_price": Decimal("200.00"),
        "discount": 10,
        "rating": Decimal("4.5"),
        "colors": "white, sand",
        "brands": [],
        "gender": "men",
        "occasions": ["casual", "travel"],
        "image_url": "https://cdn.example.com/linen.jpg",
        "category_ids": [],
    }
    data.update(overrides)
    return data


def _categories(session, *names) -> list[Category]:
    categories = [Category(name=name) for name in names]
    session.add_all(categories)
    session.commit()
    return categories


def _link_count(session, product_id: int) -> int:
    return session.execute(
        select(func.count()).select_from(ProductCategory).where(ProductCategory.product_id == product_id)
    ).scalar_one()


@pytest.mark.parametrize(
    "old_price, discount, expected",
    [("200", 10, "180.00"), ("99.99", 0, "99.99"), ("100", 100, "0.00"), ("19.99", 15, "16.99")],
)
def test_calculate_price(old_price, discount, expected):
    assert calculate_price(Decimal(old_price), discount) == Decimal(expected)


def test_add_product_round_trips_brands_and_categories(db_session):
    shirts, summer = _categories(db_session, "Shirts", "Summer")
    brand_two, brand_one = Brand(name="Second"), Brand(name="First")
    db_session.add_all([brand_two, brand_one])
    db_session.commit()
    service = ProductService(db_session)

    result = service.add_product(
        ProductCreate(**_form(brands=[brand_two.id, brand_one.id])), [summer.id, shirts.id]
    )

    assert result.ok
    assert result.message == "Product added successfully"
    assert result.error is None

    db_session.expire_all()
    product = service.get_product(result.product_id)
    assert product.brand_ids == [brand_two.id, brand_one.id]
    assert product.price == Decimal("180.00")
    assert product.occasions == ["casual", "travel"]
    assert {category.id for category in service.get_product_categories(product.id)} == {shirts.id, summer.id}


def test_add_product_with_unknown_category_rolls_back(db_session):
    service = ProductService(db_session)

    result = service.add_product(ProductCreate(**_form()), [999])

    assert not result.ok
    assert result.message is None
    assert result.error_type == "ConstraintViolation"
    assert result.error.startswith("Something went wrong, cannot add the product")
    assert db_session.execute(select(func.count(Product.id))).scalar_one() == 0


def test_update_replaces_categories(db_session):
    shirts, summer, sale = _categories(db_session, "Shirts", "Summer", "Sale")
    service = ProductService(db_session)
    created = service.add_product(ProductCreate(**_form()), [shirts.id, summer.id])

    result = service.update_product(
        created.product_id,
        ProductUpdate(**_form(name="Linen shirt v2", old_price=Decimal("300"), discount=0, category_ids=[sale.id])),
    )

    assert result.ok
    assert result.message == "Product updated successfully"
    db_session.expire_all()
    product = service.get_product(created.product_id)
    assert product.name == "Linen shirt v2"
    assert product.price == Decimal("300.00")
    assert [category.id for category in service.get_product_categories(product.id)] == [sale.id]


def test_update_with_same_categories_is_idempotent(db_session):
    shirts, summer = _categories(db_session, "Shirts", "Summer")
    service = ProductService(db_session)
    created = service.add_product(ProductCreate(**_form()), [shirts.id, summer.id])
    form = ProductUpdate(**_form(category_ids=[shirts.id, summer.id]))

    first = service.update_product(created.product_id, form)
    second = service.update_product(created.product_id, form)

    assert first.ok and second.ok
    assert {category.id for category in service.get_product_categories(created.product_id)} == {
        shirts.id,
        summer.id,
    }
    assert _link_count(db_session, created.product_id) == 2


def test_update_missing_product_reports_not_found(db_session):
    result = ProductService(db_session).update_product(4242, ProductUpdate(**_form()))

    assert not result.ok
    assert result.error_type == "NotFound"
    assert "cannot update the product" in result.error


def test_delete_removes_product_and_dependents(db_session):
    (shirts,) = _categories(db_session, "Shirts")
    service = ProductService(db_session)
    created = service.add_product(ProductCreate(**_form()), [shirts.id])
    db_session.add_all(
        [
            Review(product_id=created.product_id, author="ann", rating=5, body="Great"),
            Comment(product_id=created.product_id, author="bob", body="Does it shrink?"),
        ]
    )
    db_session.commit()

    result = service.delete_product(created.product_id)

    assert result.ok
    assert result.message == "Product deleted successfully"
    assert _link_count(db_session, created.product_id) == 0
    assert db_session.execute(select(func.count(Review.id))).scalar_one() == 0
    assert db_session.execute(select(func.count(Comment.id))).scalar_one() == 0
    assert db_session.get(Category, shirts.id) is not None
    with pytest.raises(NotFoundError):
        service.get_product(created.product_id)


def test_delete_missing_product_reports_not_found(db_session):
    result = ProductService(db_session).delete_product(31337)

    assert not result.ok
    assert result.error_type == "NotFound"


def test_delete_failure_rolls_back_everything(db_session, monkeypatch):
    (shirts,) = _categories(db_session, "Shirts")
    service = ProductService(db_session)
    created = service.add_product(ProductCreate(**_form()), [shirts.id])
    db_session.add(Comment(product_id=created.product_id, body="Hello"))
    db_session.commit()

    original_execute = db_session.execute

    def _failing_execute(statement, *args, **kwargs):
        if getattr(getattr(statement, "table", None), "name", None) == Product.__tablename__:
            raise OperationalError("DELETE FROM products", {}, Exception("connection lost"))
        return original_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db_session, "execute", _failing_execute)
    result = service.delete_product(created.product_id)
    monkeypatch.undo()

    assert not result.ok
    assert result.error_type == "ConnectivityError"
    assert db_session.execute(select(func.count(Comment.id))).scalar_one() == 1
    assert _link_count(db_session, created.product_id) == 1
    assert service.get_product(created.product_id).id == created.product_id


def test_map_brand_ids_to_names_is_batched_and_ordered(db_session):
    zeta, alpha = Brand(name="Zeta"), Brand(name="Alpha")
    db_session.add_all([zeta, alpha])
    db_session.commit()

    names = ProductService(db_session).map_brand_ids_to_names([zeta.id, 999, alpha.id])

    assert list(names.items()) == [(zeta.id, "Zeta"), (999, None), (alpha.id, "Alpha")]


def test_product_detail_resolves_brand_and_category_options(db_session):
    (shirts,) = _categories(db_session, "Shirts")
    acme = Brand(name="Acme")
    db_session.add(acme)
    db_session.commit()
    service = ProductService(db_session)
    created = service.add_product(ProductCreate(**_form(brands=[acme.id])), [shirts.id])

    detail = service.get_product_detail(created.product_id)

    assert detail["brand_options"] == [{"value": acme.id, "label": "Acme"}]
    assert detail["category_options"] == [{"value": shirts.id, "label": "Shirts"}]
    assert detail["categories"] == ["Shirts"]
