from storefront.models import Brand, Category, Comment, Review

API = "/api/v1"


def _create_references(session):
    shirts, shoes = Category(name="Shirts"), Category(name="Shoes")
    acme, globex = Brand(name="Acme"), Brand(name="Globex")
    session.add_all([shirts, shoes, acme, globex])
    session.commit()
    return shirts, shoes, acme, globex


def _payload(**overrides) -> dict:
    payload = {
        "name": "Canvas sneaker",
        "description": "Everyday sneaker",
        "oldPrice": "120.00",
        "discount": 10,
        "rating": "4.0",
        "colors": "white",
        "brands": [],
        "gender": "women",
        "occasions": ["casual"],
        "imageUrl": None,
        "categoryIds": [],
    }
    payload.update(overrides)
    return payload


def test_create_and_fetch_product(client, db_session):
    shirts, shoes, acme, globex = _create_references(db_session)

    response = client.post(
        f"{API}/products",
        json=_payload(brands=[globex.id, acme.id], categoryIds=[shoes.id, shirts.id]),
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Product added successfully"
    assert "error" not in body
    product_id = body["productId"]

    detail = client.get(f"{API}/products/{product_id}")
    assert detail.status_code == 200
    data = detail.json()
    assert data["brands"] == [globex.id, acme.id]
    assert data["price"] == "108.00"
    assert data["occasions"] == ["casual"]
    assert sorted(data["categories"]) == ["Shirts", "Shoes"]
    assert data["brandOptions"] == [
        {"value": globex.id, "label": "Globex"},
        {"value": acme.id, "label": "Acme"},
    ]


def test_create_with_unknown_category_returns_error_envelope(client):
    response = client.post(f"{API}/products", json=_payload(categoryIds=[404]))

    assert response.status_code == 409
    body = response.json()
    assert body["errorType"] == "ConstraintViolation"
    assert body["error"].startswith("Something went wrong, cannot add the product")
    assert "message" not in body


def test_create_rejects_invalid_form(client):
    response = client.post(f"{API}/products", json=_payload(gender="unisex", discount=150))

    assert response.status_code == 422


def test_list_products_with_filters_and_paging(client):
    for index, (gender, old_price) in enumerate(
        [("men", "100"), ("men", "450"), ("men", "900"), ("women", "200"), ("men", "300")]
    ):
        created = client.post(
            f"{API}/products",
            json=_payload(name=f"Item {index}", gender=gender, oldPrice=old_price, discount=0),
        )
        assert created.status_code == 201

    response = client.get(
        f"{API}/products",
        params={"priceRangeTo": "500", "gender": "men", "pageSize": "2", "page": "1", "sortBy": "price-asc"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 3
    assert data["lastPage"] == 2
    assert data["numOfResultsOnCurPage"] == 2
    assert [product["price"] for product in data["products"]] == ["100.00", "300.00"]

    second = client.get(
        f"{API}/products",
        params={"priceRangeTo": "500", "gender": "men", "pageSize": "2", "page": "2", "sortBy": "price-asc"},
    ).json()
    assert [product["price"] for product in second["products"]] == ["450.00"]


def test_list_products_ignores_cleared_widgets(client):
    client.post(f"{API}/products", json=_payload())

    response = client.get(
        f"{API}/products",
        params={"brandId": "", "gender": "", "occasions": "", "discount": "", "categoryId": ""},
    )

    assert response.status_code == 200
    assert response.json()["count"] == 1


def test_list_products_rejects_bad_filters(client):
    assert client.get(f"{API}/products", params={"discount": "15-5"}).status_code == 422
    assert client.get(f"{API}/products", params={"brandId": "1 OR 1=1"}).status_code == 422
    assert client.get(f"{API}/products", params={"sortBy": "secret-asc"}).status_code == 422
    assert client.get(f"{API}/products", params={"pageSize": "1000"}).status_code == 422


def test_update_product_replaces_fields_and_categories(client, db_session):
    shirts, shoes, _, _ = _create_references(db_session)
    product_id = client.post(f"{API}/products", json=_payload(categoryIds=[shirts.id])).json()["productId"]

    response = client.put(
        f"{API}/products/{product_id}",
        json=_payload(name="Canvas sneaker v2", discount=0, categoryIds=[shoes.id]),
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Product updated successfully"
    data = client.get(f"{API}/products/{product_id}").json()
    assert data["name"] == "Canvas sneaker v2"
    assert data["price"] == "120.00"
    assert data["categories"] == ["Shoes"]


def test_update_unknown_product_returns_404(client):
    response = client.put(f"{API}/products/999", json=_payload())

    assert response.status_code == 404
    assert response.json()["errorType"] == "NotFound"


def test_delete_product_cascades_and_then_404s(client, db_session):
    shirts, _, _, _ = _create_references(db_session)
    product_id = client.post(f"{API}/products", json=_payload(categoryIds=[shirts.id])).json()["productId"]
    db_session.add_all(
        [
            Review(product_id=product_id, rating=4, body="Comfy"),
            Comment(product_id=product_id, body="True to size?"),
        ]
    )
    db_session.commit()

    response = client.delete(f"{API}/products/{product_id}")

    assert response.status_code == 200
    assert response.json()["message"] == "Product deleted successfully"
    assert client.get(f"{API}/products/{product_id}").status_code == 404
    assert client.delete(f"{API}/products/{product_id}").status_code == 404


def test_request_id_is_echoed(client):
    response = client.get(f"{API}/products", headers={"X-Request-ID": "req-test-123"})

    assert response.headers["X-Request-ID"] == "req-test-123"


def test_out_of_range_integers_are_rejected(client):
    huge = 10**20

    assert client.get(f"{API}/products", params={"page": str(10**19)}).status_code == 422
    assert client.get(f"{API}/products", params={"categoryId": str(huge)}).status_code == 422
    assert client.get(f"{API}/products", params={"brandId": str(huge)}).status_code == 422
    assert client.get(f"{API}/products/{huge}").status_code == 422
    assert client.get(f"{API}/products/0").status_code == 422
    assert client.put(f"{API}/products/{huge}", json=_payload()).status_code == 422
    assert client.delete(f"{API}/products/{huge}").status_code == 422
    assert client.post(f"{API}/products", json=_payload(categoryIds=[huge])).status_code == 422
    assert client.post(f"{API}/products", json=_payload(brands=[huge])).status_code == 422
