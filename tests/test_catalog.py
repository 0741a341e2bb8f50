# tests/test_catalog.py
from decimal import Decimal

import pytest

from conftest import auth_headers, stock_of


@pytest.fixture
def admin(make_user):
    return make_user(role="ADMIN")


def product_body(category, **overrides):
    body = {
        "name": "Whole Milk 1L",
        "sku": "milk-1l",
        "price": "1.49",
        "categoryId": str(category.id),
        "stock": 25,
    }
    body.update(overrides)
    return body


def test_admin_creates_product_with_stock(client, session, admin, category):
    resp = client.post(
        "/api/products", json=product_body(category), headers=auth_headers(admin)
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["sku"] == "MILK-1L"
    assert body["stock"] == 25
    assert body["category"]["name"] == "Dairy"
    assert Decimal(body["price"]) == Decimal("1.49")


def test_duplicate_sku_is_rejected(client, admin, category):
    client.post("/api/products", json=product_body(category), headers=auth_headers(admin))

    resp = client.post(
        "/api/products",
        json=product_body(category, sku="MILK-1L", name="Other milk"),
        headers=auth_headers(admin),
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Product with this SKU already exists"


@pytest.mark.parametrize("sku", ["bad sku", "-leading", "slash/sku"])
def test_malformed_sku_fails_validation(client, admin, category, sku):
    resp = client.post(
        "/api/products", json=product_body(category, sku=sku), headers=auth_headers(admin)
    )

    assert resp.status_code == 422


def test_unknown_category_is_rejected(client, admin, category):
    resp = client.post(
        "/api/products",
        json=product_body(category, categoryId="00000000-0000-0000-0000-000000000000"),
        headers=auth_headers(admin),
    )

    assert resp.status_code == 400


def test_customer_cannot_create_products(client, make_user, category):
    resp = client.post(
        "/api/products", json=product_body(category), headers=auth_headers(make_user())
    )

    assert resp.status_code == 403


def test_public_listing_with_search(client, make_product):
    make_product(name="Greek Yogurt", stock=4)
    make_product(name="Cheddar", stock=7)

    resp = client.get("/api/products", params={"search": "yog"})

    assert resp.status_code == 200
    items = resp.json()
    assert [p["name"] for p in items] == ["Greek Yogurt"]
    assert items[0]["total_stock"] == 4


def test_get_single_product(client, make_product):
    cheddar = make_product(name="Cheddar", stock=7)

    resp = client.get(f"/api/products/{cheddar.id}")

    assert resp.status_code == 200
    assert resp.json()["stock"] == 7


def test_update_sets_absolute_stock(client, session, admin, make_product):
    cheddar = make_product(price="4.00", stock=7)

    resp = client.put(
        f"/api/products/{cheddar.id}",
        json={"stock": 2, "price": "4.50"},
        headers=auth_headers(admin),
    )

    assert resp.status_code == 200
    assert resp.json()["stock"] == 2
    assert Decimal(resp.json()["price"]) == Decimal("4.50")
    assert stock_of(session, cheddar) == 2


def test_update_creates_missing_stock_row(client, session, admin, make_product):
    unstocked = make_product(stock=None)

    resp = client.put(
        f"/api/products/{unstocked.id}", json={"stock": 9}, headers=auth_headers(admin)
    )

    assert resp.status_code == 200
    assert stock_of(session, unstocked) == 9


def test_delete_unordered_product(client, session, admin, make_product):
    cheddar = make_product(stock=7)

    resp = client.delete(f"/api/products/{cheddar.id}", headers=auth_headers(admin))

    assert resp.status_code == 200
    assert resp.json() == {"message": "Product removed"}
    assert client.get(f"/api/products/{cheddar.id}").status_code == 404
    assert stock_of(session, cheddar) == 0


def test_ordered_product_cannot_be_deleted(
    client, session, admin, order_service, make_user, make_address, make_product
):
    from storefront.schemas.order import OrderCreate

    customer = make_user()
    cheddar = make_product(price="4.00", stock=7)
    order_service.create_order(
        session,
        customer.id,
        OrderCreate.model_validate(
            {
                "cartItems": [{"id": str(cheddar.id), "quantity": 1}],
                "totalPrice": "4.00",
                "addressId": str(make_address(customer).id),
            }
        ),
    )

    resp = client.delete(f"/api/products/{cheddar.id}", headers=auth_headers(admin))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cannot delete product. It is part of existing orders."


# -------- Categories --------


def test_category_crud(client, admin):
    created = client.post(
        "/api/categories", json={"name": "Frozen"}, headers=auth_headers(admin)
    )
    assert created.status_code == 201
    category_id = created.json()["id"]

    renamed = client.put(
        f"/api/categories/{category_id}",
        json={"name": "Frozen Foods"},
        headers=auth_headers(admin),
    )
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Frozen Foods"

    assert client.delete(
        f"/api/categories/{category_id}", headers=auth_headers(admin)
    ).status_code == 200
    assert client.get("/api/categories").json() == []


def test_duplicate_category_name_is_rejected(client, admin, category):
    resp = client.post(
        "/api/categories", json={"name": "Dairy"}, headers=auth_headers(admin)
    )

    assert resp.status_code == 400


def test_category_with_products_cannot_be_deleted(client, admin, category, make_product):
    make_product()

    resp = client.delete(f"/api/categories/{category.id}", headers=auth_headers(admin))

    assert resp.status_code == 400


# -------- Dashboard --------


def test_products_per_category(client, session, admin, category, make_product):
    from storefront.models.product import Category

    session.add(Category(name="Bakery"))
    session.commit()
    make_product()
    make_product()

    resp = client.get("/api/products/stats/category", headers=auth_headers(admin))

    assert resp.status_code == 200
    assert resp.json() == [{"name": "Bakery", "count": 0}, {"name": "Dairy", "count": 2}]


def test_low_stock_lists_lowest_first(client, admin, make_product):
    butter = make_product(name="Butter", stock=3)
    make_product(name="Cream", stock=50)
    ghee = make_product(name="Ghee", stock=20)
    paneer = make_product(name="Paneer", stock=0)

    resp = client.get("/api/products/stats/lowstock", headers=auth_headers(admin))

    assert resp.status_code == 200
    rows = resp.json()
    assert [r["product_id"] for r in rows] == [str(paneer.id), str(butter.id), str(ghee.id)]
    assert rows[1]["product_name"] == "Butter"
    assert rows[1]["sku"] == butter.sku
    assert rows[1]["quantity"] == 3


def test_low_stock_threshold_is_adjustable(client, admin, make_product):
    make_product(stock=3)
    make_product(stock=8)

    resp = client.get(
        "/api/products/stats/lowstock",
        params={"threshold": 5},
        headers=auth_headers(admin),
    )

    assert [r["quantity"] for r in resp.json()] == [3]


def test_catalog_stats_are_admin_only(client, make_user):
    customer = make_user()

    for path in ("/api/products/stats/category", "/api/products/stats/lowstock"):
        assert client.get(path, headers=auth_headers(customer)).status_code == 403
        assert client.get(path).status_code == 401
