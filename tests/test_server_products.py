import pytest

from conftest import add_to_cart, auth, create_product


def test_customer_cannot_create_products(client, customer):
    r = client.post("/api/products/create", headers=auth(customer["token"]), json={
        "name": "Sneaky", "price": 1, "stock": 1, "category": "Books",
    })
    assert r.status_code == 403
    assert r.get_json()["error"] == "forbidden"


def test_create_validates_fields(client, seller):
    r = client.post("/api/products/create", headers=auth(seller["token"]), json={
        "name": "Lamp", "price": -5, "stock": 2, "category": "",
    })
    assert r.status_code == 400
    assert set(r.get_json()["fields"]) == {"price", "category"}


def test_create_and_list_own_products(client, seller, seller_b):
    mine = create_product(client, seller, name="Lamp", price=19.99, stock=3, category="Home")
    create_product(client, seller_b, name="Rug")
    assert mine["seller_id"] == seller["id"]
    assert mine["price"] == 19.99

    r = client.get(f"/api/products/seller?seller_id={seller['id']}", headers=auth(seller["token"]))
    assert r.status_code == 200
    assert [p["name"] for p in r.get_json()] == ["Lamp"]


def test_seller_id_must_match_token(client, seller, seller_b):
    r = client.get(f"/api/products/seller?seller_id={seller_b['id']}", headers=auth(seller["token"]))
    assert r.status_code == 403


def test_update_own_product(client, seller):
    p = create_product(client, seller)
    r = client.put("/api/products/update", headers=auth(seller["token"]), json={
        "id": p["id"], "name": "Widget Pro", "price": 12.5, "stock": 9, "category": "Electronics",
    })
    assert r.status_code == 200
    body = r.get_json()
    assert body["name"] == "Widget Pro"
    assert body["stock"] == 9


def test_other_seller_cannot_update_or_delete(client, seller, seller_b):
    p = create_product(client, seller)
    r = client.put("/api/products/update", headers=auth(seller_b["token"]), json={
        "id": p["id"], "name": "Mine now", "price": 1, "stock": 1, "category": "Books",
    })
    assert r.status_code == 404

    r = client.delete(f"/api/products/delete?product_id={p['id']}", headers=auth(seller_b["token"]))
    assert r.status_code == 404

    r = client.get("/api/shop/products")
    assert [x["name"] for x in r.get_json()["products"]] == ["Widget"]


def test_delete_removes_product_and_cart_lines(client, seller, customer):
    p = create_product(client, seller)
    add_to_cart(client, customer, p, 2)

    r = client.delete(
        f"/api/products/delete?product_id={p['id']}&seller_id={seller['id']}",
        headers=auth(seller["token"]),
    )
    assert r.status_code == 200
    assert client.get("/api/shop/products").get_json()["products"] == []
    assert client.get("/api/cart", headers=auth(customer["token"])).get_json() == []


def test_shop_lists_all_products_with_seller_name(client, seller, seller_b):
    create_product(client, seller, name="Lamp", category="Home")
    create_product(client, seller_b, name="Novel", category="Books")

    r = client.get("/api/shop/products")
    body = r.get_json()
    assert body["success"] is True
    by_name = {p["name"]: p for p in body["products"]}
    assert by_name["Lamp"]["seller_name"] == "Alice Seller"
    assert by_name["Novel"]["seller_name"] == "Bob Seller"


def test_shop_category_filter_is_case_insensitive(client, seller):
    create_product(client, seller, name="Lamp", category="Home")
    create_product(client, seller, name="Novel", category="Books")

    r = client.get("/api/shop/products?category=books")
    assert [p["name"] for p in r.get_json()["products"]] == ["Novel"]
    r = client.get("/api/shop/products?category=All")
    assert len(r.get_json()["products"]) == 2


@pytest.mark.parametrize("price", ["inf", "nan", "-inf", "1e309"])
def test_non_finite_price_is_rejected(client, seller, price):
    r = client.post("/api/products/create", headers=auth(seller["token"]), json={
        "name": "Broken", "price": price, "stock": 1, "category": "Books",
    })
    assert r.status_code == 400
    assert "price" in r.get_json()["fields"]

    r = client.get("/api/shop/products")
    assert r.status_code == 200
    assert r.get_json()["products"] == []


def test_non_finite_price_on_update_keeps_product(client, seller):
    p = create_product(client, seller)
    r = client.put("/api/products/update", headers=auth(seller["token"]), json={
        "id": p["id"], "name": "Widget", "price": "inf", "stock": 1, "category": "Books",
    })
    assert r.status_code == 400
    products = client.get("/api/shop/products").get_json()["products"]
    assert [x["price"] for x in products] == [10.0]


def test_huge_stock_is_a_field_error(client, seller):
    r = client.post("/api/products/create", headers=auth(seller["token"]), json={
        "name": "Grain", "price": 1, "stock": 10**20, "category": "Home",
    })
    assert r.status_code == 400
    assert "stock" in r.get_json()["fields"]
