from decimal import Decimal

import pytest

from storefront.client.catalog import category_counts, filter_by_category
from storefront.client.schemas import Product
from storefront.errors import Forbidden, NotFound, ValidationFailed

LAMP = {"name": "Lamp", "description": "Warm light", "price": "19.99", "stock": 4, "category": "Home"}


def _p(pid, category):
    return Product(id=pid, name=f"p{pid}", price=1, category=category)


def test_category_counts_keep_suggested_order():
    counts = category_counts([_p(1, "Books"), _p(2, "Books"), _p(3, "Garden")])
    assert list(counts)[:7] == ["Electronics", "Clothing", "Books", "Home", "Sports", "Beauty", "Others"]
    assert counts["Books"] == 2
    assert counts["Electronics"] == 0
    assert counts["Garden"] == 1


def test_filter_by_category():
    products = [_p(1, "Books"), _p(2, "Home")]
    assert [p.id for p in filter_by_category(products, "books")] == [1]
    assert len(filter_by_category(products, "all")) == 2
    assert len(filter_by_category(products, None)) == 2


def test_seller_crud(make_shop, seller):
    alice = make_shop("alice@example.com")
    lamp = alice.seller_catalog.create(LAMP)
    assert lamp.price == Decimal("19.99")
    assert lamp.seller_id == seller["id"]

    lamp = alice.seller_catalog.update(lamp, {**LAMP, "price": 24.5, "stock": 2})
    assert lamp.price == Decimal("24.50")
    assert [p.name for p in alice.seller_catalog.list_products()] == ["Lamp"]

    alice.seller_catalog.delete(lamp)
    assert alice.seller_catalog.list_products() == []


def test_product_form_is_checked_before_calling(make_shop, seller, transport):
    alice = make_shop("alice@example.com")
    calls = len(transport.calls)
    with pytest.raises(ValidationFailed) as e:
        alice.seller_catalog.create({**LAMP, "price": -1, "name": ""})
    assert set(e.value.fields) == {"price", "name"}
    assert len(transport.calls) == calls


def test_customers_cannot_manage_products(make_shop, customer):
    carol = make_shop("carol@example.com")
    with pytest.raises(Forbidden):
        carol.seller_catalog.create(LAMP)


def test_other_sellers_products_are_off_limits(make_shop, seller, seller_b):
    alice = make_shop("alice@example.com")
    bob = make_shop("bob@example.com")
    lamp = alice.seller_catalog.create(LAMP)

    with pytest.raises(Forbidden):
        bob.seller_catalog.update(lamp, LAMP)
    # a bare id skips the local check; the backend still refuses
    with pytest.raises(NotFound):
        bob.seller_catalog.delete(lamp.id)
    assert [p.name for p in alice.seller_catalog.list_products()] == ["Lamp"]


def test_shop_browsing(make_shop, seller, customer):
    alice = make_shop("alice@example.com")
    alice.seller_catalog.create(LAMP)
    alice.seller_catalog.create({**LAMP, "name": "Atlas", "category": "Books"})

    carol = make_shop("carol@example.com")
    assert {p.name for p in carol.catalog.list_products()} == {"Lamp", "Atlas"}
    books = carol.catalog.list_products("Books")
    assert [p.seller_name for p in books] == ["Alice Seller"]
    assert len(carol.catalog.list_products("All")) == 2

    carol.catalog.add_to_cart(books[0], 2)
    assert carol.cart.item_count(carol.cart.get_cart()) == 2
