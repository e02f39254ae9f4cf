import threading
from decimal import Decimal

import pytest

from conftest import FakeGateway, auth, create_product
from storefront.client.events import CART_CHANGED, ORDER_PLACED
from storefront.client.payment import PaymentGateway
from storefront.errors import (
    AuthRequired,
    CheckoutInProgress,
    EmptyCart,
    OutOfStock,
    PaymentCancelled,
    PriceChanged,
    ValidationFailed,
)
from storefront.lifecycle import PaymentMethod

ADDRESS = "12 Main St, Springfield"
CONTACT = "9876543210"


@pytest.fixture
def shop(make_shop, client, seller, customer):
    shop = make_shop("carol@example.com")
    lamp = create_product(client, seller, name="Lamp", price=10.00, stock=5)
    mug = create_product(client, seller, name="Mug", price=5.00, stock=3)
    shop.cart.add_item(lamp["id"], 2)
    shop.cart.add_item(mug["id"], 1)
    return shop


def _checkout_calls(transport):
    return [p for p in transport.paths("POST") if p.endswith("/checkout")]


def test_bad_contact_makes_no_calls(shop, transport):
    transport.calls.clear()
    with pytest.raises(ValidationFailed) as e:
        shop.checkout.place_order(ADDRESS, "12345")
    assert e.value.fields == {"contact_number": "Please enter a valid 10-digit contact number"}
    assert transport.calls == []


def test_blank_address(shop, transport):
    transport.calls.clear()
    with pytest.raises(ValidationFailed) as e:
        shop.checkout.place_order("  ", CONTACT)
    assert "shipping_address" in e.value.fields
    assert transport.calls == []


def test_empty_cart_never_posts(make_shop, customer, transport):
    shop = make_shop("carol@example.com")
    with pytest.raises(EmptyCart):
        shop.checkout.place_order(ADDRESS, CONTACT)
    assert _checkout_calls(transport) == []


def test_cod_order_empties_cart(shop, transport):
    receipt = shop.checkout.place_order(ADDRESS, f" {CONTACT} ")
    assert receipt.total_amount == Decimal("25.00")
    assert receipt.status == "pending"
    assert len(_checkout_calls(transport)) == 1
    assert shop.cart.get_cart() == []
    assert shop.cart.last_cart == []

    detail = shop.orders.get_order(receipt.order_id)
    assert detail.order.contact_number == CONTACT
    assert detail.total == Decimal("25.00")


def test_checkout_publishes_events(shop):
    seen = []
    shop.ctx.bus.subscribe(CART_CHANGED, lambda sender, **info: seen.append(("cart", info["action"])))
    shop.ctx.bus.subscribe(ORDER_PLACED, lambda sender, **info: seen.append(("order", info["order_id"])))

    receipt = shop.checkout.place_order(ADDRESS, CONTACT)
    assert seen == [("cart", "checkout"), ("order", receipt.order_id)]


def test_gateway_order_is_paid(shop, gateway):
    receipt = shop.checkout.place_order(ADDRESS, CONTACT, PaymentMethod.GATEWAY)
    assert receipt.status == "paid"

    request = gateway.requests[0]
    assert request.amount == 2500
    assert request.contact == CONTACT
    assert shop.orders.get_order(receipt.order_id).order.payment_id == "pay_123"


def test_cancelled_payment_leaves_cart(shop, gateway, transport):
    gateway.cancel = True
    with pytest.raises(PaymentCancelled):
        shop.checkout.place_order(ADDRESS, CONTACT, "gateway")
    assert _checkout_calls(transport) == []
    assert len(shop.cart.get_cart()) == 2


def test_gateway_returning_no_reference_is_a_cancel(shop, transport):
    shop.checkout.gateway = FakeGateway(reference="")
    with pytest.raises(PaymentCancelled):
        shop.checkout.place_order(ADDRESS, CONTACT, PaymentMethod.GATEWAY)
    assert _checkout_calls(transport) == []


def test_gateway_needs_a_gateway(shop):
    shop.checkout.gateway = None
    with pytest.raises(ValidationFailed) as e:
        shop.checkout.place_order(ADDRESS, CONTACT, PaymentMethod.GATEWAY)
    assert "payment_method" in e.value.fields


def test_unknown_payment_method(shop):
    with pytest.raises(ValidationFailed) as e:
        shop.checkout.place_order(ADDRESS, CONTACT, "barter")
    assert "payment_method" in e.value.fields


def test_oversell_leaves_cart(shop, client, seller):
    mug = next(it.product for it in shop.cart.get_cart() if it.product.name == "Mug")
    client.put("/api/products/update", headers=auth(seller["token"]), json={
        "id": mug.id, "name": "Mug", "price": 5.0, "stock": 0, "category": "Electronics",
    })

    with pytest.raises(OutOfStock):
        shop.checkout.place_order(ADDRESS, CONTACT)
    assert shop.cart.item_count(shop.cart.get_cart()) == 3


def test_second_submit_while_in_flight(shop):
    entered = threading.Event()
    release = threading.Event()
    checkout = shop.ctx.api.checkout

    def slow_checkout(body):
        entered.set()
        release.wait(5)
        return checkout(body)

    shop.ctx.api.checkout = slow_checkout
    results = []
    worker = threading.Thread(target=lambda: results.append(shop.checkout.place_order(ADDRESS, CONTACT)))
    worker.start()
    assert entered.wait(5)

    assert shop.checkout.in_flight
    with pytest.raises(CheckoutInProgress):
        shop.checkout.place_order(ADDRESS, CONTACT)

    release.set()
    worker.join(5)
    assert len(results) == 1
    assert not shop.checkout.in_flight


def test_logged_out_checkout(make_shop):
    with pytest.raises(AuthRequired):
        make_shop().checkout.place_order(ADDRESS, CONTACT)


class RepricingGateway(FakeGateway):
    """Confirms the payment, but a seller edits a price before the order lands."""

    def __init__(self, client, seller, product):
        super().__init__(reference="pay_late")
        self.client = client
        self.seller = seller
        self.product = product

    def confirm(self, request):
        self.client.put("/api/products/update", headers=auth(self.seller["token"]), json={
            "id": self.product.id, "name": self.product.name, "price": 11.0,
            "stock": self.product.stock, "category": self.product.category,
        })
        return super().confirm(request)


def test_price_change_after_payment_is_refused(shop, client, seller, transport):
    lamp = next(it.product for it in shop.cart.get_cart() if it.product.name == "Lamp")
    shop.checkout.gateway = RepricingGateway(client, seller, lamp)

    with pytest.raises(PriceChanged) as e:
        shop.checkout.place_order(ADDRESS, CONTACT, PaymentMethod.GATEWAY)
    assert e.value.details["total_amount"] == 27.0
    assert shop.checkout.gateway.requests[0].amount == 2500
    assert len(_checkout_calls(transport)) == 1
    assert shop.cart.item_count(shop.cart.get_cart()) == 3
    assert shop.orders.list_orders() == []


def test_gateway_base_must_be_implemented():
    with pytest.raises(TypeError):
        PaymentGateway()
