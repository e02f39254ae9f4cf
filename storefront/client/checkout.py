"""
Checkout: turn the session user's cart into an order.

Order of checks matters: session, then the form (no network on a bad form),
then the cart (no checkout request for an empty cart), then payment (no
checkout request if the user cancels), then the one ``POST /checkout`` that
the backend runs as a single transaction. On any failure the cart is left as
it was. The total shown and charged travels with the request; a price
edit in between comes back as ``PriceChanged``.
"""
import logging
import threading

from storefront.client import config
from storefront.client.cart import cart_total
from storefront.client.events import CART_CHANGED, ORDER_PLACED
from storefront.client.payment import PaymentRequest
from storefront.client.schemas import Receipt
from storefront.client.session import require_session
from storefront.errors import CheckoutInProgress, EmptyCart, PaymentCancelled
from storefront.lifecycle import PaymentMethod, parse_payment_method
from storefront.pricing import to_minor_units
from storefront.validation import ensure_valid, normalize_contact, validate_checkout

log = logging.getLogger(__name__)


class CheckoutWorkflow:
    def __init__(self, ctx, cart, gateway=None, currency=None):
        self.ctx = ctx
        self.cart = cart
        self.gateway = gateway
        self.currency = currency or config.CURRENCY
        self._in_flight = threading.Lock()

    @property
    def session(self):
        return self.ctx.session

    @property
    def in_flight(self) -> bool:
        """True while an order is being placed; views disable the submit button."""
        return self._in_flight.locked()

    def place_order(self, shipping_address, contact_number, payment_method=PaymentMethod.COD) -> Receipt:
        session = require_session(self.session)

        method = None
        errors = validate_checkout(shipping_address, contact_number)
        try:
            method = parse_payment_method(getattr(payment_method, "value", payment_method))
        except ValueError:
            errors["payment_method"] = "Please choose cash on delivery or online payment"
        if method == PaymentMethod.GATEWAY and self.gateway is None:
            errors["payment_method"] = "Online payment is not available"
        ensure_valid(errors)

        if not self._in_flight.acquire(blocking=False):
            raise CheckoutInProgress()
        try:
            return self._submit(session, shipping_address.strip(), normalize_contact(contact_number), method)
        finally:
            self._in_flight.release()

    def _submit(self, session, address, contact, method) -> Receipt:
        lines = self.cart.get_cart(strict=True)
        if not lines:
            raise EmptyCart()
        amount = cart_total(lines)

        body = {
            "user_id": session.user_id,
            "payment_method": method.value,
            "shipping_address": address,
            "contact_number": contact,
            # the backend refuses the order if its own total differs
            "expected_total": str(amount),
        }
        if method == PaymentMethod.GATEWAY:
            reference = self.gateway.confirm(PaymentRequest(
                amount=to_minor_units(amount),
                currency=self.currency,
                name=session.username,
                contact=contact,
            ))
            if not reference:
                raise PaymentCancelled()
            body["payment_id"] = reference

        receipt = Receipt.model_validate(self.ctx.api.checkout(body))
        log.info("order %s placed for user %s (%s, %s)", receipt.order_id, session.user_id, method.value, receipt.total_amount)

        self.cart.last_cart = []
        self.ctx.bus.publish(CART_CHANGED, sender=self, user_id=session.user_id, action="checkout")
        self.ctx.bus.publish(ORDER_PLACED, sender=self, user_id=session.user_id, order_id=receipt.order_id)
        return receipt
