"""
Cart manager: the session user's pending line items.

Every successful mutation publishes ``cart-changed`` on the context's event
bus. Concurrent edits from two clients are last-write-wins; the backend keeps
at most one line per product and increments it on repeated adds.
"""
import logging
from decimal import Decimal
from typing import List

from storefront.client.events import CART_CHANGED
from storefront.client.schemas import CartItem
from storefront.client.session import guarded, require_session
from storefront.errors import OutOfStock, StorefrontError, ValidationFailed
from storefront.pricing import total as sum_lines
from storefront.validation import parse_quantity

log = logging.getLogger(__name__)


def cart_total(cart) -> Decimal:
    return sum_lines((it.product.price, it.quantity) for it in cart)


def item_count(cart) -> int:
    return sum(it.quantity for it in cart)


class CartManager:
    def __init__(self, ctx):
        self.ctx = ctx
        self.last_cart: List[CartItem] = []

    @property
    def session(self):
        return self.ctx.session

    total = staticmethod(cart_total)
    item_count = staticmethod(item_count)

    def on_change(self, receiver):
        return self.ctx.bus.subscribe(CART_CHANGED, receiver)

    def _changed(self, action, **info):
        self.ctx.bus.publish(CART_CHANGED, sender=self, user_id=self.session.user_id, action=action, **info)

    def _in_cart(self, product_id) -> int:
        return sum(it.quantity for it in self.last_cart if it.product.id == product_id)

    def get_cart(self, strict=False) -> List[CartItem]:
        """Current lines ordered by id.

        Browsing callers get an empty list when the fetch fails so a flaky cart
        never blocks navigation; ``strict=True`` lets the error through.
        """
        if self.session is None:
            if strict:
                require_session(self.session)
            return []
        try:
            rows = self.ctx.api.get_cart(self.session.user_id) or []
        except StorefrontError as e:
            if strict:
                raise
            log.warning("cart fetch failed, showing empty cart: %s", e.message)
            return []
        self.last_cart = sorted((CartItem.model_validate(r) for r in rows), key=lambda it: it.id)
        return list(self.last_cart)

    @guarded()
    def add_item(self, product, qty=1) -> CartItem:
        """Add ``qty`` of ``product`` (a ``Product`` or an id), merging with an existing line."""
        qty = parse_quantity(qty)
        if qty < 1:
            raise ValidationFailed({"quantity": "Quantity must be at least 1"})
        product_id = getattr(product, "id", product)
        stock = getattr(product, "stock", None)
        if stock is not None and self._in_cart(product_id) + qty > stock:
            raise OutOfStock(f"Only {stock} of {product.name} in stock", product_id=product_id, available=stock)

        data = self.ctx.api.add_to_cart(self.session.user_id, product_id, qty)
        item = CartItem.model_validate(data["item"])
        self._changed("add", cart_item_id=item.id)
        return item

    @guarded()
    def set_quantity(self, cart_item_id, qty):
        """Set a line's quantity; negative clamps to 0 and 0 removes the line.

        Returns the updated line, or ``None`` once it is gone.
        """
        qty = max(0, parse_quantity(qty))
        data = self.ctx.api.update_cart_item(cart_item_id, qty)
        self.last_cart = [it for it in self.last_cart if it.id != cart_item_id or qty > 0]
        self._changed("remove" if qty == 0 else "update", cart_item_id=cart_item_id)
        if qty == 0:
            return None
        return CartItem.model_validate(data["item"])

    def remove_item(self, cart_item_id):
        return self.set_quantity(cart_item_id, 0)
