from collections import OrderedDict
from typing import List, Optional

from storefront.client.schemas import Product
from storefront.client.session import guarded
from storefront.errors import Forbidden
from storefront.validation import SUGGESTED_CATEGORIES, ensure_valid, validate_product

ALL = "all"


def category_counts(products) -> "OrderedDict[str, int]":
    """Suggested categories first (even when empty), then any others seen."""
    counts = OrderedDict((c, 0) for c in SUGGESTED_CATEGORIES)
    for p in products:
        cat = (p.category or "").strip()
        if cat:
            counts[cat] = counts.get(cat, 0) + 1
    return counts


def filter_by_category(products, category) -> list:
    if not category or category.lower() == ALL:
        return list(products)
    wanted = category.strip().lower()
    return [p for p in products if (p.category or "").strip().lower() == wanted]


class CatalogBrowser:
    def __init__(self, ctx, cart=None):
        self.ctx = ctx
        self.cart = cart

    @property
    def session(self):
        return self.ctx.session

    def list_products(self, category: Optional[str] = None) -> List[Product]:
        if category and category.lower() == ALL:
            category = None
        return [Product.model_validate(p) for p in self.ctx.api.shop_products(category)]

    def add_to_cart(self, product, qty=1):
        return self.cart.add_item(product, qty)


class SellerCatalog:
    def __init__(self, ctx):
        self.ctx = ctx

    @property
    def session(self):
        return self.ctx.session

    def _payload(self, data: dict) -> dict:
        ensure_valid(validate_product(data))
        return {
            "seller_id": self.session.user_id,
            "name": str(data["name"]).strip(),
            "description": str(data.get("description") or "").strip(),
            "price": float(data["price"]),
            "stock": int(data.get("stock") or 0),
            "category": str(data["category"]).strip(),
            "image_url": str(data.get("image_url") or "").strip(),
        }

    def _check_owner(self, product):
        # a UX shortcut only; the backend makes the real decision
        seller_id = getattr(product, "seller_id", None)
        if seller_id is not None and seller_id != self.session.user_id:
            raise Forbidden("You can only manage your own products.")

    @guarded(role="seller")
    def list_products(self) -> List[Product]:
        rows = self.ctx.api.seller_products(self.session.user_id)
        return [Product.model_validate(p) for p in rows or []]

    @guarded(role="seller")
    def create(self, data: dict) -> Product:
        return Product.model_validate(self.ctx.api.create_product(self._payload(data)))

    @guarded(role="seller")
    def update(self, product, data: dict) -> Product:
        """``product`` is a ``Product`` or a bare id."""
        self._check_owner(product)
        body = self._payload(data)
        body["id"] = getattr(product, "id", product)
        return Product.model_validate(self.ctx.api.update_product(body))

    @guarded(role="seller")
    def delete(self, product):
        self._check_owner(product)
        product_id = getattr(product, "id", product)
        self.ctx.api.delete_product(product_id, self.session.user_id)
