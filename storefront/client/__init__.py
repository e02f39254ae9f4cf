from storefront.client.account import Account
from storefront.client.api import ApiClient
from storefront.client.cart import CartManager
from storefront.client.catalog import CatalogBrowser, SellerCatalog
from storefront.client.checkout import CheckoutWorkflow
from storefront.client.context import ClientContext
from storefront.client.events import EventBus
from storefront.client.orders import OrderTracker, SellerOrders
from storefront.client.session import FileSessionStore, MemorySessionStore


class Storefront:
    """All client services wired to one context (API client, session, event bus)."""

    def __init__(self, api=None, store=None, gateway=None, bus=None):
        self.ctx = ClientContext(api=api, store=store, bus=bus)
        self.account = Account(self.ctx)
        self.cart = CartManager(self.ctx)
        self.catalog = CatalogBrowser(self.ctx, self.cart)
        self.checkout = CheckoutWorkflow(self.ctx, self.cart, gateway=gateway)
        self.orders = OrderTracker(self.ctx)
        self.seller_catalog = SellerCatalog(self.ctx)
        self.seller_orders = SellerOrders(self.ctx)

    @property
    def session(self):
        return self.ctx.session


__all__ = [
    "Account",
    "ApiClient",
    "CartManager",
    "CatalogBrowser",
    "CheckoutWorkflow",
    "ClientContext",
    "EventBus",
    "FileSessionStore",
    "MemorySessionStore",
    "OrderTracker",
    "SellerCatalog",
    "SellerOrders",
    "Storefront",
]
