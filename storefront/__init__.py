"""Storefront: shop, cart, checkout and seller order management."""

__version__ = "0.1.0"
