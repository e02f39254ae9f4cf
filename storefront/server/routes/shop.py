from flask import Blueprint, current_app, request
from sqlalchemy import func

from storefront.server.models import Product
from storefront.server.responses import ok

bp_shop = Blueprint("shop", __name__, url_prefix="/api/shop")


@bp_shop.get("/products")
def list_products():
    """Public catalog, newest first. ``?category=`` narrows it (case-insensitive)."""
    q = Product.query
    category = (request.args.get("category") or "").strip()
    if category and category.lower() != "all":
        q = q.filter(func.lower(Product.category) == category.lower())
    products = q.order_by(Product.created_at.desc(), Product.id.desc()).all()
    current_app.logger.info("returning %d products", len(products))
    return ok({"success": True, "products": [p.to_dict(with_seller=True) for p in products]})
