from flask import Blueprint, current_app, g, request

from storefront.errors import NotFound, ValidationFailed
from storefront.server.auth_mw import ensure_self, require_user
from storefront.server.models import db, OrderItem, Product
from storefront.server.responses import commit_or_rollback, fail, ok
from storefront.validation import validate_product

bp_products = Blueprint("products", __name__, url_prefix="/api/products")


def _apply(p: Product, d: dict):
    p.name = str(d["name"]).strip()
    p.description = str(d.get("description") or "").strip()
    p.price = float(d["price"])
    p.stock = int(d.get("stock") or 0)
    p.category = str(d["category"]).strip()
    p.image_url = str(d.get("image_url") or "").strip()


def _owned_product(product_id):
    try:
        p = db.session.get(Product, int(product_id))
    except (TypeError, ValueError):
        p = None
    # someone else's product looks exactly like a missing one
    if p is None or p.seller_id != g.user.id:
        return None
    return p


@bp_products.get("/seller")
@require_user(role="seller")
def seller_products():
    denied = ensure_self(request.args.get("seller_id"))
    if denied:
        return denied
    q = (Product.query.filter_by(seller_id=g.user.id)
         .order_by(Product.created_at.desc(), Product.id.desc()).all())
    return ok([p.to_dict() for p in q])


@bp_products.post("/create")
@require_user(role="seller")
def create_product():
    d = request.get_json(silent=True) or {}
    denied = ensure_self(d.get("seller_id"))
    if denied:
        return denied
    errors = validate_product(d)
    if errors:
        return fail(ValidationFailed(errors))

    p = Product(seller_id=g.user.id)
    _apply(p, d)
    db.session.add(p)
    commit_or_rollback()
    current_app.logger.info("seller %s created product %s", g.user.id, p.id)
    return ok(p.to_dict(), 201)


@bp_products.put("/update")
@require_user(role="seller")
def update_product():
    d = request.get_json(silent=True) or {}
    denied = ensure_self(d.get("seller_id"))
    if denied:
        return denied
    p = _owned_product(d.get("id"))
    if p is None:
        return fail(NotFound("Product not found or unauthorized"))
    errors = validate_product(d)
    if errors:
        return fail(ValidationFailed(errors))

    _apply(p, d)
    commit_or_rollback()
    return ok(p.to_dict())


@bp_products.delete("/delete")
@require_user(role="seller")
def delete_product():
    denied = ensure_self(request.args.get("seller_id"))
    if denied:
        return denied
    p = _owned_product(request.args.get("product_id"))
    if p is None:
        return fail(NotFound("Product not found or unauthorized"))

    pid = p.id
    # cart lines go with it; order history keeps its snapshot
    OrderItem.query.filter_by(product_id=pid).update({OrderItem.product_id: None}, synchronize_session=False)
    db.session.delete(p)
    commit_or_rollback()
    current_app.logger.info("seller %s deleted product %s", g.user.id, pid)
    return ok({"message": "Product deleted successfully"})
