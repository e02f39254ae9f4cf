from flask import Blueprint, current_app, g, request
from sqlalchemy.exc import IntegrityError

from storefront.errors import NotFound, OutOfStock, ValidationFailed
from storefront.server.auth_mw import ensure_self, require_user
from storefront.server.models import db, CartItem, Product
from storefront.server.responses import commit_or_rollback, fail, ok

bp_cart = Blueprint("cart", __name__, url_prefix="/api/cart")


def _int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _own_item(item_id):
    item = db.session.get(CartItem, item_id) if item_id is not None else None
    if item is None or item.user_id != g.user.id:
        return None
    return item


def _increment(product: Product, quantity: int) -> CartItem:
    item = CartItem.query.filter_by(user_id=g.user.id, product_id=product.id).first()
    wanted = quantity + (item.quantity if item else 0)
    if wanted > product.stock:
        raise OutOfStock(
            f"Only {product.stock} of {product.name} in stock",
            product_id=product.id,
            available=product.stock,
        )
    if item is None:
        item = CartItem(user_id=g.user.id, product_id=product.id, quantity=quantity)
        db.session.add(item)
    else:
        item.quantity = wanted
    commit_or_rollback()
    return item


@bp_cart.get("")
@require_user()
def get_cart():
    denied = ensure_self(request.args.get("user_id"))
    if denied:
        return denied
    items = CartItem.query.filter_by(user_id=g.user.id).order_by(CartItem.id).all()
    return ok([it.to_dict() for it in items])


@bp_cart.post("/add")
@require_user()
def add_to_cart():
    d = request.get_json(silent=True) or {}
    denied = ensure_self(d.get("user_id"))
    if denied:
        return denied
    quantity = _int(d.get("quantity", 1))
    if quantity is None or quantity < 1:
        return fail(ValidationFailed({"quantity": "Quantity must be at least 1"}))
    pid = _int(d.get("product_id"))
    product = db.session.get(Product, pid) if pid is not None else None
    if product is None:
        return fail(NotFound("Product not found"))

    try:
        try:
            item = _increment(product, quantity)
        except IntegrityError:
            # a concurrent add created the row first; fold into it
            item = _increment(product, quantity)
    except OutOfStock as e:
        return fail(e)

    current_app.logger.info("user %s cart: product %s -> %s", g.user.id, product.id, item.quantity)
    return ok({"message": "Added to cart", "item": item.to_dict()})


@bp_cart.put("/update")
@require_user()
def update_cart_item():
    d = request.get_json(silent=True) or {}
    quantity = _int(d.get("quantity"))
    if quantity is None:
        return fail(ValidationFailed({"quantity": "Quantity must be a whole number"}))
    item = _own_item(_int(d.get("id")))
    if quantity <= 0:
        # removal is idempotent
        if item is not None:
            db.session.delete(item)
            commit_or_rollback()
        return ok({"message": "Cart item removed"})
    if item is None:
        return fail(NotFound("Cart item not found"))

    if quantity > item.product.stock:
        return fail(OutOfStock(
            f"Only {item.product.stock} of {item.product.name} in stock",
            product_id=item.product_id,
            available=item.product.stock,
        ))
    item.quantity = quantity
    commit_or_rollback()
    return ok({"message": "Cart updated", "item": item.to_dict()})


@bp_cart.delete("/delete")
@require_user()
def delete_cart_item():
    d = request.get_json(silent=True) or {}
    item_id = _int(d.get("id", request.args.get("id")))
    item = _own_item(item_id)
    if item is not None:
        db.session.delete(item)
        commit_or_rollback()
    # deleting an already-removed line is not an error
    return ok({"message": "Cart item removed"})
