from datetime import datetime

from flask import Blueprint, current_app, g, request

from storefront.errors import InvalidTransition, NotFound, PriceChanged, StorefrontError, ValidationFailed
from storefront.lifecycle import allowed_transitions, check_transition
from storefront.pricing import total
from storefront.server.auth_mw import ensure_self, require_user
from storefront.server.models import db, Order, OrderItem
from storefront.server.responses import fail, ok
from storefront.server.services.checkout_service import place_order_svc

bp_orders = Blueprint("orders", __name__, url_prefix="/api")


def _int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _order_summary(o: Order) -> dict:
    d = o.to_dict()
    d["user_name"] = o.user.name if o.user else ""
    d["item_count"] = sum(it.quantity for it in o.items)
    return d


def _seller_view(o: Order, seller_id: int) -> dict:
    mine = [it for it in o.items if it.seller_id == seller_id]
    return {
        "order": o.to_dict(),
        "items": [it.to_dict() for it in mine],
        "user_name": o.user.name if o.user else "",
        "seller_subtotal": float(total((it.price, it.quantity) for it in mine)),
        "allowed_transitions": allowed_transitions(o.status),
    }


# ---------- Checkout ----------
@bp_orders.post("/checkout")
@require_user()
def checkout():
    d = request.get_json(silent=True) or {}
    denied = ensure_self(d.get("user_id"))
    if denied:
        return denied
    try:
        order = place_order_svc(g.user.id, d)
    except PriceChanged as e:
        current_app.logger.warning(
            "checkout total mismatch for user %s (payment %s): %s",
            g.user.id, d.get("payment_id"), e.details,
        )
        return fail(e)
    except StorefrontError as e:
        current_app.logger.info("checkout rejected for user %s: %s", g.user.id, e.slug)
        return fail(e)

    current_app.logger.info("order %s placed by user %s (%s)", order.id, g.user.id, order.payment_method)
    return ok({
        "success": True,
        "order_id": order.id,
        "total_amount": order.to_dict()["total_amount"],
        "status": order.status,
    }, 201)


# ---------- Customer ----------
@bp_orders.get("/orders/user")
@require_user()
def user_orders():
    denied = ensure_self(request.args.get("user_id"))
    if denied:
        return denied
    q = (Order.query.filter_by(user_id=g.user.id)
         .order_by(Order.created_at.desc(), Order.id.desc()).all())
    return ok([_order_summary(o) for o in q])


@bp_orders.get("/orders/details")
@require_user()
def order_details():
    oid = _int(request.args.get("order_id"))
    if oid is None:
        return fail(ValidationFailed({"order_id": "Order ID is required"}))
    o = db.session.get(Order, oid)
    if o is None or o.user_id != g.user.id:
        return fail(NotFound("Order not found"))
    return ok({
        "order": o.to_dict(),
        "order_items": [it.to_dict() for it in o.items],
        "user_name": o.user.name if o.user else "",
    })


# ---------- Seller ----------
@bp_orders.get("/orders/seller")
@require_user(role="seller")
def seller_orders():
    denied = ensure_self(request.args.get("seller_id"))
    if denied:
        return denied
    q = (Order.query
         .join(OrderItem, OrderItem.order_id == Order.id)
         .filter(OrderItem.seller_id == g.user.id)
         .distinct()
         .order_by(Order.created_at.desc(), Order.id.desc()).all())
    out = []
    for o in q:
        d = _order_summary(o)
        d["seller_subtotal"] = float(total(
            (it.price, it.quantity) for it in o.items if it.seller_id == g.user.id
        ))
        out.append(d)
    return ok(out)


@bp_orders.get("/orders/seller-details")
@require_user(role="seller")
def seller_order_details():
    denied = ensure_self(request.args.get("seller_id"))
    if denied:
        return denied
    oid = _int(request.args.get("order_id"))
    o = db.session.get(Order, oid) if oid is not None else None
    if o is None or g.user.id not in o.seller_ids():
        return fail(NotFound("Order not found or does not contain products from this seller"))
    return ok(_seller_view(o, g.user.id))


@bp_orders.put("/orders/update-status")
@require_user(role="seller")
def update_order_status():
    """Advance an order along the status table.

    Any seller with an item in the order may move the shared status. When the
    body carries ``expected_status`` the write only lands if the order is still
    in that status, so a concurrent change by another seller surfaces as 409.
    """
    d = request.get_json(silent=True) or {}
    oid = _int(d.get("order_id"))
    o = db.session.get(Order, oid) if oid is not None else None
    if o is None or g.user.id not in o.seller_ids():
        return fail(NotFound("Order not found or does not contain products from this seller"))

    current = o.status
    expected = d.get("expected_status")
    if expected and expected != current:
        return fail(InvalidTransition(
            f"Order is now {current}, not {expected}",
            current=current,
            allowed=allowed_transitions(current),
        ))
    try:
        target = check_transition(current, d.get("status"))
    except InvalidTransition as e:
        return fail(e)

    updated = (Order.query
               .filter(Order.id == o.id, Order.status == current)
               .update({Order.status: target.value, Order.updated_at: datetime.utcnow()},
                       synchronize_session=False))
    db.session.commit()
    if updated != 1:
        db.session.refresh(o)
        return fail(InvalidTransition(
            "Order status changed while you were updating it",
            current=o.status,
            allowed=allowed_transitions(o.status),
        ))

    db.session.refresh(o)
    current_app.logger.info("order %s: %s -> %s by seller %s", o.id, current, o.status, g.user.id)
    return ok({
        "success": True,
        "message": "Order status updated successfully",
        **_seller_view(o, g.user.id),
    })
