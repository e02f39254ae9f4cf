from datetime import datetime
from decimal import InvalidOperation

from storefront.errors import EmptyCart, OutOfStock, PriceChanged
from storefront.lifecycle import PaymentMethod, initial_status, parse_payment_method
from storefront.pricing import money, total
from storefront.server.models import db, CartItem, Order, OrderItem, Product
from storefront.validation import ensure_valid, normalize_contact, validate_checkout


def parse_checkout(data: dict):
    """Validate a checkout body; return (method, address, contact, payment_id, expected_total)."""
    address = (data.get("shipping_address") or "").strip()
    contact = normalize_contact(data.get("contact_number"))
    errors = validate_checkout(address, contact)
    try:
        method = parse_payment_method(data.get("payment_method") or "")
    except ValueError:
        method = None
        errors["payment_method"] = "Payment method must be 'cod' or 'gateway'"
    payment_id = (data.get("payment_id") or "").strip() or None
    if method == PaymentMethod.GATEWAY and not payment_id:
        errors["payment_id"] = "Payment reference is required for gateway payments"
    if method == PaymentMethod.COD:
        payment_id = None
    expected_total = None
    if data.get("expected_total") not in (None, ""):
        try:
            expected_total = money(data["expected_total"])
        except (InvalidOperation, TypeError, ValueError):
            errors["expected_total"] = "Expected total must be an amount"
    ensure_valid(errors)
    return method, address, contact, payment_id, expected_total


def place_order_svc(user_id: int, data: dict) -> Order:
    """Convert the user's cart into an order in one transaction.

    Stock is decremented with a guarded UPDATE so two checkouts racing for the
    last unit cannot both succeed. Any failure rolls back the order, the stock
    changes and the cart deletion together.
    """
    method, address, contact, payment_id, expected_total = parse_checkout(data)

    try:
        lines = (CartItem.query.filter_by(user_id=user_id)
                 .order_by(CartItem.id).all())
        if not lines:
            raise EmptyCart("Cart is empty")

        amount = total((ln.product.price, ln.quantity) for ln in lines)
        if expected_total is not None and expected_total != amount:
            # the client charged or showed a different amount
            raise PriceChanged(expected_total=float(expected_total), total_amount=float(amount))

        now = datetime.utcnow()
        order = Order(
            user_id=user_id,
            total_amount=float(amount),
            status=initial_status(method).value,
            payment_method=method.value,
            payment_id=payment_id,
            shipping_address=address,
            contact_number=contact,
            created_at=now,
            updated_at=now,
        )
        db.session.add(order)

        for ln in lines:
            p = ln.product
            updated = (Product.query
                       .filter(Product.id == p.id, Product.stock >= ln.quantity)
                       .update({Product.stock: Product.stock - ln.quantity},
                               synchronize_session=False))
            if updated != 1:
                raise OutOfStock(
                    f"{p.name} does not have enough stock",
                    product_id=p.id,
                    available=p.stock,
                )
            order.items.append(OrderItem(
                product_id=p.id,
                seller_id=p.seller_id,
                product_name=p.name,
                product_image=p.image_url or "",
                price=float(money(p.price)),
                quantity=ln.quantity,
                created_at=now,
            ))
            db.session.delete(ln)

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return order
