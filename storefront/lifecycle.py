from enum import Enum

from storefront.errors import InvalidTransition


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    COD = "cod"
    GATEWAY = "gateway"


# complete legal-transition table; anything missing is illegal
TRANSITIONS = {
    OrderStatus.PENDING: (OrderStatus.PROCESSING, OrderStatus.CANCELLED),
    OrderStatus.PAID: (OrderStatus.PROCESSING, OrderStatus.CANCELLED),
    OrderStatus.PROCESSING: (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
    OrderStatus.SHIPPED: (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
    OrderStatus.DELIVERED: (),
    OrderStatus.CANCELLED: (),
}


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        raise InvalidTransition(f"Unknown order status: {value!r}")


def parse_payment_method(value) -> PaymentMethod:
    return PaymentMethod(str(value).strip().lower())


def initial_status(method: PaymentMethod) -> OrderStatus:
    """Gateway orders arrive already paid; cash on delivery waits."""
    return OrderStatus.PAID if method == PaymentMethod.GATEWAY else OrderStatus.PENDING


def allowed_transitions(status) -> list:
    """Statuses a seller may move an order to from ``status``."""
    return [s.value for s in TRANSITIONS[parse_status(status)]]


def is_terminal(status) -> bool:
    return not TRANSITIONS[parse_status(status)]


def can_transition(current, target) -> bool:
    try:
        return parse_status(target) in TRANSITIONS[parse_status(current)]
    except InvalidTransition:
        return False


def check_transition(current, target) -> OrderStatus:
    """Return the target status or raise ``InvalidTransition``."""
    cur, nxt = parse_status(current), parse_status(target)
    if nxt not in TRANSITIONS[cur]:
        raise InvalidTransition(
            f"Cannot move an order from {cur.value} to {nxt.value}.",
            current=cur.value,
            allowed=allowed_transitions(cur),
        )
    return nxt
