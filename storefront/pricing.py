from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def money(value) -> Decimal:
    """Coerce a price-like value to a 2-place Decimal (floats via their repr)."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(price, quantity) -> Decimal:
    return money(money(price) * int(quantity))


def total(lines) -> Decimal:
    """Sum ``(price, quantity)`` pairs; an empty iterable totals 0.00."""
    return money(sum((line_total(p, q) for p, q in lines), Decimal("0")))


def to_minor_units(amount) -> int:
    # payment gateways take integer paise/cents
    return int(money(amount) * 100)
