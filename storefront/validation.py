"""Field rules shared by the client forms and the REST handlers.

Each ``validate_*`` returns a ``{field: message}`` dict, empty when the input
is acceptable. ``ensure_valid`` turns a non-empty dict into ``ValidationFailed``.
"""
import math
import re

from storefront.errors import ValidationFailed

CONTACT_RE = re.compile(r"^\d{10}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
# both fit a 32-bit column and keep Decimal totals within default precision
MAX_PRICE = 1_000_000_000
MAX_STOCK = 2**31 - 1
ROLES = ("customer", "seller")
SUGGESTED_CATEGORIES = (
    "Electronics",
    "Clothing",
    "Books",
    "Home",
    "Sports",
    "Beauty",
    "Others",
)


def normalize_email(s):
    if not s:
        return None
    return s.strip().lower()


def normalize_contact(s):
    return (s or "").strip()


def ensure_valid(errors: dict):
    if errors:
        raise ValidationFailed(errors)


def validate_contact_number(value):
    contact = normalize_contact(value)
    if not contact:
        return "Please enter a contact number"
    if not CONTACT_RE.match(contact):
        return "Please enter a valid 10-digit contact number"
    return None


def validate_checkout(shipping_address, contact_number) -> dict:
    errors = {}
    if not (shipping_address or "").strip():
        errors["shipping_address"] = "Please enter a shipping address"
    contact_error = validate_contact_number(contact_number)
    if contact_error:
        errors["contact_number"] = contact_error
    return errors


def _number(value, cast):
    if value is None or isinstance(value, bool):
        return None
    try:
        return cast(value)
    except (TypeError, ValueError, ArithmeticError):
        return None


def parse_quantity(value) -> int:
    qty = _number(value, int)
    if qty is None or (isinstance(value, float) and not value.is_integer()):
        raise ValidationFailed({"quantity": "Quantity must be a whole number"})
    return qty


def validate_product(data: dict) -> dict:
    errors = {}
    if not str(data.get("name") or "").strip():
        errors["name"] = "Name is required"
    if not str(data.get("category") or "").strip():
        errors["category"] = "Category is required"

    price = _number(data.get("price"), float)
    if price is None or not math.isfinite(price):
        errors["price"] = "Price must be a number"
    elif price < 0:
        errors["price"] = "Price cannot be negative"
    elif price > MAX_PRICE:
        errors["price"] = f"Price cannot exceed {MAX_PRICE}"

    raw_stock = data.get("stock", 0)
    stock = _number(raw_stock, int)
    if stock is None or (isinstance(raw_stock, float) and not raw_stock.is_integer()):
        errors["stock"] = "Stock must be a whole number"
    elif stock < 0:
        errors["stock"] = "Stock cannot be negative"
    elif stock > MAX_STOCK:
        errors["stock"] = f"Stock cannot exceed {MAX_STOCK}"
    return errors


def validate_signup(name, email, password, role) -> dict:
    errors = {}
    if not (name or "").strip():
        errors["name"] = "Name is required"
    if not email or not EMAIL_RE.match(email.strip()):
        errors["email"] = "A valid email is required"
    if len(password or "") < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if role not in ROLES:
        errors["role"] = "Invalid role. Must be 'seller' or 'customer'"
    return errors


def validate_profile(name, phone_number) -> dict:
    errors = {}
    if not (name or "").strip():
        errors["name"] = "Name is required"
    if phone_number and validate_contact_number(phone_number):
        errors["phone_number"] = "Please enter a valid 10-digit phone number"
    return errors
