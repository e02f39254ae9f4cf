"""Error taxonomy shared by the storefront client and the REST backend.

Every error carries a user-facing ``message`` and a ``retryable`` flag so a
view can decide between "try again" guidance and a definitive rejection.
The backend answers with ``{"error": <slug>, ...}`` bodies; ``slug`` ties a
response back to one of these classes.
"""


class StorefrontError(Exception):
    slug = "error"
    status = 400
    retryable = False
    default_message = "Something went wrong."

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.slug, "message": self.message}
        body.update(self.details)
        return body


class AuthRequired(StorefrontError):
    slug = "auth_required"
    status = 401
    default_message = "Please log in to continue."


class Forbidden(StorefrontError):
    slug = "forbidden"
    status = 403
    default_message = "You are not allowed to do that."


class ValidationFailed(StorefrontError):
    slug = "validation_failed"
    status = 400
    default_message = "Please correct the highlighted fields."

    def __init__(self, fields: dict, message=None):
        self.fields = dict(fields)
        super().__init__(message, fields=self.fields)


class NotFound(StorefrontError):
    slug = "not_found"
    status = 404
    default_message = "Not found."


class InvalidTransition(StorefrontError):
    slug = "invalid_transition"
    status = 409
    default_message = "That status change is not allowed."


class EmptyCart(StorefrontError):
    slug = "empty_cart"
    status = 400
    default_message = "Your cart is empty. Add items before checking out."


class OutOfStock(StorefrontError):
    slug = "out_of_stock"
    status = 409
    default_message = "Not enough stock for that quantity."


class PaymentCancelled(StorefrontError):
    slug = "payment_cancelled"
    status = 402
    default_message = "Payment was cancelled. Your cart has not been changed."


class PriceChanged(StorefrontError):
    slug = "price_changed"
    status = 409
    default_message = "Prices changed while you were checking out. Please review your cart."


class CheckoutInProgress(StorefrontError):
    slug = "checkout_in_progress"
    status = 409
    default_message = "Your order is already being placed."


class NetworkTimeout(StorefrontError):
    slug = "network_timeout"
    status = 504
    retryable = True
    default_message = "The server took too long to respond. Please try again."


class BackendError(StorefrontError):
    slug = "backend_error"
    status = 502
    retryable = True
    default_message = "The server could not complete the request. Please try again."


# slug -> class, used by the client to rebuild errors from response bodies
BY_SLUG = {
    cls.slug: cls
    for cls in (
        AuthRequired,
        Forbidden,
        ValidationFailed,
        NotFound,
        InvalidTransition,
        EmptyCart,
        OutOfStock,
        PaymentCancelled,
        PriceChanged,
        CheckoutInProgress,
    )
}
