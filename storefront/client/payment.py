"""
Payment gateway seam.

The gateway is an external, asynchronous and user-cancelable step: the
checkout hands it a ``PaymentRequest`` and gets back a payment reference, or
``PaymentCancelled`` when the user dismisses it. Each provider integration
subclasses ``PaymentGateway`` and is passed to ``Storefront(gateway=...)``.
"""
from abc import ABC, abstractmethod

from storefront.client.schemas import _Schema


class PaymentRequest(_Schema):
    amount: int           # minor units (paise/cents)
    currency: str
    description: str = "Purchase from E-Commerce Store"
    name: str = ""
    contact: str = ""


class PaymentGateway(ABC):
    @abstractmethod
    def confirm(self, request: PaymentRequest) -> str:
        """Collect ``request.amount`` and return the provider's payment reference.

        Raise ``PaymentCancelled`` (or return an empty reference) when the user
        backs out; the checkout then leaves the cart as it was.
        """
