"""
Typed shapes of the REST responses the client consumes.

Prices arrive as JSON numbers and are held as ``Decimal`` so totals add up to
the cent.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.pricing import line_total, money


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Session(_Schema):
    user_id: int
    username: str = ""
    role: Literal["customer", "seller"]
    token: str

    @property
    def is_seller(self) -> bool:
        return self.role == "seller"


class Profile(_Schema):
    id: int
    name: str
    email: str
    role: str
    address: str = ""
    phone_number: str = ""


class Product(_Schema):
    id: int
    seller_id: Optional[int] = None
    name: str
    description: str = ""
    price: Decimal = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    category: str = ""
    image_url: str = ""
    seller_name: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _money(cls, v):
        return money(v)


class CartItem(_Schema):
    id: int
    quantity: int = Field(..., ge=1)
    product: Product

    @property
    def subtotal(self) -> Decimal:
        return line_total(self.product.price, self.quantity)


class Order(_Schema):
    id: int
    user_id: int
    total_amount: Decimal
    status: str
    payment_method: str
    payment_id: Optional[str] = None
    shipping_address: str = ""
    contact_number: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user_name: Optional[str] = None
    item_count: Optional[int] = None
    seller_subtotal: Optional[Decimal] = None

    @field_validator("total_amount", "seller_subtotal", mode="before")
    @classmethod
    def _money(cls, v):
        return None if v is None else money(v)


class OrderLine(_Schema):
    id: int
    product_id: Optional[int] = None
    seller_id: int
    product_name: str
    product_image: str = ""
    price: Decimal
    quantity: int

    @field_validator("price", mode="before")
    @classmethod
    def _money(cls, v):
        return money(v)

    @property
    def subtotal(self) -> Decimal:
        return line_total(self.price, self.quantity)


class OrderDetail(_Schema):
    order: Order
    items: List[OrderLine] = Field(default_factory=list, alias="order_items")
    user_name: str = ""

    @property
    def total(self) -> Decimal:
        return self.order.total_amount


class SellerOrderDetail(_Schema):
    order: Order
    items: List[OrderLine] = Field(default_factory=list)
    user_name: str = ""
    seller_subtotal: Decimal
    allowed_transitions: List[str] = Field(default_factory=list)

    @field_validator("seller_subtotal", mode="before")
    @classmethod
    def _money(cls, v):
        return money(v)


class Receipt(_Schema):
    order_id: int
    total_amount: Decimal
    status: str

    @field_validator("total_amount", mode="before")
    @classmethod
    def _money(cls, v):
        return money(v)
