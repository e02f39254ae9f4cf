# models.py
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

from storefront.lifecycle import OrderStatus
from storefront.pricing import line_total, money

db = SQLAlchemy()


def _iso(dt):
    return dt.isoformat() if dt else None


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password = db.Column(db.String(255), nullable=False)   # werkzeug hash
    role = db.Column(db.String(20), nullable=False, default="customer")  # customer|seller
    address = db.Column(db.String(255))
    phone_number = db.Column(db.String(20))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    products = db.relationship("Product", back_populates="seller", lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "address": self.address or "",
            "phone_number": self.phone_number or "",
        }


class Product(db.Model):
    __tablename__ = "products"
    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default="")
    price = db.Column(db.Float, nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    category = db.Column(db.String(80), nullable=False, index=True)
    image_url = db.Column(db.String(500), default="")
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    seller = db.relationship("User", back_populates="products")
    cart_items = db.relationship("CartItem", back_populates="product", cascade="all, delete-orphan")

    def to_dict(self, with_seller=False):
        d = {
            "id": self.id,
            "seller_id": self.seller_id,
            "name": self.name,
            "description": self.description or "",
            "price": float(money(self.price)),
            "stock": self.stock,
            "category": self.category,
            "image_url": self.image_url or "",
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if with_seller:
            d["seller_name"] = self.seller.name if self.seller else "Unknown Seller"
        return d


class CartItem(db.Model):
    __tablename__ = "cart_items"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    product = db.relationship("Product", back_populates="cart_items")

    __table_args__ = (
        db.UniqueConstraint("user_id", "product_id", name="uq_cart_user_product"),
        db.CheckConstraint("quantity > 0", name="ck_cart_quantity_positive"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "quantity": self.quantity,
            "product": self.product.to_dict(),
        }


class Order(db.Model):
    __tablename__ = "orders"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    total_amount = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    payment_method = db.Column(db.String(20), nullable=False)   # cod|gateway
    payment_id = db.Column(db.String(120))
    shipping_address = db.Column(db.String(500), nullable=False)
    contact_number = db.Column(db.String(20), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship("User")
    items = db.relationship(
        "OrderItem",
        back_populates="order",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def seller_ids(self):
        return {it.seller_id for it in self.items}

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "total_amount": float(money(self.total_amount)),
            "status": self.status,
            "payment_method": self.payment_method,
            "payment_id": self.payment_id,
            "shipping_address": self.shipping_address,
            "contact_number": self.contact_number,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class OrderItem(db.Model):
    __tablename__ = "order_items"
    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    # product may be deleted later; name/image/price below are the snapshot
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    seller_id = db.Column(db.Integer, nullable=False, index=True)
    product_name = db.Column(db.String(200), nullable=False)
    product_image = db.Column(db.String(500), default="")
    price = db.Column(db.Float, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    order = db.relationship("Order", back_populates="items")

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "seller_id": self.seller_id,
            "product_name": self.product_name,
            "product_image": self.product_image or "",
            "price": float(money(self.price)),
            "quantity": self.quantity,
            "subtotal": float(line_total(self.price, self.quantity)),
            "created_at": _iso(self.created_at),
        }


__all__ = ["db", "User", "Product", "CartItem", "Order", "OrderItem"]
