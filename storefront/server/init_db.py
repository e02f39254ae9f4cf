"""Recreate the schema and insert demo accounts and products.

    python -m storefront.server.init_db
"""
from werkzeug.security import generate_password_hash

from storefront.server.app import create_app
from storefront.server.models import db, Product, User

DEMO_PASSWORD = "secret123"

DEMO_PRODUCTS = [
    ("Wireless Headphones", "Over-ear, 30h battery", 59.99, 25, "Electronics"),
    ("Cotton T-Shirt", "Unisex, assorted sizes", 12.50, 100, "Clothing"),
    ("Python Cookbook", "Recipes for mastering Python 3", 39.00, 10, "Books"),
    ("Ceramic Mug", "350 ml, dishwasher safe", 8.00, 40, "Home"),
    ("Yoga Mat", "6 mm, non-slip", 22.00, 15, "Sports"),
]


def seed():
    seller = User(
        name="Demo Seller",
        email="seller@example.com",
        password=generate_password_hash(DEMO_PASSWORD),
        role="seller",
    )
    customer = User(
        name="Demo Customer",
        email="customer@example.com",
        password=generate_password_hash(DEMO_PASSWORD),
        role="customer",
        address="01 Sample Road",
        phone_number="9876543210",
    )
    db.session.add_all([seller, customer])
    db.session.flush()

    for name, desc, price, stock, category in DEMO_PRODUCTS:
        db.session.add(Product(
            seller_id=seller.id,
            name=name,
            description=desc,
            price=price,
            stock=stock,
            category=category,
        ))
    db.session.commit()
    return seller, customer


def main():
    app = create_app()
    with app.app_context():
        db.drop_all()
        db.create_all()
        seller, customer = seed()
        app.logger.info("seeded %s and %s (password: %s)", seller.email, customer.email, DEMO_PASSWORD)


if __name__ == "__main__":
    main()
