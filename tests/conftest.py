from urllib.parse import urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from storefront.client import ApiClient, MemorySessionStore, Storefront
from storefront.client.payment import PaymentGateway
from storefront.errors import PaymentCancelled
from storefront.server import create_app
from storefront.server.models import db

BASE_URL = "http://shop.test/api"
PASSWORD = "secret123"


class FlaskAdapter(BaseAdapter):
    """requests transport that answers from a Flask test client."""

    def __init__(self, flask_client):
        super().__init__()
        self.flask_client = flask_client
        self.calls = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        parts = urlsplit(request.url)
        self.calls.append((request.method, parts.path))
        headers = {k: v for k, v in request.headers.items() if k.lower() != "content-length"}
        body = request.body.encode() if isinstance(request.body, str) else request.body
        resp = self.flask_client.open(
            parts.path,
            method=request.method,
            query_string=parts.query,
            headers=headers,
            data=body,
        )
        r = requests.Response()
        r.status_code = resp.status_code
        r.reason = resp.status.split(" ", 1)[-1]
        r.headers = CaseInsensitiveDict(dict(resp.headers))
        r._content = resp.get_data()
        r.encoding = "utf-8"
        r.url = request.url
        r.request = request
        return r

    def close(self):
        pass

    def paths(self, method=None):
        return [p for m, p in self.calls if method is None or m == method]


class FakeGateway(PaymentGateway):
    def __init__(self, reference="pay_123", cancel=False):
        self.reference = reference
        self.cancel = cancel
        self.requests = []

    def confirm(self, request):
        self.requests.append(request)
        if self.cancel:
            raise PaymentCancelled("Payment cancelled by user")
        return self.reference


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "JWT_SECRET": "test-secret-key-long-enough-for-hs256",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, name, email, role):
    r = client.post("/api/signup", json={"name": name, "email": email, "password": PASSWORD, "role": role})
    assert r.status_code == 201, r.get_json()
    r = client.post("/api/login", json={"email": email, "password": PASSWORD})
    assert r.status_code == 200, r.get_json()
    return r.get_json()


def create_product(client, seller, name="Widget", price=10.0, stock=5, category="Electronics"):
    r = client.post("/api/products/create", headers=auth(seller["token"]), json={
        "name": name,
        "description": f"{name} description",
        "price": price,
        "stock": stock,
        "category": category,
        "image_url": f"https://img.test/{name}.png",
    })
    assert r.status_code == 201, r.get_json()
    return r.get_json()


def add_to_cart(client, user, product, quantity=1):
    return client.post("/api/cart/add", headers=auth(user["token"]), json={
        "user_id": user["id"], "product_id": product["id"], "quantity": quantity,
    })


@pytest.fixture
def seller(client):
    return register(client, "Alice Seller", "alice@example.com", "seller")


@pytest.fixture
def seller_b(client):
    return register(client, "Bob Seller", "bob@example.com", "seller")


@pytest.fixture
def customer(client):
    return register(client, "Carol Customer", "carol@example.com", "customer")


# ---------- client-side wiring ----------
@pytest.fixture
def transport(client):
    return FlaskAdapter(client)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def make_shop(transport, gateway):
    def _make(email=None, store=None):
        http = requests.Session()
        http.mount("http://shop.test", transport)
        shop = Storefront(
            api=ApiClient(base_url=BASE_URL, http=http, timeout=10),
            store=store if store is not None else MemorySessionStore(),
            gateway=gateway,
        )
        if email:
            shop.account.login(email, PASSWORD)
        return shop
    return _make
