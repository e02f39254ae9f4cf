"""
The one HTTP client for the storefront backend.

Every endpoint goes through ``ApiClient._call`` which owns the timeout, the
retry policy for idempotent reads, the bearer header and the translation of
error responses into ``storefront.errors``.
"""
import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from storefront.client import config
from storefront.errors import (
    BY_SLUG,
    AuthRequired,
    BackendError,
    Forbidden,
    NetworkTimeout,
    NotFound,
    StorefrontError,
    ValidationFailed,
)

log = logging.getLogger(__name__)


def build_http(retries=config.RETRIES) -> requests.Session:
    # only GETs are retried; a repeated POST /checkout could double an order
    retry = Retry(
        total=retries,
        connect=retries,
        read=0,
        status=retries,
        backoff_factor=0.3,
        status_forcelist=(502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )
    http = requests.Session()
    adapter = HTTPAdapter(max_retries=retry)
    http.mount("http://", adapter)
    http.mount("https://", adapter)
    return http


def error_from_response(resp: requests.Response) -> StorefrontError:
    try:
        body = resp.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    slug = body.get("error")
    message = body.get("message")
    extra = {k: v for k, v in body.items() if k not in ("error", "message", "fields")}

    if slug == ValidationFailed.slug:
        return ValidationFailed(body.get("fields") or {}, message)
    cls = BY_SLUG.get(slug)
    if cls is not None:
        return cls(message, **extra)
    if resp.status_code == 401:
        return AuthRequired(message)
    if resp.status_code == 403:
        return Forbidden(message)
    if resp.status_code == 404:
        return NotFound(message)
    if resp.status_code == 400:
        return ValidationFailed({}, message or resp.text[:200] or None)
    return BackendError(message, http_status=resp.status_code)


class ApiClient:
    def __init__(self, base_url=None, token=None, timeout=None, http=None):
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self.token = token
        self.timeout = config.TIMEOUT if timeout is None else timeout
        self.http = http or build_http()

    def _headers(self):
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _call(self, method, path, params=None, json=None):
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            log.warning("%s %s timed out after %ss", method, path, self.timeout)
            raise NetworkTimeout(detail=str(e))
        except requests.RequestException as e:
            log.warning("%s %s failed: %s", method, path, e)
            raise BackendError("Could not reach the server. Please try again.", detail=str(e))

        if not resp.ok:
            error = error_from_response(resp)
            log.info("%s %s -> %s (%s)", method, path, resp.status_code, error.slug)
            raise error
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            raise BackendError("The server sent an unexpected response.", http_status=resp.status_code)

    # ---------- Auth / profile ----------
    def signup(self, name, email, password, role):
        return self._call("POST", "/signup", json={
            "name": name, "email": email, "password": password, "role": role,
        })

    def login(self, email, password):
        return self._call("POST", "/login", json={"email": email, "password": password})

    def get_profile(self, user_id):
        return self._call("GET", "/profile", params={"user_id": user_id})

    def update_profile(self, user_id, name, address, phone_number):
        return self._call("PUT", "/profile/update", json={
            "id": user_id, "name": name, "address": address, "phone_number": phone_number,
        })

    # ---------- Catalog ----------
    def shop_products(self, category=None):
        params = {"category": category} if category else None
        return self._call("GET", "/shop/products", params=params).get("products", [])

    def seller_products(self, seller_id):
        return self._call("GET", "/products/seller", params={"seller_id": seller_id})

    def create_product(self, data):
        return self._call("POST", "/products/create", json=data)

    def update_product(self, data):
        return self._call("PUT", "/products/update", json=data)

    def delete_product(self, product_id, seller_id):
        return self._call("DELETE", "/products/delete",
                          params={"product_id": product_id, "seller_id": seller_id})

    # ---------- Cart ----------
    def get_cart(self, user_id):
        return self._call("GET", "/cart", params={"user_id": user_id})

    def add_to_cart(self, user_id, product_id, quantity=1):
        return self._call("POST", "/cart/add", json={
            "user_id": user_id, "product_id": product_id, "quantity": quantity,
        })

    def update_cart_item(self, cart_item_id, quantity):
        return self._call("PUT", "/cart/update", json={"id": cart_item_id, "quantity": quantity})

    def delete_cart_item(self, cart_item_id):
        return self._call("DELETE", "/cart/delete", json={"id": cart_item_id})

    # ---------- Orders ----------
    def checkout(self, data):
        return self._call("POST", "/checkout", json=data)

    def user_orders(self, user_id):
        return self._call("GET", "/orders/user", params={"user_id": user_id})

    def order_details(self, order_id):
        return self._call("GET", "/orders/details", params={"order_id": order_id})

    def seller_orders(self, seller_id):
        return self._call("GET", "/orders/seller", params={"seller_id": seller_id})

    def seller_order_details(self, order_id, seller_id):
        return self._call("GET", "/orders/seller-details",
                          params={"order_id": order_id, "seller_id": seller_id})

    def update_order_status(self, order_id, status, expected_status=None):
        body = {"order_id": order_id, "status": status}
        if expected_status:
            body["expected_status"] = expected_status
        return self._call("PUT", "/orders/update-status", json=body)
