"""
Client session: who is logged in, with which role and token.

The session is persisted as flat key/value pairs (``token``, ``userId``,
``username``, ``role``). They are stored in plain text and must be treated as
user-controlled: role checks made here only decide what to offer; the backend
re-checks every call.
"""
import json
import logging
import os
from functools import wraps
from typing import Optional

from pydantic import ValidationError

from storefront.client import config
from storefront.client.schemas import Session
from storefront.errors import AuthRequired, Forbidden

log = logging.getLogger(__name__)

KEYS = ("token", "userId", "username", "role")


def to_pairs(session: Session) -> dict:
    return {
        "token": session.token,
        "userId": str(session.user_id),
        "username": session.username,
        "role": session.role,
    }


def from_pairs(pairs: dict) -> Optional[Session]:
    if not pairs or not pairs.get("token") or not pairs.get("userId"):
        return None
    try:
        return Session(
            user_id=int(pairs["userId"]),
            username=pairs.get("username") or "",
            role=pairs.get("role"),
            token=pairs["token"],
        )
    except (ValidationError, TypeError, ValueError):
        log.warning("ignoring malformed stored session")
        return None


class MemorySessionStore:
    def __init__(self, pairs=None):
        self._pairs = dict(pairs or {})

    def read(self) -> dict:
        return dict(self._pairs)

    def write(self, pairs: dict):
        self._pairs = dict(pairs)

    def load(self) -> Optional[Session]:
        return from_pairs(self.read())

    def save(self, session: Session):
        self.write(to_pairs(session))

    def clear(self):
        self.write({})


class FileSessionStore(MemorySessionStore):
    """Key/value pairs in a JSON file, the CLI equivalent of browser storage."""

    def __init__(self, path=None):
        super().__init__()
        self.path = path or config.SESSION_FILE

    def read(self) -> dict:
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            log.warning("could not read session file %s", self.path)
            return {}
        return {k: data[k] for k in KEYS if k in data} if isinstance(data, dict) else {}

    def write(self, pairs: dict):
        if not pairs:
            try:
                os.remove(self.path)
            except FileNotFoundError:
                pass
            return
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump(pairs, fh)


# ===================== Guards =====================
def require_session(session: Optional[Session], role=None) -> Session:
    if session is None:
        raise AuthRequired()
    if role and session.role != role:
        raise Forbidden(f"This page is only available to {role}s.")
    return session


def guarded(role=None):
    """Method decorator: the owning service's ``session`` must satisfy ``role``."""
    def _wrap(f):
        @wraps(f)
        def inner(self, *args, **kwargs):
            require_session(self.session, role)
            return f(self, *args, **kwargs)
        return inner
    return _wrap


def landing_path(session: Optional[Session]) -> str:
    if session is None:
        return "/login"
    if session.is_seller:
        return "/seller/products"
    return "/shop"
