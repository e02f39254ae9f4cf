from datetime import datetime, timedelta
from functools import wraps

import jwt
from flask import current_app, g, request

from storefront.errors import AuthRequired, Forbidden
from storefront.server.models import db, User
from storefront.server.responses import fail


def make_token(u: User) -> str:
    cfg = current_app.config
    payload = {
        "sub": str(u.id),
        "name": u.name,
        "role": u.role,
        "exp": datetime.utcnow() + timedelta(hours=cfg["JWT_TTL_HOURS"]),
    }
    return jwt.encode(payload, cfg["JWT_SECRET"], algorithm=cfg["JWT_ALGO"])


def decode_token(token: str) -> dict:
    cfg = current_app.config
    return jwt.decode(token, cfg["JWT_SECRET"], algorithms=[cfg["JWT_ALGO"]])


def current_user():
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    token = auth.split(" ", 1)[1].strip()
    try:
        payload = decode_token(token)
        return db.session.get(User, int(payload.get("sub")))
    except (jwt.PyJWTError, TypeError, ValueError):
        return None


def require_user(role=None):
    """Reject the request unless it carries a valid token (and ``role``, if given).

    The resolved user is stored on ``g.user``.
    """
    def _wrap(f):
        @wraps(f)
        def inner(*args, **kwargs):
            u = current_user()
            if u is None:
                return fail(AuthRequired("Authentication required"))
            if role and u.role != role:
                return fail(Forbidden(f"Only {role}s can do that"))
            g.user = u
            return f(*args, **kwargs)
        return inner
    return _wrap


def ensure_self(claimed_id):
    """Query/body ids must name the token's user; the token wins otherwise."""
    if claimed_id in (None, ""):
        return None
    try:
        claimed = int(claimed_id)
    except (TypeError, ValueError):
        return fail(Forbidden("Invalid user id"))
    if claimed != g.user.id:
        return fail(Forbidden("You can only act on your own account"))
    return None
