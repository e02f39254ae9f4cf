from flask import Blueprint, current_app, g, request
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from storefront.errors import AuthRequired, ValidationFailed
from storefront.server.auth_mw import ensure_self, make_token, require_user
from storefront.server.models import db, User
from storefront.server.responses import commit_or_rollback, fail, ok
from storefront.validation import (
    normalize_contact,
    normalize_email,
    validate_profile,
    validate_signup,
)

bp_auth = Blueprint("auth", __name__, url_prefix="/api")


@bp_auth.post("/signup")
def signup():
    d = request.get_json(silent=True) or {}
    name = (d.get("name") or "").strip()
    email = normalize_email(d.get("email"))
    password = d.get("password") or ""
    role = (d.get("role") or "").strip().lower()

    errors = validate_signup(name, email, password, role)
    if errors:
        return fail(ValidationFailed(errors))
    if User.query.filter_by(email=email).first():
        return fail(ValidationFailed({"email": "Email already registered"}))

    u = User(name=name, email=email, password=generate_password_hash(password), role=role)
    db.session.add(u)
    try:
        commit_or_rollback()
    except IntegrityError:
        return fail(ValidationFailed({"email": "Email already registered"}))

    current_app.logger.info("user %s registered as %s", u.id, u.role)
    return ok({"message": "User registered successfully", **u.to_dict()}, 201)


@bp_auth.post("/login")
def login():
    d = request.get_json(silent=True) or {}
    email = normalize_email(d.get("email"))
    password = d.get("password") or ""
    if not email or not password:
        return fail(ValidationFailed({"email": "Email and password are required"}))

    u = User.query.filter_by(email=email).first()
    if not u or not check_password_hash(u.password, password):
        current_app.logger.info("failed login for %s", email)
        return fail(AuthRequired("Invalid email or password"))

    return ok({
        "message": "Login successful",
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "token": make_token(u),
    })


@bp_auth.get("/profile")
@require_user()
def get_profile():
    denied = ensure_self(request.args.get("user_id"))
    if denied:
        return denied
    return ok(g.user.to_dict())


@bp_auth.put("/profile/update")
@require_user()
def update_profile():
    d = request.get_json(silent=True) or {}
    denied = ensure_self(d.get("id"))
    if denied:
        return denied

    name = (d.get("name") or "").strip()
    phone = normalize_contact(d.get("phone_number"))
    errors = validate_profile(name, phone)
    if errors:
        return fail(ValidationFailed(errors))

    # email and role are immutable
    u = g.user
    u.name = name
    u.address = (d.get("address") or "").strip()
    u.phone_number = phone
    commit_or_rollback()
    return ok({"message": "Profile updated successfully", "profile": u.to_dict()})

