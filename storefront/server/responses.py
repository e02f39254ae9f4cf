from flask import jsonify

from storefront.errors import StorefrontError
from storefront.server.models import db


def ok(data=None, code=200):
    return jsonify(data if data is not None else {}), code


def err(msg, code=400, **extra):
    return jsonify({"error": msg, **extra}), code


def fail(exc: StorefrontError):
    return jsonify(exc.to_dict()), exc.status


def commit_or_rollback():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
