import logging

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from storefront.server.config import Config
from storefront.server.models import db
from storefront.server.responses import err
from storefront.server.routes import BLUEPRINTS

logging.basicConfig(level=logging.INFO)


def create_app(config=None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    db.init_app(app)
    with app.app_context():
        db.create_all()

    for bp in BLUEPRINTS:
        app.register_blueprint(bp)

    # ============ CORS ============
    @app.after_request
    def add_cors_headers(resp):
        resp.headers["Access-Control-Allow-Origin"] = app.config["CORS_ORIGIN"]
        resp.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
        resp.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return resp

    @app.before_request
    def preflight():
        if request.method == "OPTIONS":
            return ("", 204)
        return None

    # ============ Errors ============
    @app.errorhandler(HTTPException)
    def http_error(e):
        return err(e.name.lower().replace(" ", "_"), e.code, message=e.description)

    @app.errorhandler(Exception)
    def unhandled(e):
        app.logger.exception("unhandled error on %s %s", request.method, request.path)
        return err("internal_error", 500, message="Internal server error")

    @app.get("/api/health")
    def health():
        return {"service": "storefront", "status": "ok", "prefix": "/api"}

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=Config.PORT, debug=True)
