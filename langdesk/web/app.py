"""Flask application configuration and blueprint registration."""

from __future__ import annotations

import hmac

from flask import Flask, jsonify, request

import langdesk.config as config
from langdesk.language.service import LanguageService
from langdesk.logger import get_logger

from .routes import EXTENSION_KEY
from .routes.auto_translate import auto_translate_bp
from .routes.language import language_bp
from .routes.settings import settings_bp
from .tasks import JobScheduler

logger = get_logger(__name__)

ADMIN_TOKEN_HEADER = "X-Admin-Token"


def is_authorized() -> bool:
    """
    Check the admin token of the current request.

    Without a configured admin_token every request is allowed.
    """
    expected = config.load_config().get("admin_token") or ""
    if not expected:
        return True
    provided = request.headers.get(ADMIN_TOKEN_HEADER, "")
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def configured_lease_ttl() -> float:
    """Lease TTL from the current settings, so edits apply to the next run."""
    return float(config.load_config()["auto_translate"].get("lease_ttl_seconds", 600))


def build_app(service: LanguageService | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Ensure JSON responses keep Unicode data.
    app.json.ensure_ascii = False

    if service is None:
        service = LanguageService(scheduler=JobScheduler(lease_ttl_seconds=configured_lease_ttl))
    app.extensions[EXTENSION_KEY] = service

    @app.before_request
    def check_admin_token():
        if request.path.startswith("/api/") and not is_authorized():
            logger.warning("Rejected %s %s: missing or wrong admin token", request.method, request.path)
            return jsonify({"error": "Forbidden", "code": "forbidden"}), 403
        return None

    register_blueprints(app)
    register_default_routes(app)

    return app


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    app.register_blueprint(language_bp, url_prefix="/api/language")
    app.register_blueprint(auto_translate_bp, url_prefix="/api/auto-translate")
    app.register_blueprint(settings_bp, url_prefix="/api/settings")


def register_default_routes(app: Flask) -> None:
    """Register health route and JSON error handlers."""

    @app.get("/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok"})

    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify({"error": "Not found", "code": "not_found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed", "code": "method_not_allowed"}), 405

    @app.errorhandler(500)
    def internal_error(e):
        logger.exception("Internal server error: %s", e)
        return jsonify({"error": "Internal server error", "code": "internal_error"}), 500
