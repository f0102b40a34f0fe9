"""Route blueprints for the web application."""

from typing import Any

from flask import current_app, jsonify

EXTENSION_KEY = "langdesk"


def get_service():
    """LanguageService of the running app."""
    return current_app.extensions[EXTENSION_KEY]


def parse_flag(value: Any) -> bool:
    """Boolean from JSON or query string values ("1", "true", "on", ...)."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def error_response(exc, status: int):
    """JSON body for a LangdeskError or TranslationError."""
    payload = {"error": str(exc), "code": getattr(exc, "code", None) or "error"}
    details = getattr(exc, "details", None)
    if details:
        payload["details"] = details
    return jsonify(payload), status
