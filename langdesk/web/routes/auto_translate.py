"""Auto-translate API routes: start, stop and status polling."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

import langdesk.config as config
from langdesk.core.exceptions import AutoTranslateBusyError, ValidationError
from langdesk.logger import get_logger
from langdesk.provider import TranslationError, validate_provider_config

from . import error_response, get_service, parse_flag

auto_translate_bp = Blueprint("auto_translate", __name__)
logger = get_logger(__name__)


@auto_translate_bp.get("")
def get_auto_translate():
    """Return the persisted job configuration."""
    return jsonify(get_service().get_auto_translate_data())


@auto_translate_bp.post("")
def update_auto_translate():
    """Start the job when is_translating is set, stop it otherwise."""
    service = get_service()
    data: Dict[str, Any] = request.get_json(silent=True) or {}

    if not parse_flag(data.get("is_translating", False)):
        service.stop_auto_translate()
        return jsonify(service.polling_status())

    selected_locales = data.get("selected_locales") or []
    if not isinstance(selected_locales, list) or not all(
        isinstance(locale, str) and locale.strip() for locale in selected_locales
    ):
        return jsonify({
            "error": "selected_locales must be a list of locales",
            "code": "invalid_locales",
        }), 400
    selected_locales = [locale.strip() for locale in selected_locales]

    try:
        validate_provider_config(config.load_config())
    except TranslationError as e:
        logger.warning("Translation provider validation failed: %s", e)
        return error_response(e, 400)

    try:
        service.start_auto_translate(
            only_draft=parse_flag(data.get("only_draft", True)),
            selected_locales=selected_locales,
        )
    except ValidationError as e:
        return error_response(e, 400)
    except AutoTranslateBusyError as e:
        return error_response(e, 409)

    return jsonify(service.polling_status()), 202


@auto_translate_bp.get("/status")
def get_auto_translate_status():
    """Polling endpoint of the admin screen."""
    return jsonify(get_service().polling_status())
