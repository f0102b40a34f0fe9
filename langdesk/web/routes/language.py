"""Language screen API routes: listing, edits and locale search."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from langdesk.core.exceptions import StorageError, ValidationError
from langdesk.logger import get_logger

from . import error_response, get_service, parse_flag

language_bp = Blueprint("language", __name__)
logger = get_logger(__name__)


@language_bp.get("")
def get_language():
    """
    Return one page of language items, or one translation.

    With target_locale and default_text the translation of default_text
    in that locale is returned instead of the listing.
    """
    service = get_service()
    target_locale = request.args.get("target_locale")
    default_text = request.args.get("default_text")

    if target_locale is not None or default_text is not None:
        if not target_locale or default_text is None:
            return jsonify({
                "error": "target_locale and default_text are both required",
                "code": "invalid_request",
            }), 400
        try:
            text = service.get_language_text(target_locale, default_text)
        except ValidationError as e:
            return error_response(e, 400)
        return jsonify({"text": text})

    try:
        page = int(request.args.get("page", 1))
    except (TypeError, ValueError):
        return jsonify({"error": "page must be an integer", "code": "invalid_request"}), 400
    page = max(page, 1)

    items = service.get_language_items(page)
    return jsonify({
        "page": page,
        "items": items,
        "accepted_locales": service.context().accepted_locales,
    })


@language_bp.post("")
def update_language():
    """Apply an edit batch, or remove everything when remove_all is set."""
    service = get_service()
    data: Dict[str, Any] = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object", "code": "invalid_request"}), 400

    try:
        batch = service.apply(data)
    except ValidationError as e:
        logger.warning("Rejected language batch: %s", e)
        return error_response(e, 400)
    except StorageError as e:
        logger.error("Failed to save language batch: %s", e)
        return error_response(e, 500)

    if batch.remove_all:
        return jsonify({"message": "All translations removed"})
    return jsonify({
        "message": "Language updated",
        "removed": len(batch.removed_items),
        "changed": len(batch.changed_items),
    })


@language_bp.get("/search")
def search_language():
    """Search locales by display name (keyword) or exact id (value)."""
    service = get_service()
    results = service.search_languages(
        keyword=request.args.get("keyword", "").strip(),
        values=[v for v in request.args.getlist("value") if v],
        only_supported=parse_flag(request.args.get("only_supported", "")),
        include_current_locale=parse_flag(request.args.get("include_current_locale", "")),
    )
    return jsonify(results)
