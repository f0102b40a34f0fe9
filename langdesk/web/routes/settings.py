"""Settings management API routes."""

from __future__ import annotations

import json
from typing import Any, Dict

from flask import Blueprint, jsonify, request

import langdesk.config as config
import langdesk.language_codes as lc
from langdesk.config import (
    BUILTIN_PROVIDERS,
    BUILTIN_PROVIDER_DISPLAY_NAMES,
    PROVIDER_DEFAULTS,
)
from langdesk.logger import LOG_MODES, get_logger, _clear_log_mode_cache

settings_bp = Blueprint("settings", __name__)
logger = get_logger(__name__)

TOP_LEVEL_KEYS = (
    "accepted_locales",
    "source_locale",
    "languages_dir",
    "admin_token",
    "translation_provider",
    "log_mode",
)


@settings_bp.get("")
def get_settings():
    """Return current configuration with default values merged."""
    try:
        current_config = config.load_config()
        logger.debug("Settings retrieved with defaults merged")

        # Return config with meta information for frontend
        return jsonify({
            "config": current_config,
            "meta": {
                "builtin_providers": [
                    {"id": p, "name": BUILTIN_PROVIDER_DISPLAY_NAMES[p]}
                    for p in BUILTIN_PROVIDERS
                ],
                "provider_defaults": PROVIDER_DEFAULTS,
                "log_modes": list(LOG_MODES),
                "locales": [
                    {"id": locale, "name": lc.get_locale_name(locale)}
                    for locale in lc.get_all_locales()
                ],
            }
        })
    except Exception as e:
        logger.error(f"Failed to retrieve settings: {e}")
        return jsonify({"error": "Failed to retrieve settings"}), 500


@settings_bp.put("")
def update_settings():
    """Update configuration. Sections (provider, auto_translate) are merged key by key."""
    try:
        data = request.get_json(silent=True)
        if not data or "config" not in data:
            return jsonify({"error": "Missing 'config' in request body"}), 400

        new_config = data["config"]

        validation_error = validate_config(new_config)
        if validation_error:
            return jsonify({"error": validation_error}), 400

        # Merge with existing config to preserve any fields not in the request
        current_config = config.load_config()

        for key in TOP_LEVEL_KEYS:
            if key in new_config:
                current_config[key] = new_config[key]

        if "accepted_locales" in new_config:
            current_config["accepted_locales"] = list(dict.fromkeys(new_config["accepted_locales"]))

        for section in ("auto_translate", *BUILTIN_PROVIDERS):
            if section in new_config:
                current_config.setdefault(section, {}).update(new_config[section])

        if "openai" in new_config and "models" in new_config["openai"]:
            current_config["openai"]["models"] = [
                m for m in new_config["openai"]["models"] if m and isinstance(m, str)
            ]

        config.save_config(current_config)

        # Clear log mode cache to ensure new log mode takes effect
        _clear_log_mode_cache()

        logger.info("Settings updated successfully")

        return jsonify({"message": "Settings updated successfully", "config": current_config})
    except json.JSONDecodeError:
        return jsonify({"error": "Invalid JSON"}), 400
    except Exception as e:
        logger.error(f"Failed to update settings: {e}")
        return jsonify({"error": "Failed to update settings"}), 500


def validate_config(config_dict: Dict[str, Any]) -> str | None:
    """Validate configuration structure and return error message if invalid."""
    if not isinstance(config_dict, dict):
        return "Configuration must be an object"

    if "accepted_locales" in config_dict:
        locales = config_dict["accepted_locales"]
        if not isinstance(locales, list) or not all(isinstance(locale, str) for locale in locales):
            return "accepted_locales must be an array of locales"
        unknown = [locale for locale in locales if not lc.is_valid_locale(locale)]
        if unknown:
            return f"Unknown locale(s): {', '.join(unknown)}"

    if "source_locale" in config_dict:
        source_locale = config_dict["source_locale"]
        if not isinstance(source_locale, str) or not lc.is_valid_locale(source_locale):
            return f"Unknown source locale: {source_locale}"

    for key in ("languages_dir", "admin_token"):
        if key in config_dict and not isinstance(config_dict[key], str):
            return f"{key} must be a string"

    if "translation_provider" in config_dict and config_dict["translation_provider"] not in BUILTIN_PROVIDERS:
        return f"Invalid translation provider: {config_dict['translation_provider']}"

    if "log_mode" in config_dict and config_dict["log_mode"] not in LOG_MODES:
        return f"Invalid log mode: {config_dict['log_mode']}"

    if "auto_translate" in config_dict:
        section = config_dict["auto_translate"]
        if not isinstance(section, dict):
            return "auto_translate config must be an object"
        delay = section.get("delay_seconds", 0)
        if isinstance(delay, bool) or not isinstance(delay, (int, float)) or delay < 0:
            return "auto_translate delay_seconds must be a non-negative number"
        ttl = section.get("lease_ttl_seconds", 1)
        if isinstance(ttl, bool) or not isinstance(ttl, (int, float)) or ttl <= 0:
            return "auto_translate lease_ttl_seconds must be a positive number"

    for provider in BUILTIN_PROVIDERS:
        if provider not in config_dict:
            continue
        provider_config = config_dict[provider]
        if not isinstance(provider_config, dict):
            return f"{provider} config must be an object"

        if "api_url" in provider_config:
            api_url = provider_config["api_url"]
            if api_url and not isinstance(api_url, str):
                return f"{provider} api_url must be a string"

        if "models" in provider_config:
            models = provider_config["models"]
            if not isinstance(models, list):
                return f"{provider} models must be an array"
            if len([m for m in models if m and isinstance(m, str)]) > 5:
                return f"{provider} can have at most 5 models"

        if "timeout" in provider_config:
            timeout = provider_config["timeout"]
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                return f"{provider} timeout must be a positive number"

    return None
