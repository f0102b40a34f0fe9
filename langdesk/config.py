import copy
import json
from pathlib import Path
from typing import Dict, Any

from langdesk.core import database as db
from langdesk.core.schema import initialize_database
from langdesk.logger import get_logger

logger = get_logger(__name__)

# Catalog configuration constants
TEXT_MAX_LENGTH = 512  # Maximum characters for a source or translated text
LANGUAGE_ITEMS_PER_PAGE = 16
CATALOG_DOMAIN = "mobile-app-language"

# Provider configuration constants
BUILTIN_PROVIDERS = ["google", "openai"]

BUILTIN_PROVIDER_DISPLAY_NAMES = {
    "google": "Google Translate",
    "openai": "OpenAI compatible",
}

PROVIDER_DEFAULTS = {
    "timeout": 30
}

# Get base directory (project root)
BASE_DIR = Path(__file__).parent.parent
LANGUAGES_DIR = BASE_DIR / "languages"

# Default configuration template
DEFAULT_CONFIG = {
    "accepted_locales": [],
    "source_locale": "en_US",
    "languages_dir": "",
    "admin_token": "",
    "translation_provider": "google",
    "auto_translate": {
        "delay_seconds": 1.0,
        "lease_ttl_seconds": 600,
    },
    "google": {
        "api_url": "https://translate.googleapis.com/translate_a/single",
        "timeout": 30,
    },
    "openai": {
        "api_key": "YOUR_API_KEY_HERE",
        "models": ["gpt-4o-mini"],  # First is default
        "timeout": 60,
        "api_url": "https://api.openai.com/v1/chat/completions",
    },
    "log_mode": "off",
}


def initialize_app():
    """
    Initialize the application.
    This function is called on first run or when performing a factory reset.
    It creates the database and default configuration in database.
    """
    logger.info("Initializing application...")

    initialize_database()
    logger.info("Database initialized")

    try:
        existing_config = db.get_app_config('config')
        if not existing_config:
            logger.info("No config in database, initializing default config")
            save_config(DEFAULT_CONFIG)
        else:
            logger.debug("Config already exists in database")
    except Exception as e:
        logger.error(f"Failed to check/initialize config in database: {e}")
        logger.warning("Application will use in-memory default configuration")

    logger.info("Application initialization complete")


def _merge_defaults(stored: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay stored values on a copy of DEFAULT_CONFIG, one level deep for sections."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    for key, value in stored.items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key].update(value)
        else:
            config[key] = value
    return config


def load_config() -> Dict[str, Any]:
    """Load the configuration from database."""
    try:
        config_json = db.get_app_config('config')
        if config_json:
            config = _merge_defaults(json.loads(config_json))
            logger.debug("Configuration loaded from database")
            return config
        logger.debug("No config in database, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse config from database: {e}")
        logger.warning("Using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)
    except Exception as e:
        logger.error(f"Failed to load config from database: {e}")
        logger.warning("Using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any]):
    """Save the configuration to database."""
    try:
        config_json = json.dumps(config, ensure_ascii=False)
        db.set_app_config('config', config_json)
        logger.info("Configuration saved to database")
    except Exception as e:
        logger.error(f"Failed to save config to database: {e}")
        raise


def get_languages_dir(config: Dict[str, Any] = None) -> Path:
    """Directory holding catalog and draft files."""
    config = config if config is not None else load_config()
    configured = config.get('languages_dir')
    return Path(configured) if configured else LANGUAGES_DIR


def factory_reset():
    """
    Perform a factory reset.
    WARNING: This will delete all data and reset to defaults.
    """
    logger.warning("Performing factory reset...")

    languages_dir = get_languages_dir()
    if db.DB_FILE.exists():
        db.DB_FILE.unlink()
        logger.info("Database deleted")

    if languages_dir.exists():
        for path in languages_dir.glob(f"{CATALOG_DOMAIN}-*"):
            path.unlink()
        logger.info("Catalog files deleted")

    initialize_app()
    logger.info("Factory reset complete")
