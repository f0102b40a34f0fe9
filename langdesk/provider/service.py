"""
Translation Provider Service Module

This module provides the translator used by the auto-translate worker:
- TranslatorService: translate(source_language, target_language, text)
- Configuration validation

For provider-specific API implementations, see provider/providers.py
"""

from typing import Any, Callable, Dict, Optional

from langdesk.config import BUILTIN_PROVIDERS, load_config
from langdesk.logger import get_logger
from langdesk.provider.exceptions import TranslationError
from langdesk.provider.providers import call_chat_completion, call_google_translate

logger = get_logger(__name__)

PROVIDER_CALLS: Dict[str, Callable[..., str]] = {
    "google": call_google_translate,
    "openai": call_chat_completion,
}


def validate_provider_config(config: Optional[Dict[str, Any]] = None,
                             provider_override: Optional[str] = None) -> None:
    """
    Validate that the translation provider is properly set up.

    Args:
        config: Configuration dict (loaded when omitted)
        provider_override: Optional provider to validate instead of the default.

    Raises:
        TranslationError: If configuration is invalid or missing, with code and details.
    """
    config = config if config is not None else load_config()
    provider = provider_override or config.get('translation_provider', 'google')

    if provider not in BUILTIN_PROVIDERS:
        raise TranslationError(
            f"Unknown translation provider '{provider}'",
            code="provider_unknown",
            details={"provider": provider}
        )

    provider_config = config.get(provider, {})
    if provider == "openai":
        api_key = provider_config.get('api_key', '')
        if not api_key or api_key == "YOUR_API_KEY_HERE":
            raise TranslationError(
                "OpenAI API key not configured. Please set it in Settings.",
                code="provider_config_missing",
                details={"provider": provider, "missing_field": "api_key"}
            )
        models = [m for m in provider_config.get('models', []) if m and isinstance(m, str)]
        if not models and not provider_config.get('model'):
            raise TranslationError(
                "OpenAI model not configured",
                code="provider_config_missing",
                details={"provider": provider, "missing_field": "models"}
            )


class TranslatorService:
    """Machine translator backed by the configured provider."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, provider_override: Optional[str] = None):
        self.config = config if config is not None else load_config()
        self.provider = provider_override or self.config.get('translation_provider', 'google')
        if self.provider not in PROVIDER_CALLS:
            raise TranslationError(
                f"Unknown translation provider '{self.provider}'",
                code="provider_unknown",
                details={"provider": self.provider}
            )
        self.call_count = 0
        logger.info(f"Initialized translator with provider: {self.provider}")

    def translate(self, source_language: str, target_language: str, text: str) -> str:
        """
        Translate one text.

        Raises:
            TranslationError: On any provider failure
        """
        if not text.strip():
            return text
        provider_config = self.config.get(self.provider, {})
        self.call_count += 1
        return PROVIDER_CALLS[self.provider](provider_config, source_language, target_language, text)
