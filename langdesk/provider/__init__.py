"""
Provider Module

This module provides machine translation providers used by auto-translate.
"""

from langdesk.provider.exceptions import TranslationError
from langdesk.provider.service import TranslatorService, validate_provider_config

__all__ = ['TranslationError', 'TranslatorService', 'validate_provider_config']
