"""
Service Exceptions

Errors raised by the language core and surfaced by the web layer.
Provider errors live in provider/exceptions.py.
"""


class LangdeskError(Exception):
    """Base error with optional code and details."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}


class ValidationError(LangdeskError):
    """Malformed input rejected before any store is touched."""


class StorageError(LangdeskError):
    """A catalog or draft file could not be written."""


class AutoTranslateBusyError(LangdeskError):
    """Another auto-translate worker already holds the job lease."""
