"""Web application package for langdesk."""

from flask import Flask

from langdesk.config import initialize_app


def create_app(service=None) -> Flask:
    """
    Application factory for the web interface.

    Args:
        service: Optional LanguageService; by default one backed by the
            configured languages directory and a JobScheduler
    """
    initialize_app()

    from .app import build_app  # Import here to avoid circular imports

    return build_app(service)


__all__ = ["create_app"]
