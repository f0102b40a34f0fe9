"""
langdesk - translation catalog, draft queue and auto-translate service.

Subpackages:
- core: sqlite options, job leases, file storage, cancellation
- language: catalogs, drafts, batch coordinator, auto-translate controller and worker
- provider: external machine translation providers
- web: Flask application, routes and background job scheduler
"""

__version__ = "1.0.0"
