"""
Core module - Persistence and job plumbing

This module provides:
- database: sqlite app config and job lease records
- schema: Database initialization and migrations
- storage: File storage backends for catalogs and drafts
- cancellation: Cooperative cancel token for background jobs
- exceptions: Service error types
"""

from langdesk.core.database import (
    DB_FILE,
    get_connection,
    # App config operations
    get_app_config,
    set_app_config,
    delete_app_config,
    get_all_app_config,
    # Job lease operations
    acquire_lease,
    renew_lease,
    release_lease,
    get_lease,
)

from langdesk.core.schema import (
    DB_VERSION,
    get_db_version,
    set_db_version,
    initialize_database,
    migrate_database,
)

from langdesk.core.storage import FileStorage, MemoryStorage
from langdesk.core.cancellation import CancelToken
from langdesk.core.exceptions import (
    LangdeskError,
    ValidationError,
    StorageError,
    AutoTranslateBusyError,
)
