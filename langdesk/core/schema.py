"""
Database Schema Management Module

This module handles database initialization and migrations.
For CRUD operations, see core/database.py
"""

import sqlite3

# Import database module to use DB_FILE and get_connection dynamically
# This ensures monkeypatching in tests works correctly
import langdesk.core.database as db

DB_VERSION = 2  # v2 added job_leases


def get_connection():
    """Get a database connection using the database module's DB_FILE."""
    return db.get_connection()


def get_db_version() -> int:
    """Get current database version."""
    try:
        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT version FROM db_version LIMIT 1")
            row = cursor.fetchone()
            return row[0] if row else 0
    except sqlite3.OperationalError:
        return 0


def set_db_version(version: int):
    """Set database version."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("CREATE TABLE IF NOT EXISTS db_version (version INTEGER)")
        cursor.execute("DELETE FROM db_version")
        cursor.execute("INSERT INTO db_version (version) VALUES (?)", (version,))
        conn.commit()


def initialize_database():
    """Initializes the database and creates the tables."""
    from langdesk.logger import get_logger
    logger = get_logger(__name__)

    if db.DB_FILE.exists():
        current_version = get_db_version()
        if current_version < DB_VERSION:
            migrate_database(current_version, DB_VERSION)
        return

    with get_connection() as conn:
        cursor = conn.cursor()
        db._ensure_app_config_table(cursor)
        db._ensure_job_leases_table(cursor)
        conn.commit()

    set_db_version(DB_VERSION)
    logger.info(f"Database created at {db.DB_FILE} (version {DB_VERSION})")


def migrate_database(from_version: int, to_version: int):
    """Bring an older database up to the current schema."""
    from langdesk.logger import get_logger
    logger = get_logger(__name__)

    logger.info(f"Migrating database from version {from_version} to {to_version}")
    with get_connection() as conn:
        cursor = conn.cursor()
        if from_version < 1:
            db._ensure_app_config_table(cursor)
        if from_version < 2:
            db._ensure_job_leases_table(cursor)
        conn.commit()

    set_db_version(to_version)
    logger.info("Database migration complete")
