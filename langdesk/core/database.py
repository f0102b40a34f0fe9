"""
Database CRUD Operations Module

This module handles the sqlite backed records of the service:
- App Config (configuration, auto-translate options and progress)
- Job Leases (exclusive ownership of background jobs)

For schema management and migrations, see core/schema.py
"""

import sqlite3
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any

DB_FILE = Path(__file__).parent.parent / "langdesk.db"


def get_connection():
    """Get a database connection."""
    # Worker threads and request threads open their own connections
    return sqlite3.connect(DB_FILE, timeout=30)


def _ensure_app_config_table(cursor):
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS app_config (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)


def _ensure_job_leases_table(cursor):
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS job_leases (
            job_name TEXT PRIMARY KEY,
            owner TEXT NOT NULL,
            acquired_at REAL NOT NULL,
            expires_at REAL NOT NULL
        )
    """)


# ============================================================
# App Config CRUD Operations
# ============================================================

def get_app_config(key: str) -> Optional[str]:
    """Get a configuration value by key."""
    with get_connection() as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT value FROM app_config WHERE key = ?", (key,))
        except sqlite3.OperationalError:
            # Table not created yet
            return None
        row = cursor.fetchone()
        return row[0] if row else None


def set_app_config(key: str, value: str):
    """Set a configuration value."""
    with get_connection() as conn:
        cursor = conn.cursor()
        _ensure_app_config_table(cursor)
        cursor.execute("""
            INSERT OR REPLACE INTO app_config (key, value, updated_at)
            VALUES (?, ?, ?)
        """, (key, value, datetime.now()))
        conn.commit()


def delete_app_config(key: str):
    """Delete a configuration value (no-op when absent)."""
    with get_connection() as conn:
        cursor = conn.cursor()
        _ensure_app_config_table(cursor)
        cursor.execute("DELETE FROM app_config WHERE key = ?", (key,))
        conn.commit()


def get_all_app_config() -> Dict[str, str]:
    """Get all configuration values."""
    with get_connection() as conn:
        cursor = conn.cursor()
        _ensure_app_config_table(cursor)
        cursor.execute("SELECT key, value FROM app_config")
        return {row[0]: row[1] for row in cursor.fetchall()}


# ============================================================
# Job Lease Operations
# ============================================================

def acquire_lease(job_name: str, owner: str, ttl_seconds: float) -> bool:
    """
    Try to take the exclusive lease for a job.

    An expired lease is taken over. The check and the write happen inside
    one IMMEDIATE transaction so two callers can never both succeed.

    Args:
        job_name: Job identifier (e.g. "translate")
        owner: Identifier of the new holder
        ttl_seconds: Lease lifetime; holders renew it while working

    Returns:
        True if the lease is now held by owner, False if someone else holds it
    """
    now = time.time()
    conn = get_connection()
    try:
        conn.isolation_level = None
        cursor = conn.cursor()
        _ensure_job_leases_table(cursor)
        cursor.execute("BEGIN IMMEDIATE")
        cursor.execute(
            "SELECT owner, expires_at FROM job_leases WHERE job_name = ?",
            (job_name,),
        )
        row = cursor.fetchone()
        if row and row[1] > now and row[0] != owner:
            cursor.execute("ROLLBACK")
            return False
        cursor.execute("""
            INSERT OR REPLACE INTO job_leases (job_name, owner, acquired_at, expires_at)
            VALUES (?, ?, ?, ?)
        """, (job_name, owner, now, now + ttl_seconds))
        cursor.execute("COMMIT")
        return True
    finally:
        conn.close()


def renew_lease(job_name: str, owner: str, ttl_seconds: float) -> bool:
    """Extend a lease held by owner. Returns False if owner lost it."""
    with get_connection() as conn:
        cursor = conn.cursor()
        _ensure_job_leases_table(cursor)
        cursor.execute("""
            UPDATE job_leases SET expires_at = ?
            WHERE job_name = ? AND owner = ?
        """, (time.time() + ttl_seconds, job_name, owner))
        conn.commit()
        return cursor.rowcount > 0


def release_lease(job_name: str, owner: str):
    """Release a lease if owner still holds it."""
    with get_connection() as conn:
        cursor = conn.cursor()
        _ensure_job_leases_table(cursor)
        cursor.execute(
            "DELETE FROM job_leases WHERE job_name = ? AND owner = ?",
            (job_name, owner),
        )
        conn.commit()


def get_lease(job_name: str) -> Optional[Dict[str, Any]]:
    """Return the active (non-expired) lease for a job, if any."""
    with get_connection() as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()
        _ensure_job_leases_table(cursor)
        cursor.execute(
            "SELECT * FROM job_leases WHERE job_name = ? AND expires_at > ?",
            (job_name, time.time()),
        )
        row = cursor.fetchone()
        return dict(row) if row else None
