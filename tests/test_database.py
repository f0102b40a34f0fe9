"""
Tests for sqlite app config records, job leases and schema setup.
"""

from langdesk.core import database as db
from langdesk.core import schema


class TestAppConfig:
    def test_missing_table_reads_none(self):
        assert db.get_app_config("config") is None

    def test_set_get_delete(self):
        db.set_app_config("config", '{"log_mode": "info"}')
        db.set_app_config("auto_translate", "{}")

        assert db.get_app_config("config") == '{"log_mode": "info"}'
        assert db.get_all_app_config() == {
            "config": '{"log_mode": "info"}',
            "auto_translate": "{}",
        }

        db.delete_app_config("config")
        assert db.get_app_config("config") is None


class TestJobLeases:
    """Exclusive ownership of background jobs."""

    def test_only_one_owner(self):
        assert db.acquire_lease("translate", "a", 60)
        assert not db.acquire_lease("translate", "b", 60)
        assert db.get_lease("translate")["owner"] == "a"

    def test_owner_can_reacquire(self):
        assert db.acquire_lease("translate", "a", 60)
        assert db.acquire_lease("translate", "a", 60)

    def test_expired_lease_is_taken_over(self):
        assert db.acquire_lease("translate", "a", -1)
        assert db.get_lease("translate") is None
        assert db.acquire_lease("translate", "b", 60)

    def test_renew_only_by_owner(self):
        db.acquire_lease("translate", "a", 60)

        assert db.renew_lease("translate", "a", 60)
        assert not db.renew_lease("translate", "b", 60)

    def test_release(self):
        db.acquire_lease("translate", "a", 60)
        db.release_lease("translate", "b")
        assert db.get_lease("translate") is not None

        db.release_lease("translate", "a")
        assert db.get_lease("translate") is None

    def test_leases_are_per_job(self):
        assert db.acquire_lease("translate", "a", 60)
        assert db.acquire_lease("cleanup", "b", 60)


class TestSchema:
    def test_initialize_creates_current_version(self, tmp_db):
        schema.initialize_database()

        assert tmp_db.exists()
        assert schema.get_db_version() == schema.DB_VERSION

    def test_old_database_is_migrated(self, tmp_db):
        schema.set_db_version(1)

        schema.initialize_database()

        assert schema.get_db_version() == schema.DB_VERSION
        assert db.acquire_lease("translate", "a", 60)
