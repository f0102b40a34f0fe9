"""
Tests for storage backends and the cancel token.
"""

import threading

import pytest

from langdesk.core.cancellation import CancelToken
from langdesk.core.exceptions import StorageError
from langdesk.core.storage import FileStorage, MemoryStorage


class TestFileStorage:
    """Files under a base directory."""

    def test_write_read_delete(self, tmp_path):
        storage = FileStorage(tmp_path / "languages")
        storage.write("a.po", b"content")

        assert storage.exists("a.po")
        assert storage.read("a.po") == b"content"

        storage.delete("a.po")
        storage.delete("a.po")
        assert storage.read("a.po") is None

    def test_list_by_prefix(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.write("app-tr_TR.po", b"1")
        storage.write("app-draft.json", b"2")
        storage.write("other.txt", b"3")

        assert storage.list("app-") == ["app-draft.json", "app-tr_TR.po"]

    def test_failed_write_keeps_previous_file(self, tmp_path, monkeypatch):
        languages_dir = tmp_path / "languages"
        storage = FileStorage(languages_dir)
        storage.write("a.po", b"old")

        def broken_replace(src, dst):
            raise OSError("disk full")

        with monkeypatch.context() as m:
            m.setattr("langdesk.core.storage.os.replace", broken_replace)
            with pytest.raises(StorageError):
                storage.write("a.po", b"new")

        assert storage.read("a.po") == b"old"
        assert [p.name for p in languages_dir.iterdir()] == ["a.po"]


class TestMemoryStorage:
    def test_same_interface(self):
        storage = MemoryStorage()
        storage.write("b", b"2")
        storage.write("a", b"1")

        assert storage.list() == ["a", "b"]
        assert storage.read("a") == b"1"

        storage.delete("a")
        assert not storage.exists("a")

    def test_lock_is_reentrant(self):
        storage = MemoryStorage()
        with storage.lock("a.po"):
            with storage.lock("a.po"):
                storage.write("a.po", b"x")

        assert storage.read("a.po") == b"x"


class TestCancelToken:
    def test_cancel(self):
        token = CancelToken()
        assert not token.cancelled

        token.cancel()
        assert token.cancelled

    def test_bound_flag_turning_false_cancels(self):
        wanted = {"value": True}
        token = CancelToken().bind(lambda: wanted["value"])
        assert not token.cancelled

        wanted["value"] = False
        assert token.cancelled

    def test_sleep_wakes_on_cancel(self):
        token = CancelToken()
        threading.Timer(0.05, token.cancel).start()

        assert token.sleep(10)
