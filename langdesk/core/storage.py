"""
File Storage Backends

Durable key/value storage for catalog and draft files:
- FileStorage: files under a base directory, atomic writes
- MemoryStorage: in-process dict, used by tests and dry runs

Both hand out one re-entrant lock per file name so a
load-mutate-save cycle on a file can be serialized within the process.
Writers in other processes are not locked out.
"""

import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from langdesk.core.exceptions import StorageError
from langdesk.logger import get_logger

logger = get_logger(__name__)


class _LockRegistry:
    """One RLock per file name, created on first use."""

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, name: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(name, threading.RLock())
        with lock:
            yield


class FileStorage:
    """Files stored flat under base_dir."""

    def __init__(self, base_dir):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._locks = _LockRegistry()

    def path(self, name: str) -> Path:
        return self.base_dir / name

    def exists(self, name: str) -> bool:
        return self.path(name).exists()

    def read(self, name: str) -> Optional[bytes]:
        """Return file content, or None when the file does not exist."""
        try:
            return self.path(name).read_bytes()
        except FileNotFoundError:
            return None

    def write(self, name: str, data: bytes) -> None:
        """
        Replace a file atomically.

        Content goes to a temp file in the same directory which is then
        renamed over the target, so readers see the old or the new file,
        never a partial one.

        Raises:
            StorageError: If the write or the rename fails. The previous
                file is left untouched.
        """
        target = self.path(name)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=self.base_dir)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            logger.error(f"Failed to write {target}: {e}")
            raise StorageError(f"Failed to write {name}: {e}", code="storage_write_failed") from e

    def delete(self, name: str) -> None:
        """Remove a file (no-op when absent)."""
        try:
            self.path(name).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to delete {name}: {e}", code="storage_delete_failed") from e

    def list(self, prefix: str = "") -> List[str]:
        return sorted(
            p.name for p in self.base_dir.iterdir()
            if p.is_file() and p.name.startswith(prefix) and not p.name.endswith(".tmp")
        )

    def lock(self, name: str):
        """Context manager serializing access to one file."""
        return self._locks.hold(name)


class MemoryStorage:
    """Dict backed storage with the same interface as FileStorage."""

    def __init__(self):
        self._files: Dict[str, bytes] = {}
        self._guard = threading.Lock()
        self._locks = _LockRegistry()

    def exists(self, name: str) -> bool:
        with self._guard:
            return name in self._files

    def read(self, name: str) -> Optional[bytes]:
        with self._guard:
            return self._files.get(name)

    def write(self, name: str, data: bytes) -> None:
        with self._guard:
            self._files[name] = bytes(data)

    def delete(self, name: str) -> None:
        with self._guard:
            self._files.pop(name, None)

    def list(self, prefix: str = "") -> List[str]:
        with self._guard:
            return sorted(name for name in self._files if name.startswith(prefix))

    def lock(self, name: str):
        return self._locks.hold(name)
