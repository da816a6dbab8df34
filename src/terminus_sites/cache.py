"""Local response cache.

Stores API-derived data as JSON files under the configured cache directory.
The site list is the only cached payload; it is rebuilt on every status run
unless ``--cached`` is passed.

Cache Structure:
    ~/.terminus/cache/
    ├── session          # Login session (owned by the login command)
    ├── .lock
    └── sites.json       # Cached site list

Thread Safety: File locking via fcntl.flock() to prevent corruption when
two commands run at once.

Example:
    >>> cache = ResponseCache(Path("~/.terminus/cache").expanduser())
    >>> cache.put("sites", [{"id": "abc", "name": "proj-1"}])
    >>> cache.get("sites")
    [{'id': 'abc', 'name': 'proj-1'}]
"""

from __future__ import annotations

import fcntl
import json
import os
import re
import tempfile
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog

from terminus_sites.errors import CacheError

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path

logger = structlog.get_logger(__name__)

_KEY_PATTERN = re.compile(r"^[a-z0-9_\-]+$")


class ResponseCache:
    """JSON file cache keyed by short names.

    Attributes:
        path: Cache directory.
    """

    def __init__(self, path: Path) -> None:
        """Initialize ResponseCache.

        Args:
            path: Cache directory. Created on first write.
        """
        self._path = path
        self._lock_path = path / ".lock"

    @property
    def path(self) -> Path:
        """Return the cache directory."""
        return self._path

    def _file(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            msg = f"Invalid cache key: {key!r}"
            raise ValueError(msg)
        return self._path / f"{key}.json"

    @contextmanager
    def _lock(self) -> Generator[None, None, None]:
        """Hold an exclusive lock on the cache directory."""
        try:
            self._path.mkdir(parents=True, exist_ok=True)
            lock_file = self._lock_path.open("a")
        except OSError as e:
            raise CacheError("lock", str(e), str(self._path)) from e
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
            lock_file.close()

    def get(self, key: str) -> Any | None:
        """Return the cached value for ``key``, or None on a miss.

        A corrupt cache file counts as a miss.
        """
        path = self._file(key)
        if not path.exists():
            logger.debug("cache_miss", key=key)
            return None

        try:
            data = json.loads(path.read_text())
        except (OSError, ValueError) as e:
            logger.warning("cache_corrupt", key=key, error=str(e))
            return None

        logger.debug("cache_hit", key=key)
        return data

    def put(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value atomically.

        Raises:
            CacheError: If the cache directory is not writable.
        """
        path = self._file(key)
        with self._lock():
            try:
                fd, tmp_name = tempfile.mkstemp(dir=self._path, prefix=f".{key}.", suffix=".tmp")
                with os.fdopen(fd, "w") as f:
                    json.dump(value, f)
                os.replace(tmp_name, path)
            except OSError as e:
                raise CacheError("write", str(e), str(path)) from e

        logger.debug("cache_written", key=key)


__all__: list[str] = ["ResponseCache"]
