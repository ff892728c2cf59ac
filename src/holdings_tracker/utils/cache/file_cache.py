"""File system cache backend storing one JSON document per key."""

import asyncio
import hashlib
import json
import logging
import os
import tempfile
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .interface import CacheInterface, CacheStats

logger = logging.getLogger(__name__)


class FileCache(CacheInterface):
    """JSON file cache.

    Writes go to a temporary file in the cache directory and are moved into
    place with :func:`os.replace`, so concurrent readers see either the old
    or the new document.
    """

    def __init__(
        self,
        cache_dir: Path,
        default_ttl: int | None = 3600,
        max_size_mb: int = 50,
        key_prefix: str = "",
        clock: Callable[[], float] = time.time,
    ):
        self.cache_dir = Path(cache_dir)
        self.default_ttl = default_ttl
        self.max_size_bytes = max_size_mb * 1024 * 1024
        self.key_prefix = key_prefix
        self._clock = clock
        self._stats = CacheStats("file")

        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        digest = hashlib.sha256(f"{self.key_prefix}{key}".encode()).hexdigest()
        return self.cache_dir / f"{digest}.json"

    def _read(self, path: Path) -> tuple[bool, Any]:
        try:
            with path.open("r", encoding="utf-8") as fh:
                document = json.load(fh)
        except FileNotFoundError:
            return False, None
        except (OSError, ValueError) as e:
            self._stats.errors += 1
            logger.warning(f"⚠️ Unreadable cache file {path.name}: {e}")
            return False, None

        expires_at = document.get("expires_at")
        if expires_at is not None and self._clock() >= expires_at:
            path.unlink(missing_ok=True)
            return False, None
        return True, document.get("value")

    def _write(self, path: Path, value: Any, ttl: int | None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        document = {
            "expires_at": self._clock() + ttl if ttl else None,
            "value": value,
        }
        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _enforce_size_limit(self) -> None:
        files = [p for p in self.cache_dir.glob("*.json") if p.is_file()]
        total = sum(p.stat().st_size for p in files)
        if total <= self.max_size_bytes:
            return

        for path in sorted(files, key=lambda p: p.stat().st_mtime):
            size = path.stat().st_size
            path.unlink(missing_ok=True)
            total -= size
            if total <= self.max_size_bytes:
                break

    async def get(self, key: str) -> Any:
        found, value = await asyncio.to_thread(self._read, self._path(key))
        self._stats.record(found)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        try:
            await asyncio.to_thread(self._write, self._path(key), value, ttl)
            await asyncio.to_thread(self._enforce_size_limit)
        except (OSError, TypeError, ValueError) as e:
            self._stats.errors += 1
            logger.error(f"❌ Failed to write cache key {key}: {e}")
            return False
        self._stats.sets += 1
        return True

    async def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink(missing_ok=True)
        self._stats.deletes += 1
        return True

    async def exists(self, key: str) -> bool:
        found, _ = await asyncio.to_thread(self._read, self._path(key))
        return found

    async def clear(self) -> bool:
        for path in self.cache_dir.glob("*.json"):
            path.unlink(missing_ok=True)
        return True

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        result = {}
        for key in keys:
            value = await self.get(key)
            if value is not None:
                result[key] = value
        return result

    async def set_many(self, mapping: dict[str, Any], ttl: int | None = None) -> bool:
        results = [await self.set(key, value, ttl=ttl) for key, value in mapping.items()]
        return all(results)

    async def close(self) -> None:
        pass

    async def health_check(self) -> bool:
        return self.cache_dir.is_dir() and os.access(self.cache_dir, os.W_OK)

    def get_stats(self) -> dict[str, Any]:
        return {**self._stats.as_dict(), "cache_dir": str(self.cache_dir)}
