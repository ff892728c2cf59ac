"""In-process cache backend."""

import time
from collections.abc import Callable
from typing import Any

from .interface import CacheInterface, CacheStats


class MemoryCache(CacheInterface):
    """Dictionary backed cache with lazy expiry.

    Each entry is stored as one ``(expires_at, value)`` tuple, so a reader
    always sees either the previous or the new value, never a mix.
    """

    def __init__(
        self,
        default_ttl: int | None = 3600,
        key_prefix: str = "",
        clock: Callable[[], float] = time.time,
    ):
        self.default_ttl = default_ttl
        self.key_prefix = key_prefix
        self._clock = clock
        self._data: dict[str, tuple[float | None, Any]] = {}
        self._stats = CacheStats("memory")
        self._closed = False

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _expires_at(self, ttl: int | None) -> float | None:
        ttl = self.default_ttl if ttl is None else ttl
        if not ttl:
            return None
        return self._clock() + ttl

    def _lookup(self, full_key: str) -> tuple[bool, Any]:
        entry = self._data.get(full_key)
        if entry is None:
            return False, None
        expires_at, value = entry
        if expires_at is not None and self._clock() >= expires_at:
            self._data.pop(full_key, None)
            return False, None
        return True, value

    async def get(self, key: str) -> Any:
        found, value = self._lookup(self._key(key))
        self._stats.record(found)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        self._data[self._key(key)] = (self._expires_at(ttl), value)
        self._stats.sets += 1
        return True

    async def delete(self, key: str) -> bool:
        removed = self._data.pop(self._key(key), None) is not None
        if removed:
            self._stats.deletes += 1
        return removed

    async def exists(self, key: str) -> bool:
        found, _ = self._lookup(self._key(key))
        return found

    async def clear(self) -> bool:
        self._data.clear()
        return True

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        result = {}
        for key in keys:
            found, value = self._lookup(self._key(key))
            self._stats.record(found)
            if found:
                result[key] = value
        return result

    async def set_many(self, mapping: dict[str, Any], ttl: int | None = None) -> bool:
        for key, value in mapping.items():
            await self.set(key, value, ttl=ttl)
        return True

    async def close(self) -> None:
        self._closed = True

    async def health_check(self) -> bool:
        return not self._closed

    def get_stats(self) -> dict[str, Any]:
        return {**self._stats.as_dict(), "keys": len(self._data)}
