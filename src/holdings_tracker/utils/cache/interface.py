"""Cache interface shared by all storage backends."""

from abc import ABC, abstractmethod
from typing import Any


class CacheInterface(ABC):
    """Async key/value store with per-entry TTL."""

    @abstractmethod
    async def get(self, key: str) -> Any:
        """Return the value for ``key`` or ``None`` when absent or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store ``value``; the write replaces any previous value atomically."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    async def clear(self) -> bool:
        pass

    @abstractmethod
    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        pass

    @abstractmethod
    async def set_many(self, mapping: dict[str, Any], ttl: int | None = None) -> bool:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    @abstractmethod
    def get_stats(self) -> dict[str, Any]:
        pass


class CacheStats:
    """Hit/miss counters kept by each backend."""

    def __init__(self, backend: str):
        self.backend = backend
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.deletes = 0
        self.errors = 0

    def record(self, hit: bool) -> None:
        if hit:
            self.hits += 1
        else:
            self.misses += 1

    def as_dict(self) -> dict[str, Any]:
        lookups = self.hits + self.misses
        return {
            "backend": self.backend,
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "deletes": self.deletes,
            "errors": self.errors,
            "hit_rate_percent": (self.hits / lookups * 100) if lookups else 0.0,
        }
