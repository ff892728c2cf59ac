"""Cache factory and the manager owning every cache used by the application."""

import logging
import time
from collections.abc import Callable
from typing import Any

from ...config import CacheBackend, CacheConfig
from .file_cache import FileCache
from .interface import CacheInterface
from .memory_cache import MemoryCache
from .result_cache import ResultCache, all_chains_scope

logger = logging.getLogger(__name__)


class CacheFactory:
    """Create cache backends from configuration."""

    @staticmethod
    def create_cache(
        config: CacheConfig,
        namespace: str = "",
        default_ttl: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> CacheInterface:
        prefix = f"{config.key_prefix}{namespace}"
        ttl = config.ttl_holdings if default_ttl is None else default_ttl

        if config.backend == CacheBackend.MEMORY:
            return MemoryCache(default_ttl=ttl, key_prefix=prefix, clock=clock)

        if config.backend == CacheBackend.FILE:
            return FileCache(
                cache_dir=config.file_cache_dir / (namespace.strip(":") or "default"),
                default_ttl=ttl,
                max_size_mb=config.max_size_mb,
                key_prefix=prefix,
                clock=clock,
            )

        if config.backend == CacheBackend.REDIS:
            from .redis_cache import RedisCache

            return RedisCache(redis_url=config.redis_url, default_ttl=ttl, key_prefix=prefix)

        raise ValueError(f"Unsupported cache backend: {config.backend}")


class CacheManager:
    """Owns the holdings result cache and the general provider cache."""

    def __init__(self, config: CacheConfig, clock: Callable[[], float] = time.time):
        self.config = config
        self._clock = clock
        self._result_cache: ResultCache | None = None
        self._general_cache: CacheInterface | None = None

    def get_result_cache(self) -> ResultCache:
        if self._result_cache is None:
            backend = CacheFactory.create_cache(
                self.config, namespace="results:", default_ttl=self.config.ttl_holdings, clock=self._clock
            )
            self._result_cache = ResultCache(backend, ttl=self.config.ttl_holdings, clock=self._clock)
        return self._result_cache

    def get_general_cache(self) -> CacheInterface:
        if self._general_cache is None:
            self._general_cache = CacheFactory.create_cache(
                self.config, namespace="general:", default_ttl=self.config.ttl_metadata, clock=self._clock
            )
        return self._general_cache

    async def get_token_metadata(self, chain_id: int, contract_address: str) -> dict[str, Any] | None:
        return await self.get_general_cache().get(f"token_metadata:{chain_id}:{contract_address.lower()}")

    async def set_token_metadata(self, chain_id: int, contract_address: str, metadata: dict[str, Any]) -> bool:
        return await self.get_general_cache().set(
            f"token_metadata:{chain_id}:{contract_address.lower()}", metadata, ttl=self.config.ttl_metadata
        )

    async def clear_wallet_data(self, wallet_address: str, chain_ids: list[int] | None = None) -> None:
        """Drop the aggregate entries and any per-chain entries for a wallet.

        Aggregates are stored per active chain, so each of ``chain_ids`` also
        clears the aggregate built with that chain's native coin.
        """
        result_cache = self.get_result_cache()
        await result_cache.invalidate(wallet_address, all_chains_scope())
        for chain_id in chain_ids or []:
            await result_cache.invalidate(wallet_address, all_chains_scope(chain_id))
            await result_cache.invalidate(wallet_address, chain_id)

    def _caches(self) -> dict[str, CacheInterface]:
        caches = {}
        if self._result_cache is not None:
            caches["result_cache"] = self._result_cache.backend
        if self._general_cache is not None:
            caches["general_cache"] = self._general_cache
        return caches

    async def health_check(self) -> dict[str, bool]:
        return {name: await cache.health_check() for name, cache in self._caches().items()}

    async def get_stats(self) -> dict[str, Any]:
        return {name: cache.get_stats() for name, cache in self._caches().items()}

    async def close(self) -> None:
        for name, cache in self._caches().items():
            try:
                await cache.close()
            except Exception as e:
                logger.warning(f"⚠️ Failed to close {name}: {e}")
