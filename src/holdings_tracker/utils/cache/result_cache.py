"""TTL cache of enriched holdings keyed by wallet and scope."""

import logging
import time
from collections.abc import Callable, Sequence

from ...clients.errors import DecodeError
from ...clients.token_types import EnrichedHolding
from .interface import CacheInterface

logger = logging.getLogger(__name__)

ALL_CHAINS = "all"

DEFAULT_TTL = 24 * 60 * 60


def make_cache_key(wallet_address: str, scope: int | str = ALL_CHAINS) -> str:
    """Build the storage key for ``(wallet, scope)``.

    ``scope`` is a chain id for a single-chain view or :data:`ALL_CHAINS`
    for the multi-chain aggregate; the two never share an entry.
    """
    return f"holdings:{wallet_address.strip().lower()}:{scope}"


def all_chains_scope(native_chain_id: int | None = None) -> str:
    """Scope of the multi-chain view, qualified by the chain whose native coin it includes."""
    return ALL_CHAINS if native_chain_id is None else f"{ALL_CHAINS}:{native_chain_id}"


class ResultCache:
    """Stores full holdings payloads with a creation timestamp.

    An entry is valid while ``now - created_at < ttl``; expired entries are
    reported as absent and left for the backend to evict. Each ``put``
    replaces the whole payload in a single backend write.
    """

    def __init__(
        self,
        backend: CacheInterface,
        ttl: int = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.backend = backend
        self.ttl = ttl
        self._clock = clock

    def now(self) -> float:
        return self._clock()

    async def get(self, wallet_address: str, scope: int | str = ALL_CHAINS) -> list[EnrichedHolding] | None:
        key = make_cache_key(wallet_address, scope)
        entry = await self.backend.get(key)
        if not isinstance(entry, dict):
            return None

        created_at = entry.get("created_at")
        if not isinstance(created_at, (int, float)) or self._clock() - created_at >= self.ttl:
            logger.debug(f"💾 Expired holdings entry for {key}")
            return None

        try:
            return [EnrichedHolding.from_dict(item) for item in entry.get("payload", [])]
        except (DecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"⚠️ Discarding unreadable holdings entry {key}: {e}")
            return None

    async def put(
        self,
        wallet_address: str,
        scope: int | str,
        holdings: Sequence[EnrichedHolding],
        computed_at: float | None = None,
    ) -> bool:
        """Store ``holdings`` for ``(wallet, scope)``.

        ``computed_at`` is when the computation producing ``holdings`` began.
        If the stored entry comes from a computation that began later, the
        write is dropped and ``False`` is returned.
        """
        key = make_cache_key(wallet_address, scope)
        created_at = self._clock() if computed_at is None else computed_at

        existing = await self.backend.get(key)
        if isinstance(existing, dict) and isinstance(existing.get("created_at"), (int, float)):
            if existing["created_at"] > created_at:
                logger.debug(f"💾 Newer holdings entry already stored for {key}, skipping write")
                return False

        entry = {
            "created_at": created_at,
            "payload": [holding.to_dict() for holding in holdings],
        }
        return await self.backend.set(key, entry, ttl=self.ttl)

    async def invalidate(self, wallet_address: str, scope: int | str = ALL_CHAINS) -> bool:
        return await self.backend.delete(make_cache_key(wallet_address, scope))
