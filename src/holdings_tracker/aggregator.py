"""Wallet-level aggregation of native and token holdings across chains."""

import logging
from collections.abc import Iterable

from .chains import ChainRegistry
from .clients.errors import AggregationError, InvalidAddressError
from .clients.native_balance import NativeBalanceSource
from .clients.token_types import EnrichedHolding, is_valid_ethereum_address, normalize_address
from .processing.balance_fetcher import BalanceFetcher
from .processing.metadata_enricher import MetadataEnricher
from .utils.cache import ResultCache, all_chains_scope

logger = logging.getLogger(__name__)


def deduplicate_holdings(holdings: Iterable[EnrichedHolding | None]) -> list[EnrichedHolding]:
    """Keep the first holding per ``(chain_id, contract_address)``, skipping ``None``."""
    seen: set[tuple[int, str]] = set()
    unique = []
    for holding in holdings:
        if holding is None or holding.key in seen:
            continue
        seen.add(holding.key)
        unique.append(holding)
    return unique


def _sort_key(holding: EnrichedHolding) -> tuple[int, float, int]:
    if holding.usd_value is not None:
        return (0, -holding.usd_value, 0)
    return (1, 0.0, -holding.raw_amount)


def sort_holdings(holdings: Iterable[EnrichedHolding]) -> list[EnrichedHolding]:
    """Priced holdings by descending USD value, then unpriced by descending raw amount."""
    return sorted(holdings, key=_sort_key)


def serialize_holdings(holdings: Iterable[EnrichedHolding]) -> list[dict]:
    return [holding.to_dict() for holding in holdings]


class Aggregator:
    """Produce the sorted, deduplicated holdings view for a wallet."""

    def __init__(
        self,
        registry: ChainRegistry,
        fetcher: BalanceFetcher,
        enricher: MetadataEnricher,
        native_source: NativeBalanceSource | None,
        result_cache: ResultCache | None = None,
    ):
        self.registry = registry
        self.fetcher = fetcher
        self.enricher = enricher
        self.native_source = native_source
        self.result_cache = result_cache

        self._stats = {"aggregations": 0, "cache_hits": 0, "failures": 0}

    @staticmethod
    def _validate(wallet_address: str) -> str:
        if not is_valid_ethereum_address(wallet_address):
            raise InvalidAddressError(f"Invalid wallet address: {wallet_address!r}")
        return normalize_address(wallet_address)

    async def _cached(self, wallet: str, scope: int | str) -> list[EnrichedHolding] | None:
        if self.result_cache is None:
            return None
        try:
            cached = await self.result_cache.get(wallet, scope)
        except Exception as e:
            logger.warning(f"⚠️ Holdings cache read failed for {wallet}: {e}")
            return None
        if cached is not None:
            self._stats["cache_hits"] += 1
            logger.debug(f"💾 Holdings cache hit for {wallet} ({scope})")
        return cached

    async def _store(self, wallet: str, scope: int | str, holdings: list[EnrichedHolding], started_at: float) -> None:
        if self.result_cache is None:
            return
        try:
            await self.result_cache.put(wallet, scope, holdings, computed_at=started_at)
        except Exception as e:
            logger.warning(f"⚠️ Holdings cache write failed for {wallet}: {e}")

    def _now(self) -> float | None:
        return self.result_cache.now() if self.result_cache is not None else None

    async def _native_holding(self, wallet: str, chain_id: int) -> EnrichedHolding | None:
        if self.native_source is None:
            return None
        try:
            native = await self.native_source.get_native_balance(wallet, chain_id)
        except Exception as e:
            logger.warning(f"⚠️ Native balance source failed on chain {chain_id}: {e}")
            return None
        if native is None:
            return None
        return await self.enricher.enrich_native(chain_id, native)

    async def aggregate(
        self,
        wallet_address: str,
        native_chain_id: int | None = 1,
        use_cache: bool = True,
    ) -> list[EnrichedHolding]:
        """Return the wallet's holdings across every supported chain.

        ``native_chain_id`` is the wallet's active chain, whose native
        currency balance is included; ``None`` skips the native lookup.

        Raises:
            InvalidAddressError: If the wallet address is malformed.
            AggregationError: If neither the native balance nor any chain
                returned data.
        """
        wallet = self._validate(wallet_address)
        started_at = self._now()
        scope = all_chains_scope(native_chain_id)

        if use_cache:
            cached = await self._cached(wallet, scope)
            if cached is not None:
                return cached

        self._stats["aggregations"] += 1
        logger.info(f"🔍 Aggregating holdings for wallet: {wallet}")

        native_holding = None
        if native_chain_id is not None:
            native_holding = await self._native_holding(wallet, native_chain_id)

        chain_results = await self.fetcher.fetch_all(wallet, self.registry.balance_chain_ids())
        reachable = [result for result in chain_results if result.ok]

        if native_holding is None and not reachable:
            self._stats["failures"] += 1
            logger.error(f"❌ No holdings data available for {wallet}: native balance and all chains failed")
            raise AggregationError(f"Could not obtain any holdings data for {wallet}")

        if len(reachable) < len(chain_results):
            logger.warning(f"⚠️ Partial coverage for {wallet}: {len(reachable)}/{len(chain_results)} chains reachable")

        raw_balances = [balance for result in reachable for balance in result.balances]
        enriched = await self.enricher.enrich_many(raw_balances)

        holdings = sort_holdings(deduplicate_holdings([native_holding, *enriched]))
        logger.info(f"💰 {len(holdings)} holdings for {wallet} ({len(raw_balances)} raw token balances)")

        if started_at is not None:
            await self._store(wallet, scope, holdings, started_at)
        return holdings

    async def aggregate_chain(self, wallet_address: str, chain_id: int, use_cache: bool = True) -> list[EnrichedHolding]:
        """Return the wallet's token holdings on a single chain.

        Cached under the chain's own scope, separate from the all-chains view.
        """
        wallet = self._validate(wallet_address)
        started_at = self._now()

        if use_cache:
            cached = await self._cached(wallet, chain_id)
            if cached is not None:
                return cached

        self._stats["aggregations"] += 1
        result = await self.fetcher.fetch_chain_balances(chain_id, wallet)
        if not result.ok:
            self._stats["failures"] += 1
            raise AggregationError(f"Could not obtain holdings on chain {chain_id} for {wallet}: {result.error}")

        enriched = await self.enricher.enrich_many(result.balances)
        holdings = sort_holdings(deduplicate_holdings(enriched))

        if started_at is not None:
            await self._store(wallet, chain_id, holdings, started_at)
        return holdings

    def get_stats(self) -> dict[str, int]:
        return dict(self._stats)
