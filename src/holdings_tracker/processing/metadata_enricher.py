"""Token enrichment: base metadata, spam filtering and price/logo fallback chain."""

import logging
from collections.abc import Sequence

from ..chains import ChainRegistry
from ..clients.alchemy_client import AlchemyClient
from ..clients.price_providers import PriceProvider
from ..clients.token_types import (
    NATIVE_ADDRESS,
    EnrichedHolding,
    NativeBalance,
    RawBalance,
    TokenMetadata,
    TokenQuery,
    calculate_usd_value,
    format_token_amount,
)
from .batch_scheduler import BatchScheduler
from .spam_filter import is_spam_token

logger = logging.getLogger(__name__)


class MetadataEnricher:
    """Turn raw balances into :class:`EnrichedHolding` values.

    For a contract token the steps are:

    1. base metadata from the balances provider; missing metadata or a spam
       name/symbol drops the token;
    2. the price providers in order until one yields a USD price, adopting
       the first logo seen when the base metadata had none;
    3. tokens for which no price provider returned anything are dropped;
    4. the human balance is computed with integer arithmetic.

    Native currencies skip step 1 and are never dropped.
    """

    def __init__(
        self,
        alchemy: AlchemyClient,
        registry: ChainRegistry,
        token_providers: Sequence[PriceProvider],
        native_providers: Sequence[PriceProvider],
        scheduler: BatchScheduler,
    ):
        self.alchemy = alchemy
        self.registry = registry
        self.token_providers = list(token_providers)
        self.native_providers = list(native_providers)
        self.scheduler = scheduler

        self._stats = {"enriched": 0, "spam": 0, "no_metadata": 0, "no_price_signal": 0, "errors": 0}

    async def enrich(self, chain_id: int, contract_address: str, raw_amount: int) -> EnrichedHolding | None:
        """Enrich one contract balance; returns ``None`` when the token is dropped."""
        try:
            return await self._enrich(chain_id, contract_address, raw_amount)
        except Exception as e:
            self._stats["errors"] += 1
            logger.warning(f"⚠️ Failed to enrich {contract_address} on chain {chain_id}: {e}")
            return None

    async def _enrich(self, chain_id: int, contract_address: str, raw_amount: int) -> EnrichedHolding | None:
        metadata = await self.alchemy.get_token_metadata(chain_id, contract_address)
        if metadata is None:
            self._stats["no_metadata"] += 1
            return None

        if is_spam_token(metadata.name, metadata.symbol):
            self._stats["spam"] += 1
            logger.debug(f"🚫 Spam token skipped: {metadata.name} ({metadata.symbol}) on chain {chain_id}")
            return None

        query = TokenQuery(
            chain_id=chain_id,
            contract_address=contract_address,
            symbol=metadata.symbol if metadata.symbol != "UNKNOWN" else None,
        )
        responded = await self.resolve_price(self.token_providers, query, metadata)
        if not responded and metadata.price_usd is None:
            self._stats["no_price_signal"] += 1
            logger.debug(f"🔍 No price signal for {metadata.symbol} ({contract_address}) on chain {chain_id}")
            return None

        self._stats["enriched"] += 1
        return self._build_holding(chain_id, contract_address, raw_amount, metadata)

    async def enrich_native(self, chain_id: int, native: NativeBalance) -> EnrichedHolding:
        """Enrich the wallet's native currency; only the price lookup can fail."""
        metadata = TokenMetadata(symbol=native.symbol, name=native.name, decimals=native.decimals)
        query = TokenQuery(chain_id=chain_id, contract_address=NATIVE_ADDRESS, symbol=native.symbol, is_native=True)
        try:
            await self.resolve_price(self.native_providers, query, metadata)
        except Exception as e:
            logger.warning(f"⚠️ Native price lookup failed on chain {chain_id}: {e}")
        return self._build_holding(chain_id, NATIVE_ADDRESS, native.raw_amount, metadata)

    async def enrich_many(self, balances: Sequence[RawBalance]) -> list[EnrichedHolding | None]:
        """Enrich balances through the token scheduler, preserving input order."""

        async def worker(balance: RawBalance) -> EnrichedHolding | None:
            return await self.enrich(balance.chain_id, balance.contract_address, balance.raw_amount)

        return await self.scheduler.run(balances, worker)

    async def resolve_price(
        self, providers: Sequence[PriceProvider], query: TokenQuery, metadata: TokenMetadata
    ) -> bool:
        """Walk ``providers`` until one yields a price; fills ``metadata`` in place.

        Returns True if any provider returned data for the token.
        """
        responded = False
        for provider in providers:
            try:
                quote = await provider.try_resolve(query)
            except Exception as e:
                logger.warning(f"⚠️ {provider.name} lookup failed for {query.contract_address}: {e}")
                continue

            if quote is None:
                continue

            responded = True
            if not metadata.logo_url and quote.logo_url:
                metadata.logo_url = quote.logo_url
            if quote.has_price:
                metadata.price_usd = quote.price_usd
                break

        return responded

    def _build_holding(
        self, chain_id: int, contract_address: str, raw_amount: int, metadata: TokenMetadata
    ) -> EnrichedHolding:
        return EnrichedHolding(
            chain_id=chain_id,
            contract_address=contract_address,
            raw_amount=raw_amount,
            decimals=metadata.decimals,
            human_balance=format_token_amount(raw_amount, metadata.decimals),
            usd_value=calculate_usd_value(raw_amount, metadata.decimals, metadata.price_usd),
            symbol=metadata.symbol,
            name=metadata.name,
            chain_name=self.registry.get_chain_name(chain_id),
            chain_logo=self.registry.get_chain_logo(chain_id),
            token_logo=metadata.logo_url,
        )

    def get_stats(self) -> dict[str, int]:
        return dict(self._stats)
