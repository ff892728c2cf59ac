"""Tests for token enrichment and the price fallback chain."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fakes import USDC, RecordingSleep, StaticProvider

from holdings_tracker.chains import ChainRegistry
from holdings_tracker.clients.token_types import NATIVE_ADDRESS, NativeBalance, PriceQuote, RawBalance, TokenMetadata
from holdings_tracker.processing.batch_scheduler import BatchScheduler
from holdings_tracker.processing.metadata_enricher import MetadataEnricher

ONE_AND_A_HALF = 1_500_000_000_000_000_000


def make_alchemy(metadata: TokenMetadata | None) -> MagicMock:
    alchemy = MagicMock()
    alchemy.get_token_metadata = AsyncMock(return_value=metadata)
    return alchemy


def make_enricher(
    alchemy: MagicMock,
    registry: ChainRegistry,
    sleep: RecordingSleep,
    token_providers: list | None = None,
    native_providers: list | None = None,
) -> MetadataEnricher:
    return MetadataEnricher(
        alchemy=alchemy,
        registry=registry,
        token_providers=token_providers or [],
        native_providers=native_providers or [],
        scheduler=BatchScheduler(batch_size=5, inter_batch_delay=0.25, sleep=sleep),
    )


class TestEnrich:
    """Test contract token enrichment."""

    @pytest.mark.asyncio
    async def test_end_to_end_value(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        alchemy = make_alchemy(TokenMetadata(symbol="TKN", name="Token", decimals=18))
        provider = StaticProvider("coinmarketcap", PriceQuote(provider="coinmarketcap", price_usd=2.5))
        enricher = make_enricher(alchemy, registry, recording_sleep, [provider])

        holding = await enricher.enrich(1, USDC, ONE_AND_A_HALF)

        assert holding is not None
        assert holding.human_balance == "1.5"
        assert holding.usd_value == pytest.approx(3.75)
        assert holding.chain_name == "Ethereum Mainnet"
        assert holding.chain_logo == registry.get_chain_logo(1)
        assert provider.queries[0].symbol == "TKN"

    @pytest.mark.asyncio
    async def test_fallback_order_and_logo_adoption(
        self, registry: ChainRegistry, recording_sleep: RecordingSleep
    ) -> None:
        """The first logo seen is kept; the walk stops at the first price."""
        alchemy = make_alchemy(TokenMetadata(symbol="TKN", name="Token", decimals=6))
        first = StaticProvider("coinmarketcap", PriceQuote(provider="coinmarketcap", logo_url="https://cmc/logo.png"))
        second = StaticProvider(
            "coingecko", PriceQuote(provider="coingecko", price_usd=2.0, logo_url="https://cg/logo.png")
        )
        third = StaticProvider("lifi", PriceQuote(provider="lifi", price_usd=99.0))
        enricher = make_enricher(alchemy, registry, recording_sleep, [first, second, third])

        holding = await enricher.enrich(1, USDC, 3_000_000)

        assert holding.usd_value == pytest.approx(6.0)
        assert holding.token_logo == "https://cmc/logo.png"
        assert third.queries == []

    @pytest.mark.asyncio
    async def test_base_logo_wins(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        alchemy = make_alchemy(TokenMetadata(symbol="TKN", name="Token", logo_url="https://alchemy/logo.png"))
        provider = StaticProvider("coingecko", PriceQuote(provider="coingecko", price_usd=1.0, logo_url="https://cg"))
        enricher = make_enricher(alchemy, registry, recording_sleep, [provider])

        holding = await enricher.enrich(1, USDC, 10**18)

        assert holding.token_logo == "https://alchemy/logo.png"

    @pytest.mark.asyncio
    async def test_dropped_without_any_provider_data(
        self, registry: ChainRegistry, recording_sleep: RecordingSleep
    ) -> None:
        alchemy = make_alchemy(TokenMetadata(symbol="TKN", name="Token"))
        providers = [StaticProvider("coinmarketcap"), StaticProvider("coingecko")]
        enricher = make_enricher(alchemy, registry, recording_sleep, providers)

        assert await enricher.enrich(1, USDC, 10**18) is None
        assert enricher.get_stats()["no_price_signal"] == 1

    @pytest.mark.asyncio
    async def test_kept_unpriced_when_provider_responded(
        self, registry: ChainRegistry, recording_sleep: RecordingSleep
    ) -> None:
        alchemy = make_alchemy(TokenMetadata(symbol="TKN", name="Token"))
        provider = StaticProvider("coingecko", PriceQuote(provider="coingecko", logo_url="https://cg/logo.png"))
        enricher = make_enricher(alchemy, registry, recording_sleep, [provider])

        holding = await enricher.enrich(1, USDC, 10**18)

        assert holding is not None
        assert holding.usd_value is None
        assert holding.token_logo == "https://cg/logo.png"

    @pytest.mark.asyncio
    async def test_spam_is_dropped_before_price_lookup(
        self, registry: ChainRegistry, recording_sleep: RecordingSleep
    ) -> None:
        alchemy = make_alchemy(TokenMetadata(symbol="REWARD", name="Claim at scam.io"))
        provider = StaticProvider("coinmarketcap", PriceQuote(provider="coinmarketcap", price_usd=1.0))
        enricher = make_enricher(alchemy, registry, recording_sleep, [provider])

        assert await enricher.enrich(1, USDC, 10**18) is None
        assert provider.queries == []

    @pytest.mark.asyncio
    async def test_missing_metadata(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        enricher = make_enricher(make_alchemy(None), registry, recording_sleep)

        assert await enricher.enrich(1, USDC, 10**18) is None

    @pytest.mark.asyncio
    async def test_failing_provider_is_skipped(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        alchemy = make_alchemy(TokenMetadata(symbol="UNKNOWN", name="Unknown Token"))
        broken = StaticProvider("coinmarketcap", error=RuntimeError("boom"))
        working = StaticProvider("coingecko", PriceQuote(provider="coingecko", price_usd=1.0))
        enricher = make_enricher(alchemy, registry, recording_sleep, [broken, working])

        holding = await enricher.enrich(1, USDC, 10**18)

        assert holding.usd_value == pytest.approx(1.0)
        assert working.queries[0].symbol is None

    @pytest.mark.asyncio
    async def test_enrich_many_isolates_failures(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        other = "0x1111111111111111111111111111111111111111"

        async def get_token_metadata(chain_id: int, contract: str) -> TokenMetadata:
            if contract == other:
                raise RuntimeError("metadata exploded")
            return TokenMetadata(symbol="TKN", name="Token")

        alchemy = MagicMock()
        alchemy.get_token_metadata = AsyncMock(side_effect=get_token_metadata)
        provider = StaticProvider("coingecko", PriceQuote(provider="coingecko", price_usd=1.0))
        enricher = make_enricher(alchemy, registry, recording_sleep, [provider])

        results = await enricher.enrich_many([RawBalance(1, USDC, 10**18), RawBalance(1, other, 10**18)])

        assert results[0] is not None
        assert results[1] is None
        assert enricher.get_stats()["errors"] == 1


class TestEnrichNative:
    @pytest.mark.asyncio
    async def test_native_never_dropped(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        alchemy = make_alchemy(None)
        enricher = make_enricher(alchemy, registry, recording_sleep, native_providers=[StaticProvider("lifi")])

        holding = await enricher.enrich_native(137, NativeBalance("POL", "Polygon", 18, 2 * 10**18))

        assert holding.contract_address == NATIVE_ADDRESS
        assert holding.human_balance == "2"
        assert holding.usd_value is None
        assert holding.chain_name == "Polygon Mainnet"
        alchemy.get_token_metadata.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_native_price(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        lifi = StaticProvider("lifi", PriceQuote(provider="lifi", price_usd=3000.0, logo_url="https://lifi/eth.png"))
        enricher = make_enricher(
            make_alchemy(None), registry, recording_sleep, native_providers=[StaticProvider("coinmarketcap"), lifi]
        )

        holding = await enricher.enrich_native(1, NativeBalance("ETH", "Ethereum", 18, ONE_AND_A_HALF))

        assert holding.usd_value == pytest.approx(4500.0)
        assert holding.token_logo == "https://lifi/eth.png"
        assert lifi.queries[0].is_native
