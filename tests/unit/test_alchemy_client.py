"""Tests for the Alchemy client and the RPC native balance source."""

import pytest
from fakes import USDC, WALLET, FakeResponse, FakeSession, RecordingSleep

from holdings_tracker.chains import ChainRegistry
from holdings_tracker.clients.alchemy_client import AlchemyClient, parse_token_metadata
from holdings_tracker.clients.errors import DecodeError
from holdings_tracker.clients.http_client import RetryingHttpCaller, RetryPolicy
from holdings_tracker.clients.native_balance import RpcNativeBalanceSource
from holdings_tracker.config import CacheBackend, CacheConfig
from holdings_tracker.utils.cache import CacheManager

USDC_METADATA = {
    "jsonrpc": "2.0",
    "id": 1,
    "result": {"decimals": 6, "logo": "https://static.alchemyapi.io/usdc.png", "name": "USD Coin", "symbol": "USDC"},
}


def make_caller(session: FakeSession, sleep: RecordingSleep) -> RetryingHttpCaller:
    return RetryingHttpCaller("test", session=session, retry_policy=RetryPolicy(sleep=sleep))  # type: ignore[arg-type]


class TestParseTokenMetadata:
    def test_defaults(self) -> None:
        metadata = parse_token_metadata({"decimals": None, "logo": None, "name": None, "symbol": None})

        assert metadata.decimals == 18
        assert metadata.symbol == "UNKNOWN"
        assert metadata.name == "Unknown Token"
        assert metadata.logo_url is None

    def test_zero_decimals_kept(self) -> None:
        assert parse_token_metadata({"decimals": 0, "symbol": "NFT"}).decimals == 0

    @pytest.mark.parametrize("result", [None, "oops", {"decimals": 300}, {"decimals": "x"}])
    def test_invalid(self, result) -> None:
        with pytest.raises(DecodeError):
            parse_token_metadata(result)


class TestAlchemyClient:
    """Test balance and metadata requests."""

    @pytest.mark.asyncio
    async def test_token_balances_request(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        session = FakeSession([FakeResponse(200, {"result": {"tokenBalances": []}})])
        client = AlchemyClient(make_caller(session, recording_sleep), registry, api_key="secret")

        result = await client.get_token_balances(137, WALLET)

        assert result.ok
        call = session.calls[0]
        assert call["url"] == "https://polygon-mainnet.g.alchemy.com/v2/secret"
        assert call["json"]["method"] == "alchemy_getTokenBalances"
        assert call["json"]["params"] == [WALLET]

    def test_supported_chains(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        client = AlchemyClient(make_caller(FakeSession([]), recording_sleep), registry, api_key="secret")

        assert client.supports(1)
        assert not client.supports(324)

    @pytest.mark.asyncio
    async def test_metadata_is_cached(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        session = FakeSession([FakeResponse(200, USDC_METADATA)])
        cache_manager = CacheManager(CacheConfig(backend=CacheBackend.MEMORY))
        client = AlchemyClient(make_caller(session, recording_sleep), registry, "secret", cache_manager)

        first = await client.get_token_metadata(1, USDC)
        second = await client.get_token_metadata(1, USDC)

        assert first == second
        assert first.decimals == 6
        assert first.logo_url == "https://static.alchemyapi.io/usdc.png"
        assert len(session.calls) == 1
        assert client.get_stats()["metadata_cache_hits"] == 1

    @pytest.mark.asyncio
    async def test_metadata_failure(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        session = FakeSession([FakeResponse(200, {"error": {"code": -32602, "message": "invalid contract"}})])
        client = AlchemyClient(make_caller(session, recording_sleep), registry, "secret")

        assert await client.get_token_metadata(1, USDC) is None
        assert client.get_stats()["api_errors"] == 1


class TestRpcNativeBalanceSource:
    @pytest.mark.asyncio
    async def test_native_balance(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        session = FakeSession([FakeResponse(200, {"jsonrpc": "2.0", "id": 1, "result": "0xde0b6b3a7640000"})])
        source = RpcNativeBalanceSource(make_caller(session, recording_sleep), registry)

        native = await source.get_native_balance(WALLET, 43114)

        assert native.raw_amount == 10**18
        assert native.symbol == "AVAX"
        assert native.name == "Avalanche"
        assert native.decimals == 18
        assert session.calls[0]["url"] == registry.get(43114).rpc_endpoint
        assert session.calls[0]["json"]["params"] == [WALLET, "latest"]

    @pytest.mark.asyncio
    async def test_unknown_chain(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        session = FakeSession([])
        source = RpcNativeBalanceSource(make_caller(session, recording_sleep), registry)

        assert await source.get_native_balance(WALLET, 999) is None
        assert session.calls == []

    @pytest.mark.asyncio
    async def test_rpc_failure(self, registry: ChainRegistry, recording_sleep: RecordingSleep) -> None:
        session = FakeSession([FakeResponse(502, text="bad gateway")])
        source = RpcNativeBalanceSource(make_caller(session, recording_sleep), registry)

        assert await source.get_native_balance(WALLET, 1) is None
