"""Tests for application wiring and the command line entry point."""

from unittest.mock import AsyncMock, patch

import pytest
from fakes import WALLET, make_holding

from holdings_tracker.__main__ import main
from holdings_tracker.app import Application
from holdings_tracker.clients.coingecko_client import CoinGeckoProvider
from holdings_tracker.clients.coinmarketcap_client import CoinMarketCapProvider
from holdings_tracker.clients.errors import AggregationError
from holdings_tracker.clients.lifi_client import LiFiProvider
from holdings_tracker.config import AppConfig, CacheBackend, CacheConfig


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        cache=CacheConfig(backend=CacheBackend.MEMORY),
        token_price_providers=["coingecko"],
        native_price_providers=["lifi", "coinmarketcap"],
    )


class TestApplication:
    """Test component wiring."""

    @pytest.mark.asyncio
    async def test_initialize_wires_providers(self, config: AppConfig) -> None:
        async with Application(config) as app:
            assert app.aggregator is not None
            assert [type(p) for p in app.enricher.token_providers] == [CoinGeckoProvider]
            assert [type(p) for p in app.enricher.native_providers] == [LiFiProvider, CoinMarketCapProvider]
            assert app.chain_scheduler.batch_size == 3
            assert app.token_scheduler.inter_batch_delay == 0.25

    @pytest.mark.asyncio
    async def test_health_and_metrics(self, config: AppConfig) -> None:
        async with Application(config) as app:
            health = await app.health_check()
            metrics = await app.collect_metrics()

        assert health["alchemy_client"] is False
        assert health["result_cache"] is True
        assert {"alchemy_client", "coingecko_client", "chains_scheduler", "aggregator", "http", "cache"} <= set(metrics)

    @pytest.mark.asyncio
    async def test_get_holdings_requires_initialize(self, config: AppConfig) -> None:
        with pytest.raises(RuntimeError):
            await Application(config).get_holdings(WALLET)

    @pytest.mark.asyncio
    async def test_get_holdings_delegates(self, config: AppConfig) -> None:
        async with Application(config) as app:
            app.aggregator.aggregate = AsyncMock(return_value=[make_holding()])

            holdings = await app.get_holdings(WALLET, 10, use_cache=False)

        assert holdings == [make_holding()]
        app.aggregator.aggregate.assert_awaited_once_with(WALLET, 10, use_cache=False)


class TestMain:
    def test_invalid_address_exit_code(self, config: AppConfig, capsys: pytest.CaptureFixture) -> None:
        with patch("holdings_tracker.__main__.create_application", return_value=Application(config)):
            assert main(["0x1234"]) == 2
        assert "Invalid wallet address" in capsys.readouterr().err

    def test_json_output(self, config: AppConfig, capsys: pytest.CaptureFixture) -> None:
        app = Application(config)
        with (
            patch("holdings_tracker.__main__.create_application", return_value=app),
            patch.object(Application, "get_holdings", AsyncMock(return_value=[make_holding(raw_amount=7)])),
        ):
            assert main([WALLET, "--json"]) == 0

        assert '"balanceRaw": "7"' in capsys.readouterr().out

    def test_aggregation_failure_exit_code(self, config: AppConfig) -> None:
        with (
            patch("holdings_tracker.__main__.create_application", return_value=Application(config)),
            patch.object(Application, "get_holdings", AsyncMock(side_effect=AggregationError("nothing"))),
        ):
            assert main([WALLET]) == 1
