"""Application wiring: configuration, caches, clients and the aggregator."""

import logging
from typing import Any

from .aggregator import Aggregator
from .chains import ChainRegistry
from .clients.alchemy_client import AlchemyClient
from .clients.coingecko_client import CoinGeckoProvider
from .clients.coinmarketcap_client import CoinMarketCapProvider
from .clients.http_client import RetryingHttpCaller, RetryPolicy
from .clients.lifi_client import LiFiProvider
from .clients.native_balance import RpcNativeBalanceSource
from .clients.price_providers import PriceProvider
from .clients.token_types import EnrichedHolding
from .config import AppConfig, get_config
from .processing.balance_fetcher import BalanceFetcher
from .processing.batch_scheduler import BatchScheduler
from .processing.metadata_enricher import MetadataEnricher
from .utils.cache import CacheManager

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


class Application:
    """Owns every long-lived component for one process."""

    def __init__(self, config: AppConfig | None = None, registry: ChainRegistry | None = None):
        self.config = config or get_config()
        self.registry = registry or ChainRegistry(balance_urls=self.config.alchemy.networks)

        self.cache_manager: CacheManager | None = None
        self.alchemy: AlchemyClient | None = None
        self.providers: dict[str, PriceProvider] = {}
        self.chain_scheduler: BatchScheduler | None = None
        self.token_scheduler: BatchScheduler | None = None
        self.enricher: MetadataEnricher | None = None
        self.aggregator: Aggregator | None = None

        self._callers: dict[str, RetryingHttpCaller] = {}
        self._initialized = False

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _caller(self, name: str, rate_limit: int | None = None) -> RetryingHttpCaller:
        processing = self.config.processing
        caller = RetryingHttpCaller(
            name=name,
            retry_policy=RetryPolicy(max_retries=processing.max_retries, base_delay=processing.backoff_base),
            timeout=processing.request_timeout,
            rate_limit=rate_limit,
        )
        self._callers[name] = caller
        return caller

    async def initialize(self) -> None:
        if self._initialized:
            return

        config = self.config
        setup_logging("DEBUG" if config.debug else config.log_level)
        config.validate_providers()

        if not config.alchemy.api_key:
            logger.warning("⚠️ ALCHEMY_API_KEY is not set, token balance requests will fail")

        self.cache_manager = CacheManager(config.cache)
        general_cache = self.cache_manager.get_general_cache()

        self.alchemy = AlchemyClient(
            caller=self._caller("alchemy", config.alchemy.rate_limit),
            registry=self.registry,
            api_key=config.alchemy.api_key,
            cache_manager=self.cache_manager,
        )
        self.providers = {
            "coinmarketcap": CoinMarketCapProvider(
                caller=self._caller("coinmarketcap", config.coinmarketcap.rate_limit),
                registry=self.registry,
                api_key=config.coinmarketcap.api_key,
                base_url=config.coinmarketcap.base_url,
                map_limit=config.coinmarketcap.map_limit,
                cache=general_cache,
                map_ttl=config.cache.ttl_provider_map,
            ),
            "coingecko": CoinGeckoProvider(
                caller=self._caller("coingecko", config.coingecko.rate_limit),
                registry=self.registry,
                api_key=config.coingecko.api_key,
                base_url=config.coingecko.base_url,
            ),
            "lifi": LiFiProvider(
                caller=self._caller("lifi", config.lifi.rate_limit),
                base_url=config.lifi.base_url,
            ),
        }

        processing = config.processing
        self.chain_scheduler = BatchScheduler(processing.chain_batch_size, processing.chain_batch_delay, name="chains")
        self.token_scheduler = BatchScheduler(processing.token_batch_size, processing.token_batch_delay, name="tokens")

        self.enricher = MetadataEnricher(
            alchemy=self.alchemy,
            registry=self.registry,
            token_providers=[self.providers[name] for name in config.token_price_providers],
            native_providers=[self.providers[name] for name in config.native_price_providers],
            scheduler=self.token_scheduler,
        )
        self.aggregator = Aggregator(
            registry=self.registry,
            fetcher=BalanceFetcher(self.alchemy, self.chain_scheduler),
            enricher=self.enricher,
            native_source=RpcNativeBalanceSource(self._caller("rpc"), self.registry),
            result_cache=self.cache_manager.get_result_cache(),
        )

        self._initialized = True
        logger.info(f"🚀 Holdings tracker initialized ({config.environment.value}, cache={config.cache.backend.value})")

    def _require_aggregator(self) -> Aggregator:
        if self.aggregator is None:
            raise RuntimeError("Application is not initialized")
        return self.aggregator

    async def get_holdings(
        self, wallet_address: str, native_chain_id: int | None = 1, use_cache: bool = True
    ) -> list[EnrichedHolding]:
        return await self._require_aggregator().aggregate(wallet_address, native_chain_id, use_cache=use_cache)

    async def get_chain_holdings(self, wallet_address: str, chain_id: int, use_cache: bool = True) -> list[EnrichedHolding]:
        return await self._require_aggregator().aggregate_chain(wallet_address, chain_id, use_cache=use_cache)

    async def health_check(self) -> dict[str, bool]:
        status = {
            "alchemy_client": bool(self.config.alchemy.api_key),
            "coinmarketcap_client": bool(self.config.coinmarketcap.api_key),
            "coingecko_client": True,
            "lifi_client": True,
        }
        if self.cache_manager:
            for name, healthy in (await self.cache_manager.health_check()).items():
                status[name] = healthy
        return status

    async def collect_metrics(self) -> dict[str, Any]:
        metrics: dict[str, Any] = {}
        if self.alchemy:
            metrics["alchemy_client"] = self.alchemy.get_stats()
        for name, provider in self.providers.items():
            metrics[f"{name}_client"] = provider.get_stats()
        for scheduler in (self.chain_scheduler, self.token_scheduler):
            if scheduler:
                metrics[f"{scheduler.name}_scheduler"] = scheduler.get_stats()
        if self.enricher:
            metrics["enricher"] = self.enricher.get_stats()
        if self.aggregator:
            metrics["aggregator"] = self.aggregator.get_stats()
        metrics["http"] = {name: caller.get_stats() for name, caller in self._callers.items()}
        if self.cache_manager:
            metrics["cache"] = await self.cache_manager.get_stats()
        return metrics

    async def close(self) -> None:
        for caller in self._callers.values():
            await caller.close()
        if self.cache_manager:
            await self.cache_manager.close()
        self._initialized = False


def create_application(config: AppConfig | None = None) -> Application:
    """Create an application; use it as ``async with create_application() as app``."""
    return Application(config)
