"""CoinMarketCap price/logo provider.

Token ids are resolved through the listing map, by symbol first and by
contract address second, then ``/v2/cryptocurrency/info`` supplies the logo
and ``/v1/cryptocurrency/quotes/latest`` the USD price.
"""

import logging
from typing import TYPE_CHECKING, Any

from .http_client import HttpRequest, RetryingHttpCaller
from .price_providers import PriceProvider, parse_price
from .token_types import PriceQuote, TokenQuery

if TYPE_CHECKING:
    from ..chains import ChainRegistry
    from ..utils.cache import CacheInterface

logger = logging.getLogger(__name__)

MAP_CACHE_KEY = "coinmarketcap:map"


class CoinMarketCapProvider(PriceProvider):
    name = "coinmarketcap"

    def __init__(
        self,
        caller: RetryingHttpCaller,
        registry: "ChainRegistry",
        api_key: str | None,
        base_url: str = "https://pro-api.coinmarketcap.com",
        map_limit: int = 5000,
        cache: "CacheInterface | None" = None,
        map_ttl: int = 3600,
    ):
        self.caller = caller
        self.registry = registry
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.map_limit = map_limit
        self.cache = cache
        self.map_ttl = map_ttl

        self._stats = {"lookups": 0, "symbol_hits": 0, "contract_hits": 0, "prices": 0, "misses": 0}

    def _request(self, path: str, params: dict[str, Any]) -> HttpRequest:
        return HttpRequest(
            method="GET",
            url=f"{self.base_url}{path}",
            headers={"Accept": "application/json", "X-CMC_PRO_API_KEY": self.api_key or ""},
            params=params,
        )

    async def _load_map(self) -> list[dict[str, Any]]:
        """Return the compact listing map, served from cache when possible."""
        if self.cache:
            cached = await self.cache.get(MAP_CACHE_KEY)
            if cached is not None:
                return cached

        result = await self.caller.call(
            self._request("/v1/cryptocurrency/map", {"listing_status": "active", "start": 1, "limit": self.map_limit})
        )
        if not result.ok or not isinstance(result.body, dict):
            return []

        entries = []
        for item in result.body.get("data") or []:
            if not isinstance(item, dict) or item.get("id") is None:
                continue
            platform = item.get("platform") or {}
            entries.append(
                {
                    "id": str(item["id"]),
                    "symbol": (item.get("symbol") or "").upper(),
                    "platform": platform.get("slug"),
                    "token_address": (platform.get("token_address") or "").lower(),
                }
            )

        if self.cache and entries:
            await self.cache.set(MAP_CACHE_KEY, entries, ttl=self.map_ttl)
        return entries

    @staticmethod
    def find_by_symbol(entries: list[dict[str, Any]], symbol: str, platform: str | None) -> str | None:
        symbol_upper = symbol.upper()
        for entry in entries:
            if entry["symbol"] == symbol_upper and entry["platform"] == platform:
                return entry["id"]
        return None

    @staticmethod
    def find_by_contract(entries: list[dict[str, Any]], contract_address: str, platform: str) -> str | None:
        address = contract_address.lower()
        for entry in entries:
            if entry["platform"] == platform and entry["token_address"] == address:
                return entry["id"]
        return None

    async def _get_info(self, token_id: str) -> dict[str, Any] | None:
        result = await self.caller.call(self._request("/v2/cryptocurrency/info", {"id": token_id}))
        if not result.ok or not isinstance(result.body, dict):
            return None
        info = (result.body.get("data") or {}).get(token_id)
        return info if isinstance(info, dict) else None

    async def _get_price(self, token_id: str) -> float | None:
        result = await self.caller.call(self._request("/v1/cryptocurrency/quotes/latest", {"id": token_id}))
        if not result.ok or not isinstance(result.body, dict):
            return None
        quote = ((result.body.get("data") or {}).get(token_id) or {}).get("quote") or {}
        return parse_price((quote.get("USD") or {}).get("price"))

    async def try_resolve(self, query: TokenQuery) -> PriceQuote | None:
        if not self.api_key:
            return None

        self._stats["lookups"] += 1
        platform = None if query.is_native else self.registry.platform_for(query.chain_id)
        if platform is None and not query.is_native:
            return None

        entries = await self._load_map()
        if not entries:
            self._stats["misses"] += 1
            return None

        token_id = None
        if query.symbol:
            token_id = self.find_by_symbol(entries, query.symbol, platform)
            if token_id:
                self._stats["symbol_hits"] += 1
        if token_id is None and platform is not None:
            token_id = self.find_by_contract(entries, query.contract_address, platform)
            if token_id:
                self._stats["contract_hits"] += 1
        if token_id is None:
            self._stats["misses"] += 1
            return None

        info = await self._get_info(token_id)
        if info is None:
            self._stats["misses"] += 1
            return None

        price = await self._get_price(token_id)
        if price is not None:
            self._stats["prices"] += 1
            logger.debug(f"💰 CoinMarketCap price for {query.symbol or query.contract_address}: ${price}")

        return PriceQuote(
            provider=self.name,
            price_usd=price,
            logo_url=info.get("logo") or None,
            symbol=info.get("symbol"),
            name=info.get("name"),
        )

    def get_stats(self) -> dict[str, Any]:
        return {"provider": self.name, "has_api_key": bool(self.api_key), **self._stats}
