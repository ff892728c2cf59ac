"""CoinGecko price/logo provider keyed by (chain, contract)."""

import logging
from typing import TYPE_CHECKING, Any

from .http_client import HttpRequest, RetryingHttpCaller
from .price_providers import PriceProvider, parse_price
from .token_types import PriceQuote, TokenQuery

if TYPE_CHECKING:
    from ..chains import ChainRegistry

logger = logging.getLogger(__name__)

COIN_DETAIL_PARAMS = {
    "localization": "false",
    "tickers": "false",
    "community_data": "false",
    "developer_data": "false",
}


def parse_coin_detail(data: Any, provider: str = "coingecko") -> PriceQuote | None:
    """Extract logo and USD price from a ``/coins/...`` response."""
    if not isinstance(data, dict) or not (data.get("id") or data.get("symbol")):
        return None

    image = data.get("image") or {}
    market_data = data.get("market_data") or {}
    return PriceQuote(
        provider=provider,
        price_usd=parse_price((market_data.get("current_price") or {}).get("usd")),
        logo_url=image.get("large") or image.get("small") or None,
        symbol=(data.get("symbol") or "").upper() or None,
        name=data.get("name") or None,
    )


class CoinGeckoProvider(PriceProvider):
    name = "coingecko"

    def __init__(
        self,
        caller: RetryingHttpCaller,
        registry: "ChainRegistry",
        api_key: str | None = None,
        base_url: str = "https://api.coingecko.com/api/v3",
    ):
        self.caller = caller
        self.registry = registry
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

        self._stats = {"lookups": 0, "prices": 0, "misses": 0}

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            header = "x-cg-pro-api-key" if "pro-api" in self.base_url else "x-cg-demo-api-key"
            headers[header] = self.api_key
        return headers

    def _path_for(self, query: TokenQuery) -> str | None:
        if query.is_native:
            coin_id = self.registry.native_coin_id(query.chain_id)
            return f"/coins/{coin_id}" if coin_id else None

        platform = self.registry.platform_for(query.chain_id)
        if platform is None:
            return None
        return f"/coins/{platform}/contract/{query.contract_address.lower()}"

    async def try_resolve(self, query: TokenQuery) -> PriceQuote | None:
        path = self._path_for(query)
        if path is None:
            return None

        self._stats["lookups"] += 1
        result = await self.caller.call(
            HttpRequest(method="GET", url=f"{self.base_url}{path}", headers=self._headers(), params=COIN_DETAIL_PARAMS)
        )
        if not result.ok:
            self._stats["misses"] += 1
            return None

        quote = parse_coin_detail(result.body, provider=self.name)
        if quote is None:
            self._stats["misses"] += 1
            return None

        if quote.has_price:
            self._stats["prices"] += 1
            logger.debug(f"💰 CoinGecko price for {query.contract_address} on {query.chain_id}: ${quote.price_usd}")
        return quote

    def get_stats(self) -> dict[str, Any]:
        return {"provider": self.name, "has_api_key": bool(self.api_key), **self._stats}
