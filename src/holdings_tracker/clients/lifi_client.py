"""Li.Fi token endpoint: decimals, USD price and logo in one call."""

import logging
from typing import Any

from .http_client import HttpRequest, RetryingHttpCaller
from .price_providers import PriceProvider, parse_price
from .token_types import ZERO_ADDRESS, PriceQuote, TokenQuery

logger = logging.getLogger(__name__)


class LiFiProvider(PriceProvider):
    """Native currencies are looked up by the zero address."""

    name = "lifi"

    def __init__(self, caller: RetryingHttpCaller, base_url: str = "https://li.quest/v1"):
        self.caller = caller
        self.base_url = base_url.rstrip("/")
        self._stats = {"lookups": 0, "prices": 0, "misses": 0}

    async def try_resolve(self, query: TokenQuery) -> PriceQuote | None:
        token = ZERO_ADDRESS if query.is_native else query.contract_address
        self._stats["lookups"] += 1

        result = await self.caller.call(
            HttpRequest(
                method="GET",
                url=f"{self.base_url}/token",
                headers={"Accept": "application/json"},
                params={"chain": str(query.chain_id), "token": token},
            )
        )
        if not result.ok or not isinstance(result.body, dict) or not result.body.get("symbol"):
            self._stats["misses"] += 1
            return None

        data = result.body
        decimals = data.get("decimals")
        quote = PriceQuote(
            provider=self.name,
            price_usd=parse_price(data.get("priceUSD")),
            logo_url=data.get("logoURI") or None,
            decimals=int(decimals) if isinstance(decimals, int) else None,
            symbol=data.get("symbol"),
            name=data.get("name"),
        )
        if quote.has_price:
            self._stats["prices"] += 1
            logger.debug(f"💰 Li.Fi price for {quote.symbol} on {query.chain_id}: ${quote.price_usd}")
        return quote

    def get_stats(self) -> dict[str, Any]:
        return {"provider": self.name, **self._stats}
