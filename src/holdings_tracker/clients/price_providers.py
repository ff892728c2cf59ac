"""Common interface of the price/logo providers used during enrichment."""

import math
from abc import ABC, abstractmethod
from typing import Any

from .token_types import PriceQuote, TokenQuery


def parse_price(value: Any) -> float | None:
    """Parse a provider price field; non-numeric, negative or non-finite values give ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price < 0:
        return None
    return price


class PriceProvider(ABC):
    """One step of the price/logo fallback chain."""

    name: str = "provider"

    @abstractmethod
    async def try_resolve(self, query: TokenQuery) -> PriceQuote | None:
        """Return what the provider knows about the token, or ``None``.

        Implementations return ``None`` for "no data" and must not raise for
        provider failures.
        """

    def get_stats(self) -> dict[str, Any]:
        return {"provider": self.name}
