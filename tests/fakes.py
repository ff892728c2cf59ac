"""Test doubles shared by the unit tests."""

from contextlib import asynccontextmanager
from typing import Any

from holdings_tracker.clients.price_providers import PriceProvider
from holdings_tracker.clients.token_types import EnrichedHolding, PriceQuote, TokenQuery

WALLET = "0x742d35Cc6634C0532925a3b8D40e3f337ABC7b86"
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


class FakeResponse:
    """Minimal stand-in for ``aiohttp.ClientResponse``."""

    def __init__(self, status: int = 200, data: Any = None, text: str = ""):
        self.status = status
        self._data = data
        self._text = text

    async def json(self, content_type: str | None = "application/json") -> Any:
        if isinstance(self._data, Exception):
            raise self._data
        return self._data

    async def text(self) -> str:
        return self._text


class FakeSession:
    """Replays queued responses (or raises queued exceptions) in order."""

    def __init__(self, responses: list[FakeResponse | Exception]):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    @asynccontextmanager
    async def request(self, method: str, url: str, **kwargs: Any):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        outcome = self.responses.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        yield outcome

    async def close(self) -> None:
        self.closed = True


class RecordingSleep:
    """Async sleep replacement that records the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ManualClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticProvider(PriceProvider):
    """Price provider returning a fixed quote and recording its queries."""

    def __init__(self, name: str, quote: PriceQuote | None = None, error: Exception | None = None):
        self.name = name
        self.quote = quote
        self.error = error
        self.queries: list[TokenQuery] = []

    async def try_resolve(self, query: TokenQuery) -> PriceQuote | None:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.quote


def make_holding(
    chain_id: int = 1,
    address: str = USDC,
    usd_value: float | None = None,
    raw_amount: int = 1,
    symbol: str = "TKN",
) -> EnrichedHolding:
    return EnrichedHolding(
        chain_id=chain_id,
        contract_address=address,
        raw_amount=raw_amount,
        decimals=0,
        human_balance=str(raw_amount),
        symbol=symbol,
        name=f"{symbol} Token",
        chain_name="Ethereum Mainnet",
        usd_value=usd_value,
    )
