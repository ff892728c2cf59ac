"""Provider clients, shared HTTP caller, token types and errors."""

from .alchemy_client import AlchemyClient
from .coingecko_client import CoinGeckoProvider
from .coinmarketcap_client import CoinMarketCapProvider
from .errors import (
    AggregationError,
    ConfigurationError,
    DecodeError,
    HoldingsTrackerError,
    InvalidAddressError,
    ProviderError,
    RateLimitError,
    TransportError,
)
from .http_client import CallError, CallResult, ErrorKind, HttpRequest, RetryingHttpCaller, RetryPolicy
from .lifi_client import LiFiProvider
from .native_balance import NativeBalanceSource, RpcNativeBalanceSource
from .price_providers import PriceProvider
from .token_types import (
    NATIVE_ADDRESS,
    ZERO_ADDRESS,
    ChainDescriptor,
    EnrichedHolding,
    NativeBalance,
    PriceQuote,
    RawBalance,
    TokenMetadata,
    TokenQuery,
)

__all__ = [
    "NATIVE_ADDRESS",
    "ZERO_ADDRESS",
    "AggregationError",
    "AlchemyClient",
    "CallError",
    "CallResult",
    "ChainDescriptor",
    "CoinGeckoProvider",
    "CoinMarketCapProvider",
    "ConfigurationError",
    "DecodeError",
    "EnrichedHolding",
    "ErrorKind",
    "HoldingsTrackerError",
    "HttpRequest",
    "InvalidAddressError",
    "LiFiProvider",
    "NativeBalance",
    "NativeBalanceSource",
    "PriceProvider",
    "PriceQuote",
    "ProviderError",
    "RateLimitError",
    "RawBalance",
    "RetryPolicy",
    "RetryingHttpCaller",
    "RpcNativeBalanceSource",
    "TokenMetadata",
    "TokenQuery",
    "TransportError",
]
