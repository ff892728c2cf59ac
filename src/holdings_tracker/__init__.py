"""Multi-chain wallet holdings aggregation."""

from .aggregator import Aggregator, deduplicate_holdings, serialize_holdings, sort_holdings
from .app import Application, create_application
from .chains import ChainRegistry
from .clients.token_types import EnrichedHolding

__version__ = "0.1.0"

__all__ = [
    "Aggregator",
    "Application",
    "ChainRegistry",
    "EnrichedHolding",
    "create_application",
    "deduplicate_holdings",
    "serialize_holdings",
    "sort_holdings",
]
