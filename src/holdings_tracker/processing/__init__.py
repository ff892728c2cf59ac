"""Balance fetching, enrichment and fan-out scheduling."""

from .balance_fetcher import BalanceFetcher, ChainBalances, parse_token_balances
from .batch_scheduler import BatchScheduler, run_batched
from .metadata_enricher import MetadataEnricher
from .spam_filter import SPAM_WORDS, is_spam_token

__all__ = [
    "SPAM_WORDS",
    "BalanceFetcher",
    "BatchScheduler",
    "ChainBalances",
    "MetadataEnricher",
    "is_spam_token",
    "parse_token_balances",
    "run_batched",
]
