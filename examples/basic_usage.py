"""Basic usage examples for the holdings tracker.

This file demonstrates:
- Fetching the multi-chain holdings of one wallet
- Fetching a single chain
- Health checks and metrics
- Basic error handling
"""

import asyncio
import logging

from holdings_tracker.app import create_application
from holdings_tracker.clients import AggregationError, InvalidAddressError
from holdings_tracker.config import get_config
from holdings_tracker.formatting import format_holdings_summary, format_usd, total_usd_value

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

WALLET = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


async def example_1_all_chains():
    """Example 1: Holdings across every supported chain."""
    print("🏦 Example 1: Multi-chain holdings")
    print("=" * 50)

    async with create_application() as app:
        holdings = await app.get_holdings(WALLET)

        print(f"💰 {len(holdings)} holdings worth {format_usd(total_usd_value(holdings))}")
        print(format_holdings_summary(holdings, count=10))

        # The second call is served from the holdings cache
        await app.get_holdings(WALLET)
        print(f"💾 Cache hits: {app.aggregator.get_stats()['cache_hits']}")


async def example_2_single_chain():
    """Example 2: Holdings on Base only."""
    print("\n🔵 Example 2: Single chain")
    print("=" * 50)

    async with create_application() as app:
        holdings = await app.get_chain_holdings(WALLET, 8453)
        for h in holdings:
            value = format_usd(h.usd_value) if h.usd_value is not None else "unpriced"
            print(f"  {h.symbol:<8} {h.human_balance:>24}  {value}")


async def example_3_health_and_metrics():
    """Example 3: Service health and request metrics."""
    print("\n🏥 Example 3: Health check and metrics")
    print("=" * 50)

    config = get_config()
    print(f"  Environment: {config.environment.value}")
    print(f"  Cache Backend: {config.cache.backend.value}")
    print(f"  Token providers: {', '.join(config.token_price_providers)}")
    print(f"  Native providers: {', '.join(config.native_price_providers)}")

    async with create_application() as app:
        for service, is_healthy in (await app.health_check()).items():
            print(f"  {'✅' if is_healthy else '❌'} {service}")

        metrics = await app.collect_metrics()
        for name, stats in metrics["http"].items():
            print(f"  🔗 {name}: {stats['requests']} requests, {stats['rate_limit_errors']} rate limited")


async def example_4_error_handling():
    """Example 4: Invalid addresses and unavailable data."""
    print("\n🛡️ Example 4: Error handling")
    print("=" * 50)

    async with create_application() as app:
        for address in ("invalid_address", WALLET):
            try:
                holdings = await app.get_holdings(address, use_cache=False)
                print(f"  ✅ {address[:12]}...: {len(holdings)} holdings")
            except InvalidAddressError as e:
                print(f"  ❌ {e}")
            except AggregationError as e:
                print(f"  ⚠️ No data: {e}")


async def run_all_examples():
    examples = [
        example_1_all_chains,
        example_2_single_chain,
        example_3_health_and_metrics,
        example_4_error_handling,
    ]
    for example_func in examples:
        try:
            await example_func()
        except Exception as e:
            logger.error(f"❌ {example_func.__name__} failed: {e}")


if __name__ == "__main__":
    asyncio.run(run_all_examples())
