"""Command line entry point: ``python -m holdings_tracker <wallet>``."""

import argparse
import asyncio
import json
import sys

from .aggregator import serialize_holdings
from .app import create_application
from .clients.errors import AggregationError, ConfigurationError, InvalidAddressError
from .formatting import format_usd, total_usd_value

parser = argparse.ArgumentParser(prog="holdings_tracker", description="Multi-chain wallet holdings")
parser.add_argument("wallet", help="Wallet address (0x...)")
parser.add_argument("--chain", type=int, default=None, help="Only fetch token holdings on this chain id")
parser.add_argument("--native-chain", type=int, default=1, help="Chain id whose native balance is included")
parser.add_argument("--json", action="store_true", help="Print holdings as JSON")
parser.add_argument("--no-cache", action="store_true", help="Bypass the holdings cache")


async def _amain(args: argparse.Namespace) -> int:
    async with create_application() as app:
        if args.chain is not None:
            holdings = await app.get_chain_holdings(args.wallet, args.chain, use_cache=not args.no_cache)
        else:
            holdings = await app.get_holdings(args.wallet, args.native_chain, use_cache=not args.no_cache)

    if args.json:
        print(json.dumps({"tokens": serialize_holdings(holdings)}, indent=2))
        return 0

    for h in holdings:
        value = format_usd(h.usd_value) if h.usd_value is not None else "-"
        print(f"{h.symbol:<10} {h.human_balance:>28}  {value:>16}  {h.chain_name}")
    print(f"Total: {format_usd(total_usd_value(holdings))} across {len(holdings)} holdings")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parser.parse_args(argv)
    try:
        return asyncio.run(_amain(args))
    except InvalidAddressError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2
    except (AggregationError, ConfigurationError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
