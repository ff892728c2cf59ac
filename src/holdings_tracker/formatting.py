"""Text rendering of holdings for chat context and console output."""

from collections.abc import Sequence

from .clients.token_types import EnrichedHolding


def format_usd(value: float) -> str:
    """Format a USD amount as ``$1,234.56``."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def get_top_holdings(holdings: Sequence[EnrichedHolding], count: int = 3) -> list[EnrichedHolding]:
    """Top ``count`` holdings by USD value; unpriced holdings count as zero."""
    return sorted(holdings, key=lambda h: h.usd_value or 0.0, reverse=True)[:count]


def format_holdings(holdings: Sequence[EnrichedHolding]) -> str:
    return "\n".join(f"{h.symbol} ({h.name}) - {h.human_balance} on {h.chain_name}" for h in holdings)


def format_holdings_summary(holdings: Sequence[EnrichedHolding], count: int = 20) -> str:
    """Bullet list of the top holdings, used to build chat prompts."""
    lines = []
    for h in get_top_holdings(holdings, count):
        value = f" ({format_usd(h.usd_value)})" if h.usd_value else ""
        lines.append(f"• {h.symbol}: {h.human_balance} on {h.chain_name}{value}")
    return "\n".join(lines)


def total_usd_value(holdings: Sequence[EnrichedHolding]) -> float:
    return sum(h.usd_value for h in holdings if h.usd_value is not None)
