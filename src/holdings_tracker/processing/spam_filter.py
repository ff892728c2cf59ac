"""Heuristic spam detection for airdropped tokens."""

SPAM_WORDS = (
    "claim",
    "claimable",
    "reward",
    "rewards",
    "visit",
    "http://",
    "https://",
    "t.me/",
    "t.ly/",
    ".org",
    ".com",
    ".io",
)


def is_spam_token(name: str | None, symbol: str | None) -> bool:
    """Return True if the name or symbol contains a spam word (case-insensitive)."""
    name_lower = (name or "").lower()
    symbol_lower = (symbol or "").lower()
    return any(word in name_lower or word in symbol_lower for word in SPAM_WORDS)
