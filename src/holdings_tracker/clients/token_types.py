"""Token holding types and amount helpers."""

import re
from dataclasses import dataclass
from typing import Any

from .errors import DecodeError

NATIVE_ADDRESS = "native"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_HEX_DIGITS_RE = re.compile(r"[0-9a-f]*")


def is_valid_ethereum_address(address: str) -> bool:
    """Check if a string looks like a 20-byte hex address."""
    if not address or not isinstance(address, str):
        return False
    return bool(_ADDRESS_RE.match(address.strip()))


def normalize_address(address: str) -> str:
    """Normalize an address to lowercase without surrounding whitespace."""
    return address.strip().lower()


def decode_hex_amount(value: str) -> int:
    """Decode a hex encoded unsigned amount into a Python int.

    Accepts ``0x`` prefixed strings as returned by JSON-RPC providers. A bare
    ``0x`` is treated as zero.

    Raises:
        DecodeError: If the value is not a hex string. Signs, underscores
            and a repeated prefix are rejected.
    """
    if not isinstance(value, str):
        raise DecodeError(f"Expected hex string, got {type(value).__name__}: {value!r}")

    text = value.strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    if not _HEX_DIGITS_RE.fullmatch(text):
        raise DecodeError(f"Malformed hex amount: {value!r}")
    if not text:
        return 0
    return int(text, 16)


def encode_hex_amount(amount: int) -> str:
    """Encode an unsigned amount as a ``0x`` prefixed hex string."""
    if amount < 0:
        raise ValueError("amount must be non-negative")
    return hex(amount)


def format_token_amount(raw_amount: int, decimals: int) -> str:
    """Format a raw amount as a decimal string using integer arithmetic only.

    Trailing fractional zeros are trimmed, so ``1500000000000000000`` with 18
    decimals becomes ``"1.5"`` and an exact whole amount has no fraction.
    """
    if decimals < 0:
        raise ValueError("decimals must be non-negative")

    if decimals == 0:
        return str(raw_amount)

    divisor = 10**decimals
    whole, fraction = divmod(raw_amount, divisor)
    if fraction == 0:
        return str(whole)

    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{fraction_str}"


def calculate_usd_value(raw_amount: int, decimals: int, price_usd: float | None) -> float | None:
    """Estimate the USD value of a raw amount at double precision."""
    if price_usd is None:
        return None
    return (raw_amount / 10**decimals) * price_usd


@dataclass(frozen=True)
class ChainDescriptor:
    """Static description of a supported chain."""

    chain_id: int
    display_name: str
    explorer_url: str
    native_symbol: str
    rpc_endpoint: str
    logo_url: str | None = None


@dataclass(frozen=True)
class RawBalance:
    """Undecorated balance of one contract on one chain."""

    chain_id: int
    contract_address: str
    raw_amount: int


@dataclass
class TokenMetadata:
    """Token metadata, filled in while providers are consulted."""

    symbol: str
    name: str
    decimals: int = 18
    logo_url: str | None = None
    price_usd: float | None = None


@dataclass(frozen=True)
class NativeBalance:
    """Native currency balance reported by the wallet's RPC endpoint."""

    symbol: str
    name: str
    decimals: int
    raw_amount: int


@dataclass(frozen=True)
class EnrichedHolding:
    """A token balance with human-readable metadata and pricing."""

    chain_id: int
    contract_address: str
    raw_amount: int
    decimals: int
    human_balance: str
    symbol: str
    name: str
    chain_name: str
    usd_value: float | None = None
    chain_logo: str | None = None
    token_logo: str | None = None

    @property
    def key(self) -> tuple[int, str]:
        return (self.chain_id, self.contract_address)

    @property
    def is_native(self) -> bool:
        return self.contract_address == NATIVE_ADDRESS

    def to_dict(self) -> dict[str, Any]:
        """Serialize for transport; the raw amount travels as a decimal string."""
        return {
            "chainId": self.chain_id,
            "address": self.contract_address,
            "balanceRaw": str(self.raw_amount),
            "decimals": self.decimals,
            "balance": self.human_balance,
            "usdValue": self.usd_value,
            "symbol": self.symbol,
            "name": self.name,
            "chainName": self.chain_name,
            "chainLogo": self.chain_logo,
            "logo": self.token_logo,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EnrichedHolding":
        """Rebuild a holding from :meth:`to_dict` output."""
        try:
            raw_amount = int(data["balanceRaw"])
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"Invalid serialized holding: {e}") from e

        usd_value = data.get("usdValue")
        return cls(
            chain_id=int(data["chainId"]),
            contract_address=data["address"],
            raw_amount=raw_amount,
            decimals=int(data["decimals"]),
            human_balance=data["balance"],
            usd_value=float(usd_value) if usd_value is not None else None,
            symbol=data["symbol"],
            name=data["name"],
            chain_name=data["chainName"],
            chain_logo=data.get("chainLogo"),
            token_logo=data.get("logo"),
        )


@dataclass(frozen=True)
class TokenQuery:
    """What a price provider is asked to resolve."""

    chain_id: int
    contract_address: str
    symbol: str | None = None
    is_native: bool = False


@dataclass(frozen=True)
class PriceQuote:
    """Price and logo information returned by one price provider."""

    provider: str
    price_usd: float | None = None
    logo_url: str | None = None
    decimals: int | None = None
    symbol: str | None = None
    name: str | None = None

    @property
    def has_price(self) -> bool:
        return self.price_usd is not None and self.price_usd > 0
