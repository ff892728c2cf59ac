"""Tests for amount helpers and holding types."""

import pytest

from holdings_tracker.clients.errors import DecodeError
from holdings_tracker.clients.token_types import (
    NATIVE_ADDRESS,
    EnrichedHolding,
    PriceQuote,
    calculate_usd_value,
    decode_hex_amount,
    encode_hex_amount,
    format_token_amount,
    is_valid_ethereum_address,
)


class TestHexAmounts:
    def test_decode_beyond_64_bits(self) -> None:
        amount = 2**80 + 12345

        assert decode_hex_amount(encode_hex_amount(amount)) == amount
        assert decode_hex_amount("0x" + "f" * 64) == 2**256 - 1

    def test_bare_prefix_is_zero(self) -> None:
        assert decode_hex_amount("0x") == 0
        assert decode_hex_amount("0x0") == 0

    @pytest.mark.parametrize("value", ["0xzz", "hello", None, 12, "-0x5", "0x-5", "0x+5", "0x0x10", "0x1_0", "0x 10"])
    def test_malformed_amount(self, value) -> None:
        with pytest.raises(DecodeError):
            decode_hex_amount(value)

    def test_encode_negative(self) -> None:
        with pytest.raises(ValueError):
            encode_hex_amount(-1)


class TestFormatting:
    """Human balances use integer arithmetic only."""

    @pytest.mark.parametrize(
        ("raw", "decimals", "expected"),
        [
            (1_500_000_000_000_000_000, 18, "1.5"),
            (10**18, 18, "1"),
            (1, 6, "0.000001"),
            (42, 0, "42"),
            (0, 18, "0"),
            (123_456_789, 6, "123.456789"),
        ],
    )
    def test_format_token_amount(self, raw: int, decimals: int, expected: str) -> None:
        assert format_token_amount(raw, decimals) == expected

    def test_format_exceeds_float_precision(self) -> None:
        raw = 10**30 + 1

        assert format_token_amount(raw, 18) == "1000000000000.000000000000000001"

    def test_usd_value(self) -> None:
        assert calculate_usd_value(1_500_000_000_000_000_000, 18, 2.5) == pytest.approx(3.75)
        assert calculate_usd_value(10**18, 18, None) is None


class TestAddresses:
    def test_valid_address(self) -> None:
        assert is_valid_ethereum_address("0x742d35Cc6634C0532925a3b8D40e3f337ABC7b86")

    @pytest.mark.parametrize("address", ["", "0x123", "742d35Cc6634C0532925a3b8D40e3f337ABC7b86", "0x" + "g" * 40])
    def test_invalid_address(self, address: str) -> None:
        assert not is_valid_ethereum_address(address)


class TestEnrichedHolding:
    def test_to_dict_carries_raw_amount_as_string(self) -> None:
        holding = EnrichedHolding(
            chain_id=1,
            contract_address=NATIVE_ADDRESS,
            raw_amount=2**70,
            decimals=18,
            human_balance=format_token_amount(2**70, 18),
            symbol="ETH",
            name="Ethereum",
            chain_name="Ethereum Mainnet",
            usd_value=None,
        )

        data = holding.to_dict()

        assert data["balanceRaw"] == str(2**70)
        assert data["address"] == "native"
        assert data["usdValue"] is None
        assert holding.is_native
        assert EnrichedHolding.from_dict(data) == holding

    def test_from_dict_rejects_bad_amount(self) -> None:
        with pytest.raises(DecodeError):
            EnrichedHolding.from_dict({"balanceRaw": "abc"})


class TestPriceQuote:
    def test_zero_price_is_not_a_price(self) -> None:
        assert not PriceQuote(provider="x", price_usd=0.0).has_price
        assert not PriceQuote(provider="x").has_price
        assert PriceQuote(provider="x", price_usd=0.5).has_price
