"""Native currency balance source backed by the chain's JSON-RPC endpoint."""

import logging
from typing import TYPE_CHECKING, Protocol

from .errors import DecodeError
from .http_client import HttpRequest, RetryingHttpCaller
from .token_types import NativeBalance, decode_hex_amount

if TYPE_CHECKING:
    from ..chains import ChainRegistry

logger = logging.getLogger(__name__)

NATIVE_NAMES = {
    "ETH": "Ethereum",
    "POL": "Polygon",
    "AVAX": "Avalanche",
    "ZETA": "ZetaChain",
}


class NativeBalanceSource(Protocol):
    """Anything that can report a wallet's native balance on one chain."""

    async def get_native_balance(self, wallet_address: str, chain_id: int) -> NativeBalance | None: ...


class RpcNativeBalanceSource:
    """Reads the native balance with ``eth_getBalance``."""

    def __init__(self, caller: RetryingHttpCaller, registry: "ChainRegistry"):
        self.caller = caller
        self.registry = registry

    async def get_native_balance(self, wallet_address: str, chain_id: int) -> NativeBalance | None:
        chain = self.registry.get(chain_id)
        if chain is None:
            logger.warning(f"⚠️ Unknown chain ID for native balance: {chain_id}")
            return None

        request = HttpRequest(
            method="POST",
            url=chain.rpc_endpoint,
            headers={"Content-Type": "application/json"},
            json={"id": 1, "jsonrpc": "2.0", "method": "eth_getBalance", "params": [wallet_address, "latest"]},
        )
        result = await self.caller.call(request)
        if not result.ok:
            logger.warning(f"⚠️ Failed to get native balance on {chain.display_name}: {result.error.message}")
            return None

        try:
            body = result.body if isinstance(result.body, dict) else {}
            raw_amount = decode_hex_amount(body.get("result"))
        except DecodeError as e:
            logger.warning(f"⚠️ Invalid native balance on {chain.display_name}: {e}")
            return None

        return NativeBalance(
            symbol=chain.native_symbol,
            name=NATIVE_NAMES.get(chain.native_symbol, chain.native_symbol),
            decimals=18,
            raw_amount=raw_amount,
        )
