"""Alchemy JSON-RPC client for token balances and base token metadata."""

import logging
from typing import TYPE_CHECKING, Any

from .errors import DecodeError
from .http_client import CallResult, HttpRequest, RetryingHttpCaller
from .token_types import TokenMetadata, normalize_address

if TYPE_CHECKING:
    from ..chains import ChainRegistry
    from ..utils.cache import CacheManager

logger = logging.getLogger(__name__)


def parse_token_metadata(result: Any) -> TokenMetadata:
    """Convert an ``alchemy_getTokenMetadata`` result into :class:`TokenMetadata`.

    Missing decimals default to 18.

    Raises:
        DecodeError: If the result is not an object or decimals are invalid.
    """
    if not isinstance(result, dict):
        raise DecodeError(f"Unexpected token metadata result: {result!r}")

    decimals = result.get("decimals")
    if decimals is None:
        decimals = 18
    try:
        decimals = int(decimals)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Invalid decimals: {decimals!r}") from e
    if not 0 <= decimals <= 255:
        raise DecodeError(f"Decimals out of range: {decimals}")

    return TokenMetadata(
        symbol=result.get("symbol") or "UNKNOWN",
        name=result.get("name") or "Unknown Token",
        decimals=decimals,
        logo_url=(result.get("logo") or "").strip() or None,
    )


class AlchemyClient:
    """Per-chain access to the Alchemy token API."""

    def __init__(
        self,
        caller: RetryingHttpCaller,
        registry: "ChainRegistry",
        api_key: str,
        cache_manager: "CacheManager | None" = None,
    ):
        self.caller = caller
        self.registry = registry
        self.api_key = api_key
        self.cache_manager = cache_manager

        self._stats = {
            "balance_requests": 0,
            "metadata_requests": 0,
            "metadata_cache_hits": 0,
            "api_errors": 0,
        }

    def supports(self, chain_id: int) -> bool:
        return self.registry.balance_url(chain_id) is not None

    def _url(self, chain_id: int) -> str:
        base_url = self.registry.balance_url(chain_id)
        if base_url is None:
            raise ValueError(f"Alchemy does not support chain ID {chain_id}")
        return f"{base_url}{self.api_key}"

    def _rpc(self, chain_id: int, method: str, params: list[Any], max_retries: int | None = None) -> HttpRequest:
        return HttpRequest(
            method="POST",
            url=self._url(chain_id),
            headers={"Content-Type": "application/json"},
            json={"id": 1, "jsonrpc": "2.0", "method": method, "params": params},
            max_retries=max_retries,
        )

    async def get_token_balances(self, chain_id: int, wallet_address: str) -> CallResult:
        """Call ``alchemy_getTokenBalances`` for one chain."""
        self._stats["balance_requests"] += 1
        result = await self.caller.call(self._rpc(chain_id, "alchemy_getTokenBalances", [wallet_address]))
        if not result.ok:
            self._stats["api_errors"] += 1
        return result

    async def get_token_metadata(self, chain_id: int, contract_address: str) -> TokenMetadata | None:
        """Fetch base metadata for one contract, or ``None`` if unavailable."""
        address = normalize_address(contract_address)

        if self.cache_manager:
            cached = await self.cache_manager.get_token_metadata(chain_id, address)
            if cached:
                self._stats["metadata_cache_hits"] += 1
                logger.debug(f"💾 Metadata cache hit for {chain_id}:{address}")
                return TokenMetadata(**cached)

        self._stats["metadata_requests"] += 1
        result = await self.caller.call(self._rpc(chain_id, "alchemy_getTokenMetadata", [address]))
        if not result.ok:
            self._stats["api_errors"] += 1
            logger.debug(f"🔍 No Alchemy metadata for {chain_id}:{address}: {result.error.message}")
            return None

        try:
            body = result.body if isinstance(result.body, dict) else {}
            metadata = parse_token_metadata(body.get("result"))
        except DecodeError as e:
            logger.warning(f"⚠️ Invalid metadata for {chain_id}:{address}: {e}")
            return None

        if self.cache_manager:
            await self.cache_manager.set_token_metadata(
                chain_id,
                address,
                {
                    "symbol": metadata.symbol,
                    "name": metadata.name,
                    "decimals": metadata.decimals,
                    "logo_url": metadata.logo_url,
                },
            )
        return metadata

    def get_stats(self) -> dict[str, Any]:
        return {**self._stats, "caller": self.caller.get_stats()}
