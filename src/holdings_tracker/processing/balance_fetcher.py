"""Per-chain ERC-20 balance retrieval across all supported chains."""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..clients.alchemy_client import AlchemyClient
from ..clients.errors import DecodeError
from ..clients.token_types import (
    ZERO_ADDRESS,
    RawBalance,
    decode_hex_amount,
    is_valid_ethereum_address,
    normalize_address,
)
from .batch_scheduler import BatchScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainBalances:
    """Balances returned for one chain; ``error`` is set when the chain failed."""

    chain_id: int
    balances: list[RawBalance] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_token_balances(chain_id: int, result: Any) -> list[RawBalance]:
    """Turn an ``alchemy_getTokenBalances`` result into non-zero raw balances.

    Drops the zero address, malformed contract addresses, undecodable amounts
    and zero amounts.
    """
    token_data = (result or {}).get("tokenBalances") if isinstance(result, dict) else None
    if not isinstance(token_data, list):
        raise DecodeError(f"Unexpected token balances result on chain {chain_id}")

    balances = []
    for token in token_data:
        if not isinstance(token, dict):
            continue

        contract = token.get("contractAddress") or ""
        if not is_valid_ethereum_address(contract):
            logger.debug(f"🔍 Skipping invalid contract address on chain {chain_id}: {contract!r}")
            continue
        contract = normalize_address(contract)
        if contract == ZERO_ADDRESS:
            continue

        try:
            amount = decode_hex_amount(token.get("tokenBalance"))
        except DecodeError as e:
            logger.warning(f"⚠️ Skipping {contract} on chain {chain_id}: {e}")
            continue

        if amount == 0:
            continue
        balances.append(RawBalance(chain_id=chain_id, contract_address=contract, raw_amount=amount))

    return balances


class BalanceFetcher:
    """Fetch raw token balances, one provider call per chain."""

    def __init__(self, alchemy: AlchemyClient, scheduler: BatchScheduler):
        self.alchemy = alchemy
        self.scheduler = scheduler

    async def fetch_chain_balances(self, chain_id: int, wallet_address: str) -> ChainBalances:
        """Fetch one chain; failures give an empty result with ``error`` set."""
        if not self.alchemy.supports(chain_id):
            return ChainBalances(chain_id, error=f"Alchemy does not support chain ID {chain_id}")

        result = await self.alchemy.get_token_balances(chain_id, wallet_address)
        if not result.ok:
            logger.warning(f"⚠️ Token balances unavailable for chain {chain_id}: {result.error.message}")
            return ChainBalances(chain_id, error=result.error.message)

        try:
            body = result.body if isinstance(result.body, dict) else {}
            balances = parse_token_balances(chain_id, body.get("result"))
        except DecodeError as e:
            logger.warning(f"⚠️ {e}")
            return ChainBalances(chain_id, error=str(e))

        logger.info(f"🪙 Found {len(balances)} non-zero tokens on chain {chain_id}")
        return ChainBalances(chain_id, balances)

    async def fetch_all(self, wallet_address: str, chain_ids: list[int]) -> list[ChainBalances]:
        """Fetch every chain in ``chain_ids``; output order follows ``chain_ids``."""
        logger.info(f"🔍 Fetching balances on {len(chain_ids)} chains for {wallet_address}")

        async def worker(chain_id: int) -> ChainBalances:
            return await self.fetch_chain_balances(chain_id, wallet_address)

        results = await self.scheduler.run(chain_ids, worker)
        return [
            result if result is not None else ChainBalances(chain_id, error="balance fetch failed")
            for chain_id, result in zip(chain_ids, results)
        ]
