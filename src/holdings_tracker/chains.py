"""Chain registry: supported chains, their logos and provider platform ids."""

from collections.abc import Iterable

from .clients.token_types import ChainDescriptor

_TRUSTWALLET = "https://raw.githubusercontent.com/trustwallet/assets/master/blockchains"

DEFAULT_CHAINS: tuple[ChainDescriptor, ...] = (
    ChainDescriptor(
        chain_id=1,
        display_name="Ethereum Mainnet",
        explorer_url="https://etherscan.io",
        native_symbol="ETH",
        rpc_endpoint="https://ethereum.rpc.thirdweb.com",
        logo_url=f"{_TRUSTWALLET}/ethereum/info/logo.png",
    ),
    ChainDescriptor(
        chain_id=10,
        display_name="Optimism Mainnet",
        explorer_url="https://optimistic.etherscan.io",
        native_symbol="ETH",
        rpc_endpoint="https://optimism.rpc.thirdweb.com",
        logo_url=f"{_TRUSTWALLET}/optimism/info/logo.png",
    ),
    ChainDescriptor(
        chain_id=137,
        display_name="Polygon Mainnet",
        explorer_url="https://polygonscan.com",
        native_symbol="POL",
        rpc_endpoint="https://polygon.rpc.thirdweb.com",
        logo_url=f"{_TRUSTWALLET}/polygon/info/logo.png",
    ),
    ChainDescriptor(
        chain_id=324,
        display_name="ZkSync Mainnet",
        explorer_url="https://zkscan.io",
        native_symbol="ETH",
        rpc_endpoint="https://zksync.rpc.thirdweb.com",
        logo_url=f"{_TRUSTWALLET}/zksync/info/logo.png",
    ),
    ChainDescriptor(
        chain_id=7001,
        display_name="ZetaChain Testnet",
        explorer_url="https://zetachain-testnet.explorer.thirdweb.com",
        native_symbol="ZETA",
        rpc_endpoint="https://zetachain-testnet.rpc.thirdweb.com",
        logo_url=f"{_TRUSTWALLET}/zetachain/info/logo.png",
    ),
    ChainDescriptor(
        chain_id=8453,
        display_name="Base Mainnet",
        explorer_url="https://basescan.org",
        native_symbol="ETH",
        rpc_endpoint="https://base.rpc.thirdweb.com",
        logo_url=f"{_TRUSTWALLET}/base/info/logo.png",
    ),
    ChainDescriptor(
        chain_id=42161,
        display_name="Arbitrum One",
        explorer_url="https://arbiscan.io",
        native_symbol="ETH",
        rpc_endpoint="https://arbitrum.rpc.thirdweb.com",
        logo_url=f"{_TRUSTWALLET}/arbitrum/info/logo.png",
    ),
    ChainDescriptor(
        chain_id=43114,
        display_name="Avalanche Mainnet",
        explorer_url="https://snowtrace.io",
        native_symbol="AVAX",
        rpc_endpoint="https://avalanche.rpc.thirdweb.com",
        logo_url="https://icons.llama.fi/avalanche.png",
    ),
    ChainDescriptor(
        chain_id=84532,
        display_name="Base Sepolia",
        explorer_url="https://sepolia-explorer.base.org",
        native_symbol="ETH",
        rpc_endpoint="https://sepolia.base.org",
        logo_url=f"{_TRUSTWALLET}/base/info/logo.png",
    ),
    ChainDescriptor(
        chain_id=7777777,
        display_name="Zora Mainnet",
        explorer_url="https://zora.scans.io",
        native_symbol="ETH",
        rpc_endpoint="https://zora.rpc.thirdweb.com",
        logo_url="https://icons.llama.fi/zora.jpg",
    ),
    ChainDescriptor(
        chain_id=11155111,
        display_name="Ethereum Sepolia",
        explorer_url="https://sepolia.etherscan.io",
        native_symbol="ETH",
        rpc_endpoint="https://ethereum-sepolia.rpc.thirdweb.com",
        logo_url=f"{_TRUSTWALLET}/sepolia/info/logo.png",
    ),
)

# Alchemy network base URLs; the API key is appended per request.
ALCHEMY_BASE_URLS: dict[int, str] = {
    1: "https://eth-mainnet.g.alchemy.com/v2/",
    11155111: "https://eth-sepolia.g.alchemy.com/v2/",
    10: "https://opt-mainnet.g.alchemy.com/v2/",
    137: "https://polygon-mainnet.g.alchemy.com/v2/",
    42161: "https://arb-mainnet.g.alchemy.com/v2/",
    8453: "https://base-mainnet.g.alchemy.com/v2/",
    43114: "https://avax-mainnet.g.alchemy.com/v2/",
}

# Platform slugs shared by CoinMarketCap and CoinGecko.
PRICE_PLATFORMS: dict[int, str] = {
    1: "ethereum",
    10: "optimistic-ethereum",
    137: "polygon-pos",
    42161: "arbitrum-one",
    8453: "base",
    43114: "avalanche",
}

# CoinGecko coin ids of each chain's native currency.
NATIVE_COIN_IDS: dict[int, str] = {
    1: "ethereum",
    10: "ethereum",
    137: "polygon-ecosystem-token",
    324: "ethereum",
    8453: "ethereum",
    42161: "ethereum",
    43114: "avalanche-2",
    7777777: "ethereum",
}


class ChainRegistry:
    """Read-only lookup over the supported chain descriptors."""

    def __init__(
        self,
        chains: Iterable[ChainDescriptor] = DEFAULT_CHAINS,
        balance_urls: dict[int, str] | None = None,
    ):
        self._chains = {chain.chain_id: chain for chain in chains}
        urls = ALCHEMY_BASE_URLS if balance_urls is None else balance_urls
        self._balance_urls = {cid: url for cid, url in urls.items() if cid in self._chains}

    def __contains__(self, chain_id: int) -> bool:
        return chain_id in self._chains

    def __len__(self) -> int:
        return len(self._chains)

    def get(self, chain_id: int) -> ChainDescriptor | None:
        return self._chains.get(chain_id)

    def chain_ids(self) -> list[int]:
        return sorted(self._chains)

    def balance_chain_ids(self) -> list[int]:
        """Chains the balances provider serves, in configuration order."""
        return list(self._balance_urls)

    def balance_url(self, chain_id: int) -> str | None:
        return self._balance_urls.get(chain_id)

    def get_chain_logo(self, chain_id: int) -> str | None:
        chain = self._chains.get(chain_id)
        return chain.logo_url if chain else None

    def get_chain_name(self, chain_id: int) -> str:
        chain = self._chains.get(chain_id)
        return chain.display_name if chain else f"Chain {chain_id}"

    def platform_for(self, chain_id: int) -> str | None:
        return PRICE_PLATFORMS.get(chain_id)

    def native_coin_id(self, chain_id: int) -> str | None:
        return NATIVE_COIN_IDS.get(chain_id)
