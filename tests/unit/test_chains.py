"""Tests for the chain registry."""

from holdings_tracker.chains import ALCHEMY_BASE_URLS, ChainRegistry


class TestChainRegistry:
    def test_lookup(self, registry: ChainRegistry) -> None:
        assert 42161 in registry
        assert registry.get_chain_name(42161) == "Arbitrum One"
        assert registry.get(137).native_symbol == "POL"
        assert registry.get_chain_logo(43114) == "https://icons.llama.fi/avalanche.png"

    def test_unknown_chain(self, registry: ChainRegistry) -> None:
        assert registry.get(999) is None
        assert registry.get_chain_name(999) == "Chain 999"
        assert registry.get_chain_logo(999) is None

    def test_balance_chains(self, registry: ChainRegistry) -> None:
        assert registry.balance_chain_ids() == list(ALCHEMY_BASE_URLS)
        assert registry.balance_url(324) is None

    def test_custom_balance_urls(self) -> None:
        registry = ChainRegistry(balance_urls={1: "https://eth.example/", 999: "https://ignored.example/"})

        assert registry.balance_chain_ids() == [1]

    def test_price_platforms(self, registry: ChainRegistry) -> None:
        assert registry.platform_for(1) == "ethereum"
        assert registry.platform_for(7001) is None
        assert registry.native_coin_id(43114) == "avalanche-2"
