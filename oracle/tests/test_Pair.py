"""Unit tests for Pair."""

import pytest

from oracle.src.Pair import Pair


class TestPairBasics:
    """Test basic Pair functionality."""

    def test_init_normalizes_to_uppercase(self) -> None:
        """Symbols should be normalized to uppercase."""
        pair = Pair("eth", "btc")
        assert pair.base == "ETH"
        assert pair.quote == "BTC"

    def test_str_format(self) -> None:
        """String format should be 'BASE/QUOTE'."""
        assert str(Pair("reth", "eth")) == "RETH/ETH"

    def test_repr(self) -> None:
        """Repr should be developer-friendly."""
        assert repr(Pair("gho", "usd")) == "Pair('GHO', 'USD')"

    def test_equality_ignores_input_case(self) -> None:
        """Pairs with the same symbols should be equal and hash alike."""
        pair1 = Pair("eth", "usd")
        pair2 = Pair("ETH", "USD")
        assert pair1 == pair2
        assert hash(pair1) == hash(pair2)

    def test_inequality(self) -> None:
        """Order of symbols matters."""
        assert Pair("ETH", "USD") != Pair("USD", "ETH")

    def test_equality_with_non_pair(self) -> None:
        """Comparison with non-Pair should return NotImplemented."""
        assert Pair("ETH", "USD").__eq__("ETH/USD") == NotImplemented

    def test_usable_as_dict_key(self) -> None:
        """Pair should work as dictionary key."""
        d: dict[Pair, str] = {Pair("eth", "usd"): "value1"}
        d[Pair("ETH", "USD")] = "value2"

        assert len(d) == 1
        assert d[Pair("eth", "usd")] == "value2"

    def test_invert(self) -> None:
        """invert swaps base and quote and is an involution."""
        pair = Pair("WSTETH", "ETH")
        assert pair.invert() == Pair("ETH", "WSTETH")
        assert pair.invert().invert() == pair


class TestPairFromString:
    """Test Pair.from_string() parsing."""

    def test_valid_pair(self) -> None:
        """Parse valid pair string."""
        pair = Pair.from_string("ETH/BTC")
        assert pair.base == "ETH"
        assert pair.quote == "BTC"

    def test_lowercase_input(self) -> None:
        """Lowercase input should be normalized."""
        assert Pair.from_string("steth/eth") == Pair("STETH", "ETH")

    def test_invalid_no_slash(self) -> None:
        """String without slash should raise ValueError."""
        with pytest.raises(ValueError, match="BASE/QUOTE"):
            Pair.from_string("ethbtc")

    def test_invalid_too_many_slashes(self) -> None:
        """String with too many slashes should raise ValueError."""
        with pytest.raises(ValueError, match="BASE/QUOTE"):
            Pair.from_string("eth/btc/usd")

    def test_only_slash(self) -> None:
        """A single slash parses to a pair of empty symbols."""
        assert Pair.from_string("/") == Pair("", "")
