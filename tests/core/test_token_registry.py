import pytest

from chatwallet.core.errors import ValidationError
from chatwallet.core.tokens import (
    NATIVE_ETH_ADDRESS,
    TokenInfo,
    TokenRegistry,
    format_units,
    parse_units,
    resolve_token,
)


def test_resolve_symbol_is_case_insensitive():
    assert resolve_token("usdc").symbol == "USDC"
    assert resolve_token("Usdc").decimals == 6
    assert resolve_token("cbbtc").symbol == "cbBTC"


def test_resolve_by_address():
    token = resolve_token("0x833589FCD6EDB6E08F4C7C32D4F71B54BDA02913")
    assert token.symbol == "USDC"
    assert resolve_token(NATIVE_ETH_ADDRESS.lower()).is_native


def test_unknown_tokens_resolve_to_none():
    assert resolve_token("FAKECOIN") is None
    assert resolve_token("") is None
    assert resolve_token("0x" + "12" * 20) is None


def test_register_extends_registry():
    registry = TokenRegistry()
    registry.register(TokenInfo("ZORA", "0x1111111111166b7FE7bd91427724B487980aFc69", 18))

    assert registry.resolve("zora").decimals == 18
    assert "ZORA" in registry.symbols()


def test_balance_check_tokens():
    symbols = [token.symbol for token in TokenRegistry().balance_check_tokens()]
    assert symbols == ["USDC", "WETH", "DAI"]


@pytest.mark.parametrize(
    "amount,decimals,expected",
    [
        ("1", 18, 10**18),
        ("0.5", 18, 5 * 10**17),
        ("100", 6, 100_000_000),
        ("0.000001", 6, 1),
    ],
)
def test_parse_units(amount, decimals, expected):
    assert parse_units(amount, decimals) == expected


@pytest.mark.parametrize("amount", ["abc", "0", "-1", "", "NaN"])
def test_parse_units_rejects_bad_amounts(amount):
    with pytest.raises(ValidationError) as excinfo:
        parse_units(amount, 18)
    assert "Invalid amount" in str(excinfo.value)


def test_parse_units_rejects_excess_precision():
    with pytest.raises(ValidationError):
        parse_units("0.0000001", 6)


def test_format_units_trims_zeros():
    assert format_units(10**18, 18) == "1"
    assert format_units(2_500_000, 6) == "2.5"
    assert format_units(0, 18) == "0"
    assert format_units("123", 0) == "123"
