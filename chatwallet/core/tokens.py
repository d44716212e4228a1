"""Token registry for Base.

The registry is the whitelist: symbols and addresses that are not listed
resolve to nothing, because an address alone says nothing reliable about
its decimals. New tokens are added with `TokenRegistry.register`.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import ValidationError

NATIVE_ETH_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
BASE_CHAIN_ID = 8453


@dataclass(frozen=True)
class TokenInfo:
    symbol: str
    address: str
    decimals: int
    name: Optional[str] = None

    @property
    def is_native(self) -> bool:
        return self.address.lower() == NATIVE_ETH_ADDRESS.lower()


BASE_TOKEN_LIST: Tuple[TokenInfo, ...] = (
    # Native
    TokenInfo("ETH", NATIVE_ETH_ADDRESS, 18, "Ether"),
    TokenInfo("WETH", "0x4200000000000000000000000000000000000006", 18, "Wrapped Ether"),
    # Stablecoins
    TokenInfo("USDC", "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", 6, "USD Coin"),
    TokenInfo("USDT", "0xfde4C96c8593536E31F229EA8f37b2ADa2699bb2", 6, "Tether USD"),
    TokenInfo("DAI", "0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb", 18, "Dai Stablecoin"),
    # Popular Base tokens
    TokenInfo("DEGEN", "0x4ed4E862860beD51a9570b96d89aF5E1B0Efefed", 18, "Degen"),
    TokenInfo("AERO", "0x940181a94A35A4569E4529A3CDfB74e38FD98631", 18, "Aerodrome"),
    TokenInfo("cbBTC", "0xcbB7C0000aB88B473b1f5aFd9ef808440eed33Bf", 8, "Coinbase BTC"),
    TokenInfo("BRETT", "0x532f27101965dd16442E59d40670FaF5eBB142E4", 18, "Brett"),
    TokenInfo("TOSHI", "0xAC1Bd2486aAf3B5C0fc3Fd868558b082a531B2B4", 18, "Toshi"),
)

# Subset checked in balance queries to keep RPC calls down
BALANCE_CHECK_SYMBOLS: Tuple[str, ...] = ("USDC", "WETH", "DAI")


class TokenRegistry:
    """Case-insensitive lookup by symbol or address."""

    def __init__(self, tokens: Iterable[TokenInfo] = BASE_TOKEN_LIST) -> None:
        self._by_symbol: Dict[str, TokenInfo] = {}
        self._by_address: Dict[str, TokenInfo] = {}
        for token in tokens:
            self.register(token)

    def register(self, token: TokenInfo) -> None:
        self._by_symbol[token.symbol.upper()] = token
        self._by_address[token.address.lower()] = token

    def resolve(self, symbol_or_address: str) -> Optional[TokenInfo]:
        value = (symbol_or_address or "").strip()
        if not value:
            return None
        return self._by_symbol.get(value.upper()) or self._by_address.get(value.lower())

    def symbols(self) -> List[str]:
        return [token.symbol for token in self._by_symbol.values()]

    def balance_check_tokens(self) -> List[TokenInfo]:
        return [self._by_symbol[symbol] for symbol in BALANCE_CHECK_SYMBOLS if symbol in self._by_symbol]


default_registry = TokenRegistry()


def resolve_token(symbol_or_address: str) -> Optional[TokenInfo]:
    return default_registry.resolve(symbol_or_address)


def parse_units(amount: str, decimals: int) -> int:
    """Convert a human amount ("0.5") into the token's smallest unit."""
    text = str(amount).strip()
    try:
        value = Decimal(text)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid amount: {amount}") from exc

    if not value.is_finite() or value <= 0:
        raise ValidationError(f"Invalid amount: {amount}")

    scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValidationError(f"Invalid amount: {amount} has more than {decimals} decimal places")
    return int(scaled)


def format_units(value: int | str, decimals: int) -> str:
    """Convert a smallest-unit integer into a plain decimal string."""
    scaled = Decimal(int(value)).scaleb(-decimals)
    text = format(scaled, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
