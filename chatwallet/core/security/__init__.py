"""
Security screen.

Every action passes through here before execution:
- prompt injection guard on the raw message
- address blocklist on addresses found in the parameters
- token reputation check (GoPlus by default) on explicit token addresses
"""

from .address_blocklist import AddressBlocklist, is_address, screen_address
from .models import ActionScreenParams, RiskLevel, ScreenResult, TokenSafety
from .prompt_injection import screen_prompt
from .screen import (
    SecurityScreen,
    extract_addresses,
    extract_token_address,
    format_screen_message,
)
from .token_screener import GoPlusTokenScreener, TokenScreener, parse_goplus_report

__all__ = [
    "AddressBlocklist",
    "is_address",
    "screen_address",
    "ActionScreenParams",
    "RiskLevel",
    "ScreenResult",
    "TokenSafety",
    "screen_prompt",
    "SecurityScreen",
    "extract_addresses",
    "extract_token_address",
    "format_screen_message",
    "GoPlusTokenScreener",
    "TokenScreener",
    "parse_goplus_report",
]
