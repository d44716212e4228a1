"""
Composite action screen.

Runs every check that applies to an action and keeps the worst verdict.
Reasons are collected in check order (prompt, addresses in input order,
token) so the same input always yields the same result.
"""

import logging
from typing import Any, List, Mapping, Optional, Tuple

from .address_blocklist import AddressBlocklist, default_blocklist, is_address
from .models import ActionScreenParams, RiskLevel, ScreenResult
from .prompt_injection import screen_prompt
from .token_screener import GoPlusTokenScreener, TokenScreener


logger = logging.getLogger(__name__)

ADDRESS_PARAM_KEYS: Tuple[str, ...] = (
    "to",
    "from",
    "address",
    "wallet",
    "devAddress",
    "recipient",
    "tokenAddress",
    "toAddress",
)

# Token-bearing keys, most specific first
TOKEN_PARAM_KEYS: Tuple[str, ...] = ("tokenAddress", "toToken", "fromToken", "token")

TOKEN_SCREENED_INTENTS = frozenset({"swap", "bridge", "send"})


def extract_addresses(params: Mapping[str, Any]) -> List[str]:
    """Address-shaped values bound to known parameter keys, in key order, deduplicated."""
    found: List[str] = []
    for key in ADDRESS_PARAM_KEYS:
        value = params.get(key)
        if is_address(value) and value not in found:
            found.append(value)
    return found


def extract_token_address(params: Mapping[str, Any]) -> Optional[str]:
    for key in TOKEN_PARAM_KEYS:
        value = params.get(key)
        if is_address(value):
            return value
    return None


class SecurityScreen:
    def __init__(
        self,
        token_screener: Optional[TokenScreener] = None,
        blocklist: Optional[AddressBlocklist] = None,
    ):
        self.token_screener = token_screener or GoPlusTokenScreener()
        self.blocklist = blocklist or default_blocklist

    def screen_prompt(self, text: str) -> ScreenResult:
        return screen_prompt(text)

    def screen_address(self, address: str) -> ScreenResult:
        return self.blocklist.screen(address)

    async def screen_action(self, params: ActionScreenParams, *, check_prompt: bool = True) -> ScreenResult:
        """Run all applicable checks for an action.

        Set `check_prompt=False` when the caller has already screened the
        raw message.
        """
        risk = RiskLevel.OK
        reasons: List[str] = []

        if check_prompt and params.user_message:
            prompt = screen_prompt(params.user_message)
            if prompt.risk != RiskLevel.OK:
                risk = risk.worst(prompt.risk)
                reasons.extend(prompt.reasons)

        for address in params.addresses:
            result = self.blocklist.screen(address)
            if result.risk != RiskLevel.OK:
                risk = risk.worst(result.risk)
                reasons.extend(result.reasons)

        if params.token_address and params.intent in TOKEN_SCREENED_INTENTS:
            safety = await self.token_screener.screen_token(params.token_address, params.chain)
            if safety.risk_level != RiskLevel.OK:
                risk = risk.worst(safety.risk_level)
                reasons.extend(safety.reasons)

        if risk != RiskLevel.OK:
            logger.info(f"Screen verdict for {params.intent}: {risk.value} ({len(reasons)} reasons)")
        return ScreenResult.from_risk(risk, reasons)


def format_screen_message(result: ScreenResult) -> str:
    """User-facing text for a verdict. Empty for ok."""
    if result.risk == RiskLevel.OK:
        return ""

    bullets = [f"• {reason}" for reason in result.reasons]
    if result.risk == RiskLevel.BLOCK:
        return "\n".join([
            "🛡️ **Sentinel: Action Blocked**",
            "",
            *bullets,
            "",
            "This action was blocked for your protection. If you believe this is an error, try rephrasing your request.",
        ])

    return "\n".join([
        "⚠️ **Sentinel Warning**",
        "",
        *bullets,
        "",
        "Proceeding with caution. Review the details above before confirming.",
    ])
