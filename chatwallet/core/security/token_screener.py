"""
Token reputation screening.

`TokenScreener` is the pluggable policy seam. The default implementation
asks GoPlus and maps its report onto a TokenSafety. A lookup that cannot
be completed is reported as a warning, never as ok.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ...providers.goplus import GoPlusProvider
from ..errors import UpstreamError
from .models import RiskLevel, TokenSafety


logger = logging.getLogger(__name__)

HIGH_TAX_PERCENT = 10.0
MIN_HOLDERS = 10


def fallback_safety(reason: str) -> TokenSafety:
    return TokenSafety(risk_level=RiskLevel.WARNING, reasons=[reason])


class TokenScreener(ABC):
    @abstractmethod
    async def screen_token(self, token_address: str, chain: str = "base") -> TokenSafety:
        """Return a reputation report for a token contract."""


def _flag(data: Dict[str, Any], key: str) -> bool:
    return str(data.get(key, "0")) == "1"


def _percent(value: Any) -> float:
    try:
        return float(value or 0) * 100
    except (TypeError, ValueError):
        return 0.0


def parse_goplus_report(data: Dict[str, Any]) -> TokenSafety:
    """Map a GoPlus token_security entry onto a TokenSafety."""
    is_honeypot = _flag(data, "is_honeypot")
    is_malicious = _flag(data, "is_blacklisted") or _flag(data, "is_airdrop_scam")
    has_proxy = _flag(data, "is_proxy")
    can_take_ownership = _flag(data, "can_take_back_ownership")
    hidden_owner = _flag(data, "hidden_owner")
    self_destruct = _flag(data, "selfdestruct")
    external_call = _flag(data, "external_call")
    buy_tax = _percent(data.get("buy_tax"))
    sell_tax = _percent(data.get("sell_tax"))
    try:
        holder_count = int(data.get("holder_count") or 0)
    except (TypeError, ValueError):
        holder_count = 0
    lp_locked = any(
        str(lp.get("is_locked")) == "1" for lp in data.get("lp_holders") or [] if isinstance(lp, dict)
    )

    reasons: List[str] = []
    if is_honeypot:
        reasons.append("🚨 HONEYPOT: cannot sell this token")
    if is_malicious:
        reasons.append("🚨 Token flagged as malicious/scam")
    if can_take_ownership:
        reasons.append("⚠️ Owner can reclaim ownership")
    if hidden_owner:
        reasons.append("⚠️ Hidden owner detected")
    if self_destruct:
        reasons.append("⚠️ Contract has selfdestruct")
    if external_call:
        reasons.append("⚠️ Contract makes external calls")
    if buy_tax > HIGH_TAX_PERCENT:
        reasons.append(f"⚠️ High buy tax: {buy_tax:.1f}%")
    if sell_tax > HIGH_TAX_PERCENT:
        reasons.append(f"⚠️ High sell tax: {sell_tax:.1f}%")
    if holder_count < MIN_HOLDERS:
        reasons.append("⚠️ Very few holders, high rug risk")
    if has_proxy:
        reasons.append("ℹ️ Proxy contract: logic can be changed")

    if is_honeypot or is_malicious or can_take_ownership:
        risk = RiskLevel.BLOCK
    elif (
        hidden_owner
        or self_destruct
        or buy_tax > HIGH_TAX_PERCENT
        or sell_tax > HIGH_TAX_PERCENT
        or holder_count < MIN_HOLDERS
    ):
        risk = RiskLevel.WARNING
    else:
        risk = RiskLevel.OK

    if not reasons:
        reasons.append("✅ No issues detected")

    return TokenSafety(
        risk_level=risk,
        reasons=reasons,
        is_honeypot=is_honeypot,
        is_malicious=is_malicious,
        has_proxy_contract=has_proxy,
        can_take_ownership=can_take_ownership,
        hidden_owner=hidden_owner,
        self_destruct=self_destruct,
        external_call=external_call,
        buy_tax=buy_tax,
        sell_tax=sell_tax,
        holder_count=holder_count,
        lp_locked=lp_locked,
    )


class GoPlusTokenScreener(TokenScreener):
    def __init__(self, provider: Optional[GoPlusProvider] = None):
        self._provider = provider or GoPlusProvider()

    async def screen_token(self, token_address: str, chain: str = "base") -> TokenSafety:
        try:
            data = await self._provider.token_security(token_address, chain)
        except UpstreamError as exc:
            logger.warning(f"GoPlus lookup failed for {token_address}: {exc.detail}")
            return fallback_safety("GoPlus API unavailable, proceed with caution")
        except ValueError as exc:
            logger.warning(f"GoPlus returned an unreadable report for {token_address}: {exc}")
            return fallback_safety(f"GoPlus check failed: {exc}")

        if not data:
            return fallback_safety("Token not found in GoPlus database: newly deployed or unverified")
        return parse_goplus_report(data)
