"""Screening verdicts and the reports they are built from."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class RiskLevel(str, Enum):
    OK = "ok"
    WARNING = "warning"
    BLOCK = "block"

    @property
    def rank(self) -> int:
        return _RANK[self]

    def worst(self, other: "RiskLevel") -> "RiskLevel":
        return self if self.rank >= other.rank else other


_RANK = {RiskLevel.OK: 0, RiskLevel.WARNING: 1, RiskLevel.BLOCK: 2}


@dataclass(frozen=True)
class ScreenResult:
    """Verdict of one screen. `block` always stops execution."""

    allowed: bool
    risk: RiskLevel
    reasons: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls) -> "ScreenResult":
        return cls(allowed=True, risk=RiskLevel.OK, reasons=[])

    @classmethod
    def from_risk(cls, risk: RiskLevel, reasons: List[str]) -> "ScreenResult":
        return cls(allowed=risk != RiskLevel.BLOCK, risk=risk, reasons=list(reasons))

    @property
    def blocked(self) -> bool:
        return self.risk == RiskLevel.BLOCK

    @property
    def is_warning(self) -> bool:
        return self.risk == RiskLevel.WARNING


@dataclass(frozen=True)
class TokenSafety:
    """Token reputation report. `risk_level` is ok, warning, or block."""

    risk_level: RiskLevel
    reasons: List[str]
    is_honeypot: bool = False
    is_malicious: bool = False
    has_proxy_contract: bool = False
    can_take_ownership: bool = False
    hidden_owner: bool = False
    self_destruct: bool = False
    external_call: bool = False
    buy_tax: float = 0.0            # Percent
    sell_tax: float = 0.0           # Percent
    holder_count: int = 0
    lp_locked: bool = False


@dataclass(frozen=True)
class ActionScreenParams:
    intent: str
    user_message: str = ""
    addresses: List[str] = field(default_factory=list)
    token_address: Optional[str] = None
    chain: str = "base"
