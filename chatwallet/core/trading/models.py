"""Typed models used by the swap subsystem."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class SwapQuote:
    """Indicative quote as shown to the user."""

    from_token: str
    to_token: str
    from_amount: str
    to_amount: str                  # Smallest unit of the buy token
    to_amount_formatted: str
    price: str
    estimated_gas: str
    sources: List[str] = field(default_factory=list)


@dataclass
class SwapTransaction:
    """Executable swap returned by the aggregator for a given taker."""

    to: str
    data: str
    value: int
    gas: Optional[int]
    buy_amount: str
    allowance_target: Optional[str] = None

    @classmethod
    def from_response(cls, payload: Dict[str, Any]) -> "SwapTransaction":
        gas = payload.get("gas")
        return cls(
            to=payload["to"],
            data=payload["data"],
            value=int(payload.get("value") or 0),
            gas=int(gas) if gas else None,
            buy_amount=str(payload["buyAmount"]),
            allowance_target=payload.get("allowanceTarget") or None,
        )


@dataclass
class SwapResult:
    """Outcome of `execute_swap`. Failures carry `error`, never raise."""

    success: bool
    from_token: str
    to_token: str
    from_amount: str
    tx_hash: Optional[str] = None
    to_amount: Optional[str] = None
    explorer_url: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}
