"""
Agent action models.

`ParsedAction.params` is whatever the classifier produced and stays an
untrusted mapping: the security screen reads it as-is. Handlers only see
the typed params model registered for their intent, validated once at
dispatch.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


class ActionIntent(str, Enum):
    SWAP = "swap"
    BRIDGE = "bridge"
    PRICE = "price"
    BALANCE = "balance"
    DEPOSIT = "deposit"
    EXPORT_KEY = "export_key"
    SEND = "send"
    HISTORY = "history"
    VERIFY_PROJECT = "verify_project"
    HELP = "help"
    UNKNOWN = "unknown"


class ParsedAction(BaseModel):
    """Structured action parsed from natural language"""

    intent: str = Field(default=ActionIntent.UNKNOWN.value, description="Requested action")
    params: Dict[str, Any] = Field(default_factory=dict, description="Raw classifier parameters")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    raw_text: str = Field(default="", description="Original user message")

    @field_validator("intent", mode="before")
    @classmethod
    def _normalize_intent(cls, value: Any) -> str:
        if isinstance(value, ActionIntent):
            return value.value
        return str(value or ActionIntent.UNKNOWN.value).strip().lower()

    @classmethod
    def unknown(cls, raw_text: str = "") -> "ParsedAction":
        return cls(intent=ActionIntent.UNKNOWN.value, params={}, confidence=0.0, raw_text=raw_text)


class ActionResult(BaseModel):
    """Result of executing an action"""

    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None


# ── Per-intent parameters ─────────────────────────────────


class ActionParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _amount_text(value: Any) -> Any:
    # repr keeps every digit the classifier emitted; "f" avoids exponent notation
    if isinstance(value, float):
        return format(Decimal(repr(value)), "f")
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value.strip() if isinstance(value, str) else value


AmountText = Annotated[str, BeforeValidator(_amount_text)]


class SwapParams(ActionParams):
    from_token: str = Field(alias="fromToken", min_length=1)
    to_token: str = Field(alias="toToken", min_length=1)
    amount: AmountText = Field(min_length=1)
    chain: str = "base"


class BridgeParams(ActionParams):
    token: Optional[str] = None
    amount: Optional[AmountText] = None
    from_chain: Optional[str] = Field(default=None, alias="fromChain")
    to_chain: Optional[str] = Field(default=None, alias="toChain")


class PriceParams(ActionParams):
    token: str = "ETH"

    @field_validator("token", mode="before")
    @classmethod
    def _default_token(cls, value: Any) -> Any:
        return value or "ETH"


class SendParams(ActionParams):
    token: str = "ETH"
    amount: AmountText = Field(min_length=1)
    to_address: str = Field(alias="toAddress", min_length=1)

    @field_validator("token", mode="before")
    @classmethod
    def _default_token(cls, value: Any) -> Any:
        return value or "ETH"


class HistoryParams(ActionParams):
    limit: int = Field(default=10, ge=1)

    @field_validator("limit", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> Any:
        try:
            return max(1, min(int(value or 10), 25))
        except (TypeError, ValueError):
            return 10


class VerifyParams(ActionParams):
    link: Optional[str] = None
    project_id: Optional[str] = Field(default=None, alias="projectId")


class HelpParams(ActionParams):
    topic: Optional[str] = None


class NoParams(ActionParams):
    pass
