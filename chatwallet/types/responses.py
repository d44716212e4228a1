from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ChatResponse(BaseModel):
    session_id: str = Field(description="Session the reply belongs to")
    intent: str = Field(description="Classified intent")
    confidence: float = Field(description="Classifier confidence")
    success: bool = Field(description="Whether the action succeeded")
    message: str = Field(description="Reply text (markdown)")
    data: Optional[Dict[str, Any]] = Field(default=None, description="Structured action result")


class TokenBalanceModel(BaseModel):
    symbol: str
    address: str
    balance: str = Field(description="Smallest unit")
    formatted: str


class BalanceModel(BaseModel):
    eth: str = Field(description="Native balance in wei")
    eth_formatted: str
    tokens: List[TokenBalanceModel] = Field(default_factory=list)


class WalletResponse(BaseModel):
    session_id: str
    address: str
    created_at: Optional[datetime] = None
    balance: Optional[BalanceModel] = None
    balance_error: Optional[str] = Field(default=None, description="Why the balance could not be read")
