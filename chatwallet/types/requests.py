from typing import List, Optional
from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: str = Field(description="Message role: user or assistant")
    content: str = Field(description="Message content")


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, description="Latest user message")
    session_id: Optional[str] = Field(default=None, description="Chat session; a new one is issued when omitted")
    history: List[ChatMessage] = Field(default_factory=list, description="Prior turns passed to the classifier")


class WalletRequest(BaseModel):
    session_id: str = Field(min_length=1, description="Chat session that owns the wallet")
