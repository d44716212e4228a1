from .requests import ChatMessage, ChatRequest, WalletRequest
from .responses import BalanceModel, ChatResponse, TokenBalanceModel, WalletResponse

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "WalletRequest",
    "BalanceModel",
    "ChatResponse",
    "TokenBalanceModel",
    "WalletResponse",
]
