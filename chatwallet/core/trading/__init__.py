"""
Swap service: token resolution, cached 0x quotes, and
approve-confirm-then-swap execution on Base.
"""

from .approvals import ensure_approval
from .executor import INSUFFICIENT_FUNDS_MESSAGE, SwapExecutor
from .models import SwapQuote, SwapResult, SwapTransaction
from .quotes import QuoteService, quote_cache_key
from .service import SwapService

__all__ = [
    "ensure_approval",
    "INSUFFICIENT_FUNDS_MESSAGE",
    "SwapExecutor",
    "SwapQuote",
    "SwapResult",
    "SwapTransaction",
    "QuoteService",
    "quote_cache_key",
    "SwapService",
]
