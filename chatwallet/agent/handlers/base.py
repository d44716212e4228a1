from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Type

from ...core.trading import SwapService
from ...core.wallet import WalletManager
from ...providers.basescan import BasescanProvider
from ...providers.coingecko import CoingeckoProvider
from ..models import ActionParams, ActionResult


KEY_UNVERIFIED = (
    "⚠️ Your stored wallet key could not be verified, so nothing was signed or revealed. "
    "Please contact support with your wallet address."
)


@dataclass
class AgentServices:
    """Collaborators shared by every handler."""

    wallets: WalletManager
    swaps: SwapService
    prices: CoingeckoProvider
    history: BasescanProvider
    explorer_base_url: str = "https://basescan.org"

    def tx_url(self, tx_hash: str) -> str:
        return f"{self.explorer_base_url.rstrip('/')}/tx/{tx_hash}"

    def address_url(self, address: str) -> str:
        return f"{self.explorer_base_url.rstrip('/')}/address/{address}"


@dataclass
class ActionContext:
    services: AgentServices
    session_id: Optional[str] = None
    raw_text: str = ""


Handler = Callable[[ActionParams, ActionContext], Awaitable[ActionResult]]


@dataclass(frozen=True)
class HandlerSpec:
    handler: Handler
    params_model: Type[ActionParams]
    usage: Optional[str] = None
