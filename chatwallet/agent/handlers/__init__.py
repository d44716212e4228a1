"""
Action handlers, one per intent.

`HANDLERS` maps an intent name to its handler, the params model the
router validates against, and the example shown when validation fails.
"""

from typing import Dict

from ..models import (
    ActionIntent,
    BridgeParams,
    HelpParams,
    HistoryParams,
    NoParams,
    PriceParams,
    SendParams,
    SwapParams,
    VerifyParams,
)
from .base import ActionContext, AgentServices, Handler, HandlerSpec
from .general import help_handler, unknown_handler
from .trading import bridge_handler, price_handler, swap_handler
from .verify import parse_link, verify_project_handler
from .wallet import (
    balance_handler,
    deposit_handler,
    export_key_handler,
    history_handler,
    send_handler,
)

HANDLERS: Dict[str, HandlerSpec] = {
    # Trading
    ActionIntent.SWAP.value: HandlerSpec(
        swap_handler, SwapParams, 'Please specify what to swap. Example: "swap 0.01 ETH to USDC"'
    ),
    ActionIntent.BRIDGE.value: HandlerSpec(bridge_handler, BridgeParams),
    ActionIntent.PRICE.value: HandlerSpec(price_handler, PriceParams, 'Example: "price ETH"'),
    # Wallet
    ActionIntent.BALANCE.value: HandlerSpec(balance_handler, NoParams),
    ActionIntent.DEPOSIT.value: HandlerSpec(deposit_handler, NoParams),
    ActionIntent.EXPORT_KEY.value: HandlerSpec(export_key_handler, NoParams),
    ActionIntent.SEND.value: HandlerSpec(
        send_handler, SendParams, 'Please specify amount and recipient. Example: "send 0.01 ETH to 0x1234..."'
    ),
    ActionIntent.HISTORY.value: HandlerSpec(history_handler, HistoryParams),
    # Verification
    ActionIntent.VERIFY_PROJECT.value: HandlerSpec(verify_project_handler, VerifyParams),
    # General
    ActionIntent.HELP.value: HandlerSpec(help_handler, HelpParams),
    ActionIntent.UNKNOWN.value: HandlerSpec(unknown_handler, NoParams),
}

__all__ = [
    "ActionContext",
    "AgentServices",
    "Handler",
    "HandlerSpec",
    "HANDLERS",
    "parse_link",
]
