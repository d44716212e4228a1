"""General handlers: help, unknown."""

from ..models import ActionResult, HelpParams, NoParams
from .base import ActionContext


HELP_TEXT = "\n".join([
    "I'm your chat wallet. Every session gets its own wallet on Base.\n",
    "**Wallet:**",
    '  "show my wallet": get your deposit address',
    '  "balance": check your wallet balance',
    '  "history": recent transactions',
    '  "export my private key": take full control of your wallet\n',
    "**Trading:**",
    '  "swap 0.1 ETH to USDC": swap tokens on Base',
    '  "send 50 USDC to 0x...": send tokens',
    '  "price ETH": check token prices',
    '  "bridge 100 USDC from ethereum to base": cross-chain bridge (coming soon)\n',
    "**Projects:**",
    '  "verify github.com/org/repo": prove you own a project\n',
    "Use natural language. I'll figure out what you mean.",
])

UNKNOWN_TEXT = (
    "I didn't quite get that. Try saying something like:\n"
    '- "swap 0.1 ETH to USDC"\n'
    '- "what\'s my balance"\n'
    '- "verify github.com/my-org/my-repo"\n'
    '- "help"'
)


async def help_handler(params: HelpParams, ctx: ActionContext) -> ActionResult:
    topic = (params.topic or "").strip()
    message = f'Help on "{topic}":\n\n{HELP_TEXT}' if topic else HELP_TEXT
    return ActionResult(success=True, message=message)


async def unknown_handler(params: NoParams, ctx: ActionContext) -> ActionResult:
    return ActionResult(success=False, message=UNKNOWN_TEXT)
