"""Trading handlers: swap, bridge, price."""

import logging

from ...core.errors import IntegrityError, UpstreamError
from ..models import ActionResult, BridgeParams, PriceParams, SwapParams
from .base import KEY_UNVERIFIED, ActionContext


logger = logging.getLogger(__name__)


async def swap_handler(params: SwapParams, ctx: ActionContext) -> ActionResult:
    wallets = ctx.services.wallets
    if not ctx.session_id or not await wallets.has_wallet(ctx.session_id):
        return ActionResult(
            success=False,
            message=(
                "To swap tokens, you need a wallet first.\n\n"
                'Say **"show my wallet"** to create one and get your deposit address. '
                "Fund it with ETH, then try swapping again."
            ),
        )

    swaps = ctx.services.swaps
    for symbol in (params.from_token, params.to_token):
        if swaps.resolve_token(symbol) is None:
            listed = ", ".join(swaps.registry.symbols())
            return ActionResult(
                success=False,
                message=f"Unknown token: {symbol}. Supported tokens on Base: {listed}.",
            )

    try:
        result = await swaps.execute_swap(ctx.session_id, params.from_token, params.to_token, params.amount)
    except IntegrityError:
        logger.error(f"Stored key failed verification during swap (session {ctx.session_id})")
        return ActionResult(success=False, message=KEY_UNVERIFIED, data={"reason": "key_integrity"})
    if not result.success:
        return ActionResult(success=False, message=f"❌ {result.error}", data=result.to_dict())

    return ActionResult(
        success=True,
        message="\n".join([
            "✅ **Swap Executed!**",
            "",
            f"{params.amount} {params.from_token.upper()} → {result.to_amount} {params.to_token.upper()}",
            "",
            f"🔗 [View on BaseScan]({result.explorer_url})",
            "",
            f"Tx: `{result.tx_hash}`",
        ]),
        data=result.to_dict(),
    )


async def bridge_handler(params: BridgeParams, ctx: ActionContext) -> ActionResult:
    return ActionResult(
        success=True,
        message=(
            f"Bridge {params.amount or ''} {params.token or ''} from {params.from_chain or '?'} → "
            f"{params.to_chain or '?'}.\n\n"
            "🚧 Cross-chain bridging is coming soon. For now, you can swap tokens on Base."
        ),
        data={
            "token": params.token,
            "amount": params.amount,
            "fromChain": params.from_chain,
            "toChain": params.to_chain,
            "status": "coming_soon",
        },
    )


def _format_usd(price: float) -> str:
    # At least 2 and at most 6 fractional digits
    whole, _, fraction = f"{price:,.6f}".partition(".")
    fraction = fraction.rstrip("0").ljust(2, "0")
    return f"{whole}.{fraction}"


async def price_handler(params: PriceParams, ctx: ActionContext) -> ActionResult:
    token = params.token
    try:
        quote = await ctx.services.prices.get_spot_price(token)
    except UpstreamError as exc:
        logger.warning(f"Price lookup for {token} failed: {exc.detail}")
        return ActionResult(
            success=False,
            message=f"Failed to fetch price for {token}. CoinGecko API may be rate-limited, try again in a moment.",
        )

    if quote is None:
        return ActionResult(
            success=False,
            message=f'Couldn\'t find price for "{token}". Try a common token like ETH, BTC, SOL, or USDC.',
        )

    change = quote["change_24h"]
    change_text = f"+{change:.2f}%" if change >= 0 else f"{change:.2f}%"
    emoji = "📈" if change >= 0 else "📉"
    return ActionResult(
        success=True,
        message=f"{emoji} **{token.upper()}**: ${_format_usd(quote['price'])}\n24h change: {change_text}",
        data={"token": token.lower(), "price": quote["price"], "change24h": change, "source": "coingecko"},
    )
