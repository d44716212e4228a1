"""Wallet handlers: balance, deposit, export_key, send, history."""

import logging
from datetime import datetime, timezone

from ...core.errors import (
    ChatWalletError,
    ErrorCategory,
    IntegrityError,
    UpstreamError,
    ValidationError,
    classify_error,
    error_message,
)
from ...core.tokens import format_units, parse_units
from ..models import ActionResult, HistoryParams, NoParams, SendParams
from .base import KEY_UNVERIFIED, ActionContext


logger = logging.getLogger(__name__)

NO_WALLET = 'You don\'t have a wallet yet. Say **"show my wallet"** to create one.'


def _short(address: str, head: int = 10, tail: int = 8) -> str:
    return f"{address[:head]}...{address[-tail:]}"


async def balance_handler(params: NoParams, ctx: ActionContext) -> ActionResult:
    wallets = ctx.services.wallets
    if not ctx.session_id or not await wallets.has_wallet(ctx.session_id):
        return ActionResult(
            success=True,
            message=(
                'You don\'t have a wallet yet. Say **"show my wallet"** to create one '
                "and get your deposit address."
            ),
            data={"status": "no_wallet"},
        )

    address = await wallets.get_address(ctx.session_id)
    try:
        balance = await wallets.get_balance(ctx.session_id)
    except Exception as exc:
        logger.warning(f"Balance lookup failed for {address}: {exc}")
        balance = None
    if balance is None:
        return ActionResult(success=False, message="Failed to fetch balance. Please try again.")

    lines = [
        "💰 **Your Wallet Balance**",
        "",
        f"Address: `{address}`",
        "",
        f"**ETH:** {balance.eth_formatted} ETH",
    ]
    if balance.tokens:
        lines.append("")
        lines.extend(f"**{token.symbol}:** {token.formatted}" for token in balance.tokens)
    if balance.is_empty:
        lines.extend([
            "",
            "Your wallet is empty. Send ETH or tokens to the address above to get started.",
        ])

    return ActionResult(
        success=True,
        message="\n".join(lines),
        data={
            "address": address,
            "eth": balance.eth,
            "ethFormatted": balance.eth_formatted,
            "tokens": [
                {"symbol": t.symbol, "address": t.address, "balance": t.balance, "formatted": t.formatted}
                for t in balance.tokens
            ],
        },
    )


async def deposit_handler(params: NoParams, ctx: ActionContext) -> ActionResult:
    if not ctx.session_id:
        return ActionResult(success=False, message="Session error.")

    info = await ctx.services.wallets.create_wallet(ctx.session_id)
    return ActionResult(
        success=True,
        message="\n".join([
            "🏦 **Your Wallet**",
            "",
            f"Address: `{info.address}`",
            "",
            "**To fund your wallet**, send ETH (on Base) to the address above.",
            "",
            "You can send from:",
            "• Coinbase → withdraw ETH to Base",
            "• MetaMask → send to this address on Base network",
            "• Any exchange that supports Base",
            "",
            "Once funded, you can:",
            '• **"swap 0.01 ETH to USDC"** to trade tokens',
            '• **"what\'s my balance"** to check your funds',
            '• **"send 10 USDC to 0x..."** to transfer tokens',
            '• **"export my private key"** to take full control of your wallet',
        ]),
        data={"address": info.address},
    )


def is_export_confirmation(text: str) -> bool:
    lowered = (text or "").lower()
    return "yes" in lowered and "export" in lowered


async def export_key_handler(params: NoParams, ctx: ActionContext) -> ActionResult:
    if not ctx.session_id:
        return ActionResult(success=False, message="Session error.")

    wallets = ctx.services.wallets
    if not await wallets.has_wallet(ctx.session_id):
        return ActionResult(success=False, message=NO_WALLET)

    if is_export_confirmation(ctx.raw_text) and await wallets.has_pending_export(ctx.session_id):
        try:
            result = await wallets.confirm_export(ctx.session_id)
        except IntegrityError:
            logger.error(f"Stored key failed verification during export (session {ctx.session_id})")
            return ActionResult(success=False, message=KEY_UNVERIFIED, data={"reason": "key_integrity"})
        return ActionResult(
            success=result.success,
            message=result.message,
            data={"exported": True} if result.success else None,
        )

    request = await wallets.request_export(ctx.session_id)
    return ActionResult(success=request.pending, message=request.message, data={"pending": request.pending})


async def send_handler(params: SendParams, ctx: ActionContext) -> ActionResult:
    wallets = ctx.services.wallets
    if not ctx.session_id or not await wallets.has_wallet(ctx.session_id):
        return ActionResult(success=False, message='You need a wallet first. Say **"show my wallet"** to create one.')

    token = ctx.services.swaps.resolve_token(params.token)
    if token is None:
        return ActionResult(success=False, message=f"Unknown token: {params.token}")

    try:
        value = parse_units(params.amount, token.decimals)
    except ValidationError as exc:
        return ActionResult(success=False, message=exc.message)

    try:
        signer = await wallets.get_signer(ctx.session_id)
    except IntegrityError:
        logger.error(f"Stored key failed verification during transfer (session {ctx.session_id})")
        return ActionResult(success=False, message=KEY_UNVERIFIED, data={"reason": "key_integrity"})
    if signer is None:
        return ActionResult(success=False, message="Wallet error. Please try again.")

    try:
        if token.is_native:
            tx_hash = await signer.send_transaction(params.to_address, value=value)
        else:
            tx_hash = await signer.transfer(token.address, params.to_address, value)
        await signer.wait_for_confirmation(tx_hash)
    except Exception as exc:
        if classify_error(exc) == ErrorCategory.INSUFFICIENT_FUNDS:
            return ActionResult(
                success=False,
                message="Insufficient funds. Deposit more ETH to cover this transfer + gas.",
            )
        if not isinstance(exc, ChatWalletError):
            logger.exception(f"Transfer failed for session {ctx.session_id}")
        return ActionResult(success=False, message=f"Transfer failed: {error_message(exc)}")

    symbol = token.symbol if token.is_native else params.token.upper()
    return ActionResult(
        success=True,
        message="\n".join([
            f"✅ **Sent {params.amount} {symbol}** to `{_short(params.to_address)}`",
            "",
            f"🔗 [View on BaseScan]({ctx.services.tx_url(tx_hash)})",
        ]),
        data={"txHash": tx_hash},
    )


def _empty_history(address: str) -> ActionResult:
    return ActionResult(
        success=True,
        message="\n".join([
            "📜 **Transaction History**",
            "",
            f"Address: `{address}`",
            "",
            "No transactions yet. Send or receive funds to see activity here.",
        ]),
        data={"address": address, "transactions": []},
    )


async def history_handler(params: HistoryParams, ctx: ActionContext) -> ActionResult:
    wallets = ctx.services.wallets
    if not ctx.session_id or not await wallets.has_wallet(ctx.session_id):
        return ActionResult(success=True, message=NO_WALLET, data={"status": "no_wallet"})

    address = await wallets.get_address(ctx.session_id)
    try:
        transactions = await ctx.services.history.list_transactions(address, limit=params.limit)
    except UpstreamError as exc:
        logger.warning(f"History lookup failed for {address}: {exc.detail}")
        return ActionResult(success=False, message=exc.message)

    if not transactions:
        return _empty_history(address)

    lines = ["📜 **Recent Transactions**", "", f"Address: `{address}`", ""]
    summary = []
    for tx in transactions[: params.limit]:
        incoming = str(tx.get("to", "")).lower() == address.lower()
        other = tx.get("from", "") if incoming else tx.get("to", "")
        value = format_units(tx.get("value") or 0, 18)
        when = datetime.fromtimestamp(int(tx.get("timeStamp") or 0), tz=timezone.utc).strftime("%b %d, %H:%M")
        status = "❌" if str(tx.get("isError")) == "1" else "✅"
        direction = "⬇️ IN" if incoming else "⬆️ OUT"

        lines.append(
            f"{status} {direction} **{value} ETH** {'from' if incoming else 'to'} `{_short(other, 6, 4)}`"
        )
        lines.append(f"   {when} • [View]({ctx.services.tx_url(tx.get('hash', ''))})")
        lines.append("")
        summary.append({
            "hash": tx.get("hash"),
            "direction": "in" if incoming else "out",
            "value": value,
            "otherParty": other,
            "date": when,
        })

    lines.append(f"[View all on BaseScan]({ctx.services.address_url(address)})")
    return ActionResult(
        success=True,
        message="\n".join(lines),
        data={"address": address, "transactions": summary},
    )
