"""
Swap Executor

Executes token swaps on Base through the 0x Swap API, signing with the
session's custodial wallet.

Ordering is strict: approve (if needed) -> wait one confirmation -> submit
swap -> wait one confirmation. The swap is never broadcast while an
approval is still pending.
"""

import logging
from typing import Optional, Protocol

from ...providers.zerox import ZeroExProvider
from ..errors import (
    ChatWalletError,
    ErrorCategory,
    UpstreamError,
    ValidationError,
    classify_error,
    error_message,
)
from ..tokens import TokenRegistry, default_registry, format_units, parse_units
from ..wallet.signer import DEFAULT_GAS_LIMIT, SessionSigner
from .approvals import ensure_approval
from .models import SwapResult, SwapTransaction


logger = logging.getLogger(__name__)

INSUFFICIENT_FUNDS_MESSAGE = "Insufficient funds. Deposit more ETH to your wallet to cover this swap + gas."


class SignerSource(Protocol):
    async def get_signer(self, session_id: str) -> Optional[SessionSigner]:
        ...


class SwapExecutor:
    def __init__(
        self,
        wallets: SignerSource,
        provider: ZeroExProvider,
        *,
        registry: Optional[TokenRegistry] = None,
        explorer_base_url: str = "https://basescan.org",
    ):
        self._wallets = wallets
        self._provider = provider
        self._registry = registry or default_registry
        self.explorer_base_url = explorer_base_url.rstrip("/")

    def explorer_url(self, tx_hash: str) -> str:
        return f"{self.explorer_base_url}/tx/{tx_hash}"

    async def execute_swap(
        self,
        session_id: str,
        from_symbol: str,
        to_symbol: str,
        amount: str,
    ) -> SwapResult:
        def failed(error: str) -> SwapResult:
            return SwapResult(
                success=False,
                from_token=from_symbol,
                to_token=to_symbol,
                from_amount=amount,
                error=error,
            )

        signer = await self._wallets.get_signer(session_id)
        if signer is None:
            return failed("No wallet found. Start a chat session first.")

        from_token = self._registry.resolve(from_symbol)
        to_token = self._registry.resolve(to_symbol)
        if from_token is None:
            return failed(f"Unknown token: {from_symbol}")
        if to_token is None:
            return failed(f"Unknown token: {to_symbol}")

        try:
            sell_amount = parse_units(amount, from_token.decimals)
        except ValidationError:
            return failed(f"Invalid amount: {amount}")

        try:
            payload = await self._provider.swap_transaction(
                from_token.address,
                to_token.address,
                sell_amount,
                signer.address,
            )
            swap = SwapTransaction.from_response(payload)

            if not from_token.is_native and swap.allowance_target:
                await ensure_approval(signer, from_token.address, swap.allowance_target, sell_amount)

            tx_hash = await signer.send_transaction(
                swap.to,
                data=swap.data,
                value=swap.value if from_token.is_native else 0,
                gas=swap.gas or DEFAULT_GAS_LIMIT,
            )
            receipt = await signer.wait_for_confirmation(tx_hash)
        except Exception as exc:
            if classify_error(exc) == ErrorCategory.INSUFFICIENT_FUNDS or _mentions_insufficient_funds(exc):
                return failed(INSUFFICIENT_FUNDS_MESSAGE)
            if isinstance(exc, ChatWalletError):
                logger.warning(f"Swap failed for session {session_id}: {exc}")
            else:
                logger.exception(f"Unexpected swap failure for session {session_id}")
            return failed(f"Swap failed: {_detail(exc)}")

        final_hash = _receipt_hash(receipt) or tx_hash
        logger.info(f"Swap {amount} {from_symbol} -> {to_symbol} confirmed: {final_hash}")
        return SwapResult(
            success=True,
            from_token=from_symbol.upper(),
            to_token=to_symbol.upper(),
            from_amount=amount,
            tx_hash=final_hash,
            to_amount=format_units(swap.buy_amount, to_token.decimals),
            explorer_url=self.explorer_url(final_hash),
        )


def _mentions_insufficient_funds(exc: BaseException) -> bool:
    if isinstance(exc, UpstreamError) and exc.detail:
        return "insufficient funds" in exc.detail.lower()
    return False


def _detail(exc: BaseException) -> str:
    # web3 RPC errors carry a {"code", "message"} dict as their first arg
    if exc.args and isinstance(exc.args[0], dict) and "message" in exc.args[0]:
        return str(exc.args[0]["message"])
    return error_message(exc)


def _receipt_hash(receipt) -> Optional[str]:
    value = receipt.get("transactionHash") if receipt else None
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)
