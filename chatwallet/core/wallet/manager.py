"""
Custodial Wallet Manager

Creates and manages server-side wallets for chat sessions. Each session
gets exactly one wallet; private keys are AES-256-GCM encrypted at rest.

Flow:
1. User starts a chat -> wallet auto-created
2. User funds it (deposit address)
3. User trades via chat
4. User can export the private key (two-phase confirmation)
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from eth_account import Account

from ..tokens import TokenRegistry, default_registry, format_units
from ..vault import KeyVault
from .models import (
    ExportConfirmation,
    ExportRequest,
    ExportResult,
    TokenBalance,
    WalletBalance,
    WalletInfo,
    WalletRecord,
)
from .repository import WalletRepository
from .signer import SessionSigner, SignerFactory


logger = logging.getLogger(__name__)

EXPORT_CONFIRMATION_PHRASE = "yes, export my key"

EXPORT_WARNING = "\n".join([
    "⚠️ **Warning: Private Key Export**",
    "",
    "You are about to reveal your private key. Please understand:",
    "",
    "• **Anyone with this key has full control** of your wallet and all funds in it",
    "• **Never share it** with anyone. No legitimate service will ask for it",
    "• **Store it safely**. Once revealed, you're responsible for its security",
    "• **We recommend** importing into a hardware wallet (Ledger, Trezor) for long-term storage",
    "",
    f'**To confirm, reply:** `"{EXPORT_CONFIRMATION_PHRASE}"`',
])

NO_PENDING_EXPORT = 'No pending export request. Say "export my private key" first.'
EXPORT_EXPIRED = "Export request expired. Please request again."


class WalletManager:
    """Session-scoped custodial wallets backed by a WalletRepository."""

    def __init__(
        self,
        repository: WalletRepository,
        vault: KeyVault,
        signer_factory: SignerFactory,
        *,
        export_ttl_seconds: float = 120,
        registry: Optional[TokenRegistry] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._repository = repository
        self._vault = vault
        self._signers = signer_factory
        self.export_ttl_seconds = export_ttl_seconds
        self._registry = registry or default_registry
        self._clock = clock

    # ── Lifecycle ────────────────────────────────────────

    async def create_wallet(self, session_id: str) -> WalletInfo:
        """Create the wallet for a session, or return the existing one."""
        existing = await self._repository.get(session_id)
        if existing is not None:
            return WalletInfo(existing.address, session_id, existing.created_at)

        account = Account.create()
        private_key = "0x" + bytes(account.key).hex()
        record = WalletRecord.from_encrypted(account.address, self._vault.encrypt(private_key))

        stored = await self._repository.insert_if_absent(session_id, record)
        if stored is record:
            logger.info(f"Created wallet {stored.address} for session {session_id}")
        return WalletInfo(stored.address, session_id, stored.created_at)

    async def has_wallet(self, session_id: str) -> bool:
        return await self._repository.exists(session_id)

    async def get_address(self, session_id: str) -> Optional[str]:
        record = await self._repository.get(session_id)
        return record.address if record else None

    async def get_signer(self, session_id: str) -> Optional[SessionSigner]:
        """Decrypt the session key and bind it to the configured RPC.

        Raises IntegrityError when the stored ciphertext fails
        authentication. The signer is not cached.
        """
        record = await self._repository.get(session_id)
        if record is None:
            return None
        return self._signers.build(self._vault.decrypt_record(record.sealed))

    async def get_balance(self, session_id: str) -> Optional[WalletBalance]:
        """Native balance plus non-zero balances of the balance-check tokens."""
        record = await self._repository.get(session_id)
        if record is None:
            return None

        wei = await self._signers.read_balance(record.address)

        async def _token_balance(token) -> Optional[TokenBalance]:
            try:
                raw = await self._signers.read_token_balance(token.address, record.address)
            except Exception as exc:
                logger.debug(f"Skipping {token.symbol} balance for {record.address}: {exc}")
                return None
            if raw <= 0:
                return None
            return TokenBalance(
                symbol=token.symbol,
                address=token.address,
                balance=str(raw),
                formatted=format_units(raw, token.decimals),
            )

        results = await asyncio.gather(
            *(_token_balance(token) for token in self._registry.balance_check_tokens())
        )
        return WalletBalance(
            eth=str(wei),
            eth_formatted=format_units(wei, 18),
            tokens=[balance for balance in results if balance is not None],
        )

    # ── Private Key Export ───────────────────────────────

    def _is_expired(self, confirmation: ExportConfirmation) -> bool:
        return self._clock() - confirmation.requested_at > self.export_ttl_seconds

    async def request_export(self, session_id: str) -> ExportRequest:
        """First phase of an export. A new request replaces any pending one."""
        if not await self._repository.exists(session_id):
            return ExportRequest(pending=False, message="No wallet found for this session.")

        await self._repository.put_export(session_id, ExportConfirmation(requested_at=self._clock()))
        logger.info(f"Private key export requested for session {session_id}")
        return ExportRequest(pending=True, message=EXPORT_WARNING)

    async def confirm_export(self, session_id: str) -> ExportResult:
        """Second phase. Reveals the key once and clears the pending request."""
        # Consumed before decrypting, so concurrent confirms reveal at most once
        pending = await self._repository.take_export(session_id)
        if pending is None:
            return ExportResult(success=False, message=NO_PENDING_EXPORT)

        if self._is_expired(pending):
            return ExportResult(success=False, message=EXPORT_EXPIRED)

        record = await self._repository.get(session_id)
        if record is None:
            return ExportResult(success=False, message="No wallet found.")

        private_key = self._vault.decrypt_record(record.sealed)
        logger.warning(f"Private key exported for wallet {record.address} (session {session_id})")

        return ExportResult(
            success=True,
            private_key=private_key,
            message="\n".join([
                "🔑 **Your Private Key:**",
                "",
                f"`{private_key}`",
                "",
                "⚠️ **This is shown only once.** Copy it now and store it safely.",
                "Import it into MetaMask, Rabby, or a hardware wallet.",
                "",
                f"Your wallet address: `{record.address}`",
            ]),
        )

    async def has_pending_export(self, session_id: str) -> bool:
        pending = await self._repository.get_export(session_id)
        if pending is None:
            return False
        if self._is_expired(pending):
            await self._repository.delete_export(session_id)
            return False
        return True
