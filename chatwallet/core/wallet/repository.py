"""
Wallet persistence.

`WalletRepository` is the storage seam for wallet records and pending export
confirmations. The in-memory implementation is the reference backend; a
durable backend has to honor `insert_if_absent` and `take_export` atomically.
"""

import asyncio
from dataclasses import replace
from abc import ABC, abstractmethod
from typing import Dict, Optional

from .models import ExportConfirmation, WalletRecord


class WalletRepository(ABC):
    """Session-keyed storage for custodial wallets."""

    @abstractmethod
    async def get(self, session_id: str) -> Optional[WalletRecord]:
        """Return the wallet for a session, if any."""

    @abstractmethod
    async def exists(self, session_id: str) -> bool:
        """Check whether a session has a wallet."""

    @abstractmethod
    async def insert_if_absent(self, session_id: str, record: WalletRecord) -> WalletRecord:
        """Store `record` unless the session already has one.

        Returns whichever record is stored after the call. Must be atomic per
        session so concurrent first access cannot produce two keys.
        """

    @abstractmethod
    async def get_export(self, session_id: str) -> Optional[ExportConfirmation]:
        """Return the pending export confirmation, if any."""

    @abstractmethod
    async def put_export(self, session_id: str, confirmation: ExportConfirmation) -> None:
        """Record a pending export, replacing any existing one."""

    @abstractmethod
    async def delete_export(self, session_id: str) -> None:
        """Remove the pending export for a session."""

    @abstractmethod
    async def take_export(self, session_id: str) -> Optional[ExportConfirmation]:
        """Remove and return the pending export, marked confirmed.

        Must be atomic per session: of two concurrent callers only one may
        receive the confirmation, the other gets None.
        """


class InMemoryWalletRepository(WalletRepository):
    """Process-local repository. Contents are lost on restart."""

    def __init__(self) -> None:
        self._wallets: Dict[str, WalletRecord] = {}
        self._exports: Dict[str, ExportConfirmation] = {}
        self._lock = asyncio.Lock()

    async def get(self, session_id: str) -> Optional[WalletRecord]:
        return self._wallets.get(session_id)

    async def exists(self, session_id: str) -> bool:
        return session_id in self._wallets

    async def insert_if_absent(self, session_id: str, record: WalletRecord) -> WalletRecord:
        async with self._lock:
            return self._wallets.setdefault(session_id, record)

    async def get_export(self, session_id: str) -> Optional[ExportConfirmation]:
        return self._exports.get(session_id)

    async def put_export(self, session_id: str, confirmation: ExportConfirmation) -> None:
        async with self._lock:
            self._exports[session_id] = confirmation

    async def delete_export(self, session_id: str) -> None:
        async with self._lock:
            self._exports.pop(session_id, None)

    async def take_export(self, session_id: str) -> Optional[ExportConfirmation]:
        async with self._lock:
            confirmation = self._exports.pop(session_id, None)
        return replace(confirmation, confirmed=True) if confirmation else None

    def __len__(self) -> int:
        return len(self._wallets)
