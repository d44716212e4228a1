"""
Tests for the custodial wallet manager: creation, signer reconstruction,
balances and the two-phase private key export.
"""

import asyncio
import dataclasses
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_account import Account

from chatwallet.core.errors import IntegrityError
from chatwallet.core.tokens import BASE_TOKEN_LIST
from chatwallet.core.vault import KeyVault
from chatwallet.core.wallet import (
    InMemoryWalletRepository,
    SignerFactory,
    WalletManager,
)
from chatwallet.core.wallet.manager import EXPORT_EXPIRED, NO_PENDING_EXPORT


KEY = bytes(range(32))
TOKENS = {token.symbol: token for token in BASE_TOKEN_LIST}


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class YieldingRepository(InMemoryWalletRepository):
    """Yields to the loop on every read so concurrent callers interleave."""

    async def get(self, session_id):
        await asyncio.sleep(0)
        return await super().get(session_id)

    async def get_export(self, session_id):
        await asyncio.sleep(0)
        return await super().get_export(session_id)

    async def take_export(self, session_id):
        await asyncio.sleep(0)
        return await super().take_export(session_id)


def make_manager(clock=None, repository=None, signer_factory=None) -> WalletManager:
    return WalletManager(
        repository if repository is not None else InMemoryWalletRepository(),
        KeyVault(KEY),
        signer_factory or SignerFactory("http://127.0.0.1:8545", chain_id=8453),
        export_ttl_seconds=120,
        clock=clock or FakeClock(),
    )


@pytest.mark.asyncio
async def test_create_wallet_is_idempotent():
    manager = make_manager()

    first = await manager.create_wallet("session-1")
    second = await manager.create_wallet("session-1")

    assert first.address == second.address
    assert first.created_at == second.created_at
    assert await manager.has_wallet("session-1")
    assert await manager.get_address("session-1") == first.address


@pytest.mark.asyncio
async def test_sessions_get_distinct_wallets():
    manager = make_manager()

    a = await manager.create_wallet("a")
    b = await manager.create_wallet("b")

    assert a.address != b.address


@pytest.mark.asyncio
async def test_concurrent_first_access_creates_one_wallet():
    repository = YieldingRepository()
    manager = make_manager(repository=repository)

    results = await asyncio.gather(*(manager.create_wallet("shared") for _ in range(20)))

    assert len({info.address for info in results}) == 1
    assert len(repository) == 1
    assert await manager.get_address("shared") == results[0].address


@pytest.mark.asyncio
async def test_unknown_session_lookups():
    manager = make_manager()

    assert await manager.has_wallet("nobody") is False
    assert await manager.get_address("nobody") is None
    assert await manager.get_signer("nobody") is None
    assert await manager.get_balance("nobody") is None


@pytest.mark.asyncio
async def test_signer_matches_wallet_address():
    manager = make_manager()
    info = await manager.create_wallet("session-1")

    signer = await manager.get_signer("session-1")

    assert signer.address == info.address
    assert signer.chain_id == 8453


@pytest.mark.asyncio
async def test_tampered_record_raises_integrity_error():
    repository = InMemoryWalletRepository()
    manager = make_manager(repository=repository)
    await manager.create_wallet("session-1")

    record = await repository.get("session-1")
    repository._wallets["session-1"] = dataclasses.replace(record, auth_tag="00" * 16)

    with pytest.raises(IntegrityError):
        await manager.get_signer("session-1")


@pytest.mark.asyncio
async def test_records_store_only_ciphertext():
    repository = InMemoryWalletRepository()
    manager = make_manager(repository=repository)
    await manager.create_wallet("session-1")
    await manager.request_export("session-1")
    result = await manager.confirm_export("session-1")

    stored = dataclasses.asdict(await repository.get("session-1"))

    assert result.private_key[2:] not in stored["encrypted_key"]
    assert set(stored) == {"address", "encrypted_key", "iv", "auth_tag", "created_at"}


@pytest.mark.asyncio
async def test_balance_skips_failed_and_empty_tokens():
    factory = MagicMock()
    factory.read_balance = AsyncMock(return_value=10**18)

    async def token_balance(token_address, owner):
        if token_address == TOKENS["USDC"].address:
            return 2_500_000
        if token_address == TOKENS["WETH"].address:
            raise ValueError("execution reverted")
        return 0

    factory.read_token_balance = AsyncMock(side_effect=token_balance)
    manager = make_manager(signer_factory=factory)
    info = await manager.create_wallet("session-1")

    balance = await manager.get_balance("session-1")

    assert balance.eth == str(10**18)
    assert balance.eth_formatted == "1"
    assert [(t.symbol, t.formatted) for t in balance.tokens] == [("USDC", "2.5")]
    factory.read_balance.assert_awaited_once_with(info.address)
    assert factory.read_token_balance.await_count == 3


# ── Export ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_request_export_without_wallet():
    manager = make_manager()

    request = await manager.request_export("nobody")

    assert request.pending is False
    assert request.message == "No wallet found for this session."
    assert await manager.has_pending_export("nobody") is False


@pytest.mark.asyncio
async def test_confirm_without_request_fails():
    manager = make_manager()
    await manager.create_wallet("session-1")

    result = await manager.confirm_export("session-1")

    assert result.success is False
    assert result.private_key is None
    assert result.message == NO_PENDING_EXPORT


@pytest.mark.asyncio
async def test_export_reveals_key_once():
    manager = make_manager()
    info = await manager.create_wallet("session-1")

    request = await manager.request_export("session-1")
    assert request.pending is True
    assert '"yes, export my key"' in request.message
    assert await manager.has_pending_export("session-1") is True

    result = await manager.confirm_export("session-1")
    assert result.success is True
    assert result.private_key.startswith("0x") and len(result.private_key) == 66
    assert Account.from_key(result.private_key).address == info.address
    assert result.private_key in result.message
    assert info.address in result.message

    again = await manager.confirm_export("session-1")
    assert again.success is False
    assert again.message == NO_PENDING_EXPORT
    assert await manager.has_pending_export("session-1") is False


@pytest.mark.asyncio
async def test_export_expires_after_ttl():
    clock = FakeClock()
    manager = make_manager(clock=clock)
    await manager.create_wallet("session-1")
    await manager.request_export("session-1")

    clock.advance(121)
    result = await manager.confirm_export("session-1")

    assert result.success is False
    assert result.message == EXPORT_EXPIRED
    assert (await manager.confirm_export("session-1")).message == NO_PENDING_EXPORT


@pytest.mark.asyncio
async def test_export_still_valid_at_ttl_boundary():
    clock = FakeClock()
    manager = make_manager(clock=clock)
    await manager.create_wallet("session-1")
    await manager.request_export("session-1")

    clock.advance(120)

    assert (await manager.confirm_export("session-1")).success is True


@pytest.mark.asyncio
async def test_has_pending_export_expires_lazily():
    clock = FakeClock()
    manager = make_manager(clock=clock)
    await manager.create_wallet("session-1")
    await manager.request_export("session-1")

    clock.advance(200)

    assert await manager.has_pending_export("session-1") is False
    assert (await manager.confirm_export("session-1")).message == NO_PENDING_EXPORT


@pytest.mark.asyncio
async def test_new_request_resets_the_timer():
    clock = FakeClock()
    manager = make_manager(clock=clock)
    await manager.create_wallet("session-1")

    await manager.request_export("session-1")
    clock.advance(100)
    await manager.request_export("session-1")
    clock.advance(100)

    assert (await manager.confirm_export("session-1")).success is True


@pytest.mark.asyncio
async def test_private_key_never_logged(caplog):
    caplog.set_level(logging.DEBUG)
    manager = make_manager()
    await manager.create_wallet("session-1")
    await manager.request_export("session-1")
    result = await manager.confirm_export("session-1")

    assert result.private_key not in caplog.text
    assert result.private_key[2:] not in caplog.text


@pytest.mark.asyncio
async def test_concurrent_confirms_reveal_key_once(caplog):
    caplog.set_level(logging.WARNING)
    manager = make_manager(repository=YieldingRepository())
    await manager.create_wallet("session-1")
    await manager.request_export("session-1")

    results = await asyncio.gather(*(manager.confirm_export("session-1") for _ in range(5)))

    assert [result.success for result in results].count(True) == 1
    assert [result.message for result in results].count(NO_PENDING_EXPORT) == 4
    assert caplog.text.count("Private key exported") == 1


@pytest.mark.asyncio
async def test_take_export_marks_confirmation_consumed():
    repository = InMemoryWalletRepository()
    manager = make_manager(repository=repository)
    await manager.create_wallet("session-1")
    await manager.request_export("session-1")

    pending = await repository.get_export("session-1")
    taken = await repository.take_export("session-1")

    assert pending.confirmed is False
    assert taken.confirmed is True
    assert taken.requested_at == pending.requested_at
    assert await repository.take_export("session-1") is None
