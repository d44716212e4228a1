"""
Signer reconstruction for custodial wallets.

A SessionSigner binds one decrypted key to a JSON-RPC endpoint and exposes
the handful of calls the wallet and swap paths need. It is built per call
and must not be cached; the key lives only inside the LocalAccount.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted

from ..errors import TransactionRevertedError, TransactionTimeoutError


logger = logging.getLogger(__name__)

MAX_UINT256 = 2**256 - 1
DEFAULT_GAS_LIMIT = 500_000

ERC20_ABI = [
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "transfer",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


class SessionSigner:
    """Transaction-capable handle for one custodial wallet."""

    def __init__(
        self,
        web3: AsyncWeb3,
        account: LocalAccount,
        *,
        chain_id: int,
        confirmation_timeout_seconds: float = 120,
    ):
        self.web3 = web3
        self._account = account
        self.chain_id = chain_id
        self.confirmation_timeout_seconds = confirmation_timeout_seconds

    def __repr__(self) -> str:
        return f"SessionSigner(address={self.address!r}, chain_id={self.chain_id})"

    @property
    def address(self) -> str:
        return self._account.address

    def _erc20(self, token_address: str):
        return self.web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(token_address),
            abi=ERC20_ABI,
        )

    async def allowance(self, token_address: str, spender: str) -> int:
        return await self._erc20(token_address).functions.allowance(
            self.address,
            AsyncWeb3.to_checksum_address(spender),
        ).call()

    async def _base_fields(self) -> Dict[str, Any]:
        nonce, gas_price = await asyncio.gather(
            self.web3.eth.get_transaction_count(self.address, "pending"),
            self.web3.eth.gas_price,
        )
        return {
            "from": self.address,
            "nonce": nonce,
            "gasPrice": gas_price,
            "chainId": self.chain_id,
        }

    async def _sign_and_send(self, tx: Dict[str, Any]) -> str:
        signed = self._account.sign_transaction(tx)
        tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
        tx_hash_hex = AsyncWeb3.to_hex(tx_hash)
        logger.info(f"Submitted transaction {tx_hash_hex} from {self.address}")
        return tx_hash_hex

    async def send_transaction(
        self,
        to: str,
        *,
        data: str = "0x",
        value: int = 0,
        gas: Optional[int] = None,
    ) -> str:
        """Sign and broadcast a raw call. Returns the transaction hash."""
        tx = await self._base_fields()
        tx.update({
            "to": AsyncWeb3.to_checksum_address(to),
            "data": data,
            "value": value,
        })
        if gas is None:
            gas = await self.web3.eth.estimate_gas(tx)
        tx["gas"] = gas
        return await self._sign_and_send(tx)

    async def approve(self, token_address: str, spender: str, amount: int = MAX_UINT256) -> str:
        tx = await self._erc20(token_address).functions.approve(
            AsyncWeb3.to_checksum_address(spender),
            amount,
        ).build_transaction(await self._base_fields())
        return await self._sign_and_send(tx)

    async def transfer(self, token_address: str, to: str, amount: int) -> str:
        tx = await self._erc20(token_address).functions.transfer(
            AsyncWeb3.to_checksum_address(to),
            amount,
        ).build_transaction(await self._base_fields())
        return await self._sign_and_send(tx)

    async def wait_for_confirmation(self, tx_hash: str) -> Dict[str, Any]:
        """Wait for one confirmation.

        No replacement or retry: a transaction that is still pending after
        the timeout is reported as such and left alone.
        """
        try:
            receipt = await asyncio.wait_for(
                self.web3.eth.wait_for_transaction_receipt(
                    tx_hash,
                    timeout=self.confirmation_timeout_seconds,
                ),
                timeout=self.confirmation_timeout_seconds + 5,
            )
        except (TimeExhausted, asyncio.TimeoutError) as exc:
            logger.warning(f"Transaction {tx_hash} not confirmed within {self.confirmation_timeout_seconds}s")
            raise TransactionTimeoutError(
                f"Transaction {tx_hash} was not confirmed in time.",
                tx_hash=tx_hash,
                detail=str(exc),
            ) from exc

        if receipt["status"] != 1:
            raise TransactionRevertedError(f"Transaction {tx_hash} reverted.", tx_hash=tx_hash)
        return dict(receipt)


class SignerFactory:
    """Builds SessionSigners bound to the configured RPC endpoint."""

    def __init__(
        self,
        rpc_url: str,
        *,
        chain_id: int,
        confirmation_timeout_seconds: float = 120,
        request_timeout_seconds: float = 20,
    ):
        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self.confirmation_timeout_seconds = confirmation_timeout_seconds
        self.request_timeout_seconds = request_timeout_seconds

    @classmethod
    def from_settings(cls, settings) -> "SignerFactory":
        return cls(
            settings.base_rpc_url,
            chain_id=settings.chain_id,
            confirmation_timeout_seconds=settings.tx_confirmation_timeout_seconds,
            request_timeout_seconds=settings.request_timeout_seconds,
        )

    def _web3(self) -> AsyncWeb3:
        provider = AsyncWeb3.AsyncHTTPProvider(
            self.rpc_url,
            request_kwargs={"timeout": self.request_timeout_seconds},
        )
        return AsyncWeb3(provider)

    def build(self, private_key: str) -> SessionSigner:
        return SessionSigner(
            self._web3(),
            Account.from_key(private_key),
            chain_id=self.chain_id,
            confirmation_timeout_seconds=self.confirmation_timeout_seconds,
        )

    def reader(self) -> AsyncWeb3:
        """Read-only client for balance lookups that need no key."""
        return self._web3()

    async def read_balance(self, address: str) -> int:
        return await self.reader().eth.get_balance(AsyncWeb3.to_checksum_address(address))

    async def read_token_balance(self, token_address: str, owner: str) -> int:
        contract = self.reader().eth.contract(
            address=AsyncWeb3.to_checksum_address(token_address),
            abi=ERC20_ABI,
        )
        return await contract.functions.balanceOf(AsyncWeb3.to_checksum_address(owner)).call()
