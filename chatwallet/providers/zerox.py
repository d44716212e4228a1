"""Async client for the 0x Swap API (v1 quote endpoint) on Base."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import settings
from ..core.errors import UpstreamError
from .base import Provider


logger = logging.getLogger(__name__)


class ZeroExProvider(Provider):
    """Thin wrapper around `GET /swap/v1/quote`.

    The same endpoint serves both indicative quotes and executable
    transactions; passing `taker_address` returns calldata the taker can
    sign directly.
    """

    name = "0x"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        chain_id: Optional[int] = None,
        slippage_percentage: Optional[str] = None,
        timeout_s: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(transport=transport)
        self.base_url = (base_url or settings.zerox_base_url).rstrip("/")
        self.api_key = settings.zerox_api_key if api_key is None else api_key
        self.chain_id = chain_id or settings.chain_id
        self.slippage_percentage = slippage_percentage or settings.slippage_percentage
        self.timeout_s = timeout_s or settings.request_timeout_seconds

    async def ready(self) -> bool:
        # The public endpoint works without a key at low rate limits
        return True

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["0x-api-key"] = self.api_key
        return headers

    async def _quote(self, params: Dict[str, str]) -> Dict[str, Any]:
        async with self._client() as client:
            try:
                response = await client.get(
                    f"{self.base_url}/swap/v1/quote",
                    params=params,
                    headers=self._headers(),
                )
            except httpx.RequestError as exc:
                raise UpstreamError(
                    f"0x API unreachable: {exc}",
                    provider=self.name,
                    detail=str(exc),
                ) from exc

        if response.is_error:
            try:
                reason = response.json().get("reason")
            except ValueError:
                reason = None
            reason = reason or response.reason_phrase or f"HTTP {response.status_code}"
            logger.warning(f"0x quote failed ({response.status_code}): {reason}")
            raise UpstreamError(
                f"0x API error: {reason}",
                provider=self.name,
                detail=reason,
                status_code=response.status_code,
            )
        return response.json()

    def _params(self, sell_token: str, buy_token: str, sell_amount: int) -> Dict[str, str]:
        return {
            "sellToken": sell_token,
            "buyToken": buy_token,
            "sellAmount": str(sell_amount),
            "chainId": str(self.chain_id),
            "slippagePercentage": self.slippage_percentage,
        }

    async def quote(self, sell_token: str, buy_token: str, sell_amount: int) -> Dict[str, Any]:
        """Indicative quote: buyAmount, price, estimatedGas, sources."""
        return await self._quote(self._params(sell_token, buy_token, sell_amount))

    async def swap_transaction(
        self,
        sell_token: str,
        buy_token: str,
        sell_amount: int,
        taker_address: str,
    ) -> Dict[str, Any]:
        """Executable quote: to, data, value, gas, buyAmount, allowanceTarget."""
        params = self._params(sell_token, buy_token, sell_amount)
        params["takerAddress"] = taker_address
        return await self._quote(params)
