"""
Quote service: indicative 0x quotes with a short-lived cache.

Quotes are keyed by `upper(from):upper(to):amount` and served from cache
for `ttl_seconds` unless the caller bypasses it. Stale entries are dropped
lazily on read and by the periodic sweep.
"""

import logging
from typing import Dict, Optional, Union

from ...cache import TTLCache
from ...providers.zerox import ZeroExProvider
from ..errors import UpstreamError, ValidationError, error_message
from ..tokens import TokenRegistry, default_registry, format_units, parse_units
from .models import SwapQuote


logger = logging.getLogger(__name__)

QuoteOutcome = Union[SwapQuote, Dict[str, str]]


def quote_cache_key(from_symbol: str, to_symbol: str, amount: str) -> str:
    return f"{from_symbol.upper()}:{to_symbol.upper()}:{amount}"


class QuoteService:
    def __init__(
        self,
        provider: ZeroExProvider,
        *,
        registry: Optional[TokenRegistry] = None,
        ttl_seconds: float = 30,
        cache: Optional[TTLCache[SwapQuote]] = None,
    ):
        self._provider = provider
        self._registry = registry or default_registry
        self.ttl_seconds = ttl_seconds
        self.cache: TTLCache[SwapQuote] = cache or TTLCache(default_ttl=ttl_seconds, name="quotes")

    async def get_quote(
        self,
        from_symbol: str,
        to_symbol: str,
        amount: str,
        *,
        bypass_cache: bool = False,
    ) -> QuoteOutcome:
        """Return a SwapQuote, or `{"error": ...}` when no quote can be produced."""
        key = quote_cache_key(from_symbol, to_symbol, amount)

        if not bypass_cache:
            cached = await self.cache.get(key)
            if cached is not None:
                return cached

        from_token = self._registry.resolve(from_symbol)
        to_token = self._registry.resolve(to_symbol)
        if from_token is None:
            return {"error": f"Unknown token: {from_symbol}. Try using a contract address instead."}
        if to_token is None:
            return {"error": f"Unknown token: {to_symbol}. Try using a contract address instead."}

        try:
            sell_amount = parse_units(amount, from_token.decimals)
        except ValidationError:
            return {"error": f"Invalid amount: {amount}"}

        try:
            data = await self._provider.quote(from_token.address, to_token.address, sell_amount)
            quote = SwapQuote(
                from_token=from_symbol.upper(),
                to_token=to_symbol.upper(),
                from_amount=amount,
                to_amount=str(data["buyAmount"]),
                to_amount_formatted=format_units(data["buyAmount"], to_token.decimals),
                price=str(data.get("price", "")),
                estimated_gas=str(data.get("estimatedGas", "")),
                sources=[
                    source["name"]
                    for source in data.get("sources") or []
                    if float(source.get("proportion") or 0) > 0
                ],
            )
        except UpstreamError as exc:
            return {"error": exc.message}
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"Malformed 0x quote for {key}: {exc}")
            return {"error": f"Failed to get quote: {error_message(exc, 'unknown')}"}

        await self.cache.set(key, quote, ttl=self.ttl_seconds)
        return quote
