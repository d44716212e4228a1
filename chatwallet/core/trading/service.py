from typing import Optional

from ...cache import TTLCache
from ...config import Settings
from ...providers.zerox import ZeroExProvider
from ..tokens import TokenInfo, TokenRegistry, default_registry
from .executor import SignerSource, SwapExecutor
from .models import SwapResult
from .quotes import QuoteOutcome, QuoteService


class SwapService:
    """Facade over token resolution, quoting and execution."""

    def __init__(self, quotes: QuoteService, executor: SwapExecutor, registry: Optional[TokenRegistry] = None):
        self.quotes = quotes
        self.executor = executor
        self.registry = registry or default_registry

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        wallets: SignerSource,
        *,
        provider: Optional[ZeroExProvider] = None,
        registry: Optional[TokenRegistry] = None,
    ) -> "SwapService":
        provider = provider or ZeroExProvider()
        registry = registry or default_registry
        return cls(
            QuoteService(
                provider,
                registry=registry,
                ttl_seconds=settings.quote_cache_ttl_seconds,
                cache=TTLCache(
                    default_ttl=settings.quote_cache_ttl_seconds,
                    max_size=settings.max_cache_size,
                    name="quotes",
                ),
            ),
            SwapExecutor(
                wallets,
                provider,
                registry=registry,
                explorer_base_url=settings.explorer_base_url,
            ),
            registry,
        )

    def resolve_token(self, symbol_or_address: str) -> Optional[TokenInfo]:
        return self.registry.resolve(symbol_or_address)

    async def get_quote(
        self,
        from_symbol: str,
        to_symbol: str,
        amount: str,
        *,
        bypass_cache: bool = False,
    ) -> QuoteOutcome:
        return await self.quotes.get_quote(from_symbol, to_symbol, amount, bypass_cache=bypass_cache)

    async def execute_swap(self, session_id: str, from_symbol: str, to_symbol: str, amount: str) -> SwapResult:
        return await self.executor.execute_swap(session_id, from_symbol, to_symbol, amount)
