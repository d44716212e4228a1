from fastapi import APIRouter, Depends
from typing import Dict, Any

from ..container import AppContainer
from .deps import get_container

router = APIRouter()


@router.get("/healthz")
async def health_check(container: AppContainer = Depends(get_container)) -> Dict[str, Any]:
    """Health check endpoint reporting configuration that affects custody"""

    settings = container.settings
    insecure_vault = container.vault.insecure

    return {
        "status": "degraded" if insecure_vault else "healthy",
        "environment": settings.environment,
        "chain_id": settings.chain_id,
        "vault": "insecure-development-key" if insecure_vault else "configured",
        "classifier": "anthropic" if settings.has_anthropic_key else "local",
        "aggregator_key": settings.has_zerox_key,
        "quote_cache_entries": container.swaps.quotes.cache.size(),
        "providers": {provider.name: await provider.health_check() for provider in container.providers},
    }
