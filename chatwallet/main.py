from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import chat, health, wallet
from .config import settings
from .container import AppContainer
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware


def create_app(container: Optional[AppContainer] = None) -> FastAPI:
    """Build the API. Pass a container to run against fakes."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "container", None) is None:
            app.state.container = AppContainer.from_settings(settings)
        quotes = app.state.container.swaps.quotes
        quotes.cache.start_sweeper(settings.quote_cache_sweep_interval_seconds)
        try:
            yield
        finally:
            await quotes.cache.stop_sweeper()

    app = FastAPI(
        title="Chat Wallet API",
        description="Session-scoped custodial wallet driven by chat",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(chat.router, tags=["Chat"])
    app.include_router(wallet.router, tags=["Wallet"])

    @app.get("/")
    async def root():
        """Root endpoint with basic info"""
        return {
            "name": "Chat Wallet API",
            "version": "0.1.0",
            "docs": "/docs",
            "health": "/healthz",
        }

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "chatwallet.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
