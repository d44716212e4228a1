"""
Service wiring.

Builds the object graph once per process: vault -> wallet manager ->
swap service -> screen -> router. Tests build their own container with
fakes instead of patching module globals.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from .agent import ActionRouter, AgentServices, IntentClassifier, build_classifier
from .config import Settings
from .core.security import GoPlusTokenScreener, SecurityScreen
from .core.trading import SwapService
from .core.vault import KeyVault
from .core.wallet import InMemoryWalletRepository, SignerFactory, WalletManager
from .providers.base import Provider
from .providers.basescan import BasescanProvider
from .providers.coingecko import CoingeckoProvider
from .providers.goplus import GoPlusProvider
from .providers.zerox import ZeroExProvider


logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    settings: Settings
    vault: KeyVault
    wallets: WalletManager
    swaps: SwapService
    screen: SecurityScreen
    router: ActionRouter
    classifier: IntentClassifier
    providers: List[Provider] = field(default_factory=list)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContainer":
        vault = KeyVault.from_settings(settings)
        wallets = WalletManager(
            InMemoryWalletRepository(),
            vault,
            SignerFactory.from_settings(settings),
            export_ttl_seconds=settings.export_confirmation_ttl_seconds,
        )
        zerox = ZeroExProvider()
        goplus = GoPlusProvider()
        coingecko = CoingeckoProvider()
        basescan = BasescanProvider()

        swaps = SwapService.from_settings(settings, wallets, provider=zerox)
        screen = SecurityScreen(GoPlusTokenScreener(goplus))
        services = AgentServices(
            wallets=wallets,
            swaps=swaps,
            prices=coingecko,
            history=basescan,
            explorer_base_url=settings.explorer_base_url,
        )
        logger.info(
            f"Container ready (environment={settings.environment}, chain_id={settings.chain_id}, "
            f"insecure_vault={vault.insecure})"
        )
        return cls(
            settings=settings,
            vault=vault,
            wallets=wallets,
            swaps=swaps,
            screen=screen,
            router=ActionRouter(services, screen),
            classifier=build_classifier(settings),
            providers=[zerox, goplus, coingecko, basescan],
        )
