"""Provider registry for the provisioning steps."""

import logging
from typing import Dict, Optional, Type

from nginx_installer.providers.base import BaseProvider
from nginx_installer.providers.user import UserProvider
from nginx_installer.providers.directory import DirectoryProvider
from nginx_installer.providers.bootdirective import BootDirectiveProvider
from nginx_installer.providers.package import PackageProvider
from nginx_installer.providers.install import InstallProvider


logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Holds one provider per step, keyed by step id."""

    def __init__(self):
        self._providers: Dict[str, BaseProvider] = {}
        self._provider_classes: Dict[str, Type[BaseProvider]] = {
            "user": UserProvider,
            "directory": DirectoryProvider,
            "bootdirective": BootDirectiveProvider,
            "package": PackageProvider,
            "install": InstallProvider,
        }

    async def initialize(self, settings):
        """Build the default providers, then initialize them.

        Construction finishes before any initialize() runs, so a provider can
        look up its siblings while initializing.
        """
        self._providers = {name: cls() for name, cls in self._provider_classes.items()}
        for name, provider in self._providers.items():
            await provider.initialize(settings, self)
            logger.debug(f"Initialized provider {name}")

    def register(self, name: str, provider: BaseProvider) -> None:
        """Register an already constructed provider, replacing any existing one."""
        self._providers[name] = provider

    def get_provider(self, name: str) -> Optional[BaseProvider]:
        return self._providers.get(name)
