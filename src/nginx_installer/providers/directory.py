"""Directory provider for the runtime layout."""

import asyncio
import logging
from typing import Optional

from nginx_installer.models.config import SystemPathsConfig
from nginx_installer.models.install import DirectoryLayout, InstallConfig
from nginx_installer.providers.base import BaseProvider, ProviderStatus
from nginx_installer.utils.accounts import AccountsClient


logger = logging.getLogger(__name__)


class DirectoryProvider(BaseProvider):
    """Creates the install, log and cache trees owned by the service user."""

    def __init__(self, accounts: Optional[AccountsClient] = None):
        self.accounts = accounts
        self.paths = SystemPathsConfig()

    async def initialize(self, settings, registry) -> None:
        self.paths = settings.system
        if self.accounts is None:
            self.accounts = AccountsClient(system_account=settings.system.system_account)

    def layout(self, install_path: str) -> DirectoryLayout:
        return DirectoryLayout(
            install_path=install_path,
            log_dir=self.paths.log_dir,
            cache_dir=self.paths.cache_dir,
        )

    async def status(self, config: InstallConfig) -> ProviderStatus:
        directories = self.layout(config.install_path).directories
        exists = [await asyncio.to_thread(d.is_dir) for d in directories]
        return ProviderStatus.PRESENT if all(exists) else ProviderStatus.ABSENT

    async def present(self, config: InstallConfig) -> None:
        await self.ensure_layout(config.install_path, config.service_user)

    async def validate_config(self, config: InstallConfig) -> None:
        pass

    async def ensure_layout(self, install_path: str, username: str) -> None:
        """Create every directory, then chown each root recursively."""
        layout = self.layout(install_path)

        for directory in layout.directories:
            await asyncio.to_thread(lambda: directory.mkdir(parents=True, exist_ok=True))
            logger.debug(f"Ensured directory {directory}")

        # Ownership only after the whole tree exists
        for root in layout.roots:
            await self.accounts.chown(root, username, username, recursive=True)
            logger.debug(f"Set ownership of {root} to {username}")

        logger.info(f"Directory layout under {install_path} ready")
