"""User provider for the service account."""

import logging
from typing import Optional

from nginx_installer.models.install import InstallConfig
from nginx_installer.providers.base import BaseProvider, ProviderStatus
from nginx_installer.utils.accounts import AccountsClient, REQUIRED_TOOLS
from nginx_installer.utils.system import require_tools


logger = logging.getLogger(__name__)


class UserProvider(BaseProvider):
    """Ensures the service user exists. Never modifies an existing account."""

    def __init__(self, accounts: Optional[AccountsClient] = None):
        self.accounts = accounts

    async def initialize(self, settings, registry) -> None:
        if self.accounts is None:
            self.accounts = AccountsClient(system_account=settings.system.system_account)

    async def status(self, config: InstallConfig) -> ProviderStatus:
        if await self.accounts.user_exists(config.service_user):
            return ProviderStatus.PRESENT
        return ProviderStatus.ABSENT

    async def present(self, config: InstallConfig) -> None:
        await self.ensure_user(config.service_user)

    async def validate_config(self, config: InstallConfig) -> None:
        require_tools(REQUIRED_TOOLS)

    async def ensure_user(self, name: str) -> None:
        """Create the account unless it already exists."""
        if await self.accounts.user_exists(name):
            logger.info(f"User {name} already exists")
            return

        logger.info(f"Creating user {name}")
        await self.accounts.create_user(name)
