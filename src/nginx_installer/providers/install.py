"""Install provider placing the binary and run-script into the install tree."""

import asyncio
import logging
import shutil
import stat
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from nginx_installer.errors import PreconditionError
from nginx_installer.models.config import RepositoryConfig
from nginx_installer.models.install import InstallConfig
from nginx_installer.providers.base import BaseProvider, ProviderStatus
from nginx_installer.utils.accounts import AccountsClient

if TYPE_CHECKING:
    from nginx_installer.providers.package import PackageProvider


logger = logging.getLogger(__name__)

EXECUTE_ALL = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


async def add_execute(path: Path) -> None:
    """Add execute permission for user, group and others."""
    mode = await asyncio.to_thread(lambda: path.stat().st_mode)
    await asyncio.to_thread(path.chmod, stat.S_IMODE(mode) | EXECUTE_ALL)


class InstallProvider(BaseProvider):
    """Moves the fetched binary and copies the run-script into install_path/bin."""

    def __init__(self, accounts: Optional[AccountsClient] = None):
        self.accounts = accounts
        self.repository = RepositoryConfig()
        self.run_script = Path("run-nginx")
        self._package_provider: Optional["PackageProvider"] = None

    async def initialize(self, settings, registry) -> None:
        self.repository = settings.repository
        self.run_script = Path(settings.installer.run_script)
        if self.accounts is None:
            self.accounts = AccountsClient(system_account=settings.system.system_account)

        self._package_provider = registry.get_provider("package")

    @property
    def package_provider(self) -> Optional["PackageProvider"]:
        return self._package_provider

    def binary_target(self, install_path: str) -> Path:
        return Path(install_path) / "bin" / self.repository.binary_name

    async def status(self, config: InstallConfig) -> ProviderStatus:
        target = self.binary_target(config.install_path)
        script = target.parent / self.run_script.name
        present = await asyncio.to_thread(target.is_file) and await asyncio.to_thread(script.is_file)
        return ProviderStatus.PRESENT if present else ProviderStatus.ABSENT

    async def present(self, config: InstallConfig) -> None:
        if self.package_provider is None:
            raise RuntimeError("Package provider not available")
        staged = self.package_provider.staged_binary
        if staged is None:
            raise RuntimeError("No binary has been fetched")

        await self.install(staged, config.install_path, config.service_user)
        await self.package_provider.discard_staging()

    async def validate_config(self, config: InstallConfig) -> None:
        if not await asyncio.to_thread(self.run_script.is_file):
            raise PreconditionError(f"Run script not found: {self.run_script}")

    async def install(self, binary_src: Path, install_path: str, username: str) -> None:
        """Install the binary and run-script, owned by username and executable."""
        target = self.binary_target(install_path)
        if not await asyncio.to_thread(binary_src.is_file):
            raise FileNotFoundError(f"Binary {binary_src} is not a regular file")
        if await asyncio.to_thread(target.is_dir):
            raise IsADirectoryError(f"Install target {target} is a directory")
        await asyncio.to_thread(lambda: target.parent.mkdir(parents=True, exist_ok=True))

        await asyncio.to_thread(shutil.move, str(binary_src), str(target))
        await self.accounts.chown(target, username, username)
        await add_execute(target)
        logger.info(f"Installed {target}")

        script = target.parent / self.run_script.name
        await asyncio.to_thread(shutil.copy, str(self.run_script), str(script))
        await self.accounts.chown(script, username, username)
        await add_execute(script)
        logger.info(f"Installed {script}")
