"""Boot directive provider for the volatile PID directory."""

import asyncio
import logging
from pathlib import Path

from jinja2 import TemplateError

from nginx_installer.errors import PreconditionError
from nginx_installer.models.config import SystemPathsConfig
from nginx_installer.models.install import BootDirective, InstallConfig
from nginx_installer.providers.base import BaseProvider, ProviderStatus
from nginx_installer.utils.templates import render_template


logger = logging.getLogger(__name__)


class BootDirectiveProvider(BaseProvider):
    """Writes the tmpfiles.d rule that recreates the PID directory at boot.

    The PID directory lives on a tmpfs that is wiped at boot, so only the
    rule is installed here; systemd-tmpfiles materializes the directory.
    """

    def __init__(self):
        self.paths = SystemPathsConfig()

    async def initialize(self, settings, registry) -> None:
        self.paths = settings.system

    @property
    def directive_file(self) -> Path:
        return Path(self.paths.tmpfiles_path)

    def render(self, directive: BootDirective) -> str:
        """Render a directive as a single tmpfiles.d line."""
        line = render_template(
            self.paths.directive_template,
            type=directive.type,
            path=directive.path,
            mode=directive.mode,
            user=directive.user,
            group=directive.group,
        )
        return line.strip() + "\n"

    async def status(self, config: InstallConfig) -> ProviderStatus:
        expected = self.render(self._directive(config))
        if not await asyncio.to_thread(self.directive_file.exists):
            return ProviderStatus.ABSENT
        current = await asyncio.to_thread(self.directive_file.read_text)
        return ProviderStatus.PRESENT if current == expected else ProviderStatus.ABSENT

    async def present(self, config: InstallConfig) -> None:
        await self.write_boot_pid_directive(config.pid_folder, config.service_user)

    async def validate_config(self, config: InstallConfig) -> None:
        try:
            self.render(self._directive(config))
        except TemplateError as e:
            raise PreconditionError(f"Invalid directive template: {e}") from e

    def _directive(self, config: InstallConfig) -> BootDirective:
        return BootDirective(path=config.pid_folder, user=config.service_user, group=config.service_user)

    async def write_boot_pid_directive(self, pid_folder: str, username: str) -> None:
        """Overwrite the directive file with the rule for pid_folder."""
        content = self.render(BootDirective(path=pid_folder, user=username, group=username))

        await asyncio.to_thread(lambda: self.directive_file.parent.mkdir(parents=True, exist_ok=True))
        await asyncio.to_thread(self.directive_file.write_text, content)
        logger.info(f"Wrote boot directive for {pid_folder} to {self.directive_file}")
