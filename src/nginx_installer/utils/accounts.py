"""OS account and ownership client."""

import asyncio
import logging
import pwd
from pathlib import Path

from nginx_installer.utils.system import run_command


logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ["useradd", "chown"]


class AccountsClient:
    """Queries and creates OS accounts and applies ownership."""

    def __init__(self, system_account: bool = True):
        self.system_account = system_account

    async def user_exists(self, name: str) -> bool:
        """Check whether an account named name exists."""
        try:
            await asyncio.to_thread(pwd.getpwnam, name)
            return True
        except KeyError:
            return False

    async def create_user(self, name: str) -> None:
        """Create an account with a group of the same name."""
        cmd = ["useradd", "--user-group"]
        if self.system_account:
            cmd.append("--system")
        cmd.append(name)
        await run_command(cmd)

    async def chown(self, path: Path, user: str, group: str, recursive: bool = False) -> None:
        """Change owner and group of path."""
        cmd = ["chown"]
        if recursive:
            cmd.append("-R")
        cmd += [f"{user}:{group}", str(path)]
        await run_command(cmd)
