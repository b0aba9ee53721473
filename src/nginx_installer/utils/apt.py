"""apt, gpg and dpkg-deb client."""

import asyncio
import os
import logging
from pathlib import Path
from typing import Dict, List, Optional

from nginx_installer.models.config import ProxyConfig
from nginx_installer.utils.system import run_command


logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ["gpg", "apt-get", "dpkg-deb"]


def proxy_environment(proxy: Optional[ProxyConfig]) -> Optional[Dict[str, str]]:
    """Build the environment passed to apt-get when a proxy is configured."""
    if proxy is None:
        return None

    env = dict(os.environ)
    if proxy.http_proxy:
        env["http_proxy"] = env["HTTP_PROXY"] = proxy.http_proxy
    if proxy.https_proxy:
        env["https_proxy"] = env["HTTPS_PROXY"] = proxy.https_proxy
    env["no_proxy"] = env["NO_PROXY"] = proxy.no_proxy
    return env


class AptClient:
    """Thin wrapper over the package tools the fetcher relies on."""

    def __init__(self, proxy: Optional[ProxyConfig] = None):
        self.env = proxy_environment(proxy)

    def _env_kwargs(self) -> Dict[str, Dict[str, str]]:
        return {"env": self.env} if self.env is not None else {}

    async def import_key(self, key_path: Path, keyring_path: Path) -> None:
        """Dearmor a signing key into a keyring file apt can reference."""
        await asyncio.to_thread(lambda: keyring_path.parent.mkdir(parents=True, exist_ok=True))
        await run_command([
            "gpg", "--batch", "--yes", "--dearmor",
            "--output", str(keyring_path), str(key_path),
        ])
        logger.debug(f"Imported signing key {key_path} into {keyring_path}")

    async def add_sources(self, sources_list: Path, entries: List[str]) -> int:
        """Append source entries not already present; return how many were added."""
        def _append() -> int:
            existing = set()
            if sources_list.exists():
                existing = {line.strip() for line in sources_list.read_text().splitlines()}
            missing = [entry for entry in entries if entry.strip() not in existing]
            if missing:
                sources_list.parent.mkdir(parents=True, exist_ok=True)
                with sources_list.open("a") as fh:
                    for entry in missing:
                        fh.write(entry + "\n")
            return len(missing)

        added = await asyncio.to_thread(_append)
        logger.debug(f"Added {added} source entries to {sources_list}")
        return added

    async def refresh_index(self) -> None:
        """Refresh the package index."""
        await run_command(["apt-get", "update"], **self._env_kwargs())

    async def download(self, package: str, work_dir: Path) -> Path:
        """Download a package archive into work_dir without installing it.

        Archives of the same package left behind by earlier runs are removed
        first, so the one found afterwards is the one just downloaded.
        """
        pattern = f"{package}_*.deb"
        stale = await asyncio.to_thread(lambda: list(work_dir.glob(pattern)))
        for archive in stale:
            await asyncio.to_thread(archive.unlink)
            logger.debug(f"Removed stale archive {archive}")

        await run_command(["apt-get", "download", package], cwd=str(work_dir), **self._env_kwargs())

        archives = await asyncio.to_thread(lambda: list(work_dir.glob(pattern)))
        if not archives:
            raise FileNotFoundError(f"No {package} archive found in {work_dir} after download")
        if len(archives) > 1:
            raise RuntimeError(f"Expected one {package} archive in {work_dir}, found {len(archives)}")
        logger.debug(f"Downloaded {archives[0]}")
        return archives[0]

    async def extract(self, archive: Path, scratch_dir: Path) -> None:
        """Unpack the package payload without running maintainer scripts."""
        await asyncio.to_thread(lambda: scratch_dir.mkdir(parents=True, exist_ok=True))
        await run_command(["dpkg-deb", "-x", str(archive), str(scratch_dir)])
