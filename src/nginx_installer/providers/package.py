"""Package provider fetching the nginx binary from the vendor repository."""

import asyncio
import logging
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

from jinja2 import TemplateError

from nginx_installer.errors import PreconditionError
from nginx_installer.models.config import RepositoryConfig, SystemPathsConfig
from nginx_installer.models.install import InstallConfig
from nginx_installer.models.package import OsRelease, PackageArtifact, SourceEntry
from nginx_installer.providers.base import BaseProvider, ProviderStatus
from nginx_installer.utils.apt import AptClient, REQUIRED_TOOLS
from nginx_installer.utils.osrelease import derive_codename, read_os_release
from nginx_installer.utils.system import require_tools
from nginx_installer.utils.templates import render_template


logger = logging.getLogger(__name__)


class PackageProvider(BaseProvider):
    """Registers the vendor source, downloads the package and extracts the binary.

    Every sub-step depends on the previous one; the first failure propagates
    and nothing is retried. The binary is staged in a fresh directory under
    the working directory, so nothing already there is ever overwritten.
    """

    def __init__(self, apt: Optional[AptClient] = None):
        self.apt = apt
        self.repository = RepositoryConfig()
        self.paths = SystemPathsConfig()
        self.work_dir = Path(".")
        self.release: Optional[OsRelease] = None
        self.codename: Optional[str] = None
        self.staging_dir: Optional[Path] = None

    async def initialize(self, settings, registry) -> None:
        self.repository = settings.repository
        self.paths = settings.system
        self.work_dir = Path(settings.installer.work_dir)
        if self.apt is None:
            self.apt = AptClient(proxy=settings.proxy)

    @property
    def staged_binary(self) -> Optional[Path]:
        """Where the extracted binary waits for the installer, once fetched."""
        if self.staging_dir is None:
            return None
        return self.staging_dir / self.repository.binary_name

    async def status(self, config: InstallConfig) -> ProviderStatus:
        staged = self.staged_binary
        if staged is None:
            return ProviderStatus.ABSENT
        exists = await asyncio.to_thread(staged.is_file)
        return ProviderStatus.PRESENT if exists else ProviderStatus.ABSENT

    async def validate_config(self, config: InstallConfig) -> None:
        require_tools(REQUIRED_TOOLS)
        self.release = await asyncio.to_thread(read_os_release, Path(self.paths.os_release_path))
        self.codename = derive_codename(self.release, self.repository.supported_codenames)
        logger.debug(f"Detected {self.release.id} {self.codename}")

        try:
            self.source_entries(self.codename)
        except TemplateError as e:
            raise PreconditionError(f"Invalid source template: {e}") from e

    async def present(self, config: InstallConfig) -> None:
        if self.codename is None:
            await self.validate_config(config)

        self.staging_dir = Path(await asyncio.to_thread(
            tempfile.mkdtemp, prefix=f"{self.repository.package_name}-staging-", dir=str(self.work_dir)
        ))
        await self.fetch_binary(config.signing_key_path, self.codename, self.staged_binary)

    async def discard_staging(self) -> None:
        """Remove the staging directory once the installer has taken the binary."""
        if self.staging_dir is None:
            return
        await asyncio.to_thread(shutil.rmtree, self.staging_dir, True)
        logger.debug(f"Removed {self.staging_dir}")
        self.staging_dir = None

    def source_entries(self, codename: str) -> List[str]:
        """Render the binary and source package feed entries."""
        distro = self.release.id if self.release else "ubuntu"
        entries = []
        for kind in ("deb", "deb-src"):
            entry = SourceEntry(
                kind=kind,
                repository_url=self.repository.repository_url.rstrip("/"),
                distro=distro,
                codename=codename,
                component=self.repository.component,
                keyring=self.paths.keyring_path,
            )
            entries.append(render_template(self.repository.source_template, **entry.model_dump()).strip())
        return entries

    async def fetch_binary(self, signing_key_path: str, os_codename: str, destination: Path) -> Path:
        """Fetch the vendor package and relocate its binary to destination.

        destination must not exist yet.
        """
        if await asyncio.to_thread(lambda: destination.exists() or destination.is_symlink()):
            raise FileExistsError(f"Refusing to overwrite {destination}")

        logger.info(f"Importing signing key {signing_key_path}")
        await self.apt.import_key(Path(signing_key_path), Path(self.paths.keyring_path))

        await self.apt.add_sources(Path(self.paths.sources_list), self.source_entries(os_codename))

        logger.info("Refreshing package index")
        await self.apt.refresh_index()

        logger.info(f"Downloading package {self.repository.package_name}")
        archive = await self.apt.download(self.repository.package_name, self.work_dir)
        scratch_dir = Path(await asyncio.to_thread(
            tempfile.mkdtemp, prefix=f"{self.repository.package_name}-extract-", dir=str(self.work_dir)
        ))
        artifact = PackageArtifact(archive=archive, scratch_dir=scratch_dir)

        logger.info(f"Extracting {artifact.archive.name}")
        await self.apt.extract(artifact.archive, artifact.scratch_dir)

        source = artifact.scratch_dir / self.repository.package_binary_path
        if not await asyncio.to_thread(source.is_file):
            raise FileNotFoundError(f"{self.repository.package_binary_path} not found in {artifact.archive.name}")

        await asyncio.to_thread(lambda: destination.parent.mkdir(parents=True, exist_ok=True))
        await asyncio.to_thread(shutil.move, str(source), str(destination))
        logger.debug(f"Relocated {source} to {destination}")

        await self._cleanup(artifact)
        return destination

    async def _cleanup(self, artifact: PackageArtifact) -> None:
        """Remove the downloaded archive and the scratch tree."""
        await asyncio.to_thread(artifact.archive.unlink)
        if await asyncio.to_thread(artifact.scratch_dir.exists):
            await asyncio.to_thread(shutil.rmtree, artifact.scratch_dir)
        logger.debug(f"Removed {artifact.archive} and {artifact.scratch_dir}")
