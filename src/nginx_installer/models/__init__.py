"""Pydantic models for configuration and validation."""

from nginx_installer.models.config import (
    InstallerSettings,
    InstallerOptions,
    RepositoryConfig,
    SystemPathsConfig,
    ProxyConfig,
)
from nginx_installer.models.install import InstallConfig, DirectoryLayout, BootDirective
from nginx_installer.models.package import OsRelease, SourceEntry, PackageArtifact

__all__ = [
    "InstallerSettings",
    "InstallerOptions",
    "RepositoryConfig",
    "SystemPathsConfig",
    "ProxyConfig",
    "InstallConfig",
    "DirectoryLayout",
    "BootDirective",
    "OsRelease",
    "SourceEntry",
    "PackageArtifact",
]
