"""Settings models."""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_SOURCE_TEMPLATE = (
    "{{ kind }} [signed-by={{ keyring }}] {{ repository_url }}/{{ distro }}/ "
    "{{ codename }} {{ component }}"
)

DEFAULT_DIRECTIVE_TEMPLATE = "d {{ path }} {{ mode }} {{ user }} {{ group }} -"


class InstallerOptions(BaseModel):
    """Installer runtime options."""
    log_level: str = Field(default="INFO")
    work_dir: str = Field(default=".", description="Scratch directory for downloads")
    run_script: str = Field(default="run-nginx", description="Companion run-script to install")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()


class RepositoryConfig(BaseModel):
    """Vendor package repository configuration."""
    repository_url: str = Field(default="http://nginx.org/packages")
    component: str = Field(default="nginx")
    package_name: str = Field(default="nginx")
    binary_name: str = Field(default="nginx")
    package_binary_path: str = Field(
        default="usr/sbin/nginx",
        description="Path of the binary inside the package payload",
    )
    supported_codenames: List[str] = Field(
        default_factory=lambda: [
            "xenial", "bionic", "focal", "jammy", "noble",
            "buster", "bullseye", "bookworm", "trixie",
        ]
    )
    source_template: str = Field(default=DEFAULT_SOURCE_TEMPLATE)

    @field_validator("package_binary_path")
    @classmethod
    def validate_relative(cls, v):
        """Payload paths are relative to the extraction root."""
        if not v or v.startswith("/"):
            raise ValueError(f"package_binary_path must be relative: {v!r}")
        return v


class SystemPathsConfig(BaseModel):
    """Host paths touched by the installer."""
    keyring_path: str = Field(default="/usr/share/keyrings/nginx-archive-keyring.gpg")
    sources_list: str = Field(default="/etc/apt/sources.list.d/nginx.list")
    tmpfiles_path: str = Field(default="/etc/tmpfiles.d/nginx.conf")
    directive_template: str = Field(default=DEFAULT_DIRECTIVE_TEMPLATE)
    log_dir: str = Field(default="/var/log/nginx")
    cache_dir: str = Field(default="/var/cache/nginx")
    os_release_path: str = Field(default="/etc/os-release")
    system_account: bool = Field(default=True)


class ProxyConfig(BaseModel):
    """Proxy configuration passed to apt-get."""
    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None
    no_proxy: str = Field(default="localhost,127.0.0.1")


class InstallerSettings(BaseModel):
    """Main settings model."""
    installer: InstallerOptions = Field(default_factory=InstallerOptions)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    system: SystemPathsConfig = Field(default_factory=SystemPathsConfig)
    proxy: Optional[ProxyConfig] = None

    model_config = ConfigDict(extra="ignore")
