"""Install request models."""

from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InstallConfig(BaseModel):
    """Values parsed from the command line for one run."""
    signing_key_path: str = Field(..., description="Vendor package signing key")
    install_path: str = Field(default="/opt/nginx")
    service_user: str = Field(default="nginx")
    pid_folder: str = Field(default="/var/run/nginx")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("signing_key_path", "install_path", "service_user", "pid_folder")
    @classmethod
    def validate_not_empty(cls, v):
        """Every field must be set before provisioning starts."""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("signing_key_path")
    @classmethod
    def validate_key_exists(cls, v):
        """Signing key must reference an existing file."""
        if not Path(v).is_file():
            raise ValueError(f"signing key not found: {v}")
        return v

    @property
    def bin_dir(self) -> Path:
        return Path(self.install_path) / "bin"


class DirectoryLayout(BaseModel):
    """Directories owned by the service user."""
    install_path: str
    log_dir: str
    cache_dir: str

    model_config = ConfigDict(frozen=True)

    @property
    def directories(self) -> List[Path]:
        """All directories, in creation order."""
        root = Path(self.install_path)
        return [
            root,
            root / "bin",
            root / "config",
            root / "log",
            Path(self.log_dir),
            Path(self.cache_dir),
        ]

    @property
    def roots(self) -> List[Path]:
        """Top-level directories chowned recursively."""
        return [Path(self.install_path), Path(self.log_dir), Path(self.cache_dir)]


class BootDirective(BaseModel):
    """A tmpfiles.d rule recreating a volatile directory at boot."""
    path: str
    user: str
    group: str
    mode: str = Field(default="0744")
    type: str = Field(default="d")

    model_config = ConfigDict(frozen=True)
