"""
nginx-installer - Provision a host with the vendor nginx binary.

Extracts the standalone nginx binary from the signed nginx.org package,
creates a dedicated service user and lays out the runtime directories so the
binary can run as an unprivileged service process.
"""

__version__ = "1.0.0"
__author__ = "nginx-installer Development Team"

# Re-export key components for easier access
from nginx_installer.errors import (
    ErrorKind,
    InstallerError,
    PreconditionError,
    StepFailedError,
)
from nginx_installer.models.config import InstallerSettings
from nginx_installer.models.install import InstallConfig

__all__ = [
    "ErrorKind",
    "InstallerError",
    "PreconditionError",
    "StepFailedError",
    "InstallConfig",
    "InstallerSettings",
]
