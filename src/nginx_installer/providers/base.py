"""Base provider interface."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

from nginx_installer.models.config import InstallerSettings
from nginx_installer.models.install import InstallConfig

if TYPE_CHECKING:
    from nginx_installer.providers.registry import ProviderRegistry


class ProviderStatus(Enum):
    """Provider resource status."""
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"
    ERROR = "error"


class BaseProvider(ABC):
    """Base provider interface that all provisioning steps implement."""

    @abstractmethod
    async def initialize(self, settings: InstallerSettings, registry: "ProviderRegistry") -> None:
        """Initialize the provider with settings and the registry."""
        pass

    @abstractmethod
    async def status(self, config: InstallConfig) -> ProviderStatus:
        """Check the current status of the resource."""
        pass

    @abstractmethod
    async def present(self, config: InstallConfig) -> None:
        """Ensure the resource is present."""
        pass

    @abstractmethod
    async def validate_config(self, config: InstallConfig) -> None:
        """Check read-only preconditions; raise PreconditionError on failure."""
        pass
