"""Provisioning providers for nginx-installer."""

from nginx_installer.providers.base import BaseProvider, ProviderStatus
from nginx_installer.providers.registry import ProviderRegistry

__all__ = [
    "BaseProvider",
    "ProviderStatus",
    "ProviderRegistry",
]
