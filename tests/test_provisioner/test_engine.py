"""Tests for the provisioning pipeline."""

import os
import stat
import subprocess
from pathlib import Path

import pytest
import pytest_asyncio
from jinja2 import UndefinedError
from unittest.mock import AsyncMock

from nginx_installer.errors import ErrorKind, PreconditionError, StepFailedError
from nginx_installer.providers import ProviderRegistry
from nginx_installer.providers.bootdirective import BootDirectiveProvider
from nginx_installer.providers.directory import DirectoryProvider
from nginx_installer.providers.install import InstallProvider
from nginx_installer.providers.package import PackageProvider
from nginx_installer.providers.user import UserProvider
from nginx_installer.provisioner.engine import Provisioner


@pytest.fixture(autouse=True)
def tools_available(monkeypatch):
    """Pretend the external tools are installed."""
    monkeypatch.setattr("nginx_installer.providers.user.require_tools", lambda tools: None)
    monkeypatch.setattr("nginx_installer.providers.package.require_tools", lambda tools: None)


@pytest_asyncio.fixture
async def registry(settings, accounts, apt):
    """A registry of real providers wired to fake clients."""
    registry = ProviderRegistry()
    providers = {
        "user": UserProvider(accounts=accounts),
        "directory": DirectoryProvider(accounts=accounts),
        "bootdirective": BootDirectiveProvider(),
        "package": PackageProvider(apt=apt),
        "install": InstallProvider(accounts=accounts),
    }
    for name, provider in providers.items():
        registry.register(name, provider)
    for provider in providers.values():
        await provider.initialize(settings, registry)
    return registry


def _as_root():
    return 0


def _as_user():
    return 1000


@pytest.mark.asyncio
class TestProvisioner:
    """Test the Provisioner pipeline."""

    async def test_end_to_end(self, registry, accounts, settings, install_config):
        result = await Provisioner(registry, geteuid=_as_root).provision(install_config)

        assert result.ok
        assert result.ran_steps == ["user", "directory", "bootdirective", "package", "install"]

        assert "nginx" in accounts.users
        install_path = Path(install_config.install_path)
        for sub in ("bin", "config", "log"):
            assert (install_path / sub).is_dir()

        assert Path(settings.system.tmpfiles_path).read_text() == "d /var/run/nginx 0744 nginx nginx -\n"

        binary = install_path / "bin" / "nginx"
        script = install_path / "bin" / "run-nginx"
        assert os.access(binary, os.X_OK)
        assert script.stat().st_mode & stat.S_IXOTH
        assert (binary, "nginx", "nginx", False) in accounts.chowned
        assert (script, "nginx", "nginx", False) in accounts.chowned

    async def test_non_root_mutates_nothing(self, registry, accounts, apt, settings, install_config):
        result = await Provisioner(registry, geteuid=_as_user).provision(install_config)

        assert not result.ok
        assert isinstance(result.error, PreconditionError)
        assert result.error.kind == ErrorKind.PRECONDITION
        assert result.steps == []
        assert accounts.created == []
        assert apt.calls == []
        assert not Path(install_config.install_path).exists()
        assert not Path(settings.system.tmpfiles_path).exists()

    async def test_missing_run_script_mutates_nothing(self, registry, accounts, settings, install_config):
        Path(settings.installer.run_script).unlink()

        result = await Provisioner(registry, geteuid=_as_root).provision(install_config)

        assert isinstance(result.error, PreconditionError)
        assert accounts.created == []
        assert not Path(install_config.install_path).exists()

    async def test_download_failure_skips_installer(self, registry, accounts, apt, settings, install_config):
        """Earlier side effects persist; nothing is installed."""
        apt.fail_on = "download"

        result = await Provisioner(registry, geteuid=_as_root).provision(install_config)

        assert not result.ok
        assert result.failed_step == "package"
        assert result.ran_steps == ["user", "directory", "bootdirective"]
        assert isinstance(result.error, StepFailedError)
        assert result.error.step_id == "package"

        assert "nginx" in accounts.users
        assert Path(settings.system.tmpfiles_path).exists()
        bin_dir = Path(install_config.install_path) / "bin"
        assert bin_dir.is_dir()
        assert list(bin_dir.iterdir()) == []

    async def test_command_failure_becomes_step_failure(self, registry, accounts, install_config):
        user_provider = registry.get_provider("user")
        error = subprocess.CalledProcessError(1, ["useradd", "nginx"])
        error.stderr = "useradd: cannot lock /etc/passwd"
        user_provider.present = AsyncMock(side_effect=error)

        result = await Provisioner(registry, geteuid=_as_root).provision(install_config)

        assert result.failed_step == "user"
        assert result.ran_steps == []
        assert "cannot lock /etc/passwd" in str(result.error)
        assert result.error.cause is error

    async def test_binary_name_clash_in_work_dir(self, registry, settings, install_config):
        """An existing work_dir/nginx directory is neither installed nor modified."""
        clash = Path(settings.installer.work_dir) / "nginx"
        clash.mkdir()
        (clash / "nginx.conf").write_text("worker_processes 1;\n")

        result = await Provisioner(registry, geteuid=_as_root).provision(install_config)

        assert result.ok
        binary = Path(install_config.install_path) / "bin" / "nginx"
        assert binary.is_file()
        assert binary.read_bytes() == b"\x7fELF"
        assert sorted(p.name for p in clash.iterdir()) == ["nginx.conf"]
        assert sorted(p.name for p in Path(settings.installer.work_dir).iterdir()) == ["nginx"]

    async def test_invalid_directive_template_mutates_nothing(self, registry, accounts, apt, settings, install_config):
        settings.system.directive_template = "d {{ pth }}"

        result = await Provisioner(registry, geteuid=_as_root).provision(install_config)

        assert isinstance(result.error, PreconditionError)
        assert "directive template" in str(result.error)
        assert result.steps == []
        assert accounts.created == []
        assert apt.calls == []

    async def test_template_error_becomes_step_failure(self, registry, install_config):
        directive_provider = registry.get_provider("bootdirective")
        error = UndefinedError("'pth' is undefined")
        directive_provider.present = AsyncMock(side_effect=error)

        result = await Provisioner(registry, geteuid=_as_root).provision(install_config)

        assert result.failed_step == "bootdirective"
        assert result.ran_steps == ["user", "directory"]
        assert isinstance(result.error, StepFailedError)
        assert result.error.cause is error

    async def test_rerun_is_idempotent(self, registry, accounts, settings, install_config):
        provisioner = Provisioner(registry, geteuid=_as_root)

        first = await provisioner.provision(install_config)
        second = await provisioner.provision(install_config)

        assert first.ok and second.ok
        assert accounts.created == ["nginx"]
        assert Path(settings.system.tmpfiles_path).read_text().count("\n") == 1

    async def test_missing_provider(self, settings, install_config):
        registry = ProviderRegistry()

        with pytest.raises(RuntimeError):
            await Provisioner(registry, geteuid=_as_root).provision(install_config)
