"""Shared fixtures and fake external clients."""

from pathlib import Path
from typing import List, Optional, Set, Tuple

import pytest

from nginx_installer.models.config import InstallerSettings
from nginx_installer.models.install import InstallConfig


class FakeAccounts:
    """In-memory stand-in for AccountsClient."""

    def __init__(self, users: Optional[Set[str]] = None):
        self.users = set(users or ())
        self.created: List[str] = []
        self.chowned: List[Tuple[Path, str, str, bool]] = []

    async def user_exists(self, name: str) -> bool:
        return name in self.users

    async def create_user(self, name: str) -> None:
        self.users.add(name)
        self.created.append(name)

    async def chown(self, path: Path, user: str, group: str, recursive: bool = False) -> None:
        if user not in self.users:
            raise LookupError(f"no such user: {user}")
        self.chowned.append((Path(path), user, group, recursive))


class FakeApt:
    """In-memory stand-in for AptClient building a fake package payload."""

    def __init__(self, binary_path: str = "usr/sbin/nginx", fail_on: Optional[str] = None):
        self.binary_path = binary_path
        self.fail_on = fail_on
        self.calls: List[str] = []
        self.sources: List[str] = []

    def _record(self, name: str):
        self.calls.append(name)
        if self.fail_on == name:
            raise OSError(f"{name} failed")

    async def import_key(self, key_path: Path, keyring_path: Path) -> None:
        self._record("import_key")

    async def add_sources(self, sources_list: Path, entries: List[str]) -> int:
        self._record("add_sources")
        new = [e for e in entries if e not in self.sources]
        self.sources.extend(new)
        return len(new)

    async def refresh_index(self) -> None:
        self._record("refresh_index")

    async def download(self, package: str, work_dir: Path) -> Path:
        self._record("download")
        archive = work_dir / f"{package}_1.14.0-1_amd64.deb"
        archive.write_bytes(b"!<arch>")
        return archive

    async def extract(self, archive: Path, scratch_dir: Path) -> None:
        self._record("extract")
        binary = scratch_dir / self.binary_path
        binary.parent.mkdir(parents=True, exist_ok=True)
        binary.write_bytes(b"\x7fELF")


@pytest.fixture
def key_file(tmp_path):
    """A signing key file on disk."""
    key = tmp_path / "key.pem"
    key.write_text("-----BEGIN PGP PUBLIC KEY BLOCK-----\n")
    return key


@pytest.fixture
def settings(tmp_path):
    """Settings with every host path redirected under tmp_path."""
    work_dir = tmp_path / "work"
    work_dir.mkdir(exist_ok=True)
    run_script = tmp_path / "run-nginx"
    run_script.write_text("#!/bin/sh\nexec \"$(dirname \"$0\")/nginx\" \"$@\"\n")
    os_release = tmp_path / "os-release"
    os_release.write_text("ID=ubuntu\nVERSION_CODENAME=bionic\n")

    return InstallerSettings(
        installer={"work_dir": str(work_dir), "run_script": str(run_script)},
        system={
            "keyring_path": str(tmp_path / "keyrings" / "nginx.gpg"),
            "sources_list": str(tmp_path / "sources.list.d" / "nginx.list"),
            "tmpfiles_path": str(tmp_path / "tmpfiles.d" / "nginx.conf"),
            "log_dir": str(tmp_path / "var" / "log" / "nginx"),
            "cache_dir": str(tmp_path / "var" / "cache" / "nginx"),
            "os_release_path": str(os_release),
        },
    )


@pytest.fixture
def install_config(tmp_path, key_file):
    """An InstallConfig installing under tmp_path."""
    return InstallConfig(
        signing_key_path=str(key_file),
        install_path=str(tmp_path / "opt" / "nginx"),
        service_user="nginx",
        pid_folder="/var/run/nginx",
    )


@pytest.fixture
def accounts():
    """A fake accounts client with no users."""
    return FakeAccounts()


@pytest.fixture
def apt():
    """A fake apt client."""
    return FakeApt()
