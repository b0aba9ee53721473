"""os-release parsing."""

import logging
import shlex
from pathlib import Path
from typing import Dict, Iterable

from nginx_installer.errors import PreconditionError
from nginx_installer.models.package import OsRelease


logger = logging.getLogger(__name__)


def parse_os_release(content: str) -> Dict[str, str]:
    """Parse os-release KEY=value lines, unquoting values."""
    fields: Dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            logger.debug(f"Skipping malformed os-release line: {line}")
            continue
        fields[key.strip()] = parts[0] if parts else ""
    return fields


def read_os_release(path: Path) -> OsRelease:
    """Read distribution id and codename from an os-release file."""
    try:
        content = Path(path).read_text()
    except OSError as e:
        raise PreconditionError(f"Cannot read {path}: {e}") from e

    fields = parse_os_release(content)
    codename = fields.get("VERSION_CODENAME") or fields.get("UBUNTU_CODENAME") or None
    return OsRelease(id=fields.get("ID", "").lower(), codename=codename)


def derive_codename(release: OsRelease, supported: Iterable[str]) -> str:
    """Return the release codename, or fail if it is missing or unknown."""
    supported = list(supported)
    if not release.codename:
        raise PreconditionError(f"Could not determine release codename for '{release.id}'")
    if release.codename not in supported:
        raise PreconditionError(
            f"Unsupported release codename '{release.codename}' "
            f"(supported: {', '.join(supported)})"
        )
    return release.codename
