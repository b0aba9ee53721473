"""Package source and artifact models."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field


class OsRelease(BaseModel):
    """Distribution identity read from os-release."""
    id: str = Field(..., description="Distribution id, e.g. ubuntu")
    codename: Optional[str] = None


class SourceEntry(BaseModel):
    """One apt source-list entry."""
    kind: Literal["deb", "deb-src"]
    repository_url: str
    distro: str
    codename: str
    component: str
    keyring: str


class PackageArtifact(BaseModel):
    """A downloaded package archive and its scratch extraction tree."""
    archive: Path
    scratch_dir: Path
