"""Core type definitions"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class EnvironmentState(Enum):
    """Observable condition of an environment directory, in decision order"""
    MISSING = "missing"
    NO_MARKER = "no_marker"
    PLATFORM_MISMATCH = "platform_mismatch"
    MATCH = "match"


class ProvisioningStep(Enum):
    REMOVAL = "removal"
    CREATION = "creation"
    BUILD = "build"
    MARKER_WRITE = "marker_write"


@dataclass(frozen=True)
class EnvironmentRecord:
    """Persisted marker describing the currently built environment"""
    path: Path
    platform_tag: str

    @property
    def exists(self) -> bool:
        return self.path.is_dir()


@dataclass(frozen=True)
class EnvironmentHandle:
    """Environment that is known to be built for the current platform"""
    path: Path
    platform_tag: str
    state: EnvironmentState

    @property
    def rebuilt(self) -> bool:
        return self.state != EnvironmentState.MATCH

    @property
    def bin_dir(self) -> Path:
        return self.path / "bin"

    @property
    def python_bin(self) -> Path:
        return self.bin_dir / "python"

    @property
    def pip_bin(self) -> Path:
        return self.bin_dir / "pip"


@dataclass(frozen=True)
class VendorAsset:
    """Pinned static web asset"""
    name: str
    url: str
    sha1: str
    archive_root: Optional[str] = None

    @property
    def is_archive(self) -> bool:
        return self.archive_root is not None
