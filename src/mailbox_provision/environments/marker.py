"""Environment marker persistence.

The marker is a small file at the environment root holding the platform tag
the environment was built under. It is the only evidence that a build
completed, so it is written last and atomically.
"""
import os
import tempfile
from pathlib import Path
from typing import Optional

from mailbox_provision.logging import get_logger

logger = get_logger(__name__)

MARKER_NAME = ".oscode"


def marker_path(env_path: Path) -> Path:
    return env_path / MARKER_NAME


def read_marker(env_path: Path) -> Optional[str]:
    """Read the stored platform tag.

    Returns None when the marker is absent, unreadable, undecodable or
    empty; callers treat all of those the same way.
    """
    path = marker_path(env_path)
    try:
        tag = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.debug({"event": "marker_unreadable", "path": str(path), "error": str(e)})
        return None

    return tag or None


def write_marker(env_path: Path, platform_tag: str) -> None:
    """Write the platform tag to the marker via temp file and rename."""
    path = marker_path(env_path)
    fd, tmp_path = tempfile.mkstemp(dir=str(env_path), prefix=f"{MARKER_NAME}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(f"{platform_tag}\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
