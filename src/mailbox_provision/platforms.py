"""Platform detection."""
import platform
import shlex
from pathlib import Path
from typing import Dict

OS_RELEASE_PATH = Path("/etc/os-release")


def parse_os_release(path: Path = OS_RELEASE_PATH) -> Dict[str, str]:
    """Parse an os-release file into a dict of its KEY=value pairs."""
    info = {}
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value.strip("\"'")]
        info[key] = parts[0] if parts else ""
    return info


def get_platform_tag(path: Path = OS_RELEASE_PATH) -> str:
    """Get the tag identifying the OS the environment is built under.

    The tag is only ever compared for equality, e.g. ``ubuntu-22.04``.
    """
    try:
        info = parse_os_release(path)
    except OSError:
        info = {}

    vendor = info.get("ID") or platform.system()
    version = info.get("VERSION_ID") or platform.release()
    return f"{vendor}-{version}".lower()
