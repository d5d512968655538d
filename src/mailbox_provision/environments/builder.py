"""Isolated Python environment builder."""

from pathlib import Path

from mailbox_provision.commands import check_command
from mailbox_provision.errors import BuildError, CommandError
from mailbox_provision.logging import get_logger

logger = get_logger(__name__)

PYTHON = "python3"


def build_virtualenv(target: Path) -> None:
    """Create a fresh virtualenv rooted at target."""
    logger.debug({"event": "virtualenv_build", "target": str(target), "python": PYTHON})
    try:
        check_command(["virtualenv", f"-p{PYTHON}", str(target)])
    except CommandError as e:
        raise BuildError(
            f"virtualenv failed for {target}: {e.stderr.strip() or e.stdout.strip()}",
            details={"target": str(target), "returncode": e.returncode}
        ) from e
