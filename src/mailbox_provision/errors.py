"""Error handling for mailbox provisioning."""
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from mailbox_provision.types import ProvisioningStep


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log an error with context."""
    logger = logger or logging.getLogger("mailbox_provision")

    error_info = {
        "error_type": error.__class__.__name__,
        "error_message": str(error)
    }
    if context:
        error_info["context"] = context
    if isinstance(error, MailboxProvisionError):
        error_info["details"] = error.details

    logger.error("Provisioning failed", extra={"data": error_info})


class MailboxProvisionError(Exception):
    """Base error class for mailbox provisioning."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class CommandError(MailboxProvisionError):
    """External command exited non-zero."""
    def __init__(self, cmd: Sequence[str], returncode: int, stdout: str = "", stderr: str = ""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Command {' '.join(self.cmd)!r} failed with code {returncode}\n"
            f"stdout: {stdout}\n"
            f"stderr: {stderr}",
            details={"cmd": self.cmd, "returncode": returncode}
        )


class InstallError(MailboxProvisionError):
    """Package installation failed."""


class BuildError(MailboxProvisionError):
    """Environment build failed."""


class DownloadError(MailboxProvisionError):
    """Asset download failed."""
    def __init__(self, url: str, reason: str):
        super().__init__(
            f"Failed to download {url}: {reason}",
            details={"url": url, "reason": reason}
        )


class ChecksumError(MailboxProvisionError):
    """Downloaded file did not match its pinned checksum."""
    def __init__(self, url: str, expected: str, actual: str):
        super().__init__(
            f"Download of {url} did not match expected checksum.",
            details={"url": url, "expected": expected, "actual": actual}
        )


class ConfigError(MailboxProvisionError):
    """Invalid or unreadable configuration."""


class AlreadyRunningError(MailboxProvisionError):
    """Another setup run holds the exclusive-run lock."""
    def __init__(self, lock_path: Path):
        super().__init__(
            f"Another setup run is in progress (lock held on {lock_path})",
            details={"lock_path": str(lock_path)}
        )


class ProvisioningError(MailboxProvisionError):
    """Environment provisioning failed at a specific step."""
    def __init__(self, step: ProvisioningStep, path: Path, cause: BaseException):
        self.step = step
        self.path = path
        self.cause = cause
        super().__init__(
            f"Environment {step.value} failed for {path}: {cause}",
            details={
                "step": step.value,
                "path": str(path),
                "cause_type": cause.__class__.__name__,
                "cause": str(cause),
            }
        )
