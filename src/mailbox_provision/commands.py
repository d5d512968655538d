"""Blocking command execution with captured output."""

import os
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from mailbox_provision.errors import CommandError
from mailbox_provision.logging import get_logger

logger = get_logger(__name__)


def run_command(
    cmd: Sequence[str],
    env_vars: Optional[dict[str, str]] = None,
    cwd: Optional[Path] = None,
) -> tuple[int, str, str]:
    """Run command and return (returncode, stdout, stderr).

    Output is captured rather than streamed to the terminal; it only shows
    up in debug logs or in the error raised by ``check_command``.
    """
    cmd = [str(part) for part in cmd]
    cmd_env = {**os.environ, **(env_vars or {})}

    logger.debug({"event": "cmd_exec", "cmd": cmd, "cwd": str(cwd) if cwd else None})

    try:
        process = subprocess.run(
            cmd,
            cwd=cwd,
            env=cmd_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError:
        raise CommandError(cmd, 127, "", f"Command not found: {cmd[0]}")

    if process.stdout:
        logger.debug({"event": "cmd_stdout", "cmd": cmd, "output": process.stdout})
    if process.stderr:
        logger.debug({"event": "cmd_stderr", "cmd": cmd, "output": process.stderr})

    logger.debug({"event": "cmd_complete", "cmd": cmd, "returncode": process.returncode})

    return process.returncode, process.stdout, process.stderr


def check_command(
    cmd: Sequence[str],
    env_vars: Optional[dict[str, str]] = None,
    cwd: Optional[Path] = None,
) -> str:
    """Run command, raising CommandError on a non-zero exit. Returns stdout."""
    returncode, stdout, stderr = run_command(cmd, env_vars=env_vars, cwd=cwd)
    if returncode != 0:
        raise CommandError(cmd, returncode, stdout, stderr)
    return stdout
