"""Management daemon service registration."""

import os
from pathlib import Path

from mailbox_provision.commands import check_command
from mailbox_provision.config import SetupConfig
from mailbox_provision.logging import get_logger

logger = get_logger(__name__)

START_SCRIPT = """#!/bin/bash
# Set character encoding flags to ensure that any non-ASCII don't cause problems.
export LANGUAGE=en_US.UTF-8
export LC_ALL=en_US.UTF-8
export LANG=en_US.UTF-8
export LC_TYPE=en_US.UTF-8

source {env_dir}/bin/activate
exec python {source_dir}/management/daemon.py
"""


def write_start_script(config: SetupConfig) -> Path:
    """Write the script systemd uses to start the daemon."""
    script = config.start_script
    script.parent.mkdir(parents=True, exist_ok=True)
    script.write_text(
        START_SCRIPT.format(env_dir=config.env_dir, source_dir=config.source_dir.resolve())
    )
    os.chmod(script, 0o755)
    return script


def install_service_unit(config: SetupConfig) -> Path:
    """Install and enable the daemon's systemd unit so it survives reboots."""
    unit = config.unit_path

    # An older layout installed the unit as a symlink; replace it with a copy
    if unit.is_symlink() or unit.exists():
        unit.unlink()
    unit.write_bytes(config.unit_source.read_bytes())

    check_command(["systemctl", "link", "-f", str(unit)])
    check_command(["systemctl", "daemon-reload"])
    check_command(["systemctl", "enable", unit.name])

    logger.info({"event": "service_installed", "unit": str(unit)})
    return unit


def restart_service(name: str) -> None:
    check_command(["systemctl", "restart", name])
