"""Nightly maintenance schedule."""

import random
from pathlib import Path
from typing import Optional

from mailbox_provision.config import SetupConfig
from mailbox_provision.logging import get_logger

logger = get_logger(__name__)

CRON_TEMPLATE = """# Mail-in-a-Box --- Do not edit / will be overwritten on update.
# Run nightly tasks: backup, status checks.
{minute} {hour} * * *\troot\t(cd {source_dir} && management/daily_tasks.sh)
"""


def write_nightly_cron(config: SetupConfig, minute: Optional[int] = None) -> Path:
    """Schedule backups and status checks at a random minute of the nightly hour."""
    if minute is None:
        minute = random.randrange(60)
    if not 0 <= minute <= 59:
        raise ValueError(f"minute must be between 0 and 59, got {minute}")

    path = config.cron_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        CRON_TEMPLATE.format(
            minute=minute,
            hour=config.cron_hour,
            source_dir=config.source_dir.resolve(),
        )
    )

    logger.debug({"event": "cron_written", "path": str(path), "minute": minute})
    return path
