"""Backup directory and encryption key."""

import base64
import os
import secrets
from pathlib import Path

from mailbox_provision.logging import get_logger

logger = get_logger(__name__)

SECRET_KEY_NAME = "secret_key.txt"
SECRET_KEY_BYTES = 2048


def ensure_backup_key(storage_root: Path) -> Path:
    """Create the backup directory and its random encryption key.

    An existing key is never replaced.
    """
    backup_dir = storage_root / "backup"
    backup_dir.mkdir(parents=True, exist_ok=True)

    key_path = backup_dir / SECRET_KEY_NAME
    if key_path.exists():
        return key_path

    key = base64.encodebytes(secrets.token_bytes(SECRET_KEY_BYTES))
    fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(key)

    logger.info({"event": "backup_key_created", "path": str(key_path)})
    return key_path
