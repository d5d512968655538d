"""Exclusive-run guard so scheduled and manual setup runs never overlap."""

import fcntl
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from mailbox_provision.errors import AlreadyRunningError
from mailbox_provision.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def exclusive_run(lock_path: Path) -> Iterator[None]:
    """Hold an exclusive lock on lock_path for the duration of the context.

    Does not wait: if another process holds the lock, AlreadyRunningError
    is raised immediately.
    """
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with lock_path.open("a+", encoding="utf-8") as lock_handle:
        try:
            fcntl.flock(lock_handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as e:
            raise AlreadyRunningError(lock_path) from e

        lock_handle.seek(0)
        lock_handle.truncate()
        lock_handle.write(f"{os.getpid()}\n")
        lock_handle.flush()
        logger.debug({"event": "lock_acquired", "path": str(lock_path)})
        try:
            yield
        finally:
            fcntl.flock(lock_handle.fileno(), fcntl.LOCK_UN)
            logger.debug({"event": "lock_released", "path": str(lock_path)})
