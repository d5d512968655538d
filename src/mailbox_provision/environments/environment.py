"""Environment lifecycle management.

Each run decides, from what is on disk, whether the environment must be
created, destroyed and rebuilt, or reused. The decision is made once per
call, in this order, first match wins:

    MISSING            directory absent         -> create
    NO_MARKER          marker absent/unusable   -> destroy, create
    PLATFORM_MISMATCH  marker tag differs       -> destroy, create
    MATCH              marker tag matches       -> reuse

Creating always ends with writing the marker, so a marker with tag T means
a build under platform T completed.
"""
import logging
import shutil
from pathlib import Path
from typing import Callable, Optional

from mailbox_provision.environments.builder import build_virtualenv
from mailbox_provision.environments.marker import MARKER_NAME, read_marker, write_marker
from mailbox_provision.errors import BuildError, ProvisioningError
from mailbox_provision.logging import get_logger, log_with_data
from mailbox_provision.types import (
    EnvironmentHandle,
    EnvironmentRecord,
    EnvironmentState,
    ProvisioningStep,
)

logger = get_logger(__name__)

Builder = Callable[[Path], None]


def load_record(path: Path) -> Optional[EnvironmentRecord]:
    """Get the persisted record, or None if there is no valid marker."""
    path = Path(path)
    if not path.is_dir():
        return None
    tag = read_marker(path)
    if tag is None:
        return None
    return EnvironmentRecord(path=path, platform_tag=tag)


def _classify(
    path: Path, current_platform: str
) -> tuple[EnvironmentState, Optional[EnvironmentRecord]]:
    if not path.is_dir():
        return EnvironmentState.MISSING, None

    record = load_record(path)
    if record is None:
        return EnvironmentState.NO_MARKER, None
    if record.platform_tag != current_platform:
        return EnvironmentState.PLATFORM_MISMATCH, record
    return EnvironmentState.MATCH, record


def inspect_environment(path: Path, current_platform: str) -> EnvironmentState:
    """Classify the environment at path without touching it."""
    state, _ = _classify(Path(path), current_platform)
    return state


def destroy_environment(path: Path) -> None:
    """Recursively remove the environment directory.

    Irreversible: anything inside the directory is lost.
    """
    path = Path(path)
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return
    except OSError as e:
        raise ProvisioningError(ProvisioningStep.REMOVAL, path, e) from e


def _create_environment(path: Path, current_platform: str, builder: Builder) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ProvisioningError(ProvisioningStep.CREATION, path, e) from e

    try:
        builder(path)
    except Exception as e:
        raise ProvisioningError(ProvisioningStep.BUILD, path, e) from e

    try:
        built = any(p.name != MARKER_NAME for p in path.iterdir())
    except OSError as e:
        raise ProvisioningError(ProvisioningStep.BUILD, path, e) from e
    if not built:
        error = BuildError(f"Builder left {path} empty", details={"target": str(path)})
        raise ProvisioningError(ProvisioningStep.BUILD, path, error)

    try:
        write_marker(path, current_platform)
    except OSError as e:
        raise ProvisioningError(ProvisioningStep.MARKER_WRITE, path, e) from e


def ensure_environment(
    path: Path,
    current_platform: str,
    builder: Builder = build_virtualenv,
) -> EnvironmentHandle:
    """Make sure a built environment for current_platform exists at path.

    Raises:
        ValueError: If current_platform is empty
        ProvisioningError: If removal, creation, build or marker write fails
    """
    if not current_platform or not current_platform.strip():
        raise ValueError("current_platform must be a non-empty string")

    current_platform = current_platform.strip()
    path = Path(path)
    state, record = _classify(path, current_platform)

    if state == EnvironmentState.NO_MARKER:
        log_with_data(logger, logging.WARNING, "Re-creating Python environment...", {
            "path": str(path),
            "reason": state.value,
        })
    elif state == EnvironmentState.PLATFORM_MISMATCH:
        log_with_data(
            logger,
            logging.WARNING,
            "Existing management environment is from an earlier version of the OS you're running.",
            {
                "path": str(path),
                "stored_platform": record.platform_tag,
                "current_platform": current_platform,
            },
        )
        log_with_data(logger, logging.WARNING, "Re-creating Python environment...", {
            "path": str(path),
            "reason": state.value,
        })

    if state in (EnvironmentState.NO_MARKER, EnvironmentState.PLATFORM_MISMATCH):
        destroy_environment(path)

    if state != EnvironmentState.MATCH:
        _create_environment(path, current_platform, builder)

    return EnvironmentHandle(path=path, platform_tag=current_platform, state=state)
