"""Isolated Python environment provisioning."""

from mailbox_provision.environments.environment import (
    destroy_environment,
    ensure_environment,
    inspect_environment,
    load_record,
)
from mailbox_provision.environments.builder import build_virtualenv
from mailbox_provision.environments.marker import MARKER_NAME, read_marker, write_marker

__all__ = [
    "ensure_environment",
    "inspect_environment",
    "destroy_environment",
    "load_record",
    "build_virtualenv",
    "MARKER_NAME",
    "read_marker",
    "write_marker",
]
