"""Mail appliance management daemon provisioning."""

from mailbox_provision.types import (
    EnvironmentHandle,
    EnvironmentRecord,
    EnvironmentState,
    ProvisioningStep,
    VendorAsset,
)
from mailbox_provision.environments.environment import (
    destroy_environment,
    ensure_environment,
    inspect_environment,
)
from mailbox_provision.errors import (
    MailboxProvisionError,
    ProvisioningError,
    InstallError,
    BuildError,
    CommandError,
    DownloadError,
    ChecksumError,
    ConfigError,
    AlreadyRunningError,
)

__version__ = "0.1.0"

__all__ = [
    # Types
    "EnvironmentHandle",
    "EnvironmentRecord",
    "EnvironmentState",
    "ProvisioningStep",
    "VendorAsset",

    # Environment functions
    "ensure_environment",
    "inspect_environment",
    "destroy_environment",

    # Error types
    "MailboxProvisionError",
    "ProvisioningError",
    "InstallError",
    "BuildError",
    "CommandError",
    "DownloadError",
    "ChecksumError",
    "ConfigError",
    "AlreadyRunningError",
]
