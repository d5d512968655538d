"""Development CA certificate installation."""

import shutil

from mailbox_provision.commands import check_command
from mailbox_provision.config import SetupConfig
from mailbox_provision.logging import get_logger

logger = get_logger(__name__)

CA_CERT_NAME = "mailinabox-ca.crt"


def install_custom_ca(config: SetupConfig) -> bool:
    """Trust a CA certificate shipped in the source checkout, if there is one.

    Only meant for development setups, where manually installed
    certificates are signed by a local CA.
    """
    source = config.source_dir / CA_CERT_NAME
    if not source.is_file():
        return False

    logger.info("Custom CA certificate detected. Installing...")
    target = config.ca_cert_dir / CA_CERT_NAME
    target.parent.mkdir(parents=True, exist_ok=True)
    target.unlink(missing_ok=True)
    shutil.copyfile(source, target)

    check_command(["update-ca-certificates", "--fresh"])
    return True
