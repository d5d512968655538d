"""Management daemon setup run."""

from typing import Optional

from mailbox_provision.assets.vendor import install_vendor_assets
from mailbox_provision.backup import ensure_backup_key
from mailbox_provision.config import SetupConfig
from mailbox_provision.environments.environment import ensure_environment
from mailbox_provision.guard import exclusive_run
from mailbox_provision.logging import get_logger
from mailbox_provision.packages import installer
from mailbox_provision.platforms import get_platform_tag
from mailbox_provision.services.certificates import install_custom_ca
from mailbox_provision.services.cron import write_nightly_cron
from mailbox_provision.services.daemon import (
    install_service_unit,
    restart_service,
    write_start_script,
)
from mailbox_provision.types import EnvironmentHandle

logger = get_logger(__name__)


def provision_environment(config: SetupConfig, platform_tag: str) -> EnvironmentHandle:
    """Ensure the daemon's environment and install its Python dependencies."""
    config.install_dir.mkdir(parents=True, exist_ok=True)
    env = ensure_environment(config.env_dir, platform_tag)

    # Runs whichever way the environment was obtained
    installer.upgrade_self(env)

    installer.pip_install(env, [*config.env_packages, *installer.platform_packages(platform_tag)])
    return env


async def run_setup(config: SetupConfig, platform_tag: Optional[str] = None) -> EnvironmentHandle:
    """Install the management daemon, its environment and its schedule."""
    platform_tag = platform_tag or get_platform_tag()

    with exclusive_run(config.lock_path):
        logger.info("Installing system management daemon...")

        installer.remove_legacy_packages()
        installer.install(config.system_packages)
        installer.pip_install_system(
            [*config.system_python_packages, *installer.platform_packages(platform_tag)]
        )

        env = provision_environment(config, platform_tag)
        logger.info(
            {
                "event": "environment_ready",
                "path": str(env.path),
                "platform": env.platform_tag,
                "state": env.state.value,
            }
        )

        # The pip-provided gpg bindings are badly out of date
        installer.link_system_package(env, "gpg", config.gpg_source)

        ensure_backup_key(config.storage_root)
        await install_vendor_assets(config.assets_dir)

        write_start_script(config)
        install_service_unit(config)
        write_nightly_cron(config)
        restart_service(config.service_name)

        install_custom_ca(config)

    return env
