"""OS and Python package installation."""

from pathlib import Path
from typing import Iterable, Optional

from mailbox_provision.commands import check_command
from mailbox_provision.errors import CommandError, InstallError
from mailbox_provision.logging import get_logger
from mailbox_provision.types import EnvironmentHandle

logger = get_logger(__name__)

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

LEGACY_ACME_DIR = Path("/usr/local/lib/python3.4/dist-packages/acme")
LEGACY_UNINSTALL_ATTEMPTS = 5

# Backup tooling pins that depend on what the distribution's duplicity expects
PLATFORM_PACKAGES: dict[str, list[str]] = {
    "debian-10": ["b2<2.0.0"],
    "debian-11": ["b2sdk==1.7.0"],
    "ubuntu-20.04": ["b2sdk==1.7.0"],
}


def _run_install(cmd: list[str], env_vars: Optional[dict[str, str]] = None) -> None:
    try:
        check_command(cmd, env_vars=env_vars)
    except CommandError as e:
        raise InstallError(str(e), details=e.details) from e


def install(names: Iterable[str]) -> None:
    """Make sure the named OS packages are installed."""
    packages = sorted(set(names))
    if not packages:
        return

    logger.info({"event": "apt_install", "packages": packages})
    _run_install(["apt-get", "-y", "-qq", "install", *packages], env_vars=APT_ENV)


def pip_install_system(packages: Iterable[str]) -> None:
    """Install or upgrade packages for the system Python."""
    packages = list(packages)
    if not packages:
        return

    logger.info({"event": "pip_install_system", "packages": packages})
    _run_install(["pip3", "install", "--upgrade", *packages])


def pip_install(env: EnvironmentHandle, packages: Iterable[str]) -> None:
    """Install or upgrade packages inside the environment."""
    packages = list(packages)
    if not packages:
        return

    logger.info({"event": "pip_install", "env": str(env.path), "packages": packages})
    _run_install([str(env.pip_bin), "install", "--upgrade", *packages])


def upgrade_self(env: EnvironmentHandle) -> None:
    """Upgrade the environment's pip; distribution-packaged versions lag behind."""
    _run_install([str(env.pip_bin), "install", "--upgrade", "pip"])


def platform_packages(platform_tag: str) -> list[str]:
    return list(PLATFORM_PACKAGES.get(platform_tag, []))


def remove_legacy_packages(acme_dir: Path = LEGACY_ACME_DIR) -> None:
    """Uninstall an acme left in the system site-packages by older releases.

    It conflicts with the distribution's certbot. pip removes one copy per
    call, so keep going until the directory is gone.
    """
    attempts = 0
    while acme_dir.is_dir():
        if attempts >= LEGACY_UNINSTALL_ATTEMPTS:
            raise InstallError(
                f"Legacy acme package still present at {acme_dir}",
                details={"path": str(acme_dir), "attempts": attempts}
            )
        logger.info({"event": "legacy_acme_uninstall", "path": str(acme_dir)})
        _run_install(["pip3", "uninstall", "-y", "acme"])
        attempts += 1


def _python_version(site_packages: Path) -> tuple[int, ...]:
    # lib/python3.10/site-packages -> (3, 10)
    version = site_packages.parent.name[len("python"):]
    try:
        return tuple(int(part) for part in version.split("."))
    except ValueError:
        return ()


def site_packages_dir(env: EnvironmentHandle) -> Path:
    """Locate the environment's site-packages directory."""
    candidates = sorted(
        (env.path / "lib").glob("python3.*/site-packages"),
        key=_python_version,
    )
    if not candidates:
        raise InstallError(
            f"No site-packages directory in {env.path}",
            details={"env": str(env.path)}
        )
    return candidates[-1]


def link_system_package(env: EnvironmentHandle, name: str, source: Path) -> bool:
    """Symlink a distribution-packaged module into the environment.

    Returns True if a link was created, False if the package was already there.
    """
    target = site_packages_dir(env) / name
    if target.exists() or target.is_symlink():
        return False

    if not source.is_dir():
        raise InstallError(
            f"System package {name} not found at {source}",
            details={"name": name, "source": str(source)}
        )

    target.symlink_to(source, target_is_directory=True)
    logger.debug({"event": "system_package_linked", "name": name, "target": str(target)})
    return True
