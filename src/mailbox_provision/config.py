"""Setup configuration."""

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import tomli

from mailbox_provision.errors import ConfigError

DEFAULT_INSTALL_DIR = Path("/usr/local/lib/mailinabox")

SYSTEM_PACKAGES = (
    "duplicity",
    "python3-pip",
    "python3-gpg",
    "virtualenv",
    "certbot",
    "rsync",
)

# Used by duplicity, so installed outside the environment
SYSTEM_PYTHON_PACKAGES = ("boto",)

ENV_PACKAGES = (
    "rtyaml",
    "email_validator>=1.0.0",
    "exclusiveprocess",
    "flask",
    "dnspython",
    "python-dateutil",
    "expiringdict",
    "qrcode[pil]",
    "pyotp",
    "idna>=2.0.0",
    "cryptography==2.2.2",
    "boto",
    "psutil",
    "postfix-mta-sts-resolver",
)

PATH_FIELDS = (
    "install_dir",
    "storage_root",
    "source_dir",
    "systemd_dir",
    "cron_path",
    "ca_cert_dir",
    "lock_path",
    "gpg_source",
)

ENV_OVERRIDES = {
    "STORAGE_ROOT": "storage_root",
    "MAILBOX_INSTALL_DIR": "install_dir",
}


@dataclass(frozen=True)
class SetupConfig:
    """Where things go and what gets installed"""
    install_dir: Path = DEFAULT_INSTALL_DIR
    storage_root: Path = Path("/home/user-data")
    source_dir: Path = field(default_factory=Path.cwd)
    service_name: str = "mailinabox"
    systemd_dir: Path = Path("/lib/systemd/system")
    cron_path: Path = Path("/etc/cron.d/mailinabox-nightly")
    cron_hour: int = 3
    ca_cert_dir: Path = Path("/usr/local/share/ca-certificates")
    lock_path: Path = Path("/var/run/mailinabox-setup.lock")
    gpg_source: Path = Path("/usr/lib/python3/dist-packages/gpg")
    system_packages: tuple[str, ...] = SYSTEM_PACKAGES
    system_python_packages: tuple[str, ...] = SYSTEM_PYTHON_PACKAGES
    env_packages: tuple[str, ...] = ENV_PACKAGES

    @property
    def env_dir(self) -> Path:
        return self.install_dir / "env"

    @property
    def assets_dir(self) -> Path:
        return self.install_dir / "vendor" / "assets"

    @property
    def start_script(self) -> Path:
        return self.install_dir / "start"

    @property
    def unit_source(self) -> Path:
        return self.source_dir / "conf" / f"{self.service_name}.service"

    @property
    def unit_path(self) -> Path:
        return self.systemd_dir / f"{self.service_name}.service"


def _coerce(name: str, value: Any) -> Any:
    if name in PATH_FIELDS:
        return Path(value)
    if name == "cron_hour":
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 23:
            raise ConfigError(f"cron_hour must be an hour of the day, got {value!r}")
        return value
    if name.endswith("packages"):
        if isinstance(value, str) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"{name} must be a list of package names")
        return tuple(value)
    return value


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SetupConfig:
    """Load configuration: defaults, then a TOML file, then the environment.

    The TOML file keeps its settings in a ``[setup]`` table whose keys are
    SetupConfig field names.
    """
    environ = os.environ if environ is None else environ
    known = {f.name for f in dataclasses.fields(SetupConfig)}
    values: dict[str, Any] = {}

    if path is not None:
        try:
            with open(path, "rb") as f:
                data = tomli.load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except tomli.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {path}: {e}") from e

        section = data.get("setup", {})
        if not isinstance(section, dict):
            raise ConfigError(f"[setup] in {path} must be a table")
        unknown = set(section) - known
        if unknown:
            raise ConfigError(
                f"Unknown setting(s) in {path}: {', '.join(sorted(unknown))}",
                details={"unknown": sorted(unknown)}
            )
        values.update(section)

    for var, name in ENV_OVERRIDES.items():
        if environ.get(var):
            values[name] = environ[var]

    return SetupConfig(**{name: _coerce(name, value) for name, value in values.items()})
