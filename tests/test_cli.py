import json
import logging
from unittest.mock import AsyncMock, patch

import pytest

from mailbox_provision.cli import build_parser, main
from mailbox_provision.environments.marker import write_marker
from mailbox_provision.errors import ProvisioningError
from mailbox_provision.types import ProvisioningStep


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "setup.toml"
    path.write_text(
        "[setup]\n"
        f'install_dir = "{tmp_path / "install"}"\n'
        f'lock_path = "{tmp_path / "setup.lock"}"\n'
    )
    return path


@pytest.fixture(autouse=True)
def restore_app_logger():
    logger = logging.getLogger("mailbox_provision")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


def test_command_required():
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args([])
    assert exc_info.value.code == 2


def test_status_missing(config_file, tmp_path, capsys):
    assert main(["--config", str(config_file), "--platform", "debian-12", "status"]) == 0

    status = json.loads(capsys.readouterr().out)
    assert status == {
        "path": str(tmp_path / "install" / "env"),
        "state": "missing",
        "current_platform": "debian-12",
        "stored_platform": None,
    }


def test_status_mismatch(config_file, tmp_path, capsys):
    env_dir = tmp_path / "install" / "env"
    env_dir.mkdir(parents=True)
    write_marker(env_dir, "debian-11")

    assert main(["--config", str(config_file), "--platform", "debian-12", "status"]) == 0

    status = json.loads(capsys.readouterr().out)
    assert status["state"] == "platform_mismatch"
    assert status["stored_platform"] == "debian-11"
    assert (env_dir / ".oscode").read_text() == "debian-11\n"


def test_ensure_env(config_file):
    with patch("mailbox_provision.cli.provision_environment") as provision:
        assert main(["--config", str(config_file), "--platform", "debian-12", "ensure-env"]) == 0

    config, platform_tag = provision.call_args.args
    assert platform_tag == "debian-12"
    assert config.install_dir.name == "install"


def test_setup(config_file):
    with patch("mailbox_provision.cli.run_setup", new_callable=AsyncMock) as run_setup:
        assert main(["--config", str(config_file), "--platform", "debian-12", "setup"]) == 0

    run_setup.assert_awaited_once()
    assert run_setup.await_args.args[1] == "debian-12"


def test_failure_exit_code(config_file, tmp_path):
    error = ProvisioningError(ProvisioningStep.BUILD, tmp_path / "env", OSError("No space left on device"))
    with patch("mailbox_provision.cli.provision_environment", side_effect=error), \
         patch("mailbox_provision.cli.log_error") as log_error:
        assert main(["--config", str(config_file), "--platform", "debian-12", "ensure-env"]) == 1

    assert log_error.call_args.args[0] is error
    assert log_error.call_args.kwargs["context"] == {"command": "ensure-env"}


def test_bad_config_exit_code(tmp_path):
    missing = tmp_path / "missing.toml"
    assert main(["--config", str(missing), "status"]) == 1


def test_unusable_lock_path_exit_code(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    path = tmp_path / "setup.toml"
    path.write_text(
        "[setup]\n"
        f'install_dir = "{tmp_path / "install"}"\n'
        f'lock_path = "{blocker / "setup.lock"}"\n'
    )

    with patch("mailbox_provision.cli.provision_environment") as provision, \
         patch("mailbox_provision.cli.log_error") as log_error:
        assert main(["--config", str(path), "--platform", "debian-12", "ensure-env"]) == 1

    provision.assert_not_called()
    assert isinstance(log_error.call_args.args[0], OSError)


def test_setup_not_a_table_exit_code(tmp_path):
    path = tmp_path / "setup.toml"
    path.write_text("setup = 5\n")

    assert main(["--config", str(path), "--platform", "debian-12", "status"]) == 1
