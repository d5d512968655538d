import logging
from pathlib import Path

import pytest

from mailbox_provision.config import SetupConfig


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class FakeBuilder:
    """Builder that records calls and lays down a minimal environment"""

    def __init__(self, fail_with: Exception | None = None, populate: bool = True):
        self.calls: list[Path] = []
        self.fail_with = fail_with
        self.populate = populate

    def __call__(self, target: Path) -> None:
        self.calls.append(target)
        if self.populate:
            (target / "bin").mkdir(parents=True, exist_ok=True)
            (target / "bin" / "python").write_text("#!/bin/sh\n")
        if self.fail_with is not None:
            raise self.fail_with


@pytest.fixture
def builder():
    return FakeBuilder()


@pytest.fixture
def env_path(tmp_path: Path) -> Path:
    return tmp_path / "mailinabox" / "env"


@pytest.fixture
def captured_logs():
    """Collect records from the application logger regardless of its handlers"""
    logger = logging.getLogger("mailbox_provision")
    handler = RecordingHandler()
    old_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield handler.records
    finally:
        logger.removeHandler(handler)
        logger.setLevel(old_level)


@pytest.fixture
def setup_config(tmp_path: Path) -> SetupConfig:
    source_dir = tmp_path / "source"
    (source_dir / "conf").mkdir(parents=True)
    (source_dir / "conf" / "mailinabox.service").write_text("[Unit]\nDescription=test\n")
    return SetupConfig(
        install_dir=tmp_path / "install",
        storage_root=tmp_path / "user-data",
        source_dir=source_dir,
        systemd_dir=tmp_path / "systemd",
        cron_path=tmp_path / "cron.d" / "mailinabox-nightly",
        ca_cert_dir=tmp_path / "ca-certificates",
        lock_path=tmp_path / "run" / "setup.lock",
        gpg_source=tmp_path / "dist-packages" / "gpg",
    )


@pytest.fixture
def make_builder():
    return FakeBuilder
