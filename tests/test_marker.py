from unittest.mock import patch

import pytest

from mailbox_provision.environments.marker import MARKER_NAME, marker_path, read_marker, write_marker


def test_write_and_read_marker(tmp_path):
    write_marker(tmp_path, "debian-12")

    assert (tmp_path / MARKER_NAME).read_text() == "debian-12\n"
    assert read_marker(tmp_path) == "debian-12"


def test_write_marker_replaces_existing(tmp_path):
    write_marker(tmp_path, "debian-11")
    write_marker(tmp_path, "debian-12")

    assert read_marker(tmp_path) == "debian-12"
    assert [p.name for p in tmp_path.iterdir()] == [MARKER_NAME]


def test_failed_write_leaves_no_marker_or_temp_file(tmp_path):
    with patch("mailbox_provision.environments.marker.os.replace", side_effect=OSError("EIO")):
        with pytest.raises(OSError):
            write_marker(tmp_path, "debian-12")

    assert not marker_path(tmp_path).exists()
    assert list(tmp_path.iterdir()) == []


def test_read_marker_missing(tmp_path):
    assert read_marker(tmp_path) is None
