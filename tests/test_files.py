import os
import stat

import pytest

from certctl.common.errors import FileWriteError
from certctl.storage import files


def test_write_truncates_existing_file(tmp_path):
    target = tmp_path / "ca.crt"
    target.write_bytes(b"x" * 100)
    files.write_file(str(target), b"new")
    assert target.read_bytes() == b"new"


def test_key_file_is_not_group_or_world_readable(tmp_path):
    target = tmp_path / "ca.key"
    files.write_file(str(target), b"secret", files.KEY_FILE_MODE)
    assert stat.S_IMODE(os.stat(target).st_mode) & 0o077 == 0


def test_missing_directory_raises_file_write_error(tmp_path):
    target = tmp_path / "missing" / "ca.key"
    with pytest.raises(FileWriteError) as exc:
        files.write_file(str(target), b"data")
    assert exc.value.path == str(target)
    assert isinstance(exc.value.cause, FileNotFoundError)
    assert str(exc.value) == str(exc.value.cause)


def test_sequential_save_leaves_first_file_on_failure(tmp_path):
    key = tmp_path / "ca.key"
    cert = tmp_path / "missing" / "ca.crt"
    with pytest.raises(FileWriteError):
        files.save_artifacts([
            (str(key), b"key", files.KEY_FILE_MODE),
            (str(cert), b"cert", files.CERT_FILE_MODE),
        ])
    assert key.read_bytes() == b"key"


def test_atomic_save_writes_nothing_on_failure(tmp_path):
    key = tmp_path / "ca.key"
    cert = tmp_path / "missing" / "ca.crt"
    with pytest.raises(FileWriteError):
        files.save_artifacts([
            (str(key), b"key", files.KEY_FILE_MODE),
            (str(cert), b"cert", files.CERT_FILE_MODE),
        ], atomic=True)
    assert not key.exists()
    assert os.listdir(tmp_path) == []


def test_atomic_save_replaces_targets(tmp_path):
    key = tmp_path / "ca.key"
    cert = tmp_path / "ca.crt"
    key.write_bytes(b"old key")
    written = files.save_artifacts([
        (str(key), b"key", files.KEY_FILE_MODE),
        (str(cert), b"cert", files.CERT_FILE_MODE),
    ], atomic=True)
    assert written == [str(key), str(cert)]
    assert key.read_bytes() == b"key"
    assert cert.read_bytes() == b"cert"
    assert stat.S_IMODE(os.stat(key).st_mode) & 0o077 == 0
    assert sorted(os.listdir(tmp_path)) == ["ca.crt", "ca.key"]
