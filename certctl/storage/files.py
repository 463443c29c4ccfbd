# certctl/storage/files.py
"""
Writing issued artifacts to disk.

Files are created or truncated. Without `atomic`, they are written one after
another, so the key file can already be on disk when the certificate write
fails. With `atomic`, everything is staged next to its target first and
renamed into place only once every stage succeeded.
"""
import os
import tempfile
from typing import Iterable, Tuple

from certctl.common.errors import FileWriteError

KEY_FILE_MODE = 0o600
CERT_FILE_MODE = 0o644


def write_file(path: str, content: bytes, mode: int = CERT_FILE_MODE) -> str:
    try:
        fd = os.open(path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, mode)
        with os.fdopen(fd, "wb") as f:
            f.write(content)
    except OSError as e:
        raise FileWriteError(path, e) from e
    return path


def _stage(path: str, content: bytes, mode: int) -> str:
    directory = os.path.dirname(os.path.abspath(path))
    try:
        fd, tmp = tempfile.mkstemp(prefix=".certctl-", dir=directory)
    except OSError as e:
        raise FileWriteError(path, e) from e
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        os.chmod(tmp, mode & ~_umask())
    except OSError as e:
        os.unlink(tmp)
        raise FileWriteError(path, e) from e
    return tmp


def _umask() -> int:
    current = os.umask(0)
    os.umask(current)
    return current


def save_artifacts(artifacts: Iterable[Tuple[str, bytes, int]], atomic: bool = False):
    """
    Write (path, content, mode) triples in order. Returns the written paths.
    Raises FileWriteError on the first failure.
    """
    artifacts = list(artifacts)
    if not atomic:
        return [write_file(path, content, mode) for path, content, mode in artifacts]

    staged = []
    try:
        for path, content, mode in artifacts:
            staged.append((_stage(path, content, mode), path))
        for tmp, path in staged:
            try:
                os.replace(tmp, path)
            except OSError as e:
                raise FileWriteError(path, e) from e
    finally:
        for tmp, _ in staged:
            if os.path.exists(tmp):
                os.unlink(tmp)
    return [path for path, _, _ in artifacts]
