"""Atomic replacement of the data file and data directory setup."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path


def _sync_dir(path: Path) -> None:
    """Flush the directory entry of *path* so a finished rename is durable.

    Not every platform can fsync a directory; failures are ignored.
    """
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError:
        return
    try:
        with contextlib.suppress(OSError):
            os.fsync(fd)
    finally:
        os.close(fd)


def atomic_write(path: Path, content: str | bytes) -> None:
    """Replace *path* with *content* so readers never observe a partial file.

    The bytes go to a hidden sibling temp file, are fsynced, made 0644 and
    renamed over *path*.  The temp file is removed if anything fails.

    Raises:
        FileNotFoundError: If the parent directory does not exist.
    """
    parent = path.parent
    if not parent.is_dir():
        raise FileNotFoundError(f"Parent directory does not exist: {parent}")

    data = content.encode("utf-8") if isinstance(content, str) else content

    tmp = tempfile.NamedTemporaryFile(dir=parent, prefix=f".{path.name}.", delete=False)
    try:
        with tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp.name, 0o644)
        os.replace(tmp.name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp.name)
        raise
    _sync_dir(parent)


def ensure_data_dir(data_dir: Path) -> None:
    """Create *data_dir* and any missing parents."""
    data_dir.mkdir(mode=0o755, parents=True, exist_ok=True)


def write_if_missing(path: Path, content: str) -> bool:
    """Create *path* with *content* unless it already exists.

    Returns ``True`` if the file was created.
    """
    if path.exists():
        return False
    atomic_write(path, content)
    return True
