"""Locked, whole-collection persistence of links in a single JSON file."""

from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Generator
from pathlib import Path

from linkdeck.core.config import ServerConfig
from linkdeck.core.links import Link, ParseError, parse_links, serialize_links
from linkdeck.storage.fs import atomic_write, ensure_data_dir, write_if_missing
from linkdeck.storage.locks import data_lock, lock_path_for

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for link store failures."""


class DirectoryCreateError(StoreError):
    """Raised when the data directory cannot be created at startup."""


class FileCreateError(StoreError):
    """Raised when the empty data file cannot be created at startup."""


class ReadError(StoreError):
    """Raised when the data file exists but cannot be read."""


class WriteError(StoreError):
    """Raised when the data file cannot be written."""


class LinkStore:
    """Serialized read/replace access to the link collection in *data_file*.

    Every :meth:`load` and :meth:`save` runs under one process-wide mutex and
    a file lock beside the data file, so exactly one operation touches the
    file at a time.  There is no versioning: concurrent saves are last write
    wins.
    """

    def __init__(self, data_file: Path, *, lock_timeout: float = -1) -> None:
        self._data_file = Path(data_file)
        self._lock_path = lock_path_for(self._data_file)
        self._lock_timeout = lock_timeout
        self._mutex = threading.Lock()

    @classmethod
    def from_config(cls, config: ServerConfig) -> LinkStore:
        return cls(config.data_file)

    @property
    def data_file(self) -> Path:
        return self._data_file

    @contextlib.contextmanager
    def _locked(self) -> Generator[None, None, None]:
        with self._mutex:
            # No directory means no data file and nowhere to put the lock file.
            if not self._lock_path.parent.is_dir():
                yield
                return
            with data_lock(self._lock_path, self._lock_timeout):
                yield

    def initialize(self) -> None:
        """Create the data directory and an empty ``[]`` data file if missing.

        Raises:
            DirectoryCreateError: If the directory cannot be created.
            FileCreateError: If the data file cannot be created.
        """
        data_dir = self._data_file.parent
        try:
            ensure_data_dir(data_dir)
        except OSError as exc:
            raise DirectoryCreateError(f"Failed to create data directory: {exc}") from exc

        with self._locked():
            if self._data_file.exists():
                return
            logger.info("%s not found, creating...", self._data_file.name)
            try:
                write_if_missing(self._data_file, serialize_links([]))
            except OSError as exc:
                raise FileCreateError(
                    f"Failed to create {self._data_file.name}: {exc}"
                ) from exc

    def load(self) -> list[Link]:
        """Return the stored collection in persisted order.

        A missing data file yields an empty list.

        Raises:
            ReadError: If the file exists but cannot be read.
            ParseError: If the contents are not a JSON array of links.
        """
        with self._locked():
            try:
                content = self._data_file.read_bytes()
            except FileNotFoundError:
                return []
            except OSError as exc:
                logger.warning("Failed to read %s: %s", self._data_file, exc)
                raise ReadError(str(exc)) from exc

        try:
            return parse_links(content)
        except ParseError as exc:
            logger.warning("Corrupt data file %s: %s", self._data_file, exc)
            raise

    def save(self, links: list[Link]) -> None:
        """Replace the stored collection with *links*.

        Raises:
            SerializeError: If *links* cannot be encoded.
            WriteError: If the file cannot be written.
        """
        content = serialize_links(links)
        with self._locked():
            try:
                atomic_write(self._data_file, content)
            except OSError as exc:
                logger.warning("Failed to write %s: %s", self._data_file, exc)
                raise WriteError(str(exc)) from exc
