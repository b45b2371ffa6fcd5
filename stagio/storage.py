# stagio - Storage abstraction
"""
Byte stream acquisition for named images.

:func:`stagio.imaging.open` and :func:`stagio.imaging.save` never touch the
file system directly but ask a :class:`Storage` for a readable or writable
stream. The storage is passed explicitly to :class:`~stagio.imaging.ImageIO`;
the module level functions fall back to a process wide default which tests may
swap temporarily with :func:`use_storage`.

Exceptions raised by a storage or by its streams are passed on unchanged.
"""

from __future__ import annotations

import io
import logging
import os
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

logger = logging.getLogger(__name__)


class Storage(ABC):
    """Provides readable and writable byte streams by name."""

    @abstractmethod
    def create(self, name: str) -> BinaryIO:
        """
        Opens a stream for writing, replacing existing content

        :param name: The name, e.g. a file name
        :return: The writable stream. The caller closes it.
        """
        ...

    @abstractmethod
    def open(self, name: str) -> BinaryIO:
        """
        Opens a stream for reading

        :param name: The name, e.g. a file name
        :return: The readable stream. The caller closes it.
        """
        ...


class FileSystemStorage(Storage):
    """Streams backed by local files."""

    def __init__(self, root: str | os.PathLike | None = None):
        """
        :param root: Directory relative names are resolved against. The
            current working directory by default.
        """
        self.root = Path(root) if root is not None else None

    def _path(self, name: str) -> Path:
        path = Path(name)
        return self.root / path if self.root is not None else path

    def create(self, name: str) -> BinaryIO:
        return open(self._path(name), "wb")

    def open(self, name: str) -> BinaryIO:
        return open(self._path(name), "rb")

    def __repr__(self):
        return f"FileSystemStorage(root={self.root!r})"


class _MemoryWriter(io.BytesIO):
    """Publishes its content to a :class:`MemoryStorage` when closed."""

    def __init__(self, storage: MemoryStorage, name: str):
        super().__init__()
        self._storage = storage
        self._name = name

    def close(self):
        if not self.closed:
            self._storage.put(self._name, self.getvalue())
        super().close()


class MemoryStorage(Storage):
    """
    In-memory storage, e.g. for tests or for pipelines which never persist
    their images.

    Written data becomes visible once the writing stream is closed.
    """

    def __init__(self, blobs: dict[str, bytes] | None = None):
        self._blobs: dict[str, bytes] = dict(blobs or {})
        self._lock = threading.Lock()

    def create(self, name: str) -> BinaryIO:
        return _MemoryWriter(self, name)

    def open(self, name: str) -> BinaryIO:
        with self._lock:
            if name not in self._blobs:
                raise FileNotFoundError(f"No such image: {name!r}")
            return io.BytesIO(self._blobs[name])

    def put(self, name: str, data: bytes) -> None:
        """Stores data under given name."""
        with self._lock:
            self._blobs[name] = bytes(data)

    def get(self, name: str) -> bytes:
        """Returns the data stored under given name."""
        with self._lock:
            return self._blobs[name]

    def names(self) -> list[str]:
        """Returns the names of all stored blobs."""
        with self._lock:
            return sorted(self._blobs)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._blobs


_default_storage: Storage = FileSystemStorage()


def get_default_storage() -> Storage:
    """Returns the storage used when none is passed explicitly."""
    return _default_storage


def set_default_storage(storage: Storage) -> Storage:
    """
    Replaces the process wide default storage.

    Not safe to call while other threads open or save images.

    :param storage: The new default
    :return: The previous default, to be restored by the caller
    """
    global _default_storage
    if not isinstance(storage, Storage):
        raise TypeError(f"Expected a Storage, got {type(storage).__name__}")
    previous = _default_storage
    _default_storage = storage
    logger.debug("Default storage replaced: %r -> %r", previous, storage)
    return previous


@contextmanager
def use_storage(storage: Storage) -> Iterator[Storage]:
    """
    Swaps the default storage for the duration of a with block and restores
    the previous one afterwards, also if the block raised.

    :param storage: The temporary default
    """
    previous = set_default_storage(storage)
    try:
        yield storage
    finally:
        set_default_storage(previous)
