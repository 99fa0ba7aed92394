"""The source driver interface and the registry of named drivers."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import BinaryIO
from urllib.parse import urlsplit

_lock = threading.RLock()
_drivers: dict[str, SourceDriver] = {}


class SourceDriver(ABC):
    """Reads migrations from some place.

    ``first``, ``prev``, ``next``, ``read_up`` and ``read_down`` raise
    FileNotFoundError when the requested version or file does not exist.
    """

    @abstractmethod
    def open(self, url: str) -> SourceDriver:
        """Return a new driver configured from ``url``."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying source."""

    @abstractmethod
    def first(self) -> int:
        """The first available version."""

    @abstractmethod
    def prev(self, version: int) -> int:
        """The version before ``version``."""

    @abstractmethod
    def next(self, version: int) -> int:
        """The version after ``version``."""

    @abstractmethod
    def read_up(self, version: int) -> tuple[BinaryIO, str]:
        """The up migration body and its identifier."""

    @abstractmethod
    def read_down(self, version: int) -> tuple[BinaryIO, str]:
        """The down migration body and its identifier."""

    def __enter__(self) -> SourceDriver:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def register(name: str, driver: SourceDriver | None) -> None:
    """Register ``driver`` under the URL scheme ``name``."""
    with _lock:
        if driver is None:
            raise ValueError("Register driver is nil")
        if name in _drivers:
            raise ValueError(f"Register called twice for driver {name}")
        _drivers[name] = driver


def open_source(url: str) -> SourceDriver:
    """Open a driver chosen by the scheme of ``url``."""
    scheme = urlsplit(url).scheme
    if not scheme:
        raise ValueError("source driver: invalid URL scheme")
    with _lock:
        driver = _drivers.get(scheme)
    if driver is None:
        raise ValueError(f"source driver: unknown driver '{scheme}' (forgotten import?)")
    return driver.open(url)


def list_drivers() -> list[str]:
    """Names of all registered drivers."""
    with _lock:
        return list(_drivers)