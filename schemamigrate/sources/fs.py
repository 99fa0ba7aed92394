"""Source drivers that read migrations from a directory-like tree.

A tree is any object that behaves like ``pathlib.Path`` or ``zipfile.Path``:
it has ``name``, ``iterdir()``, ``is_dir()``, ``is_file()``, ``joinpath()``
and ``open(mode)``. If the tree object has a ``close()`` method, closing the
driver closes it too.
"""

from __future__ import annotations

import errno
import posixpath
from typing import Any, BinaryIO, Iterator, Protocol

from schemamigrate.sources.driver import SourceDriver
from schemamigrate.sources.migrations import (
    DuplicateMigrationError,
    Migrations,
    SourceMigration,
    parse,
)


class _Tree(Protocol):
    @property
    def name(self) -> str: ...

    def iterdir(self) -> Iterator[Any]: ...

    def is_dir(self) -> bool: ...

    def is_file(self) -> bool: ...

    def joinpath(self, child: str) -> Any: ...

    def open(self, mode: str = "r") -> Any: ...


def _resolve(tree: _Tree, relative: str) -> Any:
    node: Any = tree
    for part in relative.split("/"):
        if part in ("", "."):
            continue
        node = node.joinpath(part)
    return node


def _not_found(op: str, path: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, op, path)


class PartialDriver(SourceDriver):
    """Everything a tree-backed source driver needs except ``open``.

    Subclasses add ``open``; call ``init`` to load the migration index.
    """

    def __init__(self) -> None:
        self._migrations = Migrations()
        self._fs: Any = None
        self._path = ""

    def init(self, fs: _Tree, path: str) -> None:
        """Index the migration files found directly in ``path`` within ``fs``."""
        root = _resolve(fs, path)
        if not root.is_dir():
            if root.is_file():
                raise NotADirectoryError(errno.ENOTDIR, "readdir", path)
            raise _not_found("open", path)

        migrations = Migrations()
        for entry in sorted(root.iterdir(), key=lambda e: e.name):
            if entry.is_dir():
                continue
            try:
                m = parse(entry.name)
            except ValueError:
                continue
            if not migrations.append(m):
                raise DuplicateMigrationError(m, entry.name)

        self._fs = fs
        self._path = path
        self._migrations = migrations

    def close(self) -> None:
        closer = getattr(self._fs, "close", None)
        if callable(closer):
            closer()

    def first(self) -> int:
        version = self._migrations.first()
        if version is None:
            raise _not_found("first", self._path)
        return version

    def prev(self, version: int) -> int:
        found = self._migrations.prev(version)
        if found is None:
            raise _not_found(f"prev for version {version}", self._path)
        return found

    def next(self, version: int) -> int:
        found = self._migrations.next(version)
        if found is None:
            raise _not_found(f"next for version {version}", self._path)
        return found

    def read_up(self, version: int) -> tuple[BinaryIO, str]:
        m = self._migrations.up(version)
        if m is None:
            raise _not_found(f"read up for version {version}", self._path)
        return self._open(m), m.identifier

    def read_down(self, version: int) -> tuple[BinaryIO, str]:
        m = self._migrations.down(version)
        if m is None:
            raise _not_found(f"read down for version {version}", self._path)
        return self._open(m), m.identifier

    def _open(self, m: SourceMigration) -> BinaryIO:
        full = posixpath.join(self._path, m.raw)
        try:
            return _resolve(self._fs, full).open("rb")
        except OSError as err:
            if err.filename is None:
                code = err.errno if err.errno is not None else errno.EIO
                raise OSError(code, err.strerror or str(err), full) from err
            raise
        except (KeyError, ValueError) as err:
            raise OSError(errno.EIO, f"open: {err}", full) from err


class FsSource(PartialDriver):
    """A passthrough driver over a tree given directly by the caller."""

    def open(self, url: str) -> SourceDriver:
        raise ValueError("open() cannot be called on the fs passthrough driver")


def new(fs: _Tree, path: str) -> FsSource:
    """Create a driver reading migrations from ``path`` within ``fs``."""
    driver = FsSource()
    driver.init(fs, path)
    return driver