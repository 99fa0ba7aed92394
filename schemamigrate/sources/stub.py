"""An in-memory source whose migration bodies are their identifiers."""

from __future__ import annotations

import errno
import io
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from schemamigrate.sources.driver import SourceDriver, register
from schemamigrate.sources.migrations import Migrations


@dataclass
class StubConfig:
    """Configuration for StubSource; it has no settings."""


def _not_found(op: str, path: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, op, path)


@dataclass(eq=False)
class StubSource(SourceDriver):
    """Source driver backed by a Migrations object set by the caller."""

    url: str = ""
    instance: Any = None
    migrations: Migrations = field(default_factory=Migrations)
    config: StubConfig = field(default_factory=StubConfig)

    def open(self, url: str) -> StubSource:
        return StubSource(url=url, migrations=Migrations(), config=StubConfig())

    def close(self) -> None:
        return None

    def first(self) -> int:
        version = self.migrations.first()
        if version is None:
            raise _not_found("first", self.url)
        return version

    def prev(self, version: int) -> int:
        found = self.migrations.prev(version)
        if found is None:
            raise _not_found(f"prev for version {version}", self.url)
        return found

    def next(self, version: int) -> int:
        found = self.migrations.next(version)
        if found is None:
            raise _not_found(f"next for version {version}", self.url)
        return found

    def read_up(self, version: int) -> tuple[BinaryIO, str]:
        m = self.migrations.up(version)
        if m is None:
            raise _not_found(f"read up version {version}", self.url)
        return io.BytesIO(m.identifier.encode()), f"{version}.up.stub"

    def read_down(self, version: int) -> tuple[BinaryIO, str]:
        m = self.migrations.down(version)
        if m is None:
            raise _not_found(f"read down version {version}", self.url)
        return io.BytesIO(m.identifier.encode()), f"{version}.down.stub"


def with_instance(instance: Any, config: StubConfig | None) -> StubSource:
    """Create a stub source around an existing instance."""
    return StubSource(
        instance=instance,
        migrations=Migrations(),
        config=config if config is not None else StubConfig(),
    )


register("stub", StubSource())