"""A source reading migrations from named in-memory assets."""

from __future__ import annotations

import errno
import io
from dataclasses import dataclass, field
from typing import BinaryIO, Callable

from schemamigrate.sources.driver import SourceDriver, register
from schemamigrate.sources.migrations import Migrations, SourceMigration, parse

AssetFunc = Callable[[str], bytes]


@dataclass
class AssetSource:
    """Asset names and a function returning an asset's bytes by name."""

    names: list[str]
    asset_func: AssetFunc


def resource(names: list[str], asset_func: AssetFunc) -> AssetSource:
    """Bundle asset names and their loader into an AssetSource."""
    return AssetSource(names=list(names), asset_func=asset_func)


def _not_found(op: str, path: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, op, path)


@dataclass(eq=False)
class BindataSource(SourceDriver):
    """Source driver over an AssetSource; create it with with_instance."""

    path: str = "<bindata>"
    asset_source: AssetSource | None = None
    migrations: Migrations = field(default_factory=Migrations)

    def open(self, url: str) -> BindataSource:
        raise ValueError("bindata source cannot be opened from a URL; use with_instance")

    def close(self) -> None:
        return None

    def first(self) -> int:
        version = self.migrations.first()
        if version is None:
            raise _not_found("first", self.path)
        return version

    def prev(self, version: int) -> int:
        found = self.migrations.prev(version)
        if found is None:
            raise _not_found(f"prev for version {version}", self.path)
        return found

    def next(self, version: int) -> int:
        found = self.migrations.next(version)
        if found is None:
            raise _not_found(f"next for version {version}", self.path)
        return found

    def read_up(self, version: int) -> tuple[BinaryIO, str]:
        return self._read(self.migrations.up(version), version)

    def read_down(self, version: int) -> tuple[BinaryIO, str]:
        return self._read(self.migrations.down(version), version)

    def _read(self, m: SourceMigration | None, version: int) -> tuple[BinaryIO, str]:
        if m is None or self.asset_source is None:
            raise _not_found(f"read version {version}", self.path)
        body = self.asset_source.asset_func(m.raw)
        return io.BytesIO(body), m.identifier


def with_instance(instance: object) -> BindataSource:
    """Build a source from an AssetSource, indexing names that parse."""
    if not isinstance(instance, AssetSource):
        raise TypeError("expects AssetSource")
    driver = BindataSource(asset_source=instance, migrations=Migrations())
    for name in instance.names:
        try:
            m = parse(name)
        except ValueError:
            continue
        if not driver.migrations.append(m):
            raise ValueError(f"unable to parse file {name}")
    return driver


register("bindata", BindataSource())