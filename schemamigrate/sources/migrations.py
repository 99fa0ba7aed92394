"""Migration file names and the in-memory index that source drivers share."""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from enum import Enum

_MAX_VERSION = 2**64 - 1


class Direction(str, Enum):
    """Which way a migration file moves the schema."""

    DOWN = "down"
    UP = "up"


@dataclass(frozen=True)
class SourceMigration:
    """One migration file as known to a source driver."""

    version: int
    identifier: str
    direction: Direction
    raw: str = ""


class ParseError(ValueError):
    """A name does not follow the migration file naming pattern."""

    def __init__(self, message: str = "no match") -> None:
        super().__init__(message)


class DuplicateMigrationError(Exception):
    """Two files share the same version and direction."""

    def __init__(self, migration: SourceMigration, name: str) -> None:
        super().__init__(f"duplicate migration file: {name}")
        self.migration = migration
        self.name = name


REGEX = re.compile(
    rf"([0-9]+)_(.*)\.({Direction.DOWN.value}|{Direction.UP.value})\.(.*)"
)


def parse(raw: str) -> SourceMigration:
    """Parse a name such as ``123_name.up.sql`` into a SourceMigration."""
    match = REGEX.fullmatch(raw)
    if match is None:
        raise ParseError()
    digits, identifier, direction, _ext = match.groups()
    version = int(digits)
    if version > _MAX_VERSION:
        raise ValueError(f"version {digits} out of range")
    return SourceMigration(
        version=version,
        identifier=identifier,
        direction=Direction(direction),
        raw=raw,
    )


class Migrations:
    """Migrations indexed by version, each with an optional up and down file."""

    def __init__(self) -> None:
        self._index: list[int] = []
        self._by_version: dict[int, dict[Direction, SourceMigration]] = {}

    def __len__(self) -> int:
        return len(self._index)

    @property
    def versions(self) -> tuple[int, ...]:
        """All known versions in ascending order."""
        return tuple(self._index)

    def append(self, migration: SourceMigration | None) -> bool:
        """Add a migration; return False for None or a duplicate."""
        if migration is None:
            return False
        directions = self._by_version.get(migration.version)
        if directions is None:
            directions = self._by_version[migration.version] = {}
            bisect.insort(self._index, migration.version)
        if migration.direction in directions:
            return False
        directions[migration.direction] = migration
        return True

    def first(self) -> int | None:
        """The lowest version, or None if empty."""
        return self._index[0] if self._index else None

    def prev(self, version: int) -> int | None:
        """The version before ``version``, or None."""
        pos = self._find_pos(version)
        if pos >= 1:
            return self._index[pos - 1]
        return None

    def next(self, version: int) -> int | None:
        """The version after ``version``, or None."""
        pos = self._find_pos(version)
        if pos >= 0 and pos + 1 < len(self._index):
            return self._index[pos + 1]
        return None

    def up(self, version: int) -> SourceMigration | None:
        """The up migration for ``version``, or None."""
        return self._by_version.get(version, {}).get(Direction.UP)

    def down(self, version: int) -> SourceMigration | None:
        """The down migration for ``version``, or None."""
        return self._by_version.get(version, {}).get(Direction.DOWN)

    def _find_pos(self, version: int) -> int:
        pos = bisect.bisect_left(self._index, version)
        if pos < len(self._index) and self._index[pos] == version:
            return pos
        return -1