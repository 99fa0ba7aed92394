"""Works out which migrations to run, reading them lazily from a source."""

from __future__ import annotations

import logging
from typing import Callable, Iterator

from schemamigrate.errors import NoChangeError, ShortLimitError
from schemamigrate.migration import Migration
from schemamigrate.sources.driver import SourceDriver

DEFAULT_PREFETCH_MIGRATIONS = 10
"""How many migrations are read ahead of the one being run."""

_log = logging.getLogger("schemamigrate")


class MigrationReader:
    """Yields the migrations leading from one version to another.

    The generators raise NoChangeError, ShortLimitError or FileNotFoundError
    where nothing, too little or a missing version is found. They stop early,
    without error, once ``stop`` returns True.
    """

    def __init__(
        self,
        source: SourceDriver,
        *,
        prefetch: int | None = None,
        stop: Callable[[], bool] | None = None,
    ) -> None:
        self.source = source
        self.prefetch = DEFAULT_PREFETCH_MIGRATIONS if prefetch is None else prefetch
        self._stop = stop if stop is not None else (lambda: False)

    def new_migration(self, version: int, target_version: int) -> Migration:
        """Build the migration for ``version``, empty if the source has no file."""
        reader = self.source.read_up if target_version >= version else self.source.read_down
        try:
            body, identifier = reader(version)
        except FileNotFoundError:
            migr = Migration(None, "", version, target_version)
        else:
            migr = Migration(body, identifier, version, target_version)

        if self.prefetch > 0 and migr.body is not None:
            _log.debug("Start buffering %s", migr.log_string())
        else:
            _log.debug("Scheduled %s", migr.log_string())
        return migr

    def version_exists(self, version: int) -> None:
        """Raise FileNotFoundError unless an up or down file exists for ``version``."""
        last: FileNotFoundError | None = None
        for reader in (self.source.read_up, self.source.read_down):
            try:
                body, _identifier = reader(version)
            except FileExistsError:
                return
            except FileNotFoundError as err:
                last = err
                continue
            body.close()
            return

        err = FileNotFoundError(f"no migration found for version {version}: {last}")
        _log.error("error: %s", err)
        raise err from last

    def read(self, from_version: int, to_version: int) -> Iterator[Migration]:
        """Migrations going up or down from ``from_version`` to ``to_version``."""
        if from_version >= 0:
            self.version_exists(from_version)
        if to_version >= 0:
            self.version_exists(to_version)
        if from_version == to_version:
            raise NoChangeError()

        current = from_version
        if current < to_version:
            if current == -1:
                first = self.source.first()
                yield self.new_migration(first, first)
                current = first
            while current < to_version:
                if self._stop():
                    return
                nxt = self.source.next(current)
                yield self.new_migration(nxt, nxt)
                current = nxt
        else:
            while current > to_version and current >= 0:
                if self._stop():
                    return
                try:
                    prev = self.source.prev(current)
                except FileNotFoundError:
                    if to_version == -1:
                        yield self.new_migration(current, -1)
                        return
                    raise
                yield self.new_migration(current, prev)
                current = prev

    def read_up(self, from_version: int, limit: int) -> Iterator[Migration]:
        """Up migrations after ``from_version``; a limit of -1 means all of them."""
        if from_version >= 0:
            self.version_exists(from_version)
        if limit == 0:
            raise NoChangeError()

        current = from_version
        count = 0
        while count < limit or limit == -1:
            if self._stop():
                return
            if current == -1:
                first = self.source.first()
                yield self.new_migration(first, first)
                current = first
                count += 1
                continue
            try:
                nxt = self.source.next(current)
            except FileNotFoundError:
                if limit == -1 and count == 0:
                    raise NoChangeError() from None
                if limit == -1:
                    return
                if limit > 0 and count == 0:
                    raise
                if count < limit:
                    raise ShortLimitError(limit - count) from None
                raise
            yield self.new_migration(nxt, nxt)
            current = nxt
            count += 1

    def read_down(self, from_version: int, limit: int) -> Iterator[Migration]:
        """Down migrations from ``from_version``; a limit of -1 means all of them."""
        if from_version >= 0:
            self.version_exists(from_version)
        if limit == 0:
            raise NoChangeError()
        if from_version == -1 and limit == -1:
            raise NoChangeError()
        if from_version == -1 and limit > 0:
            raise FileNotFoundError("no migration to go down from")

        current = from_version
        count = 0
        while count < limit or limit == -1:
            if self._stop():
                return
            try:
                prev = self.source.prev(current)
            except FileNotFoundError:
                if limit == -1 or limit - count > 0:
                    first = self.source.first()
                    yield self.new_migration(first, -1)
                    count += 1
                if count < limit:
                    raise ShortLimitError(limit - count) from None
                return
            yield self.new_migration(current, prev)
            current = prev
            count += 1