"""Runs migrations from a source against a database."""

from __future__ import annotations

import contextlib
import logging
import queue
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import BinaryIO, Iterable, Iterator

from schemamigrate.errors import (
    DirtyError,
    InvalidVersionError,
    LockedError,
    LockTimeoutError,
    NilVersionError,
    NoChangeError,
)
from schemamigrate.migration import Migration
from schemamigrate.reader import DEFAULT_PREFETCH_MIGRATIONS, MigrationReader
from schemamigrate.sources.driver import SourceDriver
from schemamigrate.util import MultiError, suint

NIL_VERSION = -1
"""The version a database reports when no migration has been applied."""

DEFAULT_LOCK_TIMEOUT = 15.0
"""Seconds a database driver has to acquire its lock."""

_log = logging.getLogger("schemamigrate")


class DatabaseDriver(ABC):
    """The operations a database must offer to have migrations run against it."""

    @abstractmethod
    def close(self) -> None:
        """Release the database connection."""

    @abstractmethod
    def lock(self) -> None:
        """Take the migration lock; raise if it cannot be taken."""

    @abstractmethod
    def unlock(self) -> None:
        """Release the migration lock."""

    @abstractmethod
    def run(self, migration: BinaryIO) -> None:
        """Execute a migration body."""

    @abstractmethod
    def set_version(self, version: int, dirty: bool) -> None:
        """Record the current version and whether it is dirty."""

    @abstractmethod
    def version(self) -> tuple[int, bool]:
        """The recorded version (NIL_VERSION if none) and its dirty flag."""

    @abstractmethod
    def drop(self) -> None:
        """Delete everything in the database."""


class _Failure:
    __slots__ = ("error",)

    def __init__(self, error: BaseException) -> None:
        self.error = error


_DONE = object()


class Migrate:
    """Moves a database between migration versions read from a source."""

    def __init__(
        self,
        source_name: str,
        source: SourceDriver,
        database_name: str,
        database: DatabaseDriver,
    ) -> None:
        self.source_name = source_name
        self.source = source
        self.database_name = database_name
        self.database = database
        self.prefetch_migrations = DEFAULT_PREFETCH_MIGRATIONS
        self.lock_timeout = DEFAULT_LOCK_TIMEOUT
        self._graceful_stop = threading.Event()
        self._locked_mu = threading.Lock()
        self._is_locked = False

    def __enter__(self) -> Migrate:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the source and the database, raising whatever either raised."""
        _log.debug("Closing source and database")
        errors: list[BaseException] = []
        for closer in (self.source.close, self.database.close):
            try:
                closer()
            except Exception as err:  # noqa: BLE001 - both must be attempted
                errors.append(err)
        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise MultiError(*errors)

    def request_stop(self) -> None:
        """Stop running migrations at the next safe point."""
        self._graceful_stop.set()

    def migrate(self, version: int) -> None:
        """Migrate up or down to ``version``."""
        target = suint(version)
        with self._locked():
            current = self._clean_version()
            self._run_migrations(self._reader().read(current, target))

    def steps(self, n: int) -> None:
        """Migrate ``n`` steps up if positive, down if negative."""
        if n == 0:
            raise NoChangeError()
        with self._locked():
            current = self._clean_version()
            reader = self._reader()
            migrations = reader.read_up(current, n) if n > 0 else reader.read_down(current, -n)
            self._run_migrations(migrations)

    def up(self) -> None:
        """Apply all up migrations."""
        with self._locked():
            current = self._clean_version()
            self._run_migrations(self._reader().read_up(current, -1))

    def down(self) -> None:
        """Apply all down migrations."""
        with self._locked():
            current = self._clean_version()
            self._run_migrations(self._reader().read_down(current, -1))

    def drop(self) -> None:
        """Delete everything in the database."""
        with self._locked():
            self.database.drop()

    def run(self, *args: Migration) -> None:
        """Run the given migrations without consulting the source."""
        if not args:
            raise NoChangeError()
        with self._locked():
            self._clean_version()
            self._run_migrations(self._scheduled(args))

    def force(self, version: int) -> None:
        """Record ``version`` as current and clean, whatever the database holds."""
        if version < -1:
            raise InvalidVersionError()
        with self._locked():
            self.database.set_version(version, False)

    def version(self) -> tuple[int, bool]:
        """The current version and dirty flag; NilVersionError if none is applied."""
        current, dirty = self.database.version()
        if current == NIL_VERSION:
            raise NilVersionError()
        return suint(current), dirty

    def _reader(self) -> MigrationReader:
        return MigrationReader(
            self.source, prefetch=self.prefetch_migrations, stop=self._stop
        )

    def _clean_version(self) -> int:
        current, dirty = self.database.version()
        if dirty:
            raise DirtyError(current)
        return current

    def _scheduled(self, migrations: Iterable[Migration]) -> Iterator[Migration]:
        for migr in migrations:
            if self.prefetch_migrations > 0 and migr.body is not None:
                _log.debug("Start buffering %s", migr.log_string())
            else:
                _log.debug("Scheduled %s", migr.log_string())
            yield migr

    def _stop(self) -> bool:
        return self._graceful_stop.is_set()

    def _run_migrations(self, migrations: Iterator[Migration]) -> None:
        with contextlib.closing(self._prefetch(migrations)) as items:
            for migr in items:
                if self._stop():
                    return

                self.database.set_version(migr.target_version, True)
                if migr.body is not None:
                    _log.debug("Read and execute %s", migr.log_string())
                    migr.buffer()
                    if migr.buffered_body is not None:
                        self.database.run(migr.buffered_body)
                self.database.set_version(migr.target_version, False)

                end = datetime.now()
                started = migr.started_buffering or migr.scheduled
                finished = migr.finished_reading or end
                read_time = finished - started
                run_time = end - finished
                if _log.isEnabledFor(logging.DEBUG):
                    _log.debug(
                        "Finished %s (read %s, ran %s)",
                        migr.log_string(), read_time, run_time,
                    )
                else:
                    _log.info("%s (%s)", migr.log_string(), read_time + run_time)

    def _prefetch(self, migrations: Iterator[Migration]) -> Iterator[Migration]:
        """Read and buffer migrations ahead of the consumer in a thread."""
        if self.prefetch_migrations <= 0:
            yield from migrations
            return

        pending: queue.Queue[object] = queue.Queue(maxsize=self.prefetch_migrations)
        cancel = threading.Event()

        def put(item: object) -> bool:
            while not cancel.is_set():
                try:
                    pending.put(item, timeout=0.05)
                    return True
                except queue.Full:
                    continue
            return False

        def produce() -> None:
            try:
                for migr in migrations:
                    try:
                        migr.buffer()
                    except Exception as err:  # noqa: BLE001
                        _log.error("error: %s", err)
                        put(_Failure(err))
                        return
                    if not put(migr):
                        return
            except BaseException as err:  # noqa: BLE001 - handed to the consumer
                put(_Failure(err))
            finally:
                put(_DONE)

        worker = threading.Thread(target=produce, daemon=True)
        worker.start()
        try:
            while True:
                item = pending.get()
                if item is _DONE:
                    return
                if isinstance(item, _Failure):
                    raise item.error
                assert isinstance(item, Migration)
                yield item
        finally:
            cancel.set()

    @contextlib.contextmanager
    def _locked(self) -> Iterator[None]:
        self._lock()
        try:
            yield
        except BaseException as err:
            try:
                self._unlock()
            except Exception as unlock_err:
                raise MultiError(err, unlock_err) from err
            raise
        self._unlock()

    def _lock(self) -> None:
        with self._locked_mu:
            if self._is_locked:
                raise LockedError()

            done = threading.Event()
            failure: list[BaseException] = []

            def acquire() -> None:
                try:
                    self.database.lock()
                except BaseException as err:  # noqa: BLE001 - reported below
                    failure.append(err)
                finally:
                    done.set()

            threading.Thread(target=acquire, daemon=True).start()
            if not done.wait(self.lock_timeout):
                raise LockTimeoutError()
            if failure:
                raise failure[0]
            self._is_locked = True

    def _unlock(self) -> None:
        with self._locked_mu:
            self.database.unlock()
            self._is_locked = False


def new_with_instance(
    source_name: str,
    source_instance: SourceDriver,
    database_name: str,
    database_instance: DatabaseDriver,
) -> Migrate:
    """Create a Migrate from an existing source and database driver."""
    return Migrate(source_name, source_instance, database_name, database_instance)