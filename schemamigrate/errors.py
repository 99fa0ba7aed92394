"""Errors raised while migrating."""

from __future__ import annotations


class MigrateError(Exception):
    """Base class of the errors raised by migration runs."""

    default_message = "migration error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(self.default_message if message is None else message)


class NoChangeError(MigrateError):
    """Nothing had to be done."""

    default_message = "no change"


class NilVersionError(MigrateError):
    """No migration has been applied yet."""

    default_message = "no migration"


class InvalidVersionError(MigrateError):
    """A version below -1 was given."""

    default_message = "version must be >= -1"


class LockedError(MigrateError):
    """The database is already locked by this instance."""

    default_message = "database locked"


class LockTimeoutError(MigrateError):
    """The database lock could not be acquired in time."""

    default_message = "timeout: can't acquire database lock"


class ShortLimitError(MigrateError):
    """The source ran out of migrations before a step limit was reached."""

    def __init__(self, short: int) -> None:
        self.short = short
        super().__init__(f"limit {short} short")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ShortLimitError) and other.short == self.short

    def __hash__(self) -> int:
        return hash((ShortLimitError, self.short))


class DirtyError(MigrateError):
    """The database was left in a dirty state at ``version``."""

    def __init__(self, version: int) -> None:
        self.version = version
        super().__init__(f"Dirty database version {version}. Fix and force version.")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DirtyError) and other.version == self.version

    def __hash__(self) -> int:
        return hash((DirtyError, self.version))