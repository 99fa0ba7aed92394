"""A single migration as it is scheduled, buffered and run."""

from __future__ import annotations

import io
from datetime import datetime
from typing import BinaryIO

DEFAULT_BUFFER_SIZE = 100_000
"""Bytes read ahead for every pre-read migration before it is run."""


class Migration:
    """A migration moving the database from ``version`` to ``target_version``.

    ``body`` may be None, which makes this a nil migration: the version is
    applied but nothing is executed. ``target_version`` may be -1, meaning
    that no version is left once the migration has run.
    """

    def __init__(
        self,
        body: BinaryIO | None,
        identifier: str,
        version: int,
        target_version: int,
    ) -> None:
        now = datetime.now()
        self.identifier = identifier
        self.version = version
        self.target_version = target_version
        self.body = body
        self.buffered_body: BinaryIO | None = None
        self.buffer_size = 0
        self.scheduled = now
        self.started_buffering: datetime | None = None
        self.finished_buffering: datetime | None = None
        self.finished_reading: datetime | None = None
        self.bytes_read = 0
        self._buffered = False

        if body is None:
            if not identifier:
                self.identifier = "<empty>"
            self.started_buffering = now
            self.finished_buffering = now
            self.finished_reading = now
        else:
            self.buffer_size = DEFAULT_BUFFER_SIZE

    def __str__(self) -> str:
        return f"{self.identifier} [{self.version}=>{self.target_version}]"

    def __repr__(self) -> str:
        return f"Migration({self})"

    def log_string(self) -> str:
        """A short human-readable description of this migration."""
        direction = "d" if self.target_version < self.version else "u"
        return f"{self.version}/{direction} {self.identifier}"

    def buffer(self) -> None:
        """Read the whole body into ``buffered_body`` and close the body."""
        if self.body is None or self._buffered:
            return

        self.started_buffering = datetime.now()
        head = self.body.read(self.buffer_size) if self.buffer_size > 0 else b""
        self.finished_buffering = datetime.now()

        data = (head or b"") + (self.body.read() or b"")
        self.buffered_body = io.BytesIO(data)
        self.finished_reading = datetime.now()
        self.bytes_read = len(data)
        self._buffered = True

        self.body.close()