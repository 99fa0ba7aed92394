"""A source driver reading migrations from a local directory."""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import unquote, urlsplit

from schemamigrate.sources.driver import register
from schemamigrate.sources.fs import PartialDriver


def parse_url(url: str) -> str:
    """Return the absolute directory named by a ``file://`` URL."""
    parts = urlsplit(url)
    # Host and path together restore the full path; the host may be ".".
    p = unquote(parts.netloc + parts.path)
    if not p:
        return os.getcwd()
    if not p.startswith("/"):
        return os.path.abspath(p)
    return p


class FileSource(PartialDriver):
    """Source driver for ``file://`` URLs."""

    def __init__(self, url: str = "", path: str = "") -> None:
        super().__init__()
        self.url = url
        self.path = path

    def open(self, url: str) -> FileSource:
        p = parse_url(url)
        driver = FileSource(url=url, path=p)
        driver.init(Path(p), ".")
        return driver


register("file", FileSource())