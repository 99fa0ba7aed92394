"""Small helpers shared across the package."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


class MultiError(Exception):
    """Several errors reported as one; their messages are joined with 'and'."""

    def __init__(self, *errors: BaseException | None) -> None:
        self.errors = [e for e in errors if e is not None]
        super().__init__(" and ".join(msg for msg in map(str, self.errors) if msg))


def suint(n: int) -> int:
    """Return ``n`` unchanged, refusing negative values."""
    if n < 0:
        raise ValueError(f"suint({n}) expects input >= 0")
    return n


def filter_custom_query(url: str) -> str:
    """Return ``url`` without the query parameters whose names start with ``x-``."""
    parts = urlsplit(url)
    pairs = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if not key.startswith("x-")
    ]
    pairs.sort(key=lambda kv: kv[0])
    return urlunsplit(parts._replace(query=urlencode(pairs)))