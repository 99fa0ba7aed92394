"""Apply versioned schema migrations from a source to a database."""

__version__ = "4.0.0"

__all__ = ["errors", "migrate", "migration", "reader", "sources", "util"]