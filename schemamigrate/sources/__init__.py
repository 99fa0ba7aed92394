"""Sources that list and read migration files: directories, trees, in-memory assets and a stub."""

__all__ = ["bindata", "driver", "file", "fs", "migrations", "stub"]