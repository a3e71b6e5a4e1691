from __future__ import annotations


class SeedError(Exception):
    """Base class for seeding pipeline failures."""


class NotFoundError(SeedError):
    """A required source file is missing."""


class ParseError(SeedError):
    """A source file could not be parsed as delimited text."""


class ResolutionError(SeedError):
    """A row names a parent that was never registered in this run."""

    def __init__(self, label: str, key: str | None):
        self.label = label
        self.key = key
        super().__init__(f"{label} not found: {key!r}")


class StorageError(SeedError):
    """An insert or delete failed at the database boundary."""


class IntegrityWarning(SeedError):
    """Post-seed verification found empty tables."""

    def __init__(self, empty_tables: list[str]):
        self.empty_tables = empty_tables
        super().__init__(f"tables with zero rows: {', '.join(empty_tables)}")
