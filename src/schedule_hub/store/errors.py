"""Persistence failures."""

from enum import Enum


class StoreErrorKind(str, Enum):
    """Which stage of a database operation failed."""

    OPEN = "open"  # Cannot open/create the database file
    PREPARE = "prepare"  # Statement rejected (schema mismatch, bad SQL)
    STEP = "step"  # Statement failed while executing (locked, constraint, I/O)
    NOT_FOUND = "not_found"


class StoreError(Exception):
    """Raised by ScheduleStore. Never recovered internally; callers decide."""

    def __init__(self, kind: StoreErrorKind, detail: str = ""):
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)
        self.kind = kind
        self.detail = detail
