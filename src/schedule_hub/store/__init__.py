"""Local SQLite persistence for schedules, tags, workspaces and tombstones."""

from schedule_hub.store.database import ScheduleStore
from schedule_hub.store.errors import StoreError, StoreErrorKind

__all__ = ["ScheduleStore", "StoreError", "StoreErrorKind"]
