"""SQLite-backed store for schedules, tags, workspace configurations and tombstones.

``ScheduleStore`` is constructed once at process start and passed to the
pipeline, scheduler and API. Every read and write goes through one lock and
a short-lived session, so there is never more than one writer against the
database file.

Usage:
    store = ScheduleStore("sqlite:////path/to/schedule_hub.sqlite")
    store.initialize()  # create tables, add missing columns, seed tags
    store.upsert_schedule(schedule)
"""

import logging
import threading
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import OperationalError, ProgrammingError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from schedule_hub.models.schedule import Schedule, ScheduleSource
from schedule_hub.models.tag import DEFAULT_MEETING_TAG, DEFAULT_MENTION_TAG, Tag
from schedule_hub.models.workspace import WorkspaceConfiguration
from schedule_hub.store.errors import StoreError, StoreErrorKind
from schedule_hub.store.migrations import apply_additive_migrations
from schedule_hub.store.tables import (
    Base,
    DeletedMessageTombstoneRow,
    ScheduleRow,
    TagRow,
    WorkspaceConfigurationRow,
)

logger = logging.getLogger(__name__)

# Statement-level failures that mean the SQL or schema is wrong, not the data
_PREPARE_MARKERS = ("no such table", "no such column", "syntax error")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _classify(exc: SQLAlchemyError) -> StoreError:
    message = str(getattr(exc, "orig", exc) or exc)
    lowered = message.lower()
    if isinstance(exc, ProgrammingError) or any(m in lowered for m in _PREPARE_MARKERS):
        return StoreError(StoreErrorKind.PREPARE, message)
    if isinstance(exc, OperationalError) and "unable to open" in lowered:
        return StoreError(StoreErrorKind.OPEN, message)
    return StoreError(StoreErrorKind.STEP, message)


def _schedule_values(schedule: Schedule) -> dict[str, Any]:
    values = schedule.model_dump()
    values["type"] = schedule.type.value
    values["source"] = schedule.source.value
    return values


def _to_schedule(row: ScheduleRow) -> Schedule:
    return Schedule.model_validate(row, from_attributes=True)


def _to_tag(row: TagRow) -> Tag:
    return Tag.model_validate(row, from_attributes=True)


def _to_workspace(row: WorkspaceConfigurationRow) -> WorkspaceConfiguration:
    return WorkspaceConfiguration.model_validate(row, from_attributes=True)


class ScheduleStore:
    """Serialized access to the schedule database.

    Args:
        database_url: SQLAlchemy URL, e.g. ``sqlite:////home/me/.schedule-hub/db.sqlite``.
        echo: Log emitted SQL.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self._lock = threading.RLock()
        self._engine = self._create_engine(database_url, echo)
        self._sessionmaker = sessionmaker(
            bind=self._engine,
            autoflush=False,
            expire_on_commit=False,
        )

    # -- Setup --

    @staticmethod
    def _create_engine(database_url: str, echo: bool) -> Engine:
        url = make_url(database_url)
        is_sqlite = url.get_backend_name() == "sqlite"

        if is_sqlite and url.database and url.database != ":memory:":
            try:
                Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StoreError(StoreErrorKind.OPEN, str(exc)) from exc

        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False} if is_sqlite else {},
            echo=echo,
        )

        if is_sqlite:

            @event.listens_for(engine, "connect")
            def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA journal_mode=WAL;")
                cursor.execute("PRAGMA synchronous=NORMAL;")
                cursor.close()

        return engine

    def initialize(self) -> None:
        """Create missing tables, add missing columns and seed the default tags.

        Safe to call on every startup. A database that cannot be opened raises
        ``StoreError(OPEN)``; the process cannot continue without it.
        """
        with self._lock:
            try:
                Base.metadata.create_all(self._engine)
                added = apply_additive_migrations(self._engine)
            except OperationalError as exc:
                error = _classify(exc)
                if error.kind == StoreErrorKind.STEP:
                    error = StoreError(StoreErrorKind.OPEN, error.detail)
                raise error from exc
            except SQLAlchemyError as exc:
                raise _classify(exc) from exc

            if added:
                logger.info("Schema migrated", extra={"added_columns": added})
            self.seed_default_tags()
        logger.info("Database ready at %s", self.database_url)

    @property
    def engine(self) -> Engine:
        return self._engine

    def dispose(self) -> None:
        self._engine.dispose()

    @contextmanager
    def _transaction(self) -> Generator[Session, None, None]:
        """One locked session per operation; commit on success, rollback on error."""
        with self._lock:
            session = self._sessionmaker()
            try:
                yield session
                session.commit()
            except StoreError:
                session.rollback()
                raise
            except SQLAlchemyError as exc:
                session.rollback()
                raise _classify(exc) from exc
            finally:
                session.close()

    # -- Schedules --

    def upsert_schedule(self, schedule: Schedule) -> Schedule:
        """Insert, or overwrite every field of the row with the same id.

        ``created_at`` keeps the value from the first insert.
        """
        with self._transaction() as session:
            row = self._upsert_schedule_row(session, schedule)
            return _to_schedule(row)

    def upsert_schedules(self, schedules: Iterable[Schedule]) -> list[Schedule]:
        """Upsert a batch in one transaction. All or nothing."""
        with self._transaction() as session:
            rows = [self._upsert_schedule_row(session, s) for s in schedules]
            return [_to_schedule(row) for row in rows]

    @staticmethod
    def _upsert_schedule_row(session: Session, schedule: Schedule) -> ScheduleRow:
        values = _schedule_values(schedule)
        row = session.get(ScheduleRow, schedule.id)
        if row is None:
            row = ScheduleRow(**values)
            session.add(row)
        else:
            values.pop("created_at")
            for key, value in values.items():
                setattr(row, key, value)
        session.flush()
        # Reload through the column types: aware UTC datetimes, parsed lists
        session.refresh(row)
        return row

    def get_schedule(self, schedule_id: str) -> Schedule | None:
        with self._transaction() as session:
            row = session.get(ScheduleRow, schedule_id)
            return _to_schedule(row) if row is not None else None

    def require_schedule(self, schedule_id: str) -> Schedule:
        """Like ``get_schedule`` but raises ``StoreError(NOT_FOUND)``."""
        schedule = self.get_schedule(schedule_id)
        if schedule is None:
            raise StoreError(StoreErrorKind.NOT_FOUND, f"schedule {schedule_id}")
        return schedule

    def list_schedules(self) -> list[Schedule]:
        """All schedules, latest start first."""
        with self._transaction() as session:
            rows = session.scalars(
                select(ScheduleRow).order_by(ScheduleRow.start_datetime.desc())
            ).all()
            return [_to_schedule(row) for row in rows]

    def list_between(self, start: datetime, end: datetime) -> list[Schedule]:
        """Schedules starting in ``[start, end)``, earliest first."""
        with self._transaction() as session:
            rows = session.scalars(
                select(ScheduleRow)
                .where(ScheduleRow.start_datetime >= start, ScheduleRow.start_datetime < end)
                .order_by(ScheduleRow.start_datetime.asc())
            ).all()
            return [_to_schedule(row) for row in rows]

    def schedule_exists(self, schedule_id: str) -> bool:
        return bool(self.existing_ids([schedule_id]))

    def existing_ids(self, schedule_ids: Iterable[str]) -> set[str]:
        """Subset of ``schedule_ids`` that already have a row."""
        ids = list(set(schedule_ids))
        if not ids:
            return set()
        with self._transaction() as session:
            found = session.scalars(select(ScheduleRow.id).where(ScheduleRow.id.in_(ids))).all()
            return set(found)

    def delete_schedule(self, schedule_id: str) -> Schedule:
        """Delete a schedule; for Slack-sourced rows, tombstone the message first.

        The tombstone insert and the row delete share one transaction, so a
        later sync can never see the message as both absent and not deleted.

        Raises:
            StoreError(NOT_FOUND): no schedule with that id.
        """
        with self._transaction() as session:
            row = session.get(ScheduleRow, schedule_id)
            if row is None:
                raise StoreError(StoreErrorKind.NOT_FOUND, f"schedule {schedule_id}")
            deleted = _to_schedule(row)

            if row.source == ScheduleSource.SLACK.value and row.source_message_id:
                if session.get(DeletedMessageTombstoneRow, row.source_message_id) is None:
                    session.add(
                        DeletedMessageTombstoneRow(
                            source_message_id=row.source_message_id,
                            deleted_at=_utc_now(),
                        )
                    )
                    session.flush()
                logger.info("Recorded deleted Slack message %s", row.source_message_id)

            session.delete(row)

        logger.info("Deleted schedule %s", schedule_id)
        return deleted

    def set_done(self, schedule_id: str, is_done: bool) -> Schedule:
        with self._transaction() as session:
            row = session.get(ScheduleRow, schedule_id)
            if row is None:
                raise StoreError(StoreErrorKind.NOT_FOUND, f"schedule {schedule_id}")
            row.is_done = is_done
            return _to_schedule(row)

    def update_note(self, schedule_id: str, note: str) -> Schedule:
        with self._transaction() as session:
            row = session.get(ScheduleRow, schedule_id)
            if row is None:
                raise StoreError(StoreErrorKind.NOT_FOUND, f"schedule {schedule_id}")
            row.note = note
            return _to_schedule(row)

    def mark_notified(self, schedule_id: str) -> bool:
        """Set notification_sent. Idempotent; returns False if the schedule no longer exists."""
        with self._transaction() as session:
            result = session.execute(
                update(ScheduleRow)
                .where(ScheduleRow.id == schedule_id)
                .values(notification_sent=True)
            )
            return result.rowcount > 0

    def upcoming(
        self,
        within_minutes: int = 5,
        now: datetime | None = None,
        grace_minutes: int = 0,
    ) -> list[Schedule]:
        """Unnotified, not-done schedules starting in ``(now - grace, now + within]``.

        Latest start first. With the default ``grace_minutes=0`` this is
        exactly the window ``(now, now + within]``.
        """
        now = now or _utc_now()
        lower = now - timedelta(minutes=grace_minutes)
        upper = now + timedelta(minutes=within_minutes)
        with self._transaction() as session:
            rows = session.scalars(
                select(ScheduleRow)
                .where(
                    ScheduleRow.notification_sent.is_(False),
                    ScheduleRow.is_done.is_(False),
                    ScheduleRow.start_datetime > lower,
                    ScheduleRow.start_datetime <= upper,
                )
                .order_by(ScheduleRow.start_datetime.desc())
            ).all()
            return [_to_schedule(row) for row in rows]

    # -- Tombstones --

    def is_deleted_message(self, source_message_id: str) -> bool:
        return bool(self.deleted_message_ids([source_message_id]))

    def deleted_message_ids(self, source_message_ids: Iterable[str]) -> set[str]:
        """Subset of ``source_message_ids`` the user has deleted before."""
        ids = list(set(source_message_ids))
        if not ids:
            return set()
        with self._transaction() as session:
            found = session.scalars(
                select(DeletedMessageTombstoneRow.source_message_id).where(
                    DeletedMessageTombstoneRow.source_message_id.in_(ids)
                )
            ).all()
            return set(found)

    # -- Tags --

    def upsert_tag(self, tag: Tag) -> Tag:
        with self._transaction() as session:
            row = session.get(TagRow, tag.id)
            if row is None:
                row = TagRow(id=tag.id, name=tag.name, color=tag.color)
                session.add(row)
            else:
                row.name = tag.name
                row.color = tag.color
            return _to_tag(row)

    def list_tags(self) -> list[Tag]:
        with self._transaction() as session:
            rows = session.scalars(select(TagRow).order_by(TagRow.name.asc())).all()
            return [_to_tag(row) for row in rows]

    def get_tag(self, tag_id: str) -> Tag | None:
        with self._transaction() as session:
            row = session.get(TagRow, tag_id)
            return _to_tag(row) if row is not None else None

    def find_tag_by_name(self, name: str) -> Tag | None:
        with self._transaction() as session:
            row = session.scalars(select(TagRow).where(TagRow.name == name).limit(1)).first()
            return _to_tag(row) if row is not None else None

    def resolve_tag(self, tag_id: str | None) -> Tag | None:
        """Look up a schedule's tag reference. Missing or deleted tags resolve to None."""
        if not tag_id:
            return None
        return self.get_tag(tag_id)

    def delete_tag(self, tag_id: str) -> bool:
        """Delete the tag only. Schedules keep their (now dangling) tag_id."""
        with self._transaction() as session:
            row = session.get(TagRow, tag_id)
            if row is None:
                return False
            session.delete(row)
            return True

    def seed_default_tags(self) -> list[Tag]:
        """Create the meeting and mention tags if no tag with their name exists."""
        seeded: list[Tag] = []
        for default in (DEFAULT_MEETING_TAG, DEFAULT_MENTION_TAG):
            existing = self.find_tag_by_name(default.name)
            if existing is None:
                existing = self.upsert_tag(Tag(name=default.name, color=default.color))
                logger.info("Seeded default tag %s", default.name)
            seeded.append(existing)
        return seeded

    # -- Workspace configurations --

    def upsert_workspace(self, config: WorkspaceConfiguration) -> WorkspaceConfiguration:
        values = config.model_dump()
        with self._transaction() as session:
            row = session.get(WorkspaceConfigurationRow, config.id)
            if row is None:
                row = WorkspaceConfigurationRow(**values)
                session.add(row)
            else:
                values.pop("created_at")
                for key, value in values.items():
                    setattr(row, key, value)
            session.flush()
            session.refresh(row)
            return _to_workspace(row)

    def get_workspace(self, workspace_id: str) -> WorkspaceConfiguration | None:
        with self._transaction() as session:
            row = session.get(WorkspaceConfigurationRow, workspace_id)
            return _to_workspace(row) if row is not None else None

    def list_workspaces(self) -> list[WorkspaceConfiguration]:
        with self._transaction() as session:
            rows = session.scalars(
                select(WorkspaceConfigurationRow).order_by(
                    WorkspaceConfigurationRow.created_at.asc()
                )
            ).all()
            return [_to_workspace(row) for row in rows]

    def list_enabled_workspaces(self) -> list[WorkspaceConfiguration]:
        return [config for config in self.list_workspaces() if config.is_enabled]

    def delete_workspace(self, workspace_id: str) -> bool:
        with self._transaction() as session:
            row = session.get(WorkspaceConfigurationRow, workspace_id)
            if row is None:
                return False
            session.delete(row)
            return True

    def has_any_workspace(self) -> bool:
        with self._transaction() as session:
            return session.scalars(select(WorkspaceConfigurationRow.id).limit(1)).first() is not None
