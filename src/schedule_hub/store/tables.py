"""SQLAlchemy ORM tables for the local schedule database.

Four tables live in one SQLite file: schedules, tags,
workspace_configurations and deleted_message_tombstones. New columns must
be nullable or carry a server default so the additive migration can add
them to an existing database.
"""

from datetime import datetime

from sqlalchemy import Boolean, Index, String, Text, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from schedule_hub.store.columns import JSONList, UTCDateTime


class Base(DeclarativeBase):
    pass


class ScheduleRow(Base):
    __tablename__ = "schedules"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    start_datetime: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_datetime: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    note: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    type: Mapped[str] = mapped_column(String, nullable=False, server_default="task")
    source: Mapped[str] = mapped_column(String, nullable=False, server_default="manual")

    workspace_id: Mapped[str | None] = mapped_column(String, nullable=True)
    channel_id: Mapped[str | None] = mapped_column(String, nullable=True)
    channel_name: Mapped[str | None] = mapped_column(String, nullable=True)
    source_message_id: Mapped[str | None] = mapped_column(String, nullable=True)
    source_deep_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_raw_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    workspace_color: Mapped[str | None] = mapped_column(String, nullable=True)

    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    links: Mapped[list[str]] = mapped_column(JSONList, nullable=False, server_default="[]")
    tag_id: Mapped[str | None] = mapped_column(String, nullable=True)
    notification_sent: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("0")
    )
    is_done: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("0"))
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        Index("ix_schedules_start_datetime", "start_datetime"),
        Index("ix_schedules_source_message_id", "source_message_id"),
    )


class TagRow(Base):
    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    color: Mapped[str] = mapped_column(String, nullable=False, server_default="#808080")


class WorkspaceConfigurationRow(Base):
    __tablename__ = "workspace_configurations"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    channel_id: Mapped[str] = mapped_column(String, nullable=False)
    channel_name: Mapped[str] = mapped_column(String, nullable=False, server_default="")
    token: Mapped[str] = mapped_column(String, nullable=False)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    team_id: Mapped[str | None] = mapped_column(String, nullable=True)
    keywords: Mapped[list[str]] = mapped_column(JSONList, nullable=False, server_default="[]")
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("1"))
    color: Mapped[str] = mapped_column(String, nullable=False, server_default="#4A90E2")
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )


class DeletedMessageTombstoneRow(Base):
    __tablename__ = "deleted_message_tombstones"

    source_message_id: Mapped[str] = mapped_column(String, primary_key=True)
    deleted_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
