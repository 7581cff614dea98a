"""Request and response bodies for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from schedule_hub.models.schedule import ScheduleType, assume_local


class ScheduleCreate(BaseModel):
    title: str = Field(min_length=1)
    start_datetime: datetime
    end_datetime: datetime | None = None
    note: str = ""
    type: ScheduleType = ScheduleType.TASK
    location: str | None = None
    links: list[str] = []
    tag_id: str | None = None

    @field_validator("start_datetime", "end_datetime")
    @classmethod
    def _naive_is_local(cls, value: datetime | None) -> datetime | None:
        return assume_local(value)


class ScheduleUpdate(ScheduleCreate):
    """Editable fields. Slack provenance fields are kept from the stored row."""

    is_done: bool = False


class NoteUpdate(BaseModel):
    note: str


class TagCreate(BaseModel):
    name: str = Field(min_length=1)
    color: str = "#808080"


class WorkspaceCreate(BaseModel):
    name: str = Field(min_length=1)
    channel_id: str = Field(min_length=1)
    channel_name: str = ""
    token: str = Field(min_length=1)
    user_id: str | None = None
    team_id: str | None = None
    keywords: list[str] = []
    is_enabled: bool = True
    color: str = "#4A90E2"


class WorkspaceOut(BaseModel):
    """Workspace configuration without its token."""

    id: str
    name: str
    channel_id: str
    channel_name: str
    user_id: str | None
    team_id: str | None
    keywords: list[str]
    is_enabled: bool
    color: str
    created_at: datetime
