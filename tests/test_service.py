"""Tests for ScheduleService: store writes paired with scheduler registration."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from schedule_hub.config import get_settings
from schedule_hub.models.schedule import ScheduleSource, ScheduleType
from schedule_hub.models.tag import Tag
from schedule_hub.service import ScheduleService
from schedule_hub.store.database import ScheduleStore
from schedule_hub.store.errors import StoreError, StoreErrorKind

START = datetime.now(timezone.utc) + timedelta(days=1)


@pytest.fixture()
def scheduler() -> AsyncMock:
    return AsyncMock()


@pytest.fixture()
def service(store: ScheduleStore, scheduler: AsyncMock) -> ScheduleService:
    return ScheduleService(store, scheduler)


async def test_create_manual(service: ScheduleService, store: ScheduleStore, scheduler: AsyncMock):
    created = await service.create_manual("1:1 with Mina", START, note="career chat")

    assert created.source == ScheduleSource.MANUAL
    assert created.type == ScheduleType.TASK
    assert created.id == created.id.upper()
    assert store.get_schedule(created.id) == created
    scheduler.schedule_one_shot.assert_awaited_once_with(created)


async def test_update_reregisters_one_shot(
    service: ScheduleService, store: ScheduleStore, scheduler: AsyncMock
):
    created = await service.create_manual("Review", START)
    moved = created.model_copy(update={"start_datetime": START + timedelta(hours=2)})

    saved = await service.update(moved)

    assert store.get_schedule(created.id).start_datetime == START + timedelta(hours=2)
    scheduler.cancel.assert_awaited_once_with(created.id)
    assert scheduler.schedule_one_shot.await_args.args[0] == saved


async def test_create_manual_with_naive_start(service: ScheduleService, store: ScheduleStore):
    naive = datetime(2030, 1, 1, 10, 0)

    created = await service.create_manual("Kickoff", naive)

    assert created.start_datetime == naive.replace(tzinfo=get_settings().tzinfo)
    assert created.start_datetime.tzinfo is not None
    assert store.get_schedule(created.id) == created


async def test_update_new_start_clears_notification_sent(
    service: ScheduleService, store: ScheduleStore
):
    created = await service.create_manual("Review", START)
    store.mark_notified(created.id)
    notified = store.get_schedule(created.id)

    saved = await service.update(
        notified.model_copy(update={"start_datetime": START + timedelta(days=1)})
    )

    assert saved.notification_sent is False
    assert store.get_schedule(created.id).notification_sent is False


async def test_update_same_start_keeps_notification_sent(
    service: ScheduleService, store: ScheduleStore
):
    created = await service.create_manual("Review", START)
    store.mark_notified(created.id)
    notified = store.get_schedule(created.id)

    saved = await service.update(notified.model_copy(update={"title": "Renamed"}))

    assert saved.notification_sent is True


async def test_update_done_schedule_not_registered(service: ScheduleService, scheduler: AsyncMock):
    created = await service.create_manual("Review", START)
    scheduler.schedule_one_shot.reset_mock()

    await service.update(created.model_copy(update={"is_done": True}))

    scheduler.schedule_one_shot.assert_not_called()


async def test_delete_cancels_notifications(
    service: ScheduleService, store: ScheduleStore, scheduler: AsyncMock
):
    created = await service.create_manual("Review", START)

    deleted = await service.delete(created.id)

    assert deleted.id == created.id
    assert store.get_schedule(created.id) is None
    scheduler.cancel.assert_awaited_once_with(created.id)


async def test_delete_missing_raises(service: ScheduleService, scheduler: AsyncMock):
    with pytest.raises(StoreError) as exc_info:
        await service.delete("nope")
    assert exc_info.value.kind == StoreErrorKind.NOT_FOUND
    scheduler.cancel.assert_not_called()


async def test_toggle_done(service: ScheduleService, scheduler: AsyncMock):
    created = await service.create_manual("Review", START)

    done = await service.toggle_done(created.id)
    undone = await service.toggle_done(created.id)

    assert done.is_done is True
    assert undone.is_done is False
    scheduler.cancel.assert_awaited_once_with(created.id)
    assert scheduler.schedule_one_shot.await_count == 2


async def test_update_note(service: ScheduleService, store: ScheduleStore):
    created = await service.create_manual("Review", START)

    service.update_note(created.id, "- decided X")

    assert store.get_schedule(created.id).note == "- decided X"


async def test_tag_for(service: ScheduleService, store: ScheduleStore):
    tag = store.upsert_tag(Tag(name="focus", color="#654321"))
    tagged = await service.create_manual("Deep work", START, tag_id=tag.id)
    untagged = await service.create_manual("Lunch", START)

    assert service.tag_for(tagged) == tag
    assert service.tag_for(untagged) is None
    store.delete_tag(tag.id)
    assert service.tag_for(tagged) is None
