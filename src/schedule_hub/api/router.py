"""CRUD endpoints for schedules, tags and workspace configurations."""

from fastapi import APIRouter, Depends, HTTPException, status

from schedule_hub.api.dependencies import get_services
from schedule_hub.api.schemas import (
    NoteUpdate,
    ScheduleCreate,
    ScheduleUpdate,
    TagCreate,
    WorkspaceCreate,
    WorkspaceOut,
)
from schedule_hub.container import AppServices
from schedule_hub.models.schedule import Schedule
from schedule_hub.models.tag import Tag
from schedule_hub.models.workspace import WorkspaceConfiguration

router = APIRouter(prefix="", tags=["schedules"])


# -- Schedules --


@router.get("/schedules")
async def list_schedules(services: AppServices = Depends(get_services)) -> list[Schedule]:
    """All schedules, latest start first."""
    return services.store.list_schedules()


@router.post("/schedules", status_code=status.HTTP_201_CREATED)
async def create_schedule(
    body: ScheduleCreate, services: AppServices = Depends(get_services)
) -> Schedule:
    return await services.service.create_manual(**body.model_dump())


@router.get("/schedules/{schedule_id}")
async def get_schedule(schedule_id: str, services: AppServices = Depends(get_services)) -> Schedule:
    return services.store.require_schedule(schedule_id)


@router.put("/schedules/{schedule_id}")
async def update_schedule(
    schedule_id: str,
    body: ScheduleUpdate,
    services: AppServices = Depends(get_services),
) -> Schedule:
    existing = services.store.require_schedule(schedule_id)
    updated = existing.model_copy(update=body.model_dump())
    return await services.service.update(updated)


@router.delete("/schedules/{schedule_id}")
async def delete_schedule(
    schedule_id: str, services: AppServices = Depends(get_services)
) -> Schedule:
    """Delete a schedule. Slack-sourced ones are never re-imported afterwards."""
    return await services.service.delete(schedule_id)


@router.post("/schedules/{schedule_id}/done")
async def toggle_done(schedule_id: str, services: AppServices = Depends(get_services)) -> Schedule:
    return await services.service.toggle_done(schedule_id)


@router.put("/schedules/{schedule_id}/note")
async def update_note(
    schedule_id: str,
    body: NoteUpdate,
    services: AppServices = Depends(get_services),
) -> Schedule:
    return services.service.update_note(schedule_id, body.note)


# -- Tags --


@router.get("/tags", tags=["tags"])
async def list_tags(services: AppServices = Depends(get_services)) -> list[Tag]:
    return services.store.list_tags()


@router.post("/tags", tags=["tags"], status_code=status.HTTP_201_CREATED)
async def create_tag(body: TagCreate, services: AppServices = Depends(get_services)) -> Tag:
    return services.store.upsert_tag(Tag(name=body.name, color=body.color))


@router.delete("/tags/{tag_id}", tags=["tags"], status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(tag_id: str, services: AppServices = Depends(get_services)) -> None:
    """Delete a tag. Schedules pointing at it keep the id and resolve to no tag."""
    if not services.store.delete_tag(tag_id):
        raise HTTPException(status_code=404, detail="Tag not found")


# -- Workspace configurations --


@router.get("/workspaces", tags=["workspaces"])
async def list_workspaces(services: AppServices = Depends(get_services)) -> list[WorkspaceOut]:
    return [WorkspaceOut.model_validate(c.model_dump()) for c in services.store.list_workspaces()]


@router.post("/workspaces", tags=["workspaces"], status_code=status.HTTP_201_CREATED)
async def create_workspace(
    body: WorkspaceCreate, services: AppServices = Depends(get_services)
) -> WorkspaceOut:
    saved = services.store.upsert_workspace(WorkspaceConfiguration(**body.model_dump()))
    return WorkspaceOut.model_validate(saved.model_dump())


@router.delete(
    "/workspaces/{workspace_id}", tags=["workspaces"], status_code=status.HTTP_204_NO_CONTENT
)
async def delete_workspace(workspace_id: str, services: AppServices = Depends(get_services)) -> None:
    if not services.store.delete_workspace(workspace_id):
        raise HTTPException(status_code=404, detail="Workspace not found")
