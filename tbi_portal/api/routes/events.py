"""Event Routes — approved events for everyone, full listing and moderation for admins."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from tbi_portal.api.deps import get_event_handlers, require_admin
from tbi_portal.api.responses import action_response
from tbi_portal.core.domain_types import EventStatus
from tbi_portal.schemas.event import EventCreate, EventStatusUpdate, EventUpdate, EventView
from tbi_portal.services.handle_events import EventHandlers

router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.get("", response_model=list[EventView])
async def list_public_events(handlers: EventHandlers = Depends(get_event_handlers)):
    return await handlers.list_public_events()


@router.get("/all", response_model=list[EventView], dependencies=[Depends(require_admin)])
async def list_all_events(
    status_filter: EventStatus | None = Query(None, alias="status"),
    search: str | None = Query(None, max_length=200),
    date_from: date | None = None,
    date_to: date | None = None,
    handlers: EventHandlers = Depends(get_event_handlers),
):
    return await handlers.list_events(status_filter, search, date_from, date_to)


@router.post("", dependencies=[Depends(require_admin)])
async def create_event(body: EventCreate, handlers: EventHandlers = Depends(get_event_handlers)):
    result = await handlers.create_event(body)
    return action_response(result, success_status=status.HTTP_201_CREATED)


@router.get("/{event_id}", response_model=EventView)
async def get_event(event_id: str, handlers: EventHandlers = Depends(get_event_handlers)):
    return await handlers.get_event(event_id, public=True)


@router.patch("/{event_id}", dependencies=[Depends(require_admin)])
async def update_event(
    event_id: str, body: EventUpdate, handlers: EventHandlers = Depends(get_event_handlers),
):
    return action_response(await handlers.update_event(event_id, body))


@router.post("/{event_id}/status", dependencies=[Depends(require_admin)])
async def set_event_status(
    event_id: str, body: EventStatusUpdate,
    handlers: EventHandlers = Depends(get_event_handlers),
):
    return action_response(await handlers.set_event_status(event_id, body.status))


@router.delete("/{event_id}", dependencies=[Depends(require_admin)])
async def delete_event(event_id: str, handlers: EventHandlers = Depends(get_event_handlers)):
    return action_response(await handlers.delete_event(event_id))
