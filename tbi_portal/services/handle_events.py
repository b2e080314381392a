"""Event Handlers — creation, edits, moderation, deletion and the listings.

Invariants:
    - Mutations never raise: every outcome is an ActionResult
    - Public reads see approved events only; an unapproved event is "not found" to them
    - Listings are newest date first; timing labels are computed per read, never stored
"""

import logging
from datetime import date, datetime

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tbi_portal.core.domain_types import EventStatus
from tbi_portal.core.errors import ResourceNotFoundError, ValidationFailedError
from tbi_portal.core.event_schedule import publicly_visible, timing_label
from tbi_portal.db.base import utcnow
from tbi_portal.models.event import Event
from tbi_portal.schemas.common import ActionResult
from tbi_portal.schemas.event import EventCreate, EventCreateResult, EventUpdate, EventView
from tbi_portal.services.action_guard import reported

logger = logging.getLogger(__name__)

_REQUIRED = ("title", "description", "date", "time", "venue")


class EventHandlers:
    def __init__(self, db: AsyncSession):
        self.db = db

    @reported(EventCreateResult, "Failed to create event.")
    async def create_event(self, data: EventCreate) -> EventCreateResult:
        event = Event(
            title=data.title,
            description=data.description,
            event_date=data.date,
            time=data.time,
            venue=data.venue,
            apply_link=str(data.apply_link) if data.apply_link else None,
            image_url=str(data.image_url) if data.image_url else None,
            status=data.status.value,
        )
        self.db.add(event)
        await self.db.commit()
        logger.info("Event created", extra={"event_id": event.id})
        return EventCreateResult(
            success=True, message="Event created successfully.", event_id=event.id,
        )

    @reported(ActionResult, "Failed to update event.")
    async def update_event(self, event_id: str, data: EventUpdate) -> ActionResult:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationFailedError("No event fields to update.")
        for key in _REQUIRED:
            if key in changes and changes[key] is None:
                raise ValidationFailedError(f"{key} cannot be empty.", key)

        event = await self._get(event_id)
        if "date" in changes:
            changes["event_date"] = changes.pop("date")
        for key in ("apply_link", "image_url"):
            if key in changes and changes[key] is not None:
                changes[key] = str(changes[key])
        for key, value in changes.items():
            setattr(event, key, value)
        event.updated_at = utcnow()
        await self.db.commit()
        logger.info("Event updated", extra={"event_id": event_id})
        return ActionResult(success=True, message="Event updated successfully.")

    @reported(ActionResult, "Failed to update event status.")
    async def set_event_status(self, event_id: str, status: EventStatus) -> ActionResult:
        event = await self._get(event_id)
        event.status = status.value
        event.updated_at = utcnow()
        await self.db.commit()
        logger.info(f"Event marked {status.value}", extra={"event_id": event_id})
        return ActionResult(success=True, message=f"Event marked as {status.value}.")

    @reported(ActionResult, "Failed to delete event.")
    async def delete_event(self, event_id: str) -> ActionResult:
        event = await self._get(event_id)
        await self.db.delete(event)
        await self.db.commit()
        logger.info("Event deleted", extra={"event_id": event_id})
        return ActionResult(success=True, message="Event deleted successfully.")

    # --- Queries ---

    async def list_events(
        self,
        status: EventStatus | None = None,
        search: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        now: datetime | None = None,
    ) -> list[EventView]:
        """Admin listing; every filter optional, date range inclusive."""
        query = select(Event).order_by(Event.event_date.desc(), Event.time.desc())
        if status:
            query = query.where(Event.status == status.value)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.where(or_(
                Event.title.ilike(pattern),
                Event.description.ilike(pattern),
                Event.venue.ilike(pattern),
            ))
        if date_from:
            query = query.where(Event.event_date >= date_from)
        if date_to:
            query = query.where(Event.event_date <= date_to)
        result = await self.db.execute(query)
        now = now or utcnow()
        return [_view(event, now) for event in result.scalars().all()]

    async def list_public_events(self, now: datetime | None = None) -> list[EventView]:
        return await self.list_events(status=EventStatus.APPROVED, now=now)

    async def get_event(self, event_id: str, public: bool = False) -> EventView:
        event = await self._get(event_id)
        if public and not publicly_visible(event.status):
            raise ResourceNotFoundError("Event", event_id)
        return _view(event, utcnow())

    # --- Internal ---

    async def _get(self, event_id: str) -> Event:
        event = await self.db.get(Event, event_id)
        if event is None:
            raise ResourceNotFoundError("Event", event_id)
        return event


def _view(event: Event, now: datetime) -> EventView:
    return EventView(
        id=event.id,
        title=event.title,
        description=event.description,
        date=event.event_date,
        time=event.time,
        venue=event.venue,
        apply_link=event.apply_link,
        image_url=event.image_url,
        status=event.status,
        timing=timing_label(event.event_date, event.time, now),
        created_at=event.created_at,
        updated_at=event.updated_at,
    )
