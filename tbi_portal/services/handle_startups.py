"""Startup Handlers — showcase CRUD and the bulk table import.

Invariants:
    - Mutations never raise: every outcome is an ActionResult
    - Stored logo_url is never empty (core/startup_catalog.py placeholder)
    - Import validates every row on its own; one bad row never blocks the rest

Design Decisions:
    - Update is a full replace, matching the admin edit form that resends every field
    - Import commits once at the end: rows that validated are written together
"""

import logging

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tbi_portal.core.errors import ErrorKind, ResourceNotFoundError
from tbi_portal.core.startup_catalog import (
    import_summary, resolve_logo_url, startup_fields_from_row,
)
from tbi_portal.db.base import utcnow
from tbi_portal.models.startup import Startup
from tbi_portal.schemas.common import ActionResult
from tbi_portal.schemas.startup import (
    StartupCreate, StartupCreateResult, StartupImportError,
    StartupImportResult, StartupUpdate,
)
from tbi_portal.services.action_guard import reported

logger = logging.getLogger(__name__)


class StartupHandlers:
    def __init__(self, db: AsyncSession):
        self.db = db

    @reported(StartupCreateResult, "Failed to add startup.")
    async def create_startup(self, data: StartupCreate) -> StartupCreateResult:
        startup = Startup(**_columns(data))
        self.db.add(startup)
        await self.db.commit()
        logger.info("Startup added", extra={"startup_id": startup.id})
        return StartupCreateResult(
            success=True, message="Startup added successfully.", startup_id=startup.id,
        )

    @reported(ActionResult, "Failed to update startup.")
    async def update_startup(self, startup_id: str, data: StartupUpdate) -> ActionResult:
        startup = await self.db.get(Startup, startup_id)
        if startup is None:
            raise ResourceNotFoundError("Startup", startup_id)
        for key, value in _columns(data).items():
            setattr(startup, key, value)
        startup.updated_at = utcnow()
        await self.db.commit()
        logger.info("Startup updated", extra={"startup_id": startup_id})
        return ActionResult(success=True, message="Startup updated successfully.")

    @reported(ActionResult, "Failed to delete startup.")
    async def delete_startup(self, startup_id: str) -> ActionResult:
        startup = await self.db.get(Startup, startup_id)
        if startup is None:
            raise ResourceNotFoundError("Startup", startup_id)
        await self.db.delete(startup)
        await self.db.commit()
        logger.info("Startup deleted", extra={"startup_id": startup_id})
        return ActionResult(success=True, message="Startup deleted successfully.")

    @reported(StartupImportResult, "Failed to import startups.")
    async def import_startups(self, rows: list[dict]) -> StartupImportResult:
        imported = 0
        errors: list[StartupImportError] = []
        for row in rows:
            try:
                data = StartupCreate(**startup_fields_from_row(row))
            except ValidationError as e:
                fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
                errors.append(StartupImportError(
                    row=row, error=f"Validation failed: {', '.join(fields)}",
                ))
                continue
            self.db.add(Startup(**_columns(data)))
            imported += 1
        await self.db.commit()

        success, message = import_summary(imported, len(errors))
        logger.info(message)
        return StartupImportResult(
            success=success, message=message,
            error_kind=None if success else ErrorKind.VALIDATION,
            imported_count=imported, errors=errors,
        )

    # --- Queries ---

    async def list_startups(self) -> list[Startup]:
        result = await self.db.execute(select(Startup).order_by(func.lower(Startup.name)))
        return list(result.scalars().all())

    async def get_startup(self, startup_id: str) -> Startup:
        startup = await self.db.get(Startup, startup_id)
        if startup is None:
            raise ResourceNotFoundError("Startup", startup_id)
        return startup


def _columns(data: StartupCreate) -> dict:
    values = data.model_dump(mode="json")
    values["logo_url"] = resolve_logo_url(data.name, values["logo_url"])
    values["website_url"] = values["website_url"] or ""
    return values
