"""Startup Routes — public showcase reads, admin edits and bulk import."""

from fastapi import APIRouter, Depends, status

from tbi_portal.api.deps import get_startup_handlers, require_admin
from tbi_portal.api.responses import action_response
from tbi_portal.core.errors import ErrorKind
from tbi_portal.schemas.startup import (
    StartupCreate, StartupImportRequest, StartupResponse, StartupUpdate,
)
from tbi_portal.services.handle_startups import StartupHandlers

router = APIRouter(prefix="/api/v1/startups", tags=["startups"])


@router.get("", response_model=list[StartupResponse])
async def list_startups(handlers: StartupHandlers = Depends(get_startup_handlers)):
    return await handlers.list_startups()


@router.post("", dependencies=[Depends(require_admin)])
async def create_startup(
    body: StartupCreate, handlers: StartupHandlers = Depends(get_startup_handlers),
):
    result = await handlers.create_startup(body)
    return action_response(result, success_status=status.HTTP_201_CREATED)


@router.post("/import", dependencies=[Depends(require_admin)])
async def import_startups(
    body: StartupImportRequest, handlers: StartupHandlers = Depends(get_startup_handlers),
):
    """Rows that validated are kept even when others fail: partial imports answer 207."""
    result = await handlers.import_startups(body.rows)
    return action_response(
        result, overrides={ErrorKind.VALIDATION: status.HTTP_207_MULTI_STATUS},
    )


@router.get("/{startup_id}", response_model=StartupResponse)
async def get_startup(startup_id: str, handlers: StartupHandlers = Depends(get_startup_handlers)):
    return await handlers.get_startup(startup_id)


@router.put("/{startup_id}", dependencies=[Depends(require_admin)])
async def update_startup(
    startup_id: str, body: StartupUpdate,
    handlers: StartupHandlers = Depends(get_startup_handlers),
):
    return action_response(await handlers.update_startup(startup_id, body))


@router.delete("/{startup_id}", dependencies=[Depends(require_admin)])
async def delete_startup(
    startup_id: str, handlers: StartupHandlers = Depends(get_startup_handlers),
):
    return action_response(await handlers.delete_startup(startup_id))
