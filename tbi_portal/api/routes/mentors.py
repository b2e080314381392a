"""Mentor Routes — public directory, admin create/delete, mentor self-service profile edit."""

from fastapi import APIRouter, Depends, status

from tbi_portal.api.deps import get_mentor_handlers, require_admin, require_mentor
from tbi_portal.api.responses import action_response
from tbi_portal.schemas.mentor import MentorCreate, MentorProfileUpdate, MentorProfileView
from tbi_portal.services.handle_auth import Actor
from tbi_portal.services.handle_mentors import MentorHandlers

router = APIRouter(prefix="/api/v1/mentors", tags=["mentors"])


@router.get("", response_model=list[MentorProfileView])
async def list_mentors(handlers: MentorHandlers = Depends(get_mentor_handlers)):
    return await handlers.list_mentors()


@router.post("", dependencies=[Depends(require_admin)])
async def create_mentor(
    body: MentorCreate, handlers: MentorHandlers = Depends(get_mentor_handlers),
):
    result = await handlers.create_mentor(body)
    return action_response(result, success_status=status.HTTP_201_CREATED)


@router.get("/me", response_model=MentorProfileView)
async def my_profile(
    actor: Actor = Depends(require_mentor),
    handlers: MentorHandlers = Depends(get_mentor_handlers),
):
    return await handlers.get_mentor_profile(actor.user.id)


@router.patch("/me")
async def update_my_profile(
    body: MentorProfileUpdate,
    actor: Actor = Depends(require_mentor),
    handlers: MentorHandlers = Depends(get_mentor_handlers),
):
    return action_response(await handlers.update_mentor_profile(actor.user.id, body))


@router.get("/{mentor_id}", response_model=MentorProfileView)
async def get_mentor(mentor_id: str, handlers: MentorHandlers = Depends(get_mentor_handlers)):
    return await handlers.get_mentor_profile(mentor_id)


@router.delete("/{mentor_id}", dependencies=[Depends(require_admin)])
async def delete_mentor(mentor_id: str, handlers: MentorHandlers = Depends(get_mentor_handlers)):
    return action_response(await handlers.delete_mentor(mentor_id))
