"""Mentor-Request Routes — user submission, admin and mentor decisions, emailed-link decisions, views.

Invariants:
    - Role gates: submit/mine -> user; list/admin-decision -> admin;
      assigned/mentees/detail/mentor-decision -> mentor; token-decision -> public (token is the credential)
    - Static paths declared before /{request_id}
"""

from fastapi import APIRouter, Depends, Query, status

from tbi_portal.api.deps import (
    get_mentor_request_handlers, require_admin, require_mentor, require_user,
)
from tbi_portal.api.responses import action_response
from tbi_portal.schemas.mentor_request import (
    AdminDecisionRequest, ApprovedMentee, MenteeProfile, MentorDecisionRequest,
    MentorRequestCreate, MentorRequestDetail, MentorRequestResponse, TokenDecisionRequest,
)
from tbi_portal.services.handle_auth import Actor
from tbi_portal.services.handle_mentor_requests import MentorRequestHandlers

router = APIRouter(prefix="/api/v1/mentor-requests", tags=["mentor-requests"])


@router.post("")
async def submit_mentor_request(
    body: MentorRequestCreate,
    actor: Actor = Depends(require_user),
    handlers: MentorRequestHandlers = Depends(get_mentor_request_handlers),
):
    result = await handlers.submit_mentor_request(
        actor.user.id, actor.user.email, actor.user.name,
        body.mentor_id, body.request_message,
    )
    return action_response(result, success_status=status.HTTP_201_CREATED)


@router.get(
    "", response_model=list[MentorRequestResponse], dependencies=[Depends(require_admin)],
)
async def list_mentor_requests(
    status_filter: str | None = Query(None, alias="status"),
    handlers: MentorRequestHandlers = Depends(get_mentor_request_handlers),
):
    return await handlers.list_for_admin(status_filter)


@router.get("/mine", response_model=list[MentorRequestResponse])
async def my_mentor_requests(
    actor: Actor = Depends(require_user),
    handlers: MentorRequestHandlers = Depends(get_mentor_request_handlers),
):
    return await handlers.list_for_user(actor.user.id)


@router.get("/assigned", response_model=list[MentorRequestResponse])
async def assigned_mentor_requests(
    actor: Actor = Depends(require_mentor),
    handlers: MentorRequestHandlers = Depends(get_mentor_request_handlers),
):
    return await handlers.list_for_mentor(actor.user.email)


@router.get("/mentees", response_model=list[ApprovedMentee])
async def approved_mentees(
    actor: Actor = Depends(require_mentor),
    handlers: MentorRequestHandlers = Depends(get_mentor_request_handlers),
):
    return await handlers.approved_mentees(actor.user.email)


@router.get("/mentees/{user_id}", response_model=MenteeProfile)
async def mentee_profile(
    user_id: str,
    actor: Actor = Depends(require_mentor),
    handlers: MentorRequestHandlers = Depends(get_mentor_request_handlers),
):
    return await handlers.mentee_profile(user_id, actor.user.email)


@router.post("/token-decision")
async def token_decision(
    body: TokenDecisionRequest,
    handlers: MentorRequestHandlers = Depends(get_mentor_request_handlers),
):
    """Mentor decision from an emailed link, no session required."""
    result = await handlers.mentor_decision_with_token(body.token, body.action, body.notes)
    return action_response(result)


@router.get("/{request_id}", response_model=MentorRequestDetail)
async def mentor_request_detail(
    request_id: str,
    actor: Actor = Depends(require_mentor),
    handlers: MentorRequestHandlers = Depends(get_mentor_request_handlers),
):
    return await handlers.get_for_mentor(request_id, actor.user.email)


@router.post("/{request_id}/admin-decision")
async def admin_decision(
    request_id: str,
    body: AdminDecisionRequest,
    actor: Actor = Depends(require_admin),
    handlers: MentorRequestHandlers = Depends(get_mentor_request_handlers),
):
    result = await handlers.admin_decision(request_id, body.action, body.notes, actor.user.id)
    return action_response(result)


@router.post("/{request_id}/mentor-decision")
async def mentor_decision(
    request_id: str,
    body: MentorDecisionRequest,
    actor: Actor = Depends(require_mentor),
    handlers: MentorRequestHandlers = Depends(get_mentor_request_handlers),
):
    result = await handlers.mentor_decision(request_id, body.action, body.notes, actor.user.email)
    return action_response(result)
