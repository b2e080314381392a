"""Application Routes — public intake, admin listing and the accept/reject action.

Invariants:
    - POST "" is public; everything else requires the admin role
    - process returns the ProcessApplicationResult envelope; HTTP status follows error_kind
"""

from fastapi import APIRouter, Depends, Query, status

from tbi_portal.api.deps import get_application_handlers, require_admin
from tbi_portal.api.responses import action_response
from tbi_portal.schemas.application import (
    ProcessApplicationRequest, SubmissionCreate, SubmissionCreated, SubmissionResponse,
)
from tbi_portal.services.handle_applications import ApplicationHandlers

router = APIRouter(prefix="/api/v1/applications", tags=["applications"])


@router.post(
    "", response_model=SubmissionCreated, status_code=status.HTTP_201_CREATED,
)
async def submit_application(
    body: SubmissionCreate,
    handlers: ApplicationHandlers = Depends(get_application_handlers),
):
    """Public application form."""
    submission = await handlers.submit_application(body)
    return SubmissionCreated(id=submission.id)


@router.get(
    "", response_model=list[SubmissionResponse], dependencies=[Depends(require_admin)],
)
async def list_submissions(
    status_filter: str | None = Query(None, alias="status"),
    campus_status: str | None = Query(None),
    handlers: ApplicationHandlers = Depends(get_application_handlers),
):
    return await handlers.list_submissions(status_filter, campus_status)


@router.get(
    "/{submission_id}", response_model=SubmissionResponse,
    dependencies=[Depends(require_admin)],
)
async def get_submission(
    submission_id: str,
    handlers: ApplicationHandlers = Depends(get_application_handlers),
):
    return await handlers.get_submission(submission_id)


@router.post("/{submission_id}/process", dependencies=[Depends(require_admin)])
async def process_application(
    submission_id: str,
    body: ProcessApplicationRequest,
    handlers: ApplicationHandlers = Depends(get_application_handlers),
):
    """Accept or reject a pending submission."""
    result = await handlers.process_application(
        submission_id, body.action, body.applicant_name, str(body.applicant_email),
    )
    return action_response(result)
