"""Request schemas — shape validation at the HTTP boundary.

Invariants:
    - Required text is stripped; whitespace-only values are rejected
    - Unknown process actions pass shape validation (reported later as a validation result)
    - Short mentor-request messages pass shape validation (the domain check reports them)
    - Mentor profile updates accept partial payloads
"""

import pytest
from pydantic import ValidationError

from tbi_portal.core.domain_types import CampusStatus
from tbi_portal.schemas.application import ProcessApplicationRequest, SubmissionCreate
from tbi_portal.schemas.mentor import MentorCreate, MentorProfileUpdate
from tbi_portal.schemas.mentor_request import MentorRequestCreate


# --- SubmissionCreate ---------------------------------------------------------

def test_submission_strips_and_defaults_campus():
    sub = SubmissionCreate(name="  Ada ", email="ada@x.com", idea="  A shared lab bench  ")
    assert sub.name == "Ada"
    assert sub.idea == "A shared lab bench"
    assert sub.campus_status == CampusStatus.CAMPUS


def test_submission_rejects_whitespace_name():
    with pytest.raises(ValidationError):
        SubmissionCreate(name="   ", email="ada@x.com", idea="A shared lab bench")


def test_submission_rejects_bad_campus_status():
    with pytest.raises(ValidationError):
        SubmissionCreate(
            name="Ada", email="ada@x.com", idea="A shared lab bench", campus_status="remote",
        )


# --- ProcessApplicationRequest -------------------------------------------------

def test_process_request_keeps_unknown_action():
    req = ProcessApplicationRequest(action="archive", applicant_name="Ada", applicant_email="a@x.com")
    assert req.action == "archive"


def test_process_request_requires_email():
    with pytest.raises(ValidationError):
        ProcessApplicationRequest(action="accept", applicant_name="Ada", applicant_email="nope")


# --- Mentor schemas -------------------------------------------------------------

def test_mentor_request_short_message_is_shape_valid():
    req = MentorRequestCreate(mentor_id="m1", request_message="hi")
    assert req.request_message == "hi"


def test_mentor_create_minimums():
    with pytest.raises(ValidationError):
        MentorCreate(
            name="Al", email="al@x.com", password="secret123",
            designation="Professor", expertise="Graphs", bio="Short bio text here.",
        )


def test_profile_update_partial():
    update = MentorProfileUpdate(expertise="  Type theory ")
    assert update.model_dump(exclude_unset=True) == {"expertise": "Type theory"}


def test_profile_update_rejects_blank():
    with pytest.raises(ValidationError):
        MentorProfileUpdate(bio="          ")
