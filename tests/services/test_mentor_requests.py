"""Mentor Requests — two-party approval chain, emailed action links, queries and cleanup.

Invariants:
    - Illegal transitions are refused without mutation
    - Only the assigned mentor may decide; authorization before state
    - Action links expire, are single-use, and respect an action binding
    - Email failure never downgrades a successful decision
"""

import re
from datetime import timedelta

import pytest
from sqlalchemy import func, select, update

from tbi_portal.core.domain_types import DecisionAction
from tbi_portal.core.errors import ErrorKind, PermissionDeniedError
from tbi_portal.db.base import utcnow
from tbi_portal.infrastructure.tokens import (
    PURPOSE_MENTOR_ACTION, PURPOSE_SESSION,
)
from tbi_portal.models.email_token import EmailToken
from tbi_portal.models.mentor_request import MentorRequest
from tbi_portal.models.notification import Notification
from tbi_portal.services.handle_mentor_requests import MentorRequestHandlers

from tests.services.fakes import MENTOR_EMAIL

APPROVE = DecisionAction.APPROVE
REJECT = DecisionAction.REJECT


def _handlers(test_db, mailer, signer, settings):
    return MentorRequestHandlers(test_db, mailer, signer, settings)


def _token_from(email) -> str:
    return re.search(r"token=([^\s\"&]+)", email.text).group(1)


def _bound_token(email, action: str) -> str:
    return re.search(rf"token=([^\s\"&]+)&action={action}", email.text).group(1)


async def _notifications(test_db, user_id="u1") -> list[Notification]:
    result = await test_db.execute(select(Notification).where(Notification.user_id == user_id))
    return list(result.scalars().all())


# ─── submission ──────────────────────────────────────────────────

async def test_submit_creates_pending_request(
    test_db, mailer, signer, settings, seed_mentor, fetch,
):
    result = await _handlers(test_db, mailer, signer, settings).submit_mentor_request(
        "u1", "Ada@X.com", "Ada", seed_mentor.id, "I would love guidance on compilers.",
    )

    assert result.success is True
    assert result.message == "Mentor request submitted successfully! Admin will review your request."
    request = await fetch(MentorRequest, result.request_id)
    assert request.status == "pending"
    assert request.user_email == "ada@x.com"
    assert request.mentor_email == MENTOR_EMAIL
    assert request.mentor_name == "Grace Hopper"
    assert request.request_message == "I would love guidance on compilers."


async def test_submit_rejects_short_message(test_db, mailer, signer, settings, seed_mentor):
    result = await _handlers(test_db, mailer, signer, settings).submit_mentor_request(
        "u1", "a@x.com", "Ada", seed_mentor.id, "hi",
    )
    assert result.success is False
    assert result.error_kind == ErrorKind.VALIDATION
    assert result.message == "Request message must be at least 10 characters."


async def test_submit_unknown_mentor(test_db, mailer, signer, settings):
    result = await _handlers(test_db, mailer, signer, settings).submit_mentor_request(
        "u1", "a@x.com", "Ada", "ghost", "I would love guidance on compilers.",
    )
    assert result.success is False
    assert result.error_kind == ErrorKind.NOT_FOUND


async def test_submit_refuses_active_duplicate(
    test_db, mailer, signer, settings, seed_mentor, make_request,
):
    await make_request("r1", status="admin_approved")

    result = await _handlers(test_db, mailer, signer, settings).submit_mentor_request(
        "u1", "a@x.com", "Ada", seed_mentor.id, "Trying again with another message.",
    )

    assert result.success is False
    assert result.error_kind == ErrorKind.INVALID_STATE
    assert result.message == "You already have a pending request for this mentor"


async def test_submit_allowed_after_terminal_request(
    test_db, mailer, signer, settings, seed_mentor, make_request,
):
    await make_request("r1", status="mentor_rejected")

    result = await _handlers(test_db, mailer, signer, settings).submit_mentor_request(
        "u1", "a@x.com", "Ada", seed_mentor.id, "Trying again with another message.",
    )
    assert result.success is True


# ─── admin decision ──────────────────────────────────────────────

async def test_admin_reject_notifies_user(
    test_db, mailer, signer, settings, make_request, fetch,
):
    await make_request("r1")

    result = await _handlers(test_db, mailer, signer, settings).admin_decision(
        "r1", REJECT, "Mentor unavailable", admin_id="admin-1",
    )

    assert result.success is True
    assert result.message == "Request rejected and user notified."
    request = await fetch(MentorRequest, "r1")
    assert request.status == "admin_rejected"
    assert request.admin_notes == "Mentor unavailable"
    assert request.admin_processed_by == "admin-1"
    assert request.admin_processed_at is not None
    assert mailer.sent[0].to == "a@x.com"
    assert "Reason: Mentor unavailable" in mailer.sent[0].text
    notifications = await _notifications(test_db)
    assert [n.title for n in notifications] == ["Mentor Request Update"]
    assert notifications[0].request_id == "r1"


async def test_admin_approve_emails_mentor_action_link(
    test_db, mailer, signer, settings, make_request, fetch,
):
    await make_request("r1")

    result = await _handlers(test_db, mailer, signer, settings).admin_decision("r1", APPROVE, None)

    assert result.success is True
    assert (await fetch(MentorRequest, "r1")).status == "admin_approved"
    assert mailer.sent[0].to == MENTOR_EMAIL
    assert "http://portal.tbi.org/mentor/requests/r1?token=" in mailer.sent[0].text

    claims = signer.decode(_token_from(mailer.sent[0]), PURPOSE_MENTOR_ACTION)
    assert claims["sub"] == "r1"
    assert claims["mentor_email"] == MENTOR_EMAIL
    token_row = await fetch(EmailToken, claims["jti"])
    assert token_row.used is False
    assert token_row.request_id == "r1"


async def test_admin_cannot_decide_twice(test_db, mailer, signer, settings, make_request, fetch):
    await make_request("r1")
    handlers = _handlers(test_db, mailer, signer, settings)
    await handlers.admin_decision("r1", REJECT, None)

    result = await handlers.admin_decision("r1", APPROVE, None)

    assert result.success is False
    assert result.error_kind == ErrorKind.INVALID_STATE
    assert result.message == "Request has already been processed"
    assert (await fetch(MentorRequest, "r1")).status == "admin_rejected"


async def test_admin_decision_unknown_request(test_db, mailer, signer, settings):
    result = await _handlers(test_db, mailer, signer, settings).admin_decision("nope", APPROVE, None)
    assert result.success is False
    assert result.error_kind == ErrorKind.NOT_FOUND


async def test_admin_approve_email_failure_keeps_success(
    test_db, mailer, signer, settings, make_request, fetch,
):
    await make_request("r1")
    mailer.fail = True

    result = await _handlers(test_db, mailer, signer, settings).admin_decision("r1", APPROVE, None)

    assert result.success is True
    assert (await fetch(MentorRequest, "r1")).status == "admin_approved"


# ─── mentor decision (session) ───────────────────────────────────

async def test_mentor_decision_after_admin_reject_is_invalid_state(
    test_db, mailer, signer, settings, make_request, fetch,
):
    await make_request("r1")
    handlers = _handlers(test_db, mailer, signer, settings)
    await handlers.admin_decision("r1", REJECT, None)

    result = await handlers.mentor_decision("r1", APPROVE, None, MENTOR_EMAIL)

    assert result.success is False
    assert result.error_kind == ErrorKind.INVALID_STATE
    assert (await fetch(MentorRequest, "r1")).status == "admin_rejected"


async def test_mentor_decision_by_other_mentor_is_refused(
    test_db, mailer, signer, settings, make_request, fetch,
):
    await make_request("r2", status="admin_approved")

    result = await _handlers(test_db, mailer, signer, settings).mentor_decision(
        "r2", APPROVE, None, "other@x.com",
    )

    assert result.success is False
    assert result.error_kind == ErrorKind.AUTHORIZATION
    assert (await fetch(MentorRequest, "r2")).status == "admin_approved"
    assert mailer.sent == []


async def test_mentor_cannot_skip_admin(test_db, mailer, signer, settings, make_request, fetch):
    await make_request("r1")

    result = await _handlers(test_db, mailer, signer, settings).mentor_decision(
        "r1", APPROVE, None, MENTOR_EMAIL,
    )

    assert result.error_kind == ErrorKind.INVALID_STATE
    assert (await fetch(MentorRequest, "r1")).status == "pending"


async def test_mentor_approve(test_db, mailer, signer, settings, make_request, fetch):
    await make_request("r2", status="admin_approved")

    result = await _handlers(test_db, mailer, signer, settings).mentor_decision(
        "r2", APPROVE, "Happy to help", MENTOR_EMAIL.upper(),
    )

    assert result.success is True
    assert result.message == "Mentorship request approved! User has been notified."
    request = await fetch(MentorRequest, "r2")
    assert request.status == "mentor_approved"
    assert request.mentor_notes == "Happy to help"
    assert mailer.sent[0].subject == "Mentorship Request Approved!"
    assert MENTOR_EMAIL in mailer.sent[0].text
    assert [n.title for n in await _notifications(test_db)] == ["Mentorship Approved!"]


async def test_mentor_approved_is_terminal(test_db, mailer, signer, settings, make_request, fetch):
    await make_request("r3", status="mentor_approved")

    result = await _handlers(test_db, mailer, signer, settings).mentor_decision(
        "r3", REJECT, None, MENTOR_EMAIL,
    )

    assert result.error_kind == ErrorKind.INVALID_STATE
    assert (await fetch(MentorRequest, "r3")).status == "mentor_approved"


# ─── mentor decision (emailed link) ──────────────────────────────

async def _approved_with_link(handlers, make_request, mailer) -> str:
    await make_request("r1")
    await handlers.admin_decision("r1", APPROVE, None)
    return _token_from(mailer.sent[-1])


async def test_token_decision_approves(test_db, mailer, signer, settings, make_request, fetch):
    handlers = _handlers(test_db, mailer, signer, settings)
    token = await _approved_with_link(handlers, make_request, mailer)

    result = await handlers.mentor_decision_with_token(token, APPROVE, "Welcome aboard")

    assert result.success is True
    assert (await fetch(MentorRequest, "r1")).status == "mentor_approved"
    jti = signer.decode(token, PURPOSE_MENTOR_ACTION)["jti"]
    assert (await fetch(EmailToken, jti)).used is True


async def test_token_is_single_use(test_db, mailer, signer, settings, make_request):
    handlers = _handlers(test_db, mailer, signer, settings)
    token = await _approved_with_link(handlers, make_request, mailer)
    await handlers.mentor_decision_with_token(token, REJECT, None)

    result = await handlers.mentor_decision_with_token(token, APPROVE, None)

    assert result.success is False
    assert result.error_kind == ErrorKind.AUTHORIZATION
    assert result.message == "This link has already been used."


async def test_expired_token_is_refused(test_db, mailer, signer, settings, make_request, fetch):
    await make_request("r2", status="admin_approved")
    issued = signer.issue(
        PURPOSE_MENTOR_ACTION, "r2", timedelta(seconds=-30), mentor_email=MENTOR_EMAIL,
    )
    test_db.add(EmailToken(
        id=issued.jti, request_id="r2", mentor_email=MENTOR_EMAIL, expires_at=issued.expires_at,
    ))
    await test_db.commit()

    result = await _handlers(test_db, mailer, signer, settings).mentor_decision_with_token(
        issued.token, APPROVE, None,
    )

    assert result.success is False
    assert result.error_kind == ErrorKind.AUTHORIZATION
    assert "expired" in result.message
    assert (await fetch(MentorRequest, "r2")).status == "admin_approved"


async def test_token_bound_to_action(test_db, mailer, signer, settings, make_request, fetch):
    await make_request("r2", status="admin_approved")
    issued = signer.issue(
        PURPOSE_MENTOR_ACTION, "r2", timedelta(days=7), mentor_email=MENTOR_EMAIL,
    )
    test_db.add(EmailToken(
        id=issued.jti, request_id="r2", mentor_email=MENTOR_EMAIL,
        action="approve", expires_at=issued.expires_at,
    ))
    await test_db.commit()
    handlers = _handlers(test_db, mailer, signer, settings)

    refused = await handlers.mentor_decision_with_token(issued.token, REJECT, None)
    assert refused.success is False
    assert refused.error_kind == ErrorKind.AUTHORIZATION
    assert (await fetch(EmailToken, issued.jti)).used is False

    accepted = await handlers.mentor_decision_with_token(issued.token, APPROVE, None)
    assert accepted.success is True


async def test_approval_email_links_are_action_bound(
    test_db, mailer, signer, settings, make_request, fetch,
):
    handlers = _handlers(test_db, mailer, signer, settings)
    await _approved_with_link(handlers, make_request, mailer)
    approve = _bound_token(mailer.sent[-1], "approve")
    reject = _bound_token(mailer.sent[-1], "reject")
    reject_jti = signer.decode(reject, PURPOSE_MENTOR_ACTION)["jti"]
    assert (await fetch(EmailToken, reject_jti)).action == "reject"

    refused = await handlers.mentor_decision_with_token(reject, APPROVE, None)
    assert refused.success is False
    assert refused.error_kind == ErrorKind.AUTHORIZATION
    assert refused.message == "This link only allows the 'reject' action."
    assert (await fetch(MentorRequest, "r1")).status == "admin_approved"

    accepted = await handlers.mentor_decision_with_token(approve, APPROVE, None)
    assert accepted.success is True
    assert (await fetch(MentorRequest, "r1")).status == "mentor_approved"


async def test_decision_retires_remaining_links(
    test_db, mailer, signer, settings, make_request,
):
    handlers = _handlers(test_db, mailer, signer, settings)
    review = await _approved_with_link(handlers, make_request, mailer)
    reject = _bound_token(mailer.sent[-1], "reject")

    decided = await handlers.mentor_decision("r1", APPROVE, None, MENTOR_EMAIL)
    assert decided.success is True

    for token, action in ((review, APPROVE), (reject, REJECT)):
        result = await handlers.mentor_decision_with_token(token, action, None)
        assert result.success is False
        assert result.message == "This link has already been used."
    unused = await test_db.execute(
        select(func.count()).select_from(EmailToken).where(EmailToken.used.is_(False))
    )
    assert unused.scalar_one() == 0


async def test_token_without_record_is_refused(test_db, mailer, signer, settings, make_request):
    await make_request("r2", status="admin_approved")
    issued = signer.issue(
        PURPOSE_MENTOR_ACTION, "r2", timedelta(days=7), mentor_email=MENTOR_EMAIL,
    )

    result = await _handlers(test_db, mailer, signer, settings).mentor_decision_with_token(
        issued.token, APPROVE, None,
    )
    assert result.success is False
    assert result.message == "This link is not valid."


async def test_session_token_cannot_act_as_link(test_db, mailer, signer, settings, make_request):
    await make_request("r2", status="admin_approved")
    issued = signer.issue(PURPOSE_SESSION, "r2", timedelta(days=1))

    result = await _handlers(test_db, mailer, signer, settings).mentor_decision_with_token(
        issued.token, APPROVE, None,
    )
    assert result.success is False
    assert result.error_kind == ErrorKind.AUTHORIZATION


async def test_garbage_token(test_db, mailer, signer, settings):
    result = await _handlers(test_db, mailer, signer, settings).mentor_decision_with_token(
        "not-a-jwt", APPROVE, None,
    )
    assert result.success is False
    assert result.error_kind == ErrorKind.AUTHORIZATION


# ─── lost races ──────────────────────────────────────────────────

class _Interleaved(MentorRequestHandlers):
    """Runs a competing write right after the request is read."""

    competing_write = None

    async def _get(self, request_id):
        request = await super()._get(request_id)
        if self.competing_write:
            await self.competing_write()
        return request


def _committed_elsewhere(test_session_factory, statement):
    async def _write():
        async with test_session_factory() as other:
            await other.execute(statement)
            await other.commit()
    return _write


async def test_admin_decision_losing_race_changes_nothing(
    test_db, test_session_factory, mailer, signer, settings, make_request, fetch,
):
    """Another admin approves between the status read and the conditional write."""
    await make_request("r1")
    handlers = _Interleaved(test_db, mailer, signer, settings)
    handlers.competing_write = _committed_elsewhere(
        test_session_factory,
        update(MentorRequest).where(MentorRequest.id == "r1").values(status="admin_approved"),
    )

    result = await handlers.admin_decision("r1", REJECT, "Too late", admin_id="admin-2")

    assert result.success is False
    assert result.error_kind == ErrorKind.INVALID_STATE
    assert result.message == "Request has already been processed"
    request = await fetch(MentorRequest, "r1")
    assert request.status == "admin_approved"
    assert request.admin_processed_by is None
    assert await _notifications(test_db) == []
    assert mailer.sent == []


async def test_mentor_decision_losing_race_changes_nothing(
    test_db, test_session_factory, mailer, signer, settings, make_request, fetch,
):
    await make_request("r2", status="admin_approved")
    handlers = _Interleaved(test_db, mailer, signer, settings)
    handlers.competing_write = _committed_elsewhere(
        test_session_factory,
        update(MentorRequest).where(MentorRequest.id == "r2").values(status="mentor_rejected"),
    )

    result = await handlers.mentor_decision("r2", APPROVE, "Happy to help", MENTOR_EMAIL)

    assert result.success is False
    assert result.error_kind == ErrorKind.INVALID_STATE
    assert (await fetch(MentorRequest, "r2")).status == "mentor_rejected"
    assert await _notifications(test_db) == []
    assert mailer.sent == []


async def test_token_consumed_concurrently_is_refused(
    test_db, test_session_factory, mailer, signer, settings, make_request, fetch,
):
    """The link is used elsewhere after the used-flag read but before the consume."""
    handlers = _Interleaved(test_db, mailer, signer, settings)
    token = await _approved_with_link(handlers, make_request, mailer)
    jti = signer.decode(token, PURPOSE_MENTOR_ACTION)["jti"]
    handlers.competing_write = _committed_elsewhere(
        test_session_factory,
        update(EmailToken).where(EmailToken.id == jti).values(used=True),
    )

    result = await handlers.mentor_decision_with_token(token, APPROVE, None)

    assert result.success is False
    assert result.error_kind == ErrorKind.AUTHORIZATION
    assert result.message == "This link has already been used."
    assert (await fetch(MentorRequest, "r1")).status == "admin_approved"
    assert await _notifications(test_db) == []
    assert len(mailer.sent) == 1


# ─── queries ─────────────────────────────────────────────────────

async def test_mentor_sees_forwarded_requests_only(
    test_db, mailer, signer, settings, make_request,
):
    await make_request("r1", status="pending")
    await make_request("r2", status="admin_approved", user_id="u2")
    await make_request("r3", status="admin_rejected", user_id="u3")
    await make_request("r4", status="mentor_approved", user_id="u4")

    requests = await _handlers(test_db, mailer, signer, settings).list_for_mentor(MENTOR_EMAIL)

    assert sorted(r.id for r in requests) == ["r2", "r4"]


async def test_admin_list_filters_by_status(test_db, mailer, signer, settings, make_request):
    await make_request("r1", status="pending")
    await make_request("r2", status="admin_approved", user_id="u2")
    handlers = _handlers(test_db, mailer, signer, settings)

    assert len(await handlers.list_for_admin()) == 2
    assert [r.id for r in await handlers.list_for_admin("pending")] == ["r1"]


async def test_get_for_mentor_checks_assignment(test_db, mailer, signer, settings, make_request):
    await make_request("r2", status="admin_approved")
    handlers = _handlers(test_db, mailer, signer, settings)

    detail = await handlers.get_for_mentor("r2", MENTOR_EMAIL)
    assert detail.request.id == "r2"

    with pytest.raises(PermissionDeniedError):
        await handlers.get_for_mentor("r2", "other@x.com")


async def test_approved_mentees_and_profile(
    test_db, mailer, signer, settings, make_request, make_account,
):
    mentee, _ = await make_account(email="ada@x.com", name="Ada Lovelace")
    await make_request("r4", status="mentor_approved", user_id=mentee.id)
    handlers = _handlers(test_db, mailer, signer, settings)

    mentees = await handlers.approved_mentees(MENTOR_EMAIL)
    assert [m.mentee.name for m in mentees] == ["Ada Lovelace"]

    profile = await handlers.mentee_profile(mentee.id, MENTOR_EMAIL)
    assert profile.email == "ada@x.com"


async def test_mentee_profile_requires_approved_link(
    test_db, mailer, signer, settings, make_request, make_account,
):
    mentee, _ = await make_account(email="ada@x.com")
    await make_request("r2", status="admin_approved", user_id=mentee.id)

    with pytest.raises(PermissionDeniedError):
        await _handlers(test_db, mailer, signer, settings).mentee_profile(mentee.id, MENTOR_EMAIL)


# ─── cleanup ─────────────────────────────────────────────────────

async def test_cleanup_deletes_only_expired(test_db, mailer, signer, settings):
    now = utcnow()
    test_db.add_all([
        EmailToken(id="old", request_id="r1", mentor_email=MENTOR_EMAIL,
                   expires_at=now - timedelta(days=1)),
        EmailToken(id="fresh", request_id="r2", mentor_email=MENTOR_EMAIL,
                   expires_at=now + timedelta(days=6)),
    ])
    await test_db.commit()
    handlers = _handlers(test_db, mailer, signer, settings)

    result = await handlers.cleanup_expired_tokens()
    assert result.deleted_count == 1
    assert result.message == "Successfully cleaned up 1 expired tokens"
    remaining = (await test_db.execute(select(func.count()).select_from(EmailToken))).scalar_one()
    assert remaining == 1

    again = await handlers.cleanup_expired_tokens()
    assert again.deleted_count == 0
    assert again.message == "No expired tokens to clean up"
