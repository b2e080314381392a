"""Mentor-Request Enforcement — tests for the two-party transition table and checks.

Tests cover:
    - Only the four legal transitions exist; terminal statuses never move
    - Admin decides from pending only, mentor from admin_approved only
    - Mentor authorization is checked before state, case-insensitively
    - Message length bounds, advisory duplicate check, token action binding
"""

import pytest

from tbi_portal.core.domain_types import DecisionAction, MentorRequestStatus as S
from tbi_portal.core.enforce_mentor_request import (
    TERMINAL_STATUSES,
    check_admin_decision,
    check_mentor_authorized,
    check_no_active_duplicate,
    check_request_message,
    check_token_action,
    is_legal_transition,
    resolve_transition,
    validate_mentor_decision,
)


# ─── transition table ────────────────────────────────────────────

def test_admin_transitions_from_pending():
    assert resolve_transition("admin", "pending", DecisionAction.APPROVE) == S.ADMIN_APPROVED
    assert resolve_transition("admin", "pending", DecisionAction.REJECT) == S.ADMIN_REJECTED


def test_mentor_transitions_from_admin_approved():
    assert resolve_transition("mentor", "admin_approved", DecisionAction.APPROVE) == S.MENTOR_APPROVED
    assert resolve_transition("mentor", "admin_approved", DecisionAction.REJECT) == S.MENTOR_REJECTED


def test_mentor_cannot_skip_admin():
    assert resolve_transition("mentor", "pending", DecisionAction.APPROVE) is None
    assert not is_legal_transition("pending", "mentor_approved")


def test_admin_cannot_decide_twice():
    assert resolve_transition("admin", "admin_approved", DecisionAction.REJECT) is None


@pytest.mark.parametrize("terminal", sorted(s.value for s in TERMINAL_STATUSES))
def test_terminal_statuses_have_no_exit(terminal):
    for actor in ("admin", "mentor"):
        for action in DecisionAction:
            assert resolve_transition(actor, terminal, action) is None
    for target in S:
        assert not is_legal_transition(terminal, target.value)


def test_nothing_returns_to_pending():
    for source in S:
        assert not is_legal_transition(source.value, "pending")


def test_unknown_status_is_illegal():
    assert resolve_transition("admin", "withdrawn", DecisionAction.APPROVE) is None


# ─── admin / mentor checks ───────────────────────────────────────

def test_check_admin_decision_requires_pending():
    assert check_admin_decision("pending") is None
    result = check_admin_decision("admin_rejected")
    assert result["kind"] == "invalid_state"
    assert result["message"] == "Request has already been processed"


def test_mentor_authorized_ignores_case_and_whitespace():
    assert check_mentor_authorized("m@x.com", "  M@X.com ") is None


def test_mentor_not_assigned():
    result = check_mentor_authorized("m@x.com", "other@x.com")
    assert result["kind"] == "authorization"


def test_mentor_missing_caller_email():
    assert check_mentor_authorized("m@x.com", None)["kind"] == "authorization"


def test_validate_mentor_decision_checks_authorization_first():
    result = validate_mentor_decision("pending", "m@x.com", "other@x.com")
    assert result["kind"] == "authorization"


def test_validate_mentor_decision_then_state():
    result = validate_mentor_decision("admin_rejected", "m@x.com", "m@x.com")
    assert result["kind"] == "invalid_state"
    assert result["current_status"] == "admin_rejected"


def test_validate_mentor_decision_passes():
    assert validate_mentor_decision("admin_approved", "m@x.com", "m@x.com") is None


# ─── submission checks ───────────────────────────────────────────

def test_message_too_short():
    result = check_request_message("  short  ")
    assert result["error_code"] == "MESSAGE_TOO_SHORT"
    assert result["field"] == "request_message"


def test_message_too_long():
    assert check_request_message("x" * 501)["error_code"] == "MESSAGE_TOO_LONG"


def test_message_bounds_inclusive():
    assert check_request_message("x" * 10) is None
    assert check_request_message("x" * 500) is None


def test_message_none_is_too_short():
    assert check_request_message(None)["kind"] == "validation"


def test_message_length_counts_surrounding_whitespace():
    assert check_request_message("  padded  ") is None
    assert check_request_message(" " + "x" * 500)["error_code"] == "MESSAGE_TOO_LONG"


def test_duplicate_active_request():
    result = check_no_active_duplicate(["mentor_rejected", "admin_approved"])
    assert result["kind"] == "invalid_state"
    assert result["message"] == "You already have a pending request for this mentor"


def test_terminal_requests_do_not_block():
    assert check_no_active_duplicate(["admin_rejected", "mentor_rejected", "mentor_approved"]) is None


# ─── token action binding ────────────────────────────────────────

def test_unbound_token_allows_any_action():
    assert check_token_action(None, DecisionAction.REJECT) is None


def test_bound_token_refuses_other_action():
    result = check_token_action("approve", DecisionAction.REJECT)
    assert result["kind"] == "authorization"
    assert "approve" in result["message"]


def test_bound_token_allows_its_action():
    assert check_token_action("approve", DecisionAction.APPROVE) is None
