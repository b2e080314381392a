"""Mentor-Request Transition Enforcement — the two-party approval chain as a pure transition table.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Legal graph is a strict DAG:
        pending        -> admin_approved | admin_rejected
        admin_approved -> mentor_approved | mentor_rejected
    - admin_rejected, mentor_approved, mentor_rejected are terminal
    - No transition ever returns to `pending`; no withdrawal transition exists
    - Authorization is checked before state for mentor decisions

Design Decisions:
    - Transition table keyed by (actor, current status): one lookup answers both
      "is this legal" and "what is the target"
    - Emails compared case-insensitively after stripping
"""

from tbi_portal.core.domain_types import DecisionAction, MentorRequestStatus as S


MIN_MESSAGE_LENGTH = 10
MAX_MESSAGE_LENGTH = 500

ACTIVE_STATUSES = frozenset({S.PENDING, S.ADMIN_APPROVED})
TERMINAL_STATUSES = frozenset({S.ADMIN_REJECTED, S.MENTOR_APPROVED, S.MENTOR_REJECTED})

# (actor, from_status, action) -> to_status
_TRANSITIONS: dict[tuple[str, S, DecisionAction], S] = {
    ("admin", S.PENDING, DecisionAction.APPROVE): S.ADMIN_APPROVED,
    ("admin", S.PENDING, DecisionAction.REJECT): S.ADMIN_REJECTED,
    ("mentor", S.ADMIN_APPROVED, DecisionAction.APPROVE): S.MENTOR_APPROVED,
    ("mentor", S.ADMIN_APPROVED, DecisionAction.REJECT): S.MENTOR_REJECTED,
}

_REQUIRED_STATUS = {"admin": S.PENDING, "mentor": S.ADMIN_APPROVED}


def is_legal_transition(from_status: str, to_status: str) -> bool:
    """True when some actor/action pair moves from_status to to_status."""
    return any(
        src.value == from_status and dst.value == to_status
        for (_, src, _), dst in _TRANSITIONS.items()
    )


def resolve_transition(actor: str, from_status: str, action: DecisionAction) -> S | None:
    """Target status for actor's action, None when illegal."""
    try:
        current = S(from_status)
    except ValueError:
        return None
    return _TRANSITIONS.get((actor, current, action))


def required_status(actor: str) -> S:
    """The only status from which actor may decide."""
    return _REQUIRED_STATUS[actor]


# --- Submission ---------------------------------------------------------------

def check_request_message(message: str | None) -> dict | None:
    """Request message must be 10-500 characters, counted as submitted (whitespace included)."""
    text = message or ""
    if len(text) < MIN_MESSAGE_LENGTH:
        return _error(
            "MESSAGE_TOO_SHORT", "validation",
            f"Request message must be at least {MIN_MESSAGE_LENGTH} characters.",
            field="request_message",
        )
    if len(text) > MAX_MESSAGE_LENGTH:
        return _error(
            "MESSAGE_TOO_LONG", "validation",
            f"Request message must be at most {MAX_MESSAGE_LENGTH} characters.",
            field="request_message",
        )
    return None


def check_no_active_duplicate(existing_statuses: list[str]) -> dict | None:
    """Advisory: one active (pending/admin_approved) request per user-mentor pair."""
    active = {s.value for s in ACTIVE_STATUSES}
    if any(status in active for status in existing_statuses):
        return _error(
            "DUPLICATE_REQUEST", "invalid_state",
            "You already have a pending request for this mentor",
        )
    return None


# --- Decisions ----------------------------------------------------------------

def check_admin_decision(status: str) -> dict | None:
    """Admin may only decide on `pending` requests."""
    if status != S.PENDING.value:
        error = _error(
            "ALREADY_PROCESSED", "invalid_state",
            "Request has already been processed",
        )
        error["current_status"] = status
        return error
    return None


def check_mentor_authorized(request_mentor_email: str, caller_email: str | None) -> dict | None:
    """Only the assigned mentor may decide on a request."""
    if not caller_email or _norm(request_mentor_email) != _norm(caller_email):
        return _error(
            "NOT_ASSIGNED_MENTOR", "authorization",
            "Unauthorized: You are not the assigned mentor for this request.",
        )
    return None


def check_mentor_decision(status: str) -> dict | None:
    """Mentor may only decide on `admin_approved` requests."""
    if status != S.ADMIN_APPROVED.value:
        error = _error(
            "NOT_AWAITING_MENTOR", "invalid_state",
            "Request is not in a state to be processed by mentor",
        )
        error["current_status"] = status
        return error
    return None


def validate_mentor_decision(
    status: str, request_mentor_email: str, caller_email: str | None,
) -> dict | None:
    """Authorization first, then state."""
    return (
        check_mentor_authorized(request_mentor_email, caller_email)
        or check_mentor_decision(status)
    )


def check_token_action(bound_action: str | None, action: DecisionAction) -> dict | None:
    """A token bound to one action cannot be used for the other."""
    if bound_action and bound_action != action.value:
        return _error(
            "TOKEN_ACTION_MISMATCH", "authorization",
            f"This link only allows the '{bound_action}' action.",
        )
    return None


# --- Messages -----------------------------------------------------------------

def admin_success_message(action: DecisionAction) -> str:
    if action == DecisionAction.APPROVE:
        return "Request approved and mentor has been notified."
    return "Request rejected and user notified."


def mentor_success_message(action: DecisionAction) -> str:
    if action == DecisionAction.APPROVE:
        return "Mentorship request approved! User has been notified."
    return "Mentorship request declined. User has been notified."


# --- Helpers ------------------------------------------------------------------

def _norm(email: str) -> str:
    return email.strip().lower()


def _error(code: str, kind: str, message: str, field: str | None = None) -> dict:
    """Construct a standard error dict."""
    error = {
        "status": "error",
        "error_code": code,
        "kind": kind,
        "message": message,
    }
    if field:
        error["field"] = field
    return error
