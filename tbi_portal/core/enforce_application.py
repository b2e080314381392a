"""Application Transition Enforcement — validates accept/reject on applicant submissions.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return error dict on violation, None on success
    - Only `pending` submissions may be processed; a processed submission never re-enters `pending`

Design Decisions:
    - Pure functions over method dispatch: testable without mocks
    - Return dicts (not exceptions): the shell decides whether to raise or report
"""

from tbi_portal.core.domain_types import ApplicationAction, SubmissionStatus


_OUTCOME = {
    ApplicationAction.ACCEPT: SubmissionStatus.ACCEPTED,
    ApplicationAction.REJECT: SubmissionStatus.REJECTED,
}


def parse_action(action: str) -> ApplicationAction | None:
    """Map raw input to ApplicationAction, None when unknown."""
    try:
        return ApplicationAction(action)
    except ValueError:
        return None


def check_action_valid(action: str) -> dict | None:
    if parse_action(action) is None:
        return _error(
            "INVALID_ACTION", "validation",
            f"Unknown action '{action}'. Expected 'accept' or 'reject'.",
        )
    return None


def check_submission_pending(submission_id: str, status: str) -> dict | None:
    """A submission may be processed exactly once, from `pending`."""
    if status != SubmissionStatus.PENDING.value:
        error = _error(
            "ALREADY_PROCESSED", "invalid_state",
            f"Submission {submission_id} has already been processed (status: {status}).",
        )
        error["current_status"] = status
        return error
    return None


def next_status(action: ApplicationAction) -> SubmissionStatus:
    """Target status for an action taken on a pending submission."""
    return _OUTCOME[action]


def success_message(action: ApplicationAction) -> str:
    verb = "accepted" if action == ApplicationAction.ACCEPT else "rejected"
    return f"Application {verb} successfully."


# --- Helper -------------------------------------------------------------------

def _error(code: str, kind: str, message: str) -> dict:
    """Construct a standard error dict."""
    return {
        "status": "error",
        "error_code": code,
        "kind": kind,
        "message": message,
    }
