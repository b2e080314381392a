"""Onboarding Progress — pure helpers over the four independent milestones.

Invariants:
    - Milestones are independent: setting one never clears or implies another
    - A milestone is set together with its timestamp column (<name>_at)
    - New accounts start with every milestone False
"""

from datetime import datetime

from tbi_portal.core.domain_types import OnboardingMilestone

MIN_PASSWORD_LENGTH = 6


def initial_progress() -> dict:
    """Column values for a freshly created account."""
    progress: dict = {}
    for milestone in OnboardingMilestone:
        progress[milestone.value] = False
        progress[f"{milestone.value}_at"] = None
    return progress


def milestone_fields(milestone: OnboardingMilestone, now: datetime) -> dict:
    """Column updates that mark one milestone as reached."""
    return {milestone.value: True, f"{milestone.value}_at": now}


def progress_view(record: dict) -> dict:
    """Serializable progress block for API responses."""
    view = {m.value: bool(record.get(m.value)) for m in OnboardingMilestone}
    view["remaining"] = [m.value for m in OnboardingMilestone if not view[m.value]]
    return view


def check_password_change(new_password: str, confirm_password: str) -> dict | None:
    if len(new_password) < MIN_PASSWORD_LENGTH:
        return _error(
            "PASSWORD_TOO_SHORT",
            f"New password must be at least {MIN_PASSWORD_LENGTH} characters",
            "new_password",
        )
    if new_password != confirm_password:
        return _error("PASSWORD_MISMATCH", "Passwords don't match", "confirm_password")
    return None


def _error(code: str, message: str, field: str) -> dict:
    return {
        "status": "error",
        "error_code": code,
        "kind": "validation",
        "message": message,
        "field": field,
    }
