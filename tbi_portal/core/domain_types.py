"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - SubmissionId, AccountId, RequestId wrap document ids (strings), never bare str in domain logic
    - All valid states encoded as Enums, no raw string matching
    - OutgoingEmail and DeliveryReport are immutable value objects

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

SubmissionId = NewType("SubmissionId", str)
AccountId = NewType("AccountId", str)
MentorId = NewType("MentorId", str)
RequestId = NewType("RequestId", str)


# ─── Enums ───────────────────────────────────────────────────────

class SubmissionStatus(str, Enum):
    """Applicant submission lifecycle — maps to `submissions.status`."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ApplicationAction(str, Enum):
    """Admin decision on a pending submission."""
    ACCEPT = "accept"
    REJECT = "reject"


class CampusStatus(str, Enum):
    """Where the applicant applied from."""
    CAMPUS = "campus"
    OFF_CAMPUS = "off-campus"


class MentorRequestStatus(str, Enum):
    """Mentor-request lifecycle — maps to `mentor_requests.status`."""
    PENDING = "pending"
    ADMIN_APPROVED = "admin_approved"
    ADMIN_REJECTED = "admin_rejected"
    MENTOR_APPROVED = "mentor_approved"
    MENTOR_REJECTED = "mentor_rejected"


class DecisionAction(str, Enum):
    """Approve/reject action used by both admin and mentor decisions."""
    APPROVE = "approve"
    REJECT = "reject"


class Role(str, Enum):
    """Resolved actor role."""
    ADMIN = "admin"
    MENTOR = "mentor"
    USER = "user"
    UNAUTHENTICATED = "unauthenticated"


class EventStatus(str, Enum):
    """Event moderation state; only approved events are listed publicly."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    DISABLED = "disabled"


class NotificationType(str, Enum):
    """In-app notification kinds shown on the user dashboard."""
    MENTOR_REQUEST_APPROVED = "mentor_request_approved"
    MENTOR_REQUEST_REJECTED = "mentor_request_rejected"
    MENTOR_DECISION = "mentor_decision"


class OnboardingMilestone(str, Enum):
    """The four independent onboarding milestones of a user account."""
    PASSWORD_CHANGED = "password_changed"
    PROFILE_COMPLETED = "profile_completed"
    NOTIFICATIONS_CONFIGURED = "notifications_configured"
    COMPLETED = "completed"


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class OutgoingEmail:
    """A composed email, ready for the sender."""
    to: str
    subject: str
    text: str
    html: str | None = None


@dataclass(frozen=True)
class DeliveryReport:
    """Outcome of one send attempt. Never raised, always returned."""
    success: bool
    message: str
    error: str | None = None


@dataclass(frozen=True)
class IdentityClaims:
    """Verified identity behind a session token."""
    account_id: AccountId
    email: str
    session_id: str | None = None


@dataclass(frozen=True)
class IdentitySession:
    """A session opened by the identity provider (sign-in or account creation)."""
    account_id: AccountId
    email: str
    token: str
