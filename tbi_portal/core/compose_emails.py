"""Email Composition — pure builders for every notification the portal sends.

Invariants:
    - All functions are PURE: input values in, OutgoingEmail out
    - Acceptance email carries the applicant's email and temporary password in plaintext
    - Optional notes/reasons are omitted entirely when empty (no dangling labels)
    - Links are built from the configured public app URL, never from request headers
"""

from tbi_portal.core.domain_types import OutgoingEmail

TEAM_SIGNATURE = "The TBI Team"
MENTOR_NOTE_LABEL = "Mentor's message"


# --- Application lifecycle ----------------------------------------------------

def compose_acceptance_email(
    applicant_name: str, applicant_email: str, temporary_password: str, app_url: str,
) -> OutgoingEmail:
    login_url = f"{app_url.rstrip('/')}/login"
    body = (
        f"Dear {applicant_name},\n\n"
        "We are thrilled to inform you that your application to the TBI program "
        "has been accepted!\n\n"
        "Here are your temporary login credentials for the portal:\n"
        f"Email: {applicant_email}\n"
        f"Temporary password: {temporary_password}\n\n"
        f"Sign in at {login_url} and change your password as part of onboarding.\n\n"
        "Welcome aboard!\n\n"
        f"Best regards,\n{TEAM_SIGNATURE}"
    )
    return OutgoingEmail(
        to=applicant_email,
        subject="Congratulations! Your TBI Application has been Accepted!",
        text=body,
    )


def compose_rejection_email(applicant_name: str, applicant_email: str) -> OutgoingEmail:
    body = (
        f"Dear {applicant_name},\n\n"
        "Thank you for your interest in the TBI program and for taking the time to apply.\n\n"
        "After careful consideration, we regret to inform you that we will not be moving "
        "forward with your application at this time. The selection process is highly "
        "competitive, and we receive many qualified applications.\n\n"
        "We wish you the best of luck in your future endeavors.\n\n"
        f"Sincerely,\n{TEAM_SIGNATURE}"
    )
    return OutgoingEmail(
        to=applicant_email,
        subject="Update on Your TBI Application",
        text=body,
    )


# --- Mentor-request lifecycle -------------------------------------------------

def compose_mentor_review_email(
    mentor_name: str, mentor_email: str, mentee_name: str,
    request_message: str, review_url: str, approve_url: str, reject_url: str,
) -> OutgoingEmail:
    """Sent to the mentor after admin approval.

    review_url opens the request page and allows either decision; approve_url
    and reject_url are one-click links bound to a single action.
    """
    text = (
        f"Dear {mentor_name},\n\n"
        f"You have a new mentorship request from {mentee_name}.\n\n"
        f"Their message:\n{request_message}\n\n"
        f"Review the request and respond here:\n{review_url}\n\n"
        f"Or respond directly:\nAccept: {approve_url}\nDecline: {reject_url}\n\n"
        "Thank you for your guidance and support.\n\n"
        f"Best regards,\n{TEAM_SIGNATURE}"
    )
    html = (
        f"<p>Dear {mentor_name},</p>"
        f"<p>You have a new mentorship request from <strong>{mentee_name}</strong>.</p>"
        f'<p><a href="{review_url}">Click here to review the request</a></p>'
        f'<p><a href="{approve_url}">Accept</a> | <a href="{reject_url}">Decline</a></p>'
        "<p>Thank you for your guidance and support.</p>"
        f"<p>Best regards,<br>{TEAM_SIGNATURE}</p>"
    )
    return OutgoingEmail(
        to=mentor_email,
        subject="You Have a New Mentorship Request",
        text=text,
        html=html,
    )


def compose_admin_rejection_email(
    user_name: str, user_email: str, mentor_name: str, notes: str | None,
) -> OutgoingEmail:
    body = (
        f"Dear {user_name},\n\n"
        f"Thank you for your interest in connecting with {mentor_name} through our TBI platform.\n\n"
        "After careful review, we regret to inform you that your mentor request cannot be "
        "approved at this time.\n\n"
        f"{_optional_line('Reason', notes)}"
        "We encourage you to explore other mentors available on our platform who might be "
        "a better fit for your current needs.\n\n"
        f"Best regards,\n{TEAM_SIGNATURE}"
    )
    return OutgoingEmail(to=user_email, subject="Update on Your Mentor Request", text=body)


def compose_mentor_approval_email(
    user_name: str, user_email: str, mentor_name: str, mentor_email: str, notes: str | None,
) -> OutgoingEmail:
    body = (
        f"Dear {user_name},\n\n"
        f"Great news! {mentor_name} has accepted your mentorship request.\n\n"
        f"You can now reach out to your mentor directly at: {mentor_email}\n\n"
        f"{_optional_line(MENTOR_NOTE_LABEL, notes)}"
        "We're excited to see your mentorship journey begin!\n\n"
        f"Best regards,\n{TEAM_SIGNATURE}"
    )
    return OutgoingEmail(to=user_email, subject="Mentorship Request Approved!", text=body)


def compose_mentor_rejection_email(
    user_name: str, user_email: str, mentor_name: str, notes: str | None,
) -> OutgoingEmail:
    body = (
        f"Dear {user_name},\n\n"
        f"Thank you for your interest in connecting with {mentor_name}.\n\n"
        f"After consideration, {mentor_name} is unable to take on new mentees at this time.\n\n"
        f"{_optional_line(MENTOR_NOTE_LABEL, notes)}"
        "We encourage you to explore other mentors available on our platform.\n\n"
        f"Best regards,\n{TEAM_SIGNATURE}"
    )
    return OutgoingEmail(to=user_email, subject="Update on Your Mentorship Request", text=body)


# --- Accounts -----------------------------------------------------------------

def compose_password_reset_email(email: str, reset_url: str) -> OutgoingEmail:
    body = (
        "We received a request to reset the password for your TBI portal account.\n\n"
        f"Reset it here:\n{reset_url}\n\n"
        "If you did not ask for this, you can ignore this email.\n\n"
        f"{TEAM_SIGNATURE}"
    )
    return OutgoingEmail(to=email, subject="Reset your TBI portal password", text=body)


# --- Helper -------------------------------------------------------------------

def _optional_line(label: str, value: str | None) -> str:
    if value and value.strip():
        return f"{label}: {value.strip()}\n\n"
    return ""
