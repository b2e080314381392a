"""Email Composition — tests for the pure email builders.

Tests cover:
    - Acceptance email carries applicant email, temporary password and login link
    - Optional notes omitted entirely when blank
    - Mentor review email carries the action link in text and html
"""

from tbi_portal.core.compose_emails import (
    compose_acceptance_email,
    compose_admin_rejection_email,
    compose_mentor_approval_email,
    compose_mentor_rejection_email,
    compose_mentor_review_email,
    compose_password_reset_email,
    compose_rejection_email,
)


def test_acceptance_email_contains_credentials():
    email = compose_acceptance_email("Ada", "a@x.com", "Abc123xyz9", "http://portal.tbi.org/")
    assert email.to == "a@x.com"
    assert "Accepted" in email.subject
    assert "Email: a@x.com" in email.text
    assert "Temporary password: Abc123xyz9" in email.text
    assert "http://portal.tbi.org/login" in email.text
    assert email.text.startswith("Dear Ada,")


def test_rejection_email():
    email = compose_rejection_email("Ada", "a@x.com")
    assert email.to == "a@x.com"
    assert email.subject == "Update on Your TBI Application"
    assert "not be moving forward" in email.text


def test_admin_rejection_includes_reason():
    email = compose_admin_rejection_email("Ada", "a@x.com", "Grace", "Mentor is fully booked")
    assert "Reason: Mentor is fully booked" in email.text
    assert "Grace" in email.text


def test_admin_rejection_omits_blank_reason():
    email = compose_admin_rejection_email("Ada", "a@x.com", "Grace", "   ")
    assert "Reason" not in email.text


def test_mentor_approval_gives_contact():
    email = compose_mentor_approval_email("Ada", "a@x.com", "Grace", "m@x.com", "Looking forward!")
    assert email.subject == "Mentorship Request Approved!"
    assert "m@x.com" in email.text
    assert "Mentor's message: Looking forward!" in email.text


def test_mentor_rejection_without_notes():
    email = compose_mentor_rejection_email("Ada", "a@x.com", "Grace", None)
    assert "Mentor's message" not in email.text
    assert "unable to take on new mentees" in email.text


def test_mentor_review_email_has_links():
    url = "http://portal.tbi.org/mentor/requests/r1?token=abc"
    approve = "http://portal.tbi.org/mentor/requests/r1?token=yes&action=approve"
    reject = "http://portal.tbi.org/mentor/requests/r1?token=no&action=reject"
    email = compose_mentor_review_email(
        "Grace", "m@x.com", "Ada", "Please mentor me", url, approve, reject,
    )
    assert email.to == "m@x.com"
    assert email.text.index(url) < email.text.index(approve) < email.text.index(reject)
    assert f"Accept: {approve}" in email.text
    assert f"Decline: {reject}" in email.text
    assert f'href="{url}"' in email.html
    assert f'href="{reject}"' in email.html
    assert "Please mentor me" in email.text


def test_password_reset_email():
    email = compose_password_reset_email("a@x.com", "http://portal.tbi.org/reset-password?token=t")
    assert email.to == "a@x.com"
    assert "reset-password?token=t" in email.text
