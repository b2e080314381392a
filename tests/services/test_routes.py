"""HTTP surface — role gates, status-code mapping of result envelopes, error handlers."""

import re

from tbi_portal.core.domain_types import Role
from tbi_portal.models.submission import Submission

from tests.services.fakes import MENTOR_EMAIL, bearer

APPLICATION = {
    "name": "Ada Lovelace",
    "email": "ada@x.com",
    "idea": "Analytical engines for every classroom",
    "campus_status": "off-campus",
}


# ─── Health ──────────────────────────────────────────────────────

async def test_health(client):
    response = await client.get("/api/v1/health/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_readiness_uses_database(client):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "healthy"


# ─── Applications ────────────────────────────────────────────────

async def test_submit_application_is_public(client, fetch):
    response = await client.post("/api/v1/applications", json=APPLICATION)

    assert response.status_code == 201
    submission = await fetch(Submission, response.json()["id"])
    assert submission.status == "pending"
    assert submission.campus_status == "off-campus"


async def test_submit_application_validation(client):
    response = await client.post(
        "/api/v1/applications", json={**APPLICATION, "email": "not-an-email"},
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["kind"] == "validation"
    assert any(d["field"].endswith("email") for d in error["details"])


async def test_listing_requires_admin(client, make_account, seed_submission):
    assert (await client.get("/api/v1/applications")).status_code == 401

    _, user_token = await make_account(Role.USER)
    response = await client.get("/api/v1/applications", headers=bearer(user_token))
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "PERMISSION_DENIED"

    _, admin_token = await make_account(Role.ADMIN)
    response = await client.get(
        "/api/v1/applications", params={"status": "pending"}, headers=bearer(admin_token),
    )
    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == ["s1"]


async def test_unknown_submission_is_404(client, make_account):
    _, admin_token = await make_account(Role.ADMIN)
    response = await client.get("/api/v1/applications/nope", headers=bearer(admin_token))
    assert response.status_code == 404


async def test_process_application_over_http(client, make_account, seed_submission, mailer):
    _, admin_token = await make_account(Role.ADMIN)
    body = {"action": "accept", "applicant_name": "Ada", "applicant_email": "a@x.com"}

    first = await client.post(
        "/api/v1/applications/s1/process", json=body, headers=bearer(admin_token),
    )
    assert first.status_code == 200
    assert first.json()["status"] == "success"
    assert first.json()["email"]["sent"] is True
    assert mailer.sent[-1].to == "a@x.com"

    second = await client.post(
        "/api/v1/applications/s1/process", json=body, headers=bearer(admin_token),
    )
    assert second.status_code == 409
    assert second.json()["status"] == "error"
    assert second.json()["error_kind"] == "invalid_state"


# ─── Auth ────────────────────────────────────────────────────────

async def test_sign_in_over_http(client, make_account):
    await make_account(Role.USER, email="ada@x.com")

    wrong = await client.post(
        "/api/v1/auth/sign-in", json={"email": "ada@x.com", "password": "nope"},
    )
    assert wrong.status_code == 401
    assert wrong.json()["message"] == "Invalid email or password."

    ok = await client.post(
        "/api/v1/auth/sign-in", json={"email": "ada@x.com", "password": "secret123"},
    )
    assert ok.status_code == 200
    token = ok.json()["token"]
    assert ok.json()["redirect_path"] == "/user/dashboard"

    me = await client.get("/api/v1/auth/me", headers=bearer(token))
    assert me.status_code == 200
    assert me.json()["role"] == "user"
    assert me.json()["user"]["email"] == "ada@x.com"


async def test_me_requires_session(client):
    response = await client.get("/api/v1/auth/me", headers=bearer("bogus"))
    assert response.status_code == 401


# ─── Mentor requests ─────────────────────────────────────────────

async def test_emailed_link_decision(client, make_account, seed_mentor, mailer):
    user, user_token = await make_account(Role.USER, email="ada@x.com", name="Ada Lovelace")
    _, admin_token = await make_account(Role.ADMIN)

    created = await client.post(
        "/api/v1/mentor-requests",
        json={"mentor_id": seed_mentor.id, "request_message": "I would love guidance on compilers."},
        headers=bearer(user_token),
    )
    assert created.status_code == 201
    request_id = created.json()["request_id"]

    approved = await client.post(
        f"/api/v1/mentor-requests/{request_id}/admin-decision",
        json={"action": "approve"}, headers=bearer(admin_token),
    )
    assert approved.status_code == 200
    assert mailer.sent[-1].to == MENTOR_EMAIL
    token = re.search(r"token=([^\s\"&]+)", mailer.sent[-1].text).group(1)

    decided = await client.post(
        "/api/v1/mentor-requests/token-decision", json={"token": token, "action": "approve"},
    )
    assert decided.status_code == 200
    assert decided.json()["success"] is True

    reused = await client.post(
        "/api/v1/mentor-requests/token-decision", json={"token": token, "action": "approve"},
    )
    assert reused.status_code == 403
    assert reused.json()["error_kind"] == "authorization"

    mine = await client.get("/api/v1/mentor-requests/mine", headers=bearer(user_token))
    assert [r["status"] for r in mine.json()] == ["mentor_approved"]


async def test_mentor_routes_reject_plain_users(client, make_account):
    _, user_token = await make_account(Role.USER)
    response = await client.get("/api/v1/mentor-requests/assigned", headers=bearer(user_token))
    assert response.status_code == 403


# ─── Accounts ────────────────────────────────────────────────────

async def test_password_mismatch_is_400(client, make_account):
    _, token = await make_account(Role.USER)

    response = await client.post(
        "/api/v1/accounts/me/password",
        json={"current_password": "secret123", "new_password": "abcdef1", "confirm_password": "abcdef2"},
        headers=bearer(token),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Passwords don't match"


# ─── Maintenance ─────────────────────────────────────────────────

async def test_cleanup_requires_key(client):
    assert (await client.post("/api/v1/maintenance/cleanup-tokens")).status_code == 401
    wrong = await client.post("/api/v1/maintenance/cleanup-tokens", headers=bearer("nope"))
    assert wrong.status_code == 401

    ok = await client.post("/api/v1/maintenance/cleanup-tokens", headers=bearer("cleanup-key"))
    assert ok.status_code == 200
    assert ok.json()["deleted_count"] == 0


# ─── Startups ────────────────────────────────────────────────────

STARTUP = {
    "name": "Agrotech Labs",
    "description": "Soil sensors for smallholder farms.",
    "badge_text": "AgriTech",
    "funnel_source": "Hackathon",
    "session": "2024-25",
    "month_year_of_incubation": "March 2024",
    "status": "Prototype",
    "legal_status": "Pvt Ltd",
    "rknec_email_id": "agro@rknec.edu",
    "email_id": "team@agrotech.in",
    "mobile_number": "9876543210",
    "logo_url": "",
}


async def test_startup_showcase_is_public_edits_are_admin(client, make_account):
    _, user_token = await make_account(Role.USER)
    refused = await client.post("/api/v1/startups", json=STARTUP, headers=bearer(user_token))
    assert refused.status_code == 403

    _, admin_token = await make_account(Role.ADMIN)
    created = await client.post("/api/v1/startups", json=STARTUP, headers=bearer(admin_token))
    assert created.status_code == 201
    startup_id = created.json()["startup_id"]

    listed = await client.get("/api/v1/startups")
    assert listed.status_code == 200
    assert [s["logo_url"] for s in listed.json()] == [
        "https://placehold.co/300x150/1A1A1A/FFFFFF.png?text=Agr",
    ]
    assert (await client.get(f"/api/v1/startups/{startup_id}")).json()["name"] == "Agrotech Labs"
    assert (await client.get("/api/v1/startups/ghost")).status_code == 404

    deleted = await client.delete(f"/api/v1/startups/{startup_id}", headers=bearer(admin_token))
    assert deleted.status_code == 200


async def test_partial_import_is_207(client, make_account):
    _, admin_token = await make_account(Role.ADMIN)

    response = await client.post(
        "/api/v1/startups/import",
        json={"rows": [
            {"Startup Name": "Agrotech Labs"},
            {"Startup Name": "Medisense", "Contact Information": "not an email"},
        ]},
        headers=bearer(admin_token),
    )

    assert response.status_code == 207
    body = response.json()
    assert body["success"] is False
    assert body["imported_count"] == 1
    assert len(body["errors"]) == 1


# ─── Events ──────────────────────────────────────────────────────

EVENT = {
    "title": "Demo Day",
    "description": "Cohort startups pitch to investors.",
    "date": "2026-05-02",
    "time": "14:30",
    "venue": "Main Auditorium",
}


async def test_event_moderation_flow(client, make_account):
    assert (await client.post("/api/v1/events", json=EVENT)).status_code == 401
    _, admin_token = await make_account(Role.ADMIN)
    admin = bearer(admin_token)

    created = await client.post("/api/v1/events", json=EVENT, headers=admin)
    assert created.status_code == 201
    event_id = created.json()["event_id"]

    assert (await client.get("/api/v1/events")).json() == []
    assert (await client.get(f"/api/v1/events/{event_id}")).status_code == 404
    pending = await client.get("/api/v1/events/all?status=pending", headers=admin)
    assert [e["id"] for e in pending.json()] == [event_id]

    approved = await client.post(
        f"/api/v1/events/{event_id}/status", json={"status": "approved"}, headers=admin,
    )
    assert approved.status_code == 200

    public = await client.get("/api/v1/events")
    assert [e["title"] for e in public.json()] == ["Demo Day"]
    assert public.json()[0]["date"] == "2026-05-02"


async def test_event_listing_all_requires_admin(client, make_account):
    _, user_token = await make_account(Role.USER)
    response = await client.get("/api/v1/events/all", headers=bearer(user_token))
    assert response.status_code == 403


async def test_event_bad_time_is_400(client, make_account):
    _, admin_token = await make_account(Role.ADMIN)
    response = await client.post(
        "/api/v1/events", json={**EVENT, "time": "25:00"}, headers=bearer(admin_token),
    )
    assert response.status_code == 400
    assert response.json()["error"]["kind"] == "validation"
