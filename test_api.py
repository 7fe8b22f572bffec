"""
End-to-end tests of the HTTP API against the in-memory backend
"""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from conftest import make_token
from jobportal import main
from jobportal.services.assistant_service import CHAT_FALLBACK, AssistantService

EMPLOYER = "employer-1"
SEEKER = "seeker-1"

JOB = {
    "title": "Backend Engineer",
    "company": "Acme",
    "location": "Remote",
    "description": "Build APIs",
    "requirements": "Python",
    "job_type": "full-time",
}


class BrokenCompletions:
    def create(self, **params):
        raise ConnectionError("model unreachable")


@pytest.fixture
def client(fake_db, supabase_service):
    broken = SimpleNamespace(chat=SimpleNamespace(completions=BrokenCompletions()))
    main.app.dependency_overrides[main.get_supabase_service] = lambda: supabase_service
    main.app.dependency_overrides[main.get_job_service] = lambda: main.JobService(supabase_service)
    main.app.dependency_overrides[main.get_application_service] = lambda: main.ApplicationService(supabase_service)
    main.app.dependency_overrides[main.get_notification_service] = lambda: main.NotificationService(supabase_service)
    main.app.dependency_overrides[main.get_profile_service] = lambda: main.ProfileService(supabase_service)
    main.app.dependency_overrides[main.get_assistant_service] = lambda: AssistantService(client=broken)
    main.app.dependency_overrides[main.get_auth_client] = lambda: fake_db
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


def post_job(client, **overrides):
    response = client.post("/jobs", params={"employer_id": EMPLOYER}, json={**JOB, **overrides})
    assert response.status_code == 200
    return response.json()["job"]


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy", "service": "JobPortal"}


def test_seeker_search_and_employer_deactivation(client):
    job = post_job(client)
    post_job(client, title="UI Designer", job_type="contract")

    found = client.get("/jobs", params={"search": "backend"}).json()
    assert [j["id"] for j in found["jobs"]] == [job["id"]]
    assert client.get("/jobs", params={"job_type": "all"}).json()["count"] == 2

    toggled = client.post(f"/jobs/{job['id']}/toggle", params={"employer_id": EMPLOYER}).json()
    assert toggled["job"]["is_active"] is False
    assert toggled["message"] == "Job is now hidden from applicants"

    remaining = client.get("/jobs", params={"search": "backend"}).json()
    assert remaining["count"] == 0


def test_missing_required_field_is_rejected_per_field(client):
    response = client.post("/jobs", params={"employer_id": EMPLOYER}, json={**JOB, "title": " "})
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"][-1] == "title"


def test_blank_update_is_rejected_and_job_stays_readable(client, fake_db):
    job = post_job(client)

    response = client.patch(
        f"/jobs/{job['id']}", params={"employer_id": EMPLOYER}, json={"requirements": "", "title": "   "}
    )
    assert response.status_code == 422
    assert {error["loc"][-1] for error in response.json()["detail"]} == {"requirements", "title"}

    fetched = client.get(f"/jobs/{job['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["job"]["requirements"] == "Python"

    fake_db.tables["jobs"][0]["job_type"] = "internship"
    fetched = client.get(f"/jobs/{job['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["job"]["job_type"] == "internship"


def test_apply_review_and_notifications_flow(client):
    job = post_job(client)

    applied = client.post(
        f"/jobs/{job['id']}/applications",
        json={"applicant_id": SEEKER, "cover_letter": "Hire me", "resume_url": ""},
    )
    assert applied.status_code == 200
    application = applied.json()["application"]
    assert application["status"] == "pending"
    assert application["resume_url"] is None

    feed = client.get(f"/users/{EMPLOYER}/notifications").json()
    assert feed["unread"] == 1
    assert feed["notifications"][0]["type"] == "new_job_application"
    assert feed["notifications"][0]["application_id"] == application["id"]

    reviewed = client.patch(
        f"/applications/{application['id']}",
        json={"decision": "accepted", "message": "Welcome aboard"},
    ).json()["application"]
    assert reviewed["status"] == "accepted"
    assert reviewed["employer_message"] == "Welcome aboard"
    assert reviewed["reviewed_at"]

    notice_id = feed["notifications"][0]["id"]
    assert client.post(f"/notifications/{notice_id}/read").status_code == 200
    assert client.post(f"/notifications/{notice_id}/read").status_code == 200
    assert client.get(f"/users/{EMPLOYER}/notifications").json()["unread"] == 0


def test_blank_cover_letter_is_rejected(client):
    job = post_job(client)
    response = client.post(
        f"/jobs/{job['id']}/applications", json={"applicant_id": SEEKER, "cover_letter": "  "}
    )
    assert response.status_code == 422


def test_apply_to_unknown_job(client):
    response = client.post("/jobs/nope/applications", json={"applicant_id": SEEKER, "cover_letter": "Hi"})
    assert response.status_code == 404


def test_review_with_pending_decision_is_rejected(client):
    response = client.patch("/applications/anything", json={"decision": "pending"})
    assert response.status_code == 422


def test_assistant_failure_returns_apology(client):
    response = client.post("/assistant/chat", json={"message": "How do I negotiate salary?"})
    assert response.status_code == 200
    assert response.json() == {"response": CHAT_FALLBACK}


def test_register_login_and_session(client, fake_db):
    registered = client.post("/auth/register", json={
        "email": "emp@example.com", "password": "pw", "name": "Emp", "role": "employer"
    })
    assert registered.status_code == 200
    assert registered.json()["user"]["role"] == "employer"

    login = client.post("/auth/login", json={"email": "emp@example.com", "password": "pw"}).json()
    token = login["token"]

    session = client.get("/auth/session", headers={"Authorization": f"Bearer {token}"}).json()
    assert session["user"]["email"] == "emp@example.com"

    assert client.post("/auth/login", json={"email": "emp@example.com", "password": "bad"}).status_code == 401
    assert client.post("/auth/logout", headers={"Authorization": f"Bearer {token}"}).status_code == 200
    assert fake_db.auth.revoked_tokens == [token]


def test_expired_session_yields_no_user(client):
    token = make_token(id="1", email="a@example.com", exp=1)
    session = client.get("/auth/session", headers={"Authorization": f"Bearer {token}"}).json()
    assert session == {"token": None, "user": None}


def test_profile_round_trip(client):
    saved = client.put("/profiles/u1", json={"name": "Ada", "skills": ["python"], "is_public": True})
    assert saved.status_code == 200
    assert client.get("/profiles/u1/public").json()["profile"]["name"] == "Ada"
    assert client.get("/profiles", params={"skills": "python, sql"}).json()["count"] == 1
    assert client.get("/profiles/u2").status_code == 404


def test_employer_dashboard(client):
    job = post_job(client)
    client.post(f"/jobs/{job['id']}/applications", json={"applicant_id": SEEKER, "cover_letter": "Hi"})

    stats = client.get(f"/employers/{EMPLOYER}/stats").json()["stats"]
    assert stats == {"total_jobs": 1, "active_jobs": 1, "total_applications": 1, "pending_applications": 1}
    assert client.get(f"/jobs/{job['id']}/applications").json()["count"] == 1
    assert client.delete(f"/jobs/{job['id']}", params={"employer_id": EMPLOYER}).status_code == 200
    assert client.get(f"/jobs/{job['id']}").status_code == 404
