import pytest

from conftest import auth_headers, option_id
from mockbank.core.config import settings


@pytest.fixture
def content(seed):
    exam = seed.exam()
    physics = seed.subject(exam)
    kinematics = seed.topic(physics)
    q1 = seed.question(exam, physics, topics=[kinematics])
    q2 = seed.question(exam, physics, topics=[kinematics])
    q3 = seed.question(exam, physics, type="NAT", marks=2, answer="10")
    return {"exam": exam, "q1": q1, "q2": q2, "q3": q3}


def create_mock(client, headers, **overrides):
    body = {"name": "API mock", "exam_code": "JEE-MAIN", "num_questions": 3, "time_limit_minutes": 60}
    body.update(overrides)
    return client.post("/v1/mocks", json=body, headers=headers)


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


def test_mock_login_issues_usable_token(client, content):
    r = client.post("/v1/auth/mock-login", json={"user_id": "tester", "roles": ["student"]})
    assert r.status_code == 200
    token = r.json()["access_token"]
    r = create_mock(client, {"Authorization": f"Bearer {token}"})
    assert r.status_code == 201


def test_full_flow(client, content):
    headers = auth_headers("student-1")
    r = create_mock(client, headers)
    assert r.status_code == 201
    mock = r.json()
    assert [q["order"] for q in mock["questions"]] == [1, 2, 3]
    assert mock["time_limit"] == 60

    q1, q2 = content["q1"], content["q2"]
    r = client.post(f"/v1/mocks/{mock['id']}/submit", headers=headers, json={"responses": [
        {"question_id": q1.id, "selected_option_id": option_id(q1, "A"), "time_taken_seconds": 30},
        {"question_id": q2.id, "selected_option_id": option_id(q2, "C"), "time_taken_seconds": 30},
        {"question_id": content["q3"].id, "numeric_answer": 10.00005, "time_taken_seconds": 30},
    ]})
    assert r.status_code == 201
    submission = r.json()
    assert submission["total_score"] == 3

    r = client.get(f"/v1/mocks/{mock['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json()["latest_submission"]["id"] == submission["submission_id"]

    r = client.get(f"/v1/mocks/{mock['id']}/analysis", headers=headers)
    assert r.status_code == 200
    report = r.json()
    assert report["overall"]["attempted"] == 3
    assert report["overall"]["correct"] == 2
    assert set(report["by_difficulty"]) == {"EASY", "MEDIUM", "HARD"}

    r = client.get(
        f"/v1/mocks/{mock['id']}/analysis",
        params={"submission_id": submission["submission_id"]},
        headers=headers,
    )
    assert r.json()["submission"]["id"] == submission["submission_id"]


def test_practice_attempt(client, content):
    q1 = content["q1"]
    r = client.post(
        f"/v1/questions/{q1.id}/attempt",
        json={"selected_option_id": option_id(q1, "B")},
        headers=auth_headers(),
    )
    assert r.status_code == 201
    assert r.json()["is_correct"] is False
    assert r.json()["correct_option_ids"] == [option_id(q1, "A")]


def test_requires_authentication(client, content):
    r = create_mock(client, {})
    assert r.status_code == 401
    assert r.json()["error"]["type"] == "unauthorized"

    r = create_mock(client, {"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401


def test_requires_student_role(client, content):
    r = create_mock(client, auth_headers("author-1", roles=["author"]))
    assert r.status_code == 403


def test_other_users_mock_is_forbidden(client, content):
    mock = create_mock(client, auth_headers("student-1")).json()
    r = client.get(f"/v1/mocks/{mock['id']}", headers=auth_headers("student-2"))
    assert r.status_code == 403
    assert r.json()["error"] == {
        "message": "You do not have access to this mock",
        "type": "forbidden",
        "status_code": 403,
    }


def test_service_errors_use_envelope(client, content):
    headers = auth_headers()
    r = create_mock(client, headers, exam_code="UNKNOWN")
    assert r.status_code == 404
    assert r.json()["error"]["type"] == "not_found"

    r = create_mock(client, headers, year_from=1900, year_to=1901)
    assert r.status_code == 422
    assert r.json()["error"]["type"] == "no_candidates"

    r = create_mock(client, headers, num_questions=0)
    assert r.status_code == 422
    assert r.json()["error"]["type"] == "validation_error"

    r = client.get("/v1/mocks/missing/analysis", headers=headers)
    assert r.status_code == 404


def test_request_schema_errors_use_envelope(client, content):
    mock = create_mock(client, auth_headers()).json()
    r = client.post(f"/v1/mocks/{mock['id']}/submit", headers=auth_headers(), json={"responses": [
        {"question_id": content["q1"].id, "selected_option_id": "a", "numeric_answer": 1},
    ]})
    assert r.status_code == 422
    body = r.json()["error"]
    assert body["type"] == "validation_error"
    assert body["details"]


def test_configuration_error_maps_to_500(client, seed):
    exam = seed.exam(code="GATE")
    broken = seed.question(exam, type="NAT")
    r = client.post(f"/v1/questions/{broken.id}/attempt", json={"numeric_answer": 1}, headers=auth_headers())
    assert r.status_code == 500
    assert r.json()["error"]["type"] == "configuration_error"


def test_mock_login_disabled_in_production(client, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    r = client.post("/v1/auth/mock-login", json={"user_id": "victim", "roles": ["admin"]})
    assert r.status_code == 404
    assert "access_token" not in r.text


def test_mock_login_rejects_unknown_roles(client):
    r = client.post("/v1/auth/mock-login", json={"user_id": "tester", "roles": ["superuser"]})
    assert r.status_code == 422
    r = client.post("/v1/auth/mock-login", json={"user_id": "tester", "roles": []})
    assert r.status_code == 422


def test_attempt_with_both_answer_kinds_is_rejected(client, content):
    q1 = content["q1"]
    r = client.post(
        f"/v1/questions/{q1.id}/attempt",
        json={"selected_option_id": option_id(q1, "A"), "numeric_answer": 5.0},
        headers=auth_headers(),
    )
    assert r.status_code == 422
    assert r.json()["error"]["type"] == "validation_error"


def test_bookmark_route(client, content):
    q1 = content["q1"]
    url = f"/v1/questions/{q1.id}/bookmark"
    r = client.post(url, headers=auth_headers())
    assert r.status_code == 200
    assert r.json() == {"question_id": q1.id, "is_bookmarked": True}

    r = client.post(url, json={"action": "remove"}, headers=auth_headers())
    assert r.json()["is_bookmarked"] is False

    r = client.post(url, json={"action": "archive"}, headers=auth_headers())
    assert r.status_code == 422

    r = client.post("/v1/questions/missing/bookmark", json={"action": "add"}, headers=auth_headers())
    assert r.status_code == 404

    r = client.post(url, json={"action": "add"})
    assert r.status_code == 401
