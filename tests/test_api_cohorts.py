import uuid
from datetime import datetime, timezone

from ibdaily.models import CohortMember, Submission


def test_create_cohort(client, db, user, auth_headers):
    response = client.post("/cohorts", json={"name": "  SL Maths  "}, headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "SL Maths"
    assert body["status"] == "trial"
    assert body["role"] == "owner"
    assert body["is_active"] is True
    assert len(body["join_code"]) == 6
    membership = db.query(CohortMember).filter(CohortMember.cohort_id == uuid.UUID(body["id"])).one()
    assert membership.user_id == user.id


def test_create_cohort_requires_name(client, auth_headers):
    response = client.post("/cohorts", json={"name": "   "}, headers=auth_headers)

    assert response.status_code == 400


def test_join_cohort(client, cohort, other_user, headers_for):
    headers = headers_for(other_user)

    first = client.post("/cohorts/join", json={"join_code": cohort.join_code.lower()}, headers=headers)
    second = client.post("/cohorts/join", json={"join_code": cohort.join_code}, headers=headers)

    assert first.status_code == 200
    assert first.json()["already_member"] is False
    assert first.json()["is_active"] is True
    assert second.json()["already_member"] is True


def test_join_with_unknown_code(client, auth_headers):
    response = client.post("/cohorts/join", json={"join_code": "ZZZZZZ"}, headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "Invalid join code"


def test_list_cohorts(client, joined, other_user, headers_for):
    response = client.get("/cohorts", headers=headers_for(other_user))

    assert response.status_code == 200
    body = response.json()
    assert [item["name"] for item in body["cohorts"]] == ["HL Biology"]
    assert body["cohorts"][0]["member_count"] == 2
    assert body["cohorts"][0]["role"] == "member"
    assert body["active_cohort_id"] == str(joined.id)
    assert body["active_cohort_status"]["status"] == "trial"


def test_cohort_status(client, cohort, auth_headers):
    response = client.get(f"/cohorts/{cohort.id}/status", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "trial"
    assert body["member_count"] == 1
    assert body["paid_count"] == 0
    assert body["days_until_trial_end"] == 14
    assert body["days_remaining_text"] == "14 days left in trial"
    assert body["show_activation_counter"] is False
    assert body["can_submit"] is True


def test_cohort_status_requires_membership(client, cohort, other_user, headers_for):
    response = client.get(f"/cohorts/{cohort.id}/status", headers=headers_for(other_user))

    assert response.status_code == 403


def test_activate_cohort(client, db, cohort, user, auth_headers):
    second = client.post("/cohorts", json={"name": "HL Physics"}, headers=auth_headers).json()
    assert second["is_active"] is True

    response = client.post(f"/cohorts/{cohort.id}/activate", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["is_active"] is True
    db.refresh(user)
    assert user.active_cohort_id == cohort.id


def test_cohort_health_for_owner(client, db, joined, user, auth_headers, monkeypatch):
    now = datetime(2026, 3, 10, 10, 0, tzinfo=timezone.utc)
    monkeypatch.setattr("ibdaily.services.cohort_health.utcnow", lambda: now)
    db.add(
        Submission(
            user_id=user.id,
            cohort_id=joined.id,
            date_key="2026-03-10",
            subject="Biology",
            bullet1="Enzyme kinetics and the Michaelis constant",
            created_at=now,
        )
    )
    db.commit()

    response = client.get(f"/cohorts/{joined.id}/health", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["cohort_name"] == "HL Biology"
    assert body["total_members"] == 2
    assert body["active_members"] == 1
    assert body["inactive_members"] == 1
    assert body["today_submission_rate"] == 50
    assert body["daily_stats"][-1]["date_key"] == "2026-03-10"
    assert body["retention"] == {"d1": 0, "d3": 0, "d7": 0}
    assert [entry["user_email"] for entry in body["member_health"]] == ["ben@example.com", "asha@example.com"]
    assert body["member_health"][1]["status"] == "active"


def test_cohort_health_requires_owner(client, joined, other_user, headers_for):
    response = client.get(f"/cohorts/{joined.id}/health", headers=headers_for(other_user))

    assert response.status_code == 403
    assert response.json()["detail"] == "Only cohort owners can view health metrics"


def test_cohort_health_requires_membership(client, cohort, other_user, headers_for):
    response = client.get(f"/cohorts/{cohort.id}/health", headers=headers_for(other_user))

    assert response.status_code == 403
    assert response.json()["detail"] == "Not a member of this cohort"
