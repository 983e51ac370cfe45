from ibdaily.models import AuditLog, User


def test_session_creates_user(client, db):
    response = client.post(
        "/auth/session", json={"email": "New@Example.com", "firebase_uid": "uid-new", "name": "New"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    user = db.query(User).filter(User.email == "new@example.com").one()
    assert body["user_id"] == str(user.id)
    assert db.query(AuditLog).filter(AuditLog.action == "session").count() == 1


def test_session_reuses_existing_user(client, user):
    response = client.post("/auth/session", json={"email": "asha@example.com", "firebase_uid": "uid-asha"})

    assert response.status_code == 200
    assert response.json()["user_id"] == str(user.id)


def test_session_links_identity_once(client, db):
    db.add(User(email="legacy@example.com"))
    db.commit()

    response = client.post("/auth/session", json={"email": "legacy@example.com", "firebase_uid": "uid-legacy"})

    assert response.status_code == 200
    db.expire_all()
    assert db.query(User).filter(User.email == "legacy@example.com").one().firebase_uid == "uid-legacy"


def test_session_rejects_identity_mismatch(client, user):
    response = client.post("/auth/session", json={"email": "asha@example.com", "firebase_uid": "uid-other"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Identity mismatch"


def test_session_rejects_bad_email(client):
    response = client.post("/auth/session", json={"email": "not-an-email", "firebase_uid": "uid-x"})

    assert response.status_code == 400


def test_session_rate_limited(client):
    payload = {"email": "burst@example.com", "firebase_uid": "uid-burst"}
    for _ in range(10):
        assert client.post("/auth/session", json=payload).status_code == 200

    response = client.post("/auth/session", json=payload)

    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) >= 1


def test_protected_route_requires_token(client):
    response = client.get("/cohorts")

    assert response.status_code == 401
    assert response.json()["detail"] == "Missing bearer token"


def test_protected_route_rejects_garbage_token(client):
    response = client.get("/cohorts", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Token invalid"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
