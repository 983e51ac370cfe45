import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("CRON_SECRET", "cron-secret")
os.environ.setdefault("ALLOW_INSECURE_HTTP", "true")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ibdaily.api.deps import get_db, session_limiter, submission_limiter
from ibdaily.db import Base
from ibdaily.main import app
from ibdaily.models import Cohort, User
from ibdaily.services.auth import create_access_token
from ibdaily.services.cohorts import create_cohort, join_cohort


@pytest.fixture()
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    session_limiter.reset()
    submission_limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def user(db) -> User:
    user = User(email="asha@example.com", firebase_uid="uid-asha", name="Asha")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def other_user(db) -> User:
    user = User(email="ben@example.com", firebase_uid="uid-ben", name="Ben")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def cohort(db, user) -> Cohort:
    return create_cohort(db, user, "HL Biology")


@pytest.fixture()
def headers_for():
    def build(user: User) -> dict:
        token, _ = create_access_token(user.id)
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture()
def auth_headers(user, headers_for) -> dict:
    return headers_for(user)


@pytest.fixture()
def joined(db, cohort, other_user) -> Cohort:
    join_cohort(db, other_user, cohort)
    return cohort
