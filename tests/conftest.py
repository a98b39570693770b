from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient


def pytest_configure() -> None:
    # Ensure the SQLAlchemy engine is created against sqlite for tests.
    os.environ["DB_URL"] = "sqlite:///./test.db"
    os.environ["ORM_DB_URL"] = "sqlite:///./test.db"
    os.environ["ORM_USE_MYSQL"] = "false"

    # Ensure local .env cannot leak into tests.
    os.environ["ENVIRONMENT"] = "test"
    os.environ["JWT_SECRET"] = "test-secret"


def utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@pytest.fixture()
def client() -> Any:
    from jobfinder.database import Base, engine
    from jobfinder.main import create_app

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    app = create_app()
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db(client) -> Any:
    from jobfinder.database import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_user(db) -> Callable[..., Any]:
    from jobfinder.models.user import User

    def _make(email: str, name: str | None = None) -> Any:
        user = User(email=email, name=name)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def auth_headers() -> Callable[[Any], dict[str, str]]:
    from jobfinder.utils.jwt_handler import create_access_token

    def _headers(user: Any) -> dict[str, str]:
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def make_job(db) -> Callable[..., Any]:
    from jobfinder.models.company import Company
    from jobfinder.models.enums import EmploymentType, ExperienceLevel, LocationType
    from jobfinder.models.jobs import Job

    counter = {"n": 0}

    def _make(title: str, company: str | None = None, **fields: Any) -> Any:
        counter["n"] += 1
        company_row = None
        if company is not None:
            company_row = Company(name=company)
            db.add(company_row)
            db.flush()

        values: dict[str, Any] = {
            "description": f"{title} role",
            "required_skills": [],
            "required_qualifications": [],
            "location_type": LocationType.ONSITE,
            "employment_type": EmploymentType.FULL_TIME,
            "experience_level": ExperienceLevel.MID,
            "is_active": True,
            # Later jobs are newer so "recent" order is deterministic.
            "created_at": utc_now_naive() - timedelta(days=100) + timedelta(minutes=counter["n"]),
        }
        values.update(fields)
        job = Job(title=title, company_id=company_row.id if company_row else None, **values)
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    return _make


@pytest.fixture()
def set_profile(db) -> Callable[[Any, dict[str, Any]], None]:
    from jobfinder.models.profile import UserProfileModel

    def _set(user: Any, data: dict[str, Any]) -> None:
        db.add(UserProfileModel(user_id=user.id, profile_data=data))
        db.commit()

    return _set
