from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi import HTTPException

from jobfinder.utils.jwt_handler import create_access_token, decode_access_token


def test_token_round_trip_keeps_subject() -> None:
    token = create_access_token({"sub": "12"})
    assert decode_access_token(token)["sub"] == "12"


def test_expired_token_rejected() -> None:
    token = create_access_token({"sub": "12"}, expires_delta=timedelta(minutes=-5))
    with pytest.raises(HTTPException) as exc:
        decode_access_token(token)
    assert exc.value.status_code == 401
    assert exc.value.detail == "Token expired"


def test_match_endpoint_rejects_unknown_user(client, make_job) -> None:
    job = make_job("Role")
    token = create_access_token({"sub": "4040"})
    r = client.get(f"/api/jobs/{job.id}/match", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["detail"] == "User not found"


def test_match_endpoint_rejects_non_numeric_subject(client, make_job) -> None:
    job = make_job("Role")
    token = create_access_token({"sub": "abc"})
    r = client.get(f"/api/jobs/{job.id}/match", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_unreadable_profile_is_unprocessable(client, make_user, make_job, set_profile) -> None:
    user = make_user("broken@example.com")
    set_profile(user, {"experiences": [{"startDate": "someday"}]})
    job = make_job("Role")
    token = create_access_token({"sub": str(user.id)})
    r = client.get(f"/api/jobs/{job.id}/match", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 422
