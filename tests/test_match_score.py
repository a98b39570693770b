from __future__ import annotations

from datetime import date, timedelta

import pytest

from jobfinder.models.enums import ExperienceLevel
from jobfinder.schemas.profile import CandidateProfile
from jobfinder.services.match_score_service import (
    level_for_years,
    compute_match_score,
    round_half_up,
    score_one,
    score_postings,
    zero_match_score,
)
from jobfinder.services.postings import JobPosting, MalformedRecordError


TODAY = date(2026, 1, 1)


def _experience(days: int) -> dict:
    return {"title": "Engineer", "startDate": (TODAY - timedelta(days=days)).isoformat(), "current": True}


def _profile(*, skills=(), experience_days=None, education=()) -> CandidateProfile:
    return CandidateProfile.model_validate(
        {
            "user_id": 1,
            "skills": [{"name": s} for s in skills],
            "experiences": [] if experience_days is None else [_experience(experience_days)],
            "education": list(education),
        }
    )


def _job(**fields) -> JobPosting:
    values = {"id": 1, "title": "Engineer", "experience_level": ExperienceLevel.MID}
    values.update(fields)
    return JobPosting(**values)


def test_reference_candidate_scores_eighty() -> None:
    profile = _profile(
        skills=["JavaScript", "SQL"],
        experience_days=3 * 365,
        education=[{"degree": "Bachelor of Science", "fieldOfStudy": "Computer Science"}],
    )
    job = _job(required_skills=["JS", "Python"], required_qualifications=["Computer Science"])

    score = compute_match_score(profile, job, today=TODAY)

    assert score.skills_match == 50
    assert score.experience_match == 100
    assert score.education_match == 100
    assert score.overall == 80
    assert score.breakdown.matched_skills == ["JS"]
    assert score.breakdown.missing_skills == ["Python"]
    assert score.breakdown.experience_years == 3.0
    assert score.breakdown.experience_level_match is True
    assert score.breakdown.has_relevant_education is True


def test_experience_tier_boundary_at_five_years() -> None:
    job = _job(experience_level=ExperienceLevel.MID)

    just_under = compute_match_score(_profile(experience_days=1789), job, today=TODAY)
    assert just_under.breakdown.experience_years == 4.9
    assert just_under.experience_match == 100

    exactly_five = compute_match_score(_profile(experience_days=5 * 365), job, today=TODAY)
    assert exactly_five.experience_match == 95


@pytest.mark.parametrize(
    "years, required, expected",
    [
        (1, ExperienceLevel.ENTRY, 100),
        (1, ExperienceLevel.MID, 70),
        (1, ExperienceLevel.SENIOR, 50),
        (3, ExperienceLevel.ENTRY, 95),
        (7, ExperienceLevel.SENIOR, 100),
        (7, ExperienceLevel.ENTRY, 85),
        (12, ExperienceLevel.SENIOR, 95),
        (12, ExperienceLevel.MID, 85),
        (3, ExperienceLevel.EXECUTIVE, 50),
    ],
)
def test_experience_score_by_level_gap(years: int, required: ExperienceLevel, expected: int) -> None:
    score = compute_match_score(_profile(experience_days=years * 365), _job(experience_level=required), today=TODAY)
    assert score.experience_match == expected


def test_no_experience_entries_override() -> None:
    entry = compute_match_score(_profile(), _job(experience_level=ExperienceLevel.ENTRY), today=TODAY)
    mid = compute_match_score(_profile(), _job(experience_level=ExperienceLevel.MID), today=TODAY)
    assert entry.experience_match == 60
    assert mid.experience_match == 30


def test_past_roles_sum_and_missing_end_counts_to_today() -> None:
    profile = CandidateProfile.model_validate(
        {
            "experiences": [
                {"startDate": "2020-01-01", "endDate": "2021-01-01"},
                {"startDate": (TODAY - timedelta(days=365)).isoformat()},
            ]
        }
    )
    score = compute_match_score(profile, _job(), today=TODAY)
    assert score.breakdown.experience_years == 2.0
    assert score.experience_match == 100


@pytest.mark.parametrize("skills", [[], ["Python"], ["Cobol", "Fortran", "Lisp"]])
def test_no_required_skills_scores_full(skills) -> None:
    score = compute_match_score(_profile(skills=skills), _job(required_skills=[]), today=TODAY)
    assert score.skills_match == 100


def test_skill_containment_goes_both_ways() -> None:
    profile = _profile(skills=["React Native", "Postgres", "  "])
    job = _job(required_skills=["React", "PostgreSQL", "Go"])
    score = compute_match_score(profile, job, today=TODAY)
    assert score.breakdown.matched_skills == ["React", "PostgreSQL"]
    assert score.breakdown.missing_skills == ["Go"]
    assert score.skills_match == 67


@pytest.mark.parametrize(
    "education, qualifications, expected, relevant",
    [
        ([], ["Computer Science"], 60, False),
        ([{"degree": "Diploma"}], [], 100, False),
        ([{"degree": "PhD", "fieldOfStudy": "Physics"}], ["Law"], 90, False),
        ([{"degree": "Master of Arts", "fieldOfStudy": "History"}], ["Law"], 85, False),
        ([{"degree": "Bachelor of Science", "fieldOfStudy": "History"}], ["Law"], 75, False),
        ([{"degree": "Certificate", "fieldOfStudy": "Cooking"}], ["Law"], 70, False),
        ([{"degree": "B.Tech", "fieldOfStudy": "Mechanical Engineering"}], ["Engineering"], 100, True),
    ],
)
def test_education_tiers(education, qualifications, expected: int, relevant: bool) -> None:
    score = compute_match_score(
        _profile(education=education), _job(required_qualifications=qualifications), today=TODAY
    )
    assert score.education_match == expected
    assert score.breakdown.has_relevant_education is relevant


@pytest.mark.parametrize(
    "skills, experience_days, level, education",
    [
        ([], None, ExperienceLevel.EXECUTIVE, []),
        (["Go"], 200, ExperienceLevel.SENIOR, [{"degree": "Certificate"}]),
        (["Python", "SQL"], 4000, ExperienceLevel.ENTRY, [{"degree": "MBA"}]),
        (["Python"], 900, ExperienceLevel.MID, [{"degree": "BA", "fieldOfStudy": "Economics"}]),
    ],
)
def test_overall_is_weighted_sum_within_bounds(skills, experience_days, level, education) -> None:
    profile = _profile(skills=skills, experience_days=experience_days, education=education)
    job = _job(
        experience_level=level,
        required_skills=["Python", "SQL", "Docker"],
        required_qualifications=["Economics"],
    )
    score = compute_match_score(profile, job, today=TODAY)

    expected = round_half_up(0.4 * score.skills_match + 0.3 * score.experience_match + 0.3 * score.education_match)
    assert score.overall == expected
    assert 0 <= score.overall <= 100


def test_round_half_up() -> None:
    assert round_half_up(82.5) == 83
    assert round_half_up(0.5) == 1
    assert round_half_up(66.66) == 67
    assert round_half_up(66.4) == 66


def test_level_for_years() -> None:
    assert level_for_years(0) == ExperienceLevel.ENTRY
    assert level_for_years(1.99) == ExperienceLevel.ENTRY
    assert level_for_years(2) == ExperienceLevel.MID
    assert level_for_years(9.99) == ExperienceLevel.SENIOR
    assert level_for_years(10) == ExperienceLevel.EXECUTIVE


def test_json_encoded_skill_list_is_accepted() -> None:
    score = compute_match_score(_profile(skills=["Python"]), _job(required_skills='["Python"]'), today=TODAY)
    assert score.skills_match == 100


def test_malformed_stored_skills_raise() -> None:
    with pytest.raises(MalformedRecordError):
        compute_match_score(_profile(), _job(required_skills={"python": 1}), today=TODAY)
    with pytest.raises(MalformedRecordError):
        compute_match_score(_profile(), _job(required_qualifications="not json"), today=TODAY)


def test_score_one_captures_failure() -> None:
    outcome = score_one(_profile(), _job(required_skills=[1, 2]), today=TODAY)
    assert not outcome.ok
    assert "MalformedRecordError" in outcome.error
    assert outcome.score_or_zero() == zero_match_score()


def test_score_postings_isolates_bad_records() -> None:
    postings = [
        _job(id=1, required_skills=["Python"]),
        _job(id=2, required_skills=42),
        _job(id=3, required_skills=[]),
    ]
    outcomes = score_postings(_profile(skills=["python"]), postings, max_workers=2, today=TODAY)

    assert set(outcomes) == {1, 2, 3}
    assert outcomes[1].ok and outcomes[1].score.skills_match == 100
    assert not outcomes[2].ok
    assert outcomes[3].ok and outcomes[3].score.skills_match == 100


def test_score_postings_empty() -> None:
    assert score_postings(_profile(), [], max_workers=4, today=TODAY) == {}


def test_plain_names_still_contain_each_other_alongside_aliases() -> None:
    profile = _profile(skills=["HTML", "JavaScript"])
    job = _job(required_skills=["ML", "JS", "Rust"])
    score = compute_match_score(profile, job, today=TODAY)
    assert score.breakdown.matched_skills == ["ML", "JS"]
    assert score.breakdown.missing_skills == ["Rust"]
