from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Sequence

from jobfinder.models.enums import ExperienceLevel
from jobfinder.schemas.profile import CandidateProfile, EducationEntry, ExperienceEntry, SkillEntry
from jobfinder.services.postings import JobPosting, coerce_string_list
from jobfinder.services.search_keywords import (
    BACHELOR_MARKERS,
    DOCTORATE_MARKERS,
    MASTER_MARKERS,
    SKILL_ALIASES,
)


logger = logging.getLogger(__name__)


SKILLS_WEIGHT = 0.4
EXPERIENCE_WEIGHT = 0.3
EDUCATION_WEIGHT = 0.3

DAYS_PER_YEAR = 365

# Upper bounds (exclusive) of total years for each level; anything beyond is EXECUTIVE.
_LEVEL_THRESHOLDS = (
    (2, ExperienceLevel.ENTRY),
    (5, ExperienceLevel.MID),
    (10, ExperienceLevel.SENIOR),
)

EXACT_LEVEL_SCORE = 100
ONE_ABOVE_SCORE = 95
ONE_BELOW_SCORE = 70
FAR_ABOVE_SCORE = 85
FAR_BELOW_SCORE = 50
NO_EXPERIENCE_ENTRY_SCORE = 60
NO_EXPERIENCE_SCORE = 30

NO_EDUCATION_SCORE = 60
RELEVANT_EDUCATION_SCORE = 100
DOCTORATE_SCORE = 90
MASTER_SCORE = 85
BACHELOR_SCORE = 75
OTHER_EDUCATION_SCORE = 70


@dataclass(frozen=True)
class MatchBreakdown:
    matched_skills: list[str] = field(default_factory=list)
    missing_skills: list[str] = field(default_factory=list)
    experience_years: float = 0.0
    experience_level_match: bool = False
    has_relevant_education: bool = False


@dataclass(frozen=True)
class MatchScore:
    overall: int
    skills_match: int
    experience_match: int
    education_match: int
    breakdown: MatchBreakdown

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreOutcome:
    """Result of scoring one posting: either a score or the reason it failed."""

    job_id: int
    score: MatchScore | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.score is not None

    @classmethod
    def success(cls, job_id: int, score: MatchScore) -> "ScoreOutcome":
        return cls(job_id=job_id, score=score)

    @classmethod
    def failure(cls, job_id: int, error: str) -> "ScoreOutcome":
        return cls(job_id=job_id, error=error)

    def score_or_zero(self) -> MatchScore:
        return self.score if self.score is not None else zero_match_score()


def zero_match_score() -> MatchScore:
    return MatchScore(overall=0, skills_match=0, experience_match=0, education_match=0, breakdown=MatchBreakdown())


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_skill_name(value: str) -> str:
    return " ".join(value.strip().lower().split())


def skill_forms(value: str) -> set[str]:
    """The normalised name plus its expansion, if it is a known abbreviation."""
    normalized = normalize_skill_name(value)
    if not normalized:
        return set()
    return {normalized, SKILL_ALIASES.get(normalized, normalized)}


def _contains_either_way(first: str, second: str) -> bool:
    return first in second or second in first


@dataclass(frozen=True)
class _SkillsResult:
    score: int
    matched: list[str]
    missing: list[str]


def score_skills(profile_skills: Sequence[SkillEntry], required_skills: Sequence[str]) -> _SkillsResult:
    if not required_skills:
        return _SkillsResult(score=100, matched=[], missing=[])

    candidate = [form for s in profile_skills if s.name for form in skill_forms(s.name)]
    matched: list[str] = []
    missing: list[str] = []
    for original in required_skills:
        required = skill_forms(original)
        if any(_contains_either_way(form, skill) for form in required for skill in candidate):
            matched.append(original)
        else:
            missing.append(original)

    score = round_half_up(100 * len(matched) / len(required_skills))
    return _SkillsResult(score=score, matched=matched, missing=missing)


def total_experience_years(experiences: Sequence[ExperienceEntry], today: date) -> float:
    total_days = 0
    for entry in experiences:
        end = today if entry.current or entry.end_date is None else entry.end_date
        total_days += (end - entry.start_date).days
    return total_days / DAYS_PER_YEAR


def level_for_years(years: float) -> ExperienceLevel:
    for upper, level in _LEVEL_THRESHOLDS:
        if years < upper:
            return level
    return ExperienceLevel.EXECUTIVE


@dataclass(frozen=True)
class _ExperienceResult:
    score: int
    years: float
    level_match: bool


def score_experience(
    experiences: Sequence[ExperienceEntry], required_level: ExperienceLevel, today: date
) -> _ExperienceResult:
    years = total_experience_years(experiences, today)
    candidate_level = level_for_years(years)
    gap = candidate_level.rank - required_level.rank

    if gap == 0:
        score = EXACT_LEVEL_SCORE
    elif gap == 1:
        score = ONE_ABOVE_SCORE
    elif gap == -1:
        score = ONE_BELOW_SCORE
    elif gap > 1:
        score = FAR_ABOVE_SCORE
    else:
        score = FAR_BELOW_SCORE

    if not experiences:
        score = NO_EXPERIENCE_ENTRY_SCORE if required_level is ExperienceLevel.ENTRY else NO_EXPERIENCE_SCORE

    return _ExperienceResult(score=score, years=round(years, 1), level_match=gap == 0)


@dataclass(frozen=True)
class _EducationResult:
    score: int
    has_relevant: bool


def _degree_tier_score(education: Sequence[EducationEntry]) -> int:
    degrees = [e.degree.lower() for e in education]
    if any(marker in degree for degree in degrees for marker in DOCTORATE_MARKERS):
        return DOCTORATE_SCORE
    if any(marker in degree for degree in degrees for marker in MASTER_MARKERS):
        return MASTER_SCORE
    if any(marker in degree for degree in degrees for marker in BACHELOR_MARKERS):
        return BACHELOR_SCORE
    return OTHER_EDUCATION_SCORE


def score_education(education: Sequence[EducationEntry], qualifications: Sequence[str]) -> _EducationResult:
    if not qualifications:
        return _EducationResult(score=100, has_relevant=False)
    if not education:
        return _EducationResult(score=NO_EDUCATION_SCORE, has_relevant=False)

    required = [q.strip().lower() for q in qualifications if q and q.strip()]
    for qualification in required:
        for entry in education:
            candidates = (entry.degree.strip().lower(), entry.field_of_study.strip().lower())
            if any(value and _contains_either_way(qualification, value) for value in candidates):
                return _EducationResult(score=RELEVANT_EDUCATION_SCORE, has_relevant=True)

    return _EducationResult(score=_degree_tier_score(education), has_relevant=False)


def compute_match_score(profile: CandidateProfile, job: JobPosting, *, today: date | None = None) -> MatchScore:
    """Score how well ``profile`` fits ``job`` on a 0-100 scale.

    Skills count for 40%, experience level for 30% and education for 30%.
    Raises ``MalformedRecordError`` when the job's stored skill or
    qualification list cannot be read.
    """

    today = today or date.today()
    required_skills = coerce_string_list(job.required_skills, field_name="required_skills")
    qualifications = coerce_string_list(job.required_qualifications, field_name="required_qualifications")

    skills = score_skills(profile.skills, required_skills)
    experience = score_experience(profile.experiences, ExperienceLevel(job.experience_level), today)
    education = score_education(profile.education, qualifications)

    overall = round_half_up(
        skills.score * SKILLS_WEIGHT + experience.score * EXPERIENCE_WEIGHT + education.score * EDUCATION_WEIGHT
    )
    return MatchScore(
        overall=overall,
        skills_match=skills.score,
        experience_match=experience.score,
        education_match=education.score,
        breakdown=MatchBreakdown(
            matched_skills=skills.matched,
            missing_skills=skills.missing,
            experience_years=experience.years,
            experience_level_match=experience.level_match,
            has_relevant_education=education.has_relevant,
        ),
    )


def score_one(profile: CandidateProfile, job: JobPosting, *, today: date | None = None) -> ScoreOutcome:
    try:
        return ScoreOutcome.success(job.id, compute_match_score(profile, job, today=today))
    except Exception as exc:  # noqa: BLE001 - one bad record must not fail the page
        logger.warning("match score failed job_id=%s error=%s: %s", job.id, type(exc).__name__, exc)
        return ScoreOutcome.failure(job.id, f"{type(exc).__name__}: {exc}")


def score_postings(
    profile: CandidateProfile,
    postings: Sequence[JobPosting],
    *,
    max_workers: int,
    today: date | None = None,
) -> dict[int, ScoreOutcome]:
    """Score many postings against one profile with a bounded thread pool."""
    if not postings:
        return {}

    today = today or date.today()
    workers = max(1, min(max_workers, len(postings)))
    outcomes: dict[int, ScoreOutcome] = {}
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(score_one, profile, job, today=today): job for job in postings}
        for future in as_completed(futures):
            outcome = future.result()
            outcomes[outcome.job_id] = outcome
    return outcomes
