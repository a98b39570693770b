from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Sequence

from pydantic import ValidationError
from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from jobfinder.config import settings
from jobfinder.models.application import Application
from jobfinder.models.enums import EmploymentType, ExperienceLevel, LocationType, SortMode
from jobfinder.models.jobs import Job
from jobfinder.models.profile import UserProfileModel
from jobfinder.models.user import User
from jobfinder.schemas.profile import CandidateProfile
from jobfinder.services.match_score_service import (
    MatchScore,
    ScoreOutcome,
    compute_match_score,
    score_postings,
)
from jobfinder.services.postings import JobPosting, MalformedRecordError
from jobfinder.services.query_parser import ParsedQuery, merge_filters, parse_search_query
from jobfinder.services.ranking import RankedResult, rank_postings


logger = logging.getLogger(__name__)


class JobNotFoundError(LookupError):
    pass


class CandidateNotFoundError(LookupError):
    pass


class MatchAccessDeniedError(PermissionError):
    pass


@dataclass(frozen=True)
class DiscoveryRequest:
    search: str | None = None
    location: str | None = None
    location_type: LocationType | None = None
    employment_type: EmploymentType | None = None
    experience_level: ExperienceLevel | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    sort_by: SortMode = SortMode.RECENT
    page: int = 1
    limit: int = 20


@dataclass
class DiscoveryPage:
    jobs: list[Job]
    total: int
    page: int
    limit: int
    parsed_query: ParsedQuery
    match_scores: dict[int, MatchScore] = field(default_factory=dict)
    ranked: list[RankedResult] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def start_of_day(today: date) -> datetime:
    return datetime.combine(today, time.min)


def eligible_jobs_query(db: Session, *, today: date, viewer_id: int | None = None) -> Query:
    """Active postings whose deadline has not passed; a viewer never sees their own postings."""
    query = db.query(Job).filter(
        Job.is_active.is_(True),
        or_(Job.application_deadline.is_(None), Job.application_deadline >= start_of_day(today)),
    )
    if viewer_id is not None:
        query = query.filter(or_(Job.user_id.is_(None), Job.user_id != viewer_id))
    return query


def apply_filters(query: Query, filters: ParsedQuery) -> Query:
    if filters.location:
        query = query.filter(func.lower(Job.location).contains(filters.location.lower(), autoescape=True))
    if filters.employment_type is not None:
        query = query.filter(Job.employment_type == filters.employment_type)
    if filters.experience_level is not None:
        query = query.filter(Job.experience_level == filters.experience_level)
    if filters.location_type is not None:
        query = query.filter(Job.location_type == filters.location_type)
    # Overlapping ranges: the posting's upper bound must reach the wanted minimum and vice versa.
    if filters.salary_min is not None:
        query = query.filter(Job.salary_max >= filters.salary_min)
    if filters.salary_max is not None:
        query = query.filter(Job.salary_min <= filters.salary_max)
    return query


def _recent_order(query: Query) -> Query:
    return query.order_by(Job.created_at.desc(), Job.id.desc())


def load_candidate_profile(db: Session, user_id: int) -> CandidateProfile:
    record = db.query(UserProfileModel).filter(UserProfileModel.user_id == user_id).first()
    if record is None or not record.profile_data:
        return CandidateProfile(user_id=user_id)
    try:
        return CandidateProfile.model_validate({**record.profile_data, "user_id": user_id})
    except (ValidationError, TypeError) as exc:
        raise MalformedRecordError(f"profile for user {user_id} could not be read") from exc


def _score_for_viewer(
    db: Session, viewer: User, postings: Sequence[JobPosting], *, today: date
) -> dict[int, ScoreOutcome]:
    try:
        profile = load_candidate_profile(db, viewer.id)
    except MalformedRecordError as exc:
        logger.warning("match scoring skipped user_id=%s: %s", viewer.id, exc)
        return {p.id: ScoreOutcome.failure(p.id, str(exc)) for p in postings}
    return score_postings(profile, postings, max_workers=settings.scoring_max_workers, today=today)


def _page_slice(items: list, page: int, limit: int) -> list:
    start = (page - 1) * limit
    return items[start : start + limit]


def discover_jobs(
    db: Session,
    request: DiscoveryRequest,
    *,
    viewer: User | None = None,
    today: date | None = None,
) -> DiscoveryPage:
    """Return one ordered page of postings for a search request.

    Ordering, first applicable rule wins:
    1. free text + signed-in viewer: text search selects, fit score orders (relevance rank breaks ties)
    2. free text, anonymous: relevance order
    3. no free text, sort=match, signed-in viewer: fit score over every eligible posting
    4. otherwise newest first, or highest salary_max first for sort=salary
    """

    today = today or _utc_today()
    parsed = parse_search_query(request.search)
    filters = merge_filters(
        parsed,
        location=request.location,
        location_type=request.location_type,
        employment_type=request.employment_type,
        experience_level=request.experience_level,
        salary_min=request.salary_min,
        salary_max=request.salary_max,
    )
    viewer_id = viewer.id if viewer is not None else None
    query = apply_filters(eligible_jobs_query(db, today=today, viewer_id=viewer_id), filters)

    if filters.cleaned_query:
        rows = _recent_order(query).all()
        by_id = {job.id: job for job in rows}
        postings = {job.id: JobPosting.from_orm(job) for job in rows}
        ranked = rank_postings(filters.cleaned_query, list(postings.values()))

        scores: dict[int, MatchScore] = {}
        if viewer is not None:
            outcomes = _score_for_viewer(db, viewer, [postings[r.job_id] for r in ranked], today=today)
            scores = {job_id: outcome.score_or_zero() for job_id, outcome in outcomes.items()}
            ranked = sorted(
                (
                    RankedResult(r.job_id, r.rank, r.tier, r.relevance, scores[r.job_id].overall)
                    for r in ranked
                ),
                key=lambda r: (-(r.match_score or 0), r.rank),
            )

        page_results = _page_slice(ranked, request.page, request.limit)
        logger.info(
            "discover search=%r tier=%s total=%d scored=%s",
            filters.cleaned_query,
            ranked[0].tier if ranked else None,
            len(ranked),
            viewer is not None,
        )
        return DiscoveryPage(
            jobs=[by_id[r.job_id] for r in page_results],
            total=len(ranked),
            page=request.page,
            limit=request.limit,
            parsed_query=parsed,
            match_scores={r.job_id: scores[r.job_id] for r in page_results if r.job_id in scores},
            ranked=page_results,
        )

    if request.sort_by is SortMode.MATCH and viewer is not None:
        # The sort key is computed here, so pagination happens after sorting in memory.
        rows = _recent_order(query).all()
        outcomes = _score_for_viewer(db, viewer, [JobPosting.from_orm(job) for job in rows], today=today)
        scores = {job_id: outcome.score_or_zero() for job_id, outcome in outcomes.items()}
        ordered = sorted(enumerate(rows), key=lambda item: (-scores[item[1].id].overall, item[0]))
        page_rows = _page_slice([job for _, job in ordered], request.page, request.limit)
        return DiscoveryPage(
            jobs=page_rows,
            total=len(rows),
            page=request.page,
            limit=request.limit,
            parsed_query=parsed,
            match_scores={job.id: scores[job.id] for job in page_rows},
        )

    total = query.count()
    if request.sort_by is SortMode.SALARY:
        # NULL salaries last on every backend.
        query = query.order_by(Job.salary_max.is_(None), Job.salary_max.desc(), Job.id.desc())
    else:
        query = _recent_order(query)
    rows = query.offset((request.page - 1) * request.limit).limit(request.limit).all()
    return DiscoveryPage(jobs=rows, total=total, page=request.page, limit=request.limit, parsed_query=parsed)


def get_match_for_job(
    db: Session,
    job_id: int,
    viewer: User,
    *,
    candidate_id: int | None = None,
    today: date | None = None,
) -> MatchScore:
    """Fit score of the viewer, or of an applicant when the viewer owns the job."""
    job = db.get(Job, job_id)
    if job is None:
        raise JobNotFoundError(f"Job {job_id} not found")

    target_id = viewer.id
    if candidate_id is not None and candidate_id != viewer.id:
        if job.user_id != viewer.id:
            raise MatchAccessDeniedError("Only the job owner can view a candidate's match score")
        if db.get(User, candidate_id) is None:
            raise CandidateNotFoundError(f"Candidate {candidate_id} not found")
        applied = (
            db.query(Application)
            .filter(Application.job_id == job_id, Application.applicant_id == candidate_id)
            .first()
        )
        if applied is None:
            raise MatchAccessDeniedError("Candidate has not applied to this job")
        target_id = candidate_id

    profile = load_candidate_profile(db, target_id)
    return compute_match_score(profile, JobPosting.from_orm(job), today=today or _utc_today())


def get_batch_matches(
    db: Session,
    job_ids: Sequence[int],
    viewer: User,
    *,
    today: date | None = None,
) -> dict[int, ScoreOutcome]:
    """Score many jobs for the viewer; unknown ids come back as failed outcomes."""
    unique_ids = list(dict.fromkeys(job_ids))
    rows = db.query(Job).filter(Job.id.in_(unique_ids)).all() if unique_ids else []
    postings = [JobPosting.from_orm(job) for job in rows]

    outcomes = _score_for_viewer(db, viewer, postings, today=today or _utc_today())
    for job_id in unique_ids:
        if job_id not in outcomes:
            logger.warning("batch match job_id=%s not found", job_id)
            outcomes[job_id] = ScoreOutcome.failure(job_id, "job not found")
    return {job_id: outcomes[job_id] for job_id in unique_ids}
