from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from jobfinder.config import settings
from jobfinder.database import get_db
from jobfinder.models.enums import EmploymentType, ExperienceLevel, LocationType, SortMode
from jobfinder.models.jobs import Job
from jobfinder.models.user import User
from jobfinder.routers.dependencies import get_current_user, get_optional_user
from jobfinder.schemas.jobs import JobListResponse, JobRead, Pagination, ParsedQueryOut
from jobfinder.schemas.match import BatchMatchRequest, BatchMatchResponse, MatchScoreOut
from jobfinder.services.discovery_service import (
    CandidateNotFoundError,
    DiscoveryRequest,
    JobNotFoundError,
    MatchAccessDeniedError,
    discover_jobs,
    get_batch_matches,
    get_match_for_job,
)
from jobfinder.services.match_score_service import MatchScore
from jobfinder.services.postings import MalformedRecordError, lenient_string_list
from jobfinder.services.query_parser import ParsedQuery


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


def to_match_out(score: MatchScore) -> MatchScoreOut:
    return MatchScoreOut.model_validate(score.to_dict())


def _job_read(job: Job, score: MatchScore | None = None) -> JobRead:
    # A single unreadable skills column must not break the listing.
    return JobRead(
        id=job.id,
        title=job.title,
        description=job.description,
        company_name=job.company_name,
        required_skills=lenient_string_list(job.required_skills),
        required_qualifications=lenient_string_list(job.required_qualifications),
        location=job.location,
        location_type=job.location_type,
        employment_type=job.employment_type,
        experience_level=job.experience_level,
        salary_min=job.salary_min,
        salary_max=job.salary_max,
        application_deadline=job.application_deadline,
        created_at=job.created_at,
        match_score=to_match_out(score) if score is not None else None,
    )


def _parsed_query_out(parsed: ParsedQuery) -> ParsedQueryOut:
    return ParsedQueryOut(
        cleaned_query=parsed.cleaned_query,
        location=parsed.location,
        location_type=parsed.location_type,
        employment_type=parsed.employment_type,
        experience_level=parsed.experience_level,
        salary_min=parsed.salary_min,
        salary_max=parsed.salary_max,
    )


@router.get("", response_model=JobListResponse, summary="Search and list open job postings")
def list_jobs(
    search: str | None = Query(default=None, max_length=500),
    location: str | None = Query(default=None),
    employment_type: EmploymentType | None = Query(default=None, alias="employmentType"),
    experience_level: ExperienceLevel | None = Query(default=None, alias="experienceLevel"),
    location_type: LocationType | None = Query(default=None, alias="locationType"),
    salary_min: int | None = Query(default=None, ge=0, alias="salaryMin"),
    salary_max: int | None = Query(default=None, ge=0, alias="salaryMax"),
    sort_by: SortMode = Query(default=SortMode.RECENT, alias="sortBy"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_limit, ge=1, le=settings.max_page_limit),
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> JobListResponse:
    request = DiscoveryRequest(
        search=search,
        location=location,
        location_type=location_type,
        employment_type=employment_type,
        experience_level=experience_level,
        salary_min=salary_min,
        salary_max=salary_max,
        sort_by=sort_by,
        page=page,
        limit=limit,
    )
    result = discover_jobs(db, request, viewer=current_user)
    parsed = result.parsed_query

    return JobListResponse(
        jobs=[_job_read(job, result.match_scores.get(job.id)) for job in result.jobs],
        pagination=Pagination(
            total=result.total,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
        ),
        parsed_query=_parsed_query_out(parsed) if parsed.cleaned_query or parsed.has_filters() else None,
    )


@router.post("/match/batch", response_model=BatchMatchResponse, summary="Fit scores for several jobs")
def batch_match(
    payload: BatchMatchRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BatchMatchResponse:
    if len(payload.job_ids) > settings.batch_max_jobs:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"At most {settings.batch_max_jobs} job ids per request",
        )

    outcomes = get_batch_matches(db, payload.job_ids, current_user)
    failed = [job_id for job_id, outcome in outcomes.items() if not outcome.ok]
    if failed:
        logger.info("batch match user_id=%s failed_job_ids=%s", current_user.id, failed)
    return BatchMatchResponse(
        matches={str(job_id): to_match_out(outcome.score_or_zero()) for job_id, outcome in outcomes.items()}
    )


@router.get("/{job_id}/match", response_model=MatchScoreOut, summary="Fit score for one job")
def job_match(
    job_id: int,
    candidate_id: int | None = Query(default=None, alias="candidateId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MatchScoreOut:
    try:
        score = get_match_for_job(db, job_id, current_user, candidate_id=candidate_id)
    except (JobNotFoundError, CandidateNotFoundError) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except MatchAccessDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except MalformedRecordError as exc:
        logger.warning("match score unreadable job_id=%s: %s", job_id, exc)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return to_match_out(score)
