from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from jobfinder.models.enums import SortMode
from jobfinder.services.discovery_service import (
    DiscoveryPage,
    DiscoveryRequest,
    discover_jobs,
    get_batch_matches,
    load_candidate_profile,
)
from jobfinder.services.postings import MalformedRecordError
from jobfinder.services.query_parser import ParsedQuery


TODAY = date(2030, 6, 15)


def test_deadline_compared_against_start_of_day(db, make_job) -> None:
    midnight = datetime(2030, 6, 15)
    late_today = make_job("Closes tonight", application_deadline=midnight + timedelta(hours=23))
    at_midnight = make_job("Closes at midnight", application_deadline=midnight)
    make_job("Closed yesterday", application_deadline=midnight - timedelta(minutes=1))

    page = discover_jobs(db, DiscoveryRequest(), today=TODAY)
    assert [job.id for job in page.jobs] == [at_midnight.id, late_today.id]


def test_total_pages_rounds_up() -> None:
    page = DiscoveryPage(jobs=[], total=41, page=1, limit=20, parsed_query=ParsedQuery())
    assert page.total_pages == 3
    assert DiscoveryPage(jobs=[], total=0, page=1, limit=20, parsed_query=ParsedQuery()).total_pages == 0


def test_search_page_reports_ranking_tier(db, make_job) -> None:
    make_job("Django Developer")
    make_job("Spring Developer")

    page = discover_jobs(db, DiscoveryRequest(search="django spring"), today=TODAY)
    assert page.total == 2
    assert {r.tier for r in page.ranked} == {"any_term"}
    assert page.match_scores == {}


def test_anonymous_match_sort_is_recent(db, make_job) -> None:
    older = make_job("Older")
    newer = make_job("Newer")
    page = discover_jobs(db, DiscoveryRequest(sort_by=SortMode.MATCH), today=TODAY)
    assert [job.id for job in page.jobs] == [newer.id, older.id]
    assert page.match_scores == {}


def test_missing_profile_reads_as_empty(db, make_user) -> None:
    user = make_user("new@example.com")
    profile = load_candidate_profile(db, user.id)
    assert profile.skills == [] and profile.experiences == [] and profile.education == []


def test_unreadable_profile_raises(db, make_user, set_profile) -> None:
    user = make_user("broken@example.com")
    set_profile(user, {"experiences": [{"startDate": "someday"}]})
    with pytest.raises(MalformedRecordError):
        load_candidate_profile(db, user.id)


def test_unreadable_profile_scores_zero_in_listing(db, make_user, make_job, set_profile) -> None:
    user = make_user("broken@example.com")
    set_profile(user, {"skills": "python"})
    job = make_job("Analyst")

    page = discover_jobs(db, DiscoveryRequest(sort_by=SortMode.MATCH), viewer=user, today=TODAY)
    assert [j.id for j in page.jobs] == [job.id]
    assert page.match_scores[job.id].overall == 0


def test_batch_collapses_duplicates_and_keeps_request_order(db, make_user, make_job) -> None:
    user = make_user("seeker@example.com")
    first = make_job("First")
    second = make_job("Second")

    outcomes = get_batch_matches(db, [second.id, first.id, second.id, 777], user, today=TODAY)
    assert list(outcomes) == [second.id, first.id, 777]
    assert outcomes[second.id].ok and outcomes[first.id].ok
    assert not outcomes[777].ok
    assert outcomes[777].error == "job not found"
