from __future__ import annotations

from jobfinder.services.postings import JobPosting
from jobfinder.services.ranking import (
    TIER_ALL_TERMS,
    TIER_ANY_TERM,
    TIER_SUBSTRING,
    rank,
    rank_postings,
    tokenize_text,
)


def _corpus() -> list[JobPosting]:
    return [
        JobPosting(
            id=1,
            title="Python Developer",
            description="Build web services.",
            company_name="Acme",
            required_skills=["Python", "Django"],
        ),
        JobPosting(
            id=2,
            title="Java Developer",
            description="Enterprise backend work.",
            company_name="Globex",
            required_skills=["Java", "Spring"],
        ),
        JobPosting(
            id=3,
            title="Data Engineer",
            description="Maintain python pipelines.",
            company_name="Initech",
            required_skills=["SQL", "Airflow"],
        ),
        JobPosting(
            id=4,
            title="Frontend Engineer",
            description="Design system work.",
            company_name="Hooli",
            required_skills=["JavaScript", "React"],
        ),
    ]


def test_tokenize_keeps_language_symbols() -> None:
    assert tokenize_text("C++ and C# dev.") == ["c++", "and", "c#", "dev"]
    assert tokenize_text(None) == []


def test_empty_query_returns_nothing() -> None:
    assert rank("", _corpus()) == []
    assert rank("   ", _corpus()) == []


def test_all_terms_tier_requires_every_term() -> None:
    results = rank_postings("python django", _corpus())
    assert [r.job_id for r in results] == [1]
    assert results[0].tier == TIER_ALL_TERMS


def test_terms_match_as_prefixes() -> None:
    results = rank_postings("pyth", _corpus())
    assert {r.job_id for r in results} == {1, 3}
    assert all(r.tier == TIER_ALL_TERMS for r in results)


def test_any_term_fallback_when_conjunction_is_empty() -> None:
    results = rank_postings("django spring", _corpus())
    assert {r.job_id for r in results} == {1, 2}
    assert all(r.tier == TIER_ANY_TERM for r in results)


def test_substring_fallback_when_no_term_prefixes() -> None:
    results = rank_postings("script", _corpus())
    assert [r.job_id for r in results] == [4]
    assert results[0].tier == TIER_SUBSTRING


def test_no_match_anywhere_is_empty() -> None:
    assert rank("haskell", _corpus()) == []


def test_title_hit_outranks_description_hit() -> None:
    results = rank_postings("python", _corpus())
    assert [r.job_id for r in results] == [1, 3]
    assert results[0].relevance > results[1].relevance
    assert [r.rank for r in results] == [1, 2]


def test_equal_relevance_keeps_corpus_order() -> None:
    twins = [
        JobPosting(id=10, title="Golang Engineer"),
        JobPosting(id=11, title="Golang Engineer"),
        JobPosting(id=12, title="Golang Engineer"),
    ]
    assert rank("golang", twins) == [10, 11, 12]


def test_malformed_skills_do_not_break_ranking() -> None:
    corpus = [
        JobPosting(id=1, title="Rust Engineer", required_skills={"not": "a list"}),
        JobPosting(id=2, title="Rust Developer", required_skills='["Rust", "Tokio"]'),
    ]
    assert rank("tokio", corpus) == [2]
    assert set(rank("rust", corpus)) == {1, 2}
