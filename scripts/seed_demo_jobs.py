"""Seed a handful of companies, postings and one candidate profile for local demos.

Usage:
    python scripts/seed_demo_jobs.py --i-understand [--reset]
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path


def _bootstrap_import_path() -> None:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_bootstrap_import_path()

from jobfinder.database import Base, SessionLocal, engine  # noqa: E402
from jobfinder.models import (  # noqa: E402
    Company,
    EmploymentType,
    ExperienceLevel,
    Job,
    LocationType,
    User,
    UserProfileModel,
)
from jobfinder.utils.jwt_handler import create_access_token  # noqa: E402


DEMO_EMPLOYER_EMAIL = "employer@demo.local"
DEMO_CANDIDATE_EMAIL = "candidate@demo.local"

COMPANIES = [
    ("Acme Analytics", "Austin, TX", "Software"),
    ("Northwind Health", "Bangalore, India", "Healthcare"),
    ("Globex", "Berlin, Germany", "Logistics"),
]

JOBS = [
    dict(
        title="Senior Python Developer",
        description="Build data APIs with FastAPI and PostgreSQL.",
        required_skills=["Python", "FastAPI", "PostgreSQL"],
        required_qualifications=["Computer Science"],
        location="Austin, TX",
        location_type=LocationType.REMOTE,
        employment_type=EmploymentType.FULL_TIME,
        experience_level=ExperienceLevel.SENIOR,
        salary_min=120000,
        salary_max=160000,
        company=0,
    ),
    dict(
        title="Junior Frontend Engineer",
        description="React and TypeScript work on a design system.",
        required_skills=["JavaScript", "React", "TypeScript"],
        required_qualifications=[],
        location="Berlin, Germany",
        location_type=LocationType.HYBRID,
        employment_type=EmploymentType.FULL_TIME,
        experience_level=ExperienceLevel.ENTRY,
        salary_min=45000,
        salary_max=60000,
        company=2,
    ),
    dict(
        title="Data Analyst Intern",
        description="SQL reporting and dashboards for clinical operations.",
        required_skills=["SQL", "Excel"],
        required_qualifications=["Statistics", "Mathematics"],
        location="Bangalore, India",
        location_type=LocationType.ONSITE,
        employment_type=EmploymentType.INTERNSHIP,
        experience_level=ExperienceLevel.ENTRY,
        salary_min=300000,
        salary_max=500000,
        company=1,
    ),
    dict(
        title="Machine Learning Engineer",
        description="Train and ship ranking models in Python.",
        required_skills=["Python", "Machine Learning", "Kubernetes"],
        required_qualifications=["Master of Computer Science"],
        location="Austin, TX",
        location_type=LocationType.ONSITE,
        employment_type=EmploymentType.CONTRACT,
        experience_level=ExperienceLevel.MID,
        salary_min=None,
        salary_max=None,
        company=0,
    ),
]

CANDIDATE_PROFILE = {
    "skills": [{"name": "Python"}, {"name": "JS"}, {"name": "SQL"}],
    "experiences": [
        {"title": "Developer", "company": "Initech", "startDate": "2019-01-01", "endDate": "2022-06-30"},
        {"title": "Engineer", "company": "Hooli", "startDate": "2022-07-01", "current": True},
    ],
    "education": [{"degree": "Bachelor of Science", "fieldOfStudy": "Computer Science"}],
}


def _get_or_create_user(db, email: str, name: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        user = User(email=email, name=name)
        db.add(user)
        db.flush()
    return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed demo job postings (EXPLICIT action).")
    parser.add_argument("--i-understand", action="store_true", help="Required safety flag.")
    parser.add_argument("--reset", action="store_true", help="Delete existing demo postings first.")
    args = parser.parse_args(argv)

    if not args.i_understand:
        print("Refusing to run without --i-understand (safety).")
        return 2

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        employer = _get_or_create_user(db, DEMO_EMPLOYER_EMAIL, "Demo Employer")
        candidate = _get_or_create_user(db, DEMO_CANDIDATE_EMAIL, "Demo Candidate")

        if args.reset:
            deleted = db.query(Job).filter(Job.user_id == employer.id).delete(synchronize_session=False)
            print("deleted postings:", deleted)

        companies = []
        for name, location, industry in COMPANIES:
            company = db.query(Company).filter(Company.name == name).first()
            if company is None:
                company = Company(name=name, location=location, industry=industry)
                db.add(company)
                db.flush()
            companies.append(company)

        deadline = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(days=30)
        for row in JOBS:
            fields = dict(row)
            company = companies[fields.pop("company")]
            db.add(Job(user_id=employer.id, company_id=company.id, application_deadline=deadline, **fields))

        profile = db.query(UserProfileModel).filter(UserProfileModel.user_id == candidate.id).first()
        if profile is None:
            db.add(UserProfileModel(user_id=candidate.id, profile_data=CANDIDATE_PROFILE))
        else:
            profile.profile_data = CANDIDATE_PROFILE

        db.commit()
        print("seeded postings:", len(JOBS))
        print("candidate token:", create_access_token({"sub": str(candidate.id)}))
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
