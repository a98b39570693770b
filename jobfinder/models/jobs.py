# jobs.py
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from jobfinder.database import Base
from jobfinder.models.enums import EmploymentType, ExperienceLevel, LocationType


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(255), index=True, nullable=False)
    description = Column(Text, nullable=False)
    # JSON lists of strings; older rows may hold a JSON-encoded string instead.
    required_skills = Column(JSON, nullable=True)
    required_qualifications = Column(JSON, nullable=True)
    location = Column(String(255), nullable=True)
    location_type = Column(Enum(LocationType), nullable=False, default=LocationType.ONSITE)
    employment_type = Column(Enum(EmploymentType), nullable=False, default=EmploymentType.FULL_TIME)
    experience_level = Column(Enum(ExperienceLevel), nullable=False, default=ExperienceLevel.MID)
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    application_deadline = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)

    company = relationship("Company", lazy="joined")

    @property
    def company_name(self) -> str | None:
        return self.company.name if self.company is not None else None
