# __init__.py
from jobfinder.models.application import Application
from jobfinder.models.company import Company
from jobfinder.models.enums import EmploymentType, ExperienceLevel, LocationType, SortMode
from jobfinder.models.jobs import Job
from jobfinder.models.profile import UserProfileModel
from jobfinder.models.user import User

__all__ = [
	"Application",
	"Company",
	"EmploymentType",
	"ExperienceLevel",
	"Job",
	"LocationType",
	"SortMode",
	"User",
	"UserProfileModel",
]
