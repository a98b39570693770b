from jobfinder.schemas.jobs import JobListResponse, JobRead, Pagination, ParsedQueryOut
from jobfinder.schemas.match import BatchMatchRequest, BatchMatchResponse, MatchBreakdownOut, MatchScoreOut
from jobfinder.schemas.profile import CandidateProfile, EducationEntry, ExperienceEntry, SkillEntry
from jobfinder.schemas.user import TokenData

__all__ = [
	"BatchMatchRequest",
	"BatchMatchResponse",
	"CandidateProfile",
	"EducationEntry",
	"ExperienceEntry",
	"JobListResponse",
	"JobRead",
	"MatchBreakdownOut",
	"MatchScoreOut",
	"Pagination",
	"ParsedQueryOut",
	"SkillEntry",
	"TokenData",
]
