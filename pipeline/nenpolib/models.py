"""Domain records shared by the fetch engine and report assembly."""

# Standard Library
import dataclasses
import json
from datetime import date
from datetime import datetime
from datetime import timezone


#============================================
def to_utc(value: datetime) -> datetime:
	"""
	Normalize datetime to timezone-aware UTC.
	"""
	if value.tzinfo is None:
		return value.replace(tzinfo=timezone.utc)
	return value.astimezone(timezone.utc)


#============================================
def parse_iso_datetime(text: str) -> datetime:
	"""
	Parse ISO-8601 timestamp text (Z suffix allowed) into UTC.
	"""
	return to_utc(datetime.fromisoformat(str(text).replace("Z", "+00:00")))


#============================================
@dataclasses.dataclass(frozen=True)
class Commit:
	"""
	One commit returned by the commit history query.
	"""

	sha: str
	message: str
	author: str
	committed_at: datetime
	repository: str

	#============================================
	def to_dict(self) -> dict:
		return {
			"sha": self.sha,
			"message": self.message,
			"author": self.author,
			"committed_at": self.committed_at.isoformat(),
			"repository": self.repository,
		}

	#============================================
	@classmethod
	def from_dict(cls, payload: dict) -> "Commit":
		return cls(
			sha=str(payload["sha"]),
			message=str(payload["message"]),
			author=str(payload["author"]),
			committed_at=parse_iso_datetime(payload["committed_at"]),
			repository=str(payload["repository"]),
		)


#============================================
@dataclasses.dataclass(frozen=True)
class FetchRequest:
	"""
	Identity of one commit fetch: subject, inclusive period and optional author.
	"""

	subject: str
	period_start: date
	period_end: date
	author: str | None = None

	#============================================
	def identity(self) -> tuple[str, str, str, str]:
		"""
		Return the canonical identity tuple used for cache lookups.

		GitHub logins are case-insensitive, so subject and author are
		lower-cased.
		"""
		return (
			self.subject.strip().lower(),
			self.period_start.isoformat(),
			self.period_end.isoformat(),
			(self.author or "").strip().lower(),
		)

	#============================================
	def cache_key_text(self) -> str:
		subject, start_text, end_text, author = self.identity()
		payload = {
			"subject": subject,
			"period_start": start_text,
			"period_end": end_text,
			"author": author,
		}
		return json.dumps(payload, sort_keys=True, ensure_ascii=True)


#============================================
@dataclasses.dataclass(frozen=True)
class PageCursor:
	"""
	Pagination state returned alongside one page of results.
	"""

	end_cursor: str | None
	has_next_page: bool

	#============================================
	@classmethod
	def last(cls) -> "PageCursor":
		return cls(end_cursor=None, has_next_page=False)


#============================================
@dataclasses.dataclass(frozen=True)
class GitHubActivity:
	"""
	Aggregate counts for one subject over a period.
	"""

	commits: int = 0
	pull_requests: int = 0
	issues: int = 0
	reviews: int = 0

	#============================================
	def add(self, other: "GitHubActivity") -> "GitHubActivity":
		return GitHubActivity(
			commits=self.commits + other.commits,
			pull_requests=self.pull_requests + other.pull_requests,
			issues=self.issues + other.issues,
			reviews=self.reviews + other.reviews,
		)


#============================================
@dataclasses.dataclass(frozen=True)
class DocumentContent:
	file_path: str
	content: str


#============================================
def validate_fiscal_month(month: int) -> int:
	"""Raise ValueError if month is not a calendar month number.

	Args:
		month: Fiscal year start month to validate.

	Returns:
		The month unchanged.
	"""
	if not isinstance(month, int) or isinstance(month, bool) or month < 1 or month > 12:
		raise ValueError(f"fiscal_year_start_month must be between 1 and 12; got {month!r}")
	return month


#============================================
@dataclasses.dataclass(frozen=True)
class Department:
	"""
	One reporting unit: which subjects to fetch and which documents to list.
	"""

	name: str
	fiscal_year_start_month: int
	github_organizations: tuple[str, ...] = ()
	local_documents: tuple[str, ...] = ()

	def __post_init__(self):
		validate_fiscal_month(self.fiscal_year_start_month)


#============================================
@dataclasses.dataclass(frozen=True)
class ReportConfig:
	target_github_user: str | None
	default_fiscal_year_start_month: int
	default_output_format: str
	output_directory: str
	departments: tuple[Department, ...] = ()


#============================================
@dataclasses.dataclass(frozen=True)
class Report:
	"""
	Everything one rendered report needs.
	"""

	year: int
	department_name: str
	period_start: date
	period_end: date
	activity: GitHubActivity
	documents: tuple[DocumentContent, ...]
	# keyed by CommitTheme
	theme_summary: dict

	#============================================
	@property
	def commit_count(self) -> int:
		return sum(self.theme_summary.values())
