"""Assemble per-department reports from fetched activity and local documents."""

# Standard Library
import calendar
import os
from datetime import date

from nenpolib.commit_theme import build_theme_summary
from nenpolib.document_reader import read_documents
from nenpolib.models import FetchRequest
from nenpolib.models import GitHubActivity
from nenpolib.models import Report
from nenpolib.models import ReportConfig
from nenpolib.models import validate_fiscal_month
from nenpolib.report_writers import OutputFormat
from nenpolib.report_writers import write_report


#============================================
def calculate_fiscal_period(year: int, start_month: int) -> tuple[date, date]:
	"""Return the first and last day of a fiscal year.

	Args:
		year: Calendar year in which the fiscal year starts.
		start_month: First month of the fiscal year (1-12).

	Returns:
		(start, end) dates, both inclusive. Start month 4 of 2024 gives
		2024-04-01 to 2025-03-31; start month 1 gives the calendar year.
	"""
	validate_fiscal_month(start_month)
	start = date(year, start_month, 1)
	if start_month == 1:
		return start, date(year, 12, 31)
	end_month = start_month - 1
	last_day = calendar.monthrange(year + 1, end_month)[1]
	return start, date(year + 1, end_month, last_day)


#============================================
def resolve_fiscal_year(start_month: int, today: date | None = None) -> int:
	"""
	Return the fiscal year containing today.
	"""
	validate_fiscal_month(start_month)
	if today is None:
		today = date.today()
	if today.month >= start_month:
		return today.year
	return today.year - 1


#============================================
def report_filename(department_name: str, year: int, output_format: OutputFormat) -> str:
	safe_name = department_name.replace(os.sep, "_").replace("/", "_")
	return f"report-{safe_name}-{year}.{output_format.extension}"


#============================================
class ReportGenerator:
	"""
	Build and write one report per selected department.
	"""

	def __init__(self, fetcher, document_reader=read_documents, log_fn=None):
		self.fetcher = fetcher
		self.document_reader = document_reader
		self.log_fn = log_fn

	#============================================
	def log(self, message: str) -> None:
		if self.log_fn is not None:
			self.log_fn(message)

	#============================================
	def generate(
		self,
		config: ReportConfig,
		year: int | None = None,
		department_filter: str | None = None,
		output_format: OutputFormat | None = None,
		output_dir: str | None = None,
	) -> list[str]:
		"""Generate reports and return the written file paths.

		Args:
			config: Parsed report configuration.
			year: Fiscal year; defaults to the fiscal year containing today.
			department_filter: Only generate this department when set.
			output_format: Output format; defaults to the configured one.
			output_dir: Output directory; defaults to the configured one.

		Returns:
			Written report paths in department order.
		"""
		departments = list(config.departments)
		if department_filter:
			departments = [dept for dept in departments if dept.name == department_filter]
		if not departments:
			if department_filter:
				raise RuntimeError(f"No departments found matching: {department_filter}")
			raise RuntimeError("No departments found in settings.")
		if output_format is None:
			output_format = OutputFormat.parse(config.default_output_format)
		if output_dir is None:
			output_dir = config.output_directory
		try:
			os.makedirs(output_dir, exist_ok=True)
		except OSError as error:
			raise RuntimeError(f"Cannot create output directory {output_dir}: {error}") from error

		written = []
		for department in departments:
			report_year = year
			if report_year is None:
				report_year = resolve_fiscal_year(department.fiscal_year_start_month)
			report = self.build_report(config, department, report_year)
			output_path = os.path.join(
				output_dir,
				report_filename(department.name, report_year, output_format),
			)
			write_report(report, output_path, output_format)
			self.log(f"Wrote report: {output_path}")
			written.append(output_path)
		return written

	#============================================
	def build_report(self, config: ReportConfig, department, year: int) -> Report:
		period_start, period_end = calculate_fiscal_period(
			year,
			department.fiscal_year_start_month,
		)
		self.log(
			f"Department {department.name}: fiscal year {year} "
			+ f"({period_start.isoformat()} to {period_end.isoformat()})."
		)
		activity = GitHubActivity()
		commits = []
		for subject in department.github_organizations:
			self.log(f"Fetching activity summary for {subject}.")
			activity = activity.add(self.fetcher.fetch_activity(subject, period_start, period_end))
			request = FetchRequest(
				subject=subject,
				period_start=period_start,
				period_end=period_end,
				author=config.target_github_user,
			)
			commits.extend(self.fetcher.fetch_commits(request))
		documents = self.document_reader(list(department.local_documents))
		self.log(
			f"Department {department.name}: collected {len(commits)} commit(s), "
			+ f"{len(documents)} document(s)."
		)
		return Report(
			year=year,
			department_name=department.name,
			period_start=period_start,
			period_end=period_end,
			activity=activity,
			documents=tuple(documents),
			theme_summary=build_theme_summary(commits),
		)
