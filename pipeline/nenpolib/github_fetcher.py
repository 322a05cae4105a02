# Standard Library
import time

from nenpolib import commit_cache
from nenpolib import github_parser
from nenpolib import github_queries
from nenpolib.progress_reporter import NoOpProgressReporter
from nenpolib import retry_handler
from nenpolib.models import Commit
from nenpolib.models import FetchRequest
from nenpolib.models import GitHubActivity


#============================================
class GitHubFetcher:
	"""
	Drive nested repository and commit pagination for one subject at a time.
	"""

	def __init__(
		self,
		executor,
		progress_reporter=None,
		cache=None,
		retry_policy: retry_handler.RetryPolicy | None = None,
		log_fn=None,
		sleep_fn=time.sleep,
	):
		self.executor = executor
		if progress_reporter is None:
			progress_reporter = NoOpProgressReporter()
		self.progress_reporter = progress_reporter
		if cache is None:
			cache = commit_cache.NoOpCache()
		self.cache = cache
		if retry_policy is None:
			retry_policy = retry_handler.RetryPolicy()
		self.retry_policy = retry_policy
		self.log_fn = log_fn
		self.sleep_fn = sleep_fn
		self._api_call_count = 0
		self._api_calls_by_context: dict[str, int] = {}
		self._cache_hit_count = 0
		self._cache_miss_count = 0

	#============================================
	def log(self, message: str) -> None:
		"""
		Emit one log line when logger is configured.
		"""
		if self.log_fn is not None:
			self.log_fn(message)

	#============================================
	def record_api_call(self, context: str) -> None:
		self._api_call_count += 1
		if context not in self._api_calls_by_context:
			self._api_calls_by_context[context] = 0
		self._api_calls_by_context[context] += 1

	#============================================
	def api_usage_snapshot(self) -> dict:
		"""
		Return API/caching counters for reporting.
		"""
		return {
			"api_call_count": self._api_call_count,
			"api_calls_by_context": dict(self._api_calls_by_context),
			"cache_hit_count": self._cache_hit_count,
			"cache_miss_count": self._cache_miss_count,
		}

	#============================================
	def _execute(self, context: str, document: dict) -> str:
		"""
		Send one document through the executor under the retry policy.
		"""
		def operation() -> str:
			self.record_api_call(context)
			return self.executor.execute(document)

		return retry_handler.with_retry(
			self.retry_policy,
			operation,
			log_fn=self.log_fn,
			sleep_fn=self.sleep_fn,
			context=context,
		)

	#============================================
	def _notify(self, event: str, *args) -> None:
		"""
		Call one reporter event; a failing reporter is logged and ignored.
		"""
		handler = getattr(self.progress_reporter, event, None)
		if handler is None:
			return
		try:
			handler(*args)
		except Exception as error:
			self.log(f"Progress reporter {event} failed: {error}")

	#============================================
	def fetch_activity(self, subject: str, period_start, period_end) -> GitHubActivity:
		"""
		Fetch aggregate commit, pull request and issue counts for one subject.
		"""
		document = github_queries.activity_query(subject, period_start, period_end)
		response_text = self._execute("activity", document)
		return github_parser.parse_activity_response(response_text, subject)

	#============================================
	def resolve_author_id(self, login: str) -> str:
		document = github_queries.author_id_query(login)
		response_text = self._execute("author_id", document)
		return github_parser.parse_author_id(response_text, login)

	#============================================
	def fetch_commits(self, request: FetchRequest) -> list[Commit]:
		"""Fetch every default-branch commit for a subject over a period.

		A cache hit returns immediately without network calls. On a miss,
		every repository page and every commit page is fetched in order and
		the complete list is cached. Any failure aborts the whole fetch;
		nothing is cached and no partial list is returned.

		Args:
			request: Subject, inclusive period and optional author login.

		Returns:
			Commits in repository-then-page order.
		"""
		cached = self.cache.get(request)
		if cached is not None:
			self._cache_hit_count += 1
			self.log(f"Commit cache hit for {request.subject}: {len(cached)} commit(s).")
			return cached
		self._cache_miss_count += 1

		try:
			author_id = None
			if request.author:
				author_id = self.resolve_author_id(request.author)
			self._notify("start", request.subject)
			commits = self._fetch_all_pages(request, author_id)
			self._notify("finish", request.subject, len(commits))
		except Exception as error:
			self._notify("error", request.subject, str(error))
			raise

		self.cache.set(request, commits)
		return commits

	#============================================
	def _fetch_all_pages(self, request: FetchRequest, author_id: str | None) -> list[Commit]:
		commits: list[Commit] = []
		repo_cursor = None
		while True:
			document = github_queries.repository_page_query(request.subject, repo_cursor)
			response_text = self._execute("repositories", document)
			repo_page = github_parser.parse_repository_page(response_text, request.subject)
			for repo_name in repo_page.names:
				self._fetch_repository_commits(request, repo_name, author_id, commits)
			if not repo_page.cursor.has_next_page:
				break
			repo_cursor = repo_page.cursor.end_cursor
		return commits

	#============================================
	def _fetch_repository_commits(
		self,
		request: FetchRequest,
		repo_name: str,
		author_id: str | None,
		commits: list[Commit],
	) -> None:
		commit_cursor = None
		while True:
			document = github_queries.repo_commit_page_query(
				request.subject,
				repo_name,
				request.period_start,
				request.period_end,
				author_id,
				commit_cursor,
			)
			response_text = self._execute("commits", document)
			page = github_parser.parse_repo_commit_page(response_text, request.subject, repo_name)
			if page.missing_default_branch:
				self.log(f"Skipping empty repository {request.subject}/{repo_name}: no default branch.")
				return
			commits.extend(page.commits)
			self._notify("progress", request.subject, len(commits))
			if not page.cursor.has_next_page:
				return
			commit_cursor = page.cursor.end_cursor
