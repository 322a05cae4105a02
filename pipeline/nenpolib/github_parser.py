"""Parse raw GraphQL response text into domain records."""

# Standard Library
import dataclasses
import json

from nenpolib.models import Commit
from nenpolib.models import GitHubActivity
from nenpolib.models import PageCursor
from nenpolib.models import parse_iso_datetime


UNKNOWN_AUTHOR = "Unknown"


#============================================
class GitHubParseError(RuntimeError):
	"""
	Raised when a GraphQL response does not have the expected shape.
	"""


#============================================
@dataclasses.dataclass(frozen=True)
class RepositoryPage:
	names: list[str]
	cursor: PageCursor


#============================================
@dataclasses.dataclass(frozen=True)
class CommitPage:
	commits: list[Commit]
	cursor: PageCursor
	missing_default_branch: bool = False


#============================================
def graphql_error_messages(payload: dict) -> list[str]:
	"""
	Collect message strings from a GraphQL errors array.
	"""
	errors = payload.get("errors")
	if not isinstance(errors, list):
		return []
	messages = []
	for error in errors:
		if isinstance(error, dict):
			message = str(error.get("message", "")).strip()
		else:
			message = str(error).strip()
		if message:
			messages.append(message)
	return messages


#============================================
def load_payload(response_text: str) -> dict:
	"""
	Decode response JSON and return the top-level object.
	"""
	try:
		payload = json.loads(response_text)
	except (TypeError, ValueError) as error:
		raise GitHubParseError(f"Response is not valid JSON: {error}") from error
	if not isinstance(payload, dict):
		raise GitHubParseError("Response JSON must be an object.")
	return payload


#============================================
def load_data(response_text: str) -> tuple[dict, dict]:
	"""
	Return (payload, data) where data is the GraphQL data object.
	"""
	payload = load_payload(response_text)
	data = payload.get("data")
	if not isinstance(data, dict):
		raise GitHubParseError(with_error_details("Response has no data object", payload))
	return payload, data


#============================================
def with_error_details(message: str, payload: dict) -> str:
	messages = graphql_error_messages(payload)
	if not messages:
		return message
	return f"{message}: {'; '.join(messages)}"


#============================================
def select_owner(payload: dict, data: dict, subject: str) -> dict:
	"""
	Pick the populated organization or user object; organization wins.
	"""
	owner = data.get("organization")
	if not isinstance(owner, dict):
		owner = data.get("user")
	if not isinstance(owner, dict):
		raise GitHubParseError(
			with_error_details(f"Neither organization nor user found for {subject}", payload)
		)
	return owner


#============================================
def require_mapping(value, path: str) -> dict:
	if not isinstance(value, dict):
		raise GitHubParseError(f"Response is missing object at {path}")
	return value


#============================================
def require_list(value, path: str) -> list:
	if not isinstance(value, list):
		raise GitHubParseError(f"Response is missing list at {path}")
	return value


#============================================
def read_total_count(container, path: str) -> int:
	"""
	Read a totalCount field, treating a null connection as zero.
	"""
	if container is None:
		return 0
	container = require_mapping(container, path)
	value = container.get("totalCount")
	if not isinstance(value, int) or isinstance(value, bool):
		raise GitHubParseError(f"Response has invalid totalCount at {path}")
	return value


#============================================
def parse_page_info(history: dict, path: str) -> PageCursor:
	page_info = require_mapping(history.get("pageInfo"), f"{path}.pageInfo")
	has_next_page = bool(page_info.get("hasNextPage", False))
	end_cursor = page_info.get("endCursor")
	if end_cursor is not None:
		end_cursor = str(end_cursor)
	if has_next_page and not end_cursor:
		raise GitHubParseError(f"Response reports another page without an endCursor at {path}")
	return PageCursor(end_cursor=end_cursor, has_next_page=has_next_page)


#============================================
def parse_activity_response(response_text: str, subject: str = "") -> GitHubActivity:
	"""Sum commit, pull request and issue counts over all repositories.

	Args:
		response_text: Raw JSON text of an activity query response.
		subject: Login used in error messages.

	Returns:
		GitHubActivity with reviews always zero.
	"""
	payload, data = load_data(response_text)
	owner = select_owner(payload, data, subject)
	repositories = require_mapping(owner.get("repositories"), "repositories")
	nodes = require_list(repositories.get("nodes"), "repositories.nodes")
	commits = 0
	pull_requests = 0
	issues = 0
	for index, node in enumerate(nodes):
		if node is None:
			continue
		path = f"repositories.nodes[{index}]"
		node = require_mapping(node, path)
		branch = node.get("defaultBranchRef")
		if isinstance(branch, dict):
			target = branch.get("target")
			if isinstance(target, dict):
				commits += read_total_count(target.get("history"), f"{path}.history")
		pull_requests += read_total_count(node.get("pullRequests"), f"{path}.pullRequests")
		issues += read_total_count(node.get("issues"), f"{path}.issues")
	return GitHubActivity(
		commits=commits,
		pull_requests=pull_requests,
		issues=issues,
		reviews=0,
	)


#============================================
def parse_repository_page(response_text: str, subject: str = "") -> RepositoryPage:
	"""
	Extract repository names and the next-page cursor from one listing page.
	"""
	payload, data = load_data(response_text)
	owner = select_owner(payload, data, subject)
	repositories = require_mapping(owner.get("repositories"), "repositories")
	nodes = require_list(repositories.get("nodes"), "repositories.nodes")
	names = []
	for index, node in enumerate(nodes):
		if node is None:
			continue
		node = require_mapping(node, f"repositories.nodes[{index}]")
		name = str(node.get("name") or "").strip()
		if not name:
			raise GitHubParseError(f"Repository node {index} has no name")
		names.append(name)
	cursor = parse_page_info(repositories, "repositories")
	return RepositoryPage(names=names, cursor=cursor)


#============================================
def parse_commit_node(node: dict, repository_label: str, path: str) -> Commit:
	node = require_mapping(node, path)
	sha = str(node.get("oid") or "").strip()
	if not sha:
		raise GitHubParseError(f"Commit node has no oid at {path}")
	committed_text = node.get("committedDate")
	if not committed_text:
		raise GitHubParseError(f"Commit node has no committedDate at {path}")
	try:
		committed_at = parse_iso_datetime(committed_text)
	except ValueError as error:
		raise GitHubParseError(f"Commit node has invalid committedDate at {path}: {committed_text}") from error
	author_name = UNKNOWN_AUTHOR
	author = node.get("author")
	if isinstance(author, dict):
		name_value = author.get("name")
		if name_value:
			author_name = str(name_value)
	return Commit(
		sha=sha,
		message=str(node.get("message") or ""),
		author=author_name,
		committed_at=committed_at,
		repository=repository_label,
	)


#============================================
def parse_repo_commit_page(response_text: str, subject: str, repo_name: str) -> CommitPage:
	"""Parse one page of default-branch history for a repository.

	A repository without a default branch (empty repository) yields an
	empty last page with missing_default_branch set.

	Args:
		response_text: Raw JSON text of a commit page response.
		subject: Repository owner login.
		repo_name: Repository name.

	Returns:
		CommitPage with commits in response order.
	"""
	payload, data = load_data(response_text)
	repository_label = f"{subject}/{repo_name}"
	repository = data.get("repository")
	if not isinstance(repository, dict):
		raise GitHubParseError(
			with_error_details(f"Repository not found: {repository_label}", payload)
		)
	branch = repository.get("defaultBranchRef")
	if branch is None:
		return CommitPage(commits=[], cursor=PageCursor.last(), missing_default_branch=True)
	branch = require_mapping(branch, "repository.defaultBranchRef")
	target = require_mapping(branch.get("target"), "repository.defaultBranchRef.target")
	history = require_mapping(target.get("history"), "repository.defaultBranchRef.target.history")
	nodes = require_list(history.get("nodes"), "history.nodes")
	commits = []
	for index, node in enumerate(nodes):
		commits.append(parse_commit_node(node, repository_label, f"history.nodes[{index}]"))
	cursor = parse_page_info(history, "history")
	return CommitPage(commits=commits, cursor=cursor)


#============================================
def parse_author_id(response_text: str, login: str) -> str:
	payload, data = load_data(response_text)
	user = data.get("user")
	if not isinstance(user, dict):
		raise GitHubParseError(with_error_details(f"GitHub user not found: {login}", payload))
	node_id = str(user.get("id") or "").strip()
	if not node_id:
		raise GitHubParseError(f"GitHub user {login} has no node id")
	return node_id
