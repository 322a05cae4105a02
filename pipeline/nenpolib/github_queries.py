"""GraphQL query documents for the GitHub API.

Every builder returns a document of the form
{"query": <GraphQL text>, "variables": {...}}. Logins, repository names,
dates and cursors travel only as variables; the query text is fixed.
"""

# Standard Library
import re
from datetime import date


REPOSITORY_PAGE_SIZE = 100
COMMIT_PAGE_SIZE = 100
ACTIVITY_REPOSITORY_LIMIT = 100

LOGIN_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")
REPO_NAME_RE = re.compile(r"^[A-Za-z0-9._-]{1,100}$")


#============================================
class QueryInputError(ValueError):
	"""
	Raised when a login or repository name is not a valid GitHub identifier.
	"""


#============================================
def validate_login(login: str) -> str:
	text = str(login or "")
	if not LOGIN_RE.match(text):
		raise QueryInputError(f"Invalid GitHub login: {login!r}")
	return text


#============================================
def validate_repo_name(repo_name: str) -> str:
	text = str(repo_name or "")
	if not REPO_NAME_RE.match(text) or text in {".", ".."}:
		raise QueryInputError(f"Invalid GitHub repository name: {repo_name!r}")
	return text


#============================================
def period_since(period_start: date) -> str:
	"""
	Return the inclusive lower timestamp bound for a period start date.
	"""
	return f"{period_start.isoformat()}T00:00:00Z"


#============================================
def period_until(period_end: date) -> str:
	"""
	Return the inclusive upper timestamp bound for a period end date.
	"""
	return f"{period_end.isoformat()}T23:59:59Z"


ACTIVITY_REPOSITORY_FIELDS = """
        nodes {
          defaultBranchRef {
            target {
              ... on Commit {
                history(since: $since, until: $until) {
                  totalCount
                }
              }
            }
          }
          pullRequests(states: [OPEN, CLOSED, MERGED]) {
            totalCount
          }
          issues(states: [OPEN, CLOSED]) {
            totalCount
          }
        }
"""

ACTIVITY_QUERY = (
	"query($login: String!, $since: GitTimestamp!, $until: GitTimestamp!, $first: Int!) {\n"
	+ "  organization(login: $login) {\n"
	+ "    repositories(first: $first) {"
	+ ACTIVITY_REPOSITORY_FIELDS
	+ "    }\n"
	+ "  }\n"
	+ "  user(login: $login) {\n"
	+ "    repositories(first: $first, ownerAffiliations: OWNER) {"
	+ ACTIVITY_REPOSITORY_FIELDS
	+ "    }\n"
	+ "  }\n"
	+ "}\n"
)

REPOSITORY_PAGE_FIELDS = """
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        name
      }
"""

REPOSITORY_PAGE_QUERY = (
	"query($login: String!, $first: Int!, $after: String) {\n"
	+ "  organization(login: $login) {\n"
	+ "    repositories(first: $first, after: $after) {"
	+ REPOSITORY_PAGE_FIELDS
	+ "    }\n"
	+ "  }\n"
	+ "  user(login: $login) {\n"
	+ "    repositories(first: $first, after: $after, ownerAffiliations: OWNER) {"
	+ REPOSITORY_PAGE_FIELDS
	+ "    }\n"
	+ "  }\n"
	+ "}\n"
)

COMMIT_HISTORY_FIELDS = """
            pageInfo {
              hasNextPage
              endCursor
            }
            nodes {
              oid
              message
              author {
                name
              }
              committedDate
            }
"""


#============================================
def build_commit_page_query_text(with_author: bool) -> str:
	"""
	Return commit history query text, with or without the author filter.
	"""
	declarations = "$owner: String!, $name: String!, $since: GitTimestamp!, $until: GitTimestamp!, $first: Int!, $after: String"
	history_args = "first: $first, after: $after, since: $since, until: $until"
	if with_author:
		declarations += ", $authorId: ID!"
		history_args += ", author: {id: $authorId}"
	return (
		f"query({declarations}) {{\n"
		+ "  repository(owner: $owner, name: $name) {\n"
		+ "    defaultBranchRef {\n"
		+ "      target {\n"
		+ "        ... on Commit {\n"
		+ f"          history({history_args}) {{"
		+ COMMIT_HISTORY_FIELDS
		+ "          }\n"
		+ "        }\n"
		+ "      }\n"
		+ "    }\n"
		+ "  }\n"
		+ "}\n"
	)


COMMIT_PAGE_QUERY = build_commit_page_query_text(with_author=False)
COMMIT_PAGE_QUERY_WITH_AUTHOR = build_commit_page_query_text(with_author=True)

AUTHOR_ID_QUERY = (
	"query($login: String!) {\n"
	+ "  user(login: $login) {\n"
	+ "    id\n"
	+ "  }\n"
	+ "}\n"
)


#============================================
def activity_query(subject: str, period_start: date, period_end: date) -> dict:
	"""Build the aggregate activity query for one subject.

	Args:
		subject: Organization or user login.
		period_start: First day of the period (inclusive).
		period_end: Last day of the period (inclusive).

	Returns:
		Query document with query text and variables.
	"""
	return {
		"query": ACTIVITY_QUERY,
		"variables": {
			"login": validate_login(subject),
			"since": period_since(period_start),
			"until": period_until(period_end),
			"first": ACTIVITY_REPOSITORY_LIMIT,
		},
	}


#============================================
def repository_page_query(subject: str, after_cursor: str | None) -> dict:
	"""Build one page of the repository listing for a subject.

	Args:
		subject: Organization or user login.
		after_cursor: End cursor of the previous page, None for the first page.

	Returns:
		Query document with query text and variables.
	"""
	return {
		"query": REPOSITORY_PAGE_QUERY,
		"variables": {
			"login": validate_login(subject),
			"first": REPOSITORY_PAGE_SIZE,
			"after": after_cursor,
		},
	}


#============================================
def repo_commit_page_query(
	subject: str,
	repo_name: str,
	period_start: date,
	period_end: date,
	author_id: str | None,
	after_cursor: str | None,
) -> dict:
	"""Build one page of default-branch commit history for a repository.

	Args:
		subject: Repository owner login.
		repo_name: Repository name.
		period_start: First day of the period (inclusive).
		period_end: Last day of the period (inclusive).
		author_id: GraphQL node id of the author to filter by, or None.
		after_cursor: End cursor of the previous page, None for the first page.

	Returns:
		Query document with query text and variables.
	"""
	variables = {
		"owner": validate_login(subject),
		"name": validate_repo_name(repo_name),
		"since": period_since(period_start),
		"until": period_until(period_end),
		"first": COMMIT_PAGE_SIZE,
		"after": after_cursor,
	}
	query_text = COMMIT_PAGE_QUERY
	if author_id:
		variables["authorId"] = str(author_id)
		query_text = COMMIT_PAGE_QUERY_WITH_AUTHOR
	return {
		"query": query_text,
		"variables": variables,
	}


#============================================
def author_id_query(login: str) -> dict:
	return {
		"query": AUTHOR_ID_QUERY,
		"variables": {
			"login": validate_login(login),
		},
	}
