"""Transports that send one GraphQL document to GitHub and return raw text.

An executor exposes execute(document) -> str. Failures raise CommandError
whose text carries the HTTP status or gh stderr, so rate-limit failures can
be recognized by the retry predicate.
"""

# Standard Library
import json
import subprocess

# PIP3 modules
import requests


GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"
HTTP_TIMEOUT_SECONDS = 30


#============================================
class CommandError(RuntimeError):
	"""
	Raised when a GraphQL request cannot produce a usable response.
	"""


#============================================
def raise_for_graphql_errors(response_text: str) -> str:
	"""
	Raise CommandError when the response has errors and no data.

	Responses that carry data are returned unchanged even when they also
	list errors, since the organization/user queries always resolve one
	of the two owner kinds with an error for the other.
	"""
	try:
		payload = json.loads(response_text)
	except ValueError:
		return response_text
	if not isinstance(payload, dict):
		return response_text
	errors = payload.get("errors")
	if not errors or payload.get("data"):
		return response_text
	raise CommandError("GraphQL request failed: " + graphql_error_text(errors))


#============================================
def graphql_error_text(errors) -> str:
	messages = []
	for error in errors if isinstance(errors, list) else [errors]:
		if isinstance(error, dict):
			parts = [str(error.get("type") or "").strip(), str(error.get("message") or "").strip()]
			messages.append(" ".join(part for part in parts if part))
		else:
			messages.append(str(error))
	return "; ".join(messages)


#============================================
def payload_has_data(response_text: str) -> bool:
	"""
	Return True when response text is a JSON object with a data object.
	"""
	try:
		payload = json.loads(response_text)
	except ValueError:
		return False
	return isinstance(payload, dict) and isinstance(payload.get("data"), dict)


#============================================
def gh_failure_message(stderr: str | None, stdout: str | None) -> str:
	"""
	Combine gh stderr with the error body gh printed on stdout.

	On HTTP errors gh prints the status on stderr and the REST error body
	({"message": ..., "documentation_url": ...}) on stdout.
	"""
	parts = []
	stderr_text = (stderr or "").strip()
	if stderr_text:
		parts.append(stderr_text)
	stdout_text = (stdout or "").strip()
	if stdout_text:
		try:
			payload = json.loads(stdout_text)
		except ValueError:
			payload = None
		if isinstance(payload, dict) and payload.get("message"):
			parts.append(str(payload["message"]).strip())
		elif isinstance(payload, dict) and payload.get("errors"):
			parts.append(graphql_error_text(payload["errors"]))
		else:
			parts.append(stdout_text)
	return "Command failed: " + " | ".join(parts)


#============================================
def build_gh_command(document: dict, program: str = "gh") -> list[str]:
	"""
	Build gh api graphql argv: -f for string fields, -F for typed fields.
	"""
	command = [program, "api", "graphql", "-f", f"query={document['query']}"]
	variables = document.get("variables") or {}
	for name in sorted(variables):
		value = variables[name]
		if value is None:
			continue
		if isinstance(value, bool):
			command.extend(["-F", f"{name}={'true' if value else 'false'}"])
		elif isinstance(value, int):
			command.extend(["-F", f"{name}={value}"])
		else:
			command.extend(["-f", f"{name}={value}"])
	return command


#============================================
class GhCommandExecutor:
	"""
	Run GraphQL documents through the gh CLI.
	"""

	def __init__(self, program: str = "gh", runner=subprocess.run):
		self.program = program
		self.runner = runner

	#============================================
	def execute(self, document: dict) -> str:
		command = build_gh_command(document, self.program)
		try:
			result = self.runner(
				command,
				check=False,
				capture_output=True,
				text=True,
			)
		except FileNotFoundError as error:
			raise CommandError(
				f"Missing command: {self.program}. Install the GitHub CLI and run gh auth login."
			) from error
		stdout = result.stdout or ""
		# non-zero exit is only usable when stdout still carries GraphQL data
		if result.returncode != 0 and not payload_has_data(stdout):
			raise CommandError(gh_failure_message(result.stderr, stdout))
		return raise_for_graphql_errors(stdout)


#============================================
class HttpGraphQLExecutor:
	"""
	POST GraphQL documents to the GitHub API with requests.
	"""

	def __init__(
		self,
		token: str,
		endpoint: str = GITHUB_GRAPHQL_URL,
		session=None,
		timeout: int = HTTP_TIMEOUT_SECONDS,
	):
		if not token:
			raise CommandError(
				"GitHub token required for HTTP transport. Set github.token or GITHUB_TOKEN."
			)
		self.token = token
		self.endpoint = endpoint
		self.session = session if session is not None else requests.Session()
		self.timeout = timeout

	#============================================
	def execute(self, document: dict) -> str:
		headers = {
			"Authorization": f"Bearer {self.token}",
			"Accept": "application/vnd.github+json",
		}
		try:
			response = self.session.post(
				self.endpoint,
				json=document,
				headers=headers,
				timeout=self.timeout,
			)
		except requests.RequestException as error:
			raise CommandError(f"GitHub GraphQL request failed: {error}") from error
		if response.status_code >= 400:
			body = (response.text or "").strip()
			raise CommandError(
				f"GitHub GraphQL request failed with status {response.status_code}: {body}"
			)
		return raise_for_graphql_errors(response.text)
