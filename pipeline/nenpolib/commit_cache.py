# Standard Library
import glob
import hashlib
import json
import os
import re
import tempfile
from datetime import datetime
from datetime import timezone

from nenpolib.models import Commit
from nenpolib.models import FetchRequest


CACHE_FILE_SUFFIX = "_commits.json"
TEMP_FILE_PREFIX = ".writing-"
TEMP_FILE_SUFFIX = ".tmp"
SLUG_RE = re.compile(r"[^a-z0-9._-]+")


#============================================
class CacheError(RuntimeError):
	"""
	Raised when a cache entry cannot be read or written.
	"""


#============================================
def resolve_default_cache_dir(home_dir: str | None = None) -> str:
	"""
	Return the default cache root, ~/.cache/nenpo.
	"""
	if home_dir is None:
		home_dir = os.path.expanduser("~")
	return os.path.join(home_dir, ".cache", "nenpo")


#============================================
def slugify(text: str) -> str:
	slug = SLUG_RE.sub("-", str(text or "").strip().lower()).strip("-")
	return slug or "x"


#============================================
class CommitCache:
	"""
	Filesystem-backed cache of complete commit lists, one JSON file per request.
	"""

	def __init__(self, cache_dir: str):
		self.cache_dir = os.path.abspath(cache_dir)
		try:
			os.makedirs(self.cache_dir, exist_ok=True)
		except OSError as error:
			raise CacheError(f"Cannot create cache directory {self.cache_dir}: {error}") from error

	#============================================
	def cache_path(self, request: FetchRequest) -> str:
		key_text = request.cache_key_text()
		hash_text = hashlib.sha256(key_text.encode("utf-8")).hexdigest()[:12]
		parts = [
			slugify(request.subject),
			request.period_start.strftime("%Y%m%d"),
			request.period_end.strftime("%Y%m%d"),
		]
		if request.author:
			parts.append(slugify(request.author))
		parts.append(hash_text)
		return os.path.join(self.cache_dir, "_".join(parts) + CACHE_FILE_SUFFIX)

	#============================================
	def get(self, request: FetchRequest) -> list[Commit] | None:
		"""
		Return cached commits for the request, or None on a miss.

		A file that exists but cannot be decoded raises CacheError.
		"""
		cache_path = self.cache_path(request)
		if not os.path.isfile(cache_path):
			return None
		try:
			with open(cache_path, "r", encoding="utf-8") as handle:
				payload = json.load(handle)
		except (OSError, ValueError) as error:
			raise CacheError(f"Cannot read cache entry {cache_path}: {error}") from error
		if not isinstance(payload, dict):
			raise CacheError(f"Cache entry is not an object: {cache_path}")
		subject, start_text, end_text, author = request.identity()
		stored_identity = (
			payload.get("subject"),
			payload.get("period_start"),
			payload.get("period_end"),
			payload.get("author") or "",
		)
		if stored_identity != (subject, start_text, end_text, author):
			return None
		commit_rows = payload.get("commits")
		if not isinstance(commit_rows, list):
			raise CacheError(f"Cache entry has no commit list: {cache_path}")
		try:
			return [Commit.from_dict(row) for row in commit_rows]
		except (KeyError, TypeError, ValueError) as error:
			raise CacheError(f"Cache entry has invalid commit data {cache_path}: {error}") from error

	#============================================
	def set(self, request: FetchRequest, commits: list[Commit]) -> str:
		"""
		Write the full commit list through a temp file and an atomic rename.
		"""
		cache_path = self.cache_path(request)
		subject, start_text, end_text, author = request.identity()
		payload = {
			"subject": subject,
			"period_start": start_text,
			"period_end": end_text,
			"author": author,
			"fetched_at": datetime.now(timezone.utc).isoformat(),
			"commits": [commit.to_dict() for commit in commits],
		}
		tmp_path = ""
		try:
			fd, tmp_path = tempfile.mkstemp(
				dir=self.cache_dir,
				prefix=TEMP_FILE_PREFIX,
				suffix=TEMP_FILE_SUFFIX,
			)
			os.close(fd)
			with open(tmp_path, "w", encoding="utf-8") as handle:
				json.dump(payload, handle, ensure_ascii=True, sort_keys=True, indent=2)
				handle.write("\n")
			os.replace(tmp_path, cache_path)
		except OSError as error:
			if tmp_path and os.path.exists(tmp_path):
				os.remove(tmp_path)
			raise CacheError(f"Cannot write cache entry {cache_path}: {error}") from error
		return cache_path

	#============================================
	def clear(self) -> int:
		"""
		Remove every cache entry and return the count removed.

		In-flight temp files from a concurrent set() are left alone.
		"""
		if not os.path.isdir(self.cache_dir):
			return 0
		removed = 0
		for path in sorted(glob.glob(os.path.join(self.cache_dir, "*" + CACHE_FILE_SUFFIX))):
			if not os.path.isfile(path):
				continue
			try:
				os.remove(path)
			except FileNotFoundError:
				continue
			except OSError as error:
				raise CacheError(f"Cannot remove cache entry {path}: {error}") from error
			removed += 1
		return removed


#============================================
class NoOpCache:
	"""
	Cache that never stores anything.
	"""

	def get(self, request: FetchRequest):
		return None

	def set(self, request: FetchRequest, commits: list[Commit]) -> str:
		return ""

	def clear(self) -> int:
		return 0
