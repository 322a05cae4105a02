"""Tests for pipeline/nenpolib/commit_cache.py."""

# Standard Library
import json
import os
import sys
from datetime import date
from datetime import datetime
from datetime import timezone

import pytest

# add pipeline directory to path for nenpolib imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "pipeline"))

from nenpolib import commit_cache
from nenpolib.models import Commit
from nenpolib.models import FetchRequest


REQUEST = FetchRequest("Acme", date(2024, 4, 1), date(2025, 3, 31))
COMMITS = [
	Commit("a1", "feat: one", "Alice", datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc), "Acme/a"),
	Commit("b1", "fix: two", "Unknown", datetime(2024, 6, 2, 9, 0, tzinfo=timezone.utc), "Acme/b"),
]


#============================================
def test_miss_then_hit(tmp_path):
	cache = commit_cache.CommitCache(str(tmp_path / "cache"))
	assert cache.get(REQUEST) is None
	path = cache.set(REQUEST, COMMITS)
	assert os.path.basename(path).startswith("acme_20240401_20250331_")
	assert path.endswith("_commits.json")
	assert cache.get(REQUEST) == COMMITS


#============================================
def test_keys_separate_author_and_period(tmp_path):
	cache = commit_cache.CommitCache(str(tmp_path))
	cache.set(REQUEST, COMMITS)
	with_author = FetchRequest("Acme", date(2024, 4, 1), date(2025, 3, 31), author="alice")
	other_period = FetchRequest("Acme", date(2023, 4, 1), date(2024, 3, 31))
	assert cache.get(with_author) is None
	assert cache.get(other_period) is None
	assert cache.cache_path(with_author) != cache.cache_path(REQUEST)


#============================================
def test_equal_requests_share_one_path(tmp_path):
	cache = commit_cache.CommitCache(str(tmp_path))
	twin = FetchRequest("Acme", date(2024, 4, 1), date(2025, 3, 31), author=None)
	assert cache.cache_path(twin) == cache.cache_path(REQUEST)


#============================================
def test_login_case_does_not_split_entries(tmp_path):
	"""Logins differing only in case share one cache entry."""
	cache = commit_cache.CommitCache(str(tmp_path))
	cache.set(FetchRequest("Acme", date(2024, 4, 1), date(2025, 3, 31), author="Alice"), COMMITS)
	lower = FetchRequest("acme", date(2024, 4, 1), date(2025, 3, 31), author="alice")
	assert cache.get(lower) == COMMITS
	assert len(os.listdir(tmp_path)) == 1


#============================================
def test_clear_keeps_in_flight_temp_file(tmp_path):
	"""A temp file being written by a concurrent set() survives clear()."""
	cache = commit_cache.CommitCache(str(tmp_path))
	cache.set(REQUEST, COMMITS)
	in_flight = tmp_path / (commit_cache.TEMP_FILE_PREFIX + "abc" + commit_cache.TEMP_FILE_SUFFIX)
	in_flight.write_text("{}", encoding="utf-8")
	assert cache.clear() == 1
	assert in_flight.exists()


#============================================
def test_set_leaves_no_temp_files(tmp_path):
	cache = commit_cache.CommitCache(str(tmp_path))
	cache.set(REQUEST, COMMITS)
	cache.set(REQUEST, COMMITS[:1])
	names = os.listdir(tmp_path)
	assert len(names) == 1
	assert names[0].endswith("_commits.json")
	with open(tmp_path / names[0], "r", encoding="utf-8") as handle:
		payload = json.load(handle)
	assert payload["subject"] == "acme"
	assert payload["period_start"] == "2024-04-01"
	assert len(payload["commits"]) == 1


#============================================
def test_corrupt_entry_raises(tmp_path):
	"""A damaged cache file is an error, not a silent miss."""
	cache = commit_cache.CommitCache(str(tmp_path))
	path = cache.cache_path(REQUEST)
	with open(path, "w", encoding="utf-8") as handle:
		handle.write("{truncated")
	with pytest.raises(commit_cache.CacheError):
		cache.get(REQUEST)


#============================================
def test_clear_removes_entries(tmp_path):
	cache = commit_cache.CommitCache(str(tmp_path))
	cache.set(REQUEST, COMMITS)
	cache.set(FetchRequest("other", date(2024, 1, 1), date(2024, 12, 31)), [])
	(tmp_path / "notes.txt").write_text("keep", encoding="utf-8")
	assert cache.clear() == 2
	assert cache.get(REQUEST) is None
	assert os.listdir(tmp_path) == ["notes.txt"]
	assert cache.clear() == 0


#============================================
def test_default_cache_dir():
	assert commit_cache.resolve_default_cache_dir("/home/u") == os.path.join("/home/u", ".cache", "nenpo")


#============================================
def test_noop_cache():
	cache = commit_cache.NoOpCache()
	cache.set(REQUEST, COMMITS)
	assert cache.get(REQUEST) is None
	assert cache.clear() == 0
