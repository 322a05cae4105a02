"""Tests for pipeline/nenpolib/github_queries.py."""

# Standard Library
import os
import sys
from datetime import date

import pytest

# add pipeline directory to path for nenpolib imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "pipeline"))

from nenpolib import github_queries


#============================================
def test_activity_query_variables():
	"""Period bounds cover the whole first and last day."""
	document = github_queries.activity_query("acme", date(2024, 4, 1), date(2025, 3, 31))
	assert document["variables"] == {
		"login": "acme",
		"since": "2024-04-01T00:00:00Z",
		"until": "2025-03-31T23:59:59Z",
		"first": 100,
	}
	assert "organization(login: $login)" in document["query"]
	assert "ownerAffiliations: OWNER" in document["query"]
	assert "states: [OPEN, CLOSED, MERGED]" in document["query"]


#============================================
def test_repository_page_query_cursor():
	first = github_queries.repository_page_query("acme", None)
	second = github_queries.repository_page_query("acme", "Y3Vyc29y")
	assert first["query"] == second["query"]
	assert first["variables"]["after"] is None
	assert second["variables"]["after"] == "Y3Vyc29y"
	assert second["variables"]["first"] == github_queries.REPOSITORY_PAGE_SIZE


#============================================
def test_commit_page_query_without_author():
	document = github_queries.repo_commit_page_query(
		"acme", "widgets", date(2024, 1, 1), date(2024, 12, 31), None, None
	)
	assert "authorId" not in document["variables"]
	assert "author: {id:" not in document["query"]
	assert document["variables"]["owner"] == "acme"
	assert document["variables"]["name"] == "widgets"


#============================================
def test_commit_page_query_with_author():
	document = github_queries.repo_commit_page_query(
		"acme", "widgets.js", date(2024, 1, 1), date(2024, 12, 31), "U_1", "C9"
	)
	assert document["variables"]["authorId"] == "U_1"
	assert document["variables"]["after"] == "C9"
	assert "author: {id: $authorId}" in document["query"]


#============================================
def test_user_input_never_enters_query_text():
	"""Logins and names travel only as variables."""
	document = github_queries.repo_commit_page_query(
		"some-org", "some-repo", date(2024, 1, 1), date(2024, 12, 31), None, None
	)
	assert "some-org" not in document["query"]
	assert "some-repo" not in document["query"]


#============================================
def test_invalid_identifiers_rejected():
	"""Logins and repository names that could break out of a query are rejected."""
	for login in ('acme") { x }', "-acme", "ac--me", "", "a" * 40):
		with pytest.raises(github_queries.QueryInputError):
			github_queries.repository_page_query(login, None)
	for repo_name in ("bad name", "..", 'x"y'):
		with pytest.raises(github_queries.QueryInputError):
			github_queries.repo_commit_page_query(
				"acme", repo_name, date(2024, 1, 1), date(2024, 12, 31), None, None
			)


#============================================
def test_author_id_query():
	document = github_queries.author_id_query("octocat")
	assert document["variables"] == {"login": "octocat"}
	assert "user(login: $login)" in document["query"]
