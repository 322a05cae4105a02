"""Tests for pipeline/nenpolib/report_generator.py."""

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

from nenpolib import report_generator
from nenpolib.models import Commit
from nenpolib.models import Department
from nenpolib.models import DocumentContent
from nenpolib.models import GitHubActivity
from nenpolib.models import ReportConfig
from nenpolib.report_writers import OutputFormat


#============================================
class StubFetcher:
	def __init__(self):
		self.activity_calls = []
		self.requests = []

	def fetch_activity(self, subject, period_start, period_end):
		self.activity_calls.append((subject, period_start, period_end))
		return GitHubActivity(commits=5, pull_requests=2, issues=1)

	def fetch_commits(self, request):
		self.requests.append(request)
		timestamp = datetime(2024, 6, 1, tzinfo=timezone.utc)
		return [
			Commit(f"{request.subject}-1", "feat: x", "Alice", timestamp, f"{request.subject}/r"),
			Commit(f"{request.subject}-2", "chore: y", "Alice", timestamp, f"{request.subject}/r"),
		]


#============================================
def make_config(output_dir: str) -> ReportConfig:
	return ReportConfig(
		target_github_user="alice",
		default_fiscal_year_start_month=4,
		default_output_format="json",
		output_directory=output_dir,
		departments=(
			Department("Platform", 4, ("acme", "acme-labs"), ("docs/*.md",)),
			Department("Research", 1, (), ()),
		),
	)


#============================================
def test_fiscal_period_april_start():
	assert report_generator.calculate_fiscal_period(2024, 4) == (date(2024, 4, 1), date(2025, 3, 31))


#============================================
def test_fiscal_period_january_start():
	assert report_generator.calculate_fiscal_period(2024, 1) == (date(2024, 1, 1), date(2024, 12, 31))


#============================================
def test_fiscal_period_month_end_and_leap_year():
	assert report_generator.calculate_fiscal_period(2023, 3) == (date(2023, 3, 1), date(2024, 2, 29))
	assert report_generator.calculate_fiscal_period(2024, 12) == (date(2024, 12, 1), date(2025, 11, 30))
	with pytest.raises(ValueError):
		report_generator.calculate_fiscal_period(2024, 13)


#============================================
def test_resolve_fiscal_year():
	assert report_generator.resolve_fiscal_year(4, date(2025, 3, 31)) == 2024
	assert report_generator.resolve_fiscal_year(4, date(2025, 4, 1)) == 2025
	assert report_generator.resolve_fiscal_year(1, date(2025, 1, 1)) == 2025


#============================================
def test_generate_writes_each_department(tmp_path):
	fetcher = StubFetcher()
	documents_seen = []

	def document_reader(patterns):
		documents_seen.append(patterns)
		return [DocumentContent("docs/a.md", "A")] if patterns else []

	generator = report_generator.ReportGenerator(fetcher, document_reader=document_reader)
	written = generator.generate(make_config(str(tmp_path)), year=2024)
	assert [os.path.basename(path) for path in written] == [
		"report-Platform-2024.json",
		"report-Research-2024.json",
	]
	assert [request.subject for request in fetcher.requests] == ["acme", "acme-labs"]
	assert fetcher.requests[0].author == "alice"
	assert fetcher.requests[0].period_start == date(2024, 4, 1)
	assert documents_seen == [["docs/*.md"], []]
	with open(written[0], "r", encoding="utf-8") as handle:
		payload = json.load(handle)
	assert payload["github_activity"]["commits"] == 10
	assert payload["github_activity"]["pull_requests"] == 4
	assert payload["your_commits"] == 4
	assert payload["theme_summary"] == {"feat": 2, "chore": 2}
	assert payload["documents"][0]["file_path"] == "docs/a.md"


#============================================
def test_generate_department_filter_and_format(tmp_path):
	fetcher = StubFetcher()
	generator = report_generator.ReportGenerator(fetcher, document_reader=lambda patterns: [])
	written = generator.generate(
		make_config(str(tmp_path / "out")),
		year=2023,
		department_filter="Research",
		output_format=OutputFormat.MARKDOWN,
	)
	assert [os.path.basename(path) for path in written] == ["report-Research-2023.md"]
	assert fetcher.requests == []
	with open(written[0], "r", encoding="utf-8") as handle:
		text = handle.read()
	assert "- From: 2023-01-01" in text
	assert "- To: 2023-12-31" in text


#============================================
def test_generate_unknown_department(tmp_path):
	generator = report_generator.ReportGenerator(StubFetcher(), document_reader=lambda patterns: [])
	with pytest.raises(RuntimeError, match="No departments found"):
		generator.generate(make_config(str(tmp_path)), year=2024, department_filter="Sales")
