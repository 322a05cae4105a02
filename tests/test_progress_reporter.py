"""Tests for pipeline/nenpolib/progress_reporter.py."""

# Standard Library
import io
import os
import sys

import rich.console

# add pipeline directory to path for nenpolib imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "pipeline"))

from nenpolib import progress_reporter


#============================================
def test_console_reporter_lines():
	buffer = io.StringIO()
	console = rich.console.Console(file=buffer, width=200, color_system=None)
	reporter = progress_reporter.ConsoleProgressReporter(console, name="nenpo")
	reporter.start("acme")
	reporter.progress("acme", 100)
	reporter.finish("acme", 142)
	reporter.error("acme", "boom [x]")
	lines = buffer.getvalue().splitlines()
	assert len(lines) == 4
	assert lines[0].startswith("[nenpo ")
	assert lines[0].endswith("Fetching commits for acme...")
	assert lines[1].endswith("100 commits fetched from acme...")
	assert lines[2].endswith("Finished fetching 142 commits from acme")
	assert lines[3].endswith("boom [x]")


#============================================
def test_noop_reporter_accepts_all_events():
	reporter = progress_reporter.NoOpProgressReporter()
	reporter.start("acme")
	reporter.progress("acme", 1)
	reporter.finish("acme", 1)
	reporter.error("acme", "x")
