#!/usr/bin/env python3
import argparse
import sys
from datetime import datetime

# PIP3 modules
import rich.console
import rich.table

from nenpolib import command_executor
from nenpolib import commit_cache
from nenpolib import github_fetcher
from nenpolib import pipeline_settings
from nenpolib import progress_reporter
from nenpolib import report_generator
from nenpolib.report_writers import OutputFormat


TOOL_NAME = "generate_report"
RICH_CONSOLE = rich.console.Console(stderr=True)


#============================================
def log_step(message: str) -> None:
	"""
	Print one timestamped progress line.
	"""
	now_text = datetime.now().strftime("%H:%M:%S")
	line = f"[{TOOL_NAME} {now_text}] {message}"
	lower = message.lower()
	style = "cyan"
	if ("failed" in lower) or ("error" in lower):
		style = "bold red"
	elif ("rate limit" in lower) or ("skipping" in lower) or ("warning" in lower):
		style = "yellow"
	elif ("wrote " in lower) or ("collected" in lower) or ("cache hit" in lower):
		style = "green"
	RICH_CONSOLE.print(line, style=style, markup=False)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Generate fiscal-year GitHub activity reports per department."
	)
	subparsers = parser.add_subparsers(dest="action", required=True)
	generate = subparsers.add_parser(
		"generate",
		help="Fetch GitHub activity and write one report per department.",
	)
	generate.add_argument(
		"--config",
		default=pipeline_settings.DEFAULT_SETTINGS_PATH,
		help="Settings file path (TOML or YAML).",
	)
	generate.add_argument(
		"--year",
		type=int,
		default=None,
		help="Fiscal year to report; defaults to the fiscal year containing today.",
	)
	generate.add_argument(
		"--department",
		default=None,
		help="Only generate the report for this department name.",
	)
	generate.add_argument(
		"--format",
		dest="output_format",
		choices=[output_format.value for output_format in OutputFormat],
		type=str.lower,
		default=None,
		help="Output format; defaults to default_output_format in settings.",
	)
	generate.add_argument(
		"--output-dir",
		default=None,
		help="Output directory; defaults to output_directory in settings.",
	)
	generate.add_argument(
		"--cache-dir",
		default=None,
		help="Commit cache directory; defaults to ~/.cache/nenpo.",
	)
	generate.add_argument(
		"--no-cache",
		action="store_true",
		help="Disable the commit cache for this run.",
	)
	generate.add_argument(
		"--clear-cache",
		action="store_true",
		help="Remove cached commit lists before fetching.",
	)
	generate.add_argument(
		"--transport",
		choices=list(pipeline_settings.TRANSPORT_CHOICES),
		default=None,
		help="GraphQL transport: gh CLI or direct HTTP with a token.",
	)
	return parser.parse_args(argv)


#============================================
def build_executor(transport: str, settings: dict):
	"""
	Build the GraphQL executor for the chosen transport.
	"""
	if transport == "http":
		token = pipeline_settings.get_github_token(settings)
		log_step("Using HTTP GraphQL transport with token authentication.")
		return command_executor.HttpGraphQLExecutor(token)
	log_step("Using gh CLI GraphQL transport.")
	return command_executor.GhCommandExecutor()


#============================================
def build_cache(args: argparse.Namespace, settings: dict):
	"""
	Build the commit cache, honoring --no-cache and --clear-cache.
	"""
	if args.no_cache or not pipeline_settings.get_cache_enabled(settings):
		log_step("Commit cache disabled.")
		if args.clear_cache:
			log_step("Skipping --clear-cache: commit cache is disabled.")
		return commit_cache.NoOpCache()
	cache_dir = args.cache_dir
	if not cache_dir:
		cache_dir = pipeline_settings.get_cache_dir(
			settings,
			commit_cache.resolve_default_cache_dir(),
		)
	cache = commit_cache.CommitCache(cache_dir)
	log_step(f"Using commit cache: {cache.cache_dir}")
	if args.clear_cache:
		removed = cache.clear()
		log_step(f"Cleared {removed} cached commit list(s).")
	return cache


#============================================
def render_written_table(paths: list[str]) -> None:
	table = rich.table.Table(title="Generated Reports")
	table.add_column("#", justify="right")
	table.add_column("Path", style="bold green")
	for index, path in enumerate(paths, start=1):
		table.add_row(str(index), path)
	RICH_CONSOLE.print(table)


#============================================
def run_generate(args: argparse.Namespace) -> list[str]:
	settings, settings_path = pipeline_settings.load_settings(args.config)
	log_step(f"Using settings file: {settings_path}")
	config = pipeline_settings.build_report_config(settings)
	if config.target_github_user:
		log_step(f"Filtering commits by author: {config.target_github_user}")

	transport = args.transport or pipeline_settings.get_transport_name(settings)
	executor = build_executor(transport, settings)
	fetcher = github_fetcher.GitHubFetcher(
		executor,
		progress_reporter=progress_reporter.ConsoleProgressReporter(RICH_CONSOLE, TOOL_NAME),
		cache=build_cache(args, settings),
		retry_policy=pipeline_settings.get_retry_policy(settings),
		log_fn=log_step,
	)
	output_format = None
	if args.output_format:
		output_format = OutputFormat.parse(args.output_format)
	generator = report_generator.ReportGenerator(fetcher, log_fn=log_step)
	written = generator.generate(
		config,
		year=args.year,
		department_filter=args.department,
		output_format=output_format,
		output_dir=args.output_dir,
	)
	usage = fetcher.api_usage_snapshot()
	log_step(
		"GitHub API usage: "
		+ f"calls={usage.get('api_call_count', 0)}, "
		+ f"cache_hits={usage.get('cache_hit_count', 0)}, "
		+ f"cache_misses={usage.get('cache_miss_count', 0)}"
	)
	return written


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Run the report generator and return a process exit code.
	"""
	args = parse_args(argv)
	try:
		written = run_generate(args)
	except (RuntimeError, ValueError, OSError) as error:
		log_step(f"Report generation failed: {error}")
		return 1
	render_written_table(written)
	return 0


if __name__ == "__main__":
	sys.exit(main())
