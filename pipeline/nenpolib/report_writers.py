"""Render a Report as Markdown, JSON or HTML text."""

# Standard Library
import enum
import html
import json
import os

from nenpolib.commit_theme import sorted_theme_counts
from nenpolib.models import Report


#============================================
class OutputFormat(enum.Enum):
	MARKDOWN = "markdown"
	JSON = "json"
	HTML = "html"

	#============================================
	@classmethod
	def parse(cls, text: str) -> "OutputFormat":
		"""
		Parse a format name case-insensitively.
		"""
		value = str(text or "").strip().lower()
		for output_format in cls:
			if output_format.value == value:
				return output_format
		choices = ", ".join(output_format.value for output_format in cls)
		raise RuntimeError(f"Unknown output format: {text!r} (expected one of: {choices})")

	#============================================
	@property
	def extension(self) -> str:
		return OUTPUT_EXTENSIONS[self]


OUTPUT_EXTENSIONS = {
	OutputFormat.MARKDOWN: "md",
	OutputFormat.JSON: "json",
	OutputFormat.HTML: "html",
}


#============================================
def render_markdown(report: Report) -> str:
	lines = [
		f"# Annual Report {report.year}",
		"",
		f"## {report.department_name}",
		"",
		"### Period",
		"",
		f"- From: {report.period_start.isoformat()}",
		f"- To: {report.period_end.isoformat()}",
		"",
		"### Organization Activity Summary",
		"",
		f"- Total Commits: {report.activity.commits}",
		f"- Pull Requests: {report.activity.pull_requests}",
		f"- Issues: {report.activity.issues}",
		f"- Reviews: {report.activity.reviews}",
		"",
		"### Your Activity",
		"",
		f"- Your Commits: {report.commit_count}",
		"",
	]
	if report.theme_summary:
		lines.append("#### Commit Themes")
		lines.append("")
		for theme, count in sorted_theme_counts(report.theme_summary):
			lines.append(f"- {theme.display_name}: {count}")
		lines.append("")
	if report.documents:
		lines.append("### Local Documents")
		lines.append("")
		for document in report.documents:
			lines.append(f"- {document.file_path}")
		lines.append("")
	return "\n".join(lines)


#============================================
def report_to_dict(report: Report) -> dict:
	"""
	Convert a report into a JSON-ready mapping.
	"""
	return {
		"year": report.year,
		"department_name": report.department_name,
		"period_from": report.period_start.isoformat(),
		"period_to": report.period_end.isoformat(),
		"github_activity": {
			"commits": report.activity.commits,
			"pull_requests": report.activity.pull_requests,
			"issues": report.activity.issues,
			"reviews": report.activity.reviews,
		},
		"your_commits": report.commit_count,
		"theme_summary": {
			theme.short_name: count
			for theme, count in sorted_theme_counts(report.theme_summary)
		},
		"documents": [
			{"file_path": document.file_path, "content": document.content}
			for document in report.documents
		],
	}


#============================================
def render_json(report: Report) -> str:
	return json.dumps(report_to_dict(report), ensure_ascii=False, indent=2) + "\n"


HTML_STYLE = (
	"body { font-family: sans-serif; max-width: 48rem; margin: 2rem auto; color: #222; }\n"
	+ "h1 { border-bottom: 2px solid #444; }\n"
	+ "h2 { border-bottom: 1px solid #999; }\n"
	+ "ul { padding-left: 1.5rem; }\n"
)


#============================================
def render_html(report: Report) -> str:
	"""
	Render a standalone HTML page; all interpolated text is escaped.
	"""
	esc = html.escape
	parts = [
		"<!DOCTYPE html>",
		'<html lang="ja">',
		"<head>",
		'<meta charset="utf-8">',
		f"<title>Annual Report {report.year} - {esc(report.department_name)}</title>",
		f"<style>\n{HTML_STYLE}</style>",
		"</head>",
		"<body>",
		f"<h1>Annual Report {report.year}</h1>",
		f"<h2>{esc(report.department_name)}</h2>",
		"<h3>Period</h3>",
		"<ul>",
		f"<li>From: {report.period_start.isoformat()}</li>",
		f"<li>To: {report.period_end.isoformat()}</li>",
		"</ul>",
		"<h3>Organization Activity Summary</h3>",
		"<ul>",
		f"<li>Total Commits: {report.activity.commits}</li>",
		f"<li>Pull Requests: {report.activity.pull_requests}</li>",
		f"<li>Issues: {report.activity.issues}</li>",
		f"<li>Reviews: {report.activity.reviews}</li>",
		"</ul>",
		"<h3>Your Activity</h3>",
		"<ul>",
		f"<li>Your Commits: {report.commit_count}</li>",
		"</ul>",
	]
	if report.theme_summary:
		parts.append("<h4>Commit Themes</h4>")
		parts.append("<ul>")
		for theme, count in sorted_theme_counts(report.theme_summary):
			parts.append(f"<li>{esc(theme.display_name)}: {count}</li>")
		parts.append("</ul>")
	if report.documents:
		parts.append("<h3>Local Documents</h3>")
		parts.append("<ul>")
		for document in report.documents:
			parts.append(f"<li>{esc(document.file_path)}</li>")
		parts.append("</ul>")
	parts.append("</body>")
	parts.append("</html>")
	return "\n".join(parts) + "\n"


RENDERERS = {
	OutputFormat.MARKDOWN: render_markdown,
	OutputFormat.JSON: render_json,
	OutputFormat.HTML: render_html,
}


#============================================
def write_report(report: Report, output_path: str, output_format: OutputFormat) -> str:
	"""
	Render and write one report; return the written path.
	"""
	text = RENDERERS[output_format](report)
	dir_name = os.path.dirname(os.path.abspath(output_path))
	try:
		os.makedirs(dir_name, exist_ok=True)
		with open(output_path, "w", encoding="utf-8") as handle:
			handle.write(text)
	except OSError as error:
		raise RuntimeError(f"Cannot write report {output_path}: {error}") from error
	return output_path
