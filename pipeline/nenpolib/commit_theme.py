"""Conventional-commit theme classification."""

# Standard Library
import enum
import re


SCOPE_SUFFIX_RE = re.compile(r"\([^)]*\)$")


#============================================
class CommitTheme(enum.Enum):
	FEAT = "feat"
	FIX = "fix"
	DOCS = "docs"
	REFACTOR = "refactor"
	TEST = "test"
	BUILD = "build"
	CI = "ci"
	PERF = "perf"
	STYLE = "style"
	CHORE = "chore"
	OTHER = "other"

	#============================================
	@classmethod
	def from_commit_message(cls, message: str) -> "CommitTheme":
		"""
		Classify a commit by its conventional-commit prefix.

		The text before the first colon is lower-cased and stripped of a
		breaking-change marker and a (scope) suffix, so "Feat(api)!: x"
		maps to FEAT. Anything unrecognized is OTHER.
		"""
		text = (message or "").lower()
		if ":" not in text:
			return cls.OTHER
		prefix = text.split(":", 1)[0].strip()
		prefix = prefix.rstrip("!")
		prefix = SCOPE_SUFFIX_RE.sub("", prefix).strip()
		for theme in cls:
			if theme is cls.OTHER:
				continue
			if theme.value == prefix:
				return theme
		return cls.OTHER

	#============================================
	@property
	def short_name(self) -> str:
		return self.value

	#============================================
	@property
	def display_name(self) -> str:
		return THEME_DISPLAY_NAMES[self]


THEME_DISPLAY_NAMES = {
	CommitTheme.FEAT: "New Features",
	CommitTheme.FIX: "Bug Fixes",
	CommitTheme.DOCS: "Documentation",
	CommitTheme.REFACTOR: "Refactoring",
	CommitTheme.TEST: "Tests",
	CommitTheme.BUILD: "Build System",
	CommitTheme.CI: "CI/CD",
	CommitTheme.PERF: "Performance",
	CommitTheme.STYLE: "Code Style",
	CommitTheme.CHORE: "Chores",
	CommitTheme.OTHER: "Other",
}


#============================================
def build_theme_summary(commits) -> dict:
	"""
	Count commits per theme; themes with no commits are omitted.
	"""
	summary: dict[CommitTheme, int] = {}
	for commit in commits:
		theme = CommitTheme.from_commit_message(commit.message)
		summary[theme] = summary.get(theme, 0) + 1
	return summary


#============================================
def sorted_theme_counts(theme_summary: dict) -> list[tuple[CommitTheme, int]]:
	"""
	Return (theme, count) pairs by descending count, then enum order.
	"""
	order = {theme: index for index, theme in enumerate(CommitTheme)}
	return sorted(
		theme_summary.items(),
		key=lambda item: (-item[1], order[item[0]]),
	)
