"""Progress reporters for long commit fetches."""

# Standard Library
from datetime import datetime

# PIP3 modules
import rich.console


#============================================
class NoOpProgressReporter:
	"""
	Reporter that ignores every event.
	"""

	def start(self, subject: str) -> None:
		return None

	def progress(self, subject: str, cumulative_count: int) -> None:
		return None

	def finish(self, subject: str, total_count: int) -> None:
		return None

	def error(self, subject: str, message: str) -> None:
		return None


#============================================
class ConsoleProgressReporter:
	"""
	Print timestamped fetch progress lines to the terminal.
	"""

	def __init__(self, console=None, name: str = "nenpo"):
		if console is None:
			console = rich.console.Console(stderr=True)
		self.console = console
		self.name = name

	#============================================
	def _emit(self, message: str, style: str) -> None:
		now_text = datetime.now().strftime("%H:%M:%S")
		self.console.print(f"[{self.name} {now_text}] {message}", style=style, markup=False)

	#============================================
	def start(self, subject: str) -> None:
		self._emit(f"Fetching commits for {subject}...", "cyan")

	#============================================
	def progress(self, subject: str, cumulative_count: int) -> None:
		self._emit(f"  {cumulative_count} commits fetched from {subject}...", "cyan")

	#============================================
	def finish(self, subject: str, total_count: int) -> None:
		self._emit(f"Finished fetching {total_count} commits from {subject}", "green")

	#============================================
	def error(self, subject: str, message: str) -> None:
		self._emit(f"Error fetching commits from {subject}: {message}", "bold red")
