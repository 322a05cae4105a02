"""Retry with exponential backoff for rate-limited GitHub calls."""

# Standard Library
import dataclasses
import time


TRANSIENT_ERROR_MARKERS = ("rate limit", "rate_limited", "403")


#============================================
class RetriesExhaustedError(RuntimeError):
	"""
	Raised when a transient error persists past the retry budget.
	"""

	def __init__(self, message: str, last_error: Exception):
		super().__init__(message)
		self.last_error = last_error


#============================================
@dataclasses.dataclass(frozen=True)
class RetryPolicy:
	"""
	Backoff parameters: delay starts at initial_delay_seconds and is
	multiplied by backoff_multiplier after each failed attempt.
	"""

	max_retries: int = 3
	initial_delay_seconds: float = 1.0
	backoff_multiplier: float = 2.0

	def __post_init__(self):
		if int(self.max_retries) < 0:
			raise ValueError(f"max_retries must be non-negative; got {self.max_retries}")
		if float(self.initial_delay_seconds) < 0:
			raise ValueError(
				f"initial_delay_seconds must be non-negative; got {self.initial_delay_seconds}"
			)
		if float(self.backoff_multiplier) < 0:
			raise ValueError(
				f"backoff_multiplier must be non-negative; got {self.backoff_multiplier}"
			)


#============================================
def is_transient_error(error: Exception) -> bool:
	"""
	Return True when the error text looks like a rate limit.
	"""
	text = str(error).lower()
	for marker in TRANSIENT_ERROR_MARKERS:
		if marker in text:
			return True
	return False


#============================================
def with_retry(policy: RetryPolicy, operation, log_fn=None, sleep_fn=time.sleep, context: str = ""):
	"""Run operation, retrying transient failures with exponential backoff.

	Non-transient errors propagate immediately. The operation runs at most
	1 + policy.max_retries times.

	Args:
		policy: Retry budget and delays.
		operation: Zero-argument callable performing one network call.
		log_fn: Optional callable receiving one log line per retry.
		sleep_fn: Callable used for backoff waits.
		context: Short label for log lines.

	Returns:
		The operation's return value.
	"""
	delay = float(policy.initial_delay_seconds)
	attempt = 0
	while True:
		try:
			return operation()
		except Exception as error:
			if not is_transient_error(error):
				raise
			if attempt >= policy.max_retries:
				raise RetriesExhaustedError(
					f"Retries exhausted after {policy.max_retries} retries: {error}",
					error,
				) from error
			attempt += 1
			if log_fn is not None:
				label = f"{context}: " if context else ""
				log_fn(
					f"{label}rate limit hit, retry {attempt}/{policy.max_retries} "
					+ f"in {delay:.1f}s ({error})"
				)
			sleep_fn(delay)
			delay *= float(policy.backoff_multiplier)
