"""Practice statistics and result summaries.

:class:`PracticeStats` accumulates what happened during one exercise - how
many presses were attempted, how many were correct, which notes were missed
and how long the player took - and turns it into the figures shown on a
results screen: accuracy, speed in notes per minute and the notes that most
need work.
"""

import collections
import datetime
import math
import time
import typing

import sightread.constants


def round_half_up (value: float) -> int:

	"""Round to the nearest integer, halves away from zero for positive values."""

	return int(math.floor(value + 0.5))


def session_label (seed: int) -> str:

	"""A short human-readable label for a session, e.g. ``"#SR-0007"``."""

	return f"#SR-{seed:04d}"


def format_duration_label (seconds: int) -> str:

	"""Format whole seconds as ``M:SS``."""

	minutes, secs = divmod(max(0, int(seconds)), 60)

	return f"{minutes}:{secs:02d}"


def format_created_at_label (created_at: float, now: typing.Optional[datetime.datetime] = None) -> str:

	"""
	Describe when a session happened, relative to ``now``.

	Returns ``"Today HH:MM"``, ``"Yesterday HH:MM"`` or a date such as
	``"Oct 19, 2026"``.
	"""

	try:
		date = datetime.datetime.fromtimestamp(created_at)
	except (OverflowError, OSError, ValueError):
		return "Unknown"

	now = now or datetime.datetime.now()

	if date.date() == now.date():
		return f"Today {date:%H:%M}"

	if date.date() == (now - datetime.timedelta(days=1)).date():
		return f"Yesterday {date:%H:%M}"

	return f"{date:%b} {date.day}, {date.year}"


class PracticeStats:

	"""
	Running totals for a single exercise.

	The timer starts on the first recorded press and stops on :meth:`stop`.

	Parameters:
		clock: Monotonic time source in seconds (injectable for tests).
	"""

	def __init__ (self, clock: typing.Callable[[], float] = time.monotonic) -> None:

		self._clock = clock
		self.reset()

	def reset (self) -> None:

		"""Clear all totals and the timer."""

		self.attempts = 0
		self.correct_attempts = 0
		self.completed_notes = 0
		self.missed: typing.Counter[str] = collections.Counter()

		self._started_at: typing.Optional[float] = None
		self._stopped_at: typing.Optional[float] = None

	@property
	def is_running (self) -> bool:

		return self._started_at is not None and self._stopped_at is None

	def record_press (self, correct: bool, label: str) -> None:

		"""Count one attempt; a wrong press is charged to the pressed note's label."""

		if self._started_at is None:
			self._started_at = self._clock()

		self.attempts += 1

		if correct:
			self.correct_attempts += 1
		else:
			self.missed[label] += 1

	def record_completed (self) -> None:

		self.completed_notes += 1

	def stop (self) -> None:

		if self.is_running:
			self._stopped_at = self._clock()

	@property
	def elapsed_seconds (self) -> float:

		if self._started_at is None:
			return 0.0

		end = self._stopped_at if self._stopped_at is not None else self._clock()

		return end - self._started_at

	@property
	def duration_seconds (self) -> int:

		return int(self.elapsed_seconds)

	@property
	def accuracy (self) -> int:

		"""Percentage of presses that were correct; 100 before any press."""

		if self.attempts == 0:
			return 100

		return round_half_up(self.correct_attempts / self.attempts * 100)

	@property
	def speed_npm (self) -> int:

		"""Completed notes per minute over the whole-second duration."""

		duration = self.duration_seconds

		if duration == 0:
			return 0

		return round_half_up(self.completed_notes / duration * 60)

	@property
	def speed_delta (self) -> int:

		return self.speed_npm - sightread.constants.BASELINE_SPEED_NPM

	def improvements (self, limit: int = sightread.constants.MAX_IMPROVEMENTS) -> typing.List[typing.Dict[str, typing.Any]]:

		"""The most-missed notes, most misses first (ties keep first-missed order)."""

		ranked = sorted(self.missed.items(), key=lambda item: item[1], reverse=True)

		return [{"note": note, "misses": misses} for note, misses in ranked[:limit]]
