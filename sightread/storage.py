"""Settings and session history persistence.

Settings live in a small YAML file (read with ``yaml.safe_load``); finished
sessions are appended to a JSON-lines history file and never rewritten.

Persistence is best effort.  A missing, unreadable or corrupt file is logged
as a warning and treated as "nothing saved" - it never stops a score from
being generated or a session from being played.
"""

import dataclasses
import json
import logging
import math
import os
import time
import typing
import uuid

import yaml

import sightread.constants
import sightread.pitch


logger = logging.getLogger(__name__)


def clamp_total_notes (value: int) -> int:

	"""Clamp a note count to ``[MIN_TOTAL_NOTES, MAX_TOTAL_NOTES]``."""

	return max(sightread.constants.MIN_TOTAL_NOTES, min(sightread.constants.MAX_TOTAL_NOTES, int(value)))


def _is_number (value: typing.Any) -> bool:

	"""A real, finite number (``bool``, ``inf`` and ``nan`` are not)."""

	return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_note_name (value: typing.Any) -> bool:

	return isinstance(value, str) and value in sightread.pitch.NOTE_NAMES


@dataclasses.dataclass
class Settings:

	"""User preferences that survive between runs."""

	theme_mode: str = sightread.constants.DEFAULT_THEME_MODE
	selected_midi_device: str = ""
	min_note: str = sightread.constants.DEFAULT_MIN_NOTE
	max_note: str = sightread.constants.DEFAULT_MAX_NOTE
	total_notes: int = sightread.constants.DEFAULT_TOTAL_NOTES
	next_seed: int = sightread.constants.DEFAULT_SEED
	updated_at: float = 0.0

	def __post_init__ (self) -> None:

		self.total_notes = clamp_total_notes(self.total_notes)

	@classmethod
	def from_dict (cls, data: typing.Any) -> typing.Optional["Settings"]:

		"""Build settings from a loaded record, or return ``None`` if it is malformed."""

		if not isinstance(data, dict):
			return None

		if data.get("theme_mode") not in sightread.constants.THEME_MODES:
			return None

		if not isinstance(data.get("selected_midi_device"), str):
			return None

		if not _is_note_name(data.get("min_note")) or not _is_note_name(data.get("max_note")):
			return None

		if sightread.pitch.NOTE_NAMES.index(data["min_note"]) > sightread.pitch.NOTE_NAMES.index(data["max_note"]):
			return None

		if not _is_number(data.get("total_notes")) or not _is_number(data.get("updated_at")):
			return None

		# Files written before the seed was saved have no next_seed.
		next_seed = data.get("next_seed", sightread.constants.DEFAULT_SEED)

		if not _is_number(next_seed):
			return None

		return cls(
			theme_mode = data["theme_mode"],
			selected_midi_device = data["selected_midi_device"],
			min_note = data["min_note"],
			max_note = data["max_note"],
			total_notes = int(data["total_notes"]),
			next_seed = int(next_seed),
			updated_at = float(data["updated_at"]),
		)


@dataclasses.dataclass(frozen=True)
class SessionRun:

	"""
	The record of one finished session.  Created once, never modified.

	``improvements`` holds at most ``MAX_IMPROVEMENTS`` entries of the form
	``{"note": "C#4", "misses": 3}``; ``config`` records the range and note
	count the session was played with.
	"""

	id: str
	session_label: str
	created_at: float
	duration_seconds: int
	accuracy: int
	speed_npm: int
	speed_delta: int
	improvements: typing.List[typing.Dict[str, typing.Any]]
	config: typing.Dict[str, typing.Any]

	@classmethod
	def create (
		cls,
		session_label: str,
		duration_seconds: int,
		accuracy: int,
		speed_npm: int,
		speed_delta: int,
		improvements: typing.List[typing.Dict[str, typing.Any]],
		min_note: str,
		max_note: str,
		total_notes: int,
		created_at: typing.Optional[float] = None
	) -> "SessionRun":

		"""Create a run with a fresh id and the current time."""

		return cls(
			id = str(uuid.uuid4()),
			session_label = session_label,
			created_at = time.time() if created_at is None else created_at,
			duration_seconds = duration_seconds,
			accuracy = accuracy,
			speed_npm = speed_npm,
			speed_delta = speed_delta,
			improvements = list(improvements[:sightread.constants.MAX_IMPROVEMENTS]),
			config = {"min_note": min_note, "max_note": max_note, "total_notes": total_notes},
		)

	@classmethod
	def from_dict (cls, data: typing.Any) -> typing.Optional["SessionRun"]:

		"""Build a run from a loaded record, or return ``None`` if it is malformed."""

		if not isinstance(data, dict):
			return None

		if not isinstance(data.get("id"), str) or not isinstance(data.get("session_label"), str):
			return None

		for field in ("created_at", "duration_seconds", "accuracy", "speed_npm", "speed_delta"):
			if not _is_number(data.get(field)):
				return None

		improvements = data.get("improvements")

		if not isinstance(improvements, list):
			return None

		for item in improvements:
			if not isinstance(item, dict) or not isinstance(item.get("note"), str) or not _is_number(item.get("misses")):
				return None

		config = data.get("config")

		if not isinstance(config, dict):
			return None

		if not isinstance(config.get("min_note"), str) or not isinstance(config.get("max_note"), str):
			return None

		if not _is_number(config.get("total_notes")):
			return None

		return cls(
			id = data["id"],
			session_label = data["session_label"],
			created_at = float(data["created_at"]),
			duration_seconds = int(data["duration_seconds"]),
			accuracy = int(data["accuracy"]),
			speed_npm = int(data["speed_npm"]),
			speed_delta = int(data["speed_delta"]),
			improvements = improvements,
			config = config,
		)


class SettingsStore:

	"""Load and save :class:`Settings` as YAML."""

	def __init__ (self, path: str) -> None:

		self.path = path

	def load (self) -> typing.Optional[Settings]:

		"""Return the saved settings, or ``None`` if there are none usable."""

		if not os.path.exists(self.path):
			logger.warning(f"Settings file {self.path} not found. Using defaults.")
			return None

		try:
			with open(self.path, "r", encoding="utf-8") as f:
				data = yaml.safe_load(f)

		except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
			logger.warning(f"Failed to read settings from {self.path}: {e}")
			return None

		settings = Settings.from_dict(data)

		if settings is None:
			logger.warning(f"Ignoring malformed settings in {self.path}")

		return settings

	def save (self, settings: Settings) -> bool:

		"""Write settings, stamping ``updated_at``.  Returns ``False`` on failure."""

		settings.updated_at = time.time()

		try:
			with open(self.path, "w", encoding="utf-8") as f:
				yaml.safe_dump(dataclasses.asdict(settings), f, sort_keys=False)

		except (OSError, yaml.YAMLError) as e:
			logger.warning(f"Failed to save settings to {self.path}: {e}")
			return False

		return True


class SessionHistory:

	"""Append-only history of :class:`SessionRun` records, one JSON object per line."""

	def __init__ (self, path: str) -> None:

		self.path = path

	def add (self, run: SessionRun) -> bool:

		"""Append a run.  Returns ``False`` if it could not be written."""

		try:
			with open(self.path, "a", encoding="utf-8") as f:
				f.write(json.dumps(dataclasses.asdict(run)) + "\n")

		except OSError as e:
			logger.warning(f"Failed to save session run to {self.path}: {e}")
			return False

		return True

	def list (self) -> typing.List[SessionRun]:

		"""All readable runs, newest first."""

		if not os.path.exists(self.path):
			return []

		runs: typing.List[SessionRun] = []

		try:
			with open(self.path, "r", encoding="utf-8") as f:
				lines = f.readlines()

		except (OSError, UnicodeDecodeError) as e:
			logger.warning(f"Failed to read session history from {self.path}: {e}")
			return []

		for number, line in enumerate(lines, 1):

			if not line.strip():
				continue

			try:
				run = SessionRun.from_dict(json.loads(line))
			except json.JSONDecodeError:
				run = None

			if run is None:
				logger.warning(f"Skipping malformed session record on line {number} of {self.path}")
				continue

			runs.append(run)

		runs.sort(key=lambda run: run.created_at, reverse=True)

		return runs

	def find (self, run_id: str) -> typing.Optional[SessionRun]:

		"""Look up a previous run by id, e.g. to replay its configuration."""

		for run in self.list():
			if run.id == run_id:
				return run

		return None
