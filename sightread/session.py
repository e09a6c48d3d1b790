"""Match key presses against an expected note sequence.

For each expected note the player must:

1. Press the correct key - the note becomes *armed*.
2. Release that key - the cursor advances to the next note.

A wrong press is reported but never moves the cursor, and while a note is
armed, further presses (right or wrong) never displace it.  Only releasing
the armed key advances.

The session is always in exactly one of three states, each a small frozen
dataclass:

- :class:`AwaitingInput` - waiting for the key at ``cursor``.
- :class:`Armed` - the key at ``cursor`` is down, waiting for its release.
- :class:`Complete` - every expected note has been played.

Calling :meth:`SightReadingSession.reset` starts a new *epoch*: the state is
replaced wholesale, so nothing armed in the previous score carries over.
"""

import dataclasses
import enum
import typing


class PressOutcome (enum.Enum):

	"""Result of a key press."""

	CORRECT = "correct"
	WRONG = "wrong"
	COMPLETE = "complete"


class ReleaseOutcome (enum.Enum):

	"""Result of a key release."""

	ADVANCED = "advanced"
	COMPLETE = "complete"
	IDLE = "idle"


@dataclasses.dataclass(frozen=True)
class AwaitingInput:

	cursor: int


@dataclasses.dataclass(frozen=True)
class Armed:

	cursor: int
	key: int


@dataclasses.dataclass(frozen=True)
class Complete:
	pass


SessionState = typing.Union[AwaitingInput, Armed, Complete]


class SightReadingSession:

	"""
	Cursor-based state machine for one sight-reading exercise.

	Example:
		```python
		session = SightReadingSession()
		session.reset([60, 62])

		session.on_press(60)     # → PressOutcome.CORRECT
		session.on_press(61)     # → PressOutcome.WRONG (60 stays armed)
		session.on_release(60)   # → ReleaseOutcome.ADVANCED
		session.on_press(62)     # → PressOutcome.CORRECT
		session.on_release(62)   # → ReleaseOutcome.COMPLETE
		```
	"""

	def __init__ (self) -> None:

		"""Create an empty, already complete session.  Call :meth:`reset` to load notes."""

		self._expected_keys: typing.Tuple[int, ...] = ()
		self._state: SessionState = Complete()
		self._epoch = 0

	@property
	def expected_keys (self) -> typing.Tuple[int, ...]:

		return self._expected_keys

	@property
	def state (self) -> SessionState:

		return self._state

	@property
	def epoch (self) -> int:

		"""Incremented on every :meth:`reset`."""

		return self._epoch

	@property
	def cursor (self) -> int:

		"""Index of the next note to play; equals ``len(expected_keys)`` once complete."""

		if isinstance(self._state, Complete):
			return len(self._expected_keys)

		return self._state.cursor

	@property
	def expected_key (self) -> typing.Optional[int]:

		"""The key number at the cursor, or ``None`` once complete."""

		if isinstance(self._state, Complete):
			return None

		return self._expected_keys[self._state.cursor]

	@property
	def is_complete (self) -> bool:

		return isinstance(self._state, Complete)

	def reset (self, expected_keys: typing.Sequence[int]) -> None:

		"""Load a new key sequence and start a new epoch at cursor 0."""

		self._expected_keys = tuple(expected_keys)
		self._epoch += 1
		self._state = AwaitingInput(cursor=0) if self._expected_keys else Complete()

	def on_press (self, key: int) -> PressOutcome:

		"""Handle a key press."""

		state = self._state

		if isinstance(state, Complete):
			return PressOutcome.COMPLETE

		if isinstance(state, Armed):
			return PressOutcome.CORRECT if key == state.key else PressOutcome.WRONG

		if key == self._expected_keys[state.cursor]:
			self._state = Armed(cursor=state.cursor, key=key)
			return PressOutcome.CORRECT

		return PressOutcome.WRONG

	def on_release (self, key: int) -> ReleaseOutcome:

		"""Handle a key release.  Only the armed key's release advances the cursor."""

		state = self._state

		if not isinstance(state, Armed) or key != state.key:
			return ReleaseOutcome.IDLE

		cursor = state.cursor + 1

		if cursor >= len(self._expected_keys):
			self._state = Complete()
			return ReleaseOutcome.COMPLETE

		self._state = AwaitingInput(cursor=cursor)
		return ReleaseOutcome.ADVANCED
