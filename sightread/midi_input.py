"""Decode raw MIDI input into discrete key events.

A keyboard sends three-byte channel messages ``(status, key, velocity)``.  The
upper nibble of ``status`` is the command: ``0x9`` (note on) for a press and
``0x8`` (note off) for a release.  A note on with velocity 0 is a release by
protocol convention.  The lower nibble (channel) is ignored.

:class:`InputDecoder` tracks which keys are currently held so that repeated
note-on messages for a key that is already down produce a single press, and
emits :class:`AllReleased` when the last held key comes up.  Anything else a
device sends - clock, active sensing, controllers, truncated messages - is
background noise and is dropped without complaint.
"""

import dataclasses
import logging
import typing

import mido

import sightread.constants


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class KeyPress:

	"""A key went down."""

	key: int
	velocity: int


@dataclasses.dataclass(frozen=True)
class KeyRelease:

	"""A key came up."""

	key: int


@dataclasses.dataclass(frozen=True)
class AllReleased:

	"""The last held key came up."""


KeyEvent = typing.Union[KeyPress, KeyRelease, AllReleased]


class InputDecoder:

	"""
	Turn a stream of raw MIDI messages into press/release events.

	Example:
		```python
		decoder = InputDecoder()

		decoder.decode([0x90, 60, 64])   # → [KeyPress(60, 64)]
		decoder.decode([0x90, 60, 64])   # → []  (already held)
		decoder.decode([0x80, 60, 0])    # → [KeyRelease(60), AllReleased()]
		```
	"""

	def __init__ (self) -> None:

		"""Start with no keys held."""

		self.held: typing.Set[int] = set()
		self.closed = False

	def decode (self, data: typing.Sequence[int]) -> typing.List[KeyEvent]:

		"""
		Decode one raw message and return the events it produces (possibly none).

		Parameters:
			data: The message bytes, ``(status, key, velocity)``.
		"""

		if self.closed:
			return []

		if len(data) < sightread.constants.MIDI_MESSAGE_LENGTH:
			logger.debug(f"Dropping short MIDI message: {list(data)}")
			return []

		status, key, velocity = data[0], data[1], data[2]
		command = status & sightread.constants.MIDI_COMMAND_MASK

		if command == sightread.constants.MIDI_NOTE_OFF or (command == sightread.constants.MIDI_NOTE_ON and velocity == 0):
			return self._release(key)

		if command == sightread.constants.MIDI_NOTE_ON:
			return self._press(key, velocity)

		logger.debug(f"Ignoring MIDI status 0x{status:02X}")
		return []

	def decode_message (self, message: mido.Message) -> typing.List[KeyEvent]:

		"""Decode a ``mido`` message by way of its raw bytes."""

		return self.decode(message.bytes())

	def close (self) -> None:

		"""
		Forget all held keys and stop producing events.

		No release events are synthesized for keys still held.
		"""

		self.held.clear()
		self.closed = True

	def _press (self, key: int, velocity: int) -> typing.List[KeyEvent]:

		if key in self.held:
			return []

		self.held.add(key)

		return [KeyPress(key=key, velocity=velocity)]

	def _release (self, key: int) -> typing.List[KeyEvent]:

		events: typing.List[KeyEvent] = [KeyRelease(key=key)]

		if key in self.held:
			self.held.discard(key)

			if not self.held:
				events.append(AllReleased())

		return events
