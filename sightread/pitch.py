"""Natural pitch model and key-number conversions.

Key numbers follow the MIDI convention: **C4 = 60** (Middle C), and octave
``n`` starts at key number ``(n + 1) * 12``.  Only natural pitches (the seven
white-key note names) are representable as a :class:`Pitch`; the trainer never
writes accidentals into a score.

Module-level constants:
- `NATURAL_STEPS`: The seven step names in ascending order within an octave
- `STEP_OFFSETS`: Maps each step to its semitone offset above C
- `NOTE_NAMES`: Natural note names of an 88-key piano, ``"A0"`` to ``"C8"``
"""

import dataclasses
import re
import typing


NATURAL_STEPS: typing.Tuple[str, ...] = ("C", "D", "E", "F", "G", "A", "B")

STEP_OFFSETS: typing.Dict[str, int] = {
	"C": 0,
	"D": 2,
	"E": 4,
	"F": 5,
	"G": 7,
	"A": 9,
	"B": 11,
}

# Chromatic labels used when describing any key, including black keys.
PC_TO_LABEL: typing.List[str] = [
	"C",
	"C#",
	"D",
	"D#",
	"E",
	"F",
	"F#",
	"G",
	"G#",
	"A",
	"A#",
	"B",
]

MIN_OCTAVE = 0
MAX_OCTAVE = 8

PIANO_LOWEST_KEY = 21
PIANO_HIGHEST_KEY = 108

_NOTE_NAME_PATTERN = re.compile(r"^([A-Ga-g])(-?\d+)$")


@dataclasses.dataclass(frozen=True)
class Pitch:

	"""A natural pitch: a step name and an octave number.

	Example:
		```python
		middle_c = Pitch("C", 4)
		middle_c.key_number   # → 60
		str(middle_c)         # → "C4"
		```
	"""

	step: str
	octave: int

	def __post_init__ (self) -> None:

		if self.step not in STEP_OFFSETS:
			raise ValueError(f"Unknown step: {self.step!r}. Expected one of {', '.join(NATURAL_STEPS)}.")

	@property
	def key_number (self) -> int:

		"""The MIDI key number of this pitch."""

		return key_number_of(self)

	def __str__ (self) -> str:

		return f"{self.step}{self.octave}"


def key_number_of (pitch: Pitch) -> int:

	"""Return the key number for a pitch: ``(octave + 1) * 12 + offset``."""

	return (pitch.octave + 1) * 12 + STEP_OFFSETS[pitch.step]


def natural_pitches_in_range (min_key: int, max_key: int) -> typing.List[Pitch]:

	"""
	Return every natural pitch whose key number lies in ``[min_key, max_key]``.

	Octaves 0 through 8 are enumerated, so the result is ascending by key
	number.  Keys with no natural pitch (black keys, or numbers outside the
	enumerated octaves) are simply absent - a range that falls between two
	natural pitches yields an empty list.  It is up to the caller to decide
	whether an empty pool is acceptable.

	Example:
		```python
		natural_pitches_in_range(60, 62)   # → [Pitch("C", 4), Pitch("D", 4)]
		natural_pitches_in_range(61, 61)   # → []
		```
	"""

	pitches: typing.List[Pitch] = []

	for octave in range(MIN_OCTAVE, MAX_OCTAVE + 1):
		for step in NATURAL_STEPS:
			pitch = Pitch(step, octave)
			if min_key <= key_number_of(pitch) <= max_key:
				pitches.append(pitch)

	return pitches


def pitch_from_key_number (key: int) -> Pitch:

	"""Return the natural pitch for a key number.

	Raises:
		ValueError: If the key number is a black key.
	"""

	octave, offset = divmod(key, 12)

	for step, step_offset in STEP_OFFSETS.items():
		if step_offset == offset:
			return Pitch(step, octave - 1)

	raise ValueError(f"Key number {key} is not a natural pitch")


def parse_note_name (name: str) -> Pitch:

	"""Parse a natural note name such as ``"C4"`` or ``"a0"``.

	Raises:
		ValueError: If the name is malformed or carries an accidental.
	"""

	match = _NOTE_NAME_PATTERN.match(name.strip())

	if match is None:
		raise ValueError(f"Invalid note name: {name!r}. Expected e.g. 'C4', 'A0', 'G5'.")

	return Pitch(match.group(1).upper(), int(match.group(2)))


def note_label (key: int) -> str:

	"""Label any key number, black keys included (``61`` → ``"C#4"``)."""

	octave, pc = divmod(key, 12)

	return f"{PC_TO_LABEL[pc]}{octave - 1}"


NOTE_NAMES: typing.List[str] = [
	str(pitch) for pitch in natural_pitches_in_range(PIANO_LOWEST_KEY, PIANO_HIGHEST_KEY)
]
