"""Deterministic sight-reading score generation.

A score is a run of quarter notes drawn uniformly from the natural pitches of
a key range, grouped into measures and serialized as a MusicXML 3.1 partwise
document.  Generation is a pure function of its :class:`ScoreConfig`: the
same range, measure size, note count and seed always produce the same
document text and the same expected key sequence, so a seed can be shared to
replay an exercise.

Rhythm is deliberately uniform (quarter notes only) and no accidentals are
written - the exercise is about reading pitch.

Reproducibility is defined over the pitch sequence: any generator using the
same 32-bit draw sequence picks the same notes for a seed.  The document
text itself is this module's own layout (``ElementTree.indent`` with two
spaces, every element on its own line) and the time signature is
``notes_per_measure``/4, so it is only byte-identical to another writer's
output if that writer uses the same layout.  Compare documents by parsing
them, not as strings.

Example:
	```python
	config = ScoreConfig(
		range_config = RANGE_PRESETS["Treble (C4-G5)"],
		total_notes = 20,
		seed = 7,
	)

	score = generate(config)
	score.expected_keys   # → 20 key numbers, e.g. [67, 60, 74, ...]
	score.document        # → MusicXML text for a renderer
	```
"""

import dataclasses
import logging
import typing
import xml.etree.ElementTree

import sightread.constants
import sightread.pitch
import sightread.random_source


logger = logging.getLogger(__name__)


CLEF_SIGNS: typing.Dict[str, typing.Tuple[str, int]] = {
	"treble": ("G", 2),
	"bass": ("F", 4),
}

MIDDLE_C = 60

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
XML_DOCTYPE = (
	'<!DOCTYPE score-partwise PUBLIC "-//Recordare//DTD MusicXML 3.1 Partwise//EN"\n'
	'  "http://www.musicxml.org/dtds/partwise.dtd">'
)

PART_ID = "P1"
PART_NAME = "Music"


class InvalidRangeError(ValueError):

	"""Raised when a range configuration contains no natural pitches."""


@dataclasses.dataclass(frozen=True)
class RangeConfig:

	"""
	An inclusive key-number range and the clef used to display it.

	Parameters:
		min_key: Lowest eligible key number (inclusive).
		max_key: Highest eligible key number (inclusive).
		clef: ``"treble"`` or ``"bass"``.
	"""

	min_key: int
	max_key: int
	clef: str = "treble"

	def __post_init__ (self) -> None:

		if self.min_key > self.max_key:
			raise ValueError(f"min_key ({self.min_key}) cannot be greater than max_key ({self.max_key})")

		if self.clef not in CLEF_SIGNS:
			raise ValueError(f"Unknown clef: {self.clef!r}. Expected 'treble' or 'bass'.")

	@classmethod
	def from_note_names (cls, min_note: str, max_note: str) -> "RangeConfig":

		"""
		Build a range from two natural note names such as ``"A0"`` and ``"C8"``.

		The bass clef is chosen when the midpoint of the range lies below
		middle C, otherwise the treble clef.
		"""

		min_key = sightread.pitch.parse_note_name(min_note).key_number
		max_key = sightread.pitch.parse_note_name(max_note).key_number

		clef = "bass" if (min_key + max_key) / 2 < MIDDLE_C else "treble"

		return cls(min_key=min_key, max_key=max_key, clef=clef)

	def pitch_pool (self) -> typing.List[sightread.pitch.Pitch]:

		"""The natural pitches eligible for generation, ascending."""

		return sightread.pitch.natural_pitches_in_range(self.min_key, self.max_key)


RANGE_PRESETS: typing.Dict[str, RangeConfig] = {
	"Treble (C4-G5)": RangeConfig(min_key=60, max_key=79, clef="treble"),
	"Treble Wide (A3-C6)": RangeConfig(min_key=57, max_key=84, clef="treble"),
	"Bass (E2-C4)": RangeConfig(min_key=40, max_key=60, clef="bass"),
}


@dataclasses.dataclass(frozen=True)
class ScoreConfig:

	"""Everything that determines a generated score."""

	range_config: RangeConfig
	total_notes: int
	seed: int
	notes_per_measure: int = sightread.constants.NOTES_PER_MEASURE


@dataclasses.dataclass(frozen=True)
class GeneratedScore:

	"""
	A generated exercise.

	``document`` is the MusicXML text handed to a renderer; ``expected_keys``
	is the ordered key sequence the player must press.  Measure boundaries
	exist only in the document and have no effect on matching.
	"""

	document: str
	expected_keys: typing.Tuple[int, ...]


def _measure_sizes (total_notes: int, notes_per_measure: int) -> typing.List[int]:

	"""Split a note count into measures; the last may be shorter."""

	full, remainder = divmod(total_notes, notes_per_measure)
	sizes = [notes_per_measure] * full

	if remainder:
		sizes.append(remainder)

	return sizes


def _text_element (parent: xml.etree.ElementTree.Element, tag: str, text: typing.Any) -> xml.etree.ElementTree.Element:

	element = xml.etree.ElementTree.SubElement(parent, tag)
	element.text = str(text)
	return element


def _build_attributes (measure: xml.etree.ElementTree.Element, clef: str, beats: int) -> None:

	"""Append divisions, key, time and clef declarations to the first measure."""

	attributes = xml.etree.ElementTree.SubElement(measure, "attributes")
	_text_element(attributes, "divisions", sightread.constants.MUSICXML_DIVISIONS)

	key = xml.etree.ElementTree.SubElement(attributes, "key")
	_text_element(key, "fifths", 0)

	time_signature = xml.etree.ElementTree.SubElement(attributes, "time")
	_text_element(time_signature, "beats", beats)
	_text_element(time_signature, "beat-type", sightread.constants.BEAT_TYPE)

	sign, line = CLEF_SIGNS[clef]
	clef_element = xml.etree.ElementTree.SubElement(attributes, "clef")
	_text_element(clef_element, "sign", sign)
	_text_element(clef_element, "line", line)


def _build_note (measure: xml.etree.ElementTree.Element, pitch: sightread.pitch.Pitch) -> None:

	note = xml.etree.ElementTree.SubElement(measure, "note")

	pitch_element = xml.etree.ElementTree.SubElement(note, "pitch")
	_text_element(pitch_element, "step", pitch.step)
	_text_element(pitch_element, "octave", pitch.octave)

	_text_element(note, "duration", sightread.constants.MUSICXML_DIVISIONS)
	_text_element(note, "type", "quarter")


def _serialize (root: xml.etree.ElementTree.Element) -> str:

	xml.etree.ElementTree.indent(root, space="  ")
	body = xml.etree.ElementTree.tostring(root, encoding="unicode")

	return "\n".join([XML_DECLARATION, XML_DOCTYPE, body]) + "\n"


def generate (config: ScoreConfig) -> GeneratedScore:

	"""
	Generate a score from a configuration.

	Pitches are drawn independently and uniformly from the range's pitch pool,
	in document order, with one :class:`~sightread.random_source.SeededRandom`
	seeded from ``config.seed``.

	Raises:
		ValueError: If ``total_notes`` or ``notes_per_measure`` is below 1.
		InvalidRangeError: If the range contains no natural pitches.
	"""

	if config.total_notes < 1:
		raise ValueError(f"total_notes must be at least 1 (got {config.total_notes})")

	if config.notes_per_measure < 1:
		raise ValueError(f"notes_per_measure must be at least 1 (got {config.notes_per_measure})")

	range_config = config.range_config
	pool = range_config.pitch_pool()

	if not pool:
		raise InvalidRangeError(
			f"No natural pitches between key {range_config.min_key} and key {range_config.max_key}"
		)

	rng = sightread.random_source.SeededRandom(config.seed)

	root = xml.etree.ElementTree.Element("score-partwise", version="3.1")

	part_list = xml.etree.ElementTree.SubElement(root, "part-list")
	score_part = xml.etree.ElementTree.SubElement(part_list, "score-part", id=PART_ID)
	_text_element(score_part, "part-name", PART_NAME)

	part = xml.etree.ElementTree.SubElement(root, "part", id=PART_ID)

	expected_keys: typing.List[int] = []

	for index, count in enumerate(_measure_sizes(config.total_notes, config.notes_per_measure)):

		measure = xml.etree.ElementTree.SubElement(part, "measure", number=str(index + 1))

		if index == 0:
			_build_attributes(measure, range_config.clef, config.notes_per_measure)

		for _ in range(count):
			pitch = rng.choice(pool)
			_build_note(measure, pitch)
			expected_keys.append(pitch.key_number)

	logger.debug(
		f"Generated {len(expected_keys)} notes from a pool of {len(pool)} "
		f"(keys {range_config.min_key}-{range_config.max_key}, seed {config.seed})"
	)

	return GeneratedScore(document=_serialize(root), expected_keys=tuple(expected_keys))
