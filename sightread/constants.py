"""Shared constants for score generation, MIDI decoding and settings.

MusicXML timing uses **4 divisions per quarter note**; every generated note
is a quarter note, so each note's ``<duration>`` is ``MUSICXML_DIVISIONS``.

Status bytes carry the command in the upper nibble and the channel in the
lower nibble.  Only the two key commands are of interest here:
- `MIDI_NOTE_ON = 0x90` - a key was pressed (velocity 0 means released)
- `MIDI_NOTE_OFF = 0x80` - a key was released
"""

# Score layout

MUSICXML_DIVISIONS = 4
NOTES_PER_MEASURE = 4
BEAT_TYPE = 4

# MIDI protocol

MIDI_COMMAND_MASK = 0xF0
MIDI_NOTE_ON = 0x90
MIDI_NOTE_OFF = 0x80
MIDI_MESSAGE_LENGTH = 3

# Settings

MIN_TOTAL_NOTES = 4
MAX_TOTAL_NOTES = 200
DEFAULT_TOTAL_NOTES = 20
DEFAULT_MIN_NOTE = "A0"
DEFAULT_MAX_NOTE = "C8"
THEME_MODES = ("light", "dark", "system")
DEFAULT_THEME_MODE = "system"
DEFAULT_SEED = 1

# Results

BASELINE_SPEED_NPM = 36
MAX_IMPROVEMENTS = 2
