"""
Sightread - a piano sight-reading trainer for MIDI keyboards.

Sightread generates short scores of random natural notes, hands them to a
renderer as MusicXML, and follows your playing on a connected MIDI keyboard
one note at a time.

How it works:

- **Reproducible scores.** A score is a pure function of its range, length
  and seed.  The generator uses its own small 32-bit PRNG with a fixed
  algorithm, so sharing a seed shares the exercise.
- **Pitch, not rhythm.** Every note is a quarter note and no accidentals are
  written - the exercise is reading the staff and finding the key.
- **Press, then release.** Pressing the right key arms the note; releasing
  it moves on.  Wrong presses are reported (and counted) but never skip a
  note or disturb an armed one.
- **Clean input.** Raw MIDI is decoded into presses and releases, with
  repeated note-ons for held keys suppressed and the "all keys up" moment
  reported separately.
- **Results.** Accuracy, notes per minute and the most-missed notes are
  recorded to an append-only history file.

Minimal example:

    ```python
    import sightread

    score = sightread.generate(sightread.ScoreConfig(
        range_config = sightread.RANGE_PRESETS["Treble (C4-G5)"],
        total_notes = 8,
        seed = 42,
    ))

    session = sightread.SightReadingSession()
    session.reset(score.expected_keys)

    session.on_press(score.expected_keys[0])     # → PressOutcome.CORRECT
    session.on_release(score.expected_keys[0])   # → ReleaseOutcome.ADVANCED
    ```

Command line: ``sightread generate``, ``sightread practice`` and
``sightread history`` (see ``sightread --help``).

Package-level exports: ``generate``, ``ScoreConfig``, ``RangeConfig``,
``RANGE_PRESETS``, ``InvalidRangeError``, ``SightReadingSession``,
``InputDecoder``, ``Trainer``.
"""

import sightread.midi_input
import sightread.score
import sightread.session
import sightread.trainer


__version__ = "0.1.0"

generate = sightread.score.generate
ScoreConfig = sightread.score.ScoreConfig
RangeConfig = sightread.score.RangeConfig
RANGE_PRESETS = sightread.score.RANGE_PRESETS
InvalidRangeError = sightread.score.InvalidRangeError
SightReadingSession = sightread.session.SightReadingSession
InputDecoder = sightread.midi_input.InputDecoder
Trainer = sightread.trainer.Trainer
