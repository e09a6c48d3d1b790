"""Command-line entry point.

Usage::

    python -m sightread generate --preset "Treble (C4-G5)" --notes 16 --seed 7 -o score.musicxml
    python -m sightread practice --device "Digital Piano" --min-note C3 --max-note C5
    python -m sightread history

Settings (range, note count, device, next seed) are read from
``sightread.yaml`` and updated after each run, so a run without ``--seed``
plays a new exercise every time; finished sessions are appended to
``sightread_history.jsonl``.
"""

import argparse
import asyncio
import logging
import sys
import typing

import sightread.constants
import sightread.pitch
import sightread.score
import sightread.stats
import sightread.storage
import sightread.trainer


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "sightread.yaml"
DEFAULT_HISTORY_PATH = "sightread_history.jsonl"


def _note_name (value: str) -> str:

	"""argparse type for a natural piano note name."""

	name = value.strip().upper()

	if name not in sightread.pitch.NOTE_NAMES:
		raise argparse.ArgumentTypeError(f"{value!r} is not a natural piano note between A0 and C8")

	return name


def _build_parser () -> argparse.ArgumentParser:

	parser = argparse.ArgumentParser(prog="sightread", description="Piano sight-reading trainer")
	parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help=f"Settings file (default: {DEFAULT_CONFIG_PATH})")
	parser.add_argument("--history", default=DEFAULT_HISTORY_PATH, help=f"Session history file (default: {DEFAULT_HISTORY_PATH})")

	commands = parser.add_subparsers(dest="command", required=True)

	for name, help_text in (("generate", "Write a generated score as MusicXML"), ("practice", "Play a generated score on a MIDI keyboard")):

		command = commands.add_parser(name, help=help_text)
		command.add_argument("--preset", choices=sorted(sightread.score.RANGE_PRESETS), help="Named range preset (overrides --min-note/--max-note)")
		command.add_argument("--min-note", type=_note_name, help="Lowest note, e.g. C4")
		command.add_argument("--max-note", type=_note_name, help="Highest note, e.g. G5")
		command.add_argument("--notes", type=int, help=f"Number of notes ({sightread.constants.MIN_TOTAL_NOTES}-{sightread.constants.MAX_TOTAL_NOTES})")
		command.add_argument("--seed", type=int, help="Seed for the score (default: the saved next seed, starting at 1)")
		command.add_argument("--per-measure", type=int, default=sightread.constants.NOTES_PER_MEASURE, help="Notes per measure (default: 4)")

		if name == "generate":
			command.add_argument("-o", "--output", help="Output file (default: stdout)")
		else:
			command.add_argument("--device", help="MIDI input device name (default: saved device, else the first input)")

	commands.add_parser("history", help="List previous sessions")

	return parser


def _resolve_settings (args: argparse.Namespace, store: sightread.storage.SettingsStore) -> typing.Tuple[sightread.storage.Settings, sightread.score.RangeConfig]:

	"""Merge saved settings with command-line overrides."""

	settings = store.load() or sightread.storage.Settings()

	if args.min_note:
		settings.min_note = args.min_note

	if args.max_note:
		settings.max_note = args.max_note

	if args.notes is not None:
		settings.total_notes = sightread.storage.clamp_total_notes(args.notes)

	if args.preset:
		range_config = sightread.score.RANGE_PRESETS[args.preset]
	else:
		range_config = sightread.score.RangeConfig.from_note_names(settings.min_note, settings.max_note)

	return settings, range_config


def _take_seed (args: argparse.Namespace, settings: sightread.storage.Settings) -> int:

	"""The seed for this run; the saved next seed moves on past it."""

	seed = settings.next_seed if args.seed is None else args.seed
	settings.next_seed = seed + 1

	return seed


def _generate (args: argparse.Namespace) -> int:

	store = sightread.storage.SettingsStore(args.config)
	settings, range_config = _resolve_settings(args, store)
	seed = _take_seed(args, settings)

	score = sightread.score.generate(sightread.score.ScoreConfig(
		range_config = range_config,
		total_notes = settings.total_notes,
		seed = seed,
		notes_per_measure = args.per_measure,
	))

	labels = " ".join(sightread.pitch.note_label(key) for key in score.expected_keys)
	logger.info(f"{sightread.stats.session_label(seed)}: {labels}")

	if args.output:
		with open(args.output, "w", encoding="utf-8") as f:
			f.write(score.document)
		logger.info(f"Saved {args.output}")
	else:
		sys.stdout.write(score.document)

	store.save(settings)

	return 0


async def _practice_async (trainer: sightread.trainer.Trainer) -> bool:

	"""Run one exercise.  Returns False if no MIDI input could be opened."""

	await trainer.start()

	try:
		if trainer.midi_in is None:
			return False

		await trainer.run()

	finally:
		await trainer.stop()

	return True


def _practice (args: argparse.Namespace) -> int:

	store = sightread.storage.SettingsStore(args.config)
	settings, range_config = _resolve_settings(args, store)

	trainer = sightread.trainer.Trainer(
		range_config = range_config,
		total_notes = settings.total_notes,
		notes_per_measure = args.per_measure,
		seed = _take_seed(args, settings),
		input_device_name = args.device or settings.selected_midi_device or None,
		history = sightread.storage.SessionHistory(args.history),
	)

	def show_expected (cursor: typing.Optional[int] = None) -> None:
		key = trainer.session.expected_key
		if key is not None:
			print(f"[{trainer.session.cursor + 1}/{len(trainer.session.expected_keys)}] play {sightread.pitch.note_label(key)}")

	def show_result (run: sightread.storage.SessionRun) -> None:
		print(f"\n{run.session_label}  accuracy {run.accuracy}%  speed {run.speed_npm} npm ({run.speed_delta:+d})  time {sightread.stats.format_duration_label(run.duration_seconds)}")
		for item in run.improvements:
			print(f"  practise {item['note']}: missed {item['misses']}x")

	trainer.events.on("advance", show_expected)
	trainer.events.on("missed", lambda label: print(f"  missed {label}"))
	trainer.events.on("finished", show_result)

	trainer.new_score()
	show_expected()

	try:
		if not asyncio.run(_practice_async(trainer)):
			logger.error("No MIDI input available")
			return 1
	except KeyboardInterrupt:
		logger.info("Stopping...")

	if trainer.input_device_name:
		settings.selected_midi_device = trainer.input_device_name

	store.save(settings)

	return 0


def _history (args: argparse.Namespace) -> int:

	runs = sightread.storage.SessionHistory(args.history).list()

	if not runs:
		print("No previous sessions.")
		return 0

	for run in runs:
		created = sightread.stats.format_created_at_label(run.created_at)
		duration = sightread.stats.format_duration_label(run.duration_seconds)
		config = run.config
		print(f"{run.session_label}  {created}  {duration}  {run.accuracy}%  {config['min_note']}-{config['max_note']} x{config['total_notes']}")

	return 0


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the sightread command line.
	"""

	args = _build_parser().parse_args(argv)

	try:
		if args.command == "generate":
			return _generate(args)

		if args.command == "practice":
			return _practice(args)

		return _history(args)

	except ValueError as e:
		logger.error(str(e))
		return 2


if __name__ == "__main__":
	sys.exit(main())
