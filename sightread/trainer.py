"""Practice orchestration: score, device input, session and statistics.

The :class:`Trainer` wires the core pieces together on a single logical
thread:

	settings → score generator → expected keys → session
	device → input decoder → key events → session → feedback events

MIDI messages arrive on mido's input thread.  They are not processed there;
the port callback tags each message with the session epoch current at arrival
and hands it to the asyncio loop through ``call_soon_threadsafe``.  The loop
then processes messages strictly in arrival order.  Generating a new score
resets the session and starts a new epoch, so any message still queued from
the previous score reaches the decoder (which tracks physical key state) but
is never matched against the new score.

Events emitted on :attr:`Trainer.events`:

- ``"score"`` (GeneratedScore) - a new score was generated.
- ``"feedback"`` (str) - cursor colour hint: ``"correct"``, ``"wrong"`` or ``"idle"``.
- ``"missed"`` (str) - label of a wrongly pressed key, e.g. ``"C#4"``.
- ``"advance"`` (int) - the new cursor index.
- ``"finished"`` (SessionRun) - the exercise was completed.
"""

import asyncio
import logging
import time
import typing

import sightread.constants
import sightread.event_emitter
import sightread.midi_input
import sightread.midi_utils
import sightread.pitch
import sightread.score
import sightread.session
import sightread.stats
import sightread.storage


logger = logging.getLogger(__name__)


class Trainer:

	"""
	Run sight-reading exercises against a MIDI keyboard.

	Example:
		```python
		trainer = Trainer(
			range_config = sightread.score.RANGE_PRESETS["Treble (C4-G5)"],
			total_notes = 20,
			input_device_name = "Digital Piano",
		)

		trainer.events.on("feedback", print)
		trainer.new_score()

		await trainer.start()
		await trainer.run()
		await trainer.stop()
		```
	"""

	def __init__ (
		self,
		range_config: sightread.score.RangeConfig,
		total_notes: int = sightread.constants.DEFAULT_TOTAL_NOTES,
		notes_per_measure: int = sightread.constants.NOTES_PER_MEASURE,
		seed: int = 1,
		input_device_name: typing.Optional[str] = None,
		history: typing.Optional[sightread.storage.SessionHistory] = None,
		clock: typing.Callable[[], float] = time.monotonic
	) -> None:

		"""
		Parameters:
			range_config: Key range and clef to generate from.
			total_notes: Notes per exercise.
			notes_per_measure: Notes per measure in the generated document.
			seed: Seed for the first score.
			input_device_name: MIDI input port to open in :meth:`start`
				(falls back to the first available port).
			history: Where finished sessions are recorded (optional).
			clock: Monotonic time source for the session timer.
		"""

		self.range_config = range_config
		self.total_notes = total_notes
		self.notes_per_measure = notes_per_measure
		self.seed = seed
		self.input_device_name = input_device_name
		self.history = history

		self.events = sightread.event_emitter.EventEmitter()
		self.session = sightread.session.SightReadingSession()
		self.decoder = sightread.midi_input.InputDecoder()
		self.stats = sightread.stats.PracticeStats(clock=clock)

		self.score: typing.Optional[sightread.score.GeneratedScore] = None
		self.last_run: typing.Optional[sightread.storage.SessionRun] = None

		self.midi_in: typing.Optional[typing.Any] = None
		self.running = False
		self._input_queue: typing.Optional[asyncio.Queue] = None
		self._input_loop: typing.Optional[asyncio.AbstractEventLoop] = None


	def new_score (self, seed: typing.Optional[int] = None) -> sightread.score.GeneratedScore:

		"""
		Generate a score and start a fresh session for it.

		The previous session (including any armed key) is discarded.  If
		generation fails its precondition the current session is left alone.
		"""

		if seed is not None:
			self.seed = seed

		score = sightread.score.generate(sightread.score.ScoreConfig(
			range_config = self.range_config,
			total_notes = self.total_notes,
			seed = self.seed,
			notes_per_measure = self.notes_per_measure,
		))

		self.score = score
		self.session.reset(score.expected_keys)
		self.stats.reset()
		self.last_run = None

		logger.info(f"New score {sightread.stats.session_label(self.seed)}: {len(score.expected_keys)} notes")

		self.events.emit("score", score)
		self.events.emit("feedback", "idle")

		return score


	def handle_message (self, epoch: int, data: typing.Sequence[int]) -> None:

		"""
		Process one raw MIDI message tagged with the epoch it arrived in.

		The decoder always sees the message so its held-key set follows the
		physical keyboard.  The resulting events only reach the session when
		the epoch is still current.
		"""

		events = self.decoder.decode(data)

		if epoch != self.session.epoch:
			if events:
				logger.debug(f"Dropping {len(events)} event(s) from stale epoch {epoch}")
			return

		for event in events:

			if isinstance(event, sightread.midi_input.KeyPress):
				self._handle_press(event.key)

			elif isinstance(event, sightread.midi_input.KeyRelease):
				self._handle_release(event.key)

			else:
				self.events.emit("feedback", "idle")


	def _handle_press (self, key: int) -> None:

		outcome = self.session.on_press(key)

		if outcome is sightread.session.PressOutcome.COMPLETE:
			return

		label = sightread.pitch.note_label(key)
		correct = outcome is sightread.session.PressOutcome.CORRECT

		self.stats.record_press(correct, label)
		self.events.emit("feedback", outcome.value)

		if not correct:
			self.events.emit("missed", label)


	def _handle_release (self, key: int) -> None:

		outcome = self.session.on_release(key)

		if outcome is sightread.session.ReleaseOutcome.IDLE:
			return

		self.stats.record_completed()
		self.events.emit("advance", self.session.cursor)
		self.events.emit("feedback", "idle")

		if outcome is sightread.session.ReleaseOutcome.COMPLETE:
			self.finish()


	def finish (self) -> sightread.storage.SessionRun:

		"""
		Stop the timer, record the session and emit ``"finished"``.

		Calling this again within the same epoch returns the same record.
		"""

		if self.last_run is not None:
			return self.last_run

		self.stats.stop()

		run = sightread.storage.SessionRun.create(
			session_label = sightread.stats.session_label(self.seed),
			duration_seconds = self.stats.duration_seconds,
			accuracy = self.stats.accuracy,
			speed_npm = self.stats.speed_npm,
			speed_delta = self.stats.speed_delta,
			improvements = self.stats.improvements(),
			min_note = sightread.pitch.note_label(self.range_config.min_key),
			max_note = sightread.pitch.note_label(self.range_config.max_key),
			total_notes = self.total_notes,
		)

		self.last_run = run

		if self.history is not None:
			self.history.add(run)

		logger.info(
			f"Session {run.session_label} finished: {run.accuracy}% accuracy, "
			f"{run.speed_npm} notes/min in {sightread.stats.format_duration_label(run.duration_seconds)}"
		)

		self.events.emit("finished", run)

		return run


	async def start (self) -> None:

		"""Open the MIDI input port.  Must be called from a running event loop."""

		if self.running:
			return

		self._input_loop = asyncio.get_running_loop()
		self._input_queue = asyncio.Queue()
		self.decoder = sightread.midi_input.InputDecoder()

		device_name, midi_in = sightread.midi_utils.select_input_device(self.input_device_name, self._on_midi_input)

		if device_name:
			self.input_device_name = device_name
			self.midi_in = midi_in

		self.running = True

		logger.info("Trainer started")


	def _on_midi_input (self, message: typing.Any) -> None:

		"""Forward a message from mido's callback thread into the event loop, tagged with the current epoch."""

		if self._input_queue is None or self._input_loop is None:
			return

		self._input_loop.call_soon_threadsafe(
			self._input_queue.put_nowait, (self.session.epoch, message.bytes())
		)


	async def run (self) -> None:

		"""Process queued input until the session completes or :meth:`stop` is called."""

		queue = self._input_queue

		assert queue is not None, "start() must be called before run()"

		while self.running and not self.session.is_complete:

			try:
				epoch, data = await asyncio.wait_for(queue.get(), timeout=0.5)
			except asyncio.TimeoutError:
				continue

			self.handle_message(epoch, data)


	async def stop (self) -> None:

		"""Close the MIDI input port and discard held-key state."""

		self.running = False

		if self.midi_in is not None:
			self.midi_in.close()
			self.midi_in = None

		self.decoder.close()
		self._input_queue = None
		self._input_loop = None

		logger.info("Trainer stopped")
