import asyncio
import typing

import mido
import pytest

import conftest
import sightread.pitch
import sightread.score
import sightread.session
import sightread.storage
import sightread.trainer


def _trainer (clock: typing.Optional[conftest.FakeClock] = None, **kwargs: typing.Any) -> sightread.trainer.Trainer:

	"""A trainer on the C4-G5 preset with a manual clock."""

	options: typing.Dict[str, typing.Any] = {
		"range_config": sightread.score.RANGE_PRESETS["Treble (C4-G5)"],
		"total_notes": 4,
		"seed": 3,
		"clock": clock or conftest.FakeClock(),
	}
	options.update(kwargs)

	return sightread.trainer.Trainer(**options)


def _record (trainer: sightread.trainer.Trainer) -> typing.List[typing.Tuple[str, typing.Any]]:

	"""Collect every event the trainer emits."""

	received: typing.List[typing.Tuple[str, typing.Any]] = []

	for name in ("score", "feedback", "missed", "advance", "finished"):
		trainer.events.on(name, lambda value, name=name: received.append((name, value)))

	return received


def _wrong_key (trainer: sightread.trainer.Trainer) -> int:

	"""A key that is not the one currently expected."""

	return trainer.session.expected_key + 1


def _press (trainer: sightread.trainer.Trainer, key: int) -> None:

	trainer.handle_message(trainer.session.epoch, [0x90, key, 80])


def _release (trainer: sightread.trainer.Trainer, key: int) -> None:

	trainer.handle_message(trainer.session.epoch, [0x80, key, 0])


# --- Score lifecycle ---


def test_new_score_resets_session_and_emits () -> None:

	trainer = _trainer()
	received = _record(trainer)

	score = trainer.new_score()

	assert trainer.session.expected_keys == score.expected_keys
	assert trainer.session.cursor == 0
	assert received == [("score", score), ("feedback", "idle")]


def test_new_score_with_seed_is_reproducible () -> None:

	trainer = _trainer()

	first = trainer.new_score(seed=10)
	trainer.new_score(seed=11)
	again = trainer.new_score(seed=10)

	assert first == again
	assert trainer.seed == 10


def test_new_score_failure_leaves_session_alone () -> None:

	trainer = _trainer()
	score = trainer.new_score()

	trainer.range_config = sightread.score.RangeConfig(min_key=61, max_key=61)

	with pytest.raises(sightread.score.InvalidRangeError):
		trainer.new_score()

	assert trainer.session.expected_keys == score.expected_keys


# --- Matching ---


def test_full_run_completes_and_records (tmp_path) -> None:

	clock = conftest.FakeClock()
	history = sightread.storage.SessionHistory(str(tmp_path / "history.jsonl"))
	trainer = _trainer(clock=clock, history=history)
	score = trainer.new_score()
	received = _record(trainer)

	for key in score.expected_keys:
		_press(trainer, key)
		clock.advance(1.5)
		_release(trainer, key)

	assert trainer.session.is_complete
	assert [value for name, value in received if name == "advance"] == [1, 2, 3, 4]

	finished = [value for name, value in received if name == "finished"]
	assert len(finished) == 1

	run = finished[0]
	assert run.accuracy == 100
	assert run.duration_seconds == 6
	assert run.speed_npm == 40
	assert run.session_label == "#SR-0003"
	assert run.config == {"min_note": "C4", "max_note": "G5", "total_notes": 4}
	assert history.list() == [run]


def test_wrong_press_emits_missed_and_counts () -> None:

	trainer = _trainer()
	trainer.new_score()
	received = _record(trainer)

	wrong = _wrong_key(trainer)
	_press(trainer, wrong)

	assert ("feedback", "wrong") in received
	assert ("missed", sightread.pitch.note_label(wrong)) in received
	assert trainer.stats.attempts == 1
	assert trainer.stats.correct_attempts == 0
	assert trainer.session.cursor == 0


def test_wrong_press_while_armed_keeps_position () -> None:

	trainer = _trainer()
	score = trainer.new_score()
	first = score.expected_keys[0]

	_press(trainer, first)
	_press(trainer, first + 1)
	_release(trainer, first + 1)
	_release(trainer, first)

	assert trainer.session.cursor == 1
	assert trainer.stats.accuracy == 50


def test_all_released_resets_feedback () -> None:

	trainer = _trainer()
	trainer.new_score()
	received = _record(trainer)

	wrong = _wrong_key(trainer)
	_press(trainer, wrong)
	_release(trainer, wrong)

	assert received[-1] == ("feedback", "idle")


def test_presses_after_completion_are_not_counted () -> None:

	trainer = _trainer()
	score = trainer.new_score()

	for key in score.expected_keys:
		_press(trainer, key)
		_release(trainer, key)

	attempts = trainer.stats.attempts
	_press(trainer, 60)

	assert trainer.stats.attempts == attempts


def test_stale_epoch_events_are_dropped () -> None:

	"""A message queued before a new score never matches against it."""

	trainer = _trainer()
	score = trainer.new_score(seed=1)
	old_epoch = trainer.session.epoch

	trainer.new_score(seed=2)
	received = _record(trainer)

	trainer.handle_message(old_epoch, [0x90, trainer.session.expected_key, 80])

	assert received == []
	assert trainer.session.state == sightread.session.AwaitingInput(cursor=0)


def test_stale_release_still_updates_held_keys () -> None:

	"""The decoder follows the physical keyboard across a new score."""

	trainer = _trainer()
	trainer.new_score(seed=1)
	old_epoch = trainer.session.epoch

	trainer.handle_message(old_epoch, [0x90, 60, 80])
	trainer.new_score(seed=2)
	trainer.handle_message(old_epoch, [0x80, 60, 0])

	assert trainer.decoder.held == set()


def test_armed_key_does_not_carry_over_new_score () -> None:

	trainer = _trainer()
	score = trainer.new_score(seed=1)

	_press(trainer, score.expected_keys[0])
	trainer.new_score(seed=2)
	_release(trainer, score.expected_keys[0])

	assert trainer.session.cursor == 0


def test_finish_is_idempotent_within_epoch () -> None:

	trainer = _trainer()
	trainer.new_score()

	assert trainer.finish() is trainer.finish()


# --- Device wiring ---


@pytest.mark.asyncio
async def test_start_opens_requested_device (patch_midi: None) -> None:

	trainer = _trainer(input_device_name="Digital Piano")
	trainer.new_score()

	await trainer.start()

	assert trainer.midi_in is conftest.current_fake_input()
	assert trainer.midi_in.name == "Digital Piano"

	await trainer.stop()


@pytest.mark.asyncio
async def test_start_falls_back_to_first_device (patch_midi: None) -> None:

	trainer = _trainer(input_device_name="Missing Keyboard")
	trainer.new_score()

	await trainer.start()

	assert trainer.input_device_name == "Dummy MIDI"

	await trainer.stop()


@pytest.mark.asyncio
async def test_start_without_devices (no_midi: None) -> None:

	trainer = _trainer()
	trainer.new_score()

	await trainer.start()

	assert trainer.midi_in is None

	await trainer.stop()


@pytest.mark.asyncio
async def test_run_plays_through_device_messages (patch_midi: None) -> None:

	"""Messages injected on the port are queued, matched and complete the run."""

	trainer = _trainer()
	score = trainer.new_score()
	finished: list = []
	trainer.events.on("finished", finished.append)

	await trainer.start()
	fake = conftest.current_fake_input()

	for key in score.expected_keys:
		fake.inject(mido.Message("note_on", note=key, velocity=70))
		fake.inject(mido.Message("note_on", note=key, velocity=70))
		fake.inject(mido.Message("note_on", note=key, velocity=0))

	await asyncio.wait_for(trainer.run(), timeout=5.0)

	assert trainer.session.is_complete
	assert len(finished) == 1
	assert finished[0].accuracy == 100

	await trainer.stop()

	assert fake.closed
	assert trainer.midi_in is None


@pytest.mark.asyncio
async def test_stop_ends_run (patch_midi: None) -> None:

	trainer = _trainer()
	trainer.new_score()

	await trainer.start()
	task = asyncio.create_task(trainer.run())

	await asyncio.sleep(0.01)
	await trainer.stop()
	await asyncio.wait_for(task, timeout=5.0)

	assert not trainer.session.is_complete
