import typing

import mido
import pytest


class FakeMidiIn:

	"""Minimal MIDI input stub for tests."""

	def __init__ (self, name: str, callback: typing.Optional[typing.Callable] = None) -> None:

		"""Store the callback for injecting test messages."""

		self.name = name
		self.callback = callback
		self.closed = False

	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True

	def inject (self, message: mido.Message) -> None:

		"""Simulate receiving a MIDI message by calling the stored callback."""

		if self.callback is not None:
			self.callback(message)


# Module-level reference so tests can access the most recently created FakeMidiIn.
_current_fake_input: typing.Optional[FakeMidiIn] = None


def _fake_get_input_names () -> list[str]:

	"""Return a fixed list of MIDI input names for tests."""

	return ["Dummy MIDI", "Digital Piano"]


def _fake_open_input (name: str, callback: typing.Optional[typing.Callable] = None) -> FakeMidiIn:

	"""Return a fake MIDI input regardless of the name."""

	global _current_fake_input
	fake = FakeMidiIn(name, callback=callback)
	_current_fake_input = fake
	return fake


def current_fake_input () -> typing.Optional[FakeMidiIn]:

	"""The most recently opened fake input."""

	return _current_fake_input


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use fake MIDI inputs for all tests that need it."""

	monkeypatch.setattr(mido, "get_input_names", _fake_get_input_names)
	monkeypatch.setattr(mido, "open_input", _fake_open_input)


@pytest.fixture
def no_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to report no MIDI inputs at all."""

	monkeypatch.setattr(mido, "get_input_names", lambda: [])
	monkeypatch.setattr(mido, "open_input", _fake_open_input)


class FakeClock:

	"""Manually advanced time source."""

	def __init__ (self, start: float = 100.0) -> None:

		self.now = start

	def __call__ (self) -> float:

		return self.now

	def advance (self, seconds: float) -> None:

		self.now += seconds
