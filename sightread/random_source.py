import typing

T = typing.TypeVar("T")

MASK_32 = 0xFFFFFFFF
STATE_INCREMENT = 0x6D2B79F5


def _imul (a: int, b: int) -> int:

	"""32-bit wrapping multiply."""

	return (a * b) & MASK_32


class SeededRandom:

	"""
	A small 32-bit pseudo-random generator with a fixed, portable algorithm.

	Each draw advances the state by a fixed odd constant and mixes it through
	a fixed sequence of xor/shift/multiply steps.  Every step wraps at 32 bits,
	so two implementations of the same algorithm given the same seed produce
	the same sequence of values - a shared seed reproduces a shared exercise.

	Unlike ``random.Random`` this generator carries no hidden global state;
	create one per generation run and pass it to whatever needs to draw.

	Example:
		```python
		rng = SeededRandom(42)
		rng.random()                 # → float in [0, 1)
		rng.choice(["C", "D", "E"])  # → one element, uniformly
		```
	"""

	def __init__ (self, seed: int) -> None:

		"""Seed the generator.  The seed is reduced modulo 2**32."""

		self.state = seed & MASK_32

	def random (self) -> float:

		"""Advance the state and return the next value in ``[0, 1)``."""

		self.state = (self.state + STATE_INCREMENT) & MASK_32

		t = self.state
		t = _imul(t ^ (t >> 15), t | 1)
		t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK_32

		return ((t ^ (t >> 14)) & MASK_32) / 4294967296

	def choice (self, items: typing.Sequence[T]) -> T:

		"""Pick one element uniformly: ``items[floor(random() * len(items))]``."""

		if not items:
			raise IndexError("Cannot choose from an empty sequence")

		return items[int(self.random() * len(items))]
