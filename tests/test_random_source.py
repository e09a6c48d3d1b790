import pytest

import sightread.random_source


def test_same_seed_same_sequence () -> None:

	"""Two generators with the same seed produce identical draws."""

	a = sightread.random_source.SeededRandom(1234)
	b = sightread.random_source.SeededRandom(1234)

	assert [a.random() for _ in range(100)] == [b.random() for _ in range(100)]


@pytest.mark.parametrize("seed, draws", [
	(0, [0.26642920868471265, 0.0003297457005828619, 0.2232720274478197]),
	(1, [0.6270739405881613, 0.002735721180215478, 0.5274470399599522]),
	(-1, [0.8964226141106337, 0.189478256739676, 0.7156526781618595]),
	(5 + 2 ** 32, [0.6897749109193683, 0.7727432732935995, 0.21976301027461886]),
])
def test_known_draws (seed: int, draws: list) -> None:

	"""The first draws for fixed seeds match values produced by other implementations."""

	rng = sightread.random_source.SeededRandom(seed)

	assert [rng.random() for _ in range(3)] == draws


def test_different_seeds_differ () -> None:

	a = sightread.random_source.SeededRandom(1)
	b = sightread.random_source.SeededRandom(2)

	assert [a.random() for _ in range(10)] != [b.random() for _ in range(10)]


def test_values_in_unit_interval () -> None:

	"""Every draw lies in [0, 1)."""

	rng = sightread.random_source.SeededRandom(99)

	for _ in range(1000):
		value = rng.random()
		assert 0.0 <= value < 1.0


def test_seed_reduced_modulo_2_32 () -> None:

	"""Seeds that agree modulo 2**32 are the same seed (negative seeds included)."""

	a = sightread.random_source.SeededRandom(-1)
	b = sightread.random_source.SeededRandom(0xFFFFFFFF)
	c = sightread.random_source.SeededRandom(5 + 2 ** 32)
	d = sightread.random_source.SeededRandom(5)

	assert a.random() == b.random()
	assert c.random() == d.random()


def test_state_stays_32_bit () -> None:

	rng = sightread.random_source.SeededRandom(0xFFFFFFFF)

	for _ in range(50):
		rng.random()
		assert 0 <= rng.state <= 0xFFFFFFFF


def test_state_advances_by_fixed_increment () -> None:

	"""The state moves by the fixed odd constant on every draw, wrapping at 32 bits."""

	rng = sightread.random_source.SeededRandom(0xFFFFFFFF)
	rng.random()

	assert rng.state == (0xFFFFFFFF + sightread.random_source.STATE_INCREMENT) & 0xFFFFFFFF


def test_choice_is_deterministic_and_in_sequence () -> None:

	items = ["C", "D", "E", "F", "G"]

	a = sightread.random_source.SeededRandom(7)
	b = sightread.random_source.SeededRandom(7)

	picks = [a.choice(items) for _ in range(50)]

	assert picks == [b.choice(items) for _ in range(50)]
	assert set(picks) <= set(items)


def test_choice_uses_floor_of_scaled_draw () -> None:

	"""choice() picks items[floor(random() * len(items))] from the same stream."""

	items = list(range(7))

	a = sightread.random_source.SeededRandom(31)
	b = sightread.random_source.SeededRandom(31)

	for _ in range(20):
		assert a.choice(items) == int(b.random() * len(items))


def test_choice_empty_raises () -> None:

	with pytest.raises(IndexError):
		sightread.random_source.SeededRandom(1).choice([])


def test_roughly_uniform () -> None:

	"""Picks from a small pool hit every element with plausible frequency."""

	rng = sightread.random_source.SeededRandom(2024)
	counts = [0] * 4

	for _ in range(4000):
		counts[rng.choice(range(4))] += 1

	assert all(800 < count < 1200 for count in counts)
