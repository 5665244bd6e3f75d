import numpy as np

from ateprobe import RandomStream


SEED = 12345


class _ZeroFirstGenerator:
    """Stand-in generator whose first batch contains exact zeros."""

    def __init__(self, batches):
        self._batches = [np.asarray(b, dtype=float) for b in batches]

    def random(self, size):
        batch = self._batches.pop(0)
        assert batch.size == size
        return batch.copy()


class TestRandomStream:
    def test_same_seed_reproduces_sequence(self):
        a, b = RandomStream(SEED), RandomStream(SEED)
        seq_a = [a.normal(), a.uniform(), *a.normal(size=5), *a.uniform(size=5)]
        seq_b = [b.normal(), b.uniform(), *b.normal(size=5), *b.uniform(size=5)]
        assert seq_a == seq_b

    def test_reseed_resets_stream(self):
        stream = RandomStream(SEED)
        first = stream.normal(size=10)
        stream.normal(size=3)
        stream.seed(SEED)
        np.testing.assert_array_equal(stream.normal(size=10), first)
        assert stream.draws == 10

    def test_different_seeds_differ(self):
        assert RandomStream(1).normal() != RandomStream(2).normal()

    def test_vectorised_matches_scalar_calls(self):
        scalar = RandomStream(SEED)
        vector = RandomStream(SEED)
        expected = [scalar.normal() for _ in range(6)] + [scalar.uniform() for _ in range(6)]
        got = list(vector.normal(size=6)) + list(vector.uniform(size=6))
        assert expected == got

    def test_scalar_calls_return_floats(self):
        stream = RandomStream(SEED)
        assert isinstance(stream.normal(), float)
        assert isinstance(stream.uniform(), float)

    def test_uniform_in_open_unit_interval(self):
        draws = RandomStream(SEED).uniform(size=20_000)
        assert draws.min() > 0.0
        assert draws.max() < 1.0

    def test_normal_moments(self):
        draws = RandomStream(SEED).normal(size=50_000)
        assert abs(draws.mean()) < 0.02
        assert abs(draws.std() - 1.0) < 0.02

    def test_exact_zero_is_redrawn(self):
        stream = RandomStream(SEED)
        stream._rng = _ZeroFirstGenerator([[0.0, 0.5, 0.0], [0.25, 0.0], [0.75]])
        out = stream.uniform(size=3)
        np.testing.assert_array_equal(out, [0.25, 0.5, 0.75])
        assert stream.draws == 6

    def test_draw_counter(self):
        stream = RandomStream(SEED)
        assert stream.draws == 0
        stream.normal()
        stream.normal(size=4)
        stream.uniform(size=5)
        assert stream.draws == 10
        assert stream.initial_seed == SEED
