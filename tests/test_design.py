from itertools import combinations

import numpy as np
import pytest

from ateprobe import (
    ConfigurationError,
    RandomStream,
    generate_assignment,
    generate_population,
    observe,
)


SEED = 2024
N = 500
TAU0 = 0.2


class TestPopulation:
    def test_potential_outcomes_model(self):
        pop = generate_population(RandomStream(SEED), N, TAU0)

        np.testing.assert_allclose(pop.y1, 0.5 * pop.y0 + 0.5 * pop.v + TAU0)
        np.testing.assert_allclose(pop.te, pop.y1 - pop.y0)
        assert pop.size == N
        assert pop.tau0 == TAU0

    def test_draw_order_y0_then_v(self):
        pop = generate_population(RandomStream(SEED), N)
        replay = RandomStream(SEED).normal(size=2 * N)

        np.testing.assert_array_equal(pop.y0, replay[:N])
        np.testing.assert_array_equal(pop.v, replay[N:])

    def test_ate_is_mean_of_unit_effects(self):
        pop = generate_population(RandomStream(SEED), N, TAU0)
        assert pop.ate == float(np.mean(pop.te))

    def test_arrays_are_read_only(self):
        pop = generate_population(RandomStream(SEED), 10)
        with pytest.raises(ValueError):
            pop.y0[0] = 1.0

    def test_to_frame_columns(self):
        df = generate_population(RandomStream(SEED), 10).to_frame()
        assert list(df.columns) == ["y0", "v", "y1", "te"]
        assert len(df) == 10

    def test_non_positive_size_raises(self):
        with pytest.raises(ConfigurationError, match="positive integer"):
            generate_population(RandomStream(SEED), 0)


class TestAssignment:
    @pytest.mark.parametrize("n, n_treat", [(2, 1), (10, 1), (10, 9), (101, 50), (1000, 500)])
    def test_exact_treated_count(self, n, n_treat):
        stream = RandomStream(SEED)
        for _ in range(20):
            assignment = generate_assignment(stream, n, n_treat)
            assert assignment.n_treated == n_treat
            assert assignment.size == n

    def test_treats_smallest_keys(self):
        assignment = generate_assignment(RandomStream(SEED), 50, 20)
        keys = RandomStream(SEED).uniform(size=50)

        expected = np.zeros(50, dtype=bool)
        expected[np.argsort(keys)[:20]] = True
        np.testing.assert_array_equal(assignment.treated, expected)

    def test_all_subsets_equally_likely(self):
        stream = RandomStream(SEED)
        counts = {subset: 0 for subset in combinations(range(4), 2)}
        draws = 6_000
        for _ in range(draws):
            treated = np.flatnonzero(generate_assignment(stream, 4, 2).treated)
            counts[tuple(int(i) for i in treated)] += 1

        expected = draws / len(counts)
        for subset, count in counts.items():
            assert abs(count - expected) < 150, subset

    @pytest.mark.parametrize("n, n_treat", [(10, 0), (10, 10), (10, 11), (0, 0), (-5, 1)])
    def test_invalid_sizes_raise_before_drawing(self, n, n_treat):
        stream = RandomStream(SEED)
        with pytest.raises(ConfigurationError):
            generate_assignment(stream, n, n_treat)
        assert stream.draws == 0

    def test_non_integer_sizes_raise(self):
        with pytest.raises(ConfigurationError, match="integer"):
            generate_assignment(RandomStream(SEED), 10.0, 5)
        with pytest.raises(ConfigurationError, match="integer"):
            generate_assignment(RandomStream(SEED), 10, 5.5)


class TestObserve:
    def test_reveals_one_potential_outcome(self):
        stream = RandomStream(SEED)
        pop = generate_population(stream, 100)
        assignment = generate_assignment(stream, 100, 40)
        sample = observe(pop, assignment)

        t = assignment.treated
        np.testing.assert_array_equal(sample.y[t], pop.y1[t])
        np.testing.assert_array_equal(sample.y[~t], pop.y0[~t])
        assert sample.size == 100
        assert set(sample.to_frame().columns) == {"y", "treat"}

    def test_size_mismatch_raises(self):
        stream = RandomStream(SEED)
        pop = generate_population(stream, 10)
        assignment = generate_assignment(stream, 12, 6)
        with pytest.raises(ValueError, match="10 units"):
            observe(pop, assignment)
