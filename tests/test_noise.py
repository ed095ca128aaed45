"""
Tests for the injectable random and noise source.
"""

import numpy as np

from moodtree.noise import PerlinNoise, Randomness


class TestPerlinNoise:
    """Tests for coherent noise."""

    def test_range(self) -> None:
        """Fractal noise stays in [0, 1]."""
        rng = Randomness(3)
        for x in np.linspace(-20, 20, 41):
            for y in np.linspace(-5, 5, 11):
                value = rng.noise(float(x), float(y), 0.37)
                assert 0.0 <= value <= 1.0

    def test_coherent(self) -> None:
        """Nearby samples are close."""
        rng = Randomness(3)
        for x in np.linspace(0, 10, 50):
            a = rng.noise(float(x), 1.3, 2.7)
            b = rng.noise(float(x) + 1e-3, 1.3, 2.7)
            assert abs(a - b) < 0.01

    def test_varies(self) -> None:
        """Noise is not constant."""
        rng = Randomness(3)
        values = [rng.noise(t * 0.37, 0.5, 0.5) for t in range(100)]
        assert max(values) - min(values) > 0.1

    def test_seeded_reproducible(self) -> None:
        """Same seed, same field; different seed, different field."""
        a = PerlinNoise(np.random.default_rng(9))
        b = PerlinNoise(np.random.default_rng(9))
        c = PerlinNoise(np.random.default_rng(10))
        points = [(0.3 * i, 0.7, 1.1) for i in range(20)]
        assert [a(*p) for p in points] == [b(*p) for p in points]
        assert [a(*p) for p in points] != [c(*p) for p in points]

    def test_single_octave_lattice_is_zero(self) -> None:
        """Gradient noise vanishes on integer lattice points."""
        noise = PerlinNoise(np.random.default_rng(0))
        assert noise.raw(2.0, 5.0, 7.0) == 0.0


class TestRandomness:
    """Tests for uniform draws."""

    def test_uniform_bounds(self) -> None:
        """uniform() respects its bounds."""
        rng = Randomness(1)
        draws = [rng.uniform(-0.15, 0.15) for _ in range(1000)]
        assert min(draws) >= -0.15
        assert max(draws) < 0.15

    def test_chance_extremes(self) -> None:
        """chance(0) never, chance(1) always."""
        rng = Randomness(1)
        assert not any(rng.chance(0.0) for _ in range(100))
        assert all(rng.chance(1.0) for _ in range(100))
