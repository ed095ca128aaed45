"""
Random and coherent-noise source.

The engine never touches a global random state. Everything stochastic
(skeleton jitter, spawn decisions, particle parameters, turbulence, idle
sway) draws from one `Randomness` instance passed in at construction, so a
seeded instance makes a whole run reproducible.

Coherent noise is classic 3D gradient (Perlin) noise, summed over four
octaves with 0.5 falloff and normalised to [0, 1].
"""

import math

import numpy as np


# =============================================================================
# PERLIN NOISE
# =============================================================================

def _fade(t: float) -> float:
    """Perlin fade curve: 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(a: float, b: float, t: float) -> float:
    return a + t * (b - a)


def _grad3d(hash_val: int, x: float, y: float, z: float) -> float:
    """Dot product with one of 12 cube-edge gradients."""
    h = hash_val & 15
    u = x if h < 8 else y
    if h < 4:
        v = y
    elif h in (12, 14):
        v = x
    else:
        v = z
    return (u if (h & 1) == 0 else -u) + (v if (h & 2) == 0 else -v)


class PerlinNoise:
    """
    3D gradient noise over a shuffled permutation table.

    Args:
        rng: Generator used once to shuffle the permutation table
        octaves: Number of layers summed
        falloff: Amplitude multiplier per octave
    """

    def __init__(self, rng: np.random.Generator, octaves: int = 4, falloff: float = 0.5):
        perm = rng.permutation(256).astype(int)
        self._perm = [int(v) for v in np.concatenate([perm, perm])]
        self.octaves = octaves
        self.falloff = falloff
        self._norm = sum(falloff**i for i in range(octaves))

    def raw(self, x: float, y: float, z: float) -> float:
        """Single-octave noise, roughly in [-1, 1]."""
        p = self._perm
        fx, fy, fz = math.floor(x), math.floor(y), math.floor(z)
        xi, yi, zi = int(fx) & 255, int(fy) & 255, int(fz) & 255
        xf, yf, zf = x - fx, y - fy, z - fz
        u, v, w = _fade(xf), _fade(yf), _fade(zf)

        a = p[xi] + yi
        aa, ab = p[a] + zi, p[a + 1] + zi
        b = p[xi + 1] + yi
        ba, bb = p[b] + zi, p[b + 1] + zi

        x1 = _lerp(_grad3d(p[aa], xf, yf, zf), _grad3d(p[ba], xf - 1, yf, zf), u)
        x2 = _lerp(_grad3d(p[ab], xf, yf - 1, zf), _grad3d(p[bb], xf - 1, yf - 1, zf), u)
        y1 = _lerp(x1, x2, v)
        x1 = _lerp(
            _grad3d(p[aa + 1], xf, yf, zf - 1), _grad3d(p[ba + 1], xf - 1, yf, zf - 1), u
        )
        x2 = _lerp(
            _grad3d(p[ab + 1], xf, yf - 1, zf - 1),
            _grad3d(p[bb + 1], xf - 1, yf - 1, zf - 1),
            u,
        )
        y2 = _lerp(x1, x2, v)
        return _lerp(y1, y2, w)

    def __call__(self, x: float, y: float = 0.0, z: float = 0.0) -> float:
        """Fractal noise in [0, 1]."""
        total = 0.0
        amplitude = 1.0
        frequency = 1.0
        for _ in range(self.octaves):
            total += amplitude * self.raw(x * frequency, y * frequency, z * frequency)
            amplitude *= self.falloff
            frequency *= 2.0
        value = 0.5 + 0.5 * total / self._norm
        return min(1.0, max(0.0, value))


# =============================================================================
# RANDOMNESS CAPABILITY
# =============================================================================

class Randomness:
    """
    Injectable random + noise source.

    Args:
        seed: Seed for reproducible runs; None draws fresh OS entropy
    """

    def __init__(self, seed: int | None = None):
        self.rng = np.random.default_rng(seed)
        self.noise = PerlinNoise(self.rng)

    def uniform(self, low: float, high: float) -> float:
        return float(self.rng.uniform(low, high))

    def random(self) -> float:
        """Uniform in [0, 1)."""
        return float(self.rng.random())

    def chance(self, p: float) -> bool:
        return self.random() < p
