"""Seeded permutation-table gradient noise.

PerlinNoise builds its permutation table from its own SeededRandom, so
terrain noise can be decorrelated from placement randomness by giving it a
different seed. All evaluation is vectorized with numpy; the scalar helpers
wrap the array versions.
"""

from __future__ import annotations

import numpy as np

from cryptforge import config
from cryptforge.types import RandomSeed

from .rng import SeededRandom


def _fade(t: np.ndarray) -> np.ndarray:
    return t * t * t * (t * (t * 6 - 15) + 10)


def _lerp(a: np.ndarray, b: np.ndarray, t: np.ndarray) -> np.ndarray:
    return a + t * (b - a)


def _grad(hashes: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    h = hashes & 3
    u = np.where(h < 2, x, y)
    v = np.where(h < 2, y, x)
    return np.where(h & 1, -u, u) + np.where(h & 2, -2.0 * v, 2.0 * v)


class PerlinNoise:
    """2D gradient noise driven by a shuffled 256-entry permutation table.

    Attributes:
        seed: The normalized seed the permutation was built from.
        perm: Permutation table of length 512 (256 entries, duplicated).
    """

    def __init__(self, seed: RandomSeed = None) -> None:
        rng = SeededRandom(seed)
        self.seed = rng.seed
        shuffled = rng.shuffled(range(256))
        self.perm = np.array(shuffled + shuffled, dtype=np.int32)

    def noise_array(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Evaluate single-octave noise for arrays of coordinates.

        Returns:
            Array of noise values clamped to [-1, 1].
        """
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        x_floor = np.floor(x)
        y_floor = np.floor(y)
        xi = x_floor.astype(np.int64) & 255
        yi = y_floor.astype(np.int64) & 255
        xf = x - x_floor
        yf = y - y_floor

        u = _fade(xf)
        v = _fade(yf)

        perm = self.perm
        a = perm[xi] + yi
        b = perm[xi + 1] + yi

        n00 = _grad(perm[a], xf, yf)
        n10 = _grad(perm[b], xf - 1.0, yf)
        n01 = _grad(perm[a + 1], xf, yf - 1.0)
        n11 = _grad(perm[b + 1], xf - 1.0, yf - 1.0)

        value = _lerp(_lerp(n00, n10, u), _lerp(n01, n11, u), v)
        return np.clip(value, -1.0, 1.0)

    def noise_2d(self, x: float, y: float) -> float:
        """Return single-octave noise at (x, y) in [-1, 1]."""
        return float(self.noise_array(np.array(x), np.array(y)))

    def octave_array(
        self,
        x: np.ndarray,
        y: np.ndarray,
        octaves: int = config.NOISE_OCTAVES,
        persistence: float = config.NOISE_PERSISTENCE,
    ) -> np.ndarray:
        """Evaluate amplitude-normalized fractal noise, mapped to [0, 1]."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        total = np.zeros(np.broadcast(x, y).shape, dtype=np.float64)
        frequency = 1.0
        amplitude = 1.0
        max_amplitude = 0.0

        for _ in range(max(1, octaves)):
            total += self.noise_array(x * frequency, y * frequency) * amplitude
            max_amplitude += amplitude
            amplitude *= persistence
            frequency *= 2.0

        return np.clip((total / max_amplitude + 1.0) * 0.5, 0.0, 1.0)

    def octave_noise(
        self,
        x: float,
        y: float,
        octaves: int = config.NOISE_OCTAVES,
        persistence: float = config.NOISE_PERSISTENCE,
    ) -> float:
        """Return fractal noise at (x, y) in [0, 1]."""
        return float(self.octave_array(np.array(x), np.array(y), octaves, persistence))

    def grid(
        self,
        width: int,
        height: int,
        scale: float,
        octaves: int = config.NOISE_OCTAVES,
        persistence: float = config.NOISE_PERSISTENCE,
        offset: tuple[float, float] = (0.0, 0.0),
    ) -> np.ndarray:
        """Sample fractal noise over a whole canvas.

        Args:
            width: Canvas width in tiles.
            height: Canvas height in tiles.
            scale: Noise frequency per tile.
            octaves: Number of octaves to sum.
            persistence: Amplitude falloff per octave.
            offset: Added to tile coordinates before scaling.

        Returns:
            Array of shape (width, height) with values in [0, 1], indexed [x, y].
        """
        xs = (np.arange(width, dtype=np.float64) + offset[0]) * scale
        ys = (np.arange(height, dtype=np.float64) + offset[1]) * scale
        gx, gy = np.meshgrid(xs, ys, indexing="ij")
        return self.octave_array(gx, gy, octaves, persistence)
