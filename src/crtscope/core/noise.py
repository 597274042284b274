"""
Hash, value-noise and smoothstep helpers.

Vectorized with numpy. Every function is pure: identical inputs always
give identical outputs, which is what makes jitter and glitch offsets
reproducible across runs.
"""

import numpy as np

LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def fract(x: np.ndarray) -> np.ndarray:
    return x - np.floor(x)


def hash2(x, y) -> np.ndarray:
    """
    Pseudo-random value in [0, 1) from a 2D lattice coordinate.

    The classic ``fract(sin(dot(p, (12.9898, 78.233))) * 43758.5453)``
    hash, evaluated in float64.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    return fract(np.sin(x * 12.9898 + y * 78.233) * 43758.5453123)


def value_noise(x, y) -> np.ndarray:
    """
    Band-limited value noise.

    Hashes the four surrounding lattice corners and blends them with a
    cubic Hermite curve.

    Args:
        x, y: Arrays of lattice-space coordinates.

    Returns:
        Array in [0, 1] with the broadcast shape of ``x`` and ``y``.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    ix, iy = np.floor(x), np.floor(y)
    fx, fy = x - ix, y - iy

    a = hash2(ix, iy)
    b = hash2(ix + 1.0, iy)
    c = hash2(ix, iy + 1.0)
    d = hash2(ix + 1.0, iy + 1.0)

    ux = fx * fx * (3.0 - 2.0 * fx)
    uy = fy * fy * (3.0 - 2.0 * fy)

    return a + (b - a) * ux + (c - a) * uy * (1.0 - ux) + (d - b) * ux * uy


def smoothstep(edge0: float, edge1: float, x) -> np.ndarray:
    t = np.clip((np.asarray(x, dtype=np.float64) - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def luminance(rgb: np.ndarray) -> np.ndarray:
    """Rec. 601 luma of an (..., 3) or (..., 4) color array."""
    wr, wg, wb = LUMA_WEIGHTS
    return rgb[..., 0] * wr + rgb[..., 1] * wg + rgb[..., 2] * wb
