"""
Coordinate warps applied before sampling.

Barrel curvature for the CRT glass and a sinusoidal wave. Both operate
on normalized coordinate arrays rather than on pixels, so they compose
with the rest of the pipeline without resampling the output.
"""

from typing import Tuple

import numpy as np


def barrel_warp(
    u: np.ndarray,
    v: np.ndarray,
    curvature: float,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Barrel-distort coordinates around the screen center.

    ``centered *= 1 + curvature * |centered|^2`` in [-1, 1] space.

    Args:
        u, v: Normalized coordinate arrays.
        curvature: Distortion strength (0 = none).

    Returns:
        (u, v, inside) where ``inside`` is False for coordinates that
        leave the unit square (the screen-edge cutoff).
    """
    if curvature <= 0:
        return u, v, np.ones(np.broadcast(u, v).shape, dtype=bool)

    cu = u * 2.0 - 1.0
    cv = v * 2.0 - 1.0
    scale = 1.0 + curvature * (cu * cu + cv * cv)
    wu = cu * scale * 0.5 + 0.5
    wv = cv * scale * 0.5 + 0.5

    inside = (wu >= 0.0) & (wu <= 1.0) & (wv >= 0.0) & (wv <= 1.0)
    return wu, wv, inside


def wave_warp(
    u: np.ndarray,
    v: np.ndarray,
    amplitude: float,
    frequency: float,
    speed: float,
    time: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sinusoidal displacement, each axis driven by the other.

    The vertical offset is computed from the already-displaced ``u``.
    """
    if amplitude <= 0:
        return u, v
    phase = time * speed
    u = u + np.sin(v * frequency + phase) * amplitude
    v = v + np.cos(u * frequency + phase) * amplitude
    return u, v
