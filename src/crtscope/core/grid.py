"""
Cell grid geometry.

Maps normalized coordinates onto a grid of square cells and applies the
two time-keyed perturbations (jitter and row glitch) to cell
coordinates before they are resolved to a color.
"""

import logging
import math
from typing import Tuple

import numpy as np

from crtscope.core.noise import hash2

logger = logging.getLogger(__name__)


class CellGrid:
    """
    Integer cell lattice over the output.

    ``cell_count`` is ``floor(resolution / cell_size)`` per axis and never
    less than one cell, so degenerate geometry cannot divide by zero.
    """

    def __init__(self, resolution: Tuple[float, float], cell_size: float):
        width, height = resolution
        if cell_size < 1 or width < 1 or height < 1:
            logger.debug(
                "Clamping degenerate grid geometry: resolution=%s cell_size=%s",
                resolution, cell_size,
            )
        self.cell_size = max(float(cell_size), 1.0)
        self.resolution = (max(float(width), 1.0), max(float(height), 1.0))
        self.cell_count = (
            max(math.floor(self.resolution[0] / self.cell_size), 1),
            max(math.floor(self.resolution[1] / self.cell_size), 1),
        )

    def cell_coords(self, u: np.ndarray, v: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Unperturbed cell coordinates ``floor(uv * cell_count)``."""
        nx, ny = self.cell_count
        return np.floor(u * nx), np.floor(v * ny)

    def local_coords(self, u: np.ndarray, v: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Fractional position inside the unperturbed cell, in [0, 1)."""
        nx, ny = self.cell_count
        su, sv = u * nx, v * ny
        return su - np.floor(su), sv - np.floor(sv)

    def cell_uv(self, cx: np.ndarray, cy: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Normalized coordinate of a (possibly fractional) cell's center."""
        nx, ny = self.cell_count
        return (cx + 0.5) / nx, (cy + 0.5) / ny

    @staticmethod
    def jitter(
        cx: np.ndarray,
        cy: np.ndarray,
        time: float,
        intensity: float,
        speed: float,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Offset cell coordinates by a per-row / per-column random amount.

        X is hashed from ``(cy, floor(t))`` and Y from
        ``(cx, floor(t + 1000))`` so the two axes never correlate.

        Args:
            cx, cy: Cell coordinate arrays.
            time: Simulation time.
            intensity: Maximum offset in cells (0 disables).
            speed: Re-rolls per second.

        Returns:
            Perturbed (cx, cy).
        """
        if intensity <= 0:
            return cx, cy
        jitter_time = time * speed
        jx = (hash2(cy, math.floor(jitter_time)) - 0.5) * intensity * 2.0
        jy = (hash2(cx, math.floor(jitter_time + 1000.0)) - 0.5) * intensity * 2.0
        return cx + jx, cy + jy

    @staticmethod
    def glitch(
        cx: np.ndarray,
        cy: np.ndarray,
        time: float,
        intensity: float,
        frequency: float,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Horizontal tearing: whole rows shift by up to +-10 cells per tick.
        """
        if intensity <= 0 or frequency <= 0:
            return cx, cy
        tick = math.floor(time * frequency)
        torn = hash2(tick, cy) < intensity
        shift = (hash2(tick + 1.0, cy) - 0.5) * 20.0
        return np.where(torn, cx + shift, cx), cy
