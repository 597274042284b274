"""
Simulation clock.

Owns the only state that survives between frames. In quantized mode the
clock moves in whole frame-durations so anything keyed off
``floor(time * frequency)`` steps visibly, independent of how fast the
host actually renders.
"""

import logging
import math

logger = logging.getLogger(__name__)


class TemporalController:
    """
    Advances simulation time once per frame.

    ``target_fps <= 0`` runs uncapped (time follows real deltas).
    ``target_fps > 0`` accumulates real time and releases it in fixed
    steps of ``1 / target_fps``; the residual is carried, never dropped.
    """

    def __init__(self, target_fps: float = 0.0):
        self.target_fps = target_fps
        self._time = 0.0
        self._accumulator = 0.0

    @property
    def time(self) -> float:
        return self._time

    @property
    def accumulator(self) -> float:
        return self._accumulator

    @property
    def quantized(self) -> bool:
        return self.target_fps > 0

    @property
    def frame_duration(self) -> float:
        return 1.0 / self.target_fps if self.quantized else 0.0

    def reset(self):
        self._time = 0.0
        self._accumulator = 0.0

    def advance(self, delta: float, context_available: bool = True) -> bool:
        """
        Advance the clock by a real elapsed duration.

        Args:
            delta: Seconds since the previous frame. Negative or
                non-finite values count as a paused frame.
            context_available: False when the host lost its rendering
                context; the clock is left untouched.

        Returns:
            True if the advance was applied.
        """
        if not context_available:
            logger.debug("Context unavailable, clock held at t=%.4f", self._time)
            return False

        dt = float(delta) if delta is not None else 0.0
        if not math.isfinite(dt) or dt < 0.0:
            dt = 0.0

        if not self.quantized:
            self._time += dt
            return True

        frame = self.frame_duration
        self._accumulator += dt
        # Integer step count; a tiny tolerance absorbs float error when the
        # accumulator lands exactly on a frame boundary.
        steps = int(math.floor(self._accumulator / frame + 1e-9))
        if steps > 0:
            self._time += steps * frame
            self._accumulator = max(self._accumulator - steps * frame, 0.0)
        return True
