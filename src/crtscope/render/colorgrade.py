"""
Tone and color post-processing.

Contrast/brightness, film noise, phosphor palettes, pointer glow,
scanlines and vignette. All functions work on float RGB arrays shaped
(..., 3) together with matching normalized coordinate arrays, and each
returns its input untouched when its strength is zero.
"""

from typing import Tuple

import numpy as np

from crtscope.core.noise import luminance, value_noise
from crtscope.core.params import ColorPalette


def adjust_tone(
    rgb: np.ndarray,
    contrast: float = 1.0,
    brightness: float = 0.0,
) -> np.ndarray:
    """
    Linear contrast around mid-gray plus a brightness offset.

    Not clamped; out-of-range values flow on to the brightness decision.
    """
    if contrast == 1.0 and brightness == 0.0:
        return rgb
    return (rgb - 0.5) * contrast + 0.5 + brightness


def film_noise(
    rgb: np.ndarray,
    u: np.ndarray,
    v: np.ndarray,
    time: float,
    intensity: float,
    scale: float = 1.0,
    speed: float = 1.0,
) -> np.ndarray:
    """
    Add animated value noise, centered on zero, to every channel.

    Args:
        rgb: (..., 3) float colors.
        u, v: Coordinates the noise is evaluated at.
        time: Simulation time.
        intensity: Peak-to-peak noise amplitude (0 disables).
        scale: Noise lattice frequency.
        speed: Drift per second along both axes.

    Returns:
        Noisy (..., 3) colors.
    """
    if intensity <= 0:
        return rgb
    drift = time * speed
    n = value_noise(u * scale + drift, v * scale + drift)
    return rgb + ((n - 0.5) * intensity)[..., np.newaxis]


# Phosphor palettes: (constant part, luminance multiplier) per channel
_PALETTES = {
    ColorPalette.GREEN: ((0.1, 0.0, 0.1), (0.0, 0.9, 0.0)),
    ColorPalette.AMBER: ((0.0, 0.0, 0.0), (1.0, 0.6, 0.2)),
    ColorPalette.CYAN: ((0.0, 0.0, 0.0), (0.0, 0.8, 1.0)),
    ColorPalette.BLUE: ((0.1, 0.2, 0.0), (0.0, 0.0, 1.0)),
}


def apply_palette(rgb: np.ndarray, palette: ColorPalette) -> np.ndarray:
    """Collapse colors to a monochrome phosphor look driven by luma."""
    if palette is ColorPalette.NONE:
        return rgb
    base, gain = _PALETTES[palette]
    lum = luminance(rgb)[..., np.newaxis]
    return np.asarray(base) + lum * np.asarray(gain)


def pointer_glow(
    rgb: np.ndarray,
    u: np.ndarray,
    v: np.ndarray,
    resolution: Tuple[float, float],
    mouse_pos: Tuple[float, float],
    radius: float,
    intensity: float,
) -> np.ndarray:
    """
    Additive exponential glow around the pointer, in pixel space.

    ``exp(-distance / radius) * intensity`` is added to every channel.
    """
    px = u * resolution[0] - mouse_pos[0]
    py = v * resolution[1] - mouse_pos[1]
    dist = np.sqrt(px * px + py * py)
    glow = np.exp(-dist / radius) * intensity
    return rgb + glow[..., np.newaxis]


def scanlines(
    rgb: np.ndarray,
    v: np.ndarray,
    intensity: float,
    count: float = 200.0,
) -> np.ndarray:
    """Darken horizontal bands following ``sin(v * count * pi)``."""
    if intensity <= 0:
        return rgb
    band = np.sin(v * count * np.pi) * 0.5 + 0.5
    return rgb * (1.0 - band * intensity)[..., np.newaxis]


def vignette(
    rgb: np.ndarray,
    u: np.ndarray,
    v: np.ndarray,
    intensity: float,
    radius: float = 0.8,
) -> np.ndarray:
    """
    Radial darkening from the center.

    Args:
        rgb: (..., 3) float colors.
        u, v: Normalized output coordinates.
        intensity: Blend between no vignette (0) and the full curve (1).
        radius: Squared distance (in [-1, 1] space) that reaches black.

    Returns:
        Darkened (..., 3) colors.
    """
    if intensity <= 0:
        return rgb
    cu = u * 2.0 - 1.0
    cv = v * 2.0 - 1.0
    curve = 1.0 - (cu * cu + cv * cv) / radius
    factor = 1.0 + (curve - 1.0) * intensity
    return rgb * factor[..., np.newaxis]


def to_uint8(frame: np.ndarray) -> np.ndarray:
    """Clip a float frame in [0, 1] to uint8, keeping its channel count."""
    return (np.clip(frame, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)
