"""
Procedural glyphs.

Used when no glyph atlas is bound. Each style is one function of
(brightness, local cell position) -> intensity, looked up through
GLYPH_STYLES. Styles without a function are rejected at configuration
time instead of silently drawing nothing.
"""

from typing import Callable

import numpy as np

from crtscope.core.noise import smoothstep
from crtscope.core.params import AsciiStyle
from crtscope.errors import ConfigurationError

GlyphFn = Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]


def standard_glyph(brightness: np.ndarray, local_u: np.ndarray, local_v: np.ndarray) -> np.ndarray:
    """
    Five density tiers on a 4x4 sub-cell grid, cross-faded.

    dot -> 2x2 block -> horizontal bar -> weighted bars -> bordered
    block -> solid. Overlapping smoothstep windows blend neighbouring
    tiers so density follows brightness continuously.

    Args:
        brightness: Remapped brightness, roughly [0, 1].
        local_u, local_v: Position inside the cell, in [0, 1).

    Returns:
        Glyph intensity in [0, 1].
    """
    b = np.asarray(brightness, dtype=np.float64)
    gx = np.floor(local_u * 4.0)
    gy = np.floor(local_v * 4.0)

    mid_x = (gx == 1) | (gx == 2)
    mid_y = (gy == 1) | (gy == 2)

    dot = ((gx == 1) & (gy == 1)).astype(np.float64)
    block2 = (mid_x & mid_y).astype(np.float64)
    bar = mid_y.astype(np.float64)
    bar_weighted = np.where((gy == 0) | (gy == 3), 1.0, np.where(mid_y, 0.5, 0.0))
    edge = np.where((gx == 0) | (gx == 2) | (gy == 0) | (gy == 2), 1.0, 0.3)

    t0 = 1.0 - smoothstep(0.0, 0.15, b)
    t1 = smoothstep(0.08, 0.22, b) * (1.0 - smoothstep(0.22, 0.35, b))
    t2 = smoothstep(0.20, 0.38, b) * (1.0 - smoothstep(0.38, 0.50, b))
    t3 = smoothstep(0.35, 0.52, b) * (1.0 - smoothstep(0.52, 0.65, b))
    t4 = smoothstep(0.50, 0.70, b) * (1.0 - smoothstep(0.70, 0.82, b))
    t5 = smoothstep(0.68, 1.0, b)

    val = dot * t0 * 0.5 + block2 * t1 + bar * t2 + bar_weighted * t3 + edge * t4 + t5
    val = np.clip(val, 0.0, 1.0)
    # Nothing is drawn in the very brightest (post-invert darkest) cells
    return np.where(b < 0.01, 0.0, val)


# Only STANDARD has procedural shapes; other styles need a glyph atlas
GLYPH_STYLES: dict[AsciiStyle, GlyphFn] = {
    AsciiStyle.STANDARD: standard_glyph,
}


def glyph_function(style: AsciiStyle) -> GlyphFn:
    """Procedural glyph for ``style``; raises ConfigurationError if none exists."""
    try:
        return GLYPH_STYLES[style]
    except KeyError:
        supported = ", ".join(s.value for s in GLYPH_STYLES)
        raise ConfigurationError(
            f"ASCII style {style.value!r} has no procedural glyphs "
            f"(supported: {supported}); bind a glyph atlas or pick another style"
        ) from None
