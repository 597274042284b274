"""
Per-pixel ASCII/CRT transform.

Vectorized with numpy: every stage runs over whole coordinate arrays,
never a Python loop per pixel. Stage order:

    curvature -> wave -> cell resolution (jitter, glitch) -> sample
    (aberration) -> tone (noise) -> invert -> volume remap -> empty cut
    -> glyph lookup -> compositing -> palette -> pointer glow ->
    scanlines -> vignette -> alpha

The source is sampled once per cell, at the cell center, so the glyph
decision is shared by every pixel of a cell while the glyph interior
uses each pixel's position inside its unperturbed cell.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from crtscope.core.atlas import GlyphAtlas
from crtscope.core.grid import CellGrid
from crtscope.core.noise import luminance
from crtscope.core.params import EffectParameterSet
from crtscope.core.sampler import ImageSampler
from crtscope.errors import ConfigurationError
from crtscope.render.colorgrade import (
    adjust_tone,
    apply_palette,
    film_noise,
    pointer_glow,
    scanlines,
    vignette,
)
from crtscope.render.glyphs import glyph_function
from crtscope.render.warp import barrel_warp, wave_warp

logger = logging.getLogger(__name__)

BACKGROUND_LUMINANCE = 0.06
VOLUME_GAIN = 1.6
ATLAS_INSET = 0.02


@dataclass(frozen=True)
class FrameState:
    """Per-frame values read by every pixel, captured once at frame start."""

    time: float = 0.0
    resolution: Tuple[float, float] = (1920.0, 1080.0)
    mouse_pos: Tuple[float, float] = (0.0, 0.0)


class PixelTransformPipeline:
    """
    Stateless pixel shader over an ImageSampler.

    Holds only immutable configuration (parameter set and optional glyph
    atlas); all per-frame inputs arrive in a FrameState.
    """

    def __init__(self, params: EffectParameterSet | None = None, atlas: Optional[GlyphAtlas] = None):
        self.params = params or EffectParameterSet()
        self.atlas = atlas
        try:
            self._glyph_fn = glyph_function(self.params.ascii_style)
        except ConfigurationError:
            # Acceptable only while an atlas supplies the glyphs
            if not self.uses_atlas:
                raise
            self._glyph_fn = None

    @property
    def uses_atlas(self) -> bool:
        return self.atlas is not None and self.atlas.tile_count >= 1

    @property
    def can_draw(self) -> bool:
        """False once a bound atlas is released under a style with no procedural glyphs."""
        return self.uses_atlas or self._glyph_fn is not None

    # --- Sampling ---

    def _sample_cell(self, sampler: ImageSampler, su: np.ndarray, sv: np.ndarray) -> np.ndarray:
        """RGBA at the cell center, split horizontally per channel under aberration."""
        offset = self.params.aberration_strength
        if offset <= 0:
            return sampler.sample(su, sv)
        return np.stack(
            [
                sampler.sample_channel(su + offset, sv, 0),
                sampler.sample_channel(su, sv, 1),
                sampler.sample_channel(su - offset, sv, 2),
                sampler.sample_channel(su, sv, 3),
            ],
            axis=-1,
        )

    # --- Glyphs ---

    def _glyph_intensity(
        self,
        glyph_brightness: np.ndarray,
        local_u: np.ndarray,
        local_v: np.ndarray,
        empty: np.ndarray,
    ) -> np.ndarray:
        """Glyph coverage per pixel; empty cells are never looked up."""
        char = np.zeros(glyph_brightness.shape, dtype=np.float64)
        drawn = ~empty
        if not drawn.any():
            return char

        b = glyph_brightness[drawn]
        lu = local_u[drawn]
        lv = local_v[drawn]

        if self.uses_atlas:
            tile = self.atlas.tile_for(b)
            inner_u = ATLAS_INSET + lu * (1.0 - 2.0 * ATLAS_INSET)
            inner_v = ATLAS_INSET + lv * (1.0 - 2.0 * ATLAS_INSET)
            char[drawn] = self.atlas.sample(tile, inner_u, inner_v)
        else:
            if self._glyph_fn is None:
                raise ConfigurationError(
                    f"Glyph atlas released and style {self.params.ascii_style.value!r} "
                    "has no procedural glyphs"
                )
            char[drawn] = self._glyph_fn(b, lu, lv)
        return char

    # --- Shading ---

    def shade(
        self,
        sampler: ImageSampler,
        u: np.ndarray,
        v: np.ndarray,
        frame: FrameState,
    ) -> np.ndarray:
        """
        Evaluate the full stage chain at output coordinates.

        Args:
            sampler: Source image.
            u, v: Normalized output coordinates (any broadcastable shape).
            frame: Snapshot of time, resolution and pointer.

        Returns:
            float64 RGBA array of shape ``broadcast(u, v).shape + (4,)``.
        """
        p = self.params
        u, v = np.broadcast_arrays(np.asarray(u, dtype=np.float64), np.asarray(v, dtype=np.float64))
        t = frame.time

        # 1-2. Coordinate warps
        wu, wv, inside = barrel_warp(u, v, p.curvature)
        wu, wv = wave_warp(wu, wv, p.wave_amplitude, p.wave_frequency, p.wave_speed, t)

        # Cell geometry; the glyph interior ignores jitter/glitch
        grid = CellGrid(frame.resolution, p.cell_size)
        cx, cy = grid.cell_coords(wu, wv)
        local_u, local_v = grid.local_coords(wu, wv)
        cx, cy = grid.jitter(cx, cy, t, p.jitter_intensity, p.jitter_speed)
        cx, cy = grid.glitch(cx, cy, t, p.glitch_intensity, p.glitch_frequency)
        su, sv = grid.cell_uv(cx, cy)

        # 3. Cell sample; raw luma only detects true background
        cell = self._sample_cell(sampler, su, sv)
        raw_luminance = luminance(cell)

        # 4. Tone
        rgb = adjust_tone(cell[..., :3], p.contrast_adjust, p.brightness_adjust)
        rgb = film_noise(rgb, su, sv, t, p.noise_intensity, p.noise_scale, p.noise_speed)
        brightness = luminance(rgb)

        # 6. Invert
        if p.invert:
            brightness = 1.0 - brightness

        # 7. Volume remap, for glyph selection only
        glyph_brightness = brightness
        if p.volume_shading:
            glyph_brightness = np.clip((brightness - 0.5) * VOLUME_GAIN + 0.5, 0.0, 1.0)

        # 8-9. Empty cut and glyph lookup
        empty = (raw_luminance < BACKGROUND_LUMINANCE) | (brightness < p.empty_threshold)
        char = self._glyph_intensity(glyph_brightness, local_u, local_v, empty)

        # 10. Compositing
        if p.color_mode:
            if p.tint_color is not None:
                color = np.asarray(p.tint_color) * char[..., np.newaxis]
            else:
                color = rgb * char[..., np.newaxis]
        else:
            color = np.repeat((brightness * char)[..., np.newaxis], 3, axis=-1)

        # 11-14. Screen-space post effects
        color = apply_palette(color, p.color_palette)
        if p.mouse_glow_enabled:
            color = pointer_glow(
                color, u, v, frame.resolution, frame.mouse_pos,
                p.mouse_glow_radius, p.mouse_glow_intensity,
            )
        color = scanlines(color, v, p.scanline_intensity, p.scanline_count)
        color = vignette(color, u, v, p.vignette_intensity, p.vignette_radius)

        # 15. Alpha from the cell sample; outside the curved glass is blank
        out = np.concatenate([color, cell[..., 3:4]], axis=-1)
        if p.curvature > 0:
            out[~inside] = 0.0
        return out

    def render(
        self,
        sampler: ImageSampler,
        frame: FrameState,
        workers: int = 1,
    ) -> np.ndarray:
        """
        Shade every pixel of an output of ``frame.resolution``.

        Rows are split into bands across a thread pool when
        ``workers > 1``; bands share only immutable inputs.

        Returns:
            float32 (H, W, 4) RGBA frame.
        """
        width = int(frame.resolution[0])
        height = int(frame.resolution[1])
        if width <= 0 or height <= 0:
            logger.debug("Degenerate resolution %s, empty frame", frame.resolution)
            return np.zeros((max(height, 0), max(width, 0), 4), dtype=np.float32)

        us = (np.arange(width, dtype=np.float64) + 0.5) / width
        vs = (np.arange(height, dtype=np.float64) + 0.5) / height

        def shade_rows(rows: np.ndarray) -> np.ndarray:
            uu, vv = np.meshgrid(us, vs[rows])
            return self.shade(sampler, uu, vv, frame).astype(np.float32)

        workers = max(1, min(int(workers), height))
        if workers == 1:
            return shade_rows(np.arange(height))

        bands = np.array_split(np.arange(height), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            parts = list(pool.map(shade_rows, bands))
        return np.concatenate(parts, axis=0)
