"""
Frame orchestrator for the ASCII/CRT effect.

Owns the clock, the parameter set and the glyph atlas, takes host input
updates (pointer, resize) between frames, and drives the pixel pipeline
once per frame. Sequences are yielded from a generator so frames can be
piped straight to the encoder.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Optional, Tuple

import numpy as np

from crtscope.core.atlas import GlyphAtlas, resolve_character_set
from crtscope.core.clock import TemporalController
from crtscope.core.params import EffectParameterSet
from crtscope.core.sampler import ImageSampler
from crtscope.errors import ConfigurationError, ResourceUnavailable
from crtscope.render.pipeline import FrameState, PixelTransformPipeline

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Host-side settings that are not part of the effect itself."""

    # Output size; None follows the source image
    width: Optional[int] = None
    height: Optional[int] = None
    fps: int = 30

    # Glyph atlas: "terminal", a list of glyphs, or None for procedural
    character_set: Any = None
    atlas_tile_size: int = 64
    font: Optional[str] = None
    font_size: int = 62

    # Row bands evaluated in parallel
    workers: int = 1


class AsciiRenderer:
    """
    Renders ASCII/CRT frames from source images.

    Host inputs (pointer position, output size) may be updated from any
    thread; they are copied once at the start of each frame, so a frame
    never sees a half-applied update.
    """

    def __init__(
        self,
        params: EffectParameterSet | None = None,
        config: RenderConfig | None = None,
    ):
        self.cfg = config or RenderConfig()
        self.params = params or EffectParameterSet()

        self.atlas = self._build_atlas(self.cfg.character_set)
        self.pipeline = PixelTransformPipeline(self.params, self.atlas)
        self.clock = TemporalController(self.params.target_fps)

        self._inputs_lock = threading.Lock()
        self._pending_resolution: Optional[Tuple[float, float]] = (
            (self.cfg.width, self.cfg.height)
            if self.cfg.width and self.cfg.height
            else None
        )
        self._pending_mouse: Tuple[float, float] = (0.0, 0.0)

        self.frames_rendered = 0
        self.frames_skipped = 0

    def _build_atlas(self, character_set) -> Optional[GlyphAtlas]:
        chars = resolve_character_set(character_set)
        if chars is None:
            return None
        atlas = GlyphAtlas.build(
            chars,
            tile_size=self.cfg.atlas_tile_size,
            font=self.cfg.font,
            font_size=self.cfg.font_size,
        )
        if atlas is None:
            logger.warning("Falling back to procedural glyphs")
        return atlas

    # --- Configuration ---

    def set_params(self, params: EffectParameterSet):
        """Swap in a new parameter set; simulation time carries over."""
        pipeline = PixelTransformPipeline(params, self.atlas)
        self.params = params
        self.pipeline = pipeline
        self.clock.target_fps = params.target_fps

    def set_character_set(self, character_set):
        """Rebuild (or drop) the glyph atlas and release the previous one."""
        atlas = self._build_atlas(character_set)
        try:
            pipeline = PixelTransformPipeline(self.params, atlas)
        except ConfigurationError:
            if atlas is not None:
                atlas.release()
            raise
        old = self.atlas
        self.atlas = atlas
        self.pipeline = pipeline
        self.cfg.character_set = character_set
        if old is not None:
            old.release()

    def release(self):
        """
        Free the glyph atlas and fall back to procedural glyphs.

        The atlas stays bound when the current style has no procedural
        glyphs to fall back to.
        """
        if self.atlas is None:
            return
        try:
            pipeline = PixelTransformPipeline(self.params, None)
        except ConfigurationError as exc:
            logger.warning("Keeping glyph atlas: %s", exc)
            return
        old = self.atlas
        self.atlas = None
        self.pipeline = pipeline
        old.release()

    # --- Host inputs ---

    def update_inputs(
        self,
        resolution: Optional[Tuple[float, float]] = None,
        mouse_pos: Optional[Tuple[float, float]] = None,
    ):
        """Queue host input changes for the next frame."""
        with self._inputs_lock:
            if resolution is not None:
                self._pending_resolution = (float(resolution[0]), float(resolution[1]))
            if mouse_pos is not None:
                self._pending_mouse = (float(mouse_pos[0]), float(mouse_pos[1]))

    def snapshot(self, source_size: Tuple[int, int] = (1920, 1080)) -> FrameState:
        """Freeze the current time and host inputs into a FrameState."""
        with self._inputs_lock:
            resolution = self._pending_resolution or (float(source_size[0]), float(source_size[1]))
            mouse = self._pending_mouse
        return FrameState(time=self.clock.time, resolution=resolution, mouse_pos=mouse)

    # --- Rendering ---

    def render_frame(
        self,
        image,
        delta: float,
        context_available: bool = True,
    ) -> np.ndarray | None:
        """
        Render one frame.

        Args:
            image: Source image (PIL image or array), or None.
            delta: Real seconds since the previous frame.
            context_available: False when the host's rendering context
                is lost; the frame is skipped.

        Returns:
            float32 (H, W, 4) RGBA frame, or None if the frame was
            skipped (time does not advance on a skipped frame).
        """
        if not context_available:
            self.frames_skipped += 1
            logger.warning("Rendering context unavailable, skipping frame")
            return None

        try:
            sampler = ImageSampler(image)
        except ResourceUnavailable as exc:
            self.frames_skipped += 1
            logger.warning("Skipping frame: %s", exc)
            return None

        if not self.pipeline.can_draw:
            self.frames_skipped += 1
            logger.warning("No glyph source for style %r, skipping frame", self.params.ascii_style.value)
            return None

        self.clock.advance(delta)
        frame = self.snapshot(sampler.size)
        result = self.pipeline.render(sampler, frame, workers=self.cfg.workers)
        self.frames_rendered += 1
        return result

    def render_sequence(
        self,
        images: Iterable,
        total: int | None = None,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> Iterator[np.ndarray]:
        """
        Render frames as a generator at ``cfg.fps``.

        Args:
            images: Iterable of source images, one per output frame.
            total: Frame count for progress reporting (defaults to
                ``len(images)`` when available).
            progress_callback: Optional callback(current, total).

        Yields:
            float32 (H, W, 4) RGBA frames; skipped frames are not yielded.
        """
        if total is None and hasattr(images, "__len__"):
            total = len(images)
        total = total or 0
        delta = 1.0 / self.cfg.fps if self.cfg.fps > 0 else 0.0

        for i, image in enumerate(images):
            # The first frame renders at t=0
            frame = self.render_frame(image, delta if i > 0 else 0.0)
            if frame is not None:
                yield frame

            if progress_callback:
                progress_callback(i + 1, max(total, i + 1))
