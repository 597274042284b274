"""Pixel pipeline and frame orchestration."""

from crtscope.render.pipeline import FrameState, PixelTransformPipeline
from crtscope.render.renderer import AsciiRenderer, RenderConfig

__all__ = ["FrameState", "PixelTransformPipeline", "AsciiRenderer", "RenderConfig"]
