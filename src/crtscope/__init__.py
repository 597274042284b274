"""ASCII/CRT post-processing for rendered images."""

from crtscope.core.atlas import TERMINAL_SYMBOLS, GlyphAtlas
from crtscope.core.clock import TemporalController
from crtscope.core.grid import CellGrid
from crtscope.core.params import AsciiStyle, ColorPalette, EffectParameterSet
from crtscope.core.sampler import ImageSampler
from crtscope.errors import ConfigurationError, CrtScopeError, ResourceUnavailable
from crtscope.render.pipeline import FrameState, PixelTransformPipeline
from crtscope.render.renderer import AsciiRenderer, RenderConfig

__version__ = "0.1.0"
__all__ = [
    "AsciiRenderer",
    "AsciiStyle",
    "CellGrid",
    "ColorPalette",
    "ConfigurationError",
    "CrtScopeError",
    "EffectParameterSet",
    "FrameState",
    "GlyphAtlas",
    "ImageSampler",
    "PixelTransformPipeline",
    "RenderConfig",
    "ResourceUnavailable",
    "TERMINAL_SYMBOLS",
    "TemporalController",
]
