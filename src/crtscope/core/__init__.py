"""Geometry, timing, sampling and glyph atlas building blocks."""

from crtscope.core.atlas import GlyphAtlas
from crtscope.core.clock import TemporalController
from crtscope.core.grid import CellGrid
from crtscope.core.params import EffectParameterSet
from crtscope.core.sampler import ImageSampler

__all__ = ["GlyphAtlas", "TemporalController", "CellGrid", "EffectParameterSet", "ImageSampler"]
