"""
Glyph atlas.

Rasterizes an ordered character set into a horizontal strip of square
tiles (white glyph on black) and exposes brightness -> tile lookup and
bilinear sampling of the red channel. Built once per character set, off
the per-frame path.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont
from scipy.ndimage import map_coordinates

logger = logging.getLogger(__name__)

# ASCII only, sparse to dense
TERMINAL_SYMBOLS = (".", ":", "-", "=", "+", "*", "#", "%", "@", "0", "O", "N", "M", "W", "B", "X")

MONO_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
    "/usr/share/fonts/truetype/freefont/FreeMono.ttf",
    "/usr/share/fonts/truetype/noto/NotoMono-Regular.ttf",
    "/System/Library/Fonts/Menlo.ttc",
    "DejaVuSansMono.ttf",
)

FontSpec = Union[None, str, Path, ImageFont.FreeTypeFont, ImageFont.ImageFont]


def resolve_character_set(character_set) -> Optional[list[str]]:
    """
    Map a host character-set option to a glyph list.

    ``"terminal"`` selects TERMINAL_SYMBOLS, a sequence is used as-is,
    None means procedural glyphs (no atlas).
    """
    if character_set is None:
        return None
    if isinstance(character_set, str):
        if character_set == "terminal":
            return list(TERMINAL_SYMBOLS)
        # A bare string is treated as its characters, in order
        return list(character_set)
    return [str(c) for c in character_set]


def load_font(font: FontSpec = None, size: int = 62):
    """
    Resolve a font spec to a Pillow font.

    Tries the given path, then common monospace fonts, then Pillow's
    bundled default at the requested size.
    """
    if font is not None and not isinstance(font, (str, Path)):
        return font

    candidates = [str(font)] if font is not None else list(MONO_FONT_CANDIDATES)
    for path in candidates:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue

    if font is not None:
        raise OSError(f"Cannot load font {font}")
    return ImageFont.load_default(size=size)


class GlyphAtlas:
    """
    Strip of N equal square tiles holding one glyph each.

    ``data`` is a float32 (tile_size, tile_size * N) array of red-channel
    intensity in [0, 1].
    """

    def __init__(self, data: np.ndarray, characters: Sequence[str], tile_size: int):
        self.data = data
        self.characters = tuple(characters)
        self.tile_size = tile_size
        self.data.setflags(write=False)

    @classmethod
    def build(
        cls,
        characters: Sequence[str],
        tile_size: int = 64,
        font: FontSpec = None,
        font_size: int = 62,
    ) -> Optional["GlyphAtlas"]:
        """
        Rasterize ``characters`` into an atlas.

        Args:
            characters: Ordered glyphs, sparse to dense.
            tile_size: Tile edge in pixels.
            font: Font path or Pillow font; None picks a monospace font.
            font_size: Point size used when loading from a path.

        Returns:
            The atlas, or None if the set is empty or the surface / font
            cannot be created.
        """
        chars = list(characters or [])
        if not chars:
            logger.warning("Empty character set, no glyph atlas built")
            return None
        if tile_size <= 0:
            logger.warning("Invalid atlas tile size %s", tile_size)
            return None

        count = len(chars)
        try:
            pil_font = load_font(font, font_size)
            canvas = Image.new("L", (tile_size * count, tile_size), 0)
        except (OSError, ValueError, MemoryError) as exc:
            logger.warning("Cannot create glyph atlas surface: %s", exc)
            return None

        draw = ImageDraw.Draw(canvas)
        half = tile_size / 2.0
        for i, ch in enumerate(chars):
            left, top, right, bottom = draw.textbbox((0, 0), ch, font=pil_font)
            x = i * tile_size + half - (left + right) / 2.0
            y = half - (top + bottom) / 2.0
            draw.text((x, y), ch, fill=255, font=pil_font)

        data = np.asarray(canvas, dtype=np.float32) / 255.0
        logger.debug("Built glyph atlas: %d tiles of %dpx", count, tile_size)
        return cls(data, chars, tile_size)

    @property
    def tile_count(self) -> int:
        if self.data is None:
            return 0
        return len(self.characters)

    @property
    def active(self) -> bool:
        return self.tile_count >= 1

    def tile_for(self, brightness) -> np.ndarray:
        """Tile index ``clamp(floor(b * N), 0, N - 1)``; monotonic in ``b``."""
        n = self.tile_count
        tile = np.floor(np.asarray(brightness, dtype=np.float64) * n)
        return np.clip(tile, 0, max(n - 1, 0))

    def tile(self, index: int) -> np.ndarray:
        """The raster of one tile."""
        s = self.tile_size
        return self.data[:, index * s:(index + 1) * s]

    def sample(self, tile_index, local_u, local_v) -> np.ndarray:
        """
        Bilinear intensity of a tile at a local position.

        Args:
            tile_index: Tile indices (broadcastable).
            local_u, local_v: Position inside the tile, in [0, 1].

        Returns:
            float64 intensity array in [0, 1].
        """
        if not self.active:
            raise RuntimeError("Glyph atlas has been released")
        n = self.tile_count
        h, w = self.data.shape
        atlas_u = (np.asarray(tile_index, dtype=np.float64) + local_u) / n
        rows, cols = np.broadcast_arrays(
            np.asarray(local_v, dtype=np.float64) * h - 0.5,
            atlas_u * w - 0.5,
        )
        values = map_coordinates(
            self.data, np.stack([rows.ravel(), cols.ravel()]), order=1, mode="nearest"
        )
        return values.reshape(rows.shape).astype(np.float64)

    def release(self):
        """Free the raster; the atlas reports zero tiles afterwards."""
        self.data = None
        logger.debug("Glyph atlas released")

    def to_image(self) -> Image.Image:
        """The atlas strip as an 8-bit grayscale image."""
        return Image.fromarray((np.clip(self.data, 0, 1) * 255).astype(np.uint8))
