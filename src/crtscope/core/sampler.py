"""
Source image sampling.

Wraps an in-memory RGBA buffer behind a ``sample(u, v)`` capability with
bilinear filtering and clamp-to-edge addressing, so the pipeline never
needs a graphics context.
"""

from typing import Tuple

import numpy as np
from PIL import Image
from scipy.ndimage import map_coordinates

from crtscope.errors import ResourceUnavailable


def to_rgba_float(image) -> np.ndarray:
    """
    Normalize an image to a float32 (H, W, 4) array in [0, 1].

    Accepts a PIL image, or a numpy array shaped (H, W), (H, W, 3) or
    (H, W, 4) in uint8 or float.
    """
    if isinstance(image, Image.Image):
        return np.asarray(image.convert("RGBA"), dtype=np.float32) / 255.0

    arr = np.asarray(image)
    if arr.dtype == np.uint8:
        arr = arr.astype(np.float32) / 255.0
    else:
        arr = arr.astype(np.float32)

    if arr.ndim == 2:
        arr = np.repeat(arr[:, :, np.newaxis], 3, axis=2)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ResourceUnavailable(f"Unsupported image shape {arr.shape}")
    if arr.shape[2] == 3:
        alpha = np.ones(arr.shape[:2] + (1,), dtype=np.float32)
        arr = np.concatenate([arr, alpha], axis=2)
    return arr


class ImageSampler:
    """Read-only normalized-coordinate view over an RGBA image."""

    def __init__(self, image):
        if image is None:
            raise ResourceUnavailable("No source image")
        self.data = to_rgba_float(image)
        if self.data.shape[0] == 0 or self.data.shape[1] == 0:
            raise ResourceUnavailable("Source image is empty")
        self.data.setflags(write=False)

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) in pixels."""
        return self.data.shape[1], self.data.shape[0]

    def _texel_coords(self, u: np.ndarray, v: np.ndarray) -> np.ndarray:
        h, w = self.data.shape[:2]
        # Texel centers sit at (i + 0.5) / size
        rows = np.asarray(v, dtype=np.float64) * h - 0.5
        cols = np.asarray(u, dtype=np.float64) * w - 0.5
        rows, cols = np.broadcast_arrays(rows, cols)
        return np.stack([rows.ravel(), cols.ravel()])

    def sample_channel(self, u: np.ndarray, v: np.ndarray, channel: int) -> np.ndarray:
        """Bilinear sample of one channel at normalized coordinates."""
        coords = self._texel_coords(u, v)
        shape = np.broadcast(np.asarray(u), np.asarray(v)).shape
        values = map_coordinates(
            self.data[:, :, channel], coords, order=1, mode="nearest"
        )
        return values.reshape(shape).astype(np.float64)

    def sample(self, u: np.ndarray, v: np.ndarray) -> np.ndarray:
        """
        Bilinear RGBA sample.

        Args:
            u, v: Broadcastable arrays of normalized coordinates.

        Returns:
            float64 array of shape ``broadcast(u, v).shape + (4,)``.
        """
        return np.stack([self.sample_channel(u, v, c) for c in range(4)], axis=-1)
