"""
Still-image input and output.

Loads source frames with Pillow and writes rendered RGBA frames as PNG.
"""

from pathlib import Path
from typing import Iterator, Union

import numpy as np
from PIL import Image

from crtscope.render.colorgrade import to_uint8

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".tif", ".tiff"}


def load_image(path: Union[str, Path], size: tuple[int, int] | None = None) -> np.ndarray:
    """
    Load an image as a float32 (H, W, 4) RGBA array in [0, 1].

    Args:
        path: Image file.
        size: Optional (width, height) to resize to (bilinear).
    """
    with Image.open(path) as img:
        img = img.convert("RGBA")
        if size is not None and img.size != tuple(size):
            img = img.resize(tuple(size), Image.BILINEAR)
        return np.asarray(img, dtype=np.float32) / 255.0


def list_sequence(source: Union[str, Path]) -> list[Path]:
    """
    Frames of an image sequence, sorted by name.

    ``source`` is a directory of images or a single image file.
    """
    source = Path(source)
    if source.is_dir():
        frames = sorted(p for p in source.iterdir() if p.suffix.lower() in IMAGE_SUFFIXES)
        if not frames:
            raise FileNotFoundError(f"No images found in {source}")
        return frames
    if not source.exists():
        raise FileNotFoundError(f"Input not found: {source}")
    return [source]


def iter_images(paths: list[Path], size: tuple[int, int] | None = None) -> Iterator[np.ndarray]:
    for path in paths:
        yield load_image(path, size)


def flatten_rgb(frame: np.ndarray, background=(0.0, 0.0, 0.0)) -> np.ndarray:
    """Alpha-composite a float RGBA frame over a solid color, as uint8 RGB."""
    rgb = np.clip(frame[..., :3], 0.0, 1.0)
    alpha = np.clip(frame[..., 3:4], 0.0, 1.0)
    out = rgb * alpha + np.asarray(background, dtype=np.float32) * (1.0 - alpha)
    return to_uint8(out)


def save_frame(frame: np.ndarray, path: Union[str, Path], background=(0.0, 0.0, 0.0)) -> Path:
    """
    Write a float RGBA frame as PNG.

    Args:
        frame: (H, W, 4) float frame in [0, 1] (values are clipped).
        path: Output path; parent directories are created.
        background: RGB in [0, 1] to flatten onto, or None to keep alpha.

    Returns:
        The written path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if background is None:
        img = Image.fromarray(to_uint8(frame))
    else:
        img = Image.fromarray(flatten_rgb(frame, background))
    img.save(path)
    return path
