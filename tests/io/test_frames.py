"""Tests for still-image input and output."""

import numpy as np
import pytest
from PIL import Image

from crtscope.io.frames import flatten_rgb, iter_images, list_sequence, load_image, save_frame


@pytest.fixture
def png(tmp_path):
    path = tmp_path / "src.png"
    Image.new("RGB", (20, 10), (255, 0, 0)).save(path)
    return path


class TestLoad:
    def test_rgba_float(self, png):
        img = load_image(png)
        assert img.shape == (10, 20, 4)
        assert img.dtype == np.float32
        np.testing.assert_allclose(img[0, 0], [1, 0, 0, 1])

    def test_resize(self, png):
        assert load_image(png, size=(8, 6)).shape == (6, 8, 4)


class TestListSequence:
    def test_directory_sorted_images_only(self, tmp_path):
        for name in ("b.png", "a.jpg", "notes.txt"):
            (tmp_path / name).touch()
        assert [p.name for p in list_sequence(tmp_path)] == ["a.jpg", "b.png"]

    def test_single_file(self, png):
        assert list_sequence(png) == [png]

    def test_empty_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list_sequence(tmp_path)

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list_sequence(tmp_path / "missing.png")

    def test_iter_images(self, png):
        assert len(list(iter_images([png, png]))) == 2


class TestSave:
    def test_flatten_over_background(self):
        frame = np.zeros((1, 2, 4), dtype=np.float32)
        frame[0, 0] = [1.0, 1.0, 1.0, 1.0]
        frame[0, 1] = [1.0, 1.0, 1.0, 0.0]
        out = flatten_rgb(frame, background=(0.0, 0.0, 1.0))
        assert out.dtype == np.uint8
        np.testing.assert_array_equal(out[0], [[255, 255, 255], [0, 0, 255]])

    def test_save_rgb(self, tmp_path):
        frame = np.full((4, 5, 4), 0.5, dtype=np.float32)
        frame[..., 3] = 1.0
        path = save_frame(frame, tmp_path / "out" / "f.png")
        with Image.open(path) as img:
            assert img.mode == "RGB"
            assert img.size == (5, 4)
            assert img.getpixel((0, 0)) == (128, 128, 128)

    def test_save_keeps_alpha(self, tmp_path):
        frame = np.zeros((3, 3, 4), dtype=np.float32)
        path = save_frame(frame, tmp_path / "a.png", background=None)
        with Image.open(path) as img:
            assert img.mode == "RGBA"
