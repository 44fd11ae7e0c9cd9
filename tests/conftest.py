"""
Shared fixtures for the posing tests.

Qt runs on the offscreen platform so the painter-backed tests work headless.
"""
import os

import numpy as np
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from image_io import SourceImage  # noqa: E402
from surface import Surface  # noqa: E402


def make_pixels(width, height):
    """ Opaque RGBA gradient where nearly every pixel differs from its neighbours. """
    ys, xs = np.mgrid[0:height, 0:width]
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[..., 0] = (xs * 2) % 256
    pixels[..., 1] = (ys * 2) % 256
    pixels[..., 2] = (xs + ys) % 256
    pixels[..., 3] = 255
    return pixels


@pytest.fixture(scope="session")
def qapp():
    from PyQt5.QtWidgets import QApplication
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def image100():
    return SourceImage(make_pixels(100, 100), name="square")


class RecordingSurface(Surface):
    """ Surface that only records what it was asked to draw. """

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.fills = []
        self.strokes = []
        self.markers = []
        self.rings = []

    def fill_triangle_with_affine_sample(self, dst_tri, image, affine, alpha):
        self.fills.append((np.array(dst_tri, dtype=float), image, affine, alpha))

    def stroke_triangle(self, tri, color, line_width):
        self.strokes.append(np.array(tri, dtype=float))

    def draw_pin_marker(self, x, y, radius, fill, outline, outline_width):
        self.markers.append((x, y, radius))

    def draw_dashed_ring(self, x, y, radius, color, line_width, dash):
        self.rings.append((x, y, radius))
