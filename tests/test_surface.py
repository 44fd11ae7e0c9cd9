import numpy as np
import pytest

from image_io import SourceImage
from surface import ArraySurface, QImageSurface
from triangle_mapper import Affine2D, affine_for
from utils import triangle_coverage
from conftest import make_pixels


def test_coverage_shares_edges_exactly_once():
    ys, xs = np.mgrid[0:10, 0:10] + 0.5
    # Two triangles of a cell, plus pixel centres that sit on the diagonal
    first = triangle_coverage(xs, ys, (0, 0), (10, 0), (0, 10))
    second = triangle_coverage(xs, ys, (10, 0), (10, 10), (0, 10))
    total = first.astype(int) + second.astype(int)
    assert np.all(total == 1)


def test_coverage_ignores_winding():
    ys, xs = np.mgrid[0:8, 0:8] + 0.5
    ccw = triangle_coverage(xs, ys, (0, 0), (8, 0), (0, 8))
    cw = triangle_coverage(xs, ys, (0, 0), (0, 8), (8, 0))
    assert np.array_equal(ccw, cw)
    assert ccw.sum() > 0


def test_array_surface_fills_only_triangle():
    image = SourceImage(make_pixels(20, 20))
    surface = ArraySurface(20, 20)
    tri = [(0, 0), (20, 0), (0, 20)]
    surface.fill_triangle_with_affine_sample(tri, image, affine_for(tri, tri), 1.0)
    out = surface.to_array()
    assert np.array_equal(out[2, 3], image.pixels[2, 3])
    assert out[18, 18, 3] == 0


def test_array_surface_samples_through_affine():
    image = SourceImage(make_pixels(10, 10))
    surface = ArraySurface(40, 40)
    src = [(0, 0), (10, 0), (0, 10)]
    dst = [(20, 20), (40, 20), (20, 40)]
    surface.fill_triangle_with_affine_sample(dst, image, affine_for(src, dst), 1.0)
    out = surface.to_array()
    # Scaled 2x: destination pixel (20, 20) samples inside source pixel (0, 0)
    assert np.array_equal(out[20, 20], image.pixels[0, 0])
    assert out[10, 10, 3] == 0


def test_array_surface_skips_degenerate_destination():
    image = SourceImage(make_pixels(10, 10))
    surface = ArraySurface(10, 10)
    surface.fill_triangle_with_affine_sample([(0, 0), (5, 5), (10, 10)], image, Affine2D(), 1.0)
    assert surface.to_array().max() == 0


def test_array_surface_alpha_over():
    red = SourceImage(np.dstack([np.full((4, 4), c, np.uint8) for c in (255, 0, 0, 255)]))
    blue = SourceImage(np.dstack([np.full((4, 4), c, np.uint8) for c in (0, 0, 255, 255)]))
    surface = ArraySurface(4, 4)
    for tri in ([(0, 0), (4, 0), (0, 4)], [(4, 0), (4, 4), (0, 4)]):
        surface.fill_triangle_with_affine_sample(tri, red, Affine2D(), 1.0)
        surface.fill_triangle_with_affine_sample(tri, blue, Affine2D(), 0.5)
    out = surface.to_array().astype(int)
    assert np.all(np.abs(out[..., 0] - 128) <= 1)
    assert np.all(np.abs(out[..., 2] - 128) <= 1)
    assert np.all(out[..., 3] == 255)


def test_array_surface_overlay_primitives():
    surface = ArraySurface(60, 60)
    surface.draw_pin_marker(30, 30, 6, (255, 255, 255), (0, 0, 0), 2)
    out = surface.to_array()
    assert out[30, 30].tolist() == [255, 255, 255, 255]
    assert out[29, 36, :3].tolist() == [0, 0, 0]
    assert out[0, 0, 3] == 0

    surface = ArraySurface(60, 60)
    surface.draw_dashed_ring(30, 30, 18, (59, 130, 246), 2, (4, 4))
    ring = surface.to_array()[..., 3] > 0
    assert 0 < ring.sum() < 2 * np.pi * 18 * 2
    assert not ring[30, 30]

    surface = ArraySurface(20, 20)
    surface.stroke_triangle([(2, 2), (17, 2), (2, 17)], (255, 255, 255, 0.2), 0.5)
    alpha = surface.to_array()[..., 3]
    assert alpha[2, 10] == round(0.2 * 255)
    assert alpha[10, 10] == 0


def test_qimage_surface_draws_affine_sample(qapp):
    image = SourceImage(make_pixels(40, 40))
    tri = [(0, 0), (40, 0), (0, 40)]
    with QImageSurface(60, 60) as surface:
        surface.fill_triangle_with_affine_sample(
            [(x + 10, y + 10) for x, y in tri], image, Affine2D(e=10, f=10), 1.0)
    out = surface.to_array().astype(int)
    assert out.shape == (60, 60, 4)
    assert np.all(np.abs(out[15, 15] - image.pixels[5, 5].astype(int)) <= 2)
    # Outside the clip triangle nothing is painted
    assert out[45, 45, 3] == 0


def test_qimage_surface_opacity(qapp):
    image = SourceImage(make_pixels(20, 20))
    tri = [(0, 0), (20, 0), (0, 20)]
    with QImageSurface(20, 20) as surface:
        surface.fill_triangle_with_affine_sample(tri, image, Affine2D(), 0.5)
    assert surface.to_array()[3, 3, 3] == pytest.approx(128, abs=2)


def test_qimage_surface_overlay(qapp):
    with QImageSurface(60, 60) as surface:
        surface.draw_pin_marker(30, 30, 8, (59, 130, 246), (0, 0, 0), 2)
        surface.draw_dashed_ring(30, 30, 18, (59, 130, 246), 2, (4, 4))
        surface.stroke_triangle([(2, 2), (50, 2), (2, 50)], (255, 255, 255, 0.2), 0.5)
    out = surface.to_array()
    assert out[30, 30].tolist() == [59, 130, 246, 255]
    assert out[5, 55, 3] == 0


def test_save_png(qapp, tmp_path):
    surface = ArraySurface(8, 6)
    path = surface.save(str(tmp_path / "out.png"))
    assert SourceImage.from_file(path).size == (8, 6)
