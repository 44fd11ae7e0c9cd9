import math

import numpy as np
import pytest

from elements import Pin, RotationMode
from pin_deformer import calculate_deformed_point, deform_vertices, pin_weight
from triangle_mesh import generate_grid_mesh


def moved_pin(x, y, to_x, to_y, **kwargs):
    pin = Pin(x, y, **kwargs)
    pin.move_to(to_x, to_y)
    return pin


@pytest.mark.parametrize("influence", [0.1, 1.0, 8.0, 20.0])
def test_no_pins_is_identity(influence):
    for p in [(0, 0), (12.5, -3), (1e4, 7)]:
        assert calculate_deformed_point(p, [], influence) == (float(p[0]), float(p[1]))


def test_untouched_pin_is_identity():
    pins = [Pin(40, 60, depth=3)]
    for p in [(0, 0), (40, 60), (41, 60), (250, 13)]:
        x, y = calculate_deformed_point(p, pins, 8.0)
        assert x == pytest.approx(p[0])
        assert y == pytest.approx(p[1])


def test_untouched_fixed_rotation_pin_is_not_identity():
    pin = Pin(50, 50, rotation=90, rotation_mode=RotationMode.FIXED)
    x, y = calculate_deformed_point((60, 50), [pin], 8.0)
    # Rotates the neighbourhood around the rest position
    assert (x, y) == pytest.approx((50, 60))


def test_fixed_mode_with_zero_rotation_is_translation():
    pin = moved_pin(50, 50, 55, 45, rotation=0, rotation_mode=RotationMode.FIXED)
    assert calculate_deformed_point((70, 80), [pin], 8.0) == pytest.approx((75, 75))


def test_auto_mode_ignores_rotation():
    pin = moved_pin(50, 50, 60, 50, rotation=45, rotation_mode=RotationMode.AUTO)
    assert calculate_deformed_point((0, 0), [pin], 8.0) == pytest.approx((10, 0))


def test_pin_rest_position_follows_pin():
    pin = moved_pin(50, 50, 60, 50)
    assert calculate_deformed_point((50, 50), [pin], 8.0) == pytest.approx((60, 50))


def test_displacement_approaches_pin_delta_near_pin():
    pin = moved_pin(50, 50, 57, 44)
    anchor = Pin(0, 0)
    errors = []
    for dist in [20.0, 5.0, 1.0, 0.1, 0.0]:
        x, y = calculate_deformed_point((50 + dist, 50), [pin, anchor], 8.0)
        errors.append(math.hypot((x - 50 - dist) - 7, (y - 50) + 6))
    assert errors == sorted(errors, reverse=True)
    assert errors[-1] < 1e-2


def test_single_pin_translates_everything():
    # Weights are normalised, so one pin on its own moves the whole layer
    pin = moved_pin(50, 50, 60, 50)
    assert calculate_deformed_point((0, 0), [pin], 8.0) == pytest.approx((10, 0))
    assert calculate_deformed_point((1000, -400), [pin], 1.0) == pytest.approx((1010, -400))


def test_far_point_pulled_less_than_pin():
    pin = moved_pin(50, 50, 60, 50)
    anchor = Pin(100, 100)
    x, y = calculate_deformed_point((0, 0), [pin, anchor], 8.0)
    assert 0 < x < 10
    assert y == pytest.approx(0)
    # Near the anchor almost nothing moves
    x, y = calculate_deformed_point((100, 100), [pin, anchor], 8.0)
    assert abs(x - 100) < 0.1


def test_larger_influence_flattens_falloff():
    pin = moved_pin(50, 50, 60, 50)
    anchor = Pin(100, 100)
    narrow, _ = calculate_deformed_point((0, 0), [pin, anchor], 8.0)
    wide, _ = calculate_deformed_point((0, 0), [pin, anchor], 1e6)
    # With a flat falloff both pins weigh the same: mean displacement is 5
    assert abs(wide - 5) < abs(narrow - 5)
    assert wide == pytest.approx(5, abs=0.1)


def test_depth_boosts_weight():
    assert pin_weight(0.0, 0, 8.0) == pytest.approx(1 / 0.0001)
    assert pin_weight(400.0, 5, 8.0) == pytest.approx(1.5 * pin_weight(400.0, 0, 8.0))

    a = moved_pin(0, 0, 10, 0)
    b = moved_pin(100, 0, 90, 0)
    x_equal, _ = calculate_deformed_point((50, 0), [a, b], 8.0)
    assert x_equal == pytest.approx(50)
    a.depth = 4
    x_boosted, _ = calculate_deformed_point((50, 0), [a, b], 8.0)
    assert x_boosted > 50


def test_weight_formula():
    dist_sq = 2500.0
    influence = 8.0
    expected = 1.0 / ((dist_sq / 800.0) ** 1.5 + 0.0001)
    assert pin_weight(dist_sq, 0, influence) == pytest.approx(expected)


def test_vectorised_matches_pointwise():
    mesh = generate_grid_mesh(300, 200, 1.3)
    pins = [moved_pin(40, 40, 70, 20, depth=2),
            moved_pin(250, 150, 240, 170, rotation=30, rotation_mode=RotationMode.FIXED),
            Pin(150, 100, rotation=-15, rotation_mode=RotationMode.FIXED)]
    out = deform_vertices(mesh.vertices, pins, 6.5)
    expected = np.array([calculate_deformed_point(v, pins, 6.5) for v in mesh.vertices])
    assert np.allclose(out, expected)


def test_deform_vertices_does_not_touch_input():
    vertices = np.array([[0.0, 0.0], [10.0, 10.0]])
    out = deform_vertices(vertices, [moved_pin(0, 0, 5, 5)], 8.0)
    assert np.array_equal(vertices, [[0, 0], [10, 10]])
    assert np.allclose(out, [[5, 5], [15, 15]])
    assert np.array_equal(deform_vertices(vertices, [], 8.0), vertices)
