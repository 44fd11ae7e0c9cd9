import math

import numpy as np

from constants import FALLOFF_EXPONENT, FALLOFF_EPSILON, DEPTH_BOOST
from elements import RotationMode
from utils import rotate2


def pin_weight(dist_sq, depth, influence):
    """ Inverse-power weight of a pin at squared distance dist_sq.

    The epsilon keeps the weight finite on the pin's own rest position while
    still letting it dominate there. Works on scalars and numpy arrays.
    """
    depth_boost = 1 + depth * DEPTH_BOOST
    return depth_boost / ((dist_sq / (influence * 100)) ** FALLOFF_EXPONENT + FALLOFF_EPSILON)


def _rotates(pin):
    return pin.rotation_mode is RotationMode.FIXED and pin.rotation != 0


def calculate_deformed_point(point, pins, influence):
    """ calculate_deformed_point(point, pins, influence)

    Displaced position of a single layer-local point. Distances and rotations
    are measured from each pin's rest position, not its current one.
    """
    vx, vy = float(point[0]), float(point[1])
    if not pins:
        return vx, vy

    total_weight = 0.0
    dx = 0.0
    dy = 0.0
    for pin in pins:
        rx = vx - pin.original_x
        ry = vy - pin.original_y
        weight = pin_weight(rx * rx + ry * ry, pin.depth, influence)

        target_x, target_y = pin.x, pin.y
        if _rotates(pin):
            rot_x, rot_y = rotate2((rx, ry), pin.rotation)
            target_x += rot_x - rx
            target_y += rot_y - ry

        dx += (target_x - pin.original_x) * weight
        dy += (target_y - pin.original_y) * weight
        total_weight += weight

    if total_weight == 0:
        return vx, vy
    return vx + dx / total_weight, vy + dy / total_weight


def deform_vertices(vertices, pins, influence):
    """ deform_vertices(vertices, pins, influence)

    Vectorised form of calculate_deformed_point over an (N, 2) array. Loops
    over pins, which are few, and keeps the vertex axis in numpy.
    """
    vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 2)
    if not pins:
        return vertices.copy()

    vx = vertices[:, 0]
    vy = vertices[:, 1]
    total_weight = np.zeros(len(vertices), dtype=np.float64)
    dx = np.zeros(len(vertices), dtype=np.float64)
    dy = np.zeros(len(vertices), dtype=np.float64)

    for pin in pins:
        rx = vx - pin.original_x
        ry = vy - pin.original_y
        weight = pin_weight(rx * rx + ry * ry, pin.depth, influence)

        target_x = np.full(len(vertices), pin.x)
        target_y = np.full(len(vertices), pin.y)
        if _rotates(pin):
            angle = math.radians(pin.rotation)
            c, s = math.cos(angle), math.sin(angle)
            target_x += (rx * c - ry * s) - rx
            target_y += (rx * s + ry * c) - ry

        dx += (target_x - pin.original_x) * weight
        dy += (target_y - pin.original_y) * weight
        total_weight += weight

    out = vertices.copy()
    ok = total_weight != 0
    out[ok, 0] += dx[ok] / total_weight[ok]
    out[ok, 1] += dy[ok] / total_weight[ok]
    return out
