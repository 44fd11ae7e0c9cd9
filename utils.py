import math

import numpy as np


def clamp(value, lo, hi):
    return max(lo, min(hi, value))


def rotate2(v, degrees):
    # y points down in image space, so positive angles turn clockwise on screen
    angle = math.radians(degrees)
    c, s = math.cos(angle), math.sin(angle)
    return v[0] * c - v[1] * s, v[0] * s + v[1] * c


def signed_area2(a, b, c):
    """ Twice the signed area of triangle abc. """
    return (b[0] - a[0]) * (c[1] - a[1]) - (c[0] - a[0]) * (b[1] - a[1])


def triangle_coverage(px, py, a, b, c):
    """ Boolean mask of the points (px, py) covered by triangle abc.

    Points exactly on an edge go to only one of the two triangles sharing it,
    so a mesh covers every point once. px and py are numpy arrays.
    """
    if signed_area2(a, b, c) < 0:
        b, c = c, b
    px = np.asarray(px, dtype=np.float64)
    py = np.asarray(py, dtype=np.float64)
    mask = np.ones(px.shape, dtype=bool)
    for p, q in ((a, b), (b, c), (c, a)):
        dx, dy = q[0] - p[0], q[1] - p[1]
        e = dx * (py - p[1]) - dy * (px - p[0])
        owns_edge = dy > 0 or (dy == 0 and dx > 0)
        mask &= (e > 0) | ((e == 0) & owns_edge)
    return mask
