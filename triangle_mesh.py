import math

import numpy as np

from constants import MESH_CELL_SIZE, MESH_MIN_STEPS


class TriangleMesh:
    def __init__(self, vertices=None, triangles=None):
        if vertices is None:
            vertices = np.zeros((0, 2), dtype=np.float64)
        if triangles is None:
            triangles = np.zeros((0, 3), dtype=np.int32)
        self.vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 2)
        self.triangles = np.asarray(triangles, dtype=np.int32).reshape(-1, 3)

    def get_num_vertices(self):
        return self.vertices.shape[0]

    def get_num_triangles(self):
        return self.triangles.shape[0]

    def get_triangle_vertices(self, i):
        idx = self.triangles[i]
        return self.vertices[idx].copy()

    def with_vertices(self, vertices):
        """ Same topology, new vertex positions (e.g. after deformation). """
        vertices = np.asarray(vertices, dtype=np.float64)
        if vertices.shape != self.vertices.shape:
            raise ValueError("Expected %s vertices, got %s" % (self.vertices.shape, vertices.shape))
        return TriangleMesh(vertices, self.triangles)


def grid_steps(dimension, density):
    return max(MESH_MIN_STEPS, int(math.floor(dimension / (MESH_CELL_SIZE / density))))


def generate_grid_mesh(width, height, density):
    """ generate_grid_mesh(width, height, density)

    Regular grid over the rectangle (0, 0, width, height). Vertices are laid
    out row-major, and every cell is split along the same diagonal into
    (p1, p2, p3) and (p2, p4, p3), so the tessellation only depends on the
    three arguments.
    """
    steps_x = grid_steps(width, density)
    steps_y = grid_steps(height, density)

    # Divide before multiplying so boundary vertices land exactly on the edges
    xs = np.arange(steps_x + 1, dtype=np.float64) / steps_x * width
    ys = np.arange(steps_y + 1, dtype=np.float64) / steps_y * height
    gx, gy = np.meshgrid(xs, ys)
    vertices = np.column_stack([gx.ravel(), gy.ravel()])

    row = steps_x + 1
    j, i = np.meshgrid(np.arange(steps_y), np.arange(steps_x), indexing='ij')
    p1 = (j * row + i).ravel()
    p2 = p1 + 1
    p3 = ((j + 1) * row + i).ravel()
    p4 = p3 + 1
    triangles = np.empty((p1.size * 2, 3), dtype=np.int32)
    triangles[0::2] = np.column_stack([p1, p2, p3])
    triangles[1::2] = np.column_stack([p2, p4, p3])

    return TriangleMesh(vertices, triangles)
