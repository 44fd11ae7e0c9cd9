from constants import DEGENERATE_EPSILON


class Affine2D:
    """ 2x3 affine transform in canvas order:

        x' = a*x + c*y + e
        y' = b*x + d*y + f
    """

    __slots__ = ('a', 'b', 'c', 'd', 'e', 'f')

    def __init__(self, a=1.0, b=0.0, c=0.0, d=1.0, e=0.0, f=0.0):
        self.a, self.b, self.c, self.d, self.e, self.f = a, b, c, d, e, f

    def as_tuple(self):
        return (self.a, self.b, self.c, self.d, self.e, self.f)

    def apply(self, x, y):
        return (self.a * x + self.c * y + self.e,
                self.b * x + self.d * y + self.f)

    def determinant(self):
        return self.a * self.d - self.b * self.c

    def inverted(self):
        det = self.determinant()
        if det == 0:
            raise ValueError("Affine transform is not invertible")
        a = self.d / det
        b = -self.b / det
        c = -self.c / det
        d = self.a / det
        e = -(a * self.e + c * self.f)
        f = -(b * self.e + d * self.f)
        return Affine2D(a, b, c, d, e, f)

    def __eq__(self, other):
        return isinstance(other, Affine2D) and self.as_tuple() == other.as_tuple()

    def __repr__(self):
        return "Affine2D(%g, %g, %g, %g, %g, %g)" % self.as_tuple()


def affine_for(src_tri, dst_tri):
    """ affine_for(src_tri, dst_tri)

    The affine transform that maps the three source vertices exactly onto the
    three destination vertices, or None if the source triangle is (nearly)
    collinear. Callers skip drawing the facet in that case.
    """
    (x0, y0), (x1, y1), (x2, y2) = [(float(p[0]), float(p[1])) for p in src_tri]
    (u0, v0), (u1, v1), (u2, v2) = [(float(p[0]), float(p[1])) for p in dst_tri]

    delta = (x1 - x0) * (y2 - y0) - (x2 - x0) * (y1 - y0)
    if abs(delta) <= DEGENERATE_EPSILON:
        return None

    a = ((u1 - u0) * (y2 - y0) - (u2 - u0) * (y1 - y0)) / delta
    b = ((v1 - v0) * (y2 - y0) - (v2 - v0) * (y1 - y0)) / delta
    c = ((u2 - u0) * (x1 - x0) - (u1 - u0) * (x2 - x0)) / delta
    d = ((v2 - v0) * (x1 - x0) - (v1 - v0) * (x2 - x0)) / delta
    e = u0 - a * x0 - c * y0
    f = v0 - b * x0 - d * y0
    return Affine2D(a, b, c, d, e, f)
