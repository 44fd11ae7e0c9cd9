import math

import numpy as np
from scipy.ndimage import map_coordinates
from PyQt5.QtCore import QPointF, Qt
from PyQt5.QtGui import QColor, QImage, QPainter, QPainterPath, QPen, QPolygonF, QTransform

from image_io import qimage_to_array, save_png
from utils import signed_area2, triangle_coverage


class Surface:
    """ Drawing target for the layer renderer.

    The only primitive the warp needs is fill_triangle_with_affine_sample;
    the stroke and marker methods are used by the interactive overlay.
    Colors are (r, g, b) or (r, g, b, alpha) with r, g, b in 0..255 and
    alpha in 0..1.
    """

    width = 0
    height = 0

    def fill_triangle_with_affine_sample(self, dst_tri, image, affine, alpha):
        """ Paint image (a SourceImage) through affine, clipped to dst_tri. """
        raise NotImplementedError()

    def stroke_triangle(self, tri, color, line_width):
        raise NotImplementedError()

    def draw_pin_marker(self, x, y, radius, fill, outline, outline_width):
        raise NotImplementedError()

    def draw_dashed_ring(self, x, y, radius, color, line_width, dash):
        raise NotImplementedError()


def _qcolor(color):
    c = QColor(int(color[0]), int(color[1]), int(color[2]))
    if len(color) > 3:
        c.setAlphaF(float(color[3]))
    return c


class QPainterSurface(Surface):
    """ Surface over an active QPainter (a widget or an image). """

    def __init__(self, painter, width, height):
        self.painter = painter
        self.width = int(width)
        self.height = int(height)

    def fill_triangle_with_affine_sample(self, dst_tri, image, affine, alpha):
        p = self.painter
        p.save()
        path = QPainterPath()
        path.moveTo(QPointF(dst_tri[0][0], dst_tri[0][1]))
        path.lineTo(QPointF(dst_tri[1][0], dst_tri[1][1]))
        path.lineTo(QPointF(dst_tri[2][0], dst_tri[2][1]))
        path.closeSubpath()
        p.setRenderHint(QPainter.Antialiasing, False)
        # Clip in surface space, before the image transform is installed
        p.setClipPath(path)
        p.setTransform(QTransform(*affine.as_tuple()))
        p.setOpacity(alpha)
        p.drawImage(QPointF(0, 0), image.qimage)
        p.restore()

    def stroke_triangle(self, tri, color, line_width):
        p = self.painter
        p.save()
        pen = QPen(_qcolor(color))
        pen.setWidthF(line_width)
        p.setPen(pen)
        p.setBrush(Qt.NoBrush)
        p.drawPolygon(QPolygonF([QPointF(v[0], v[1]) for v in tri]))
        p.restore()

    def draw_pin_marker(self, x, y, radius, fill, outline, outline_width):
        p = self.painter
        p.save()
        pen = QPen(_qcolor(outline))
        pen.setWidthF(outline_width)
        p.setPen(pen)
        p.setBrush(_qcolor(fill))
        p.drawEllipse(QPointF(x, y), radius, radius)
        p.restore()

    def draw_dashed_ring(self, x, y, radius, color, line_width, dash):
        p = self.painter
        p.save()
        pen = QPen(_qcolor(color))
        pen.setWidthF(line_width)
        # Qt measures dashes in pen widths
        pen.setDashPattern([d / line_width for d in dash])
        p.setPen(pen)
        p.setBrush(Qt.NoBrush)
        p.drawEllipse(QPointF(x, y), radius, radius)
        p.restore()


class QImageSurface(QPainterSurface):
    """ Off-screen transparent QImage with its own painter.

    Use as a context manager; the painter is ended on exit, after which the
    image can be saved or converted.
    """

    def __init__(self, width, height):
        self.image = QImage(int(width), int(height), QImage.Format_ARGB32_Premultiplied)
        self.image.fill(Qt.transparent)
        super().__init__(None, width, height)

    def __enter__(self):
        self.painter = QPainter(self.image)
        self.painter.setRenderHint(QPainter.Antialiasing, True)
        self.painter.setRenderHint(QPainter.SmoothPixmapTransform, True)
        return self

    def __exit__(self, *exc):
        self.painter.end()
        self.painter = None
        return False

    def to_array(self):
        return qimage_to_array(self.image)

    def save(self, path):
        if not self.image.save(path, "PNG"):
            raise IOError("Could not write PNG to %s" % path)
        return path


class ArraySurface(Surface):
    """ Software rasterizer into a float RGBA buffer (straight alpha, 0..1).

    Pixel centers are sampled: a pixel belongs to a triangle when its center
    does, and the source image is sampled bilinearly at the inverse-mapped
    center.
    """

    def __init__(self, width, height):
        self.width = int(width)
        self.height = int(height)
        self.pixels = np.zeros((self.height, self.width, 4), dtype=np.float64)
        self._sources = {}

    def _source_array(self, image):
        key = id(image)
        if key not in self._sources:
            self._sources[key] = (image, image.pixels.astype(np.float64) / 255.0)
        return self._sources[key][1]

    def _bbox_grid(self, xs, ys, pad=0.0):
        x0 = max(0, int(math.floor(min(xs) - pad)))
        x1 = min(self.width, int(math.ceil(max(xs) + pad)) + 1)
        y0 = max(0, int(math.floor(min(ys) - pad)))
        y1 = min(self.height, int(math.ceil(max(ys) + pad)) + 1)
        if x0 >= x1 or y0 >= y1:
            return None
        rows, cols = np.mgrid[y0:y1, x0:x1]
        return rows, cols

    def _composite(self, rows, cols, rgb, alpha):
        dst = self.pixels[rows, cols]
        da = dst[..., 3]
        out_a = alpha + da * (1.0 - alpha)
        safe = np.where(out_a > 0, out_a, 1.0)
        out_rgb = (rgb * alpha[..., None] + dst[..., :3] * (da * (1.0 - alpha))[..., None]) / safe[..., None]
        self.pixels[rows, cols, :3] = out_rgb
        self.pixels[rows, cols, 3] = out_a

    def _paint_mask(self, rows, cols, mask, color):
        if not mask.any():
            return
        rows, cols = rows[mask], cols[mask]
        a = float(color[3]) if len(color) > 3 else 1.0
        rgb = np.tile(np.array(color[:3], dtype=np.float64) / 255.0, (rows.size, 1))
        self._composite(rows, cols, rgb, np.full(rows.size, a))

    def fill_triangle_with_affine_sample(self, dst_tri, image, affine, alpha):
        a, b, c = [(float(p[0]), float(p[1])) for p in dst_tri]
        if abs(signed_area2(a, b, c)) < 1e-12:
            return
        grid = self._bbox_grid((a[0], b[0], c[0]), (a[1], b[1], c[1]))
        if grid is None:
            return
        rows, cols = grid
        cx, cy = cols + 0.5, rows + 0.5
        inside = triangle_coverage(cx, cy, a, b, c)
        if not inside.any():
            return

        sx, sy = affine.inverted().apply(cx[inside], cy[inside])
        in_image = (sx >= 0) & (sx <= image.width) & (sy >= 0) & (sy <= image.height)
        if not in_image.any():
            return
        sx, sy = sx[in_image], sy[in_image]
        rows, cols = rows[inside][in_image], cols[inside][in_image]

        src = self._source_array(image)
        coords = np.vstack([sy - 0.5, sx - 0.5])
        sampled = np.stack([map_coordinates(src[..., ch], coords, order=1, mode='nearest')
                            for ch in range(4)], axis=-1)
        self._composite(rows, cols, sampled[:, :3], sampled[:, 3] * alpha)

    def stroke_triangle(self, tri, color, line_width):
        pts = [(float(p[0]), float(p[1])) for p in tri]
        xs, ys = [], []
        for i in range(3):
            (x0, y0), (x1, y1) = pts[i], pts[(i + 1) % 3]
            n = max(2, int(math.hypot(x1 - x0, y1 - y0) * 2) + 1)
            xs.append(np.linspace(x0, x1, n))
            ys.append(np.linspace(y0, y1, n))
        cols = np.floor(np.concatenate(xs)).astype(int)
        rows = np.floor(np.concatenate(ys)).astype(int)
        keep = (cols >= 0) & (cols < self.width) & (rows >= 0) & (rows < self.height)
        if not keep.any():
            return
        flat = np.unique(rows[keep] * self.width + cols[keep])
        rows, cols = np.divmod(flat, self.width)
        self._paint_mask(rows, cols, np.ones(rows.shape, dtype=bool), color)

    def draw_pin_marker(self, x, y, radius, fill, outline, outline_width):
        grid = self._bbox_grid((x,), (y,), pad=radius + outline_width)
        if grid is None:
            return
        rows, cols = grid
        dist = np.hypot(cols + 0.5 - x, rows + 0.5 - y)
        self._paint_mask(rows, cols, dist <= radius, fill)
        self._paint_mask(rows, cols, np.abs(dist - radius) <= outline_width / 2.0, outline)

    def draw_dashed_ring(self, x, y, radius, color, line_width, dash):
        grid = self._bbox_grid((x,), (y,), pad=radius + line_width)
        if grid is None:
            return
        rows, cols = grid
        dx, dy = cols + 0.5 - x, rows + 0.5 - y
        on_ring = np.abs(np.hypot(dx, dy) - radius) <= line_width / 2.0
        arc = (np.arctan2(dy, dx) % (2 * math.pi)) * radius
        period = float(sum(dash))
        on_dash = (arc % period) < dash[0]
        self._paint_mask(rows, cols, on_ring & on_dash, color)

    def to_array(self):
        return np.round(np.clip(self.pixels, 0.0, 1.0) * 255).astype(np.uint8)

    def save(self, path):
        return save_png(self.to_array(), path)
