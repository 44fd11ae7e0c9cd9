import os

import numpy as np
from PyQt5.QtGui import QImage


def qimage_to_array(image):
    """ Copy a QImage into an (H, W, 4) uint8 RGBA array. """
    image = image.convertToFormat(QImage.Format_RGBA8888)
    w, h = image.width(), image.height()
    ptr = image.constBits()
    ptr.setsize(image.bytesPerLine() * h)
    rows = np.frombuffer(ptr, dtype=np.uint8).reshape(h, image.bytesPerLine())
    return rows[:, :w * 4].reshape(h, w, 4).copy()


def array_to_qimage(array):
    """ Build a QImage (RGBA8888) that owns a copy of an (H, W, 4) uint8 array. """
    array = np.ascontiguousarray(array, dtype=np.uint8)
    if array.ndim != 3 or array.shape[2] != 4:
        raise ValueError("Expected an (H, W, 4) RGBA array, got shape %s" % (array.shape,))
    h, w = array.shape[:2]
    data = array.tobytes()
    image = QImage(data, w, h, w * 4, QImage.Format_RGBA8888)
    return image.copy()


def save_png(array, path):
    if not array_to_qimage(array).save(path, "PNG"):
        raise IOError("Could not write PNG to %s" % path)
    return path


class SourceImage:
    """ Immutable RGBA pixels of a layer, with a lazily built QImage twin. """

    def __init__(self, pixels, name=""):
        pixels = np.asarray(pixels)
        if pixels.ndim == 2:
            pixels = np.dstack([pixels] * 3 + [np.full(pixels.shape, 255, pixels.dtype)])
        elif pixels.ndim == 3 and pixels.shape[2] == 3:
            alpha = np.full(pixels.shape[:2] + (1,), 255, pixels.dtype)
            pixels = np.concatenate([pixels, alpha], axis=2)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError("Unsupported image shape %s" % (pixels.shape,))
        self.pixels = np.array(pixels, dtype=np.uint8, order="C")
        self.pixels.setflags(write=False)
        self.name = name
        self._qimage = None

    @classmethod
    def from_file(cls, path):
        image = QImage(path)
        if image.isNull():
            raise IOError("Could not load image: %s" % path)
        name = os.path.splitext(os.path.basename(path))[0]
        return cls(qimage_to_array(image), name=name)

    @property
    def width(self):
        return self.pixels.shape[1]

    @property
    def height(self):
        return self.pixels.shape[0]

    @property
    def size(self):
        return self.width, self.height

    @property
    def qimage(self):
        if self._qimage is None:
            self._qimage = array_to_qimage(self.pixels)
        return self._qimage

    def __repr__(self):
        return "SourceImage(%r, %ix%i)" % (self.name, self.width, self.height)
