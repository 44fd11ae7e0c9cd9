from PyQt5.QtCore import Qt
from PyQt5.QtGui import QColor, QPainter
from PyQt5.QtWidgets import QWidget

from layer_renderer import render_layers
from surface import QPainterSurface


class PoseCanvasWidget(QWidget):
    """ Live preview of a PoseDocument; pointer events place and drag pins. """

    BACKGROUND = QColor(26, 26, 26)

    def __init__(self, document, parent=None):
        super().__init__(parent)
        self.document = document
        self.document.add_listener(self.update)
        self.setMinimumSize(200, 200)
        self.setMouseTracking(False)
        self.setFocusPolicy(Qt.StrongFocus)

    def view_size(self):
        return self.width(), self.height()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.setRenderHint(QPainter.SmoothPixmapTransform, True)
        painter.fillRect(self.rect(), self.BACKGROUND)
        surface = QPainterSurface(painter, self.width(), self.height())
        doc = self.document
        render_layers(doc.layers_for_render(), doc.settings, surface,
                      active_layer_id=doc.active_layer_id, include_overlay=True)
        painter.end()

    def _layer_pos(self, event):
        return self.document.view_to_layer(event.x(), event.y(), self.width(), self.height())

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.document.press(*self._layer_pos(event))

    def mouseMoveEvent(self, event):
        if self.document.drag is not None:
            self.document.drag_to(*self._layer_pos(event))

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.document.release()

    def keyPressEvent(self, event):
        if event.key() in (Qt.Key_Delete, Qt.Key_Backspace):
            self.document.delete_selected_pin()
        else:
            super().keyPressEvent(event)
