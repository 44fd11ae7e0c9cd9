import sys

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QKeySequence
from PyQt5.QtWidgets import QAction, QApplication, QDockWidget, QFileDialog, QMainWindow, QMessageBox

from constants import EXPORT_FILE_NAME
from image_io import SourceImage
from pose_document import PoseDocument
from widgets.control_panel import ControlPanel
from widgets.pose_canvas_widget import PoseCanvasWidget


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Character Posing Studio")
        self.resize(1100, 750)

        self.document = PoseDocument()
        self.canvas = PoseCanvasWidget(self.document, self)
        self.setCentralWidget(self.canvas)

        self.panel = ControlPanel(self.document, self)
        dock = QDockWidget("Controls", self)
        dock.setWidget(self.panel)
        self.addDockWidget(Qt.RightDockWidgetArea, dock)

        self._build_toolbar()
        self.document.add_listener(self._sync_actions)
        self._sync_actions()

    def _action(self, toolbar, text, slot, shortcut=None, checkable=False):
        action = QAction(text, self)
        if shortcut:
            action.setShortcut(QKeySequence(shortcut))
        action.setCheckable(checkable)
        action.triggered.connect(slot)
        toolbar.addAction(action)
        return action

    def _build_toolbar(self):
        tb = self.addToolBar("Main")
        self._action(tb, "Import Image", self.on_import, QKeySequence.Open)
        self._action(tb, "Fit", self.on_fit)
        tb.addSeparator()
        self.undo_action = self._action(tb, "Undo", self.document.undo, QKeySequence.Undo)
        self.redo_action = self._action(tb, "Redo", self.document.redo, QKeySequence.Redo)
        tb.addSeparator()
        self._action(tb, "Delete Pin", self.document.delete_selected_pin)
        self._action(tb, "Reset Pose", self.document.reset_pose)
        self.mesh_action = self._action(tb, "Show Mesh", self.on_show_mesh, checkable=True)
        self.lock_action = self._action(tb, "Lock Pins", self.on_lock_pins, checkable=True)
        tb.addSeparator()
        self._action(tb, "Export", self.on_export, QKeySequence.Save)

    def _sync_actions(self):
        self.undo_action.setEnabled(self.document.history.can_undo())
        self.redo_action.setEnabled(self.document.history.can_redo())
        self.mesh_action.setChecked(self.document.settings.show_mesh)
        self.lock_action.setChecked(self.document.settings.lock_pins)

    def _error(self, title, e):
        print(f"Error {title.lower()}: {e}")
        QMessageBox.critical(self, title, str(e))

    def on_import(self):
        fname, _ = QFileDialog.getOpenFileName(self, "Import Image", "", "Images (*.png *.jpg *.jpeg *.bmp)")
        if not fname:
            return
        try:
            image = SourceImage.from_file(fname)
        except IOError as e:
            self._error("Loading image", e)
            return
        self.document.add_layer(image, view_size=self.canvas.view_size())

    def on_fit(self):
        self.document.fit_active_layer(*self.canvas.view_size())

    def on_show_mesh(self, checked):
        self.document.update_settings(show_mesh=checked)

    def on_lock_pins(self, checked):
        self.document.update_settings(lock_pins=checked)

    def on_export(self):
        if not self.document.layers:
            return
        fname, _ = QFileDialog.getSaveFileName(self, "Export", EXPORT_FILE_NAME, "PNG (*.png)")
        if not fname:
            return
        try:
            self.document.export(self.canvas.width(), self.canvas.height(), fname)
        except IOError as e:
            self._error("Exporting", e)


def main():
    app = QApplication(sys.argv)
    w = MainWindow()
    w.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
