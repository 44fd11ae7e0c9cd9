from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (QComboBox, QDoubleSpinBox, QFormLayout, QGroupBox, QListWidget,
                             QListWidgetItem, QPushButton, QSlider, QSpinBox, QVBoxLayout, QWidget)

from constants import (MESH_DENSITY_MIN, MESH_DENSITY_MAX, PIN_INFLUENCE_MIN, PIN_INFLUENCE_MAX,
                       SCALE_MIN, SCALE_MAX)
from elements import RotationMode


def _slider(lo, hi, step):
    # QSlider is integer only; values are stored in units of step
    s = QSlider(Qt.Horizontal)
    s.setRange(int(round(lo / step)), int(round(hi / step)))
    s.step = step
    return s


class ControlPanel(QWidget):
    """ Layer list, warp settings and selected-pin properties. """

    def __init__(self, document, parent=None):
        super().__init__(parent)
        self.document = document
        self._updating = False
        self._listed_layers = None

        # Layers
        self.layer_list = QListWidget()
        self.layer_list.currentRowChanged.connect(self.on_layer_row)
        self.layer_list.itemChanged.connect(self.on_layer_item)
        self.opacity = _slider(0.0, 1.0, 0.01)
        self.opacity.valueChanged.connect(self.on_opacity)
        self.scale = QDoubleSpinBox()
        self.scale.setRange(SCALE_MIN, SCALE_MAX)
        self.scale.setSingleStep(0.05)
        self.scale.valueChanged.connect(self.on_scale)
        self.delete_layer_button = QPushButton("Delete Layer")
        self.delete_layer_button.clicked.connect(self.on_delete_layer)

        layers_box = QGroupBox("Layers")
        form = QFormLayout(layers_box)
        form.addRow(self.layer_list)
        form.addRow("Opacity", self.opacity)
        form.addRow("Scale", self.scale)
        form.addRow(self.delete_layer_button)

        # Warp settings
        self.density = _slider(MESH_DENSITY_MIN, MESH_DENSITY_MAX, 0.1)
        self.density.valueChanged.connect(self.on_density)
        self.influence = _slider(PIN_INFLUENCE_MIN, PIN_INFLUENCE_MAX, 0.5)
        self.influence.valueChanged.connect(self.on_influence)

        warp_box = QGroupBox("Warp")
        form = QFormLayout(warp_box)
        form.addRow("Mesh Density", self.density)
        form.addRow("Pin Influence Radius", self.influence)

        # Selected pin
        self.depth = QSpinBox()
        self.depth.setRange(0, 99)
        self.depth.valueChanged.connect(self.on_pin_edit)
        self.rotation_mode = QComboBox()
        for mode in RotationMode:
            self.rotation_mode.addItem(mode.value, mode)
        self.rotation_mode.currentIndexChanged.connect(self.on_pin_edit)
        self.rotation = QSpinBox()
        self.rotation.setRange(-360, 360)
        self.rotation.setSuffix(" deg")
        self.rotation.valueChanged.connect(self.on_pin_edit)

        self.pin_box = QGroupBox("Pin")
        form = QFormLayout(self.pin_box)
        form.addRow("Depth", self.depth)
        form.addRow("Rotation", self.rotation_mode)
        form.addRow("Angle", self.rotation)

        layout = QVBoxLayout(self)
        layout.addWidget(layers_box)
        layout.addWidget(warp_box)
        layout.addWidget(self.pin_box)
        layout.addStretch(1)

        document.add_listener(self.refresh)
        self.refresh()

    def refresh(self):
        doc = self.document
        self._updating = True
        try:
            self._refresh_layer_list()

            layer = doc.active_layer
            self.opacity.setEnabled(layer is not None)
            self.scale.setEnabled(layer is not None)
            self.delete_layer_button.setEnabled(layer is not None)
            if layer is not None:
                self.opacity.setValue(int(round(layer.opacity / self.opacity.step)))
                self.scale.setValue(layer.scale)

            self.density.setValue(int(round(doc.settings.mesh_density / self.density.step)))
            self.influence.setValue(int(round(doc.settings.pin_influence / self.influence.step)))

            pin = doc.selected_pin
            self.pin_box.setEnabled(pin is not None)
            if pin is not None:
                self.depth.setValue(pin.depth)
                self.rotation_mode.setCurrentIndex(self.rotation_mode.findData(pin.rotation_mode))
                self.rotation.setValue(int(pin.rotation))
                self.rotation.setEnabled(pin.rotation_mode is RotationMode.FIXED)
        finally:
            self._updating = False

    def _refresh_layer_list(self):
        doc = self.document
        listed = [(layer.id, layer.name, layer.visible) for layer in doc.layers]
        # Pin drags notify on every mouse move; keep the items when nothing listed changed
        if listed != self._listed_layers:
            self._listed_layers = listed
            self.layer_list.clear()
            for layer_id, name, visible in listed:
                item = QListWidgetItem(name)
                item.setFlags(item.flags() | Qt.ItemIsUserCheckable)
                item.setCheckState(Qt.Checked if visible else Qt.Unchecked)
                item.setData(Qt.UserRole, layer_id)
                self.layer_list.addItem(item)

        ids = [layer_id for layer_id, _, _ in listed]
        row = ids.index(doc.active_layer_id) if doc.active_layer_id in ids else -1
        if self.layer_list.currentRow() != row:
            self.layer_list.setCurrentRow(row)

    def _layer_id(self, row):
        item = self.layer_list.item(row)
        return item.data(Qt.UserRole) if item is not None else None

    def on_layer_row(self, row):
        layer_id = self._layer_id(row)
        if not self._updating and layer_id is not None:
            self.document.set_active_layer(layer_id)

    def on_layer_item(self, item):
        if self._updating:
            return
        layer = self.document.find_layer(item.data(Qt.UserRole))
        if layer is not None and layer.visible != (item.checkState() == Qt.Checked):
            self.document.toggle_visibility(layer.id)

    def on_delete_layer(self):
        if self.document.active_layer is not None:
            self.document.delete_layer(self.document.active_layer_id)

    def on_opacity(self, value):
        if not self._updating and self.document.active_layer is not None:
            self.document.set_opacity(self.document.active_layer_id, value * self.opacity.step)

    def on_scale(self, value):
        if not self._updating and self.document.active_layer is not None:
            self.document.set_scale(self.document.active_layer_id, value)

    def on_density(self, value):
        if not self._updating:
            self.document.update_settings(mesh_density=value * self.density.step)

    def on_influence(self, value):
        if not self._updating:
            self.document.update_settings(pin_influence=value * self.influence.step)

    def on_pin_edit(self, *args):
        if self._updating:
            return
        self.document.update_selected_pin(depth=self.depth.value(),
                                          rotation=self.rotation.value(),
                                          rotation_mode=self.rotation_mode.currentData())
