from constants import FIT_PADDING, SCALE_MIN
from elements import Layer, Pin, RotationMode, WarpSettings
from history import HistoryLog
from layer_renderer import export_layers, layer_placement


class DragState:
    """ The pin being dragged and where it currently is; not part of the layers. """

    def __init__(self, layer_id, pin_id, x, y):
        self.layer_id = layer_id
        self.pin_id = pin_id
        self.x = x
        self.y = y


def fit_scale(image_width, image_height, view_width, view_height):
    target_w = view_width - FIT_PADDING
    target_h = view_height - FIT_PADDING
    scale = min(target_w / image_width, target_h / image_height, 1.0)
    return max(SCALE_MIN, scale)


class PoseDocument:
    """ Layers, settings and history of one posing session.

    All pin coordinates passed in are layer-local; use view_to_layer to
    convert pointer positions first.
    """

    def __init__(self, settings=None):
        self.layers = []
        self.active_layer_id = None
        self.settings = settings or WarpSettings()
        self.history = HistoryLog()
        self.drag = None
        self._listeners = []

    ## Listeners

    def add_listener(self, callback):
        self._listeners.append(callback)

    def _changed(self):
        for callback in self._listeners:
            callback()

    def _commit(self, description):
        self.history.push(self.layers, description)
        self._changed()

    def update_settings(self, **kwargs):
        """ Set WarpSettings fields by name (mesh_density, pin_influence, show_mesh, lock_pins). """
        for name, value in kwargs.items():
            if not hasattr(self.settings, name):
                raise ValueError("Unknown setting %r" % name)
            setattr(self.settings, name, value)
        self._changed()

    ## Layers

    def find_layer(self, layer_id):
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        return None

    def _layer(self, layer_id):
        layer = self.find_layer(layer_id)
        if layer is None:
            raise ValueError("No layer %r" % (layer_id,))
        return layer

    @property
    def active_layer(self):
        return self.find_layer(self.active_layer_id)

    @property
    def selected_pin(self):
        layer = self.active_layer
        return layer.selected_pin if layer else None

    def add_layer(self, image, view_size=None, name=None):
        scale = 1.0
        if view_size is not None:
            scale = fit_scale(image.width, image.height, *view_size)
        layer = Layer(image, name or image.name or "Layer %i" % (len(self.layers) + 1), scale=scale)
        self.layers.append(layer)
        self.active_layer_id = layer.id
        print("[Layers] Added %r (%ix%i, scale %.2f)" % (layer.name, image.width, image.height, scale))
        self._commit("Add layer %s" % layer.name)
        return layer

    def delete_layer(self, layer_id):
        layer = self._layer(layer_id)
        self.layers.remove(layer)
        if self.active_layer_id == layer_id:
            self.active_layer_id = self.layers[0].id if self.layers else None
        if self.drag is not None and self.drag.layer_id == layer_id:
            self.drag = None
        self._commit("Delete layer %s" % layer.name)

    def set_active_layer(self, layer_id):
        self._layer(layer_id)
        self.active_layer_id = layer_id
        self._changed()

    # Visibility, opacity and scale are view tweaks and are not recorded

    def toggle_visibility(self, layer_id):
        layer = self._layer(layer_id)
        layer.visible = not layer.visible
        self._changed()

    def set_opacity(self, layer_id, opacity):
        self._layer(layer_id).opacity = opacity
        self._changed()

    def set_scale(self, layer_id, scale):
        self._layer(layer_id).scale = scale
        self._changed()

    def fit_active_layer(self, view_width, view_height):
        layer = self.active_layer
        if layer is None or layer.image is None:
            return
        layer.scale = fit_scale(layer.image.width, layer.image.height, view_width, view_height)
        self._changed()

    ## Coordinates

    def view_to_layer(self, x, y, view_width, view_height, layer=None):
        layer = layer or self.active_layer
        if layer is None or layer.image is None:
            return x, y
        scale, offset_x, offset_y = layer_placement(layer, view_width, view_height)
        return (x - offset_x) / scale, (y - offset_y) / scale

    ## Pin gestures

    def press(self, x, y):
        """ Pointer down at layer-local (x, y).

        Grabs the pin under the pointer (unless pins are locked) or creates a
        new pin there. Returns the pin that was hit or created, or None.
        """
        layer = self.active_layer
        if layer is None or layer.image is None:
            return None

        hit = layer.hit_pin(x, y)
        if hit is not None:
            if self.settings.lock_pins:
                return None
            layer.selected_pin_id = hit.id
            self.drag = DragState(layer.id, hit.id, hit.x, hit.y)
            self._changed()
            return hit

        pin = layer.add_pin(Pin(x, y))
        self._commit("Add pin")
        return pin

    def drag_to(self, x, y):
        if self.drag is None:
            return
        self.drag.x = x
        self.drag.y = y
        self._changed()

    def release(self):
        """ End a drag: write the dragged position into the layer and record it. """
        drag, self.drag = self.drag, None
        if drag is None:
            return
        layer = self.find_layer(drag.layer_id)
        pin = layer.find_pin(drag.pin_id) if layer else None
        if pin is None:
            return
        pin.move_to(drag.x, drag.y)
        self._commit("Move pin")

    def layers_for_render(self):
        """ Committed layers, with the in-progress drag applied to a copy. """
        if self.drag is None:
            return list(self.layers)
        out = []
        for layer in self.layers:
            if layer.id == self.drag.layer_id:
                layer = layer.copy()
                pin = layer.find_pin(self.drag.pin_id)
                if pin is not None:
                    pin.move_to(self.drag.x, self.drag.y)
            out.append(layer)
        return out

    ## Pin edits

    def update_selected_pin(self, depth=None, rotation=None, rotation_mode=None):
        pin = self.selected_pin
        if pin is None:
            return None
        if depth is not None:
            pin.depth = depth
        if rotation is not None:
            pin.rotation = float(rotation)
        if rotation_mode is not None:
            pin.rotation_mode = RotationMode(rotation_mode)
        self._commit("Edit pin")
        return pin

    def delete_selected_pin(self):
        layer = self.active_layer
        if layer is None or layer.selected_pin_id is None:
            return
        layer.remove_pin(layer.selected_pin_id)
        self._commit("Delete pin")

    def reset_pose(self):
        layer = self.active_layer
        if layer is None or not any(p.is_displaced for p in layer.pins):
            return
        layer.reset_pins()
        self._commit("Reset pose")

    ## History

    def _apply_history(self, layers):
        if layers is None:
            return False
        self.layers = layers
        self.drag = None
        if self.find_layer(self.active_layer_id) is None:
            self.active_layer_id = layers[0].id if layers else None
        self._changed()
        return True

    def undo(self):
        return self._apply_history(self.history.undo())

    def redo(self):
        return self._apply_history(self.history.redo())

    ## Export

    def export(self, width, height, path):
        return export_layers(self.layers, self.settings, width, height, path)
