import enum
import uuid

from constants import (MESH_DENSITY_DEFAULT, MESH_DENSITY_MIN, MESH_DENSITY_MAX,
                       PIN_INFLUENCE_DEFAULT, PIN_INFLUENCE_MIN, PIN_INFLUENCE_MAX,
                       PIN_HIT_RADIUS, SCALE_MIN)
from utils import clamp


def new_id():
    return uuid.uuid4().hex[:9]


class RotationMode(enum.Enum):
    AUTO = "Auto"
    FIXED = "Fixed"


class Pin:
    """A control point with an immutable rest position and a movable current one."""

    def __init__(self, x, y, depth=0, rotation=0.0, rotation_mode=RotationMode.AUTO, pin_id=None):
        self.id = pin_id or new_id()
        self._original_x = float(x)
        self._original_y = float(y)
        self.x = float(x)
        self.y = float(y)
        self._depth = 0
        self.depth = depth
        self.rotation = float(rotation)
        self.rotation_mode = RotationMode(rotation_mode)

    @property
    def original_x(self):
        return self._original_x

    @property
    def original_y(self):
        return self._original_y

    @property
    def depth(self):
        return self._depth

    @depth.setter
    def depth(self, value):
        self._depth = max(0, int(value))

    @property
    def is_displaced(self):
        return self.x != self._original_x or self.y != self._original_y

    def move_to(self, x, y):
        self.x = float(x)
        self.y = float(y)

    def reset(self):
        self.x = self._original_x
        self.y = self._original_y

    def copy(self):
        p = Pin(self._original_x, self._original_y, self._depth, self.rotation,
                self.rotation_mode, pin_id=self.id)
        p.move_to(self.x, self.y)
        return p

    def __repr__(self):
        return "Pin(%s, (%.1f, %.1f) -> (%.1f, %.1f), depth=%i, %s %.1f)" % (
            self.id, self._original_x, self._original_y, self.x, self.y,
            self._depth, self.rotation_mode.value, self.rotation)


class Layer:
    """One source image plus the pins that pose it."""

    def __init__(self, image=None, name="Layer", scale=1.0, opacity=1.0, visible=True, layer_id=None):
        self.id = layer_id or new_id()
        self.name = name
        self.image = image
        self.pins = []
        self._selected_pin_id = None
        self.visible = bool(visible)
        self._opacity = 1.0
        self._scale = 1.0
        self.opacity = opacity
        self.scale = scale

    @property
    def opacity(self):
        return self._opacity

    @opacity.setter
    def opacity(self, value):
        self._opacity = clamp(float(value), 0.0, 1.0)

    @property
    def scale(self):
        return self._scale

    @scale.setter
    def scale(self, value):
        self._scale = max(SCALE_MIN, float(value))

    @property
    def selected_pin_id(self):
        return self._selected_pin_id

    @selected_pin_id.setter
    def selected_pin_id(self, pin_id):
        if pin_id is not None and self.find_pin(pin_id) is None:
            raise ValueError("Layer %s has no pin %r" % (self.id, pin_id))
        self._selected_pin_id = pin_id

    @property
    def selected_pin(self):
        if self._selected_pin_id is None:
            return None
        return self.find_pin(self._selected_pin_id)

    def find_pin(self, pin_id):
        for pin in self.pins:
            if pin.id == pin_id:
                return pin
        return None

    def add_pin(self, pin, select=True):
        self.pins.append(pin)
        if select:
            self._selected_pin_id = pin.id
        return pin

    def remove_pin(self, pin_id):
        pin = self.find_pin(pin_id)
        if pin is None:
            raise ValueError("Layer %s has no pin %r" % (self.id, pin_id))
        self.pins.remove(pin)
        if self._selected_pin_id == pin_id:
            self._selected_pin_id = None
        return pin

    def hit_pin(self, x, y):
        """ First pin whose current position is within the hit radius of (x, y).

        Coordinates are layer-local; the radius is fixed in view pixels so it
        shrinks in layer units as the layer is scaled up.
        """
        threshold = PIN_HIT_RADIUS / self._scale
        for pin in self.pins:
            if ((pin.x - x) ** 2 + (pin.y - y) ** 2) ** 0.5 < threshold:
                return pin
        return None

    def reset_pins(self):
        for pin in self.pins:
            pin.reset()

    def copy(self):
        layer = Layer(self.image, self.name, self._scale, self._opacity, self.visible, layer_id=self.id)
        layer.pins = [p.copy() for p in self.pins]
        layer._selected_pin_id = self._selected_pin_id
        return layer

    def __repr__(self):
        return "Layer(%s, %r, %i pins)" % (self.id, self.name, len(self.pins))


class WarpSettings:
    def __init__(self, mesh_density=MESH_DENSITY_DEFAULT, pin_influence=PIN_INFLUENCE_DEFAULT,
                 show_mesh=True, lock_pins=False):
        self._mesh_density = MESH_DENSITY_DEFAULT
        self._pin_influence = PIN_INFLUENCE_DEFAULT
        self.mesh_density = mesh_density
        self.pin_influence = pin_influence
        self.show_mesh = bool(show_mesh)
        self.lock_pins = bool(lock_pins)

    @property
    def mesh_density(self):
        return self._mesh_density

    @mesh_density.setter
    def mesh_density(self, value):
        self._mesh_density = clamp(float(value), MESH_DENSITY_MIN, MESH_DENSITY_MAX)

    @property
    def pin_influence(self):
        return self._pin_influence

    @pin_influence.setter
    def pin_influence(self, value):
        self._pin_influence = clamp(float(value), PIN_INFLUENCE_MIN, PIN_INFLUENCE_MAX)
