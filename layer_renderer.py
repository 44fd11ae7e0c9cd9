import numpy as np

from constants import (EXPORT_FILE_NAME, MESH_LINE_COLOR, MESH_LINE_WIDTH,
                       PIN_RADIUS, PIN_RADIUS_SELECTED, PIN_FILL, PIN_FILL_SELECTED,
                       PIN_OUTLINE, PIN_OUTLINE_WIDTH, SELECTION_RING_RADIUS, SELECTION_RING_DASH)
from pin_deformer import deform_vertices
from surface import QImageSurface
from triangle_mapper import affine_for
from triangle_mesh import generate_grid_mesh


def layer_placement(layer, surface_width, surface_height):
    """ (scale, offset_x, offset_y) that centers the scaled layer image. """
    scaled_w = layer.image.width * layer.scale
    scaled_h = layer.image.height * layer.scale
    return layer.scale, (surface_width - scaled_w) / 2, (surface_height - scaled_h) / 2


def render_layer(layer, settings, surface, include_overlay=False, is_active=False):
    """ render_layer(layer, settings, surface, include_overlay=False, is_active=False)

    Deform the layer's mesh by its pins and paint every triangle of the source
    image into surface under its own affine transform. Returns one entry per
    mesh triangle: the Affine2D it was painted with, or None if the facet was
    degenerate and skipped. Hidden or image-less layers return [].

    The pin/mesh overlay is only drawn when include_overlay is set and this
    is the active layer; exports never pass include_overlay.
    """
    if not layer.visible or layer.image is None:
        return []

    # Fixed copy of the pins for the whole pass
    pins = [p.copy() for p in layer.pins]
    selected_id = layer.selected_pin_id

    image = layer.image
    mesh = generate_grid_mesh(image.width, image.height, settings.mesh_density)
    deformed = mesh.with_vertices(deform_vertices(mesh.vertices, pins, settings.pin_influence))

    scale, offset_x, offset_y = layer_placement(layer, surface.width, surface.height)
    offset = np.array([offset_x, offset_y])

    affines = []
    placed = []
    for i in range(mesh.get_num_triangles()):
        dst = deformed.get_triangle_vertices(i) * scale + offset
        placed.append(dst)
        affine = affine_for(mesh.get_triangle_vertices(i), dst)
        affines.append(affine)
        if affine is None:
            continue
        surface.fill_triangle_with_affine_sample(dst, image, affine, layer.opacity)

    if include_overlay and is_active:
        if settings.show_mesh:
            for dst in placed:
                surface.stroke_triangle(dst, MESH_LINE_COLOR, MESH_LINE_WIDTH)
        for pin in pins:
            px, py = pin.x * scale + offset_x, pin.y * scale + offset_y
            if pin.id == selected_id:
                surface.draw_pin_marker(px, py, PIN_RADIUS_SELECTED, PIN_FILL_SELECTED,
                                        PIN_OUTLINE, PIN_OUTLINE_WIDTH)
                surface.draw_dashed_ring(px, py, SELECTION_RING_RADIUS, PIN_FILL_SELECTED,
                                         PIN_OUTLINE_WIDTH, SELECTION_RING_DASH)
            else:
                surface.draw_pin_marker(px, py, PIN_RADIUS, PIN_FILL,
                                        PIN_OUTLINE, PIN_OUTLINE_WIDTH)

    return affines


def render_layers(layers, settings, surface, active_layer_id=None, include_overlay=True):
    """ Render layers bottom to top in list order; returns {layer_id: affines}. """
    placements = {}
    for layer in layers:
        placements[layer.id] = render_layer(layer, settings, surface,
                                            include_overlay=include_overlay,
                                            is_active=layer.id == active_layer_id)
    return placements


def export_layers(layers, settings, width, height, path=EXPORT_FILE_NAME):
    """ Render layers without overlays into a fresh off-screen image and write a PNG. """
    with QImageSurface(width, height) as surface:
        render_layers(layers, settings, surface, include_overlay=False)
    surface.save(path)
    print("[Export] Wrote %ix%i image to %s" % (width, height, path))
    return path
