# Mesh / deformation
MESH_DENSITY_DEFAULT = 1.0
MESH_DENSITY_MIN = 0.5
MESH_DENSITY_MAX = 5.0
MESH_CELL_SIZE = 50.0  # image pixels per grid step at density 1.0
MESH_MIN_STEPS = 2

PIN_INFLUENCE_DEFAULT = 8.0
PIN_INFLUENCE_MIN = 1.0
PIN_INFLUENCE_MAX = 20.0

FALLOFF_EXPONENT = 1.5
FALLOFF_EPSILON = 0.0001
DEPTH_BOOST = 0.1
DEGENERATE_EPSILON = 0.0001

# Layers
SCALE_MIN = 0.1
SCALE_MAX = 3.0
FIT_PADDING = 80
PIN_HIT_RADIUS = 20.0  # view pixels

# Overlay
MESH_LINE_COLOR = (255, 255, 255, 0.2)
MESH_LINE_WIDTH = 0.5
PIN_RADIUS = 6
PIN_RADIUS_SELECTED = 8
PIN_FILL = (255, 255, 255)
PIN_FILL_SELECTED = (59, 130, 246)
PIN_OUTLINE = (0, 0, 0)
PIN_OUTLINE_WIDTH = 2
SELECTION_RING_RADIUS = 18
SELECTION_RING_DASH = (4, 4)

# History / export
MAX_HISTORY = 100
EXPORT_FILE_NAME = "posed_character_design.png"
