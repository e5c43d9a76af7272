"""
Bake pipeline: mode definitions and configuration constants.

A full bake turns one loaded mesh into two raster images:
    1. Colour: per-corner vertex colours interpolated across each UV
       triangle, written as 8-bit RGB.
    2. Normal: per-corner normal vectors interpolated the same way and
       remapped from [-1, 1] into [0, 255].

The mode constants defined here are used throughout the package to select
the attribute being baked, name output files, and label progress messages.
"""


class BakeMode:
    """
    String constants identifying each bake mode.

    Plain string constants (rather than an enum) allow direct comparison
    with CLI arguments and dictionary keys without .value access.
    """
    COLOR = "color"
    NORMAL = "normal"


# Ordered list of modes, the sequence a full bake runs in.
BAKE_ORDER = [
    BakeMode.COLOR,
    BakeMode.NORMAL,
]

# Human-readable names for progress and log messages.
BAKE_DISPLAY_NAMES = {
    BakeMode.COLOR: "Colour Map",
    BakeMode.NORMAL: "Normal Map",
}

# Output filename suffixes: <basename>_texture.<ext> / <basename>_normal.<ext>.
BAKE_FILE_SUFFIXES = {
    BakeMode.COLOR: "_texture",
    BakeMode.NORMAL: "_normal",
}

# Raster edge length D. Output rasters are always D×D.
DEFAULT_RASTER_SIZE = 1024

RASTER_SIZE_PRESETS = {
    "Low (512)": 512,
    "Standard (1024)": 1024,
    "High (2048)": 2048,
}

# Raster file formats. Keys are the CLI choices; values are file extensions.
# ppm is the plain-text (P3) format and the default output.
RASTER_FORMATS = {
    "ppm": ".ppm",
    "png": ".png",
}

# Interchange formats for exporter.export_mesh(). Keys are human-readable
# labels; values are the extensions trimesh uses to pick an exporter.
EXPORT_FORMATS = {
    "OBJ (.obj)":         ".obj",
    "glTF Binary (.glb)": ".glb",
    "PLY (.ply)":         ".ply",
}
