"""
Texture baking module for meshbake.

Bakes a per-corner mesh attribute into a square raster addressed by texture
coordinate:

    colour map: vertex colours, written as round(255 * c) per channel.
    normal map: vertex normals, written as round(128 + 128 * n) per channel,
                 mapping the conventional [-1, 1] range onto [0, 255].

Encoded values are saturated to [0, 255]; out-of-range input colours or
normals clip at the channel limits instead of wrapping.

Core technique, edge-function scan conversion:
    1. Each triangle corner's UV (u, v) is mapped to the pixel
       (trunc(u * D), trunc((1 - v) * D)). V is flipped because UV space has
       its origin bottom-left while the raster's origin is top-left.
    2. For each directed edge the line normal n = (-dy, dx) and the line
       constant c = n · p_start are formed. The signed distance of a point p
       from that edge is n · p - c; no square root is needed because the
       normal's length cancels when normalising.
    3. Each barycentric weight is the signed distance of the pixel from one
       edge divided by the signed distance of the opposite corner from the
       same edge. A pixel is inside when all three weights are >= 0.
    4. Inside pixels take alpha * a0 + beta * a1 + gamma * a2 of the corner
       attributes. Triangles are drawn in face order and each write replaces
       whatever was there, so where UV charts overlap the later face wins.

A triangle whose corners collapse onto a line or a point has a zero
opposite-corner distance; it is skipped without writing pixels or raising.
Pixels outside [0, D-1] are cut away by clamping each triangle's bounding
box, so partially off-raster triangles are partially drawn.

Public API:
    uv_to_pixels(tex_coords, size) → (N, 2) int64
    rasterize_triangles(corner_pixels, corner_values, size)
        → (canvas, filled)
    bake(mesh, mode, size, on_progress) → (D, D, 3) uint8 raster
    bake_color_map(mesh, size, on_progress) → raster
    bake_normal_map(mesh, size, on_progress) → raster
    bake_all(mesh, size, on_progress) → dict[str, raster]
"""

import logging

import numpy as np

from meshbake.core.mesh import Mesh
from meshbake.core.pipeline import (
    BAKE_DISPLAY_NAMES,
    BAKE_ORDER,
    DEFAULT_RASTER_SIZE,
    BakeMode,
)

logger = logging.getLogger(__name__)


# Attribute array sampled by each bake mode.
BAKE_ATTRIBUTES = {
    BakeMode.COLOR: "colors",
    BakeMode.NORMAL: "normals",
}

# Triangles between progress messages during a long bake.
PROGRESS_INTERVAL = 10_000


# ---------------------------------------------------------------------------
# UV-space triangle rasterization
# ---------------------------------------------------------------------------

def uv_to_pixels(tex_coords, size):
    """
    Map texture coordinates to integer raster pixels.

    Args:
        tex_coords: (N, 2+) float UV coordinates; extra columns are ignored.
        size:       int, raster edge length D.

    Returns:
        (N, 2) int64 array of (x, y); fractions are truncated toward zero.
    """
    tex_coords = np.asarray(tex_coords, dtype=np.float64)
    px = tex_coords[:, 0] * size            # U → pixel X
    py = (1.0 - tex_coords[:, 1]) * size    # V → pixel Y (flipped)
    return np.stack([px, py], axis=1).astype(np.int64)


def rasterize_triangles(corner_pixels, corner_values, size, canvas=None, filled=None):
    """
    Scan-convert triangles into a float canvas with barycentric interpolation.

    Args:
        corner_pixels: (3F, 2) int pixel positions; rows 3t..3t+2 are the
                       corners of triangle t.
        corner_values: (3F, C) float values carried by each corner.
        size:          int, canvas edge length.
        canvas:        Optional (size, size, C) float array to draw into.
        filled:        Optional (size, size) bool coverage mask to update.

    Returns:
        canvas: (size, size, C) float64, zero where no triangle landed.
        filled: (size, size) bool, True where some triangle wrote a pixel.
    """
    corner_pixels = np.asarray(corner_pixels, dtype=np.int64)
    corner_values = np.asarray(corner_values, dtype=np.float64)
    n_channels = corner_values.shape[1]

    if canvas is None:
        canvas = np.zeros((size, size, n_channels), dtype=np.float64)
    if filled is None:
        filled = np.zeros((size, size), dtype=bool)

    triangle_count = len(corner_pixels) // 3
    degenerate = 0

    for t in range(triangle_count):
        (x0, y0), (x1, y1), (x2, y2) = (
            (int(x), int(y)) for x, y in corner_pixels[3 * t:3 * t + 3]
        )

        # Line normals of the directed edges 0→1, 1→2, 2→0.
        n01x, n01y = -(y1 - y0), x1 - x0
        n12x, n12y = -(y2 - y1), x2 - x1
        n20x, n20y = -(y0 - y2), x0 - x2

        # Line constants: the normal dotted with the edge's start corner.
        c01 = n01x * x0 + n01y * y0
        c12 = n12x * x1 + n12y * y1
        c20 = n20x * x2 + n20y * y2

        # Signed distance of each corner from its opposite edge.
        d0 = n12x * x0 + n12y * y0 - c12
        d1 = n20x * x1 + n20y * y1 - c20
        d2 = n01x * x2 + n01y * y2 - c01

        if d0 == 0 or d1 == 0 or d2 == 0:
            degenerate += 1
            continue

        # Bounding box, clamped to the canvas.
        xmin = max(0, min(x0, x1, x2))
        xmax = min(size - 1, max(x0, x1, x2))
        ymin = max(0, min(y0, y1, y2))
        ymax = min(size - 1, max(y0, y1, y2))

        if xmin > xmax or ymin > ymax:
            continue  # Entirely off the canvas

        xs = np.arange(xmin, xmax + 1, dtype=np.float64)
        ys = np.arange(ymin, ymax + 1, dtype=np.float64)
        xx, yy = np.meshgrid(xs, ys)

        alpha = (n12x * xx + n12y * yy - c12) / d0
        beta = (n20x * xx + n20y * yy - c20) / d1
        gamma = (n01x * xx + n01y * yy - c01) / d2

        inside = (alpha >= 0.0) & (beta >= 0.0) & (gamma >= 0.0)
        if not inside.any():
            continue

        iy, ix = np.nonzero(inside)
        a0, a1, a2 = corner_values[3 * t:3 * t + 3]

        canvas[ymin + iy, xmin + ix] = (
            alpha[iy, ix][:, np.newaxis] * a0
            + beta[iy, ix][:, np.newaxis] * a1
            + gamma[iy, ix][:, np.newaxis] * a2
        )
        filled[ymin + iy, xmin + ix] = True

    if degenerate:
        logger.debug("Skipped %d degenerate triangle(s)", degenerate)

    return canvas, filled


# ---------------------------------------------------------------------------
# Channel encoding
# ---------------------------------------------------------------------------

def encode_channels(values, mode):
    """
    Convert interpolated attribute values to 8-bit channels.

    Colours: round(255 * c). Normals: round(128 + 128 * n).
    Results are saturated to [0, 255].
    """
    values = np.asarray(values, dtype=np.float64)
    if mode == BakeMode.COLOR:
        scaled = 255.0 * values
    elif mode == BakeMode.NORMAL:
        scaled = 128.0 + 128.0 * values
    else:
        raise ValueError(f"Unknown bake mode '{mode}'")
    return np.clip(np.rint(scaled), 0, 255).astype(np.uint8)


# ---------------------------------------------------------------------------
# Baking
# ---------------------------------------------------------------------------

def bake(mesh: Mesh, mode: str, size: int = DEFAULT_RASTER_SIZE,
         on_progress=None) -> np.ndarray:
    """
    Bake one per-corner attribute of the mesh into a fresh raster.

    The mesh is only read. Every call allocates its own raster, so bakes of
    the same mesh are independent of each other.

    Args:
        mesh:        Loaded Mesh.
        mode:        BakeMode.COLOR or BakeMode.NORMAL.
        size:        int, raster edge length D.
        on_progress: Optional callback(str) for status messages.

    Returns:
        (size, size, 3) uint8 array, row-major with the origin top-left.
        Pixels no triangle covers stay 0.

    Raises:
        ValueError: unknown mode or a size below 1.
        IndexOutOfRange: a face index does not address tex_coords or the
            attribute being baked.
    """
    if mode not in BAKE_ATTRIBUTES:
        raise ValueError(
            f"Unknown bake mode '{mode}'. "
            f"Supported: {', '.join(BAKE_ORDER)}"
        )
    if size < 1:
        raise ValueError(f"Raster size must be positive, got {size}")

    def report(message):
        logger.debug(message)
        if on_progress is not None:
            on_progress(message)

    mesh.check_faces()
    raster = np.zeros((size, size, 3), dtype=np.uint8)
    name = BAKE_DISPLAY_NAMES[mode]

    if mesh.triangle_count == 0:
        report(f"{name}: mesh has no triangles, raster left empty")
        return raster

    # Gathering validates every index before any pixel is touched.
    uvs = mesh.corner_values("tex_coords")
    values = mesh.corner_values(BAKE_ATTRIBUTES[mode])
    pixels = uv_to_pixels(uvs, size)

    report(f"{name}: rasterizing {mesh.triangle_count:,} triangles at {size}×{size}")

    canvas = np.zeros((size, size, 3), dtype=np.float64)
    filled = np.zeros((size, size), dtype=bool)

    # Chunks are drawn into the same canvas in face order.
    for start in range(0, mesh.triangle_count, PROGRESS_INTERVAL):
        stop = min(start + PROGRESS_INTERVAL, mesh.triangle_count)
        rasterize_triangles(
            pixels[3 * start:3 * stop], values[3 * start:3 * stop], size,
            canvas=canvas, filled=filled,
        )
        if stop < mesh.triangle_count:
            report(f"{name}: {stop:,}/{mesh.triangle_count:,} triangles")

    raster[filled] = encode_channels(canvas[filled], mode)
    report(f"{name}: {int(filled.sum()):,} pixels written")
    return raster


def bake_color_map(mesh: Mesh, size: int = DEFAULT_RASTER_SIZE, on_progress=None):
    return bake(mesh, BakeMode.COLOR, size, on_progress)


def bake_normal_map(mesh: Mesh, size: int = DEFAULT_RASTER_SIZE, on_progress=None):
    return bake(mesh, BakeMode.NORMAL, size, on_progress)


def bake_all(mesh: Mesh, size: int = DEFAULT_RASTER_SIZE, on_progress=None,
             modes=None) -> dict:
    """
    Bake several modes in BAKE_ORDER.

    Returns:
        dict mapping mode → raster, in the order baked.
    """
    if modes is None:
        selected = BAKE_ORDER
    else:
        unknown = set(modes) - set(BAKE_ORDER)
        if unknown:
            raise ValueError(f"Unknown bake mode(s): {', '.join(sorted(unknown))}")
        selected = [mode for mode in BAKE_ORDER if mode in modes]
    return {mode: bake(mesh, mode, size, on_progress) for mode in selected}
