"""
View configuration and display geometry for an interactive viewer.

A GUI shell (window, sliders, arcball) is not part of this package. What it
needs from the mesh is gathered here: the per-corner positions and colours
for triangle submission, auto-scaled so the object fits the view whatever
its units, and the slider-driven zoom and translation with their limits.

    display position = R · ((p - centre_of_gravity) · zoom / object_size)
                       + (x_translate, y_translate, 0)
"""

from dataclasses import dataclass, field

import numpy as np

from meshbake.core.mesh import Mesh

ZOOM_SCALE_MIN = 0.01
ZOOM_SCALE_MAX = 100.0
TRANSLATE_MIN = -1.0
TRANSLATE_MAX = 1.0


def _clamp(value, low, high):
    return max(low, min(high, value))


@dataclass
class ViewParameters:
    """User-adjustable view state. Values are clamped to their limits."""
    zoom_scale: float = 1.0
    x_translate: float = 0.0
    y_translate: float = 0.0
    rotation: np.ndarray = field(default_factory=lambda: np.identity(4))

    def __post_init__(self):
        self.zoom_scale = _clamp(float(self.zoom_scale), ZOOM_SCALE_MIN, ZOOM_SCALE_MAX)
        self.x_translate = _clamp(float(self.x_translate), TRANSLATE_MIN, TRANSLATE_MAX)
        self.y_translate = _clamp(float(self.y_translate), TRANSLATE_MIN, TRANSLATE_MAX)
        self.rotation = np.asarray(self.rotation, dtype=np.float64)
        if self.rotation.shape != (4, 4):
            raise ValueError(f"rotation must be 4x4, got {self.rotation.shape}")

    def set_zoom_from_slider(self, value: int) -> None:
        """Logarithmic zoom slider: 10 ** (value / 100)."""
        self.zoom_scale = _clamp(10.0 ** (value / 100.0), ZOOM_SCALE_MIN, ZOOM_SCALE_MAX)

    def set_translate_from_slider(self, axis: str, value: int) -> None:
        """Translation sliders run in hundredths of the view half-width."""
        translate = _clamp(value / 100.0, TRANSLATE_MIN, TRANSLATE_MAX)
        if axis == "x":
            self.x_translate = translate
        elif axis == "y":
            self.y_translate = translate
        else:
            raise ValueError(f"Unknown translation axis '{axis}'")


def display_triangles(mesh: Mesh, params: ViewParameters):
    """
    Per-corner geometry ready for immediate-mode triangle submission.

    Returns:
        positions: (3F, 3) float64 transformed corner positions.
        colors:    (3F, 3) float64 corner colours, as stored.

    Raises:
        IndexOutOfRange: a face index does not address positions or colors.
    """
    mesh.check_faces()
    corners = mesh.corner_values("positions")
    colors = mesh.corner_values("colors")

    scale = params.zoom_scale
    if mesh.object_size > 0:
        scale /= mesh.object_size

    local = (corners - mesh.centre_of_gravity) * scale
    homogeneous = np.hstack([local, np.ones((len(local), 1))])
    rotated = homogeneous @ params.rotation.T

    positions = rotated[:, :3] + np.array([params.x_translate, params.y_translate, 0.0])
    return positions, colors
