"""
Indexed-attribute triangle mesh.

The mesh keeps four independent attribute arrays and four parallel per-corner
index arrays instead of a single "vertex" record. Entry i of face_vertices,
face_colors, face_normals and face_tex_coords together describe one triangle
corner, and the four indices need not be equal: a physical vertex can pair
with a different colour, normal or UV in every face it belongs to.

Layout:
    positions, colors, normals, tex_coords   (N, 3) float64, file order
    face_vertices, face_colors,
    face_normals, face_tex_coords            (3F,) int64, zero-based,
                                             runs of 3 form one triangle

centre_of_gravity and object_size are derived from positions by
update_bounds(); the loader calls it once the whole stream is consumed.
"""

from dataclasses import dataclass, field

import numpy as np

from meshbake.core.errors import IndexOutOfRange, MeshError


# Attribute array name → the face index array that addresses it.
FACE_ARRAYS = {
    "positions": "face_vertices",
    "colors": "face_colors",
    "normals": "face_normals",
    "tex_coords": "face_tex_coords",
}


def _empty_vectors() -> np.ndarray:
    return np.zeros((0, 3), dtype=np.float64)


def _empty_indices() -> np.ndarray:
    return np.zeros(0, dtype=np.int64)


@dataclass(eq=False)
class Mesh:
    """
    Attribute arrays, per-corner index arrays and derived bounds.

    eq=False because numpy arrays do not compare to a single bool; compare
    meshes through their serialized text (mesh_io.mesh_to_text) instead.
    """
    positions: np.ndarray = field(default_factory=_empty_vectors)
    colors: np.ndarray = field(default_factory=_empty_vectors)
    normals: np.ndarray = field(default_factory=_empty_vectors)
    tex_coords: np.ndarray = field(default_factory=_empty_vectors)

    face_vertices: np.ndarray = field(default_factory=_empty_indices)
    face_colors: np.ndarray = field(default_factory=_empty_indices)
    face_normals: np.ndarray = field(default_factory=_empty_indices)
    face_tex_coords: np.ndarray = field(default_factory=_empty_indices)

    # Centre of gravity: mean of all positions (origin for an empty mesh).
    centre_of_gravity: np.ndarray = field(
        default_factory=lambda: np.zeros(3, dtype=np.float64)
    )
    # Radius of the sphere about centre_of_gravity enclosing every position.
    object_size: float = 0.0

    @classmethod
    def empty(cls) -> "Mesh":
        return cls()

    @property
    def triangle_count(self) -> int:
        return len(self.face_vertices) // 3

    def update_bounds(self) -> None:
        """Recompute centre_of_gravity and object_size from positions."""
        if len(self.positions) == 0:
            self.centre_of_gravity = np.zeros(3, dtype=np.float64)
            self.object_size = 0.0
            return

        self.centre_of_gravity = self.positions.mean(axis=0)
        distances = np.linalg.norm(self.positions - self.centre_of_gravity, axis=1)
        self.object_size = float(distances.max())

    def check_faces(self) -> None:
        """
        Verify the face arrays have equal length and describe whole triangles.

        Raises:
            MeshError: if the lengths differ or are not a multiple of 3.
        """
        lengths = {name: len(getattr(self, name)) for name in FACE_ARRAYS.values()}
        if len(set(lengths.values())) != 1:
            raise MeshError(f"Face arrays have unequal lengths: {lengths}")
        if lengths["face_vertices"] % 3 != 0:
            raise MeshError(
                f"Face arrays hold {lengths['face_vertices']} corners, "
                f"not a whole number of triangles"
            )

    def corner_values(self, attribute: str) -> np.ndarray:
        """
        Gather one attribute for every triangle corner.

        Args:
            attribute: "positions", "colors", "normals" or "tex_coords".

        Returns:
            (3F, 3) array; row i is the attribute of corner i.

        Raises:
            IndexOutOfRange: naming the first corner whose index does not
                address the attribute array.
        """
        if attribute not in FACE_ARRAYS:
            raise ValueError(f"Unknown attribute '{attribute}'")

        face_array = FACE_ARRAYS[attribute]
        values = getattr(self, attribute)
        indices = getattr(self, face_array)

        invalid = (indices < 0) | (indices >= len(values))
        if invalid.any():
            corner = int(np.flatnonzero(invalid)[0])
            raise IndexOutOfRange(
                attribute, face_array, corner, int(indices[corner]), len(values)
            )

        return values[indices]

    def summary(self) -> dict:
        """Counts and bounds, for logging and the CLI."""
        return {
            "triangles": self.triangle_count,
            "positions": len(self.positions),
            "colors": len(self.colors),
            "normals": len(self.normals),
            "tex_coords": len(self.tex_coords),
            "centre_of_gravity": tuple(float(c) for c in self.centre_of_gravity),
            "object_size": float(self.object_size),
        }
