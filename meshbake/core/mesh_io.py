"""
Reader and writer for the indexed-attribute mesh text format.

Format (one record per line, '#' starts a comment):
    v  <x> <y> <z>        position
    vc <r> <g> <b>        vertex colour
    vn <x> <y> <z>        vertex normal
    vt <u> <v> [<w>]      texture coordinate (w unused)
    f  v/c/t/n v/c/t/n v/c/t/n
                          one triangle; each corner lists 1-based indices
                          in the order vertex/colour/texcoord/normal

Lines are classified by their first two characters. Anything not listed
above (other 'v?' tags, 'o', 'g', 's', 'usemtl', blank lines) is skipped so
files carrying unknown extensions still load. Malformed numbers and short
face records abort the load with a MeshParseError naming the line.

Internally the face arrays are stored zero-based in the order vertex,
colour, normal, texcoord; the writer restores the on-wire order so a
write → read → write cycle reproduces the same text.

Public API:
    parse_mesh(stream) → Mesh
    load_mesh(path) → Mesh
    write_mesh(mesh, stream)
    mesh_to_text(mesh) → str
    save_mesh(mesh, path)
"""

import io
import logging
from pathlib import Path
from typing import Iterable, TextIO

import numpy as np

from meshbake.core.errors import IncompleteFaceRecord, MalformedNumericToken
from meshbake.core.mesh import Mesh

logger = logging.getLogger(__name__)


# Second character of a 'v' line → (attribute name, required value count).
# Texture coordinates only need u and v; the third component is unused.
_VERTEX_TAGS = {
    " ": ("positions", 3),
    "c": ("colors", 3),
    "n": ("normals", 3),
    "t": ("tex_coords", 2),
}

CORNERS_PER_FACE = 3
INDICES_PER_CORNER = 4


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def _parse_floats(tokens, required, line_number, line):
    """Parse up to 3 floats, requiring at least `required` of them."""
    if len(tokens) < required:
        raise MalformedNumericToken(
            f"expected {required} values, found {len(tokens)}", line_number, line
        )

    values = [0.0, 0.0, 0.0]
    for i, token in enumerate(tokens[:3]):
        try:
            values[i] = float(token)
        except ValueError:
            raise MalformedNumericToken(
                f"'{token}' is not a number", line_number, line
            ) from None
    return values


def _parse_face(tokens, line_number, line):
    """
    Parse the corner groups of an f line.

    Returns a list of 3 (vertex, colour, texcoord, normal) tuples, still in
    on-wire order and already converted to zero-based indices.
    """
    if len(tokens) < CORNERS_PER_FACE:
        raise IncompleteFaceRecord(
            f"expected {CORNERS_PER_FACE} corner groups, found {len(tokens)}",
            line_number, line,
        )

    corners = []
    for group in tokens[:CORNERS_PER_FACE]:
        parts = group.split("/")
        if len(parts) != INDICES_PER_CORNER or not all(parts):
            raise IncompleteFaceRecord(
                f"corner group '{group}' needs {INDICES_PER_CORNER} "
                f"slash-separated indices",
                line_number, line,
            )
        try:
            corners.append(tuple(int(part) - 1 for part in parts))
        except ValueError:
            raise MalformedNumericToken(
                f"corner group '{group}' contains a non-integer index",
                line_number, line,
            ) from None
    return corners


def parse_mesh(stream: Iterable[str]) -> Mesh:
    """
    Read a mesh from any iterable of text lines (an open file, a StringIO,
    a list of strings).

    The stream is consumed once, front to back. centre_of_gravity and
    object_size are computed after the last line.

    Raises:
        MalformedNumericToken: a required number is missing or unparsable.
        IncompleteFaceRecord: an f line lacks 3 complete corner groups.
    """
    attributes = {"positions": [], "colors": [], "normals": [], "tex_coords": []}
    face_vertices, face_colors, face_normals, face_tex_coords = [], [], [], []

    for line_number, line in enumerate(stream, start=1):
        first = line[:1]

        if first == "v":
            tag = _VERTEX_TAGS.get(line[1:2])
            if tag is None:
                continue
            name, required = tag
            values = _parse_floats(line[2:].split(), required, line_number, line)
            attributes[name].append(values)

        elif first == "f":
            corners = _parse_face(line[1:].split(), line_number, line)
            for vertex, colour, texcoord, normal in corners:
                face_vertices.append(vertex)
                face_colors.append(colour)
                face_normals.append(normal)
                face_tex_coords.append(texcoord)

        # '#' comments and every other leading character are skipped.

    mesh = Mesh(
        positions=np.array(attributes["positions"], dtype=np.float64).reshape(-1, 3),
        colors=np.array(attributes["colors"], dtype=np.float64).reshape(-1, 3),
        normals=np.array(attributes["normals"], dtype=np.float64).reshape(-1, 3),
        tex_coords=np.array(attributes["tex_coords"], dtype=np.float64).reshape(-1, 3),
        face_vertices=np.array(face_vertices, dtype=np.int64),
        face_colors=np.array(face_colors, dtype=np.int64),
        face_normals=np.array(face_normals, dtype=np.int64),
        face_tex_coords=np.array(face_tex_coords, dtype=np.int64),
    )
    mesh.update_bounds()

    summary = mesh.summary()
    logger.info(
        "Loaded mesh: %d triangles, %d positions, %d colours, %d normals, "
        "%d tex coords; centre %s, size %.6g",
        summary["triangles"], summary["positions"], summary["colors"],
        summary["normals"], summary["tex_coords"],
        summary["centre_of_gravity"], summary["object_size"],
    )
    return mesh


def load_mesh(path) -> Mesh:
    """Read a mesh file from disk. See parse_mesh()."""
    path = Path(path)
    logger.debug("Reading mesh from %s", path)
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return parse_mesh(f)


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def _format_vector(vector) -> str:
    return " ".join(f"{float(component):.6f}" for component in vector)


def write_mesh(mesh: Mesh, stream: TextIO) -> None:
    """
    Write a mesh in the text format read by parse_mesh().

    Each attribute section is preceded by a count comment; faces follow as
    1-based vertex/colour/texcoord/normal groups.
    """
    mesh.check_faces()

    stream.write(f"# {mesh.triangle_count} triangles\n")
    stream.write("\n")

    sections = [
        ("vertices", "v  ", mesh.positions),
        ("vertex colours", "vc ", mesh.colors),
        ("vertex normals", "vn ", mesh.normals),
        ("vertex tex coords", "vt ", mesh.tex_coords),
    ]
    for label, tag, values in sections:
        stream.write(f"# {len(values)} {label}\n")
        for vector in values:
            stream.write(f"{tag}{_format_vector(vector)}\n")

    # (F, 3 corners, 4 indices) in on-wire order, back to 1-based.
    corners = np.stack(
        [mesh.face_vertices, mesh.face_colors, mesh.face_tex_coords, mesh.face_normals],
        axis=1,
    ).reshape(-1, CORNERS_PER_FACE, INDICES_PER_CORNER) + 1

    for face in corners:
        groups = " ".join("/".join(str(int(i)) for i in corner) for corner in face)
        stream.write(f"f {groups}\n")


def mesh_to_text(mesh: Mesh) -> str:
    buffer = io.StringIO()
    write_mesh(mesh, buffer)
    return buffer.getvalue()


def save_mesh(mesh: Mesh, path) -> Path:
    """Write a mesh file to disk and return its path."""
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        write_mesh(mesh, f)
    logger.info("Wrote mesh (%d triangles) to %s", mesh.triangle_count, path)
    return path
