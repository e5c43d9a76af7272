"""
Mesh export module for meshbake.

Converts an indexed-attribute Mesh into standard interchange formats that
modeling tools (Blender, game engines, web viewers) can import.

Standard formats share a single index between position, normal and UV, so
the mesh is unwelded on the way out: every triangle corner becomes its own
vertex carrying its own position, normal, UV and colour. Geometry is passed
to trimesh with process=False so those corner vertices are never merged.

Supported export formats:
    - OBJ (.obj)         Universal format. With a baked colour map, a bundle
                           folder dest_path.parent/dest_path.stem/ holds the
                           .obj, its .mtl and the texture PNG.
    - glTF Binary (.glb) The colour map is embedded as the PBR base colour
                           texture; fully self-contained.
    - PLY (.ply)         Geometry with per-corner normals and colours.

Without a baked colour map, per-corner colours are written as vertex colours.

Uses trimesh for format conversion and PBR material attachment.
"""

import logging
from pathlib import Path

import numpy as np
import trimesh
from PIL import Image
from trimesh.exchange.obj import export_obj
from trimesh.visual.material import PBRMaterial
from trimesh.visual.texture import TextureVisuals

from meshbake.core.mesh import Mesh
from meshbake.core.pipeline import EXPORT_FORMATS, BakeMode
from meshbake.core.texture_baker import encode_channels

logger = logging.getLogger(__name__)


def to_trimesh(mesh: Mesh, texture=None) -> trimesh.Trimesh:
    """
    Unweld a Mesh into a trimesh.Trimesh with one vertex per triangle corner.

    Args:
        mesh:    Loaded Mesh.
        texture: Optional (D, D, 3) uint8 colour map from texture_baker.
                 When given, the mesh's UVs and a PBR material using it as
                 base colour replace the per-corner vertex colours.

    Returns:
        trimesh.Trimesh with 3F vertices and F faces.

    Raises:
        IndexOutOfRange: a face index does not address its attribute array.
        ValueError: a texture was given but the mesh has no UV coordinates.
    """
    mesh.check_faces()
    vertices = mesh.corner_values("positions")
    faces = np.arange(len(vertices), dtype=np.int64).reshape(-1, 3)

    kwargs = {}
    if len(mesh.normals) > 0:
        kwargs["vertex_normals"] = mesh.corner_values("normals")
    if texture is None and len(mesh.colors) > 0:
        rgb = encode_channels(mesh.corner_values("colors"), BakeMode.COLOR)
        alpha = np.full((len(rgb), 1), 255, dtype=np.uint8)
        kwargs["vertex_colors"] = np.hstack([rgb, alpha])

    result = trimesh.Trimesh(vertices=vertices, faces=faces, process=False, **kwargs)

    if texture is not None:
        if len(mesh.tex_coords) == 0:
            raise ValueError("Mesh has no texture coordinates to map a texture with")
        uv = mesh.corner_values("tex_coords")[:, :2]
        material = PBRMaterial(
            baseColorTexture=Image.fromarray(np.asarray(texture, dtype=np.uint8))
        )
        result.visual = TextureVisuals(uv=uv, material=material)

    return result


def _export_obj_bundle(tm: trimesh.Trimesh, dest_path: Path) -> Path:
    """
    Write a textured OBJ into a bundle folder named after dest_path.

    Example: dest_path ~/Desktop/mesh.obj creates
        ~/Desktop/mesh/
            mesh.obj    geometry with UV coordinates
            mesh.mtl    material referencing the texture
            *.png       the baked colour map

    Returns:
        Path of the bundle folder.
    """
    stem = dest_path.stem
    bundle_dir = dest_path.parent / stem
    bundle_dir.mkdir(parents=True, exist_ok=True)

    text, files = export_obj(
        tm, include_texture=True, return_texture=True, mtl_name=f"{stem}.mtl"
    )

    with open(bundle_dir / dest_path.name, "w", encoding="utf-8") as f:
        f.write(text)
    for name, data in files.items():
        with open(bundle_dir / name, "wb") as f:
            f.write(data)

    return bundle_dir


def export_mesh(mesh: Mesh, dest_path, texture=None) -> Path:
    """
    Export a Mesh in the format implied by dest_path's extension.

    Args:
        mesh:      Loaded Mesh.
        dest_path: Where to save the file (.obj, .glb or .ply).
        texture:   Optional baked colour map to attach as a material.

    Returns:
        Path: the written file, or the bundle folder for a textured OBJ.

    Raises:
        ValueError: the destination extension isn't a supported format.
    """
    dest_path = Path(dest_path)
    supported = set(EXPORT_FORMATS.values())

    extension = dest_path.suffix.lower()
    if extension not in supported:
        raise ValueError(
            f"Unsupported export format '{extension}'. "
            f"Supported: {', '.join(sorted(supported))}"
        )

    tm = to_trimesh(mesh, texture)

    if extension == ".obj" and texture is not None:
        written = _export_obj_bundle(tm, dest_path)
    else:
        tm.export(str(dest_path))
        written = dest_path

    logger.info("Exported %d triangles to %s", len(tm.faces), written)
    return written
