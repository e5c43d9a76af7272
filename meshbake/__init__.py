"""
meshbake: indexed-attribute mesh loader and UV-space attribute baker.

This is the top-level package. It reads a triangle mesh whose corners carry
four independent attribute indices (position, colour, texture coordinate,
normal) and bakes the per-corner colours and normals into square raster
images laid out by texture coordinate.

The version string below is the single source of truth for the package's
version number, mirrored in pyproject.toml.
"""

__version__ = "0.1.0"
