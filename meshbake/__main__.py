"""
Command-line entry point for meshbake.

This module is invoked when the package is run directly via:
    python -m meshbake model.tri

It loads the mesh, bakes the requested attribute maps, and writes them to
the output directory as <basename>_texture.<ext> and <basename>_normal.<ext>.
Optionally the loaded mesh is written back out in its own text format
(--rewrite) or exported to OBJ/glTF/PLY with the colour map attached
(--export).
"""

import argparse
import logging
import sys
from pathlib import Path

from meshbake import __version__
from meshbake.core.errors import MeshError
from meshbake.core.exporter import export_mesh
from meshbake.core.image_io import save_raster
from meshbake.core.mesh_io import load_mesh, save_mesh
from meshbake.core.pipeline import (
    BAKE_ORDER,
    DEFAULT_RASTER_SIZE,
    RASTER_FORMATS,
    RASTER_SIZE_PRESETS,
    BakeMode,
)
from meshbake.core.texture_baker import bake_all
from meshbake.core.workspace import create_output_paths
from meshbake.logging_config import setup_logging

logger = logging.getLogger("meshbake")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meshbake",
        description="Bake per-corner colours and normals of an "
                    "indexed-attribute mesh into UV-space images.",
    )
    parser.add_argument("mesh", type=Path, help="Mesh file to load")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="Directory for baked images (default: ./output)")
    size = parser.add_mutually_exclusive_group()
    size.add_argument("--size", type=int, default=None,
                      help=f"Raster edge length in pixels (default: {DEFAULT_RASTER_SIZE})")
    size.add_argument("--preset", choices=sorted(RASTER_SIZE_PRESETS),
                      help="Named raster size preset")
    parser.add_argument("--format", dest="fmt", choices=sorted(RASTER_FORMATS),
                        default="ppm", help="Image format (default: ppm)")
    parser.add_argument("--modes", nargs="+", choices=BAKE_ORDER, default=BAKE_ORDER,
                        help="Bake modes to run (default: all)")
    parser.add_argument("--rewrite", type=Path, default=None,
                        help="Write the loaded mesh back out to this path")
    parser.add_argument("--export", type=Path, default=None,
                        help="Export the mesh to .obj, .glb or .ply")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log debug messages")
    parser.add_argument("--log-file", default=None, help="Also write the log here")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run(argv=None) -> int:
    """Parse arguments and run one bake. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    if args.preset is not None:
        size = RASTER_SIZE_PRESETS[args.preset]
    elif args.size is not None:
        size = args.size
    else:
        size = DEFAULT_RASTER_SIZE

    try:
        mesh = load_mesh(args.mesh)
        rasters = bake_all(mesh, size, on_progress=logger.info, modes=args.modes)

        paths = create_output_paths(args.mesh, args.output_dir, args.fmt)
        for mode, raster in rasters.items():
            save_raster(raster, paths.for_mode(mode))

        if args.rewrite is not None:
            save_mesh(mesh, args.rewrite)

        if args.export is not None:
            export_mesh(mesh, args.export, texture=rasters.get(BakeMode.COLOR))

    except (MeshError, OSError, ValueError) as e:
        logger.error("%s", e)
        return 1

    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
