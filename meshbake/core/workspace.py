"""
Output path manager for meshbake.

Each bake writes one file per mode next to each other in an output
directory, named after the source mesh:

    <output_dir>/<basename>_texture.<ext>   colour map
    <output_dir>/<basename>_normal.<ext>    normal map

The output directory defaults to ./output and is created on demand.
"""

from dataclasses import dataclass
from pathlib import Path

from meshbake.core.pipeline import BAKE_FILE_SUFFIXES, RASTER_FORMATS, BakeMode

DEFAULT_OUTPUT_DIR = Path("output")


@dataclass
class BakeOutputPaths:
    """
    Typed container for the files produced by one bake run.

    Modules reference these named attributes rather than assembling file
    names themselves.
    """
    root: Path      # Output directory
    texture: Path   # Colour map
    normal: Path    # Normal map

    def for_mode(self, mode: str) -> Path:
        if mode == BakeMode.COLOR:
            return self.texture
        if mode == BakeMode.NORMAL:
            return self.normal
        raise ValueError(f"Unknown bake mode '{mode}'")


def create_output_paths(source, output_dir=None, fmt: str = "ppm") -> BakeOutputPaths:
    """
    Derive output file names for a source mesh and create the directory.

    Args:
        source:     Path or name of the mesh; only its stem is used.
        output_dir: Directory for the rasters. Defaults to ./output.
        fmt:        Key of RASTER_FORMATS ("ppm" or "png").

    Returns:
        BakeOutputPaths with the directory created on disk.
    """
    if fmt not in RASTER_FORMATS:
        raise ValueError(
            f"Unsupported raster format '{fmt}'. "
            f"Supported: {', '.join(sorted(RASTER_FORMATS))}"
        )

    root = Path(output_dir) if output_dir is not None else DEFAULT_OUTPUT_DIR
    basename = Path(source).stem
    extension = RASTER_FORMATS[fmt]

    paths = BakeOutputPaths(
        root=root,
        texture=root / f"{basename}{BAKE_FILE_SUFFIXES[BakeMode.COLOR]}{extension}",
        normal=root / f"{basename}{BAKE_FILE_SUFFIXES[BakeMode.NORMAL]}{extension}",
    )

    paths.root.mkdir(parents=True, exist_ok=True)
    return paths
