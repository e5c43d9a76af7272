"""
Raster image output.

Baked rasters are (D, D, 3) uint8 arrays with the origin at the top-left.
The default on-disk format is plain-text PPM:

    P3
    <width> <height>
    255
    r g b            one line per pixel, row-major from the top-left

Any other extension Pillow can write (.png, .tga, .bmp) is saved through
PIL.Image instead.
"""

import logging
from pathlib import Path
from typing import TextIO

import numpy as np
from PIL import Image

from meshbake.core.errors import RasterWriteError

logger = logging.getLogger(__name__)

PPM_MAGIC = "P3"
PPM_MAX_VALUE = 255


def write_ppm(raster: np.ndarray, stream: TextIO) -> None:
    """Write a (H, W, 3) raster to a text stream as plain PPM."""
    raster = np.asarray(raster)
    height, width = raster.shape[:2]

    stream.write(f"{PPM_MAGIC}\n")
    stream.write(f"{width} {height}\n")
    stream.write(f"{PPM_MAX_VALUE}\n")
    np.savetxt(stream, raster.reshape(-1, 3), fmt="%d")


def read_ppm(path) -> np.ndarray:
    """
    Read a plain-text (P3) PPM file into a (H, W, 3) uint8 array.

    Comment lines are skipped. Only 8-bit files (max value 255) are accepted.
    """
    tokens = []
    with open(path, "r", encoding="ascii") as f:
        for line in f:
            tokens.extend(line.split("#", 1)[0].split())

    if not tokens or tokens[0] != PPM_MAGIC:
        raise ValueError(f"{path} is not a plain PPM ({PPM_MAGIC}) file")

    width, height, max_value = (int(t) for t in tokens[1:4])
    if max_value != PPM_MAX_VALUE:
        raise ValueError(f"{path}: unsupported max value {max_value}")

    samples = np.array(tokens[4:], dtype=np.int64)
    if samples.size != width * height * 3:
        raise ValueError(
            f"{path}: expected {width * height * 3} samples, found {samples.size}"
        )
    return samples.reshape(height, width, 3).astype(np.uint8)


def save_raster(raster: np.ndarray, path) -> Path:
    """
    Save a baked raster, picking the format from the path's extension.

    Raises:
        RasterWriteError: the file could not be written.
    """
    path = Path(path)
    try:
        if path.suffix.lower() == ".ppm":
            with open(path, "w", encoding="ascii", newline="\n") as f:
                write_ppm(raster, f)
        else:
            Image.fromarray(np.asarray(raster, dtype=np.uint8)).save(path)
    except (OSError, ValueError) as e:
        raise RasterWriteError(f"Failed to write raster to {path}: {e}") from e

    logger.info("Wrote %dx%d raster to %s", raster.shape[1], raster.shape[0], path)
    return path
