"""
Image I/O helpers.

Thin wrappers around Pillow for loading images as RGBA rasters, writing
warped results back out, and managing output directories.
"""

import os

import numpy as np
from PIL import Image

from src.warping.raster import RasterImage


def load_raster(path: str) -> RasterImage:
    """Load an image file of any mode as an RGBA raster.

    Parameters
    ----------
    path : str
        Path to the image file.

    Returns
    -------
    RasterImage
        Decoded H x W x 4 uint8 image.
    """
    with Image.open(path) as img:
        return RasterImage(np.array(img.convert("RGBA")))


def save_raster(raster: RasterImage, path: str) -> None:
    """Write *raster* as an RGBA image; the format follows the file extension."""
    Image.fromarray(raster.pixels).save(path)


def resize_raster(raster: RasterImage, width: int, height: int) -> RasterImage:
    """Stretch *raster* to width x height with Pillow's bilinear filter.

    Used to show the unmodified image on the canvas when no valid warp
    exists for the current corners.  Colour and alpha are resized as
    separate images; Pillow would otherwise premultiply RGBA by alpha and
    darken semi-transparent colours.
    """
    size = (int(width), int(height))
    rgb = Image.fromarray(np.ascontiguousarray(raster.pixels[:, :, :3]))
    alpha = Image.fromarray(np.ascontiguousarray(raster.pixels[:, :, 3]))

    resized = np.dstack([
        np.array(rgb.resize(size, Image.BILINEAR)),
        np.array(alpha.resize(size, Image.BILINEAR)),
    ])
    return RasterImage(resized.astype(np.uint8))


def ensure_output_dirs(names: list, base: str = "results") -> None:
    """Create one output subdirectory per job name under *base*."""
    for name in names:
        os.makedirs(os.path.join(base, name), exist_ok=True)
