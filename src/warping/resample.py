"""
Quadrilateral warping via inverse homography mapping and bilinear sampling.

Every destination pixel that passes the quadrilateral test is mapped back
into the source image through the destination -> source homography and
sampled with bilinear interpolation.  Pixels that fall outside the quad or
map outside the source raster are left fully transparent.

Pixel coordinates are used as-is (no half-pixel offset): destination pixel
(x, y) is the point (x, y), and source sample (i, j) sits exactly at (i, j).
Mapped coordinates within 1e-9 of an integer are snapped to it before the
bounds test, so the far edge of the quad (which maps to exactly srcW or
srcH) stays transparent.
"""

import numpy as np

from src.geometry.errors import InvalidInputError
from src.geometry.homography import apply_homography_array, compute_homography
from src.geometry.points import as_quad
from src.geometry.quadrilateral import check_containment_mode, quadrilateral_mask
from src.warping.raster import RasterImage

# Source coordinates this close to an integer are taken as that integer.
SNAP_TOLERANCE = 1e-9


def snap_to_integer(coords: np.ndarray) -> np.ndarray:
    """Round coordinates lying within ``SNAP_TOLERANCE`` of an integer.

    Removes floating-point noise from the inverse mapping so that a quad
    edge mapping to exactly ``srcW`` (or 0) is classified by the bounds
    test as the exact value would be.
    """
    nearest = np.round(coords)
    return np.where(np.abs(coords - nearest) <= SNAP_TOLERANCE, nearest, coords)


def bilinear_sample(pixels: np.ndarray, sx: np.ndarray, sy: np.ndarray) -> np.ndarray:
    """Bilinearly interpolate *pixels* at the source coordinates (sx, sy).

    Parameters
    ----------
    pixels : np.ndarray
        H x W x C uint8 source image.
    sx, sy : np.ndarray
        Length-N coordinates with ``0 <= sx < W`` and ``0 <= sy < H``.

    Returns
    -------
    np.ndarray
        N x C uint8 samples, rounded half up.
    """
    h, w = pixels.shape[:2]
    x1 = np.floor(sx).astype(int)
    y1 = np.floor(sy).astype(int)
    x2 = np.minimum(x1 + 1, w - 1)
    y2 = np.minimum(y1 + 1, h - 1)

    dx = (sx - x1)[:, np.newaxis]
    dy = (sy - y1)[:, np.newaxis]

    top = pixels[y1, x1].astype(float) * (1 - dx) + pixels[y1, x2].astype(float) * dx
    bottom = pixels[y2, x1].astype(float) * (1 - dx) + pixels[y2, x2].astype(float) * dx
    value = np.floor(top * (1 - dy) + bottom * dy + 0.5)

    return np.clip(value, 0, 255).astype(np.uint8)


def resample(source: RasterImage, src_pts, dst_pts, out_width: int,
             out_height: int, containment: str = "bbox") -> RasterImage:
    """Warp *source* so that *src_pts* land on *dst_pts*.

    Parameters
    ----------
    source : RasterImage
        Source raster; read-only.
    src_pts : sequence
        Four source-space corners, normally the raster's own corners
        ``(0, 0), (w, 0), (w, h), (0, h)``.
    dst_pts : sequence
        Four destination-space corners in the same order.
    out_width, out_height : int
        Size of the destination canvas.
    containment : str
        Quadrilateral test policy, ``"bbox"`` (default) or ``"polygon"``.

    Returns
    -------
    RasterImage
        Newly allocated out_width x out_height raster.

    Raises
    ------
    InvalidInputError
        On malformed corners, non-positive output size or an unknown
        containment mode; checked before any mapping is computed.
    DegenerateGeometryError
        If the corners do not define a projective transform.
    """
    if int(out_width) != out_width or int(out_height) != out_height \
            or out_width <= 0 or out_height <= 0:
        raise InvalidInputError(
            f"output size must be positive integers, got {out_width} x {out_height}"
        )
    check_containment_mode(containment)
    out_width, out_height = int(out_width), int(out_height)
    src = as_quad(src_pts, "src")
    dst = as_quad(dst_pts, "dst")

    # Swapped correspondences give the destination -> source mapping
    H_inv = compute_homography(dst, src)

    warped = np.zeros((out_height, out_width, 4), dtype=np.uint8)

    inside = quadrilateral_mask(out_width, out_height, dst, mode=containment)
    ys, xs = np.nonzero(inside)
    mapped = apply_homography_array(H_inv, np.column_stack([xs, ys]))
    sx = snap_to_integer(mapped[:, 0])
    sy = snap_to_integer(mapped[:, 1])

    valid = (sx >= 0) & (sx < source.width) & (sy >= 0) & (sy < source.height)
    warped[ys[valid], xs[valid]] = bilinear_sample(source.pixels, sx[valid], sy[valid])

    return RasterImage(warped)
