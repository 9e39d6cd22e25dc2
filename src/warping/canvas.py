"""
Canvas sizing and corner-handle helpers for the warp driver.
"""

from src.geometry.errors import InvalidInputError
from src.geometry.points import Point2D, as_quad

MAX_CANVAS_WIDTH = 1200
MAX_CANVAS_HEIGHT = 800


def fit_canvas(image_width: int, image_height: int,
               max_width: int = MAX_CANVAS_WIDTH,
               max_height: int = MAX_CANVAS_HEIGHT) -> tuple:
    """Shrink the image size to fit the canvas limits, keeping the aspect ratio.

    The width limit is applied first, then the height limit.  Images that
    already fit are left at their natural size.
    """
    if image_width <= 0 or image_height <= 0:
        raise InvalidInputError(
            f"image dimensions must be positive, got {image_width} x {image_height}"
        )
    if max_width <= 0 or max_height <= 0:
        raise InvalidInputError(
            f"canvas limits must be positive, got {max_width} x {max_height}"
        )

    width, height = float(image_width), float(image_height)
    if width > max_width:
        ratio = max_width / width
        width = max_width
        height *= ratio
    if height > max_height:
        ratio = max_height / height
        height = max_height
        width *= ratio

    return max(1, int(width)), max(1, int(height))


def rectangle_corners(width: float, height: float) -> list:
    """Corners of a width x height rectangle: TL, TR, BR, BL."""
    return [
        Point2D(0.0, 0.0),
        Point2D(float(width), 0.0),
        Point2D(float(width), float(height)),
        Point2D(0.0, float(height)),
    ]


def clamp_corners(corners, width: float, height: float) -> list:
    """Clamp each corner into the [0, width] x [0, height] canvas."""
    quad = as_quad(corners, "corners")
    return [
        Point2D(float(min(max(x, 0.0), width)), float(min(max(y, 0.0), height)))
        for x, y in quad
    ]
