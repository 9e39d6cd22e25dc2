"""
Exceptions raised by the geometry and warping routines.

Out-of-bounds samples are not errors: pixels that map outside the target
quadrilateral or the source raster are simply left transparent.
"""


class InvalidInputError(ValueError):
    """Malformed input rejected before any computation starts.

    Wrong number of corner points, non-finite coordinates, non-positive
    raster dimensions, and similar precondition violations.
    """


class DegenerateGeometryError(ArithmeticError):
    """The corner configuration does not define a projective transform.

    Raised for collinear, duplicate or zero-area corners and whenever the
    linear system behind the homography has no usable pivot.  Retrying with
    the same corners always fails again.
    """
