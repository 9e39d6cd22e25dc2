"""
RGBA raster container shared by the resampler, image I/O and plotting.

Pixels are stored as an H x W x 4 uint8 array (row-major, top-left origin,
channel order R, G, B, A), which is byte-for-byte the flat buffer layout
``width * height * 4``.
"""

from dataclasses import dataclass

import numpy as np

from src.geometry.errors import InvalidInputError


def _check_size(width: int, height: int) -> None:
    if int(width) != width or int(height) != height or width <= 0 or height <= 0:
        raise InvalidInputError(
            f"raster dimensions must be positive integers, got {width} x {height}"
        )


@dataclass(frozen=True)
class RasterImage:
    pixels: np.ndarray

    def __post_init__(self):
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray) or pixels.ndim != 3 or pixels.shape[2] != 4:
            shape = getattr(pixels, "shape", None)
            raise InvalidInputError(f"expected an H x W x 4 pixel array, got shape {shape}")
        _check_size(pixels.shape[1], pixels.shape[0])
        if pixels.dtype != np.uint8:
            raise InvalidInputError(f"pixels must be uint8, got {pixels.dtype}")

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @classmethod
    def blank(cls, width: int, height: int) -> "RasterImage":
        """Fully transparent raster of the given size."""
        _check_size(width, height)
        return cls(np.zeros((int(height), int(width), 4), dtype=np.uint8))

    @classmethod
    def from_bytes(cls, width: int, height: int, data) -> "RasterImage":
        """Build a raster from a flat RGBA byte buffer of length w * h * 4."""
        _check_size(width, height)
        buf = np.frombuffer(bytes(data), dtype=np.uint8)
        expected = int(width) * int(height) * 4
        if buf.size != expected:
            raise InvalidInputError(
                f"pixel buffer has {buf.size} bytes, expected {expected}"
            )
        return cls(buf.reshape(int(height), int(width), 4).copy())

    @classmethod
    def from_array(cls, arr) -> "RasterImage":
        """Promote an H x W (gray), H x W x 3 (RGB) or H x W x 4 array to RGBA.

        Only integer arrays with values in 0..255 are accepted; float images
        (e.g. 0..1 intensities) must be scaled by the caller.
        """
        arr = np.asarray(arr)
        if not np.issubdtype(arr.dtype, np.integer):
            raise InvalidInputError(f"expected an integer pixel array, got {arr.dtype}")
        if arr.size and (arr.min() < 0 or arr.max() > 255):
            raise InvalidInputError("pixel values must lie in 0..255")
        if arr.ndim == 2:
            arr = np.repeat(arr[:, :, np.newaxis], 3, axis=2)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise InvalidInputError(f"cannot convert array of shape {arr.shape} to RGBA")

        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr.astype(np.uint8), alpha], axis=2)
        return cls(np.ascontiguousarray(arr, dtype=np.uint8))

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()
