"""
Pixel buffer access layer.

Wraps a decoded image as an immutable RGBA grid and derives the grayscale
view used by every analyzer.
"""

from typing import Sequence, Union
import numpy as np

from .errors import DecodeError

# ITU-R BT.601 luma weights
GRAY_WEIGHTS = (0.299, 0.587, 0.114)


class ImageSample:
    """
    Immutable RGBA image.

    The pixel array has shape (H, W, 4) and dtype uint8. It is copied on
    construction and marked read-only, so a sample can be shared between
    analyzers without any of them mutating it.
    """

    def __init__(self, pixels: np.ndarray):
        if not isinstance(pixels, np.ndarray):
            raise DecodeError("Pixels must be a numpy array")
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise DecodeError(f"Pixels must have shape (H, W, 4), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise DecodeError(f"Pixels must have dtype uint8, got {pixels.dtype}")

        self._pixels = np.array(pixels, dtype=np.uint8, copy=True)
        self._pixels.flags.writeable = False

    @classmethod
    def from_rgb(cls, rgb: np.ndarray, alpha: int = 255) -> "ImageSample":
        """
        Create a sample from an RGB array, filling alpha with a constant.

        Args:
            rgb: Array with shape (H, W, 3) and dtype uint8
            alpha: Alpha value for every pixel

        Returns:
            New ImageSample
        """
        if not isinstance(rgb, np.ndarray) or rgb.ndim != 3 or rgb.shape[2] != 3:
            raise DecodeError("RGB input must have shape (H, W, 3)")
        if rgb.dtype != np.uint8:
            raise DecodeError(f"RGB input must have dtype uint8, got {rgb.dtype}")

        h, w = rgb.shape[:2]
        rgba = np.empty((h, w, 4), dtype=np.uint8)
        rgba[:, :, :3] = rgb
        rgba[:, :, 3] = alpha
        return cls(rgba)

    @classmethod
    def from_rgba(cls, rgba: np.ndarray) -> "ImageSample":
        """Create a sample from an (H, W, 4) uint8 array."""
        return cls(rgba)

    @classmethod
    def from_buffer(cls, width: int, height: int,
                    data: Union[bytes, bytearray, Sequence[int]]) -> "ImageSample":
        """
        Create a sample from a flat row-major RGBA byte sequence.

        Args:
            width: Image width in pixels
            height: Image height in pixels
            data: 4 * width * height interleaved R, G, B, A values

        Returns:
            New ImageSample

        Example:
            >>> sample = ImageSample.from_buffer(2, 1, [255, 0, 0, 255, 0, 0, 255, 255])
            >>> sample.width, sample.height
            (2, 1)
        """
        if width < 0 or height < 0:
            raise DecodeError(f"Invalid image size: {width}x{height}")

        if isinstance(data, (bytes, bytearray)):
            flat = np.frombuffer(bytes(data), dtype=np.uint8)
        else:
            flat = np.asarray(data)
            if flat.size and (flat.min() < 0 or flat.max() > 255):
                raise DecodeError("Channel values must be in [0, 255]")
            flat = flat.astype(np.uint8)

        expected = width * height * 4
        if flat.size != expected:
            raise DecodeError(
                f"Expected {expected} channel values for {width}x{height}, got {flat.size}"
            )
        return cls(flat.reshape(height, width, 4))

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def pixels(self) -> np.ndarray:
        """Read-only (H, W, 4) RGBA array."""
        return self._pixels

    @property
    def rgb(self) -> np.ndarray:
        """Contiguous (H, W, 3) RGB copy."""
        return np.ascontiguousarray(self._pixels[:, :, :3])

    @property
    def alpha(self) -> np.ndarray:
        return self._pixels[:, :, 3]

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def gray(self) -> np.ndarray:
        """
        Compute the grayscale view ``0.299R + 0.587G + 0.114B``.

        The result is float64 and never cached on the sample; callers that need
        it several times keep their own copy for the duration of the call.
        """
        rgb = self._pixels[:, :, :3].astype(np.float64)
        return (GRAY_WEIGHTS[0] * rgb[:, :, 0]
                + GRAY_WEIGHTS[1] * rgb[:, :, 1]
                + GRAY_WEIGHTS[2] * rgb[:, :, 2])

    def with_rgb(self, rgb: np.ndarray) -> "ImageSample":
        """Return a new sample with replaced RGB channels and this sample's alpha."""
        if rgb.shape[:2] != self._pixels.shape[:2]:
            raise DecodeError("Replacement RGB must match the image size")
        rgba = np.empty_like(self._pixels)
        rgba[:, :, :3] = rgb
        rgba[:, :, 3] = self._pixels[:, :, 3]
        return ImageSample(rgba)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImageSample):
            return NotImplemented
        return (self._pixels.shape == other._pixels.shape
                and bool(np.array_equal(self._pixels, other._pixels)))

    __hash__ = None

    def __repr__(self) -> str:
        return f"ImageSample(width={self.width}, height={self.height})"
