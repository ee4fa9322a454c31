"""
Image I/O utilities for the low-light vision pipeline.

Decodes files and in-memory bytes into ImageSample objects and writes
samples back to disk, keeping RGB channel order throughout.
"""

from pathlib import Path
from typing import Union
import numpy as np
import cv2

from .errors import DecodeError
from .image import ImageSample


def _to_rgba(decoded: np.ndarray) -> np.ndarray:
    """Convert an OpenCV-decoded array (BGR order) to RGBA uint8."""
    if decoded.dtype == np.uint16:
        decoded = (decoded >> 8).astype(np.uint8)
    elif decoded.dtype != np.uint8:
        raise DecodeError(f"Unsupported image dtype: {decoded.dtype}")

    if decoded.ndim == 2:
        return cv2.cvtColor(decoded, cv2.COLOR_GRAY2RGBA)
    if decoded.shape[2] == 3:
        return cv2.cvtColor(decoded, cv2.COLOR_BGR2RGBA)
    if decoded.shape[2] == 4:
        return cv2.cvtColor(decoded, cv2.COLOR_BGRA2RGBA)

    raise DecodeError(f"Unsupported channel count: {decoded.shape[2]}")


def decode_image(data: bytes) -> ImageSample:
    """
    Decode encoded image bytes (PNG, JPEG, ...) into an ImageSample.

    Args:
        data: Encoded image file content

    Returns:
        Decoded RGBA sample

    Raises:
        DecodeError: If the bytes are empty or not a decodable image

    Example:
        >>> sample = decode_image(Path("night.png").read_bytes())
    """
    if not data:
        raise DecodeError("Cannot decode empty image data")

    buffer = np.frombuffer(data, dtype=np.uint8)
    decoded = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)

    if decoded is None:
        raise DecodeError("Could not decode image data")

    return ImageSample.from_rgba(_to_rgba(decoded))


def read_image(path: Union[str, Path]) -> ImageSample:
    """
    Read an image file into an ImageSample.

    Args:
        path: Path to image file

    Returns:
        RGBA sample

    Raises:
        FileNotFoundError: If image file doesn't exist
        DecodeError: If image cannot be read or is not valid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    decoded = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)

    if decoded is None:
        raise DecodeError(f"Could not read image from: {path}")

    return ImageSample.from_rgba(_to_rgba(decoded))


def save_image(image: ImageSample, path: Union[str, Path], quality: int = 95) -> Path:
    """
    Save the RGB channels of a sample to file.

    Args:
        image: Sample to write
        path: Output file path; the extension selects the codec
        quality: JPEG quality (0-100), only used for JPEG files

    Returns:
        The path written

    Raises:
        ValueError: If the sample is empty or the write fails
    """
    path = Path(path)

    if image.is_empty:
        raise ValueError("Cannot save an empty image")

    # Create output directory if it doesn't exist
    path.parent.mkdir(parents=True, exist_ok=True)

    img_bgr = cv2.cvtColor(image.rgb, cv2.COLOR_RGB2BGR)

    ext = path.suffix.lower()
    if ext in ['.jpg', '.jpeg']:
        encode_params = [cv2.IMWRITE_JPEG_QUALITY, quality]
    elif ext == '.png':
        encode_params = [cv2.IMWRITE_PNG_COMPRESSION, 9]
    else:
        encode_params = []

    success = cv2.imwrite(str(path), img_bgr, encode_params)

    if not success:
        raise ValueError(f"Failed to save image to: {path}")

    return path
