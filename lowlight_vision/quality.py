"""
Image quality metrics computed on the grayscale view.

Brightness, contrast and sharpness are used to judge how much an enhancement
changed the visible content of an image.
"""

import numpy as np
from scipy import ndimage

from .models import QualityMetrics

LAPLACIAN_KERNEL = np.array([[0.0, 1.0, 0.0],
                             [1.0, -4.0, 1.0],
                             [0.0, 1.0, 0.0]])


def compute_brightness(gray: np.ndarray) -> float:
    """Mean gray value, 0 for an empty image."""
    if gray.size == 0:
        return 0.0
    return float(np.mean(gray))


def compute_contrast(gray: np.ndarray) -> float:
    """Population standard deviation ``sqrt(E[x^2] - E[x]^2)``."""
    if gray.size == 0:
        return 0.0
    mean = np.mean(gray)
    variance = np.mean(gray * gray) - mean * mean
    return float(np.sqrt(max(variance, 0.0)))


def compute_sharpness(gray: np.ndarray) -> float:
    """
    Mean absolute 4-neighbor Laplacian over interior pixels.

    Args:
        gray: Grayscale view (H, W) float

    Returns:
        Sharpness score; 0 for images without interior pixels
    """
    h, w = gray.shape
    if h < 3 or w < 3:
        return 0.0

    # Border handling is irrelevant, only the interior is kept
    laplacian = ndimage.convolve(gray, LAPLACIAN_KERNEL, mode='nearest')
    interior = laplacian[1:-1, 1:-1]
    return float(np.sum(np.abs(interior)) / ((w - 2) * (h - 2)))


def analyze_quality(gray: np.ndarray) -> QualityMetrics:
    """
    Compute brightness, contrast and sharpness of a grayscale view.

    Values are rounded to 2 decimals for reporting; the underlying
    computation uses full float64 precision.

    Args:
        gray: Grayscale view (H, W) float

    Returns:
        QualityMetrics

    Example:
        >>> q = analyze_quality(sample.gray())
        >>> print(f"Brightness: {q.brightness:.2f}")
    """
    return QualityMetrics(
        brightness=round(compute_brightness(gray), 2),
        contrast=round(compute_contrast(gray), 2),
        sharpness=round(compute_sharpness(gray), 2),
    )
