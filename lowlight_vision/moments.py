"""
Statistical shape and color descriptors.

Provides a simplified seven-value Hu-like moment vector computed from
gray-level weighted second-order moments, and per-channel color moments.
"""

from typing import List, Optional, Tuple
import numpy as np

from .image import ImageSample
from .models import ColorMoments, StatisticalFeatures


def compute_hu_moments(gray: np.ndarray) -> List[float]:
    """
    Compute seven Hu-like invariants from second-order moments.

    Gray intensity is the mass of each pixel. The central moments mu20, mu02
    and mu11 are normalized by ``m00 ** 2`` and combined as::

        h1 = eta20 + eta02
        h2 = (eta20 - eta02)^2 + 4 eta11^2
        h3 = (eta20 - 3 eta02)^2
        h4 = (eta20 + eta02)^2
        h5 = eta11 (eta20 - eta02)^2
        h6 = (eta20 - eta02) eta11
        h7 = eta11 (eta20 + eta02)

    These are not the textbook Hu invariants (which need third-order
    moments); they are stable second-order substitutes.

    Args:
        gray: Grayscale view (H, W) float

    Returns:
        List of 7 values rounded to 6 decimals
    """
    h, w = gray.shape
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)

    m00 = float(np.sum(gray))
    m10 = float(np.sum(xs * gray))
    m01 = float(np.sum(ys * gray))

    xc = m10 / (m00 + 1e-6)
    yc = m01 / (m00 + 1e-6)

    dx = xs - xc
    dy = ys - yc
    mu20 = float(np.sum(dx * dx * gray))
    mu02 = float(np.sum(dy * dy * gray))
    mu11 = float(np.sum(dx * dy * gray))

    denom = m00 * m00 + 1e-6
    eta20 = mu20 / denom
    eta02 = mu02 / denom
    eta11 = mu11 / denom

    moments = [
        eta20 + eta02,
        (eta20 - eta02) ** 2 + 4 * eta11 * eta11,
        (eta20 - 3 * eta02) ** 2,
        (eta20 + eta02) ** 2,
        eta11 * (eta20 - eta02) ** 2,
        (eta20 - eta02) * eta11,
        eta11 * (eta20 + eta02),
    ]

    return [round(m, 6) for m in moments]


def _channel_moments(channel: np.ndarray) -> Tuple[float, float, float]:
    """Mean, standard deviation and skewness of one channel."""
    if channel.size == 0:
        return 0.0, 0.0, 0.0

    values = channel.astype(np.float64)
    mean = float(np.mean(values))
    variance = max(float(np.mean(values * values)) - mean * mean, 0.0)
    std = float(np.sqrt(variance))

    third = float(np.mean(values * values * values))
    skewness = (third - 3 * mean * variance - mean ** 3) / (std ** 3 + 1e-6)

    return mean, std, skewness


def compute_color_moments(image: ImageSample) -> ColorMoments:
    """
    Compute per-channel color moments.

    Args:
        image: Input sample

    Returns:
        ColorMoments with R, G, B mean, std and skewness rounded to 2 decimals
    """
    means, stds, skews = [], [], []

    for c in range(3):
        mean, std, skew = _channel_moments(image.pixels[:, :, c])
        means.append(round(mean, 2))
        stds.append(round(std, 2))
        skews.append(round(skew, 2))

    return ColorMoments(mean=means, std=stds, skewness=skews)


def extract_statistical(image: ImageSample, gray: Optional[np.ndarray] = None) -> StatisticalFeatures:
    """
    Compute Hu-like moments and color moments.

    Args:
        image: Input sample
        gray: Precomputed grayscale view of ``image``, computed when omitted

    Returns:
        StatisticalFeatures
    """
    if gray is None:
        gray = image.gray()

    return StatisticalFeatures(
        hu_moments=compute_hu_moments(gray),
        color_moments=compute_color_moments(image),
    )
