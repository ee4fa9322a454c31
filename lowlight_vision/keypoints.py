"""
Keypoint-density estimation from edge statistics.

The three counts are deterministic proxies for ORB, FAST and SIFT detector
output. They are affine in two image statistics (pixel-pair complexity and
mean gradient magnitude) and are only meaningful for relative before/after
comparison of the same scene.
"""

from typing import Any, Dict, Optional, Tuple
import math
import numpy as np

from .models import KeypointStats

DEFAULT_COEFFICIENTS: Dict[str, Tuple[float, float, float]] = {
    'orb': (30.0, 250.0, 100.0),
    'fast': (80.0, 400.0, 150.0),
    'sift': (20.0, 180.0, 80.0),
}


def image_complexity(gray: np.ndarray, threshold: float = 30.0) -> float:
    """
    Fraction of pixels with a strong right or down neighbor difference.

    Pixels in the last row and column have no full neighbor pair and are
    never counted, but the divisor is the full pixel count.

    Args:
        gray: Grayscale view (H, W) float
        threshold: Gray difference above which a pair counts as an edge

    Returns:
        Complexity in [0, 1)
    """
    h, w = gray.shape
    if h < 2 or w < 2:
        return 0.0

    base = gray[:-1, :-1]
    diff_right = np.abs(base - gray[:-1, 1:])
    diff_down = np.abs(base - gray[1:, :-1])
    edges = (diff_right > threshold) | (diff_down > threshold)

    return float(np.count_nonzero(edges) / (w * h))


def edge_density(gray: np.ndarray) -> float:
    """Mean central-difference gradient magnitude over interior pixels, over 255."""
    h, w = gray.shape
    if h < 3 or w < 3:
        return 0.0

    gx = gray[1:-1, 2:] - gray[1:-1, :-2]
    gy = gray[2:, 1:-1] - gray[:-2, 1:-1]
    strength = np.sum(np.sqrt(gx * gx + gy * gy))

    return float(strength / ((w - 2) * (h - 2) * 255))


def estimate_keypoints(gray: np.ndarray, cfg: Optional[Dict[str, Any]] = None) -> KeypointStats:
    """
    Estimate ORB, FAST and SIFT keypoint counts.

    Each count is ``floor(base + wc * complexity + we * edge_density)``.

    Args:
        gray: Grayscale view (H, W) float
        cfg: Configuration dictionary with keypoints parameters

    Returns:
        KeypointStats with non-negative integer counts

    Example:
        >>> stats = estimate_keypoints(sample.gray())
        >>> stats.orb >= 30
        True
    """
    cfg = cfg or {}
    coefficients = {**DEFAULT_COEFFICIENTS, **cfg.get('coefficients', {})}

    complexity = image_complexity(gray, cfg.get('complexity_threshold', 30.0))
    density = edge_density(gray)

    counts = {}
    for name in ('orb', 'fast', 'sift'):
        base, w_complexity, w_edges = coefficients[name]
        value = base + complexity * w_complexity + density * w_edges
        counts[name] = max(int(math.floor(value)), 0)

    return KeypointStats(**counts)
