"""
Feature fusion into a single fixed-length vector.

Concatenates keypoint counts, a condensed texture descriptor and statistical
moments, then L2-normalizes the result so vectors from different images can
be compared directly.
"""

from typing import Any, Dict, List, Optional, Sequence
import numpy as np

from .models import FeatureVector, KeypointStats, StatisticalFeatures, TextureFeatures


def _head(values: Sequence[float], length: int) -> List[float]:
    """First ``length`` values, zero-padded when fewer are available."""
    head = [float(v) for v in values[:length]]
    return head + [0.0] * (length - len(head))


def l2_normalize(values: Sequence[float]) -> List[float]:
    """Divide by the L2 norm plus a small epsilon; zero input stays zero."""
    arr = np.asarray(values, dtype=np.float64)
    norm = np.sqrt(np.sum(arr * arr)) + 1e-6
    return (arr / norm).tolist()


def build_feature_vector(keypoints: KeypointStats, texture: TextureFeatures,
                         statistical: StatisticalFeatures,
                         cfg: Optional[Dict[str, Any]] = None) -> FeatureVector:
    """
    Fuse per-family features into one normalized vector.

    Layout:
        keypoints   [orb, fast, sift]
        texture     HOG[:20] ++ LBP[:20] ++ [glcm contrast, energy, homogeneity]
        statistical 7 Hu moments ++ 3 color means ++ 3 color stds

    The slices are fixed so the fused length does not depend on image size.

    Args:
        keypoints: Keypoint counts
        texture: Texture descriptors
        statistical: Statistical descriptors
        cfg: Configuration dictionary with fusion parameters

    Returns:
        FeatureVector with sub-vectors kept for reporting

    Example:
        >>> vec = build_feature_vector(kp, tex, stats)
        >>> vec.dimensionality
        59
    """
    cfg = cfg or {}
    hog_slice = cfg.get('hog_slice', 20)
    lbp_slice = cfg.get('lbp_slice', 20)

    keypoint_vec = keypoints.as_list()

    texture_vec = (
        _head(texture.hog.descriptor, hog_slice)
        + _head(texture.lbp.histogram, lbp_slice)
        + [texture.glcm.contrast, texture.glcm.energy, texture.glcm.homogeneity]
    )

    statistical_vec = (
        [float(v) for v in statistical.hu_moments]
        + [float(v) for v in statistical.color_moments.mean]
        + [float(v) for v in statistical.color_moments.std]
    )

    fused = l2_normalize(keypoint_vec + texture_vec + statistical_vec)

    return FeatureVector(
        keypoints=keypoint_vec,
        texture=texture_vec,
        statistical=statistical_vec,
        fused=fused,
        dimensionality=len(fused),
    )
