"""
Comparison of feature vectors and per-component features.

Measures how close the enhanced image's features are to the raw image's
features and how much each component changed.
"""

import logging
from typing import Dict, Sequence, Tuple
import numpy as np
from sklearn.metrics.pairwise import euclidean_distances

from .errors import ComparisonError
from .models import (
    ComparisonResult,
    ComponentDeltas,
    FeatureVector,
    ImageFeatures,
    VectorChanges,
    VectorComparison,
)

logger = logging.getLogger(__name__)


def _overlap(a: Sequence[float], b: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    n = min(len(a), len(b))
    return (np.asarray(a[:n], dtype=np.float64),
            np.asarray(b[:n], dtype=np.float64))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity over the common prefix of two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        ``dot(a, b) / (|a| |b| + 1e-6)``
    """
    va, vb = _overlap(a, b)
    dot = float(np.dot(va, vb))
    norm_a = float(np.sqrt(np.dot(va, va)))
    norm_b = float(np.sqrt(np.dot(vb, vb)))
    return dot / (norm_a * norm_b + 1e-6)


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance over the common prefix of two vectors."""
    va, vb = _overlap(a, b)
    if va.size == 0:
        return 0.0
    return float(euclidean_distances(va.reshape(1, -1), vb.reshape(1, -1))[0, 0])


def percent_change(raw: float, enhanced: float) -> float:
    """Percentage change from ``raw`` to ``enhanced``; 0 when raw is not positive."""
    if raw <= 0:
        return 0.0
    return (enhanced - raw) / raw * 100.0


def _validate(vec: FeatureVector, label: str) -> None:
    if not vec.fused:
        raise ComparisonError(f"{label} feature vector is empty")
    if vec.dimensionality != len(vec.fused):
        raise ComparisonError(
            f"{label} feature vector is inconsistent: dimensionality "
            f"{vec.dimensionality} != fused length {len(vec.fused)}"
        )


def compare_vectors(vec_a: FeatureVector, vec_b: FeatureVector) -> VectorComparison:
    """
    Compare two fused feature vectors.

    Args:
        vec_a: Reference vector (raw image)
        vec_b: Compared vector (enhanced image)

    Returns:
        VectorComparison with similarity (4 decimals), distance (2 decimals)
        and sub-vector changes

    Raises:
        ComparisonError: If a vector is empty or inconsistent
    """
    _validate(vec_a, "First")
    _validate(vec_b, "Second")

    if len(vec_a.fused) != len(vec_b.fused):
        logger.warning(
            "Comparing vectors of different length (%d vs %d); using common prefix",
            len(vec_a.fused), len(vec_b.fused),
        )

    similarity = cosine_similarity(vec_a.fused, vec_b.fused)
    distance = euclidean_distance(vec_a.fused, vec_b.fused)

    changes = VectorChanges(
        keypoint_change=[b - a for a, b in zip(vec_a.keypoints, vec_b.keypoints)],
        texture_change=abs(sum(vec_b.texture) - sum(vec_a.texture)),
        statistical_change=abs(sum(vec_b.statistical) - sum(vec_a.statistical)),
    )

    return VectorComparison(
        similarity=round(similarity, 4),
        euclidean_distance=round(distance, 2),
        changes=changes,
    )


def compare_features(raw: ImageFeatures, enhanced: ImageFeatures) -> ComparisonResult:
    """
    Compare the full feature sets of a raw and an enhanced image.

    Args:
        raw: Features of the low-light image
        enhanced: Features of the enhanced image

    Returns:
        ComparisonResult with vector similarity/distance and per-component
        deltas: keypoint percentage improvement per detector type, absolute
        quality deltas and GLCM deltas (enhanced - raw)

    Example:
        >>> result = compare_features(raw_features, enhanced_features)
        >>> print(f"ORB change: {result.per_component_deltas.keypoints['orb']:.1f}%")
    """
    vector = compare_vectors(raw.feature_vector, enhanced.feature_vector)

    keypoint_deltas: Dict[str, float] = {}
    for name in ('orb', 'fast', 'sift'):
        keypoint_deltas[name] = percent_change(
            getattr(raw.keypoints, name), getattr(enhanced.keypoints, name)
        )

    quality_deltas = {
        name: getattr(enhanced.quality, name) - getattr(raw.quality, name)
        for name in ('brightness', 'contrast', 'sharpness')
    }

    glcm_deltas = {
        name: getattr(enhanced.texture.glcm, name) - getattr(raw.texture.glcm, name)
        for name in ('contrast', 'energy', 'homogeneity')
    }

    return ComparisonResult(
        similarity=vector.similarity,
        euclidean_distance=vector.euclidean_distance,
        per_component_deltas=ComponentDeltas(
            keypoints=keypoint_deltas,
            quality=quality_deltas,
            glcm=glcm_deltas,
            vector=vector.changes,
        ),
    )
