import numpy as np
import pytest

from lowlight_vision.fusion import build_feature_vector, l2_normalize
from lowlight_vision.keypoints import estimate_keypoints
from lowlight_vision.moments import extract_statistical
from lowlight_vision.texture import extract_texture


def _vector(image, cfg=None):
    gray = image.gray()
    return build_feature_vector(
        estimate_keypoints(gray),
        extract_texture(gray),
        extract_statistical(image, gray),
        cfg,
    )


def test_layout_and_dimensionality(lowlight_image):
    vec = _vector(lowlight_image)
    assert len(vec.keypoints) == 3
    assert len(vec.texture) == 20 + 20 + 3
    assert len(vec.statistical) == 7 + 3 + 3
    assert vec.dimensionality == len(vec.fused) == 59


def test_fused_vector_is_unit_norm(lowlight_image):
    vec = _vector(lowlight_image)
    assert np.linalg.norm(vec.fused) == pytest.approx(1.0, abs=1e-6)


def test_dimensionality_does_not_depend_on_size():
    from lowlight_vision.image import ImageSample

    tiny = ImageSample.from_rgb(np.full((4, 4, 3), 30, dtype=np.uint8))
    vec = _vector(tiny)
    # No HOG cell fits; the slice is zero-padded
    assert vec.texture[:20] == [0.0] * 20
    assert vec.dimensionality == 59


def test_keypoint_slice_is_raw_counts(flat_image):
    vec = _vector(flat_image)
    assert vec.keypoints == [30.0, 80.0, 20.0]


def test_custom_slices(lowlight_image):
    vec = _vector(lowlight_image, {'hog_slice': 5, 'lbp_slice': 5})
    assert vec.dimensionality == 3 + 13 + 13


def test_l2_normalize_zero_vector_stays_zero():
    assert l2_normalize([0.0, 0.0]) == [0.0, 0.0]
