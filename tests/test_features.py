import numpy as np

from lowlight_vision.config import DEFAULT_CONFIG
from lowlight_vision.features import extract_features
from lowlight_vision.image import ImageSample


def test_extract_features_populates_everything(lowlight_image):
    features = extract_features(lowlight_image, "night.png", DEFAULT_CONFIG)
    assert features.image_name == "night.png"
    assert (features.width, features.height) == (48, 48)
    assert features.feature_vector.dimensionality == 59
    assert len(features.statistical.hu_moments) == 7
    assert len(features.texture.lbp.histogram) == 256

    timings = features.processing_time_ms
    assert timings.total >= 0.0
    assert timings.keypoint_detection >= 0.0


def test_extraction_is_deterministic(lowlight_image):
    a = extract_features(lowlight_image, "x")
    b = extract_features(lowlight_image, "x")
    assert a.feature_vector == b.feature_vector
    assert a.texture == b.texture
    assert a.quality == b.quality


def test_one_pixel_image_is_supported():
    sample = ImageSample.from_rgb(np.full((1, 1, 3), 5, dtype=np.uint8))
    features = extract_features(sample, "dot")
    assert features.quality.sharpness == 0.0
    assert features.texture.hog.descriptor == []
    assert features.feature_vector.dimensionality == 59


def test_flat_mid_gray_scenario(flat_image):
    features = extract_features(flat_image, "flat")

    assert features.quality.brightness == 128.0
    assert features.quality.contrast == 0.0
    assert features.quality.sharpness == 0.0
    assert features.texture.lbp.histogram[255] > 0.999
    assert features.texture.glcm.homogeneity == 1.0
    assert features.texture.glcm.energy == 1.0
    assert (features.keypoints.orb, features.keypoints.fast, features.keypoints.sift) == (30, 80, 20)


def test_checkerboard_scenario(flat_image, checkerboard_image):
    flat = extract_features(flat_image, "flat")
    busy = extract_features(checkerboard_image, "board")

    assert busy.keypoints.orb > flat.keypoints.orb
    assert busy.keypoints.fast > flat.keypoints.fast
    assert busy.keypoints.sift > flat.keypoints.sift
    assert busy.quality.contrast > flat.quality.contrast
