import numpy as np
import pytest

from lowlight_vision.image import ImageSample
from lowlight_vision.moments import compute_color_moments, compute_hu_moments, extract_statistical


def test_solid_color_moments():
    rgb = np.zeros((8, 8, 3), dtype=np.uint8)
    rgb[:, :] = (10, 20, 30)
    moments = compute_color_moments(ImageSample.from_rgb(rgb))
    assert moments.mean == [10.0, 20.0, 30.0]
    assert moments.std == [0.0, 0.0, 0.0]
    assert moments.skewness == [0.0, 0.0, 0.0]


def test_two_level_channel_std():
    rgb = np.zeros((2, 2, 3), dtype=np.uint8)
    rgb[0, :, 0] = 100
    moments = compute_color_moments(ImageSample.from_rgb(rgb))
    assert moments.mean[0] == 50.0
    assert moments.std[0] == 50.0
    assert moments.skewness[0] == pytest.approx(0.0)


def test_hu_moments_shape_and_rounding(lowlight_image):
    hu = compute_hu_moments(lowlight_image.gray())
    assert len(hu) == 7
    assert all(v == round(v, 6) for v in hu)
    assert hu[0] > 0.0


def test_hu_moments_of_black_image_are_zero():
    assert compute_hu_moments(np.zeros((8, 8))) == [0.0] * 7


def test_hu_symmetric_image_has_no_cross_term(flat_image):
    hu = compute_hu_moments(flat_image.gray())
    # A uniform square has eta20 == eta02 and eta11 == 0
    assert hu[1] == pytest.approx(0.0)
    assert hu[5] == pytest.approx(0.0)


def test_extract_statistical_accepts_precomputed_gray(lowlight_image):
    gray = lowlight_image.gray()
    assert extract_statistical(lowlight_image, gray) == extract_statistical(lowlight_image)
