import numpy as np
import pytest

from lowlight_vision.enhance import (
    apply_gamma,
    enhance,
    enhance_composite,
    equalize_histogram,
    gamma_lut,
)
from lowlight_vision.errors import EnhancementError
from lowlight_vision.image import ImageSample


def test_gamma_lut_endpoints_and_monotonic():
    lut = gamma_lut(1.8)
    assert lut.dtype == np.uint8
    assert len(lut) == 256
    assert int(lut[0]) == 0
    assert int(lut[255]) == 255
    assert np.all(np.diff(lut.astype(int)) >= 0)


def test_gamma_lut_truncates():
    lut = gamma_lut(1.8)
    expected = int(np.floor((64 / 255.0) ** (1 / 1.8) * 255.0))
    assert int(lut[64]) == expected


def test_gamma_lut_brightens_for_gamma_above_one():
    lut = gamma_lut(2.2)
    assert np.all(lut.astype(int) >= np.arange(256))


@pytest.mark.parametrize("gamma", [0, -1.0])
def test_gamma_must_be_positive(gamma):
    with pytest.raises(EnhancementError):
        gamma_lut(gamma)


def test_composite_preserves_size_and_alpha(lowlight_image):
    sample = ImageSample.from_rgb(lowlight_image.rgb, alpha=77)
    enhanced = enhance_composite(sample)
    assert (enhanced.width, enhanced.height) == (sample.width, sample.height)
    assert np.all(enhanced.alpha == 77)


def test_composite_brightens_dark_image(lowlight_image):
    enhanced = enhance_composite(lowlight_image)
    assert enhanced.gray().mean() > lowlight_image.gray().mean()


def test_composite_does_not_mutate_input(lowlight_image):
    before = lowlight_image.pixels.copy()
    enhance_composite(lowlight_image)
    assert np.array_equal(lowlight_image.pixels, before)


def test_apply_gamma_matches_lut(lowlight_image):
    enhanced = apply_gamma(lowlight_image, gamma=1.8)
    lut = gamma_lut(1.8)
    assert np.array_equal(enhanced.rgb, lut[lowlight_image.rgb])


def test_equalize_histogram_keeps_alpha(lowlight_image):
    enhanced = equalize_histogram(lowlight_image)
    assert np.array_equal(enhanced.alpha, lowlight_image.alpha)
    assert enhanced.gray().mean() > lowlight_image.gray().mean()


def test_enhance_dispatches_on_config(lowlight_image):
    by_cfg = enhance(lowlight_image, cfg={'method': 'gamma', 'gamma': 2.0})
    assert by_cfg == apply_gamma(lowlight_image, 2.0)

    by_arg = enhance(lowlight_image, method='hist_eq')
    assert by_arg == equalize_histogram(lowlight_image)


def test_enhance_unknown_method_raises(lowlight_image):
    with pytest.raises(EnhancementError, match="Unknown enhancement method"):
        enhance(lowlight_image, method='retinex')


def test_enhance_empty_image_raises():
    empty = ImageSample(np.zeros((0, 0, 4), dtype=np.uint8))
    with pytest.raises(EnhancementError):
        enhance(empty)
