import numpy as np
import pytest

from lowlight_vision.errors import DecodeError
from lowlight_vision.image import ImageSample


def test_from_buffer_row_major_rgba():
    sample = ImageSample.from_buffer(2, 1, [255, 0, 0, 255, 0, 0, 255, 128])
    assert (sample.width, sample.height) == (2, 1)
    assert sample.pixels[0, 0].tolist() == [255, 0, 0, 255]
    assert sample.pixels[0, 1].tolist() == [0, 0, 255, 128]


def test_from_buffer_wrong_length_raises():
    with pytest.raises(DecodeError):
        ImageSample.from_buffer(2, 2, bytes(15))


def test_from_buffer_out_of_range_values_raise():
    with pytest.raises(DecodeError):
        ImageSample.from_buffer(1, 1, [0, 0, 300, 255])


def test_invalid_arrays_rejected():
    with pytest.raises(DecodeError):
        ImageSample(np.zeros((4, 4, 3), dtype=np.uint8))
    with pytest.raises(DecodeError):
        ImageSample(np.zeros((4, 4, 4), dtype=np.float32))
    with pytest.raises(DecodeError):
        ImageSample.from_rgb(np.zeros((4, 4), dtype=np.uint8))


def test_pixels_are_read_only_copy():
    rgba = np.zeros((3, 3, 4), dtype=np.uint8)
    sample = ImageSample.from_rgba(rgba)
    rgba[0, 0, 0] = 99
    assert sample.pixels[0, 0, 0] == 0
    with pytest.raises(ValueError):
        sample.pixels[0, 0, 0] = 1


def test_gray_uses_luma_weights():
    sample = ImageSample.from_buffer(3, 1, [255, 0, 0, 255, 0, 255, 0, 255, 0, 0, 255, 255])
    gray = sample.gray()
    assert gray.dtype == np.float64
    assert gray[0].tolist() == pytest.approx([0.299 * 255, 0.587 * 255, 0.114 * 255])


def test_with_rgb_keeps_alpha():
    sample = ImageSample.from_rgb(np.zeros((2, 2, 3), dtype=np.uint8), alpha=42)
    replaced = sample.with_rgb(np.full((2, 2, 3), 7, dtype=np.uint8))
    assert np.all(replaced.alpha == 42)
    assert np.all(replaced.rgb == 7)
    assert np.all(sample.rgb == 0)


def test_equality_and_empty():
    a = ImageSample.from_rgb(np.ones((2, 2, 3), dtype=np.uint8))
    b = ImageSample.from_rgb(np.ones((2, 2, 3), dtype=np.uint8))
    assert a == b
    assert not a.is_empty
    assert ImageSample(np.zeros((0, 0, 4), dtype=np.uint8)).is_empty
