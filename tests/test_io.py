import cv2
import numpy as np
import pytest

from lowlight_vision.errors import DecodeError
from lowlight_vision.image import ImageSample
from lowlight_vision.io import decode_image, read_image, save_image


def _png_bytes(array):
    ok, encoded = cv2.imencode('.png', array)
    assert ok
    return encoded.tobytes()


def test_decode_color_png_is_rgb_order():
    bgr = np.zeros((4, 5, 3), dtype=np.uint8)
    bgr[:, :, 0] = 200  # blue in OpenCV order
    sample = decode_image(_png_bytes(bgr))
    assert (sample.width, sample.height) == (5, 4)
    assert sample.pixels[0, 0].tolist() == [0, 0, 200, 255]


def test_decode_grayscale_png():
    gray = np.full((3, 3), 77, dtype=np.uint8)
    sample = decode_image(_png_bytes(gray))
    assert sample.pixels[1, 1].tolist() == [77, 77, 77, 255]


def test_decode_keeps_alpha():
    bgra = np.zeros((2, 2, 4), dtype=np.uint8)
    bgra[:, :, 3] = 10
    sample = decode_image(_png_bytes(bgra))
    assert np.all(sample.alpha == 10)


def test_decode_empty_bytes_raises():
    with pytest.raises(DecodeError):
        decode_image(b"")


def test_decode_garbage_raises():
    with pytest.raises(DecodeError):
        decode_image(b"definitely not an image")


def test_read_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_image(tmp_path / "missing.png")


def test_read_corrupt_file_raises(tmp_path):
    corrupt = tmp_path / "corrupt.png"
    corrupt.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 8)
    with pytest.raises(DecodeError):
        read_image(corrupt)


def test_save_and_read_png(tmp_path, lowlight_image):
    path = save_image(lowlight_image, tmp_path / "out" / "sample.png")
    assert path.exists()
    loaded = read_image(path)
    assert np.array_equal(loaded.rgb, lowlight_image.rgb)


def test_save_empty_image_raises(tmp_path):
    with pytest.raises(ValueError):
        save_image(ImageSample(np.zeros((0, 0, 4), dtype=np.uint8)), tmp_path / "empty.png")
