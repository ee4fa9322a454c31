import logging

import numpy as np
import pytest

from lowlight_vision.image import ImageSample
from lowlight_vision.models import BoundingBox, DetectionResult

# Keep package debug output visible when a test fails
logging.getLogger('lowlight_vision').setLevel(logging.DEBUG)


class FakeDetector:
    """In-memory detector that records how it was used."""

    def __init__(self, boxes=None, fail_on_detect=False, fail_on_load=False):
        self.boxes = boxes if boxes is not None else [
            BoundingBox(x=1, y=2, width=10, height=12, confidence=0.8, class_name='person', class_id=1),
        ]
        self.fail_on_detect = fail_on_detect
        self.fail_on_load = fail_on_load
        self.calls = []

    def load_model(self):
        self.calls.append('load_model')
        if self.fail_on_load:
            raise RuntimeError("weights missing")

    def detect(self, image):
        self.calls.append('detect')
        if self.fail_on_detect:
            raise RuntimeError("inference crashed")
        return DetectionResult(
            boxes=list(self.boxes),
            image_width=image.width,
            image_height=image.height,
            model_version='fake',
        )


@pytest.fixture
def flat_image():
    """64x64 uniform mid-gray sample."""
    return ImageSample.from_rgb(np.full((64, 64, 3), 128, dtype=np.uint8))


@pytest.fixture
def checkerboard_image():
    """64x64 checkerboard of 2x2 black and white blocks."""
    ys, xs = np.mgrid[0:64, 0:64]
    board = (((ys // 2) + (xs // 2)) % 2 * 255).astype(np.uint8)
    return ImageSample.from_rgb(np.stack([board] * 3, axis=-1))


@pytest.fixture
def lowlight_image():
    """Dark noisy 48x48 sample with a brighter square in the middle."""
    rng = np.random.default_rng(0)
    rgb = rng.integers(0, 40, size=(48, 48, 3), dtype=np.uint8)
    rgb[16:32, 16:32] += 20
    return ImageSample.from_rgb(rgb)


@pytest.fixture
def fake_detector():
    return FakeDetector()


@pytest.fixture
def make_detector():
    return FakeDetector
