import numpy as np
import pytest

from lowlight_vision.keypoints import edge_density, estimate_keypoints, image_complexity


def test_flat_image_gets_base_counts(flat_image):
    stats = estimate_keypoints(flat_image.gray())
    assert (stats.orb, stats.fast, stats.sift) == (30, 80, 20)


def test_checkerboard_has_more_keypoints(flat_image, checkerboard_image):
    flat = estimate_keypoints(flat_image.gray())
    busy = estimate_keypoints(checkerboard_image.gray())
    assert busy.orb > flat.orb
    assert busy.fast > flat.fast
    assert busy.sift > flat.sift


def test_complexity_ignores_differences_below_threshold():
    gray = np.tile(np.array([0.0, 20.0]), (4, 2))
    assert image_complexity(gray, threshold=30.0) == 0.0
    assert image_complexity(gray, threshold=10.0) > 0.0


def test_complexity_divides_by_full_pixel_count():
    gray = np.zeros((2, 2))
    gray[0, 1] = 255.0
    # Only the top-left pixel has a complete neighbor pair
    assert image_complexity(gray) == pytest.approx(1 / 4)


def test_edge_density_of_vertical_step():
    gray = np.zeros((3, 3))
    gray[:, 2] = 255.0
    # Interior pixel sees a 255 horizontal central difference
    assert edge_density(gray) == pytest.approx(1.0)


def test_small_images_degrade_to_base_counts():
    stats = estimate_keypoints(np.zeros((1, 1)))
    assert (stats.orb, stats.fast, stats.sift) == (30, 80, 20)


def test_custom_coefficients():
    cfg = {'coefficients': {'orb': [1, 0, 0], 'fast': [2, 0, 0], 'sift': [3, 0, 0]}}
    stats = estimate_keypoints(np.zeros((8, 8)), cfg)
    assert stats.as_list() == [1.0, 2.0, 3.0]
    assert stats.total() == 6


def test_checkerboard_edge_density_exceeds_flat(flat_image, checkerboard_image):
    assert edge_density(flat_image.gray()) == 0.0
    assert edge_density(checkerboard_image.gray()) > 1.0


def test_partial_coefficients_keep_other_defaults():
    stats = estimate_keypoints(np.zeros((8, 8)), {'coefficients': {'orb': [1, 0, 0]}})
    assert (stats.orb, stats.fast, stats.sift) == (1, 80, 20)
