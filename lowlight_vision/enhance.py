"""
Low-light enhancement transforms.

Implements the composite enhancement (CLAHE on the LAB lightness channel
followed by a gamma lookup table), YUV histogram equalization and a plain
gamma remap. All transforms are pure and keep the input alpha channel.
"""

import logging
from typing import Any, Dict, Optional
import numpy as np
import cv2

from .errors import EnhancementError
from .image import ImageSample

logger = logging.getLogger(__name__)

ENHANCEMENT_METHODS = ('composite', 'hist_eq', 'gamma')


def gamma_lut(gamma: float) -> np.ndarray:
    """
    Build the 256-entry gamma lookup table.

    ``lut[i] = floor((i / 255) ** (1 / gamma) * 255)``; values are truncated,
    not rounded, so the table matches uint8 casting of the float curve.

    Args:
        gamma: Gamma value, must be positive (values > 1 brighten)

    Returns:
        uint8 array of length 256

    Raises:
        EnhancementError: If gamma is not positive

    Example:
        >>> lut = gamma_lut(1.8)
        >>> int(lut[0]), int(lut[255])
        (0, 255)
    """
    if gamma <= 0:
        raise EnhancementError(f"Gamma must be positive, got {gamma}")

    inv_gamma = 1.0 / gamma
    table = np.power(np.arange(256, dtype=np.float64) / 255.0, inv_gamma) * 255.0
    return np.floor(table).astype(np.uint8)


def _check_image(image: ImageSample) -> None:
    if image.is_empty:
        raise EnhancementError(
            f"Cannot enhance an empty image ({image.width}x{image.height})"
        )


def enhance_composite(image: ImageSample, clip_limit: float = 3.0,
                      tile_grid_size: int = 8, gamma: float = 1.8) -> ImageSample:
    """
    Apply the full enhancement: LAB CLAHE on lightness, then gamma correction.

    Args:
        image: Input sample
        clip_limit: CLAHE contrast clip limit
        tile_grid_size: CLAHE tiles per side
        gamma: Gamma for the final lookup table

    Returns:
        Enhanced sample with the original alpha channel

    Raises:
        EnhancementError: If a color conversion or LUT step fails
    """
    _check_image(image)
    lut = gamma_lut(gamma)

    try:
        lab = cv2.cvtColor(image.rgb, cv2.COLOR_RGB2LAB)
        l_channel, a_channel, b_channel = cv2.split(lab)

        clahe = cv2.createCLAHE(clipLimit=clip_limit,
                                tileGridSize=(tile_grid_size, tile_grid_size))
        l_enhanced = clahe.apply(l_channel)

        # Chroma channels are left untouched
        lab_enhanced = cv2.merge([l_enhanced, a_channel, b_channel])
        rgb = cv2.cvtColor(lab_enhanced, cv2.COLOR_LAB2RGB)

        rgb = cv2.LUT(rgb, lut)
    except cv2.error as e:
        raise EnhancementError(f"Composite enhancement failed: {e}") from e

    return image.with_rgb(rgb)


def equalize_histogram(image: ImageSample) -> ImageSample:
    """
    Equalize the luma histogram in YUV space.

    Args:
        image: Input sample

    Returns:
        Sample whose Y channel spans [0, 255] by CDF stretch
    """
    _check_image(image)

    try:
        yuv = cv2.cvtColor(image.rgb, cv2.COLOR_RGB2YUV)
        yuv[:, :, 0] = cv2.equalizeHist(yuv[:, :, 0])
        rgb = cv2.cvtColor(yuv, cv2.COLOR_YUV2RGB)
    except cv2.error as e:
        raise EnhancementError(f"Histogram equalization failed: {e}") from e

    return image.with_rgb(rgb)


def apply_gamma(image: ImageSample, gamma: float = 1.8) -> ImageSample:
    """Apply the gamma lookup table to R, G and B directly."""
    _check_image(image)
    lut = gamma_lut(gamma)

    try:
        rgb = cv2.LUT(image.rgb, lut)
    except cv2.error as e:
        raise EnhancementError(f"Gamma correction failed: {e}") from e

    return image.with_rgb(rgb)


def enhance(image: ImageSample, method: Optional[str] = None,
            cfg: Optional[Dict[str, Any]] = None) -> ImageSample:
    """
    Enhance an image with the configured method.

    Args:
        image: Input sample
        method: 'composite', 'hist_eq' or 'gamma'; defaults to cfg['method']
        cfg: Configuration dictionary with enhancement parameters

    Returns:
        Enhanced sample

    Raises:
        EnhancementError: For unknown methods or failed transforms

    Example:
        >>> enhanced = enhance(sample, cfg=config['enhancement'])
    """
    cfg = cfg or {}
    method = method or cfg.get('method', 'composite')
    gamma = cfg.get('gamma', 1.8)

    logger.debug("Enhancing %dx%d image with method=%s", image.width, image.height, method)

    if method == 'composite':
        return enhance_composite(
            image,
            clip_limit=cfg.get('clahe_clip_limit', 3.0),
            tile_grid_size=cfg.get('clahe_tile_grid_size', 8),
            gamma=gamma,
        )
    elif method == 'hist_eq':
        return equalize_histogram(image)
    elif method == 'gamma':
        return apply_gamma(image, gamma)
    else:
        raise EnhancementError(
            f"Unknown enhancement method: {method}. Supported: {', '.join(ENHANCEMENT_METHODS)}"
        )
