"""
Texture descriptors for feature-based comparison.

Computes a cell-based histogram of oriented gradients (HOG), a local binary
pattern (LBP) histogram and gray-level co-occurrence (GLCM) statistics from
the grayscale view of an image. All descriptors are total functions: images
too small to contain a cell or an interior pixel produce zero descriptors.
"""

from typing import Any, Dict, List, Optional, Tuple
import numpy as np

from .models import GlcmStats, HogDescriptor, LbpHistogram, TextureFeatures

# Clockwise from the upper-left neighbor, as (dx, dy); index = bit position
LBP_NEIGHBOR_OFFSETS: List[Tuple[int, int]] = [
    (-1, -1), (0, -1), (1, -1), (1, 0),
    (1, 1), (0, 1), (-1, 1), (-1, 0),
]


def _cell_grid(length: int, cell_size: int) -> int:
    """Number of cells along one axis; border cells are skipped."""
    return len(range(cell_size, length - cell_size, cell_size))


def compute_hog(gray: np.ndarray, cell_size: int = 8, bins: int = 9,
                max_length: int = 100) -> HogDescriptor:
    """
    Compute a HOG-like descriptor.

    Cells of ``cell_size`` pixels start one cell in from the top-left border
    and stop before the last cell-wide band, so every pixel inside a cell has
    all four central-difference neighbors. Gradient magnitude is accumulated
    into ``bins`` unsigned orientation bins over [0, 180) per cell. Cell
    histograms are concatenated in raster order and the whole vector is L2
    normalized before being truncated to ``max_length`` values.

    Args:
        gray: Grayscale view (H, W) float
        cell_size: Cell side in pixels
        bins: Orientation bins per cell
        max_length: Number of leading values kept in the exported descriptor

    Returns:
        HogDescriptor

    Example:
        >>> hog = compute_hog(sample.gray())
        >>> len(hog.descriptor) <= 100
        True
    """
    h, w = gray.shape
    n_cells_y = _cell_grid(h, cell_size)
    n_cells_x = _cell_grid(w, cell_size)

    if n_cells_y == 0 or n_cells_x == 0:
        return HogDescriptor(descriptor=[], bins=bins, cell_size=cell_size)

    y0, y1 = cell_size, cell_size + n_cells_y * cell_size
    x0, x1 = cell_size, cell_size + n_cells_x * cell_size

    gx = gray[y0:y1, x0 + 1:x1 + 1] - gray[y0:y1, x0 - 1:x1 - 1]
    gy = gray[y0 + 1:y1 + 1, x0:x1] - gray[y0 - 1:y1 - 1, x0:x1]

    magnitude = np.sqrt(gx * gx + gy * gy)
    angle = (np.arctan2(gy, gx) * 180.0 / np.pi + 180.0) % 180.0
    bin_index = np.floor(angle / (180.0 / bins)).astype(np.int64) % bins

    # Cell index of every pixel in raster order
    cell_rows = (np.arange(y1 - y0) // cell_size)[:, np.newaxis]
    cell_cols = (np.arange(x1 - x0) // cell_size)[np.newaxis, :]
    cell_index = cell_rows * n_cells_x + cell_cols

    histogram = np.bincount(
        (cell_index * bins + bin_index).ravel(),
        weights=magnitude.ravel(),
        minlength=n_cells_y * n_cells_x * bins,
    )

    norm = np.sqrt(np.sum(histogram * histogram)) + 1e-6
    normalized = histogram / norm

    return HogDescriptor(
        descriptor=normalized[:max_length].tolist(),
        bins=bins,
        cell_size=cell_size,
    )


def lbp_codes(gray: np.ndarray, radius: int = 1) -> np.ndarray:
    """
    Compute the 8-bit LBP code of every interior pixel.

    A neighbor greater than or equal to the center sets its bit.

    Args:
        gray: Grayscale view (H, W) float
        radius: Neighbor distance in pixels

    Returns:
        uint8 array (H - 2r, W - 2r); empty when there is no interior
    """
    h, w = gray.shape
    if h <= 2 * radius or w <= 2 * radius:
        return np.zeros((0, 0), dtype=np.uint8)

    center = gray[radius:h - radius, radius:w - radius]
    codes = np.zeros(center.shape, dtype=np.uint8)

    for bit, (dx, dy) in enumerate(LBP_NEIGHBOR_OFFSETS):
        oy, ox = radius + dy * radius, radius + dx * radius
        neighbor = gray[oy:oy + center.shape[0], ox:ox + center.shape[1]]
        codes |= ((neighbor >= center).astype(np.uint8) << bit)

    return codes


def compute_lbp(gray: np.ndarray, radius: int = 1) -> LbpHistogram:
    """
    Compute the normalized 256-bin LBP histogram.

    Args:
        gray: Grayscale view (H, W) float
        radius: Neighbor distance in pixels

    Returns:
        LbpHistogram whose bins sum to 1 when the image has an interior
    """
    patterns = 256
    codes = lbp_codes(gray, radius)

    counts = np.bincount(codes.ravel(), minlength=patterns).astype(np.float64)
    histogram = counts / (counts.sum() + 1e-6)

    return LbpHistogram(histogram=histogram.tolist(), patterns=patterns, radius=radius)


def glcm_matrix(gray: np.ndarray, levels: int = 256, distance: int = 1) -> np.ndarray:
    """
    Build the normalized horizontal gray-level co-occurrence matrix.

    Pairs are ``(floor(gray[y, x]), floor(gray[y, x + distance]))``; pairs
    with a level outside ``[0, levels)`` are skipped.

    Args:
        gray: Grayscale view (H, W) float
        levels: Number of gray levels
        distance: Horizontal pixel offset

    Returns:
        (levels, levels) float array summing to 1 (or all zeros)
    """
    h, w = gray.shape
    counts = np.zeros(levels * levels, dtype=np.float64)

    if w > distance and h > 0:
        i = np.floor(gray[:, :w - distance]).astype(np.int64).ravel()
        j = np.floor(gray[:, distance:]).astype(np.int64).ravel()
        valid = (i >= 0) & (i < levels) & (j >= 0) & (j < levels)
        counts += np.bincount(i[valid] * levels + j[valid], minlength=levels * levels)

    matrix = counts.reshape(levels, levels)
    return matrix / (matrix.sum() + 1e-6)


def glcm_statistics(matrix: np.ndarray) -> Dict[str, float]:
    """Unrounded GLCM statistics of a normalized co-occurrence matrix."""
    levels = matrix.shape[0]
    idx = np.arange(levels, dtype=np.float64)
    diff = idx[:, np.newaxis] - idx[np.newaxis, :]
    abs_diff = np.abs(diff)

    energy = float(np.sum(matrix * matrix))

    return {
        'contrast': float(np.sum(matrix * diff * diff)),
        'dissimilarity': float(np.sum(matrix * abs_diff)),
        'homogeneity': float(np.sum(matrix / (1.0 + abs_diff))),
        'energy': energy,
        # Not derived from marginal means/variances; kept at a fixed 0.0
        'correlation': 0.0,
        'asm': energy,
    }


def compute_glcm(gray: np.ndarray, levels: int = 256, distance: int = 1) -> GlcmStats:
    """
    Compute GLCM texture statistics rounded to 2 decimals.

    Args:
        gray: Grayscale view (H, W) float
        levels: Number of gray levels
        distance: Horizontal pixel offset

    Returns:
        GlcmStats
    """
    stats = glcm_statistics(glcm_matrix(gray, levels, distance))
    return GlcmStats(**{name: round(value, 2) for name, value in stats.items()})


def extract_texture(gray: np.ndarray, cfg: Optional[Dict[str, Any]] = None) -> TextureFeatures:
    """
    Compute all texture descriptors of a grayscale view.

    Args:
        gray: Grayscale view (H, W) float
        cfg: Configuration dictionary with texture parameters

    Returns:
        TextureFeatures with HOG, LBP and GLCM parts
    """
    cfg = cfg or {}

    hog = compute_hog(
        gray,
        cell_size=cfg.get('hog_cell_size', 8),
        bins=cfg.get('hog_bins', 9),
        max_length=cfg.get('hog_max_length', 100),
    )
    lbp = compute_lbp(gray, radius=cfg.get('lbp_radius', 1))
    glcm = compute_glcm(
        gray,
        levels=cfg.get('glcm_levels', 256),
        distance=cfg.get('glcm_distance', 1),
    )

    return TextureFeatures(hog=hog, lbp=lbp, glcm=glcm)
