"""
Low-Light Vision Evaluation Pipeline

Enhances low-light images and measures, with deterministic classical
features and an external object detector, how much the enhancement helps
downstream computer vision.
"""

__version__ = "1.0.0"
__author__ = "Computer Vision Team"

from .errors import (
    LowLightVisionError,
    DecodeError,
    EnhancementError,
    DetectionError,
    ComparisonError,
)
from .config import DEFAULT_CONFIG, load_config, configure_logging
from .image import ImageSample
from .io import decode_image, read_image, save_image
from .enhance import enhance, enhance_composite, equalize_histogram, apply_gamma, gamma_lut
from .quality import analyze_quality
from .keypoints import estimate_keypoints
from .texture import extract_texture, compute_hog, compute_lbp, compute_glcm
from .moments import extract_statistical
from .fusion import build_feature_vector
from .compare import compare_vectors, compare_features
from .features import extract_features
from .detection import Detector, TorchvisionDetector, calculate_metrics
from .pipeline import run_pipeline, run_batch_pipeline

__all__ = [
    "LowLightVisionError",
    "DecodeError",
    "EnhancementError",
    "DetectionError",
    "ComparisonError",
    "DEFAULT_CONFIG",
    "load_config",
    "configure_logging",
    "ImageSample",
    "decode_image",
    "read_image",
    "save_image",
    "enhance",
    "enhance_composite",
    "equalize_histogram",
    "apply_gamma",
    "gamma_lut",
    "analyze_quality",
    "estimate_keypoints",
    "extract_texture",
    "compute_hog",
    "compute_lbp",
    "compute_glcm",
    "extract_statistical",
    "build_feature_vector",
    "compare_vectors",
    "compare_features",
    "extract_features",
    "Detector",
    "TorchvisionDetector",
    "calculate_metrics",
    "run_pipeline",
    "run_batch_pipeline",
]
