"""
End-to-end enhancement evaluation pipeline.

Orchestrates: input -> enhancement -> feature extraction (raw, enhanced) ->
object detection (raw, enhanced) -> comparison, reporting progress to an
observer and scoring how much the enhancement helped.
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .compare import compare_features, percent_change
from .config import DEFAULT_CONFIG
from .detection import Detector, calculate_metrics, run_detection
from .enhance import enhance
from .errors import DetectionError
from .features import extract_features
from .image import ImageSample
from .io import save_image
from .models import (
    DetectionImprovement,
    DetectionMetrics,
    FeatureImprovement,
    ImageFeatures,
    ImageRunResult,
    PipelineComparison,
    PipelineResult,
    PipelineStage,
    ProcessingTimes,
    ProgressEvent,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]

# Stage, progress percentage, message, image being processed
STAGE_PLAN: List[Tuple[PipelineStage, int, str, Optional[str]]] = [
    (PipelineStage.ENHANCEMENT, 10, "Enhancing image...", None),
    (PipelineStage.FEATURE_EXTRACTION_RAW, 30, "Extracting features from raw image...", "raw"),
    (PipelineStage.FEATURE_EXTRACTION_ENHANCED, 50, "Extracting features from enhanced image...", "enhanced"),
    (PipelineStage.DETECTION_RAW, 60, "Running detection on raw image...", "raw"),
    (PipelineStage.DETECTION_ENHANCED, 80, "Running detection on enhanced image...", "enhanced"),
    (PipelineStage.COMPARISON, 90, "Calculating metrics and comparison...", None),
    (PipelineStage.COMPLETE, 100, "Pipeline complete!", None),
]
_PLAN = {stage: (progress, message, current) for stage, progress, message, current in STAGE_PLAN}

HOG_IMPROVEMENT_BINS = 20


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def calculate_feature_improvement(raw: ImageFeatures, enhanced: ImageFeatures) -> FeatureImprovement:
    """
    Percentage improvement of the enhanced image's features over the raw ones.

    Args:
        raw: Features of the raw image
        enhanced: Features of the enhanced image

    Returns:
        FeatureImprovement with keypoint (sum of ORB, FAST and SIFT), texture
        (sum of the first 20 HOG values) and quality (brightness + contrast +
        sharpness) percentage changes
    """
    keypoints = percent_change(raw.keypoints.total(), enhanced.keypoints.total())

    raw_texture = sum(raw.texture.hog.descriptor[:HOG_IMPROVEMENT_BINS])
    enhanced_texture = sum(enhanced.texture.hog.descriptor[:HOG_IMPROVEMENT_BINS])
    texture = percent_change(raw_texture, enhanced_texture)

    quality = percent_change(raw.quality.total(), enhanced.quality.total())

    return FeatureImprovement(keypoints=keypoints, texture=texture, quality=quality)


def calculate_detection_improvement(raw: DetectionMetrics, enhanced: DetectionMetrics,
                                    raw_count: int, enhanced_count: int) -> DetectionImprovement:
    """Absolute metric deltas (enhanced - raw) between two detection runs."""
    return DetectionImprovement(
        accuracy=enhanced.accuracy - raw.accuracy,
        precision=enhanced.precision - raw.precision,
        recall=enhanced.recall - raw.recall,
        map=enhanced.map - raw.map,
        detection_count=enhanced_count - raw_count,
    )


def overall_improvement(features: FeatureImprovement, detection: DetectionImprovement,
                        weights: Optional[Dict[str, float]] = None) -> float:
    """
    Weighted overall improvement score.

    ``0.3 * keypoints% + 0.2 * texture% + 0.2 * quality% + 0.3 * dmAP * 100``;
    the mAP delta lives in [-1, 1] and is scaled to percentage points.

    Args:
        features: Feature improvement percentages
        detection: Detection metric deltas
        weights: Optional override of some or all of the four weights

    Returns:
        Overall improvement score
    """
    weights = {**DEFAULT_CONFIG['pipeline']['weights'], **(weights or {})}
    return (
        weights['keypoints'] * features.keypoints
        + weights['texture'] * features.texture
        + weights['quality'] * features.quality
        + weights['detection_map'] * detection.map * 100.0
    )


def _enhanced_path(name: str, output_dir: Optional[str]) -> Optional[Path]:
    if not output_dir:
        return None
    return Path(output_dir) / f"{Path(name).stem}_enhanced.png"


def run_pipeline(image: ImageSample, detector: Detector, name: str = "image",
                 cfg: Optional[Dict[str, Any]] = None,
                 on_progress: Optional[ProgressCallback] = None) -> PipelineResult:
    """
    Run the complete enhancement evaluation pipeline on one image.

    Stages run strictly in order and each emits a progress event before its
    work starts. Any failure aborts the run and the originating error is
    raised; no partial result is returned.

    Args:
        image: Raw (low-light) sample
        detector: Detector implementation; load_model() is called before the
            first detection
        name: Handle of the raw image, used in results and file names
        cfg: Full configuration dictionary
        on_progress: Observer called synchronously with every ProgressEvent

    Returns:
        PipelineResult for the raw/enhanced pair

    Raises:
        EnhancementError: If the enhancement step fails
        DetectionError: If the detector fails or returns malformed output
        ComparisonError: If the feature vectors cannot be compared

    Example:
        >>> result = run_pipeline(read_image("night.png"), TorchvisionDetector(),
        ...                       name="night.png", on_progress=print)
        >>> print(f"Overall: {result.comparison.overall_improvement:.1f}")
    """
    if not isinstance(detector, Detector):
        raise TypeError("detector must provide load_model() and detect(image)")

    cfg = cfg or DEFAULT_CONFIG
    pipeline_cfg = cfg.get('pipeline', {})
    current = {'stage': None}

    def emit(stage: PipelineStage) -> None:
        progress, message, current_image = _PLAN[stage]
        current['stage'] = stage
        logger.debug("[%s] %s (%d%%)", name, stage.value, progress)
        if on_progress is not None:
            on_progress(ProgressEvent(
                stage=stage, progress=progress, message=message, current_image=current_image,
            ))

    start = time.perf_counter()

    try:
        # Stage 1: Enhancement
        emit(PipelineStage.ENHANCEMENT)
        t = time.perf_counter()
        enhanced_image = enhance(image, cfg=cfg.get('enhancement', {}))
        enhancement_ms = _elapsed_ms(t)
        enhanced_path = _enhanced_path(name, pipeline_cfg.get('output_dir'))
        enhanced_name = str(enhanced_path) if enhanced_path else f"{name}#enhanced"

        # Stage 2: Feature extraction - raw
        emit(PipelineStage.FEATURE_EXTRACTION_RAW)
        t = time.perf_counter()
        raw_features = extract_features(image, name, cfg)
        raw_features_ms = _elapsed_ms(t)

        # Stage 3: Feature extraction - enhanced
        emit(PipelineStage.FEATURE_EXTRACTION_ENHANCED)
        t = time.perf_counter()
        enhanced_features = extract_features(enhanced_image, enhanced_name, cfg)
        enhanced_features_ms = _elapsed_ms(t)

        # Stage 4: Detection - raw
        emit(PipelineStage.DETECTION_RAW)
        try:
            detector.load_model()
        except DetectionError:
            raise
        except Exception as e:
            raise DetectionError(f"Detector model could not be loaded: {e}") from e
        t = time.perf_counter()
        raw_detection = run_detection(detector, image)
        raw_detection_ms = _elapsed_ms(t)

        # Stage 5: Detection - enhanced
        emit(PipelineStage.DETECTION_ENHANCED)
        t = time.perf_counter()
        enhanced_detection = run_detection(detector, enhanced_image)
        enhanced_detection_ms = _elapsed_ms(t)

        # Stage 6: Metrics and comparison
        emit(PipelineStage.COMPARISON)
        raw_metrics = calculate_metrics(raw_detection.boxes)
        enhanced_metrics = calculate_metrics(enhanced_detection.boxes)

        feature_comparison = compare_features(raw_features, enhanced_features)
        feature_improvement = calculate_feature_improvement(raw_features, enhanced_features)
        detection_improvement = calculate_detection_improvement(
            raw_metrics, enhanced_metrics,
            len(raw_detection.boxes), len(enhanced_detection.boxes),
        )
        overall = overall_improvement(
            feature_improvement, detection_improvement, pipeline_cfg.get('weights'),
        )

        # Written only once every stage has succeeded
        if enhanced_path is not None:
            save_image(enhanced_image, enhanced_path)
    except Exception:
        stage = current['stage']
        logger.error("Pipeline failed for %s at stage %s", name,
                     stage.value if stage is not None else "start")
        raise

    raw_ms = raw_features_ms + raw_detection_ms
    enhanced_ms = enhanced_features_ms + enhanced_detection_ms

    result = PipelineResult(
        raw=ImageRunResult(
            image=name,
            features=raw_features,
            detection=raw_detection,
            metrics=raw_metrics,
            quality_metrics=raw_features.quality,
            processing_time_ms=raw_ms,
        ),
        enhanced=ImageRunResult(
            image=enhanced_name,
            features=enhanced_features,
            detection=enhanced_detection,
            metrics=enhanced_metrics,
            quality_metrics=enhanced_features.quality,
            processing_time_ms=enhanced_ms,
            enhancement_method=cfg.get('enhancement', {}).get('method', 'composite'),
        ),
        comparison=PipelineComparison(
            feature_improvement=feature_improvement,
            detection_improvement=detection_improvement,
            features=feature_comparison,
            overall_improvement=overall,
            total_processing_time=ProcessingTimes(
                raw=raw_ms,
                enhanced=enhanced_ms,
                overhead=enhancement_ms,
            ),
        ),
        timestamp=time.time(),
    )

    emit(PipelineStage.COMPLETE)
    logger.info("Pipeline complete for %s in %.1fms (overall improvement %.2f)",
                name, _elapsed_ms(start), overall)

    return result


def run_batch_pipeline(images: Sequence[Tuple[str, ImageSample]], detector: Detector,
                       cfg: Optional[Dict[str, Any]] = None,
                       on_progress: Optional[ProgressCallback] = None) -> List[PipelineResult]:
    """
    Run the pipeline on several images, one after another.

    Progress events of each run are forwarded with ``image_index`` and
    ``total_images`` filled in. The first failing image aborts the batch.

    Args:
        images: (name, sample) pairs
        detector: Detector shared by all runs
        cfg: Full configuration dictionary
        on_progress: Observer for the forwarded events

    Returns:
        One PipelineResult per input image, in input order
    """
    results = []
    total = len(images)

    for index, (name, image) in enumerate(images):
        def forward(event: ProgressEvent, index: int = index) -> None:
            if on_progress is not None:
                on_progress(event.model_copy(update={'image_index': index, 'total_images': total}))

        results.append(run_pipeline(image, detector, name=name, cfg=cfg, on_progress=forward))

    return results
