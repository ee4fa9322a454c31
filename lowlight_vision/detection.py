"""
Object detection interface and detection-derived metrics.

The pipeline treats the detector as a black box reached through the Detector
protocol. This module validates detector output, derives proxy evaluation
metrics from detections alone, and ships a torchvision SSDLite reference
detector.
"""

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

import numpy as np
import torch
from pydantic import ValidationError

from .errors import DetectionError
from .image import ImageSample
from .models import BoundingBox, ClassMetrics, DetectionMetrics, DetectionResult

logger = logging.getLogger(__name__)

# Typical object counts used to scale the recall proxy
TYPICAL_OBJECTS_PER_IMAGE = 10
TYPICAL_OBJECTS_PER_CLASS = 5


@runtime_checkable
class Detector(Protocol):
    """Anything that can load a model once and detect objects in a sample."""

    def load_model(self) -> None:
        """Prepare the model; must be safe to call repeatedly."""

    def detect(self, image: ImageSample) -> Union[DetectionResult, Mapping[str, Any]]:
        """Detect objects in ``image``."""


def run_detection(detector: Detector, image: ImageSample) -> DetectionResult:
    """
    Call a detector and validate its output.

    Args:
        detector: Detector implementation
        image: Sample to run on

    Returns:
        Validated DetectionResult

    Raises:
        DetectionError: If the detector raises or returns malformed output
    """
    try:
        raw = detector.detect(image)
    except DetectionError:
        raise
    except Exception as e:
        raise DetectionError(f"Detector failed: {e}") from e

    if isinstance(raw, DetectionResult):
        return raw

    try:
        return DetectionResult.model_validate(raw)
    except ValidationError as e:
        raise DetectionError(f"Detector returned malformed output: {e}") from e


def calculate_detection_metrics(boxes: Sequence[BoundingBox]) -> Dict[str, Any]:
    """
    Summarize a list of detections.

    Args:
        boxes: Detected boxes

    Returns:
        Dictionary with total_detections, average/max/min confidence,
        per-class counts and total box area
    """
    if not boxes:
        return {
            'total_detections': 0,
            'average_confidence': 0.0,
            'max_confidence': 0.0,
            'min_confidence': 0.0,
            'class_counts': {},
            'total_area': 0.0,
        }

    confidences = [box.confidence for box in boxes]
    class_counts: Dict[str, int] = {}
    total_area = 0.0

    for box in boxes:
        class_counts[box.class_name] = class_counts.get(box.class_name, 0) + 1
        total_area += box.width * box.height

    return {
        'total_detections': len(boxes),
        'average_confidence': float(np.mean(confidences)),
        'max_confidence': float(max(confidences)),
        'min_confidence': float(min(confidences)),
        'class_counts': class_counts,
        'total_area': total_area,
    }


def calculate_metrics(boxes: Sequence[BoundingBox]) -> DetectionMetrics:
    """
    Derive evaluation metrics from detections without ground truth.

    Mean confidence stands in for accuracy and precision, recall grows with
    the detection count up to a typical scene size, and the mAP family is a
    fixed discount of the mean confidence.

    Args:
        boxes: Detected boxes

    Returns:
        DetectionMetrics

    Example:
        >>> metrics = calculate_metrics(result.boxes)
        >>> print(f"mAP: {metrics.map:.3f}")
    """
    summary = calculate_detection_metrics(boxes)
    count = summary['total_detections']
    avg_conf = summary['average_confidence']

    precision = avg_conf if count > 0 else 0.0
    recall = min(1.0, count / TYPICAL_OBJECTS_PER_IMAGE) if count > 0 else 0.0
    f1 = (2 * precision * recall) / (precision + recall) if precision + recall > 0 else 0.0

    per_class = []
    for class_name, class_count in summary['class_counts'].items():
        class_conf = [box.confidence for box in boxes if box.class_name == class_name]
        class_avg = float(np.mean(class_conf)) if class_conf else 0.0
        per_class.append(ClassMetrics(
            class_name=class_name,
            precision=class_avg,
            recall=min(1.0, class_count / TYPICAL_OBJECTS_PER_CLASS),
            ap=class_avg * 0.9,
        ))

    return DetectionMetrics(
        accuracy=avg_conf,
        precision=precision,
        recall=recall,
        f1_score=f1,
        map=avg_conf * 0.9,
        map50=avg_conf,
        map75=avg_conf * 0.8,
        per_class_metrics=per_class,
    )


def compare_detections(raw_boxes: Sequence[BoundingBox],
                       enhanced_boxes: Sequence[BoundingBox]) -> Dict[str, Any]:
    """Measurable differences between raw and enhanced detections."""
    raw = calculate_detection_metrics(raw_boxes)
    enhanced = calculate_detection_metrics(enhanced_boxes)

    count_diff = enhanced['total_detections'] - raw['total_detections']

    return {
        'detection_count_diff': count_diff,
        'confidence_improvement': enhanced['average_confidence'] - raw['average_confidence'],
        'new_objects_found': max(0, count_diff),
        'raw_metrics': raw,
        'enhanced_metrics': enhanced,
    }


class TorchvisionDetector:
    """
    Reference detector backed by torchvision's SSDLite320 MobileNetV3 (COCO).

    The model is created on the first ``load_model()`` call; later calls are
    no-ops. A preloaded model and category list may be injected instead.
    """

    model_version = "ssdlite320_mobilenet_v3_large"

    def __init__(self, cfg: Optional[Dict[str, Any]] = None,
                 model: Optional[torch.nn.Module] = None,
                 categories: Optional[List[str]] = None):
        cfg = cfg or {}
        self.confidence_threshold = cfg.get('confidence_threshold', 0.10)
        self.device = cfg.get('device') or ("cuda" if torch.cuda.is_available() else "cpu")
        self._model = model
        self._categories = categories

        if self._model is not None:
            self._model.to(self.device)
            self._model.eval()

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    def load_model(self) -> None:
        if self.is_loaded:
            return

        from torchvision.models.detection import (
            SSDLite320_MobileNet_V3_Large_Weights,
            ssdlite320_mobilenet_v3_large,
        )

        logger.info("Loading %s detector on %s", self.model_version, self.device)
        weights = SSDLite320_MobileNet_V3_Large_Weights.DEFAULT
        model = ssdlite320_mobilenet_v3_large(weights=weights)
        model.to(self.device)
        model.eval()

        self._model = model
        if self._categories is None:
            self._categories = list(weights.meta["categories"])
        logger.info("Detector loaded")

    def _class_name(self, label: int) -> str:
        if self._categories and 0 <= label < len(self._categories):
            return self._categories[label]
        return str(label)

    def detect(self, image: ImageSample) -> DetectionResult:
        """
        Run the detector on the RGB channels of a sample.

        Args:
            image: Input sample

        Returns:
            DetectionResult with boxes above the confidence threshold

        Raises:
            DetectionError: If the model has not been loaded
        """
        if not self.is_loaded:
            raise DetectionError("Detector model is not loaded; call load_model() first")

        start = time.perf_counter()

        tensor = torch.from_numpy(image.rgb).permute(2, 0, 1).float().div(255.0)
        tensor = tensor.to(self.device)

        with torch.no_grad():
            outputs = self._model([tensor])

        output = outputs[0]
        boxes = output["boxes"].detach().cpu().numpy()
        scores = output["scores"].detach().cpu().numpy()
        labels = output["labels"].detach().cpu().numpy()

        detections = []
        for (x1, y1, x2, y2), score, label in zip(boxes, scores, labels):
            if score < self.confidence_threshold:
                continue
            detections.append(BoundingBox(
                x=float(x1),
                y=float(y1),
                width=float(max(x2 - x1, 0.0)),
                height=float(max(y2 - y1, 0.0)),
                confidence=float(min(max(score, 0.0), 1.0)),
                class_name=self._class_name(int(label)),
                class_id=int(label),
            ))

        return DetectionResult(
            boxes=detections,
            image_width=image.width,
            image_height=image.height,
            processing_time_ms=(time.perf_counter() - start) * 1000,
            model_version=self.model_version,
        )
