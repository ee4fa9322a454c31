"""
Data model of the low-light vision pipeline.

Every result produced by the analyzers, the detector adapter and the
pipeline is a pydantic model, so a complete run can be exported with
``model_dump()`` / ``model_dump_json()`` and validated back.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class KeypointStats(BaseModel):
    """Estimated ORB, FAST and SIFT keypoint counts."""

    orb: int = Field(..., ge=0)
    fast: int = Field(..., ge=0)
    sift: int = Field(..., ge=0)

    def as_list(self) -> List[float]:
        return [float(self.orb), float(self.fast), float(self.sift)]

    def total(self) -> int:
        return self.orb + self.fast + self.sift


class HogDescriptor(BaseModel):
    """L2-normalized cell orientation histograms, truncated."""

    descriptor: List[float]
    bins: int
    cell_size: int


class LbpHistogram(BaseModel):
    histogram: List[float]
    patterns: int
    radius: int


class GlcmStats(BaseModel):
    """Gray-level co-occurrence statistics; correlation is always 0."""

    contrast: float
    dissimilarity: float
    homogeneity: float
    energy: float
    correlation: float
    asm: float


class TextureFeatures(BaseModel):
    hog: HogDescriptor
    lbp: LbpHistogram
    glcm: GlcmStats


class ColorMoments(BaseModel):
    mean: List[float]
    std: List[float]
    skewness: List[float]


class StatisticalFeatures(BaseModel):
    hu_moments: List[float]
    color_moments: ColorMoments


class QualityMetrics(BaseModel):
    brightness: float
    contrast: float
    sharpness: float

    def total(self) -> float:
        return self.brightness + self.contrast + self.sharpness


class FeatureVector(BaseModel):
    """Fused, L2-normalized vector plus the sub-vectors it was built from."""

    keypoints: List[float]
    texture: List[float]
    statistical: List[float]
    fused: List[float]
    dimensionality: int


class ExtractionTimings(BaseModel):
    keypoint_detection: float = 0.0
    texture_extraction: float = 0.0
    statistical_analysis: float = 0.0
    quality_analysis: float = 0.0
    feature_fusion: float = 0.0
    total: float = 0.0


class ImageFeatures(BaseModel):
    """All features of one image with per-stage timings in milliseconds."""

    image_name: str
    width: int
    height: int
    keypoints: KeypointStats
    texture: TextureFeatures
    statistical: StatisticalFeatures
    quality: QualityMetrics
    feature_vector: FeatureVector
    processing_time_ms: ExtractionTimings


class VectorChanges(BaseModel):
    keypoint_change: List[float]
    texture_change: float
    statistical_change: float


class ComponentDeltas(BaseModel):
    keypoints: Dict[str, float]
    quality: Dict[str, float]
    glcm: Dict[str, float]
    vector: VectorChanges


class VectorComparison(BaseModel):
    similarity: float
    euclidean_distance: float
    changes: VectorChanges


class ComparisonResult(BaseModel):
    """Vector similarity and per-component deltas (enhanced - raw)."""

    similarity: float
    euclidean_distance: float
    per_component_deltas: ComponentDeltas


class BoundingBox(BaseModel):
    """
    One detected object in pixel coordinates.

    Detectors may use the exchange names ``class`` and ``classId``; dump with
    ``by_alias=True`` to export them under those names again.
    """

    model_config = ConfigDict(populate_by_name=True)

    x: float
    y: float
    width: float = Field(..., ge=0.0)
    height: float = Field(..., ge=0.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
    class_name: str = Field(..., alias="class")
    class_id: int = Field(..., alias="classId")


class DetectionResult(BaseModel):
    boxes: List[BoundingBox]
    image_width: int = Field(..., ge=0)
    image_height: int = Field(..., ge=0)
    processing_time_ms: float = 0.0
    model_version: str = "unknown"


class ClassMetrics(BaseModel):
    class_name: str
    precision: float
    recall: float
    ap: float


class DetectionMetrics(BaseModel):
    """Proxy metrics derived from detections alone, without ground truth."""

    accuracy: float
    precision: float
    recall: float
    f1_score: float
    map: float
    map50: float
    map75: float
    per_class_metrics: List[ClassMetrics] = []


class PipelineStage(str, Enum):
    """Pipeline stages in execution order."""

    ENHANCEMENT = "enhancement"
    FEATURE_EXTRACTION_RAW = "feature_extraction_raw"
    FEATURE_EXTRACTION_ENHANCED = "feature_extraction_enhanced"
    DETECTION_RAW = "detection_raw"
    DETECTION_ENHANCED = "detection_enhanced"
    COMPARISON = "comparison"
    COMPLETE = "complete"


class ProgressEvent(BaseModel):
    """Emitted before each stage starts; batch runs fill in the image index."""

    stage: PipelineStage
    progress: int = Field(..., ge=0, le=100)
    message: str
    current_image: Optional[str] = None
    image_index: Optional[int] = None
    total_images: Optional[int] = None


class ImageRunResult(BaseModel):
    image: str
    features: ImageFeatures
    detection: DetectionResult
    metrics: DetectionMetrics
    quality_metrics: QualityMetrics
    processing_time_ms: float
    enhancement_method: Optional[str] = None


class FeatureImprovement(BaseModel):
    keypoints: float
    texture: float
    quality: float


class DetectionImprovement(BaseModel):
    accuracy: float
    precision: float
    recall: float
    map: float
    detection_count: int


class ProcessingTimes(BaseModel):
    raw: float
    enhanced: float
    overhead: float


class PipelineComparison(BaseModel):
    feature_improvement: FeatureImprovement
    detection_improvement: DetectionImprovement
    features: ComparisonResult
    overall_improvement: float
    total_processing_time: ProcessingTimes


class PipelineResult(BaseModel):
    """Raw and enhanced run results plus their comparison."""

    raw: ImageRunResult
    enhanced: ImageRunResult
    comparison: PipelineComparison
    timestamp: float
