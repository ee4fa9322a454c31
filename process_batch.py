#!/usr/bin/env python3
"""
Batch Enhancement Evaluator
Run the low-light pipeline over a folder of images and generate a
comprehensive evaluation report.
"""

import argparse
import json
from datetime import datetime
from pathlib import Path

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

from lowlight_vision import configure_logging, load_config, read_image
from lowlight_vision.detection import TorchvisionDetector, compare_detections
from lowlight_vision.pipeline import run_pipeline

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.tiff'}


def find_images(folder, max_images=None):
    """Sorted image paths in a folder."""
    image_files = sorted(p for p in Path(folder).iterdir() if p.suffix.lower() in IMAGE_EXTENSIONS)
    if max_images:
        image_files = image_files[:max_images]
    return image_files


def summarize_result(image_path, result):
    """Flatten one PipelineResult into a report row."""
    comparison = result.comparison
    detection_diff = compare_detections(result.raw.detection.boxes, result.enhanced.detection.boxes)
    return {
        'image_name': image_path.name,
        'enhanced_image': result.enhanced.image,
        'raw_quality': result.raw.quality_metrics.model_dump(),
        'enhanced_quality': result.enhanced.quality_metrics.model_dump(),
        'raw_keypoints': result.raw.features.keypoints.model_dump(),
        'enhanced_keypoints': result.enhanced.features.keypoints.model_dump(),
        'raw_detections': len(result.raw.detection.boxes),
        'enhanced_detections': len(result.enhanced.detection.boxes),
        'raw_boxes': [box.model_dump(by_alias=True) for box in result.raw.detection.boxes],
        'enhanced_boxes': [box.model_dump(by_alias=True) for box in result.enhanced.detection.boxes],
        'new_objects_found': detection_diff['new_objects_found'],
        'confidence_improvement': detection_diff['confidence_improvement'],
        'similarity': comparison.features.similarity,
        'euclidean_distance': comparison.features.euclidean_distance,
        'keypoint_improvement_percent': comparison.feature_improvement.keypoints,
        'texture_improvement_percent': comparison.feature_improvement.texture,
        'quality_improvement_percent': comparison.feature_improvement.quality,
        'map_improvement': comparison.detection_improvement.map,
        'overall_improvement': comparison.overall_improvement,
        'raw_processing_time_ms': comparison.total_processing_time.raw,
        'enhanced_processing_time_ms': comparison.total_processing_time.enhanced,
        'enhancement_overhead_ms': comparison.total_processing_time.overhead,
    }


def process_batch(input_dir, output_dir, config_path=None, max_images=None):
    """Process an image folder in batch."""

    input_dir = Path(input_dir)
    if not input_dir.exists():
        print(f"Input folder not found: {input_dir}")
        return []

    image_files = find_images(input_dir, max_images)
    print(f"Processing {len(image_files)} images from {input_dir}...")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    cfg = load_config(config_path)
    cfg['pipeline']['output_dir'] = str(output_dir)

    detector = TorchvisionDetector(cfg['detection'])

    results = []
    failures = []
    start_batch_time = datetime.now()

    for i, image_path in enumerate(image_files):
        try:
            image = read_image(image_path)
            result = run_pipeline(image, detector, name=image_path.name, cfg=cfg)
            results.append(summarize_result(image_path, result))
        except (ValueError, FileNotFoundError) as e:
            # One unreadable image should not stop the batch; it is reported below
            failures.append({'image_name': image_path.name, 'error': str(e)})
            print(f"Error processing {image_path.name}: {e}")

        if (i + 1) % 10 == 0 or i == len(image_files) - 1:
            print(f"  Processed {i+1}/{len(image_files)} images...")

    total_batch_time = (datetime.now() - start_batch_time).total_seconds()

    generate_report(results, failures, output_dir, total_batch_time)

    return results


def generate_report(results, failures, output_dir, total_time):
    """Generate the JSON evaluation report and print a summary."""

    if not results:
        print("No results to report")
        return

    def _avg(key):
        vals = [r[key] for r in results if r.get(key) is not None]
        return float(np.mean(vals)) if vals else 0.0

    total_images = len(results)
    improved = sum(1 for r in results if r['overall_improvement'] > 0)

    summary = {
        'keypoint_improvement_avg': _avg('keypoint_improvement_percent'),
        'texture_improvement_avg': _avg('texture_improvement_percent'),
        'quality_improvement_avg': _avg('quality_improvement_percent'),
        'map_improvement_avg': _avg('map_improvement'),
        'new_objects_found_total': int(sum(r['new_objects_found'] for r in results)),
        'confidence_improvement_avg': _avg('confidence_improvement'),
        'overall_improvement_avg': _avg('overall_improvement'),
        'similarity_avg': _avg('similarity'),
        'euclidean_distance_avg': _avg('euclidean_distance'),
        'enhancement_overhead_avg_ms': _avg('enhancement_overhead_ms'),
    }

    report = {
        'evaluation_info': {
            'total_images': total_images,
            'failed_images': len(failures),
            'evaluation_date': datetime.now().isoformat(),
            'total_processing_time_seconds': total_time,
        },
        'improvement_summary': summary,
        'improved_images': improved,
        'improved_percentage': improved / total_images * 100,
        'detailed_results': results,
        'failures': failures,
    }

    create_batch_visualizations(results, output_dir)

    report_file = output_dir / 'evaluation_report.json'
    with open(report_file, 'w') as f:
        json.dump(report, f, indent=2)

    print("\n" + "=" * 70)
    print("LOW-LIGHT ENHANCEMENT EVALUATION REPORT")
    print("=" * 70)
    print(f"Total images: {total_images} ({len(failures)} failed)")
    print(f"Total processing time: {total_time:.1f} seconds")
    print(f"Improved images: {improved} ({improved/total_images*100:.1f}%)")

    print(f"\nAverage Improvements:")
    print(f"  Keypoints: {summary['keypoint_improvement_avg']:.2f}%")
    print(f"  Texture (HOG): {summary['texture_improvement_avg']:.2f}%")
    print(f"  Quality: {summary['quality_improvement_avg']:.2f}%")
    print(f"  mAP delta: {summary['map_improvement_avg']:.4f}")
    print(f"  Detection confidence: {summary['confidence_improvement_avg']:+.4f}")
    print(f"  New objects found: {summary['new_objects_found_total']}")
    print(f"  Overall: {summary['overall_improvement_avg']:.2f}")

    print(f"\nFeature Vectors:")
    print(f"  Similarity (avg): {summary['similarity_avg']:.4f}")
    print(f"  Euclidean distance (avg): {summary['euclidean_distance_avg']:.2f}")
    print(f"  Enhancement overhead (avg): {summary['enhancement_overhead_avg_ms']:.1f} ms")

    print(f"\nOutput Files:")
    print(f"  Enhanced images: {output_dir}/*_enhanced.png")
    print(f"  Report: {report_file}")
    print(f"  Visualizations: {output_dir}/evaluation_charts.png")
    print("=" * 70)


def create_batch_visualizations(results, output_dir):
    """Create summary charts for batch results."""

    fig, axes = plt.subplots(2, 2, figsize=(12, 10))

    # 1. Overall improvement distribution
    overall = [r['overall_improvement'] for r in results]
    axes[0, 0].hist(overall, bins=15, alpha=0.7, color='blue')
    axes[0, 0].axvline(np.mean(overall), color='red', linestyle='--',
                       label=f'Mean: {np.mean(overall):.2f}')
    axes[0, 0].set_xlabel('Overall Improvement')
    axes[0, 0].set_ylabel('Frequency')
    axes[0, 0].set_title('Overall Improvement Distribution')
    axes[0, 0].legend()
    axes[0, 0].grid(True, alpha=0.3)

    # 2. Average improvement per category
    categories = ['Keypoints', 'Texture', 'Quality']
    keys = ['keypoint_improvement_percent', 'texture_improvement_percent', 'quality_improvement_percent']
    averages = [np.mean([r[k] for r in results]) for k in keys]
    axes[0, 1].bar(categories, averages, color=['orange', 'green', 'purple'], alpha=0.7)
    axes[0, 1].axhline(0, color='black', linestyle='-', alpha=0.3)
    axes[0, 1].set_ylabel('Improvement (%)')
    axes[0, 1].set_title('Average Feature Improvement')
    axes[0, 1].grid(True, alpha=0.3)

    # 3. Brightness before/after
    raw_brightness = [r['raw_quality']['brightness'] for r in results]
    enh_brightness = [r['enhanced_quality']['brightness'] for r in results]
    axes[1, 0].scatter(raw_brightness, enh_brightness, alpha=0.6, c=overall, cmap='viridis', s=50)
    axes[1, 0].plot([0, 255], [0, 255], color='black', linestyle='--', alpha=0.3)
    axes[1, 0].set_xlabel('Raw Brightness')
    axes[1, 0].set_ylabel('Enhanced Brightness')
    axes[1, 0].set_title('Enhancement Effectiveness')
    axes[1, 0].grid(True, alpha=0.3)

    # 4. Detection counts before/after
    raw_counts = [r['raw_detections'] for r in results]
    enh_counts = [r['enhanced_detections'] for r in results]
    x = np.arange(len(results))
    axes[1, 1].bar(x - 0.2, raw_counts, width=0.4, label='Raw', color='gray')
    axes[1, 1].bar(x + 0.2, enh_counts, width=0.4, label='Enhanced', color='gold')
    axes[1, 1].set_xlabel('Image')
    axes[1, 1].set_ylabel('Detections')
    axes[1, 1].set_title('Detections per Image')
    axes[1, 1].legend()

    plt.tight_layout()
    plt.savefig(output_dir / 'evaluation_charts.png', dpi=150, bbox_inches='tight')
    plt.close(fig)

    print(f"Visualization saved to: {output_dir / 'evaluation_charts.png'}")


def main():
    """Main function."""
    parser = argparse.ArgumentParser(description="Evaluate low-light enhancement on a folder of images")
    parser.add_argument('input_dir', help="Folder with low-light images")
    parser.add_argument('--output-dir', default='batch_results', help="Folder for enhanced images and report")
    parser.add_argument('--config', default=None, help="JSON configuration overriding the defaults")
    parser.add_argument('--max-images', type=int, default=None, help="Process at most this many images")
    parser.add_argument('--log-level', default=None, help="Logging level (default from LOWLIGHT_LOG_LEVEL)")
    args = parser.parse_args()

    configure_logging(args.log_level)

    print("Low-Light Batch Evaluator")
    print("=" * 40)

    results = process_batch(args.input_dir, args.output_dir, args.config, args.max_images)

    if results:
        print(f"\n✅ Batch processing completed!")
        print(f"Processed {len(results)} images successfully")
    else:
        print("❌ No images were processed")


if __name__ == "__main__":
    main()
