#!/usr/bin/env python3
"""
Wound Dataset Statistics Script

Produces the statistics figures for an augmented wound segmentation
dataset from two kinds of input:

1. The augmentation summary artifact (one metadata record per sample):
   - source-class : source image usage, class balance, pixel coverage
   - parameters   : augmentation parameters against source image
   - quality      : class composition, crops, growth relationship
   - dashboard    : statistics text panel and class pie chart

2. Image / mask directories:
   - white-regions : bright-pixel masks and a threshold sweep
   - channels      : RGB channel statistics
   - bboxes        : PCA-oriented bounding boxes per wound class
   - class-areas   : class pixel areas

   all : every metadata command, plus the image commands when an image
         directory is configured

Usage:
    python analyze_dataset.py source-class
    python analyze_dataset.py all --config configs/default_config.yaml
    python analyze_dataset.py white-regions --image_dir /data/images --threshold 0.85
"""

import sys
import json
import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import matplotlib
import matplotlib.pyplot as plt

from configs import WoundStatsConfig, get_default_config, load_config_from_file
from data import DatasetSummary, ImageSample, load_summary, load_image_samples
from analysis import (
    compute_usage_histogram,
    compute_class_counts,
    compute_coverage_stats,
    compute_mean_coverage_by_target,
    compute_class_composition,
    summarize_parameter_ranges,
    count_flip_types,
    extract_white_regions,
    summarize_percentages,
    threshold_sweep,
    remove_small_regions,
    compute_channel_statistics,
    compute_bounding_box_statistics,
    compute_class_area_statistics,
    WhiteRegionResult,
)
from visualization import (
    apply_style,
    save_figure,
    plot_source_class_distribution,
    plot_augmentation_parameters,
    plot_quality_metrics,
    plot_summary_dashboard,
    plot_white_regions,
    plot_threshold_sweep,
    plot_channel_statistics,
    plot_bounding_box_statistics,
    plot_class_area_statistics,
)
from utils import (
    InvalidInput,
    DataPathNotFoundError,
    candidate_paths,
    resolve_data_dir,
    resolve_data_file,
    setup_logging,
    ensure_dir,
    format_section,
    format_percentage,
)

logger = logging.getLogger(__name__)

METADATA_COMMANDS = ('source-class', 'parameters', 'quality', 'dashboard')
IMAGE_COMMANDS = ('white-regions', 'channels', 'bboxes', 'class-areas')
COMMANDS = METADATA_COMMANDS + IMAGE_COMMANDS + ('all',)


class DatasetStatisticsRunner:
    """
    Loads the configured inputs once and renders the requested figures.

    Metadata and image samples are loaded lazily so commands that only
    need one of them never touch the other.
    """

    def __init__(
        self,
        config: WoundStatsConfig,
        summary_path: Optional[str] = None,
        show: bool = False,
    ):
        self.config = config
        self.summary_path = summary_path
        self.show = show
        self.output_dir = ensure_dir(config.paths.output_dir)

        self.report: Dict[str, Any] = {}
        self._summary: Optional[DatasetSummary] = None
        self._samples: Optional[List[ImageSample]] = None

    # -------------------------------------------------------------------------
    # Inputs
    # -------------------------------------------------------------------------

    def _resolve_summary_file(self) -> Path:
        if self.summary_path:
            return resolve_data_file(candidate_paths(self.summary_path), "summary file")

        paths = self.config.paths
        metadata_dir = resolve_data_dir(paths.metadata_dir_candidates(), "metadata directory")
        return resolve_data_file([metadata_dir / paths.summary_filename], "summary file")

    @property
    def summary(self) -> DatasetSummary:
        if self._summary is None:
            dataset = self.config.dataset
            self._summary = load_summary(
                self._resolve_summary_file(),
                target_distribution=dataset.target_distribution,
                num_sources=dataset.num_sources,
            )
            if len(self._summary.records) == 0:
                raise InvalidInput(f"No records in {self._summary.source_path}")
        return self._summary

    @property
    def samples(self) -> List[ImageSample]:
        if self._samples is None:
            paths = self.config.paths
            if not paths.image_dir:
                raise InvalidInput("No image directory configured; pass --image_dir")
            image_dir = resolve_data_dir(candidate_paths(paths.image_dir), "image directory")
            mask_dir = None
            if paths.mask_dir:
                mask_dir = resolve_data_dir(candidate_paths(paths.mask_dir), "mask directory")
            self._samples = load_image_samples(
                image_dir, mask_dir, class_names=self.config.dataset.class_order
            )
            if not self._samples:
                raise InvalidInput(f"No images found in {image_dir}")
        return self._samples

    def _masks(self) -> list:
        masks = [s.mask for s in self.samples if s.mask is not None]
        if not masks:
            raise InvalidInput("No label masks loaded; pass --mask_dir")
        return masks

    def _save(self, fig, name: str) -> str:
        path = self.output_dir / f"{name}.{self.config.plots.image_format}"
        return save_figure(fig, path, dpi=self.config.plots.dpi, close=not self.show)

    # -------------------------------------------------------------------------
    # Metadata commands
    # -------------------------------------------------------------------------

    def run_source_class(self) -> str:
        """Source usage, actual vs target class counts and coverage ranges."""
        logger.info(format_section("Source Image Usage & Class Distribution"))
        records = self.summary.records
        class_order = self.config.dataset.class_order

        usage = compute_usage_histogram(records, self.summary.pool_size)
        counts = compute_class_counts(records, self.summary.target_distribution, class_order)
        coverage = compute_coverage_stats(records, class_order)

        logger.info(f"Total samples: {counts.total} | Sources used: "
                    f"{len(usage.used_sources)} / {usage.pool_size} | "
                    f"Average usage: {usage.mean_usage:.1f}")
        for c in class_order:
            logger.info(f"  {c:<11} actual={counts.actual[c]:<5} target={counts.target[c]:<5} "
                        f"coverage: {coverage[c]}")

        self.report['source_class'] = {
            'total_samples': counts.total,
            'used_sources': len(usage.used_sources),
            'pool_size': usage.pool_size,
            'actual_counts': counts.actual,
            'target_counts': counts.target,
            'coverage': {c: vars(coverage[c]) for c in class_order},
        }

        fig = plot_source_class_distribution(usage, counts, coverage, class_order)
        return self._save(fig, "source_class_distribution")

    def run_parameters(self) -> str:
        """Augmentation parameters against source image."""
        logger.info(format_section("Augmentation Parameters"))
        records = self.summary.records
        usage = compute_usage_histogram(records, self.summary.pool_size)

        ranges = summarize_parameter_ranges(records)
        for name, (lo, hi) in ranges.items():
            logger.info(f"  {name:<20} [{lo:.3f}, {hi:.3f}]")
        flips = count_flip_types(records)
        logger.info(f"  flip types: {flips}")

        self.report['parameters'] = {
            'ranges': {name: list(bounds) for name, bounds in ranges.items()},
            'flip_types': flips,
        }

        fig = plot_augmentation_parameters(records, usage)
        return self._save(fig, "augmentation_parameters")

    def run_quality(self) -> str:
        """Class composition, mean coverage by target class, crops and growth."""
        logger.info(format_section("Quality Metrics"))
        records = self.summary.records
        class_order = self.config.dataset.class_order

        composition = compute_class_composition(
            records, class_order, max_samples=self.config.plots.stacked_samples
        )
        mean_by_target = compute_mean_coverage_by_target(records, class_order)
        for c in class_order:
            logger.info(f"  {c:<11} mean coverage when targeted: "
                        f"{format_percentage(mean_by_target[c])}")

        self.report['quality'] = {'mean_coverage_by_target': mean_by_target}

        fig = plot_quality_metrics(records, composition, mean_by_target, class_order)
        return self._save(fig, "quality_metrics")

    def run_dashboard(self) -> str:
        """Statistics text panel and class pie chart."""
        logger.info(format_section("Summary Dashboard"))
        records = self.summary.records
        dataset = self.config.dataset

        counts = compute_class_counts(records, self.summary.target_distribution, dataset.class_order)
        coverage = compute_coverage_stats(records, dataset.class_order)
        ranges = summarize_parameter_ranges(records)

        fig = plot_summary_dashboard(
            records, counts, coverage, ranges,
            num_sources=self.summary.pool_size,
            augmented_size=dataset.augmented_size,
        )
        return self._save(fig, "summary_dashboard")

    # -------------------------------------------------------------------------
    # Image commands
    # -------------------------------------------------------------------------

    def _white_regions(self, sample: ImageSample) -> WhiteRegionResult:
        settings = self.config.white_regions
        result = extract_white_regions(sample.image, settings.threshold)
        if not settings.remove_small_regions:
            return result

        mask = remove_small_regions(result.mask, settings.min_region_size)
        white = int(mask.sum())
        return WhiteRegionResult(
            mask=mask,
            white_pixel_count=white,
            total_pixel_count=result.total_pixel_count,
            percentage=100.0 * white / result.total_pixel_count,
            threshold=result.threshold,
        )

    def run_white_regions(self) -> List[str]:
        """White region overlays for sample images and a threshold sweep."""
        settings = self.config.white_regions
        logger.info(format_section(f"White Regions (threshold={settings.threshold})"))
        samples = self.samples

        results = [self._white_regions(s) for s in samples]
        summary = summarize_percentages(r.percentage for r in results)
        logger.info(f"White coverage over {summary.count} images: "
                    f"min={summary.min:.2f}% max={summary.max:.2f}% "
                    f"mean={summary.mean:.2f}% median={summary.median:.2f}%")
        self.report['white_regions'] = {'threshold': settings.threshold, **vars(summary)}

        saved = []
        shown = list(zip(samples, results))[:settings.sample_images]
        for i, (sample, result) in enumerate(shown, start=1):
            logger.info(f"  {sample.name}: {result}")
            fig = plot_white_regions(sample.image, result, image_index=i)
            saved.append(self._save(fig, f"white_regions_{sample.name}"))

        sweep = threshold_sweep(samples[0].image, settings.sweep_thresholds)
        saved.append(self._save(plot_threshold_sweep(sweep), "white_threshold_sweep"))
        return saved

    def run_channels(self) -> str:
        logger.info(format_section("Channel Statistics"))
        images = [s.image for s in self.samples]
        stats = compute_channel_statistics(images)
        for channel, values in stats.global_channel_stats.items():
            logger.info(f"  {channel:<6} mean={values['mean']:.4f} std={values['std']:.4f} "
                        f"skewness={values['skewness']:.4f}")

        self.report['channels'] = {
            'global': stats.global_channel_stats,
            'correlations': {f"{a}-{b}": r for (a, b), r in stats.correlations.items()},
        }

        return self._save(plot_channel_statistics(stats, images), "channel_statistics")

    def run_bboxes(self) -> str:
        logger.info(format_section("Bounding Box Statistics"))
        stats = compute_bounding_box_statistics(self._masks(), self.config.dataset.class_order)
        for c in stats.bbox_classes:
            entry = stats.statistics[c]
            logger.info(f"  {c:<11} components={entry['num_components']}")

        self.report['bboxes'] = stats.statistics
        return self._save(plot_bounding_box_statistics(stats), "bounding_box_statistics")

    def run_class_areas(self) -> str:
        logger.info(format_section("Class Area Statistics"))
        stats = compute_class_area_statistics(self._masks(), self.config.dataset.class_order)
        for c, share in stats.total_proportions().items():
            logger.info(f"  {c:<11} {format_percentage(100.0 * share)} of all pixels")

        self.report['class_areas'] = {
            'statistics': stats.statistics,
            'normalized_statistics': stats.normalized_statistics,
        }
        return self._save(plot_class_area_statistics(stats), "class_area_statistics")

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def run(self, command: str) -> Dict[str, Any]:
        """Run one command (or 'all') and write the JSON report."""
        handlers = {
            'source-class': self.run_source_class,
            'parameters': self.run_parameters,
            'quality': self.run_quality,
            'dashboard': self.run_dashboard,
            'white-regions': self.run_white_regions,
            'channels': self.run_channels,
            'bboxes': self.run_bboxes,
            'class-areas': self.run_class_areas,
        }

        if command == 'all':
            selected = list(METADATA_COMMANDS)
            if self.config.paths.image_dir:
                selected += ['white-regions', 'channels']
                if self.config.paths.mask_dir:
                    selected += ['bboxes', 'class-areas']
            else:
                logger.warning("No image directory configured; skipping image statistics")
        else:
            selected = [command]

        for name in selected:
            handlers[name]()

        report_path = self.output_dir / "statistics_report.json"
        with open(report_path, 'w') as f:
            json.dump(self.report, f, indent=2, default=str)
        logger.info(f"Report saved to: {report_path}")

        if self.show:
            plt.show()
        return self.report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Wound Dataset Statistics')

    parser.add_argument('command', choices=COMMANDS,
                        help='Statistics to compute and plot')
    parser.add_argument('--config', type=str, default=None,
                        help='Path to YAML/JSON config file')
    parser.add_argument('--summary', type=str, default=None,
                        help='Summary artifact (.json, .csv, optionally gzipped); overrides the config paths')
    parser.add_argument('--image_dir', type=str, default=None,
                        help='Directory of input images')
    parser.add_argument('--mask_dir', type=str, default=None,
                        help='Directory of integer label masks matching the image names')
    parser.add_argument('--output_dir', type=str, default=None,
                        help='Directory to save figures and the report')
    parser.add_argument('--threshold', type=float, default=None,
                        help='White region threshold in [0, 1]')
    parser.add_argument('--show', action='store_true',
                        help='Display figures after saving')
    parser.add_argument('--log_level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging verbosity')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config_from_file(args.config) if args.config else get_default_config()

        if args.image_dir:
            config.paths.image_dir = args.image_dir
        if args.mask_dir:
            config.paths.mask_dir = args.mask_dir
        if args.output_dir:
            config.paths.output_dir = args.output_dir
        if args.threshold is not None:
            config.white_regions.threshold = args.threshold
        if args.show:
            config.plots.show = True
        config.validate()

        setup_logging(config.paths.log_dir or None, level=getattr(logging, args.log_level))
        if not config.plots.show:
            matplotlib.use('Agg')
        apply_style(config.plots.style)

        runner = DatasetStatisticsRunner(config, summary_path=args.summary, show=config.plots.show)
        runner.run(args.command)
    except (InvalidInput, DataPathNotFoundError) as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
