#!/usr/bin/env python3
"""
White Region Exploration Script

Reports RGB channel ranges and white-pixel coverage across a set of
thresholds for a single image, to help choose a white_regions.threshold.

Usage:
    python scripts/explore_white_regions.py --image /data/images/wound_001.png
    python scripts/explore_white_regions.py --image wound_001.png --thresholds 0.95 0.9 0.85 --plot sweep.png
"""

import sys
import argparse
import logging
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import matplotlib
matplotlib.use('Agg')

from analysis.white_regions import SWEEP_THRESHOLDS, channel_ranges, threshold_sweep
from data.wound_images import load_rgb_image
from utils import InvalidInput, DataPathNotFoundError, candidate_paths, resolve_data_file, setup_logging
from visualization import plot_threshold_sweep, save_figure

logger = logging.getLogger(__name__)


def explore(image_path: str, thresholds, plot_path: str = None):
    """Log channel ranges and the threshold sweep for one image."""
    path = resolve_data_file(candidate_paths(image_path), "image")
    image = load_rgb_image(path)

    logger.info("=" * 60)
    logger.info(f"Exploring white regions: {path.name}")
    logger.info("=" * 60)
    logger.info(f"Shape: {image.shape} | dtype: {image.dtype}")

    for channel, stats in channel_ranges(image).items():
        logger.info(f"  {channel:<5} min={stats['min']:.4f} max={stats['max']:.4f} mean={stats['mean']:.4f}")

    results = threshold_sweep(image, thresholds)
    logger.info("White detection with different thresholds:")
    for result in results:
        logger.info(f"  Threshold {result.threshold}: {result.white_pixel_count} pixels "
                    f"({result.percentage:.2f}%)")

    if plot_path:
        save_figure(plot_threshold_sweep(results), plot_path)
    return results


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Explore white regions in one image')
    parser.add_argument('--image', type=str, required=True, help='Image file')
    parser.add_argument('--thresholds', type=float, nargs='+', default=list(SWEEP_THRESHOLDS),
                        help='Thresholds to evaluate')
    parser.add_argument('--plot', type=str, default=None,
                        help='Save the sweep figure to this path')
    args = parser.parse_args(argv)

    setup_logging()
    try:
        explore(args.image, args.thresholds, args.plot)
    except (InvalidInput, DataPathNotFoundError) as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
