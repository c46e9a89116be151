"""
White Region Extraction

Detects bright (white) pixels in wound images, used as a proxy for
markers, rulers and reflections:
- Per-image binary mask and coverage percentage
- Dataset-wide summary (min, max, mean, median)
- Threshold sweep for choosing a cut-off
- Optional removal of small connected regions

A pixel is white iff red >= threshold AND green >= threshold AND
blue >= threshold, with channel values in [0, 1].
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Iterable

import numpy as np
from scipy import ndimage

from utils.errors import InvalidInput

logger = logging.getLogger(__name__)

WHITE_THRESHOLD = 0.8
MIN_REGION_SIZE = 50
SWEEP_THRESHOLDS = (0.9, 0.85, 0.8, 0.75, 0.7)


@dataclass
class WhiteRegionResult:
    """White-pixel mask of one image and its coverage."""
    mask: np.ndarray          # (H, W) bool
    white_pixel_count: int
    total_pixel_count: int
    percentage: float         # 100 * white / total
    threshold: float

    def __str__(self):
        return (f"White pixels: {self.white_pixel_count} / {self.total_pixel_count} "
                f"({self.percentage:.2f}%) | Threshold: {self.threshold}")


@dataclass
class WhiteRegionSummary:
    """White coverage percentages summarized over a set of images."""
    min: float
    max: float
    mean: float
    median: float
    count: int


def _check_threshold(threshold: float) -> float:
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float, np.integer, np.floating)):
        raise InvalidInput(f"threshold must be a number, got {threshold!r}")
    if not 0.0 <= threshold <= 1.0:
        raise InvalidInput(f"threshold must be in [0, 1], got {threshold}")
    return float(threshold)


def _as_rgb(image: np.ndarray) -> np.ndarray:
    rgb = np.asarray(image)
    if rgb.ndim != 3 or rgb.shape[2] < 3:
        raise InvalidInput(f"Expected an (H, W, 3) image, got shape {rgb.shape}")
    if rgb.shape[0] == 0 or rgb.shape[1] == 0:
        raise InvalidInput("Image has zero pixels")
    return rgb


def extract_white_regions(image: np.ndarray, threshold: float = WHITE_THRESHOLD) -> WhiteRegionResult:
    """
    Extract white regions from an image.

    Args:
        image: (H, W, C) array with C >= 3, channels red/green/blue in [0, 1]
        threshold: Minimum value every channel must reach

    Returns:
        WhiteRegionResult with a mask of shape (H, W)
    """
    threshold = _check_threshold(threshold)
    rgb = _as_rgb(image)

    mask = (
        (rgb[:, :, 0] >= threshold)
        & (rgb[:, :, 1] >= threshold)
        & (rgb[:, :, 2] >= threshold)
    )

    white_count = int(mask.sum())
    total_pixels = int(mask.size)

    return WhiteRegionResult(
        mask=mask,
        white_pixel_count=white_count,
        total_pixel_count=total_pixels,
        percentage=100.0 * white_count / total_pixels,
        threshold=threshold,
    )


def summarize_white_regions(
    images: Iterable[np.ndarray],
    threshold: float = WHITE_THRESHOLD
) -> WhiteRegionSummary:
    """
    White region percentages across images.

    Returns:
        WhiteRegionSummary (min, max, mean, median)
    """
    percentages = [extract_white_regions(img, threshold).percentage for img in images]
    return summarize_percentages(percentages)


def summarize_percentages(percentages: Iterable[float]) -> WhiteRegionSummary:
    """Min / max / mean / median of per-image white coverage percentages."""
    arr = np.asarray(list(percentages), dtype=float)
    if arr.size == 0:
        raise InvalidInput("White region summary is undefined for zero images")

    return WhiteRegionSummary(
        min=float(arr.min()),
        max=float(arr.max()),
        mean=min(max(float(arr.mean()), float(arr.min())), float(arr.max())),
        median=float(np.median(arr)),
        count=int(arr.size),
    )


def threshold_sweep(
    image: np.ndarray,
    thresholds: Sequence[float] = SWEEP_THRESHOLDS
) -> List[WhiteRegionResult]:
    """Run extract_white_regions once per threshold, in the given order."""
    return [extract_white_regions(image, t) for t in thresholds]


def remove_small_regions(mask: np.ndarray, min_size: int = MIN_REGION_SIZE) -> np.ndarray:
    """
    Drop 8-connected regions with fewer than min_size pixels.

    Returns a new boolean mask; the input is not modified.
    """
    if min_size < 1:
        raise InvalidInput(f"min_size must be >= 1, got {min_size}")

    mask = np.asarray(mask, dtype=bool)
    labeled, num_regions = ndimage.label(mask, structure=np.ones((3, 3), dtype=int))
    if num_regions == 0:
        return mask.copy()

    sizes = np.bincount(labeled.ravel())
    keep = sizes >= min_size
    keep[0] = False  # background label
    return keep[labeled]


def channel_ranges(image: np.ndarray) -> Dict[str, Dict[str, float]]:
    """Min / max / mean per RGB channel, for exploring a new image set."""
    rgb = _as_rgb(image)
    ranges = {}
    for idx, name in enumerate(('red', 'green', 'blue')):
        channel = rgb[:, :, idx]
        ranges[name] = {
            'min': float(channel.min()),
            'max': float(channel.max()),
            'mean': float(channel.mean()),
        }
    return ranges


def create_white_overlay(mask: np.ndarray, alpha: float = 0.6) -> np.ndarray:
    """
    Red RGBA overlay that is opaque (by alpha) where the mask is set.

    Returns:
        (H, W, 4) float32 array
    """
    if not 0.0 <= alpha <= 1.0:
        raise InvalidInput(f"alpha must be in [0, 1], got {alpha}")
    mask = np.asarray(mask, dtype=bool)
    overlay = np.zeros(mask.shape + (4,), dtype=np.float32)
    overlay[:, :, 0] = 1.0
    overlay[:, :, 3] = mask.astype(np.float32) * alpha
    return overlay
