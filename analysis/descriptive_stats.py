"""
Descriptive Statistics for Image / Mask Pairs

Dataset-level statistics computed directly from pixel data:
- Skewness and IQR outlier detection helpers
- RGB channel statistics (per-image means, skewness, correlations)
- PCA-oriented bounding boxes of connected class regions
- Class area statistics (absolute and normalized)

Images are (H, W, 3) float arrays in [0, 1]; masks are (H, W, C) stacks
with one channel per class, in class_names order.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy import ndimage
from tqdm import tqdm

from data.wound_metadata import CLASS_ORDER
from utils.errors import InvalidInput

logger = logging.getLogger(__name__)

CHANNEL_NAMES = ('red', 'green', 'blue')


# =============================================================================
# Helpers
# =============================================================================

def compute_skewness(values: Sequence[float]) -> float:
    """
    Third standardized moment: mean(((x - mean) / std) ** 3).

    Uses the sample standard deviation. Constant input has skewness 0.0.
    """
    arr = np.asarray(values, dtype=float).ravel()
    if arr.size == 0:
        raise InvalidInput("Skewness is undefined for an empty collection")
    if arr.size == 1:
        return 0.0

    sigma = np.std(arr, ddof=1)
    if sigma == 0.0 or not np.isfinite(sigma):
        return 0.0

    return float(np.mean(((arr - arr.mean()) / sigma) ** 3))


def find_outliers(values: Sequence[float], whisker: float = 1.5) -> Tuple[np.ndarray, float]:
    """
    Interquartile-range outliers.

    Outliers are values below Q1 - whisker*IQR or above Q3 + whisker*IQR,
    with linearly interpolated quartiles.

    Returns:
        (outlier_mask, outlier_percentage)
    """
    arr = np.asarray(values, dtype=float).ravel()
    if arr.size == 0:
        return np.zeros(0, dtype=bool), 0.0

    q1, q3 = np.quantile(arr, [0.25, 0.75])
    iqr = q3 - q1
    mask = (arr < q1 - whisker * iqr) | (arr > q3 + whisker * iqr)
    return mask, 100.0 * float(mask.sum()) / arr.size


def _mean_std(values: Sequence[float]) -> Tuple[float, float]:
    arr = np.asarray(values, dtype=float)
    std = float(np.std(arr, ddof=1)) if arr.size > 1 else 0.0
    return float(arr.mean()), std


def _check_masks(masks: Sequence[np.ndarray], class_names: Sequence[str]) -> None:
    if len(masks) == 0:
        raise InvalidInput("At least one mask is required")
    for i, mask in enumerate(masks):
        if mask.ndim != 3 or mask.shape[2] != len(class_names):
            raise InvalidInput(
                f"Mask {i} has shape {mask.shape}, expected (H, W, {len(class_names)})"
            )


# =============================================================================
# Channel Statistics
# =============================================================================

@dataclass
class ChannelStatistics:
    """RGB channel statistics over a set of images."""
    channel_names: Tuple[str, ...]
    channel_means_per_image: Dict[str, np.ndarray]
    channel_skewness_per_image: Dict[str, np.ndarray]
    global_channel_stats: Dict[str, Dict[str, float]]  # mean, std, skewness
    correlations: Dict[Tuple[str, str], Optional[float]] = field(default_factory=dict)

    @property
    def num_images(self) -> int:
        return len(next(iter(self.channel_means_per_image.values())))


def compute_channel_statistics(
    images: Sequence[np.ndarray],
    channel_names: Sequence[str] = CHANNEL_NAMES
) -> ChannelStatistics:
    """
    Per-image channel means and skewness, plus global aggregates.

    Correlations are Pearson r between per-image means of each channel pair,
    None when fewer than two images or a channel has no variance.
    """
    if len(images) == 0:
        raise InvalidInput("Channel statistics are undefined for zero images")

    means = {c: [] for c in channel_names}
    skews = {c: [] for c in channel_names}

    logger.info(f"Analyzing {len(images)} input images for channel statistics...")
    for image in tqdm(images, desc="Channel statistics", leave=False):
        image = np.asarray(image, dtype=float)
        if image.ndim != 3 or image.shape[2] < len(channel_names) or image.size == 0:
            raise InvalidInput(f"Expected an (H, W, {len(channel_names)}) image, got shape {image.shape}")
        for idx, channel in enumerate(channel_names):
            values = image[:, :, idx].ravel()
            means[channel].append(float(values.mean()))
            skews[channel].append(compute_skewness(values))

    means = {c: np.asarray(v) for c, v in means.items()}
    skews = {c: np.asarray(v) for c, v in skews.items()}

    global_stats = {}
    for channel in channel_names:
        mean, std = _mean_std(means[channel])
        global_stats[channel] = {
            'mean': mean,
            'std': std,
            'skewness': float(skews[channel].mean()),
        }

    correlations = {}
    for a, b in itertools.combinations(channel_names, 2):
        if len(images) < 2 or means[a].std() == 0 or means[b].std() == 0:
            correlations[(a, b)] = None
        else:
            correlations[(a, b)] = float(np.corrcoef(means[a], means[b])[0, 1])

    return ChannelStatistics(
        channel_names=tuple(channel_names),
        channel_means_per_image=means,
        channel_skewness_per_image=skews,
        global_channel_stats=global_stats,
        correlations=correlations,
    )


# =============================================================================
# Bounding Box Statistics
# =============================================================================

@dataclass
class BoundingBoxStatistics:
    """Oriented bounding boxes of connected regions per wound class."""
    bbox_classes: Tuple[str, ...]
    widths: Dict[str, np.ndarray]
    heights: Dict[str, np.ndarray]
    aspect_ratios: Dict[str, np.ndarray]
    # Per class: mean/std of width, height, aspect ratio (None without
    # components) and num_components
    statistics: Dict[str, Dict[str, Optional[float]]]


def oriented_box(rows: np.ndarray, cols: np.ndarray) -> Tuple[float, float, float]:
    """
    PCA-oriented box of a pixel set.

    Returns:
        (width along the major axis, height along the minor axis, aspect ratio)
        Aspect ratio is max/min extent, 1.0 when either extent is zero.
    """
    rows = np.asarray(rows, dtype=float)
    cols = np.asarray(cols, dtype=float)
    centered = np.stack([rows - rows.mean(), cols - cols.mean()])
    cov = centered @ centered.T / rows.size

    # eigh sorts eigenvalues ascending: column 1 is the major axis
    _, axes = np.linalg.eigh(cov)
    major = axes[:, 1] @ centered
    minor = axes[:, 0] @ centered

    width = float(major.max() - major.min())
    height = float(minor.max() - minor.min())
    short, long_ = min(width, height), max(width, height)
    aspect = long_ / short if short > 0 else 1.0
    return width, height, aspect


def compute_bounding_box_statistics(
    masks: Sequence[np.ndarray],
    class_names: Sequence[str] = CLASS_ORDER,
    mask_threshold: float = 0.5
) -> BoundingBoxStatistics:
    """
    PCA-oriented bounding box metrics for every non-background class.

    Each class channel is binarized at mask_threshold and split into
    4-connected components; every component contributes one box.
    """
    _check_masks(masks, class_names)
    bbox_classes = tuple(c for c in class_names if c != 'background')

    metrics = {c: {'widths': [], 'heights': [], 'aspect_ratios': []} for c in bbox_classes}

    logger.info(f"Analyzing {len(masks)} images for bounding box statistics...")
    for mask in tqdm(masks, desc="Bounding boxes", leave=False):
        for class_idx, class_name in enumerate(class_names):
            if class_name not in metrics:
                continue
            class_mask = mask[:, :, class_idx] > mask_threshold
            if not class_mask.any():
                continue

            labeled, num_components = ndimage.label(class_mask)
            for component_id in range(1, num_components + 1):
                rows, cols = np.nonzero(labeled == component_id)
                width, height, aspect = oriented_box(rows, cols)
                metrics[class_name]['widths'].append(width)
                metrics[class_name]['heights'].append(height)
                metrics[class_name]['aspect_ratios'].append(aspect)

    statistics = {}
    for c in bbox_classes:
        n = len(metrics[c]['widths'])
        entry = {'num_components': n}
        for key, name in (('widths', 'width'), ('heights', 'height'), ('aspect_ratios', 'aspect_ratio')):
            if n == 0:
                entry[f'mean_{name}'] = None
                entry[f'std_{name}'] = None
            else:
                entry[f'mean_{name}'], entry[f'std_{name}'] = _mean_std(metrics[c][key])
        statistics[c] = entry

    return BoundingBoxStatistics(
        bbox_classes=bbox_classes,
        widths={c: np.asarray(metrics[c]['widths']) for c in bbox_classes},
        heights={c: np.asarray(metrics[c]['heights']) for c in bbox_classes},
        aspect_ratios={c: np.asarray(metrics[c]['aspect_ratios']) for c in bbox_classes},
        statistics=statistics,
    )


# =============================================================================
# Class Area Statistics
# =============================================================================

@dataclass
class ClassAreaStatistics:
    """Pixel area per class, per image and in total."""
    classes: Tuple[str, ...]
    total_pixels: float
    class_totals: Dict[str, float]
    class_areas_per_image: Dict[str, np.ndarray]
    statistics: Dict[str, Dict[str, float]]             # mean, std of areas
    normalized_statistics: Dict[str, Dict[str, float]]  # divided by sum of means

    def total_proportions(self) -> Dict[str, float]:
        """Share of all dataset pixels covered by each class."""
        return {c: self.class_totals[c] / self.total_pixels for c in self.classes}


def compute_class_area_statistics(
    masks: Sequence[np.ndarray],
    class_names: Sequence[str] = CLASS_ORDER
) -> ClassAreaStatistics:
    """
    Class pixel areas across all masks.

    Normalized statistics divide each class mean and std by the sum of all
    class means, so normalized means sum to 1.
    """
    _check_masks(masks, class_names)

    areas = {c: [] for c in class_names}
    total_pixels = 0.0

    logger.info(f"Analyzing {len(masks)} output images for class area statistics...")
    for mask in masks:
        total_pixels += mask.shape[0] * mask.shape[1]
        for class_idx, class_name in enumerate(class_names):
            areas[class_name].append(float(mask[:, :, class_idx].sum()))

    areas = {c: np.asarray(v) for c, v in areas.items()}
    class_totals = {c: float(v.sum()) for c, v in areas.items()}

    statistics = {}
    for c in class_names:
        mean, std = _mean_std(areas[c])
        statistics[c] = {'mean': mean, 'std': std}

    sum_of_means = sum(s['mean'] for s in statistics.values())
    if sum_of_means <= 0:
        raise InvalidInput("Masks contain no labelled pixels; normalized areas are undefined")

    normalized = {
        c: {'mean': s['mean'] / sum_of_means, 'std': s['std'] / sum_of_means}
        for c, s in statistics.items()
    }

    return ClassAreaStatistics(
        classes=tuple(class_names),
        total_pixels=total_pixels,
        class_totals=class_totals,
        class_areas_per_image=areas,
        statistics=statistics,
        normalized_statistics=normalized,
    )
