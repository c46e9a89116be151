"""
Dataset Aggregation

Reduces the per-sample metadata records into the summaries that drive
every chart:
- Source image usage histogram
- Actual vs target class counts
- Per-class pixel coverage statistics (mean, sample std, min, max)
- Mean coverage by target class and stacked class composition
- Augmentation parameter ranges

All functions are pure: they read the records and return fresh values.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Iterable

import numpy as np

from data.wound_metadata import (
    CLASS_ORDER,
    AUGMENTATION_PARAMETERS,
    FLIP_TYPES,
    MetadataRecord,
)
from utils.errors import InvalidInput

logger = logging.getLogger(__name__)


@dataclass
class UsageHistogram:
    """How many records reference each source image in the pool."""
    counts: Dict[int, int]
    pool_size: int

    @property
    def used_sources(self) -> List[int]:
        """Source indices referenced at least once, ascending."""
        return [idx for idx, count in self.counts.items() if count > 0]

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def mean_usage(self) -> float:
        """Average count over used sources (0.0 if nothing is used)."""
        used = self.used_sources
        if not used:
            return 0.0
        return float(np.mean([self.counts[i] for i in used]))


@dataclass
class ClassCountSummary:
    """Actual and target sample counts per class."""
    actual: Dict[str, int]
    target: Dict[str, int]
    total: int
    class_order: Tuple[str, ...] = CLASS_ORDER

    def difference(self) -> Dict[str, int]:
        """actual - target per class."""
        return {c: self.actual[c] - self.target[c] for c in self.class_order}


@dataclass
class CoverageStats:
    """Descriptive statistics of one class's coverage column."""
    mean: float
    std: float
    min: float
    max: float
    count: int = 0

    def __str__(self):
        return (f"mean={self.mean:.2f}, std={self.std:.2f}, "
                f"range=[{self.min:.2f}, {self.max:.2f}], n={self.count}")


@dataclass
class ClassComposition:
    """Cumulative coverage bands for a stacked area chart."""
    sample_indices: np.ndarray
    bands: Dict[str, Tuple[np.ndarray, np.ndarray]] = field(default_factory=dict)


# =============================================================================
# Core Aggregations
# =============================================================================

def compute_usage_histogram(
    records: Sequence[MetadataRecord],
    pool_size: int
) -> UsageHistogram:
    """
    Count how often each source image 1..pool_size is referenced.

    Sources with zero usage are kept so callers can decide whether to show
    them. Records pointing outside the pool are not counted.

    Args:
        records: Metadata records
        pool_size: Number of source images in the pool

    Returns:
        UsageHistogram with one entry per pool index
    """
    if isinstance(pool_size, bool) or not isinstance(pool_size, (int, np.integer)) or pool_size < 0:
        raise InvalidInput(f"pool_size must be a non-negative integer, got {pool_size!r}")

    tally = Counter(r.source_index for r in records)
    counts = {idx: tally.get(idx, 0) for idx in range(1, pool_size + 1)}

    outside = sorted(idx for idx in tally if idx > pool_size)
    if outside:
        logger.warning(
            f"{sum(tally[i] for i in outside)} records reference sources outside "
            f"the pool of {pool_size}: {outside}"
        )

    return UsageHistogram(counts=counts, pool_size=int(pool_size))


def compute_class_counts(
    records: Sequence[MetadataRecord],
    target_distribution: Dict[str, float],
    class_order: Sequence[str] = CLASS_ORDER
) -> ClassCountSummary:
    """
    Tally samples per target class and derive the expected counts.

    Target count per class is round(share / 100 * total) using Python's
    built-in round, i.e. halves go to the nearest even integer
    (0.5 -> 0, 1.5 -> 2, 2.5 -> 2).

    Args:
        records: Metadata records
        target_distribution: Class -> expected percentage share
        class_order: Classes to report, in axis order

    Returns:
        ClassCountSummary
    """
    missing = [c for c in class_order if c not in target_distribution]
    if missing:
        raise InvalidInput(f"Target distribution has no entry for classes: {missing}")

    total = len(records)
    tally = Counter(r.target_class for r in records)

    actual = {c: tally.get(c, 0) for c in class_order}
    target = {c: int(round(target_distribution[c] / 100 * total)) for c in class_order}

    unlisted = sum(n for c, n in tally.items() if c not in actual)
    if unlisted:
        logger.warning(f"{unlisted} records have target classes outside {list(class_order)}")

    return ClassCountSummary(actual=actual, target=target, total=total, class_order=tuple(class_order))


def describe(values: Iterable[float]) -> CoverageStats:
    """
    Mean, sample standard deviation (ddof=1), min and max.

    A single value has std 0.0. Empty input raises InvalidInput.
    """
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        raise InvalidInput("Cannot compute statistics of an empty collection")

    lo, hi = float(np.min(arr)), float(np.max(arr))
    # Summation rounding can push the mean of equal values past max
    mean = min(max(float(np.mean(arr)), lo), hi)
    std = float(np.std(arr, ddof=1)) if arr.size > 1 else 0.0
    return CoverageStats(mean=mean, std=std, min=lo, max=hi, count=int(arr.size))


def compute_coverage_stats(
    records: Sequence[MetadataRecord],
    class_order: Sequence[str] = CLASS_ORDER
) -> Dict[str, CoverageStats]:
    """
    Per-class statistics of the pixel coverage columns.

    Args:
        records: Metadata records (must be non-empty)
        class_order: Classes to report

    Returns:
        Dict class -> CoverageStats
    """
    if len(records) == 0:
        raise InvalidInput("Coverage statistics are undefined for an empty record set")

    return {c: describe(r.percentage(c) for r in records) for c in class_order}


# =============================================================================
# Quality Metrics
# =============================================================================

def compute_mean_coverage_by_target(
    records: Sequence[MetadataRecord],
    class_order: Sequence[str] = CLASS_ORDER
) -> Dict[str, Optional[float]]:
    """
    Mean coverage of each class over the samples generated for that class.

    Classes with no samples map to None.
    """
    result = {}
    for c in class_order:
        values = [r.percentage(c) for r in records if r.target_class == c]
        result[c] = float(np.mean(values)) if values else None
    return result


def compute_class_composition(
    records: Sequence[MetadataRecord],
    class_order: Sequence[str] = CLASS_ORDER,
    max_samples: int = 100
) -> ClassComposition:
    """
    Cumulative coverage bands of the first max_samples records.

    Each class maps to (lower, upper) arrays; the upper edge of one class is
    the lower edge of the next, so the last upper edge is the per-sample sum.
    """
    if len(records) == 0:
        raise InvalidInput("Class composition is undefined for an empty record set")
    if max_samples < 1:
        raise InvalidInput(f"max_samples must be >= 1, got {max_samples}")

    shown = records[:max_samples]
    n = len(shown)
    lower = np.zeros(n, dtype=float)
    composition = ClassComposition(sample_indices=np.arange(1, n + 1))

    for c in class_order:
        upper = lower + np.array([r.percentage(c) for r in shown], dtype=float)
        composition.bands[c] = (lower, upper)
        lower = upper

    return composition


# =============================================================================
# Augmentation Parameters
# =============================================================================

def parameter_column(records: Sequence[MetadataRecord], name: str) -> np.ndarray:
    """Values of one augmentation parameter across all records."""
    values = [getattr(r, name, None) for r in records]
    missing = sum(v is None for v in values)
    if missing:
        raise InvalidInput(f"{missing} of {len(values)} records have no {name}")
    return np.asarray(values, dtype=float)


def summarize_parameter_ranges(
    records: Sequence[MetadataRecord],
    names: Sequence[str] = AUGMENTATION_PARAMETERS
) -> Dict[str, Tuple[float, float]]:
    """
    (min, max) of every parameter present on all records.

    Parameters missing from any record are skipped.
    """
    if len(records) == 0:
        raise InvalidInput("Parameter ranges are undefined for an empty record set")

    ranges = {}
    for name in names:
        if any(getattr(r, name, None) is None for r in records):
            logger.debug(f"Skipping parameter {name}: not recorded on every sample")
            continue
        column = parameter_column(records, name)
        ranges[name] = (float(column.min()), float(column.max()))
    return ranges


def count_flip_types(records: Sequence[MetadataRecord]) -> Dict[str, int]:
    """Number of samples per flip operation (records without flip_type skipped)."""
    tally = Counter(r.flip_type for r in records if r.flip_type is not None)
    return {flip: tally.get(flip, 0) for flip in FLIP_TYPES}
