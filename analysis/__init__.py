"""
Wound Dataset Analysis Module

Provides the statistics behind every chart:
- Metadata aggregation (usage, class balance, coverage)
- White region extraction
- Channel, bounding box and class area statistics
"""

from .aggregation import (
    UsageHistogram,
    ClassCountSummary,
    CoverageStats,
    ClassComposition,
    compute_usage_histogram,
    compute_class_counts,
    compute_coverage_stats,
    compute_mean_coverage_by_target,
    compute_class_composition,
    summarize_parameter_ranges,
    parameter_column,
    count_flip_types,
    describe,
)

from .white_regions import (
    WhiteRegionResult,
    WhiteRegionSummary,
    extract_white_regions,
    summarize_white_regions,
    summarize_percentages,
    threshold_sweep,
    remove_small_regions,
    channel_ranges,
    create_white_overlay,
    WHITE_THRESHOLD,
)

from .descriptive_stats import (
    ChannelStatistics,
    BoundingBoxStatistics,
    ClassAreaStatistics,
    compute_skewness,
    find_outliers,
    oriented_box,
    compute_channel_statistics,
    compute_bounding_box_statistics,
    compute_class_area_statistics,
)

__all__ = [
    # Aggregation
    'UsageHistogram',
    'ClassCountSummary',
    'CoverageStats',
    'ClassComposition',
    'compute_usage_histogram',
    'compute_class_counts',
    'compute_coverage_stats',
    'compute_mean_coverage_by_target',
    'compute_class_composition',
    'summarize_parameter_ranges',
    'parameter_column',
    'count_flip_types',
    'describe',
    # White regions
    'WhiteRegionResult',
    'WhiteRegionSummary',
    'extract_white_regions',
    'summarize_white_regions',
    'summarize_percentages',
    'threshold_sweep',
    'remove_small_regions',
    'channel_ranges',
    'create_white_overlay',
    'WHITE_THRESHOLD',
    # Descriptive statistics
    'ChannelStatistics',
    'BoundingBoxStatistics',
    'ClassAreaStatistics',
    'compute_skewness',
    'find_outliers',
    'oriented_box',
    'compute_channel_statistics',
    'compute_bounding_box_statistics',
    'compute_class_area_statistics',
]
