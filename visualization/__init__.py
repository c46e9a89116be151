"""
Wound Dataset Visualization Module

Provides matplotlib / seaborn figures for:
- Source usage, class balance and augmentation parameters
- Quality metrics and the summary dashboard
- White regions, channel, bounding box and class area statistics
"""

from .figure_utils import (
    apply_style,
    class_colors,
    class_labels,
    placeholder,
    save_figure,
)

from .distribution_plots import (
    plot_source_class_distribution,
    plot_augmentation_parameters,
    plot_quality_metrics,
    plot_summary_dashboard,
    format_dashboard_text,
)

from .image_plots import (
    plot_white_regions,
    plot_threshold_sweep,
    plot_channel_statistics,
    plot_bounding_box_statistics,
    plot_class_area_statistics,
)

__all__ = [
    # Helpers
    'apply_style',
    'class_colors',
    'class_labels',
    'placeholder',
    'save_figure',
    # Metadata figures
    'plot_source_class_distribution',
    'plot_augmentation_parameters',
    'plot_quality_metrics',
    'plot_summary_dashboard',
    'format_dashboard_text',
    # Pixel figures
    'plot_white_regions',
    'plot_threshold_sweep',
    'plot_channel_statistics',
    'plot_bounding_box_statistics',
    'plot_class_area_statistics',
]
