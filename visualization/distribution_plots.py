"""
Metadata Distribution Figures

Figures built from the augmentation summary records:
- Source image usage & class distribution
- Augmentation parameter overview (2 rows x 6 panels)
- Quality metrics (class composition, mean coverage, crops, growth)
- Summary dashboard (statistics text + class pie chart)
"""

import logging
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.gridspec as gridspec
from matplotlib.figure import Figure

from analysis.aggregation import (
    UsageHistogram,
    ClassCountSummary,
    CoverageStats,
    ClassComposition,
    parameter_column,
)
from data.wound_metadata import CLASS_ORDER, FLIP_TYPES, MetadataRecord
from .figure_utils import class_colors, class_labels, placeholder

logger = logging.getLogger(__name__)

FLIP_LABELS = {'flipx': 'FlipX', 'flipy': 'FlipY', 'noop': 'NoOp'}
FLIP_COLORS = {'flipx': 'red', 'flipy': 'blue', 'noop': 'green'}

# (field, title, y label, reference line or None, color)
PARAMETER_PANELS = [
    ('scale_factor', 'Scale Factor', 'Scale Factor', 1.0, 'blue'),
    ('rotation_angle', 'Rotation Angle', 'Degrees', 0.0, 'orange'),
    ('brightness_factor', 'Brightness Factor', 'Brightness Multiplier', 1.0, 'gold'),
    ('saturation_offset', 'Saturation Offset', 'Saturation Offset', 0.0, 'purple'),
    ('blur_sigma', 'Blur Sigma (σ)', 'Sigma Value', None, 'teal'),
    ('blur_kernel_size', 'Blur Kernel Size', 'Kernel Size', None, 'cyan'),
    ('smart_crop_y_start', 'Smart Crop Y Position', 'Y Position (pixels)', None, 'magenta'),
    ('smart_crop_x_start', 'Smart Crop X Position', 'X Position (pixels)', None, 'brown'),
    ('shear_x_angle', 'Shear X Angle', 'Degrees', 0.0, 'red'),
    ('shear_y_angle', 'Shear Y Angle', 'Degrees', 0.0, 'blue'),
]


# =============================================================================
# Source Usage & Class Distribution
# =============================================================================

def draw_usage_bars(ax, usage: UsageHistogram, horizontal: bool = False, annotate: bool = False):
    """Bar chart of used sources with the average usage as a dashed line."""
    used = usage.used_sources
    if not used:
        placeholder(ax, "No source images used", "Source Image Usage Distribution")
        return

    counts = [usage.counts[i] for i in used]
    avg = usage.mean_usage
    if horizontal:
        ax.barh(used, counts, color='steelblue', edgecolor='black', linewidth=0.5)
        ax.axvline(avg, color='red', linestyle='--', linewidth=2, label=f"Average: {avg:.1f}")
        ax.set_xlabel('Number of Times Used')
        ax.set_ylabel('Original Image Index')
        if annotate:
            for idx, count in zip(used, counts):
                ax.text(count + 0.3, idx, str(count), va='center', fontsize=8)
    else:
        ax.bar(used, counts, color='steelblue', edgecolor='black', linewidth=0.5)
        ax.axhline(avg, color='red', linestyle='--', linewidth=2, label=f"Average: {avg:.1f}")
        ax.set_xlabel('Source Image Index')
        ax.set_ylabel('Usage Count')
    ax.legend(loc='upper right')


def draw_class_counts(ax, class_counts: ClassCountSummary):
    """Grouped bars of actual vs target sample counts."""
    order = class_counts.class_order
    x = np.arange(len(order))
    width = 0.3
    ax.bar(x - width / 2, [class_counts.actual[c] for c in order], width,
           color='steelblue', label='Actual')
    ax.bar(x + width / 2, [class_counts.target[c] for c in order], width,
           color='coral', label='Target')
    ax.set_xticks(x)
    ax.set_xticklabels(class_labels(order))
    ax.set_xlabel('Class')
    ax.set_ylabel('Sample Count')
    ax.set_title('Target Class Distribution', fontweight='bold')
    ax.legend(loc='upper right')


def draw_coverage_ranges(ax, coverage: Dict[str, CoverageStats], class_order: Sequence[str]):
    """Range line, mean ± std box and mean marker per class."""
    for i, (c, color) in enumerate(zip(class_order, class_colors(class_order))):
        stats = coverage[c]
        lo, hi = stats.mean - stats.std, stats.mean + stats.std
        ax.plot([i, i], [stats.min, stats.max], color=color, linewidth=2)
        ax.plot([i - 0.2, i + 0.2, i + 0.2, i - 0.2, i - 0.2],
                [lo, lo, hi, hi, lo], color=color, linewidth=2)
        ax.scatter([i], [stats.mean], color=color, s=80, zorder=3)
    ax.set_xticks(range(len(class_order)))
    ax.set_xticklabels(class_labels(class_order))
    ax.set_xlabel('Class')
    ax.set_ylabel('Coverage (%)')
    ax.set_title('Pixel Coverage Distribution by Class', fontweight='bold')


def plot_source_class_distribution(
    usage: UsageHistogram,
    class_counts: ClassCountSummary,
    coverage: Dict[str, CoverageStats],
    class_order: Sequence[str] = CLASS_ORDER
) -> Figure:
    """
    Source image usage histogram, actual vs target class counts and
    per-class pixel coverage ranges.
    """
    fig = plt.figure(figsize=(16, 10))
    gs = gridspec.GridSpec(2, 2, figure=fig, hspace=0.3)

    ax_source = fig.add_subplot(gs[0, :])
    draw_usage_bars(ax_source, usage)
    ax_source.set_title('Source Image Usage Distribution', fontweight='bold')

    draw_class_counts(fig.add_subplot(gs[1, 0]), class_counts)
    draw_coverage_ranges(fig.add_subplot(gs[1, 1]), coverage, class_order)

    fig.suptitle('Source Image Usage & Class Distribution', fontsize=18, fontweight='bold')
    return fig


# =============================================================================
# Augmentation Parameters
# =============================================================================

def _has_field(records: Sequence[MetadataRecord], name: str) -> bool:
    return len(records) > 0 and all(getattr(r, name) is not None for r in records)


def plot_augmentation_parameters(
    records: Sequence[MetadataRecord],
    usage: UsageHistogram,
    title: str = "Augmentation Parameter Analysis"
) -> Figure:
    """
    Source usage plus one scatter panel per augmentation parameter against
    the source image index. Parameters not recorded on every sample are
    shown as empty panels.
    """
    fig, axes = plt.subplots(2, 6, figsize=(36, 10))
    axes = axes.ravel()
    source_indices = np.array([r.source_index for r in records], dtype=int)

    draw_usage_bars(axes[0], usage, horizontal=True, annotate=True)
    axes[0].set_title('Source Image Usage Frequency', fontweight='bold')

    for ax, (name, panel_title, ylabel, reference, color) in zip(axes[1:], PARAMETER_PANELS):
        if not _has_field(records, name):
            placeholder(ax, f"{name} not recorded", panel_title)
            continue
        values = parameter_column(records, name)
        ax.scatter(source_indices, values, color=color, s=16)
        if reference is not None:
            ax.axhline(reference, color='gray', linestyle='--', linewidth=2)
        if name == 'blur_kernel_size':
            ax.set_yticks([3, 5, 7])
        ax.set_title(panel_title, fontweight='bold')
        ax.set_xlabel('Source Image ID')
        ax.set_ylabel(ylabel)

    ax_flip = axes[len(PARAMETER_PANELS) + 1]
    if _has_field(records, 'flip_type'):
        positions = {flip: i + 1 for i, flip in enumerate(FLIP_TYPES)}
        flips = [r.flip_type for r in records]
        ax_flip.scatter(source_indices, [positions[f] for f in flips],
                        color=[FLIP_COLORS[f] for f in flips], s=16)
        ax_flip.set_yticks(list(positions.values()))
        ax_flip.set_yticklabels([FLIP_LABELS[f] for f in FLIP_TYPES])
        ax_flip.set_title('Flip Type', fontweight='bold')
        ax_flip.set_xlabel('Source Image ID')
        ax_flip.set_ylabel('Flip Operation')
    else:
        placeholder(ax_flip, "flip_type not recorded", 'Flip Type')

    fig.suptitle(f"{title} - {len(records)} Samples", fontsize=24, fontweight='bold')
    fig.tight_layout()
    return fig


# =============================================================================
# Quality Metrics
# =============================================================================

def plot_quality_metrics(
    records: Sequence[MetadataRecord],
    composition: ClassComposition,
    mean_by_target: Dict[str, Optional[float]],
    class_order: Sequence[str] = CLASS_ORDER
) -> Figure:
    """
    Class composition per sample (stacked), mean coverage by target class,
    smart crop positions and actual FG% vs size multiplier.
    """
    fig = plt.figure(figsize=(16, 13))
    gs = gridspec.GridSpec(3, 2, figure=fig, hspace=0.35)
    colors = class_colors(class_order)
    labels = class_labels(class_order)

    # Stacked class composition
    ax_stack = fig.add_subplot(gs[0, :])
    x = composition.sample_indices
    for c, color, label in zip(class_order, colors, labels):
        lower, upper = composition.bands[c]
        ax_stack.fill_between(x, lower, upper, color=color, alpha=0.8, label=label)
    ax_stack.set_title(f'Class Composition per Sample (first {len(x)} samples)', fontweight='bold')
    ax_stack.set_xlabel('Sample Index')
    ax_stack.set_ylabel('Coverage (%)')
    ax_stack.legend(loc='upper right', ncol=2)

    # Mean coverage by target class; classes without samples stay empty
    ax_mean = fig.add_subplot(gs[1, 0])
    heights = [mean_by_target.get(c) or 0.0 for c in class_order]
    bars = ax_mean.bar(range(len(class_order)), heights, color=colors)
    for bar, c in zip(bars, class_order):
        if mean_by_target.get(c) is None:
            ax_mean.text(bar.get_x() + bar.get_width() / 2, 0.5, 'n/a',
                         ha='center', va='bottom', fontsize=9, color='dimgray')
    ax_mean.set_xticks(range(len(class_order)))
    ax_mean.set_xticklabels(labels)
    ax_mean.set_title('Mean Pixel Coverage by Target Class', fontweight='bold')
    ax_mean.set_xlabel('Target Class')
    ax_mean.set_ylabel('Mean Coverage (%)')

    class_numbers = [class_order.index(r.target_class) if r.target_class in class_order else -1
                     for r in records]

    # Smart crop positions
    ax_crop = fig.add_subplot(gs[1, 1])
    if _has_field(records, 'smart_crop_x_start') and _has_field(records, 'smart_crop_y_start'):
        ax_crop.scatter(parameter_column(records, 'smart_crop_x_start'),
                        parameter_column(records, 'smart_crop_y_start'),
                        c=class_numbers, cmap='viridis', s=8, alpha=0.5)
        ax_crop.set_title('Smart Crop Positions', fontweight='bold')
        ax_crop.set_xlabel('X Start')
        ax_crop.set_ylabel('Y Start')
    else:
        placeholder(ax_crop, "Smart crop positions not recorded", 'Smart Crop Positions')

    # Growth relationship
    ax_growth = fig.add_subplot(gs[2, :])
    if _has_field(records, 'size_multiplier') and _has_field(records, 'actual_fg_percentage'):
        ax_growth.scatter(parameter_column(records, 'size_multiplier'),
                          parameter_column(records, 'actual_fg_percentage'),
                          c=class_numbers, cmap='viridis', s=24, alpha=0.6)
        if _has_field(records, 'fg_threshold_used'):
            thresholds = sorted(set(parameter_column(records, 'fg_threshold_used')))
            shown = [t for t in thresholds if t < 100.0]
            for i, t in enumerate(shown):
                ax_growth.axhline(t, color='red', linestyle='--', linewidth=1.5,
                                  label='FG Thresholds' if i == 0 else None)
            if shown:
                ax_growth.legend(loc='upper right')
        ax_growth.set_title('Actual FG% vs Size Multiplier (Growth Relationship)', fontweight='bold')
        ax_growth.set_xlabel('Size Multiplier (×)')
        ax_growth.set_ylabel('Actual FG%')
    else:
        placeholder(ax_growth, "Growth metrics not recorded",
                    'Actual FG% vs Size Multiplier (Growth Relationship)')

    fig.suptitle('Quality Metrics Analysis', fontsize=18, fontweight='bold')
    return fig


# =============================================================================
# Summary Dashboard
# =============================================================================

def format_dashboard_text(
    records: Sequence[MetadataRecord],
    class_counts: ClassCountSummary,
    coverage: Dict[str, CoverageStats],
    parameter_ranges: Dict[str, Tuple[float, float]],
    num_sources: int,
    augmented_size: Tuple[int, int]
) -> str:
    """Plain-text statistics block shown on the dashboard."""
    rule = '━' * 48
    unique_sources = len({r.source_index for r in records})
    lines = [
        "Dataset Statistics:",
        rule,
        f"Total Augmented Samples: {len(records)}",
        f"Original Source Images: {num_sources}",
        f"Unique Sources Used: {unique_sources}",
        f"Image Size: {augmented_size[0]}×{augmented_size[1]} pixels",
        "",
    ]

    range_rows = [
        ('scale_factor', 'Scale Factor', 2, ''),
        ('rotation_angle', 'Rotation', 1, '°'),
        ('shear_x_angle', 'Shear X', 1, '°'),
        ('shear_y_angle', 'Shear Y', 1, '°'),
        ('brightness_factor', 'Brightness', 2, ''),
        ('saturation_offset', 'Saturation', 2, ''),
        ('blur_sigma', 'Blur σ', 2, ''),
    ]
    present = [row for row in range_rows if row[0] in parameter_ranges]
    if present:
        lines += ["Parameter Ranges:", rule]
        for name, label, digits, unit in present:
            lo, hi = parameter_ranges[name]
            lines.append(f"{label}: {lo:.{digits}f}{unit} - {hi:.{digits}f}{unit}")
        lines.append("")

    lines += ["Class Distribution:", rule]
    for c in class_counts.class_order:
        lines.append(
            f"{c.title()}: {class_counts.actual[c]} samples "
            f"({coverage[c].mean:.2f}% mean coverage)"
        )
    return "\n".join(lines)


def plot_summary_dashboard(
    records: Sequence[MetadataRecord],
    class_counts: ClassCountSummary,
    coverage: Dict[str, CoverageStats],
    parameter_ranges: Dict[str, Tuple[float, float]],
    num_sources: int,
    augmented_size: Tuple[int, int] = (100, 50)
) -> Figure:
    """Statistics text panel and pie chart of the actual class counts."""
    fig, (ax_text, ax_pie) = plt.subplots(1, 2, figsize=(14, 9))

    ax_text.axis('off')
    text = format_dashboard_text(records, class_counts, coverage, parameter_ranges,
                                 num_sources, augmented_size)
    ax_text.text(0.02, 0.98, text, transform=ax_text.transAxes, fontsize=11,
                 verticalalignment='top', fontfamily='monospace',
                 bbox=dict(boxstyle='round', facecolor='#f8f9fa', edgecolor='#dee2e6'))

    order = class_counts.class_order
    sizes = [class_counts.actual[c] for c in order]
    nonzero = [(c, s) for c, s in zip(order, sizes) if s > 0]
    if nonzero:
        ax_pie.pie([s for _, s in nonzero],
                   colors=class_colors([c for c, _ in nonzero]),
                   autopct='%1.1f%%', startangle=0, counterclock=True,
                   wedgeprops=dict(edgecolor='white'))
        ax_pie.set_aspect('equal')
        ax_pie.set_title('Target Class Distribution', fontweight='bold')
        legend = " | ".join(f"{c}: {class_counts.actual[c]}" for c in order)
        ax_pie.text(0.5, -0.05, legend, transform=ax_pie.transAxes, ha='center', fontsize=10)
    else:
        placeholder(ax_pie, "No samples", 'Target Class Distribution')

    fig.suptitle('Augmentation Summary Dashboard', fontsize=18, fontweight='bold')
    return fig
