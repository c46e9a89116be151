"""
Pixel Statistics Figures

Figures built from image / mask pixel data:
- White region overlay per image and threshold sweep
- RGB channel statistics
- Bounding box statistics per wound class
- Class area statistics
"""

import logging
from typing import Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
import seaborn as sns

from analysis.white_regions import WhiteRegionResult, create_white_overlay
from analysis.descriptive_stats import (
    ChannelStatistics,
    BoundingBoxStatistics,
    ClassAreaStatistics,
    find_outliers,
)
from .figure_utils import class_colors, class_labels, placeholder

logger = logging.getLogger(__name__)

CHANNEL_COLORS = {'red': 'red', 'green': 'green', 'blue': 'blue'}
MAX_HISTOGRAM_PIXELS = 200_000


# =============================================================================
# White Regions
# =============================================================================

def plot_white_regions(
    image: np.ndarray,
    result: WhiteRegionResult,
    image_index: Optional[int] = None
) -> Figure:
    """Original image, red white-region overlay and the binary mask."""
    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    name = f"Image {image_index}" if image_index is not None else "Image"

    axes[0].imshow(np.clip(image[:, :, :3], 0, 1))
    axes[0].set_title(f"Original {name}")

    axes[1].imshow(np.clip(image[:, :, :3], 0, 1))
    axes[1].imshow(create_white_overlay(result.mask))
    axes[1].set_title("White Regions (red overlay)")

    axes[2].imshow(result.mask, cmap='gray', vmin=0, vmax=1)
    axes[2].set_title(f"White Mask (threshold={result.threshold})")

    for ax in axes:
        ax.axis('off')

    fig.suptitle(str(result), fontsize=12)
    fig.tight_layout()
    return fig


def plot_threshold_sweep(results: Sequence[WhiteRegionResult]) -> Figure:
    """White coverage percentage against threshold."""
    fig, ax = plt.subplots(figsize=(8, 5))
    if not results:
        placeholder(ax, "No thresholds evaluated", "White Coverage vs Threshold")
        return fig

    ordered = sorted(results, key=lambda r: r.threshold)
    thresholds = [r.threshold for r in ordered]
    percentages = [r.percentage for r in ordered]

    ax.plot(thresholds, percentages, marker='o', color='steelblue', linewidth=2)
    for t, p in zip(thresholds, percentages):
        ax.annotate(f"{p:.2f}%", (t, p), textcoords='offset points', xytext=(0, 8),
                    ha='center', fontsize=9)
    ax.set_xlabel('Threshold')
    ax.set_ylabel('White Pixels (%)')
    ax.set_title('White Coverage vs Threshold', fontweight='bold')
    return fig


# =============================================================================
# Channel Statistics
# =============================================================================

def plot_channel_statistics(
    channel_stats: ChannelStatistics,
    images: Optional[Sequence[np.ndarray]] = None,
    seed: int = 0
) -> Figure:
    """
    Pixel intensity histograms, mean ± std per channel, per-image mean
    boxplots with outlier share and pairwise correlation scatters.
    """
    fig, axes = plt.subplots(2, 3, figsize=(18, 10))
    names = channel_stats.channel_names
    colors = [CHANNEL_COLORS.get(c, 'gray') for c in names]

    # Pixel intensity distribution (subsampled)
    ax = axes[0, 0]
    if images:
        rng = np.random.default_rng(seed)
        for idx, (name, color) in enumerate(zip(names, colors)):
            pixels = np.concatenate([np.asarray(img)[:, :, idx].ravel() for img in images])
            if pixels.size > MAX_HISTOGRAM_PIXELS:
                pixels = rng.choice(pixels, MAX_HISTOGRAM_PIXELS, replace=False)
            sns.histplot(pixels, bins=50, stat='density', element='step', fill=False,
                         color=color, label=name.title(), ax=ax)
        ax.legend()
        ax.set_title('Pixel Intensity Distribution', fontweight='bold')
        ax.set_xlabel('Intensity')
    else:
        placeholder(ax, "Pixel data not provided", 'Pixel Intensity Distribution')

    # Mean ± std
    ax = axes[0, 1]
    means = [channel_stats.global_channel_stats[c]['mean'] for c in names]
    stds = [channel_stats.global_channel_stats[c]['std'] for c in names]
    ax.bar(range(len(names)), means, yerr=stds, capsize=6, color=colors, alpha=0.7)
    ax.set_xticks(range(len(names)))
    ax.set_xticklabels([c.title() for c in names])
    ax.set_ylabel('Mean Intensity')
    ax.set_title('Channel Mean ± Std', fontweight='bold')

    # Per-image means with outliers
    ax = axes[0, 2]
    per_image = [channel_stats.channel_means_per_image[c] for c in names]
    sns.boxplot(data=per_image, palette=colors, ax=ax)
    ax.set_xticks(range(len(names)))
    labels = []
    for name, values in zip(names, per_image):
        _, share = find_outliers(values)
        labels.append(f"{name.title()}\n({share:.1f}% outliers)")
    ax.set_xticklabels(labels)
    ax.set_ylabel('Per-Image Mean')
    ax.set_title('Per-Image Channel Means', fontweight='bold')

    # Correlations
    for ax, ((a, b), r) in zip(axes[1], channel_stats.correlations.items()):
        ax.scatter(channel_stats.channel_means_per_image[a],
                   channel_stats.channel_means_per_image[b], s=16, alpha=0.6, color='slategray')
        label = f"r = {r:.3f}" if r is not None else "r = n/a"
        ax.text(0.05, 0.92, label, transform=ax.transAxes, fontsize=11,
                bbox=dict(boxstyle='round', facecolor='white', alpha=0.8))
        ax.set_xlabel(f"{a.title()} Mean")
        ax.set_ylabel(f"{b.title()} Mean")
        ax.set_title(f"{a.title()} vs {b.title()}", fontweight='bold')

    fig.suptitle(f'Channel Statistics ({channel_stats.num_images} images)',
                 fontsize=16, fontweight='bold')
    fig.tight_layout()
    return fig


# =============================================================================
# Bounding Boxes
# =============================================================================

def plot_bounding_box_statistics(bbox_stats: BoundingBoxStatistics) -> Figure:
    """Width / height / aspect ratio distributions per wound class."""
    fig, axes = plt.subplots(2, 3, figsize=(18, 10))
    classes = list(bbox_stats.bbox_classes)
    colors = class_colors(classes)
    labels = class_labels(classes)
    present = [i for i, c in enumerate(classes) if bbox_stats.statistics[c]['num_components'] > 0]

    panels = (
        (axes[0, 0], bbox_stats.widths, 'Width (pixels)', 'Box Width'),
        (axes[0, 1], bbox_stats.heights, 'Height (pixels)', 'Box Height'),
        (axes[0, 2], bbox_stats.aspect_ratios, 'Aspect Ratio', 'Aspect Ratio'),
    )
    for ax, values, ylabel, title in panels:
        if not present:
            placeholder(ax, "No components found", title)
            continue
        sns.boxplot(data=[values[classes[i]] for i in present],
                    palette=[colors[i] for i in present], ax=ax)
        ax.set_xticks(range(len(present)))
        ax.set_xticklabels([labels[i] for i in present])
        ax.set_ylabel(ylabel)
        ax.set_title(title, fontweight='bold')

    # Mean ± std of width and height
    ax = axes[1, 0]
    if present:
        x = np.arange(len(present))
        stats = [bbox_stats.statistics[classes[i]] for i in present]
        ax.errorbar(x - 0.1, [s['mean_width'] for s in stats], yerr=[s['std_width'] for s in stats],
                    fmt='o', capsize=5, label='Width')
        ax.errorbar(x + 0.1, [s['mean_height'] for s in stats], yerr=[s['std_height'] for s in stats],
                    fmt='s', capsize=5, label='Height')
        ax.set_xticks(x)
        ax.set_xticklabels([labels[i] for i in present])
        ax.set_ylabel('Pixels')
        ax.set_title('Mean ± Std Dimensions', fontweight='bold')
        ax.legend()
    else:
        placeholder(ax, "No components found", 'Mean ± Std Dimensions')

    # Width vs height
    ax = axes[1, 1]
    for i in present:
        c = classes[i]
        ax.scatter(bbox_stats.widths[c], bbox_stats.heights[c], s=16, alpha=0.6,
                   color=colors[i], label=labels[i])
    if present:
        ax.legend()
    ax.set_xlabel('Width (pixels)')
    ax.set_ylabel('Height (pixels)')
    ax.set_title('Width vs Height', fontweight='bold')

    # Components per class
    ax = axes[1, 2]
    counts = [bbox_stats.statistics[c]['num_components'] for c in classes]
    ax.bar(range(len(classes)), counts, color=colors)
    ax.set_xticks(range(len(classes)))
    ax.set_xticklabels(labels)
    ax.set_ylabel('Components')
    ax.set_title('Connected Components per Class', fontweight='bold')

    fig.suptitle('Bounding Box Statistics', fontsize=16, fontweight='bold')
    fig.tight_layout()
    return fig


# =============================================================================
# Class Areas
# =============================================================================

def plot_class_area_statistics(area_stats: ClassAreaStatistics) -> Figure:
    """Mean area per class, normalized shares and total pixel proportions."""
    fig, axes = plt.subplots(1, 3, figsize=(18, 6))
    classes = list(area_stats.classes)
    colors = class_colors(classes)
    labels = class_labels(classes)
    x = np.arange(len(classes))

    ax = axes[0]
    ax.bar(x, [area_stats.statistics[c]['mean'] for c in classes],
           yerr=[area_stats.statistics[c]['std'] for c in classes],
           capsize=5, color=colors, alpha=0.8)
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_ylabel('Pixels per Image')
    ax.set_title('Mean Class Area ± Std', fontweight='bold')

    ax = axes[1]
    ax.bar(x, [area_stats.normalized_statistics[c]['mean'] for c in classes],
           yerr=[area_stats.normalized_statistics[c]['std'] for c in classes],
           capsize=5, color=colors, alpha=0.8)
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_ylabel('Normalized Area')
    ax.set_title('Normalized Class Area', fontweight='bold')

    ax = axes[2]
    proportions = area_stats.total_proportions()
    nonzero = [(c, color, p) for c, color, p in zip(classes, colors, proportions.values()) if p > 0]
    if nonzero:
        ax.pie([p for _, _, p in nonzero], labels=class_labels([c for c, _, _ in nonzero]),
               colors=[color for _, color, _ in nonzero], autopct='%1.1f%%',
               wedgeprops=dict(edgecolor='white'))
        ax.set_aspect('equal')
        ax.set_title('Share of All Pixels', fontweight='bold')
    else:
        placeholder(ax, "No labelled pixels", 'Share of All Pixels')

    fig.suptitle('Class Area Statistics', fontsize=16, fontweight='bold')
    fig.tight_layout()
    return fig
