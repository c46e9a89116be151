"""
Shared figure helpers: styling, saving and class color lookup.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union, List

import matplotlib.pyplot as plt
from matplotlib.figure import Figure
import seaborn as sns

from data.wound_metadata import CLASS_COLORS, CLASS_DISPLAY_NAMES
from utils.utils import ensure_dir

logger = logging.getLogger(__name__)


def apply_style(style: str = "whitegrid"):
    """Set the seaborn style used by every figure."""
    sns.set_style(style)


def class_colors(class_order: Sequence[str]) -> List[str]:
    return [CLASS_COLORS.get(c, 'gray') for c in class_order]


def class_labels(class_order: Sequence[str]) -> List[str]:
    return [CLASS_DISPLAY_NAMES.get(c, c.title()) for c in class_order]


def placeholder(ax, message: str, title: Optional[str] = None):
    """Mark an axis whose data is unavailable."""
    ax.text(0.5, 0.5, message, ha='center', va='center', fontsize=12,
            transform=ax.transAxes, color='dimgray')
    ax.set_xticks([])
    ax.set_yticks([])
    if title:
        ax.set_title(title, fontweight='bold')


def save_figure(
    fig: Figure,
    output_path: Union[str, Path],
    dpi: int = 150,
    close: bool = True
) -> str:
    """Save a figure (creating parent directories) and optionally close it."""
    output_path = Path(output_path)
    ensure_dir(output_path.parent)
    fig.savefig(output_path, dpi=dpi, bbox_inches='tight', facecolor='white')
    if close:
        plt.close(fig)
    logger.info(f"Saved: {output_path}")
    return str(output_path)
