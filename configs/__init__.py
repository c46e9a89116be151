"""
Wound Dataset Statistics Configuration Module

Provides configuration classes for:
- Data locations
- Class definitions and target distribution
- White region detection
- Plot rendering
"""

from .wound_stats_config import (
    WoundStatsConfig,
    PathsConfig,
    DatasetConfig,
    WhiteRegionConfig,
    PlotConfig,
    get_default_config,
    get_debug_config,
    get_explicit_config,
    load_config_from_file,
)

__all__ = [
    'WoundStatsConfig',
    'PathsConfig',
    'DatasetConfig',
    'WhiteRegionConfig',
    'PlotConfig',
    'get_default_config',
    'get_debug_config',
    'get_explicit_config',
    'load_config_from_file',
]
