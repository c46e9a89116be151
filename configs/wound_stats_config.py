"""
Wound Dataset Statistics Configuration

Centralized configuration for data locations, class definitions,
white region detection and plotting.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional, Tuple
import json
import yaml

from data.wound_metadata import (
    CLASS_ORDER,
    DEFAULT_TARGET_DISTRIBUTION,
    validate_target_distribution,
)
from utils.errors import InvalidInput
from utils.paths import candidate_paths


@dataclass
class PathsConfig:
    """Data location configuration."""
    # Dataset root (Windows or WSL form; both are tried)
    base_path: str = "C:/Syncthing/Datasets"
    metadata_subdir: str = "augmented_balanced_metadata"
    summary_filename: str = "augmentation_summary.json"

    # Image / mask directories for pixel statistics (optional)
    image_dir: str = ""
    mask_dir: str = ""

    # Output
    output_dir: str = "./analysis_output"
    log_dir: str = ""  # Empty = console only

    def metadata_dir_candidates(self) -> List[str]:
        """Metadata directory under every form of base_path."""
        candidates = []
        for base in candidate_paths(self.base_path):
            sep = '\\' if '\\' in base else '/'
            candidates.append(base.rstrip('/\\') + sep + self.metadata_subdir)
        return candidates


@dataclass
class DatasetConfig:
    """Class definitions and dataset shape."""
    class_order: List[str] = field(default_factory=lambda: list(CLASS_ORDER))
    num_sources: Optional[int] = None  # Source pool size; None = use the summary file's value
    target_distribution: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_TARGET_DISTRIBUTION)
    )
    augmented_size: Tuple[int, int] = (100, 50)  # (height, width)


@dataclass
class WhiteRegionConfig:
    """White region detection configuration."""
    threshold: float = 0.8  # RGB values >= this are considered white
    min_region_size: int = 50  # Minimum pixels for a valid white region
    remove_small_regions: bool = False
    sample_images: int = 5  # Images rendered individually
    sweep_thresholds: List[float] = field(default_factory=lambda: [0.9, 0.85, 0.8, 0.75, 0.7])


@dataclass
class PlotConfig:
    """Plot rendering configuration."""
    dpi: int = 150
    style: str = "whitegrid"  # seaborn style
    show: bool = False  # Display figures after saving
    stacked_samples: int = 100  # Samples in the class composition chart
    image_format: str = "png"


@dataclass
class WoundStatsConfig:
    """
    Complete configuration for a statistics run.

    Usage:
        config = WoundStatsConfig()
        config.white_regions.threshold = 0.85

        # Or load from file
        config = load_config_from_file("config.yaml")
    """
    paths: PathsConfig = field(default_factory=PathsConfig)
    dataset: DatasetConfig = field(default_factory=DatasetConfig)
    white_regions: WhiteRegionConfig = field(default_factory=WhiteRegionConfig)
    plots: PlotConfig = field(default_factory=PlotConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        dataset = asdict(self.dataset)
        dataset['augmented_size'] = list(self.dataset.augmented_size)
        return {
            'paths': asdict(self.paths),
            'dataset': dataset,
            'white_regions': asdict(self.white_regions),
            'plots': asdict(self.plots),
        }

    def save_yaml(self, path: str):
        """Save configuration to YAML file."""
        with open(path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    def save_json(self, path: str):
        """Save configuration to JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def validate(self) -> "WoundStatsConfig":
        """Raise InvalidInput if any value is out of range."""
        missing = [c for c in CLASS_ORDER if c not in self.dataset.class_order]
        if missing:
            raise InvalidInput(f"class_order is missing classes: {missing}")
        validate_target_distribution(self.dataset.target_distribution, self.dataset.class_order)
        if self.dataset.num_sources is not None and self.dataset.num_sources < 1:
            raise InvalidInput(f"num_sources must be >= 1, got {self.dataset.num_sources}")
        if not 0.0 <= self.white_regions.threshold <= 1.0:
            raise InvalidInput(f"white_regions.threshold must be in [0, 1], got {self.white_regions.threshold}")
        if self.white_regions.min_region_size < 1:
            raise InvalidInput("white_regions.min_region_size must be >= 1")
        if self.plots.dpi < 1:
            raise InvalidInput("plots.dpi must be >= 1")
        return self

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "WoundStatsConfig":
        """Create config from dictionary."""
        config_dict = config_dict or {}
        dataset_dict = dict(config_dict.get('dataset', {}))
        if 'augmented_size' in dataset_dict:
            dataset_dict['augmented_size'] = tuple(dataset_dict['augmented_size'])

        return cls(
            paths=PathsConfig(**config_dict.get('paths', {})),
            dataset=DatasetConfig(**dataset_dict),
            white_regions=WhiteRegionConfig(**config_dict.get('white_regions', {})),
            plots=PlotConfig(**config_dict.get('plots', {})),
        )


def get_default_config() -> WoundStatsConfig:
    """Get default configuration."""
    return WoundStatsConfig()


def load_config_from_file(path: str) -> WoundStatsConfig:
    """Load configuration from YAML or JSON file."""
    with open(path, 'r') as f:
        if path.endswith('.yaml') or path.endswith('.yml'):
            config_dict = yaml.safe_load(f)
        else:
            config_dict = json.load(f)

    return WoundStatsConfig.from_dict(config_dict).validate()


# Preset configurations for different scenarios
def get_debug_config() -> WoundStatsConfig:
    """Get configuration for quick local checks (few images, low dpi)."""
    config = WoundStatsConfig()
    config.paths.output_dir = "./analysis_output_debug"
    config.white_regions.sample_images = 1
    config.plots.dpi = 72
    config.plots.stacked_samples = 20
    return config


def get_explicit_config() -> WoundStatsConfig:
    """Get configuration for the explicit-metadata (unbalanced) augmentation run."""
    config = WoundStatsConfig()
    config.paths.metadata_subdir = "augmented_explicit_metadata"
    return config
