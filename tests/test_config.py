"""
Unit tests for statistics run configuration.

Run with: pytest tests/test_config.py -v
"""

import pytest
import json
import yaml
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from configs import (
    WoundStatsConfig,
    get_default_config,
    get_debug_config,
    get_explicit_config,
    load_config_from_file,
)
from utils.errors import InvalidInput


class TestWoundStatsConfig:
    """Test config defaults, validation and file round trips."""

    def test_defaults(self):
        config = get_default_config()

        assert config.white_regions.threshold == 0.8
        assert config.dataset.num_sources is None
        assert config.dataset.augmented_size == (100, 50)
        assert sum(config.dataset.target_distribution.values()) == pytest.approx(100.0)
        assert config.plots.dpi == 150
        config.validate()

    def test_yaml_round_trip(self, tmp_path):
        config = get_default_config()
        config.white_regions.threshold = 0.85
        config.paths.image_dir = "/data/images"
        path = tmp_path / "config.yaml"
        config.save_yaml(str(path))

        loaded = load_config_from_file(str(path))
        assert loaded == config
        assert isinstance(loaded.dataset.augmented_size, tuple)

    def test_json_round_trip(self, tmp_path):
        config = get_debug_config()
        path = tmp_path / "config.json"
        config.save_json(str(path))

        with open(path) as f:
            assert json.load(f)['plots']['dpi'] == 72
        assert load_config_from_file(str(path)) == config

    def test_partial_file_uses_defaults(self, tmp_path):
        path = tmp_path / "partial.yaml"
        path.write_text(yaml.safe_dump({'white_regions': {'threshold': 0.7}}))

        config = load_config_from_file(str(path))
        assert config.white_regions.threshold == 0.7
        assert config.paths.summary_filename == "augmentation_summary.json"

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config_from_file(str(path)) == WoundStatsConfig()

    def test_shipped_default_config(self):
        path = Path(__file__).parent.parent / "configs" / "default_config.yaml"
        assert load_config_from_file(str(path)) == get_default_config()

    @pytest.mark.parametrize("section,key,value", [
        ('white_regions', 'threshold', 1.2),
        ('white_regions', 'min_region_size', 0),
        ('dataset', 'num_sources', 0),
        ('plots', 'dpi', 0),
    ])
    def test_invalid_values(self, section, key, value):
        config = get_default_config()
        setattr(getattr(config, section), key, value)
        with pytest.raises(InvalidInput):
            config.validate()

    def test_distribution_must_sum_to_100(self):
        config = get_default_config()
        config.dataset.target_distribution['scar'] = 50.0
        with pytest.raises(InvalidInput, match="sum to 100"):
            config.validate()

    def test_metadata_candidates(self):
        config = get_explicit_config()
        candidates = config.paths.metadata_dir_candidates()

        assert candidates == [
            "C:/Syncthing/Datasets/augmented_explicit_metadata",
            "/mnt/c/Syncthing/Datasets/augmented_explicit_metadata",
        ]
