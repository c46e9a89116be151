"""
End-to-end tests for the command line entry points.

Run with: pytest tests/test_cli.py -v
"""

import pytest
import json
import numpy as np
import yaml
from PIL import Image
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

import analyze_dataset
import explore_white_regions
from conftest import make_record


def write_summary(path, records, num_sources=6):
    payload = {
        'all_metadata': [r.to_dict() for r in records],
        'target_distribution': {'scar': 15, 'redness': 15, 'hematoma': 30,
                                'necrosis': 5, 'background': 35},
        'num_sources': num_sources,
    }
    path.write_text(json.dumps(payload))
    return path


def write_images(tmp_path, count=2):
    image_dir = tmp_path / "images"
    mask_dir = tmp_path / "masks"
    image_dir.mkdir()
    mask_dir.mkdir()
    rng = np.random.default_rng(5)
    for i in range(count):
        rgb = (rng.random((10, 12, 3)) * 255).astype(np.uint8)
        Image.fromarray(rgb).save(image_dir / f"wound_{i:03d}.png")
        labels = rng.integers(0, 5, size=(10, 12)).astype(np.uint8)
        Image.fromarray(labels).save(mask_dir / f"wound_{i:03d}.png")
    return image_dir, mask_dir


class TestAnalyzeDataset:
    """Test analyze_dataset.main exit codes and outputs."""

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path, augmented_records):
        """Setup test fixtures."""
        self.tmp_path = tmp_path
        self.output_dir = tmp_path / "out"
        self.summary = write_summary(tmp_path / "augmentation_summary.json", augmented_records)

    def run(self, *args):
        return analyze_dataset.main(list(args) + ['--output_dir', str(self.output_dir)])

    def test_source_class(self):
        assert self.run('source-class', '--summary', str(self.summary)) == 0
        assert (self.output_dir / "source_class_distribution.png").is_file()

        with open(self.output_dir / "statistics_report.json") as f:
            report = json.load(f)
        assert report['source_class']['total_samples'] == 20
        assert report['source_class']['target_counts']['hematoma'] == 6

    def test_summary_pool_size_above_default(self):
        records = [make_record(source_index=i + 1) for i in range(80)]
        summary = write_summary(self.tmp_path / "large_summary.json", records, num_sources=80)

        assert self.run('source-class', '--summary', str(summary)) == 0

        with open(self.output_dir / "statistics_report.json") as f:
            report = json.load(f)['source_class']
        assert report['pool_size'] == 80
        assert report['used_sources'] == 80
        assert report['total_samples'] == 80

    def test_config_pool_size_overrides_summary(self):
        config_path = self.tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({'dataset': {'num_sources': 9}}))

        assert self.run('source-class', '--summary', str(self.summary),
                        '--config', str(config_path)) == 0
        with open(self.output_dir / "statistics_report.json") as f:
            assert json.load(f)['source_class']['pool_size'] == 9

    def test_nested_output_dir_created(self):
        nested = self.tmp_path / "runs" / "2024" / "stats"
        code = analyze_dataset.main(['dashboard', '--summary', str(self.summary),
                                     '--output_dir', str(nested)])
        assert code == 0
        assert (nested / "summary_dashboard.png").is_file()

    def test_all_metadata_only(self):
        assert self.run('all', '--summary', str(self.summary)) == 0
        for name in ("source_class_distribution", "augmentation_parameters",
                     "quality_metrics", "summary_dashboard"):
            assert (self.output_dir / f"{name}.png").is_file()
        assert not (self.output_dir / "channel_statistics.png").exists()

    def test_all_with_images(self):
        image_dir, mask_dir = write_images(self.tmp_path)
        code = self.run('all', '--summary', str(self.summary),
                        '--image_dir', str(image_dir), '--mask_dir', str(mask_dir),
                        '--threshold', '0.7')
        assert code == 0
        for name in ("white_regions_wound_000", "white_threshold_sweep", "channel_statistics",
                     "bounding_box_statistics", "class_area_statistics"):
            assert (self.output_dir / f"{name}.png").is_file()

    def test_white_summary_uses_cleaned_masks(self):
        image_dir = self.tmp_path / "speckled"
        image_dir.mkdir()
        rgb = np.zeros((10, 10, 3), dtype=np.uint8)
        rgb[0:3, 0:3] = 255
        rgb[8, 8] = 255
        Image.fromarray(rgb).save(image_dir / "wound_000.png")
        config_path = self.tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({
            'paths': {'image_dir': str(image_dir)},
            'white_regions': {'remove_small_regions': True, 'min_region_size': 5},
        }))

        assert self.run('white-regions', '--config', str(config_path)) == 0
        with open(self.output_dir / "statistics_report.json") as f:
            summary = json.load(f)['white_regions']
        assert summary['count'] == 1
        assert summary['max'] == pytest.approx(9.0)
        assert summary['mean'] == pytest.approx(9.0)

    def test_config_resolves_metadata_dir(self):
        metadata_dir = self.tmp_path / "meta"
        metadata_dir.mkdir()
        self.summary.rename(metadata_dir / "augmentation_summary.json")
        config_path = self.tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({
            'paths': {'base_path': str(self.tmp_path), 'metadata_subdir': 'meta'},
            'plots': {'dpi': 40},
        }))

        assert self.run('dashboard', '--config', str(config_path)) == 0
        assert (self.output_dir / "summary_dashboard.png").is_file()

    def test_missing_summary_exits_1(self):
        assert self.run('source-class', '--summary', str(self.tmp_path / "nope.json")) == 1

    def test_missing_metadata_dir_exits_1(self):
        config_path = self.tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({'paths': {'base_path': str(self.tmp_path / "absent")}}))
        assert self.run('quality', '--config', str(config_path)) == 1

    def test_non_numeric_target_share_exits_1(self):
        config_path = self.tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({
            'dataset': {'target_distribution': {'scar': 'fifteen', 'redness': 15, 'hematoma': 30,
                                                'necrosis': 5, 'background': 35}},
        }))
        assert self.run('source-class', '--summary', str(self.summary),
                        '--config', str(config_path)) == 1

    def test_invalid_threshold_exits_1(self):
        assert self.run('source-class', '--summary', str(self.summary), '--threshold', '1.5') == 1

    def test_image_command_without_image_dir_exits_1(self):
        assert self.run('channels') == 1

    def test_mask_command_without_masks_exits_1(self):
        image_dir, _ = write_images(self.tmp_path)
        assert self.run('bboxes', '--image_dir', str(image_dir)) == 1

    def test_unknown_command(self):
        with pytest.raises(SystemExit):
            analyze_dataset.main(['histogram'])


class TestExploreWhiteRegions:
    """Test the single-image exploration script."""

    def test_sweep(self, tmp_path):
        image = np.full((4, 4, 3), 230, dtype=np.uint8)
        image[0, 0] = 10
        path = tmp_path / "wound.png"
        Image.fromarray(image).save(path)

        results = explore_white_regions.explore(str(path), [0.95, 0.8])
        assert [r.white_pixel_count for r in results] == [0, 15]

    def test_main_writes_plot(self, tmp_path):
        path = tmp_path / "wound.png"
        Image.fromarray(np.zeros((4, 4, 3), dtype=np.uint8)).save(path)
        plot = tmp_path / "sweep.png"

        assert explore_white_regions.main(['--image', str(path), '--plot', str(plot)]) == 0
        assert plot.is_file()

    def test_missing_image_exits_1(self, tmp_path):
        assert explore_white_regions.main(['--image', str(tmp_path / "none.png")]) == 1
