"""
Unit tests for channel, bounding box and class area statistics.

Run with: pytest tests/test_descriptive_stats.py -v
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis.descriptive_stats import (
    compute_skewness,
    find_outliers,
    oriented_box,
    compute_channel_statistics,
    compute_bounding_box_statistics,
    compute_class_area_statistics,
)
from data.wound_images import labels_to_one_hot
from data.wound_metadata import CLASS_ORDER
from utils.errors import InvalidInput


def one_hot(labels):
    return labels_to_one_hot(np.asarray(labels), len(CLASS_ORDER))


class TestHelpers:
    """Test skewness and outlier helpers."""

    def test_symmetric_skewness_is_zero(self):
        assert compute_skewness([1.0, 2.0, 3.0, 4.0, 5.0]) == pytest.approx(0.0)

    def test_right_tail_positive(self):
        assert compute_skewness([1.0, 1.0, 1.0, 1.0, 10.0]) > 0

    def test_constant_skewness(self):
        assert compute_skewness([3.0, 3.0, 3.0]) == 0.0
        assert compute_skewness([7.0]) == 0.0

    def test_empty_skewness_raises(self):
        with pytest.raises(InvalidInput):
            compute_skewness([])

    def test_outliers(self):
        values = [10.0, 11.0, 12.0, 11.5, 10.5, 100.0]
        mask, percentage = find_outliers(values)

        assert mask.tolist() == [False, False, False, False, False, True]
        assert percentage == pytest.approx(100.0 / 6)

    def test_no_outliers_for_empty(self):
        mask, percentage = find_outliers([])
        assert mask.size == 0
        assert percentage == 0.0


class TestChannelStatistics:
    """Test RGB channel statistics."""

    @pytest.fixture(autouse=True)
    def setup(self):
        """Setup test fixtures."""
        rng = np.random.default_rng(7)
        self.images = [rng.random((8, 8, 3)) for _ in range(6)]

    def test_shapes(self):
        stats = compute_channel_statistics(self.images)

        assert stats.channel_names == ('red', 'green', 'blue')
        assert stats.num_images == 6
        for channel in stats.channel_names:
            assert stats.channel_means_per_image[channel].shape == (6,)
            assert set(stats.global_channel_stats[channel]) == {'mean', 'std', 'skewness'}

    def test_global_mean_of_means(self):
        stats = compute_channel_statistics(self.images)
        expected = np.mean([img[:, :, 1].mean() for img in self.images])

        assert stats.global_channel_stats['green']['mean'] == pytest.approx(expected)

    def test_perfect_correlation(self):
        images = [np.full((4, 4, 3), v) for v in (0.1, 0.4, 0.8)]
        stats = compute_channel_statistics(images)

        assert stats.correlations[('red', 'green')] == pytest.approx(1.0)
        assert len(stats.correlations) == 3

    def test_single_image_has_no_correlation(self):
        stats = compute_channel_statistics(self.images[:1])

        assert all(r is None for r in stats.correlations.values())
        assert stats.global_channel_stats['red']['std'] == 0.0

    def test_empty_raises(self):
        with pytest.raises(InvalidInput):
            compute_channel_statistics([])


class TestBoundingBoxes:
    """Test PCA-oriented bounding boxes."""

    def test_horizontal_bar(self):
        rows, cols = np.nonzero(np.ones((3, 11)))
        width, height, aspect = oriented_box(rows, cols)

        assert width == pytest.approx(10.0)
        assert height == pytest.approx(2.0)
        assert aspect == pytest.approx(5.0)

    def test_single_pixel_is_degenerate(self):
        width, height, aspect = oriented_box(np.array([4]), np.array([2]))

        assert width == 0.0
        assert height == 0.0
        assert aspect == 1.0

    def test_components_per_class(self):
        labels = np.full((10, 10), 4)  # background
        labels[0:2, 0:6] = 0           # scar bar
        labels[5:8, 5:8] = 0           # second scar region
        labels[9, 0] = 2               # hematoma pixel
        stats = compute_bounding_box_statistics([one_hot(labels)])

        assert stats.bbox_classes == ('scar', 'redness', 'hematoma', 'necrosis')
        assert stats.statistics['scar']['num_components'] == 2
        assert stats.statistics['hematoma']['num_components'] == 1
        assert len(stats.widths['scar']) == 2

    def test_diagonal_pixels_are_separate_components(self):
        labels = np.full((4, 4), 4)
        labels[0, 0] = 1
        labels[1, 1] = 1
        stats = compute_bounding_box_statistics([one_hot(labels)])

        assert stats.statistics['redness']['num_components'] == 2

    def test_absent_class_has_none_aggregates(self):
        labels = np.full((4, 4), 4)
        stats = compute_bounding_box_statistics([one_hot(labels)])

        entry = stats.statistics['necrosis']
        assert entry['num_components'] == 0
        assert entry['mean_width'] is None
        assert entry['std_aspect_ratio'] is None

    def test_wrong_channel_count_raises(self):
        with pytest.raises(InvalidInput):
            compute_bounding_box_statistics([np.zeros((4, 4, 3))])


class TestClassAreas:
    """Test class area statistics."""

    def test_areas(self):
        first = np.full((4, 4), 4)
        first[0, :] = 0                # 4 scar pixels
        second = np.full((4, 4), 4)
        second[0:2, :] = 0             # 8 scar pixels
        stats = compute_class_area_statistics([one_hot(first), one_hot(second)])

        assert stats.total_pixels == 32
        assert stats.class_areas_per_image['scar'].tolist() == [4.0, 8.0]
        assert stats.statistics['scar']['mean'] == pytest.approx(6.0)
        assert stats.class_totals['background'] == pytest.approx(20.0)
        assert stats.total_proportions()['scar'] == pytest.approx(12 / 32)

    def test_normalized_means_sum_to_one(self):
        rng = np.random.default_rng(3)
        masks = [one_hot(rng.integers(0, 5, size=(6, 6))) for _ in range(4)]
        stats = compute_class_area_statistics(masks)

        total = sum(s['mean'] for s in stats.normalized_statistics.values())
        assert total == pytest.approx(1.0)

    def test_empty_raises(self):
        with pytest.raises(InvalidInput):
            compute_class_area_statistics([])
