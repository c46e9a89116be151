"""
Shared pytest fixtures for the wound dataset statistics tests.
"""

import sys
from pathlib import Path

import matplotlib
matplotlib.use('Agg')

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from data.wound_metadata import MetadataRecord


def make_record(source_index=1, target_class='scar', scar=10.0, redness=10.0,
                hematoma=10.0, necrosis=10.0, background=60.0, **extra):
    return MetadataRecord(
        source_index=source_index,
        target_class=target_class,
        scar_percentage=scar,
        redness_percentage=redness,
        hematoma_percentage=hematoma,
        necrosis_percentage=necrosis,
        background_percentage=background,
        **extra,
    )


def make_augmented_record(i, target_class='scar'):
    """Record with every augmentation parameter filled in."""
    return make_record(
        source_index=i % 5 + 1,
        target_class=target_class,
        scar=5.0 + i,
        augmented_index=i + 1,
        scale_factor=0.9 + 0.01 * i,
        rotation_angle=-10.0 + i,
        shear_x_angle=float(i % 3),
        shear_y_angle=-float(i % 2),
        brightness_factor=1.0 + 0.02 * i,
        saturation_offset=0.01 * i,
        blur_kernel_size=(3, 5, 7)[i % 3],
        blur_sigma=0.5 + 0.1 * i,
        flip_type=('flipx', 'flipy', 'noop')[i % 3],
        smart_crop_x_start=i * 2,
        smart_crop_y_start=i * 3,
        size_multiplier=i % 4 + 1,
        actual_fg_percentage=20.0 + i,
        fg_threshold_used=(30.0, 60.0, 100.0)[i % 3],
    )


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def augmented_records():
    classes = ('scar', 'redness', 'hematoma', 'necrosis', 'background')
    return [make_augmented_record(i, classes[i % 5]) for i in range(20)]
