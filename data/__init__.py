"""
Wound Dataset Data Module

Provides record types and loading utilities for:
- Augmentation summary metadata (JSON / JSON.gz / CSV)
- Input wound images and label masks
"""

from .wound_metadata import (
    MetadataRecord,
    RecordStore,
    DatasetSummary,
    load_summary,
    save_summary,
    records_from_dicts,
    validate_target_distribution,
    percentage_field,
    CLASS_ORDER,
    CLASS_COLORS,
    CLASS_DISPLAY_NAMES,
    DEFAULT_TARGET_DISTRIBUTION,
    AUGMENTATION_PARAMETERS,
    FLIP_TYPES,
)

from .wound_images import (
    ImageSample,
    list_image_files,
    load_rgb_image,
    load_label_mask,
    labels_to_one_hot,
    load_image_samples,
    IMAGE_EXTENSIONS,
)

__all__ = [
    # Metadata
    'MetadataRecord',
    'RecordStore',
    'DatasetSummary',
    'load_summary',
    'save_summary',
    'records_from_dicts',
    'validate_target_distribution',
    'percentage_field',
    'CLASS_ORDER',
    'CLASS_COLORS',
    'CLASS_DISPLAY_NAMES',
    'DEFAULT_TARGET_DISTRIBUTION',
    'AUGMENTATION_PARAMETERS',
    'FLIP_TYPES',
    # Images
    'ImageSample',
    'list_image_files',
    'load_rgb_image',
    'load_label_mask',
    'labels_to_one_hot',
    'load_image_samples',
    'IMAGE_EXTENSIONS',
]
