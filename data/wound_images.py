"""
Wound Image Loading

Reads input photographs and label masks into numpy arrays:
- RGB images as (H, W, 3) float32 in [0, 1]
- Integer label masks (0 = scar ... 4 = background) as one-hot
  (H, W, num_classes) float32 stacks
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np
from PIL import Image
from tqdm import tqdm

from .wound_metadata import CLASS_ORDER
from utils.errors import InvalidInput

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.tif', '.tiff', '.bmp')
INDEXED_MASK_MODES = ('P', 'L', 'I', 'I;16')


@dataclass
class ImageSample:
    """One input image with its optional one-hot label mask."""
    name: str
    image: np.ndarray
    mask: Optional[np.ndarray] = None


def list_image_files(image_dir: Union[str, Path], limit: Optional[int] = None) -> List[Path]:
    """Image files in a directory, sorted by name."""
    image_dir = Path(image_dir)
    if not image_dir.is_dir():
        raise FileNotFoundError(f"Image directory not found: {image_dir}")
    files = sorted(p for p in image_dir.iterdir() if p.suffix.lower() in IMAGE_EXTENSIONS)
    if limit is not None:
        files = files[:limit]
    return files


def load_rgb_image(path: Union[str, Path]) -> np.ndarray:
    """Load an image as (H, W, 3) float32 with values in [0, 1]."""
    with Image.open(path) as img:
        rgb = np.asarray(img.convert('RGB'), dtype=np.float32)
    return rgb / 255.0


def labels_to_one_hot(labels: np.ndarray, num_classes: int) -> np.ndarray:
    """(H, W) integer labels -> (H, W, num_classes) one-hot float32."""
    labels = np.asarray(labels)
    if labels.ndim != 2:
        raise InvalidInput(f"Label mask must be 2-D, got shape {labels.shape}")
    if labels.size and (labels.min() < 0 or labels.max() >= num_classes):
        raise InvalidInput(
            f"Label values must be in [0, {num_classes - 1}], "
            f"got [{labels.min()}, {labels.max()}]"
        )
    return np.eye(num_classes, dtype=np.float32)[labels.astype(int)]


def load_label_mask(path: Union[str, Path], num_classes: int = len(CLASS_ORDER)) -> np.ndarray:
    """
    Load an integer label PNG as a one-hot class stack.

    Palette ('P') and grayscale masks store class indices directly; RGB
    masks are expected to repeat the index in every channel.
    """
    with Image.open(path) as img:
        if img.mode in INDEXED_MASK_MODES:
            labels = np.array(img)
        else:
            labels = np.array(img.convert('RGB'))[:, :, 0]
    return labels_to_one_hot(labels, num_classes)


def load_image_samples(
    image_dir: Union[str, Path],
    mask_dir: Optional[Union[str, Path]] = None,
    limit: Optional[int] = None,
    class_names: Sequence[str] = CLASS_ORDER
) -> List[ImageSample]:
    """
    Load images and, when mask_dir is given, the masks sharing their stem.

    Images without a matching mask are kept with mask=None and logged.
    """
    files = list_image_files(image_dir, limit=limit)
    masks_by_stem = {}
    if mask_dir is not None:
        masks_by_stem = {p.stem: p for p in list_image_files(mask_dir)}

    samples = []
    missing_masks = 0
    for path in tqdm(files, desc="Loading images", leave=False):
        mask = None
        if mask_dir is not None:
            mask_path = masks_by_stem.get(path.stem)
            if mask_path is None:
                missing_masks += 1
            else:
                mask = load_label_mask(mask_path, num_classes=len(class_names))
        samples.append(ImageSample(name=path.stem, image=load_rgb_image(path), mask=mask))

    if missing_masks:
        logger.warning(f"{missing_masks} of {len(files)} images have no mask in {mask_dir}")
    logger.info(f"Loaded {len(samples)} images from {image_dir}")
    return samples
