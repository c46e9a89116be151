"""
Wound Dataset Metadata

Typed per-sample metadata records and the dataset-summary loader.

A summary artifact holds one record per augmented sample:
- source image reference and the class the sample was generated for
- pixel coverage percentages for the five wound classes
- optional augmentation parameters (geometry, color, crop, growth)

Records are validated once at load time and held in an immutable
RecordStore for the rest of the run.
"""

import gzip
import json
import logging
import math
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Dict, Optional, Any, Iterable, Iterator, Tuple, Union

import numpy as np
import pandas as pd

from utils.errors import InvalidInput

logger = logging.getLogger(__name__)


# Fixed class order shared by every aggregation and plot axis
CLASS_ORDER: Tuple[str, ...] = ('scar', 'redness', 'hematoma', 'necrosis', 'background')

CLASS_COLORS = {
    'scar': 'indianred',
    'redness': 'mediumseagreen',
    'hematoma': 'cornflowerblue',
    'necrosis': 'gold',
    'background': 'slategray',
}

CLASS_DISPLAY_NAMES = {
    'scar': 'Scar',
    'redness': 'Redness',
    'hematoma': 'Hematoma',
    'necrosis': 'Necrosis',
    'background': 'Background',
}

# Expected share of generated samples per target class (percent)
DEFAULT_TARGET_DISTRIBUTION = {
    'scar': 15.0,
    'redness': 15.0,
    'hematoma': 30.0,
    'necrosis': 5.0,
    'background': 35.0,
}

FLIP_TYPES = ('flipx', 'flipy', 'noop')

# Augmentation parameter fields that may be plotted against the source index
AUGMENTATION_PARAMETERS = (
    'scale_factor',
    'rotation_angle',
    'shear_x_angle',
    'shear_y_angle',
    'brightness_factor',
    'saturation_offset',
    'blur_kernel_size',
    'blur_sigma',
    'smart_crop_x_start',
    'smart_crop_y_start',
)

_INT_FIELDS = {
    'augmented_index', 'blur_kernel_size', 'smart_crop_x_start',
    'smart_crop_y_start', 'size_multiplier',
}


def percentage_field(class_name: str) -> str:
    """Record attribute holding the coverage percentage of a class."""
    return f"{class_name}_percentage"


@dataclass(frozen=True)
class MetadataRecord:
    """Metadata for a single augmented sample."""
    source_index: int
    target_class: str

    # Pixel coverage (0-100) computed after augmentation
    scar_percentage: float
    redness_percentage: float
    hematoma_percentage: float
    necrosis_percentage: float
    background_percentage: float

    # Augmentation parameters (absent in coverage-only summaries)
    augmented_index: Optional[int] = None
    scale_factor: Optional[float] = None
    rotation_angle: Optional[float] = None
    shear_x_angle: Optional[float] = None
    shear_y_angle: Optional[float] = None
    brightness_factor: Optional[float] = None
    saturation_offset: Optional[float] = None
    blur_kernel_size: Optional[int] = None
    blur_sigma: Optional[float] = None
    flip_type: Optional[str] = None
    smart_crop_x_start: Optional[int] = None
    smart_crop_y_start: Optional[int] = None

    # Dynamic patch growth
    size_multiplier: Optional[int] = None
    actual_fg_percentage: Optional[float] = None
    fg_threshold_used: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.source_index, bool) or not isinstance(self.source_index, (int, np.integer)):
            raise InvalidInput(f"source_index must be an integer, got {self.source_index!r}")
        if self.source_index < 1:
            raise InvalidInput(f"source_index must be >= 1, got {self.source_index}")
        if self.target_class not in CLASS_ORDER:
            raise InvalidInput(
                f"target_class must be one of {list(CLASS_ORDER)}, got {self.target_class!r}"
            )
        for class_name in CLASS_ORDER:
            name = percentage_field(class_name)
            value = getattr(self, name)
            if not _is_finite_number(value) or not 0.0 <= value <= 100.0:
                raise InvalidInput(f"{name} must be a number in [0, 100], got {value!r}")
        if self.flip_type is not None and self.flip_type not in FLIP_TYPES:
            raise InvalidInput(f"flip_type must be one of {list(FLIP_TYPES)}, got {self.flip_type!r}")

    def percentage(self, class_name: str) -> float:
        """Coverage percentage for one class."""
        if class_name not in CLASS_ORDER:
            raise InvalidInput(f"Unknown class: {class_name!r}")
        return getattr(self, percentage_field(class_name))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "MetadataRecord":
        """
        Build a record from a loosely-typed mapping (JSON object or CSV row).

        Unknown keys are ignored, symbols written as ':scar' are accepted,
        and empty / NaN optional values become None.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in raw.items():
            if key not in known:
                continue
            kwargs[key] = _coerce_field(key, value)

        missing = [
            name for name in ('source_index', 'target_class', *map(percentage_field, CLASS_ORDER))
            if name not in kwargs or kwargs[name] is None
        ]
        if missing:
            raise InvalidInput(f"Record is missing required fields: {missing}")

        return cls(**kwargs)


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        return False
    return math.isfinite(float(value))


def _coerce_field(name: str, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, str) and value.strip() == '':
        return None

    if name in ('target_class', 'flip_type'):
        return str(value).strip().lstrip(':').lower()

    if name == 'source_index' or name in _INT_FIELDS:
        try:
            as_float = float(value)
        except (TypeError, ValueError):
            raise InvalidInput(f"{name} must be an integer, got {value!r}")
        if not as_float.is_integer():
            raise InvalidInput(f"{name} must be an integer, got {value!r}")
        return int(as_float)

    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be numeric, got {value!r}")


class RecordStore:
    """
    Ordered, read-only collection of MetadataRecord values.

    Usage:
        store = RecordStore(records)
        scar = store.percentages('scar')      # numpy column
        df = store.to_dataframe()
    """

    def __init__(self, records: Iterable[MetadataRecord]):
        self._records: Tuple[MetadataRecord, ...] = tuple(records)
        for i, record in enumerate(self._records):
            if not isinstance(record, MetadataRecord):
                raise InvalidInput(f"Entry {i} is not a MetadataRecord: {type(record).__name__}")

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MetadataRecord]:
        return iter(self._records)

    def __getitem__(self, index):
        return self._records[index]

    def __repr__(self) -> str:
        return f"RecordStore({len(self)} records)"

    @property
    def records(self) -> Tuple[MetadataRecord, ...]:
        return self._records

    def source_indices(self) -> np.ndarray:
        return np.array([r.source_index for r in self._records], dtype=int)

    def percentages(self, class_name: str) -> np.ndarray:
        return np.array([r.percentage(class_name) for r in self._records], dtype=float)

    def to_dataframe(self) -> pd.DataFrame:
        columns = [f.name for f in fields(MetadataRecord)]
        return pd.DataFrame([r.to_dict() for r in self._records], columns=columns)


@dataclass
class DatasetSummary:
    """Everything a reporting run needs from the summary artifact."""
    records: RecordStore
    target_distribution: Dict[str, float]
    num_sources: Optional[int] = None
    source_path: Optional[str] = None

    @property
    def pool_size(self) -> int:
        """Source pool size, falling back to the largest referenced index."""
        if self.num_sources:
            return self.num_sources
        if len(self.records) == 0:
            return 0
        return int(self.records.source_indices().max())


def validate_target_distribution(
    distribution: Dict[str, float],
    class_order: Iterable[str] = CLASS_ORDER,
    tolerance: float = 0.01
) -> Dict[str, float]:
    """
    Check that a target distribution covers every class and sums to ~100.

    Returns the distribution with plain-string keys and float values.
    """
    normalized = {}
    for k, v in distribution.items():
        name = str(k).lstrip(':').lower()
        try:
            normalized[name] = float(v)
        except (TypeError, ValueError):
            raise InvalidInput(f"Target share for {name} must be numeric, got {v!r}")
    missing = [c for c in class_order if c not in normalized]
    if missing:
        raise InvalidInput(f"Target distribution has no entry for classes: {missing}")
    negative = [c for c, v in normalized.items() if v < 0]
    if negative:
        raise InvalidInput(f"Target distribution has negative shares for: {negative}")
    total = sum(normalized[c] for c in class_order)
    if abs(total - 100.0) > tolerance:
        raise InvalidInput(f"Target distribution must sum to 100, got {total:.4f}")
    return normalized


# =============================================================================
# Summary Loading
# =============================================================================

def records_from_dicts(rows: Iterable[Dict[str, Any]]) -> RecordStore:
    """Validate raw mappings into a RecordStore, naming the failing row."""
    records = []
    for i, row in enumerate(rows):
        try:
            records.append(MetadataRecord.from_dict(row))
        except InvalidInput as e:
            raise InvalidInput(f"Record {i}: {e}") from e
    return RecordStore(records)


def _summary_format(path: Path) -> str:
    """'csv' or 'json' from the file suffixes, allowing a trailing .gz."""
    suffixes = [s.lower() for s in path.suffixes]
    if suffixes and suffixes[-1] == '.gz':
        suffixes = suffixes[:-1]
    if suffixes and suffixes[-1] in ('.csv', '.json'):
        return suffixes[-1][1:]
    raise InvalidInput(f"Unsupported summary format: {path.name}")


def _read_json(path: Path) -> Dict[str, Any]:
    if path.suffix.lower() == '.gz':
        with gzip.open(path, 'rt', encoding='utf-8') as f:
            return json.load(f)
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_summary(
    path: Union[str, Path],
    target_distribution: Optional[Dict[str, float]] = None,
    num_sources: Optional[int] = None
) -> DatasetSummary:
    """
    Load a dataset summary artifact.

    Supported formats:
        *.json / *.json.gz: {"all_metadata": [...], "target_distribution": {...},
                             "num_sources": N}
        *.csv / *.csv.gz:   one record per row

    Args:
        path: Summary file
        target_distribution: Used when the artifact carries none (always for CSV)
        num_sources: Source pool size; takes priority over the artifact's value

    Returns:
        DatasetSummary with validated records
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Summary file not found: {path}")

    logger.info(f"Loading metadata from: {path}")

    summary_format = _summary_format(path)
    if summary_format == 'csv':
        compression = 'gzip' if path.suffix.lower() == '.gz' else None
        df = pd.read_csv(path, compression=compression)
        rows = df.to_dict(orient='records')
        artifact_distribution = None
        artifact_sources = None
    else:
        payload = _read_json(path)
        if 'all_metadata' not in payload:
            raise InvalidInput(f"{path.name} has no 'all_metadata' entry")
        rows = payload['all_metadata']
        artifact_distribution = payload.get('target_distribution')
        artifact_sources = payload.get('num_sources')

    records = records_from_dicts(rows)
    logger.info(f"Loaded {len(records)} samples")

    distribution = artifact_distribution or target_distribution or DEFAULT_TARGET_DISTRIBUTION
    if artifact_distribution is None and target_distribution is None:
        logger.warning("No target distribution in summary; using default distribution")

    return DatasetSummary(
        records=records,
        target_distribution=validate_target_distribution(distribution),
        num_sources=num_sources or artifact_sources,
        source_path=str(path),
    )


def save_summary(
    path: Union[str, Path],
    records: Iterable[MetadataRecord],
    target_distribution: Dict[str, float],
    num_sources: Optional[int] = None
) -> str:
    """Write records in the JSON summary format read by load_summary."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        'all_metadata': [r.to_dict() for r in records],
        'target_distribution': dict(target_distribution),
        'num_sources': num_sources,
    }
    if path.suffix == '.gz':
        with gzip.open(path, 'wt', encoding='utf-8') as f:
            json.dump(payload, f)
    else:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2)
    return str(path)
