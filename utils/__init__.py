"""
Wound Dataset Statistics Utilities Module

Provides helper functions for:
- Error types shared across the project
- Windows / WSL path resolution
- Logging setup and report formatting
"""

from .errors import (
    InvalidInput,
    DataPathNotFoundError,
)

from .paths import (
    resolve_path,
    candidate_paths,
    resolve_data_dir,
    resolve_data_file,
    is_windows_platform,
)

from .utils import (
    setup_logging,
    ensure_dir,
    format_section,
    format_percentage,
)

__all__ = [
    # Errors
    'InvalidInput',
    'DataPathNotFoundError',

    # Paths
    'resolve_path',
    'candidate_paths',
    'resolve_data_dir',
    'resolve_data_file',
    'is_windows_platform',

    # General utils
    'setup_logging',
    'ensure_dir',
    'format_section',
    'format_percentage',
]
