"""
Path Resolution Utilities

Datasets live on a synced Windows drive that is also mounted under WSL,
so the same location is written either as "C:/Syncthing/Datasets" or as
"/mnt/c/Syncthing/Datasets". These helpers translate between the two
forms and pick the first candidate directory that exists.
"""

import os
import re
import sys
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .errors import DataPathNotFoundError

logger = logging.getLogger(__name__)

_WINDOWS_DRIVE = re.compile(r'^([A-Za-z]):[/\\]')
_WSL_MOUNT = re.compile(r'^/mnt/([A-Za-z])(?:/|$)')


def is_windows_platform(platform: Optional[str] = None) -> bool:
    platform = sys.platform if platform is None else platform
    return platform.startswith('win')


def resolve_path(path: str, platform: Optional[str] = None) -> str:
    """
    Convert a path between Windows and WSL conventions.

    On Windows, "/mnt/c/Users/data" becomes "C:\\Users\\data".
    Elsewhere, "C:/Users/data" or "C:\\Users\\data" becomes "/mnt/c/Users/data".
    Paths already in the native form are returned unchanged.

    Args:
        path: Path string in either convention
        platform: sys.platform value to translate for (default: current)

    Returns:
        Path string for the target platform
    """
    if is_windows_platform(platform):
        match = _WSL_MOUNT.match(path)
        if not match:
            return path
        drive = match.group(1).upper()
        rest = path[match.end():].replace('/', '\\')
        return f"{drive}:\\{rest}"

    match = _WINDOWS_DRIVE.match(path)
    if not match:
        return path
    drive = match.group(1).lower()
    rest = path[match.end():].replace('\\', '/')
    return f"/mnt/{drive}/{rest}"


def candidate_paths(path: str) -> List[str]:
    """The path as written plus its Windows and WSL translations, deduplicated."""
    candidates = [path, resolve_path(path, 'win32'), resolve_path(path, 'linux')]
    unique = []
    for candidate in candidates:
        if candidate not in unique:
            unique.append(candidate)
    return unique


def resolve_data_dir(
    candidates: Iterable[Union[str, Path]],
    description: str = "data directory"
) -> Path:
    """
    Return the first candidate that is an existing directory.

    Raises:
        DataPathNotFoundError: listing every path tried
    """
    tried = []
    for candidate in candidates:
        candidate = os.path.expanduser(str(candidate))
        tried.append(candidate)
        if os.path.isdir(candidate):
            logger.info(f"Resolved {description}: {candidate}")
            return Path(candidate)
    raise DataPathNotFoundError(description, tried)


def resolve_data_file(
    candidates: Iterable[Union[str, Path]],
    description: str = "data file"
) -> Path:
    """Return the first candidate that is an existing file."""
    tried = []
    for candidate in candidates:
        candidate = os.path.expanduser(str(candidate))
        tried.append(candidate)
        if os.path.isfile(candidate):
            logger.info(f"Resolved {description}: {candidate}")
            return Path(candidate)
    raise DataPathNotFoundError(description, tried)
