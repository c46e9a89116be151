"""
Utility Functions for Dataset Statistics Runs

Provides helper functions for:
- Logging setup
- Output directory creation
- Report formatting
"""

import sys
import logging
from pathlib import Path
from typing import Optional, Union


def setup_logging(
    log_dir: Optional[str] = None,
    log_file: str = 'wound_stats.log',
    level: int = logging.INFO
) -> logging.Logger:
    """
    Setup logging to console and, if log_dir is given, to a file.

    Handlers are attached to the root logger so every module's
    logging.getLogger(__name__) output is captured.

    Args:
        log_dir: Directory for log file (None = console only)
        log_file: Log filename
        level: Logging level

    Returns:
        Configured root logger
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    # File handler
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / log_file)
        fh.setLevel(level)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    # Quiet third-party plotting chatter
    logging.getLogger('matplotlib').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logger


def ensure_dir(path: Union[str, Path]) -> Path:
    """Create a directory (and parents) if needed and return it."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def format_section(title: str, width: int = 80, char: str = '=') -> str:
    """Banner used to separate stages in the log output."""
    line = char * width
    return f"{line}\n{title}\n{line}"


def format_percentage(value: Optional[float], digits: int = 2) -> str:
    """Format a percentage, showing 'n/a' for undefined values."""
    if value is None:
        return "n/a"
    return f"{value:.{digits}f}%"
