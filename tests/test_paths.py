"""
Unit tests for Windows / WSL path resolution.

Run with: pytest tests/test_paths.py -v
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from utils.paths import (
    resolve_path,
    candidate_paths,
    resolve_data_dir,
    resolve_data_file,
    is_windows_platform,
)
from utils.errors import DataPathNotFoundError


class TestResolvePath:
    """Test pure path rewriting."""

    @pytest.mark.parametrize("path,expected", [
        ("C:/Syncthing/Datasets", "/mnt/c/Syncthing/Datasets"),
        ("C:\\Syncthing\\Datasets", "/mnt/c/Syncthing/Datasets"),
        ("d:/data", "/mnt/d/data"),
        ("/home/user/data", "/home/user/data"),
        ("relative/dir", "relative/dir"),
    ])
    def test_to_wsl(self, path, expected):
        assert resolve_path(path, platform='linux') == expected

    @pytest.mark.parametrize("path,expected", [
        ("/mnt/c/Syncthing/Datasets", "C:\\Syncthing\\Datasets"),
        ("/mnt/d", "D:\\"),
        ("C:/already/windows", "C:/already/windows"),
        ("/mnt/data/x", "/mnt/data/x"),
    ])
    def test_to_windows(self, path, expected):
        assert resolve_path(path, platform='win32') == expected

    def test_platform_detection(self):
        assert is_windows_platform('win32')
        assert not is_windows_platform('linux')
        assert not is_windows_platform('darwin')

    def test_candidates_deduplicated(self):
        candidates = candidate_paths("C:/Syncthing/Datasets")

        assert candidates == [
            "C:/Syncthing/Datasets",
            "/mnt/c/Syncthing/Datasets",
        ]

    def test_candidates_for_plain_path(self):
        assert candidate_paths("/data") == ["/data"]


class TestResolveDataDir:
    """Test first-existing-candidate lookup."""

    def test_first_existing_wins(self, tmp_path):
        first = tmp_path / "a"
        second = tmp_path / "b"
        second.mkdir()

        assert resolve_data_dir([first, second]) == second

    def test_error_lists_tried_paths(self, tmp_path):
        missing = [tmp_path / "x", tmp_path / "y"]
        with pytest.raises(DataPathNotFoundError) as exc_info:
            resolve_data_dir(missing, "metadata directory")

        assert exc_info.value.tried == [str(p) for p in missing]
        message = str(exc_info.value)
        assert "metadata directory" in message
        assert str(missing[0]) in message and str(missing[1]) in message

    def test_file_is_not_a_directory(self, tmp_path):
        f = tmp_path / "summary.json"
        f.write_text("{}")

        with pytest.raises(DataPathNotFoundError):
            resolve_data_dir([f])
        assert resolve_data_file([tmp_path / "nope.json", f]) == f

    def test_is_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            resolve_data_file([tmp_path / "nope.json"])
