"""Tests for FSUtil file helpers."""

from pathlib import Path

import pytest

from src.util.fs_util import FSUtil


class TestFSUtil:
    """Test cases for FSUtil."""

    def test_read_text_file_drops_bom(self, tmp_path: Path) -> None:
        """Test that a UTF-8 byte order mark is not part of the text."""
        path = tmp_path / "words.txt"
        path.write_bytes(b"\xef\xbb\xbfabc\n")

        assert FSUtil.read_text_file(path) == "abc\n"

    def test_read_text_file_missing(self, tmp_path: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="File not found"):
            FSUtil.read_text_file(tmp_path / "missing.txt")

    def test_read_text_file_directory(self, tmp_path: Path) -> None:
        """Test that a directory raises ValueError."""
        with pytest.raises(ValueError, match="not a file"):
            FSUtil.read_text_file(tmp_path)

    def test_read_bytes_file(self, tmp_path: Path) -> None:
        """Test that binary content is returned unchanged."""
        path = tmp_path / "book.epub"
        path.write_bytes(b"PK\x03\x04")

        assert FSUtil.read_bytes_file(path) == b"PK\x03\x04"

    def test_read_bytes_file_missing(self, tmp_path: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            FSUtil.read_bytes_file(tmp_path / "missing.epub")

    def test_write_text_file_creates_parents(self, tmp_path: Path) -> None:
        """Test that parent directories are created when requested."""
        path = tmp_path / "a" / "b" / "out.txt"

        FSUtil.write_text_file(path, "ไทย", create_parents=True)

        assert path.read_text(encoding="utf-8") == "ไทย"

    def test_write_text_file_without_parents_fails(self, tmp_path: Path) -> None:
        """Test that a missing parent raises OSError without create_parents."""
        with pytest.raises(OSError):
            FSUtil.write_text_file(tmp_path / "missing" / "out.txt", "x", create_parents=False)

    def test_write_bytes_file(self, tmp_path: Path) -> None:
        """Test that bytes are written unchanged."""
        path = tmp_path / "out" / "book.epub"

        FSUtil.write_bytes_file(path, b"data", create_parents=True)

        assert path.read_bytes() == b"data"

    def test_ensure_directory_exists(self, tmp_path: Path) -> None:
        """Test that a nested directory is created and may already exist."""
        directory = tmp_path / "x" / "y"

        FSUtil.ensure_directory_exists(directory)
        FSUtil.ensure_directory_exists(directory)

        assert directory.is_dir()
