"""File system utility functions for reading and writing book files."""

from pathlib import Path


class FSUtil:
    """Utility class for file system operations."""

    @staticmethod
    def read_text_file(file_path: Path) -> str:
        """Read UTF-8 encoded text file.

        A leading byte order mark is dropped.

        Args:
            file_path: Path to the text file.

        Returns:
            File contents as a string.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the path is not a file.
            UnicodeDecodeError: If the file cannot be decoded as UTF-8.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        if not file_path.is_file():
            raise ValueError(f"Path is not a file: {file_path}")

        return file_path.read_text(encoding="utf-8-sig")

    @staticmethod
    def read_bytes_file(file_path: Path) -> bytes:
        """Read a binary file.

        Args:
            file_path: Path to the file.

        Returns:
            File contents.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the path is not a file.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        if not file_path.is_file():
            raise ValueError(f"Path is not a file: {file_path}")

        return file_path.read_bytes()

    @staticmethod
    def write_text_file(file_path: Path, content: str, create_parents: bool) -> None:
        """Write UTF-8 encoded text file.

        Args:
            file_path: Path where the file should be written.
            content: Content to write to the file.
            create_parents: If True, create parent directories if they don't exist.

        Raises:
            OSError: If the file cannot be written.
        """
        if create_parents:
            file_path.parent.mkdir(parents=True, exist_ok=True)

        file_path.write_text(content, encoding="utf-8")

    @staticmethod
    def write_bytes_file(file_path: Path, content: bytes, create_parents: bool) -> None:
        """Write a binary file.

        Args:
            file_path: Path where the file should be written.
            content: Bytes to write.
            create_parents: If True, create parent directories if they don't exist.

        Raises:
            OSError: If the file cannot be written.
        """
        if create_parents:
            file_path.parent.mkdir(parents=True, exist_ok=True)

        file_path.write_bytes(content)

    @staticmethod
    def ensure_directory_exists(directory: Path) -> None:
        """Ensure a directory exists, creating it if necessary.

        Args:
            directory: Path to the directory.
        """
        directory.mkdir(parents=True, exist_ok=True)
