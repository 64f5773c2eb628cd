"""File utility functions."""

import os
from pathlib import Path
from typing import List, Union


class FileHelper:
    """Helper class for file operations."""

    @staticmethod
    def is_hidden_file(file_path: Path) -> bool:
        """Check if a file is hidden.

        Args:
            file_path: Path to check

        Returns:
            True if file is hidden
        """
        # On Windows, check file attributes
        if os.name == 'nt':
            try:
                attrs = os.lstat(str(file_path)).st_file_attributes
                if attrs & 0x02:  # FILE_ATTRIBUTE_HIDDEN
                    return True
            except (AttributeError, OSError):
                pass

        return file_path.name.startswith('.')

    @staticmethod
    def format_file_size(size_bytes: int) -> str:
        """Format file size in human readable format.

        Args:
            size_bytes: Size in bytes

        Returns:
            Formatted size string
        """
        if size_bytes == 0:
            return "0 B"

        size_names = ["B", "KB", "MB", "GB", "TB", "PB"]
        size = float(size_bytes)
        i = 0

        while size >= 1024 and i < len(size_names) - 1:
            size /= 1024.0
            i += 1

        return f"{size:.1f} {size_names[i]}"

    @staticmethod
    def read_path_list(list_file: Union[str, Path]) -> List[str]:
        """Read newline-separated paths from a file.

        Every non-blank line is a path, taken verbatim; a leading '#' is
        part of the name.

        Args:
            list_file: File holding one path per line

        Returns:
            Paths in file order
        """
        list_file = Path(list_file)
        if not list_file.is_file():
            raise FileNotFoundError(f"Path list file not found: {list_file}")

        paths = []
        with open(list_file, 'r', encoding='utf-8') as f:
            for line in f:
                stripped = line.rstrip('\r\n')
                if not stripped.strip():
                    continue
                paths.append(stripped)
        return paths

    @staticmethod
    def get_relative_path(file_path: Path, base_path: Path) -> str:
        """Get relative path from base path.

        Args:
            file_path: Full file path
            base_path: Base path to calculate relative from

        Returns:
            Relative path with forward slashes
        """
        try:
            return file_path.relative_to(base_path).as_posix()
        except ValueError:
            # If paths are not related, return the full path
            return str(file_path)
