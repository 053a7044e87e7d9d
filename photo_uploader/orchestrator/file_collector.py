"""File collection utilities for CLI selections."""
from pathlib import Path
from typing import Iterable, List

from ..models import SourceFile


class FileCollector:
    """Turns user-given paths into candidate files."""

    @staticmethod
    def collect_paths(paths: Iterable[Path]) -> List[Path]:
        """
        Expand folders recursively; plain files are kept as given.

        Args:
            paths: Files and/or folders

        Returns:
            File paths, folder contents sorted
        """
        files = []
        for path in paths:
            path = Path(path)
            if path.is_dir():
                files.extend(sorted(item for item in path.rglob("*") if item.is_file()))
            elif path.is_file():
                files.append(path)
        return files

    @classmethod
    def collect_files(cls, paths: Iterable[Path]) -> List[SourceFile]:
        return [SourceFile.from_path(p) for p in cls.collect_paths(paths)]
