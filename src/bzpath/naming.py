"""Suffix naming convention between original and compressed paths.

A compressed path is the original absolute path with ``"." + suffix``
appended; uncompressing strips that suffix again. Whether the computed path
may be used is decided by the file manager's conflict strategy.
"""

from __future__ import annotations

from pathlib import Path

from bzpath.base import NamingMismatchError, PathConflictStrategy
from bzpath.filesystem import FileManager, FileSystemPath


def has_extension(path: str | FileSystemPath, extension: str) -> bool:
    """Check whether ``path`` ends with ``"." + extension``."""
    name = str(path)
    return len(name) > len(extension) + 1 and name.endswith(f".{extension}")


def append_extension(path: str | FileSystemPath, extension: str) -> str:
    """Get ``path`` with ``"." + extension`` appended."""
    return f"{path}.{extension}"


def strip_extension(path: str | FileSystemPath, extension: str) -> str:
    """Get ``path`` without its trailing ``"." + extension``.

    Raises:
        NamingMismatchError: If the extension is not present.
    """
    if not has_extension(path, extension):
        raise NamingMismatchError(path, extension)
    return str(path)[: -(len(extension) + 1)]


class PathResolver:
    """Maps source paths to destination paths.

    Example:
        >>> resolver = PathResolver(FileManager())
        >>> resolver.destination_for("/data/report.txt", "bz2")
        PosixPath('/data/report.txt.bz2')
        >>> resolver.original_for("/data/report.txt.bz2", "bz2")
        PosixPath('/data/report.txt')
    """

    def __init__(
        self,
        file_manager: FileManager,
        conflict_strategy: PathConflictStrategy = PathConflictStrategy.ERROR,
    ) -> None:
        self._file_manager = file_manager
        self._conflict_strategy = conflict_strategy

    @property
    def conflict_strategy(self) -> PathConflictStrategy:
        return self._conflict_strategy

    def destination_for(self, source: str | FileSystemPath, extension: str) -> Path:
        """Get a free destination for the compressed form of ``source``.

        Args:
            source: Path being compressed.
            extension: Suffix to append, without the leading dot.

        Returns:
            Absolute destination path.

        Raises:
            PathConflictError: If the destination exists and may not be replaced.
        """
        return self._file_manager.get_available_path(
            append_extension(source, extension),
            self._conflict_strategy,
            keep_suffix=extension,
        )

    def original_for(self, compressed: str | FileSystemPath, extension: str) -> Path:
        """Get a free destination for the uncompressed form of ``compressed``.

        Args:
            compressed: Path being uncompressed.
            extension: Suffix to strip, without the leading dot.

        Returns:
            Absolute destination path.

        Raises:
            NamingMismatchError: If ``compressed`` does not end with the suffix.
            PathConflictError: If the destination exists and may not be replaced.
        """
        return self._file_manager.get_available_path(
            strip_extension(compressed, extension),
            self._conflict_strategy,
        )
