"""Local filesystem paths and byte streams.

This module provides the path and stream objects the compression method
works with. Paths are always held in absolute form, and their string form is
what the naming convention operates on.

Example:
    >>> manager = FileManager()
    >>> file = manager.create_file("/tmp/data/report.txt")
    >>> file.write(b"hello")
    >>> with file.get_stream().open(AccessMode.READ) as stream:
    ...     for chunk in stream.read_chunks(1024):
    ...         process(chunk)
"""

from __future__ import annotations

import itertools
import logging
import os
import shutil
from pathlib import Path
from typing import IO, Any, Iterator

from bzpath.base import AccessMode, PathConflictError, PathConflictStrategy

logger = logging.getLogger(__name__)


# =============================================================================
# Paths
# =============================================================================


class FileSystemPath:
    """A location on the local filesystem.

    The location may or may not exist. ``File`` and ``Directory`` narrow the
    kind of entry expected at the location.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(os.path.abspath(os.fspath(path)))

    def __str__(self) -> str:
        return str(self._path)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._path)!r})"

    def __fspath__(self) -> str:
        return str(self._path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileSystemPath):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    @property
    def path(self) -> Path:
        """Get the absolute ``pathlib.Path``."""
        return self._path

    @property
    def name(self) -> str:
        """Get the final path component."""
        return self._path.name

    @property
    def parent(self) -> "Directory":
        """Get the containing directory."""
        return Directory(self._path.parent)

    def exists(self) -> bool:
        return self._path.exists()

    def is_file(self) -> bool:
        return self._path.is_file()

    def is_directory(self) -> bool:
        return self._path.is_dir()

    def delete(self) -> None:
        """Delete whatever is at this location, if anything."""
        if self._path.is_dir() and not self._path.is_symlink():
            shutil.rmtree(self._path)
        elif self._path.exists() or self._path.is_symlink():
            self._path.unlink()


class File(FileSystemPath):
    """A regular file."""

    def exists(self) -> bool:
        return self._path.is_file()

    def delete(self) -> None:
        self._path.unlink(missing_ok=True)

    @property
    def size(self) -> int:
        return self._path.stat().st_size

    def read(self) -> bytes:
        """Read the whole file."""
        return self._path.read_bytes()

    def write(self, data: bytes) -> int:
        """Replace the file contents."""
        return self._path.write_bytes(data)

    def get_stream(self) -> "FileStream":
        """Get an unopened stream over this file."""
        return FileStream(self)


class Directory(FileSystemPath):
    """A directory."""

    def exists(self) -> bool:
        return self._path.is_dir()

    def delete(self) -> None:
        """Delete the directory and everything below it."""
        if self._path.is_dir():
            shutil.rmtree(self._path)

    def iter_files(self) -> Iterator[File]:
        """Iterate over all regular files below this directory."""
        for entry in sorted(self._path.rglob("*")):
            if entry.is_file():
                yield File(entry)


# =============================================================================
# Streams
# =============================================================================


class FileStream:
    """Byte stream over a single file.

    A stream is opened once with an ``AccessMode`` and must be closed by its
    owner. Closing is idempotent, so cleanup code can call ``close()`` on
    every exit path.
    """

    def __init__(self, file: File) -> None:
        self._file = file
        self._handle: IO[bytes] | None = None
        self._mode: AccessMode | None = None

    def __enter__(self) -> "FileStream":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @property
    def file(self) -> File:
        return self._file

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    @property
    def mode(self) -> AccessMode | None:
        return self._mode

    def open(self, mode: AccessMode) -> "FileStream":
        """Open the stream.

        Args:
            mode: Access mode.

        Returns:
            This stream.

        Raises:
            RuntimeError: If the stream is already open.
            OSError: If the file cannot be opened.
        """
        if self._handle is not None:
            raise RuntimeError(f"Stream for {self._file} is already open")
        self._handle = open(self._file.path, mode.file_mode)
        self._mode = mode
        return self

    def read_chunks(self, size: int) -> Iterator[bytes]:
        """Lazily read the file in chunks of at most ``size`` bytes.

        A chunk shorter than ``size`` is a valid chunk; the sequence ends
        when a read returns no data.

        Args:
            size: Maximum chunk size in bytes.

        Yields:
            Non-empty byte chunks.
        """
        if size <= 0:
            raise ValueError("Chunk size must be positive")
        handle = self._require(AccessMode.READ)
        while chunk := handle.read(size):
            yield chunk

    def append(self, data: bytes) -> int:
        """Append bytes to the stream.

        Args:
            data: Bytes to write.

        Returns:
            Number of bytes written.
        """
        handle = self._require(AccessMode.APPEND, AccessMode.WRITE)
        return handle.write(data)

    def close(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        self._mode = None
        handle.close()

    def _require(self, *modes: AccessMode) -> IO[bytes]:
        if self._handle is None:
            raise RuntimeError(f"Stream for {self._file} is not open")
        if self._mode not in modes:
            raise RuntimeError(
                f"Stream for {self._file} is open for {self._mode.value}, "
                f"expected {' or '.join(m.value for m in modes)}"
            )
        return self._handle


# =============================================================================
# File Manager
# =============================================================================


class FileManager:
    """Factory for paths and resolver of destination conflicts."""

    def get_path(self, path: str | os.PathLike[str]) -> FileSystemPath:
        """Get a typed path for whatever currently exists at ``path``.

        Returns a ``Directory`` or ``File`` when the location exists, a plain
        ``FileSystemPath`` otherwise.
        """
        if isinstance(path, FileSystemPath):
            path = path.path
        location = Path(path)
        if location.is_dir():
            return Directory(location)
        if location.is_file():
            return File(location)
        return FileSystemPath(location)

    def get_file(self, path: str | os.PathLike[str]) -> File:
        return File(path)

    def get_directory(self, path: str | os.PathLike[str]) -> Directory:
        return Directory(path)

    def create_file(self, path: str | os.PathLike[str]) -> File:
        """Create an empty file, creating missing parent directories.

        An existing file at the location is truncated.
        """
        file = File(path)
        file.path.parent.mkdir(parents=True, exist_ok=True)
        file.path.write_bytes(b"")
        return file

    def create_directory(self, path: str | os.PathLike[str]) -> Directory:
        directory = Directory(path)
        directory.path.mkdir(parents=True, exist_ok=True)
        return directory

    def get_available_path(
        self,
        path: str | os.PathLike[str],
        strategy: PathConflictStrategy = PathConflictStrategy.ERROR,
        keep_suffix: str = "",
    ) -> Path:
        """Resolve a destination path that is free to be written.

        Args:
            path: Desired destination.
            strategy: How to handle an existing entry at ``path``.
            keep_suffix: Suffix (without leading dot) that renaming must keep
                at the end of the name. Defaults to the last extension.

        Returns:
            An absolute path with nothing at it.

        Raises:
            PathConflictError: If the path exists and the strategy is ERROR.
        """
        candidate = FileSystemPath(path)
        if not (candidate.path.exists() or candidate.path.is_symlink()):
            return candidate.path

        if strategy == PathConflictStrategy.ERROR:
            raise PathConflictError(f"Path already exists: {candidate}", candidate)

        if strategy == PathConflictStrategy.OVERWRITE:
            logger.debug(f"Overwriting existing path {candidate}")
            candidate.delete()
            return candidate.path

        name = candidate.name
        suffix = f".{keep_suffix}" if keep_suffix else Path(name).suffix
        if suffix and name.endswith(suffix) and name != suffix:
            stem = name[: -len(suffix)]
        else:
            stem, suffix = name, ""

        for n in itertools.count(1):
            renamed = candidate.path.with_name(f"{stem} ({n}){suffix}")
            if not (renamed.exists() or renamed.is_symlink()):
                logger.debug(f"Destination {candidate} exists, using {renamed}")
                return renamed
