"""Base classes, protocols, and types for the bzip2 compression method.

This module defines the naming constants, error hierarchy and capability
protocols shared by every other module. It uses Protocol-based structural
typing so alternative codecs and archivers can be plugged in.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from bzpath.filesystem import Directory, File, FileSystemPath


# =============================================================================
# Constants
# =============================================================================

EXTENSION_BZIP2 = "bz2"
EXTENSION_ARCHIVE = "tar"
EXTENSION_BZIPPED_ARCHIVE = f"{EXTENSION_ARCHIVE}.{EXTENSION_BZIP2}"

# Block size in units of 100k; only affects whole-buffer compression.
DEFAULT_COMPRESSION_LEVEL = 4
MIN_COMPRESSION_LEVEL = 1
MAX_COMPRESSION_LEVEL = 9

DEFAULT_CHUNK_SIZE = 512 * 1024  # 512 KiB


# =============================================================================
# Exceptions
# =============================================================================


class Bzip2Error(Exception):
    """Base exception for the bzip2 compression method."""

    def __init__(self, message: str, path: Any = None) -> None:
        self.path = str(path) if path is not None else None
        super().__init__(message)


class CompressError(Bzip2Error):
    """Compression of a string, file or directory failed."""

    pass


class UncompressError(Bzip2Error):
    """Uncompression of a string, file or archive failed."""

    pass


class InvalidPathError(CompressError):
    """The given path is neither an existing file nor a directory."""

    pass


class NamingMismatchError(UncompressError):
    """The compressed path does not carry the required suffix."""

    def __init__(self, path: Any, extension: str) -> None:
        self.extension = extension
        super().__init__(
            f"Path {path} does not have the extension: {extension}", path
        )


class UnknownExtensionError(UncompressError):
    """The compressed path carries neither a bz2 nor a tar.bz2 suffix."""

    def __init__(self, path: Any) -> None:
        super().__init__(
            f"Failed to uncompress path: {path} ; Reason: Unknown file extension provided.",
            path,
        )


class CodecOpenError(Bzip2Error, OSError):
    """A codec handle could not be opened."""

    pass


class PathConflictError(Bzip2Error, FileExistsError):
    """The destination path is already taken."""

    pass


class ConfigError(Bzip2Error, ValueError):
    """Invalid compression method configuration."""

    pass


# =============================================================================
# Enums
# =============================================================================


class AccessMode(str, Enum):
    """Stream access modes."""

    READ = "read"
    WRITE = "write"
    APPEND = "append"

    @property
    def file_mode(self) -> str:
        """Get the binary mode string for ``open()``."""
        return {
            AccessMode.READ: "rb",
            AccessMode.WRITE: "wb",
            AccessMode.APPEND: "ab",
        }[self]


class PathConflictStrategy(str, Enum):
    """How a destination path that already exists is resolved."""

    ERROR = "error"  # Refuse to touch the existing path
    OVERWRITE = "overwrite"  # Remove the existing path first
    RENAME = "rename"  # Pick "name (n).ext" until a free name is found

    @classmethod
    def from_string(cls, value: str) -> "PathConflictStrategy":
        """Convert string to PathConflictStrategy.

        Args:
            value: Strategy name (case-insensitive).

        Returns:
            PathConflictStrategy enum value.

        Raises:
            ConfigError: If the name is not a known strategy.
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ConfigError(
                f"Unknown conflict strategy '{value}'. "
                f"Available: {', '.join(s.value for s in cls)}"
            )


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class TransferMetrics:
    """Metrics for a single streaming transfer.

    Attributes:
        bytes_in: Total bytes read from the source.
        bytes_out: Total bytes written to the destination.
        chunks_processed: Number of chunks moved.
        start_time: Start time of the transfer.
        end_time: End time of the transfer.
    """

    bytes_in: int = 0
    bytes_out: int = 0
    chunks_processed: int = 0
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def duration_ms(self) -> float:
        """Get duration in milliseconds."""
        if self.end_time > self.start_time:
            return (self.end_time - self.start_time) * 1000
        return 0.0

    @property
    def throughput_mbps(self) -> float:
        """Get throughput in MB/s."""
        duration_s = self.duration_ms / 1000
        if duration_s > 0:
            return (self.bytes_in / 1024 / 1024) / duration_s
        return 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "bytes_in": self.bytes_in,
            "bytes_out": self.bytes_out,
            "chunks_processed": self.chunks_processed,
            "duration_ms": round(self.duration_ms, 2),
            "throughput_mbps": round(self.throughput_mbps, 2),
        }


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class StringCodec(Protocol):
    """Protocol for whole-buffer compression."""

    def compress_string(self, data: bytes, level: int | None = None) -> bytes:
        """Compress a byte string.

        Args:
            data: Uncompressed data.
            level: Compression level, the configured level when omitted.

        Returns:
            Compressed data.
        """
        ...

    def uncompress_string(self, data: bytes) -> bytes:
        """Uncompress a byte string.

        Args:
            data: Compressed data.

        Returns:
            Original data.
        """
        ...


@runtime_checkable
class StreamCompressor(Protocol):
    """Protocol for single-file streaming compression."""

    def compress_file(self, file: "File") -> "File":
        """Compress a file into ``<name>.bz2``."""
        ...

    def uncompress_file(self, file: "File") -> "File":
        """Uncompress a ``<name>.bz2`` file into ``<name>``."""
        ...


@runtime_checkable
class PathCompressor(Protocol):
    """Protocol for compression of arbitrary paths."""

    def compress_path(self, path: "FileSystemPath") -> "File":
        """Compress a file or a directory."""
        ...

    def uncompress_path(self, file: "File") -> "FileSystemPath":
        """Uncompress a file or a directory archive."""
        ...

    def compress_directory(self, directory: "Directory") -> "File":
        """Compress a directory into ``<name>.tar.bz2``."""
        ...

    def uncompress_directory(self, file: "File") -> "Directory":
        """Uncompress a ``<name>.tar.bz2`` archive into ``<name>``."""
        ...


@runtime_checkable
class Archiver(Protocol):
    """Protocol for linearizing a directory tree into one stream and back."""

    def compress_directory(self, directory: "Directory") -> "File":
        """Serialize a directory into a single archive file."""
        ...

    def uncompress_directory(self, archive: "File") -> "Directory":
        """Expand an archive file into a directory."""
        ...
