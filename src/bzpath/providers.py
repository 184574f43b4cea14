"""Block codec implementations.

This module wraps the bzip2 primitive behind a small codec interface:
whole-buffer compress/decompress and file handles opened by path. The
streaming and string layers only talk to this interface, so a codec can be
replaced (for instance by a fault-injecting one in tests).
"""

from __future__ import annotations

import bz2
import logging
from abc import ABC, abstractmethod
from typing import BinaryIO

from bzpath.base import (
    DEFAULT_COMPRESSION_LEVEL,
    EXTENSION_BZIP2,
    CodecOpenError,
    CompressError,
    UncompressError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Base Codec
# =============================================================================


class BaseCodec(ABC):
    """Abstract base class for block codecs.

    Subclasses implement the ``_do_*`` primitives; the public methods add
    error translation.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the codec name."""
        pass

    @property
    def extension(self) -> str:
        """Get the file extension for compressed files."""
        return self.name

    @abstractmethod
    def _do_compress(self, data: bytes, level: int) -> bytes:
        """Perform actual compression. Override in subclasses."""
        pass

    @abstractmethod
    def _do_decompress(self, data: bytes) -> bytes:
        """Perform actual decompression. Override in subclasses."""
        pass

    @abstractmethod
    def _do_open(self, path: str, mode: str) -> BinaryIO:
        """Open a compressed file handle. Override in subclasses."""
        pass

    def compress(self, data: bytes, level: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
        """Compress a whole buffer.

        Args:
            data: Uncompressed data.
            level: Codec-specific compression level.

        Returns:
            Compressed data.

        Raises:
            CompressError: If the codec rejects the input or the level.
        """
        try:
            return self._do_compress(data, level)
        except Exception as e:
            raise CompressError(f"Failed to {self.name} compress data: {e}") from e

    def decompress(self, data: bytes) -> bytes:
        """Decompress a whole buffer.

        Args:
            data: Compressed data.

        Returns:
            Original data.

        Raises:
            UncompressError: If the input is not a valid compressed stream.
        """
        try:
            return self._do_decompress(data)
        except Exception as e:
            raise UncompressError(f"Failed to {self.name} uncompress data: {e}") from e

    def open_writer(self, path: str) -> BinaryIO:
        """Open a handle that compresses everything written to ``path``.

        Raises:
            CodecOpenError: If the handle cannot be opened.
        """
        return self._open(path, "wb")

    def open_reader(self, path: str) -> BinaryIO:
        """Open a handle that yields the uncompressed content of ``path``.

        Raises:
            CodecOpenError: If the handle cannot be opened.
        """
        return self._open(path, "rb")

    def _open(self, path: str, mode: str) -> BinaryIO:
        try:
            return self._do_open(path, mode)
        except Exception as e:
            raise CodecOpenError(
                f"Failed to open {self.name.upper()} stream in path: {path}", path
            ) from e


# =============================================================================
# BZ2 Codec
# =============================================================================


class Bz2Codec(BaseCodec):
    """BZ2 compression using Python's built-in bz2 module.

    The level only decides the block size (100k to 900k) and is passed
    through unchanged; the module rejects values outside 1-9.
    """

    @property
    def name(self) -> str:
        return EXTENSION_BZIP2

    def _do_compress(self, data: bytes, level: int) -> bytes:
        return bz2.compress(data, compresslevel=level)

    def _do_decompress(self, data: bytes) -> bytes:
        return bz2.decompress(data)

    def _do_open(self, path: str, mode: str) -> BinaryIO:
        return bz2.BZ2File(path, mode)


# =============================================================================
# Buffer Codec
# =============================================================================


class BufferCodec:
    """In-memory compression of whole byte strings.

    Example:
        >>> codec = BufferCodec(Bz2Codec(), level=4)
        >>> codec.decompress(codec.compress(b"hello world"))
        b'hello world'
    """

    def __init__(
        self,
        codec: BaseCodec | None = None,
        level: int = DEFAULT_COMPRESSION_LEVEL,
    ) -> None:
        self._codec = codec or Bz2Codec()
        self._level = level

    @property
    def level(self) -> int:
        return self._level

    def compress(self, data: bytes, level: int | None = None) -> bytes:
        """Compress ``data`` at ``level`` (the configured level by default)."""
        level = self._level if level is None else level
        compressed = self._codec.compress(data, level)
        logger.debug(
            f"Compressed {len(data)} bytes to {len(compressed)} bytes at level {level}"
        )
        return compressed

    def decompress(self, data: bytes) -> bytes:
        return self._codec.decompress(data)
