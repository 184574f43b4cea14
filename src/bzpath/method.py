"""The bzip2 compression method.

``Bzip2CompressionMethod`` is the entry point for callers. It compresses
strings in memory, single files into ``<name>.bz2`` and directories into
``<name>.tar.bz2``, and reverses each of these.

Every public operation raises either ``CompressError`` or
``UncompressError`` (or one of their subclasses). Unexpected lower-level
failures are wrapped into the umbrella error for the direction, with the
original exception chained as ``__cause__``.

Example:
    >>> from bzpath import Bzip2CompressionMethod
    >>>
    >>> bzip2 = Bzip2CompressionMethod()
    >>> archive = bzip2.compress_path("/data/reports")      # /data/reports.tar.bz2
    >>> restored = bzip2.uncompress_path(archive)            # /data/reports
    >>>
    >>> payload = bzip2.compress_string(b"hello world")
    >>> bzip2.uncompress_string(payload)
    b'hello world'
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator

from bzpath.archive import TarballArchiver
from bzpath.base import (
    EXTENSION_BZIP2,
    EXTENSION_BZIPPED_ARCHIVE,
    Archiver,
    Bzip2Error,
    CompressError,
    InvalidPathError,
    NamingMismatchError,
    PathConflictStrategy,
    UncompressError,
    UnknownExtensionError,
)
from bzpath.config import CompressionMethodConfig
from bzpath.filesystem import Directory, File, FileManager, FileSystemPath
from bzpath.naming import PathResolver, has_extension
from bzpath.pipeline import DirectoryPipeline
from bzpath.providers import BaseCodec, BufferCodec, Bz2Codec
from bzpath.streaming import FileCodec

logger = logging.getLogger(__name__)

PathLike = str | os.PathLike[str]


@contextmanager
def _wrap_errors(error_type: type[Bzip2Error], action: str) -> Iterator[None]:
    try:
        yield
    except error_type:
        raise
    except Exception as e:
        raise error_type(f"Unexpected {action} Exception: {e}") from e


class Bzip2CompressionMethod:
    """Compresses strings, files and directories with bzip2.

    Args:
        file_manager: Factory for path objects.
        archiver: Converts directories into single-stream archives.
        conflict_strategy: How existing destination paths are handled.
        compression_level: Block size (1-9) for string compression.
        chunk_size: Bytes moved per read/write when streaming files.
        config: Base configuration; explicit arguments override it.
        codec: Block codec, bzip2 by default.

    Raises:
        ConfigError: If the resulting configuration is invalid.
    """

    def __init__(
        self,
        file_manager: FileManager | None = None,
        archiver: Archiver | None = None,
        conflict_strategy: PathConflictStrategy | None = None,
        compression_level: int | None = None,
        chunk_size: int | None = None,
        *,
        config: CompressionMethodConfig | None = None,
        codec: BaseCodec | None = None,
    ) -> None:
        self._config = (config or CompressionMethodConfig()).with_overrides(
            conflict_strategy=conflict_strategy,
            compression_level=compression_level,
            chunk_size=chunk_size,
        )
        self._config.validate()

        self._file_manager = file_manager or FileManager()
        self._codec = codec or Bz2Codec()
        self._resolver = PathResolver(self._file_manager, self._config.conflict_strategy)
        self._buffer_codec = BufferCodec(self._codec, self._config.compression_level)
        self._file_codec = FileCodec(self._file_manager, self._codec, self._config.chunk_size)
        self._pipeline = DirectoryPipeline(
            archiver or TarballArchiver(self._file_manager, self._config.conflict_strategy),
            self._file_codec,
            self._file_manager,
            self._config.conflict_strategy,
        )

    @property
    def config(self) -> CompressionMethodConfig:
        return self._config

    @property
    def file_codec(self) -> FileCodec:
        return self._file_codec

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------

    def compress_path(self, path: PathLike) -> File:
        """Compress a file or a directory.

        Args:
            path: Existing file or directory.

        Returns:
            ``<path>.bz2`` for a file, ``<path>.tar.bz2`` for a directory.

        Raises:
            InvalidPathError: If nothing exists at ``path``.
            CompressError: If compression fails.
        """
        target = self._file_manager.get_path(path)
        if target.is_directory():
            return self.compress_directory(self._file_manager.get_directory(target))
        if target.is_file():
            return self.compress_file(self._file_manager.get_file(target))
        raise InvalidPathError(f"The provided path does not exist: {target}", target)

    def uncompress_path(self, path: PathLike) -> FileSystemPath:
        """Uncompress a ``.bz2`` file or a ``.tar.bz2`` directory archive.

        Raises:
            UnknownExtensionError: If the name carries neither suffix.
            UncompressError: If uncompression fails.
        """
        absolute_path = str(FileSystemPath(path))
        if has_extension(absolute_path, EXTENSION_BZIPPED_ARCHIVE):
            return self.uncompress_directory(absolute_path)
        if has_extension(absolute_path, EXTENSION_BZIP2):
            return self.uncompress_file(absolute_path)
        raise UnknownExtensionError(absolute_path)

    # -------------------------------------------------------------------------
    # Directories
    # -------------------------------------------------------------------------

    def compress_directory(self, directory: PathLike) -> File:
        """Compress a directory into ``<directory>.tar.bz2``.

        Raises:
            CompressError: If the directory does not exist or compression fails.
        """
        with _wrap_errors(CompressError, "Compression"):
            compressed = self._pipeline.compress_directory(
                self._file_manager.get_directory(directory)
            )
        logger.info(f"Compressed directory {directory} into {compressed}")
        return compressed

    def uncompress_directory(self, file: PathLike) -> Directory:
        """Uncompress a ``<name>.tar.bz2`` archive into the directory ``<name>``.

        Raises:
            NamingMismatchError: If the archive lacks the ``.tar.bz2`` suffix.
            UncompressError: If the archive does not exist or uncompression fails.
        """
        with _wrap_errors(UncompressError, "Uncompression"):
            directory = self._pipeline.uncompress_directory(self._file_manager.get_file(file))
        logger.info(f"Uncompressed archive {file} into {directory}")
        return directory

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def compress_file(self, file: PathLike) -> File:
        """Compress a file into ``<file>.bz2``.

        Raises:
            CompressError: If the file does not exist or compression fails.
        """
        with _wrap_errors(CompressError, "Compression"):
            source = self._file_manager.get_file(file)
            if not source.exists():
                raise CompressError(f"The given file does not exist: {source}", source)
            destination = self._resolver.destination_for(source, EXTENSION_BZIP2)
            compressed = self._file_codec.compress(source, destination)
        logger.info(f"Compressed file {source} into {compressed}")
        return compressed

    def uncompress_file(self, file: PathLike) -> File:
        """Uncompress a ``<name>.bz2`` file into ``<name>``.

        Raises:
            NamingMismatchError: If the file lacks the ``.bz2`` suffix.
            UncompressError: If the file does not exist or uncompression fails.
        """
        with _wrap_errors(UncompressError, "Uncompression"):
            compressed = self._file_manager.get_file(file)
            if not compressed.exists():
                raise UncompressError(
                    f"The given compressed file does not exist: {compressed}", compressed
                )
            if not has_extension(compressed, EXTENSION_BZIP2):
                raise NamingMismatchError(compressed, EXTENSION_BZIP2)
            destination = self._resolver.original_for(compressed, EXTENSION_BZIP2)
            uncompressed = self._file_codec.decompress(compressed, destination)
        logger.info(f"Uncompressed file {compressed} into {uncompressed}")
        return uncompressed

    # -------------------------------------------------------------------------
    # Strings
    # -------------------------------------------------------------------------

    def compress_string(self, data: bytes, level: int | None = None) -> bytes:
        """Compress a byte string in memory.

        Args:
            data: Uncompressed data.
            level: Block size 1-9; the configured level when omitted.

        Raises:
            CompressError: If the codec rejects the input or the level.
        """
        with _wrap_errors(CompressError, "Compression"):
            return self._buffer_codec.compress(data, level)

    def uncompress_string(self, data: bytes) -> bytes:
        """Uncompress a byte string in memory.

        Raises:
            UncompressError: If ``data`` is not a valid bzip2 stream.
        """
        with _wrap_errors(UncompressError, "Uncompression"):
            return self._buffer_codec.decompress(data)
