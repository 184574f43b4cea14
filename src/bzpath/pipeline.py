"""Two-stage pipeline for directories: archive, then compress.

Stages per call:

    compress:    directory -> <name>.tar -> <name>.tar.bz2, drop <name>.tar
    uncompress:  <name>.tar.bz2 -> <name>.tar -> directory, drop <name>.tar

The intermediate ``.tar`` is removed on every exit path, whether the codec or
archiver stage succeeded or not. Its path is resolved with the ERROR
strategy whatever the configured one, so an unrelated ``<name>.tar`` next to
the input is never deleted or renamed around; the call fails instead.
"""

from __future__ import annotations

import logging

from bzpath.base import (
    EXTENSION_BZIP2,
    EXTENSION_BZIPPED_ARCHIVE,
    Archiver,
    CompressError,
    NamingMismatchError,
    PathConflictStrategy,
    UncompressError,
)
from bzpath.filesystem import Directory, File, FileManager
from bzpath.naming import PathResolver, has_extension
from bzpath.streaming import FileCodec

logger = logging.getLogger(__name__)


def _drop_intermediate(archive: File) -> None:
    try:
        archive.delete()
    except OSError as e:
        logger.warning(f"Failed to remove intermediate archive {archive}: {e}")


class DirectoryPipeline:
    """Composes an archiver with the streaming file codec.

    Args:
        archiver: Converts directories to single-stream archives and back.
        file_codec: Streams the archive through the block codec.
        file_manager: Factory for path objects.
        conflict_strategy: How existing final outputs are handled. Does not
            apply to the intermediate archive.
    """

    def __init__(
        self,
        archiver: Archiver,
        file_codec: FileCodec,
        file_manager: FileManager | None = None,
        conflict_strategy: PathConflictStrategy = PathConflictStrategy.ERROR,
    ) -> None:
        self._archiver = archiver
        self._file_codec = file_codec
        self._file_manager = file_manager or FileManager()
        self._resolver = PathResolver(self._file_manager, conflict_strategy)
        self._intermediate_resolver = PathResolver(self._file_manager)

    def compress_directory(self, directory: Directory) -> File:
        """Compress ``directory`` into ``<directory>.tar.bz2``.

        Raises:
            CompressError: If the directory does not exist.
        """
        if not directory.exists():
            raise CompressError(f"The given directory does not exist: {directory}", directory)

        destination = self._resolver.destination_for(directory, EXTENSION_BZIPPED_ARCHIVE)
        archive = self._archiver.compress_directory(directory)
        try:
            compressed = self._file_codec.compress(archive, destination)
        finally:
            _drop_intermediate(archive)

        logger.debug(f"Compressed directory {directory} into {compressed}")
        return compressed

    def uncompress_directory(self, compressed: File) -> Directory:
        """Uncompress ``<name>.tar.bz2`` into the directory ``<name>``.

        Raises:
            UncompressError: If the archive does not exist.
            NamingMismatchError: If the archive lacks the ``.tar.bz2`` suffix.
        """
        if not compressed.exists():
            raise UncompressError(f"The given archive does not exist: {compressed}", compressed)
        if not has_extension(compressed, EXTENSION_BZIPPED_ARCHIVE):
            raise NamingMismatchError(compressed, EXTENSION_BZIPPED_ARCHIVE)

        destination = self._intermediate_resolver.original_for(compressed, EXTENSION_BZIP2)
        archive = self._file_codec.decompress(compressed, destination)
        try:
            directory = self._archiver.uncompress_directory(archive)
        finally:
            _drop_intermediate(archive)

        logger.debug(f"Uncompressed archive {compressed} into {directory}")
        return directory
