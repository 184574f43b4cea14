"""Tarball archiver for directory trees.

Directories are linearized into an uncompressed ``<name>.tar`` beside them,
with the directory itself as the single top-level member, so that expanding
``<name>.tar`` next to it recreates ``<name>``.
"""

from __future__ import annotations

import logging
import tarfile

from bzpath.base import (
    EXTENSION_ARCHIVE,
    CompressError,
    PathConflictStrategy,
    UncompressError,
)
from bzpath.filesystem import Directory, File, FileManager
from bzpath.naming import PathResolver

logger = logging.getLogger(__name__)


def _reroot(name: str, root: str, new_root: str) -> str:
    """Move an archive member name from ``root`` to ``new_root``."""
    if name == root or name.startswith(f"{root}/"):
        return new_root + name[len(root):]
    return name


class TarballArchiver:
    """Converts directories to tar archives and back.

    ``conflict_strategy`` applies to restored directories only. The archive
    path is always resolved with the ERROR strategy.

    Example:
        >>> archiver = TarballArchiver(FileManager())
        >>> archive = archiver.compress_directory(Directory("/data/reports"))
        >>> str(archive)
        '/data/reports.tar'
    """

    def __init__(
        self,
        file_manager: FileManager | None = None,
        conflict_strategy: PathConflictStrategy = PathConflictStrategy.ERROR,
    ) -> None:
        self._file_manager = file_manager or FileManager()
        self._resolver = PathResolver(self._file_manager, conflict_strategy)
        self._archive_resolver = PathResolver(self._file_manager)

    @property
    def extension(self) -> str:
        return EXTENSION_ARCHIVE

    def compress_directory(self, directory: Directory) -> File:
        """Archive ``directory`` into ``<directory>.tar``.

        Raises:
            CompressError: If the directory does not exist.
            PathConflictError: If the archive path is taken.
            OSError: If the archive cannot be written.
        """
        if not directory.exists():
            raise CompressError(f"The given directory does not exist: {directory}", directory)

        target = self._archive_resolver.destination_for(directory, EXTENSION_ARCHIVE)
        try:
            with tarfile.open(target, mode="w") as tar:
                tar.add(directory.path, arcname=directory.name)
        except BaseException:
            target.unlink(missing_ok=True)
            raise

        logger.debug(f"Archived {directory} into {target}")
        return self._file_manager.get_file(target)

    def uncompress_directory(self, archive: File) -> Directory:
        """Expand ``<name>.tar`` into the directory ``<name>`` next to it.

        Raises:
            UncompressError: If the archive does not exist.
            NamingMismatchError: If the archive lacks the ``.tar`` suffix.
            PathConflictError: If the directory path is taken.
            tarfile.TarError: If the archive is malformed or unsafe.
        """
        if not archive.exists():
            raise UncompressError(f"The given archive does not exist: {archive}", archive)

        target = self._resolver.original_for(archive, EXTENSION_ARCHIVE)
        directory = self._file_manager.get_directory(target)

        try:
            with tarfile.open(archive.path, mode="r") as tar:
                members = tar.getmembers()
                roots = {member.name.split("/", 1)[0] for member in members}
                if len(roots) != 1:
                    raise tarfile.TarError(
                        f"Archive {archive} must contain exactly one top-level directory, "
                        f"found {len(roots)}"
                    )
                # The directory is restored under the name the archive maps to.
                root = roots.pop()
                for member in members:
                    member.name = _reroot(member.name, root, directory.name)
                    if member.islnk():
                        member.linkname = _reroot(member.linkname, root, directory.name)
                tar.extractall(directory.parent.path, members=members, filter="data")
        except BaseException:
            directory.delete()
            raise

        logger.debug(f"Expanded {archive} into {directory}")
        return directory
