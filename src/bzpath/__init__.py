"""bzpath - bzip2 compression for strings, files and directories.

Single files are compressed into ``<name>.bz2``. Directories are first
archived with tar and then compressed into ``<name>.tar.bz2``. Every
operation either produces its complete output or leaves nothing behind.

Example:
    >>> from bzpath import Bzip2CompressionMethod
    >>>
    >>> bzip2 = Bzip2CompressionMethod(compression_level=9)
    >>> compressed = bzip2.compress_path("reports/")       # reports.tar.bz2
    >>> bzip2.uncompress_path(compressed)                   # reports/
    >>>
    >>> bzip2.uncompress_string(bzip2.compress_string(b"hello world"))
    b'hello world'
"""

from bzpath.base import (
    # Constants
    DEFAULT_CHUNK_SIZE,
    DEFAULT_COMPRESSION_LEVEL,
    EXTENSION_ARCHIVE,
    EXTENSION_BZIP2,
    EXTENSION_BZIPPED_ARCHIVE,
    # Enums
    AccessMode,
    PathConflictStrategy,
    # Data classes
    TransferMetrics,
    # Protocols
    Archiver,
    PathCompressor,
    StreamCompressor,
    StringCodec,
    # Exceptions
    Bzip2Error,
    CodecOpenError,
    CompressError,
    ConfigError,
    InvalidPathError,
    NamingMismatchError,
    PathConflictError,
    UncompressError,
    UnknownExtensionError,
)
from bzpath.config import CompressionMethodConfig
from bzpath.filesystem import Directory, File, FileManager, FileStream, FileSystemPath
from bzpath.naming import PathResolver
from bzpath.providers import BaseCodec, BufferCodec, Bz2Codec
from bzpath.streaming import FileCodec
from bzpath.archive import TarballArchiver
from bzpath.pipeline import DirectoryPipeline
from bzpath.method import Bzip2CompressionMethod
from bzpath.registry import ComponentRegistry, register_bzip2_components

__version__ = "1.0.0"

__all__ = [
    # Constants
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_COMPRESSION_LEVEL",
    "EXTENSION_ARCHIVE",
    "EXTENSION_BZIP2",
    "EXTENSION_BZIPPED_ARCHIVE",
    # Enums
    "AccessMode",
    "PathConflictStrategy",
    # Data classes
    "TransferMetrics",
    "CompressionMethodConfig",
    # Protocols
    "Archiver",
    "PathCompressor",
    "StreamCompressor",
    "StringCodec",
    # Exceptions
    "Bzip2Error",
    "CodecOpenError",
    "CompressError",
    "ConfigError",
    "InvalidPathError",
    "NamingMismatchError",
    "PathConflictError",
    "UncompressError",
    "UnknownExtensionError",
    # Filesystem
    "Directory",
    "File",
    "FileManager",
    "FileStream",
    "FileSystemPath",
    "PathResolver",
    # Codecs
    "BaseCodec",
    "BufferCodec",
    "Bz2Codec",
    "FileCodec",
    # Directories
    "TarballArchiver",
    "DirectoryPipeline",
    # Entry point
    "Bzip2CompressionMethod",
    # Wiring
    "ComponentRegistry",
    "register_bzip2_components",
]
