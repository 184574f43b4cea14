"""Streaming file compression with all-or-nothing output.

Bytes are moved between a plain file stream and a codec handle in chunks of
at most ``chunk_size`` bytes, so peak memory stays bounded regardless of the
file size. Chunk boundaries do not influence the output.

Every handle opened by an operation is closed before the operation returns
or raises. If an operation fails, the partially written destination is
deleted after the handles are released, so callers never observe partial
output.

Example:
    >>> codec = FileCodec(FileManager(), chunk_size=1024 * 1024)
    >>> compressed = codec.compress(File("/data/report.txt"), "/data/report.txt.bz2")
    >>> restored = codec.decompress(compressed, "/tmp/report.txt")
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import ExitStack
from typing import Any, BinaryIO, Callable, Iterator, Protocol

from bzpath.base import DEFAULT_CHUNK_SIZE, AccessMode, ConfigError, TransferMetrics
from bzpath.filesystem import File, FileManager
from bzpath.providers import BaseCodec, Bz2Codec

logger = logging.getLogger(__name__)


class _Closeable(Protocol):
    def close(self) -> None: ...


def read_chunks(handle: BinaryIO, size: int) -> Iterator[bytes]:
    """Lazily read ``handle`` in chunks of at most ``size`` bytes.

    Short chunks are regular chunks. The sequence ends at the first read that
    returns no data, which codec handles only do at end of stream.
    """
    while chunk := handle.read(size):
        yield chunk


def _release(resource: _Closeable, label: str) -> Callable[..., bool]:
    """Build an exit callback that closes ``resource``.

    On the success path a failing ``close()`` propagates, since closing a
    codec writer flushes its final block. While another exception is
    unwinding, close failures are logged and dropped.
    """

    def _exit(exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        if exc_type is None:
            resource.close()
            return False
        try:
            resource.close()
        except Exception as e:
            logger.warning(f"Failed to close {label} during cleanup: {e}")
        return False

    return _exit


def _discard_partial(path: str) -> None:
    try:
        if os.path.isfile(path):
            os.unlink(path)
            logger.debug(f"Removed partial output {path}")
    except OSError as e:
        logger.warning(f"Failed to remove partial output {path}: {e}")


def _start(metrics: TransferMetrics | None) -> TransferMetrics:
    if metrics is None:
        metrics = TransferMetrics()
    metrics.start_time = time.time()
    return metrics


def _finish(metrics: TransferMetrics) -> None:
    metrics.end_time = time.time()
    logger.debug(f"Transfer complete: {metrics.to_dict()}")


class FileCodec:
    """Streams files through a block codec.

    A codec holds no per-transfer state, so one instance can serve
    concurrent transfers on distinct paths.

    Args:
        file_manager: Factory for the returned file objects.
        codec: Block codec, bzip2 by default.
        chunk_size: Maximum number of bytes moved per read/write call.
    """

    def __init__(
        self,
        file_manager: FileManager | None = None,
        codec: BaseCodec | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size <= 0:
            raise ConfigError("chunk_size must be positive")
        self._file_manager = file_manager or FileManager()
        self._codec = codec or Bz2Codec()
        self._chunk_size = chunk_size

    @property
    def codec(self) -> BaseCodec:
        return self._codec

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def compress(
        self,
        source: File,
        destination: str | os.PathLike[str],
        metrics: TransferMetrics | None = None,
    ) -> File:
        """Compress ``source`` into a new codec file at ``destination``.

        Args:
            source: File to read.
            destination: Path of the compressed file to create.
            metrics: Caller-owned metrics filled in by this transfer.

        Returns:
            The compressed file.

        Raises:
            CodecOpenError: If the codec handle cannot be opened.
            OSError: If reading or writing fails.
        """
        target = os.fspath(destination)
        metrics = _start(metrics)
        pre_existing = os.path.exists(target)
        writer: BinaryIO | None = None
        logger.debug(f"Compressing {source} into {target}")

        try:
            with ExitStack() as handles:
                stream = source.get_stream().open(AccessMode.READ)
                handles.push(_release(stream, f"source stream {source}"))

                writer = self._codec.open_writer(target)
                handles.push(_release(writer, f"{self._codec.name} writer {target}"))

                for chunk in stream.read_chunks(self._chunk_size):
                    writer.write(chunk)
                    metrics.bytes_in += len(chunk)
                    metrics.chunks_processed += 1
        except BaseException:
            if writer is not None or not pre_existing:
                _discard_partial(target)
            raise

        metrics.bytes_out = os.path.getsize(target)
        _finish(metrics)
        return self._file_manager.get_file(target)

    def decompress(
        self,
        compressed: File,
        destination: str | os.PathLike[str],
        metrics: TransferMetrics | None = None,
    ) -> File:
        """Uncompress the codec file ``compressed`` into ``destination``.

        Args:
            compressed: Codec file to read.
            destination: Path of the plain file to create.
            metrics: Caller-owned metrics filled in by this transfer.

        Returns:
            The uncompressed file.

        Raises:
            CodecOpenError: If the codec handle cannot be opened.
            OSError: If the data is not a valid stream or writing fails.
        """
        target = os.fspath(destination)
        metrics = _start(metrics)
        created = False
        logger.debug(f"Uncompressing {compressed} into {target}")

        try:
            with ExitStack() as handles:
                reader = self._codec.open_reader(str(compressed))
                handles.push(_release(reader, f"{self._codec.name} reader {compressed}"))

                file = self._file_manager.create_file(target)
                created = True
                stream = file.get_stream().open(AccessMode.APPEND)
                handles.push(_release(stream, f"destination stream {target}"))

                for chunk in read_chunks(reader, self._chunk_size):
                    stream.append(chunk)
                    metrics.bytes_out += len(chunk)
                    metrics.chunks_processed += 1
        except BaseException:
            if created:
                _discard_partial(target)
            raise

        metrics.bytes_in = compressed.size
        _finish(metrics)
        return file
