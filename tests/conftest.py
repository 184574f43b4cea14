"""Shared fixtures for bzpath tests."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any, BinaryIO

import pytest

from bzpath import Bz2Codec, Directory, File, FileManager


def make_content(lines: int = 4000) -> bytes:
    """Build deterministic, moderately compressible content."""
    parts = []
    for i in range(lines):
        digest = hashlib.md5(str(i).encode()).hexdigest()
        parts.append(f"{i:06d} user{i % 97}@example.com {digest}\n".encode())
    return b"".join(parts)


CONTENT = make_content()


# =============================================================================
# Fault Injection
# =============================================================================


class FlakyHandle:
    """Codec handle that fails after a number of successful operations."""

    def __init__(
        self,
        handle: BinaryIO,
        fail_after: int,
        fail_on_close: bool = False,
    ) -> None:
        self._handle = handle
        self._fail_after = fail_after
        self._fail_on_close = fail_on_close
        self.operations = 0
        self.close_calls = 0

    def _tick(self) -> None:
        if self.operations >= self._fail_after:
            raise OSError("Simulated codec failure")
        self.operations += 1

    def write(self, data: bytes) -> int:
        self._tick()
        return self._handle.write(data)

    def read(self, size: int = -1) -> bytes:
        self._tick()
        return self._handle.read(size)

    def close(self) -> None:
        self.close_calls += 1
        self._handle.close()
        if self._fail_on_close:
            raise OSError("Simulated close failure")

    @property
    def closed(self) -> bool:
        return self._handle.closed


class FailingCodec(Bz2Codec):
    """bzip2 codec whose handles fail mid-stream.

    Args:
        fail_after: Number of successful reads/writes before failing.
        mode: Which handles fail, "w" for writers or "r" for readers.
        fail_on_close: Also fail when the handle is closed.
    """

    def __init__(self, fail_after: int = 1, mode: str = "w", fail_on_close: bool = False) -> None:
        self.fail_after = fail_after
        self.mode = mode
        self.fail_on_close = fail_on_close
        self.handles: list[Any] = []

    def _do_open(self, path: str, mode: str) -> BinaryIO:
        handle = super()._do_open(path, mode)
        if mode.startswith(self.mode):
            handle = FlakyHandle(handle, self.fail_after, self.fail_on_close)
        self.handles.append(handle)
        return handle


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def file_manager() -> FileManager:
    return FileManager()


@pytest.fixture
def content() -> bytes:
    return CONTENT


@pytest.fixture
def text_file(tmp_path: Path) -> File:
    """A single file with known content."""
    path = tmp_path / "file.txt"
    path.write_bytes(CONTENT)
    return File(path)


@pytest.fixture
def empty_file(tmp_path: Path) -> File:
    path = tmp_path / "empty.txt"
    path.write_bytes(b"")
    return File(path)


@pytest.fixture
def tree(tmp_path: Path) -> Directory:
    """A directory with nested files of known content.

    Layout:
        abc/
            top.txt
            def/ghi/jkl/mno/file.txt
            def/empty.bin
            data.bin
    """
    root = tmp_path / "abc"
    nested = root / "def" / "ghi" / "jkl" / "mno"
    nested.mkdir(parents=True)
    (root / "top.txt").write_bytes(b"top level\n")
    (nested / "file.txt").write_bytes(CONTENT)
    (root / "def" / "empty.bin").write_bytes(b"")
    (root / "data.bin").write_bytes(bytes(range(256)) * 64)
    return Directory(root)


def snapshot(directory: Directory) -> dict[str, bytes]:
    """Map each file's path relative to ``directory`` to its content."""
    return {
        file.path.relative_to(directory.path).as_posix(): file.read()
        for file in directory.iter_files()
    }
