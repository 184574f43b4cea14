"""Tests for Bzip2CompressionMethod."""

import bz2
import logging

import pytest

from bzpath import (
    Bzip2CompressionMethod,
    CompressError,
    CompressionMethodConfig,
    ConfigError,
    Directory,
    File,
    InvalidPathError,
    NamingMismatchError,
    PathConflictError,
    PathConflictStrategy,
    UncompressError,
    UnknownExtensionError,
)

from conftest import FailingCodec, snapshot


@pytest.fixture
def method():
    return Bzip2CompressionMethod()


class TestConstruction:
    """Tests for configuring the method."""

    def test_defaults(self, method):
        """Test default configuration."""
        assert method.config == CompressionMethodConfig()
        assert method.file_codec.chunk_size == method.config.chunk_size

    def test_explicit_arguments_override_config(self):
        """Test keyword arguments win over the given config."""
        config = CompressionMethodConfig(compression_level=2, chunk_size=100)

        method = Bzip2CompressionMethod(compression_level=7, config=config)

        assert method.config.compression_level == 7
        assert method.config.chunk_size == 100

    @pytest.mark.parametrize("level", [0, 10])
    def test_invalid_level(self, level):
        """Test out-of-range levels are rejected up front."""
        with pytest.raises(ConfigError):
            Bzip2CompressionMethod(compression_level=level)

    def test_invalid_chunk_size(self):
        """Test non-positive chunk sizes are rejected up front."""
        with pytest.raises(ConfigError):
            Bzip2CompressionMethod(chunk_size=0)


class TestStrings:
    """Tests for in-memory compression."""

    def test_hello_world(self, method):
        """Test the simplest string roundtrip."""
        compressed = method.compress_string(b"hello world")

        assert compressed != b"hello world"
        assert method.uncompress_string(compressed) == b"hello world"

    def test_configured_level(self, content):
        """Test the configured level sets the block size."""
        method = Bzip2CompressionMethod(compression_level=9)

        assert method.compress_string(content).startswith(b"BZh9")

    def test_level_override(self, method, content):
        """Test a per-call level."""
        compressed = method.compress_string(content, level=1)

        assert compressed.startswith(b"BZh1")
        assert method.uncompress_string(compressed) == content

    @pytest.mark.parametrize("level", [0, 10])
    def test_invalid_level_override(self, method, level):
        """Test a per-call level outside 1-9."""
        with pytest.raises(CompressError) as exc_info:
            method.compress_string(b"data", level=level)

        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_invalid_data(self, method):
        """Test uncompressing data that is not bzip2."""
        with pytest.raises(UncompressError):
            method.uncompress_string(b"hello world")

    def test_empty(self, method):
        """Test the empty string."""
        assert method.uncompress_string(method.compress_string(b"")) == b""


class TestFiles:
    """Tests for single-file compression."""

    def test_roundtrip(self, method, text_file, content):
        """Test compressing and restoring a file."""
        compressed = method.compress_file(text_file)

        assert compressed.path == text_file.path.with_name("file.txt.bz2")
        assert text_file.exists()
        assert bz2.decompress(compressed.read()) == content

        text_file.delete()
        restored = method.uncompress_file(compressed)

        assert restored == text_file
        assert restored.read() == content

    def test_accepts_plain_paths(self, method, text_file, content):
        """Test str and pathlib paths are accepted."""
        compressed = method.compress_file(str(text_file))
        text_file.delete()

        restored = method.uncompress_file(compressed.path)

        assert restored.read() == content

    def test_empty_file(self, method, empty_file):
        """Test a zero-byte file roundtrips."""
        compressed = method.compress_file(empty_file)
        empty_file.delete()

        restored = method.uncompress_file(compressed)

        assert compressed.size > 0
        assert restored.exists()
        assert restored.size == 0

    def test_small_chunks(self, text_file, content):
        """Test a chunk size far below the file size."""
        method = Bzip2CompressionMethod(chunk_size=333)

        compressed = method.compress_file(text_file)
        text_file.delete()

        assert method.uncompress_file(compressed).read() == content

    def test_compress_missing(self, method, tmp_path):
        """Test compressing a missing file."""
        with pytest.raises(CompressError, match="does not exist"):
            method.compress_file(tmp_path / "missing.txt")

    def test_uncompress_missing(self, method, tmp_path):
        """Test uncompressing a missing file."""
        with pytest.raises(UncompressError, match="does not exist"):
            method.uncompress_file(tmp_path / "missing.txt.bz2")

    def test_uncompress_wrong_suffix(self, method, text_file):
        """Test uncompressing a file without the bz2 suffix."""
        with pytest.raises(NamingMismatchError) as exc_info:
            method.uncompress_file(text_file)

        assert str(exc_info.value) == f"Path {text_file} does not have the extension: bz2"

    def test_uncompress_corrupt(self, method, tmp_path):
        """Test corrupt input leaves no output."""
        corrupt = File(tmp_path / "corrupt.txt.bz2")
        corrupt.write(b"garbage")

        with pytest.raises(UncompressError, match="Unexpected Uncompression Exception"):
            method.uncompress_file(corrupt)

        assert not (tmp_path / "corrupt.txt").exists()

    def test_codec_failure_is_wrapped(self, text_file):
        """Test low-level failures surface as CompressError with a cause."""
        method = Bzip2CompressionMethod(codec=FailingCodec(fail_after=1), chunk_size=1024)

        with pytest.raises(CompressError) as exc_info:
            method.compress_file(text_file)

        assert isinstance(exc_info.value.__cause__, OSError)
        assert not text_file.path.with_name("file.txt.bz2").exists()

    def test_conflict_error(self, method, text_file):
        """Test an existing destination is kept by default."""
        existing = text_file.path.with_name("file.txt.bz2")
        existing.write_bytes(b"keep")

        with pytest.raises(CompressError) as exc_info:
            method.compress_file(text_file)

        assert isinstance(exc_info.value.__cause__, PathConflictError)
        assert existing.read_bytes() == b"keep"

    def test_conflict_overwrite(self, text_file, content):
        """Test OVERWRITE replaces an existing destination."""
        existing = text_file.path.with_name("file.txt.bz2")
        existing.write_bytes(b"stale")
        method = Bzip2CompressionMethod(conflict_strategy=PathConflictStrategy.OVERWRITE)

        compressed = method.compress_file(text_file)

        assert compressed.path == existing
        assert bz2.decompress(existing.read_bytes()) == content

    def test_conflict_rename(self, text_file, content):
        """Test RENAME writes beside an existing destination."""
        method = Bzip2CompressionMethod(conflict_strategy=PathConflictStrategy.RENAME)

        compressed = method.compress_file(text_file)
        restored = method.uncompress_file(compressed)

        assert restored.name == "file (1).txt"
        assert restored.read() == content
        assert text_file.read() == content


class TestDirectories:
    """Tests for directory compression."""

    def test_roundtrip(self, method, tree):
        """Test a nested tree survives compression."""
        expected = snapshot(tree)

        compressed = method.compress_directory(tree)
        assert compressed.path == tree.path.with_name("abc.tar.bz2")

        tree.delete()
        restored = method.uncompress_directory(compressed)

        assert isinstance(restored, Directory)
        assert restored == tree
        assert snapshot(restored) == expected

    def test_no_intermediate_archive(self, method, tree):
        """Test the intermediate tar never outlives a call."""
        compressed = method.compress_directory(tree)
        assert not tree.path.with_name("abc.tar").exists()

        tree.delete()
        method.uncompress_directory(compressed)
        assert not tree.path.with_name("abc.tar").exists()

    def test_compress_missing(self, method, tmp_path):
        """Test compressing a missing directory."""
        with pytest.raises(CompressError):
            method.compress_directory(tmp_path / "missing")

    def test_uncompress_wrong_suffix(self, method, text_file):
        """Test uncompressing a plain bz2 file as a directory."""
        compressed = method.compress_file(text_file)

        with pytest.raises(NamingMismatchError):
            method.uncompress_directory(compressed)

    def test_codec_failure(self, tree):
        """Test a failing codec leaves nothing beside the directory."""
        method = Bzip2CompressionMethod(codec=FailingCodec(fail_after=1), chunk_size=1024)

        with pytest.raises(CompressError, match="Unexpected Compression Exception"):
            method.compress_directory(tree)

        assert sorted(p.name for p in tree.path.parent.iterdir()) == ["abc"]

    def test_uncompress_failure(self, method, tree):
        """Test a failing reader leaves nothing beside the archive."""
        compressed = method.compress_directory(tree)
        tree.delete()
        failing = Bzip2CompressionMethod(codec=FailingCodec(fail_after=1, mode="r"))

        with pytest.raises(UncompressError) as exc_info:
            failing.uncompress_directory(compressed)

        assert isinstance(exc_info.value.__cause__, OSError)
        assert sorted(p.name for p in tree.path.parent.iterdir()) == ["abc.tar.bz2"]


class TestPaths:
    """Tests for path dispatch."""

    def test_compress_file_path(self, method, text_file):
        """Test a file path is compressed as a file."""
        via_path = method.compress_path(text_file)
        data = via_path.read()
        via_path.delete()

        via_file = method.compress_file(text_file)

        assert via_path == via_file
        assert via_file.read() == data

    def test_compress_directory_path(self, method, tree):
        """Test a directory path gives the same result as compress_directory."""
        via_path = method.compress_path(tree.path)
        data = via_path.read()
        via_path.delete()

        via_directory = method.compress_directory(tree)

        assert via_path == via_directory
        assert via_path.name == "abc.tar.bz2"
        assert via_directory.read() == data

    def test_uncompress_directory_path(self, method, tree):
        """Test a .tar.bz2 path gives the same result as uncompress_directory."""
        expected = snapshot(tree)
        compressed = method.compress_directory(tree)
        tree.delete()

        via_path = method.uncompress_path(compressed)
        assert isinstance(via_path, Directory)
        restored_via_path = snapshot(via_path)
        via_path.delete()

        via_directory = method.uncompress_directory(compressed)

        assert via_path == via_directory
        assert restored_via_path == snapshot(via_directory) == expected

    def test_uncompress_file_path(self, method, text_file, content):
        """Test a .bz2 path gives the same result as uncompress_file."""
        compressed = method.compress_path(text_file)
        text_file.delete()

        via_path = method.uncompress_path(str(compressed))
        assert isinstance(via_path, File)
        assert via_path.read() == content
        via_path.delete()

        via_file = method.uncompress_file(compressed)

        assert via_path == via_file
        assert via_file.read() == content

    def test_compress_missing_path(self, method, tmp_path):
        """Test compressing a path with nothing at it."""
        with pytest.raises(InvalidPathError, match="does not exist"):
            method.compress_path(tmp_path / "missing")

    def test_uncompress_unknown_extension(self, method, text_file):
        """Test uncompressing a path with an unknown suffix."""
        with pytest.raises(UnknownExtensionError):
            method.uncompress_path(text_file)

    def test_relative_paths(self, method, tmp_path, monkeypatch, content):
        """Test relative paths resolve against the working directory."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "notes.txt").write_bytes(content)

        compressed = method.compress_path("notes.txt")
        (tmp_path / "notes.txt").unlink()
        restored = method.uncompress_path("notes.txt.bz2")

        assert compressed.path.is_absolute()
        assert restored.read() == content

    def test_logs_operations(self, method, text_file, caplog):
        """Test completed operations are logged."""
        with caplog.at_level(logging.INFO, logger="bzpath.method"):
            method.compress_path(text_file)

        assert "Compressed file" in caplog.text
