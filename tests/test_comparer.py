"""Tests for binary and hash comparison of files and streams."""
from __future__ import annotations

import io
from pathlib import Path

import pytest

from filecomparer.comparer import (
    FileRef,
    binary_compare,
    binary_compare_async,
    hash_compare,
)
from filecomparer.errors import AlgorithmError, InvalidArgumentError


class TrickleStream(io.BytesIO):
    """BytesIO that never returns more than a few bytes per read."""

    def __init__(self, data: bytes, max_read: int = 3) -> None:
        super().__init__(data)
        self.max_read = max_read

    def read(self, size=-1):
        if size is None or size < 0:
            size = self.max_read
        return super().read(min(size, self.max_read))


class NoReadStream(io.BytesIO):
    """BytesIO whose content must never be read."""

    def read(self, size=-1):
        raise AssertionError("content was read")


def _flip(data: bytes, index: int) -> bytes:
    return data[:index] + bytes([data[index] ^ 0xFF]) + data[index + 1:]


COMPARERS = [
    pytest.param(lambda a, b: binary_compare(a, b), id="binary"),
    pytest.param(lambda a, b: binary_compare(a, b, chunk_size=7), id="binary-7"),
    pytest.param(lambda a, b: hash_compare("md5", a, b), id="hash-md5"),
    pytest.param(lambda a, b: hash_compare("hmac-sha1", a, b), id="hash-hmac-sha1"),
]


class TestFiles:
    @pytest.mark.parametrize("compare", COMPARERS)
    def test_copy_is_identical(self, compare, make_file, sample_bytes):
        assert compare(make_file(sample_bytes), make_file(sample_bytes)) is True

    @pytest.mark.parametrize("compare", COMPARERS)
    def test_same_path_is_identical(self, compare, make_file, sample_bytes):
        p = make_file(sample_bytes)
        assert compare(p, p) is True

    @pytest.mark.parametrize("compare", COMPARERS)
    @pytest.mark.parametrize("index", [0, 4095, 4096, -1])
    def test_one_byte_differs(self, compare, index, make_file, sample_bytes):
        index = index % len(sample_bytes)
        assert compare(make_file(sample_bytes), make_file(_flip(sample_bytes, index))) is False

    @pytest.mark.parametrize("compare", COMPARERS)
    def test_empty_files(self, compare, make_file):
        assert compare(make_file(b""), make_file(b"")) is True

    @pytest.mark.parametrize("compare", COMPARERS)
    def test_length_mismatch_does_not_open(self, compare, make_file, monkeypatch):
        big = make_file(b"\x00" * 2_000_000)
        small = make_file(b"\x00" * 10)

        def fail(*args, **kwargs):
            raise AssertionError("file was opened")

        monkeypatch.setattr(Path, "open", fail)
        assert compare(big, small) is False

    def test_str_paths(self, make_file, sample_bytes):
        a, b = make_file(sample_bytes), make_file(sample_bytes)
        assert binary_compare(str(a), str(b))
        assert hash_compare("sha256", str(a), str(b))

    def test_file_ref_uses_cached_size(self, make_file):
        a = make_file(b"abc")
        b = make_file(b"abc")
        stale = FileRef(path=b, size=99)
        assert binary_compare(FileRef.of(a), stale) is False

    def test_file_ref_is_path_like(self, make_file):
        ref = FileRef.of(make_file(b"abc"))
        assert ref.size == 3
        assert Path(ref) == ref.path

    def test_missing_file_propagates(self, tmp_path, make_file):
        with pytest.raises(FileNotFoundError):
            binary_compare(make_file(b"x"), tmp_path / "missing")
        with pytest.raises(FileNotFoundError):
            hash_compare("md5", tmp_path / "missing", make_file(b"x"))

    @pytest.mark.parametrize("chunk_size", [0, -4])
    def test_bad_chunk_size(self, chunk_size, make_file):
        with pytest.raises(InvalidArgumentError):
            binary_compare(make_file(b"a"), make_file(b"a"), chunk_size=chunk_size)

    def test_unknown_algorithm(self, make_file):
        with pytest.raises(AlgorithmError):
            hash_compare("nope", make_file(b"a"), make_file(b"a"))

    def test_mixed_inputs_rejected(self, make_file):
        with pytest.raises(InvalidArgumentError):
            binary_compare(make_file(b"a"), io.BytesIO(b"a"))
        with pytest.raises(InvalidArgumentError):
            hash_compare("md5", io.BytesIO(b"a"), make_file(b"a"))


class TestStreams:
    @pytest.mark.parametrize("compare", COMPARERS)
    def test_copy_is_identical(self, compare, sample_bytes):
        assert compare(io.BytesIO(sample_bytes), io.BytesIO(sample_bytes)) is True

    @pytest.mark.parametrize("compare", COMPARERS)
    def test_one_byte_differs(self, compare, sample_bytes):
        assert compare(io.BytesIO(sample_bytes), io.BytesIO(_flip(sample_bytes, 5000))) is False

    @pytest.mark.parametrize("compare", COMPARERS)
    def test_length_mismatch_does_not_read(self, compare):
        assert compare(NoReadStream(b"\x00" * 5_000_000), NoReadStream(b"\x00" * 3)) is False

    @pytest.mark.parametrize("compare", COMPARERS)
    def test_streams_are_rewound(self, compare, sample_bytes):
        a, b = io.BytesIO(sample_bytes), io.BytesIO(sample_bytes)
        a.seek(100)
        b.seek(len(sample_bytes))
        assert compare(a, b) is True

    def test_streams_are_not_closed(self, sample_bytes):
        a, b = io.BytesIO(sample_bytes), io.BytesIO(sample_bytes)
        binary_compare(a, b)
        hash_compare("md5", a, b)
        assert not a.closed and not b.closed

    @pytest.mark.parametrize("max_read", [1, 3, 1000])
    def test_short_reads_on_one_side(self, max_read, sample_bytes):
        assert binary_compare(io.BytesIO(sample_bytes), TrickleStream(sample_bytes, max_read)) is True
        assert binary_compare(TrickleStream(sample_bytes, max_read), io.BytesIO(sample_bytes)) is True
        changed = _flip(sample_bytes, len(sample_bytes) - 1)
        assert binary_compare(io.BytesIO(sample_bytes), TrickleStream(changed, max_read)) is False

    def test_short_reads_hash_mode(self, sample_bytes):
        assert hash_compare("sha1", TrickleStream(sample_bytes), io.BytesIO(sample_bytes)) is True


class TestChunkSizeInvariance:
    DATA = b"The quick brown fox jumps over the lazy dog!"

    @pytest.mark.parametrize("chunk_size", range(1, len(DATA) + 2))
    def test_equal(self, chunk_size):
        assert binary_compare(io.BytesIO(self.DATA), io.BytesIO(self.DATA), chunk_size) is True

    @pytest.mark.parametrize("chunk_size", range(1, len(DATA) + 2))
    def test_different(self, chunk_size):
        other = _flip(self.DATA, 17)
        assert binary_compare(io.BytesIO(self.DATA), io.BytesIO(other), chunk_size) is False


class TestAsync:
    @pytest.mark.asyncio
    async def test_copy_is_identical(self, make_file, sample_bytes):
        assert await binary_compare_async(make_file(sample_bytes), make_file(sample_bytes)) is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("chunk_size", [1, 13, 4096, 1 << 20])
    async def test_one_byte_differs(self, chunk_size, make_file, sample_bytes):
        a = make_file(sample_bytes)
        b = make_file(_flip(sample_bytes, 9000))
        assert await binary_compare_async(a, b, chunk_size) is False

    @pytest.mark.asyncio
    async def test_length_mismatch(self, make_file):
        assert await binary_compare_async(make_file(b"abcd"), make_file(b"abc")) is False

    @pytest.mark.asyncio
    async def test_length_mismatch_does_not_open(self, make_file, monkeypatch):
        big = make_file(b"\x00" * 2_000_000)
        small = make_file(b"\x00" * 10)

        def fail(*args, **kwargs):
            raise AssertionError("file was opened")

        monkeypatch.setattr("filecomparer.comparer.aiofiles.open", fail)
        assert await binary_compare_async(big, small) is False

    @pytest.mark.asyncio
    async def test_streams(self, sample_bytes):
        assert await binary_compare_async(io.BytesIO(sample_bytes), TrickleStream(sample_bytes)) is True

    @pytest.mark.asyncio
    async def test_missing_file_propagates(self, tmp_path, make_file):
        with pytest.raises(FileNotFoundError):
            await binary_compare_async(tmp_path / "missing", make_file(b"x"))
