"""File and stream equality checks.

Two strategies are offered: chunked binary comparison (``binary_compare``,
``binary_compare_async``) and digest comparison (``hash_compare``). Both take
either two paths or two seekable binary streams.

Nothing here validates that files exist or are readable. ``OSError`` raised by
``stat``/``open``/``read`` goes straight to the caller. Stream inputs are
rewound to offset 0 and left positioned wherever the comparison stopped.
"""
from __future__ import annotations

import hmac
import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union

import aiofiles

from .algorithms import AlgorithmSelector, resolve_algorithm
from .errors import InvalidArgumentError
from .hashing import calculate_hash

logger = logging.getLogger(__name__)

# Common storage sector size.
DEFAULT_CHUNK_SIZE = 4096


@dataclass(frozen=True)
class FileRef:
    """A path together with its size at the time it was looked up."""

    path: Path
    size: int

    @classmethod
    def of(cls, path: str | os.PathLike) -> "FileRef":
        p = Path(path)
        return cls(path=p, size=p.stat().st_size)

    def __fspath__(self) -> str:
        return str(self.path)


CompareInput = Union[str, os.PathLike, FileRef, BinaryIO]


def _is_path(x: object) -> bool:
    return isinstance(x, (str, os.PathLike, FileRef))


def _file_refs(first: CompareInput, second: CompareInput) -> tuple[FileRef, FileRef] | None:
    """Return ``FileRef`` pairs for path inputs, ``None`` for stream inputs."""
    first_is_path, second_is_path = _is_path(first), _is_path(second)
    if first_is_path != second_is_path:
        raise InvalidArgumentError("Both inputs must be paths or both must be streams")
    if not first_is_path:
        return None
    a = first if isinstance(first, FileRef) else FileRef.of(first)
    b = second if isinstance(second, FileRef) else FileRef.of(second)
    return a, b


def _stream_length(stream: BinaryIO) -> int:
    pos = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(pos)
    return end


def _check_chunk_size(chunk_size: int) -> None:
    if chunk_size < 1:
        raise InvalidArgumentError(f"chunk_size must be positive, got {chunk_size}")


def _read_full(stream: BinaryIO, size: int) -> bytes:
    """Read until ``size`` bytes are collected or the stream hits EOF."""
    buf = stream.read(size)
    if len(buf) == size or not buf:
        return buf
    parts = [buf]
    got = len(buf)
    while got < size:
        b = stream.read(size - got)
        if not b:
            break
        parts.append(b)
        got += len(b)
    return b"".join(parts)


def _compare_streams(first: BinaryIO, second: BinaryIO, chunk_size: int) -> bool:
    first.seek(0)
    second.seek(0)
    offset = 0
    while True:
        a = _read_full(first, chunk_size)
        if not a:
            # First input exhausted; the second must be too.
            return not second.read(1)
        b = _read_full(second, chunk_size)
        if a != b:
            logger.debug(f"Chunk mismatch at offset {offset} ({len(a)} vs {len(b)} bytes read)")
            return False
        offset += len(a)


def binary_compare(first: CompareInput, second: CompareInput, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bool:
    """Compare two files or two streams chunk by chunk.

    Returns ``False`` without reading any content when the lengths differ and
    stops at the first mismatching chunk. Each side is read through to a full
    chunk before comparing, so short reads from the underlying I/O layer do
    not affect the result.
    """
    _check_chunk_size(chunk_size)
    refs = _file_refs(first, second)
    if refs is not None:
        a, b = refs
        if a.size != b.size:
            logger.debug(f"Size mismatch: {a.path} ({a.size}) vs {b.path} ({b.size})")
            return False
        with a.path.open("rb") as f1, b.path.open("rb") as f2:
            return _compare_streams(f1, f2, chunk_size)

    len1, len2 = _stream_length(first), _stream_length(second)
    if len1 != len2:
        logger.debug(f"Stream length mismatch: {len1} vs {len2}")
        return False
    return _compare_streams(first, second, chunk_size)


async def _read_full_async(f, size: int) -> bytes:
    parts: list[bytes] = []
    got = 0
    while got < size:
        b = await f.read(size - got)
        if not b:
            break
        parts.append(b)
        got += len(b)
    return b"".join(parts)


async def binary_compare_async(
    first: CompareInput, second: CompareInput, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> bool:
    """Async variant of ``binary_compare``.

    Files are read through ``aiofiles`` so every chunk read is an await point.
    Streams are already open and in memory or on a local handle; they are
    compared synchronously.
    """
    _check_chunk_size(chunk_size)
    refs = _file_refs(first, second)
    if refs is None:
        return binary_compare(first, second, chunk_size)

    a, b = refs
    if a.size != b.size:
        logger.debug(f"Size mismatch: {a.path} ({a.size}) vs {b.path} ({b.size})")
        return False

    async with aiofiles.open(a.path, mode="rb") as f1, aiofiles.open(b.path, mode="rb") as f2:
        offset = 0
        while True:
            c1 = await _read_full_async(f1, chunk_size)
            if not c1:
                return not await f2.read(1)
            c2 = await _read_full_async(f2, chunk_size)
            if c1 != c2:
                logger.debug(f"Chunk mismatch at offset {offset} in {a.path} / {b.path}")
                return False
            offset += len(c1)


def hash_compare(
    algorithm: AlgorithmSelector,
    first: CompareInput,
    second: CompareInput,
    *,
    key: bytes | None = None,
) -> bool:
    """Compare two files or two streams by digest.

    Equal digests mean equal content only up to the collision resistance of
    ``algorithm``; do not rely on this against adversarial inputs.
    """
    algo = resolve_algorithm(algorithm)
    refs = _file_refs(first, second)
    if refs is not None:
        a, b = refs
        if a.size != b.size:
            logger.debug(f"Size mismatch: {a.path} ({a.size}) vs {b.path} ({b.size})")
            return False
        with a.path.open("rb") as f1, b.path.open("rb") as f2:
            d1 = calculate_hash(algo, f1, key=key)
            d2 = calculate_hash(algo, f2, key=key)
    else:
        len1, len2 = _stream_length(first), _stream_length(second)
        if len1 != len2:
            logger.debug(f"Stream length mismatch: {len1} vs {len2}")
            return False
        first.seek(0)
        second.seek(0)
        d1 = calculate_hash(algo, first, key=key)
        d2 = calculate_hash(algo, second, key=key)

    return hmac.compare_digest(d1, d2)
