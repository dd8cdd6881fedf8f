from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import BinaryIO, Union

from .algorithms import AlgorithmSelector, Hasher, resolve_algorithm
from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024

HashSource = Union[str, os.PathLike, int, bytes, bytearray, memoryview, BinaryIO]


def _update_from_stream(h: Hasher, stream: BinaryIO, chunk_size: int) -> None:
    while True:
        b = stream.read(chunk_size)
        if not b:
            break
        h.update(b)


def calculate_hash(
    algorithm: AlgorithmSelector,
    source: HashSource,
    *,
    key: bytes | None = None,
    chunk_size: int = READ_CHUNK_SIZE,
) -> bytes:
    """Compute the digest of ``source`` with ``algorithm``.

    ``source`` may be a path (opened, read to the end and closed), a file
    descriptor or an open binary stream (read from the current position to
    EOF and left open), or an in-memory buffer.

    Raises ``AlgorithmError`` if the algorithm cannot be built and lets
    ``OSError`` from opening or reading the source propagate.
    """
    h = resolve_algorithm(algorithm).new(key)

    if isinstance(source, (bytes, bytearray, memoryview)):
        h.update(source)
    elif isinstance(source, (str, os.PathLike)):
        with Path(source).open("rb") as f:
            _update_from_stream(h, f, chunk_size)
    elif isinstance(source, int) and not isinstance(source, bool):
        with os.fdopen(source, "rb", closefd=False) as f:
            _update_from_stream(h, f, chunk_size)
    elif callable(getattr(source, "read", None)):
        _update_from_stream(h, source, chunk_size)
    else:
        raise InvalidArgumentError(f"Cannot hash object of type {type(source).__name__}")

    return h.digest()


def hash_file(path: str | Path, algorithm: AlgorithmSelector = "md5", chunk_size: int = READ_CHUNK_SIZE) -> str:
    """Hex digest of a file's bytes."""
    return calculate_hash(algorithm, Path(path), chunk_size=chunk_size).hex()


def digest_to_identifier(digest: bytes | None) -> uuid.UUID:
    """Build a 128-bit identifier from a 16-byte digest (e.g. MD5).

    The bytes are taken in the mixed-endian ``Guid`` layout, so the first
    three fields are read little-endian.
    """
    if not isinstance(digest, (bytes, bytearray, memoryview)):
        raise InvalidArgumentError(f"Identifier needs 16 digest bytes, got {type(digest).__name__}")
    if len(digest) != 16:
        raise InvalidArgumentError(f"Identifier needs exactly 16 digest bytes, got {len(digest)} bytes")
    return uuid.UUID(bytes_le=bytes(digest))
