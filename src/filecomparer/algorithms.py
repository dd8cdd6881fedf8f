"""Hash algorithm capabilities and the algorithm registry.

Each algorithm declares whether it needs key material (``keyed``). Callers ask
for an algorithm by name or pass an object implementing ``HashAlgorithm``;
construction always goes through ``new(key)`` so keyed (HMAC) and unkeyed
digests are dispatched by capability rather than by type.
"""
from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Iterator, Protocol, Union

from .errors import AlgorithmError

logger = logging.getLogger(__name__)

# Used when a keyed algorithm is asked for without a key. Fixed so that the
# same input always hashes to the same digest.
DEFAULT_HMAC_KEY = b"filecomparer"


class Hasher(Protocol):
    digest_size: int

    def update(self, data: bytes, /) -> None:
        ...

    def digest(self) -> bytes:
        ...


class HashAlgorithm(Protocol):
    name: str
    digest_size: int
    keyed: bool

    def new(self, key: bytes | None = None) -> Hasher:
        ...


@dataclass(frozen=True)
class UnkeyedAlgorithm:
    """Plain ``hashlib`` digest."""

    name: str
    hashlib_name: str
    digest_size: int
    keyed: bool = False

    def new(self, key: bytes | None = None) -> Hasher:
        if key is not None:
            raise AlgorithmError(f"Algorithm {self.name!r} does not take a key")
        try:
            return hashlib.new(self.hashlib_name, usedforsecurity=False)
        except ValueError as e:
            raise AlgorithmError(f"Algorithm {self.name!r} is not available: {e}") from e


@dataclass(frozen=True)
class KeyedAlgorithm:
    """HMAC over a ``hashlib`` digest."""

    name: str
    hashlib_name: str
    digest_size: int
    keyed: bool = True
    default_key: bytes = DEFAULT_HMAC_KEY

    def new(self, key: bytes | None = None) -> Hasher:
        try:
            return hmac.new(key if key is not None else self.default_key, digestmod=self.hashlib_name)
        except ValueError as e:
            raise AlgorithmError(f"Algorithm {self.name!r} is not available: {e}") from e


AlgorithmSelector = Union[str, HashAlgorithm]


def is_available(algorithm: HashAlgorithm) -> bool:
    """True if the local OpenSSL build can instantiate ``algorithm``."""
    try:
        algorithm.new()
    except AlgorithmError:
        return False
    return True


class AlgorithmRegistry:
    def __init__(self) -> None:
        self._by_name: dict[str, HashAlgorithm] = {}

    def register(self, algorithm: HashAlgorithm) -> None:
        self._by_name[algorithm.name.lower()] = algorithm

    def get(self, name: str) -> HashAlgorithm:
        try:
            return self._by_name[name.lower()]
        except KeyError:
            raise AlgorithmError(
                f"Unknown hash algorithm: {name!r}. Registered: {', '.join(self.names())}"
            ) from None

    def names(self) -> list[str]:
        return sorted(self._by_name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._by_name

    def __iter__(self) -> Iterator[HashAlgorithm]:
        return iter(self._by_name[n] for n in self.names())


default_registry = AlgorithmRegistry()

for _algo in (
    UnkeyedAlgorithm("md5", "md5", 16),
    UnkeyedAlgorithm("sha1", "sha1", 20),
    UnkeyedAlgorithm("sha256", "sha256", 32),
    UnkeyedAlgorithm("sha512", "sha512", 64),
    UnkeyedAlgorithm("blake2b", "blake2b", 64),
    UnkeyedAlgorithm("ripemd160", "ripemd160", 20),
    KeyedAlgorithm("hmac-md5", "md5", 16),
    KeyedAlgorithm("hmac-sha1", "sha1", 20),
    KeyedAlgorithm("hmac-sha256", "sha256", 32),
    KeyedAlgorithm("hmac-ripemd160", "ripemd160", 20),
):
    default_registry.register(_algo)


def register_algorithm(algorithm: HashAlgorithm) -> None:
    """Add ``algorithm`` to the default registry, replacing any same-named entry."""
    default_registry.register(algorithm)


def resolve_algorithm(
    selector: AlgorithmSelector, registry: AlgorithmRegistry | None = None
) -> HashAlgorithm:
    """Turn a registered name or an algorithm object into a ``HashAlgorithm``."""
    if isinstance(selector, str):
        algorithm = (registry or default_registry).get(selector)
        logger.debug(f"Resolved algorithm {selector!r} -> {algorithm.name} ({algorithm.digest_size} bytes)")
        return algorithm
    if callable(getattr(selector, "new", None)) and hasattr(selector, "keyed"):
        return selector
    raise AlgorithmError(f"Not a hash algorithm selector: {selector!r}")
