"""filecomparer — tell whether two files or byte streams are identical.

Public API:
- binary_compare / binary_compare_async
- hash_compare
- calculate_hash / digest_to_identifier
- AlgorithmRegistry and the built-in algorithms
- CompareConfig
"""

from .algorithms import (
    AlgorithmRegistry,
    HashAlgorithm,
    KeyedAlgorithm,
    UnkeyedAlgorithm,
    default_registry,
    register_algorithm,
    resolve_algorithm,
)
from .comparer import FileRef, binary_compare, binary_compare_async, hash_compare
from .config import CompareConfig, load_config
from .errors import AlgorithmError, FileComparerError, InvalidArgumentError
from .hashing import calculate_hash, digest_to_identifier, hash_file

__all__ = [
    "AlgorithmError",
    "AlgorithmRegistry",
    "CompareConfig",
    "FileComparerError",
    "FileRef",
    "HashAlgorithm",
    "InvalidArgumentError",
    "KeyedAlgorithm",
    "UnkeyedAlgorithm",
    "binary_compare",
    "binary_compare_async",
    "calculate_hash",
    "default_registry",
    "digest_to_identifier",
    "hash_compare",
    "hash_file",
    "load_config",
    "register_algorithm",
    "resolve_algorithm",
]
