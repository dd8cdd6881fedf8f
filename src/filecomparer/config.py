from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import binascii
import os
import tomllib

from .algorithms import default_registry

VALID_MODES = ("binary", "hash")
MAX_CHUNK_SIZE = 64 * 1024 * 1024
HMAC_KEY_ENV = "FILECOMPARER_HMAC_KEY"


def _expand(p: str) -> str:
    return os.path.expandvars(os.path.expanduser(p))


def _parse_key_hex(key_hex: str | None) -> bytes | None:
    if not key_hex:
        return None
    try:
        return binascii.unhexlify(key_hex.strip())
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid HMAC key: {key_hex!r} is not valid hex ({e})") from e


@dataclass(frozen=True)
class CompareConfig:
    """Defaults for comparisons run from the command line."""

    mode: str = "binary"  # binary|hash
    chunk_size: int = 4096
    algorithm: str = "md5"
    hmac_key: bytes | None = None

    def __post_init__(self):
        if self.mode not in VALID_MODES:
            raise ValueError(f"Invalid mode: {self.mode}. Must be one of {VALID_MODES}.")
        if self.chunk_size <= 0 or self.chunk_size > MAX_CHUNK_SIZE:
            raise ValueError(f"Invalid chunk_size: {self.chunk_size}. Must be between 1 and {MAX_CHUNK_SIZE}.")
        if self.algorithm not in default_registry:
            raise ValueError(
                f"Invalid algorithm: {self.algorithm}. Must be one of {default_registry.names()}."
            )

    @staticmethod
    def from_toml(path: str | Path) -> "CompareConfig":
        data = tomllib.loads(Path(_expand(str(path))).read_text(encoding="utf-8"))
        compare = data.get("compare", {})
        hash_ = data.get("hash", {})

        # Environment variable takes precedence over the file
        key_hex = os.environ.get(HMAC_KEY_ENV)
        if key_hex is None:
            key_hex = hash_.get("key_hex")

        return CompareConfig(
            mode=str(compare.get("mode", "binary")).lower(),
            chunk_size=int(compare.get("chunk_size", 4096)),
            algorithm=str(hash_.get("algorithm", "md5")).lower(),
            hmac_key=_parse_key_hex(key_hex),
        )


def load_config(path: str | Path | None = None) -> CompareConfig:
    """Load config from ``path``; without a path, defaults plus the environment key."""
    if path is None:
        return CompareConfig(hmac_key=_parse_key_hex(os.environ.get(HMAC_KEY_ENV)))
    return CompareConfig.from_toml(path)
