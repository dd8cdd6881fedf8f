from __future__ import annotations

import asyncio
import binascii
import logging
from pathlib import Path

import typer

from .algorithms import default_registry, is_available
from .comparer import binary_compare_async, hash_compare
from .config import MAX_CHUNK_SIZE, CompareConfig, load_config
from .errors import FileComparerError
from .hashing import calculate_hash, digest_to_identifier

app = typer.Typer(add_completion=False, no_args_is_help=True)

logger = logging.getLogger(__name__)


def _cfg(config: str | None) -> CompareConfig:
    try:
        return load_config(config)
    except (OSError, ValueError) as e:
        raise typer.BadParameter(str(e), param_hint="--config")


def _key(algorithm: str, key_hex: str | None, cfg: CompareConfig) -> bytes | None:
    if key_hex is None:
        # Configured key only applies to keyed algorithms
        if algorithm in default_registry and default_registry.get(algorithm).keyed:
            return cfg.hmac_key
        return None
    try:
        return binascii.unhexlify(key_hex)
    except (binascii.Error, ValueError):
        raise typer.BadParameter(f"{key_hex!r} is not valid hex", param_hint="--key-hex")


def _io_failure(e: OSError) -> typer.Exit:
    typer.echo(f"Error: {e}", err=True)
    return typer.Exit(code=2)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    """Tell whether two files are identical."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def init(out: str = typer.Option("filecomparer.toml", help="Write example config to this path")):
    """Write a starter filecomparer.toml."""
    outp = Path(out)
    outp.write_text("""[compare]
# binary | hash
mode = "binary"
chunk_size = 4096

[hash]
algorithm = "md5"
# Hex-encoded HMAC key for hmac-* algorithms.
# FILECOMPARER_HMAC_KEY overrides this value.
key_hex = ""
""", encoding="utf-8")
    typer.echo(f"Wrote {outp}")


@app.command()
def compare(first: Path, second: Path,
            mode: str = typer.Option(None, help="binary or hash (default from config)"),
            algorithm: str = typer.Option(None, help="Hash algorithm for --mode hash"),
            chunk_size: int = typer.Option(None, min=1, max=MAX_CHUNK_SIZE, help="Chunk size for --mode binary"),
            key_hex: str = typer.Option(None, help="HMAC key, hex encoded"),
            config: str = typer.Option(None, help="Path to filecomparer.toml")):
    """Compare two files. Exit code 0 if identical, 1 if different."""
    cfg = _cfg(config)
    mode = (mode or cfg.mode).lower()
    if mode not in ("binary", "hash"):
        raise typer.BadParameter(f"Unknown mode {mode!r}", param_hint="--mode")
    logger.debug(f"Comparing {first} and {second} in {mode} mode")

    try:
        if mode == "binary":
            if chunk_size is None:
                chunk_size = cfg.chunk_size
            same = asyncio.run(binary_compare_async(first, second, chunk_size))
        else:
            algorithm = algorithm or cfg.algorithm
            same = hash_compare(algorithm, first, second, key=_key(algorithm, key_hex, cfg))
    except FileComparerError as e:
        raise typer.BadParameter(str(e))
    except OSError as e:
        raise _io_failure(e)

    typer.echo("identical" if same else "different")
    if not same:
        raise typer.Exit(code=1)


@app.command(name="hash")
def hash_cmd(file: Path,
             algorithm: str = typer.Option(None, help="Hash algorithm (default from config)"),
             key_hex: str = typer.Option(None, help="HMAC key, hex encoded"),
             config: str = typer.Option(None, help="Path to filecomparer.toml")):
    """Print the hex digest of a file."""
    cfg = _cfg(config)
    try:
        algorithm = algorithm or cfg.algorithm
        digest = calculate_hash(algorithm, file, key=_key(algorithm, key_hex, cfg))
    except FileComparerError as e:
        raise typer.BadParameter(str(e), param_hint="--algorithm")
    except OSError as e:
        raise _io_failure(e)
    typer.echo(digest.hex())


@app.command()
def identifier(file: Path,
               algorithm: str = typer.Option(None, help="Algorithm with a 16-byte digest (default md5)"),
               config: str = typer.Option(None, help="Path to filecomparer.toml")):
    """Print the identifier derived from a file's 16-byte digest."""
    cfg = _cfg(config)
    if algorithm is None:
        # Configured algorithm only when it yields 16 bytes
        configured = default_registry.get(cfg.algorithm)
        algorithm = cfg.algorithm if configured.digest_size == 16 else "md5"
    try:
        ident = digest_to_identifier(calculate_hash(algorithm, file, key=_key(algorithm, None, cfg)))
    except FileComparerError as e:
        raise typer.BadParameter(str(e), param_hint="--algorithm")
    except OSError as e:
        raise _io_failure(e)
    typer.echo(ident.hex)


@app.command()
def algorithms():
    """List registered hash algorithms."""
    for algo in default_registry:
        kind = "keyed" if algo.keyed else "unkeyed"
        note = "" if is_available(algo) else "  (unavailable)"
        typer.echo(f"{algo.name:<16} {algo.digest_size * 8:>4} bits  {kind}{note}")


if __name__ == "__main__":
    app()
