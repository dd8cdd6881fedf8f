from __future__ import annotations

import pytest


@pytest.fixture
def make_file(tmp_path):
    counter = iter(range(1_000_000))

    def _make(data: bytes, name: str | None = None):
        p = tmp_path / (name or f"file_{next(counter)}.bin")
        p.write_bytes(data)
        return p

    return _make


@pytest.fixture
def sample_bytes() -> bytes:
    return bytes(range(256)) * 40 + b"tail"
