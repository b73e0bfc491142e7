"""Reading, checking and writing genesis.json."""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Any

_CHUNK_SIZE = 64 * 1024


def _decode_chain_id(data: bytes | str, context: str) -> str:
    try:
        doc: Any = json.loads(data)
    except ValueError as exc:
        raise ValueError(f"{context}: {exc}") from exc
    if doc is None:
        doc = {}
    if not isinstance(doc, dict):
        raise ValueError(f"{context}: expected a JSON object")
    chain_id = doc.get("chain_id")
    if chain_id is None:
        return ""
    if not isinstance(chain_id, str):
        raise ValueError(f"{context}: chain_id must be a string")
    return chain_id


def verify_genesis_sha256(genesis_path: str | os.PathLike, expected_sha: str) -> str:
    """Check the file's SHA-256 against *expected_sha* and return the digest."""
    actual = hashlib.sha256(Path(genesis_path).read_bytes()).hexdigest()
    if actual != expected_sha:
        raise ValueError(
            f"genesis SHA256 mismatch: expected {expected_sha}, got {actual}"
        )
    return actual


def compute_sha256(path: str | os.PathLike) -> str:
    """Hex SHA-256 of the file at *path*."""
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def parse_genesis_chain_id(genesis_path: str | os.PathLike) -> str:
    """Read the chain_id from a genesis file."""
    data = Path(genesis_path).read_bytes()
    chain_id = _decode_chain_id(data, "failed to parse genesis file")
    if not chain_id:
        raise ValueError("genesis file missing chain_id")
    return chain_id


def write_genesis(home: str | os.PathLike, data: bytes, dry_run: bool = False) -> Path:
    """Write genesis data to ``<home>/config/genesis.json`` and return the path.

    In dry-run mode nothing is written.
    """
    config_dir = Path(home) / "config"
    genesis_path = config_dir / "genesis.json"
    if dry_run:
        return genesis_path
    config_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    genesis_path.write_bytes(data)
    return genesis_path


def validate_genesis_data(data: bytes | str) -> str:
    """Check that *data* is genesis JSON with a chain_id and return it."""
    chain_id = _decode_chain_id(data, "invalid genesis JSON")
    if not chain_id:
        raise ValueError("genesis missing chain_id field")
    return chain_id