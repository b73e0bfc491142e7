"""Peer entries and the peers.json registry format."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from itertools import chain
from typing import Any, Iterable

from monocommander.networks import DEFAULT_P2P_PORT

_NODE_ID_RE = re.compile(r"[a-fA-F0-9]{40}")
_PEER_STRING_RE = re.compile(r"([a-fA-F0-9]{40})@([a-zA-Z0-9.-]+):([0-9]+)")
_PEER_FORMAT_ERROR = (
    'peer must be string "nodeid@host:port" or object {node_id, address, port}'
)


@dataclass(frozen=True)
class Peer:
    """A network peer entry; zero selects the default P2P listen number."""

    node_id: str
    address: str
    port: int = 0

    def __str__(self) -> str:
        return f"{self.node_id}@{self.address}:{self.port or DEFAULT_P2P_PORT}"


@dataclass
class PeersRegistry:
    """The contents of a peers.json file."""

    chain_id: str
    genesis_sha: str = ""
    seeds: list[Peer] = field(default_factory=list)
    peers: list[Peer] = field(default_factory=list)
    persistent_peers: list[Peer] = field(default_factory=list)


def validate_peer(peer: Peer) -> None:
    """Raise ValueError if *peer* lacks a valid node ID or an address."""
    if not peer.node_id:
        raise ValueError("peer missing node_id")
    if not _NODE_ID_RE.fullmatch(peer.node_id):
        raise ValueError(
            f"invalid node_id format: {peer.node_id} (expected 40 hex chars)"
        )
    if not peer.address:
        raise ValueError("peer missing address")


def parse_peer_string(s: str) -> Peer:
    """Parse ``nodeid@host:port``; the node ID is lower-cased."""
    match = _PEER_STRING_RE.fullmatch(s)
    if match is None:
        raise ValueError(
            f"invalid peer string format: {s} (expected nodeid@host:port)"
        )
    node_id, address, port = match.groups()
    return Peer(node_id=node_id.lower(), address=address, port=int(port))


def _peer_from_object(obj: dict[str, Any]) -> Peer:
    node_id = obj.get("node_id")
    address = obj.get("address")
    port = obj.get("port")
    node_id = "" if node_id is None else node_id
    address = "" if address is None else address
    port = 0 if port is None else port
    if not isinstance(node_id, str) or not isinstance(address, str):
        raise ValueError(_PEER_FORMAT_ERROR)
    if isinstance(port, bool) or not isinstance(port, int):
        raise ValueError(_PEER_FORMAT_ERROR)
    return Peer(node_id=node_id, address=address, port=port)


def _parse_peer_element(raw: Any) -> Peer:
    if isinstance(raw, str):
        return parse_peer_string(raw)
    if raw is None:
        return Peer(node_id="", address="")
    if isinstance(raw, dict):
        return _peer_from_object(raw)
    raise ValueError(_PEER_FORMAT_ERROR)


def _parse_peer_array(raw: list[Any], field_name: str) -> list[Peer]:
    peers = []
    for index, element in enumerate(raw):
        try:
            peers.append(_parse_peer_element(element))
        except ValueError as exc:
            raise ValueError(f"{field_name}[{index}]: {exc}") from exc
    return peers


def _typed_field(doc: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = doc.get(key)
    if value is None:
        return default
    if not isinstance(value, kind):
        raise ValueError(f"failed to parse peers.json: field {key} has the wrong type")
    return value


def parse_peers_registry(data: bytes | str) -> PeersRegistry:
    """Parse and validate a peers.json document.

    Peers may be given as ``nodeid@host:port`` strings or as objects.
    """
    try:
        doc = json.loads(data)
    except ValueError as exc:
        raise ValueError(f"failed to parse peers.json: {exc}") from exc
    if doc is None:
        doc = {}
    if not isinstance(doc, dict):
        raise ValueError("failed to parse peers.json: expected a JSON object")

    chain_id = _typed_field(doc, "chain_id", str, "")
    genesis_sha = _typed_field(doc, "genesis_sha256", str, "")
    raw_lists = {
        name: _typed_field(doc, name, list, [])
        for name in ("seeds", "peers", "persistent_peers")
    }
    if not chain_id:
        raise ValueError("peers.json missing chain_id")

    parsed = {name: _parse_peer_array(raw, name) for name, raw in raw_lists.items()}

    for name, peers in parsed.items():
        for index, peer in enumerate(peers):
            try:
                validate_peer(peer)
            except ValueError as exc:
                raise ValueError(f"{name}[{index}]: {exc}") from exc

    return PeersRegistry(
        chain_id=chain_id,
        genesis_sha=genesis_sha,
        seeds=parsed["seeds"],
        peers=parsed["peers"],
        persistent_peers=parsed["persistent_peers"],
    )


def validate_peers_registry(
    reg: PeersRegistry, expected_chain_id: str, expected_genesis_sha: str = ""
) -> None:
    """Raise ValueError if *reg* does not belong to the expected genesis."""
    if reg.chain_id != expected_chain_id:
        raise ValueError(
            f"chain_id mismatch: expected {expected_chain_id}, got {reg.chain_id}"
        )
    if expected_genesis_sha and reg.genesis_sha != expected_genesis_sha:
        raise ValueError(
            f"genesis_sha256 mismatch: expected {expected_genesis_sha}, "
            f"got {reg.genesis_sha}"
        )


def peers_to_string(peers: Iterable[Peer] | None) -> str:
    """Join peers into a comma-separated list for config.toml."""
    return ",".join(str(peer) for peer in peers or ())


def merge_peers(a: Iterable[Peer], b: Iterable[Peer]) -> list[Peer]:
    """Concatenate two peer lists, keeping the first peer seen per node ID."""
    seen: set[str] = set()
    merged = []
    for peer in chain(a, b):
        if peer.node_id not in seen:
            seen.add(peer.node_id)
            merged.append(peer)
    return merged