"""Setting up a node's home directory to join a network."""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from monocommander.config import generate_config_patch, write_config_patch
from monocommander.fetcher import Fetcher
from monocommander.genesis import validate_genesis_data, write_genesis
from monocommander.networks import NetworkName, get_network
from monocommander.peers import (
    Peer,
    merge_peers,
    parse_peers_registry,
    validate_peers_registry,
)

_log = logging.getLogger(__name__)


class StepStatus(str, Enum):
    """Outcome of one step of a join."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"

    def __str__(self) -> str:
        return self.value


@dataclass
class JoinStep:
    """One step of the join process."""

    name: str
    status: StepStatus = StepStatus.PENDING
    message: str = ""


@dataclass
class JoinOptions:
    """What to join and where."""

    network: NetworkName | str
    home: str | os.PathLike
    genesis_url: str = ""
    genesis_sha: str = ""
    peers_url: str = ""
    dry_run: bool = False
    logger: logging.Logger | None = None


@dataclass
class JoinResult:
    """What a join did, step by step."""

    genesis_path: Path | None = None
    config_patch_path: Path | None = None
    config_patch: str = ""
    chain_id: str = ""
    success: bool = False
    steps: list[JoinStep] = field(default_factory=list)

    def _begin(self, name: str) -> JoinStep:
        step = JoinStep(name)
        self.steps.append(step)
        return step


class JoinError(Exception):
    """A join failed; ``result`` holds the steps taken so far, if any."""

    def __init__(self, message: str, result: JoinResult | None = None) -> None:
        super().__init__(message)
        self.result = result


def _fail(result: JoinResult, step: JoinStep, message: str, error: str) -> JoinError:
    step.status = StepStatus.FAILED
    step.message = message
    return JoinError(error, result)


def _load_peers(
    fetcher: Fetcher, url: str, chain_id: str, genesis_sha: str
) -> list[Peer]:
    registry = parse_peers_registry(fetcher.fetch(url))
    validate_peers_registry(registry, chain_id, genesis_sha)
    return merge_peers(registry.peers, registry.persistent_peers)


def join(opts: JoinOptions, fetcher: Fetcher) -> JoinResult:
    """Download and check genesis, gather peers and write the config patch."""
    logger = opts.logger or _log

    try:
        network = get_network(opts.network)
    except ValueError as exc:
        raise JoinError(f"invalid network: {exc}") from exc

    genesis_url = opts.genesis_url or network.genesis_url
    if not genesis_url:
        raise JoinError(f"genesis URL required for network {opts.network}")

    result = JoinResult()

    logger.info("downloading genesis url=%s", genesis_url)
    step = result._begin("Download genesis")
    try:
        genesis_data = fetcher.fetch(genesis_url)
    except Exception as exc:
        raise _fail(result, step, str(exc), f"failed to download genesis: {exc}") from exc
    step.status = StepStatus.SUCCESS

    logger.info("validating genesis")
    step = result._begin("Validate genesis")
    try:
        chain_id = validate_genesis_data(genesis_data)
    except ValueError as exc:
        raise _fail(result, step, str(exc), f"invalid genesis: {exc}") from exc
    if chain_id != network.chain_id:
        message = f"chain_id mismatch: expected {network.chain_id}, got {chain_id}"
        raise _fail(result, step, message, message)
    result.chain_id = chain_id
    step.status = StepStatus.SUCCESS

    if opts.genesis_sha:
        logger.info("verifying genesis SHA256 expected=%s", opts.genesis_sha)
        step = result._begin("Verify SHA256")
        actual = hashlib.sha256(genesis_data).hexdigest()
        if actual != opts.genesis_sha:
            message = f"SHA256 mismatch: expected {opts.genesis_sha}, got {actual}"
            raise _fail(result, step, message, message)
        step.status = StepStatus.SUCCESS

    logger.info("writing genesis home=%s dry_run=%s", opts.home, opts.dry_run)
    step = result._begin("Write genesis")
    try:
        result.genesis_path = write_genesis(opts.home, genesis_data, opts.dry_run)
    except OSError as exc:
        raise _fail(result, step, str(exc), f"failed to write genesis: {exc}") from exc
    step.status = StepStatus.SUCCESS
    if opts.dry_run:
        step.message = "(dry-run)"

    peers_url = opts.peers_url or network.peers_url
    persistent_peers: list[Peer] = []
    if peers_url:
        logger.info("downloading peers url=%s", peers_url)
        step = result._begin("Download peers")
        try:
            persistent_peers = _load_peers(
                fetcher, peers_url, network.chain_id, opts.genesis_sha
            )
        except Exception as exc:
            step.status = StepStatus.SKIPPED
            step.message = str(exc)
            logger.warning("peers unavailable, continuing without: %s", exc)
        else:
            step.status = StepStatus.SUCCESS
            step.message = f"{len(persistent_peers)} peers"

    logger.info("generating config patch")
    step = result._begin("Generate config")
    patch = generate_config_patch(network, persistent_peers)
    try:
        patch_path, content = write_config_patch(opts.home, patch, opts.dry_run)
    except OSError as exc:
        raise _fail(
            result, step, str(exc), f"failed to write config patch: {exc}"
        ) from exc
    result.config_patch_path = patch_path
    result.config_patch = content
    step.status = StepStatus.SUCCESS

    result.success = True
    return result