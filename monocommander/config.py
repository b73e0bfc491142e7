"""Generating and applying the [p2p] patch for config.toml."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from monocommander.networks import DEFAULT_P2P_PORT, Network
from monocommander.peers import Peer, peers_to_string

_HEADER = (
    "# Mono Commander Config Patch\n"
    "# Apply these values to your config.toml [p2p] section\n"
    "\n"
    "[p2p]"
)


@dataclass(frozen=True)
class ConfigPatch:
    """Values to set in the [p2p] section of config.toml."""

    seeds: str = ""
    persistent_peers: str = ""

    def render(self) -> str:
        """The patch as a TOML fragment; empty values are left out."""
        parts = [_HEADER]
        if self.seeds:
            parts.append(f'seeds = "{self.seeds}"')
        if self.persistent_peers:
            parts.append(f'persistent_peers = "{self.persistent_peers}"')
        return "\n".join(parts) + "\n"


def generate_config_patch(network: Network, peers: Iterable[Peer] | None) -> ConfigPatch:
    """Build the patch for *network* with the given persistent peers."""
    return ConfigPatch(
        seeds=network.seed_string(DEFAULT_P2P_PORT),
        persistent_peers=peers_to_string(peers),
    )


def write_config_patch(
    home: str | os.PathLike, patch: ConfigPatch, dry_run: bool = False
) -> tuple[Path, str]:
    """Write the patch to ``<home>/config/config_patch.toml``.

    Returns the path and the rendered content; in dry-run mode nothing is written.
    """
    config_dir = Path(home) / "config"
    patch_path = config_dir / "config_patch.toml"
    content = patch.render()
    if dry_run:
        return patch_path, content
    config_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    patch_path.write_text(content)
    return patch_path, content


def apply_config_patch(
    config_path: str | os.PathLike, patch: ConfigPatch, dry_run: bool = False
) -> None:
    """Set the patch's non-empty values in an existing config.toml."""
    if dry_run:
        return
    path = Path(config_path)
    content = path.read_text()
    if patch.seeds:
        content = replace_config_value(content, "seeds", patch.seeds)
    if patch.persistent_peers:
        content = replace_config_value(content, "persistent_peers", patch.persistent_peers)
    path.write_text(content)


def replace_config_value(content: str, key: str, value: str) -> str:
    """Replace the first ``key = ...`` line, or append one if there is none."""
    lines = content.split("\n")
    replacement = f'{key} = "{value}"'
    for index, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith(f"{key} ") or stripped.startswith(f"{key}="):
            lines[index] = replacement
            break
    else:
        lines.append(replacement)
    return "\n".join(lines)