"""Registry of the supported Monolythium networks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_P2P_PORT = 26656


class NetworkName(str, Enum):
    """Canonical network names."""

    LOCALNET = "Localnet"
    SPRINTNET = "Sprintnet"
    TESTNET = "Testnet"
    MAINNET = "Mainnet"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Network:
    """Configuration of one Monolythium network."""

    name: NetworkName
    chain_id: str
    evm_chain_id: int
    seed_dns: tuple[str, ...] = ()
    genesis_url: str = ""
    peers_url: str = ""

    def evm_chain_id_hex(self) -> str:
        """The EVM chain ID as a 0x-prefixed hex string."""
        return f"0x{self.evm_chain_id:x}"

    def seed_string(self, port: int = DEFAULT_P2P_PORT) -> str:
        """Seeds as a comma-separated ``host:port`` list; port 0 means the default."""
        if not self.seed_dns:
            return ""
        port = port or DEFAULT_P2P_PORT
        return ",".join(f"{host}:{port}" for host in self.seed_dns)


_NETWORKS: dict[NetworkName, Network] = {
    NetworkName.LOCALNET: Network(
        name=NetworkName.LOCALNET,
        chain_id="mono-local-1",
        evm_chain_id=0x40001,
    ),
    NetworkName.SPRINTNET: Network(
        name=NetworkName.SPRINTNET,
        chain_id="mono-sprint-1",
        evm_chain_id=0x40002,
        seed_dns=(
            "seed1.sprintnet.mononodes.xyz",
            "seed2.sprintnet.mononodes.xyz",
            "seed3.sprintnet.mononodes.xyz",
        ),
        genesis_url="https://raw.githubusercontent.com/monolythium/mono-core/dev/ops/testnet/sprintnet/artifacts/genesis.json",
        peers_url="https://raw.githubusercontent.com/monolythium/mono-core-peers/prod/networks/sprintnet/peers.json",
    ),
    NetworkName.TESTNET: Network(
        name=NetworkName.TESTNET,
        chain_id="mono-test-1",
        evm_chain_id=0x40003,
        seed_dns=(
            "seed1.testnet.mononodes.xyz",
            "seed2.testnet.mononodes.xyz",
            "seed3.testnet.mononodes.xyz",
        ),
        genesis_url="https://raw.githubusercontent.com/monolythium/mono-core/dev/ops/testnet/testnet/artifacts/genesis.json",
        peers_url="https://raw.githubusercontent.com/monolythium/mono-core-peers/prod/networks/testnet/peers.json",
    ),
    NetworkName.MAINNET: Network(
        name=NetworkName.MAINNET,
        chain_id="mono-1",
        evm_chain_id=0x40004,
        seed_dns=(
            "seed1.mainnet.mononodes.xyz",
            "seed2.mainnet.mononodes.xyz",
            "seed3.mainnet.mononodes.xyz",
        ),
        genesis_url="https://raw.githubusercontent.com/monolythium/mono-core/dev/ops/mainnet/artifacts/genesis.json",
        peers_url="https://raw.githubusercontent.com/monolythium/mono-core-peers/prod/networks/mainnet/peers.json",
    ),
}


def get_network(name: NetworkName | str) -> Network:
    """Return the network with the exact canonical *name*."""
    try:
        key = NetworkName(name)
    except ValueError:
        raise ValueError(f"unknown network: {name}") from None
    return _NETWORKS[key]


def get_network_by_chain_id(chain_id: str) -> Network:
    """Return the network whose Cosmos chain ID is *chain_id*."""
    for network in _NETWORKS.values():
        if network.chain_id == chain_id:
            return network
    raise ValueError(f"unknown chain ID: {chain_id}")


def list_networks() -> list[Network]:
    """All supported networks, from Localnet to Mainnet."""
    return list(_NETWORKS.values())


def parse_network_name(s: str) -> NetworkName:
    """Parse a network name case-insensitively."""
    lowered = s.lower()
    for name in NetworkName:
        if name.value.lower() == lowered:
            return name
    raise ValueError(
        f"unknown network: {s} (valid: Localnet, Sprintnet, Testnet, Mainnet)"
    )