"""Library for Monolythium node operators: networks, join flow, peers, genesis, RPC checks, logs and transactions."""

__version__ = "0.1.0"

__all__ = [
    "amounts",
    "config",
    "fetcher",
    "genesis",
    "join",
    "logs",
    "networks",
    "peers",
    "status",
    "txbuilder",
    "validator",
]