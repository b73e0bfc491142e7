# monocommander

A library for running a node on a Monolythium network: joining a network,
checking genesis files, handling peer registries, probing RPC endpoints,
reading node logs and preparing staking and governance transactions for
the `monod` binary.

It uses only the Python standard library (Python 3.10 or later).

## Networks

Four networks are known: Localnet, Sprintnet, Testnet and Mainnet.

```python
from monocommander.networks import get_network, list_networks, parse_network_name

name = parse_network_name("sprintnet")      # case-insensitive
net = get_network(name)
net.chain_id                                 # "mono-sprint-1"
net.evm_chain_id_hex()                       # "0x40002"
net.seed_string(26656)                       # "seed1...:26656,seed2...:26656,..."
[n.name for n in list_networks()]            # Localnet, Sprintnet, Testnet, Mainnet
```

`get_network_by_chain_id` looks a network up by its chain id. Unknown
names and chain ids raise `ValueError`.

## Joining a network

`join(opts, fetcher)` downloads the genesis file, checks its `chain_id`
against the network, verifies its SHA-256 when `genesis_sha` is given,
writes it to `<home>/config/genesis.json`, fetches the peers registry when
a peers URL is given or the network has one, and writes
`<home>/config/config_patch.toml` with seeds and persistent peers.

Each stage is recorded as a `JoinStep` (with a `StepStatus` of pending,
success, failed or skipped) in the returned `JoinResult`. A failing stage
raises `JoinError`, whose `result` holds the steps taken so far. A peers
registry that cannot be fetched, parsed or matched to the genesis does not
stop the join; its step is marked skipped. With `dry_run=True` nothing is
written to disk, but the paths and patch content are still reported.

Downloads go through a `Fetcher`: any object with a `fetch(url) -> bytes`
method. `MockFetcher` serves canned responses and errors from memory,
which is handy for trying the flow offline:

```python
from monocommander.fetcher import MockFetcher
from monocommander.join import JoinOptions, join
from monocommander.networks import NetworkName

fetcher = MockFetcher()
fetcher.add_response("https://example.com/genesis.json",
                     b'{"chain_id": "mono-sprint-1"}')

result = join(
    JoinOptions(
        network=NetworkName.SPRINTNET,
        home="/tmp/node-home",
        genesis_url="https://example.com/genesis.json",
        peers_url="https://example.com/peers.json",
        dry_run=True,
    ),
    fetcher,
)
print(result.chain_id)
print(result.config_patch)
for step in result.steps:
    print(step.name, step.status, step.message)
```

## Genesis, peers and config

- `monocommander.genesis`: `validate_genesis_data`, `parse_genesis_chain_id`,
  `compute_sha256`, `verify_genesis_sha256` and `write_genesis`. Problems
  with the content raise `ValueError`; file problems raise `OSError`.
- `monocommander.peers`: `Peer` (its `str()` is `node_id@address:port`,
  with port 26656 when the port is 0), `PeersRegistry`, `validate_peer`,
  `parse_peer_string`, and `parse_peers_registry`, which accepts peers
  either as `nodeid@host:port` strings or as `{node_id, address, port}`
  objects. `validate_peers_registry` checks the chain id and, if given,
  the genesis hash; `merge_peers` keeps the first peer seen per node id;
  `peers_to_string` builds the comma-separated `persistent_peers` value.
- `monocommander.config`: `ConfigPatch` (rendered with `render()`),
  `generate_config_patch`, `write_config_patch`, and `apply_config_patch`,
  which sets `seeds` and `persistent_peers` in an existing `config.toml`
  through `replace_config_value`: the first matching `key = ...` line is
  replaced, or a new line is appended at the end of the file.

## Node status and RPC checks

```python
from monocommander.networks import NetworkName
from monocommander.status import Endpoints, check_rpc

results = check_rpc(
    NetworkName.LOCALNET,
    Endpoints(
        comet_rpc="http://localhost:26657",
        cosmos_rest="http://localhost:1317",
        evm_rpc="http://localhost:8545",
    ),
)
print(results.all_pass)
for r in results.results:
    print(r.kind, r.status, r.message or r.details)
```

The three checks run in order: Comet RPC `/status`, Cosmos REST
`node_info`, and EVM JSON-RPC `eth_chainId` plus `eth_blockNumber`; the
EVM check fails when the chain id does not match the network. Each result
carries a `CheckStatus` of `PASS` or `FAIL`.

`get_node_status(StatusOptions(network, endpoints))` returns a
`NodeStatus` with chain id, latest height, catching-up state, moniker,
version and peer count from the Comet RPC endpoint, and raises
`StatusError` when the node cannot be reached. Requests time out after
ten seconds.

## Logs

`get_log_source(network, home, follow, lines)` picks a `JournalctlSource`
on Linux when one of the units `monod-<network>`, `monod@<network>` or
`monod` is active, and otherwise a `FileSource` for `<home>/logs/monod.log`
or `<home>/monod.log`; if none is found it raises `FileNotFoundError`.

```python
from monocommander.logs import FileSource

with FileSource("/var/log/monod.log", follow=False, line_count=50) as source:
    for line in source.lines():
        print(line)
```

With `line_count` set, the last that many non-empty lines come first;
with `follow=True` the source then waits for new lines until `close()`.
`read_last_n_lines` is available on its own, and
`get_systemd_service_status(network)` reports the `systemctl is-active`
state of the network's unit (`"N/A (not Linux)"` elsewhere, `"not found"`
when no unit answers).

## Transactions

`monocommander.amounts` validates account addresses (`mono1...`),
operator addresses (`monovaloper1...`), `alyth` amounts, the 100,000 LYTH
minimum self-delegation, commission rates and vote options
(`VoteOption`, by name or by number 1 to 4), and converts between LYTH and
alyth with `lyth_to_alyth` and `format_lyth`. Invalid input raises
`ValueError`.

`monocommander.txbuilder` builds `monod` command lines for
create-validator, delegate, unbond, redelegate, withdraw-rewards and vote.
Options go in `TxBuilderOptions` (the sending key is `from_`). Unless
`broadcast` is set, commands end in `--generate-only`; with it they end in
`--broadcast-mode sync -y`. `str(command)` gives the full command line:

```python
from monocommander.networks import NetworkName
from monocommander.txbuilder import DelegateParams, TxBuilderOptions, build_delegate_tx

cmd = build_delegate_tx(
    TxBuilderOptions(network=NetworkName.SPRINTNET, from_="mykey", fees="10000alyth"),
    DelegateParams(
        validator_addr="monovaloper1qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqq5nfrmp",
        amount="1000000000000000000alyth",
    ),
)
print(cmd)
# monod tx staking delegate monovaloper1qqqq...5nfrmp 1000000000000000000alyth
#   --chain-id mono-sprint-1 --from mykey --fees 10000alyth --generate-only
print(cmd.description)   # Delegate 1 LYTH to monovaloper1...
```

Creating a validator also requires burning 100,000 LYTH in the same
transaction, so that command has `requires_multi_msg` set and carries two
sub-commands in `multi_msg_commands` to be combined by hand.

`monocommander.validator` wraps the builders in actions
(`create_validator_action`, `delegate_action`, `unbond_action`,
`redelegate_action`, `withdraw_rewards_action`, `vote_action`) that record
their steps in a `ValidatorActionResult`. They only preview by default;
a command is run through a `TxRunner` (or any object with a
`run_tx(binary, args)` method) only when `execute=True` and
`dry_run=False` in `ValidatorActionOptions`. A failure raises
`ActionError` with the result attached. `check_rpc_before_action` checks
the node's Comet RPC first and raises `StatusError` if it does not answer.

## What it does not do

- There is no command-line program or interactive screen; everything is
  used from Python.
- There is no network-backed `Fetcher`: `join` needs one supplied by the
  caller, and only `MockFetcher` is included.
- `create_validator_action` cannot run the validator creation itself,
  because the create and burn messages must be combined by hand; with
  execution requested it raises `ActionError`.
- Seeds are written as `host:port` without node ids; they are not resolved.