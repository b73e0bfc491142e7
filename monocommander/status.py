"""Node status queries and RPC health checks over HTTP."""

from __future__ import annotations

import http.client
import ipaddress
import json
import re
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from monocommander.networks import NetworkName, get_network

_TIMEOUT = 10.0
_TRANSPORT_ERRORS = (OSError, ValueError, OverflowError, http.client.HTTPException)
_INT64_RE = re.compile(r"[+-]?[0-9]+")
_MISSING = object()

_DIRECT_OPENER = urllib.request.build_opener(urllib.request.ProxyHandler({}))
_DEFAULT_OPENER = urllib.request.build_opener()


class StatusError(Exception):
    """A node could not be queried."""


class CheckStatus(str, Enum):
    """Outcome of one RPC check; each value is the member's own name."""

    @staticmethod
    def _generate_next_value_(name, start, count, last_values):
        return name

    PASS = auto()
    FAIL = auto()

    def __str__(self) -> str:
        return self.value


@dataclass
class NodeStatus:
    """Status of a Monolythium node."""

    chain_id: str = ""
    latest_height: int = 0
    catching_up: bool = False
    peers_count: int = 0
    moniker: str = ""
    node_version: str = ""
    service_status: str = ""


@dataclass(frozen=True)
class Endpoints:
    """RPC endpoints of a node."""

    comet_rpc: str = ""
    cosmos_rest: str = ""
    evm_rpc: str = ""


@dataclass
class StatusOptions:
    """Which node to query."""

    network: NetworkName | str
    endpoints: Endpoints = field(default_factory=Endpoints)


@dataclass
class RPCCheckResult:
    """Result of checking one endpoint."""

    endpoint: str
    kind: str
    status: CheckStatus = CheckStatus.FAIL
    message: str = ""
    details: str = ""


@dataclass
class RPCCheckResults:
    """Results of checking all endpoints of a node."""

    network: NetworkName | str
    results: list[RPCCheckResult] = field(default_factory=list)
    all_pass: bool = True


def _is_local(url: str) -> bool:
    host = urllib.parse.urlsplit(url).hostname or ""
    if host == "localhost":
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False


def _request(url: str, data: bytes | None = None) -> tuple[int, bytes]:
    headers = {"Content-Type": "application/json"} if data is not None else {}
    request = urllib.request.Request(url, data=data, headers=headers)
    opener = _DIRECT_OPENER if _is_local(url) else _DEFAULT_OPENER
    try:
        with opener.open(request, timeout=_TIMEOUT) as response:
            return response.status, response.read()
    except urllib.error.HTTPError as exc:
        with exc:
            return exc.code, exc.read()


def _describe(exc: BaseException) -> str:
    if isinstance(exc, urllib.error.URLError):
        return str(exc.reason)
    return str(exc)


def _decode_object(body: bytes) -> dict[str, Any]:
    doc = json.loads(body)
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise ValueError("expected a JSON object")
    return doc


def _get_field(obj: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = obj.get(key)
    if value is None:
        return default
    if kind is int:
        ok = isinstance(value, int) and not isinstance(value, bool)
    else:
        ok = isinstance(value, kind)
    if not ok:
        raise ValueError(f"field {key} has the wrong type")
    return value


def _parse_int64(text: str) -> int:
    if not _INT64_RE.fullmatch(text):
        return 0
    value = int(text)
    return value if -(2**63) <= value < 2**63 else 0


def _parse_uint(text: str) -> int:
    """Parse an unsigned integer, honouring 0x, 0o, 0b and leading-0 octal."""
    prefix = text[:2].lower()
    if prefix in ("0x", "0o", "0b"):
        base = {"0x": 16, "0o": 8, "0b": 2}[prefix]
        digits = text[2:]
    elif len(text) > 1 and text[0] == "0":
        base, digits = 8, text[1:]
    else:
        base, digits = 10, text
    if not digits or not digits.isascii() or not digits.isalnum():
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(digits, base)
    if value >= 2**64:
        raise ValueError(f"unsigned integer out of range: {text!r}")
    return value


@dataclass(frozen=True)
class _CometStatus:
    network: str
    moniker: str
    version: str
    latest_block_height: str
    catching_up: bool

    @classmethod
    def parse(cls, body: bytes) -> "_CometStatus":
        doc = _decode_object(body)
        result = _get_field(doc, "result", dict, {})
        node_info = _get_field(result, "node_info", dict, {})
        sync_info = _get_field(result, "sync_info", dict, {})
        return cls(
            network=_get_field(node_info, "network", str, ""),
            moniker=_get_field(node_info, "moniker", str, ""),
            version=_get_field(node_info, "version", str, ""),
            latest_block_height=_get_field(sync_info, "latest_block_height", str, ""),
            catching_up=_get_field(sync_info, "catching_up", bool, False),
        )


def _fetch_comet_status(base_url: str) -> _CometStatus:
    try:
        code, body = _request(base_url + "/status")
    except _TRANSPORT_ERRORS as exc:
        raise StatusError(f"failed to connect to {base_url}: {_describe(exc)}") from exc
    if code != 200:
        raise StatusError(f"unexpected status code {code} from {base_url}")
    try:
        return _CometStatus.parse(body)
    except ValueError as exc:
        raise StatusError(f"failed to parse status response: {exc}") from exc


def _fetch_peer_count(base_url: str) -> int:
    try:
        code, body = _request(base_url + "/net_info")
    except _TRANSPORT_ERRORS as exc:
        raise StatusError(_describe(exc)) from exc
    if code != 200:
        raise StatusError(f"unexpected status code {code}")
    try:
        result = _get_field(_decode_object(body), "result", dict, {})
        n_peers = _get_field(result, "n_peers", str, "")
    except ValueError as exc:
        raise StatusError(str(exc)) from exc
    return _parse_int64(n_peers)


def get_node_status(opts: StatusOptions) -> NodeStatus:
    """Query a node's Comet RPC for its chain, height and peers."""
    try:
        comet = _fetch_comet_status(opts.endpoints.comet_rpc)
    except StatusError as exc:
        raise StatusError(f"failed to get node status: {exc}") from exc

    status = NodeStatus(
        chain_id=comet.network,
        latest_height=_parse_int64(comet.latest_block_height),
        catching_up=comet.catching_up,
        moniker=comet.moniker,
        node_version=comet.version,
    )
    try:
        status.peers_count = _fetch_peer_count(opts.endpoints.comet_rpc)
    except StatusError:
        pass
    return status


def _check_comet_rpc(endpoint: str) -> RPCCheckResult:
    result = RPCCheckResult(endpoint=endpoint, kind="Comet RPC")
    try:
        comet = _fetch_comet_status(endpoint)
    except StatusError as exc:
        result.message = str(exc)
        return result
    result.status = CheckStatus.PASS
    result.details = f"chain={comet.network} height={comet.latest_block_height}"
    return result


def _check_cosmos_rest(endpoint: str) -> RPCCheckResult:
    result = RPCCheckResult(endpoint=endpoint, kind="Cosmos REST")
    try:
        code, body = _request(endpoint + "/cosmos/base/tendermint/v1beta1/node_info")
    except _TRANSPORT_ERRORS as exc:
        result.message = _describe(exc)
        return result
    if code != 200:
        result.message = f"HTTP {code}"
        return result
    try:
        doc = _decode_object(body)
        node_info = _get_field(doc, "default_node_info", dict, {})
        app_version = _get_field(doc, "application_version", dict, {})
        network = _get_field(node_info, "network", str, "")
        app_name = _get_field(app_version, "app_name", str, "")
    except ValueError as exc:
        result.message = str(exc)
        return result
    result.status = CheckStatus.PASS
    result.details = f"network={network} app={app_name}"
    return result


def _evm_call(endpoint: str, method: str) -> Any:
    """Make a JSON-RPC call and return its result, or _MISSING if absent."""
    payload = json.dumps(
        {"jsonrpc": "2.0", "method": method, "params": [], "id": 1}
    ).encode()
    try:
        code, body = _request(endpoint, payload)
    except _TRANSPORT_ERRORS as exc:
        raise StatusError(_describe(exc)) from exc
    if code != 200:
        raise StatusError(f"HTTP {code}")
    try:
        doc = _decode_object(body)
        _get_field(doc, "id", int, 0)
        error = _get_field(doc, "error", dict, None)
        if error is not None:
            error_code = _get_field(error, "code", int, 0)
            error_message = _get_field(error, "message", str, "")
    except ValueError as exc:
        raise StatusError(str(exc)) from exc
    if error is not None:
        raise StatusError(f"RPC error {error_code}: {error_message}")
    return doc.get("result", _MISSING)


def _string_result(value: Any) -> str:
    if value is _MISSING:
        raise ValueError("missing result")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError("result is not a string")
    return value


def _check_evm_rpc(endpoint: str, network: NetworkName | str) -> RPCCheckResult:
    result = RPCCheckResult(endpoint=endpoint, kind="EVM JSON-RPC")
    try:
        chain_value = _evm_call(endpoint, "eth_chainId")
    except StatusError as exc:
        result.message = str(exc)
        return result
    try:
        hex_chain_id = _string_result(chain_value)
    except ValueError:
        result.message = "failed to parse chain ID"
        return result
    try:
        chain_id = _parse_uint(hex_chain_id)
    except ValueError:
        result.message = "failed to parse chain ID hex"
        return result

    try:
        block_value = _evm_call(endpoint, "eth_blockNumber")
    except StatusError as exc:
        result.message = str(exc)
        return result
    try:
        hex_block = _string_result(block_value)
    except ValueError:
        result.message = "failed to parse block number"
        return result
    try:
        block_number = _parse_uint(hex_block)
    except ValueError:
        block_number = 0

    try:
        expected = get_network(network).evm_chain_id
    except ValueError:
        expected = 0
    if chain_id != expected:
        result.message = f"chain ID mismatch: expected {expected}, got {chain_id}"
        return result

    result.status = CheckStatus.PASS
    result.details = f"chainId={hex_chain_id} block={block_number}"
    return result


def check_rpc(network: NetworkName | str, endpoints: Endpoints) -> RPCCheckResults:
    """Check the Comet RPC, Cosmos REST and EVM JSON-RPC endpoints, in that order."""
    results = [
        _check_comet_rpc(endpoints.comet_rpc),
        _check_cosmos_rest(endpoints.cosmos_rest),
        _check_evm_rpc(endpoints.evm_rpc, network),
    ]
    return RPCCheckResults(
        network=network,
        results=results,
        all_pass=all(r.status is CheckStatus.PASS for r in results),
    )