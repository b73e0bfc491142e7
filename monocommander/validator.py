"""Previewing and running validator, staking and governance transactions."""

from __future__ import annotations

import json
import logging
import re
import subprocess
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, Sequence

from monocommander.join import StepStatus
from monocommander.networks import NetworkName, get_network
from monocommander.status import (
    CheckStatus,
    Endpoints,
    RPCCheckResult,
    StatusError,
    check_rpc,
)
from monocommander.txbuilder import (
    CreateValidatorParams,
    DelegateParams,
    RedelegateParams,
    TxAction,
    TxBuilderOptions,
    TxCommand,
    UnbondParams,
    VoteParams,
    WithdrawRewardsParams,
    build_create_validator_tx,
    build_delegate_tx,
    build_redelegate_tx,
    build_unbond_tx,
    build_vote_tx,
    build_withdraw_rewards_tx,
)

_log = logging.getLogger(__name__)

DEFAULT_NODE_URL = "http://localhost:26657"
_DRY_RUN_MESSAGE = "dry-run mode (pass --execute to run)"
_TXHASH_RE = re.compile(r"^\s*txhash:\s*['\"]?([0-9A-Fa-f]+)['\"]?\s*$", re.MULTILINE)
_HEIGHT_RE = re.compile(r"^\s*height:\s*['\"]?([0-9]+)['\"]?\s*$", re.MULTILINE)
_CODE_RE = re.compile(r"^\s*code:\s*([0-9]+)\s*$", re.MULTILINE)


@dataclass
class ValidatorActionOptions:
    """Options shared by every validator action."""

    network: NetworkName | str
    home: str = ""
    from_: str = ""
    fees: str = ""
    gas_prices: str = ""
    gas: str = ""
    node: str = ""
    chain_id: str = ""
    dry_run: bool = True
    execute: bool = False
    logger: logging.Logger | None = None

    def to_tx_builder_options(self) -> TxBuilderOptions:
        """Builder options; ``execute`` switches off dry-run and turns on broadcast."""
        return TxBuilderOptions(
            network=self.network,
            home=self.home,
            from_=self.from_,
            fees=self.fees,
            gas_prices=self.gas_prices,
            gas=self.gas,
            node=self.node,
            chain_id=self.chain_id,
            broadcast=self.execute,
            dry_run=self.dry_run and not self.execute,
        )


@dataclass
class ActionStep:
    """One step of an action."""

    name: str
    status: StepStatus = StepStatus.PENDING
    message: str = ""


@dataclass
class ValidatorActionResult:
    """What an action did, step by step."""

    action: TxAction
    command: TxCommand | None = None
    executed: bool = False
    success: bool = False
    tx_hash: str = ""
    height: int = 0
    error: BaseException | None = None
    steps: list[ActionStep] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    description: str = ""

    def _begin(self, name: str) -> ActionStep:
        step = ActionStep(name)
        self.steps.append(step)
        return step


class ActionError(Exception):
    """An action failed; ``result`` holds the steps taken so far."""

    def __init__(self, message: str, result: ValidatorActionResult) -> None:
        super().__init__(message)
        self.result = result


@dataclass
class TxOutcome:
    """What running a transaction command produced."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    error: BaseException | None = None
    tx_hash: str = ""
    height: int = 0
    tx_success: bool = False


class _Runner(Protocol):
    def run_tx(self, binary: str, args: Sequence[str]) -> TxOutcome: ...


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0


def _summarise(stdout: str) -> tuple[str, int, bool]:
    """Pull the tx hash, height and result code out of monod's output."""
    tx_hash, height, code = "", 0, 0
    try:
        doc = json.loads(stdout)
    except ValueError:
        doc = None
    if isinstance(doc, dict):
        raw_hash = doc.get("txhash")
        tx_hash = raw_hash if isinstance(raw_hash, str) else ""
        height = _to_int(doc.get("height"))
        code = _to_int(doc.get("code"))
    else:
        if match := _TXHASH_RE.search(stdout):
            tx_hash = match.group(1)
        if match := _HEIGHT_RE.search(stdout):
            height = int(match.group(1))
        if match := _CODE_RE.search(stdout):
            code = int(match.group(1))
    return tx_hash, height, bool(tx_hash) and code == 0


@dataclass
class TxRunner:
    """Runs transaction commands as child processes."""

    timeout: float | None = None

    def run_tx(self, binary: str, args: Sequence[str]) -> TxOutcome:
        """Run ``binary args...`` and summarise its output."""
        command = [binary, *args]
        try:
            completed = subprocess.run(
                command, capture_output=True, text=True, timeout=self.timeout
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            return TxOutcome(success=False, stderr=str(exc), error=exc)
        if completed.returncode != 0:
            error = subprocess.CalledProcessError(
                completed.returncode, command, completed.stdout, completed.stderr
            )
            return TxOutcome(
                success=False,
                stdout=completed.stdout,
                stderr=completed.stderr,
                error=error,
            )
        tx_hash, height, tx_success = _summarise(completed.stdout)
        return TxOutcome(
            success=True,
            stdout=completed.stdout,
            stderr=completed.stderr,
            tx_hash=tx_hash,
            height=height,
            tx_success=tx_success,
        )


def _fail(
    result: ValidatorActionResult, step: ActionStep, error: BaseException, message: str
) -> ActionError:
    step.status = StepStatus.FAILED
    step.message = message
    result.error = error
    return ActionError(str(error), result)


def _prepare(
    action: TxAction,
    opts: ValidatorActionOptions,
    build: Callable[[TxBuilderOptions, Any], TxCommand],
    params: Any,
    *,
    show_chain_id: bool = False,
    keep_warnings: bool = False,
) -> ValidatorActionResult:
    """Validate the network and build the command: the first two steps."""
    result = ValidatorActionResult(action=action)
    logger = opts.logger or _log

    step = result._begin("Validate network")
    try:
        network = get_network(opts.network)
    except ValueError as exc:
        raise _fail(result, step, exc, str(exc)) from exc
    step.status = StepStatus.SUCCESS
    if show_chain_id:
        step.message = f"chain-id: {network.chain_id}"
    logger.debug("network validated chain_id=%s", network.chain_id)

    step = result._begin("Build transaction")
    try:
        command = build(opts.to_tx_builder_options(), params)
    except ValueError as exc:
        raise _fail(result, step, exc, str(exc)) from exc
    result.command = command
    result.description = command.description
    if keep_warnings:
        result.warnings = list(command.warning_messages)
    step.status = StepStatus.SUCCESS
    return result


def _skip_if_dry_run(opts: ValidatorActionOptions, result: ValidatorActionResult) -> bool:
    if opts.dry_run or not opts.execute:
        result.steps.append(
            ActionStep(
                "Execute transaction", StepStatus.SKIPPED, _DRY_RUN_MESSAGE
            )
        )
        result.executed = False
        result.success = True
        return True
    return False


def _run(
    result: ValidatorActionResult, step: ActionStep, runner: _Runner | None
) -> ValidatorActionResult:
    command = result.command
    assert command is not None
    outcome = (runner or TxRunner()).run_tx(command.binary, command.args)
    result.executed = True
    if not outcome.success:
        error = outcome.error or RuntimeError(outcome.stderr or "transaction failed")
        raise _fail(result, step, error, outcome.stderr)
    result.tx_hash = outcome.tx_hash
    result.height = outcome.height
    result.success = outcome.tx_success
    step.status = StepStatus.SUCCESS
    if outcome.tx_hash:
        step.message = f"txhash: {outcome.tx_hash}"
    return result


def _execute_or_skip(
    opts: ValidatorActionOptions,
    result: ValidatorActionResult,
    runner: _Runner | None,
) -> ValidatorActionResult:
    if _skip_if_dry_run(opts, result):
        return result
    step = result._begin("Execute transaction")
    return _run(result, step, runner)


def create_validator_action(
    opts: ValidatorActionOptions,
    params: CreateValidatorParams,
    runner: _Runner | None = None,
) -> ValidatorActionResult:
    """Preview create-validator; it cannot yet be run automatically."""
    result = _prepare(
        TxAction.CREATE_VALIDATOR,
        opts,
        build_create_validator_tx,
        params,
        show_chain_id=True,
        keep_warnings=True,
    )
    if _skip_if_dry_run(opts, result):
        return result

    step = result._begin("Execute transaction")
    assert result.command is not None
    if result.command.requires_multi_msg:
        result.warnings += [
            "Create-validator requires both MsgCreateValidator and MsgBurn in one tx.",
            "Run the commands below to generate unsigned JSON, then combine and sign:",
        ]
        error = RuntimeError(
            "multi-message tx not yet automated; use generated commands manually"
        )
        raise _fail(
            result,
            step,
            error,
            "multi-message transaction requires manual composition",
        )
    return _run(result, step, runner)


def delegate_action(
    opts: ValidatorActionOptions, params: DelegateParams, runner: _Runner | None = None
) -> ValidatorActionResult:
    """Preview or run a delegation."""
    result = _prepare(TxAction.DELEGATE, opts, build_delegate_tx, params)
    return _execute_or_skip(opts, result, runner)


def unbond_action(
    opts: ValidatorActionOptions, params: UnbondParams, runner: _Runner | None = None
) -> ValidatorActionResult:
    """Preview or run an unbonding."""
    result = _prepare(
        TxAction.UNBOND, opts, build_unbond_tx, params, keep_warnings=True
    )
    return _execute_or_skip(opts, result, runner)


def redelegate_action(
    opts: ValidatorActionOptions,
    params: RedelegateParams,
    runner: _Runner | None = None,
) -> ValidatorActionResult:
    """Preview or run a redelegation."""
    result = _prepare(
        TxAction.REDELEGATE, opts, build_redelegate_tx, params, keep_warnings=True
    )
    return _execute_or_skip(opts, result, runner)


def withdraw_rewards_action(
    opts: ValidatorActionOptions,
    params: WithdrawRewardsParams,
    runner: _Runner | None = None,
) -> ValidatorActionResult:
    """Preview or run a reward or commission withdrawal."""
    result = _prepare(
        TxAction.WITHDRAW_REWARDS, opts, build_withdraw_rewards_tx, params
    )
    return _execute_or_skip(opts, result, runner)


def vote_action(
    opts: ValidatorActionOptions, params: VoteParams, runner: _Runner | None = None
) -> ValidatorActionResult:
    """Preview or run a governance vote."""
    result = _prepare(TxAction.VOTE, opts, build_vote_tx, params)
    return _execute_or_skip(opts, result, runner)


def check_rpc_before_action(opts: ValidatorActionOptions) -> RPCCheckResult:
    """Check that the node's Comet RPC answers before acting.

    Raises StatusError if the check fails.
    """
    get_network(opts.network)
    endpoints = Endpoints(comet_rpc=opts.node or DEFAULT_NODE_URL)
    results = check_rpc(opts.network, endpoints)
    if not results.results:
        raise StatusError("no RPC check results")
    comet = results.results[0]
    if comet.status is CheckStatus.FAIL:
        raise StatusError(f"RPC check failed: {comet.message}")
    return comet