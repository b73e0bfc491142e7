"""Building monod transaction command lines for staking and governance."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from monocommander.amounts import (
    BASE_DENOM,
    VALIDATOR_BURN_ALYTH,
    VALIDATOR_BURN_LYTH,
    VoteOption,
    format_lyth,
    parse_amount,
    validate_amount,
    validate_commission_rate,
    validate_min_self_delegation,
    validate_valoper_address,
)
from monocommander.networks import Network, NetworkName, get_network

DEFAULT_BINARY = "monod"

_LEADING_INT_RE = re.compile(r"\s*([+-]?[0-9]+)")
_INT64_MAX = 2**63 - 1


class TxAction(str, Enum):
    """Kinds of transaction the builder produces."""

    CREATE_VALIDATOR = "create-validator"
    DELEGATE = "delegate"
    UNBOND = "unbond"
    REDELEGATE = "redelegate"
    WITHDRAW_REWARDS = "withdraw-rewards"
    WITHDRAW_COMMISSION = "withdraw-commission"
    VOTE = "vote"
    BURN = "burn"

    def __str__(self) -> str:
        return self.value


@dataclass
class TxCommand:
    """A generated monod command line."""

    action: TxAction | None = None
    args: list[str] = field(default_factory=list)
    binary: str = DEFAULT_BINARY
    description: str = ""
    warning_messages: list[str] = field(default_factory=list)
    requires_multi_msg: bool = False
    multi_msg_commands: list["TxCommand"] = field(default_factory=list)

    def __str__(self) -> str:
        binary = self.binary or DEFAULT_BINARY
        return " ".join([binary, *self.args])


@dataclass
class TxBuilderOptions:
    """Options shared by every transaction."""

    network: NetworkName | str
    home: str = ""
    from_: str = ""
    fees: str = ""
    gas_prices: str = ""
    gas: str = ""
    node: str = ""
    chain_id: str = ""
    broadcast: bool = False
    dry_run: bool = False


@dataclass
class CreateValidatorParams:
    """Parameters of create-validator; amounts are in alyth."""

    moniker: str = ""
    commission_rate: str = ""
    commission_max_rate: str = ""
    commission_max_change: str = ""
    min_self_delegation: str = ""
    amount: str = ""
    identity: str = ""
    website: str = ""
    security_contact: str = ""
    details: str = ""
    pubkey_path: str = ""
    pubkey_auto: bool = False


@dataclass
class DelegateParams:
    """Parameters of a delegation."""

    validator_addr: str
    amount: str


@dataclass
class UnbondParams:
    """Parameters of an unbonding."""

    validator_addr: str
    amount: str


@dataclass
class RedelegateParams:
    """Parameters of a redelegation."""

    src_validator_addr: str
    dst_validator_addr: str
    amount: str


@dataclass
class WithdrawRewardsParams:
    """Parameters of a reward withdrawal; no validator means all of them."""

    validator_addr: str = ""
    commission: bool = False


@dataclass
class VoteParams:
    """Parameters of a governance vote."""

    proposal_id: str
    option: VoteOption | str


def _common_args(opts: TxBuilderOptions, network: Network) -> list[str]:
    args = ["--chain-id", opts.chain_id or network.chain_id]
    if opts.home:
        args += ["--home", opts.home]
    if opts.from_:
        args += ["--from", opts.from_]
    gas = opts.gas
    if opts.fees:
        args += ["--fees", opts.fees]
    elif opts.gas_prices:
        args += ["--gas-prices", opts.gas_prices]
        gas = gas or "auto"
    if gas:
        args += ["--gas", gas]
    if opts.node:
        args += ["--node", opts.node]
    if opts.broadcast:
        args += ["--broadcast-mode", "sync", "-y"]
    else:
        args.append("--generate-only")
    return args


def _prefixed(prefix: str, exc: ValueError) -> ValueError:
    return ValueError(f"{prefix}: {exc}")


def build_create_validator_tx(
    opts: TxBuilderOptions, params: CreateValidatorParams
) -> TxCommand:
    """Build create-validator together with the mandatory validator burn."""
    if not params.moniker:
        raise ValueError("moniker is required")
    try:
        validate_min_self_delegation(params.amount)
    except ValueError as exc:
        raise _prefixed("self-bond amount", exc) from exc
    try:
        validate_min_self_delegation(params.min_self_delegation)
    except ValueError as exc:
        raise _prefixed("min-self-delegation", exc) from exc
    validate_commission_rate(params.commission_rate)
    try:
        validate_commission_rate(params.commission_max_rate)
    except ValueError as exc:
        raise _prefixed("commission-max-rate", exc) from exc
    try:
        validate_commission_rate(params.commission_max_change)
    except ValueError as exc:
        raise _prefixed("commission-max-change-rate", exc) from exc

    network = get_network(opts.network)

    create_args = [
        "tx", "staking", "create-validator",
        "--moniker", params.moniker,
        "--amount", params.amount,
        "--min-self-delegation", params.min_self_delegation.removesuffix(BASE_DENOM),
        "--commission-rate", params.commission_rate,
        "--commission-max-rate", params.commission_max_rate,
        "--commission-max-change-rate", params.commission_max_change,
    ]
    optional = (
        ("--identity", params.identity),
        ("--website", params.website),
        ("--security-contact", params.security_contact),
        ("--details", params.details),
    )
    for flag, value in optional:
        if value:
            create_args += [flag, value]
    if params.pubkey_path:
        create_args += ["--pubkey", f"$(cat {params.pubkey_path})"]
    create_args += _common_args(opts, network)

    burn_args = ["tx", "bank", "burn", f"{VALIDATOR_BURN_ALYTH}{BASE_DENOM}"]
    burn_args += _common_args(opts, network)

    return TxCommand(
        action=TxAction.CREATE_VALIDATOR,
        binary=DEFAULT_BINARY,
        args=list(create_args),
        requires_multi_msg=True,
        description=(
            f"Create validator {params.moniker} with "
            f"{format_lyth(parse_amount(params.amount))} self-bond "
            f"(includes {VALIDATOR_BURN_LYTH} LYTH burn)"
        ),
        warning_messages=[
            f"IMPORTANT: Validator creation requires burning {VALIDATOR_BURN_LYTH} "
            "LYTH in the same transaction.",
            "This is a one-time, non-refundable burn as per Monolythium blueprint.",
        ],
        multi_msg_commands=[
            TxCommand(
                action=TxAction.CREATE_VALIDATOR,
                binary=DEFAULT_BINARY,
                args=create_args,
                description="Create validator message",
            ),
            TxCommand(
                action=TxAction.BURN,
                binary=DEFAULT_BINARY,
                args=burn_args,
                description=(
                    f"Burn {VALIDATOR_BURN_LYTH} LYTH "
                    "(required for validator creation)"
                ),
            ),
        ],
    )


def build_delegate_tx(opts: TxBuilderOptions, params: DelegateParams) -> TxCommand:
    """Build a delegation to a validator."""
    validate_valoper_address(params.validator_addr)
    validate_amount(params.amount)
    network = get_network(opts.network)
    args = ["tx", "staking", "delegate", params.validator_addr, params.amount]
    return TxCommand(
        action=TxAction.DELEGATE,
        args=args + _common_args(opts, network),
        description=(
            f"Delegate {format_lyth(parse_amount(params.amount))} "
            f"to {params.validator_addr}"
        ),
    )


def build_unbond_tx(opts: TxBuilderOptions, params: UnbondParams) -> TxCommand:
    """Build an unbonding from a validator."""
    validate_valoper_address(params.validator_addr)
    validate_amount(params.amount)
    network = get_network(opts.network)
    args = ["tx", "staking", "unbond", params.validator_addr, params.amount]
    return TxCommand(
        action=TxAction.UNBOND,
        args=args + _common_args(opts, network),
        description=(
            f"Unbond {format_lyth(parse_amount(params.amount))} from "
            f"{params.validator_addr} (3-day unbonding period)"
        ),
        warning_messages=[
            "Unbonded tokens will be available after the 3-day unbonding period.",
        ],
    )


def build_redelegate_tx(opts: TxBuilderOptions, params: RedelegateParams) -> TxCommand:
    """Build a redelegation between two validators."""
    try:
        validate_valoper_address(params.src_validator_addr)
    except ValueError as exc:
        raise _prefixed("source validator", exc) from exc
    try:
        validate_valoper_address(params.dst_validator_addr)
    except ValueError as exc:
        raise _prefixed("destination validator", exc) from exc
    validate_amount(params.amount)
    network = get_network(opts.network)
    args = [
        "tx", "staking", "redelegate",
        params.src_validator_addr, params.dst_validator_addr, params.amount,
    ]
    return TxCommand(
        action=TxAction.REDELEGATE,
        args=args + _common_args(opts, network),
        description=(
            f"Redelegate {format_lyth(parse_amount(params.amount))} from "
            f"{params.src_validator_addr} to {params.dst_validator_addr}"
        ),
        warning_messages=[
            "Redelegation is instant but you cannot redelegate the same tokens "
            "again for 3 days.",
        ],
    )


def build_withdraw_rewards_tx(
    opts: TxBuilderOptions, params: WithdrawRewardsParams
) -> TxCommand:
    """Build a withdrawal of staking rewards or validator commission."""
    network = get_network(opts.network)
    validator = params.validator_addr
    if validator:
        validate_valoper_address(validator)

    if params.commission:
        args = ["tx", "distribution", "withdraw-rewards"]
        if validator:
            args.append(validator)
        args.append("--commission")
        description = "Withdraw validator commission"
        if validator:
            description += f" from {validator}"
    elif validator:
        args = ["tx", "distribution", "withdraw-rewards", validator]
        description = f"Withdraw staking rewards from {validator}"
    else:
        args = ["tx", "distribution", "withdraw-all-rewards"]
        description = "Withdraw all staking rewards"

    return TxCommand(
        action=TxAction.WITHDRAW_REWARDS,
        args=args + _common_args(opts, network),
        description=description,
    )


def _proposal_number(proposal_id: str) -> int:
    match = _LEADING_INT_RE.match(proposal_id)
    if match is None:
        raise ValueError(f"invalid proposal ID: {proposal_id} (must be numeric)")
    value = int(match.group(1))
    if abs(value) > _INT64_MAX:
        raise ValueError(f"invalid proposal ID: {proposal_id} (must be numeric)")
    return value


def build_vote_tx(opts: TxBuilderOptions, params: VoteParams) -> TxCommand:
    """Build a governance vote on a proposal."""
    if not params.proposal_id:
        raise ValueError("proposal ID is required")
    if _proposal_number(params.proposal_id) <= 0:
        raise ValueError("proposal ID must be positive")
    network = get_network(opts.network)
    option = str(params.option)
    args = ["tx", "gov", "vote", params.proposal_id, option]
    return TxCommand(
        action=TxAction.VOTE,
        args=args + _common_args(opts, network),
        description=f"Vote {option} on proposal #{params.proposal_id}",
    )