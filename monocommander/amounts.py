"""Denominations, amounts, addresses and other transaction inputs."""

from __future__ import annotations

import re
from enum import Enum

BASE_DENOM = "alyth"
DISPLAY_DENOM = "LYTH"
DECIMALS = 18
_UNIT = 10**DECIMALS

MIN_SELF_DELEGATION_LYTH = 100_000
VALIDATOR_BURN_LYTH = 100_000
MIN_SELF_DELEGATION_ALYTH = MIN_SELF_DELEGATION_LYTH * _UNIT
VALIDATOR_BURN_ALYTH = VALIDATOR_BURN_LYTH * _UNIT

BECH32_PREFIX_ACC_ADDR = "mono"
BECH32_PREFIX_VAL_ADDR = "monovaloper"
BECH32_PREFIX_CONS_ADDR = "monovalcons"

ACCOUNT_ADDRESS_PATTERN = re.compile(r"mono1[a-z0-9]{38}")
VALOPER_ADDRESS_PATTERN = re.compile(r"monovaloper1[a-z0-9]{38}")

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_PREFIX_RE = re.compile(r"\s*([+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")


class VoteOption(str, Enum):
    """Governance vote options."""

    YES = "yes"
    NO = "no"
    ABSTAIN = "abstain"
    NO_WITH_VETO = "no_with_veto"

    def __str__(self) -> str:
        return self.value


_VOTE_ALIASES = {
    "yes": VoteOption.YES,
    "1": VoteOption.YES,
    "no": VoteOption.NO,
    "2": VoteOption.NO,
    "abstain": VoteOption.ABSTAIN,
    "3": VoteOption.ABSTAIN,
    "no_with_veto": VoteOption.NO_WITH_VETO,
    "nowithveto": VoteOption.NO_WITH_VETO,
    "4": VoteOption.NO_WITH_VETO,
}


def validate_address(addr: str) -> None:
    """Raise ValueError unless *addr* is a ``mono1...`` account address."""
    if not addr:
        raise ValueError("address is required")
    if not ACCOUNT_ADDRESS_PATTERN.fullmatch(addr):
        raise ValueError(f"invalid address format: must be mono1... (got {addr})")


def validate_valoper_address(addr: str) -> None:
    """Raise ValueError unless *addr* is a ``monovaloper1...`` address."""
    if not addr:
        raise ValueError("validator operator address is required")
    if not VALOPER_ADDRESS_PATTERN.fullmatch(addr):
        raise ValueError(
            "invalid validator operator address format: "
            f"must be monovaloper1... (got {addr})"
        )


def _amount_value(amount: str) -> int:
    if not amount:
        raise ValueError("amount is required")
    if not amount.endswith(BASE_DENOM):
        raise ValueError(f"amount must be in {BASE_DENOM} (got {amount})")
    number = amount[: -len(BASE_DENOM)]
    if not number:
        raise ValueError("amount value is required")
    if not _INTEGER_RE.fullmatch(number):
        raise ValueError(f"invalid amount value: {number}")
    value = int(number)
    if value <= 0:
        raise ValueError(f"amount must be positive (got {number})")
    return value


def validate_amount(amount: str) -> None:
    """Raise ValueError unless *amount* is a positive integer followed by ``alyth``."""
    _amount_value(amount)


def validate_min_self_delegation(amount: str) -> None:
    """Raise ValueError unless *amount* is at least the minimum self-delegation."""
    value = _amount_value(amount)
    if value < MIN_SELF_DELEGATION_ALYTH:
        number = amount[: -len(BASE_DENOM)]
        raise ValueError(
            f"minimum self-delegation must be at least {MIN_SELF_DELEGATION_LYTH} "
            f"LYTH ({MIN_SELF_DELEGATION_ALYTH} alyth), got {number}"
        )


def parse_amount(amount: str) -> int:
    """The value in alyth of a validated amount string."""
    return _amount_value(amount)


def format_lyth(alyth: int | None) -> str:
    """Whole LYTH in an alyth amount, for display."""
    if alyth is None:
        return f"0 {DISPLAY_DENOM}"
    return f"{alyth // _UNIT} {DISPLAY_DENOM}"


def lyth_to_alyth(lyth: int) -> str:
    """A LYTH amount as an alyth amount string."""
    return f"{lyth * _UNIT}{BASE_DENOM}"


def validate_vote_option(option: str) -> VoteOption:
    """Parse a vote option by name or number, case-insensitively."""
    try:
        return _VOTE_ALIASES[option.lower()]
    except KeyError:
        raise ValueError(
            f"invalid vote option: {option} (valid: yes, no, abstain, no_with_veto)"
        ) from None


def validate_commission_rate(rate: str) -> None:
    """Raise ValueError unless *rate* reads as a number from 0.0 to 1.0."""
    if not rate:
        raise ValueError("commission rate is required")
    match = _FLOAT_PREFIX_RE.match(rate)
    if match is None:
        raise ValueError(f"invalid commission rate format: {rate}")
    value = float(match.group(1))
    if value < 0 or value > 1:
        raise ValueError(f"commission rate must be between 0.0 and 1.0 (got {rate})")