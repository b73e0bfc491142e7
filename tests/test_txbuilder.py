import pytest

from monocommander.amounts import VoteOption
from monocommander.networks import NetworkName
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

VALOPER_Q = "monovaloper1qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqq5nfrmp"
VALOPER_W = "monovaloper1wwwwwwwwwwwwwwwwwwwwwwwwwwwwwwww5nfrmp"
ONE_LYTH = "1000000000000000000alyth"
HUNDRED_K = "100000000000000000000000alyth"


def local_opts(**kwargs):
    return TxBuilderOptions(network=NetworkName.LOCALNET, from_="mykey", **kwargs)


def sprint_opts(from_="mykey"):
    return TxBuilderOptions(
        network=NetworkName.SPRINTNET,
        home="/home/user/.monod",
        from_=from_,
        fees="10000alyth",
    )


def validator_params(**overrides):
    values = dict(
        moniker="my-validator",
        commission_rate="0.10",
        commission_max_rate="0.20",
        commission_max_change="0.01",
        min_self_delegation=HUNDRED_K,
        amount=HUNDRED_K,
    )
    values.update(overrides)
    return CreateValidatorParams(**values)


def test_golden_delegate_command():
    cmd = build_delegate_tx(sprint_opts(), DelegateParams(VALOPER_Q, ONE_LYTH))
    assert str(cmd) == (
        f"monod tx staking delegate {VALOPER_Q} {ONE_LYTH} "
        "--chain-id mono-sprint-1 --home /home/user/.monod --from mykey "
        "--fees 10000alyth --generate-only"
    )


def test_golden_unbond_command():
    cmd = build_unbond_tx(local_opts(), UnbondParams(VALOPER_Q, ONE_LYTH))
    assert str(cmd) == (
        f"monod tx staking unbond {VALOPER_Q} {ONE_LYTH} "
        "--chain-id mono-local-1 --from mykey --generate-only"
    )


def test_golden_redelegate_command():
    cmd = build_redelegate_tx(
        local_opts(), RedelegateParams(VALOPER_Q, VALOPER_W, ONE_LYTH)
    )
    assert str(cmd) == (
        f"monod tx staking redelegate {VALOPER_Q} {VALOPER_W} {ONE_LYTH} "
        "--chain-id mono-local-1 --from mykey --generate-only"
    )


def test_golden_vote_command():
    cmd = build_vote_tx(local_opts(), VoteParams("1", VoteOption.YES))
    assert str(cmd) == (
        "monod tx gov vote 1 yes --chain-id mono-local-1 --from mykey --generate-only"
    )


def test_command_generation_is_deterministic():
    commands = {
        str(build_delegate_tx(sprint_opts("testkey"), DelegateParams(VALOPER_Q, ONE_LYTH)))
        for _ in range(5)
    }
    assert len(commands) == 1


def test_build_delegate_tx():
    cmd = build_delegate_tx(sprint_opts(), DelegateParams(VALOPER_Q, ONE_LYTH))
    assert cmd.action is TxAction.DELEGATE
    text = str(cmd)
    assert "tx staking delegate" in text
    assert VALOPER_Q in text
    assert ONE_LYTH in text
    assert "--chain-id mono-sprint-1" in text
    assert cmd.description == f"Delegate 1 LYTH to {VALOPER_Q}"


def test_build_delegate_tx_rejects_bad_validator():
    with pytest.raises(ValueError, match="validator operator address"):
        build_delegate_tx(sprint_opts(), DelegateParams("mono1abc", ONE_LYTH))


def test_build_delegate_tx_rejects_bad_amount():
    with pytest.raises(ValueError, match="amount must be in alyth"):
        build_delegate_tx(sprint_opts(), DelegateParams(VALOPER_Q, "1000ulyth"))


def test_build_delegate_tx_rejects_unknown_network():
    opts = TxBuilderOptions(network="nowhere")
    with pytest.raises(ValueError, match="unknown network"):
        build_delegate_tx(opts, DelegateParams(VALOPER_Q, ONE_LYTH))


def test_build_unbond_tx():
    cmd = build_unbond_tx(local_opts(), UnbondParams(VALOPER_Q, ONE_LYTH))
    assert cmd.action is TxAction.UNBOND
    assert len(cmd.warning_messages) == 1
    assert "3-day unbonding period" in cmd.warning_messages[0]


def test_build_redelegate_tx():
    cmd = build_redelegate_tx(
        local_opts(), RedelegateParams(VALOPER_Q, VALOPER_W, ONE_LYTH)
    )
    assert cmd.action is TxAction.REDELEGATE
    assert "tx staking redelegate" in str(cmd)
    assert cmd.warning_messages


def test_build_redelegate_tx_labels_bad_source_and_destination():
    with pytest.raises(ValueError, match="^source validator: "):
        build_redelegate_tx(local_opts(), RedelegateParams("x", VALOPER_W, ONE_LYTH))
    with pytest.raises(ValueError, match="^destination validator: "):
        build_redelegate_tx(local_opts(), RedelegateParams(VALOPER_Q, "", ONE_LYTH))


@pytest.mark.parametrize(
    "params, wanted",
    [
        (WithdrawRewardsParams(), "withdraw-all-rewards"),
        (WithdrawRewardsParams(validator_addr=VALOPER_Q), "withdraw-rewards"),
        (WithdrawRewardsParams(commission=True), "--commission"),
    ],
)
def test_build_withdraw_rewards_tx(params, wanted):
    cmd = build_withdraw_rewards_tx(local_opts(), params)
    assert wanted in str(cmd)
    assert cmd.action is TxAction.WITHDRAW_REWARDS


def test_withdraw_commission_from_validator():
    cmd = build_withdraw_rewards_tx(
        local_opts(), WithdrawRewardsParams(validator_addr=VALOPER_Q, commission=True)
    )
    assert cmd.args[:5] == [
        "tx", "distribution", "withdraw-rewards", VALOPER_Q, "--commission"
    ]
    assert cmd.description == f"Withdraw validator commission from {VALOPER_Q}"


def test_withdraw_rewards_rejects_bad_validator():
    with pytest.raises(ValueError):
        build_withdraw_rewards_tx(
            local_opts(), WithdrawRewardsParams(validator_addr="bogus")
        )


def test_build_vote_tx():
    cmd = build_vote_tx(local_opts(), VoteParams("1", VoteOption.YES))
    assert cmd.action is TxAction.VOTE
    text = str(cmd)
    assert "tx gov vote" in text
    assert " 1 " in text
    assert "yes" in text
    assert cmd.description == "Vote yes on proposal #1"


@pytest.mark.parametrize("proposal_id", ["", "abc", "-1", "0"])
def test_build_vote_tx_invalid_proposal(proposal_id):
    with pytest.raises(ValueError, match="proposal ID"):
        build_vote_tx(local_opts(), VoteParams(proposal_id, VoteOption.YES))


def test_build_create_validator_tx():
    opts = TxBuilderOptions(
        network=NetworkName.SPRINTNET, from_="validator", home="/home/user/.monod"
    )
    cmd = build_create_validator_tx(opts, validator_params())
    assert cmd.action is TxAction.CREATE_VALIDATOR
    assert cmd.requires_multi_msg is True
    assert len(cmd.multi_msg_commands) == 2
    assert len(cmd.warning_messages) == 2
    assert cmd.description == (
        "Create validator my-validator with 100000 LYTH self-bond "
        "(includes 100000 LYTH burn)"
    )
    create, burn = cmd.multi_msg_commands
    assert cmd.args == create.args
    assert create.args[:3] == ["tx", "staking", "create-validator"]
    idx = create.args.index("--min-self-delegation")
    assert create.args[idx + 1] == "100000000000000000000000"
    assert burn.action is TxAction.BURN
    assert burn.args[:4] == ["tx", "bank", "burn", HUNDRED_K]
    assert burn.args[-1] == "--generate-only"


def test_create_validator_optional_fields_and_pubkey():
    cmd = build_create_validator_tx(
        local_opts(),
        validator_params(
            identity="ABC", website="https://example.com", pubkey_path="/tmp/pk.json"
        ),
    )
    args = cmd.args
    assert args[args.index("--identity") + 1] == "ABC"
    assert args[args.index("--website") + 1] == "https://example.com"
    assert args[args.index("--pubkey") + 1] == "$(cat /tmp/pk.json)"
    assert "--details" not in args


def test_create_validator_invalid_amount():
    with pytest.raises(ValueError, match="^self-bond amount: "):
        build_create_validator_tx(sprint_opts(), validator_params(amount="1000alyth"))


def test_create_validator_requires_moniker():
    with pytest.raises(ValueError, match="moniker is required"):
        build_create_validator_tx(sprint_opts(), validator_params(moniker=""))


def test_create_validator_bad_commission_max_rate():
    with pytest.raises(ValueError, match="^commission-max-rate: "):
        build_create_validator_tx(
            sprint_opts(), validator_params(commission_max_rate="1.5")
        )


def test_gas_prices_default_gas_to_auto():
    opts = local_opts(gas_prices="0.025alyth")
    cmd = build_vote_tx(opts, VoteParams("3", VoteOption.NO))
    assert cmd.args[-5:] == [
        "--gas-prices", "0.025alyth", "--gas", "auto", "--generate-only"
    ]


def test_fees_take_precedence_over_gas_prices():
    opts = local_opts(fees="5alyth", gas_prices="0.025alyth")
    cmd = build_vote_tx(opts, VoteParams("3", VoteOption.NO))
    assert "--gas-prices" not in cmd.args
    assert "--gas" not in cmd.args


def test_broadcast_chain_id_and_node():
    opts = local_opts(broadcast=True, chain_id="custom-1", node="tcp://localhost:26657")
    cmd = build_vote_tx(opts, VoteParams("2", VoteOption.ABSTAIN))
    assert cmd.args[cmd.args.index("--chain-id") + 1] == "custom-1"
    assert cmd.args[cmd.args.index("--node") + 1] == "tcp://localhost:26657"
    assert cmd.args[-3:] == ["--broadcast-mode", "sync", "-y"]
    assert "--generate-only" not in cmd.args


def test_tx_command_string():
    cmd = TxCommand(
        binary="monod",
        args=["tx", "staking", "delegate", "monovaloper1...", "1000alyth"],
    )
    assert str(cmd) == "monod tx staking delegate monovaloper1... 1000alyth"


def test_tx_command_string_default_binary():
    cmd = TxCommand(binary="", args=["tx", "staking", "delegate"])
    assert str(cmd).startswith("monod ")