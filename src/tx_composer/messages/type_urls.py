"""Message type identifiers and per-type gas weights."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping


class MsgTypeUrl(enum.StrEnum):
    """Supported transaction message kinds, keyed by protobuf type URL."""

    # Bank
    SEND = "/cosmos.bank.v1beta1.MsgSend"
    # Governance
    VOTE = "/cosmos.gov.v1beta1.MsgVote"
    # IBC
    TRANSFER = "/ibc.applications.transfer.v1.MsgTransfer"
    # Vesting
    CREATE_VESTING_ACCOUNT = "/cosmos.vesting.v1beta1.MsgCreateVestingAccount"
    # Staking
    DELEGATE = "/cosmos.staking.v1beta1.MsgDelegate"
    UNDELEGATE = "/cosmos.staking.v1beta1.MsgUndelegate"
    BEGIN_REDELEGATE = "/cosmos.staking.v1beta1.MsgBeginRedelegate"
    # Distribution
    FUND_COMMUNITY_POOL = "/cosmos.distribution.v1beta1.MsgFundCommunityPool"
    SET_WITHDRAW_ADDRESS = "/cosmos.distribution.v1beta1.MsgSetWithdrawAddress"
    WITHDRAW_DELEGATOR_REWARD = "/cosmos.distribution.v1beta1.MsgWithdrawDelegatorReward"
    # CosmWasm
    INSTANTIATE_CONTRACT = "/cosmwasm.wasm.v1.MsgInstantiateContract"
    INSTANTIATE_CONTRACT2 = "/cosmwasm.wasm.v1.MsgInstantiateContract2"
    EXECUTE_CONTRACT = "/cosmwasm.wasm.v1.MsgExecuteContract"
    MIGRATE_CONTRACT = "/cosmwasm.wasm.v1.MsgMigrateContract"
    UPDATE_ADMIN = "/cosmwasm.wasm.v1.MsgUpdateAdmin"

    @property
    def short_name(self) -> str:
        """Message name without the package, e.g. ``MsgSend``."""
        return self.value.rsplit(".", 1)[-1]

    @property
    def requires_validator_data(self) -> bool:
        """Whether editing this message needs the bonded validator set."""
        return self in _VALIDATOR_TYPES


_VALIDATOR_TYPES = frozenset(
    {
        MsgTypeUrl.DELEGATE,
        MsgTypeUrl.UNDELEGATE,
        MsgTypeUrl.BEGIN_REDELEGATE,
        MsgTypeUrl.WITHDRAW_DELEGATOR_REWARD,
    }
)

# ---------------------------------------------------------------------------
# Gas estimation
# ---------------------------------------------------------------------------

# Gas used by a transaction with no messages (signature verification, fees)
TX_FLAT_GAS = 100_000

GAS_WEIGHTS: dict[MsgTypeUrl, int] = {
    MsgTypeUrl.SEND: 100_000,
    MsgTypeUrl.VOTE: 100_000,
    MsgTypeUrl.TRANSFER: 180_000,
    MsgTypeUrl.CREATE_VESTING_ACCOUNT: 100_000,
    MsgTypeUrl.DELEGATE: 160_000,
    MsgTypeUrl.UNDELEGATE: 180_000,
    MsgTypeUrl.BEGIN_REDELEGATE: 400_000,
    MsgTypeUrl.FUND_COMMUNITY_POOL: 100_000,
    MsgTypeUrl.SET_WITHDRAW_ADDRESS: 100_000,
    MsgTypeUrl.WITHDRAW_DELEGATOR_REWARD: 100_000,
    MsgTypeUrl.INSTANTIATE_CONTRACT: 150_000,
    MsgTypeUrl.INSTANTIATE_CONTRACT2: 150_000,
    MsgTypeUrl.EXECUTE_CONTRACT: 150_000,
    MsgTypeUrl.MIGRATE_CONTRACT: 150_000,
    MsgTypeUrl.UPDATE_ADMIN: 100_000,
}


def gas_of_msg(msg_type: MsgTypeUrl, overrides: Mapping[str, int] | None = None) -> int:
    """Return the gas weight of a single message type."""
    if overrides and msg_type.value in overrides:
        return overrides[msg_type.value]
    return GAS_WEIGHTS[msg_type]


def gas_of_tx(
    msg_types: Iterable[MsgTypeUrl],
    *,
    flat_gas: int = TX_FLAT_GAS,
    overrides: Mapping[str, int] | None = None,
) -> int:
    """Estimate the gas limit of a transaction from its message types.

    Depends only on the ordered type list, never on message content.
    """
    return flat_gas + sum(gas_of_msg(t, overrides) for t in msg_types)
