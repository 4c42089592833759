"""Message unit registry — one unit class per supported message type."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tx_composer.errors.definitions import ErrUnsupportedMessageType
from tx_composer.messages.bank import SendUnit
from tx_composer.messages.distribution import (
    FundCommunityPoolUnit,
    SetWithdrawAddressUnit,
    WithdrawDelegatorRewardUnit,
)
from tx_composer.messages.gov import VoteUnit
from tx_composer.messages.ibc import TransferUnit
from tx_composer.messages.staking import BeginRedelegateUnit, DelegateUnit, UndelegateUnit
from tx_composer.messages.type_urls import MsgTypeUrl
from tx_composer.messages.vesting import CreateVestingAccountUnit
from tx_composer.messages.wasm import (
    ExecuteContractUnit,
    InstantiateContract2Unit,
    InstantiateContractUnit,
    MigrateContractUnit,
    UpdateAdminUnit,
)

if TYPE_CHECKING:
    from tx_composer.engine.context import ComposeContext
    from tx_composer.messages.base import MessageUnit

UNIT_CLASSES: dict[MsgTypeUrl, type[MessageUnit]] = {
    MsgTypeUrl.SEND: SendUnit,
    MsgTypeUrl.VOTE: VoteUnit,
    MsgTypeUrl.TRANSFER: TransferUnit,
    MsgTypeUrl.CREATE_VESTING_ACCOUNT: CreateVestingAccountUnit,
    MsgTypeUrl.DELEGATE: DelegateUnit,
    MsgTypeUrl.UNDELEGATE: UndelegateUnit,
    MsgTypeUrl.BEGIN_REDELEGATE: BeginRedelegateUnit,
    MsgTypeUrl.FUND_COMMUNITY_POOL: FundCommunityPoolUnit,
    MsgTypeUrl.SET_WITHDRAW_ADDRESS: SetWithdrawAddressUnit,
    MsgTypeUrl.WITHDRAW_DELEGATOR_REWARD: WithdrawDelegatorRewardUnit,
    MsgTypeUrl.INSTANTIATE_CONTRACT: InstantiateContractUnit,
    MsgTypeUrl.INSTANTIATE_CONTRACT2: InstantiateContract2Unit,
    MsgTypeUrl.EXECUTE_CONTRACT: ExecuteContractUnit,
    MsgTypeUrl.MIGRATE_CONTRACT: MigrateContractUnit,
    MsgTypeUrl.UPDATE_ADMIN: UpdateAdminUnit,
}


def create_unit(msg_type: MsgTypeUrl | str, context: ComposeContext) -> MessageUnit:
    """Instantiate the editor unit for *msg_type*.

    Raises:
        ComposerError: ``ErrUnsupportedMessageType`` for unknown type URLs.
    """
    try:
        unit_cls = UNIT_CLASSES[MsgTypeUrl(msg_type)]
    except (KeyError, ValueError):
        raise ErrUnsupportedMessageType from None
    return unit_cls(context)
