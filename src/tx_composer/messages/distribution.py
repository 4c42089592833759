"""Distribution messages — community pool, withdraw address, rewards."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from tx_composer.messages.base import CoinUnit, MessageUnit
from tx_composer.messages.encode import EncodeObject
from tx_composer.messages.type_urls import MsgTypeUrl

if TYPE_CHECKING:
    from tx_composer.chain.validators import Validator


class FundCommunityPoolUnit(CoinUnit):
    """Donate tokens to the community pool."""

    msg_type = MsgTypeUrl.FUND_COMMUNITY_POOL
    amount_required = True

    def _validate(self, inputs: dict[str, Any]) -> bool:
        return self._validate_coin(inputs)

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        coin = self._base_coin(inputs)
        return EncodeObject(
            type_url=self.msg_type,
            value={"amount": [coin] if coin else [], "depositor": self.sender_address},
        )


class SetWithdrawAddressUnit(MessageUnit):
    """Change the address staking rewards are paid to."""

    msg_type = MsgTypeUrl.SET_WITHDRAW_ADDRESS
    defaults: ClassVar[dict[str, Any]] = {"withdraw_address": ""}

    def _validate(self, inputs: dict[str, Any]) -> bool:
        return self._check_address("withdraw_address", inputs["withdraw_address"])

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        return EncodeObject(
            type_url=self.msg_type,
            value={
                "delegatorAddress": self.sender_address,
                "withdrawAddress": inputs["withdraw_address"],
            },
        )


class WithdrawDelegatorRewardUnit(MessageUnit):
    """Claim staking rewards from one validator."""

    msg_type = MsgTypeUrl.WITHDRAW_DELEGATOR_REWARD
    defaults: ClassVar[dict[str, Any]] = {"validator_address": ""}

    @property
    def validator_options(self) -> list[Validator]:
        cache = self._context.validators
        return cache.validators if cache is not None else []

    def _validate(self, inputs: dict[str, Any]) -> bool:
        return self._check_address(
            "validator_address", inputs["validator_address"], self.chain.validator_prefix
        )

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        return EncodeObject(
            type_url=self.msg_type,
            value={
                "delegatorAddress": self.sender_address,
                "validatorAddress": inputs["validator_address"],
            },
        )
