"""Staking messages — MsgDelegate, MsgUndelegate, MsgBeginRedelegate.

Validator addresses are offered from the shared bonded-validator cache. The
cache may still be loading when a unit is created; the option list is then
simply empty until it fills.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from tx_composer.chain.models import Coin
from tx_composer.messages.base import CoinUnit
from tx_composer.messages.encode import EncodeObject
from tx_composer.messages.type_urls import MsgTypeUrl

if TYPE_CHECKING:
    from tx_composer.chain.validators import Validator


class StakingUnit(CoinUnit):
    """Shared behaviour of messages that move stake in the bond denom."""

    amount_required = True

    @property
    def validator_options(self) -> list[Validator]:
        """Bonded validators currently known to the shared cache."""
        cache = self._context.validators
        return cache.validators if cache is not None else []

    def _check_validator(self, field: str, address: str) -> bool:
        return self._check_address(field, address, self.chain.validator_prefix)

    def _check_bond_denom(self, inputs: dict[str, Any]) -> bool:
        coin = self._base_coin(inputs)
        if coin is not None and coin.denom != self.chain.denom:
            return self._fail("amount", f"Only {self.chain.denom} can be staked")
        return True

    def _stake(self, inputs: dict[str, Any]) -> Coin:
        return self._base_coin(inputs) or Coin(denom=self.chain.denom, amount="0")


class DelegateUnit(StakingUnit):
    """Delegate tokens to a validator."""

    msg_type = MsgTypeUrl.DELEGATE
    defaults: ClassVar[dict[str, Any]] = {"validator_address": ""}

    def _validate(self, inputs: dict[str, Any]) -> bool:
        if not self._check_validator("validator_address", inputs["validator_address"]):
            return False
        return self._validate_coin(inputs) and self._check_bond_denom(inputs)

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        return EncodeObject(
            type_url=self.msg_type,
            value={
                "delegatorAddress": self.sender_address,
                "validatorAddress": inputs["validator_address"],
                "amount": self._stake(inputs),
            },
        )


class UndelegateUnit(DelegateUnit):
    """Undelegate tokens from a validator."""

    msg_type = MsgTypeUrl.UNDELEGATE


class BeginRedelegateUnit(StakingUnit):
    """Move a delegation from one validator to another."""

    msg_type = MsgTypeUrl.BEGIN_REDELEGATE
    defaults: ClassVar[dict[str, Any]] = {
        "validator_src_address": "",
        "validator_dst_address": "",
    }

    def _validate(self, inputs: dict[str, Any]) -> bool:
        if not self._check_validator("validator_src_address", inputs["validator_src_address"]):
            return False
        if not self._check_validator("validator_dst_address", inputs["validator_dst_address"]):
            return False
        if inputs["validator_src_address"] == inputs["validator_dst_address"]:
            return self._fail(
                "validator_dst_address", "Destination must differ from source validator"
            )
        return self._validate_coin(inputs) and self._check_bond_denom(inputs)

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        return EncodeObject(
            type_url=self.msg_type,
            value={
                "delegatorAddress": self.sender_address,
                "validatorSrcAddress": inputs["validator_src_address"],
                "validatorDstAddress": inputs["validator_dst_address"],
                "amount": self._stake(inputs),
            },
        )
