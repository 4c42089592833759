"""Vesting messages — MsgCreateVestingAccount."""

from __future__ import annotations

import time
from typing import Any, ClassVar

from tx_composer.messages.base import CoinUnit, parse_int
from tx_composer.messages.encode import EncodeObject
from tx_composer.messages.type_urls import MsgTypeUrl


class CreateVestingAccountUnit(CoinUnit):
    """Create a vesting account funded by the sender."""

    msg_type = MsgTypeUrl.CREATE_VESTING_ACCOUNT
    defaults: ClassVar[dict[str, Any]] = {"to_address": "", "end_time": "", "delayed": True}
    amount_required = True

    def _validate(self, inputs: dict[str, Any]) -> bool:
        if not self._check_address("to_address", inputs["to_address"]):
            return False
        if not self._check_positive_int("end_time", inputs["end_time"], "End time"):
            return False
        if parse_int(inputs["end_time"]) <= int(time.time()):
            return self._fail("end_time", "End time must be in the future")
        return self._validate_coin(inputs)

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        coin = self._base_coin(inputs)
        return EncodeObject(
            type_url=self.msg_type,
            value={
                "fromAddress": self.sender_address,
                "toAddress": inputs["to_address"],
                "amount": [coin] if coin else [],
                "endTime": parse_int(inputs["end_time"]),
                "delayed": bool(inputs["delayed"]),
            },
        )
