"""Bank messages — MsgSend."""

from __future__ import annotations

from typing import Any, ClassVar

from tx_composer.messages.base import CoinUnit
from tx_composer.messages.encode import EncodeObject
from tx_composer.messages.type_urls import MsgTypeUrl


class SendUnit(CoinUnit):
    """Send tokens from the sender to another account."""

    msg_type = MsgTypeUrl.SEND
    defaults: ClassVar[dict[str, Any]] = {"to_address": ""}
    amount_required = True

    def _validate(self, inputs: dict[str, Any]) -> bool:
        if not self._check_address("to_address", inputs["to_address"]):
            return False
        return self._validate_coin(inputs)

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        coin = self._base_coin(inputs)
        return EncodeObject(
            type_url=self.msg_type,
            value={
                "fromAddress": self.sender_address,
                "toAddress": inputs["to_address"],
                "amount": [coin] if coin else [],
            },
        )
