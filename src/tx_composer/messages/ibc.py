"""IBC messages — MsgTransfer (ICS-20)."""

from __future__ import annotations

import re
import time
from typing import Any, ClassVar

from tx_composer.chain.address import check_address
from tx_composer.chain.models import Coin
from tx_composer.messages.base import CoinUnit, parse_int
from tx_composer.messages.encode import EncodeObject
from tx_composer.messages.type_urls import MsgTypeUrl

_CHANNEL_RE = re.compile(r"^channel-\d+$")
_NANOS_PER_MINUTE = 60 * 1_000_000_000


class TransferUnit(CoinUnit):
    """Send tokens to an account on a counterparty chain.

    The timeout is entered in minutes and anchored at unit creation, so the
    encoded timestamp does not drift between re-encodings.
    """

    msg_type = MsgTypeUrl.TRANSFER
    defaults: ClassVar[dict[str, Any]] = {
        "source_port": "transfer",
        "source_channel": "",
        "receiver": "",
        "timeout_minutes": "10",
        "memo": "",
    }
    amount_required = True

    def _init_inputs(self) -> None:
        super()._init_inputs()
        self._anchor_ns = time.time_ns()

    def _validate(self, inputs: dict[str, Any]) -> bool:
        # Receiver lives on another chain: any prefix is accepted
        reason = check_address(inputs["receiver"], None)
        if reason:
            return self._fail("receiver", f"Invalid receiver address: {reason}")
        if not inputs["source_port"]:
            return self._fail("source_port", "Source port is required")
        if not _CHANNEL_RE.match(inputs["source_channel"]):
            return self._fail(
                "source_channel", "Source channel must be of the form channel-<number>"
            )
        if not self._check_positive_int("timeout_minutes", inputs["timeout_minutes"], "Timeout"):
            return False
        return self._validate_coin(inputs)

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        coin = self._base_coin(inputs) or Coin(denom=self.chain.denom, amount="0")
        minutes = parse_int(inputs["timeout_minutes"])
        return EncodeObject(
            type_url=self.msg_type,
            value={
                "sourcePort": inputs["source_port"],
                "sourceChannel": inputs["source_channel"],
                "token": coin,
                "sender": self.sender_address,
                "receiver": inputs["receiver"],
                "timeoutTimestamp": self._anchor_ns + max(minutes, 0) * _NANOS_PER_MINUTE,
                "memo": inputs["memo"],
            },
        )
