"""Message editors — one validating, encoding unit per message type."""

from tx_composer.messages.base import CUSTOM_DENOM, CoinUnit, MessageUnit
from tx_composer.messages.encode import EncodeObject, export_msg_to_json
from tx_composer.messages.registry import UNIT_CLASSES, create_unit
from tx_composer.messages.type_urls import MsgTypeUrl, gas_of_tx

__all__ = [
    "CUSTOM_DENOM",
    "UNIT_CLASSES",
    "CoinUnit",
    "EncodeObject",
    "MessageUnit",
    "MsgTypeUrl",
    "create_unit",
    "export_msg_to_json",
    "gas_of_tx",
]
