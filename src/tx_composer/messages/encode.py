"""Encoded messages — EncodeObject, canonical JSON, JSON export."""

from __future__ import annotations

import base64
import enum
import json
from dataclasses import dataclass, field
from typing import Any

from tx_composer.chain.models import Coin

# Wasm fields holding a JSON document as UTF-8 bytes
_JSON_BYTES_FIELDS = frozenset({"msg"})

# Chain-specific attachments that are not part of the protobuf message
_ATTACHMENT_FIELDS = frozenset({"encryptedMsg"})


@dataclass(frozen=True)
class EncodeObject:
    """One message ready for inclusion in a transaction.

    Attributes:
        type_url: Protobuf type URL of the message.
        value: Message fields keyed by their protobuf JSON (camelCase) names.
    """

    type_url: str
    value: dict[str, Any] = field(default_factory=dict)

    def with_value(self, **updates: Any) -> EncodeObject:
        """Return a copy with *updates* merged into the value."""
        return EncodeObject(type_url=self.type_url, value={**self.value, **updates})


def canonical_json(text: str) -> str:
    """Re-serialise a JSON document compactly.

    Formatting differences in the editor text never reach the wire bytes.

    Raises:
        ValueError: If *text* is not valid JSON.
    """
    return json.dumps(json.loads(text), separators=(",", ":"), ensure_ascii=False)


def trim_strings(values: dict[str, Any]) -> dict[str, Any]:
    """Strip surrounding whitespace from every string value."""
    return {k: v.strip() if isinstance(v, str) else v for k, v in values.items()}


def _to_json_value(key: str, value: Any) -> Any:
    if isinstance(value, Coin):
        return value.to_dict()
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, bytes):
        if key in _JSON_BYTES_FIELDS:
            return json.loads(value.decode("utf-8")) if value else None
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, list):
        return [_to_json_value(key, v) for v in value]
    if isinstance(value, dict):
        return {k: _to_json_value(k, v) for k, v in value.items()}
    return value


def export_msg_to_json(msg: EncodeObject) -> EncodeObject:
    """Convert a message into its JSON-friendly form for persistence.

    Wasm ``msg`` bytes become the parsed JSON object, other bytes base64,
    64-bit integers decimal strings, enums their proto names. Chain-specific
    attachments are dropped.
    """
    value = {
        k: _to_json_value(k, v) for k, v in msg.value.items() if k not in _ATTACHMENT_FIELDS
    }
    return EncodeObject(type_url=msg.type_url, value=value)
