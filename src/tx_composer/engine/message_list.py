"""Message list controller — the ordered, editable list of message slots.

Each slot gets a stable key when it is created. Unit registrations are
stored by key, so a late registration from a slot that has since been
removed can never land in another slot.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tx_composer.errors.definitions import ErrSlotNotFound
from tx_composer.messages.registry import create_unit
from tx_composer.messages.type_urls import TX_FLAT_GAS, MsgTypeUrl, gas_of_tx

if TYPE_CHECKING:
    from tx_composer.engine.context import ComposeContext
    from tx_composer.messages.base import MessageUnit

logger = logging.getLogger(__name__)


@dataclass
class MessageSlot:
    """One position in the message list."""

    type: MsgTypeUrl
    unit: MessageUnit
    key: str = field(default_factory=lambda: uuid.uuid4().hex)


class MessageListController:
    """Owns the slots of one transaction being composed.

    Attributes:
        gas_limit: Displayed gas limit text. Recomputed from the message
            types on every add/remove; ``set_gas_limit`` overrides it.
        gas_limit_error: Field error set by a failed build.
        memo: Transaction memo.
    """

    def __init__(
        self,
        context: ComposeContext,
        *,
        flat_gas: int = TX_FLAT_GAS,
        gas_overrides: Mapping[str, int] | None = None,
    ) -> None:
        self._context = context
        self._flat_gas = flat_gas
        self._gas_overrides = dict(gas_overrides or {})
        self._slots: list[MessageSlot] = []
        self._registered: dict[str, MessageUnit] = {}
        self.gas_limit = str(self.estimate_gas())
        self.gas_limit_error = ""
        self.memo = ""

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def context(self) -> ComposeContext:
        return self._context

    @property
    def slots(self) -> list[MessageSlot]:
        return list(self._slots)

    @property
    def msg_types(self) -> list[MsgTypeUrl]:
        return [slot.type for slot in self._slots]

    @property
    def units(self) -> list[MessageUnit]:
        """Registered units in slot order; unregistered slots are skipped."""
        return [self._registered[s.key] for s in self._slots if s.key in self._registered]

    def __len__(self) -> int:
        return len(self._slots)

    def estimate_gas(self) -> int:
        """Gas estimate of the current type list."""
        return gas_of_tx(self.msg_types, flat_gas=self._flat_gas, overrides=self._gas_overrides)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_message_type(self, msg_type: MsgTypeUrl | str) -> MessageSlot:
        """Append a slot for *msg_type* and recompute the gas estimate.

        Raises:
            ComposerError: ``ErrUnsupportedMessageType`` for unknown types.
        """
        unit = create_unit(msg_type, self._context)
        slot = MessageSlot(type=unit.msg_type, unit=unit)
        self._slots.append(slot)
        self._registered[slot.key] = unit
        self._recompute_gas()
        logger.debug("Added %s slot %s", slot.type.short_name, slot.key)
        return slot

    def add_message_type_requiring_validator_data(self, msg_type: MsgTypeUrl | str) -> MessageSlot:
        """Like ``add_message_type`` but first triggers the validator set load.

        The load runs in the background; the slot is created immediately.
        """
        if self._context.validators is not None:
            self._context.validators.ensure_loaded()
        return self.add_message_type(msg_type)

    def remove_slot(self, index: int) -> MessageSlot:
        """Remove the slot at *index*; later slots shift down by one.

        Raises:
            ComposerError: ``ErrSlotNotFound`` if *index* is out of range.
        """
        if not 0 <= index < len(self._slots):
            raise ErrSlotNotFound
        slot = self._slots.pop(index)
        unit = self._registered.pop(slot.key, None)
        slot.unit.dispose()
        if unit is not None and unit is not slot.unit:
            unit.dispose()
        self._recompute_gas()
        logger.debug("Removed %s slot %s", slot.type.short_name, slot.key)
        return slot

    def set_unit_for_slot(self, index: int, unit: MessageUnit) -> None:
        """Register *unit* for the slot currently at *index*.

        Raises:
            ComposerError: ``ErrSlotNotFound`` if *index* is out of range.
        """
        if not 0 <= index < len(self._slots):
            raise ErrSlotNotFound
        self.register_unit(self._slots[index].key, unit)

    def register_unit(self, key: str, unit: MessageUnit) -> bool:
        """Register *unit* under a slot key.

        Returns:
            False (and nothing is stored) if no slot has that key any more.
        """
        if not any(s.key == key for s in self._slots):
            logger.debug("Ignoring registration for removed slot %s", key)
            return False
        self._registered[key] = unit
        return True

    def set_gas_limit(self, value: str | int) -> None:
        """User edit of the displayed gas limit."""
        self.gas_limit = str(value).strip()
        self.gas_limit_error = ""

    def _recompute_gas(self) -> None:
        self.gas_limit = str(self.estimate_gas())
        self.gas_limit_error = ""
