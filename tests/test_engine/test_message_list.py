"""Tests for the message list controller."""

from __future__ import annotations

import pytest

from conftest import validator_address
from tx_composer.chain.validators import Validator
from tx_composer.engine.context import ComposeContext
from tx_composer.engine.message_list import MessageListController
from tx_composer.engine.validator_cache import LoadState, ValidatorCache
from tx_composer.errors.compose_errors import ComposerError
from tx_composer.errors.definitions import ErrSlotNotFound, ErrUnsupportedMessageType
from tx_composer.messages.bank import SendUnit
from tx_composer.messages.type_urls import TX_FLAT_GAS, MsgTypeUrl, gas_of_tx

# ---------------------------------------------------------------------------
# Slots
# ---------------------------------------------------------------------------


class TestSlots:
    def test_empty(self, context) -> None:
        controller = MessageListController(context)
        assert len(controller) == 0
        assert controller.units == []
        assert controller.gas_limit == str(TX_FLAT_GAS)

    def test_add_appends_with_fresh_key(self, context) -> None:
        controller = MessageListController(context)
        a = controller.add_message_type(MsgTypeUrl.SEND)
        b = controller.add_message_type(MsgTypeUrl.SEND)
        assert controller.slots == [a, b]
        assert a.key != b.key
        assert isinstance(a.unit, SendUnit)
        assert controller.units == [a.unit, b.unit]

    def test_add_unsupported(self, context) -> None:
        controller = MessageListController(context)
        with pytest.raises(ComposerError) as exc_info:
            controller.add_message_type("/cosmos.bank.v1beta1.MsgMultiSend")
        assert exc_info.value is ErrUnsupportedMessageType
        assert len(controller) == 0

    def test_remove_preserves_identities(self, context) -> None:
        controller = MessageListController(context)
        slots = [
            controller.add_message_type(t)
            for t in (MsgTypeUrl.SEND, MsgTypeUrl.VOTE, MsgTypeUrl.DELEGATE, MsgTypeUrl.SEND)
        ]
        removed = controller.remove_slot(1)
        assert removed is slots[1]
        assert removed.unit.is_disposed
        remaining = controller.slots
        assert [s.key for s in remaining] == [slots[0].key, slots[2].key, slots[3].key]
        assert [s.unit for s in remaining] == [slots[0].unit, slots[2].unit, slots[3].unit]
        assert controller.units == [slots[0].unit, slots[2].unit, slots[3].unit]

    def test_add_remove_sequence_counts(self, context) -> None:
        controller = MessageListController(context)
        adds = removes = 0
        for step in range(12):
            if step % 3 == 2:
                controller.remove_slot(step % len(controller))
                removes += 1
            else:
                controller.add_message_type(MsgTypeUrl.VOTE)
                adds += 1
        assert len(controller) == adds - removes
        assert len({s.key for s in controller.slots}) == len(controller)

    @pytest.mark.parametrize("index", [-1, 1, 5])
    def test_remove_out_of_range(self, context, index: int) -> None:
        controller = MessageListController(context)
        controller.add_message_type(MsgTypeUrl.SEND)
        with pytest.raises(ComposerError) as exc_info:
            controller.remove_slot(index)
        assert exc_info.value is ErrSlotNotFound
        assert len(controller) == 1


# ---------------------------------------------------------------------------
# Unit registration
# ---------------------------------------------------------------------------


class TestRegistration:
    def test_set_unit_for_slot(self, context) -> None:
        controller = MessageListController(context)
        controller.add_message_type(MsgTypeUrl.SEND)
        slot = controller.add_message_type(MsgTypeUrl.SEND)
        replacement = SendUnit(context)
        controller.set_unit_for_slot(1, replacement)
        assert controller.units[1] is replacement
        assert controller.slots[1].key == slot.key

    def test_late_registration_after_removal_is_ignored(self, context) -> None:
        controller = MessageListController(context)
        first = controller.add_message_type(MsgTypeUrl.SEND)
        second = controller.add_message_type(MsgTypeUrl.SEND)
        controller.remove_slot(0)
        assert controller.register_unit(first.key, SendUnit(context)) is False
        assert controller.units == [second.unit]

    def test_set_unit_out_of_range(self, context) -> None:
        controller = MessageListController(context)
        with pytest.raises(ComposerError):
            controller.set_unit_for_slot(0, SendUnit(context))


# ---------------------------------------------------------------------------
# Gas estimate
# ---------------------------------------------------------------------------


class TestGasEstimate:
    def test_recomputed_on_add_and_remove(self, context) -> None:
        controller = MessageListController(context)
        controller.add_message_type(MsgTypeUrl.SEND)
        controller.add_message_type(MsgTypeUrl.BEGIN_REDELEGATE)
        assert controller.gas_limit == str(
            gas_of_tx([MsgTypeUrl.SEND, MsgTypeUrl.BEGIN_REDELEGATE])
        )
        controller.remove_slot(1)
        assert controller.gas_limit == str(gas_of_tx([MsgTypeUrl.SEND]))

    def test_content_does_not_affect_gas(self, context, recipient) -> None:
        controller = MessageListController(context)
        slot = controller.add_message_type(MsgTypeUrl.SEND)
        before = controller.gas_limit
        slot.unit.update(to_address=recipient, amount="100")
        assert controller.gas_limit == before

    def test_user_override(self, context) -> None:
        controller = MessageListController(context)
        controller.add_message_type(MsgTypeUrl.SEND)
        controller.gas_limit_error = "gas limit must be a positive integer"
        controller.set_gas_limit(" 123456 ")
        assert controller.gas_limit == "123456"
        assert controller.gas_limit_error == ""

    def test_configured_weights(self, context) -> None:
        controller = MessageListController(
            context, flat_gas=10, gas_overrides={MsgTypeUrl.VOTE.value: 1}
        )
        controller.add_message_type(MsgTypeUrl.VOTE)
        assert controller.gas_limit == "11"


# ---------------------------------------------------------------------------
# Validator-backed slots
# ---------------------------------------------------------------------------


class TestValidatorData:
    async def test_slot_created_before_load_completes(self, chain, sender) -> None:
        async def loader() -> list[Validator]:
            return [Validator(validator_address(1), "Alpha")]

        cache = ValidatorCache(loader)
        ctx = ComposeContext(chain=chain, sender_address=sender, validators=cache)
        controller = MessageListController(ctx)
        slot = controller.add_message_type_requiring_validator_data(MsgTypeUrl.DELEGATE)
        assert cache.state is LoadState.LOADING
        assert slot.unit.validator_options == []

        second = controller.add_message_type_requiring_validator_data(MsgTypeUrl.UNDELEGATE)
        await cache.wait()
        assert cache.state is LoadState.LOADED
        assert [v.moniker for v in second.unit.validator_options] == ["Alpha"]

    def test_without_cache(self, context) -> None:
        controller = MessageListController(context)
        slot = controller.add_message_type_requiring_validator_data(MsgTypeUrl.DELEGATE)
        assert slot.unit.validator_options == []
