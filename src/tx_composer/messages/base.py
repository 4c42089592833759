"""MessageUnit — per-slot message editor state, validation and encoding.

Every supported message type is a subclass of ``MessageUnit``. A unit owns
its raw field inputs and exposes the pair the transaction assembler reads:

- ``is_msg_valid()`` — validates the current inputs, recording field errors
- ``msg`` — the current ``EncodeObject``, always structurally valid

``msg`` is re-derived synchronously on every edit. Field errors are only set
by a validation attempt (or a live check such as the confidential
precondition) and are cleared as soon as the offending field is edited.
"""

from __future__ import annotations

import abc
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, ClassVar

from tx_composer.chain.address import check_address
from tx_composer.chain.coins import display_coin_to_base_coin
from tx_composer.chain.models import Coin
from tx_composer.errors.chain_errors import CoinConversionError
from tx_composer.messages.encode import EncodeObject, trim_strings

if TYPE_CHECKING:
    from tx_composer.chain.models import ChainInfo
    from tx_composer.engine.context import ComposeContext
    from tx_composer.messages.type_urls import MsgTypeUrl

CUSTOM_DENOM = "custom"


class MessageUnit(abc.ABC):
    """Base class for all message editors.

    Subclasses declare ``msg_type`` and ``defaults`` (the editable fields and
    their initial values) and implement ``_validate`` and ``_encode``.
    """

    msg_type: ClassVar[MsgTypeUrl]
    defaults: ClassVar[dict[str, Any]] = {}

    # Errors that survive a validation pass (set by one-shot lookups)
    sticky_errors: ClassVar[frozenset[str]] = frozenset()

    # Edits to a key also clear the errors listed here
    linked_errors: ClassVar[dict[str, tuple[str, ...]]] = {}

    def __init__(self, context: ComposeContext) -> None:
        self._context = context
        self._inputs: dict[str, Any] = dict(self.defaults)
        self._init_inputs()
        self.errors: dict[str, str] = {}
        self._disposed = False
        self._msg = self._encode(self.trimmed_inputs)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def chain(self) -> ChainInfo:
        return self._context.chain

    @property
    def sender_address(self) -> str:
        return self._context.sender_address

    @property
    def msg(self) -> EncodeObject:
        """The current encoded message."""
        return self._msg

    @property
    def inputs(self) -> dict[str, Any]:
        """A copy of the raw (untrimmed) inputs."""
        return dict(self._inputs)

    @property
    def trimmed_inputs(self) -> dict[str, Any]:
        return trim_strings(self._inputs)

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def set_field(self, name: str, value: Any) -> None:
        """Record a live edit of *name* and re-derive the encoded message.

        Raises:
            KeyError: If *name* is not a field of this message type.
        """
        if name not in self._inputs:
            msg = f"{type(self).__name__} has no field {name!r}"
            raise KeyError(msg)
        self._inputs[name] = value
        self.errors.pop(name, None)
        for linked in self.linked_errors.get(name, ()):
            self.errors.pop(linked, None)
        self._recompute()

    def update(self, **values: Any) -> None:
        """Apply several edits, in order."""
        for name, value in values.items():
            self.set_field(name, value)

    def dispose(self) -> None:
        """Detach the unit; it performs no further side effects."""
        self._disposed = True

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def is_msg_valid(self) -> bool:
        """Validate the current inputs, recording field errors."""
        for key in [k for k in self.errors if k not in self.sticky_errors]:
            del self.errors[key]
        return self._validate(self.trimmed_inputs)

    def _fail(self, field: str, message: str) -> bool:
        self.errors[field] = message
        return False

    def _check_address(
        self, field: str, address: str, prefix: str | None = None, *, optional: bool = False
    ) -> bool:
        """Validate a bech32 address field against the chain prefix."""
        if optional and not address:
            return True
        reason = check_address(address, self.chain.address_prefix if prefix is None else prefix)
        if reason:
            return self._fail(
                field, f"Invalid address for network {self.chain.chain_id}: {reason}"
            )
        return True

    def _check_positive_int(self, field: str, value: Any, label: str) -> bool:
        try:
            number = int(str(value).strip())
        except ValueError:
            return self._fail(field, f"{label} must be a positive integer")
        if number <= 0:
            return self._fail(field, f"{label} must be a positive integer")
        return True

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _init_inputs(self) -> None:
        """Adjust initial inputs that depend on the chain."""

    def _recompute(self) -> None:
        if self._disposed:
            return
        self._msg = self._encode(self.trimmed_inputs)

    @abc.abstractmethod
    def _validate(self, inputs: dict[str, Any]) -> bool:
        """Return whether *inputs* form a valid message."""

    @abc.abstractmethod
    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        """Encode *inputs*; must succeed for any input."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} errors={sorted(self.errors)}>"


# ---------------------------------------------------------------------------
# Coin inputs
# ---------------------------------------------------------------------------


def denom_options(chain: ChainInfo) -> list[str]:
    """Selectable denoms: registered asset symbols, then ``custom``."""
    return [a.symbol for a in chain.assets] + [CUSTOM_DENOM]


def parse_int(value: Any, default: int = 0) -> int:
    """Lenient integer parse used at encode time."""
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def _is_nonzero(amount: str) -> bool:
    """Whether *amount* is set to something other than zero (``0.0`` is zero)."""
    if not amount:
        return False
    try:
        return Decimal(amount) != 0
    except InvalidOperation:
        # Unparseable text still counts as an amount being entered
        return True


class CoinUnit(MessageUnit):
    """A message unit with a denom selector and an amount.

    Fields ``denom`` (asset symbol or ``custom``), ``custom_denom`` and
    ``amount``. ``amount_required`` units reject an empty or zero amount;
    the others treat it as "no funds attached".
    """

    amount_required: ClassVar[bool] = False

    def _init_inputs(self) -> None:
        self._inputs.setdefault("denom", "")
        self._inputs.setdefault("custom_denom", "")
        self._inputs.setdefault("amount", "")
        if not self._inputs["denom"]:
            self._inputs["denom"] = denom_options(self.chain)[0]

    @property
    def denom_options(self) -> list[str]:
        return denom_options(self.chain)

    def select_denom(self, option: str) -> None:
        """Choose a registered asset symbol or ``custom``."""
        if option != CUSTOM_DENOM:
            self._inputs["custom_denom"] = ""
        self.errors.pop("custom_denom", None)
        self.set_field("denom", option)

    def _display_denom(self, inputs: dict[str, Any]) -> str:
        if inputs["denom"] == CUSTOM_DENOM:
            return inputs["custom_denom"]
        return inputs["denom"]

    def _validate_coin(self, inputs: dict[str, Any]) -> bool:
        is_custom = inputs["denom"] == CUSTOM_DENOM
        custom_denom = inputs["custom_denom"]
        amount = str(inputs["amount"])

        if is_custom and not custom_denom and _is_nonzero(amount):
            return self._fail("custom_denom", "Custom denom must be set because of selection above")

        value = Decimal(0)
        if amount:
            try:
                value = Decimal(amount)
            except InvalidOperation:
                return self._fail("amount", "Amount must be a number")
            if not value.is_finite():
                return self._fail("amount", "Amount must be a number")
            if value < 0:
                return self._fail("amount", "Amount must be empty or a positive number")

        if is_custom and value != value.to_integral_value():
            return self._fail("amount", "Amount cannot be decimal for custom denom")

        if self.amount_required and value == 0:
            return self._fail("amount", "Amount must be greater than 0")

        if self.amount_required and is_custom and not custom_denom:
            return self._fail("custom_denom", "Custom denom must be set because of selection above")

        denom = self._display_denom(inputs)
        if denom and amount and not is_custom:
            try:
                display_coin_to_base_coin(Coin(denom=denom, amount=amount), self.chain.assets)
            except CoinConversionError as exc:
                return self._fail("amount", exc.message)

        return True

    def _base_coin(self, inputs: dict[str, Any]) -> Coin | None:
        """The amount in base units, or ``None`` when no funds are attached."""
        denom = self._display_denom(inputs)
        amount = str(inputs["amount"])
        if not denom or not amount or amount == "0":
            return None
        try:
            if inputs["denom"] == CUSTOM_DENOM:
                value = Decimal(amount)
                if not value.is_finite() or value <= 0 or value != value.to_integral_value():
                    return None
                return Coin(denom=denom, amount=str(int(value)))
            coin = display_coin_to_base_coin(Coin(denom=denom, amount=amount), self.chain.assets)
        except (InvalidOperation, CoinConversionError):
            return None
        return coin if int(coin.amount) > 0 else None
