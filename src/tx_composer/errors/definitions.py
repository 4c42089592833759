"""Pre-defined aggregate build errors raised by the transaction assembler."""

from __future__ import annotations

from tx_composer.errors.compose_errors import ComposerError

# -- Account ---------------------------------------------------------------

ErrAccountNumberMissing = ComposerError(
    "accountNumber missing", status_code=422, code="account-number-missing"
)

# -- Messages --------------------------------------------------------------

ErrNoMessages = ComposerError(
    "form filled incorrectly", status_code=400, code="no-messages"
)
ErrIncompleteMessages = ComposerError(
    "one or more messages are invalid", status_code=400, code="incomplete-messages"
)
ErrUnsupportedMessageType = ComposerError(
    "unsupported message type", status_code=400, code="unsupported-msg-type"
)
ErrSlotNotFound = ComposerError("message slot not found", status_code=404, code="slot-not-found")

# -- Fee -------------------------------------------------------------------

ErrInvalidGasLimit = ComposerError(
    "gas limit must be a positive integer",
    status_code=400,
    code="invalid-gas-limit",
    field="gas_limit",
)
ErrInvalidGasPrice = ComposerError(
    "invalid gas price string", status_code=400, code="invalid-gas-price"
)
