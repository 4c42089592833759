"""Transaction assembler — turns a fully valid message list into a draft.

Assembly is all-or-nothing: a draft is only produced when every registered
message is valid, and nothing reaches the store otherwise. A failed build
leaves the message list untouched so the user can fix and retry.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tx_composer.chain.fees import GasPrice, StdFee, calculate_fee
from tx_composer.errors.chain_errors import PersistenceError
from tx_composer.errors.definitions import (
    ErrAccountNumberMissing,
    ErrIncompleteMessages,
    ErrInvalidGasLimit,
    ErrNoMessages,
)
from tx_composer.messages.encode import EncodeObject, export_msg_to_json

if TYPE_CHECKING:
    from tx_composer.chain.models import AccountInfo, ChainInfo
    from tx_composer.datastore.store import TransactionStore
    from tx_composer.engine.message_list import MessageListController

logger = logging.getLogger(__name__)

_MAX_SAFE_INTEGER = 2**53 - 1
_DIGITS_RE = re.compile(r"^\d+$")

ENCRYPTED_MSG_FIELD = "encryptedMsg"


@dataclass
class TransactionDraft:
    """A fully assembled, unsigned transaction."""

    account_number: int
    sequence: int
    chain_id: str
    msgs: list[EncodeObject] = field(default_factory=list)
    fee: StdFee = field(default_factory=StdFee)
    memo: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the camelCase JSON the signing layer reads."""
        return {
            "accountNumber": self.account_number,
            "sequence": self.sequence,
            "chainId": self.chain_id,
            "msgs": [_msg_to_dict(m) for m in self.msgs],
            "fee": self.fee.to_dict(),
            "memo": self.memo,
        }


def _msg_to_dict(msg: EncodeObject) -> dict[str, Any]:
    # Encrypted messages are already exported by the assembler
    if ENCRYPTED_MSG_FIELD in msg.value:
        return {"typeUrl": msg.type_url, "value": dict(msg.value)}
    return {"typeUrl": msg.type_url, "value": export_msg_to_json(msg).value}


def parse_gas_limit(value: str | int) -> int | None:
    """Return the gas limit as a positive safe integer, or ``None``."""
    text = str(value).strip()
    if not _DIGITS_RE.match(text):
        return None
    number = int(text)
    if number <= 0 or number > _MAX_SAFE_INTEGER:
        return None
    return number


class TransactionAssembler:
    """Builds and persists transaction drafts for one composition session.

    Usage::

        assembler = TransactionAssembler(chain, account, controller, store=store)
        draft = assembler.build()
        tx_id = await assembler.submit()
    """

    def __init__(
        self,
        chain: ChainInfo,
        account: AccountInfo,
        controller: MessageListController,
        *,
        store: TransactionStore | None = None,
    ) -> None:
        self._chain = chain
        self._account = account
        self._controller = controller
        self._store = store

    @property
    def account(self) -> AccountInfo:
        return self._account

    def build(self) -> TransactionDraft:
        """Assemble a draft from the current message list.

        Raises:
            ComposerError: ``ErrAccountNumberMissing``, ``ErrNoMessages``,
                ``ErrIncompleteMessages`` or ``ErrInvalidGasLimit`` (which
                also sets ``controller.gas_limit_error``).
        """
        if self._account.account_number is None:
            raise ErrAccountNumberMissing

        units = self._controller.units
        if not units:
            raise ErrNoMessages

        msgs = [self._shape(unit.msg) for unit in units if unit.is_msg_valid()]
        if len(msgs) != len(self._controller):
            logger.debug(
                "Build aborted: %d of %d messages valid", len(msgs), len(self._controller)
            )
            raise ErrIncompleteMessages

        gas_limit = parse_gas_limit(self._controller.gas_limit)
        if gas_limit is None:
            self._controller.gas_limit_error = ErrInvalidGasLimit.message
            raise ErrInvalidGasLimit

        fee = calculate_fee(gas_limit, GasPrice.from_string(self._chain.gas_price))
        return TransactionDraft(
            account_number=self._account.account_number,
            sequence=self._account.sequence,
            chain_id=self._chain.chain_id,
            msgs=msgs,
            fee=fee,
            memo=self._controller.memo,
        )

    async def submit(self) -> str:
        """Build the draft and hand it to the transaction store.

        Returns:
            The identifier assigned by the store.

        Raises:
            ComposerError: Any ``build()`` failure.
            PersistenceError: If the store fails; nothing is retried.
        """
        if self._store is None:
            msg = "No transaction store configured"
            raise RuntimeError(msg)

        draft = self.build()
        try:
            tx_id = await self._store.create_transaction(
                self._account.address, self._chain.chain_id, draft
            )
        except PersistenceError:
            logger.exception("Failed to save transaction for %s", self._account.address)
            raise
        except Exception as exc:
            logger.exception("Failed to save transaction for %s", self._account.address)
            msg = f"Could not save transaction: {exc}"
            raise PersistenceError(msg) from exc

        logger.info(
            "Created transaction %s on %s with %d messages",
            tx_id,
            self._chain.chain_id,
            len(draft.msgs),
        )
        return tx_id

    def _shape(self, msg: EncodeObject) -> EncodeObject:
        """Re-shape encrypted messages to ``{encryptedMsg, ...json fields}``."""
        if not self._chain.confidential_encryption or ENCRYPTED_MSG_FIELD not in msg.value:
            return msg
        exported = export_msg_to_json(msg)
        return EncodeObject(
            type_url=msg.type_url,
            value={ENCRYPTED_MSG_FIELD: msg.value[ENCRYPTED_MSG_FIELD], **exported.value},
        )
