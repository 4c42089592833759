"""CosmWasm messages — instantiate, execute, migrate, update admin.

Contract messages carry an arbitrary JSON body edited in an external JSON
editor. The editor's ``content_errors`` flag is the parse-validity signal;
valid bodies are canonicalised before they are encoded.

On chains with ``confidential_encryption`` (Secret Network) the execute body
is also encrypted asynchronously against the chain consensus key. The
encoded message only becomes final once the latest derivation has applied.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, ClassVar

from tx_composer.chain.secret.client import normalize_code_hash
from tx_composer.engine.confidential import ConfidentialPayload
from tx_composer.errors.chain_errors import CodeHashLookupError, EndpointError
from tx_composer.messages.base import CoinUnit, MessageUnit, parse_int
from tx_composer.messages.encode import EncodeObject, canonical_json
from tx_composer.messages.type_urls import MsgTypeUrl

if TYPE_CHECKING:
    from tx_composer.engine.context import ComposeContext
    from tx_composer.errors.compose_errors import ComposerError

logger = logging.getLogger(__name__)


class JsonBodyMixin:
    """JSON body handling shared by all contract messages.

    Expects a ``msg_content`` input and a ``_json_error`` flag.
    """

    _json_error: bool = False

    def set_msg_content(self, text: str | None, content_errors: Any = None) -> None:
        """Receive an edit from the JSON editor collaborator."""
        self._json_error = bool(content_errors)
        self.set_field("msg_content", text if text is not None else "{}")  # type: ignore[attr-defined]

    def _validate_json(self, inputs: dict[str, Any]) -> bool:
        if self._json_error:
            return self._fail("msg_content", "Msg JSON is invalid")  # type: ignore[attr-defined]
        try:
            canonical_json(inputs["msg_content"])
        except ValueError:
            return self._fail("msg_content", "Msg JSON is invalid")  # type: ignore[attr-defined]
        return True

    @staticmethod
    def _msg_bytes(inputs: dict[str, Any]) -> bytes:
        try:
            return canonical_json(inputs["msg_content"]).encode("utf-8")
        except ValueError:
            return b""

    @staticmethod
    def _msg_json(inputs: dict[str, Any]) -> Any:
        try:
            return json.loads(inputs["msg_content"])
        except ValueError:
            return None


# ---------------------------------------------------------------------------
# Instantiate
# ---------------------------------------------------------------------------


class InstantiateContractUnit(JsonBodyMixin, CoinUnit):
    """Instantiate a contract from stored code."""

    msg_type = MsgTypeUrl.INSTANTIATE_CONTRACT
    defaults: ClassVar[dict[str, Any]] = {
        "code_id": "",
        "label": "",
        "admin": "",
        "msg_content": "{}",
    }

    def _validate(self, inputs: dict[str, Any]) -> bool:
        if not self._validate_json(inputs):
            return False
        if not self._check_positive_int("code_id", inputs["code_id"], "Code ID"):
            return False
        if not inputs["label"]:
            return self._fail("label", "Label is required")
        if not self._check_address("admin", inputs["admin"], optional=True):
            return False
        return self._validate_coin(inputs)

    def _value(self, inputs: dict[str, Any]) -> dict[str, Any]:
        coin = self._base_coin(inputs)
        return {
            "sender": self.sender_address,
            "admin": inputs["admin"],
            "codeId": parse_int(inputs["code_id"]),
            "label": inputs["label"],
            "msg": self._msg_bytes(inputs),
            "funds": [coin] if coin else [],
        }

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        return EncodeObject(type_url=self.msg_type, value=self._value(inputs))


class InstantiateContract2Unit(InstantiateContractUnit):
    """Instantiate a contract at a predictable address (salted)."""

    msg_type = MsgTypeUrl.INSTANTIATE_CONTRACT2
    defaults: ClassVar[dict[str, Any]] = {
        **InstantiateContractUnit.defaults,
        "salt": "",
        "fix_msg": False,
    }

    def _validate(self, inputs: dict[str, Any]) -> bool:
        if not super()._validate(inputs):
            return False
        if not inputs["salt"]:
            return self._fail("salt", "Salt is required")
        return True

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        value = self._value(inputs)
        value["salt"] = inputs["salt"].encode("utf-8")
        value["fixMsg"] = bool(inputs["fix_msg"])
        return EncodeObject(type_url=self.msg_type, value=value)


# ---------------------------------------------------------------------------
# Execute
# ---------------------------------------------------------------------------


class ExecuteContractUnit(JsonBodyMixin, CoinUnit):
    """Execute a contract, encrypting the body on confidential chains."""

    msg_type = MsgTypeUrl.EXECUTE_CONTRACT
    defaults: ClassVar[dict[str, Any]] = {
        "contract_address": "",
        "msg_content": "{}",
        "lcd": "",
        "code_hash": "",
        "amount": "0",
    }
    sticky_errors = frozenset({"code_hash_lookup"})
    linked_errors: ClassVar[dict[str, tuple[str, ...]]] = {
        "lcd": ("code_hash_lookup", "encryption"),
        "contract_address": ("code_hash_lookup", "encryption"),
        "code_hash": ("code_hash_lookup", "encryption"),
        "msg_content": ("encryption",),
    }

    def __init__(self, context: ComposeContext) -> None:
        self.confidential: ConfidentialPayload | None = None
        if context.chain.confidential_encryption:
            if context.confidential_backend is None:
                msg = f"Chain {context.chain.chain_id} requires a confidential backend"
                raise RuntimeError(msg)
            self.confidential = ConfidentialPayload(
                context.confidential_backend, on_applied=self._on_encrypted
            )
        super().__init__(context)

    @property
    def requires_encryption(self) -> bool:
        return self.confidential is not None

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate(self, inputs: dict[str, Any]) -> bool:
        if not self._validate_json(inputs):
            return False
        if not self._check_address("contract_address", inputs["contract_address"]):
            return False
        if not self._validate_coin(inputs):
            return False
        if self.confidential is not None:
            return self._validate_confidential(inputs)
        return True

    def _validate_confidential(self, inputs: dict[str, Any]) -> bool:
        assert self.confidential is not None
        missing = False
        if not inputs["code_hash"]:
            self._fail("code_hash", "Code hash is required for Secret Network")
            missing = True
        if not inputs["lcd"]:
            self._fail("lcd", "LCD is required for Secret Network Execute Message")
            missing = True
        if missing:
            return False

        error = self.confidential.error
        if error is not None:
            return self._fail(_error_field(error), _error_message(error))
        if not self.confidential.is_final:
            return self._fail("encryption", "Message encryption has not completed yet")
        return True

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def _plain_value(self, inputs: dict[str, Any]) -> dict[str, Any]:
        coin = self._base_coin(inputs)
        return {
            "sender": self.sender_address,
            "contract": inputs["contract_address"],
            "msg": self._msg_bytes(inputs),
            "funds": [coin] if coin else [],
        }

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        return EncodeObject(type_url=self.msg_type, value=self._plain_value(inputs))

    def _recompute(self) -> None:
        if self._disposed:
            return
        inputs = self.trimmed_inputs
        self._msg = self._encode(inputs)
        if self.confidential is None:
            return

        body = self._msg_json(inputs)
        if self._json_error or body is None or not inputs["code_hash"] or not inputs["lcd"]:
            self.confidential.invalidate()
            return
        self.confidential.trigger(
            endpoint=inputs["lcd"],
            code_hash=normalize_code_hash(inputs["code_hash"]),
            msg=body,
        )

    def _on_encrypted(self, encrypted_body: str, error: ComposerError | None) -> None:
        if self._disposed:
            return
        if error is not None:
            self.errors[_error_field(error)] = _error_message(error)
            self._msg = self._encode(self.trimmed_inputs)
            return
        self.errors.pop("encryption", None)
        self._msg = self._msg.with_value(encryptedMsg=encrypted_body)

    # ------------------------------------------------------------------
    # Code hash lookup
    # ------------------------------------------------------------------

    async def fetch_code_hash(self) -> None:
        """Look up the contract's code hash from the LCD and fill it in.

        Failures are recorded under ``errors["code_hash_lookup"]`` and never
        raised.
        """
        inputs = self.trimmed_inputs
        backend = self._context.confidential_backend
        if backend is None:
            self.errors["code_hash_lookup"] = (
                f"Code hash lookup is not available on {self.chain.chain_id}"
            )
            return
        if not inputs["lcd"] or not inputs["contract_address"]:
            self.errors["code_hash_lookup"] = "LCD URL and Contract Address are required"
            return
        try:
            code_hash = await backend.lookup_code_hash(
                inputs["lcd"], inputs["contract_address"]
            )
        except (EndpointError, CodeHashLookupError) as exc:
            logger.warning("Code hash lookup for %s failed: %s", inputs["contract_address"], exc)
            if not self._disposed:
                self.errors["code_hash_lookup"] = f"Failed to generate code hash: {exc.message}"
            return
        if self._disposed:
            return
        self.set_field("code_hash", code_hash)

    def dispose(self) -> None:
        super().dispose()
        if self.confidential is not None:
            self.confidential.dispose()


def _error_field(error: ComposerError) -> str:
    return "code_hash" if isinstance(error, CodeHashLookupError) else "lcd"


def _error_message(error: ComposerError) -> str:
    if isinstance(error, CodeHashLookupError):
        return f"Code hash lookup failed: {error.message}"
    if isinstance(error, EndpointError):
        return f"LCD endpoint failed: {error.message}"
    return f"Message encryption failed: {error.message}"


# ---------------------------------------------------------------------------
# Migrate / admin
# ---------------------------------------------------------------------------


class MigrateContractUnit(JsonBodyMixin, MessageUnit):
    """Migrate a contract to new code."""

    msg_type = MsgTypeUrl.MIGRATE_CONTRACT
    defaults: ClassVar[dict[str, Any]] = {
        "contract_address": "",
        "code_id": "",
        "msg_content": "{}",
    }

    def _validate(self, inputs: dict[str, Any]) -> bool:
        if not self._validate_json(inputs):
            return False
        if not self._check_address("contract_address", inputs["contract_address"]):
            return False
        return self._check_positive_int("code_id", inputs["code_id"], "Code ID")

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        return EncodeObject(
            type_url=self.msg_type,
            value={
                "sender": self.sender_address,
                "contract": inputs["contract_address"],
                "codeId": parse_int(inputs["code_id"]),
                "msg": self._msg_bytes(inputs),
            },
        )


class UpdateAdminUnit(MessageUnit):
    """Set a new admin for a contract."""

    msg_type = MsgTypeUrl.UPDATE_ADMIN
    defaults: ClassVar[dict[str, Any]] = {"contract_address": "", "new_admin": ""}

    def _validate(self, inputs: dict[str, Any]) -> bool:
        if not self._check_address("contract_address", inputs["contract_address"]):
            return False
        return self._check_address("new_admin", inputs["new_admin"])

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        return EncodeObject(
            type_url=self.msg_type,
            value={
                "sender": self.sender_address,
                "newAdmin": inputs["new_admin"],
                "contract": inputs["contract_address"],
            },
        )
