"""Confidential payload transform — sequenced asynchronous body encryption.

Each edit of an encrypted message triggers a new derivation tagged with a
monotonically increasing sequence number. Derivations are never cancelled;
a completion is applied only if its number is still the latest issued, so a
slow stale derivation can never overwrite a newer result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from tx_composer.errors.chain_errors import EndpointError
from tx_composer.errors.compose_errors import ComposerError

if TYPE_CHECKING:
    from tx_composer.engine.context import ConfidentialBackend

logger = logging.getLogger(__name__)

AppliedCallback = Callable[[str, ComposerError | None], None]


class ConfidentialPayload:
    """Encrypted-body state of one execute message.

    Attributes:
        latest_seq: Number of the most recently issued derivation.
        applied_seq: Number of the derivation whose result is current.
    """

    def __init__(
        self,
        backend: ConfidentialBackend,
        *,
        on_applied: AppliedCallback | None = None,
    ) -> None:
        self._backend = backend
        self._on_applied = on_applied
        self.latest_seq = 0
        self.applied_seq = 0
        self._encrypted_body = ""
        self._error: ComposerError | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._disposed = False

    @property
    def encrypted_body(self) -> str:
        """Base64 encrypted body of the latest applied derivation."""
        return self._encrypted_body

    @property
    def error(self) -> ComposerError | None:
        """Failure of the latest applied derivation, if it failed."""
        return self._error

    @property
    def is_final(self) -> bool:
        """Whether the latest issued derivation has applied successfully."""
        return (
            self.latest_seq > 0
            and self.applied_seq == self.latest_seq
            and self._error is None
            and bool(self._encrypted_body)
        )

    @property
    def pending(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def trigger(self, *, endpoint: str, code_hash: str, msg: Any) -> int:
        """Start a derivation for the given inputs.

        Must be called from a running event loop.

        Returns:
            The sequence number issued to this derivation.
        """
        self.latest_seq += 1
        seq = self.latest_seq
        self._encrypted_body = ""
        self._error = None
        if self._disposed:
            return seq

        task = asyncio.get_running_loop().create_task(
            self._derive(seq, endpoint, code_hash, msg)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return seq

    def invalidate(self) -> None:
        """Drop the current result; in-flight derivations become stale."""
        self.latest_seq += 1
        self.applied_seq = self.latest_seq
        self._encrypted_body = ""
        self._error = None

    async def settled(self) -> None:
        """Wait until every derivation issued so far has completed."""
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    def dispose(self) -> None:
        """Stop applying results; outstanding tasks finish and are discarded."""
        self._disposed = True
        self.latest_seq += 1

    async def _derive(self, seq: int, endpoint: str, code_hash: str, msg: Any) -> None:
        error: ComposerError | None = None
        body = ""
        try:
            encryptor = self._backend.encryptor(endpoint)
            body = await encryptor.encrypt_to_base64(code_hash, msg)
        except ComposerError as exc:
            error = exc
        except ValueError as exc:
            # Malformed consensus key or seed
            error = EndpointError(f"Could not encrypt with keys from {endpoint}: {exc}")
        except Exception as exc:
            logger.exception("Derivation %d against %s raised", seq, endpoint)
            error = EndpointError(f"Encryption against {endpoint} failed: {exc}")

        if self._disposed or seq != self.latest_seq:
            logger.debug("Discarding stale derivation %d (latest %d)", seq, self.latest_seq)
            return

        if error is None and not body:
            error = EndpointError(f"Empty encryption result from {endpoint}")
        if error is not None:
            logger.warning("Derivation %d failed: %s", seq, error.message)

        self.applied_seq = seq
        self._encrypted_body = body if error is None else ""
        self._error = error
        if self._on_applied is not None:
            self._on_applied(self._encrypted_body, error)
