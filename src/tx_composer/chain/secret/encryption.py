"""Secret Network client-side message encryption.

Contract execution bodies are sealed before signing:

1. ``shared = x25519(tx_privkey, consensus_io_pubkey)``
2. ``key = HKDF-SHA256(shared || nonce, salt=_HKDF_SALT, info="", len=32)``
3. ``ciphertext = AES-SIV(key).seal(code_hash + json(msg), ad=[b""])``
4. output ``nonce(32) || tx_pubkey(32) || ciphertext``

The transaction encryption key pair is derived from a 32-byte seed so the
same seed always yields the same public key.
"""

from __future__ import annotations

import asyncio
import base64
import json
import os
from typing import TYPE_CHECKING, Any

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey, X25519PublicKey
from cryptography.hazmat.primitives.ciphers.aead import AESSIV
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from tx_composer.chain.secret.client import normalize_code_hash
from tx_composer.errors.chain_errors import EndpointError

if TYPE_CHECKING:
    from tx_composer.chain.secret.client import SecretLCDClient

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_HKDF_SALT = bytes.fromhex("000000000000000000024bead8df69990852c202db0e0097c1a12ea637d7e96d")
_NONCE_SIZE = 32
_KEY_SIZE = 32


class EncryptionUtils:
    """Encrypts contract messages for one chain.

    The consensus IO public key is fetched from the LCD node on first use
    and cached, unless a known key is supplied up front.
    """

    def __init__(
        self,
        *,
        seed: bytes,
        chain_id: str,
        lcd: SecretLCDClient | None = None,
        consensus_io_pubkey: bytes | None = None,
    ) -> None:
        if len(seed) != _KEY_SIZE:
            msg = f"encryption seed must be {_KEY_SIZE} bytes"
            raise ValueError(msg)
        self._privkey = X25519PrivateKey.from_private_bytes(seed)
        self._pubkey = self._privkey.public_key().public_bytes(
            serialization.Encoding.Raw, serialization.PublicFormat.Raw
        )
        self._chain_id = chain_id
        self._lcd = lcd
        self._consensus_io_pubkey = consensus_io_pubkey
        self._key_task: asyncio.Task[bytes] | None = None

    @property
    def pubkey(self) -> bytes:
        """The 32-byte transaction encryption public key."""
        return self._pubkey

    @property
    def chain_id(self) -> str:
        return self._chain_id

    async def get_consensus_io_pubkey(self) -> bytes:
        """Return the chain consensus IO public key, querying the LCD once.

        Raises:
            EndpointError: If no key is configured and the LCD query fails.
        """
        if self._consensus_io_pubkey is not None:
            return self._consensus_io_pubkey
        if self._lcd is None:
            msg = f"No LCD endpoint to fetch the consensus key of {self._chain_id}"
            raise EndpointError(msg, status_code=500)

        # Concurrent callers share one in-flight query
        if self._key_task is None:
            self._key_task = asyncio.get_running_loop().create_task(
                self._fetch_consensus_io_pubkey(self._lcd)
            )
        task = self._key_task
        try:
            return await asyncio.shield(task)
        finally:
            # A failed query is forgotten so the next call retries
            if self._key_task is task and task.done():
                self._key_task = None

    async def _fetch_consensus_io_pubkey(self, lcd: SecretLCDClient) -> bytes:
        opened = not lcd.is_connected
        if opened:
            await lcd.connect()
        try:
            key = await lcd.get_tx_key()
        finally:
            if opened:
                await lcd.close()
        self._consensus_io_pubkey = key
        return key

    async def get_tx_encryption_key(self, nonce: bytes) -> bytes:
        """Derive the symmetric key for a given *nonce*."""
        consensus_key = X25519PublicKey.from_public_bytes(await self.get_consensus_io_pubkey())
        shared = self._privkey.exchange(consensus_key)
        hkdf = HKDF(algorithm=hashes.SHA256(), length=_KEY_SIZE, salt=_HKDF_SALT, info=b"")
        return hkdf.derive(shared + nonce)

    async def encrypt(
        self, code_hash: str, msg: Any, *, nonce: bytes | None = None
    ) -> bytes:
        """Seal *msg* for the contract with *code_hash*.

        Args:
            code_hash: Hex code hash of the target contract.
            msg: JSON-serialisable execute message.
            nonce: Optional 32-byte nonce; random when omitted.

        Returns:
            ``nonce || pubkey || ciphertext``.
        """
        nonce = nonce if nonce is not None else os.urandom(_NONCE_SIZE)
        key = await self.get_tx_encryption_key(nonce)
        plaintext = (
            normalize_code_hash(code_hash)
            + json.dumps(msg, separators=(",", ":"), ensure_ascii=False)
        ).encode("utf-8")
        ciphertext = AESSIV(key).encrypt(plaintext, [b""])
        return nonce + self._pubkey + ciphertext

    async def encrypt_to_base64(self, code_hash: str, msg: Any) -> str:
        """Seal *msg* and return the base64 amino representation."""
        return base64.b64encode(await self.encrypt(code_hash, msg)).decode("ascii")

    async def decrypt(self, ciphertext: bytes, nonce: bytes) -> bytes:
        """Open a ciphertext produced under *nonce* (contract responses)."""
        if not ciphertext:
            return b""
        key = await self.get_tx_encryption_key(nonce)
        return AESSIV(key).decrypt(ciphertext, [b""])
