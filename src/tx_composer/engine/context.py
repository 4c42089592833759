"""Compose context — what every message unit may read about its environment."""

from __future__ import annotations

import base64
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from tx_composer.chain.secret.client import SecretLCDClient
from tx_composer.chain.secret.encryption import EncryptionUtils

if TYPE_CHECKING:
    import httpx

    from tx_composer.chain.models import ChainInfo
    from tx_composer.config.settings import ConfidentialConfig
    from tx_composer.engine.validator_cache import ValidatorCache

# Encryptors kept per backend, least recently used evicted first
MAX_CACHED_ENDPOINTS = 8


class Encryptor(Protocol):
    """Encrypts a contract body for one endpoint."""

    async def encrypt_to_base64(self, code_hash: str, msg: Any) -> str: ...


class ConfidentialBackend(Protocol):
    """Remote side of confidential contract execution."""

    def encryptor(self, endpoint: str) -> Encryptor: ...

    async def lookup_code_hash(self, endpoint: str, contract_address: str) -> str: ...


class SecretBackend:
    """``ConfidentialBackend`` talking to Secret Network LCD nodes.

    LCD connections are short-lived: each code hash lookup and each consensus
    key query opens and closes its own client. Encryptors, which hold the
    resolved consensus key, are kept for the most recently used endpoints.
    """

    def __init__(
        self,
        chain_id: str,
        config: ConfidentialConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._chain_id = chain_id
        self._config = config
        self._transport = transport
        self._encryptors: OrderedDict[str, EncryptionUtils] = OrderedDict()

    def _client(self, endpoint: str) -> SecretLCDClient:
        return SecretLCDClient(
            endpoint,
            chain_id=self._chain_id,
            timeout=self._config.request_timeout,
            transport=self._transport,
        )

    def encryptor(self, endpoint: str) -> EncryptionUtils:
        encryptor = self._encryptors.get(endpoint)
        if encryptor is not None:
            self._encryptors.move_to_end(endpoint)
            return encryptor

        known_key = self._config.consensus_io_pubkeys.get(self._chain_id)
        encryptor = EncryptionUtils(
            seed=self._config.seed_bytes,
            chain_id=self._chain_id,
            lcd=self._client(endpoint),
            consensus_io_pubkey=base64.b64decode(known_key) if known_key else None,
        )
        self._encryptors[endpoint] = encryptor
        while len(self._encryptors) > MAX_CACHED_ENDPOINTS:
            self._encryptors.popitem(last=False)
        return encryptor

    async def lookup_code_hash(self, endpoint: str, contract_address: str) -> str:
        client = self._client(endpoint)
        await client.connect()
        try:
            return await client.code_hash_by_contract_address(contract_address)
        finally:
            await client.close()

    @property
    def cached_endpoints(self) -> list[str]:
        """Endpoints with a cached encryptor, least recently used first."""
        return list(self._encryptors)

    async def close(self) -> None:
        """Drop every cached encryptor."""
        self._encryptors.clear()


@dataclass
class ComposeContext:
    """Shared, read-only environment of one composition session.

    Attributes:
        chain: The active chain.
        sender_address: Account the transaction is sent from.
        validators: Shared bonded-validator cache (staking messages).
        confidential_backend: Encryption / code hash backend for
            chains with ``confidential_encryption``.
    """

    chain: ChainInfo
    sender_address: str
    validators: ValidatorCache | None = None
    confidential_backend: ConfidentialBackend | None = None
