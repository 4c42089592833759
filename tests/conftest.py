"""Shared test fixtures for the tx-composer test suite."""

from __future__ import annotations

import asyncio
import base64
import json
from typing import TYPE_CHECKING, Any

import pytest

from tx_composer.chain.address import bech32_encode, example_address
from tx_composer.chain.models import Asset, ChainInfo, DenomUnit
from tx_composer.config.settings import DatabaseEngine
from tx_composer.engine.context import ComposeContext

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from tx_composer.errors.compose_errors import ComposerError

SECRET_CODE_HASH = "ab" * 32


def validator_address(index: int, prefix: str = "cosmosvaloper") -> str:
    """Deterministic validator operator address."""
    return bech32_encode(prefix, bytes([index]) * 20)


# ---------------------------------------------------------------------------
# Fake confidential backend
# ---------------------------------------------------------------------------


class FakeEncryptor:
    """Encrypts to a readable ``code_hash:json`` body, optionally gated."""

    def __init__(self, backend: FakeConfidentialBackend, endpoint: str) -> None:
        self._backend = backend
        self._endpoint = endpoint

    async def encrypt_to_base64(self, code_hash: str, msg: Any) -> str:
        backend = self._backend
        backend.encrypt_calls.append((self._endpoint, code_hash, msg))
        gate = backend.gates.pop(0) if backend.gates else None
        if gate is not None:
            await gate.wait()
        if backend.encrypt_error is not None:
            raise backend.encrypt_error
        body = f"{code_hash}:{json.dumps(msg, separators=(',', ':'))}"
        return base64.b64encode(body.encode()).decode()


class FakeConfidentialBackend:
    """In-memory ``ConfidentialBackend`` for unit and engine tests."""

    def __init__(self) -> None:
        self.code_hashes: dict[str, str] = {}
        self.gates: list[asyncio.Event] = []
        self.encrypt_error: ComposerError | None = None
        self.lookup_error: ComposerError | None = None
        self.encrypt_calls: list[tuple[str, str, Any]] = []

    def encryptor(self, endpoint: str) -> FakeEncryptor:
        return FakeEncryptor(self, endpoint)

    async def lookup_code_hash(self, endpoint: str, contract_address: str) -> str:
        if self.lookup_error is not None:
            raise self.lookup_error
        return self.code_hashes[contract_address]


def decode_fake_body(encrypted: str) -> tuple[str, Any]:
    """Split a ``FakeEncryptor`` body into ``(code_hash, msg)``."""
    code_hash, _, text = base64.b64decode(encrypted).decode().partition(":")
    return code_hash, json.loads(text)


async def drain(rounds: int = 5) -> None:
    """Let scheduled tasks run up to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


# ---------------------------------------------------------------------------
# Config / chains
# ---------------------------------------------------------------------------


@pytest.fixture
def app_config():
    """Provide a test AppConfig with an in-memory database."""
    from tx_composer.config.settings import AppConfig, DatabaseConfig

    return AppConfig(
        debug=True,
        db=DatabaseConfig(
            engine=DatabaseEngine.SQLITE,
            dsn="sqlite+aiosqlite:///:memory:",
        ),
    )


@pytest.fixture
def chain() -> ChainInfo:
    """Cosmos Hub with the ATOM asset registered."""
    return ChainInfo(
        chain_id="cosmoshub-4",
        address_prefix="cosmos",
        denom="uatom",
        gas_price="0.025uatom",
        display_denom="ATOM",
        lcd_url="https://lcd.cosmos.test",
        assets=[
            Asset(
                symbol="ATOM",
                base="uatom",
                display="atom",
                denom_units=[DenomUnit("uatom", 0), DenomUnit("atom", 6)],
            )
        ],
    )


@pytest.fixture
def secret_chain() -> ChainInfo:
    """Secret Network, which requires encrypted contract execution."""
    return ChainInfo(
        chain_id="secret-4",
        address_prefix="secret",
        denom="uscrt",
        gas_price="0.1uscrt",
        display_denom="SCRT",
        lcd_url="https://lcd.secret.test",
        assets=[
            Asset(
                symbol="SCRT",
                base="uscrt",
                display="scrt",
                denom_units=[DenomUnit("uscrt", 0), DenomUnit("scrt", 6)],
            )
        ],
        confidential_encryption=True,
    )


@pytest.fixture
def sender() -> str:
    return example_address(0, "cosmos")


@pytest.fixture
def recipient() -> str:
    return example_address(1, "cosmos")


@pytest.fixture
def context(chain: ChainInfo, sender: str) -> ComposeContext:
    return ComposeContext(chain=chain, sender_address=sender)


@pytest.fixture
def fake_backend() -> FakeConfidentialBackend:
    return FakeConfidentialBackend()


@pytest.fixture
def secret_context(
    secret_chain: ChainInfo, fake_backend: FakeConfidentialBackend
) -> ComposeContext:
    return ComposeContext(
        chain=secret_chain,
        sender_address=example_address(0, "secret"),
        confidential_backend=fake_backend,
    )


# ---------------------------------------------------------------------------
# Datastore
# ---------------------------------------------------------------------------


@pytest.fixture
async def datastore(app_config) -> AsyncIterator:
    """An open in-memory datastore with all tables created."""
    from tx_composer.datastore.client import Datastore

    ds = Datastore(app_config.db)
    await ds.open()
    yield ds
    await ds.close()
