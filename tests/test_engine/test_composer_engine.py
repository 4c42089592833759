"""Tests for the ComposerEngine lifecycle and sessions."""

from __future__ import annotations

import pytest

from tx_composer.chain.models import AccountInfo, Coin
from tx_composer.config.settings import AppConfig, ChainConfig, DatabaseConfig
from tx_composer.engine.client import ComposerEngine
from tx_composer.engine.context import SecretBackend
from tx_composer.engine.validator_cache import LoadState
from tx_composer.messages.type_urls import MsgTypeUrl


@pytest.fixture
async def engine(app_config: AppConfig):
    engine = ComposerEngine(app_config)
    await engine.initialize()
    yield engine
    await engine.close()


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    async def test_initialize_and_close(self, app_config: AppConfig) -> None:
        engine = ComposerEngine(app_config)
        assert not engine.is_initialized
        await engine.initialize()
        assert engine.is_initialized
        assert engine.datastore.is_open
        assert engine.validators.state is LoadState.UNLOADED
        assert engine.confidential_backend is None
        await engine.close()
        assert not engine.is_initialized

    async def test_double_initialize(self, engine: ComposerEngine) -> None:
        with pytest.raises(RuntimeError, match="already initialized"):
            await engine.initialize()

    async def test_close_idempotent(self, app_config: AppConfig) -> None:
        engine = ComposerEngine(app_config)
        await engine.close()
        await engine.initialize()
        await engine.close()
        await engine.close()

    @pytest.mark.parametrize("prop", ["datastore", "store", "validators"])
    def test_properties_before_initialize(self, app_config: AppConfig, prop: str) -> None:
        engine = ComposerEngine(app_config)
        with pytest.raises(RuntimeError, match="not initialized"):
            getattr(engine, prop)

    def test_chain_from_config(self, app_config: AppConfig) -> None:
        engine = ComposerEngine(app_config)
        assert engine.chain.chain_id == "cosmoshub-4"
        assert engine.config is app_config

    async def test_secret_chain_gets_backend(self) -> None:
        config = AppConfig(
            chain=ChainConfig(
                chain_id="secret-4",
                address_prefix="secret",
                denom="uscrt",
                gas_price="0.1uscrt",
                lcd_url="https://lcd.secret.test",
            ),
            db=DatabaseConfig(dsn="sqlite+aiosqlite:///:memory:"),
        )
        engine = ComposerEngine(config)
        await engine.initialize()
        assert isinstance(engine.confidential_backend, SecretBackend)
        session = engine.new_session(AccountInfo(address="secret1xyz", account_number=1))
        assert session.context.confidential_backend is engine.confidential_backend
        await engine.close()
        assert engine.confidential_backend is None


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class TestSessions:
    def test_new_session_before_initialize(self, app_config: AppConfig, sender: str) -> None:
        engine = ComposerEngine(app_config)
        with pytest.raises(RuntimeError, match="not initialized"):
            engine.new_session(AccountInfo(address=sender, account_number=1))

    async def test_sessions_share_validator_cache(
        self, engine: ComposerEngine, sender: str
    ) -> None:
        account = AccountInfo(address=sender, account_number=1)
        first = engine.new_session(account)
        second = engine.new_session(account)
        assert first.controller is not second.controller
        assert first.context.validators is engine.validators
        assert second.context.validators is engine.validators

    async def test_gas_config_applied(self, app_config: AppConfig, sender: str) -> None:
        app_config.gas.flat_gas = 10_000
        app_config.gas.weights = {MsgTypeUrl.SEND.value: 50_000}
        engine = ComposerEngine(app_config)
        await engine.initialize()
        session = engine.new_session(AccountInfo(address=sender, account_number=1))
        session.controller.add_message_type(MsgTypeUrl.SEND)
        assert session.controller.gas_limit == "60000"
        await engine.close()

    async def test_compose_and_submit(
        self, engine: ComposerEngine, sender: str, recipient: str
    ) -> None:
        session = engine.new_session(AccountInfo(address=sender, account_number=5, sequence=2))
        slot = session.controller.add_message_type(MsgTypeUrl.SEND)
        slot.unit.update(to_address=recipient, amount="1.5", denom="ATOM")
        session.controller.memo = "rent"

        draft = session.assembler.build()
        assert draft.msgs[0].value["amount"] == [Coin("uatom", "1500000")]
        assert draft.fee.gas == "200000"

        tx_id = await session.assembler.submit()
        data = await engine.store.get_transaction(tx_id)
        assert data is not None
        assert data["memo"] == "rent"
        assert data["sequence"] == 2
        assert data["msgs"][0]["value"]["amount"] == [{"denom": "uatom", "amount": "1500000"}]

        rows = await engine.store.list_transactions(sender)
        assert [row.id for row in rows] == [tx_id]
