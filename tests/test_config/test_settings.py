"""Tests for the configuration system."""

from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from tx_composer.config.settings import (
    AppConfig,
    ChainConfig,
    ConfidentialConfig,
    DatabaseConfig,
    DatabaseEngine,
    GasConfig,
    _load_yaml,
)

if TYPE_CHECKING:
    from pathlib import Path

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    """Verify all default values are correct."""

    def test_chain_defaults(self) -> None:
        cfg = ChainConfig()
        assert cfg.chain_id == "cosmoshub-4"
        assert cfg.address_prefix == "cosmos"
        assert cfg.denom == "uatom"
        assert cfg.gas_price == "0.025uatom"
        assert [a.symbol for a in cfg.assets] == ["ATOM"]
        assert cfg.confidential_encryption is None

    def test_database_defaults(self) -> None:
        cfg = DatabaseConfig()
        assert cfg.engine == DatabaseEngine.SQLITE
        assert cfg.dsn == "sqlite+aiosqlite:///./tx_composer.db"
        assert cfg.max_idle_connections == 5
        assert cfg.max_open_connections == 10
        assert cfg.debug_sql is False

    def test_confidential_defaults(self) -> None:
        cfg = ConfidentialConfig()
        assert cfg.seed_bytes == bytes(32)
        assert cfg.request_timeout == 30.0
        assert "secret-4" in cfg.consensus_io_pubkeys

    def test_gas_defaults(self) -> None:
        cfg = GasConfig()
        assert cfg.flat_gas == 100_000
        assert cfg.weights == {}

    def test_app_config_defaults(self) -> None:
        cfg = AppConfig()
        assert cfg.debug is False
        assert cfg.version == "0.1.0"
        assert isinstance(cfg.chain, ChainConfig)
        assert isinstance(cfg.db, DatabaseConfig)

    def test_default_assets_not_shared(self) -> None:
        first, second = ChainConfig(), ChainConfig()
        first.assets[0].symbol = "CHANGED"
        assert second.assets[0].symbol == "ATOM"


# ---------------------------------------------------------------------------
# ChainInfo conversion
# ---------------------------------------------------------------------------


class TestChainInfo:
    def test_to_chain_info(self) -> None:
        info = ChainConfig().to_chain_info()
        assert info.chain_id == "cosmoshub-4"
        assert info.confidential_encryption is False
        (asset,) = info.assets
        assert asset.base == "uatom"
        assert [(u.denom, u.exponent) for u in asset.denom_units] == [("uatom", 0), ("atom", 6)]

    def test_confidential_derived_from_denom(self) -> None:
        cfg = ChainConfig(
            chain_id="secret-4", address_prefix="secret", denom="uscrt", gas_price="0.1uscrt"
        )
        assert cfg.to_chain_info().confidential_encryption is True

    def test_confidential_explicit(self) -> None:
        cfg = ChainConfig(denom="uscrt", confidential_encryption=False)
        assert cfg.to_chain_info().confidential_encryption is False


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_database_engine_postgresql(self) -> None:
        cfg = DatabaseConfig(engine="postgresql")
        assert cfg.engine == DatabaseEngine.POSTGRESQL

    def test_database_engine_invalid(self) -> None:
        with pytest.raises(ValidationError):
            DatabaseConfig(engine="oracle")

    @pytest.mark.parametrize("seed", ["00" * 31, "00" * 33])
    def test_seed_wrong_length(self, seed: str) -> None:
        with pytest.raises(ValueError, match="must be 32 bytes"):
            _ = ConfidentialConfig(encryption_seed=seed).seed_bytes

    def test_seed_not_hex(self) -> None:
        with pytest.raises(ValueError):
            _ = ConfidentialConfig(encryption_seed="zz" * 32).seed_bytes


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------


class TestEnvOverride:
    """Verify that environment variables override defaults."""

    def test_top_level_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TXCOMPOSER_DEBUG", "true")
        cfg = AppConfig()
        assert cfg.debug is True

    def test_nested_chain_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TXCOMPOSER_CHAIN__CHAIN_ID", "osmosis-1")
        monkeypatch.setenv("TXCOMPOSER_CHAIN__ADDRESS_PREFIX", "osmo")
        cfg = AppConfig()
        assert cfg.chain.chain_id == "osmosis-1"
        assert cfg.chain.address_prefix == "osmo"

    def test_nested_db_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TXCOMPOSER_DB__ENGINE", "postgresql")
        monkeypatch.setenv("TXCOMPOSER_DB__DSN", "postgresql+asyncpg://u:p@db/tx")
        cfg = AppConfig()
        assert cfg.db.engine == DatabaseEngine.POSTGRESQL
        assert cfg.db.dsn == "postgresql+asyncpg://u:p@db/tx"

    def test_nested_gas_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TXCOMPOSER_GAS__FLAT_GAS", "50000")
        cfg = AppConfig()
        assert cfg.gas.flat_gas == 50_000


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


class TestYAML:
    """Test YAML config file loading."""

    def test_load_yaml_nonexistent(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_load_yaml_empty_file(self, tmp_path: Path) -> None:
        f = tmp_path / "empty.yaml"
        f.write_text("")
        assert _load_yaml(f) == {}

    def test_load_yaml_non_dict(self, tmp_path: Path) -> None:
        """YAML file containing a list should return empty dict."""
        f = tmp_path / "list.yaml"
        f.write_text("- item1\n- item2\n")
        assert _load_yaml(f) == {}

    def test_from_yaml(self, tmp_path: Path) -> None:
        f = tmp_path / "app.yaml"
        f.write_text(
            textwrap.dedent("""\
                debug: true
                chain:
                  chain_id: secret-4
                  address_prefix: secret
                  denom: uscrt
                  gas_price: 0.1uscrt
                  assets:
                    - symbol: SCRT
                      base: uscrt
                      display: scrt
                      denom_units:
                        - denom: uscrt
                        - denom: scrt
                          exponent: 6
                gas:
                  weights:
                    /cosmwasm.wasm.v1.MsgExecuteContract: 200000
            """)
        )
        cfg = AppConfig.from_yaml(f)
        assert cfg.debug is True
        assert cfg.chain.chain_id == "secret-4"
        assert cfg.chain.assets[0].denom_units[1].exponent == 6
        assert cfg.gas.weights == {"/cosmwasm.wasm.v1.MsgExecuteContract": 200_000}
        assert cfg.chain.to_chain_info().confidential_encryption is True

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Env vars have higher priority than YAML values."""
        f = tmp_path / "app.yaml"
        f.write_text(
            textwrap.dedent("""\
                chain:
                  chain_id: from-yaml
                  lcd_url: https://lcd.yaml.test
            """)
        )
        monkeypatch.setenv("TXCOMPOSER_CHAIN__CHAIN_ID", "from-env")
        cfg = AppConfig.from_yaml(f)
        assert cfg.chain.chain_id == "from-env"
        assert cfg.chain.lcd_url == "https://lcd.yaml.test"
