"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``TXCOMPOSER_``, nested via ``__``)
2. YAML config file (``TXCOMPOSER_CONFIG_PATH`` env var or ``AppConfig.from_yaml``)
3. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from tx_composer.chain.models import ChainInfo

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class DatabaseEngine(enum.StrEnum):
    """Supported database engines."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class DenomUnitConfig(BaseModel):
    """One denomination unit of a registered asset."""

    denom: str
    exponent: int = 0
    aliases: list[str] = Field(default_factory=list)


class AssetConfig(BaseModel):
    """A registered chain asset (chain-registry ``assetlist.json`` entry)."""

    symbol: str
    base: str
    display: str
    denom_units: list[DenomUnitConfig] = Field(default_factory=list)


_ATOM = AssetConfig(
    symbol="ATOM",
    base="uatom",
    display="atom",
    denom_units=[DenomUnitConfig(denom="uatom"), DenomUnitConfig(denom="atom", exponent=6)],
)


class ChainConfig(BaseSettings):
    """Active chain settings."""

    model_config = SettingsConfigDict(
        env_prefix="TXCOMPOSER_CHAIN__",
        case_sensitive=False,
    )

    chain_id: str = "cosmoshub-4"
    registry_name: str = "cosmoshub"
    address_prefix: str = "cosmos"
    denom: str = "uatom"
    display_denom: str = "ATOM"
    gas_price: str = "0.025uatom"
    lcd_url: str = "https://rest.cosmos.directory/cosmoshub"
    assets: list[AssetConfig] = Field(default_factory=lambda: [_ATOM.model_copy(deep=True)])
    confidential_encryption: bool | None = Field(
        default=None,
        description="Encrypt contract execution bodies client-side; derived from denom if unset",
    )

    def to_chain_info(self) -> ChainInfo:
        """Build the runtime ``ChainInfo`` for this configuration."""
        from tx_composer.chain.models import Asset, ChainInfo, DenomUnit

        return ChainInfo(
            chain_id=self.chain_id,
            registry_name=self.registry_name,
            address_prefix=self.address_prefix,
            denom=self.denom,
            display_denom=self.display_denom,
            gas_price=self.gas_price,
            lcd_url=self.lcd_url,
            assets=[
                Asset(
                    symbol=a.symbol,
                    base=a.base,
                    display=a.display,
                    denom_units=[
                        DenomUnit(denom=u.denom, exponent=u.exponent, aliases=list(u.aliases))
                        for u in a.denom_units
                    ],
                )
                for a in self.assets
            ],
            confidential_encryption=(
                self.denom == "uscrt"
                if self.confidential_encryption is None
                else self.confidential_encryption
            ),
        )


class DatabaseConfig(BaseSettings):
    """Database settings for the transaction store."""

    model_config = SettingsConfigDict(
        env_prefix="TXCOMPOSER_DB__",
        case_sensitive=False,
    )

    engine: DatabaseEngine = Field(
        default=DatabaseEngine.SQLITE,
        description="Database backend: sqlite or postgresql",
    )
    dsn: str = Field(
        default="sqlite+aiosqlite:///./tx_composer.db",
        description="Async database connection string",
    )
    max_idle_connections: int = 5
    max_open_connections: int = 10
    debug_sql: bool = False


class ConfidentialConfig(BaseSettings):
    """Client-side contract message encryption settings."""

    model_config = SettingsConfigDict(
        env_prefix="TXCOMPOSER_CONFIDENTIAL__",
        case_sensitive=False,
    )

    encryption_seed: str = Field(
        default="00" * 32,
        description="Hex-encoded 32-byte seed of the transaction encryption key",
    )
    request_timeout: float = 30.0
    consensus_io_pubkeys: dict[str, str] = Field(
        default_factory=lambda: {"secret-4": "79++5YOHfm0SwhlpUDClv7cuCjq9xBZlWqSjDJWkRG8="},
        description="Base64 consensus IO public keys keyed by chain id, skips the LCD query",
    )

    @property
    def seed_bytes(self) -> bytes:
        """Return the decoded encryption seed."""
        seed = bytes.fromhex(self.encryption_seed)
        if len(seed) != 32:
            msg = f"encryption seed must be 32 bytes, got {len(seed)}"
            raise ValueError(msg)
        return seed


class GasConfig(BaseSettings):
    """Gas estimation settings."""

    model_config = SettingsConfigDict(
        env_prefix="TXCOMPOSER_GAS__",
        case_sensitive=False,
    )

    flat_gas: int = 100_000
    weights: dict[str, int] = Field(
        default_factory=dict,
        description="Per type URL gas weight overrides",
    )


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Loads settings from environment variables (``TXCOMPOSER_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="TXCOMPOSER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    version: str = "0.1.0"
    config_path: str = ""

    chain: ChainConfig = Field(default_factory=ChainConfig)
    db: DatabaseConfig = Field(default_factory=DatabaseConfig)
    confidential: ConfidentialConfig = Field(default_factory=ConfidentialConfig)
    gas: GasConfig = Field(default_factory=GasConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))
