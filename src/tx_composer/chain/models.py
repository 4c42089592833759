"""Chain data models — chain info, assets, coins, accounts.

Plain data classes describing the active chain and the signing account.
Values mirror the chain-registry ``chain.json`` / ``assetlist.json`` shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DenomUnit:
    """A denomination unit of an asset, e.g. ``atom`` with exponent 6."""

    denom: str
    exponent: int = 0
    aliases: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Asset:
    """A registered chain asset.

    Attributes:
        symbol: Ticker shown to the user (``ATOM``).
        base: Base (on-chain) denom (``uatom``).
        display: Display denom (``atom``).
        denom_units: All known units, including the base unit at exponent 0.
    """

    symbol: str
    base: str
    display: str
    denom_units: list[DenomUnit] = field(default_factory=list)

    def matches(self, denom: str) -> bool:
        """Check whether *denom* names this asset (case-insensitive)."""
        needle = denom.lower()
        if needle in (self.symbol.lower(), self.display.lower(), self.base.lower()):
            return True
        return any(
            needle == unit.denom.lower() or needle in (a.lower() for a in unit.aliases)
            for unit in self.denom_units
        )


@dataclass(frozen=True)
class Coin:
    """A denom/amount pair. Amounts are decimal strings."""

    denom: str
    amount: str

    def to_dict(self) -> dict[str, str]:
        return {"denom": self.denom, "amount": self.amount}


# ---------------------------------------------------------------------------
# Chain
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainInfo:
    """Runtime description of the active chain.

    ``confidential_encryption`` marks chains (Secret Network) whose contract
    execution bodies must be encrypted client-side before signing.
    """

    chain_id: str
    address_prefix: str
    denom: str
    gas_price: str
    registry_name: str = ""
    display_denom: str = ""
    lcd_url: str = ""
    assets: list[Asset] = field(default_factory=list)
    confidential_encryption: bool = False

    @property
    def validator_prefix(self) -> str:
        """Bech32 prefix of validator operator addresses."""
        return f"{self.address_prefix}valoper"

    def find_asset(self, denom: str) -> Asset | None:
        """Return the registered asset named by *denom*, if any."""
        for asset in self.assets:
            if asset.matches(denom):
                return asset
        return None


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------


@dataclass
class AccountInfo:
    """On-chain account metadata required to sign a transaction."""

    address: str
    account_number: int | None = None
    sequence: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccountInfo:
        """Parse an LCD ``/cosmos/auth/v1beta1/accounts`` style account."""
        number = data.get("account_number", data.get("accountNumber"))
        return cls(
            address=data.get("address", ""),
            account_number=int(number) if number is not None else None,
            sequence=int(data.get("sequence", 0) or 0),
        )
