"""Coin helpers — display ↔ base unit conversion."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from tx_composer.chain.models import Coin
from tx_composer.errors.chain_errors import CoinConversionError

if TYPE_CHECKING:
    from tx_composer.chain.models import Asset

_DECIMAL_RE = re.compile(r"^(\d*)(?:\.(\d*))?$")


def _to_atomics(amount: str, exponent: int) -> str:
    """Shift a user-entered decimal string by *exponent* places.

    Raises:
        CoinConversionError: If the string is not a plain non-negative decimal
            or has more fractional digits than the unit supports.
    """
    match = _DECIMAL_RE.match(amount)
    if match is None or amount in ("", "."):
        msg = f"Invalid amount: {amount!r}"
        raise CoinConversionError(msg)
    whole, fraction = match.group(1) or "0", match.group(2) or ""
    fraction = fraction.rstrip("0")
    if len(fraction) > exponent:
        msg = (
            f"Got more fractional digits than supported: {len(fraction)} "
            f"(max {exponent} for this denom)"
        )
        raise CoinConversionError(msg)
    atomics = int(whole + fraction.ljust(exponent, "0"))
    return str(atomics)


def display_coin_to_base_coin(display_coin: Coin, assets: list[Asset]) -> Coin:
    """Convert a display coin (``1.5 ATOM``) into base units (``1500000 uatom``).

    Denoms that match no registered asset are returned unchanged; the caller
    is responsible for validating such custom denoms.

    Args:
        display_coin: Denom/amount as entered by the user.
        assets: Registered assets of the active chain.

    Returns:
        The coin expressed in the asset's base denom.

    Raises:
        CoinConversionError: If the amount cannot be represented in base units.
    """
    needle = display_coin.denom.lower()
    asset = next((a for a in assets if a.matches(needle)), None)
    if asset is None:
        return display_coin

    unit = next(
        (
            u
            for u in asset.denom_units
            if u.denom.lower() == needle or needle in (a.lower() for a in u.aliases)
        ),
        None,
    )
    if unit is None:
        # Symbol or display name: use the display unit's exponent
        unit = next(
            (u for u in asset.denom_units if u.denom.lower() == asset.display.lower()),
            None,
        )
    exponent = unit.exponent if unit is not None else 0

    return Coin(denom=asset.base, amount=_to_atomics(display_coin.amount, exponent))
