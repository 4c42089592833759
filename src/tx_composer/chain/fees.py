"""Gas price parsing and fee calculation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Any

from tx_composer.chain.models import Coin
from tx_composer.errors.definitions import ErrInvalidGasPrice

_GAS_PRICE_RE = re.compile(r"^([0-9.]+)([a-zA-Z][a-zA-Z0-9/:._-]{2,127})$")


@dataclass(frozen=True)
class GasPrice:
    """Price of one unit of gas in a given denom, e.g. ``0.025uatom``."""

    amount: Decimal
    denom: str

    @classmethod
    def from_string(cls, value: str) -> GasPrice:
        """Parse ``<decimal><denom>``.

        Raises:
            ComposerError: If the string is not a valid gas price.
        """
        match = _GAS_PRICE_RE.match(value.strip())
        if match is None:
            raise ErrInvalidGasPrice
        try:
            amount = Decimal(match.group(1))
        except InvalidOperation as exc:
            raise ErrInvalidGasPrice from exc
        return cls(amount=amount, denom=match.group(2))

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


@dataclass(frozen=True)
class StdFee:
    """Fee attached to a transaction: coins plus the gas limit."""

    amount: list[Coin] = field(default_factory=list)
    gas: str = "0"

    def to_dict(self) -> dict[str, Any]:
        return {"amount": [c.to_dict() for c in self.amount], "gas": self.gas}


def calculate_fee(gas_limit: int, gas_price: GasPrice | str) -> StdFee:
    """Compute the fee for *gas_limit* at *gas_price*.

    The fee amount is rounded up to the next whole base unit.
    """
    price = GasPrice.from_string(gas_price) if isinstance(gas_price, str) else gas_price
    amount = (price.amount * gas_limit).to_integral_value(rounding=ROUND_CEILING)
    return StdFee(amount=[Coin(denom=price.denom, amount=str(amount))], gas=str(gas_limit))
