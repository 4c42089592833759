"""Bonded validator set — model and LCD loader.

Async HTTP loader for the Cosmos SDK staking REST API:
- GET /cosmos/staking/v1beta1/validators?status=BOND_STATUS_BONDED

Follows ``pagination.next_key`` until the full set has been read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from tx_composer.errors.chain_errors import ValidatorLoadError

_BONDED = "BOND_STATUS_BONDED"
_PAGE_LIMIT = 200


@dataclass(frozen=True)
class Validator:
    """A validator as offered in staking message option lists."""

    operator_address: str
    moniker: str = ""
    status: str = _BONDED
    jailed: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Validator:
        description = data.get("description") or {}
        return cls(
            operator_address=data.get("operator_address", ""),
            moniker=description.get("moniker", ""),
            status=data.get("status", _BONDED),
            jailed=bool(data.get("jailed", False)),
        )


class LCDValidatorLoader:
    """Loads the bonded validator set from an LCD endpoint.

    Usage::

        loader = LCDValidatorLoader("https://lcd.example.com")
        validators = await loader()
    """

    def __init__(self, lcd_url: str, *, timeout: float = 30.0) -> None:
        self._lcd_url = lcd_url.rstrip("/")
        self._timeout = timeout
        self._transport: httpx.AsyncBaseTransport | None = None

    async def __call__(self) -> list[Validator]:
        """Fetch every bonded validator.

        Raises:
            ValidatorLoadError: On HTTP errors or malformed responses.
        """
        validators: list[Validator] = []
        next_key: str | None = None
        async with httpx.AsyncClient(
            base_url=self._lcd_url,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            while True:
                params: dict[str, Any] = {"status": _BONDED, "pagination.limit": _PAGE_LIMIT}
                if next_key:
                    params["pagination.key"] = next_key
                try:
                    resp = await client.get("/cosmos/staking/v1beta1/validators", params=params)
                    resp.raise_for_status()
                    data: dict[str, Any] = resp.json()
                except (httpx.HTTPError, ValueError) as exc:
                    msg = f"Failed to load validators: {exc}"
                    raise ValidatorLoadError(msg) from exc

                validators.extend(Validator.from_dict(v) for v in data.get("validators", []))
                next_key = (data.get("pagination") or {}).get("next_key")
                if not next_key:
                    break
        return validators
