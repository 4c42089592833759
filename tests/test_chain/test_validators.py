"""Tests for the LCD bonded-validator loader — uses httpx mock transport."""

from __future__ import annotations

import httpx
import pytest

from tx_composer.chain.validators import LCDValidatorLoader, Validator
from tx_composer.errors.chain_errors import ValidatorLoadError


def _validator(address: str, moniker: str) -> dict:
    return {
        "operator_address": address,
        "description": {"moniker": moniker},
        "status": "BOND_STATUS_BONDED",
        "jailed": False,
    }


class TestValidatorModel:
    def test_from_dict(self) -> None:
        v = Validator.from_dict(_validator("cosmosvaloper1a", "Alpha"))
        assert v.operator_address == "cosmosvaloper1a"
        assert v.moniker == "Alpha"
        assert v.jailed is False

    def test_from_dict_minimal(self) -> None:
        v = Validator.from_dict({"operator_address": "cosmosvaloper1b"})
        assert v.moniker == ""
        assert v.status == "BOND_STATUS_BONDED"


class TestLCDValidatorLoader:
    async def test_follows_pagination(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            assert request.url.path == "/cosmos/staking/v1beta1/validators"
            assert request.url.params["status"] == "BOND_STATUS_BONDED"
            if request.url.params.get("pagination.key") == "page2":
                return httpx.Response(
                    200,
                    json={
                        "validators": [_validator("cosmosvaloper1c", "Charlie")],
                        "pagination": {"next_key": None},
                    },
                )
            return httpx.Response(
                200,
                json={
                    "validators": [
                        _validator("cosmosvaloper1a", "Alpha"),
                        _validator("cosmosvaloper1b", "Bravo"),
                    ],
                    "pagination": {"next_key": "page2"},
                },
            )

        loader = LCDValidatorLoader("https://lcd.cosmos.test/")
        loader._transport = httpx.MockTransport(handler)
        validators = await loader()
        assert [v.moniker for v in validators] == ["Alpha", "Bravo", "Charlie"]
        assert len(seen) == 2

    async def test_http_error(self) -> None:
        loader = LCDValidatorLoader("https://lcd.cosmos.test")
        loader._transport = httpx.MockTransport(lambda _: httpx.Response(503, text="down"))
        with pytest.raises(ValidatorLoadError, match="Failed to load validators"):
            await loader()

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        loader = LCDValidatorLoader("https://lcd.cosmos.test")
        loader._transport = httpx.MockTransport(handler)
        with pytest.raises(ValidatorLoadError):
            await loader()

    async def test_invalid_json(self) -> None:
        loader = LCDValidatorLoader("https://lcd.cosmos.test")
        loader._transport = httpx.MockTransport(lambda _: httpx.Response(200, text="<html>"))
        with pytest.raises(ValidatorLoadError):
            await loader()
