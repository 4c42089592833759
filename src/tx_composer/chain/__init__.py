"""Chain helpers — addresses, coins, fees, validators, Secret Network."""

from tx_composer.chain.address import check_address, example_address
from tx_composer.chain.coins import display_coin_to_base_coin
from tx_composer.chain.fees import GasPrice, StdFee, calculate_fee
from tx_composer.chain.models import AccountInfo, Asset, ChainInfo, Coin, DenomUnit

__all__ = [
    "AccountInfo",
    "Asset",
    "ChainInfo",
    "Coin",
    "DenomUnit",
    "GasPrice",
    "StdFee",
    "calculate_fee",
    "check_address",
    "display_coin_to_base_coin",
    "example_address",
]
