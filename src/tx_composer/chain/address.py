"""Address encoding — Bech32, address validation, example addresses.

Cosmos SDK address operations:
- Bech32 (BIP-0173) encode / decode with 8↔5 bit conversion
- Address validation against the active chain's human readable prefix
- Deterministic example addresses for input placeholders
"""

from __future__ import annotations

import hashlib

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_CHARSET_REV = {c: i for i, c in enumerate(_CHARSET)}
_GENERATORS = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)

# Cosmos addresses can exceed the 90-char BIP-0173 limit (32-byte module accounts)
_MAX_LENGTH = 128

# Accepted account / contract payload lengths
_VALID_DATA_LENGTHS = (20, 32)


class Bech32Error(ValueError):
    """Raised when a Bech32 string cannot be decoded."""


# ---------------------------------------------------------------------------
# Bech32 primitives
# ---------------------------------------------------------------------------


def _polymod(values: list[int]) -> int:
    chk = 1
    for v in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ v
        for i in range(5):
            if (top >> i) & 1:
                chk ^= _GENERATORS[i]
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp]


def _create_checksum(hrp: str, data: list[int]) -> list[int]:
    polymod = _polymod(_hrp_expand(hrp) + data + [0] * 6) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]


def convertbits(data: bytes | list[int], from_bits: int, to_bits: int, *, pad: bool) -> list[int]:
    """General power-of-2 base conversion (BIP-0173 ``convertbits``).

    Raises:
        Bech32Error: On out-of-range values or invalid padding.
    """
    acc = 0
    bits = 0
    ret: list[int] = []
    maxv = (1 << to_bits) - 1
    max_acc = (1 << (from_bits + to_bits - 1)) - 1
    for value in data:
        if value < 0 or (value >> from_bits):
            raise Bech32Error("invalid value for convertbits")
        acc = ((acc << from_bits) | value) & max_acc
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            ret.append((acc >> bits) & maxv)
    if pad:
        if bits:
            ret.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & maxv):
        raise Bech32Error("invalid padding")
    return ret


def bech32_encode(prefix: str, data: bytes) -> str:
    """Encode raw bytes under a human readable prefix.

    Args:
        prefix: Human readable part, e.g. ``cosmos``.
        data: Raw payload bytes (usually a 20-byte account hash).

    Returns:
        The lowercase Bech32 string.
    """
    prefix = prefix.lower()
    words = convertbits(data, 8, 5, pad=True)
    checksum = _create_checksum(prefix, words)
    return prefix + "1" + "".join(_CHARSET[w] for w in words + checksum)


def bech32_decode(address: str) -> tuple[str, bytes]:
    """Decode a Bech32 string into ``(prefix, data)``.

    Raises:
        Bech32Error: If the string is malformed or the checksum fails.
    """
    if len(address) > _MAX_LENGTH:
        msg = f"Exceeds length limit of {_MAX_LENGTH}"
        raise Bech32Error(msg)
    if address.lower() != address and address.upper() != address:
        raise Bech32Error("Mixed-case string")
    address = address.lower()
    pos = address.rfind("1")
    if pos < 1:
        raise Bech32Error("No separator character")
    if pos + 7 > len(address):
        raise Bech32Error("Data too short")
    prefix = address[:pos]
    if any(ord(c) < 33 or ord(c) > 126 for c in prefix):
        raise Bech32Error("Invalid prefix character")
    try:
        words = [_CHARSET_REV[c] for c in address[pos + 1 :]]
    except KeyError as exc:
        msg = f"Unknown character {exc.args[0]!r}"
        raise Bech32Error(msg) from exc
    if _polymod(_hrp_expand(prefix) + words) != 1:
        msg = f"Invalid checksum for {address}"
        raise Bech32Error(msg)
    return prefix, bytes(convertbits(words[:-6], 5, 8, pad=False))


# ---------------------------------------------------------------------------
# Address helpers
# ---------------------------------------------------------------------------


def check_address(address: str, chain_address_prefix: str | None = None) -> str | None:
    """Validate a Bech32 account address.

    Args:
        address: The address typed by the user.
        chain_address_prefix: Expected prefix; ``None`` accepts any prefix
            (e.g. IBC receivers on a counterparty chain).

    Returns:
        ``None`` if the address is valid, otherwise a human-readable reason.
    """
    if not address:
        return "Empty"

    try:
        prefix, data = bech32_decode(address)
    except Bech32Error as exc:
        return str(exc)

    if chain_address_prefix is not None and prefix != chain_address_prefix:
        return f"Expected address prefix '{chain_address_prefix}' but got '{prefix}'"

    if len(data) not in _VALID_DATA_LENGTHS:
        return "Invalid address length in bech32 data. Must be 20 or 32 bytes."

    return None


def example_address(index: int, chain_address_prefix: str) -> str:
    """Return a deterministic, valid example address for placeholders."""
    data = hashlib.sha256(f"example-address-{index}".encode()).digest()[:20]
    return bech32_encode(chain_address_prefix, data)
