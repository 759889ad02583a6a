"""Crockford base-32 (c32check) address helpers for Stacks principals."""

from __future__ import annotations

import hashlib
from enum import IntEnum

from ..exceptions import ValidationError

C32_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"

HASH160_LENGTH = 20
CHECKSUM_LENGTH = 4


class AddressVersion(IntEnum):
    """Stacks address version bytes."""

    MAINNET_SINGLE_SIG = 22  # SP
    MAINNET_MULTI_SIG = 20  # SM
    TESTNET_SINGLE_SIG = 26  # ST
    TESTNET_MULTI_SIG = 21  # SN


def _normalise(text: str) -> str:
    return text.upper().replace("O", "0").replace("L", "1").replace("I", "1")


def c32_encode(data: bytes) -> str:
    number = int.from_bytes(data, "big")
    chars: list[str] = []
    while number > 0:
        number, remainder = divmod(number, 32)
        chars.append(C32_ALPHABET[remainder])

    leading_zeros = len(data) - len(data.lstrip(b"\x00"))
    return "0" * leading_zeros + "".join(reversed(chars))


def c32_decode(text: str) -> bytes:
    text = _normalise(text)
    number = 0
    for char in text:
        index = C32_ALPHABET.find(char)
        if index < 0:
            raise ValidationError("Invalid c32 character", field="address", value=text)
        number = number * 32 + index

    leading_zeros = len(text) - len(text.lstrip("0"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\x00" * leading_zeros + body


def _checksum(version: int, hash160: bytes) -> bytes:
    payload = bytes([version]) + hash160
    return hashlib.sha256(hashlib.sha256(payload).digest()).digest()[:CHECKSUM_LENGTH]


def c32_address(version: int, hash160: bytes) -> str:
    """Render a version byte and hash160 as an ``S``-prefixed address."""

    if not 0 <= version < 32:
        raise ValidationError("Address version must fit in 5 bits", field="version", value=version)
    if len(hash160) != HASH160_LENGTH:
        raise ValidationError(
            "Address hash must be 20 bytes", field="hash160", value=hash160.hex()
        )

    return "S" + C32_ALPHABET[version] + c32_encode(hash160 + _checksum(version, hash160))


def c32_address_decode(address: str) -> tuple[int, bytes]:
    """Split a c32check address into its version byte and hash160.

    Raises:
        ValidationError: If the address is malformed or its checksum does not match
    """

    if not isinstance(address, str) or len(address) < 3:
        raise ValidationError("Address is too short", field="address", value=address)

    normalised = _normalise(address)
    if normalised[0] != "S":
        raise ValidationError("Stacks addresses start with 'S'", field="address", value=address)

    version = C32_ALPHABET.find(normalised[1])
    if version < 0:
        raise ValidationError("Invalid address version", field="address", value=address)

    data = c32_decode(normalised[2:])
    if len(data) != HASH160_LENGTH + CHECKSUM_LENGTH:
        raise ValidationError("Address has the wrong length", field="address", value=address)

    hash160, checksum = data[:HASH160_LENGTH], data[HASH160_LENGTH:]
    if checksum != _checksum(version, hash160):
        raise ValidationError("Address checksum mismatch", field="address", value=address)

    return version, hash160
