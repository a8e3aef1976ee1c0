from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from tail_registry.domain.errors import IdentifierDecodeError

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
BECH32M_CONST = 0x2BC830A3
MAX_LENGTH = 90
CHECKSUM_LENGTH = 6

NFT_PREFIX = "nft"
LAUNCHER_ID_BYTES = 32

_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)


@dataclass(frozen=True)
class DecodedIdentifier:
    hrp: str
    payload: bytes

    @property
    def hex(self) -> str:
        return "".join(f"{byte:02x}" for byte in self.payload)


def _polymod(values: Iterable[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for index, generator in enumerate(_GENERATOR):
            if (top >> index) & 1:
                chk ^= generator
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(char) >> 5 for char in hrp] + [0] + [ord(char) & 31 for char in hrp]


def _verify_checksum(hrp: str, data: Sequence[int]) -> bool:
    return _polymod(_hrp_expand(hrp) + list(data)) == BECH32M_CONST


def _create_checksum(hrp: str, data: Sequence[int]) -> list[int]:
    values = _hrp_expand(hrp) + list(data)
    polymod = _polymod(values + [0] * CHECKSUM_LENGTH) ^ BECH32M_CONST
    return [(polymod >> 5 * (5 - index)) & 31 for index in range(CHECKSUM_LENGTH)]


def convert_bits(data: Iterable[int], from_bits: int, to_bits: int, *, pad: bool) -> list[int]:
    """Regroup a sequence of ``from_bits``-wide integers into ``to_bits``-wide ones.

    Bits are concatenated MSB-first. Without padding the trailing bits must be
    fewer than ``from_bits`` and all zero, otherwise the input is rejected.
    """
    acc = 0
    bits = 0
    result: list[int] = []
    max_value = (1 << to_bits) - 1
    max_acc = (1 << (from_bits + to_bits - 1)) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise IdentifierDecodeError(f"value {value} does not fit in {from_bits} bits")
        acc = ((acc << from_bits) | value) & max_acc
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            result.append((acc >> bits) & max_value)
    if pad:
        if bits:
            result.append((acc << (to_bits - bits)) & max_value)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & max_value):
        raise IdentifierDecodeError("non-zero padding in identifier payload")
    return result


def decode(identifier: str) -> DecodedIdentifier:
    if any(ord(char) < 33 or ord(char) > 126 for char in identifier):
        raise IdentifierDecodeError("identifier contains non-printable characters")
    if identifier.lower() != identifier and identifier.upper() != identifier:
        raise IdentifierDecodeError("identifier mixes upper and lower case")

    identifier = identifier.lower()
    separator = identifier.rfind("1")
    if separator < 1 or separator + CHECKSUM_LENGTH + 1 > len(identifier) or len(identifier) > MAX_LENGTH:
        raise IdentifierDecodeError("identifier has no valid separator")

    hrp = identifier[:separator]
    try:
        data = [CHARSET.index(char) for char in identifier[separator + 1 :]]
    except ValueError as exc:
        raise IdentifierDecodeError("identifier contains characters outside the alphabet") from exc

    if not _verify_checksum(hrp, data):
        raise IdentifierDecodeError("identifier checksum does not verify")

    payload = convert_bits(data[:-CHECKSUM_LENGTH], 5, 8, pad=False)
    return DecodedIdentifier(hrp=hrp, payload=bytes(payload))


def encode(hrp: str, payload: bytes) -> str:
    data = convert_bits(payload, 8, 5, pad=True)
    combined = data + _create_checksum(hrp, data)
    return hrp + "1" + "".join(CHARSET[value] for value in combined)


def decode_launcher_id(identifier: str) -> str:
    """Decode an NFT identifier into its 64-character launcher id."""
    decoded = decode(identifier)
    if len(decoded.payload) != LAUNCHER_ID_BYTES:
        raise IdentifierDecodeError(
            f"identifier decodes to {len(decoded.payload)} bytes, expected {LAUNCHER_ID_BYTES}"
        )
    return decoded.hex


def encode_launcher_id(launcher_id: str) -> str:
    try:
        payload = bytes.fromhex(launcher_id)
    except ValueError as exc:
        raise IdentifierDecodeError("launcher id is not hex") from exc
    if len(payload) != LAUNCHER_ID_BYTES:
        raise IdentifierDecodeError(f"launcher id must be {LAUNCHER_ID_BYTES} bytes")
    return encode(NFT_PREFIX, payload)
