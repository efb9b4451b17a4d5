"""
Hashing primitives and byte-exact protocol constants.

This module provides the canonical pieces every other encoder is built from:
- Keccak-256 (the original pre-standard padding, not NIST SHA3-256)
- Domain separation tags for seals, leaves and the three chains
- Little-endian integer packing with explicit range checks
- Fixed-length and hex helpers

The constants must match the on-chain program byte for byte.
"""

from __future__ import annotations

from typing import Union

from Crypto.Hash import keccak

from reputation.errors import InvalidLength, InvalidRange

BytesLike = Union[bytes, bytearray, memoryview]

DIGEST_LEN = 32
ZERO_DIGEST = bytes(DIGEST_LEN)

# Chain domains (feedback/response are 16 bytes, revoke is 14)
DOMAIN_FEEDBACK = b"8004_FEEDBACK_V1"
DOMAIN_RESPONSE = b"8004_RESPONSE_V1"
DOMAIN_REVOKE = b"8004_REVOKE_V1"

# Content and leaf domains (16 bytes each)
DOMAIN_SEAL_V1 = b"8004_SEAL_V1____"
DOMAIN_LEAF_V1 = b"8004_LEAF_V1____"
DOMAIN_RESPONSE_LEAF_V1 = b"8004_RSP_LEAF_V1"
DOMAIN_REVOKE_LEAF_V1 = b"8004_RVK_LEAF_V1"

CHAIN_DOMAINS = (DOMAIN_FEEDBACK, DOMAIN_RESPONSE, DOMAIN_REVOKE)
CHAIN_DOMAIN_LENGTHS = frozenset(len(d) for d in CHAIN_DOMAINS)

U16_MAX = (1 << 16) - 1
U64_MAX = (1 << 64) - 1
I128_MIN = -(1 << 127)
I128_MAX = (1 << 127) - 1


def keccak256(*parts: BytesLike) -> bytes:
    """
    Compute Keccak-256 over the concatenation of ``parts``.

    Args:
        parts: Byte strings fed to the sponge in order

    Returns:
        32-byte digest
    """
    hasher = keccak.new(digest_bits=256)
    for part in parts:
        hasher.update(bytes(part))
    return hasher.digest()


def require_bytes(field: str, value: object, size: int) -> bytes:
    """Return ``value`` as ``bytes`` or raise :class:`InvalidLength` unless it is exactly ``size`` long."""
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidLength(
            field, size, -1,
            f"{field} must be {size} bytes (got {type(value).__name__})",
        )
    data = bytes(value)
    if len(data) != size:
        raise InvalidLength(field, size, len(data))
    return data


def require_int(field: str, value: object, minimum: int, maximum: int) -> int:
    """Return ``value`` if it is an integer in ``[minimum, maximum]``, else raise :class:`InvalidRange`."""
    # bool is an int subclass but never a meaningful protocol number
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRange(
            field, f"an integer in [{minimum}, {maximum}]", value,
            f"{field} must be an integer (got {type(value).__name__})",
        )
    if value < minimum or value > maximum:
        raise InvalidRange(field, f"in [{minimum}, {maximum}]", value)
    return value


def pack_u16_le(field: str, value: int) -> bytes:
    return require_int(field, value, 0, U16_MAX).to_bytes(2, "little")


def pack_u64_le(field: str, value: int) -> bytes:
    return require_int(field, value, 0, U64_MAX).to_bytes(8, "little")


def pack_i128_le(field: str, value: int) -> bytes:
    """Pack a signed integer as 16-byte little-endian two's complement."""
    return require_int(field, value, I128_MIN, I128_MAX).to_bytes(16, "little", signed=True)


def to_hex(data: BytesLike) -> str:
    return bytes(data).hex()


def from_hex(field: str, text: str, size: int) -> bytes:
    """
    Decode a hex string (optionally ``0x``-prefixed) of exactly ``size`` bytes.

    Raises:
        InvalidLength: If the text is not valid hex or decodes to the wrong size
    """
    if not isinstance(text, str):
        raise InvalidLength(
            field, size, -1,
            f"{field} must be a hex string (got {type(text).__name__})",
        )
    cleaned = text.strip()
    if cleaned[:2].lower() == "0x":
        cleaned = cleaned[2:]
    try:
        data = bytes.fromhex(cleaned)
    except ValueError as exc:
        raise InvalidLength(field, size, -1, f"{field} is not valid hex: {text!r}") from exc
    return require_bytes(field, data, size)
