"""
Seal Hash Computation
=====================

A seal hash fingerprints the semantic content of one feedback event,
independent of where or when it is later referenced on-chain.

Binary layout (fixed fields first, then dynamic fields):

    offset 0   domain "8004_SEAL_V1____"          16 bytes
    offset 16  value, i128 little-endian          16 bytes
    offset 32  value_decimals                      1 byte
    offset 33  score flag (0 = absent, 1 = set)    1 byte
    offset 34  score value (0 when absent)         1 byte
    offset 35  file hash flag                      1 byte
    offset 36  file hash (only when flag = 1)     32 bytes
    then       tag1, tag2, endpoint, feedback_uri,
               each as u16 LE length + UTF-8 bytes

Hash: Keccak-256 over the full pre-image. Every bound is checked before a
single byte is hashed; nothing is truncated or clamped.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Any, Dict, Optional

from reputation.errors import InvalidLength
from reputation.hashing import (
    DIGEST_LEN,
    DOMAIN_SEAL_V1,
    I128_MAX,
    I128_MIN,
    BytesLike,
    keccak256,
    pack_i128_le,
    pack_u16_le,
    require_bytes,
    require_int,
    to_hex,
)
from reputation.value_encoding import MAX_VALUE_DECIMALS, DecimalInput, encode_decimal_value

MAX_TAG_LEN = 32
MAX_ENDPOINT_LEN = 250
MAX_URI_LEN = 250
MAX_SCORE = 100


@dataclass(frozen=True)
class SealParams:
    """
    Semantic content of one feedback event.

    ``value`` is a fixed-point number scaled by ``10 ** value_decimals``.
    """

    value: int
    value_decimals: int
    score: Optional[int] = None
    tag1: str = ""
    tag2: str = ""
    endpoint: str = ""
    feedback_uri: str = ""
    feedback_file_hash: Optional[bytes] = None

    @classmethod
    def from_decimal(
        cls,
        value: DecimalInput,
        *,
        score: Optional[int] = None,
        tag1: str = "",
        tag2: str = "",
        endpoint: str = "",
        feedback_uri: str = "",
        feedback_file_hash: Optional[bytes] = None,
    ) -> "SealParams":
        """Build params from a human decimal such as ``"99.77"``."""
        encoded = encode_decimal_value(value)
        return cls(
            value=encoded.value,
            value_decimals=encoded.value_decimals,
            score=score,
            tag1=tag1,
            tag2=tag2,
            endpoint=endpoint,
            feedback_uri=feedback_uri,
            feedback_file_hash=feedback_file_hash,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        return {
            "value": str(self.value),
            "value_decimals": self.value_decimals,
            "score": self.score,
            "tag1": self.tag1,
            "tag2": self.tag2,
            "endpoint": self.endpoint,
            "feedback_uri": self.feedback_uri,
            "feedback_file_hash": (
                to_hex(self.feedback_file_hash) if self.feedback_file_hash is not None else None
            ),
        }

    def compute_hash(self) -> bytes:
        return compute_seal_hash(self)


def _utf8(field: str, text: object, max_len: int) -> bytes:
    if not isinstance(text, str):
        raise InvalidLength(
            field, f"at most {max_len}", -1,
            f"{field} must be a string (got {type(text).__name__})",
        )
    try:
        data = text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidLength(field, f"at most {max_len}", -1, f"{field} is not encodable as UTF-8") from exc
    if len(data) > max_len:
        raise InvalidLength(
            field, f"at most {max_len}", len(data),
            f"{field} exceeds {max_len} bytes (got {len(data)})",
        )
    return data


def _checked_fields(params: SealParams) -> Dict[str, Any]:
    """Run every precondition in order and return the encoded field values."""
    tag1 = _utf8("tag1", params.tag1, MAX_TAG_LEN)
    tag2 = _utf8("tag2", params.tag2, MAX_TAG_LEN)
    endpoint = _utf8("endpoint", params.endpoint, MAX_ENDPOINT_LEN)
    feedback_uri = _utf8("feedback_uri", params.feedback_uri, MAX_URI_LEN)
    decimals = require_int("value_decimals", params.value_decimals, 0, MAX_VALUE_DECIMALS)
    score = None
    if params.score is not None:
        score = require_int("score", params.score, 0, MAX_SCORE)
    value = require_int("value", params.value, I128_MIN, I128_MAX)
    file_hash = None
    if params.feedback_file_hash is not None:
        file_hash = require_bytes("feedback_file_hash", params.feedback_file_hash, DIGEST_LEN)
    return {
        "strings": (tag1, tag2, endpoint, feedback_uri),
        "value_decimals": decimals,
        "score": score,
        "value": value,
        "feedback_file_hash": file_hash,
    }


def validate_seal_inputs(params: SealParams) -> None:
    """
    Check every seal precondition without hashing.

    Raises:
        InvalidLength: Tag, endpoint or URI too long, or file hash not 32 bytes
        InvalidRange: value_decimals, score or value out of range
    """
    _checked_fields(params)


def encode_seal(params: SealParams) -> bytes:
    """Return the canonical seal pre-image for ``params``."""
    fields = _checked_fields(params)

    parts = [
        DOMAIN_SEAL_V1,
        pack_i128_le("value", fields["value"]),
        bytes([fields["value_decimals"]]),
    ]
    if fields["score"] is None:
        parts.append(b"\x00\x00")
    else:
        parts.append(bytes([1, fields["score"]]))

    file_hash = fields["feedback_file_hash"]
    if file_hash is None:
        parts.append(b"\x00")
    else:
        parts.append(b"\x01")
        parts.append(file_hash)

    for name, data in zip(("tag1", "tag2", "endpoint", "feedback_uri"), fields["strings"]):
        parts.append(pack_u16_le(f"{name} length", len(data)))
        parts.append(data)

    return b"".join(parts)


def compute_seal_hash(params: SealParams) -> bytes:
    """
    Compute the 32-byte seal hash of ``params``.

    Returns:
        Keccak-256 digest of :func:`encode_seal`
    """
    return keccak256(encode_seal(params))


def verify_seal_hash(params: SealParams, seal_hash: BytesLike) -> bool:
    """Return True if ``seal_hash`` is the seal hash of ``params``."""
    expected = require_bytes("seal_hash", seal_hash, DIGEST_LEN)
    return hmac.compare_digest(compute_seal_hash(params), expected)


def create_seal_params(
    value: int,
    value_decimals: int,
    score: Optional[int],
    tag1: str,
    tag2: str,
    endpoint: str,
    feedback_uri: str,
    feedback_file_hash: Optional[bytes] = None,
) -> SealParams:
    return SealParams(
        value=value,
        value_decimals=value_decimals,
        score=score,
        tag1=tag1,
        tag2=tag2,
        endpoint=endpoint,
        feedback_uri=feedback_uri,
        feedback_file_hash=feedback_file_hash,
    )


__all__ = [
    "MAX_TAG_LEN",
    "MAX_ENDPOINT_LEN",
    "MAX_URI_LEN",
    "MAX_SCORE",
    "MAX_VALUE_DECIMALS",
    "SealParams",
    "validate_seal_inputs",
    "encode_seal",
    "compute_seal_hash",
    "verify_seal_hash",
    "create_seal_params",
]
