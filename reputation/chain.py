"""
Chain folding primitive and chain kinds.

    digest' = keccak256(digest || chain_domain || leaf)

The same primitive advances all three chains; the chain identity comes only
from the domain the caller passes. :class:`ChainKind` pairs each chain's
domain with its leaf encoder so the two cannot be mismatched.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict

from reputation.errors import InvalidLength, InvalidRange
from reputation.hashing import (
    CHAIN_DOMAIN_LENGTHS,
    CHAIN_DOMAINS,
    DIGEST_LEN,
    DOMAIN_FEEDBACK,
    DOMAIN_LEAF_V1,
    DOMAIN_RESPONSE,
    DOMAIN_RESPONSE_LEAF_V1,
    DOMAIN_REVOKE,
    DOMAIN_REVOKE_LEAF_V1,
    BytesLike,
    keccak256,
    require_bytes,
)
from reputation.leaves import (
    compute_feedback_leaf,
    compute_response_leaf,
    compute_revoke_leaf,
)


def chain_hash(
    prev_digest: BytesLike,
    domain: BytesLike,
    leaf: BytesLike,
    *,
    strict: bool = False,
) -> bytes:
    """
    Advance a chain digest by one leaf.

    By default the domain is only checked for a length used by a chain
    domain (16 or 14 bytes). With ``strict=True`` it must equal one of the
    three chain domain constants.

    Args:
        prev_digest: Current chain digest (32 bytes)
        domain: Chain domain separator
        leaf: Leaf hash to fold in (32 bytes)
        strict: Require an exact chain domain value

    Returns:
        Next 32-byte digest

    Raises:
        InvalidLength: Wrong digest, leaf or domain length
        InvalidRange: Unknown domain value in strict mode
    """
    prev = require_bytes("prev_digest", prev_digest, DIGEST_LEN)
    if not isinstance(domain, (bytes, bytearray, memoryview)):
        raise InvalidLength(
            "domain", "16 or 14", -1,
            f"domain must be bytes (got {type(domain).__name__})",
        )
    domain_bytes = bytes(domain)
    if len(domain_bytes) not in CHAIN_DOMAIN_LENGTHS:
        raise InvalidLength("domain", "16 or 14", len(domain_bytes))
    if strict and domain_bytes not in CHAIN_DOMAINS:
        raise InvalidRange("domain", "a known chain domain", domain_bytes)
    leaf_bytes = require_bytes("leaf", leaf, DIGEST_LEN)
    return keccak256(prev, domain_bytes, leaf_bytes)


class ChainKind(str, Enum):
    """The three append-only event chains of the reputation registry."""

    FEEDBACK = "feedback"
    RESPONSE = "response"
    REVOKE = "revoke"

    @classmethod
    def from_name(cls, name: str) -> "ChainKind":
        try:
            return cls(name.strip().lower())
        except (AttributeError, ValueError) as exc:
            raise InvalidRange(
                "chain kind", "one of feedback, response, revoke", name
            ) from exc

    @property
    def domain(self) -> bytes:
        return _CHAIN_DOMAIN_BY_KIND[self]

    @property
    def leaf_domain(self) -> bytes:
        return _LEAF_DOMAIN_BY_KIND[self]

    @property
    def leaf_encoder(self) -> Callable[..., bytes]:
        return _LEAF_ENCODER_BY_KIND[self]

    def advance(self, prev_digest: BytesLike, leaf: BytesLike) -> bytes:
        """Fold ``leaf`` into ``prev_digest`` using this chain's domain."""
        return chain_hash(prev_digest, self.domain, leaf)


_CHAIN_DOMAIN_BY_KIND: Dict[ChainKind, bytes] = {
    ChainKind.FEEDBACK: DOMAIN_FEEDBACK,
    ChainKind.RESPONSE: DOMAIN_RESPONSE,
    ChainKind.REVOKE: DOMAIN_REVOKE,
}

_LEAF_DOMAIN_BY_KIND: Dict[ChainKind, bytes] = {
    ChainKind.FEEDBACK: DOMAIN_LEAF_V1,
    ChainKind.RESPONSE: DOMAIN_RESPONSE_LEAF_V1,
    ChainKind.REVOKE: DOMAIN_REVOKE_LEAF_V1,
}

_LEAF_ENCODER_BY_KIND: Dict[ChainKind, Callable[..., bytes]] = {
    ChainKind.FEEDBACK: compute_feedback_leaf,
    ChainKind.RESPONSE: compute_response_leaf,
    ChainKind.REVOKE: compute_revoke_leaf,
}


__all__ = [
    "chain_hash",
    "ChainKind",
]
