"""
Leaf Hash Computation
=====================

A leaf binds a content hash to immutable positional context (asset, client,
feedback index, slot) so the same content cannot be replayed at another
position or into another chain. Each chain kind has its own 16-byte leaf
domain:

    feedback:  DOMAIN_LEAF_V1          || asset || client || index || seal_hash || slot
    response:  DOMAIN_RESPONSE_LEAF_V1 || asset || client || index || responder
                                       || response_hash || feedback_hash || slot
    revoke:    DOMAIN_REVOKE_LEAF_V1   || asset || client || index || feedback_hash || slot

Keys and hashes are 32 bytes; index and slot are u64 little-endian.
"""

from __future__ import annotations

from reputation.hashing import (
    DIGEST_LEN,
    DOMAIN_LEAF_V1,
    DOMAIN_RESPONSE_LEAF_V1,
    DOMAIN_REVOKE_LEAF_V1,
    BytesLike,
    keccak256,
    pack_u64_le,
    require_bytes,
)

KEY_LEN = 32


def compute_feedback_leaf(
    asset: BytesLike,
    client: BytesLike,
    feedback_index: int,
    seal_hash: BytesLike,
    slot: int,
) -> bytes:
    """
    Compute the feedback leaf for one feedback event.

    Args:
        asset: Agent asset public key (32 bytes)
        client: Client public key (32 bytes)
        feedback_index: Per-client feedback index (u64)
        seal_hash: Seal hash of the feedback content (32 bytes)
        slot: Slot the event was recorded in (u64)

    Returns:
        32-byte Keccak-256 digest

    Raises:
        InvalidLength: If any fixed-length field has the wrong size
        InvalidRange: If index or slot do not fit in u64
    """
    parts = (
        DOMAIN_LEAF_V1,
        require_bytes("asset", asset, KEY_LEN),
        require_bytes("client", client, KEY_LEN),
        pack_u64_le("feedback_index", feedback_index),
        require_bytes("seal_hash", seal_hash, DIGEST_LEN),
        pack_u64_le("slot", slot),
    )
    return keccak256(*parts)


def compute_response_leaf(
    asset: BytesLike,
    client: BytesLike,
    feedback_index: int,
    responder: BytesLike,
    response_hash: BytesLike,
    feedback_hash: BytesLike,
    slot: int,
) -> bytes:
    """Compute the response leaf for one response appended to a feedback."""
    parts = (
        DOMAIN_RESPONSE_LEAF_V1,
        require_bytes("asset", asset, KEY_LEN),
        require_bytes("client", client, KEY_LEN),
        pack_u64_le("feedback_index", feedback_index),
        require_bytes("responder", responder, KEY_LEN),
        require_bytes("response_hash", response_hash, DIGEST_LEN),
        require_bytes("feedback_hash", feedback_hash, DIGEST_LEN),
        pack_u64_le("slot", slot),
    )
    return keccak256(*parts)


def compute_revoke_leaf(
    asset: BytesLike,
    client: BytesLike,
    feedback_index: int,
    feedback_hash: BytesLike,
    slot: int,
) -> bytes:
    """Compute the revoke leaf for one revocation of a feedback."""
    parts = (
        DOMAIN_REVOKE_LEAF_V1,
        require_bytes("asset", asset, KEY_LEN),
        require_bytes("client", client, KEY_LEN),
        pack_u64_le("feedback_index", feedback_index),
        require_bytes("feedback_hash", feedback_hash, DIGEST_LEN),
        pack_u64_le("slot", slot),
    )
    return keccak256(*parts)


__all__ = [
    "KEY_LEN",
    "compute_feedback_leaf",
    "compute_response_leaf",
    "compute_revoke_leaf",
]
