"""
Multi-Chain Integrity Verification
==================================

Higher-level verifier that checks all three chains of one agent against the
heads reported by the chain (or an indexer):

1. Each chain is replayed independently, optionally resuming from a
   previously verified checkpoint.
2. Stored digests carried by the events are cross-validated during replay.
3. The replayed final digest and count are compared with the expected head.

A chain passes only when replay is valid AND its final state matches the
head. Mismatches are reported as results, not raised.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from reputation.chain import ChainKind
from reputation.errors import InvalidLength
from reputation.events import ReplayEvent
from reputation.hashing import (
    DIGEST_LEN,
    U64_MAX,
    ZERO_DIGEST,
    from_hex,
    require_bytes,
    require_int,
    to_hex,
)
from reputation.replay import ReplayResult, replay_chain

logger = logging.getLogger(__name__)

KindKey = Union[ChainKind, str]


@dataclass(frozen=True)
class ChainHead:
    """Digest and event count of a chain as reported on-chain."""

    digest: bytes = ZERO_DIGEST
    count: int = 0

    @classmethod
    def from_hex(cls, digest: str, count: int) -> "ChainHead":
        return cls(from_hex("digest", digest, DIGEST_LEN), require_int("count", count, 0, U64_MAX))


@dataclass(frozen=True)
class Checkpoint:
    """A previously verified chain state to resume replay from."""

    digest: bytes
    count: int
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Checkpoint":
        """Parse an indexer checkpoint (``digest`` hex, ``event_count``)."""
        if data.get("digest") is None:
            raise InvalidLength("digest", DIGEST_LEN, -1, "checkpoint digest is missing")
        count = data.get("event_count", data.get("count"))
        return cls(
            digest=from_hex("digest", data["digest"], DIGEST_LEN),
            count=require_int("event_count", count, 0, U64_MAX),
            created_at=data.get("created_at"),
        )


@dataclass(frozen=True)
class CheckpointSet:
    """Latest checkpoint per chain; any of them may be absent."""

    feedback: Optional[Checkpoint] = None
    response: Optional[Checkpoint] = None
    revoke: Optional[Checkpoint] = None

    def for_kind(self, kind: ChainKind) -> Optional[Checkpoint]:
        return getattr(self, ChainKind.from_name(kind).value)


@dataclass
class ChainVerification:
    """Verification of one chain against its expected head."""

    kind: ChainKind
    valid: bool
    match: bool
    computed_digest: str
    expected_digest: str
    computed_count: int
    expected_count: int
    replay: ReplayResult

    @property
    def ok(self) -> bool:
        return self.valid and self.match

    def __str__(self) -> str:
        if self.ok:
            return f"{self.kind.value}: OK ({self.computed_count} events, {self.computed_digest[:16]}...)"
        if not self.valid:
            return (
                f"{self.kind.value}: stored digest mismatch at event {self.replay.mismatch_at}: "
                f"expected {self.replay.mismatch_expected[:16]}..., "
                f"computed {self.replay.mismatch_computed[:16]}..."
            )
        return (
            f"{self.kind.value}: head mismatch: computed {self.computed_digest[:16]}... "
            f"({self.computed_count} events), expected {self.expected_digest[:16]}... "
            f"({self.expected_count} events)"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "valid": self.valid,
            "match": self.match,
            "computed_digest": self.computed_digest,
            "expected_digest": self.expected_digest,
            "computed_count": self.computed_count,
            "expected_count": self.expected_count,
            "replay": self.replay.to_dict(),
        }


@dataclass
class FullVerificationResult:
    """Verification of the feedback, response and revoke chains of one agent."""

    feedback: ChainVerification
    response: ChainVerification
    revoke: ChainVerification
    duration: float = 0.0
    valid: bool = field(init=False)

    def __post_init__(self):
        self.valid = all(chain.ok for chain in self.chains())

    def chains(self):
        return (self.feedback, self.response, self.revoke)

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "Hash-Chain Integrity Report",
            "===========================",
        ]
        for chain in self.chains():
            lines.append(f"  - {chain}")
        lines.append("")
        lines.append(f"Result: {'PASS' if self.valid else 'FAIL'} ({self.duration:.3f}s)")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "feedback": self.feedback.to_dict(),
            "response": self.response.to_dict(),
            "revoke": self.revoke.to_dict(),
            "duration": self.duration,
        }


def verify_chain_head(
    kind: ChainKind,
    events: Iterable[ReplayEvent],
    expected: ChainHead,
    checkpoint: Optional[Checkpoint] = None,
) -> ChainVerification:
    """
    Replay one chain and compare its final state with ``expected``.

    Args:
        kind: Chain to verify
        events: Events appended after ``checkpoint`` (or since genesis)
        expected: Head reported on-chain
        checkpoint: Verified state to resume from

    Returns:
        ChainVerification with replay outcome and head comparison
    """
    kind = ChainKind.from_name(kind)
    expected_digest = require_bytes("expected digest", expected.digest, DIGEST_LEN)
    expected_count = require_int("expected count", expected.count, 0, U64_MAX)

    if checkpoint is not None:
        logger.debug("Resuming %s chain from checkpoint at count %d", kind.value, checkpoint.count)
        result = replay_chain(kind, events, checkpoint.digest, checkpoint.count)
    else:
        result = replay_chain(kind, events)

    match = result.final_digest == expected_digest and result.count == expected_count
    if result.valid and not match:
        logger.warning(
            "%s chain head mismatch: computed %s (%d), expected %s (%d)",
            kind.value, result.final_digest_hex, result.count,
            to_hex(expected_digest), expected_count,
        )

    return ChainVerification(
        kind=kind,
        valid=result.valid,
        match=match,
        computed_digest=result.final_digest_hex,
        expected_digest=to_hex(expected_digest),
        computed_count=result.count,
        expected_count=expected_count,
        replay=result,
    )


def _by_kind(mapping: Optional[Mapping[KindKey, Any]]) -> Dict[ChainKind, Any]:
    if not mapping:
        return {}
    return {
        key if isinstance(key, ChainKind) else ChainKind.from_name(key): value
        for key, value in mapping.items()
    }


def verify_integrity(
    events_by_kind: Mapping[KindKey, Iterable[ReplayEvent]],
    heads: Mapping[KindKey, ChainHead],
    checkpoints: Optional[CheckpointSet] = None,
) -> FullVerificationResult:
    """
    Verify all three chains of one agent.

    A chain with no events and no head is checked against the genesis state.

    Args:
        events_by_kind: Events per chain kind, in append order
        heads: Expected head per chain kind
        checkpoints: Optional verified checkpoints to resume from

    Returns:
        FullVerificationResult; ``valid`` only when every chain passes
    """
    started = time.perf_counter()
    events = _by_kind(events_by_kind)
    expected = _by_kind(heads)
    checkpoints = checkpoints or CheckpointSet()

    results = {
        kind: verify_chain_head(
            kind,
            events.get(kind, ()),
            expected.get(kind, ChainHead()),
            checkpoints.for_kind(kind),
        )
        for kind in ChainKind
    }

    return FullVerificationResult(
        feedback=results[ChainKind.FEEDBACK],
        response=results[ChainKind.RESPONSE],
        revoke=results[ChainKind.REVOKE],
        duration=time.perf_counter() - started,
    )


__all__ = [
    "ChainHead",
    "Checkpoint",
    "CheckpointSet",
    "ChainVerification",
    "FullVerificationResult",
    "verify_chain_head",
    "verify_integrity",
]
