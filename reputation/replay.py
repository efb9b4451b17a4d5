"""
Hash-Chain Replay
=================

Rebuilds a chain digest from an ordered list of events and reports the
first event whose recomputed digest disagrees with the digest stored next
to it.

For each event, strictly in append order:
1. leaf   = leaf encoder of the chain kind (event context, content hash, slot)
2. digest = keccak256(digest || chain domain || leaf), count += 1
3. if the event carries a stored digest and it differs, stop and report

Events must be supplied in on-chain append order (by slot, not by feedback
index: indices are per client and not globally monotonic). Replay can resume
from a previously verified ``(digest, count)`` checkpoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from reputation.chain import ChainKind
from reputation.errors import InvalidRange
from reputation.events import EVENT_TYPES, FeedbackEvent, ReplayEvent, ResponseEvent, RevokeEvent
from reputation.hashing import DIGEST_LEN, U64_MAX, ZERO_DIGEST, BytesLike, require_bytes, require_int, to_hex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainState:
    """Running digest and event count of one chain."""

    digest: bytes = ZERO_DIGEST
    count: int = 0

    @classmethod
    def checked(cls, digest: BytesLike, count: int) -> "ChainState":
        return cls(
            digest=require_bytes("start_digest", digest, DIGEST_LEN),
            count=require_int("start_count", count, 0, U64_MAX),
        )

    def advance(self, kind: ChainKind, leaf: bytes) -> "ChainState":
        return ChainState(kind.advance(self.digest, leaf), self.count + 1)


@dataclass(frozen=True)
class ReplayResult:
    """Outcome of replaying one chain."""

    final_digest: bytes
    count: int
    valid: bool
    mismatch_at: Optional[int] = None
    mismatch_expected: Optional[str] = None
    mismatch_computed: Optional[str] = None

    @property
    def final_digest_hex(self) -> str:
        return to_hex(self.final_digest)

    def checkpoint(self) -> ChainState:
        """State to resume from; only meaningful for a valid result."""
        return ChainState(self.final_digest, self.count)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "final_digest": self.final_digest_hex,
            "count": self.count,
            "valid": self.valid,
        }
        if not self.valid:
            result["mismatch_at"] = self.mismatch_at
            result["mismatch_expected"] = self.mismatch_expected
            result["mismatch_computed"] = self.mismatch_computed
        return result


class ChainReplayer:
    """
    Replays events of a single chain kind.

    The replayer holds no state between calls; the checkpoint is always an
    explicit argument.
    """

    def __init__(self, kind: ChainKind):
        self.kind = ChainKind.from_name(kind)

    def _checked_events(self, events: Iterable[ReplayEvent]) -> List[ReplayEvent]:
        expected_type = EVENT_TYPES[self.kind]
        checked = list(events)
        for i, event in enumerate(checked):
            if not isinstance(event, expected_type):
                raise InvalidRange(
                    f"events[{i}]", f"a {expected_type.__name__}", event,
                    f"events[{i}] must be a {expected_type.__name__} "
                    f"for the {self.kind.value} chain (got {type(event).__name__})",
                )
            event.validate()
        return checked

    def replay(
        self,
        events: Iterable[ReplayEvent],
        start_digest: BytesLike = ZERO_DIGEST,
        start_count: int = 0,
    ) -> ReplayResult:
        """
        Replay ``events`` on top of ``(start_digest, start_count)``.

        Args:
            events: Events in append order
            start_digest: Digest to resume from (genesis is 32 zero bytes)
            start_count: Event count at ``start_digest``

        Returns:
            ReplayResult; ``valid`` is False at the first stored-digest mismatch

        Raises:
            InvalidLength: Malformed start digest or event field
            InvalidRange: Negative count, out-of-range integer, or wrong event type
        """
        state = ChainState.checked(start_digest, start_count)
        checked = self._checked_events(events)

        logger.debug(
            "Replaying %d %s event(s) from count %d",
            len(checked), self.kind.value, state.count,
        )

        for i, event in enumerate(checked):
            state = state.advance(self.kind, event.leaf_hash())

            if event.stored_digest is not None and state.digest != event.stored_digest:
                logger.warning(
                    "%s chain mismatch at event %d (count %d): expected %s, computed %s",
                    self.kind.value, i, state.count,
                    to_hex(event.stored_digest), to_hex(state.digest),
                )
                return ReplayResult(
                    final_digest=state.digest,
                    count=state.count,
                    valid=False,
                    mismatch_at=i,
                    mismatch_expected=to_hex(event.stored_digest),
                    mismatch_computed=to_hex(state.digest),
                )

        logger.debug(
            "Replayed %s chain to count %d, digest %s",
            self.kind.value, state.count, to_hex(state.digest),
        )
        return ReplayResult(final_digest=state.digest, count=state.count, valid=True)


def replay_chain(
    kind: ChainKind,
    events: Iterable[ReplayEvent],
    start_digest: BytesLike = ZERO_DIGEST,
    start_count: int = 0,
) -> ReplayResult:
    """Replay ``events`` of chain ``kind``; see :meth:`ChainReplayer.replay`."""
    return ChainReplayer(kind).replay(events, start_digest, start_count)


def replay_feedback_chain(
    events: Iterable[FeedbackEvent],
    start_digest: BytesLike = ZERO_DIGEST,
    start_count: int = 0,
) -> ReplayResult:
    return replay_chain(ChainKind.FEEDBACK, events, start_digest, start_count)


def replay_response_chain(
    events: Iterable[ResponseEvent],
    start_digest: BytesLike = ZERO_DIGEST,
    start_count: int = 0,
) -> ReplayResult:
    return replay_chain(ChainKind.RESPONSE, events, start_digest, start_count)


def replay_revoke_chain(
    events: Iterable[RevokeEvent],
    start_digest: BytesLike = ZERO_DIGEST,
    start_count: int = 0,
) -> ReplayResult:
    return replay_chain(ChainKind.REVOKE, events, start_digest, start_count)


__all__ = [
    "ChainState",
    "ReplayResult",
    "ChainReplayer",
    "replay_chain",
    "replay_feedback_chain",
    "replay_response_chain",
    "replay_revoke_chain",
]
