"""
Replay events for the three reputation chains.

Each event carries the positional context and content hash(es) needed to
recompute its leaf, plus an optional ``stored_digest``: the running digest
the event source recorded after this event, used for cross-validation.

Records from an indexer are plain mappings with snake_case keys. Keys and
hashes may be hex strings (with or without ``0x``) or raw bytes; index and
slot may be integers or decimal strings. Base58 public keys are not decoded
here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Tuple, Type, Union

from reputation.chain import ChainKind
from reputation.errors import EventDecodeError, ReputationError
from reputation.hashing import DIGEST_LEN, U64_MAX, from_hex, require_bytes, require_int
from reputation.leaves import (
    KEY_LEN,
    compute_feedback_leaf,
    compute_response_leaf,
    compute_revoke_leaf,
)


def _check_context(event: Any, hash_fields: Tuple[str, ...]) -> None:
    require_bytes("asset", event.asset, KEY_LEN)
    require_bytes("client", event.client, KEY_LEN)
    require_int("feedback_index", event.feedback_index, 0, U64_MAX)
    for name in hash_fields:
        require_bytes(name, getattr(event, name), DIGEST_LEN)
    require_int("slot", event.slot, 0, U64_MAX)
    if event.stored_digest is not None:
        require_bytes("stored_digest", event.stored_digest, DIGEST_LEN)


@dataclass(frozen=True)
class FeedbackEvent:
    """A feedback appended to an agent's feedback chain."""

    kind: ClassVar[ChainKind] = ChainKind.FEEDBACK

    asset: bytes
    client: bytes
    feedback_index: int
    seal_hash: bytes
    slot: int
    stored_digest: Optional[bytes] = None

    def validate(self) -> None:
        _check_context(self, ("seal_hash",))

    def leaf_hash(self) -> bytes:
        return compute_feedback_leaf(
            self.asset, self.client, self.feedback_index, self.seal_hash, self.slot
        )


@dataclass(frozen=True)
class ResponseEvent:
    """A response to a feedback, appended to the response chain."""

    kind: ClassVar[ChainKind] = ChainKind.RESPONSE

    asset: bytes
    client: bytes
    feedback_index: int
    responder: bytes
    response_hash: bytes
    feedback_hash: bytes
    slot: int
    stored_digest: Optional[bytes] = None

    def validate(self) -> None:
        _check_context(self, ("responder", "response_hash", "feedback_hash"))

    def leaf_hash(self) -> bytes:
        return compute_response_leaf(
            self.asset,
            self.client,
            self.feedback_index,
            self.responder,
            self.response_hash,
            self.feedback_hash,
            self.slot,
        )


@dataclass(frozen=True)
class RevokeEvent:
    """A revocation of a feedback, appended to the revoke chain."""

    kind: ClassVar[ChainKind] = ChainKind.REVOKE

    asset: bytes
    client: bytes
    feedback_index: int
    feedback_hash: bytes
    slot: int
    stored_digest: Optional[bytes] = None

    def validate(self) -> None:
        _check_context(self, ("feedback_hash",))

    def leaf_hash(self) -> bytes:
        return compute_revoke_leaf(
            self.asset, self.client, self.feedback_index, self.feedback_hash, self.slot
        )


ReplayEvent = Union[FeedbackEvent, ResponseEvent, RevokeEvent]

EVENT_TYPES: Dict[ChainKind, Type[Any]] = {
    ChainKind.FEEDBACK: FeedbackEvent,
    ChainKind.RESPONSE: ResponseEvent,
    ChainKind.REVOKE: RevokeEvent,
}

# content key -> accepted record keys, first match wins
_HASH_KEYS: Dict[ChainKind, Dict[str, Tuple[str, ...]]] = {
    ChainKind.FEEDBACK: {
        "seal_hash": ("seal_hash", "feedback_hash"),
    },
    ChainKind.RESPONSE: {
        "responder": ("responder",),
        "response_hash": ("response_hash",),
        "feedback_hash": ("feedback_hash", "seal_hash"),
    },
    ChainKind.REVOKE: {
        "feedback_hash": ("feedback_hash", "seal_hash"),
    },
}

_DIGEST_KEYS = ("stored_digest", "running_digest")


def _lookup(record: Mapping[str, Any], keys: Tuple[str, ...]) -> Tuple[str, Any]:
    for key in keys:
        if record.get(key) is not None:
            return key, record[key]
    return keys[0], None


def _decode_bytes(position: int, key: str, value: Any, size: int) -> bytes:
    try:
        if isinstance(value, str):
            return from_hex(key, value, size)
        return require_bytes(key, value, size)
    except ReputationError as exc:
        raise EventDecodeError(position, key, str(exc)) from exc


def _decode_u64(position: int, key: str, value: Any) -> int:
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    try:
        return require_int(key, value, 0, U64_MAX)
    except ReputationError as exc:
        raise EventDecodeError(position, key, str(exc)) from exc


def decode_event(kind: ChainKind, record: Mapping[str, Any], position: int = 0) -> ReplayEvent:
    """
    Build a typed replay event from an indexer record.

    Args:
        kind: Chain the record belongs to
        record: Mapping with the event's context and hash fields
        position: Record position, used in error messages

    Raises:
        EventDecodeError: If a field is missing or malformed
    """
    if not isinstance(record, Mapping):
        raise EventDecodeError(position, "<record>", f"expected a mapping, got {type(record).__name__}")

    fields: Dict[str, Any] = {}
    for key, size in (("asset", KEY_LEN), ("client", KEY_LEN)):
        if record.get(key) is None:
            raise EventDecodeError(position, key, "missing")
        fields[key] = _decode_bytes(position, key, record[key], size)

    for key in ("feedback_index", "slot"):
        if record.get(key) is None:
            raise EventDecodeError(position, key, "missing")
        fields[key] = _decode_u64(position, key, record[key])

    for name, aliases in _HASH_KEYS[kind].items():
        key, value = _lookup(record, aliases)
        if value is None:
            raise EventDecodeError(position, key, "missing")
        fields[name] = _decode_bytes(position, key, value, DIGEST_LEN)

    key, value = _lookup(record, _DIGEST_KEYS)
    fields["stored_digest"] = None if value is None else _decode_bytes(position, key, value, DIGEST_LEN)

    return EVENT_TYPES[kind](**fields)


def decode_events(kind: ChainKind, records: Iterable[Mapping[str, Any]]) -> List[ReplayEvent]:
    """Decode every record in order; see :func:`decode_event`."""
    return [decode_event(kind, record, position) for position, record in enumerate(records)]


__all__ = [
    "FeedbackEvent",
    "ResponseEvent",
    "RevokeEvent",
    "ReplayEvent",
    "EVENT_TYPES",
    "decode_event",
    "decode_events",
]
