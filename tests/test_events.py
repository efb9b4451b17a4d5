"""
Tests for replay events and indexer record decoding.
"""

import pytest

from chain_vectors import ASSET, CLIENT, FEEDBACK_DIGESTS, RESPONDER
from reputation.chain import ChainKind
from reputation.errors import EventDecodeError, InvalidLength, InvalidRange
from reputation.events import (
    EVENT_TYPES,
    FeedbackEvent,
    ResponseEvent,
    RevokeEvent,
    decode_event,
    decode_events,
)
from reputation.leaves import compute_response_leaf


class TestEventTypes:

    def test_kinds(self):
        assert FeedbackEvent.kind is ChainKind.FEEDBACK
        assert ResponseEvent.kind is ChainKind.RESPONSE
        assert RevokeEvent.kind is ChainKind.REVOKE
        assert all(EVENT_TYPES[kind].kind is kind for kind in ChainKind)

    def test_response_leaf_hash(self):
        event = ResponseEvent(
            asset=ASSET,
            client=CLIENT,
            feedback_index=3,
            responder=RESPONDER,
            response_hash=bytes([0x22]) * 32,
            feedback_hash=bytes([0x33]) * 32,
            slot=9,
        )
        assert event.leaf_hash() == compute_response_leaf(
            ASSET, CLIENT, 3, RESPONDER, bytes([0x22]) * 32, bytes([0x33]) * 32, 9
        )

    def test_validate_rejects_bad_hash(self):
        event = RevokeEvent(ASSET, CLIENT, 0, bytes(10), 0)
        with pytest.raises(InvalidLength, match="feedback_hash"):
            event.validate()

    def test_validate_rejects_negative_slot(self):
        event = FeedbackEvent(ASSET, CLIENT, 0, bytes(32), -5)
        with pytest.raises(InvalidRange, match="slot"):
            event.validate()


class TestDecodeEvent:

    def test_feedback_record(self, feedback_records):
        event = decode_event(ChainKind.FEEDBACK, feedback_records[1])

        assert isinstance(event, FeedbackEvent)
        assert event.asset == ASSET
        assert event.client == CLIENT
        assert event.feedback_index == 1
        assert event.slot == 1001
        assert event.seal_hash == bytes([0x11]) * 32
        assert event.stored_digest == bytes.fromhex(FEEDBACK_DIGESTS[1])

    def test_feedback_hash_alias(self):
        record = {
            "asset": ASSET,
            "client": CLIENT,
            "feedback_index": 0,
            "feedback_hash": bytes([0x11]) * 32,
            "slot": 1000,
        }
        event = decode_event(ChainKind.FEEDBACK, record)

        assert event.seal_hash == bytes([0x11]) * 32
        assert event.stored_digest is None

    def test_response_record(self):
        record = {
            "asset": ASSET.hex(),
            "client": CLIENT.hex(),
            "feedback_index": "4",
            "responder": RESPONDER.hex(),
            "response_hash": "22" * 32,
            "seal_hash": "33" * 32,
            "slot": 2004,
            "stored_digest": "0x" + "ab" * 32,
        }
        event = decode_event(ChainKind.RESPONSE, record)

        assert isinstance(event, ResponseEvent)
        assert event.feedback_index == 4
        assert event.feedback_hash == bytes([0x33]) * 32
        assert event.stored_digest == bytes([0xAB]) * 32

    def test_revoke_record(self):
        record = {
            "asset": ASSET.hex(),
            "client": CLIENT.hex(),
            "feedback_index": 2,
            "feedback_hash": "44" * 32,
            "slot": 3002,
        }
        event = decode_event(ChainKind.REVOKE, record)

        assert isinstance(event, RevokeEvent)
        assert event.feedback_hash == bytes([0x44]) * 32

    def test_missing_key(self, feedback_records):
        record = dict(feedback_records[0])
        del record["slot"]

        with pytest.raises(EventDecodeError, match="record 3: slot: missing"):
            decode_event(ChainKind.FEEDBACK, record, position=3)

    def test_missing_hash_names_first_alias(self, feedback_records):
        record = dict(feedback_records[0])
        del record["seal_hash"]

        with pytest.raises(EventDecodeError, match="seal_hash: missing"):
            decode_event(ChainKind.FEEDBACK, record)

    def test_bad_hex(self, feedback_records):
        record = dict(feedback_records[0], asset="zz" * 32)

        with pytest.raises(EventDecodeError, match="asset") as exc_info:
            decode_event(ChainKind.FEEDBACK, record)
        assert exc_info.value.key == "asset"

    def test_short_key(self, feedback_records):
        record = dict(feedback_records[0], client="aa" * 31)

        with pytest.raises(EventDecodeError, match="client must be 32 bytes"):
            decode_event(ChainKind.FEEDBACK, record)

    def test_negative_index(self, feedback_records):
        record = dict(feedback_records[0], feedback_index=-1)

        with pytest.raises(EventDecodeError, match="feedback_index"):
            decode_event(ChainKind.FEEDBACK, record)

    def test_non_mapping_record(self):
        with pytest.raises(EventDecodeError, match="expected a mapping"):
            decode_event(ChainKind.REVOKE, ["not", "a", "record"], position=1)

    def test_decode_error_is_value_error(self):
        with pytest.raises(ValueError):
            decode_event(ChainKind.REVOKE, {})


class TestDecodeEvents:

    def test_positions_in_errors(self, feedback_records):
        records = list(feedback_records)
        records[2] = dict(records[2], seal_hash="00")

        with pytest.raises(EventDecodeError) as exc_info:
            decode_events(ChainKind.FEEDBACK, records)
        assert exc_info.value.position == 2

    def test_preserves_order(self, feedback_records):
        events = decode_events(ChainKind.FEEDBACK, feedback_records)
        assert [e.feedback_index for e in events] == [0, 1, 2]
