# tests/conftest.py
import pytest

from chain_vectors import ASSET, CLIENT, FEEDBACK_DIGESTS
from reputation.seal import SealParams


@pytest.fixture
def seal_v1():
    return SealParams(
        value=9977,
        value_decimals=2,
        score=None,
        tag1="uptime",
        tag2="day",
        endpoint="",
        feedback_uri="ipfs://QmTest123",
    )


@pytest.fixture
def seal_v2():
    return SealParams(
        value=-100,
        value_decimals=0,
        score=85,
        tag1="x402-resource-delivered",
        tag2="exact-svm",
        endpoint="https://api.agent.com/mcp",
        feedback_uri="ar://abc123",
        feedback_file_hash=bytes([0x01]) * 32,
    )


@pytest.fixture
def feedback_records():
    """Indexer-style records for three feedback events with stored digests."""
    return [
        {
            "asset": ASSET.hex(),
            "client": "0x" + CLIENT.hex(),
            "feedback_index": i,
            "seal_hash": (bytes([0x11]) * 32).hex(),
            "slot": str(1000 + i),
            "running_digest": FEEDBACK_DIGESTS[i],
        }
        for i in range(3)
    ]
