"""Shared golden vectors and event builders for the chain tests."""

from reputation.events import FeedbackEvent, ResponseEvent, RevokeEvent

ASSET = bytes([0xAA]) * 32
CLIENT = bytes([0xBB]) * 32
RESPONDER = bytes([0xCC]) * 32

# Seal hashes cross-checked against the on-chain program
SEAL_V1_HASH = "98f98e22c278d9b7fe8163399aefd87d2ab0c9e27701fcb0c40b6249501a76eb"
SEAL_V2_HASH = "e3a20d8bea1ef7a0a7684d885dc99267c972ef8a9854a1552039198bd186c18f"
SEAL_V3_HASH = "b4aaf59d1fa5cc6a3c0ba0c95d2aa363895952172e7b16330c5dc0d1d8c15383"
SEAL_V4_HASH = "28af8ce8d3689e87398c6e9e0dd12f84e87c533dc6eccddaf4c6df83da4aa7e2"

# Running digests after each of three events from genesis. Derived by hashing
# the concatenated pre-images (prev || chain domain || leaf, each leaf being
# leaf domain || asset || client || index || hashes || slot) directly with
# Keccak-256, independent of the reputation package.
FEEDBACK_DIGESTS = [
    "a0720861821a31d1dce130f22d040853874be00d445119d2c6c0b85711ec8fbc",
    "85ffc7958bd443ac6ed9c0ca58eff23c9ca08f447be08895d03f0e2acef81aa0",
    "7c85786dd57a5872af01f53345f74e27cc42d9d18840b122703622a62c04d380",
]
RESPONSE_DIGESTS = [
    "35e756f5867f9f904c9569d2677c62f750f4d5ad7de3c621e97cb5414fc35c86",
    "41a8010503d0a7f5b54af46ab8c0d582e1f53f2283f7f8e439e4ef5f27a0f4fb",
    "f722d177d15bdd98fe90c66ea16ba7c63e6019ed0ca2764edc8c05980e005dc3",
]
REVOKE_DIGESTS = [
    "7534a0a486354b769ee9d016392066381b5e0fbc6bba754f4ab1cac3747fec2c",
    "049a494519c98155d08302ffd32825e4be431a2c0759884c691a2dc5cdb2794d",
    "eeb71fd0c0bcaa395ec3926884a637aa0b3b28801d59e41de2083589e05fa5d6",
]


def make_feedback_events(n, start=0):
    return [
        FeedbackEvent(
            asset=ASSET,
            client=CLIENT,
            feedback_index=i,
            seal_hash=bytes([0x11]) * 32,
            slot=1000 + i,
        )
        for i in range(start, start + n)
    ]


def make_response_events(n):
    return [
        ResponseEvent(
            asset=ASSET,
            client=CLIENT,
            feedback_index=i,
            responder=RESPONDER,
            response_hash=bytes([0x22]) * 32,
            feedback_hash=bytes([0x33]) * 32,
            slot=2000 + i,
        )
        for i in range(n)
    ]


def make_revoke_events(n):
    return [
        RevokeEvent(
            asset=ASSET,
            client=CLIENT,
            feedback_index=i,
            feedback_hash=bytes([0x44]) * 32,
            slot=3000 + i,
        )
        for i in range(n)
    ]
