"""Agent reputation registry hash-chain verification."""

from .errors import (
    ConfigError,
    EventDecodeError,
    InvalidLength,
    InvalidRange,
    ReputationError,
)
from .hashing import (
    DOMAIN_FEEDBACK,
    DOMAIN_LEAF_V1,
    DOMAIN_RESPONSE,
    DOMAIN_RESPONSE_LEAF_V1,
    DOMAIN_REVOKE,
    DOMAIN_REVOKE_LEAF_V1,
    DOMAIN_SEAL_V1,
    ZERO_DIGEST,
    keccak256,
)
from .seal import (
    SealParams,
    compute_seal_hash,
    create_seal_params,
    encode_seal,
    validate_seal_inputs,
    verify_seal_hash,
)
from .leaves import (
    compute_feedback_leaf,
    compute_response_leaf,
    compute_revoke_leaf,
)
from .chain import ChainKind, chain_hash
from .events import (
    FeedbackEvent,
    ResponseEvent,
    RevokeEvent,
    decode_event,
    decode_events,
)
from .replay import (
    ChainReplayer,
    ChainState,
    ReplayResult,
    replay_chain,
    replay_feedback_chain,
    replay_response_chain,
    replay_revoke_chain,
)
from .integrity import (
    ChainHead,
    ChainVerification,
    Checkpoint,
    CheckpointSet,
    FullVerificationResult,
    verify_chain_head,
    verify_integrity,
)
from .value_encoding import EncodedValue, decode_decimal_value, encode_decimal_value

__version__ = "0.6.0"

__all__: list[str] = [
    "ConfigError",
    "EventDecodeError",
    "InvalidLength",
    "InvalidRange",
    "ReputationError",
    "DOMAIN_FEEDBACK",
    "DOMAIN_LEAF_V1",
    "DOMAIN_RESPONSE",
    "DOMAIN_RESPONSE_LEAF_V1",
    "DOMAIN_REVOKE",
    "DOMAIN_REVOKE_LEAF_V1",
    "DOMAIN_SEAL_V1",
    "ZERO_DIGEST",
    "keccak256",
    "SealParams",
    "compute_seal_hash",
    "create_seal_params",
    "encode_seal",
    "validate_seal_inputs",
    "verify_seal_hash",
    "compute_feedback_leaf",
    "compute_response_leaf",
    "compute_revoke_leaf",
    "ChainKind",
    "chain_hash",
    "FeedbackEvent",
    "ResponseEvent",
    "RevokeEvent",
    "decode_event",
    "decode_events",
    "ChainReplayer",
    "ChainState",
    "ReplayResult",
    "replay_chain",
    "replay_feedback_chain",
    "replay_response_chain",
    "replay_revoke_chain",
    "ChainHead",
    "ChainVerification",
    "Checkpoint",
    "CheckpointSet",
    "FullVerificationResult",
    "verify_chain_head",
    "verify_integrity",
    "EncodedValue",
    "decode_decimal_value",
    "encode_decimal_value",
]
