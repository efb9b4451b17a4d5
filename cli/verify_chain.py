#!/usr/bin/env python3
"""
Reputation Hash-Chain Verifier (verify_chain)

Replays one chain of reputation events from a JSON or YAML file and checks
it against the digests stored in the events and, optionally, an expected
on-chain head.

Usage:
    python -m cli.verify_chain \
        --events artifacts/feedback_events.json \
        --kind feedback \
        --expected-digest 7c85786d... --expected-count 3 \
        --output artifacts/feedback_replay.json

The events file holds a list of records, or a mapping with an ``events``
list. Record keys: asset, client, feedback_index, slot, seal_hash or
feedback_hash, responder, response_hash, running_digest.

Exit Codes:
    0 - chain verified
    1 - digest mismatch (stored digest or expected head)
    2 - invalid input, configuration or I/O error
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml
from dotenv import load_dotenv

from reputation.chain import ChainKind
from reputation.config import load_config
from reputation.errors import EventDecodeError, ReputationError
from reputation.events import decode_events
from reputation.hashing import ZERO_DIGEST, from_hex
from reputation.integrity import ChainHead, Checkpoint, verify_chain_head
from reputation.replay import replay_chain

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

logger = logging.getLogger(__name__)


def load_event_records(path: Path) -> List[Dict[str, Any]]:
    """
    Load event records from a JSON or YAML file.

    Raises:
        EventDecodeError: If the file does not hold a list of records
    """
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if isinstance(data, dict):
        data = data.get("events")
    if not isinstance(data, list):
        raise EventDecodeError(-1, "events", f"{path} must contain a list of event records")
    return data


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay and verify a reputation hash chain",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
    0 - chain verified
    1 - digest mismatch
    2 - input or I/O error
        """,
    )
    parser.add_argument(
        "--events",
        type=Path,
        required=True,
        help="JSON or YAML file with event records in append order",
    )
    parser.add_argument(
        "--kind",
        choices=[kind.value for kind in ChainKind],
        default=None,
        help="Chain kind (default from config, else feedback)",
    )
    parser.add_argument("--expected-digest", default=None, help="Expected on-chain head digest (hex)")
    parser.add_argument("--expected-count", type=int, default=None, help="Expected on-chain event count")
    parser.add_argument("--start-digest", default=None, help="Checkpoint digest to resume from (hex)")
    parser.add_argument("--start-count", type=int, default=None, help="Event count at the checkpoint")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to verifier configuration YAML file",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file path for JSON result",
    )
    parser.add_argument("--json-stdout", action="store_true", help="Print JSON result to stdout")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress the PASS/FAIL line")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for the chain verifier.

    Returns:
        Exit code (see module docstring)
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if (args.expected_digest is None) != (args.expected_count is None):
        parser.error("--expected-digest and --expected-count must be given together")
    if args.start_count is not None and args.start_digest is None:
        parser.error("--start-count requires --start-digest")

    load_dotenv()

    try:
        config = load_config(args.config)
    except ReputationError as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error(f"Configuration error: {e}")
        return EXIT_ERROR

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level_number,
        format=LOG_FORMAT,
    )

    kind = ChainKind(args.kind) if args.kind else config.chain_kind
    output = args.output or (Path(config.output) if config.output else None)

    try:
        records = load_event_records(args.events)
        events = decode_events(kind, records)
        logger.info(f"Loaded {len(events)} {kind.value} event(s) from {args.events}")

        checkpoint = None
        if args.start_digest is not None:
            checkpoint = Checkpoint(
                digest=from_hex("start_digest", args.start_digest, len(ZERO_DIGEST)),
                count=args.start_count or 0,
            )

        if args.expected_digest is not None:
            head = ChainHead.from_hex(args.expected_digest, args.expected_count)
            verification = verify_chain_head(kind, events, head, checkpoint)
            ok = verification.ok
            report: Dict[str, Any] = verification.to_dict()
            line = str(verification)
        else:
            if checkpoint is not None:
                result = replay_chain(kind, events, checkpoint.digest, checkpoint.count)
            else:
                result = replay_chain(kind, events)
            ok = result.valid
            report = {"kind": kind.value, **result.to_dict()}
            if ok:
                line = f"{kind.value}: OK ({result.count} events, {result.final_digest_hex})"
            else:
                line = (
                    f"{kind.value}: stored digest mismatch at event {result.mismatch_at}: "
                    f"expected {result.mismatch_expected}, computed {result.mismatch_computed}"
                )
    except (ValueError, OSError, yaml.YAMLError) as e:
        logger.error(f"Verification error: {e}")
        return EXIT_ERROR

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, sort_keys=True)
        logger.info(f"Result written to: {output}")

    if args.json_stdout:
        print(json.dumps(report, indent=2, sort_keys=True))

    if not args.quiet:
        print(f"[{'PASS' if ok else 'FAIL'}] {line}")

    return EXIT_OK if ok else EXIT_MISMATCH


if __name__ == "__main__":
    sys.exit(main())
