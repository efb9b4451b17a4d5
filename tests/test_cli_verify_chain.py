"""
Tests for the verify_chain command-line tool.
"""

import json

import pytest
import yaml

from chain_vectors import FEEDBACK_DIGESTS, REVOKE_DIGESTS, ASSET, CLIENT
from cli.verify_chain import EXIT_ERROR, EXIT_MISMATCH, EXIT_OK, load_event_records, main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("REPUTATION_LOG_LEVEL", "REPUTATION_CHAIN_KIND", "REPUTATION_OUTPUT"):
        monkeypatch.delenv(name, raising=False)
    # keep a developer .env out of the run
    monkeypatch.setattr("cli.verify_chain.load_dotenv", lambda *a, **k: False)


@pytest.fixture
def events_file(tmp_path, feedback_records):
    path = tmp_path / "feedback.json"
    path.write_text(json.dumps(feedback_records))
    return path


def _revoke_records():
    return [
        {
            "asset": ASSET.hex(),
            "client": CLIENT.hex(),
            "feedback_index": i,
            "feedback_hash": "44" * 32,
            "slot": 3000 + i,
        }
        for i in range(3)
    ]


class TestVerifyChainCli:

    def test_valid_chain(self, events_file, capsys):
        assert main(["--events", str(events_file)]) == EXIT_OK

        out = capsys.readouterr().out
        assert "[PASS]" in out
        assert FEEDBACK_DIGESTS[2] in out

    def test_expected_head_match(self, events_file, capsys):
        code = main([
            "--events", str(events_file),
            "--expected-digest", FEEDBACK_DIGESTS[2],
            "--expected-count", "3",
        ])

        assert code == EXIT_OK
        assert "[PASS]" in capsys.readouterr().out

    def test_expected_head_mismatch(self, events_file, capsys):
        code = main([
            "--events", str(events_file),
            "--expected-digest", FEEDBACK_DIGESTS[1],
            "--expected-count", "3",
        ])

        assert code == EXIT_MISMATCH
        assert "[FAIL]" in capsys.readouterr().out

    def test_stored_digest_mismatch(self, tmp_path, feedback_records):
        feedback_records[1]["running_digest"] = "ff" * 32
        path = tmp_path / "tampered.json"
        path.write_text(json.dumps({"events": feedback_records}))

        assert main(["--events", str(path), "--quiet"]) == EXIT_MISMATCH

    def test_yaml_events_and_kind(self, tmp_path, capsys):
        path = tmp_path / "revoke.yaml"
        path.write_text(yaml.safe_dump(_revoke_records()))

        assert main(["--events", str(path), "--kind", "revoke"]) == EXIT_OK
        assert REVOKE_DIGESTS[2] in capsys.readouterr().out

    def test_kind_from_config(self, tmp_path):
        events = tmp_path / "revoke.json"
        events.write_text(json.dumps(_revoke_records()))
        config = tmp_path / "verifier.yaml"
        config.write_text("chain_kind: revoke\n")

        code = main([
            "--events", str(events),
            "--config", str(config),
            "--expected-digest", REVOKE_DIGESTS[2],
            "--expected-count", "3",
        ])
        assert code == EXIT_OK

    def test_resume_from_checkpoint(self, tmp_path, feedback_records):
        path = tmp_path / "tail.json"
        path.write_text(json.dumps(feedback_records[1:]))

        code = main([
            "--events", str(path),
            "--start-digest", FEEDBACK_DIGESTS[0],
            "--start-count", "1",
            "--expected-digest", FEEDBACK_DIGESTS[2],
            "--expected-count", "3",
        ])
        assert code == EXIT_OK

    def test_output_file(self, events_file, tmp_path):
        output = tmp_path / "reports" / "result.json"

        assert main(["--events", str(events_file), "-o", str(output), "-q"]) == EXIT_OK

        report = json.loads(output.read_text())
        assert report["kind"] == "feedback"
        assert report["valid"] is True
        assert report["final_digest"] == FEEDBACK_DIGESTS[2]

    def test_json_stdout(self, events_file, capsys):
        main(["--events", str(events_file), "--json-stdout", "--quiet"])

        report = json.loads(capsys.readouterr().out)
        assert report["count"] == 3

    def test_missing_events_file(self, tmp_path):
        assert main(["--events", str(tmp_path / "nope.json")]) == EXIT_ERROR

    def test_malformed_record(self, tmp_path, feedback_records):
        del feedback_records[0]["asset"]
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(feedback_records))

        assert main(["--events", str(path)]) == EXIT_ERROR

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{")

        assert main(["--events", str(path)]) == EXIT_ERROR

    def test_bad_config(self, events_file, tmp_path):
        config = tmp_path / "verifier.yaml"
        config.write_text("chain_kind: ratings\n")

        assert main(["--events", str(events_file), "--config", str(config)]) == EXIT_ERROR

    def test_expected_digest_requires_count(self, events_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["--events", str(events_file), "--expected-digest", FEEDBACK_DIGESTS[2]])
        assert exc_info.value.code == 2


class TestLoadEventRecords:

    def test_wrapped_list(self, tmp_path):
        path = tmp_path / "wrapped.yml"
        path.write_text(yaml.safe_dump({"events": [{"slot": 1}]}))
        assert load_event_records(path) == [{"slot": 1}]

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "scalar.json"
        path.write_text("42")

        with pytest.raises(ValueError, match="list of event records"):
            load_event_records(path)
