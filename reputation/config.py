"""
Verifier configuration.

Values are resolved in increasing precedence:

1. Defaults on :class:`VerifierConfig`
2. A YAML file (top-level mapping, keys match the dataclass fields)
3. Environment variables ``REPUTATION_LOG_LEVEL``, ``REPUTATION_CHAIN_KIND``
   and ``REPUTATION_OUTPUT``

Library code never reads configuration; only entry points do.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from reputation.chain import ChainKind
from reputation.errors import ConfigError, ReputationError

__all__ = [
    "VerifierConfig",
    "ENV_PREFIX",
    "load_config",
]

ENV_PREFIX = "REPUTATION_"

_ENV_FIELDS = {
    "LOG_LEVEL": "log_level",
    "CHAIN_KIND": "chain_kind",
    "OUTPUT": "output",
}

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass
class VerifierConfig:
    """Settings for the command-line verifier."""

    log_level: str = "INFO"
    chain_kind: ChainKind = ChainKind.FEEDBACK
    output: Optional[str] = None

    def validate(self) -> None:
        """Normalize and validate field values in place."""
        level = str(self.log_level).strip().upper()
        if level not in _LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {self.log_level!r}")
        self.log_level = level
        try:
            self.chain_kind = ChainKind.from_name(self.chain_kind)
        except ReputationError as exc:
            raise ConfigError(f"chain_kind: {exc}") from exc
        if self.output is not None:
            self.output = str(self.output)

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["chain_kind"] = self.chain_kind.value
        return data


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found at: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML file: {path}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Malformed config file: expected a mapping at top level in {path}")

    known = {f.name for f in fields(VerifierConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {unknown}")
    return data


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> VerifierConfig:
    """
    Build a :class:`VerifierConfig` from defaults, an optional YAML file
    and the environment.

    Args:
        path: YAML config file, or None to skip
        environ: Environment mapping (defaults to ``os.environ``)

    Raises:
        ConfigError: If the file is missing or malformed, or a value is invalid
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if path is not None:
        values.update(_load_yaml(Path(path)))

    for suffix, name in _ENV_FIELDS.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw is not None and raw.strip() != "":
            values[name] = raw.strip()

    config = VerifierConfig(**values)
    config.validate()
    return config
