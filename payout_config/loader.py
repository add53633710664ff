"""
Configuration Loader (``payout_config.loader``).

Responsibility
--------------
Loads the engine's YAML settings file and parses it into a typed
``EngineSettings``.  Runtime callers go through
``payout_config.get_active_settings()`` rather than calling this directly.

Invariants enforced
-------------------
* Unknown keys are rejected; a typo never silently falls back to a default.
* Every parsed object is the frozen ``EngineSettings`` dataclass.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Non-mapping document, unknown key or bad value  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from payout_config.schema import EngineSettings


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file; an empty document reads as ``{}``."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
    return data


def parse_settings(data: dict[str, Any]) -> EngineSettings:
    """Build EngineSettings from a parsed mapping.

    Raises:
        ValueError: on unknown keys or values ``EngineSettings`` rejects.
    """
    unknown = sorted(set(data) - EngineSettings.field_names())
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
    return EngineSettings(**data)


def load_settings(path: Path) -> EngineSettings:
    return parse_settings(load_yaml_file(Path(path)))


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
