"""
payout_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``.  Returns a frozen ``EngineSettings``.

Architecture position:
    Configuration -- sits above ``payout_kernel`` and ``payout_engines``.
    The kernel and the engines MUST NEVER import from ``payout_config``;
    they receive plain values (or the settings object) from their callers.

Failure modes:
    - ``FileNotFoundError`` -- the requested settings file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful ``get_active_settings()`` call emits a
    ``PAYOUT_CONFIG_TRACE`` log entry with the source path, checksum and
    effective values.
"""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path

from payout_config.loader import compute_checksum, load_yaml_file, parse_settings
from payout_config.schema import EngineSettings
from payout_kernel.logging_config import configure_logging, get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_settings(config_path: Path | str | None = None) -> EngineSettings:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: YAML file to load. Defaults to the packaged
            ``defaults.yaml``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file holds unknown keys or invalid values.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    data = load_yaml_file(path)
    settings = parse_settings(data)

    _logger.info(
        "PAYOUT_CONFIG_TRACE",
        extra={
            "trace_type": "PAYOUT_CONFIG_TRACE",
            "config_path": str(path),
            "checksum": compute_checksum(data),
            "settings": asdict(settings),
        },
    )
    return settings


def configure_logging_from_settings(settings: EngineSettings) -> None:
    """Configure structured logging at the settings' level (idempotent)."""
    configure_logging(level=settings.log_level)


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "EngineSettings",
    "configure_logging_from_settings",
    "get_active_settings",
]
