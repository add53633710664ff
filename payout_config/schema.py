"""
EngineSettings schema.

The typed form of the engine's YAML configuration. The loader parses a
YAML mapping into this frozen dataclass; every field has a default so an
empty file yields the stock behaviour.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

VALID_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class EngineSettings:
    """Tunables for the normalizer, the aggregator and logging."""

    csv_amount_column: str = "amount"
    max_decimal_places: int = 7  # Stellar amounts carry 7 decimal places
    direct_payment_name: str = "Direct Payment"
    default_status_message: str = "Status updated"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        for name in ("csv_amount_column", "direct_payment_name", "default_status_message"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{name} must be a non-empty string, got {value!r}")
        if isinstance(self.max_decimal_places, bool) or not isinstance(self.max_decimal_places, int):
            raise ValueError(f"max_decimal_places must be an integer, got {self.max_decimal_places!r}")
        if self.max_decimal_places < 0:
            raise ValueError(f"max_decimal_places must be >= 0, got {self.max_decimal_places}")
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got {self.log_level!r}"
            )

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))
