"""
DTOs -- Pure result and diagnostic records shared by every layer.

Responsibility:
    Defines the immutable records that carry validation outcomes through
    the engine: ValidationError/ValidationResult (fatal findings),
    InconsistencyWarning (non-fatal findings) and AggregationRowError
    (per-row CSV findings).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Non-goals:
    - None of these types raise. They ARE the error representation; the
      single raise point is the normalizer's ``normalize()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from payout_kernel.invariants import RecordInvariant


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation error.

    Contract:
        Carries a machine-readable code, human-readable message, optional field
        path, and optional details dict.

    Guarantees:
        - Immutable (frozen dataclass)
        - code is always present
    """

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True)
class ValidationResult:
    """
    Result of validation.

    Contract:
        Aggregates zero or more ValidationErrors. is_valid is True only when
        there are no errors.

    Guarantees:
        - errors is always a tuple (never None)
        - bool(result) == result.is_valid for convenience

    Non-goals:
        - Does NOT contain warnings -- only hard errors.
    """

    is_valid: bool
    errors: tuple[ValidationError, ...] = field(default_factory=tuple)

    @classmethod
    def success(cls) -> ValidationResult:
        """Create a successful validation result."""
        return cls(is_valid=True, errors=())

    @classmethod
    def failure(cls, *errors: ValidationError) -> ValidationResult:
        """Create a failed validation result."""
        return cls(is_valid=False, errors=tuple(errors))

    @classmethod
    def from_errors(cls, errors: list[ValidationError] | tuple[ValidationError, ...]) -> ValidationResult:
        """Success when ``errors`` is empty, failure otherwise."""
        if not errors:
            return cls.success()
        return cls.failure(*errors)

    @property
    def messages(self) -> tuple[str, ...]:
        """Error messages in order, for verbatim display."""
        return tuple(e.message for e in self.errors)

    def __bool__(self) -> bool:
        return self.is_valid


@dataclass(frozen=True)
class InconsistencyWarning:
    """
    A cross-field invariant violated by an upstream record.

    Contract:
        Non-fatal. Delivered through logging and the normalizer's warning
        callback, never through the error path. ``code`` is the snake_case
        event name also used as the log message.
    """

    invariant: RecordInvariant
    code: str
    message: str
    entity_kind: str
    record_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AggregationRowError:
    """One CSV row that was skipped (or flagged) during aggregation.

    ``row`` is the 1-based position among non-empty lines, header included.
    """

    row: int
    code: str
    message: str
    value: str | None = None
