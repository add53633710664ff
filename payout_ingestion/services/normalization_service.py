"""
Normalization service: normalize a batch of raw records and aggregate CSV uploads.

This is the one propagation boundary for fatal record errors: a record that
fails normalization is collected next to the successes and never aborts the
rest of the batch.  Uses structured logging (LogContext, get_logger("ingestion.*")).
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from payout_engines.aggregation import AggregationResult, DecimalAggregator
from payout_kernel.domain.dtos import InconsistencyWarning
from payout_kernel.domain.models import DomainModel, EntityKind
from payout_kernel.exceptions import NormalizationError, UnknownEntityKindError
from payout_kernel.logging_config import LogContext, get_logger

from payout_ingestion.mapping.normalizer import RecordNormalizer, WarningCallback

logger = get_logger("ingestion.normalization_service")


@dataclass(frozen=True)
class RecordFailure:
    """A record of the batch that could not be normalized."""

    index: int
    record_id: str | None
    error: NormalizationError

    @property
    def message(self) -> str:
        return self.error.reason


@dataclass(frozen=True)
class BatchNormalizationResult:
    batch_id: str
    entity_kind: EntityKind
    records: tuple[DomainModel, ...]
    failures: tuple[RecordFailure, ...]
    warnings: tuple[InconsistencyWarning, ...]

    @property
    def total_count(self) -> int:
        return len(self.records) + len(self.failures)

    @property
    def success_count(self) -> int:
        return len(self.records)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def all_succeeded(self) -> bool:
        return not self.failures


class NormalizationService:
    """Batch-level orchestration of RecordNormalizer and DecimalAggregator."""

    def __init__(
        self,
        normalizer: RecordNormalizer | None = None,
        aggregator: DecimalAggregator | None = None,
    ):
        self._normalizer = normalizer or RecordNormalizer()
        self._aggregator = aggregator or DecimalAggregator()

    @classmethod
    def from_settings(cls, settings, on_warning: WarningCallback | None = None) -> NormalizationService:
        return cls(
            normalizer=RecordNormalizer.from_settings(settings, on_warning=on_warning),
            aggregator=DecimalAggregator.from_settings(settings),
        )

    def normalize_batch(
        self,
        kind: EntityKind | str,
        records: Iterable[Any],
        batch_id: str | None = None,
        **context: Any,
    ) -> BatchNormalizationResult:
        """Normalize every record; per-record fatal errors are collected, not raised.

        ``context`` is passed to each record's normalization (for receivers,
        ``receiver_wallet_id``).
        """
        try:
            entity_kind = EntityKind(kind)
        except ValueError:
            raise UnknownEntityKindError(str(kind)) from None
        batch_id = batch_id or str(uuid4())
        normalized: list[DomainModel] = []
        failures: list[RecordFailure] = []
        warnings: list[InconsistencyWarning] = []

        with LogContext.bind(batch_id=batch_id):
            logger.info("batch_normalization_started", extra={"kind": entity_kind.value})
            for index, raw in enumerate(records):
                result = self._normalizer.try_normalize(entity_kind, raw, **context)
                warnings.extend(result.warnings)
                if result.error is not None:
                    record_id = None
                    if isinstance(raw, Mapping) and raw.get("id") is not None:
                        record_id = str(raw.get("id"))
                    failures.append(RecordFailure(index=index, record_id=record_id, error=result.error))
                else:
                    normalized.append(result.record)

            statuses = Counter(str(getattr(r, "status", None)) for r in normalized)
            logger.info(
                "batch_normalization_completed",
                extra={
                    "kind": entity_kind.value,
                    "normalized": len(normalized),
                    "failed": len(failures),
                    "warning_count": len(warnings),
                    "statuses": dict(statuses),
                },
            )

        return BatchNormalizationResult(
            batch_id=batch_id,
            entity_kind=entity_kind,
            records=tuple(normalized),
            failures=tuple(failures),
            warnings=tuple(warnings),
        )

    def aggregate_csv(self, text: str, column_name: str | None = None) -> AggregationResult:
        """Aggregate an already-read CSV upload with the configured defaults."""
        return self._aggregator.aggregate_text(text, column_name=column_name)
