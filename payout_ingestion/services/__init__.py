"""Batch normalization services."""

from payout_ingestion.services.normalization_service import (
    BatchNormalizationResult,
    NormalizationService,
    RecordFailure,
)

__all__ = [
    "BatchNormalizationResult",
    "NormalizationService",
    "RecordFailure",
]
