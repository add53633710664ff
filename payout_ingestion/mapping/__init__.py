"""Record normalizer: pure mapping from raw payloads to domain models."""

from payout_ingestion.mapping.normalizer import (
    NormalizationResult,
    RecordNormalizer,
    disbursement_completion_percentage,
    receiver_success_rate,
)

__all__ = [
    "NormalizationResult",
    "RecordNormalizer",
    "disbursement_completion_percentage",
    "receiver_success_rate",
]
