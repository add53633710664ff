"""
payout_ingestion.domain -- Pure record validators.

ZERO I/O. Imports only from payout_kernel.
"""

from payout_ingestion.domain.validators import (
    ConsistencyReport,
    ConsistencyValidator,
    FieldRule,
    validate_fields,
    validate_receiver_contact,
)

__all__ = [
    "ConsistencyReport",
    "ConsistencyValidator",
    "FieldRule",
    "validate_fields",
    "validate_receiver_contact",
]
