"""
Module: payout_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payout_kernel (domain types and logging).
    MUST NOT import payout_ingestion or payout_config.

Invariants enforced:
    - Decimal-only arithmetic: monetary amounts are ``Decimal``; floats
      never enter a sum.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from payout_engines.aggregation import DecimalAggregator
    from payout_engines.access import AccessEvaluator
"""

from payout_engines.access import (
    AccessDecision,
    AccessEvaluator,
    RoleAssignmentDecision,
)
from payout_engines.aggregation import (
    AggregationResult,
    CsvStructureCheck,
    DecimalAggregator,
    validate_csv_structure,
)
from payout_engines.tracer import traced_engine

__all__ = [
    # Access
    "AccessDecision",
    "AccessEvaluator",
    "RoleAssignmentDecision",
    # Aggregation
    "AggregationResult",
    "CsvStructureCheck",
    "DecimalAggregator",
    "validate_csv_structure",
    # Tracing
    "traced_engine",
]
