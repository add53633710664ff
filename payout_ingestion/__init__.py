"""
payout_ingestion -- Normalization of upstream payout records.

Validates raw disbursement, payment and receiver payloads, maps them onto
the kernel's domain models, and normalizes whole batches.

Architecture:
    payout_ingestion/ is a top-level package. Nothing in kernel/ or
    engines/ imports from ingestion.
"""
