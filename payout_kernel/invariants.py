"""
Record Invariants Contract.

Cross-field rules that upstream payout data is expected to satisfy. Upstream
data may be transiently inconsistent, so a violation of any of these is
reported as an ``InconsistencyWarning`` and never blocks normalization.

This module exists solely to declare the invariants explicitly. Checking is
done by ``payout_ingestion.domain.validators``.
"""

from enum import Enum, unique


@unique
class RecordInvariant(str, Enum):
    """Non-fatal invariants checked on every normalized record.

    Each warning emitted by the consistency validator is tagged with exactly
    one of these values.
    """

    PAYMENT_COUNT_CONSISTENCY = "payment_count_consistency"
    """A disbursement's successful + failed + canceled + remaining payment
    counts sum to its total payment count."""

    DISBURSED_WITHIN_TOTAL = "disbursed_within_total"
    """A disbursement's disbursed amount does not exceed its total amount
    (checked only when the total is positive)."""

    SUCCESSFUL_WITHIN_TOTAL = "successful_within_total"
    """A receiver's successful payment count does not exceed its total
    payment count."""

    RECEIVER_WALLET_MATCHED = "receiver_wallet_matched"
    """The wallet id requested for a receiver is one of its wallets."""

    POSITIVE_RECEIVED_AMOUNT = "positive_received_amount"
    """Every per-asset received amount is greater than zero. Entries that
    fail are dropped from the normalized record."""

    RECEIVER_CONTACT_PRESENT = "receiver_contact_present"
    """A receiver has a phone number or an email address."""

    WALLET_ADDRESS_FORMAT = "wallet_address_format"
    """Sender and receiver addresses are well-formed strkey addresses."""

    STATUS_TIMESTAMP_PARSEABLE = "status_timestamp_parseable"
    """Status history timestamps are ISO-8601. Entries that fail are dropped
    from the normalized history."""

    COUNT_PARSEABLE = "count_parseable"
    """Payment counters are whole numbers. Counters that fail read as 0."""


ALL_RECORD_INVARIANTS: frozenset[RecordInvariant] = frozenset(RecordInvariant)
