"""
Entity models for normalized payout records.

Every model is a frozen dataclass produced fresh by one normalization call.
Nested collections are tuples. Monetary fields are Decimal.

Defaulting rules are part of the model contract:
    - Payment.disbursement_name defaults to "Direct Payment" and
      Payment.disbursement_id to "" when the payment has no disbursement.
    - PaymentStatusEntry.message defaults to "Status updated".
    - Receiver wallet-derived fields are "" / None when no wallet matched.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

DIRECT_PAYMENT_NAME = "Direct Payment"
DEFAULT_STATUS_MESSAGE = "Status updated"


class EntityKind(str, Enum):
    """Kinds of upstream record the engine can normalize."""

    DISBURSEMENT = "disbursement"
    PAYMENT = "payment"
    RECEIVER = "receiver"


# =============================================================================
# Shared references
# =============================================================================


@dataclass(frozen=True)
class AssetRef:
    """Asset as embedded in a disbursement (id + code only)."""

    id: str
    code: str


@dataclass(frozen=True)
class WalletRef:
    """Wallet provider as embedded in a disbursement (id + name only)."""

    id: str
    name: str


# =============================================================================
# Disbursement
# =============================================================================


@dataclass(frozen=True)
class DisbursementStats:
    """Payment counters and amounts of a disbursement."""

    payments_successful_count: int = 0
    payments_failed_count: int = 0
    payments_canceled_count: int = 0
    payments_remaining_count: int = 0
    payments_total_count: int = 0
    total_amount: Decimal = Decimal("0")
    disbursed_amount: Decimal = Decimal("0")
    average_payment_amount: Decimal = Decimal("0")

    @property
    def counted_total(self) -> int:
        """Sum of the four per-status counters."""
        return (
            self.payments_successful_count
            + self.payments_failed_count
            + self.payments_canceled_count
            + self.payments_remaining_count
        )


@dataclass(frozen=True)
class DisbursementStatusEntry:
    status: str
    timestamp: datetime
    user_id: str | None = None


@dataclass(frozen=True)
class Disbursement:
    id: str
    name: str
    status: str | None
    asset: AssetRef
    wallet: WalletRef
    stats: DisbursementStats
    created_at: datetime | None = None
    created_by: str | None = None
    started_by: str | None = None
    status_history: tuple[DisbursementStatusEntry, ...] = ()
    registration_contact_type: str | None = None
    verification_field: str | None = None
    file_name: str | None = None
    receiver_registration_message_template: str | None = None


# =============================================================================
# Payment
# =============================================================================


@dataclass(frozen=True)
class PaymentStatusEntry:
    status: str
    updated_at: datetime
    message: str = DEFAULT_STATUS_MESSAGE


@dataclass(frozen=True)
class Payment:
    id: str
    amount: Decimal
    asset_code: str
    status: str | None
    created_at: datetime | None = None
    disbursement_name: str = DIRECT_PAYMENT_NAME
    disbursement_id: str = ""
    receiver_id: str | None = None
    receiver_wallet_id: str | None = None
    transaction_id: str | None = None
    sender_address: str | None = None
    external_payment_id: str | None = None
    circle_transfer_request_id: str | None = None
    status_history: tuple[PaymentStatusEntry, ...] = ()


# =============================================================================
# Receiver
# =============================================================================


@dataclass(frozen=True)
class ReceivedAmount:
    """Total received by a receiver in one asset. ``amount`` is always > 0."""

    amount: Decimal
    asset_code: str | None
    asset_issuer: str | None = None


@dataclass(frozen=True)
class Receiver:
    id: str
    phone_number: str | None = None
    email: str | None = None
    wallet_address: str = ""
    provider: str = ""
    created_at: datetime | None = None
    status: str | None = None
    total_payments_count: int = 0
    successful_payments_count: int = 0
    amounts_received: tuple[ReceivedAmount, ...] = ()

    @property
    def has_contact(self) -> bool:
        return bool((self.phone_number or "").strip() or (self.email or "").strip())


DomainModel = Disbursement | Payment | Receiver
