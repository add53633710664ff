"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- Network or file I/O
- Time/clock
- Configuration

All domain objects are immutable and deterministic.
"""

from payout_kernel.domain.dtos import (
    AggregationRowError,
    InconsistencyWarning,
    ValidationError,
    ValidationResult,
)
from payout_kernel.domain.models import (
    AssetRef,
    Disbursement,
    DisbursementStats,
    DisbursementStatusEntry,
    DomainModel,
    EntityKind,
    Payment,
    PaymentStatusEntry,
    ReceivedAmount,
    Receiver,
    WalletRef,
)
from payout_kernel.domain.roles import (
    ROLE_CATALOG,
    UNKNOWN_ROLE,
    Permission,
    Role,
    RoleCatalog,
    RoleInfo,
)
from payout_kernel.domain.values import (
    is_valid_wallet_address,
    validate_asset_code,
    validate_asset_issuer,
    validate_wallet_address,
    validate_wallet_name,
)
from payout_kernel.domain.workflow import (
    DISBURSEMENT_WORKFLOW,
    PAYMENT_WORKFLOW,
    DisbursementStatus,
    PaymentStatus,
    ReceiverStatus,
    StatusInfo,
    StatusTransitionValidator,
    Transition,
    Workflow,
    is_transition_allowed,
    status_info,
)

__all__ = [
    # DTOs
    "AggregationRowError",
    "InconsistencyWarning",
    "ValidationError",
    "ValidationResult",
    # Models
    "AssetRef",
    "Disbursement",
    "DisbursementStats",
    "DisbursementStatusEntry",
    "DomainModel",
    "EntityKind",
    "Payment",
    "PaymentStatusEntry",
    "ReceivedAmount",
    "Receiver",
    "WalletRef",
    # Roles
    "ROLE_CATALOG",
    "UNKNOWN_ROLE",
    "Permission",
    "Role",
    "RoleCatalog",
    "RoleInfo",
    # Values
    "is_valid_wallet_address",
    "validate_asset_code",
    "validate_asset_issuer",
    "validate_wallet_address",
    "validate_wallet_name",
    # Workflow
    "DISBURSEMENT_WORKFLOW",
    "PAYMENT_WORKFLOW",
    "DisbursementStatus",
    "PaymentStatus",
    "ReceiverStatus",
    "StatusInfo",
    "StatusTransitionValidator",
    "Transition",
    "Workflow",
    "is_transition_allowed",
    "status_info",
]
