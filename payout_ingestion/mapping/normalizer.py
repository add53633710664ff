"""
Record normalizer: pure transformation from a raw upstream dict to a domain model.

Each call validates the record with ConsistencyValidator, reports every
inconsistency warning (structured log event plus optional callback) and,
when no fatal error was found, maps the record onto the frozen models of
``payout_kernel.domain.models``.

``try_normalize`` returns an explicit result and never raises for bad data.
``normalize`` is the single raise point: it raises the first fatal error as
MissingRequiredFieldError or InvalidFieldValueError.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from payout_kernel.domain.dtos import InconsistencyWarning, ValidationError
from payout_kernel.domain.models import (
    DEFAULT_STATUS_MESSAGE,
    DIRECT_PAYMENT_NAME,
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
from payout_kernel.domain.values import (
    display_name,
    is_blank,
    optional_str,
    parse_count,
    parse_decimal,
    parse_timestamp,
)
from payout_kernel.exceptions import (
    FATAL_ERROR_TYPES,
    InvalidFieldValueError,
    NormalizationError,
)
from payout_kernel.logging_config import LogContext, get_logger

from payout_ingestion.domain.validators import (
    ConsistencyValidator,
    find_wallet,
    lenient_decimal,
    nested,
    split_received_amounts,
    split_status_history,
)

logger = get_logger("ingestion.normalizer")

WarningCallback = Callable[[InconsistencyWarning], None]

_HUNDRED = Decimal("100")
_ZERO = Decimal("0")


# -----------------------------------------------------------------------------
# Result type
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class NormalizationResult:
    """Outcome of normalizing one raw record.

    Exactly one of ``record`` and ``error`` is set.  ``errors`` lists every
    fatal finding; ``error`` wraps the first of them.
    """

    entity_kind: EntityKind
    record: DomainModel | None = None
    error: NormalizationError | None = None
    errors: tuple[ValidationError, ...] = ()
    warnings: tuple[InconsistencyWarning, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return self.error is None

    def unwrap(self) -> DomainModel:
        """The record, or raise the fatal error."""
        if self.error is not None:
            raise self.error
        assert self.record is not None
        return self.record


# -----------------------------------------------------------------------------
# Normalizer
# -----------------------------------------------------------------------------


class RecordNormalizer:
    """Turns raw disbursement, payment and receiver dicts into domain models."""

    def __init__(
        self,
        validator: ConsistencyValidator | None = None,
        on_warning: WarningCallback | None = None,
        direct_payment_name: str = DIRECT_PAYMENT_NAME,
        default_status_message: str = DEFAULT_STATUS_MESSAGE,
    ):
        self._validator = validator or ConsistencyValidator()
        self._on_warning = on_warning
        self.direct_payment_name = direct_payment_name
        self.default_status_message = default_status_message

    @classmethod
    def from_settings(cls, settings, on_warning: WarningCallback | None = None) -> RecordNormalizer:
        return cls(
            on_warning=on_warning,
            direct_payment_name=settings.direct_payment_name,
            default_status_message=settings.default_status_message,
        )

    # -- public API -----------------------------------------------------------

    def try_normalize(self, kind: EntityKind | str, raw: Any, **context: Any) -> NormalizationResult:
        """Validate and map ``raw``.  Raises only UnknownEntityKindError."""
        report = self._validator.validate(kind, raw, **context)
        entity_kind = EntityKind(kind)
        record_id = None
        if isinstance(raw, Mapping) and not is_blank(raw.get("id")):
            record_id = str(raw.get("id"))

        with LogContext.bind(entity_kind=entity_kind.value, record_id=record_id):
            for warning in report.warnings:
                self._emit(warning)

            if not report.is_valid:
                first = report.errors[0]
                exc_type = FATAL_ERROR_TYPES.get(first.code, InvalidFieldValueError)
                error = exc_type(
                    field=first.field or "record",
                    reason=first.message,
                    entity_kind=entity_kind.value,
                    record_id=record_id,
                )
                logger.warning(
                    "record_normalization_failed",
                    extra={
                        "code": first.code,
                        "field": first.field,
                        "reason": first.message,
                        "error_count": len(report.errors),
                    },
                )
                return NormalizationResult(
                    entity_kind=entity_kind,
                    error=error,
                    errors=report.errors,
                    warnings=report.warnings,
                )

            record = self._map(entity_kind, raw, context)
            logger.info(
                "record_normalized",
                extra={"status": getattr(record, "status", None), "warning_count": len(report.warnings)},
            )
        return NormalizationResult(entity_kind=entity_kind, record=record, warnings=report.warnings)

    def normalize(self, kind: EntityKind | str, raw: Any, **context: Any) -> DomainModel:
        """Like ``try_normalize`` but raises the first fatal error."""
        return self.try_normalize(kind, raw, **context).unwrap()

    def normalize_disbursement(self, raw: Any) -> Disbursement:
        return self.normalize(EntityKind.DISBURSEMENT, raw)

    def normalize_payment(self, raw: Any) -> Payment:
        return self.normalize(EntityKind.PAYMENT, raw)

    def normalize_receiver(self, raw: Any, receiver_wallet_id: str | None = None) -> Receiver:
        return self.normalize(EntityKind.RECEIVER, raw, receiver_wallet_id=receiver_wallet_id)

    # -- internals ------------------------------------------------------------

    def _emit(self, warning: InconsistencyWarning) -> None:
        logger.warning(
            warning.code,
            extra={"invariant": warning.invariant.value, "details": warning.details},
        )
        if self._on_warning is not None:
            self._on_warning(warning)

    def _map(self, kind: EntityKind, raw: Mapping[str, Any], context: Mapping[str, Any]) -> DomainModel:
        if kind is EntityKind.DISBURSEMENT:
            return self._map_disbursement(raw)
        if kind is EntityKind.PAYMENT:
            return self._map_payment(raw)
        return self._map_receiver(raw, context.get("receiver_wallet_id"))

    def _map_disbursement(self, raw: Mapping[str, Any]) -> Disbursement:
        kept, _ = split_status_history(raw.get("status_history"))
        kept.sort(key=lambda pair: pair[1], reverse=True)
        history = tuple(
            DisbursementStatusEntry(
                status=str(entry.get("status")),
                timestamp=ts,
                user_id=optional_str(entry.get("user_id")),
            )
            for entry, ts in kept
        )
        stats = DisbursementStats(
            payments_successful_count=parse_count(raw.get("total_payments_sent")),
            payments_failed_count=parse_count(raw.get("total_payments_failed")),
            payments_canceled_count=parse_count(raw.get("total_payments_canceled")),
            payments_remaining_count=parse_count(raw.get("total_payments_remaining")),
            payments_total_count=parse_count(raw.get("total_payments")),
            total_amount=lenient_decimal(raw.get("total_amount")),
            disbursed_amount=lenient_decimal(raw.get("amount_disbursed")),
            average_payment_amount=lenient_decimal(raw.get("average_amount")),
        )
        return Disbursement(
            id=str(raw.get("id")),
            name=str(raw.get("name")),
            status=optional_str(raw.get("status")),
            asset=AssetRef(id=str(nested(raw, "asset", "id")), code=str(nested(raw, "asset", "code"))),
            wallet=WalletRef(id=str(nested(raw, "wallet", "id")), name=str(nested(raw, "wallet", "name"))),
            stats=stats,
            created_at=parse_timestamp(raw.get("created_at")),
            created_by=display_name(raw.get("created_by")),
            started_by=display_name(raw.get("started_by")),
            status_history=history,
            registration_contact_type=optional_str(raw.get("registration_contact_type")),
            verification_field=optional_str(raw.get("verification_field")),
            file_name=optional_str(raw.get("file_name")),
            receiver_registration_message_template=optional_str(
                raw.get("receiver_registration_message_template")
            ),
        )

    def _map_payment(self, raw: Mapping[str, Any]) -> Payment:
        kept, _ = split_status_history(raw.get("status_history"))
        kept.sort(key=lambda pair: pair[1], reverse=True)
        history = tuple(
            PaymentStatusEntry(
                status=str(entry.get("status")),
                updated_at=ts,
                message=self.default_status_message
                if is_blank(entry.get("status_message"))
                else str(entry.get("status_message")),
            )
            for entry, ts in kept
        )
        disbursement_name = nested(raw, "disbursement", "name")
        disbursement_id = nested(raw, "disbursement", "id")
        return Payment(
            id=str(raw.get("id")),
            amount=parse_decimal(raw.get("amount")),
            asset_code=str(nested(raw, "asset", "code")),
            status=optional_str(raw.get("status")),
            created_at=parse_timestamp(raw.get("created_at")),
            disbursement_name=self.direct_payment_name if is_blank(disbursement_name) else str(disbursement_name),
            disbursement_id="" if is_blank(disbursement_id) else str(disbursement_id),
            receiver_id=optional_str(nested(raw, "receiver_wallet", "receiver", "id")),
            receiver_wallet_id=optional_str(nested(raw, "receiver_wallet", "id")),
            transaction_id=optional_str(raw.get("stellar_transaction_id")),
            sender_address=optional_str(raw.get("stellar_address")),
            external_payment_id=optional_str(raw.get("external_payment_id")),
            circle_transfer_request_id=optional_str(raw.get("circle_transfer_request_id")),
            status_history=history,
        )

    def _map_receiver(self, raw: Mapping[str, Any], receiver_wallet_id: str | None) -> Receiver:
        wallet = find_wallet(raw, receiver_wallet_id)
        positive, _ = split_received_amounts(raw.get("received_amounts"))
        amounts = tuple(
            ReceivedAmount(
                amount=amount,
                asset_code=optional_str(entry.get("asset_code")),
                asset_issuer=optional_str(entry.get("asset_issuer")),
            )
            for entry, amount in positive
        )
        address = nested(wallet, "stellar_address")
        provider = nested(wallet, "wallet", "name")
        return Receiver(
            id=str(raw.get("id")),
            phone_number=optional_str(raw.get("phone_number")),
            email=optional_str(raw.get("email")),
            wallet_address="" if is_blank(address) else str(address),
            provider="" if is_blank(provider) else str(provider),
            created_at=parse_timestamp(nested(wallet, "created_at")),
            status=optional_str(nested(wallet, "status")),
            total_payments_count=parse_count(raw.get("total_payments")),
            successful_payments_count=parse_count(raw.get("successful_payments")),
            amounts_received=amounts,
        )


# -----------------------------------------------------------------------------
# Derived statistics
# -----------------------------------------------------------------------------


def disbursement_completion_percentage(disbursement: Disbursement) -> Decimal:
    """Share of payments in a final state (successful, failed, canceled), 0-100."""
    stats = disbursement.stats
    if stats.payments_total_count == 0:
        return _ZERO
    finished = stats.payments_successful_count + stats.payments_failed_count + stats.payments_canceled_count
    return Decimal(finished) * _HUNDRED / Decimal(stats.payments_total_count)


def receiver_success_rate(receiver: Receiver) -> Decimal:
    """Successful payments as a percentage of total payments; 0 when there are none."""
    if receiver.total_payments_count == 0:
        return _ZERO
    return Decimal(receiver.successful_payments_count) * _HUNDRED / Decimal(receiver.total_payments_count)
