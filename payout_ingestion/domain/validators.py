"""
Record validators for upstream payout payloads.

ConsistencyValidator checks one raw record (disbursement, payment or
receiver) and splits its findings into fatal errors, which abort
normalization, and inconsistency warnings, which never do.

The field-rule helpers at the bottom validate flat form-style dicts
(``"field: message"`` errors) and are independent of the record kinds.

Architecture: payout_ingestion/domain. ZERO I/O. Imports only from payout_kernel.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from payout_kernel.domain.dtos import InconsistencyWarning, ValidationError, ValidationResult
from payout_kernel.domain.models import EntityKind
from payout_kernel.domain.values import (
    WALLET_ADDRESS_REGEX,
    is_blank,
    is_count,
    is_valid_wallet_address,
    parse_count,
    parse_decimal,
    parse_timestamp,
)
from payout_kernel.exceptions import (
    InvalidFieldValueError,
    MissingRequiredFieldError,
    UnknownEntityKindError,
)
from payout_kernel.invariants import RecordInvariant
from payout_kernel.logging_config import get_logger

logger = get_logger("ingestion.validators")

_MISSING = MissingRequiredFieldError.code
_INVALID = InvalidFieldValueError.code
_ZERO = Decimal("0")


# -----------------------------------------------------------------------------
# Raw-record access helpers (shared with the normalizer)
# -----------------------------------------------------------------------------


def nested(raw: Any, *path: str) -> Any:
    """Follow ``path`` through nested dicts; None when any step is missing."""
    cur = raw
    for key in path:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def lenient_decimal(value: Any) -> Decimal:
    """Upstream statistic amount; absent or unparseable reads as 0."""
    try:
        d = parse_decimal(value)
    except ValueError:
        return _ZERO
    return _ZERO if d is None else d


def split_status_history(history: Any) -> tuple[list[tuple[Mapping[str, Any], datetime]], list[Mapping[str, Any]]]:
    """Partition raw status-history entries.

    Returns ``(kept, unparseable)``.  ``kept`` pairs each usable entry with
    its parsed timestamp.  Entries missing a status or timestamp appear in
    neither list; entries whose timestamp cannot be parsed are
    ``unparseable``.
    """
    kept: list[tuple[Mapping[str, Any], datetime]] = []
    unparseable: list[Mapping[str, Any]] = []
    if not isinstance(history, Sequence) or isinstance(history, str):
        return kept, unparseable
    for entry in history:
        if not isinstance(entry, Mapping):
            continue
        if is_blank(entry.get("status")) or is_blank(entry.get("timestamp")):
            continue
        ts = parse_timestamp(entry.get("timestamp"))
        if ts is None:
            unparseable.append(entry)
        else:
            kept.append((entry, ts))
    return kept, unparseable


def split_received_amounts(amounts: Any) -> tuple[list[tuple[Mapping[str, Any], Decimal]], list[Mapping[str, Any]]]:
    """Partition raw received-amount entries into ``(positive, rejected)``."""
    positive: list[tuple[Mapping[str, Any], Decimal]] = []
    rejected: list[Mapping[str, Any]] = []
    if not isinstance(amounts, Sequence) or isinstance(amounts, str):
        return positive, rejected
    for entry in amounts:
        if not isinstance(entry, Mapping):
            continue
        try:
            amount = parse_decimal(entry.get("received_amount"))
        except ValueError:
            amount = None
        if amount is None or amount <= 0:
            rejected.append(entry)
        else:
            positive.append((entry, amount))
    return positive, rejected


def receiver_wallets(raw: Any) -> list[Mapping[str, Any]]:
    wallets = nested(raw, "wallets")
    if not isinstance(wallets, Sequence) or isinstance(wallets, str):
        return []
    return [w for w in wallets if isinstance(w, Mapping)]


def find_wallet(raw: Any, wallet_id: str | None) -> Mapping[str, Any] | None:
    """The receiver wallet whose id equals ``wallet_id``, if any."""
    if is_blank(wallet_id):
        return None
    for wallet in receiver_wallets(raw):
        if is_blank(wallet.get("id")):
            continue
        if str(wallet.get("id")) == str(wallet_id):
            return wallet
    return None


def validate_receiver_contact(raw: Any) -> bool:
    """True when the receiver has a non-blank phone number or email."""
    phone = nested(raw, "phone_number")
    email = nested(raw, "email")
    has_phone = isinstance(phone, str) and bool(phone.strip())
    has_email = isinstance(email, str) and bool(email.strip())
    return has_phone or has_email


# -----------------------------------------------------------------------------
# Consistency validation
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ConsistencyReport:
    """Fatal findings (``result``) plus non-fatal ``warnings`` for one record."""

    result: ValidationResult
    warnings: tuple[InconsistencyWarning, ...] = ()

    @property
    def is_valid(self) -> bool:
        return self.result.is_valid

    @property
    def errors(self) -> tuple[ValidationError, ...]:
        return self.result.errors

    def __bool__(self) -> bool:
        return self.result.is_valid


class ConsistencyValidator:
    """Structural and cross-field checks for a single raw record."""

    def validate(self, kind: EntityKind | str, raw: Any, **context: Any) -> ConsistencyReport:
        """Dispatch on ``kind``.  Receivers accept ``receiver_wallet_id``."""
        try:
            entity_kind = EntityKind(kind)
        except ValueError:
            raise UnknownEntityKindError(str(kind)) from None
        if not isinstance(raw, Mapping):
            return ConsistencyReport(
                result=ValidationResult.failure(
                    ValidationError(
                        code=_INVALID,
                        message=f"{entity_kind.value.capitalize()} record must be a mapping",
                        field="record",
                    )
                )
            )
        if entity_kind is EntityKind.DISBURSEMENT:
            return self.validate_disbursement(raw)
        if entity_kind is EntityKind.PAYMENT:
            return self.validate_payment(raw)
        return self.validate_receiver(raw, receiver_wallet_id=context.get("receiver_wallet_id"))

    validate_receiver_contact = staticmethod(validate_receiver_contact)

    # -- disbursement ---------------------------------------------------------

    def validate_disbursement(self, raw: Mapping[str, Any]) -> ConsistencyReport:
        errors: list[ValidationError] = []
        if is_blank(raw.get("id")):
            errors.append(ValidationError(_MISSING, "Disbursement ID is required", "id"))
        if is_blank(raw.get("name")):
            errors.append(ValidationError(_MISSING, "Disbursement name is required", "name"))
        for path in (("asset", "id"), ("asset", "code")):
            if is_blank(nested(raw, *path)):
                errors.append(
                    ValidationError(_MISSING, "Disbursement asset information is required", ".".join(path))
                )
                break
        for path in (("wallet", "id"), ("wallet", "name")):
            if is_blank(nested(raw, *path)):
                errors.append(
                    ValidationError(_MISSING, "Disbursement wallet information is required", ".".join(path))
                )
                break

        record_id = _record_id(raw)
        warnings: list[InconsistencyWarning] = []

        total = parse_count(raw.get("total_payments"))
        successful = parse_count(raw.get("total_payments_sent"))
        failed = parse_count(raw.get("total_payments_failed"))
        canceled = parse_count(raw.get("total_payments_canceled"))
        remaining = parse_count(raw.get("total_payments_remaining"))
        calculated = successful + failed + canceled + remaining
        if total != calculated:
            warnings.append(
                InconsistencyWarning(
                    invariant=RecordInvariant.PAYMENT_COUNT_CONSISTENCY,
                    code="disbursement_payment_count_mismatch",
                    message="Disbursement payment statistics mismatch",
                    entity_kind=EntityKind.DISBURSEMENT.value,
                    record_id=record_id,
                    details={
                        "total_payments": total,
                        "calculated_total": calculated,
                        "successful_payments": successful,
                        "failed_payments": failed,
                        "canceled_payments": canceled,
                        "remaining_payments": remaining,
                    },
                )
            )

        total_amount = lenient_decimal(raw.get("total_amount"))
        disbursed_amount = lenient_decimal(raw.get("amount_disbursed"))
        if total_amount > 0 and disbursed_amount > total_amount:
            warnings.append(
                InconsistencyWarning(
                    invariant=RecordInvariant.DISBURSED_WITHIN_TOTAL,
                    code="disbursed_amount_exceeds_total",
                    message="Disbursed amount exceeds total amount",
                    entity_kind=EntityKind.DISBURSEMENT.value,
                    record_id=record_id,
                    details={"total_amount": total_amount, "disbursed_amount": disbursed_amount},
                )
            )

        warnings.extend(_count_warnings(EntityKind.DISBURSEMENT, raw, record_id, _DISBURSEMENT_COUNT_FIELDS))
        warnings.extend(_history_warnings(EntityKind.DISBURSEMENT, raw, record_id))
        return ConsistencyReport(ValidationResult.from_errors(errors), tuple(warnings))

    # -- payment --------------------------------------------------------------

    def validate_payment(self, raw: Mapping[str, Any]) -> ConsistencyReport:
        errors: list[ValidationError] = []
        if is_blank(raw.get("id")):
            errors.append(ValidationError(_MISSING, "Payment ID is required", "id"))

        raw_amount = raw.get("amount")
        try:
            amount = parse_decimal(raw_amount)
        except ValueError:
            errors.append(
                ValidationError(
                    _INVALID,
                    "Payment amount must be a number",
                    "amount",
                    details={"value": str(raw_amount)},
                )
            )
        else:
            if amount is None:
                errors.append(ValidationError(_MISSING, "Payment amount is required", "amount"))
            elif amount <= 0:
                errors.append(
                    ValidationError(
                        _INVALID,
                        "Payment amount must be greater than 0",
                        "amount",
                        details={"value": str(amount)},
                    )
                )

        if is_blank(nested(raw, "asset", "code")):
            errors.append(ValidationError(_MISSING, "Payment asset code is required", "asset.code"))

        record_id = _record_id(raw)
        warnings: list[InconsistencyWarning] = []
        sender = raw.get("stellar_address")
        if not is_blank(sender) and not is_valid_wallet_address(sender):
            warnings.append(
                InconsistencyWarning(
                    invariant=RecordInvariant.WALLET_ADDRESS_FORMAT,
                    code="payment_sender_address_malformed",
                    message="Payment sender address is not a valid account address",
                    entity_kind=EntityKind.PAYMENT.value,
                    record_id=record_id,
                    details={"address": str(sender)},
                )
            )
        warnings.extend(_history_warnings(EntityKind.PAYMENT, raw, record_id))
        return ConsistencyReport(ValidationResult.from_errors(errors), tuple(warnings))

    # -- receiver -------------------------------------------------------------

    def validate_receiver(
        self,
        raw: Mapping[str, Any],
        receiver_wallet_id: str | None = None,
    ) -> ConsistencyReport:
        errors: list[ValidationError] = []
        if is_blank(raw.get("id")):
            errors.append(ValidationError(_MISSING, "Receiver ID is required", "id"))

        record_id = _record_id(raw)
        kind = EntityKind.RECEIVER.value
        warnings: list[InconsistencyWarning] = []

        if not validate_receiver_contact(raw):
            warnings.append(
                InconsistencyWarning(
                    invariant=RecordInvariant.RECEIVER_CONTACT_PRESENT,
                    code="receiver_contact_missing",
                    message="Receiver has no contact information",
                    entity_kind=kind,
                    record_id=record_id,
                )
            )

        wallet = find_wallet(raw, receiver_wallet_id)
        if not is_blank(receiver_wallet_id) and wallet is None:
            warnings.append(
                InconsistencyWarning(
                    invariant=RecordInvariant.RECEIVER_WALLET_MATCHED,
                    code="receiver_wallet_not_found",
                    message="Receiver wallet not found",
                    entity_kind=kind,
                    record_id=record_id,
                    details={
                        "wallet_id": str(receiver_wallet_id),
                        "available_wallets": [str(w.get("id")) for w in receiver_wallets(raw)],
                    },
                )
            )
        if wallet is not None:
            address = wallet.get("stellar_address")
            if not is_blank(address) and not is_valid_wallet_address(address):
                warnings.append(
                    InconsistencyWarning(
                        invariant=RecordInvariant.WALLET_ADDRESS_FORMAT,
                        code="receiver_wallet_address_malformed",
                        message="Receiver wallet address is not a valid account address",
                        entity_kind=kind,
                        record_id=record_id,
                        details={"wallet_id": str(wallet.get("id")), "address": str(address)},
                    )
                )

        total = parse_count(raw.get("total_payments"))
        successful = parse_count(raw.get("successful_payments"))
        if successful > total:
            warnings.append(
                InconsistencyWarning(
                    invariant=RecordInvariant.SUCCESSFUL_WITHIN_TOTAL,
                    code="receiver_payment_statistics_invalid",
                    message="Receiver successful payments exceed total payments",
                    entity_kind=kind,
                    record_id=record_id,
                    details={"total_payments": total, "successful_payments": successful},
                )
            )

        warnings.extend(_count_warnings(EntityKind.RECEIVER, raw, record_id, _RECEIVER_COUNT_FIELDS))

        _, rejected = split_received_amounts(raw.get("received_amounts"))
        for entry in rejected:
            warnings.append(
                InconsistencyWarning(
                    invariant=RecordInvariant.POSITIVE_RECEIVED_AMOUNT,
                    code="received_amount_not_positive",
                    message="Invalid received amount dropped",
                    entity_kind=kind,
                    record_id=record_id,
                    details={
                        "received_amount": _as_text(entry.get("received_amount")),
                        "asset_code": _as_text(entry.get("asset_code")),
                    },
                )
            )

        return ConsistencyReport(ValidationResult.from_errors(errors), tuple(warnings))


def _record_id(raw: Mapping[str, Any]) -> str | None:
    value = raw.get("id")
    return None if is_blank(value) else str(value)


def _as_text(value: Any) -> str | None:
    return None if value is None else str(value)


def _history_warnings(kind: EntityKind, raw: Mapping[str, Any], record_id: str | None) -> list[InconsistencyWarning]:
    _, unparseable = split_status_history(raw.get("status_history"))
    return [
        InconsistencyWarning(
            invariant=RecordInvariant.STATUS_TIMESTAMP_PARSEABLE,
            code="status_history_timestamp_unparseable",
            message="Status history entry with unparseable timestamp dropped",
            entity_kind=kind.value,
            record_id=record_id,
            details={"status": str(entry.get("status")), "timestamp": str(entry.get("timestamp"))},
        )
        for entry in unparseable
    ]


_DISBURSEMENT_COUNT_FIELDS = (
    "total_payments",
    "total_payments_sent",
    "total_payments_failed",
    "total_payments_canceled",
    "total_payments_remaining",
)
_RECEIVER_COUNT_FIELDS = ("total_payments", "successful_payments")


def _count_warnings(
    kind: EntityKind, raw: Mapping[str, Any], record_id: str | None, fields: tuple[str, ...]
) -> list[InconsistencyWarning]:
    return [
        InconsistencyWarning(
            invariant=RecordInvariant.COUNT_PARSEABLE,
            code="payment_count_unparseable",
            message="Payment counter is not a whole number; read as 0",
            entity_kind=kind.value,
            record_id=record_id,
            details={"field": name, "value": _as_text(raw.get(name))},
        )
        for name in fields
        if not is_count(raw.get(name))
    ]


# -----------------------------------------------------------------------------
# Field rules (form-style validation)
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldRule:
    """One validation rule for a single field.

    ``check`` returns True (ok), False (fail with ``message``) or a string
    (fail with that string).  Length and pattern checks apply to strings only.
    Non-required empty values pass every check.
    """

    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern[str] | None = None
    check: Callable[[Any], bool | str] | None = None
    message: str | None = None


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def validate_value(value: Any, rule: FieldRule) -> list[str]:
    """Messages for every check ``value`` fails (empty list when valid)."""
    if rule.required and _is_empty(value):
        return [rule.message or "This field is required"]
    if _is_empty(value):
        return []

    messages: list[str] = []
    if isinstance(value, str):
        if rule.min_length is not None and len(value) < rule.min_length:
            messages.append(rule.message or f"Minimum length is {rule.min_length} characters")
        if rule.max_length is not None and len(value) > rule.max_length:
            messages.append(rule.message or f"Maximum length is {rule.max_length} characters")
        if rule.pattern is not None and not rule.pattern.search(value):
            messages.append(rule.message or "Invalid format")
    if rule.check is not None:
        outcome = rule.check(value)
        if outcome is False:
            messages.append(rule.message or "Invalid value")
        elif isinstance(outcome, str):
            messages.append(outcome)
    return messages


def validate_fields(
    data: Mapping[str, Any],
    rules: Mapping[str, FieldRule | Sequence[FieldRule]],
) -> ValidationResult:
    """Validate ``data`` against per-field rules; errors read ``"<field>: <message>"``."""
    errors: list[ValidationError] = []
    for field_name, field_rules in rules.items():
        if isinstance(field_rules, FieldRule):
            field_rules = (field_rules,)
        value = data.get(field_name)
        for rule in field_rules:
            for message in validate_value(value, rule):
                errors.append(
                    ValidationError(
                        code="FIELD_RULE_VIOLATION",
                        message=f"{field_name}: {message}",
                        field=field_name,
                    )
                )
    if errors:
        logger.debug(
            "field_validation_failed",
            extra={"fields": sorted({e.field for e in errors}), "error_count": len(errors)},
        )
    return ValidationResult.from_errors(errors)


def _positive_amount(value: Any) -> bool:
    try:
        amount = parse_decimal(value)
    except ValueError:
        return False
    return amount is not None and amount > 0


def required_rule(message: str | None = None) -> FieldRule:
    return FieldRule(required=True, message=message)


def email_rule(message: str | None = None) -> FieldRule:
    return FieldRule(pattern=re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"), message=message or "Invalid email format")


def phone_rule(message: str | None = None) -> FieldRule:
    return FieldRule(pattern=re.compile(r"^\+?[\d\s\-()]+$"), message=message or "Invalid phone number format")


def url_rule(message: str | None = None) -> FieldRule:
    return FieldRule(pattern=re.compile(r"^https?://.+"), message=message or "Invalid URL format")


def stellar_address_rule(message: str | None = None) -> FieldRule:
    return FieldRule(pattern=WALLET_ADDRESS_REGEX, message=message or "Invalid Stellar address format")


def positive_amount_rule(message: str | None = None) -> FieldRule:
    return FieldRule(check=_positive_amount, message=message or "Amount must be a positive number")


def min_length_rule(length: int, message: str | None = None) -> FieldRule:
    return FieldRule(min_length=length, message=message or f"Minimum length is {length} characters")


def max_length_rule(length: int, message: str | None = None) -> FieldRule:
    return FieldRule(max_length=length, message=message or f"Maximum length is {length} characters")


RECEIVER_CONTACT_RULES: Mapping[str, FieldRule] = {
    "email": email_rule(),
    "phone_number": phone_rule(),
}

DISBURSEMENT_FORM_RULES: Mapping[str, FieldRule] = {
    "name": required_rule("Disbursement name is required"),
    "description": max_length_rule(500, "Description too long"),
    "amount": positive_amount_rule(),
}
