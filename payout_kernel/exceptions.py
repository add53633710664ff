"""
Typed Exception Hierarchy for the Payout Kernel.

===============================================================================
USAGE
===============================================================================

Every exception has a ``code`` class attribute and carries structured data
(field, reason, roles). ``reason`` is meant for verbatim display.

Example:
    try:
        payment = normalizer.normalize(EntityKind.PAYMENT, raw)
    except InvalidFieldValueError as e:
        show_error(e.reason)                  # verbatim to the UI
        log.warning("rejected", extra={"field": e.field, "code": e.code})

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayoutKernelError (base)
    |
    +-- NormalizationError
    |   +-- MissingRequiredFieldError
    |   +-- InvalidFieldValueError
    |   +-- UnknownEntityKindError
    |
    +-- AccessError
        +-- PermissionDeniedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Normalization   | MISSING_REQUIRED_FIELD      | Field required by the model is absent/blank
                | INVALID_FIELD_VALUE         | Field present but semantically invalid
                | UNKNOWN_ENTITY_KIND         | Record kind is not disbursement/payment/receiver
----------------|-----------------------------|-----------------------------------------
Access          | PERMISSION_DENIED           | Role/permission check failed

Non-fatal conditions (inconsistency warnings, CSV row errors) are NOT
exceptions. They are value records in ``payout_kernel.domain.dtos`` and
never travel on the error path.
"""

from __future__ import annotations


class PayoutKernelError(Exception):
    """
    Base exception for all payout kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYOUT_KERNEL_ERROR"


# Normalization-related exceptions


class NormalizationError(PayoutKernelError):
    """A raw record could not be turned into a domain model.

    The caller must not use any partial result.
    """

    code: str = "NORMALIZATION_ERROR"

    def __init__(
        self,
        field: str,
        reason: str,
        entity_kind: str | None = None,
        record_id: str | None = None,
    ):
        self.field = field
        self.reason = reason
        self.entity_kind = entity_kind
        self.record_id = record_id
        super().__init__(reason)


class MissingRequiredFieldError(NormalizationError):
    """A field required for a valid domain model is absent or blank."""

    code: str = "MISSING_REQUIRED_FIELD"


class InvalidFieldValueError(NormalizationError):
    """A field is present but semantically invalid (e.g. non-positive amount)."""

    code: str = "INVALID_FIELD_VALUE"


class UnknownEntityKindError(NormalizationError):
    """The requested entity kind has no normalizer."""

    code: str = "UNKNOWN_ENTITY_KIND"

    def __init__(self, entity_kind: str):
        super().__init__(
            field="kind",
            reason=f"Unknown entity kind: {entity_kind}",
            entity_kind=entity_kind,
        )


# Access-related exceptions


class AccessError(PayoutKernelError):
    """Base exception for access control errors."""

    code: str = "ACCESS_ERROR"


class PermissionDeniedError(AccessError):
    """An access or role-change check failed.

    ``reason`` is human-readable and meant for display.
    """

    code: str = "PERMISSION_DENIED"

    def __init__(
        self,
        reason: str,
        acting_role: str | None = None,
        target_role: str | None = None,
    ):
        self.reason = reason
        self.acting_role = acting_role
        self.target_role = target_role
        super().__init__(reason)


# Maps ValidationError codes produced by validators onto the exception that
# normalize() raises for them.
FATAL_ERROR_TYPES: dict[str, type[NormalizationError]] = {
    MissingRequiredFieldError.code: MissingRequiredFieldError,
    InvalidFieldValueError.code: InvalidFieldValueError,
}
