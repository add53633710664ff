"""
Tests for the typed exception hierarchy.

Every exception exposes a class-level code and keeps its structured data.
"""

import pytest

from payout_kernel.exceptions import (
    FATAL_ERROR_TYPES,
    AccessError,
    InvalidFieldValueError,
    MissingRequiredFieldError,
    NormalizationError,
    PayoutKernelError,
    PermissionDeniedError,
    UnknownEntityKindError,
)


class TestExceptionCodes:
    @pytest.mark.parametrize(
        "exc_type,code",
        [
            (PayoutKernelError, "PAYOUT_KERNEL_ERROR"),
            (NormalizationError, "NORMALIZATION_ERROR"),
            (MissingRequiredFieldError, "MISSING_REQUIRED_FIELD"),
            (InvalidFieldValueError, "INVALID_FIELD_VALUE"),
            (UnknownEntityKindError, "UNKNOWN_ENTITY_KIND"),
            (AccessError, "ACCESS_ERROR"),
            (PermissionDeniedError, "PERMISSION_DENIED"),
        ],
    )
    def test_code(self, exc_type, code):
        assert exc_type.code == code

    def test_hierarchy(self):
        assert issubclass(MissingRequiredFieldError, NormalizationError)
        assert issubclass(InvalidFieldValueError, NormalizationError)
        assert issubclass(PermissionDeniedError, AccessError)
        assert issubclass(AccessError, PayoutKernelError)


class TestStructuredData:
    def test_normalization_error_carries_field_and_reason(self):
        exc = MissingRequiredFieldError("id", "Payment ID is required", "payment", None)
        assert exc.field == "id"
        assert exc.reason == "Payment ID is required"
        assert exc.entity_kind == "payment"
        assert exc.record_id is None
        assert str(exc) == "Payment ID is required"

    def test_unknown_entity_kind(self):
        exc = UnknownEntityKindError("invoice")
        assert exc.field == "kind"
        assert exc.entity_kind == "invoice"
        assert str(exc) == "Unknown entity kind: invoice"

    def test_permission_denied(self):
        exc = PermissionDeniedError("Insufficient permissions", acting_role="developer", target_role="business")
        assert exc.reason == "Insufficient permissions"
        assert exc.acting_role == "developer"
        assert exc.target_role == "business"

    def test_fatal_error_types_map_codes(self):
        assert FATAL_ERROR_TYPES == {
            "MISSING_REQUIRED_FIELD": MissingRequiredFieldError,
            "INVALID_FIELD_VALUE": InvalidFieldValueError,
        }
