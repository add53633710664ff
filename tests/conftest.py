"""
Pytest fixtures for the payout kernel test suite.

Provides:
- Structured logging configuration and log capture
- Factories for raw upstream records (disbursement, payment, receiver)
- Common wallet addresses
"""

import json
import logging
from copy import deepcopy
from io import StringIO

import pytest

from payout_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

VALID_ADDRESS = "G" + "A" * 55
OTHER_VALID_ADDRESS = "G" + ("BCDEFGHJKLMNPQRSTUVWXYZ234567" * 2)[:55]


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payout_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            normalizer.normalize_payment(raw)
            logs = captured_logs()
            assert any(r["message"] == "record_normalized" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payout_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Raw record factories
# =============================================================================


_BASE_DISBURSEMENT = {
    "id": "d-001",
    "name": "March stipends",
    "created_at": "2024-03-01T09:00:00Z",
    "created_by": {"first_name": "Ada", "last_name": "Okafor"},
    "started_by": {"first_name": "Lin", "last_name": "Chen"},
    "total_payments": 10,
    "total_payments_sent": 6,
    "total_payments_failed": 1,
    "total_payments_canceled": 1,
    "total_payments_remaining": 2,
    "total_amount": "1000.00",
    "amount_disbursed": "600.00",
    "average_amount": "100.00",
    "status": "processing",
    "registration_contact_type": "PHONE_NUMBER",
    "asset": {"id": "asset-usdc", "code": "USDC"},
    "wallet": {"id": "wallet-1", "name": "Demo Wallet"},
    "verification_field": "DATE_OF_BIRTH",
    "file_name": "march.csv",
    "status_history": [
        {"status": "draft", "timestamp": "2024-03-01T09:00:00Z", "user_id": "u-1"},
        {"status": "processing", "timestamp": "2024-03-02T10:00:00Z", "user_id": "u-2"},
        {"status": "pending", "timestamp": "2024-03-01T12:00:00Z", "user_id": "u-1"},
    ],
    "receiver_registration_message_template": "Welcome!",
}

_BASE_PAYMENT = {
    "id": "p-001",
    "created_at": "2024-03-02T10:05:00Z",
    "amount": "25.5000000",
    "asset": {"code": "USDC"},
    "disbursement": {"id": "d-001", "name": "March stipends"},
    "receiver_wallet": {"id": "rw-1", "receiver": {"id": "r-001"}},
    "stellar_transaction_id": "tx-abc",
    "stellar_address": VALID_ADDRESS,
    "external_payment_id": None,
    "circle_transfer_request_id": None,
    "status": "completed",
    "status_history": [
        {"status": "pending", "timestamp": "2024-03-02T10:05:00Z", "status_message": ""},
        {"status": "completed", "timestamp": "2024-03-02T10:07:00Z", "status_message": "Sent"},
        {"status": "processing", "timestamp": "2024-03-02T10:06:00Z"},
    ],
}

_BASE_RECEIVER = {
    "id": "r-001",
    "phone_number": "+15550001111",
    "email": "ada@example.com",
    "wallets": [
        {
            "id": "rw-1",
            "stellar_address": VALID_ADDRESS,
            "wallet": {"name": "Demo Wallet"},
            "status": "active",
            "created_at": "2024-02-28T08:00:00Z",
        },
        {
            "id": "rw-2",
            "stellar_address": OTHER_VALID_ADDRESS,
            "wallet": {"name": "Other Wallet"},
            "status": "pending",
            "created_at": "2024-02-29T08:00:00Z",
        },
    ],
    "total_payments": "4",
    "successful_payments": "3",
    "received_amounts": [
        {"received_amount": "75.5", "asset_code": "USDC", "asset_issuer": OTHER_VALID_ADDRESS},
    ],
}


def _factory(base: dict):
    def _make(**overrides) -> dict:
        record = deepcopy(base)
        for key, value in overrides.items():
            if value is _DROP:
                record.pop(key, None)
            else:
                record[key] = value
        return record

    return _make


class _Drop:
    """Sentinel: pass as an override value to remove the key."""

    def __repr__(self) -> str:
        return "DROP"


_DROP = _Drop()


@pytest.fixture
def DROP():
    return _DROP


@pytest.fixture
def make_raw_disbursement():
    """Factory fixture: a consistent raw disbursement, with key overrides."""
    return _factory(_BASE_DISBURSEMENT)


@pytest.fixture
def make_raw_payment():
    """Factory fixture: a consistent raw payment, with key overrides."""
    return _factory(_BASE_PAYMENT)


@pytest.fixture
def make_raw_receiver():
    """Factory fixture: a consistent raw receiver, with key overrides."""
    return _factory(_BASE_RECEIVER)


@pytest.fixture
def valid_address() -> str:
    return VALID_ADDRESS


@pytest.fixture
def other_valid_address() -> str:
    return OTHER_VALID_ADDRESS
