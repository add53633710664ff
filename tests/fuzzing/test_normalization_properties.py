"""
Property-based tests for RecordNormalizer and the receiver contact check.

Properties:
- Disbursement statistics round-trip: counts and amounts in, the same out.
- Every payment with a non-positive amount fails with InvalidFieldValueError.
- A receiver with neither phone nor email fails the contact check whatever
  its other fields hold.
- Arbitrary junk never escapes try_normalize as an exception.
- Counters with huge exponents or fractions read as 0 with a warning.
"""

from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from payout_ingestion.domain.validators import validate_receiver_contact
from payout_ingestion.mapping.normalizer import RecordNormalizer
from payout_kernel.exceptions import InvalidFieldValueError

FIXTURE_SETTINGS = settings(
    max_examples=75,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

counts = st.integers(min_value=0, max_value=10**6)
money = st.decimals(min_value=Decimal("0"), max_value=Decimal("10000000"), places=2, allow_nan=False, allow_infinity=False)
blank = st.sampled_from([None, "", "   "])


class TestDisbursementRoundTrip:
    @FIXTURE_SETTINGS
    @given(successful=counts, failed=counts, canceled=counts, remaining=counts, total_amount=money)
    def test_stats_equal_inputs(self, make_raw_disbursement, successful, failed, canceled, remaining, total_amount):
        total = successful + failed + canceled + remaining
        raw = make_raw_disbursement(
            total_payments=total,
            total_payments_sent=successful,
            total_payments_failed=failed,
            total_payments_canceled=canceled,
            total_payments_remaining=remaining,
            total_amount=str(total_amount),
            amount_disbursed=str(total_amount),
        )
        warnings = []
        d = RecordNormalizer(on_warning=warnings.append).normalize_disbursement(raw)

        assert d.stats.payments_total_count == total
        assert d.stats.payments_successful_count == successful
        assert d.stats.payments_failed_count == failed
        assert d.stats.payments_canceled_count == canceled
        assert d.stats.payments_remaining_count == remaining
        assert d.stats.counted_total == d.stats.payments_total_count
        assert d.stats.total_amount == total_amount
        assert warnings == []


class TestPaymentAmounts:
    @FIXTURE_SETTINGS
    @given(
        amount=st.one_of(
            st.decimals(max_value=Decimal("0"), allow_nan=False, allow_infinity=False),
            st.integers(max_value=0),
        )
    )
    def test_non_positive_amount_rejected(self, make_raw_payment, amount):
        with pytest.raises(InvalidFieldValueError):
            RecordNormalizer().normalize_payment(make_raw_payment(amount=str(amount)))

    @FIXTURE_SETTINGS
    @given(amount=st.decimals(min_value=Decimal("0.0000001"), max_value=Decimal("1e12"), places=7, allow_nan=False))
    def test_positive_amount_preserved(self, make_raw_payment, amount):
        payment = RecordNormalizer().normalize_payment(make_raw_payment(amount=str(amount)))
        assert payment.amount == amount


class TestReceiverContact:
    @FIXTURE_SETTINGS
    @given(
        phone=blank,
        email=blank,
        receiver_id=st.text(max_size=20),
        total=st.one_of(st.none(), counts, st.text(max_size=5)),
    )
    def test_no_contact_is_false(self, make_raw_receiver, phone, email, receiver_id, total):
        raw = make_raw_receiver(phone_number=phone, email=email, id=receiver_id, total_payments=total)
        assert validate_receiver_contact(raw) is False


class TestJunkInput:
    @settings(max_examples=100, deadline=None)
    @given(
        kind=st.sampled_from(["disbursement", "payment", "receiver"]),
        raw=st.one_of(
            st.none(),
            st.text(max_size=10),
            st.dictionaries(
                st.sampled_from(["id", "amount", "name", "asset", "wallet", "status_history", "wallets"]),
                st.one_of(st.none(), st.text(max_size=10), st.integers(), st.lists(st.text(max_size=5), max_size=3)),
                max_size=7,
            ),
        ),
    )
    def test_try_normalize_never_raises(self, kind, raw):
        result = RecordNormalizer().try_normalize(kind, raw)
        assert (result.record is None) != (result.error is None)


class TestOversizedCounters:
    @FIXTURE_SETTINGS
    @given(
        mantissa=st.integers(min_value=1, max_value=9),
        exponent=st.integers(min_value=1001, max_value=10**18),
        field=st.sampled_from(["total_payments", "successful_payments"]),
    )
    def test_huge_exponent_reads_as_zero(self, make_raw_receiver, mantissa, exponent, field):
        raw = make_raw_receiver(**{field: f"{mantissa}e{exponent}"})
        result = RecordNormalizer().try_normalize("receiver", raw)

        assert result.success
        assert getattr(result.unwrap(), f"{field}_count") == 0
        assert "payment_count_unparseable" in [w.code for w in result.warnings]
