"""
Property-based tests for DecimalAggregator.

Properties:
- Summation is order independent: any permutation of the valid rows yields
  an identical total (same value and same textual form).
- The total equals the exact integer-scaled sum of the inputs.
- Interleaved bad rows never change the total of the good ones.
- Values far wider than the 64-digit working floor still sum exactly.
"""

import random
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from payout_engines.aggregation import DecimalAggregator

PLACES = 7
SCALE = 10**PLACES

amounts = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("1000000000"),
    places=PLACES,
    allow_nan=False,
    allow_infinity=False,
)


def _csv(values) -> str:
    return "amount,note\n" + "".join(f"{v},x\n" for v in values)


def _random_amounts(rng: random.Random, count: int) -> list[str]:
    out = []
    for _ in range(count):
        units = rng.randint(0, 10**9)
        places = rng.randint(0, PLACES)
        fraction = rng.randint(0, 10**places - 1) if places else 0
        out.append(f"{units}.{fraction:0{places}d}" if places else str(units))
    return out


class TestOrderIndependence:
    @settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    @given(seed=st.integers(min_value=0, max_value=2**32 - 1))
    def test_thousand_row_permutation(self, seed):
        rng = random.Random(seed)
        values = _random_amounts(rng, 1000)
        shuffled = list(values)
        rng.shuffle(shuffled)

        aggregator = DecimalAggregator()
        original = aggregator.aggregate_text(_csv(values))
        permuted = aggregator.aggregate_text(_csv(shuffled))

        assert original.valid_row_count == 1000
        assert original.total == permuted.total
        assert str(original.total) == str(permuted.total)
        assert original.average == permuted.average
        assert original.min == permuted.min
        assert original.max == permuted.max

    @settings(max_examples=100, deadline=None)
    @given(data=st.data(), values=st.lists(amounts, min_size=1, max_size=60))
    def test_permutation_small(self, data, values):
        permuted = data.draw(st.permutations(values))
        aggregator = DecimalAggregator()
        assert aggregator.aggregate_text(_csv(values)).total == aggregator.aggregate_text(_csv(permuted)).total


class TestExactness:
    @settings(max_examples=100, deadline=None)
    @given(values=st.lists(amounts, min_size=1, max_size=200))
    def test_total_matches_integer_sum(self, values):
        expected_scaled = sum(int(v * SCALE) for v in values)
        result = DecimalAggregator().aggregate_text(_csv(values))

        assert result.total * SCALE == expected_scaled
        assert result.precision_warnings == ()

    @settings(max_examples=50, deadline=None)
    @given(
        values=st.lists(amounts, min_size=1, max_size=50),
        junk=st.lists(st.sampled_from(["abc", "-1", "", "NaN", "-0.5"]), max_size=20),
        seed=st.integers(min_value=0, max_value=1000),
    )
    def test_bad_rows_do_not_change_total(self, values, junk, seed):
        rows = [str(v) for v in values] + junk
        random.Random(seed).shuffle(rows)
        clean = DecimalAggregator().aggregate_text(_csv(values))
        noisy = DecimalAggregator().aggregate_text(_csv(rows))

        assert noisy.total == clean.total
        assert noisy.valid_row_count == len(values)
        assert noisy.invalid_row_count == len(junk)


wide_parts = st.tuples(
    st.integers(min_value=0, max_value=10**90),
    st.integers(min_value=0, max_value=SCALE - 1),
)


class TestWideValues:
    @settings(max_examples=100, deadline=None)
    @given(data=st.data(), parts=st.lists(wide_parts, min_size=1, max_size=40))
    def test_exact_and_order_independent(self, data, parts):
        values = [f"{units}.{fraction:0{PLACES}d}" for units, fraction in parts]
        permuted = data.draw(st.permutations(values))
        scaled = sum(units * SCALE + fraction for units, fraction in parts)
        expected = Decimal(f"{scaled // SCALE}.{scaled % SCALE:0{PLACES}d}")

        aggregator = DecimalAggregator()
        original = aggregator.aggregate_text(_csv(values))
        shuffled = aggregator.aggregate_text(_csv(permuted))

        assert original.total == expected
        assert shuffled.total == expected
        assert str(original.total) == str(shuffled.total)
