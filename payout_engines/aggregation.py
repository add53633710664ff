"""
payout_engines.aggregation -- Exact decimal aggregation over CSV amount columns.

Responsibility:
    Sum, average and bound the values of one column of comma-separated
    text, recording a reason for every row that is skipped.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The text arrives already
    read; reading files or streams belongs to the caller.

Invariants enforced:
    - Decimal-only arithmetic.  Summation runs under a local context whose
      precision is derived from the accepted values (largest adjusted
      exponent down to smallest exponent, plus carry digits), so no
      addition rounds and the total is independent of row order.
    - A bad row never aborts the aggregation; it is recorded and skipped.
    - ``average`` is 0 when there are no valid rows.

Failure modes:
    - None raised for data problems.  A missing column yields a zero
      aggregate with every data row marked ``COLUMN_NOT_FOUND``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal, localcontext

from payout_engines.tracer import traced_engine
from payout_kernel.domain.dtos import AggregationRowError
from payout_kernel.domain.values import decimal_places, parse_decimal
from payout_kernel.logging_config import get_logger

logger = get_logger("engines.aggregation")

DEFAULT_AMOUNT_COLUMN = "amount"
DEFAULT_MAX_DECIMAL_PLACES = 7

# Floor on working precision for sums and the average.
MIN_SUM_PRECISION = 64

_ZERO = Decimal("0")
_BOM = "\ufeff"
_LOGGED_ERROR_LIMIT = 10

CsvSource = str | Iterable[str]


@dataclass(frozen=True)
class AggregationResult:
    total: Decimal = _ZERO
    average: Decimal = _ZERO
    min: Decimal = _ZERO
    max: Decimal = _ZERO
    valid_row_count: int = 0
    invalid_row_count: int = 0
    row_count: int = 0
    row_errors: tuple[AggregationRowError, ...] = field(default_factory=tuple)
    precision_warnings: tuple[AggregationRowError, ...] = field(default_factory=tuple)

    @property
    def has_errors(self) -> bool:
        return self.invalid_row_count > 0

    @property
    def error_messages(self) -> tuple[str, ...]:
        """``"Row N: message"`` strings for display."""
        return tuple(f"Row {e.row}: {e.message}" for e in self.row_errors)


@dataclass(frozen=True)
class CsvStructureCheck:
    is_valid: bool
    missing_columns: tuple[str, ...]
    available_columns: tuple[str, ...]


def _non_empty_lines(source: CsvSource) -> list[str]:
    lines = source.split("\n") if isinstance(source, str) else source
    out = [line for line in lines if line.strip()]
    if out and out[0].startswith(_BOM):
        out[0] = out[0][len(_BOM):]
    return out


def _split(line: str) -> list[str]:
    return [cell.strip() for cell in line.split(",")]


def validate_csv_structure(source: CsvSource, required_columns: Iterable[str]) -> CsvStructureCheck:
    """Check that the header row names every required column."""
    required = tuple(required_columns)
    lines = _non_empty_lines(source)
    if not lines:
        return CsvStructureCheck(is_valid=False, missing_columns=required, available_columns=())
    columns = tuple(_split(lines[0]))
    missing = tuple(c for c in required if c not in columns)
    return CsvStructureCheck(is_valid=not missing, missing_columns=missing, available_columns=columns)


class DecimalAggregator:
    """Aggregates one amount column of CSV text with exact decimal arithmetic.

    The constructor arguments are defaults used when ``aggregate`` is called
    without an explicit column or decimal-place limit.
    """

    def __init__(
        self,
        column_name: str = DEFAULT_AMOUNT_COLUMN,
        max_decimal_places: int = DEFAULT_MAX_DECIMAL_PLACES,
    ):
        self.column_name = column_name
        self.max_decimal_places = max_decimal_places

    @classmethod
    def from_settings(cls, settings) -> DecimalAggregator:
        return cls(
            column_name=settings.csv_amount_column,
            max_decimal_places=settings.max_decimal_places,
        )

    def aggregate_text(
        self,
        text: str,
        column_name: str | None = None,
        max_decimal_places: int | None = None,
    ) -> AggregationResult:
        """Aggregate raw CSV text split on ``\\n``."""
        return self.aggregate(
            text.split("\n"),
            column_name=column_name,
            max_decimal_places=max_decimal_places,
        )

    @traced_engine("aggregation", "1.0", fingerprint_fields=("column_name", "max_decimal_places"))
    def aggregate(
        self,
        rows: CsvSource,
        column_name: str | None = None,
        max_decimal_places: int | None = None,
    ) -> AggregationResult:
        """Aggregate the ``column_name`` values of ``rows``.

        The first non-empty line is the header.  Every later non-empty line
        is a data row, numbered by its position among non-empty lines
        (header = 1).

        Args:
            rows: Lines of CSV text, or the whole text.
            column_name: Header name of the amount column (exact match).
            max_decimal_places: Values with more significant decimal places
                are still summed but recorded as precision warnings.

        Returns:
            AggregationResult with exact ``total``, ``average``, ``min`` and
            ``max`` over the accepted values.
        """
        column = self.column_name if column_name is None else column_name
        limit = self.max_decimal_places if max_decimal_places is None else max_decimal_places

        lines = _non_empty_lines(rows)
        if not lines:
            logger.warning("csv_empty", extra={"column_name": column})
            return AggregationResult()

        header, data = lines[0], lines[1:]
        columns = _split(header)
        if column not in columns:
            logger.warning(
                "csv_amount_column_not_found",
                extra={"column_name": column, "available_columns": columns},
            )
            errors = tuple(
                AggregationRowError(
                    row=i,
                    code="COLUMN_NOT_FOUND",
                    message=f"Column '{column}' not found",
                )
                for i in range(2, len(data) + 2)
            )
            return AggregationResult(
                invalid_row_count=len(data),
                row_count=len(data),
                row_errors=errors,
            )
        index = columns.index(column)

        accepted: list[Decimal] = []
        row_errors: list[AggregationRowError] = []
        precision_warnings: list[AggregationRowError] = []

        for row_number, line in enumerate(data, start=2):
            values = _split(line)
            raw = values[index] if index < len(values) else ""
            amount, error = _parse_amount(row_number, raw)
            if error is not None:
                row_errors.append(error)
                continue
            if decimal_places(amount) > limit:
                precision_warnings.append(
                    AggregationRowError(
                        row=row_number,
                        code="PRECISION_EXCEEDED",
                        message=f"Amount exceeds {limit} decimal places: {raw}",
                        value=raw,
                    )
                )
                logger.warning(
                    "csv_amount_precision_exceeded",
                    extra={"row": row_number, "amount": raw, "max_decimal_places": limit},
                )
            accepted.append(amount)

        result = _summarize(accepted, row_errors, precision_warnings, len(data))

        logger.info(
            "csv_aggregated",
            extra={
                "column_name": column,
                "total": result.total,
                "valid_rows": result.valid_row_count,
                "invalid_rows": result.invalid_row_count,
                "total_rows": result.row_count,
            },
        )
        if row_errors:
            logger.warning(
                "csv_aggregated_with_errors",
                extra={
                    "invalid_rows": len(row_errors),
                    "errors": list(result.error_messages[:_LOGGED_ERROR_LIMIT]),
                },
            )
        return result


def _parse_amount(row: int, raw: str) -> tuple[Decimal | None, AggregationRowError | None]:
    if raw == "":
        return None, AggregationRowError(row=row, code="EMPTY_VALUE", message="Empty amount value")
    try:
        amount = parse_decimal(raw)
    except ValueError:
        amount = None
    if amount is None:
        return None, AggregationRowError(
            row=row,
            code="NON_NUMERIC_VALUE",
            message=f"Invalid amount format: {raw}",
            value=raw,
        )
    if amount < 0:
        return None, AggregationRowError(
            row=row,
            code="NEGATIVE_VALUE",
            message=f"Negative amount: {raw}",
            value=raw,
        )
    return amount, None


def _summarize(
    accepted: list[Decimal],
    row_errors: list[AggregationRowError],
    precision_warnings: list[AggregationRowError],
    row_count: int,
) -> AggregationResult:
    if not accepted:
        return AggregationResult(
            invalid_row_count=len(row_errors),
            row_count=row_count,
            row_errors=tuple(row_errors),
            precision_warnings=tuple(precision_warnings),
        )

    with localcontext() as ctx:
        ctx.prec = _exact_precision(accepted)
        total = sum(accepted, _ZERO)
        average = total / len(accepted)

    return AggregationResult(
        total=total,
        average=average,
        min=min(accepted),
        max=max(accepted),
        valid_row_count=len(accepted),
        invalid_row_count=len(row_errors),
        row_count=row_count,
        row_errors=tuple(row_errors),
        precision_warnings=tuple(precision_warnings),
    )


def _exact_precision(values: list[Decimal]) -> int:
    """Digits needed for the sum of ``values`` to carry no rounding."""
    top = max(0, max(v.adjusted() for v in values))
    bottom = min(0, min(v.as_tuple().exponent for v in values))
    carry = len(str(len(values)))
    return max(MIN_SUM_PRECISION, top - bottom + 1 + carry)
