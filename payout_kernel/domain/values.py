"""
Values -- Self-validating primitives for upstream payout data.

Responsibility:
    Field-level parsing and format checks shared by the validators and the
    normalizer: exact decimal parsing, lenient count parsing, ISO-8601
    timestamp parsing, display-name derivation, and the Stellar-specific
    format rules for wallet (strkey) addresses, asset codes, asset issuers
    and wallet names.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Amounts are Decimal, never float. Floats arriving from JSON are
      converted through ``str()`` to avoid binary artifacts.
    - Wallet addresses are 56 characters: ``G`` followed by 55 characters
      of the base32 alphabet ``A-Z2-7``.
    - Amount strings are plain ASCII numerals within
      ``10**±MAX_AMOUNT_EXPONENT``.

Failure modes:
    - ``parse_decimal`` raises ValueError for present-but-unparseable values.
    - Format validators never raise; they return ValidationResult.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import UTC, datetime
from decimal import Decimal, DecimalException
from typing import Any

from payout_kernel.domain.dtos import ValidationError, ValidationResult

WALLET_ADDRESS_PREFIX = "G"
WALLET_ADDRESS_LENGTH = 56
WALLET_ADDRESS_REGEX = re.compile(r"^G[A-Z2-7]{55}$")
# Rejected on top of the regex (O and I fall inside its alphabet).
_FORBIDDEN_ADDRESS_CHARS = frozenset("0189OI")

ASSET_CODE_MAX_LENGTH = 12
ASSET_CODE_REGEX = re.compile(r"^[A-Z0-9\-_]+$")
RESERVED_ASSET_CODES: frozenset[str] = frozenset({"XLM", "NATIVE"})

# Plain ASCII numerals only; ``Decimal()`` alone also takes "1_000" and
# non-ASCII digits.
_NUMERAL_REGEX = re.compile(r"^[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?$")
# Largest accepted |adjusted exponent|; beyond it a value is out of range.
MAX_AMOUNT_EXPONENT = 1000

WALLET_NAME_MIN_LENGTH = 2
WALLET_NAME_MAX_LENGTH = 50
_WALLET_NAME_INVALID_CHARS = re.compile(r'[<>:"/\\|?*]')


# =============================================================================
# Parsing
# =============================================================================


def is_blank(value: Any) -> bool:
    """True for None, empty and whitespace-only strings."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def parse_decimal(value: Any) -> Decimal | None:
    """
    Parse an upstream amount into an exact Decimal.

    Returns None when the value is absent (None or blank string).  Strings
    must be plain ASCII numerals, optionally signed and with an exponent.

    Raises:
        ValueError: value is present but not a finite number, or its
            magnitude lies outside ``10**±MAX_AMOUNT_EXPONENT``.
    """
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, int):
        d = Decimal(value)
    elif isinstance(value, float):
        d = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMERAL_REGEX.match(text):
            raise ValueError(f"Not a number: {value!r}")
        try:
            d = Decimal(text)
        except DecimalException as e:
            raise ValueError(f"Not a number: {value!r}") from e
    else:
        raise ValueError(f"Not a number: {value!r}")
    if not d.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    if not d.is_zero() and abs(d.adjusted()) > MAX_AMOUNT_EXPONENT:
        raise ValueError(f"Number out of range: {value!r}")
    return d


def parse_count(value: Any) -> int:
    """Parse an upstream counter.

    Absent, unparseable, out-of-range and fractional counters read as 0.
    """
    try:
        d = parse_decimal(value)
    except ValueError:
        return 0
    if d is None or d != d.to_integral_value():
        return 0
    return int(d)


def is_count(value: Any) -> bool:
    """True when ``value`` is absent or a whole number ``parse_count`` keeps."""
    try:
        d = parse_decimal(value)
    except ValueError:
        return False
    return d is None or d == d.to_integral_value()


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix accepted). Naive values are UTC."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def optional_str(value: Any) -> str | None:
    """Stringify a present value; None and blank strings read as None."""
    if is_blank(value):
        return None
    return str(value)


def display_name(person: Any) -> str | None:
    """``"First Last"`` when both parts are present, otherwise None."""
    if not isinstance(person, Mapping):
        return None
    first = person.get("first_name")
    last = person.get("last_name")
    if is_blank(first) or is_blank(last):
        return None
    return f"{first} {last}"


def decimal_places(value: Decimal) -> int:
    """Significant decimal places; trailing zeros do not count."""
    _, digits, exponent = value.as_tuple()
    if not isinstance(exponent, int) or exponent >= 0 or value.is_zero():
        return 0
    places = -exponent
    i = len(digits) - 1
    while places > 0 and i >= 0 and digits[i] == 0:
        places -= 1
        i -= 1
    return places


# =============================================================================
# Wallet addresses
# =============================================================================


def is_valid_wallet_address(address: Any) -> bool:
    """True when ``address`` is a well-formed Stellar account address."""
    if not isinstance(address, str) or not address:
        return False
    if _FORBIDDEN_ADDRESS_CHARS.intersection(address):
        return False
    return bool(WALLET_ADDRESS_REGEX.match(address))


def validate_wallet_address(address: Any, field: str = "address") -> ValidationResult:
    """
    Validate a Stellar account address with field-friendly messages.

    Agrees with ``is_valid_wallet_address``; each failing aspect (prefix,
    length, forbidden characters) gets its own message.
    """
    if not isinstance(address, str) or not address:
        return ValidationResult.failure(
            ValidationError(
                code="MISSING_REQUIRED_FIELD",
                message="Address is required and must be a string",
                field=field,
            )
        )

    errors: list[ValidationError] = []

    def _err(message: str) -> None:
        errors.append(ValidationError(code="INVALID_WALLET_ADDRESS", message=message, field=field))

    if not address.startswith(WALLET_ADDRESS_PREFIX):
        _err(f"Address must start with '{WALLET_ADDRESS_PREFIX}'")
    if len(address) != WALLET_ADDRESS_LENGTH:
        _err(f"Address must be exactly {WALLET_ADDRESS_LENGTH} characters long (got {len(address)})")
    if not WALLET_ADDRESS_REGEX.match(address):
        _err("Address contains invalid characters or format")
    if any(ch in address for ch in "0189"):
        _err("Address contains invalid characters (0, 1, 8, 9 are not allowed in Stellar addresses)")
    if any(ch in address for ch in "OI"):
        _err("Address contains invalid characters (O, I are not allowed in Stellar addresses)")

    return ValidationResult.from_errors(errors)


# =============================================================================
# Assets and wallets
# =============================================================================


def validate_asset_code(asset_code: Any) -> ValidationResult:
    """Asset code: 1-12 of ``A-Z0-9-_``, not a reserved native code."""
    if not isinstance(asset_code, str) or not asset_code:
        return ValidationResult.failure(
            ValidationError(
                code="MISSING_REQUIRED_FIELD",
                message="Asset code is required and must be a string",
                field="asset_code",
            )
        )

    code = asset_code.strip()
    errors: list[ValidationError] = []
    if not code:
        errors.append(ValidationError("INVALID_ASSET_CODE", "Asset code cannot be empty", "asset_code"))
    if len(code) > ASSET_CODE_MAX_LENGTH:
        errors.append(
            ValidationError(
                "INVALID_ASSET_CODE",
                f"Asset code cannot exceed {ASSET_CODE_MAX_LENGTH} characters",
                "asset_code",
            )
        )
    if not ASSET_CODE_REGEX.match(code):
        errors.append(
            ValidationError(
                "INVALID_ASSET_CODE",
                "Asset code contains invalid characters "
                "(only uppercase letters, numbers, hyphens, and underscores allowed)",
                "asset_code",
            )
        )
    if code.upper() in RESERVED_ASSET_CODES:
        errors.append(ValidationError("RESERVED_ASSET_CODE", f"Asset code '{code}' is reserved", "asset_code"))
    return ValidationResult.from_errors(errors)


def validate_asset_issuer(issuer: Any) -> ValidationResult:
    """Asset issuer must be a valid account address; messages are prefixed ``Issuer:``."""
    if not isinstance(issuer, str) or not issuer:
        return ValidationResult.failure(
            ValidationError(
                code="MISSING_REQUIRED_FIELD",
                message="Asset issuer is required and must be a string",
                field="asset_issuer",
            )
        )
    inner = validate_wallet_address(issuer, field="asset_issuer")
    if inner.is_valid:
        return inner
    return ValidationResult.failure(
        *(
            ValidationError(code=e.code, message=f"Issuer: {e.message}", field="asset_issuer")
            for e in inner.errors
        )
    )


def validate_wallet_name(name: Any) -> ValidationResult:
    """Wallet (provider) name: 2-50 characters after trimming, no path/markup characters."""
    if not isinstance(name, str) or not name:
        return ValidationResult.failure(
            ValidationError(
                code="MISSING_REQUIRED_FIELD",
                message="Wallet name is required and must be a string",
                field="wallet_name",
            )
        )

    trimmed = name.strip()
    errors: list[ValidationError] = []
    if not trimmed:
        errors.append(ValidationError("INVALID_WALLET_NAME", "Wallet name cannot be empty", "wallet_name"))
    if len(trimmed) < WALLET_NAME_MIN_LENGTH:
        errors.append(
            ValidationError(
                "INVALID_WALLET_NAME",
                f"Wallet name must be at least {WALLET_NAME_MIN_LENGTH} characters long",
                "wallet_name",
            )
        )
    if len(trimmed) > WALLET_NAME_MAX_LENGTH:
        errors.append(
            ValidationError(
                "INVALID_WALLET_NAME",
                f"Wallet name cannot exceed {WALLET_NAME_MAX_LENGTH} characters",
                "wallet_name",
            )
        )
    if _WALLET_NAME_INVALID_CHARS.search(trimmed):
        errors.append(ValidationError("INVALID_WALLET_NAME", "Wallet name contains invalid characters", "wallet_name"))
    return ValidationResult.from_errors(errors)
