"""
Field validators for user-supplied input.

Every validator is pure and synchronous, runs its checks in a fixed order and
stops at the first failure, returning a ValidationResult. Nothing here talks
to the service or the store.
"""
import re
from decimal import Decimal
from typing import Optional, Union

from upi_sim.formatters import format_currency
from upi_sim.schemas.results import ErrorCode, ValidationResult

DEFAULT_MAX_AMOUNT = 100_000

KNOWN_UPI_PROVIDERS = frozenset({
    "okicici", "paytm", "phonepe", "gpay", "amazonpay", "bhim",
    "axis", "hdfc", "sbi", "icici", "kotak", "yesbank", "pnb",
    "unionbank", "canara", "bankofbaroda", "idfc", "federal",
})

VPA_PATTERN = re.compile(r"[a-zA-Z0-9._-]+@[a-zA-Z0-9.-]+")
PHONE_PATTERN = re.compile(r"[6-9]\d{9}", re.ASCII)
PHONE_NOISE = re.compile(r"[\s\-()]")
ACCOUNT_PATTERN = re.compile(r"\d{9,18}", re.ASCII)
ACCOUNT_NOISE = re.compile(r"[\s\-]")
AMOUNT_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", re.ASCII)
IFSC_PATTERN = re.compile(r"[A-Z]{4}0[A-Z0-9]{6}")
DESCRIPTION_FORBIDDEN = re.compile(r"[<>{}]")
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
NAME_PATTERN = re.compile(r"[a-zA-Z\s.\-]+")

UPI_SCHEME = "upi://"
MAX_DESCRIPTION_LENGTH = 50


def validate_vpa(vpa: str) -> ValidationResult:
    if not vpa:
        return ValidationResult.fail(ErrorCode.REQUIRED, "VPA is required")

    if not VPA_PATTERN.fullmatch(vpa):
        return ValidationResult.fail(
            ErrorCode.FORMAT_ERROR, "Invalid VPA format. Use format: username@provider"
        )

    username, provider = vpa.split("@")

    if not 3 <= len(username) <= 50:
        return ValidationResult.fail(
            ErrorCode.LENGTH_ERROR, "Username must be between 3 and 50 characters"
        )

    if not 2 <= len(provider) <= 20:
        return ValidationResult.fail(
            ErrorCode.LENGTH_ERROR, "Provider must be between 2 and 20 characters"
        )

    if provider.lower() not in KNOWN_UPI_PROVIDERS:
        return ValidationResult.fail(ErrorCode.UNKNOWN_PROVIDER, "Invalid UPI provider")

    return ValidationResult.ok()


def validate_phone_number(phone: str) -> ValidationResult:
    if not phone:
        return ValidationResult.fail(ErrorCode.REQUIRED, "Phone number is required")

    if not PHONE_PATTERN.fullmatch(PHONE_NOISE.sub("", phone)):
        return ValidationResult.fail(
            ErrorCode.FORMAT_ERROR, "Please enter a valid 10-digit mobile number"
        )

    return ValidationResult.ok()


def validate_amount(
    amount: str,
    max_amount: Optional[Union[int, Decimal]] = None,
) -> ValidationResult:
    """
    Validate a monetary amount typed by the user.

    Args:
        amount: Raw text, e.g. "100.50"
        max_amount: Optional ceiling tighter than the default of 1,00,000

    Returns:
        ValidationResult; the first failing check wins.
    """
    if not amount:
        return ValidationResult.fail(ErrorCode.REQUIRED, "Amount is required")

    # ASCII digits only; Decimal() also takes NaN, 1_000 and non-Latin digits
    text = amount.strip()
    if not AMOUNT_PATTERN.fullmatch(text):
        return ValidationResult.fail(ErrorCode.NOT_A_NUMBER, "Please enter a valid amount")
    value = Decimal(text)

    if value <= 0:
        return ValidationResult.fail(ErrorCode.NOT_POSITIVE, "Amount must be greater than 0")

    ceiling = Decimal(DEFAULT_MAX_AMOUNT) if max_amount is None else Decimal(str(max_amount))
    if value > ceiling:
        return ValidationResult.fail(
            ErrorCode.TOO_LARGE, f"Amount cannot exceed {format_currency(ceiling)}"
        )

    # 10.123 and 5e-3 both carry a third decimal place
    if value.as_tuple().exponent < -2:
        return ValidationResult.fail(
            ErrorCode.TOO_PRECISE, "Amount can have maximum 2 decimal places"
        )

    return ValidationResult.ok()


def validate_account_number(account_number: str) -> ValidationResult:
    if not account_number:
        return ValidationResult.fail(ErrorCode.REQUIRED, "Account number is required")

    if not ACCOUNT_PATTERN.fullmatch(ACCOUNT_NOISE.sub("", account_number)):
        return ValidationResult.fail(ErrorCode.FORMAT_ERROR, "Account number must be 9-18 digits")

    return ValidationResult.ok()


def validate_ifsc(ifsc: str) -> ValidationResult:
    if not ifsc:
        return ValidationResult.fail(ErrorCode.REQUIRED, "IFSC code is required")

    # 4 letters, a literal 0, then 6 alphanumerics
    if not IFSC_PATTERN.fullmatch(ifsc.upper()):
        return ValidationResult.fail(ErrorCode.FORMAT_ERROR, "Invalid IFSC code format")

    return ValidationResult.ok()


def validate_description(description: Optional[str]) -> ValidationResult:
    if not description:
        return ValidationResult.ok()  # optional field

    if len(description) > MAX_DESCRIPTION_LENGTH:
        return ValidationResult.fail(
            ErrorCode.TOO_LONG, f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
        )

    if DESCRIPTION_FORBIDDEN.search(description):
        return ValidationResult.fail(
            ErrorCode.INVALID_CHARS, "Description contains invalid characters"
        )

    return ValidationResult.ok()


def validate_qr_data(data: str) -> ValidationResult:
    if not data:
        return ValidationResult.fail(ErrorCode.REQUIRED, "QR data is required")

    if not data.startswith(UPI_SCHEME):
        return ValidationResult.fail(ErrorCode.FORMAT_ERROR, "Invalid UPI QR code format")

    return ValidationResult.ok()


def validate_email(email: str) -> ValidationResult:
    if not email:
        return ValidationResult.fail(ErrorCode.REQUIRED, "Email is required")

    # Deliberately loose: a@b.c passes, so does a..b@c.d
    if not EMAIL_PATTERN.fullmatch(email):
        return ValidationResult.fail(ErrorCode.FORMAT_ERROR, "Please enter a valid email address")

    return ValidationResult.ok()


def validate_name(name: str) -> ValidationResult:
    if not name:
        return ValidationResult.fail(ErrorCode.REQUIRED, "Name is required")

    if len(name) < 2:
        return ValidationResult.fail(ErrorCode.TOO_SHORT, "Name must be at least 2 characters")

    if len(name) > 50:
        return ValidationResult.fail(ErrorCode.TOO_LONG, "Name cannot exceed 50 characters")

    if not NAME_PATTERN.fullmatch(name):
        return ValidationResult.fail(
            ErrorCode.INVALID_CHARS,
            "Name can only contain letters, spaces, dots, and hyphens",
        )

    return ValidationResult.ok()


def validate_recipient(recipient_type: str, value: str) -> ValidationResult:
    if recipient_type == "phone":
        return validate_phone_number(value)
    if recipient_type == "qr":
        return validate_qr_data(value)
    return validate_vpa(value)


def validate_payment_form(
    amount: str,
    recipient_type: str,
    recipient_value: str,
    description: Optional[str] = None,
    max_amount: Optional[Union[int, Decimal]] = None,
) -> ValidationResult:
    """Gate a send/request submission: amount, then recipient, then description."""
    for result in (
        validate_amount(amount, max_amount),
        validate_recipient(recipient_type, recipient_value),
        validate_description(description),
    ):
        if not result.is_valid:
            return result
    return ValidationResult.ok()


VALIDATORS = {
    "vpa": validate_vpa,
    "phone": validate_phone_number,
    "amount": validate_amount,
    "account_number": validate_account_number,
    "ifsc": validate_ifsc,
    "description": validate_description,
    "qr": validate_qr_data,
    "email": validate_email,
    "name": validate_name,
}
