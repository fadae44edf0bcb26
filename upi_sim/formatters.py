"""
Display formatting helpers.

Money is rendered with Indian digit grouping (1,00,000.00) and dates follow
the en-IN short style ("15 Mar 2024"). Reference id generators live here too
because transaction receipts show them.
"""
import random
import re
import time
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[int, float, Decimal, str]
DateLike = Union[str, datetime]

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}

TRANSACTION_TYPE_LABELS = {
    "pay": "Payment",
    "request": "Request",
    "collect": "Collection",
}

TRANSACTION_STATUS_LABELS = {
    "pending": "Pending",
    "success": "Successful",
    "failed": "Failed",
    "accepted": "Accepted",
    "declined": "Declined",
    "expired": "Expired",
}

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_decimal(value: Number) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _to_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _group_indian(digits: str) -> str:
    """12345678 -> 1,23,45,678"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_amount(amount: Number) -> str:
    value = _to_decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, frac = f"{abs(value):.2f}".split(".")
    return f"{sign}{_group_indian(whole)}.{frac}"


def format_currency(amount: Number, currency: str = "INR") -> str:
    formatted = format_amount(amount)
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    if formatted.startswith("-"):
        return f"-{symbol}{formatted[1:]}"
    return f"{symbol}{formatted}"


def format_date(date: DateLike) -> str:
    d = _to_datetime(date)
    return f"{d.day} {d.strftime('%b')} {d.year}"


def format_time(date: DateLike) -> str:
    d = _to_datetime(date)
    hour = d.hour % 12 or 12
    suffix = "am" if d.hour < 12 else "pm"
    return f"{hour:02d}:{d.minute:02d} {suffix}"


def format_date_time(date: DateLike) -> str:
    return f"{format_date(date)}, {format_time(date)}"


def format_relative_time(date: DateLike, now: Optional[datetime] = None) -> str:
    d = _to_datetime(date)
    if now is None:
        now = datetime.now(d.tzinfo)
    seconds = (now - d).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"
    return format_date(d)


def _mask_all_but_last_four(value: str) -> str:
    if not value or len(value) < 4:
        return value
    return "*" * (len(value) - 4) + value[-4:]


def mask_account_number(account_number: str) -> str:
    return _mask_all_but_last_four(account_number)


def mask_phone_number(phone: str) -> str:
    return _mask_all_but_last_four(phone)


def format_phone_number(phone: str) -> str:
    """Render a mobile number as +91 98765 43210; unknown shapes pass through."""
    cleaned = re.sub(r"\D", "", phone)
    if len(cleaned) == 10:
        return f"+91 {cleaned[:5]} {cleaned[5:]}"
    if len(cleaned) == 12 and cleaned.startswith("91"):
        return f"+91 {cleaned[2:7]} {cleaned[7:]}"
    return phone


def format_account_number(account_number: str) -> str:
    cleaned = re.sub(r"\D", "", account_number)
    return " ".join(cleaned[i:i + 4] for i in range(0, len(cleaned), 4))


def format_ifsc(ifsc: str) -> str:
    return ifsc.upper()


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_BASE36[r])
    return "".join(reversed(out))


def generate_reference_id(rng: Optional[random.Random] = None) -> str:
    """Base36 millisecond timestamp followed by 6 random base36 chars, upper-cased."""
    rng = rng or random
    stamp = _base36(int(time.time() * 1000))
    suffix = "".join(rng.choice(_BASE36) for _ in range(6))
    return f"{stamp}{suffix}".upper()


def generate_upi_reference_id(rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    return f"{int(time.time() * 1000)}{rng.randint(0, 999999)}"


def format_balance(balance: Number) -> str:
    value = _to_decimal(balance)
    for threshold, unit in ((Decimal(10_000_000), "Cr"), (Decimal(100_000), "L"), (Decimal(1_000), "K")):
        if value >= threshold:
            scaled = (value / threshold).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
            return f"{scaled}{unit}"
    return f"{float(value):g}"


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:].lower()


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def format_transaction_type(type_: str) -> str:
    return TRANSACTION_TYPE_LABELS.get(type_, capitalize_first(type_))


def format_transaction_status(status: str) -> str:
    return TRANSACTION_STATUS_LABELS.get(status, capitalize_first(status))
