from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any

from setlone.errors import ValidationError

UID_MIN = 1_000_000
UID_MAX = 9_999_999
MILLISECONDS_THRESHOLD = 10**12
PROFILE_IMAGE_PREFIXES = ("data:image", "http://", "https://", "/uploads/")

_SYMBOL_PATTERN = re.compile(r"[A-Za-z0-9.^=_-]{1,32}")
_UID_PATTERN = re.compile(r"[0-9]{7}")
_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_BIRTH_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_PHONE_PATTERN = re.compile(r"\+[0-9-]+")


def to_native_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        casted = float(value)
        if math.isnan(casted) or math.isinf(casted):
            return default
        return casted
    except (TypeError, ValueError):
        return default


def to_epoch_seconds(value: Any) -> int:
    """Floor a provider timestamp to Unix seconds; 13-digit values are milliseconds."""
    ts = to_native_float(value)
    if ts >= MILLISECONDS_THRESHOLD:
        return math.floor(ts / 1000)
    return math.floor(ts)


def epoch_to_iso(seconds: float) -> str:
    return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def change_metrics(price: float, previous_close: float) -> tuple[float, float]:
    """Return (change, change_percent); percent is 0 when there is no usable previous close."""
    change = price - previous_close
    if previous_close <= 0:
        return change, 0.0
    return change, (change / previous_close) * 100


def validate_symbol(symbol: str) -> str:
    """Reject symbols that cannot be a ticker. The value is returned untouched."""
    if not symbol or not _SYMBOL_PATTERN.fullmatch(symbol):
        raise ValidationError("Invalid symbol", context={"symbol": symbol})
    return symbol


def is_generated_uid(value: str) -> bool:
    """Creation rule: exactly 7 digits with no leading zero."""
    return bool(_UID_PATTERN.fullmatch(value or "")) and UID_MIN <= int(value) <= UID_MAX


def validate_uid(value: str) -> str:
    """Update rule: any 7 ASCII digits, leading zeros allowed."""
    if not isinstance(value, str) or not _UID_PATTERN.fullmatch(value):
        raise ValidationError("UID must be exactly 7 digits", context={"uid": value})
    return value


def validate_email(value: str) -> str:
    if not _EMAIL_PATTERN.fullmatch(value or ""):
        raise ValidationError("Invalid email format")
    return value


def validate_birth_date(value: str) -> str:
    if not _BIRTH_DATE_PATTERN.fullmatch(value or ""):
        raise ValidationError("Invalid birth date format. Use YYYY-MM-DD")
    return value


def validate_phone_number(value: str) -> str:
    if not _PHONE_PATTERN.fullmatch(value or ""):
        raise ValidationError("Phone number must start with + and contain only digits and dashes")
    return value


def validate_profile_image(value: str) -> str:
    """Profile images are stored as text: an inline data URI, an absolute URL or an uploads path."""
    if not value.startswith(PROFILE_IMAGE_PREFIXES):
        raise ValidationError("Invalid profile_image format. Use URL or base64 string.")
    return value
