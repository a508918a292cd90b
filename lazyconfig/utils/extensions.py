"""
Small helpers used by applications embedding LazyConfig.
"""

from datetime import timedelta
from typing import List, Optional

from lazyconfig.config.policy import SettingType


def hex_to_bytes(text: str) -> bytes:
    """
    Convert a hex string such as "f94aaa0d..." to bytes.

    Raises ValueError for odd-length or non-hex input.
    """
    cleaned = text.strip()
    if len(cleaned) % 2:
        raise ValueError(f"Hex string has odd length {len(cleaned)}")
    return bytes.fromhex(cleaned)


def integrate_arrays(*arrays: Optional[bytes]) -> bytes:
    """Concatenate byte strings in order, treating None as empty."""
    return b"".join(bytes(a) for a in arrays if a)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def to_readable_string(span: timedelta) -> str:
    """
    Format a timedelta as "1 day 2 hours 3 minutes 4 seconds 5 milliseconds".

    Zero components are left out. Spans with no whole millisecond (including
    negative spans) fall back to the total milliseconds with four decimals.
    """
    if span >= timedelta(0):
        hours, remainder = divmod(span.seconds, 3600)
        minutes, seconds = divmod(remainder, 60)
        components = (
            (span.days, "day"),
            (hours, "hour"),
            (minutes, "minute"),
            (seconds, "second"),
            (span.microseconds // 1000, "millisecond"),
        )
        parts = [_plural(count, unit) for count, unit in components if count > 0]
        if parts:
            return " ".join(parts)

    total_ms = span.total_seconds() * 1000
    return f"{total_ms:,.4f} milliseconds"


def find_empty_settings(settings, fill_value: str = "") -> List[str]:
    """
    Keys of string settings whose value is missing or empty.

    ``settings`` is an AppSettings. When fill_value is non-empty every empty
    setting found is set to it, except encrypted settings of a store with no
    cipher, which are only reported.
    """
    empty = []
    for spec in settings.SCHEMA:
        if spec.type is not SettingType.STRING:
            continue
        if spec.encrypted and not settings.store.encryption_enabled:
            if not settings.store.raw(spec.key):
                empty.append(spec.key)
            continue
        if settings.get_typed(spec.key):
            continue
        if fill_value:
            settings.set_typed(spec.key, fill_value)
        empty.append(spec.key)
    return empty


__all__ = [
    'hex_to_bytes',
    'integrate_arrays',
    'to_readable_string',
    'find_empty_settings',
]
