"""Identity normalization for directory addresses.

Responsibilities of this stage:
- canonicalize email-like addresses so both sides compare equal
- map missing or blank values to the empty key, meaning "no identity"

The empty key is never used for joins; callers skip those records.
"""

from __future__ import annotations

NO_IDENTITY = ""


def normalize_address(value: str | None) -> str:
    """Trim and case-fold ``value`` without locale rules."""

    if value is None:
        return NO_IDENTITY
    return value.strip().casefold()


def has_identity(value: str | None) -> bool:
    return normalize_address(value) != NO_IDENTITY
