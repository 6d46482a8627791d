"""Decimal-safe amount parsing and fixed-precision rendering.

Amounts are stored as SQLite REAL but always cross the boundary as strings
with exactly six fractional digits.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from tin.errors import InvalidAmount

AMOUNT_PLACES = 6

_AMOUNT_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def parse_amount(raw: str) -> Decimal:
    """Parse ``raw`` as a decimal that fits a finite REAL, or raise :class:`InvalidAmount`."""
    if not isinstance(raw, str) or not _AMOUNT_RE.match(raw):
        raise InvalidAmount(str(raw))
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise InvalidAmount(raw) from None
    if not value.is_finite() or not math.isfinite(float(value)):
        raise InvalidAmount(raw)
    return value


def parse_optional_amount(raw: Optional[str]) -> Optional[Decimal]:
    return None if raw is None else parse_amount(raw)


def to_storage(value: Optional[Decimal]) -> Optional[float]:
    """Convert to a REAL; results that overflow a float are :class:`InvalidAmount`."""
    if value is None:
        return None
    stored = float(value)
    if not math.isfinite(stored):
        raise InvalidAmount(str(value))
    return stored


def format_amount(value: float) -> str:
    """Render a stored REAL as a fixed six-decimal string."""
    return f"{float(value):.{AMOUNT_PLACES}f}"


def format_optional_amount(value: Optional[float]) -> Optional[str]:
    return None if value is None else format_amount(value)
