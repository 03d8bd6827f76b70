"""Normalization helpers.

Centralizes defensive parsing of the untrusted values produced by the
document-extraction collaborator.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

# Placeholder strings extractors emit for "not available".
_SENTINELS = frozenset({"", "--", "-", "NaN", "nan", "null", "None", "N/A", "n/a"})

_TRUE_WORDS = frozenset({"1", "true", "yes", "y", "sim", "s"})
_FALSE_WORDS = frozenset({"0", "false", "no", "n", "nao", "não"})

_DATE_FORMATS: tuple[str, ...] = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%d.%m.%Y", "%Y/%m/%d")

_PLATE_STRIP = re.compile(r"[\s\-.]")


def is_sentinel(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value.strip() in _SENTINELS:
        return True
    return isinstance(value, float) and math.isnan(value)


def safe_float(value: Any) -> float | None:
    if is_sentinel(value) or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = _parse_br_number(value)
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_decimal(value: Any) -> Decimal | None:
    """Parse a currency amount.

    Floats go through ``str`` so ``130.16`` stays ``Decimal("130.16")``.
    Brazilian formatting (``"R$ 1.234,56"``) is accepted.
    """
    if is_sentinel(value) or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, str):
        value = _parse_br_number(value)
    try:
        result = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def safe_str(value: Any) -> str | None:
    if is_sentinel(value):
        return None
    text = str(value).strip()
    return text if text else None


def safe_bool(value: Any) -> bool | None:
    if value in (True, False):
        return bool(value)
    if is_sentinel(value):
        return None
    normalized = str(value).strip().lower()
    if normalized in _TRUE_WORDS:
        return True
    if normalized in _FALSE_WORDS:
        return False
    return None


def non_negative_or_zero(value: Any) -> int | None:
    parsed = safe_int(value)
    if parsed is None:
        return None
    return 0 if parsed < 0 else parsed


def is_meaningful(value: Any) -> bool:
    """Return True if an extracted value counts as "filled in".

    Zero counts as empty, matching how the fine back-fill treats a
    ``value`` or ``points`` of ``0`` left by the extractor.
    """

    if is_sentinel(value):
        return False
    if value == {} or value == []:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    return True


def canonical_plate(value: Any) -> str:
    """Canonical form of a license plate: no separators, upper case."""
    text = safe_str(value)
    if text is None:
        return ""
    return _PLATE_STRIP.sub("", text).upper()


def parse_model_year(value: Any) -> int | None:
    """Parse a vehicle year.

    CRLV documents print ``"2019/2020"`` (manufacture/model); the model
    year, i.e. the last component, wins.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = safe_str(value)
    if text is None:
        return None
    return safe_int(text.split("/")[-1])


def normalize_date(value: Any) -> str:
    """Return *value* as an ISO ``YYYY-MM-DD`` string when it parses.

    Unparseable strings are returned verbatim (stripped); empty values
    become ``""``.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = safe_str(value)
    if text is None:
        return ""
    candidate = text.split("T")[0].split(" ")[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).date().isoformat()
        except ValueError:
            continue
    return text


def _parse_br_number(text: str) -> str:
    cleaned = text.strip().replace("R$", "").replace(" ", "")
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    return cleaned
