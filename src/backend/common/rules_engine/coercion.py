from __future__ import annotations

import math
import re
from typing import Any

# Currency/percent symbols, thousands separators and the unit suffixes that
# support exports append to durations ("8 min", "72hrs").
_NUMERIC_NOISE = re.compile(r"[%£$€,]|(?<=\d)\s*(?:hrs|min|h|m)\b", re.IGNORECASE)
_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def to_number(raw: Any) -> float:
    """Best-effort numeric coercion; anything unparseable is 0.0."""
    if raw is None:
        return 0.0
    if isinstance(raw, bool):
        return 1.0 if raw else 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else 0.0
    text = _NUMERIC_NOISE.sub("", str(raw)).strip()
    match = _LEADING_FLOAT.match(text)
    if not match:
        return 0.0
    value = float(match.group(0))
    return value if math.isfinite(value) else 0.0


def to_text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw)


def to_bool_yes(raw: Any) -> bool:
    return to_text(raw).strip().lower() == "yes"
