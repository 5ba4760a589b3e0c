"""Single-condition matching.

`matches` is total: a malformed condition (bad pattern, unknown operator)
is simply false for every row.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Optional

from .aliases import resolve_field
from .coercion import to_bool_yes, to_number, to_text
from .models import Condition, Operator, Pillar, Row

Predicate = Callable[[Any, Condition, Row, Pillar], bool]


def _compile_pattern(pattern: Any) -> Optional["re.Pattern[str]"]:
    try:
        return re.compile(to_text(pattern), re.IGNORECASE)
    except (re.error, TypeError):
        return None


def _right_text(condition: Condition) -> str:
    return to_text(condition.right)


def _delta(left: Any, condition: Condition, row: Row, pillar: Pillar) -> float:
    other = resolve_field(row, pillar, condition.right_field or "")
    return to_number(left) - to_number(other)


def _regex(left: Any, condition: Condition, row: Row, pillar: Pillar) -> bool:
    pattern = _compile_pattern(condition.right)
    if pattern is None:
        return False
    return pattern.search(to_text(left)) is not None


_PREDICATES: Dict[Operator, Predicate] = {
    Operator.GT: lambda left, c, row, p: to_number(left) > to_number(c.right),
    Operator.GTE: lambda left, c, row, p: to_number(left) >= to_number(c.right),
    Operator.LT: lambda left, c, row, p: to_number(left) < to_number(c.right),
    Operator.LTE: lambda left, c, row, p: to_number(left) <= to_number(c.right),
    Operator.EQ: lambda left, c, row, p: to_text(left) == _right_text(c),
    Operator.NEQ: lambda left, c, row, p: to_text(left) != _right_text(c),
    Operator.CONTAINS: lambda left, c, row, p: _right_text(c).lower() in to_text(left).lower(),
    Operator.NOT_CONTAINS: lambda left, c, row, p: _right_text(c).lower() not in to_text(left).lower(),
    Operator.REGEX: _regex,
    Operator.DELTA_GT: lambda left, c, row, p: _delta(left, c, row, p) > to_number(c.right),
    Operator.DELTA_LT: lambda left, c, row, p: _delta(left, c, row, p) < to_number(c.right),
    Operator.LAG_DAYS_GT: lambda left, c, row, p: to_number(left) > to_number(c.right),
    Operator.IS_YES: lambda left, c, row, p: to_bool_yes(left),
    # Anything other than "yes" counts, including a missing cell.
    Operator.IS_NO: lambda left, c, row, p: not to_bool_yes(left),
}


def _operator(value: str) -> Optional[Operator]:
    try:
        return Operator(value)
    except ValueError:
        return None


def matches(row: Row, pillar: Pillar, condition: Condition) -> bool:
    op = _operator(condition.op)
    if op is None:
        return False
    left = resolve_field(row, pillar, condition.left)
    return bool(_PREDICATES[op](left, condition, row, pillar))


def supported_operators() -> list[str]:
    return [op.value for op in _PREDICATES]
