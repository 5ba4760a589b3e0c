from __future__ import annotations

import re
from typing import Optional

from .aliases import resolve_field
from .coercion import to_text
from .conditions import matches
from .models import Combinator, Pillar, Row, Rule, RuleMatch

_TOKEN = re.compile(r"\$\{([^}]+)\}")


def render_template(template: Optional[str], row: Row, pillar: Pillar) -> str:
    """Replace `${Field}` tokens with raw row values; unknown fields render as ''."""
    if not template:
        return ""
    return _TOKEN.sub(lambda m: to_text(resolve_field(row, pillar, m.group(1).strip())), template)


def evaluate_rule(row: Row, pillar: Pillar, rule: Rule) -> RuleMatch:
    results = [matches(row, pillar, condition) for condition in rule.conditions]
    if rule.combinator == Combinator.ALL:
        matched = bool(results) and all(results)
    else:
        matched = any(results)

    if not matched:
        return RuleMatch(matched=False)
    return RuleMatch(
        matched=True,
        text=render_template(rule.message, row, pillar),
        extra=render_template(rule.extra, row, pillar) if rule.extra else None,
    )
