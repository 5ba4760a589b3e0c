from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .aliases import resolve_field
from .coercion import to_bool_yes, to_number, to_text
from .models import Pillar, Row


@dataclass(frozen=True)
class RowView:
    """A dataset row read through its pillar's header aliases."""

    row: Row
    pillar: Pillar
    index: int = 0

    def get(self, field: str) -> Optional[Any]:
        return resolve_field(self.row, self.pillar, field)

    def has(self, field: str) -> bool:
        return self.get(field) is not None

    def number(self, field: str) -> float:
        return to_number(self.get(field))

    def text(self, field: str, default: str = "") -> str:
        value = self.get(field)
        if value is None:
            return default
        return to_text(value)

    def is_yes(self, field: str, default: bool = False) -> bool:
        value = self.get(field)
        if value is None:
            return default
        return to_bool_yes(value)


def finding_identity(view: RowView) -> tuple[str, str]:
    """Return the (id, title) used for a rule-engine finding on this row."""
    position = view.index + 1
    if view.pillar in (Pillar.PRODUCTS_SERVICES, Pillar.PRICE_VALUE):
        return (
            view.text("Product_ID", f"P{position}"),
            view.text("Product_Name", "Unknown Product"),
        )
    if view.pillar == Pillar.CONSUMER_UNDERSTANDING:
        raw_id = view.get("communication_ID")
        title = f"Communication {to_text(raw_id)}".strip()
        return (to_text(raw_id) if raw_id is not None else f"COM{position}", title)
    raw_id = view.get("Support_ID")
    title = f"Support Interaction {to_text(raw_id)}".strip()
    return (to_text(raw_id) if raw_id is not None else f"S{position}", title)
