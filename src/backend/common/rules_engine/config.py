from __future__ import annotations

import re
from typing import Any, Dict, Literal, Type

from pydantic import BaseModel, ConfigDict, Field

from .models import Pillar

ThresholdSource = Literal["structured", "prompt-library", "default"]


class PillarThresholds(BaseModel):
    model_config = ConfigDict(extra="ignore")

    source: ThresholdSource = "default"


class ProductsServicesThresholds(PillarThresholds):
    early_closure_rate_threshold: float = 10
    complaint_count_threshold: float = 5
    vulnerable_proportion_threshold: float = 10


class PriceValueThresholds(PillarThresholds):
    overpriced_delta_pct: float = 0.3
    fee_excess_abs: float = 50
    loyalty_penalty_delta_pct: float = 0.1
    response_lag_days: float = 90


class ConsumerUnderstandingThresholds(PillarThresholds):
    readability_min: float = 55
    require_compliance_on_miscomm: bool = True


class ConsumerSupportThresholds(PillarThresholds):
    wait_minutes_high: float = 8
    csat_poor_max: float = 2
    sla_breach_hours: float = 72


THRESHOLD_MODELS: Dict[Pillar, Type[PillarThresholds]] = {
    Pillar.PRODUCTS_SERVICES: ProductsServicesThresholds,
    Pillar.PRICE_VALUE: PriceValueThresholds,
    Pillar.CONSUMER_UNDERSTANDING: ConsumerUnderstandingThresholds,
    Pillar.CONSUMER_SUPPORT: ConsumerSupportThresholds,
}

_OVERRIDE_KEYS = {
    Pillar.PRODUCTS_SERVICES: "ps",
    Pillar.PRICE_VALUE: "pv",
    Pillar.CONSUMER_UNDERSTANDING: "cu",
    Pillar.CONSUMER_SUPPORT: "cs",
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


class ThresholdOverrides(BaseModel):
    """Partial per-pillar overrides set from the threshold quick-edit screen.

    Keys mirror the short names the dashboard stored (`ps`, `pv`, `cu`, `cs`);
    field names may be snake_case or the dashboard's camelCase.
    """

    ps: Dict[str, Any] = Field(default_factory=dict)
    pv: Dict[str, Any] = Field(default_factory=dict)
    cu: Dict[str, Any] = Field(default_factory=dict)
    cs: Dict[str, Any] = Field(default_factory=dict)

    def for_pillar(self, pillar: Pillar) -> Dict[str, Any]:
        raw = getattr(self, _OVERRIDE_KEYS[pillar])
        known = set(THRESHOLD_MODELS[pillar].model_fields) - {"source"}
        values: Dict[str, Any] = {}
        for key, value in raw.items():
            name = _snake(key)
            if name in known and value is not None:
                values[name] = value
        return values

    def with_pillar(self, pillar: Pillar, values: Dict[str, Any]) -> "ThresholdOverrides":
        key = _OVERRIDE_KEYS[pillar]
        merged = {**getattr(self, key), **values}
        return self.model_copy(update={key: merged})
