"""Threshold derivation for the default analyzers.

Thresholds come from, in order: the structured override store, numbers
scraped out of the pillar's latest prompt document, then hardcoded defaults.
The text scraping is a heuristic. A phrase that does not match simply leaves
the default in place, so nothing here ever raises on odd prompt text.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from .coercion import to_number
from .config import (
    THRESHOLD_MODELS,
    ConsumerSupportThresholds,
    ConsumerUnderstandingThresholds,
    PillarThresholds,
    PriceValueThresholds,
    ProductsServicesThresholds,
    ThresholdOverrides,
)
from .models import Pillar, PromptDocument
from .store import RuleSetRepository, latest_prompt

logger = logging.getLogger(__name__)

_I = re.IGNORECASE

PS_EARLY_CLOSURE = re.compile(r"early[ _-]?closure[ _-]?rate[^\d]*(\d+(?:\.\d+)?)%", _I)
PS_COMPLAINT_COUNT = re.compile(r"complaint[ _-]?count[^\d]*(\d+)", _I)
PS_VULNERABLE = re.compile(r"vulnerable[ _-]?customer[ _-]?proportion[^\d]*(\d+(?:\.\d+)?)%", _I)

PV_OVERPRICED = re.compile(r"exceeds?\s+market\s+rates?\s+by\s+more\s+than\s+(\d+(?:\.\d+)?)%", _I)
PV_FEE = re.compile(r"fees?[^\d]*(£?\$?\d+(?:\.\d+)?)", _I)
PV_LOYALTY = re.compile(r"legacy[^\d]*(\d+(?:\.\d+)?)%|loyalty[^\d]*(\d+(?:\.\d+)?)%", _I)
PV_LAG = re.compile(r"(lag|delayed|delay|response)[^\d]*(\d+)\s*day", _I)

CU_READABILITY = re.compile(r"readability[^\d]*(\d+(?:\.\d+)?)", _I)
CU_MISCOMM_REVIEW = re.compile(r"miscommunication[\s\S]*?reviewed?\s+by\s+compliance", _I)
CU_COMPLIANCE_REVIEW = re.compile(r"compliance\s+review", _I)

CS_WAIT = re.compile(r"wait[^\d]*(\d+)\s*min", _I)
CS_CSAT = re.compile(r"csat[^\d]*(\d+(?:\.\d+)?)", _I)
CS_RESOLUTION = re.compile(r"resolution[^\d]*(\d+)\s*hour", _I)
CS_SLA = re.compile(r"sla[^\d]*(\d+)\s*hour", _I)


def _captured(match: Optional[re.Match], *groups: int) -> Optional[float]:
    if match is None:
        return None
    for group in groups:
        value = match.group(group)
        if value:
            return to_number(value)
    return None


def _pick(parsed: Dict[str, Optional[float]]) -> Dict[str, float]:
    return {k: v for k, v in parsed.items() if v is not None}


def _structured(overrides: Optional[ThresholdOverrides], pillar: Pillar) -> Optional[PillarThresholds]:
    if overrides is None:
        return None
    values = overrides.for_pillar(pillar)
    if not values:
        return None
    model = THRESHOLD_MODELS[pillar]
    try:
        return model.model_validate({**values, "source": "structured"})
    except ValidationError as exc:
        rejected = {err["loc"][0] for err in exc.errors() if err.get("loc")}
        logger.warning("Ignoring invalid %s threshold override(s) %s", pillar.value, sorted(map(str, rejected)))
    usable = {k: v for k, v in values.items() if k not in rejected}
    if not usable:
        return None
    return model.model_validate({**usable, "source": "structured"})


def _parse_products_services(text: str) -> Dict[str, Any]:
    return _pick(
        {
            "early_closure_rate_threshold": _captured(PS_EARLY_CLOSURE.search(text), 1),
            "complaint_count_threshold": _captured(PS_COMPLAINT_COUNT.search(text), 1),
            "vulnerable_proportion_threshold": _captured(PS_VULNERABLE.search(text), 1),
        }
    )


def _parse_price_value(text: str) -> Dict[str, Any]:
    return _pick(
        {
            "overpriced_delta_pct": _captured(PV_OVERPRICED.search(text), 1),
            "fee_excess_abs": _captured(PV_FEE.search(text), 1),
            "loyalty_penalty_delta_pct": _captured(PV_LOYALTY.search(text), 1, 2),
            "response_lag_days": _captured(PV_LAG.search(text), 2),
        }
    )


def _parse_consumer_understanding(text: str) -> Dict[str, Any]:
    parsed: Dict[str, Any] = _pick({"readability_min": _captured(CU_READABILITY.search(text), 1)})
    mentions_review = bool(CU_MISCOMM_REVIEW.search(text) or CU_COMPLIANCE_REVIEW.search(text))
    # A mention can only switch the requirement on; silence keeps the default.
    parsed["require_compliance_on_miscomm"] = (
        mentions_review or ConsumerUnderstandingThresholds().require_compliance_on_miscomm
    )
    return parsed


def _parse_consumer_support(text: str) -> Dict[str, Any]:
    sla = CS_RESOLUTION.search(text) or CS_SLA.search(text)
    return _pick(
        {
            "wait_minutes_high": _captured(CS_WAIT.search(text), 1),
            "csat_poor_max": _captured(CS_CSAT.search(text), 1),
            "sla_breach_hours": _captured(sla, 1),
        }
    )


_PARSERS: Dict[Pillar, Callable[[str], Dict[str, Any]]] = {
    Pillar.PRODUCTS_SERVICES: _parse_products_services,
    Pillar.PRICE_VALUE: _parse_price_value,
    Pillar.CONSUMER_UNDERSTANDING: _parse_consumer_understanding,
    Pillar.CONSUMER_SUPPORT: _parse_consumer_support,
}


def thresholds_from_sources(
    pillar: Pillar,
    *,
    overrides: Optional[ThresholdOverrides] = None,
    prompt: Optional[PromptDocument] = None,
) -> PillarThresholds:
    structured = _structured(overrides, pillar)
    if structured is not None:
        return structured
    model = THRESHOLD_MODELS[pillar]
    if prompt is None:
        return model()
    parsed = _PARSERS[pillar](prompt.text or "")
    return model.model_validate({**parsed, "source": "prompt-library"})


def derive_thresholds(pillar: Pillar, repository: RuleSetRepository) -> PillarThresholds:
    return thresholds_from_sources(
        pillar,
        overrides=repository.get_threshold_overrides(),
        prompt=latest_prompt(repository, pillar),
    )


def derive_products_services_thresholds(repository: RuleSetRepository) -> ProductsServicesThresholds:
    return derive_thresholds(Pillar.PRODUCTS_SERVICES, repository)  # type: ignore[return-value]


def derive_price_value_thresholds(repository: RuleSetRepository) -> PriceValueThresholds:
    return derive_thresholds(Pillar.PRICE_VALUE, repository)  # type: ignore[return-value]


def derive_consumer_understanding_thresholds(
    repository: RuleSetRepository,
) -> ConsumerUnderstandingThresholds:
    return derive_thresholds(Pillar.CONSUMER_UNDERSTANDING, repository)  # type: ignore[return-value]


def derive_consumer_support_thresholds(repository: RuleSetRepository) -> ConsumerSupportThresholds:
    return derive_thresholds(Pillar.CONSUMER_SUPPORT, repository)  # type: ignore[return-value]


def _fmt(value: float) -> str:
    return f"{value:g}"


def describe_thresholds(thresholds: PillarThresholds) -> str:
    if isinstance(thresholds, ProductsServicesThresholds):
        body = (
            f"Early closure > {_fmt(thresholds.early_closure_rate_threshold)}% · "
            f"Complaints > {_fmt(thresholds.complaint_count_threshold)} · "
            f"Vulnerable > {_fmt(thresholds.vulnerable_proportion_threshold)}%"
        )
    elif isinstance(thresholds, PriceValueThresholds):
        body = (
            f"Overpriced Δ > {_fmt(thresholds.overpriced_delta_pct)}% · "
            f"Excess fee > £{_fmt(thresholds.fee_excess_abs)} · "
            f"Loyalty Δ > {_fmt(thresholds.loyalty_penalty_delta_pct)}% · "
            f"Lag > {_fmt(thresholds.response_lag_days)}d"
        )
    elif isinstance(thresholds, ConsumerUnderstandingThresholds):
        review = "Yes" if thresholds.require_compliance_on_miscomm else "No"
        body = (
            f"Readability < {_fmt(thresholds.readability_min)} · "
            f"Compliance review on miscommunication: {review}"
        )
    elif isinstance(thresholds, ConsumerSupportThresholds):
        body = (
            f"Wait > {_fmt(thresholds.wait_minutes_high)}m · "
            f"CSAT ≤ {_fmt(thresholds.csat_poor_max)} · "
            f"SLA breach > {_fmt(thresholds.sla_breach_hours)}h"
        )
    else:
        raise TypeError(f"Unsupported thresholds model: {type(thresholds).__name__}")
    return f"{body} ({thresholds.source})"
