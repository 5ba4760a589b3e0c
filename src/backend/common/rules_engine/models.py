from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Row = Mapping[str, Any]


class Pillar(str, Enum):
    PRODUCTS_SERVICES = "products-services"
    PRICE_VALUE = "price-value"
    CONSUMER_UNDERSTANDING = "consumer-understanding"
    CONSUMER_SUPPORT = "consumer-support"

    @property
    def category_label(self) -> str:
        """Lowercase label used to tag prompt documents for this pillar."""
        return _CATEGORY_LABELS[self]

    @property
    def dataset_name(self) -> str:
        """File name of the dataset this pillar reviews by default."""
        return _DATASET_NAMES[self]


_CATEGORY_LABELS = {
    Pillar.PRODUCTS_SERVICES: "products & services",
    Pillar.PRICE_VALUE: "price & value",
    Pillar.CONSUMER_UNDERSTANDING: "consumer understanding",
    Pillar.CONSUMER_SUPPORT: "consumer support",
}

_DATASET_NAMES = {
    Pillar.PRODUCTS_SERVICES: "ProductPerformance.csv",
    Pillar.PRICE_VALUE: "PriceValue.csv",
    Pillar.CONSUMER_UNDERSTANDING: "ConsumerUnderstanding.csv",
    Pillar.CONSUMER_SUPPORT: "ConsumerSupport.csv",
}


def pillar_for_category(category: Optional[str]) -> Optional[Pillar]:
    text = (category or "").lower()
    for pillar in Pillar:
        if pillar.category_label in text:
            return pillar
    return None


class Operator(str, Enum):
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    EQ = "=="
    NEQ = "!="
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    REGEX = "regex"
    DELTA_GT = "delta_gt"
    DELTA_LT = "delta_lt"
    LAG_DAYS_GT = "lag_days_gt"
    IS_YES = "is_yes"
    IS_NO = "is_no"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class FindingSeverity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Combinator(str, Enum):
    ALL = "ALL"
    ANY = "ANY"


class Condition(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    left: str
    # Kept as a plain string so an unknown operator parses and simply never matches.
    op: str
    right: Optional[Union[float, int, str]] = None
    right_field: Optional[str] = Field(default=None, alias="rightField")

    @model_validator(mode="before")
    @classmethod
    def _accept_operator_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and "op" not in data and "operator" in data:
            data = dict(data)
            data["op"] = data.pop("operator")
        return data


class Rule(BaseModel):
    id: str
    code: str = ""
    name: str = ""
    severity: Severity = Severity.LOW
    combinator: Combinator = Combinator.ANY
    conditions: List[Condition] = Field(min_length=1)
    message: str
    extra: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_all_flag(cls, data: Any) -> Any:
        # Older rule editors stored `all: true|false` instead of a combinator.
        if isinstance(data, dict) and "combinator" not in data and "all" in data:
            data = dict(data)
            data["combinator"] = Combinator.ALL if data.pop("all") else Combinator.ANY
        return data


class RuleSet(BaseModel):
    pillar: Pillar
    rules: List[Rule] = Field(default_factory=list)


class RuleMatch(BaseModel):
    matched: bool
    text: Optional[str] = None
    extra: Optional[str] = None


class FindingMessage(BaseModel):
    text: str
    extra: Optional[str] = None
    code: Optional[str] = None


class Finding(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    severity: FindingSeverity
    messages: List[FindingMessage] = Field(default_factory=list)


class PromptDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    category: str = ""
    text: str = ""
    last_modified: Optional[datetime] = Field(default=None, alias="lastModified")
    # Raw payload; validated lazily so one bad prompt cannot break rule loading.
    rules: Optional[List[Dict[str, Any]]] = None


class PillarReview(BaseModel):
    run_id: str
    generated_at: datetime
    pillar: Pillar
    source: str
    rule_set_origin: Optional[str] = None
    thresholds: Optional[Dict[str, Any]] = None
    findings: List[Finding] = Field(default_factory=list)
    totals: Dict[FindingSeverity, int] = Field(default_factory=dict)


class ComplianceReview(BaseModel):
    run_id: str
    generated_at: datetime
    pillars: List[PillarReview] = Field(default_factory=list)
    missing_datasets: List[str] = Field(default_factory=list)


@dataclass(frozen=True)
class SeverityOrdering:
    order: Dict[FindingSeverity, int]

    @classmethod
    def default(cls) -> "SeverityOrdering":
        # Higher wins.
        return cls(
            order={
                FindingSeverity.CRITICAL: 40,
                FindingSeverity.HIGH: 30,
                FindingSeverity.MEDIUM: 20,
                FindingSeverity.LOW: 10,
            }
        )

    def worst(self, severities: List[FindingSeverity]) -> FindingSeverity:
        if not severities:
            return FindingSeverity.LOW
        return max(severities, key=lambda s: self.order.get(s, 0))


def finding_severity_for(severity: Severity) -> FindingSeverity:
    return {
        Severity.CRITICAL: FindingSeverity.CRITICAL,
        Severity.HIGH: FindingSeverity.HIGH,
        Severity.MEDIUM: FindingSeverity.MEDIUM,
        Severity.LOW: FindingSeverity.LOW,
    }[severity]
