from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from .context import RowView, finding_identity
from .models import (
    ComplianceReview,
    Finding,
    FindingMessage,
    FindingSeverity,
    Pillar,
    PillarReview,
    Row,
    RuleSet,
    SeverityOrdering,
    finding_severity_for,
)
from .registry import run_default_analyzer
from .rule import evaluate_rule
from .store import RuleSetRepository, load_rule_set_with_origin
from .thresholds import derive_thresholds

logger = logging.getLogger(__name__)

SOURCE_RULES = "rules"
SOURCE_DEFAULT_ANALYZER = "default-analyzer"


def evaluate_dataset(pillar: Pillar, rows: Sequence[Row], rule_set: Optional[RuleSet]) -> List[Finding]:
    """Apply every rule to every row; one finding per row with at least one match.

    An absent or empty rule set yields [] so the caller can fall back to the
    pillar's default analyzer.
    """
    if rule_set is None or not rule_set.rules:
        return []

    ordering = SeverityOrdering.default()
    findings: List[Finding] = []
    for idx, row in enumerate(rows):
        messages: List[FindingMessage] = []
        severities: List[FindingSeverity] = []
        for rule in rule_set.rules:
            result = evaluate_rule(row, pillar, rule)
            if not result.matched:
                continue
            messages.append(FindingMessage(text=result.text or "", extra=result.extra, code=rule.code or None))
            severities.append(finding_severity_for(rule.severity))

        if not messages:
            continue
        finding_id, title = finding_identity(RowView(row=row, pillar=pillar, index=idx))
        findings.append(
            Finding(
                id=finding_id,
                title=title,
                severity=ordering.worst(severities),
                messages=messages,
            )
        )
    return findings


def severity_totals(findings: Iterable[Finding]) -> Dict[FindingSeverity, int]:
    totals: Dict[FindingSeverity, int] = {}
    for finding in findings:
        totals[finding.severity] = totals.get(finding.severity, 0) + 1
    return totals


class RulesRunner:
    def __init__(self, repository: RuleSetRepository):
        self._repository = repository

    def run(self, pillar: Pillar, rows: Sequence[Row]) -> PillarReview:
        rule_set, origin = load_rule_set_with_origin(self._repository, pillar)
        findings = evaluate_dataset(pillar, rows, rule_set)
        source = SOURCE_RULES
        thresholds = None

        if not findings:
            derived = derive_thresholds(pillar, self._repository)
            findings = run_default_analyzer(pillar, rows, derived)
            source = SOURCE_DEFAULT_ANALYZER
            thresholds = derived.model_dump(mode="json")
            logger.info(
                "%s: %s; default analyzer produced %d finding(s) (thresholds from %s)",
                pillar.value,
                "no rule findings" if rule_set else "no rule set",
                len(findings),
                derived.source,
            )
        else:
            logger.info("%s: %d finding(s) from %s rules", pillar.value, len(findings), origin)

        return PillarReview(
            run_id=str(uuid.uuid4()),
            generated_at=datetime.now(timezone.utc),
            pillar=pillar,
            source=source,
            rule_set_origin=origin,
            thresholds=thresholds,
            findings=findings,
            totals=severity_totals(findings),
        )

    def run_all(
        self,
        rows_by_pillar: Dict[Pillar, Sequence[Row]],
        *,
        missing_datasets: Sequence[str] = (),
    ) -> ComplianceReview:
        reviews = [self.run(pillar, rows_by_pillar[pillar]) for pillar in Pillar if pillar in rows_by_pillar]
        return ComplianceReview(
            run_id=str(uuid.uuid4()),
            generated_at=datetime.now(timezone.utc),
            pillars=reviews,
            missing_datasets=list(missing_datasets),
        )
