from __future__ import annotations

from typing import List, Sequence

from ..analyzer import AnalyzerIssue, DefaultAnalyzer, finding_from_issues
from ..config import ConsumerUnderstandingThresholds, PillarThresholds
from ..models import Finding, Pillar, Row, Severity
from ..registry import register_analyzer


@register_analyzer
class ConsumerUnderstandingAnalyzer(DefaultAnalyzer):
    pillar = Pillar.CONSUMER_UNDERSTANDING
    analyzer_title = "Consumer understanding: compliance review of miscommunications, readability"
    thresholds_model = ConsumerUnderstandingThresholds

    def analyze(self, rows: Sequence[Row], thresholds: PillarThresholds) -> List[Finding]:
        cfg = ConsumerUnderstandingThresholds.model_validate(thresholds.model_dump())
        findings: List[Finding] = []

        for view in self.views(rows):
            readability = view.number("Readability_Score")
            miscommunication = view.is_yes("Miscommunication_Flag")
            reviewed = view.is_yes("Reviewed_By_Compliance")

            issues: List[AnalyzerIssue] = []
            if cfg.require_compliance_on_miscomm and miscommunication and not reviewed:
                issues.append(
                    AnalyzerIssue(
                        severity=Severity.HIGH,
                        code="compliance_review",
                        title="compliance review",
                        detail="Miscommunication occurred but communication was not reviewed by compliance",
                    )
                )
            # A zero score means the cell was blank, not that the text is unreadable.
            if readability and readability < cfg.readability_min:
                issues.append(
                    AnalyzerIssue(
                        severity=Severity.MEDIUM,
                        code="readability",
                        title="readability",
                        detail="Low readability score indicates overly complex language for customers",
                        extra=f"Readability score: {readability:g} (minimum {cfg.readability_min:g})",
                    )
                )

            if issues:
                communication_id = view.text("communication_ID") or "(unknown)"
                findings.append(
                    finding_from_issues(
                        finding_id=communication_id,
                        title=f"Communication {communication_id}",
                        issues=issues,
                    )
                )

        return findings
