from __future__ import annotations

from typing import List, Sequence

from ..analyzer import AnalyzerIssue, DefaultAnalyzer, finding_from_issues
from ..config import ConsumerSupportThresholds, PillarThresholds
from ..models import Finding, Pillar, Row, Severity
from ..registry import register_analyzer


@register_analyzer
class ConsumerSupportAnalyzer(DefaultAnalyzer):
    pillar = Pillar.CONSUMER_SUPPORT
    analyzer_title = "Consumer support: waits without resolution, poor CSAT, SLA breaches"
    thresholds_model = ConsumerSupportThresholds

    def analyze(self, rows: Sequence[Row], thresholds: PillarThresholds) -> List[Finding]:
        cfg = ConsumerSupportThresholds.model_validate(thresholds.model_dump())
        findings: List[Finding] = []

        for view in self.views(rows):
            csat = view.number("CSAT_Score")
            wait = view.number("Avg_Wait_Time_Min")
            resolution_hours = view.number("Complaint_Resolution_Time")
            first_contact_resolved = view.is_yes("First_Contact_Resolution", default=False)
            # Interactions without an SLA flag are assumed compliant.
            sla_compliant = view.is_yes("SLA_Compliance_Flag", default=True)

            issues: List[AnalyzerIssue] = []
            if wait > cfg.wait_minutes_high and not first_contact_resolved:
                issues.append(
                    AnalyzerIssue(
                        severity=Severity.HIGH,
                        code="wait_resolution",
                        title="wait resolution",
                        detail=f"Long wait time ({wait:g} min) combined with failed first contact resolution",
                        extra=f"Wait: {wait:g}min, First Contact Resolution: No",
                    )
                )
            if csat and csat <= cfg.csat_poor_max:
                issues.append(
                    AnalyzerIssue(
                        severity=Severity.HIGH,
                        code="poor_satisfaction",
                        title="poor satisfaction",
                        detail="Customer satisfaction score indicates poor service experience",
                        extra=f"CSAT Score: {csat:g}/5",
                    )
                )
            if resolution_hours > cfg.sla_breach_hours and not sla_compliant:
                issues.append(
                    AnalyzerIssue(
                        severity=Severity.HIGH,
                        code="sla_breach",
                        title="sla breach",
                        detail=f"SLA breach with complaint resolution taking {resolution_hours:g} hours",
                        extra=f"Resolution Time: {resolution_hours:g}hrs, SLA Compliant: No",
                    )
                )

            if issues:
                raw_id = view.get("Support_ID")
                interaction_id = view.text("Support_ID") if raw_id is not None else f"S{view.index + 1}"
                findings.append(
                    finding_from_issues(
                        finding_id=interaction_id,
                        title=f"Support Interaction {interaction_id}",
                        issues=issues,
                    )
                )

        return findings
