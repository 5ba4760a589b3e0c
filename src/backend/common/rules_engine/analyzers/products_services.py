from __future__ import annotations

from typing import List, Sequence

from ..analyzer import DefaultAnalyzer
from ..config import PillarThresholds, ProductsServicesThresholds
from ..models import Finding, FindingMessage, FindingSeverity, Pillar, Row
from ..registry import register_analyzer


def _fmt(value: float) -> str:
    return f"{value:g}"


@register_analyzer
class ProductsServicesAnalyzer(DefaultAnalyzer):
    pillar = Pillar.PRODUCTS_SERVICES
    analyzer_title = "Products & services: target market fit, early closures, complaints"
    thresholds_model = ProductsServicesThresholds

    def analyze(self, rows: Sequence[Row], thresholds: PillarThresholds) -> List[Finding]:
        cfg = ProductsServicesThresholds.model_validate(thresholds.model_dump())
        findings: List[Finding] = []

        for view in self.views(rows):
            target = view.text("Target_Market_Profile")
            actual = view.text("Actual_Customer_Profile")
            early_closure = view.number("Early_Closure_Rate")
            complaints = view.number("Complaint_Count")
            vulnerable = view.number("Vulnerable_Customer_proportion")

            messages: List[FindingMessage] = []
            if target and actual and target.lower() != actual.lower():
                messages.append(
                    FindingMessage(
                        text=f'Market profile mismatch: Target "{target}" vs Actual "{actual}"',
                        code="profile_mismatch",
                    )
                )
            if early_closure > cfg.early_closure_rate_threshold:
                messages.append(
                    FindingMessage(
                        text=(
                            f"High early closure rate: {_fmt(early_closure)}% "
                            "(potential mis-sale or dissatisfaction)"
                        ),
                        code="early_closure",
                    )
                )
            if complaints > cfg.complaint_count_threshold:
                messages.append(
                    FindingMessage(
                        text=(
                            f"High complaint count: {_fmt(complaints)} complaints "
                            "(customer satisfaction issue)"
                        ),
                        code="complaints",
                    )
                )

            # Vulnerable customers only escalate a product that already has an issue.
            critical = vulnerable > cfg.vulnerable_proportion_threshold and bool(messages)
            if critical:
                messages.append(
                    FindingMessage(
                        text=(
                            f"Critical: High vulnerable customer proportion ({_fmt(vulnerable)}%) "
                            "with identified issues"
                        ),
                        code="vulnerable_escalation",
                    )
                )

            if messages:
                findings.append(
                    Finding(
                        id=view.text("Product_ID") or "(unknown)",
                        title=view.text("Product_Name", "Unknown Product"),
                        severity=FindingSeverity.CRITICAL if critical else FindingSeverity.MEDIUM,
                        messages=messages,
                    )
                )

        return findings
