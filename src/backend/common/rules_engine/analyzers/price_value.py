from __future__ import annotations

from typing import List, Sequence

from ..analyzer import AnalyzerIssue, DefaultAnalyzer, finding_from_issues
from ..config import PillarThresholds, PriceValueThresholds
from ..models import Finding, Pillar, Row, Severity
from ..registry import register_analyzer


def _fmt(value: float) -> str:
    return f"{value:g}"


@register_analyzer
class PriceValueAnalyzer(DefaultAnalyzer):
    pillar = Pillar.PRICE_VALUE
    analyzer_title = "Price & value: market rates, fees, loyalty penalties, rate-change lag"
    thresholds_model = PriceValueThresholds

    def analyze(self, rows: Sequence[Row], thresholds: PillarThresholds) -> List[Finding]:
        cfg = PriceValueThresholds.model_validate(thresholds.model_dump())
        findings: List[Finding] = []

        for view in self.views(rows):
            rate = view.number("Rate")
            market = view.number("Market_Rate")
            fee = view.number("Fee")
            market_fee = view.number("Market_Fee")
            legacy = view.number("Legacy_Rate")
            new = view.number("New_Rate")
            lag_days = view.number("Rate_Change_Lag_Days")

            issues: List[AnalyzerIssue] = []

            delta = round(rate - market, 2)
            if market > 0 and delta > cfg.overpriced_delta_pct:
                issues.append(
                    AnalyzerIssue(
                        severity=Severity.HIGH,
                        code="overpriced",
                        title="overpriced",
                        detail=(
                            f"Interest rate {_fmt(rate)}% exceeds market average {_fmt(market)}% "
                            f"by {delta:.2f}%"
                        ),
                        extra=f"Rate: {_fmt(rate)}% vs Market: {_fmt(market)}%",
                    )
                )

            if market_fee >= 0 and fee - market_fee > cfg.fee_excess_abs:
                issues.append(
                    AnalyzerIssue(
                        severity=Severity.MEDIUM,
                        code="excess_fee",
                        title="excessive fee",
                        detail=f"Fee £{_fmt(fee)} exceeds market average £{_fmt(market_fee)}",
                        extra=f"Fee: £{_fmt(fee)} vs Market: £{_fmt(market_fee)}",
                    )
                )

            if legacy > 0 and new > 0 and legacy - new > cfg.loyalty_penalty_delta_pct:
                issues.append(
                    AnalyzerIssue(
                        severity=Severity.HIGH,
                        code="loyalty_penalty",
                        title="loyalty penalty",
                        detail=(
                            f"Existing customers pay higher rate ({_fmt(legacy)}%) "
                            f"than new customers ({_fmt(new)}%)"
                        ),
                        extra=f"Legacy: {_fmt(legacy)}% vs New: {_fmt(new)}%",
                    )
                )

            if lag_days > cfg.response_lag_days:
                issues.append(
                    AnalyzerIssue(
                        severity=Severity.MEDIUM,
                        code="slow_response",
                        title="slow response",
                        detail=f"Rate change delayed {_fmt(lag_days)} days after BoE base rate change",
                        extra=f"Lag: {_fmt(lag_days)} days",
                    )
                )

            if issues:
                findings.append(
                    finding_from_issues(
                        finding_id=view.text("Product_ID") or "(unknown)",
                        title=view.text("Product_Name", "Unknown Product"),
                        issues=issues,
                    )
                )

        return findings
