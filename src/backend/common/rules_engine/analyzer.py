from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence, Type

from pydantic import BaseModel

from .config import PillarThresholds
from .context import RowView
from .models import (
    Finding,
    FindingMessage,
    FindingSeverity,
    Pillar,
    Row,
    Severity,
    SeverityOrdering,
    finding_severity_for,
)


class AnalyzerIssue(BaseModel):
    severity: Severity
    code: str
    title: str
    detail: str
    extra: str | None = None

    def to_message(self) -> FindingMessage:
        return FindingMessage(text=f"{self.title}: {self.detail}", extra=self.extra, code=self.code)


class DefaultAnalyzer(ABC):
    """Hardcoded checks for one pillar, used when no authored rules produce findings."""

    pillar: Pillar
    analyzer_title: str
    thresholds_model: Type[PillarThresholds]

    def __init__(self):
        if not getattr(self, "pillar", None):
            raise ValueError("Analyzer must define pillar")

    @abstractmethod
    def analyze(self, rows: Sequence[Row], thresholds: PillarThresholds) -> List[Finding]:  # pragma: no cover
        raise NotImplementedError

    def views(self, rows: Sequence[Row]) -> list[RowView]:
        return [RowView(row=row, pillar=self.pillar, index=idx) for idx, row in enumerate(rows)]


def finding_from_issues(
    *,
    finding_id: str,
    title: str,
    issues: Sequence[AnalyzerIssue],
) -> Finding:
    ordering = SeverityOrdering.default()
    worst = ordering.worst([finding_severity_for(i.severity) for i in issues])
    # Issue-based findings are "high" or "medium"; only escalation paths go critical.
    severity = FindingSeverity.HIGH if worst == FindingSeverity.HIGH else FindingSeverity.MEDIUM
    return Finding(
        id=finding_id,
        title=title,
        severity=severity,
        messages=[issue.to_message() for issue in issues],
    )
